"""
Client Redis partagé (asyncio).
- Production: redis.asyncio depuis REDIS_URL.
- Tests / dev sans Redis: fakeredis si USE_FAKE_REDIS_FOR_TESTS=1.
"""
import os
from typing import Optional

import redis.asyncio as redis
from fastapi import Request

from bizconnect.config import REDIS_URL

try:
    from fakeredis import FakeServer
    from fakeredis.aioredis import FakeRedis  # tests only
except ImportError:
    FakeServer = FakeRedis = None

_redis: Optional[redis.Redis] = None

def create_redis() -> redis.Redis:
    """Construit un client Redis (ou fakeredis selon USE_FAKE_REDIS_FOR_TESTS)."""
    if os.getenv("USE_FAKE_REDIS_FOR_TESTS") == "1":
        if not FakeRedis:
            raise RuntimeError("USE_FAKE_REDIS_FOR_TESTS=1 mais fakeredis n'est pas installé.")
        # Serveur dédié: pas d'état partagé entre deux apps de test
        return FakeRedis(server=FakeServer(), decode_responses=True)
    return redis.from_url(REDIS_URL, encoding="utf-8", decode_responses=True)

def get_redis_client() -> redis.Redis:
    global _redis
    if _redis is None:
        _redis = create_redis()
    return _redis

def set_redis_client(client: Optional[redis.Redis]) -> None:
    global _redis
    _redis = client

def get_redis(request: Request) -> redis.Redis:
    """Dépendance FastAPI: client posé par le lifespan, sinon client global paresseux."""
    client = getattr(request.app.state, "redis", None)
    return client if client is not None else get_redis_client()
