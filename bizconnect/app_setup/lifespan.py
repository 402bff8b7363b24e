"""
Lifespan FastAPI: initialisation/arrêt des ressources partagées.
- Client Redis (stockage par origine, notifications, garde) posé sur app.state.redis.
- Client HTTP de l'API REST posé sur app.state.api_client.
- Exécuteur de tâches différées posé sur app.state.deferred (annulé au shutdown).
- Initialise FastAPILimiter sur le même Redis, avec options de test.
Variables d’environnement supportées:
  - DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS=1: désactive complètement le rate limiting (tests)
  - USE_FAKE_REDIS_FOR_TESTS=1: utilise fakeredis (tests)
  - LOCAL_RATE_LIMIT_FALLBACK=1: active un fallback local si l’init échoue
"""
import os
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi_limiter import FastAPILimiter

from bizconnect.infra.api_client import ApiClient
from bizconnect.infra.redis_client import create_redis
from bizconnect.payment_return.deferred import DeferredRunner

async def _init_rate_limiter(app: FastAPI, redis, logger: logging.Logger) -> None:
    """
    Configure le rate limiting et gère les fallbacks.
    - En cas d’échec de Redis et sans fallback, le rate limiting est désactivé proprement.
    """
    if os.getenv("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS") == "1":
        app.state.rate_limit_enabled = False
        logger.info("Rate limiting disabled by DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS")
        return
    try:
        await FastAPILimiter.init(redis)
        app.state.rate_limit_enabled = True
        logger.info("Rate limiting enabled")
    except Exception as e:
        if os.getenv("LOCAL_RATE_LIMIT_FALLBACK") == "1":
            app.state.rate_limit_enabled = True
            logger.warning(f"Rate limiting falling back to local in-memory due to init error: {e}")
        else:
            app.state.rate_limit_enabled = False
            logger.warning(f"Rate limiting disabled due to init error: {e}")

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger = logging.getLogger("uvicorn.error")
    redis = create_redis()
    app.state.redis = redis
    app.state.api_client = ApiClient.from_config()
    app.state.deferred = DeferredRunner()
    await _init_rate_limiter(app, redis, logger)

    yield

    await app.state.deferred.shutdown()
    await app.state.api_client.aclose()
    await redis.aclose()
