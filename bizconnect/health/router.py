from urllib.parse import urlparse

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from bizconnect.config import API_BASE_URL, REDIS_URL
from bizconnect.infra.redis_client import get_redis
from bizconnect.utils.rate_limit import rate_limit_health_info

router = APIRouter(prefix="/health", tags=["Health"])

@router.get("")
def health_root():
    return {"ok": True}

@router.get("/redis")
async def health_redis(redis=Depends(get_redis)):
    parsed = urlparse(REDIS_URL)
    info = {
        "redis": {"scheme": parsed.scheme, "host": parsed.hostname, "port": parsed.port},
        "api_base_url": API_BASE_URL,
        "connect_ok": False,
        "error": None,
    }
    try:
        info["connect_ok"] = bool(await redis.ping())
    except Exception as e:
        info["error"] = str(e)
    return JSONResponse(info, status_code=200 if info["connect_ok"] else 503)

@router.get("/rate-limit")
def health_rate_limit(request: Request):
    return rate_limit_health_info(request)
