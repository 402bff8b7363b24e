"""
Gestionnaires d’exceptions.
- HTTPException: corps JSON standard {"detail": ...}.
- RedisError: stockage indisponible -> 503 (l'état de l'origine ne peut être lu ni écrit).
"""
import logging
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError
from starlette.status import HTTP_503_SERVICE_UNAVAILABLE

logger = logging.getLogger(__name__)

def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(HTTPException)
    async def json_http_errors(request: Request, exc: HTTPException):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=exc.headers)

    @app.exception_handler(RedisError)
    async def storage_unavailable(request: Request, exc: RedisError):
        logger.error("Stockage indisponible path=%s error=%s", request.url.path, exc)
        return JSONResponse(status_code=HTTP_503_SERVICE_UNAVAILABLE, content={"detail": "Stockage indisponible"})
