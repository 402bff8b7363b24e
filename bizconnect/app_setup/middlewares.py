"""
Middlewares transverses de l’application.
- register_basic_middlewares: session signée (porte l'identifiant d'origine), CORS, TrustedHost.
- register_no_cache_middleware: empêche la mise en cache des réponses de l'API d'état.
"""
from fastapi import Request, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.trustedhost import TrustedHostMiddleware
from starlette.middleware.sessions import SessionMiddleware

from bizconnect.config import (
    ALLOWED_HOSTS,
    COOKIE_SECURE,
    CORS_ORIGINS,
    SESSION_COOKIE_NAME,
    SESSION_SECRET_KEY,
)

NO_CACHE_PREFIXES = ("/api/v1/payment-return", "/api/v1/storage", "/api/v1/notifications")

def register_basic_middlewares(app: FastAPI) -> None:
    """
    Ajoute les middlewares « de base »:
    - SessionMiddleware: cookie signé partagé par tous les onglets du navigateur.
    - CORSMiddleware: autorise l'origine de la SPA (cookies inclus).
    - TrustedHostMiddleware: limite les hôtes acceptés (défense host header).
    """
    app.add_middleware(
        SessionMiddleware,
        secret_key=SESSION_SECRET_KEY,
        session_cookie=SESSION_COOKIE_NAME,
        same_site="lax",
        https_only=COOKIE_SECURE,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(
        TrustedHostMiddleware,
        allowed_hosts=ALLOWED_HOSTS + ["*"] if "*" in CORS_ORIGINS else ALLOWED_HOSTS,
    )

def register_no_cache_middleware(app: FastAPI) -> None:
    """
    Empêche la mise en cache des réponses qui reflètent l'état de l'origine
    (paiement en attente, bannière, notifications).
    """
    @app.middleware("http")
    async def no_cache_for_state(request: Request, call_next):
        response = await call_next(request)
        if request.url.path.startswith(NO_CACHE_PREFIXES):
            response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate, max-age=0"
            response.headers["Pragma"] = "no-cache"
            response.headers["Expires"] = "0"
        return response
