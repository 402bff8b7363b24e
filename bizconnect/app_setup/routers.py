"""
Registre central des routers.
- API v1: payment_return, storage, notifications
- Health: health_router
"""
from fastapi import FastAPI
from bizconnect.payment_return import views as payment_return_views
from bizconnect.storage import views as storage_views
from bizconnect.notifications import views as notifications_views
from bizconnect.health.router import router as health_router

def register_routers(app: FastAPI) -> None:
    # API v1
    app.include_router(payment_return_views.router)
    app.include_router(storage_views.router)
    app.include_router(notifications_views.router)
    # Health & monitoring
    app.include_router(health_router)
