"""
ASGI entrypoint: expose `app` pour les process managers / déploiements.

- En production, un process manager (ex: gunicorn/uvicorn-workers) importe `bizconnect.asgi:app`.
- Toute la configuration FastAPI est centralisée dans bizconnect.app_setup.factory.
"""

from bizconnect.app import app
