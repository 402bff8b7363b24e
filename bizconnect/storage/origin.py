"""
Identification de l'origine navigateur.
- L'identifiant vit dans la session signée (SessionMiddleware): tous les onglets
  d'un même profil navigateur partagent donc le même enregistrement.
- Créé à la première requête qui en a besoin.
"""
import secrets

from fastapi import Depends, Request

from bizconnect.infra.redis_client import get_redis
from bizconnect.storage.repository import OriginStorage

ORIGIN_SESSION_KEY = "origin_id"

def get_origin_id(request: Request) -> str:
    origin_id = request.session.get(ORIGIN_SESSION_KEY)
    if not origin_id:
        origin_id = secrets.token_urlsafe(16)
        request.session[ORIGIN_SESSION_KEY] = origin_id
    return origin_id

def get_storage(request: Request, redis=Depends(get_redis)) -> OriginStorage:
    """Dépendance FastAPI: enregistrement de l'origine courante."""
    return OriginStorage(redis, get_origin_id(request))
