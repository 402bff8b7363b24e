from fastapi import APIRouter, Depends

from bizconnect.notifications import service
from bizconnect.storage.origin import get_storage
from bizconnect.storage.repository import OriginStorage

router = APIRouter(prefix="/api/v1/notifications", tags=["Notifications API"])

@router.get("")
async def list_notifications(storage: OriginStorage = Depends(get_storage)):
    """Retourne et vide les notifications en attente pour l'origine courante."""
    toasts = await service.drain(storage)
    return {"notifications": [t.model_dump() for t in toasts]}
