"""
Notifications (toasts) par origine navigateur.
- File Redis {prefix}:toasts:{origin_id}, vidée par la SPA (FIFO).
- Les tâches différées n'ont pas de réponse HTTP: elles passent par cette file.
"""
import json
import logging
from typing import List

from bizconnect import config
from bizconnect.notifications.models import Notification

logger = logging.getLogger(__name__)

def toasts_key(origin_id: str) -> str:
    return f"{config.STORAGE_KEY_PREFIX}:toasts:{origin_id}"

async def notify(storage, title: str, description: str, variant: str = "default") -> Notification:
    """Empile une notification pour l'origine de `storage`."""
    toast = Notification(title=title, description=description, variant=variant)
    await storage.redis.rpush(toasts_key(storage.origin_id), toast.model_dump_json())
    logger.info("notifications.notify origin=%s title=%s variant=%s", storage.origin_id, title, variant)
    return toast

async def drain(storage) -> List[Notification]:
    """Retourne puis supprime les notifications en attente (ordre d'émission)."""
    key = toasts_key(storage.origin_id)
    async with storage.redis.pipeline(transaction=True) as pipe:
        pipe.lrange(key, 0, -1)
        pipe.delete(key)
        raw_items, _ = await pipe.execute()

    toasts: List[Notification] = []
    for raw in raw_items or []:
        try:
            toasts.append(Notification.model_validate(json.loads(raw)))
        except ValueError:
            logger.warning("notifications.drain skipped invalid item origin=%s", storage.origin_id)
    return toasts
