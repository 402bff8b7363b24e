# module bizconnect.payment_return.views

"""Endpoints du retour de paiement (appelés par la SPA au montage de ses composants).
- /callback: paramètres passerelle de l'URL courante + vérification de repli à +2s.
- /notice: bannière « paiement en cours » + traitement automatique à +3s.
- /notice/continue: bouton « Continue Shopping » (traitement immédiat, rate-limité).
Les notifications produites sont lues via /api/v1/notifications.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel
from redis.exceptions import RedisError

from bizconnect import config
from bizconnect.infra.api_client import ApiClient, get_api_client
from bizconnect.payment_return import callback, notice
from bizconnect.payment_return.deferred import DeferredRunner
from bizconnect.storage.origin import get_storage
from bizconnect.storage.repository import OriginStorage
from bizconnect.utils.rate_limit import optional_rate_limit

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/payment-return", tags=["Payment Return API"])

class CallbackRequest(BaseModel):
    url: str

def get_deferred(request: Request) -> DeferredRunner:
    runner = getattr(request.app.state, "deferred", None)
    if runner is None:
        runner = DeferredRunner()
        request.app.state.deferred = runner
    return runner

@router.post("/callback")
async def payment_callback(
    body: CallbackRequest,
    storage: OriginStorage = Depends(get_storage),
    api: ApiClient = Depends(get_api_client),
    deferred: DeferredRunner = Depends(get_deferred),
):
    """Montage du gestionnaire de callback.
    - Entrée JSON: {"url": "<window.location.href>"}
    - Planifie la vérification de repli (CALLBACK_FALLBACK_DELAY_SECONDS), quel que soit le résultat.
    - Retourne {outcome, replace_url}; la SPA applique replace_url via history.replaceState.
    """
    deferred.schedule(
        config.CALLBACK_FALLBACK_DELAY_SECONDS,
        lambda: callback.check_pending_payment(storage, api),
        name=f"callback-fallback:{storage.origin_id}",
    )
    try:
        result = await callback.handle_payment_callback(storage, api, body.url)
    except RedisError:
        raise
    except Exception as e:
        logger.exception("Erreur payment_callback")
        raise HTTPException(status_code=400, detail=str(e))
    return {"outcome": result.outcome, "replace_url": result.replace_url}

@router.post("/notice")
async def mount_notice(
    storage: OriginStorage = Depends(get_storage),
    api: ApiClient = Depends(get_api_client),
    deferred: DeferredRunner = Depends(get_deferred),
):
    """Montage de la bannière: {show, amount, reference}; planifie le traitement à +NOTICE_DELAY_SECONDS."""
    banner, pending = await notice.mount_success_notice(storage)
    if pending is not None:
        deferred.schedule(
            config.NOTICE_DELAY_SECONDS,
            lambda: notice.process_payment_return(storage, api, pending),
            name=f"notice-process:{storage.origin_id}",
        )
    return {"show": banner.show, "amount": banner.amount, "reference": banner.reference}

@router.get("/notice")
async def get_notice(storage: OriginStorage = Depends(get_storage)):
    banner = await notice.current_banner(storage)
    return {"show": banner.show, "amount": banner.amount, "reference": banner.reference}

@router.post("/notice/continue", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
async def continue_shopping(
    storage: OriginStorage = Depends(get_storage),
    api: ApiClient = Depends(get_api_client),
):
    """« Continue Shopping »: relance immédiatement vérification + création des commandes."""
    try:
        outcome = await notice.continue_shopping(storage, api)
    except RedisError:
        raise
    except Exception as e:
        logger.exception("Erreur continue_shopping")
        raise HTTPException(status_code=400, detail=str(e))
    return {"outcome": outcome, "show": False}
