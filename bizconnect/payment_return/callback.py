"""
Gestionnaire de callback passerelle.
Rôles:
- Lire payment_reference / payment_status dans l'URL de retour de la SPA.
- Succès + référence identique à celle stockée: créer les commandes, effacer le
  paiement en attente, notifier; l'URL à afficher est renvoyée sans query string.
- Référence différente ou absente côté stockage: aucune action (pas une erreur).
- payment_status=failed: notification destructive, paiement en attente conservé.
- Indépendamment: vérification de repli à +2s sur le paiement en attente
  (planifiée par la vue, voir check_pending_payment).
"""
import logging
from dataclasses import dataclass
from typing import Optional, Tuple
from urllib.parse import parse_qs, urlsplit

import httpx

from bizconnect.notifications import service as notifications
from bizconnect.payment_return import service
from bizconnect.payment_return.service import (
    OUTCOME_DUPLICATE,
    OUTCOME_ERROR,
    OUTCOME_FAILED,
    OUTCOME_MATERIALIZED,
    OUTCOME_NONE,
    OUTCOME_NOOP,
    OUTCOME_UNVERIFIED,
)

logger = logging.getLogger(__name__)

PAYMENT_SUCCESS_TITLE = "Payment Successful!"
PAYMENT_SUCCESS_DESCRIPTION = "Your mobile money payment has been processed successfully."
PAYMENT_FAILED_TITLE = "Payment Failed"
PAYMENT_FAILED_DESCRIPTION = "Your payment was not successful. Please try again."

@dataclass
class CallbackResult:
    outcome: str
    replace_url: Optional[str] = None
    reference: Optional[str] = None

# module bizconnect.payment_return.callback
def parse_return_params(url: str) -> Tuple[Optional[str], Optional[str]]:
    """Extrait (payment_reference, payment_status) de l'URL; valeurs vides -> None."""
    query = parse_qs(urlsplit(url or "").query)
    reference = (query.get("payment_reference") or [""])[0].strip() or None
    status = (query.get("payment_status") or [""])[0].strip() or None
    return reference, status

def strip_query(url: str) -> str:
    """Chemin seul (équivalent window.location.pathname), pour history.replaceState."""
    return urlsplit(url or "").path or "/"

async def _notify_success(storage) -> None:
    # Émis avant la création des commandes: une éventuelle notification d'échec suit
    await notifications.notify(storage, PAYMENT_SUCCESS_TITLE, PAYMENT_SUCCESS_DESCRIPTION)

async def handle_payment_callback(storage, api, url: str) -> CallbackResult:
    """
    Traite les paramètres de retour passerelle présents dans `url`.
    Retour: CallbackResult(outcome, replace_url) où outcome vaut
    materialized | duplicate | noop | failed | none.
    """
    reference, status = parse_return_params(url)

    if reference and status == "success":
        pending = await storage.read_pending_payment()
        if not pending or pending.reference != reference:
            logger.info(
                "payment_return.callback reference mismatch url_ref=%s stored_ref=%s",
                reference, pending.reference if pending else None,
            )
            return CallbackResult(outcome=OUTCOME_NOOP, reference=reference)

        result = await service.complete_payment(storage, api, pending, on_claimed=lambda: _notify_success(storage))
        if result is None:
            return CallbackResult(outcome=OUTCOME_DUPLICATE, replace_url=strip_query(url), reference=reference)
        return CallbackResult(outcome=OUTCOME_MATERIALIZED, replace_url=strip_query(url), reference=reference)

    if status == "failed":
        await notifications.notify(storage, PAYMENT_FAILED_TITLE, PAYMENT_FAILED_DESCRIPTION, variant="destructive")
        return CallbackResult(outcome=OUTCOME_FAILED, replace_url=strip_query(url), reference=reference)

    return CallbackResult(outcome=OUTCOME_NONE)

async def check_pending_payment(storage, api) -> str:
    """
    Vérification de repli (planifiée à +2s après le montage).
    - Paiement en attente incomplet ou absent: rien.
    - Échec de l'appel de vérification: journalisé seulement.
    - Vérifié: commandes créées, paiement en attente effacé, notification de succès.
    """
    pending = await storage.read_pending_payment()
    if not pending or not pending.is_complete:
        return OUTCOME_NONE

    try:
        verified = await service.verify_reference(api, pending.reference)
    except (httpx.HTTPError, ValueError):
        logger.exception("payment_return.callback verification error reference=%s", pending.reference)
        return OUTCOME_ERROR
    if not verified:
        return OUTCOME_UNVERIFIED

    result = await service.complete_payment(storage, api, pending, on_claimed=lambda: _notify_success(storage))
    if result is None:
        return OUTCOME_DUPLICATE
    return OUTCOME_MATERIALIZED
