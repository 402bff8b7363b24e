"""
Bannière « paiement en cours de traitement ».
- Montage: si un paiement en attente complet existe, la bannière est affichée
  (montant, référence) et la vue planifie process_payment_return à +3s.
- « Continue Shopping »: même traitement à la demande (pas d'anti-rebond).
- Échec de vérification (non vérifié ou appel en erreur): bannière masquée,
  notification destructive, paiement en attente conservé.
"""
import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from bizconnect.notifications import service as notifications
from bizconnect.payment_return import service
from bizconnect.payment_return.service import (
    OUTCOME_DUPLICATE,
    OUTCOME_ERROR,
    OUTCOME_MATERIALIZED,
    OUTCOME_NONE,
    PaymentVerificationError,
)
from bizconnect.storage.models import PendingPayment

logger = logging.getLogger(__name__)

ORDER_CREATED_TITLE = "Order Created Successfully!"
ORDER_CREATED_DESCRIPTION = "Your payment has been processed and orders have been created."
PROCESSING_ERROR_TITLE = "Payment Processing Error"
PROCESSING_ERROR_DESCRIPTION = "There was an issue processing your payment. Please contact support."

@dataclass
class NoticeBanner:
    show: bool
    amount: Optional[str] = None
    reference: Optional[str] = None

async def mount_success_notice(storage) -> tuple[NoticeBanner, Optional[PendingPayment]]:
    """Affiche la bannière si un paiement en attente complet existe; retourne (bannière, paiement capturé)."""
    pending = await storage.read_pending_payment()
    if not pending or not pending.is_complete:
        return NoticeBanner(show=False), None
    await storage.set_notice_visible(True)
    return NoticeBanner(show=True, amount=pending.display_amount, reference=pending.reference), pending

async def current_banner(storage) -> NoticeBanner:
    if not await storage.is_notice_visible():
        return NoticeBanner(show=False)
    pending = await storage.read_pending_payment()
    if not pending:
        return NoticeBanner(show=True)
    return NoticeBanner(show=True, amount=pending.display_amount, reference=pending.reference)

async def process_payment_return(storage, api, pending: PendingPayment) -> str:
    """
    Vérifie `pending` (valeurs capturées au montage ou relues au clic), puis crée
    les commandes et efface le paiement en attente.
    Retour: materialized | duplicate | error.
    """
    try:
        if not await service.verify_reference(api, pending.reference):
            raise PaymentVerificationError(pending.reference)
        result = await service.complete_payment(storage, api, pending)
    except (PaymentVerificationError, httpx.HTTPError, ValueError):
        logger.exception("payment_return.notice processing error reference=%s", pending.reference)
        await storage.set_notice_visible(False)
        await notifications.notify(
            storage, PROCESSING_ERROR_TITLE, PROCESSING_ERROR_DESCRIPTION, variant="destructive"
        )
        return OUTCOME_ERROR

    await storage.set_notice_visible(False)
    if result is None:
        return OUTCOME_DUPLICATE
    if result.ok:
        await notifications.notify(storage, ORDER_CREATED_TITLE, ORDER_CREATED_DESCRIPTION)
    return OUTCOME_MATERIALIZED

async def continue_shopping(storage, api) -> str:
    """Bouton « Continue Shopping »: relit le paiement en attente et le traite immédiatement."""
    pending = await storage.read_pending_payment()
    if not pending or not pending.is_complete:
        await storage.set_notice_visible(False)
        return OUTCOME_NONE
    return await process_payment_return(storage, api, pending)
