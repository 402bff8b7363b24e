"""
Cas d'usage partagés du retour de paiement: vérifier une référence, puis
matérialiser les commandes et effacer le paiement en attente.
Utilisé par le gestionnaire de callback (URL + vérification à +2s) et par la
bannière de succès (vérification à +3s, bouton « Continue Shopping »).
"""
import logging
from typing import Awaitable, Callable, Optional

from bizconnect.infra.api_client import is_payment_verified
from bizconnect.orders.materializer import MaterializationResult, create_orders_from_payment
from bizconnect.payment_return import guard
from bizconnect.storage.models import PendingPayment

logger = logging.getLogger(__name__)

# Issues possibles d'une passe
OUTCOME_MATERIALIZED = "materialized"
OUTCOME_DUPLICATE = "duplicate"
OUTCOME_NOOP = "noop"
OUTCOME_FAILED = "failed"
OUTCOME_NONE = "none"
OUTCOME_UNVERIFIED = "unverified"
OUTCOME_ERROR = "error"

class PaymentVerificationError(Exception):
    def __init__(self, reference: str, message: str = "Payment verification failed"):
        super().__init__(message)
        self.reference = reference

async def verify_reference(api, reference: str) -> bool:
    """Appelle /api/payments/verify; lève httpx.HTTPError / ValueError si l'appel échoue."""
    payload = await api.verify_payment(reference)
    verified = is_payment_verified(payload)
    logger.info("payment_return.verify reference=%s verified=%s", reference, verified)
    return verified

async def complete_payment(
    storage,
    api,
    pending: PendingPayment,
    on_claimed: Optional[Callable[[], Awaitable[object]]] = None,
) -> Optional[MaterializationResult]:
    """
    Matérialise les commandes de `pending` puis efface le paiement en attente.
    - Retourne None si une autre passe a déjà réservé la référence (garde active).
    - on_claimed: appelé une fois la référence réservée, avant la première commande.
    - Interruption (erreur, annulation) avant tout appel POST /api/orders: réservation
      relâchée, paiement en attente conservé pour une nouvelle passe.
    - Interruption après au moins un appel: réservation conservée et paiement en
      attente effacé, une nouvelle passe dupliquerait les commandes déjà émises.
    """
    if not await guard.claim_reference(storage, pending.reference):
        return None
    result = MaterializationResult(reference=pending.reference)
    try:
        if on_claimed is not None:
            await on_claimed()
        await create_orders_from_payment(
            storage, api, pending.reference, pending.amount, pending.buyer_email, result=result
        )
    except BaseException:
        if not result.attempted:
            await guard.release_reference(storage, pending.reference)
            raise
        logger.warning(
            "payment_return.complete interrupted reference=%s attempted=%s",
            pending.reference, result.attempted,
        )
        await storage.clear_pending_payment()
        raise
    await storage.clear_pending_payment()
    return result
