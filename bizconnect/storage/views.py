# module bizconnect.storage.views

"""Chemin d'écriture du checkout vers l'enregistrement de l'origine navigateur.
- PUT /pending-payment: référence passerelle, montant, email (+ téléphone/adresse de livraison).
- GET /pending-payment: paiement en attente courant (404 si absent).
- PUT /cart: lignes du panier, validées avant écriture.
La lecture/suppression appartient au flux de retour de paiement.
"""
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from bizconnect.storage.models import CartLine, CheckoutContact, PendingPayment, PendingPaymentWrite
from bizconnect.storage.origin import get_storage
from bizconnect.storage.repository import OriginStorage

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/storage", tags=["Storage API"])

@router.put("/pending-payment")
async def put_pending_payment(body: PendingPaymentWrite, storage: OriginStorage = Depends(get_storage)):
    pending = PendingPayment(
        reference=body.reference,
        amount=body.amount,
        buyer_email=str(body.buyer_email),
        order_id=body.order_id,
    )
    await storage.write_pending_payment(pending)
    await storage.write_checkout_contact(CheckoutContact(phone=body.checkout_phone, address=body.checkout_address))
    logger.info("storage.pending_payment written reference=%s origin=%s", pending.reference, storage.origin_id)
    return {"status": "ok", "reference": pending.reference}

@router.get("/pending-payment")
async def get_pending_payment(storage: OriginStorage = Depends(get_storage)):
    pending = await storage.read_pending_payment()
    if not pending:
        raise HTTPException(status_code=404, detail="Aucun paiement en attente")
    return pending.model_dump()

@router.put("/cart")
async def put_cart(lines: List[CartLine], storage: OriginStorage = Depends(get_storage)):
    await storage.write_cart([line.model_dump(mode="json") for line in lines])
    return {"status": "ok", "lines": len(lines)}
