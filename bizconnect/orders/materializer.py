"""
Matérialisation des commandes: transforme le panier courant en une commande par ligne
pour un paiement vérifié.
- Lit le panier *courant* (pas un instantané pris au checkout).
- Une requête POST /api/orders par ligne, séquentielle; un échec n'interrompt pas la boucle.
- Après la boucle (même interrompue): panier et contact de livraison effacés.
- Au moins un échec -> une seule notification destructive après la boucle.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

import httpx

from bizconnect.notifications import service as notifications
from bizconnect.storage.models import CartLine, CheckoutContact

logger = logging.getLogger(__name__)

ORDER_FAILED_TITLE = "Order Creation Failed"
ORDER_FAILED_DESCRIPTION = "Payment successful but order creation failed. Please contact support."

@dataclass
class MaterializationResult:
    reference: str
    attempted: int = 0
    created: int = 0
    failed_product_ids: List[Union[str, int]] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.failed_product_ids)

    @property
    def ok(self) -> bool:
        return not self.failed_product_ids

# module bizconnect.orders.materializer
def build_order_payload(line: CartLine, *, reference: str, buyer_email: str, contact: CheckoutContact) -> Dict[str, Any]:
    """Corps POST /api/orders pour une ligne de panier (montant = prix unitaire × quantité)."""
    return {
        "vendor_id": line.product.vendor_id,
        "product_id": line.product.id,
        "quantity": line.quantity,
        "amount": float(line.line_amount),
        "payment_id": reference,
        "buyer_email": buyer_email,
        "buyer_phone": contact.phone,
        "delivery_address": contact.address,
        "status": "pending",
    }

async def create_orders_from_payment(
    storage,
    api,
    reference: str,
    amount: str,
    buyer_email: str,
    result: Optional[MaterializationResult] = None,
) -> MaterializationResult:
    """
    Crée une commande par ligne de panier pour le paiement `reference`.
    - amount: total stocké au checkout, journalisé seulement (non rapproché du panier).
    - Les données de livraison viennent des clés checkout_phone / checkout_address.
    - result: résultat à alimenter, lisible par l'appelant si la boucle est interrompue.
    - Panier et contact effacés en sortie de boucle, y compris sur annulation.
    Retour: MaterializationResult (tentatives, créées, échecs).
    """
    if result is None:
        result = MaterializationResult(reference=reference)

    cart = await storage.read_cart()
    contact = await storage.read_checkout_contact()
    if not cart:
        logger.warning("orders.materialize empty cart reference=%s origin=%s", reference, storage.origin_id)

    try:
        for line in cart:
            payload = build_order_payload(line, reference=reference, buyer_email=buyer_email, contact=contact)
            result.attempted += 1
            try:
                await api.create_order(payload)
                result.created += 1
            except httpx.HTTPError:
                logger.exception(
                    "orders.materialize create_order failed reference=%s product_id=%s",
                    reference, line.product.id,
                )
                result.failed_product_ids.append(line.product.id)
    finally:
        await storage.clear_cart()
        await storage.clear_checkout_contact()

    logger.info(
        "orders.materialize reference=%s amount=%s attempted=%s created=%s failed=%s",
        reference, amount, result.attempted, result.created, result.failed,
    )
    if not result.ok:
        await notifications.notify(storage, ORDER_FAILED_TITLE, ORDER_FAILED_DESCRIPTION, variant="destructive")
    return result
