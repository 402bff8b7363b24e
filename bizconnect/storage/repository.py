"""
Accès aux données de l'origine navigateur (équivalent serveur du localStorage).
- Un hash Redis par origine: {prefix}:storage:{origin_id}
- Toutes les lectures sont tolérantes: un panier illisible vaut [].
- Pas de TTL ni de versionnement: un enregistrement vit jusqu'à son effacement.
"""
import json
import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from bizconnect import config
from bizconnect.storage.models import (
    CART_KEY,
    CHECKOUT_ADDRESS_KEY,
    CHECKOUT_CONTACT_KEYS,
    CHECKOUT_PHONE_KEY,
    NOTICE_VISIBLE_KEY,
    PENDING_AMOUNT_KEY,
    PENDING_EMAIL_KEY,
    PENDING_ORDER_ID_KEY,
    PENDING_PAYMENT_KEYS,
    PENDING_REFERENCE_KEY,
    CartLine,
    CheckoutContact,
    PendingPayment,
)

logger = logging.getLogger(__name__)

# module bizconnect.storage.repository
def storage_key(origin_id: str) -> str:
    return f"{config.STORAGE_KEY_PREFIX}:storage:{origin_id}"

class OriginStorage:
    """
    Enregistrement clé/valeur d'une origine navigateur (partagé entre onglets).
    - get_item / set_item / remove_item: contrat brut façon localStorage.
    - Helpers typés pour le paiement en attente, le panier et le contact de livraison.
    """

    def __init__(self, redis, origin_id: str):
        self.redis = redis
        self.origin_id = origin_id
        self.key = storage_key(origin_id)

    async def get_item(self, name: str) -> Optional[str]:
        return await self.redis.hget(self.key, name)

    async def set_item(self, name: str, value: str) -> None:
        await self.redis.hset(self.key, name, value)

    async def remove_item(self, *names: str) -> None:
        if names:
            await self.redis.hdel(self.key, *names)

    async def snapshot(self) -> Dict[str, str]:
        return await self.redis.hgetall(self.key) or {}

    # --- Paiement en attente ---
    async def read_pending_payment(self) -> Optional[PendingPayment]:
        """Retourne le paiement en attente, ou None si aucune référence n'est stockée."""
        values = await self.redis.hmget(self.key, list(PENDING_PAYMENT_KEYS))
        reference, amount, email, order_id = values
        if not reference:
            return None
        return PendingPayment(
            reference=reference,
            amount=amount or "",
            buyer_email=email or "",
            order_id=order_id or None,
        )

    async def write_pending_payment(self, pending: PendingPayment) -> None:
        mapping = {
            PENDING_REFERENCE_KEY: pending.reference,
            PENDING_AMOUNT_KEY: pending.amount,
            PENDING_EMAIL_KEY: pending.buyer_email,
        }
        await self.redis.hset(self.key, mapping=mapping)
        if pending.order_id:
            await self.redis.hset(self.key, PENDING_ORDER_ID_KEY, pending.order_id)
        else:
            await self.redis.hdel(self.key, PENDING_ORDER_ID_KEY)

    async def clear_pending_payment(self) -> None:
        await self.remove_item(*PENDING_PAYMENT_KEYS)

    # --- Panier ---
    async def read_cart(self) -> List[CartLine]:
        """
        Lit le panier courant (pas un instantané lié au paiement).
        - JSON illisible ou non-liste -> [] (log warning).
        - Lignes invalides ignorées (log warning).
        """
        raw = await self.get_item(CART_KEY)
        if not raw:
            return []
        try:
            items = json.loads(raw)
        except ValueError:
            logger.warning("storage.read_cart invalid json origin=%s", self.origin_id)
            return []
        if not isinstance(items, list):
            logger.warning("storage.read_cart not a list origin=%s", self.origin_id)
            return []

        lines: List[CartLine] = []
        for idx, item in enumerate(items):
            try:
                lines.append(CartLine.model_validate(item))
            except ValidationError:
                logger.warning("storage.read_cart skipped line=%s origin=%s", idx, self.origin_id)
        return lines

    async def write_cart(self, lines: List[Dict[str, Any]]) -> None:
        await self.set_item(CART_KEY, json.dumps(lines, default=str))

    async def clear_cart(self) -> None:
        await self.remove_item(CART_KEY)

    # --- Contact de livraison (clés séparées du paiement) ---
    async def read_checkout_contact(self) -> CheckoutContact:
        phone, address = await self.redis.hmget(self.key, list(CHECKOUT_CONTACT_KEYS))
        return CheckoutContact(phone=phone or "", address=address or "")

    async def write_checkout_contact(self, contact: CheckoutContact) -> None:
        await self.redis.hset(
            self.key,
            mapping={CHECKOUT_PHONE_KEY: contact.phone, CHECKOUT_ADDRESS_KEY: contact.address},
        )

    async def clear_checkout_contact(self) -> None:
        await self.remove_item(*CHECKOUT_CONTACT_KEYS)

    # --- Bannière "paiement en cours" ---
    async def is_notice_visible(self) -> bool:
        return (await self.get_item(NOTICE_VISIBLE_KEY)) == "1"

    async def set_notice_visible(self, visible: bool) -> None:
        if visible:
            await self.set_item(NOTICE_VISIBLE_KEY, "1")
        else:
            await self.remove_item(NOTICE_VISIBLE_KEY)
