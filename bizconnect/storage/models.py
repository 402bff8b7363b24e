# module bizconnect.storage.models
"""Modèles de l'enregistrement par origine navigateur.
- PendingPayment: paiement initié au checkout, en attente de retour passerelle.
- CartLine / CartProduct: lignes du panier telles que sérialisées par la SPA.
- Clés de stockage: identiques aux anciennes clés localStorage.
"""
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

PENDING_REFERENCE_KEY = "pending_payment_reference"
PENDING_AMOUNT_KEY = "pending_payment_amount"
PENDING_EMAIL_KEY = "pending_payment_email"
PENDING_ORDER_ID_KEY = "pending_payment_order_id"
CHECKOUT_PHONE_KEY = "checkout_phone"
CHECKOUT_ADDRESS_KEY = "checkout_address"
CART_KEY = "cart"
NOTICE_VISIBLE_KEY = "payment_notice_visible"

PENDING_PAYMENT_KEYS = (
    PENDING_REFERENCE_KEY,
    PENDING_AMOUNT_KEY,
    PENDING_EMAIL_KEY,
    PENDING_ORDER_ID_KEY,
)
CHECKOUT_CONTACT_KEYS = (CHECKOUT_PHONE_KEY, CHECKOUT_ADDRESS_KEY)


def parse_amount(value) -> Optional[Decimal]:
    """Convertit un montant (str|int|float) en Decimal; None si illisible."""
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    return amount if amount.is_finite() else None


class PendingPayment(BaseModel):
    reference: str
    amount: str = ""
    buyer_email: str = ""
    order_id: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        """Référence, montant et email présents (condition des vérifications différées)."""
        return bool(self.reference and self.amount and self.buyer_email)

    @property
    def display_amount(self) -> str:
        amount = parse_amount(self.amount)
        return f"{amount:.2f}" if amount is not None else self.amount


class CheckoutContact(BaseModel):
    phone: str = ""
    address: str = ""


class CartProduct(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Union[str, int]
    vendor_id: Union[str, int]
    price: Decimal
    title: str = ""
    image_url: Optional[str] = None

    @field_validator("id", "vendor_id")
    @classmethod
    def _not_blank(cls, v):
        # Type JSON d'origine conservé (5 reste 5, "5" reste "5")
        if isinstance(v, str):
            v = v.strip()
            if not v:
                raise ValueError("identifiant requis")
        return v


class CartLine(BaseModel):
    model_config = ConfigDict(extra="allow")

    product: CartProduct
    quantity: int = Field(ge=1)

    @property
    def line_amount(self) -> Decimal:
        """Prix unitaire × quantité, arrondi au centime."""
        return (self.product.price * self.quantity).quantize(Decimal("0.01"))


class PendingPaymentWrite(BaseModel):
    """Corps d'écriture du checkout (PUT /api/v1/storage/pending-payment)."""
    reference: str = Field(min_length=1)
    amount: str
    buyer_email: EmailStr
    order_id: Optional[str] = None
    checkout_phone: str = ""
    checkout_address: str = ""

    @field_validator("amount", mode="before")
    @classmethod
    def _amount_is_decimal(cls, v: str) -> str:
        amount = parse_amount(v)
        if amount is None or amount < 0:
            raise ValueError("montant invalide")
        return str(v).strip()
