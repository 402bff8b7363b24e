"""
Adaptateur de l'API REST BizConnect: centralise les appels consommés par le flux
de retour de paiement.
- POST /api/payments/verify {reference} -> {status: bool, data: {status: "success" | ...}}
- POST /api/orders {vendor_id, product_id, quantity, amount, payment_id, ...}
Les réponses non 2xx lèvent httpx.HTTPStatusError.
"""
import logging
from typing import Any, Dict, Optional

import httpx
from fastapi import Request

from bizconnect import config

logger = logging.getLogger(__name__)

VERIFY_PATH = "/api/payments/verify"
ORDERS_PATH = "/api/orders"

# module bizconnect.infra.api_client
def is_payment_verified(payload: Any) -> bool:
    """
    Vrai si la réponse de vérification annonce un paiement réussi.
    - Attend {"status": true, "data": {"status": "success"}}
    - Tolérant: toute autre forme (None, liste, data absent) vaut False.
    """
    if not isinstance(payload, dict) or not payload.get("status"):
        return False
    data = payload.get("data") or {}
    return isinstance(data, dict) and data.get("status") == "success"

class ApiClient:
    """Client async de l'API REST (vérification paiement + création de commandes)."""

    def __init__(self, http: httpx.AsyncClient):
        self.http = http

    @classmethod
    def from_config(cls, transport: Optional[httpx.AsyncBaseTransport] = None) -> "ApiClient":
        headers = {"Content-Type": "application/json"}
        if config.API_TOKEN:
            headers["Authorization"] = f"Bearer {config.API_TOKEN}"
        http = httpx.AsyncClient(
            base_url=config.API_BASE_URL,
            headers=headers,
            timeout=config.API_TIMEOUT_SECONDS,
            transport=transport,
        )
        return cls(http)

    async def verify_payment(self, reference: str) -> Dict[str, Any]:
        """Demande à l'API l'état d'une transaction passerelle (par référence)."""
        response = await self.http.post(VERIFY_PATH, json={"reference": reference})
        response.raise_for_status()
        return response.json()

    async def create_order(self, order: Dict[str, Any]) -> Dict[str, Any]:
        """Crée une commande; retourne le corps JSON (non exploité par le flux)."""
        response = await self.http.post(ORDERS_PATH, json=order)
        response.raise_for_status()
        try:
            return response.json()
        except ValueError:
            return {}

    async def aclose(self) -> None:
        await self.http.aclose()

def get_api_client(request: Request) -> ApiClient:
    """Dépendance FastAPI: client posé sur app.state par le lifespan."""
    client = getattr(request.app.state, "api_client", None)
    if client is None:
        client = ApiClient.from_config()
        request.app.state.api_client = client
    return client
