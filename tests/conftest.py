import asyncio
import os
from typing import Any, Callable, Dict, Generator, List, Optional, Tuple

# Environnement de test: fakeredis, pas de rate limiter Redis, délais nuls
os.environ.setdefault("USE_FAKE_REDIS_FOR_TESTS", "1")
os.environ.setdefault("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", "1")

import httpx
import pytest
from fakeredis import FakeServer
from fakeredis.aioredis import FakeRedis
from fastapi.testclient import TestClient

from bizconnect import config as bc_config
from bizconnect.app import app as fastapi_app
from bizconnect.payment_return.deferred import DeferredRunner
from bizconnect.storage.repository import OriginStorage

# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "/tests/unit/" in nodeid or nodeid.startswith("tests/unit/") or nodeid.startswith("unit/"):
            item.add_marker(pytest.mark.unit)
        elif "/tests/integration/" in nodeid or nodeid.startswith("tests/integration/") or nodeid.startswith("integration/"):
            item.add_marker(pytest.mark.integration)

@pytest.fixture(autouse=True)
def _guard_enabled(monkeypatch):
    # Garde active par défaut; les tests "comportement historique" la désactivent explicitement
    monkeypatch.setattr(bc_config, "MATERIALIZATION_GUARD", True)

@pytest.fixture(scope="session")
def app():
    return fastapi_app

@pytest.fixture()
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c

class FakeApi:
    """
    Double de l'API REST.
    - verify_payload: réponse de /api/payments/verify
    - verify_error: exception levée par verify_payment
    - fail_on: numéros (1-based) des appels create_order qui lèvent
    - yield_control: rend la main à la boucle à chaque appel (simule la latence réseau)
    - hang_on: numéros (1-based) des appels create_order qui ne répondent jamais
    """

    def __init__(
        self,
        verify_payload: Optional[Dict[str, Any]] = None,
        verify_error: Optional[Exception] = None,
        fail_on=(),
        yield_control: bool = False,
        hang_on=(),
    ):
        self.verify_payload = verify_payload if verify_payload is not None else {"status": True, "data": {"status": "success"}}
        self.verify_error = verify_error
        self.fail_on = set(fail_on)
        self.yield_control = yield_control
        self.hang_on = set(hang_on)
        self.verify_calls: List[str] = []
        self.order_calls: List[Dict[str, Any]] = []
        self.orders: List[Dict[str, Any]] = []

    async def verify_payment(self, reference: str) -> Dict[str, Any]:
        self.verify_calls.append(reference)
        if self.yield_control:
            await asyncio.sleep(0)
        if self.verify_error is not None:
            raise self.verify_error
        return self.verify_payload

    async def create_order(self, order: Dict[str, Any]) -> Dict[str, Any]:
        self.order_calls.append(order)
        if self.yield_control:
            await asyncio.sleep(0)
        if len(self.order_calls) in self.hang_on:
            await asyncio.Event().wait()
        if len(self.order_calls) in self.fail_on:
            raise httpx.ConnectError("connexion refusée")
        self.orders.append(order)
        return {"id": f"order-{len(self.orders)}", **order}

    async def aclose(self) -> None:
        return None

class RecordingDeferred(DeferredRunner):
    """Enregistre les tâches planifiées sans les lancer; run_all() les exécute sur demande."""

    def __init__(self):
        super().__init__()
        self.scheduled: List[Tuple[float, str, Callable]] = []

    def schedule(self, delay, func, *, name="deferred"):
        self.scheduled.append((delay, name, func))
        return None

    async def run_all(self) -> List[Any]:
        jobs, self.scheduled = self.scheduled, []
        return [await func() for _, _, func in jobs]

@pytest.fixture
def fake_api():
    return FakeApi

@pytest.fixture
def make_storage():
    """Fabrique d'OriginStorage sur un serveur fakeredis isolé (à appeler dans la coroutine du test)."""
    def _make(origin_id: str = "origin-1", redis=None) -> OriginStorage:
        if redis is None:
            redis = FakeRedis(server=FakeServer(), decode_responses=True)
        return OriginStorage(redis, origin_id)
    return _make

def cart_line(product_id: str, price="10.00", quantity: int = 1, vendor_id: str = "vendor-1") -> Dict[str, Any]:
    return {
        "product": {
            "id": product_id,
            "vendor_id": vendor_id,
            "price": price,
            "title": f"Produit {product_id}",
            "image_url": None,
        },
        "quantity": quantity,
    }

@pytest.fixture
def make_cart_line():
    return cart_line

@pytest.fixture
def wired_client(client):
    """TestClient dont l'API REST et l'exécuteur différé sont remplacés par des doubles."""
    api = FakeApi()
    deferred = RecordingDeferred()
    client.app.state.api_client = api
    client.app.state.deferred = deferred
    client.api = api
    client.deferred = deferred
    return client
