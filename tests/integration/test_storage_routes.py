import pytest

pytestmark = pytest.mark.integration

def test_pending_payment_absent_is_404(client):
    r = client.get("/api/v1/storage/pending-payment")
    assert r.status_code == 404
    assert r.json() == {"detail": "Aucun paiement en attente"}

def test_put_then_get_pending_payment(client):
    r = client.put(
        "/api/v1/storage/pending-payment",
        json={"reference": "R1", "amount": "10.5", "buyer_email": "a@b.co", "order_id": "o-9"},
    )
    assert r.status_code == 200
    assert r.json() == {"status": "ok", "reference": "R1"}

    body = client.get("/api/v1/storage/pending-payment").json()
    assert body == {"reference": "R1", "amount": "10.5", "buyer_email": "a@b.co", "order_id": "o-9"}

@pytest.mark.parametrize("payload", [
    {"reference": "R1", "amount": "10", "buyer_email": "not-an-email"},
    {"reference": "", "amount": "10", "buyer_email": "a@b.co"},
    {"reference": "R1", "amount": "abc", "buyer_email": "a@b.co"},
    {"reference": "R1", "amount": "-1", "buyer_email": "a@b.co"},
])
def test_put_pending_payment_rejects_invalid(client, payload):
    assert client.put("/api/v1/storage/pending-payment", json=payload).status_code == 422

def test_put_cart_validates_lines(client):
    ok = [{"product": {"id": "p1", "vendor_id": "v1", "price": 5}, "quantity": 1}]
    r = client.put("/api/v1/storage/cart", json=ok)
    assert r.status_code == 200
    assert r.json() == {"status": "ok", "lines": 1}

    bad = [{"product": {"id": "p1", "vendor_id": "v1", "price": 5}, "quantity": 0}]
    assert client.put("/api/v1/storage/cart", json=bad).status_code == 422

def test_session_cookie_is_set(client):
    from bizconnect.config import SESSION_COOKIE_NAME

    client.get("/api/v1/notifications")
    assert client.cookies.get(SESSION_COOKIE_NAME)
