import pytest

from bizconnect.notifications import service as notifications
from bizconnect.orders.materializer import ORDER_FAILED_DESCRIPTION, create_orders_from_payment
from bizconnect.storage.models import CheckoutContact

@pytest.mark.asyncio
async def test_one_order_per_cart_line(make_storage, fake_api, make_cart_line):
    storage = make_storage()
    api = fake_api()
    await storage.write_cart([
        make_cart_line("p1", price="12.50", quantity=2, vendor_id="v1"),
        make_cart_line("p2", price="3", quantity=1, vendor_id="v2"),
    ])
    await storage.write_checkout_contact(CheckoutContact(phone="0240000000", address="KTU Campus"))

    result = await create_orders_from_payment(storage, api, "R1", "28.00", "buyer@ktu.edu.gh")

    assert result.attempted == 2 and result.created == 2 and result.ok
    assert api.order_calls[0] == {
        "vendor_id": "v1",
        "product_id": "p1",
        "quantity": 2,
        "amount": 25.0,
        "payment_id": "R1",
        "buyer_email": "buyer@ktu.edu.gh",
        "buyer_phone": "0240000000",
        "delivery_address": "KTU Campus",
        "status": "pending",
    }
    assert api.order_calls[1]["amount"] == 3.0
    # Panier et contact effacés, aucune notification d'échec
    assert await storage.read_cart() == []
    assert await storage.read_checkout_contact() == CheckoutContact()
    assert await notifications.drain(storage) == []

@pytest.mark.asyncio
async def test_numeric_ids_are_sent_as_numbers(make_storage, fake_api):
    storage = make_storage()
    api = fake_api()
    await storage.write_cart([{"product": {"id": 5, "vendor_id": 7, "price": 4}, "quantity": 1}])

    await create_orders_from_payment(storage, api, "R1", "4", "a@b.co")

    assert api.order_calls[0]["product_id"] == 5
    assert api.order_calls[0]["vendor_id"] == 7

@pytest.mark.asyncio
async def test_empty_cart_issues_no_call_but_still_clears(make_storage, fake_api):
    storage = make_storage()
    api = fake_api()
    await storage.write_checkout_contact(CheckoutContact(phone="024", address="Kumasi"))

    result = await create_orders_from_payment(storage, api, "R1", "10.00", "a@b.co")

    assert result.attempted == 0
    assert api.order_calls == []
    assert await storage.get_item("cart") is None
    assert await storage.read_checkout_contact() == CheckoutContact()

@pytest.mark.asyncio
async def test_failure_mid_loop_does_not_abort_and_notifies_once(make_storage, fake_api, make_cart_line):
    storage = make_storage()
    api = fake_api(fail_on={2})
    await storage.write_cart([make_cart_line("p1"), make_cart_line("p2"), make_cart_line("p3")])

    result = await create_orders_from_payment(storage, api, "R1", "30.00", "a@b.co")

    assert [c["product_id"] for c in api.order_calls] == ["p1", "p2", "p3"]
    assert result.attempted == 3
    assert result.created == 2
    assert result.failed_product_ids == ["p2"]
    toasts = await notifications.drain(storage)
    assert len(toasts) == 1
    assert toasts[0].variant == "destructive"
    assert toasts[0].description == ORDER_FAILED_DESCRIPTION
    # Effacement sans condition, même après un échec
    assert await storage.read_cart() == []

@pytest.mark.asyncio
async def test_unexpected_error_still_clears_cart(make_storage, fake_api, make_cart_line):
    storage = make_storage()
    api = fake_api()

    async def broken_create_order(order):
        api.order_calls.append(order)
        raise RuntimeError("réponse illisible")

    api.create_order = broken_create_order
    await storage.write_cart([make_cart_line("p1"), make_cart_line("p2")])
    await storage.write_checkout_contact(CheckoutContact(phone="024", address="Kumasi"))

    with pytest.raises(RuntimeError):
        await create_orders_from_payment(storage, api, "R1", "20", "a@b.co")

    assert len(api.order_calls) == 1
    assert await storage.read_cart() == []
    assert await storage.read_checkout_contact() == CheckoutContact()

@pytest.mark.asyncio
async def test_reads_live_cart_not_checkout_snapshot(make_storage, fake_api, make_cart_line):
    storage = make_storage()
    api = fake_api()
    await storage.write_cart([make_cart_line("p1")])
    # Panier modifié entre le checkout et le retour passerelle
    await storage.write_cart([make_cart_line("p9", price="99")])

    await create_orders_from_payment(storage, api, "R1", "10.00", "a@b.co")

    assert [c["product_id"] for c in api.order_calls] == ["p9"]
