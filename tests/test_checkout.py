"""Tests for order totals and order placement."""
from decimal import Decimal

import pytest

from storefront.database.checkout_schema import CheckoutRequest
from storefront.database.order_models import Address, Order
from storefront.utils.checkout import CheckoutError, calculate_order_totals, get_orders, place_order

ADDRESS = {
    "first_name": "Asha",
    "last_name": "Rao",
    "address_line1": "12 MG Road",
    "city": "Bengaluru",
    "state": "Karnataka",
    "postal_code": "560001",
    "phone": "9876543210",
    "email": "asha@example.com",
}


def checkout_request(**overrides):
    data = {"shipping_address": ADDRESS}
    data.update(overrides)
    return CheckoutRequest(**data)


class TestOrderTotals:
    """calculate_order_totals."""

    def test_small_order_pays_shipping(self):
        totals = calculate_order_totals(Decimal("500"))
        assert totals.shipping_amount == 100.0
        assert totals.tax_amount == 90.0
        assert totals.total_amount == 690.0

    def test_large_order_ships_free(self):
        totals = calculate_order_totals(Decimal("2000"))
        assert totals.shipping_amount == 0.0
        assert totals.total_amount == 2360.0

    def test_threshold_itself_is_not_free(self):
        assert calculate_order_totals(Decimal("1000")).shipping_amount == 100.0


class TestCheckoutRequest:
    """Checkout form validation."""

    def test_billing_defaults_to_shipping(self):
        request = checkout_request()
        assert request.billing_address == request.shipping_address

    def test_separate_billing_required(self):
        with pytest.raises(ValueError):
            checkout_request(same_as_shipping=False)

    def test_invalid_email_rejected(self):
        with pytest.raises(ValueError):
            checkout_request(shipping_address={**ADDRESS, "email": "nope"})


class TestPlaceOrder:
    """place_order."""

    def test_empty_cart_is_rejected(self, db, shopper):
        with pytest.raises(CheckoutError):
            place_order(db, shopper, checkout_request(), "session_1")
        assert db.query(Order).count() == 0

    def test_guest_order(self, db, shopper, product_factory):
        shopper.cart.add_to_cart(product_factory(1, price="250.00"), quantity=2)
        shopper.cart.add_to_cart(product_factory(2, price="100.00"))

        order = place_order(db, shopper, checkout_request(payment_method="card"), "session_1")

        assert order.user_id is None
        assert order.payment_status == "paid"
        assert order.order_status == "pending"
        assert float(order.subtotal) == 600.0
        assert float(order.total_amount) == 808.0
        assert order.transaction_id.startswith("TXN")
        assert [(item.product_id, item.quantity) for item in order.items] == [("1", 2), ("2", 1)]
        assert shopper.cart.is_empty

    def test_cash_on_delivery_stays_pending(self, db, shopper, product_factory):
        shopper.cart.add_to_cart(product_factory(1))
        order = place_order(db, shopper, checkout_request(payment_method="cod"), "session_1")
        assert order.payment_status == "pending"

    def test_signed_in_order_saves_addresses(self, db, shopper, identity_service, product_factory):
        identity_service.sign_in("u1")
        shopper.cart.add_to_cart(product_factory(1))

        order = place_order(
            db,
            shopper,
            checkout_request(
                save_address_for_later=True,
                same_as_shipping=False,
                billing_address={**ADDRESS, "city": "Mysuru"},
            ),
            "session_1",
        )

        assert order.user_id == "u1"
        addresses = db.query(Address).filter(Address.user_id == "u1").all()
        assert sorted(a.address_type for a in addresses) == ["billing", "shipping"]
        assert order.billing_address_id != order.shipping_address_id

    def test_guest_addresses_are_not_saved(self, db, shopper, product_factory):
        shopper.cart.add_to_cart(product_factory(1))
        place_order(db, shopper, checkout_request(save_address_for_later=True), "session_1")
        assert db.query(Address).count() == 0

    def test_order_history(self, db, shopper, identity_service, product_factory):
        shopper.cart.add_to_cart(product_factory(1))
        place_order(db, shopper, checkout_request(), "session_1")

        identity_service.sign_in("u1")
        for _ in range(2):
            shopper.cart.add_to_cart(product_factory(2))
            place_order(db, shopper, checkout_request(), "session_1")

        user_orders = get_orders(db, user_id="u1")
        guest_orders = get_orders(db, session_id="session_1")

        assert len(user_orders) == 2
        assert user_orders[0].id > user_orders[1].id
        assert len(guest_orders) == 1
