"""Tests for CheckoutService."""

import threading
import time
from decimal import Decimal

import pytest

from ramenku.cart import CartLedger
from ramenku.checkout import PAYMENT_METHODS, CheckoutService, payment_label
from ramenku.errors import EmptyCartError, NotAuthenticatedError, ValidationError
from ramenku.models import LineItem, OrderStatus


@pytest.fixture
def cart(ramen):
    cart = CartLedger()
    cart.add_item(LineItem.create(ramen, quantity=2, topping_ids=["egg"]))
    return cart


class TestCheckout:
    def test_records_pending_order_and_clears_cart(self, storefront, cart):
        session = storefront.identity.register("Budi", "budi@example.com", "rahasia1")

        order = storefront.checkout.checkout(cart, "bank")

        assert order.status == OrderStatus.PENDING
        assert order.total_price == Decimal("100000")
        assert order.payment_method == "Transfer Bank"
        assert order.user_id == session.id
        assert order.user_name == "Budi"
        assert cart.is_empty
        assert storefront.ledger.list_for(session.id)[0] == order

    def test_order_items_are_a_snapshot(self, storefront, cart, ramen):
        storefront.identity.register("Budi", "budi@example.com", "rahasia1")
        order = storefront.checkout.checkout(cart, "cod")

        cart.add_item(LineItem.create(ramen, quantity=9))

        assert len(order.items) == 1
        assert order.total_price == Decimal("100000")

    def test_requires_session(self, storefront, cart):
        with pytest.raises(NotAuthenticatedError):
            storefront.checkout.checkout(cart, "bank")
        assert len(cart) == 1

    def test_empty_cart(self, storefront):
        storefront.identity.register("Budi", "budi@example.com", "rahasia1")
        with pytest.raises(EmptyCartError):
            storefront.checkout.checkout(CartLedger(), "bank")

    def test_payment_method_required(self, storefront, cart):
        storefront.identity.register("Budi", "budi@example.com", "rahasia1")
        with pytest.raises(ValidationError):
            storefront.checkout.checkout(cart, "")
        with pytest.raises(ValidationError):
            storefront.checkout.checkout(cart, "bitcoin")
        assert len(cart) == 1

    def test_simulated_payment_delay(self, identity, ledger, cart):
        slept = []
        service = CheckoutService(identity, ledger, delay=2.0, sleep=slept.append)
        identity.register("Budi", "budi@example.com", "rahasia1")

        service.checkout(cart, "ewallet")

        assert slept == [2.0]

    def test_no_sleep_when_delay_is_zero(self, identity, ledger, cart):
        slept = []
        service = CheckoutService(identity, ledger, delay=0, sleep=slept.append)
        identity.register("Budi", "budi@example.com", "rahasia1")

        service.checkout(cart, "ewallet")

        assert slept == []

    def test_double_submit_records_one_order(self, identity, ledger, cart):
        paying = threading.Event()

        def slow_payment(delay):
            paying.set()
            time.sleep(delay)

        service = CheckoutService(identity, ledger, delay=0.3, sleep=slow_payment)
        session = identity.register("Budi", "budi@example.com", "rahasia1")
        orders, errors = [], []

        def submit():
            try:
                orders.append(service.checkout(cart, "bank"))
            except EmptyCartError as e:
                errors.append(e)

        first = threading.Thread(target=submit)
        first.start()
        assert paying.wait(timeout=5)
        second = threading.Thread(target=submit)
        second.start()
        first.join(timeout=5)
        second.join(timeout=5)

        assert len(orders) == 1
        assert len(errors) == 1
        assert len(ledger.list_for(session.id)) == 1
        assert cart.is_empty


class TestPaymentLabel:
    def test_labels(self):
        assert payment_label("bank") == "Transfer Bank"
        assert payment_label("ewallet") == "E-Wallet"
        assert payment_label("cod") == "Bayar di Tempat"
        assert set(PAYMENT_METHODS) == {"bank", "ewallet", "cod"}
