"""Tests for AdminBoard."""

from decimal import Decimal

import pytest

from ramenku.admin import require_admin
from ramenku.cart import CartLedger
from ramenku.errors import (
    InvalidStatusTransitionError,
    NotAuthenticatedError,
    PermissionDeniedError,
    ValidationError,
)
from ramenku.models import LineItem, Order, OrderStatus
from ramenku.orders import OrderLedger
from ramenku.storage import MemoryStore
from ramenku.storefront import Storefront

from .conftest import login_admin


def place_order(storefront, ramen, quantity=2, toppings=("egg",)) -> Order:
    cart = CartLedger()
    cart.add_item(LineItem.create(ramen, quantity=quantity, topping_ids=list(toppings)))
    return storefront.checkout.checkout(cart, "bank")


@pytest.fixture
def two_users(storefront, ramen):
    """Budi and Siti each place orders; returns (budi_orders, siti_orders)."""
    identity = storefront.identity
    identity.register("Budi", "budi@example.com", "rahasia1")
    budi = [place_order(storefront, ramen), place_order(storefront, ramen, quantity=1)]
    identity.register("Siti", "siti@example.com", "rahasia2")
    siti = [place_order(storefront, ramen, quantity=3, toppings=())]
    return budi, siti


class TestListAll:
    def test_unions_all_users_newest_first(self, storefront, two_users):
        budi, siti = two_users
        orders = storefront.admin.list_all()

        assert len(orders) == 3
        assert {o.id for o in orders} == {o.id for o in budi + siti}
        stamps = [o.created_at_dt for o in orders]
        assert stamps == sorted(stamps, reverse=True)

    def test_user_without_orders_contributes_nothing(self, storefront, ramen):
        storefront.identity.register("Budi", "budi@example.com", "rahasia1")
        storefront.identity.register("Siti", "siti@example.com", "rahasia2")
        order = place_order(storefront, ramen)

        assert storefront.admin.list_all() == [order]

    def test_empty(self, storefront):
        assert storefront.admin.list_all() == []

    def test_ties_keep_per_user_order(self, storefront, ramen):
        session = storefront.identity.register("Budi", "budi@example.com", "rahasia1")
        stamp = "2026-10-19T10:00:00Z"
        older = Order.create(session, [LineItem.create(ramen)], "E-Wallet")
        newer = Order.create(session, [LineItem.create(ramen)], "E-Wallet")
        older.created_at = newer.created_at = stamp
        storefront.ledger.record(older)
        storefront.ledger.record(newer)

        assert [o.id for o in storefront.admin.list_all()] == [newer.id, older.id]

    def test_filter_by_status(self, storefront, two_users):
        budi, _ = two_users
        storefront.admin.set_status(budi[0].id, budi[0].user_id, OrderStatus.CONFIRMED)

        confirmed = storefront.admin.list_all(OrderStatus.CONFIRMED)
        assert [o.id for o in confirmed] == [budi[0].id]
        assert len(storefront.admin.list_all(OrderStatus.PENDING)) == 2


class TestSetStatus:
    def test_visible_to_owner(self, storefront, two_users):
        budi, _ = two_users
        order = budi[0]

        storefront.admin.set_status(order.id, order.user_id, OrderStatus.CONFIRMED)

        assert storefront.ledger.get(order.user_id, order.id).status == OrderStatus.CONFIRMED

    def test_full_lifecycle(self, storefront, two_users):
        order = two_users[1][0]
        for status in [
            OrderStatus.CONFIRMED,
            OrderStatus.PROCESSING,
            OrderStatus.COMPLETED,
            OrderStatus.DELIVERED,
        ]:
            updated = storefront.admin.set_status(order.id, order.user_id, status)
            assert updated.status == status

    def test_skipping_a_step_is_refused(self, storefront, two_users):
        order = two_users[0][0]
        with pytest.raises(InvalidStatusTransitionError):
            storefront.admin.set_status(order.id, order.user_id, OrderStatus.COMPLETED)
        assert storefront.ledger.get(order.user_id, order.id).status == OrderStatus.PENDING

    def test_reject_leaves_pending(self, storefront, two_users):
        order = two_users[0][0]
        result = storefront.admin.apply_action(order.id, order.user_id, "reject")
        assert result.status == OrderStatus.PENDING

    def test_missing_order_is_noop(self, storefront, two_users):
        before = storefront.admin.list_all()
        assert storefront.admin.set_status("missing", "nobody", OrderStatus.CONFIRMED) is None
        assert storefront.admin.apply_action("missing", "nobody", "confirm") is None
        assert storefront.admin.list_all() == before

    def test_apply_action(self, storefront, two_users):
        order = two_users[0][0]
        updated = storefront.admin.apply_action(order.id, order.user_id, "confirm")
        assert updated.status == OrderStatus.CONFIRMED

        with pytest.raises(InvalidStatusTransitionError):
            storefront.admin.apply_action(order.id, order.user_id, "dispatch")
        with pytest.raises(ValidationError):
            storefront.admin.apply_action(order.id, order.user_id, "cancel")


class TestStatistics:
    def test_checkout_scenario_revenue(self, storefront, ramen):
        storefront.identity.register("Budi", "budi@example.com", "rahasia1")
        order = place_order(storefront, ramen, quantity=2, toppings=("egg",))
        assert order.total_price == Decimal("100000")

        stats = storefront.admin.statistics()
        assert stats.total == 1
        assert stats.pending_count == 1
        assert stats.revenue == 0

        storefront.admin.set_status(order.id, order.user_id, OrderStatus.CONFIRMED)
        assert storefront.admin.statistics().revenue == Decimal("100000")

        storefront.admin.set_status(order.id, order.user_id, OrderStatus.PROCESSING)
        assert storefront.admin.statistics().revenue == Decimal("100000")

    def test_status_groups(self, storefront, two_users):
        budi, siti = two_users
        admin = storefront.admin
        admin.set_status(budi[0].id, budi[0].user_id, OrderStatus.CONFIRMED)
        for status in [
            OrderStatus.CONFIRMED,
            OrderStatus.PROCESSING,
            OrderStatus.COMPLETED,
            OrderStatus.DELIVERED,
        ]:
            admin.set_status(siti[0].id, siti[0].user_id, status)

        stats = admin.statistics()
        assert stats.total == 3
        assert stats.pending_count == 1
        assert stats.processing_count == 1
        assert stats.completed_count == 1
        assert stats.revenue == budi[0].total_price + siti[0].total_price

    def test_to_dict(self, storefront):
        assert storefront.admin.statistics().to_dict() == {
            "total": 0,
            "pending_count": 0,
            "processing_count": 0,
            "completed_count": 0,
            "revenue": "0",
        }


class TestRequireAdmin:
    def test_no_session(self):
        with pytest.raises(NotAuthenticatedError):
            require_admin(None)

    def test_regular_user(self, storefront):
        session = storefront.identity.register("Budi", "budi@example.com", "rahasia1")
        with pytest.raises(PermissionDeniedError):
            require_admin(session)
        with pytest.raises(PermissionDeniedError):
            storefront.admin_board()

    def test_admin(self, storefront):
        session = login_admin(storefront.identity)
        assert require_admin(session) == session
        assert storefront.admin_board() is storefront.admin


class InterleavingStore(MemoryStore):
    """Runs after_read once, right after the next get returns its value."""

    def __init__(self):
        super().__init__()
        self.after_read = None

    def get(self, key, default=None):
        value = super().get(key, default)
        if self.after_read is not None:
            hook, self.after_read = self.after_read, None
            hook()
        return value


class TestConcurrentStatusChange:
    def test_stale_read_cannot_move_status_backwards(self, verifier, ramen):
        store = InterleavingStore()
        storefront = Storefront.build(store, verifier=verifier, checkout_delay=0)
        storefront.identity.register("Budi", "budi@example.com", "rahasia1")
        order = place_order(storefront, ramen)
        storefront.admin.apply_action(order.id, order.user_id, "confirm")

        other_writer = OrderLedger(store)
        store.after_read = lambda: other_writer.update_status(
            order.id, order.user_id, OrderStatus.COMPLETED
        )

        with pytest.raises(InvalidStatusTransitionError):
            storefront.admin.set_status(order.id, order.user_id, OrderStatus.PROCESSING)
        assert storefront.ledger.get(order.user_id, order.id).status == OrderStatus.COMPLETED

    def test_action_resolves_against_latest_status(self, verifier, ramen):
        store = InterleavingStore()
        storefront = Storefront.build(store, verifier=verifier, checkout_delay=0)
        storefront.identity.register("Budi", "budi@example.com", "rahasia1")
        order = place_order(storefront, ramen)

        other_writer = OrderLedger(store)
        store.after_read = lambda: other_writer.update_status(
            order.id, order.user_id, OrderStatus.CONFIRMED
        )

        updated = storefront.admin.apply_action(order.id, order.user_id, "start_processing")
        assert updated.status == OrderStatus.PROCESSING
