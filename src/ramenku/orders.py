"""Per-user order history storage."""

from typing import Callable

from .logging_config import get_logger
from .models import Order, OrderStatus
from .storage import KeyValueStore, orders_key

logger = get_logger(__name__)


class OrderLedger:
    """Persists each user's orders, most recent first."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def record(self, order: Order) -> None:
        """Put an order at the head of its owner's history."""

        def prepend(data: list) -> list:
            return [order.to_dict()] + list(data or [])

        self.store.update(orders_key(order.user_id), prepend, default=[])

    def list_for(self, user_id: str) -> list[Order]:
        """List a user's orders, most recent first. Unknown users have none."""
        data = self.store.get(orders_key(user_id), default=[])
        return [Order.from_dict(o) for o in data or []]

    def get(self, user_id: str, order_id: str) -> Order | None:
        for order in self.list_for(user_id):
            if order.id == order_id:
                return order
        return None

    def update_status(
        self, order_id: str, user_id: str, new_status: OrderStatus
    ) -> Order | None:
        """
        Replace one order's status, leaving every other field alone.

        Returns:
            The updated order, or None if the user has no order with this ID
            (the stored history is left untouched in that case).
        """
        return self.transition(order_id, user_id, lambda current: new_status)

    def transition(
        self,
        order_id: str,
        user_id: str,
        resolve: Callable[[OrderStatus], OrderStatus],
    ) -> Order | None:
        """
        Move one order to the status resolve picks from its stored status.

        resolve runs inside the store's locked update, so it always sees the
        latest status. An exception from resolve aborts the write.

        Returns:
            The order after the update, or None if the user has no such order.
        """
        key = orders_key(user_id)
        data = self.store.get(key, default=[]) or []
        if not any(o.get("id") == order_id for o in data):
            return None

        updated: list[Order] = []
        changed: list[OrderStatus] = []

        def replace(current: list) -> list:
            for o in current or []:
                if o.get("id") == order_id:
                    status = OrderStatus(o["status"])
                    target = resolve(status)
                    if target != status:
                        o["status"] = target.value
                        changed.append(target)
                    updated.append(Order.from_dict(o))
            return current

        self.store.update(key, replace, default=[])
        if not updated:
            return None

        if changed:
            logger.info(
                "Order %s of user %s is now %s", order_id[:8], user_id[:8], changed[0].value
            )
        return updated[0]
