"""Admin view across every user's orders."""

from decimal import Decimal
from typing import Callable

from .errors import (
    InvalidStatusTransitionError,
    NotAuthenticatedError,
    PermissionDeniedError,
)
from .identity import IdentityStore
from .logging_config import get_logger
from .models import (
    Order,
    OrderStatistics,
    OrderStatus,
    Session,
    check_transition,
    next_status,
)
from .orders import OrderLedger

logger = get_logger(__name__)


def require_admin(session: Session | None) -> Session:
    """
    Ensure the session belongs to an admin.

    Raises:
        NotAuthenticatedError: If there is no session.
        PermissionDeniedError: If the session isn't an admin.
    """
    if session is None:
        raise NotAuthenticatedError()
    if not session.is_admin:
        raise PermissionDeniedError(session.email)
    return session


class AdminBoard:
    """Aggregates all order ledgers and drives status changes.

    Reads are pull-based: call list_all() again after set_status() to see
    the refreshed view.
    """

    def __init__(self, identity: IdentityStore, ledger: OrderLedger):
        self.identity = identity
        self.ledger = ledger

    def list_all(self, status: OrderStatus | None = None) -> list[Order]:
        """
        List every user's orders, newest first.

        Orders with equal timestamps keep their per-user order.
        """
        orders: list[Order] = []
        for account in self.identity.list_accounts():
            orders.extend(self.ledger.list_for(account.id))

        # sort is stable, so ties stay in per-user insertion order
        orders.sort(key=lambda o: o.created_at_dt, reverse=True)

        if status is not None:
            orders = [o for o in orders if o.status == status]
        return orders

    def set_status(
        self, order_id: str, user_id: str, new_status: OrderStatus
    ) -> Order | None:
        """
        Move one order to new_status.

        Returns:
            The updated order, or None if the user has no such order.

        Raises:
            InvalidStatusTransitionError: If new_status isn't one step on.
        """
        return self._transition(order_id, user_id, lambda current: new_status)

    def apply_action(self, order_id: str, user_id: str, action: str) -> Order | None:
        """
        Apply a named transition (confirm, reject, start_processing, finish, dispatch).

        Returns:
            The updated order, or None if the user has no such order.
        """
        return self._transition(
            order_id, user_id, lambda current: next_status(current, action)
        )

    def _transition(
        self,
        order_id: str,
        user_id: str,
        target: Callable[[OrderStatus], OrderStatus],
    ) -> Order | None:
        # Checked against the stored status inside the ledger's locked update
        def resolve(current: OrderStatus) -> OrderStatus:
            try:
                new_status = target(current)
                check_transition(current, new_status)
            except InvalidStatusTransitionError as e:
                logger.warning(
                    "Rejected status change for %s: %s -> %s",
                    order_id[:8],
                    e.current,
                    e.requested,
                )
                raise
            return new_status

        return self.ledger.transition(order_id, user_id, resolve)

    def statistics(self) -> OrderStatistics:
        """Counts by status group plus revenue from orders past pending."""
        stats = OrderStatistics()
        revenue = Decimal(0)
        for order in self.list_all():
            stats.total += 1
            if order.status == OrderStatus.PENDING:
                stats.pending_count += 1
                continue
            revenue += order.total_price
            if order.status in (OrderStatus.CONFIRMED, OrderStatus.PROCESSING):
                stats.processing_count += 1
            else:
                stats.completed_count += 1
        stats.revenue = revenue
        return stats
