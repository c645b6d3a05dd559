"""Turning a cart into a recorded order."""

import copy
import threading
import time
from typing import Callable

from .cart import CartLedger
from .config import DEFAULT_CHECKOUT_DELAY
from .errors import EmptyCartError, NotAuthenticatedError, ValidationError
from .identity import IdentityStore
from .logging_config import get_logger
from .models import Order
from .orders import OrderLedger

logger = get_logger(__name__)

# Payment method id -> label stored on the order
PAYMENT_METHODS: dict[str, str] = {
    "bank": "Transfer Bank",
    "ewallet": "E-Wallet",
    "cod": "Bayar di Tempat",
}


def payment_label(method: str) -> str:
    """
    Resolve a payment method id to its label.

    Raises:
        ValidationError: If the method is blank or unknown.
    """
    if not method:
        raise ValidationError("payment_method", "choose a payment method to continue")
    try:
        return PAYMENT_METHODS[method]
    except KeyError:
        valid = ", ".join(PAYMENT_METHODS)
        raise ValidationError(
            "payment_method", f"'{method}' is not one of {valid}"
        ) from None


class CheckoutService:
    """Snapshots the cart into a pending order for the logged-in user.

    Payment is simulated with a fixed delay and always succeeds.
    """

    def __init__(
        self,
        identity: IdentityStore,
        ledger: OrderLedger,
        delay: float = DEFAULT_CHECKOUT_DELAY,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.identity = identity
        self.ledger = ledger
        self.delay = delay
        self._sleep = sleep
        self._lock = threading.Lock()

    def checkout(self, cart: CartLedger, payment_method: str) -> Order:
        """
        Place an order for everything in the cart.

        Checkouts are serialized, so a second submit of the same cart waits
        and then finds it empty.

        Raises:
            NotAuthenticatedError: If nobody is logged in.
            EmptyCartError: If the cart has no items.
            ValidationError: If the payment method is unknown.
        """
        with self._lock:
            session = self.identity.current_session()
            if session is None:
                raise NotAuthenticatedError()
            if cart.is_empty:
                raise EmptyCartError()
            label = payment_label(payment_method)

            if self.delay > 0:
                self._sleep(self.delay)

            order = Order.create(
                session=session,
                items=copy.deepcopy(cart.items),
                payment_method=label,
            )
            self.ledger.record(order)
            cart.clear()

        logger.info(
            "Order %s recorded for %s: %d line(s), total %s via %s",
            order.id[:8],
            session.email,
            len(order.items),
            order.total_price,
            label,
        )
        return order
