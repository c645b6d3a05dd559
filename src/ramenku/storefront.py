"""Wiring of the storefront components around one store."""

from dataclasses import dataclass, field

from .admin import AdminBoard, require_admin
from .cart import CartLedger
from .checkout import CheckoutService
from .config import DEFAULT_CHECKOUT_DELAY, Settings
from .credentials import CredentialVerifier, HashedVerifier, PlaintextVerifier
from .identity import IdentityStore
from .orders import OrderLedger
from .storage import JsonFileStore, KeyValueStore


@dataclass
class Storefront:
    """All components for one client process, sharing one store and cart."""

    store: KeyValueStore
    identity: IdentityStore
    ledger: OrderLedger
    checkout: CheckoutService
    admin: AdminBoard
    cart: CartLedger = field(default_factory=CartLedger)

    @classmethod
    def build(
        cls,
        store: KeyValueStore,
        verifier: CredentialVerifier | None = None,
        checkout_delay: float = DEFAULT_CHECKOUT_DELAY,
    ) -> "Storefront":
        identity = IdentityStore(store, verifier or HashedVerifier())
        ledger = OrderLedger(store)
        return cls(
            store=store,
            identity=identity,
            ledger=ledger,
            checkout=CheckoutService(identity, ledger, delay=checkout_delay),
            admin=AdminBoard(identity, ledger),
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Storefront":
        verifier = PlaintextVerifier() if settings.plaintext_secrets else HashedVerifier()
        return cls.build(
            JsonFileStore(settings.data_dir),
            verifier=verifier,
            checkout_delay=settings.checkout_delay,
        )

    def admin_board(self) -> AdminBoard:
        """The admin board, once the current session is checked to be an admin."""
        require_admin(self.identity.current_session())
        return self.admin
