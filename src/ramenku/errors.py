"""Custom exceptions for ramenku."""


class RamenkuError(Exception):
    """Base exception for all ramenku errors."""

    pass


class ValidationError(RamenkuError):
    """Raised when form input or a menu selection is malformed."""

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid {field}: {reason}")


class DuplicateEmailError(RamenkuError):
    """Raised when registering an email that already has an account."""

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"An account with email {email} already exists")


class NotFoundError(RamenkuError):
    """Raised when a looked-up record doesn't exist."""

    def __init__(self, kind: str, key: str):
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} not found: {key}")


class MenuEntryNotFoundError(NotFoundError):
    """Raised when a menu entry ID doesn't exist in the catalog."""

    def __init__(self, entry_id: str):
        self.entry_id = entry_id
        super().__init__("Menu entry", entry_id)


class InvalidCredentialError(RamenkuError):
    """Raised when the secret doesn't match the account."""

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"Incorrect password for {email}")


class InvalidStatusTransitionError(RamenkuError):
    """Raised when an order status change would skip or reverse a step."""

    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot move order from '{current}' to '{requested}'")


class EmptyCartError(RamenkuError):
    """Raised when checking out with nothing in the cart."""

    def __init__(self):
        super().__init__("Cart is empty")


class NotAuthenticatedError(RamenkuError):
    """Raised when an operation needs a session and none is active."""

    def __init__(self):
        super().__init__("Not logged in. Log in or register first.")


class PermissionDeniedError(RamenkuError):
    """Raised when a non-admin session calls an admin operation."""

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"{email} is not an admin")
