"""Account registration, login and the current session."""

import re

from .credentials import CredentialVerifier, HashedVerifier
from .errors import (
    DuplicateEmailError,
    InvalidCredentialError,
    NotFoundError,
    ValidationError,
)
from .logging_config import get_logger
from .models import Account, Role, Session
from .storage import ACCOUNTS_KEY, SESSION_KEY, KeyValueStore

logger = get_logger(__name__)

MIN_SECRET_LENGTH = 6
MIN_NAME_LENGTH = 2

# Bootstrap credential so the admin board is usable without a signup flow.
# This is a mocked-environment convenience, not a security feature.
BOOTSTRAP_ADMIN_NAME = "Admin Ramenku"
BOOTSTRAP_ADMIN_EMAIL = "admin@ramenku.com"
BOOTSTRAP_ADMIN_SECRET = "admin123"

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class IdentityStore:
    """Manages registered accounts and the single active session."""

    def __init__(self, store: KeyValueStore, verifier: CredentialVerifier | None = None):
        """
        Initialize IdentityStore.

        Args:
            store: Backend holding the account list and session record.
            verifier: Secret hasher (default: salted PBKDF2).
        """
        self.store = store
        self.verifier = verifier or HashedVerifier()

    def _seed(self, data: list | None) -> list:
        if data:
            return data
        admin = Account.create(
            name=BOOTSTRAP_ADMIN_NAME,
            email=BOOTSTRAP_ADMIN_EMAIL,
            secret=self.verifier.hash(BOOTSTRAP_ADMIN_SECRET),
            role=Role.ADMIN,
        )
        logger.info("Seeded bootstrap admin account %s", BOOTSTRAP_ADMIN_EMAIL)
        return [admin.to_dict()]

    def _load_accounts(self) -> list[Account]:
        data = self.store.get(ACCOUNTS_KEY)
        if not data:
            data = self.store.update(ACCOUNTS_KEY, self._seed, default=[])
        return [Account.from_dict(a) for a in data]

    def list_accounts(self) -> list[Account]:
        """List all registered accounts, bootstrap admin included."""
        return self._load_accounts()

    def find_account(self, email: str) -> Account | None:
        for account in self._load_accounts():
            if account.matches_email(email):
                return account
        return None

    def _set_session(self, session: Session) -> Session:
        self.store.put(SESSION_KEY, session.to_dict())
        return session

    def register(self, name: str, email: str, secret: str) -> Session:
        """
        Register a new user account and log it in.

        Returns:
            The new session.

        Raises:
            ValidationError: If a field is missing or malformed.
            DuplicateEmailError: If the email is already registered.
        """
        name = (name or "").strip()
        email = (email or "").strip()
        secret = secret or ""

        if not name:
            raise ValidationError("name", "is required")
        if not email:
            raise ValidationError("email", "is required")
        if not secret:
            raise ValidationError("password", "is required")
        if len(name) < MIN_NAME_LENGTH:
            raise ValidationError("name", f"must be at least {MIN_NAME_LENGTH} characters")
        if not _EMAIL_RE.match(email):
            raise ValidationError("email", f"'{email}' is not a valid email address")
        if len(secret) < MIN_SECRET_LENGTH:
            raise ValidationError(
                "password", f"must be at least {MIN_SECRET_LENGTH} characters"
            )

        # Make sure the bootstrap admin exists before the first real account
        self._load_accounts()

        account = Account.create(name=name, email=email, secret=self.verifier.hash(secret))

        def append(data: list) -> list:
            # Duplicate check inside the locked update to keep it consistent
            for existing in data:
                if Account.from_dict(existing).matches_email(email):
                    raise DuplicateEmailError(email)
            data.append(account.to_dict())
            return data

        self.store.update(ACCOUNTS_KEY, append, default=[])
        logger.info("Registered account %s", email)
        return self._set_session(account.to_session())

    def login(self, email: str, secret: str) -> Session:
        """
        Log in with email and secret.

        Raises:
            ValidationError: If email or secret is blank.
            NotFoundError: If no account has this email.
            InvalidCredentialError: If the secret doesn't match.
        """
        email = (email or "").strip()
        if not email:
            raise ValidationError("email", "is required")
        if not secret:
            raise ValidationError("password", "is required")

        account = self.find_account(email)
        if account is None:
            logger.warning("Login attempt for unknown email %s", email)
            raise NotFoundError("Account", email)

        if not self.verifier.verify(secret, account.secret):
            logger.warning("Failed login for %s", email)
            raise InvalidCredentialError(email)

        logger.info("Logged in %s (%s)", account.email, account.role.value)
        return self._set_session(account.to_session())

    def logout(self) -> None:
        """Clear the current session."""
        self.store.delete(SESSION_KEY)

    def current_session(self) -> Session | None:
        """Return the current session, or None when logged out."""
        data = self.store.get(SESSION_KEY)
        if not data:
            return None
        return Session.from_dict(data)
