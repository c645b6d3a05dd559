"""Tests for IdentityStore."""

import pytest

from ramenku.errors import (
    DuplicateEmailError,
    InvalidCredentialError,
    NotFoundError,
    ValidationError,
)
from ramenku.identity import (
    BOOTSTRAP_ADMIN_EMAIL,
    BOOTSTRAP_ADMIN_SECRET,
    IdentityStore,
)
from ramenku.models import Role
from ramenku.storage import ACCOUNTS_KEY, SESSION_KEY, JsonFileStore


class TestBootstrap:
    def test_seeds_admin_on_first_access(self, identity, store):
        accounts = identity.list_accounts()

        assert len(accounts) == 1
        assert accounts[0].email == BOOTSTRAP_ADMIN_EMAIL
        assert accounts[0].role == Role.ADMIN
        assert len(store.get(ACCOUNTS_KEY)) == 1

    def test_seeds_only_once(self, identity):
        identity.list_accounts()
        identity.list_accounts()
        assert len(identity.list_accounts()) == 1

    def test_admin_login(self, identity):
        session = identity.login("admin@ramenku.com", "admin123")
        assert session.role == Role.ADMIN
        assert session.is_admin

    def test_admin_secret_is_not_stored_plain(self, identity, store):
        identity.list_accounts()
        assert store.get(ACCOUNTS_KEY)[0]["secret"] != BOOTSTRAP_ADMIN_SECRET


class TestRegister:
    def test_register_creates_user_and_session(self, identity):
        session = identity.register("Budi", "budi@example.com", "rahasia1")

        assert session.role == Role.USER
        assert session.email == "budi@example.com"
        assert identity.current_session() == session
        assert len(identity.list_accounts()) == 2

    @pytest.mark.parametrize(
        "name,email,secret,field",
        [
            ("", "budi@example.com", "rahasia1", "name"),
            ("Budi", "", "rahasia1", "email"),
            ("Budi", "budi@example.com", "", "password"),
            ("Budi", "budi@example.com", "12345", "password"),
            ("B", "budi@example.com", "rahasia1", "name"),
            ("Budi", "not-an-email", "rahasia1", "email"),
        ],
    )
    def test_validation(self, identity, name, email, secret, field):
        with pytest.raises(ValidationError) as exc_info:
            identity.register(name, email, secret)
        assert exc_info.value.field == field
        assert identity.current_session() is None

    def test_duplicate_email_case_insensitive(self, identity, store):
        identity.register("Budi", "budi@example.com", "rahasia1")
        before = store.get(ACCOUNTS_KEY)

        with pytest.raises(DuplicateEmailError):
            identity.register("Other", "BUDI@example.com", "rahasia2")

        assert store.get(ACCOUNTS_KEY) == before

    def test_cannot_register_bootstrap_email(self, identity):
        with pytest.raises(DuplicateEmailError):
            identity.register("Sneaky", "Admin@Ramenku.com", "password")

    def test_duplicate_does_not_change_session(self, identity):
        first = identity.register("Budi", "budi@example.com", "rahasia1")
        with pytest.raises(DuplicateEmailError):
            identity.register("Other", "budi@example.com", "rahasia2")
        assert identity.current_session() == first


class TestLogin:
    def test_login_by_email_any_case(self, identity):
        registered = identity.register("Budi", "budi@example.com", "rahasia1")
        identity.logout()

        session = identity.login("Budi@Example.com", "rahasia1")
        assert session.id == registered.id

    def test_unknown_email(self, identity):
        with pytest.raises(NotFoundError):
            identity.login("nobody@example.com", "rahasia1")

    def test_wrong_secret(self, identity):
        identity.register("Budi", "budi@example.com", "rahasia1")
        identity.logout()

        with pytest.raises(InvalidCredentialError):
            identity.login("budi@example.com", "salah123")
        assert identity.current_session() is None

    def test_blank_input(self, identity):
        with pytest.raises(ValidationError):
            identity.login("", "rahasia1")
        with pytest.raises(ValidationError):
            identity.login("budi@example.com", "")


class TestSession:
    def test_logout_clears_session(self, identity, store):
        identity.register("Budi", "budi@example.com", "rahasia1")
        identity.logout()

        assert identity.current_session() is None
        assert store.get(SESSION_KEY) is None

    def test_logout_when_logged_out(self, identity):
        identity.logout()
        assert identity.current_session() is None

    def test_login_replaces_session(self, identity):
        identity.register("Budi", "budi@example.com", "rahasia1")
        admin = identity.login(BOOTSTRAP_ADMIN_EMAIL, BOOTSTRAP_ADMIN_SECRET)
        assert identity.current_session() == admin

    def test_session_survives_restart(self, temp_dir, verifier):
        first = IdentityStore(JsonFileStore(temp_dir), verifier)
        session = first.register("Budi", "budi@example.com", "rahasia1")

        second = IdentityStore(JsonFileStore(temp_dir), verifier)
        assert second.current_session() == session
        assert second.login("budi@example.com", "rahasia1").id == session.id
