"""Pytest fixtures for ramenku tests."""

import tempfile
from decimal import Decimal
from pathlib import Path

import pytest

from ramenku.credentials import HashedVerifier
from ramenku.identity import IdentityStore
from ramenku.models import MenuEntry, Topping
from ramenku.orders import OrderLedger
from ramenku.storage import MemoryStore
from ramenku.storefront import Storefront


@pytest.fixture
def temp_dir():
    """Create a temporary directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def verifier():
    """A cheap hasher so tests don't spend time in PBKDF2."""
    return HashedVerifier(iterations=1000)


@pytest.fixture
def identity(store, verifier):
    return IdentityStore(store, verifier)


@pytest.fixture
def ledger(store):
    return OrderLedger(store)


@pytest.fixture
def storefront(store, verifier):
    return Storefront.build(store, verifier=verifier, checkout_delay=0)


@pytest.fixture
def ramen():
    """A 45000 bowl with a 5000 egg topping, as on the real menu."""
    return MenuEntry(
        id="test-ramen",
        name="Test Ramen",
        description="For tests",
        price=Decimal("45000"),
        image="/images/test.jpg",
        category="Classic",
        spice_levels=("Mild", "Hot"),
        toppings=(
            Topping("egg", "Egg", Decimal("5000")),
            Topping("pork", "Pork", Decimal("12000")),
        ),
    )


def login_admin(identity: IdentityStore):
    from ramenku.identity import BOOTSTRAP_ADMIN_EMAIL, BOOTSTRAP_ADMIN_SECRET

    return identity.login(BOOTSTRAP_ADMIN_EMAIL, BOOTSTRAP_ADMIN_SECRET)
