"""Data models for ramenku."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any
import uuid

from .errors import InvalidStatusTransitionError, ValidationError


def _utc_now() -> str:
    """Return current UTC time as ISO 8601 string."""
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _parse_timestamp(value: str) -> datetime:
    """Parse an ISO 8601 string written by _utc_now (or without the Z)."""
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _generate_id() -> str:
    """Generate a new record ID."""
    return str(uuid.uuid4())


def _to_decimal(value: Any) -> Decimal:
    # str() first so floats read back from JSON don't pick up binary noise
    return value if isinstance(value, Decimal) else Decimal(str(value))


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    COMPLETED = "completed"
    DELIVERED = "delivered"


# action -> (from, to); reject leaves a pending order pending
TRANSITIONS: dict[str, tuple[OrderStatus, OrderStatus]] = {
    "confirm": (OrderStatus.PENDING, OrderStatus.CONFIRMED),
    "reject": (OrderStatus.PENDING, OrderStatus.PENDING),
    "start_processing": (OrderStatus.CONFIRMED, OrderStatus.PROCESSING),
    "finish": (OrderStatus.PROCESSING, OrderStatus.COMPLETED),
    "dispatch": (OrderStatus.COMPLETED, OrderStatus.DELIVERED),
}

INITIAL_STATUS = OrderStatus.PENDING
TERMINAL_STATUS = OrderStatus.DELIVERED


def parse_status(value: str) -> OrderStatus:
    """
    Convert a status string to OrderStatus.

    Raises:
        ValidationError: If the value isn't a known status.
    """
    try:
        return OrderStatus(value)
    except ValueError:
        valid = ", ".join(s.value for s in OrderStatus)
        raise ValidationError("status", f"'{value}' is not one of {valid}") from None


def available_actions(current: OrderStatus) -> list[str]:
    """Return the action names that can be applied to an order in this status."""
    return [name for name, (src, _) in TRANSITIONS.items() if src == current]


def next_status(current: OrderStatus, action: str) -> OrderStatus:
    """
    Return the status reached by applying an action.

    Raises:
        ValidationError: If the action is unknown.
        InvalidStatusTransitionError: If the action isn't available from current.
    """
    if action not in TRANSITIONS:
        raise ValidationError("action", f"unknown action '{action}'")
    src, dst = TRANSITIONS[action]
    if src != current:
        raise InvalidStatusTransitionError(current.value, dst.value)
    return dst


def check_transition(current: OrderStatus, requested: OrderStatus) -> None:
    """
    Ensure requested is reachable from current in exactly one step.

    Raises:
        InvalidStatusTransitionError: If no action moves current to requested.
    """
    for src, dst in TRANSITIONS.values():
        if src == current and dst == requested:
            return
    raise InvalidStatusTransitionError(current.value, requested.value)


# Catalog models


@dataclass(frozen=True)
class Topping:
    """An optional extra for a menu entry."""

    id: str
    name: str
    price: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "price": str(self.price)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Topping":
        return cls(
            id=data["id"],
            name=data["name"],
            price=_to_decimal(data["price"]),
        )


@dataclass(frozen=True)
class MenuEntry:
    """A ramen bowl on the menu."""

    id: str
    name: str
    description: str
    price: Decimal
    image: str
    category: str
    spice_levels: tuple[str, ...] = ()
    toppings: tuple[Topping, ...] = ()
    rating: float | None = None
    popular: bool = False

    def __post_init__(self):
        if self.price < 0:
            raise ValidationError("price", f"{self.name} has a negative price")
        if any(not level for level in self.spice_levels):
            raise ValidationError("spice_levels", f"{self.name} has a blank spice level")
        if len(set(self.spice_levels)) != len(self.spice_levels):
            raise ValidationError("spice_levels", f"{self.name} lists a spice level twice")
        topping_ids = [t.id for t in self.toppings]
        if len(set(topping_ids)) != len(topping_ids):
            raise ValidationError("toppings", f"{self.name} lists a topping twice")
        for t in self.toppings:
            if t.price < 0:
                raise ValidationError("toppings", f"'{t.id}' has a negative price")

    def get_topping(self, topping_id: str) -> Topping | None:
        for t in self.toppings:
            if t.id == topping_id:
                return t
        return None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "price": str(self.price),
            "image": self.image,
            "category": self.category,
            "spice_levels": list(self.spice_levels),
            "toppings": [t.to_dict() for t in self.toppings],
            "popular": self.popular,
        }
        if self.rating is not None:
            result["rating"] = self.rating
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MenuEntry":
        return cls(
            id=data["id"],
            name=data["name"],
            description=data.get("description", ""),
            price=_to_decimal(data["price"]),
            image=data.get("image", ""),
            category=data.get("category", ""),
            spice_levels=tuple(data.get("spice_levels", [])),
            toppings=tuple(Topping.from_dict(t) for t in data.get("toppings", [])),
            rating=data.get("rating"),
            popular=data.get("popular", False),
        )


# Identity models


@dataclass(frozen=True)
class Session:
    """Public projection of the logged-in account."""

    id: str
    name: str
    email: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Session":
        return cls(
            id=data["id"],
            name=data["name"],
            email=data["email"],
            role=Role(data.get("role", "user")),
        )


@dataclass(frozen=True)
class Account:
    """A registered account. `secret` holds the verifier's stored form."""

    id: str
    name: str
    email: str
    secret: str
    role: Role = Role.USER
    created_at: str = field(default_factory=_utc_now)

    def matches_email(self, email: str) -> bool:
        return self.email.casefold() == email.strip().casefold()

    def to_session(self) -> Session:
        return Session(id=self.id, name=self.name, email=self.email, role=self.role)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "secret": self.secret,
            "role": self.role.value,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Account":
        return cls(
            id=data["id"],
            name=data["name"],
            email=data["email"],
            secret=data["secret"],
            role=Role(data.get("role", "user")),
            created_at=data.get("created_at", ""),
        )

    @classmethod
    def create(cls, name: str, email: str, secret: str, role: Role = Role.USER) -> "Account":
        """Create a new account with generated ID and timestamp."""
        return cls(
            id=_generate_id(),
            name=name,
            email=email,
            secret=secret,
            role=role,
            created_at=_utc_now(),
        )


# Cart and order models


@dataclass(frozen=True)
class LineItem:
    """One configured bowl in a cart or order."""

    entry: MenuEntry
    quantity: int
    spice_level: str | None = None
    toppings: tuple[Topping, ...] = ()
    note: str = ""

    def __post_init__(self):
        """
        Check the selection against the menu entry.

        Raises:
            ValidationError: If quantity, spice level or a topping is invalid.
        """
        entry = self.entry
        quantity = self.quantity
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise ValidationError("quantity", "must be a positive integer")

        if entry.spice_levels:
            if self.spice_level not in entry.spice_levels:
                raise ValidationError(
                    "spice_level",
                    f"'{self.spice_level}' is not offered for {entry.name}",
                )
        elif self.spice_level is not None:
            raise ValidationError("spice_level", f"{entry.name} has no spice levels")

        seen: set[str] = set()
        for topping in self.toppings:
            if topping not in entry.toppings:
                raise ValidationError(
                    "toppings", f"'{topping.id}' is not offered for {entry.name}"
                )
            if topping.id in seen:
                raise ValidationError("toppings", f"'{topping.id}' selected twice")
            seen.add(topping.id)

    @property
    def unit_price(self) -> Decimal:
        return self.entry.price + sum((t.price for t in self.toppings), Decimal(0))

    @property
    def total(self) -> Decimal:
        return self.unit_price * self.quantity

    def to_dict(self) -> dict[str, Any]:
        return {
            "entry": self.entry.to_dict(),
            "quantity": self.quantity,
            "spice_level": self.spice_level,
            "toppings": [t.to_dict() for t in self.toppings],
            "note": self.note,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LineItem":
        return cls(
            entry=MenuEntry.from_dict(data["entry"]),
            quantity=data["quantity"],
            spice_level=data.get("spice_level"),
            toppings=tuple(Topping.from_dict(t) for t in data.get("toppings", [])),
            note=data.get("note", ""),
        )

    @classmethod
    def create(
        cls,
        entry: MenuEntry,
        quantity: int = 1,
        spice_level: str | None = None,
        topping_ids: list[str] | None = None,
        note: str = "",
    ) -> "LineItem":
        """
        Build a line item from topping ids.

        Defaults to the entry's first spice level when none is given.

        Raises:
            ValidationError: If quantity, spice level or a topping is invalid.
        """
        if spice_level is None and entry.spice_levels:
            spice_level = entry.spice_levels[0]
        elif not spice_level and not entry.spice_levels:
            spice_level = None

        toppings: list[Topping] = []
        for topping_id in topping_ids or []:
            topping = entry.get_topping(topping_id)
            if topping is None:
                raise ValidationError(
                    "toppings", f"'{topping_id}' is not offered for {entry.name}"
                )
            toppings.append(topping)

        return cls(
            entry=entry,
            quantity=quantity,
            spice_level=spice_level,
            toppings=tuple(toppings),
            note=(note or "").strip(),
        )


@dataclass
class Order:
    """A checked-out cart. Only `status` changes after creation."""

    id: str
    user_id: str
    user_name: str
    items: list[LineItem]
    total_price: Decimal
    payment_method: str
    status: OrderStatus = INITIAL_STATUS
    created_at: str = field(default_factory=_utc_now)

    @property
    def created_at_dt(self) -> datetime:
        return _parse_timestamp(self.created_at)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "user_name": self.user_name,
            "items": [i.to_dict() for i in self.items],
            "total_price": str(self.total_price),
            "payment_method": self.payment_method,
            "status": self.status.value,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Order":
        return cls(
            id=data["id"],
            user_id=data["user_id"],
            user_name=data["user_name"],
            items=[LineItem.from_dict(i) for i in data.get("items", [])],
            total_price=_to_decimal(data["total_price"]),
            payment_method=data.get("payment_method", ""),
            status=OrderStatus(data.get("status", INITIAL_STATUS.value)),
            created_at=data.get("created_at", ""),
        )

    @classmethod
    def create(
        cls,
        session: Session,
        items: list[LineItem],
        payment_method: str,
    ) -> "Order":
        """Create a pending order; the total is computed here and never again."""
        return cls(
            id=_generate_id(),
            user_id=session.id,
            user_name=session.name,
            items=list(items),
            total_price=sum((i.total for i in items), Decimal(0)),
            payment_method=payment_method,
            status=INITIAL_STATUS,
            created_at=_utc_now(),
        )


@dataclass
class OrderStatistics:
    """Aggregate numbers for the admin board."""

    total: int = 0
    pending_count: int = 0
    processing_count: int = 0
    completed_count: int = 0
    revenue: Decimal = Decimal(0)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "pending_count": self.pending_count,
            "processing_count": self.processing_count,
            "completed_count": self.completed_count,
            "revenue": str(self.revenue),
        }
