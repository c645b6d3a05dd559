"""In-memory cart for the active session."""

from decimal import Decimal

from .models import LineItem


class CartLedger:
    """Ordered line items. Not persisted; a new process starts empty."""

    def __init__(self, items: list[LineItem] | None = None):
        self._items: list[LineItem] = list(items or [])

    @property
    def items(self) -> list[LineItem]:
        return list(self._items)

    @property
    def is_empty(self) -> bool:
        return not self._items

    def __len__(self) -> int:
        return len(self._items)

    def add_item(self, item: LineItem) -> None:
        """Append an item. Identical configurations are kept as separate lines."""
        self._items.append(item)

    def remove_item(self, index: int) -> LineItem | None:
        """Remove the item at index; out-of-range indexes are ignored."""
        if 0 <= index < len(self._items):
            return self._items.pop(index)
        return None

    def clear(self) -> None:
        self._items = []

    def total(self) -> Decimal:
        return sum((item.total for item in self._items), Decimal(0))
