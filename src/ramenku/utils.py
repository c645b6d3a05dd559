"""Display helpers for ramenku."""

from decimal import Decimal

from .models import LineItem, MenuEntry, Order


def format_rupiah(amount: Decimal | int) -> str:
    """Format an amount as Indonesian rupiah, e.g. 'Rp 100.000'."""
    rounded = int(Decimal(amount).quantize(Decimal(1)))
    sign = "-" if rounded < 0 else ""
    grouped = f"{abs(rounded):,}".replace(",", ".")
    return f"{sign}Rp {grouped}"


def truncate_id(record_id: str) -> str:
    """Truncate an ID for display."""
    return record_id[:8]


def format_entry(entry: MenuEntry, verbose: bool = False) -> str:
    """Format a menu entry for display."""
    star = " *" if entry.popular else ""
    result = f"{entry.id:<16} {entry.name}{star}  {format_rupiah(entry.price)}  [{entry.category}]"
    if verbose:
        result += f"\n{'':<17}{entry.description}"
        if entry.spice_levels:
            result += f"\n{'':<17}Spice: {', '.join(entry.spice_levels)}"
        for t in entry.toppings:
            result += f"\n{'':<17}+ {t.id}: {t.name} ({format_rupiah(t.price)})"
    return result


def format_line_item(item: LineItem) -> str:
    result = f"{item.quantity}x {item.entry.name}"
    if item.spice_level:
        result += f" ({item.spice_level})"
    if item.toppings:
        result += " + " + ", ".join(t.name for t in item.toppings)
    result += f"  {format_rupiah(item.total)}"
    if item.note:
        result += f"\n      Note: {item.note}"
    return result


def format_order(order: Order, verbose: bool = False) -> str:
    """Format an order for display."""
    result = (
        f"{truncate_id(order.id)}  {order.created_at[:19].replace('T', ' ')}  "
        f"{order.user_name}  {format_rupiah(order.total_price)}  ({order.status.value})"
    )
    if verbose:
        result += f"\n    Payment: {order.payment_method}"
        for item in order.items:
            result += f"\n    - {format_line_item(item)}"
    return result
