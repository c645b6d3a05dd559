"""Static menu data and lookups."""

from decimal import Decimal

from .errors import MenuEntryNotFoundError
from .models import MenuEntry, Topping

# --- Menu Data ---

SPICE_LEVELS = ("Tidak Pedas", "Sedang", "Pedas", "Extra Pedas")

EGG = Topping("ajitama", "Telur Ajitama", Decimal("5000"))
CHASHU = Topping("chashu", "Extra Chashu", Decimal("12000"))
NORI = Topping("nori", "Nori", Decimal("3000"))
CORN = Topping("corn", "Jagung Manis", Decimal("4000"))
BUTTER = Topping("butter", "Butter", Decimal("4000"))
MENMA = Topping("menma", "Menma", Decimal("3000"))
TOFU = Topping("tofu", "Tahu Goreng", Decimal("5000"))
CHEESE = Topping("cheese", "Keju Mozzarella", Decimal("7000"))

MENU: tuple[MenuEntry, ...] = (
    MenuEntry(
        id="shoyu-ramen",
        name="Shoyu Ramen",
        description="Kaldu ayam bening dengan kecap asin Jepang, chashu dan telur.",
        price=Decimal("45000"),
        image="/images/shoyu-ramen.jpg",
        category="Classic",
        spice_levels=SPICE_LEVELS,
        toppings=(EGG, CHASHU, NORI, MENMA),
        rating=4.8,
        popular=True,
    ),
    MenuEntry(
        id="tonkotsu-ramen",
        name="Tonkotsu Ramen",
        description="Kaldu tulang babi kental dimasak 12 jam dengan bawang putih hitam.",
        price=Decimal("55000"),
        image="/images/tonkotsu-ramen.jpg",
        category="Classic",
        spice_levels=SPICE_LEVELS,
        toppings=(EGG, CHASHU, NORI, MENMA, CORN),
        rating=4.9,
        popular=True,
    ),
    MenuEntry(
        id="miso-ramen",
        name="Miso Ramen",
        description="Kaldu miso Hokkaido dengan jagung manis dan butter.",
        price=Decimal("50000"),
        image="/images/miso-ramen.jpg",
        category="Classic",
        spice_levels=SPICE_LEVELS,
        toppings=(EGG, CHASHU, CORN, BUTTER),
        rating=4.7,
    ),
    MenuEntry(
        id="tantanmen",
        name="Spicy Tantanmen",
        description="Kaldu wijen pedas dengan daging cincang dan minyak cabai.",
        price=Decimal("52000"),
        image="/images/tantanmen.jpg",
        category="Spicy",
        spice_levels=("Sedang", "Pedas", "Extra Pedas"),
        toppings=(EGG, CHASHU, NORI, CHEESE),
        rating=4.8,
        popular=True,
    ),
    MenuEntry(
        id="jigoku-ramen",
        name="Jigoku Ramen",
        description="Ramen neraka dengan lima jenis cabai. Hanya untuk pemberani.",
        price=Decimal("58000"),
        image="/images/jigoku-ramen.jpg",
        category="Spicy",
        spice_levels=("Pedas", "Extra Pedas"),
        toppings=(EGG, CHASHU, CHEESE),
        rating=4.6,
    ),
    MenuEntry(
        id="vegan-shio",
        name="Vegan Shio Ramen",
        description="Kaldu rumput laut dan jamur shiitake dengan sayuran musiman.",
        price=Decimal("42000"),
        image="/images/vegan-shio.jpg",
        category="Vegetarian",
        spice_levels=SPICE_LEVELS,
        toppings=(NORI, CORN, MENMA, TOFU),
        rating=4.5,
    ),
    MenuEntry(
        id="gyoza",
        name="Gyoza (5 pcs)",
        description="Pangsit goreng isi ayam dan kucai dengan saus ponzu.",
        price=Decimal("25000"),
        image="/images/gyoza.jpg",
        category="Side",
        rating=4.6,
    ),
)


def list_entries(category: str | None = None) -> list[MenuEntry]:
    """List menu entries, optionally only one category (case-insensitive)."""
    if not category:
        return list(MENU)
    wanted = category.casefold()
    return [e for e in MENU if e.category.casefold() == wanted]


def categories() -> list[str]:
    """Category labels in menu order."""
    seen: list[str] = []
    for entry in MENU:
        if entry.category not in seen:
            seen.append(entry.category)
    return seen


def get_entry(entry_id: str) -> MenuEntry:
    """
    Get a menu entry by ID.

    Raises:
        MenuEntryNotFoundError: If no entry has this ID.
    """
    for entry in MENU:
        if entry.id == entry_id:
            return entry
    raise MenuEntryNotFoundError(entry_id)
