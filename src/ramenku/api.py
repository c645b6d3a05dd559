"""FastAPI REST API for the ramenku storefront."""

from decimal import Decimal
from typing import Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from . import __version__, catalog
from .checkout import PAYMENT_METHODS
from .config import Settings
from .errors import (
    DuplicateEmailError,
    EmptyCartError,
    InvalidCredentialError,
    InvalidStatusTransitionError,
    NotAuthenticatedError,
    NotFoundError,
    PermissionDeniedError,
    RamenkuError,
    ValidationError,
)
from .logging_config import get_logger, setup_logging
from .models import (
    LineItem,
    MenuEntry,
    Order,
    Session,
    Topping,
    available_actions,
    parse_status,
)
from .storefront import Storefront

logger = get_logger(__name__)


# --- Pydantic Schemas ---


class ToppingSchema(BaseModel):
    id: str
    name: str
    price: Decimal


class MenuEntrySchema(BaseModel):
    id: str
    name: str
    description: str
    price: Decimal
    image: str
    category: str
    spice_levels: list[str]
    toppings: list[ToppingSchema]
    rating: Optional[float] = None
    popular: bool = False


class MenuListResponse(BaseModel):
    entries: list[MenuEntrySchema]
    categories: list[str]
    count: int


class LineItemSchema(BaseModel):
    entry_id: str
    name: str
    quantity: int
    spice_level: Optional[str] = None
    toppings: list[ToppingSchema]
    note: str = ""
    unit_price: Decimal
    total: Decimal


class CartSchema(BaseModel):
    items: list[LineItemSchema]
    count: int
    total: Decimal


class AddCartItemRequest(BaseModel):
    """Request body for adding a bowl to the cart."""

    entry_id: str
    quantity: int = Field(default=1, ge=1)
    spice_level: Optional[str] = Field(
        default=None, description="Defaults to the entry's first spice level"
    )
    toppings: list[str] = Field(default_factory=list, description="Topping IDs")
    note: str = ""


class SessionSchema(BaseModel):
    id: str
    name: str
    email: str
    role: str


class SessionResponse(BaseModel):
    session: Optional[SessionSchema]
    is_authenticated: bool
    is_admin: bool


class RegisterRequest(BaseModel):
    name: str = ""
    email: str = ""
    password: str = ""


class LoginRequest(BaseModel):
    email: str = ""
    password: str = ""


class CheckoutRequest(BaseModel):
    payment_method: str = Field(
        default="", description=f"One of: {', '.join(PAYMENT_METHODS)}"
    )


class OrderSchema(BaseModel):
    id: str
    user_id: str
    user_name: str
    items: list[LineItemSchema]
    total_price: Decimal
    payment_method: str
    status: str
    created_at: str
    available_actions: list[str]


class OrderListResponse(BaseModel):
    orders: list[OrderSchema]
    count: int


class StatusUpdateRequest(BaseModel):
    """Either a target status or a named action (confirm, reject, ...)."""

    status: Optional[str] = None
    action: Optional[str] = None


class StatusUpdateResponse(BaseModel):
    updated: bool
    order: Optional[OrderSchema] = None


class StatisticsSchema(BaseModel):
    total: int
    pending_count: int
    processing_count: int
    completed_count: int
    revenue: Decimal


class ErrorResponse(BaseModel):
    detail: str
    error_type: str


# --- Helper Functions ---


_storefront: Storefront | None = None


def get_storefront() -> Storefront:
    """Get the process-wide Storefront (one session, one cart)."""
    global _storefront
    if _storefront is None:
        settings = Settings.from_env()
        setup_logging(settings.log_level)
        _storefront = Storefront.from_settings(settings)
        logger.info("Storefront data directory: %s", settings.data_dir)
    return _storefront


def topping_to_schema(topping: Topping) -> ToppingSchema:
    return ToppingSchema(id=topping.id, name=topping.name, price=topping.price)


def entry_to_schema(entry: MenuEntry) -> MenuEntrySchema:
    return MenuEntrySchema(
        id=entry.id,
        name=entry.name,
        description=entry.description,
        price=entry.price,
        image=entry.image,
        category=entry.category,
        spice_levels=list(entry.spice_levels),
        toppings=[topping_to_schema(t) for t in entry.toppings],
        rating=entry.rating,
        popular=entry.popular,
    )


def line_item_to_schema(item: LineItem) -> LineItemSchema:
    return LineItemSchema(
        entry_id=item.entry.id,
        name=item.entry.name,
        quantity=item.quantity,
        spice_level=item.spice_level,
        toppings=[topping_to_schema(t) for t in item.toppings],
        note=item.note,
        unit_price=item.unit_price,
        total=item.total,
    )


def order_to_schema(order: Order) -> OrderSchema:
    """Convert dataclass Order to Pydantic schema."""
    return OrderSchema(
        id=order.id,
        user_id=order.user_id,
        user_name=order.user_name,
        items=[line_item_to_schema(i) for i in order.items],
        total_price=order.total_price,
        payment_method=order.payment_method,
        status=order.status.value,
        created_at=order.created_at,
        available_actions=available_actions(order.status),
    )


def session_to_response(session: Session | None) -> SessionResponse:
    return SessionResponse(
        session=SessionSchema(**session.to_dict()) if session else None,
        is_authenticated=session is not None,
        is_admin=bool(session and session.is_admin),
    )


def cart_to_schema(sf: Storefront) -> CartSchema:
    return CartSchema(
        items=[line_item_to_schema(i) for i in sf.cart.items],
        count=len(sf.cart),
        total=sf.cart.total(),
    )


def require_session(sf: Storefront) -> Session:
    session = sf.identity.current_session()
    if session is None:
        raise NotAuthenticatedError()
    return session


# --- FastAPI App ---


app = FastAPI(
    title="ramenku API",
    description="Ramen ordering storefront: menu, cart, checkout and admin board",
    version=__version__,
)

# CORS for local development
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:5173",
        "http://localhost:8080",
        "http://127.0.0.1:5173",
        "http://127.0.0.1:8080",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Global Exception Handler ---


# Map exception types to HTTP status codes (subclasses inherit their base's code)
ERROR_STATUS_CODES: dict[type, int] = {
    ValidationError: 400,
    EmptyCartError: 400,
    NotAuthenticatedError: 401,
    InvalidCredentialError: 401,
    PermissionDeniedError: 403,
    NotFoundError: 404,
    DuplicateEmailError: 409,
    InvalidStatusTransitionError: 409,
}


def status_code_for(exc: RamenkuError) -> int:
    for cls in type(exc).__mro__:
        if cls in ERROR_STATUS_CODES:
            return ERROR_STATUS_CODES[cls]
    return 500


@app.exception_handler(RamenkuError)
async def ramenku_error_handler(request: Request, exc: RamenkuError) -> JSONResponse:
    """Map RamenkuError subclasses to appropriate HTTP responses."""
    return JSONResponse(
        status_code=status_code_for(exc),
        content={"detail": str(exc), "error_type": type(exc).__name__},
    )


# --- Endpoints ---


@app.get("/api/health")
def health_check(sf: Storefront = Depends(get_storefront)):
    """Health check endpoint."""
    try:
        accounts = sf.identity.list_accounts()
        return {"status": "ok", "account_count": len(accounts)}
    except (OSError, ValueError) as e:
        return {"status": "error", "detail": str(e)}


# --- Menu Endpoints ---


@app.get("/api/menu", response_model=MenuListResponse)
def list_menu(category: Optional[str] = Query(default=None)):
    """List menu entries, optionally filtered by category."""
    entries = catalog.list_entries(category)
    return MenuListResponse(
        entries=[entry_to_schema(e) for e in entries],
        categories=catalog.categories(),
        count=len(entries),
    )


@app.get("/api/menu/{entry_id}", response_model=MenuEntrySchema)
def get_menu_entry(entry_id: str):
    return entry_to_schema(catalog.get_entry(entry_id))


# --- Auth Endpoints ---


@app.post("/api/auth/register", response_model=SessionResponse, status_code=201)
def register(request: RegisterRequest, sf: Storefront = Depends(get_storefront)):
    """Register a new account and log it in."""
    session = sf.identity.register(request.name, request.email, request.password)
    return session_to_response(session)


@app.post("/api/auth/login", response_model=SessionResponse)
def login(request: LoginRequest, sf: Storefront = Depends(get_storefront)):
    session = sf.identity.login(request.email, request.password)
    return session_to_response(session)


@app.post("/api/auth/logout", response_model=SessionResponse)
def logout(sf: Storefront = Depends(get_storefront)):
    sf.identity.logout()
    return session_to_response(None)


@app.get("/api/auth/session", response_model=SessionResponse)
def current_session(sf: Storefront = Depends(get_storefront)):
    return session_to_response(sf.identity.current_session())


# --- Cart Endpoints ---


@app.get("/api/cart", response_model=CartSchema)
def get_cart(sf: Storefront = Depends(get_storefront)):
    return cart_to_schema(sf)


@app.post("/api/cart/items", response_model=CartSchema, status_code=201)
def add_cart_item(request: AddCartItemRequest, sf: Storefront = Depends(get_storefront)):
    """Add a configured bowl to the cart."""
    entry = catalog.get_entry(request.entry_id)
    item = LineItem.create(
        entry,
        quantity=request.quantity,
        spice_level=request.spice_level,
        topping_ids=request.toppings,
        note=request.note,
    )
    sf.cart.add_item(item)
    return cart_to_schema(sf)


@app.delete("/api/cart/items/{index}", response_model=CartSchema)
def remove_cart_item(index: int, sf: Storefront = Depends(get_storefront)):
    """Remove a cart line by position. Unknown positions are ignored."""
    sf.cart.remove_item(index)
    return cart_to_schema(sf)


@app.delete("/api/cart", response_model=CartSchema)
def clear_cart(sf: Storefront = Depends(get_storefront)):
    sf.cart.clear()
    return cart_to_schema(sf)


# --- Order Endpoints ---


@app.post("/api/checkout", response_model=OrderSchema, status_code=201)
def checkout(request: CheckoutRequest, sf: Storefront = Depends(get_storefront)):
    """Pay for the cart (simulated) and record the order."""
    order = sf.checkout.checkout(sf.cart, request.payment_method)
    return order_to_schema(order)


@app.get("/api/orders", response_model=OrderListResponse)
def list_my_orders(sf: Storefront = Depends(get_storefront)):
    """Order history for the logged-in user, newest first."""
    session = require_session(sf)
    orders = sf.ledger.list_for(session.id)
    return OrderListResponse(
        orders=[order_to_schema(o) for o in orders],
        count=len(orders),
    )


@app.get("/api/orders/{order_id}", response_model=OrderSchema)
def get_my_order(order_id: str, sf: Storefront = Depends(get_storefront)):
    session = require_session(sf)
    order = sf.ledger.get(session.id, order_id)
    if order is None:
        raise NotFoundError("Order", order_id)
    return order_to_schema(order)


# --- Admin Endpoints ---


@app.get("/api/admin/orders", response_model=OrderListResponse)
def admin_list_orders(
    status: Optional[str] = Query(default=None, description="Only orders in this status"),
    sf: Storefront = Depends(get_storefront),
):
    """All users' orders, newest first."""
    board = sf.admin_board()
    orders = board.list_all(parse_status(status) if status else None)
    return OrderListResponse(
        orders=[order_to_schema(o) for o in orders],
        count=len(orders),
    )


@app.post(
    "/api/admin/orders/{user_id}/{order_id}/status",
    response_model=StatusUpdateResponse,
)
def admin_set_status(
    user_id: str,
    order_id: str,
    request: StatusUpdateRequest,
    sf: Storefront = Depends(get_storefront),
):
    """
    Move an order one step through its lifecycle.

    An unknown order is not an error: the response has updated=false.
    """
    board = sf.admin_board()
    if request.action:
        order = board.apply_action(order_id, user_id, request.action)
    elif request.status:
        order = board.set_status(order_id, user_id, parse_status(request.status))
    else:
        raise ValidationError("status", "provide a status or an action")

    return StatusUpdateResponse(
        updated=order is not None,
        order=order_to_schema(order) if order else None,
    )


@app.get("/api/admin/stats", response_model=StatisticsSchema)
def admin_statistics(sf: Storefront = Depends(get_storefront)):
    stats = sf.admin_board().statistics()
    return StatisticsSchema(
        total=stats.total,
        pending_count=stats.pending_count,
        processing_count=stats.processing_count,
        completed_count=stats.completed_count,
        revenue=stats.revenue,
    )

