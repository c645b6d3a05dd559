"""Command-line interface for ramenku."""

import argparse
import json
import logging
import sys

from . import __version__, catalog
from .cart import CartLedger
from .checkout import PAYMENT_METHODS
from .config import Settings
from .errors import NotFoundError, RamenkuError, ValidationError
from .logging_config import setup_logging
from .models import TRANSITIONS, LineItem, Order, OrderStatus, parse_status
from .storefront import Storefront
from .utils import format_entry, format_line_item, format_order, format_rupiah, truncate_id


def get_storefront() -> Storefront:
    """Build a Storefront over the configured data directory."""
    return Storefront.from_settings(Settings.from_env())


def cmd_menu(args: argparse.Namespace) -> int:
    """Show the menu."""
    try:
        if args.entry_id:
            entries = [catalog.get_entry(args.entry_id)]
        else:
            entries = catalog.list_entries(args.category)

        if args.json:
            print(json.dumps([e.to_dict() for e in entries], indent=2))
            return 0

        if not entries:
            print("No menu entries found.")
            return 0

        for entry in entries:
            print(format_entry(entry, verbose=args.verbose or bool(args.entry_id)))
        return 0

    except RamenkuError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_register(args: argparse.Namespace) -> int:
    """Register an account and log in."""
    try:
        sf = get_storefront()
        session = sf.identity.register(args.name, args.email, args.password)
        print(f"Registered and logged in as {session.name} <{session.email}>")
        return 0

    except RamenkuError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_login(args: argparse.Namespace) -> int:
    try:
        sf = get_storefront()
        session = sf.identity.login(args.email, args.password)
        print(f"Logged in as {session.name} <{session.email}> ({session.role.value})")
        return 0

    except RamenkuError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_logout(args: argparse.Namespace) -> int:
    sf = get_storefront()
    sf.identity.logout()
    print("Logged out.")
    return 0


def cmd_whoami(args: argparse.Namespace) -> int:
    """Show the current session."""
    sf = get_storefront()
    session = sf.identity.current_session()
    if args.json:
        print(json.dumps(session.to_dict() if session else None, indent=2))
    elif session is None:
        print("Not logged in.")
    else:
        print(f"{session.name} <{session.email}> ({session.role.value})")
    return 0


def cmd_order(args: argparse.Namespace) -> int:
    """Put one configured bowl in a fresh cart and check out."""
    try:
        sf = get_storefront()
        entry = catalog.get_entry(args.entry_id)
        item = LineItem.create(
            entry,
            quantity=args.qty,
            spice_level=args.spice,
            topping_ids=args.topping,
            note=args.note or "",
        )
        cart = CartLedger()
        cart.add_item(item)

        if not args.json:
            print(f"  {format_line_item(item)}")
            print(f"Total: {format_rupiah(cart.total())}")
        if args.dry_run:
            print("Dry run - no order placed.")
            return 0

        if not args.json:
            print("Processing payment...")
        order = sf.checkout.checkout(cart, args.pay)

        if args.json:
            print(json.dumps(order.to_dict(), indent=2))
        else:
            print(f"Order placed: {truncate_id(order.id).upper()}")
            print(f"  Payment: {order.payment_method}")
            print(f"  Status: {order.status.value} (waiting for admin confirmation)")
        return 0

    except RamenkuError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_history(args: argparse.Namespace) -> int:
    """List the current user's orders."""
    sf = get_storefront()
    session = sf.identity.current_session()
    if session is None:
        print("Error: Not logged in. Log in or register first.", file=sys.stderr)
        return 1

    orders = sf.ledger.list_for(session.id)
    if args.json:
        print(json.dumps([o.to_dict() for o in orders], indent=2))
        return 0

    if not orders:
        print("No orders yet.")
        return 0

    print(f"Orders ({len(orders)}):")
    for order in orders:
        print(format_order(order, verbose=args.verbose))
    return 0


def cmd_admin_list(args: argparse.Namespace) -> int:
    """List all orders across users."""
    try:
        board = get_storefront().admin_board()
        status = parse_status(args.status) if args.status else None
        orders = board.list_all(status)

        if args.json:
            print(json.dumps([o.to_dict() for o in orders], indent=2))
            return 0

        if not orders:
            print("No orders found.")
            return 0

        print(f"Orders ({len(orders)}):")
        for order in orders:
            print(format_order(order, verbose=args.verbose))
        return 0

    except RamenkuError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_admin_stats(args: argparse.Namespace) -> int:
    try:
        stats = get_storefront().admin_board().statistics()

        if args.json:
            print(json.dumps(stats.to_dict(), indent=2))
        else:
            print(f"Total orders:  {stats.total}")
            print(f"Pending:       {stats.pending_count}")
            print(f"In progress:   {stats.processing_count}")
            print(f"Completed:     {stats.completed_count}")
            print(f"Revenue:       {format_rupiah(stats.revenue)}")
        return 0

    except RamenkuError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def _find_order(orders: list[Order], order_id: str) -> Order:
    """Find an order by ID or unique ID prefix."""
    matches = [o for o in orders if o.id.startswith(order_id)]
    if not matches:
        raise NotFoundError("Order", order_id)
    if len(matches) > 1:
        raise NotFoundError(
            "Order", f"{order_id} (ambiguous, matches {len(matches)} orders)"
        )
    return matches[0]


def cmd_admin_set_status(args: argparse.Namespace) -> int:
    """Move an order to its next status."""
    try:
        board = get_storefront().admin_board()
        order = _find_order(board.list_all(), args.order_id)

        if args.action:
            updated = board.apply_action(order.id, order.user_id, args.action)
        elif args.status:
            updated = board.set_status(order.id, order.user_id, parse_status(args.status))
        else:
            raise ValidationError("status", "provide --status or --action")

        if updated is None:
            print(f"Order {truncate_id(order.id)} no longer exists; nothing changed.")
            return 0

        print(f"Order {truncate_id(updated.id)}: {order.status.value} -> {updated.status.value}")
        return 0

    except RamenkuError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_serve(args: argparse.Namespace) -> int:
    """Start the API server."""
    try:
        import uvicorn

        settings = Settings.from_env()
        print("Starting ramenku API server...")
        print(f"Data directory: {settings.data_dir}")
        print(f"API docs: http://{args.host}:{args.port}/docs")
        print()

        # When reload is enabled, uvicorn requires the app as an import string
        app_target = "ramenku.api:app" if args.reload else None
        if app_target is None:
            from .api import app
            app_target = app

        uvicorn.run(
            app_target,
            host=args.host,
            port=args.port,
            reload=args.reload,
            workers=1,  # One process owns the session and cart
        )
        return 0

    except (ImportError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="ramenku",
        description="Order ramen, track orders and run the admin board.",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--log", action="store_true", help="Show log messages on stderr"
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # menu
    menu_parser = subparsers.add_parser("menu", help="Show the menu")
    menu_parser.add_argument("entry_id", nargs="?", help="Show one entry in detail")
    menu_parser.add_argument(
        "--category", "-c", help=f"Filter by category ({', '.join(catalog.categories())})"
    )
    menu_parser.add_argument(
        "--verbose", "-v", action="store_true", help="Show spice levels and toppings"
    )
    menu_parser.add_argument("--json", action="store_true", help="Output as JSON")

    # register
    register_parser = subparsers.add_parser("register", help="Create an account")
    register_parser.add_argument("name", help="Display name")
    register_parser.add_argument("email", help="Email (used to log in)")
    register_parser.add_argument("password", help="Password (at least 6 characters)")

    # login
    login_parser = subparsers.add_parser("login", help="Log in")
    login_parser.add_argument("email")
    login_parser.add_argument("password")

    # logout
    subparsers.add_parser("logout", help="Log out")

    # whoami
    whoami_parser = subparsers.add_parser("whoami", help="Show the current session")
    whoami_parser.add_argument("--json", action="store_true", help="Output as JSON")

    # order
    order_parser = subparsers.add_parser("order", help="Order a bowl and pay")
    order_parser.add_argument("entry_id", help="Menu entry ID (see 'ramenku menu')")
    order_parser.add_argument(
        "--qty", "-q", type=int, default=1, help="Quantity (default: 1)"
    )
    order_parser.add_argument(
        "--spice", "-s", help="Spice level (default: the entry's first level)"
    )
    order_parser.add_argument(
        "--topping", "-t", action="append", default=[], help="Topping ID (repeatable)"
    )
    order_parser.add_argument("--note", "-n", help="Special notes for the kitchen")
    order_parser.add_argument(
        "--pay", "-p", required=True, choices=sorted(PAYMENT_METHODS),
        help="Payment method",
    )
    order_parser.add_argument(
        "--dry-run", action="store_true", help="Show the total without ordering"
    )
    order_parser.add_argument("--json", action="store_true", help="Output as JSON")

    # history
    history_parser = subparsers.add_parser("history", help="List your orders")
    history_parser.add_argument(
        "--verbose", "-v", action="store_true", help="Show order lines"
    )
    history_parser.add_argument("--json", action="store_true", help="Output as JSON")

    # serve
    serve_parser = subparsers.add_parser("serve", help="Start the API server")
    serve_parser.add_argument(
        "--host", default="127.0.0.1", help="Host to bind to (default: 127.0.0.1)"
    )
    serve_parser.add_argument(
        "--port", "-p", type=int, default=8000, help="Port to bind to (default: 8000)"
    )
    serve_parser.add_argument(
        "--reload", action="store_true", help="Enable auto-reload for development"
    )

    # admin (subcommand group)
    admin_parser = subparsers.add_parser("admin", help="Admin order board")
    admin_subparsers = admin_parser.add_subparsers(dest="admin_command")

    # admin list
    admin_list_parser = admin_subparsers.add_parser("list", help="List all orders")
    admin_list_parser.add_argument(
        "--status", choices=[s.value for s in OrderStatus], help="Only this status"
    )
    admin_list_parser.add_argument(
        "--verbose", "-v", action="store_true", help="Show order lines"
    )
    admin_list_parser.add_argument("--json", action="store_true", help="Output as JSON")

    # admin stats
    admin_stats_parser = admin_subparsers.add_parser("stats", help="Order statistics")
    admin_stats_parser.add_argument("--json", action="store_true", help="Output as JSON")

    # admin set-status
    admin_status_parser = admin_subparsers.add_parser(
        "set-status", help="Move an order to its next status"
    )
    admin_status_parser.add_argument("order_id", help="Order ID (or prefix)")
    group = admin_status_parser.add_mutually_exclusive_group(required=True)
    group.add_argument(
        "--status", choices=[s.value for s in OrderStatus], help="Target status"
    )
    group.add_argument("--action", choices=list(TRANSITIONS), help="Named transition")

    return parser


def main() -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args()

    settings = Settings.from_env()
    setup_logging(settings.log_level if args.log else logging.WARNING)

    if not args.command:
        parser.print_help()
        return 0

    # Handle admin subcommands
    if args.command == "admin":
        if not hasattr(args, "admin_command") or not args.admin_command:
            parser.parse_args(["admin", "--help"])
            return 0
        if args.admin_command == "list":
            return cmd_admin_list(args)
        elif args.admin_command == "stats":
            return cmd_admin_stats(args)
        elif args.admin_command == "set-status":
            return cmd_admin_set_status(args)

    commands = {
        "menu": cmd_menu,
        "register": cmd_register,
        "login": cmd_login,
        "logout": cmd_logout,
        "whoami": cmd_whoami,
        "order": cmd_order,
        "history": cmd_history,
        "serve": cmd_serve,
    }

    cmd_func = commands.get(args.command)
    if cmd_func:
        return cmd_func(args)

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
