#!/usr/bin/env python3
"""
DDNS Updater - Command Line Interface

Main entry point for adding and deleting records from the shell.
"""

import argparse
import logging
import sys

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..core.errors import (
    AuthenticationFailure,
    ConfigurationError,
    ServerRejected,
    Timeout,
    TransportUnavailable,
    ValidationError,
)
from ..core.result import UpdateResult
from ..core.service import DDNSService
from ..utils.config import config_logger, load_config

console = Console()
logger = logging.getLogger(__name__)

# Most specific class first
EXIT_CODES = (
    (ValidationError, 2),
    (AuthenticationFailure, 3),
    (ServerRejected, 4),
    (Timeout, 5),
    (TransportUnavailable, 6),
    (ConfigurationError, 1),
)


def exit_code_for(error) -> int:
    for error_class, code in EXIT_CODES:
        if isinstance(error, error_class):
            return code
    return 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ddns-update",
        description="DDNS Updater - Signed dynamic DNS updates",
    )

    parser.add_argument(
        "--config",
        "-c",
        default=None,
        help="Configuration file path (defaults and DDNS_* variables otherwise)",
    )

    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose logging"
    )

    subparsers = parser.add_subparsers(dest="operation", required=True)

    add_parser = subparsers.add_parser("add", help="Add a record to the zone")
    add_parser.add_argument("name", help="Record name relative to the zone, or @")
    add_parser.add_argument("type", help="Record type (A, AAAA, CNAME, TXT, MX, NS, PTR)")
    add_parser.add_argument("value", help="Record data")
    add_parser.add_argument("--ttl", "-t", type=int, default=None, help="TTL in seconds")

    delete_parser = subparsers.add_parser("delete", help="Delete a record or RRset")
    delete_parser.add_argument("name", help="Record name relative to the zone, or @")
    delete_parser.add_argument("type", help="Record type")
    delete_parser.add_argument(
        "value", nargs="?", default=None, help="Record data; omit to delete the RRset"
    )

    for subparser in (add_parser, delete_parser):
        subparser.add_argument(
            "--dry-run",
            action="store_true",
            help="Show the update transaction without sending it",
        )

    return parser


def main(argv=None):
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
        config_logger(config, verbose=args.verbose)
        if args.dry_run:
            service = DDNSService(config, signing_key=None)
        else:
            service = DDNSService(config)
    except ConfigurationError as e:
        console.print(f"[red]Configuration error: {escape(e.message)}[/red]")
        sys.exit(exit_code_for(e))

    ttl = getattr(args, "ttl", None)

    if args.dry_run:
        try:
            text = service.preview(args.name, args.type, args.value, ttl, args.operation)
        except ValidationError as e:
            console.print(f"[red]Invalid request: {escape(e.message)}[/red]")
            sys.exit(exit_code_for(e))
        console.print("[yellow]DRY RUN MODE - No update will be sent[/yellow]")
        console.print(text, markup=False, highlight=False)
        sys.exit(0)

    if args.operation == "add":
        result = service.add_record(args.name, args.type, args.value, ttl)
    else:
        result = service.delete_record(args.name, args.type, args.value)

    _display_result(result)
    sys.exit(0 if result.ok else exit_code_for(result.error))


def _display_result(result: UpdateResult):
    """Display the outcome of an update."""
    if result.ok:
        table = Table(title="DNS Update")
        table.add_column("Operation", style="cyan")
        table.add_column("Name", style="magenta")
        table.add_column("Type", style="white")
        table.add_column("Server", style="white")
        table.add_column("Response", style="green")
        ack = result.ack
        table.add_row(
            ack.operation.value,
            ack.fqdn,
            ack.rdtype.value,
            f"{ack.server}:{ack.port}",
            ack.rcode,
        )
        console.print(table)
        console.print(f"[green]{result.to_dict()['message']}[/green]")
        return

    error = result.error
    console.print(f"[red]Error ({error.code}): {escape(error.message)}[/red]")
    if error.detail:
        console.print(f"[red]  {escape(error.detail)}[/red]")
    if result.retryable:
        console.print("[yellow]This error is transient; the update may be retried[/yellow]")


if __name__ == "__main__":
    main()
