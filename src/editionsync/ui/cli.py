from __future__ import annotations

import argparse
import json
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

import uvicorn
from dotenv import load_dotenv

from editionsync.app import check_product_integrity, sync_all_products
from editionsync.config import configure_logging

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Synchronise limited-edition numbers")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log at DEBUG level",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    sync = subparsers.add_parser("sync", help="Sync edition numbers of one or more products")
    sync.add_argument(
        "product_ids",
        nargs="+",
        help="Shopify product ids to synchronise",
    )
    sync.add_argument(
        "--force",
        action="store_true",
        help="Re-read the order feed even when the product already has rows",
    )

    check = subparsers.add_parser("check", help="Verify the edition ledger of a product")
    check.add_argument("product_id", help="Shopify product id to verify")

    serve = subparsers.add_parser("serve", help="Run the HTTP trigger")
    serve.add_argument("--host", type=str, default="127.0.0.1", help="Bind address")
    serve.add_argument("--port", type=int, default=8000, help="Bind port")

    return parser.parse_args(list(argv))


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    load_dotenv()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        if parsed_args.command == "sync":
            summary = sync_all_products(parsed_args.product_ids, force_sync=parsed_args.force)
            print(json.dumps(summary.to_payload(), indent=2))  # noqa: T201
            if summary.successful_products < summary.total_products:
                sys.exit(1)
        elif parsed_args.command == "check":
            report = check_product_integrity(parsed_args.product_id)
            print(json.dumps(report.to_payload(), indent=2))  # noqa: T201
            if not report.is_consistent:
                sys.exit(1)
        elif parsed_args.command == "serve":
            uvicorn.run("editionsync.ui.api:app", host=parsed_args.host, port=parsed_args.port)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except Exception:
        log.exception("Fatal error during %s", parsed_args.command)
        sys.exit(2)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


if __name__ == "__main__":
    signal(SIGINT, sigint_handler)
    main()
