from __future__ import annotations

import argparse
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from sheetimport import __version__
from sheetimport.app import load_profile, run_sheet_import
from sheetimport.config import ConfigurationError, configure_logging, env_text

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)

PROFILE_ENV_VAR = "SHEETIMPORT_PROFILE"


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="sheetimport",
        description="Reconcile spreadsheet rows with the entity store",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    run = subparsers.add_parser("run", help="Import one worksheet")
    run.add_argument(
        "profile",
        nargs="?",
        help=f"Import profile as 'package.module:attribute' (defaults to ${PROFILE_ENV_VAR})",
    )
    run.add_argument("workbook", help="Path to the .xlsx workbook")
    run.add_argument(
        "--sheet",
        type=str,
        default="0",
        help="Worksheet index (0-based) or title (default: %(default)s)",
    )
    run.add_argument(
        "--header-row",
        type=int,
        default=None,
        help="Row holding the column labels (defaults to config)",
    )
    run.add_argument(
        "--fail-fast",
        action="store_true",
        default=None,
        help="Abort on the first row the store rejects (defaults to config)",
    )
    run.add_argument(
        "--database-uri",
        type=str,
        help="SQLAlchemy database URI (overrides DATABASE_URI)",
    )
    run.add_argument("-v", "--verbose", action="store_true", help="Log every row decision")

    return parser.parse_args(list(argv))


def _parse_sheet(value: str) -> int | str:
    stripped = value.strip()
    if not stripped:
        raise ValueError("Sheet must be an index or a title")
    return int(stripped) if stripped.isdigit() else stripped


def _resolve_profile_reference(args: argparse.Namespace) -> str:
    reference = args.profile or env_text(PROFILE_ENV_VAR)
    if not reference:
        raise ValueError(f"Missing import profile (pass one or set {PROFILE_ENV_VAR})")
    return reference


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    configure_logging()
    parsed_args: argparse.Namespace
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        sheet = _parse_sheet(parsed_args.sheet)
        if parsed_args.header_row is not None and parsed_args.header_row < 1:
            raise ValueError("Header row must be positive")
        profile = load_profile(_resolve_profile_reference(parsed_args))
    except (ValueError, ConfigurationError):
        log.exception("CLI validation error")
        sys.exit(2)

    if parsed_args.verbose:
        configure_logging(level=logging.DEBUG, force=True)

    try:
        report = run_sheet_import(
            profile=profile,
            workbook_path=parsed_args.workbook,
            sheet=sheet,
            fail_fast=parsed_args.fail_fast,
            header_row=parsed_args.header_row,
            database_uri=parsed_args.database_uri,
        )
    except ConfigurationError:
        log.exception("Configuration error")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error during import")
        sys.exit(1)

    if report.failed:
        log.error("Rows that failed: %s", ", ".join(map(str, report.failed_rows)))
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


if __name__ == "__main__":
    main()
