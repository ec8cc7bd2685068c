"""Command-line interface for transaction extraction and database setup.

Runs the screenshot extraction pipeline outside the web server and
exports the model's transactions as JSON or CSV.
"""

import argparse
import csv
import json
import sys
from pathlib import Path
from typing import Any

from chat_actions.actions.transactions import (
    count_transactions_by_date,
    extract_transactions,
)
from chat_actions.api.schemas import Transaction
from chat_actions.db.session import get_engine, init_db
from chat_actions.utils.config import load_config
from chat_actions.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)

_SUPPORTED_EXTENSIONS = (".png", ".jpg", ".jpeg", ".webp", ".gif")
_CSV_COLUMNS = list(Transaction.model_fields)


def _collect_images(paths: list[Path]) -> list[str]:
    """Expand directories and keep supported image files, in order.

    Args:
        paths: Image files or directories of images.

    Returns:
        Image references as strings.
    """
    refs: list[str] = []
    for path in paths:
        if path.is_dir():
            refs.extend(
                str(p)
                for p in sorted(path.iterdir())
                if p.suffix.lower() in _SUPPORTED_EXTENSIONS
            )
        else:
            refs.append(str(path))
    return refs


def _transaction_rows(payload: Any) -> list[dict[str, Any]]:
    """Pull transaction rows out of the model payload.

    Accepts either ``{"transactions": [...]}`` or a bare list.
    """
    if isinstance(payload, dict):
        payload = payload.get("transactions", [])
    if not isinstance(payload, list):
        return []
    return [row for row in payload if isinstance(row, dict)]


def _write_csv(rows: list[dict[str, Any]], output_path: Path) -> None:
    """Write transaction rows to a CSV file with a fixed column order."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=_CSV_COLUMNS, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(rows)


def run_extract(
    paths: list[Path],
    output: Path | None = None,
    with_counts: bool = False,
) -> int:
    """Extract transactions from screenshots and emit the result.

    Args:
        paths: Screenshot files or directories.
        output: ``.csv`` or ``.json`` destination. Prints JSON when omitted.
        with_counts: Ask for per-date counts first and pass them as hints.

    Returns:
        Process exit code.
    """
    refs = _collect_images(paths)
    if not refs:
        print("Error: no images found", file=sys.stderr)
        return 1

    config = load_config()
    expected_counts = None
    if with_counts:
        expected_counts = count_transactions_by_date(refs, config=config)

    payload = extract_transactions(
        refs, config=config, expected_counts=expected_counts
    )
    if payload is None:
        print("Error: transaction extraction failed", file=sys.stderr)
        return 2

    if output is not None and output.suffix.lower() == ".csv":
        rows = _transaction_rows(payload)
        _write_csv(rows, output)
        print(f"{len(rows)} transactions written to {output}")
        return 0

    output_str = json.dumps(payload, indent=2)
    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(output_str)
        print(f"Output written to {output}")
    else:
        print(output_str)
    return 0


def run_init_db() -> int:
    config = load_config()
    init_db(get_engine(config.database))
    return 0


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and dispatch to the appropriate command.

    Args:
        argv: Command-line arguments (defaults to sys.argv).
    """
    parser = argparse.ArgumentParser(
        description="Chat actions command-line tools",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    extract_parser = subparsers.add_parser(
        "extract", help="Extract card transactions from screenshots"
    )
    extract_parser.add_argument(
        "images", type=Path, nargs="+", help="Screenshot files or directories"
    )
    extract_parser.add_argument(
        "-o", "--output", type=Path, help="Output .csv or .json file"
    )
    extract_parser.add_argument(
        "--with-counts",
        action="store_true",
        help="Estimate per-date counts first and use them as a hint",
    )

    subparsers.add_parser("init-db", help="Create the chat database tables")

    args = parser.parse_args(argv)

    setup_logging()

    if args.command == "extract":
        missing = [p for p in args.images if not p.exists()]
        if missing:
            print(f"Error: {missing[0]} does not exist", file=sys.stderr)
            sys.exit(1)
        sys.exit(run_extract(args.images, args.output, args.with_counts))
    elif args.command == "init-db":
        sys.exit(run_init_db())
    else:
        parser.print_help()
        sys.exit(0)


if __name__ == "__main__":
    main()
