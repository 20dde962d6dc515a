#!/usr/bin/env python3
"""
Command-line bulk import, same pipeline as the admin upload endpoints.

    python cli.py products  path/to/products.csv
    python cli.py categories path/to/categories.csv --db sqlite:///other.sqlite
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import config
from db import init_db, session_scope
from import_engine import ImportAborted, run_category_import, run_product_import

RUNNERS = {
    "products": run_product_import,
    "categories": run_category_import,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Bulk-import a products or categories CSV")
    parser.add_argument("kind", choices=sorted(RUNNERS), help="What the CSV contains")
    parser.add_argument("file_path", type=Path, help="Path to the CSV file")
    parser.add_argument("--db", default=config.DB_URL,
                        help=f"Database URL (default: {config.DB_URL})")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Log every skipped row and image lookup")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else config.LOG_LEVEL,
        format="%(levelname)-7s %(name)s: %(message)s",
    )

    if not args.file_path.is_file():
        print(f"No such file: {args.file_path}", file=sys.stderr)
        return 1

    init_db(args.db)
    content = args.file_path.read_bytes()

    print(f"Importing {args.kind} from {args.file_path} …")
    try:
        with session_scope() as session:
            report = RUNNERS[args.kind](session, content)
    except ImportAborted as exc:
        print(f"Import rejected: {exc}", file=sys.stderr)
        return 1

    print(f"Done: {report.inserted} inserted, "
          f"{report.skipped} skipped / {report.processed} rows")
    shown, remaining = report.error_preview()
    for err in shown:
        print(f"  Row {err['row']}: {err['error']}")
    if remaining:
        print(f"  … and {remaining} more")
    return 0


if __name__ == "__main__":
    sys.exit(main())
