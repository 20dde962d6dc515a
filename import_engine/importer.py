"""
import_engine.importer - Top-level orchestrator.

Coordinates csv_parser → provisioner → row_processor → DB and produces
a structured ImportReport.

Every row is committed on its own: a bad row is rolled back and
reported, rows before it stay imported.  Only problems that make the
whole upload meaningless (missing columns, unreachable store, failed
auto-provisioning) raise ImportAborted.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from db.engine import ping
from db.models import Brand, Category
from import_engine.asset_store import AssetStore
from import_engine.csv_parser import parse, missing_columns
from import_engine.image_resolver import ImageResolver
from import_engine.provisioner import ensure_references_exist
from import_engine.report import ImportReport
from import_engine.row_processor import (
    CategoryRowProcessor, ProductRowProcessor, RowError, RowProcessor,
)

logger = logging.getLogger(__name__)


class ImportAborted(Exception):
    """Fatal upload error; no rows were processed (status = HTTP status)."""

    def __init__(self, message: str, status: int = 400):
        super().__init__(message)
        self.status = status


class MissingColumnsError(ImportAborted):
    def __init__(self, missing: list[str]):
        super().__init__(f"Missing required columns: {', '.join(missing)}", 400)
        self.missing = missing


def run_product_import(
    session: Session,
    file_content: str | bytes,
    *,
    resolver: ImageResolver | None = None,
    store: AssetStore | None = None,
) -> ImportReport:
    """
    Import a products CSV.

    Required columns: productname, brand, category, picture, barcode.
    Unknown category / brand slugs are auto-created before the rows.
    """
    processor = ProductRowProcessor(resolver, store)
    grid = _prepare(session, file_content, processor)

    category_slugs, brand_slugs = processor.reference_slugs(grid)
    try:
        ensure_references_exist(session, Category, category_slugs)
        ensure_references_exist(session, Brand, brand_slugs)
    except SQLAlchemyError as exc:
        session.rollback()
        logger.error("Auto-provisioning failed: %s", exc)
        raise ImportAborted(f"Could not create missing categories/brands: {_db_message(exc)}",
                            500) from exc

    return _ingest(session, grid, processor)


def run_category_import(
    session: Session,
    file_content: str | bytes,
    *,
    resolver: ImageResolver | None = None,
    store: AssetStore | None = None,
) -> ImportReport:
    """Import a categories CSV.  Required columns: name, picture."""
    processor = CategoryRowProcessor(resolver, store)
    grid = _prepare(session, file_content, processor)
    return _ingest(session, grid, processor)


# ── Private helpers ────────────────────────────────────────────────────

def _prepare(session: Session, file_content: str | bytes, processor: RowProcessor):
    grid = parse(file_content)

    missing = missing_columns(grid, processor.required_columns)
    if missing:
        raise MissingColumnsError(missing)

    try:
        ping(session)
    except SQLAlchemyError as exc:
        logger.error("Store unreachable: %s", exc)
        raise ImportAborted(f"Database unavailable: {_db_message(exc)}", 500) from exc
    return grid


def _ingest(session: Session, grid, processor: RowProcessor) -> ImportReport:
    report = ImportReport()

    for row_idx, row in enumerate(grid.rows, start=2):   # row 1 = header
        entity = None
        try:
            entity = processor.process(session, grid, row)
            session.add(entity)
            session.commit()
            report.add_inserted()
        except RowError as exc:
            session.rollback()
            report.add_error(row_idx, str(exc))
        except IntegrityError as exc:
            session.rollback()
            if entity is not None and _is_unique_violation(exc):
                report.add_error(row_idx, processor.duplicate_message(entity))
            else:
                report.add_error(row_idx, _db_message(exc))
        except SQLAlchemyError as exc:
            session.rollback()
            report.add_error(row_idx, _db_message(exc))
        except OSError as exc:
            session.rollback()
            report.add_error(row_idx, f"Could not store picture: {exc}")

    logger.info("%s import: %d processed, %d inserted, %d skipped",
                processor.kind.capitalize(), report.processed,
                report.inserted, report.skipped)
    for err in report.errors:
        logger.debug("Row %d skipped: %s", err["row"], err["error"])
    return report


def _is_unique_violation(exc: IntegrityError) -> bool:
    text = str(exc.orig).lower()
    return "unique" in text or "duplicate" in text


def _db_message(exc: SQLAlchemyError) -> str:
    orig = getattr(exc, "orig", None)
    return str(orig) if orig is not None else str(exc)
