"""
import_engine.report - Structured result of a bulk upload.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import config


@dataclass
class ImportReport:
    processed: int = 0
    inserted: int = 0
    skipped: int = 0
    errors: list[dict] = field(default_factory=list)   # [{row, error}]

    def add_inserted(self):
        self.processed += 1
        self.inserted += 1

    def add_error(self, row: int, error: str):
        self.processed += 1
        self.skipped += 1
        self.errors.append({"row": row, "error": error})

    def error_preview(self, limit: int = config.ERROR_PREVIEW_LIMIT) -> tuple[list[dict], int]:
        """First `limit` errors plus how many were left out."""
        return self.errors[:limit], max(len(self.errors) - limit, 0)

    def to_dict(self) -> dict:
        return {
            "ok": True,
            "processed": self.processed,
            "inserted": self.inserted,
            "skipped": self.skipped,
            "errors": self.errors,
        }
