"""
import_engine.row_processor - Validate and transform one CSV row into an entity.

Single-responsibility: given a session and a grid row, either return a
Product / Category ready to be added, or raise RowError.  Pictures are
resolved and written only once the text fields and the natural key have
passed, so skipped rows leave no files behind.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy.orm import Session

from db.models import Category, Product
from import_engine.asset_store import AssetStore, StoredAsset
from import_engine.csv_parser import CsvGrid
from import_engine.image_resolver import ImageResolver
from import_engine.normalizers import (
    find_picture_fallback, normalize_picture, slugify, to_positive_int_loose,
)

PROMOTION_TYPES = frozenset({"MONTHLY", "SEASONAL"})


class RowError(Exception):
    """Raised when a row cannot be imported."""
    pass


class RowProcessor:
    """Shared picture / validation plumbing; subclasses map the columns."""

    kind = ""
    model = None
    natural_key = ""
    required_columns: tuple[str, ...] = ()

    def __init__(self, resolver: ImageResolver | None = None,
                 store: AssetStore | None = None):
        self.store = store or AssetStore.for_kind(self.kind)
        self.resolver = resolver or ImageResolver(self.store.public_prefix)

    def process(self, session: Session, grid: CsvGrid, row: list[str]):
        raise NotImplementedError

    def duplicate_message(self, entity) -> str:
        return f"Duplicate {self.natural_key} {getattr(entity, self.natural_key)}"

    # ── Helpers for subclasses ─────────────────────────────────────────

    @staticmethod
    def picture_value(grid: CsvGrid, row: list[str]) -> tuple[str, str]:
        """(raw cell, normalized reference) with the whole-row fallback applied."""
        raw = grid.cell(row, "picture")
        return raw, normalize_picture(raw) or find_picture_fallback(row)

    @staticmethod
    def check_required(fields: list[tuple[str, str]], picture: str, picture_raw: str):
        missing = [name for name, value in fields if not value]
        if not picture:
            missing.append("picture")
        if missing:
            raise RowError(_missing_message(missing, picture_raw))

    def check_unique(self, session: Session, value: str):
        column = getattr(self.model, self.natural_key)
        if session.query(self.model.id).filter(column == value).first():
            raise RowError(f"Duplicate {self.natural_key} {value}")

    def store_picture(self, picture: str, picture_raw: str) -> StoredAsset:
        resolved = self.resolver.resolve(picture)
        if resolved is None:
            raise RowError(_missing_message(["picture"], picture_raw))
        return self.store.store(resolved)


class ProductRowProcessor(RowProcessor):
    kind = "products"
    model = Product
    natural_key = "barcode"
    required_columns = ("productname", "brand", "category", "picture", "barcode")

    @staticmethod
    def reference_slugs(grid: CsvGrid) -> tuple[list[str], list[str]]:
        """Distinct (category, brand) slugs in first-seen order."""
        categories: dict[str, None] = {}
        brands: dict[str, None] = {}
        for row in grid.rows:
            cat = grid.cell(row, "category").strip().lower()
            brand = grid.cell(row, "brand").strip().lower()
            if cat:
                categories[cat] = None
            if brand:
                brands[brand] = None
        return list(categories), list(brands)

    def process(self, session: Session, grid: CsvGrid, row: list[str]) -> Product:
        productname = grid.cell(row, "productname").strip()
        brand = grid.cell(row, "brand").strip().lower()
        category = grid.cell(row, "category").strip().lower()
        barcode = grid.cell(row, "barcode").strip()
        picture_raw, picture = self.picture_value(grid, row)

        self.check_required(
            [("productname", productname), ("brand", brand),
             ("category", category), ("barcode", barcode)],
            picture, picture_raw,
        )
        self.check_unique(session, barcode)
        asset = self.store_picture(picture, picture_raw)

        layer_qty = to_positive_int_loose(grid.cell(row, "layerqty"))
        status = grid.cell(row, "status").strip().upper()
        promotion = grid.cell(row, "promotion_type").strip().upper()

        return Product(
            productname=productname,
            brand=brand,
            category=category,
            picture=asset.public_path,
            barcode=barcode,
            case_size=grid.cell(row, "casesize").strip(),
            gross_weight=grid.cell(row, "gross_weight").strip() or None,
            volume=grid.cell(row, "volume").strip() or None,
            pallet_qty=to_positive_int_loose(grid.cell(row, "palletqty")),
            layer_qty=layer_qty if layer_qty is not None else 0,
            status="UNAVAILABLE" if status == "UNAVAILABLE" else "AVAILABLE",
            promotion_type=promotion if promotion in PROMOTION_TYPES else None,
        )


class CategoryRowProcessor(RowProcessor):
    kind = "categories"
    model = Category
    natural_key = "slug"
    required_columns = ("name", "picture")

    def process(self, session: Session, grid: CsvGrid, row: list[str]) -> Category:
        name = grid.cell(row, "name").strip()
        picture_raw, picture = self.picture_value(grid, row)

        self.check_required([("name", name)], picture, picture_raw)
        slug = slugify(grid.cell(row, "slug")) or slugify(name) or "category"
        self.check_unique(session, slug)
        asset = self.store_picture(picture, picture_raw)

        return Category(
            name=name,
            slug=slug,
            picture=asset.public_path,
            picture_key=asset.public_path,
            mime_type=asset.content_type or None,
            size_bytes=asset.size_bytes,
            width=asset.width,
            height=asset.height,
        )


def _missing_message(fields: list[str], picture_raw: Optional[str]) -> str:
    msg = f"missing: {', '.join(fields)}"
    if "picture" in fields and picture_raw and picture_raw.strip():
        msg += f" | picture_raw={picture_raw.strip()[:120]}"
    return msg
