"""
services.catalog_service - Product listing and bulk removal.

All session management is the caller's responsibility (open before,
close/commit after), same as the import engine.
"""

from __future__ import annotations

from sqlalchemy import delete
from sqlalchemy.orm import Query, Session

from db.models import Product


class CatalogService:

    # Sortable columns mapping
    SORTABLE_COLUMNS = {
        "id": Product.id,
        "productname": Product.productname,
        "brand": Product.brand,
        "category": Product.category,
        "barcode": Product.barcode,
        "status": Product.status,
        "created_at": Product.created_at,
    }

    @staticmethod
    def search(
        session: Session,
        *,
        q: str = "",
        category: str = "",
        brand: str = "",
        status: str = "",
        sort_by: str = "created_at",
        sort_order: str = "desc",
        limit: int = 100,
        offset: int = 0,
    ) -> tuple[list[Product], int]:
        """
        Search products.  Returns (products_list, total_count).
        """
        query = session.query(Product)
        query = CatalogService._apply_filters(
            query, q=q, category=category, brand=brand, status=status,
        )
        total = query.count()

        sort_col = CatalogService.SORTABLE_COLUMNS.get(sort_by, Product.created_at)
        if sort_order == "desc":
            query = query.order_by(sort_col.desc(), Product.id.desc())
        else:
            query = query.order_by(sort_col.asc(), Product.id.asc())
        return query.offset(offset).limit(limit).all(), total

    @staticmethod
    def bulk_delete(session: Session, ids: list[int]) -> int:
        """Delete products by id; returns the number of rows removed."""
        if not ids:
            return 0
        result = session.execute(delete(Product).where(Product.id.in_(ids)))
        session.flush()
        return result.rowcount or 0

    # ── Internal ───────────────────────────────────────────────────────

    @staticmethod
    def _apply_filters(query: Query, *, q: str, category: str, brand: str,
                       status: str) -> Query:
        if category:
            query = query.filter(Product.category == category.lower())
        if brand:
            query = query.filter(Product.brand == brand.lower())
        if status:
            query = query.filter(Product.status == status.upper())
        if q:
            like = f"%{q}%"
            query = query.filter(
                Product.productname.ilike(like)
                | Product.barcode.ilike(like)
                | Product.brand.ilike(like)
                | Product.category.ilike(like)
            )
        return query
