"""
db.models - SQLAlchemy ORM declarations.

Tables
------
categories - one row per category slug.  Product rows reference the slug.
brands     - same shape as categories.
products   - one row per unique barcode.  category / brand are slugs with
             foreign keys, so a product can only point at rows that exist
             (the bulk importer auto-creates missing ones first).
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (
    Boolean, Column, DateTime, ForeignKey, Integer, String, Text,
)
from sqlalchemy.orm import DeclarativeBase


def _utcnow():
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class _PictureColumns:
    """Columns shared by categories and brands."""

    id          = Column(Integer, primary_key=True, autoincrement=True)
    name        = Column(String(200), nullable=False)
    slug        = Column(String(200), nullable=False, unique=True, index=True)
    picture     = Column(String(500), nullable=False)
    picture_key = Column(String(500), default="")
    mime_type   = Column(String(100), nullable=True)
    size_bytes  = Column(Integer, nullable=True)
    width       = Column(Integer, nullable=True)
    height      = Column(Integer, nullable=True)

    created_at = Column(DateTime, default=_utcnow)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "picture": self.picture,
            "mime_type": self.mime_type,
            "size_bytes": self.size_bytes,
            "width": self.width,
            "height": self.height,
            "created_at": self.created_at.isoformat() if self.created_at else "",
        }


class Category(_PictureColumns, Base):
    __tablename__ = "categories"


class Brand(_PictureColumns, Base):
    __tablename__ = "brands"


class Product(Base):
    __tablename__ = "products"

    id          = Column(Integer, primary_key=True, autoincrement=True)
    productname = Column(String(300), nullable=False, index=True)
    brand       = Column(String(200), ForeignKey("brands.slug"),
                         nullable=False, index=True)
    category    = Column(String(200), ForeignKey("categories.slug"),
                         nullable=False, index=True)
    picture     = Column(String(500), nullable=False)
    barcode     = Column(String(100), nullable=False, unique=True, index=True)

    # ── Free-text packaging details straight from the spreadsheet ──────
    case_size    = Column(String(100), default="")
    gross_weight = Column(String(100), nullable=True)
    volume       = Column(String(100), nullable=True)
    pallet_qty   = Column(Integer, nullable=True)
    layer_qty    = Column(Integer, nullable=False, default=0)

    status         = Column(String(20), nullable=False, default="AVAILABLE")
    promotion_type = Column(String(20), nullable=True)   # MONTHLY | SEASONAL
    is_top_selling = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, default=_utcnow)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "productname": self.productname,
            "brand": self.brand,
            "category": self.category,
            "picture": self.picture,
            "barcode": self.barcode,
            "caseSize": self.case_size or "",
            "gross_weight": self.gross_weight,
            "volume": self.volume,
            "palletQty": self.pallet_qty,
            "layerQty": self.layer_qty,
            "status": self.status,
            "promotion_type": self.promotion_type,
            "is_top_selling": bool(self.is_top_selling),
            "created_at": self.created_at.isoformat() if self.created_at else "",
        }
