"""
services - Catalog queries used by the admin API (listing, bulk delete).
"""

from services.catalog_service import CatalogService   # noqa: F401
