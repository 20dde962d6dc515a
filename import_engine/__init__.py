"""
import_engine - CSV bulk-upload pipeline.

Public API:
    run_product_import(session, file_content)  → ImportReport
    run_category_import(session, file_content) → ImportReport
    ImportAborted                              → fatal, whole upload rejected
"""

from import_engine.importer import (                            # noqa: F401
    ImportAborted, MissingColumnsError, run_category_import, run_product_import,
)
from import_engine.report import ImportReport                   # noqa: F401
