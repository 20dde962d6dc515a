"""
api.routes_bulk - CSV bulk-upload endpoints for products and categories.

Both accept a multipart upload in field 'file' and answer with the
ImportReport, or {error} when the upload is rejected as a whole.
"""

import logging

from flask import request, jsonify

from api import api_bp
from api.auth import require_admin
from db import session_scope
from import_engine import ImportAborted, run_category_import, run_product_import

logger = logging.getLogger(__name__)


@api_bp.route("/admin/products/bulk", methods=["POST"])
@require_admin
def bulk_upload_products():
    """
    POST /api/admin/products/bulk

    Required columns: productname, brand, category, picture, barcode.
    Optional: casesize, gross_weight, volume, palletqty, layerqty,
    status, promotion_type.
    """
    return _run_upload(run_product_import)


@api_bp.route("/admin/categories/bulk", methods=["POST"])
@require_admin
def bulk_upload_categories():
    """POST /api/admin/categories/bulk - required columns: name, picture."""
    return _run_upload(run_category_import)


def _run_upload(run_import):
    f = request.files.get("file")
    if not f:
        return jsonify({"error": "Missing CSV file (field name 'file')"}), 400
    content = f.read()

    try:
        with session_scope() as session:
            report = run_import(session, content)
    except ImportAborted as exc:
        logger.warning("Bulk upload of %s rejected: %s", f.filename, exc)
        return jsonify({"error": str(exc)}), exc.status

    return jsonify(report.to_dict())
