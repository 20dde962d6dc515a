"""
api.routes_products - Admin product listing and bulk delete.
"""

from flask import request, jsonify

from api import api_bp
from api.auth import require_admin
from db import session_scope
from services.catalog_service import CatalogService
import config


@api_bp.route("/admin/products")
@require_admin
def list_products():
    """
    GET /api/admin/products?q=&category=&brand=&status=&sort=&order=&limit=100&offset=0
    """
    q        = request.args.get("q", "").strip()
    category = request.args.get("category", "").strip()
    brand    = request.args.get("brand", "").strip()
    status   = request.args.get("status", "").strip()
    sort_by  = request.args.get("sort", "created_at").strip()
    sort_order = request.args.get("order", "desc").strip()
    try:
        limit  = min(max(int(request.args.get("limit", config.API_DEFAULT_LIMIT)), 1),
                     config.API_MAX_LIMIT)
        offset = max(int(request.args.get("offset", 0)), 0)
    except ValueError:
        return jsonify({"error": "limit and offset must be integers"}), 400

    # Validate sort params
    if sort_by not in CatalogService.SORTABLE_COLUMNS:
        sort_by = "created_at"
    if sort_order not in ("asc", "desc"):
        sort_order = "desc"

    with session_scope() as session:
        products, total = CatalogService.search(
            session, q=q, category=category, brand=brand, status=status,
            sort_by=sort_by, sort_order=sort_order,
            limit=limit, offset=offset,
        )
        return jsonify({
            "total": total,
            "offset": offset,
            "limit": limit,
            "products": [p.to_dict() for p in products],
        })


@api_bp.route("/admin/products/bulk-delete", methods=["POST"])
@require_admin
def bulk_delete_products():
    """POST /api/admin/products/bulk-delete  {ids: [1, 2, …]}"""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "Invalid JSON"}), 400

    raw_ids = data.get("ids")
    ids = []
    if isinstance(raw_ids, list):
        for v in raw_ids:
            try:
                n = int(v)
            except (TypeError, ValueError):
                continue
            if n > 0:
                ids.append(n)
    if not ids:
        return jsonify({"error": "No product ids provided"}), 400

    with session_scope() as session:
        affected = CatalogService.bulk_delete(session, ids)
        session.commit()
    return jsonify({"ok": True, "affected": affected})
