"""
api.routes_health - /api/db/health liveness probe for the store.
"""

import logging

from flask import jsonify
from sqlalchemy.exc import SQLAlchemyError

from api import api_bp
from db import ping, session_scope

logger = logging.getLogger(__name__)


@api_bp.route("/db/health")
def db_health():
    try:
        with session_scope() as session:
            ping(session)
    except SQLAlchemyError as exc:
        logger.error("Database health check failed: %s", exc)
        return jsonify({"ok": False, "error": "database unavailable"}), 503
    return jsonify({"ok": True})
