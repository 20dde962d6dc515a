#!/usr/bin/env python3
"""
FBFood back-office - Admin API server
=====================================

Single-command run:  python main.py

See config.py for all environment-variable tunables.
"""

import logging

from flask import Flask, jsonify

import config
from db import init_db
from api import api_bp


def create_app() -> Flask:
    """Flask application factory."""

    # Stored images are served straight from the public tree (/uploads/...)
    app = Flask(
        __name__,
        static_folder=str(config.PUBLIC_DIR),
        static_url_path="",
    )
    app.secret_key = config.SECRET
    app.config["MAX_CONTENT_LENGTH"] = config.MAX_UPLOAD_BYTES

    # ── Initialise database ─────────────────────────────────────────
    init_db(config.DB_URL)

    # ── Register blueprints ─────────────────────────────────────────
    app.register_blueprint(api_bp)

    # ── Error handlers ──────────────────────────────────────────────
    @app.errorhandler(404)
    def _404(e):
        return jsonify({"error": "not found"}), 404

    @app.errorhandler(500)
    def _500(e):
        return jsonify({"error": "internal server error"}), 500

    return app


def main():
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )

    print("=" * 56)
    print("  FBFood - Admin back-office API")
    print("=" * 56)

    config.PUBLIC_DIR.mkdir(parents=True, exist_ok=True)
    app = create_app()

    print(f"  Database: {config.DB_URL}")
    print(f"  Public assets: {config.PUBLIC_DIR}")
    print(f"\n  http://{config.HOST}:{config.PORT}")
    print("=" * 56)

    app.run(host=config.HOST, port=config.PORT, debug=config.DEBUG)


if __name__ == "__main__":
    main()
