"""
Application entrypoint: builds the Flask app around the auth blueprint.

Run locally with:
    python -m organiz.gateway.server
"""

import logging
import os
from typing import Optional

from flask import Flask, jsonify
from flask_cors import CORS

from organiz.auth_service.routes import auth_bp
from organiz.auth_service.utils import error_body
from organiz.config import Settings, load_settings
from organiz.database.db_connection import ConnectionPool

# Basic console logging during API requests
logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(asctime)s - %(message)s")

# Requests up to this multiple of the upload limit reach the view, which
# reports an oversized document with its own 400
MAX_REQUEST_FACTOR = 4


def create_app(settings: Optional[Settings] = None) -> Flask:
    """
    Application factory for creating the Flask app.

    Args:
        settings (Settings, optional): Configuration to use. Loaded from the
            environment when omitted.

    Returns:
        Flask: The configured Flask application.
    """
    settings = settings or load_settings()

    app = Flask(__name__)
    app.config["SETTINGS"] = settings
    app.config["MAX_CONTENT_LENGTH"] = settings.max_upload_bytes * MAX_REQUEST_FACTOR
    app.extensions["db_pool"] = ConnectionPool(
        settings.database_url, max_connections=settings.db_pool_max_connections
    )

    origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()] or "*"
    CORS(app, resources={
        r"/*": {
            "origins": origins,
            "methods": ["GET", "POST", "OPTIONS"],
            "allow_headers": ["Content-Type", "Authorization"],
        }
    })

    app.register_blueprint(auth_bp)
    logging.info("Auth blueprint registered.")

    # --- BASIC HEALTH CHECKPOINTS ---
    @app.route("/")
    def ping():
        """
        Root URL for simple 'online' check.
        """
        return jsonify({"status": "auth_ok"}), 200

    @app.route("/health")
    def health():
        return jsonify({"status": "ok"}), 200

    @app.errorhandler(413)
    def request_too_large(error):
        return error_body("Request too large"), 413

    return app


if __name__ == "__main__":
    app = create_app()
    port = int(os.getenv("GATEWAY_PORT", 5000))
    app.run(host="0.0.0.0", port=port)
