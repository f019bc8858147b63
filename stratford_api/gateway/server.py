"""
API gateway: combines the auth, events, venues, magazine, playlists,
advertisements and users blueprints under /api.
This is the local entrypoint for development:

    python -m stratford_api.gateway.server
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from flask import Flask, jsonify
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from werkzeug.exceptions import HTTPException

from stratford_api.advertisements_service.routes import advertisements_bp
from stratford_api.auth_service.routes import auth_bp
from stratford_api.auth_service.utils import TokenService
from stratford_api.common.responses import failure
from stratford_api.config import Settings, load_settings
from stratford_api.database.db_connection import Database
from stratford_api.events_service.routes import events_bp
from stratford_api.magazine_service.routes import magazine_bp
from stratford_api.playlists_service.routes import playlists_bp
from stratford_api.users_service.routes import users_bp
from stratford_api.venues_service.routes import venues_bp

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> Flask:
    """
    Application factory for creating the Flask app.

    The Database and TokenService are built once here and shared by every
    request through `app.extensions`.

    Args:
        settings (Settings, optional): Loaded from the environment if omitted.
        database (Database, optional): Built from settings.database_url if omitted.

    Returns:
        Flask: The configured Flask application.

    Raises:
        RuntimeError: If no JWT secret is configured.
    """
    settings = settings or load_settings()

    # Basic console logging during API requests
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="[%(levelname)s] %(asctime)s - %(message)s",
    )

    app = Flask(__name__)
    app.json.sort_keys = False

    database = database or Database(settings.database_url)
    database.create_all()

    app.extensions["settings"] = settings
    app.extensions["database"] = database
    app.extensions["tokens"] = TokenService(
        settings.jwt_secret, settings.token_expiration_minutes
    )

    CORS(app, resources={
        r"/api/*": {
            "origins": [settings.cors_origin],
            "methods": ["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            "allow_headers": ["Content-Type", "Authorization"],
            "supports_credentials": True
        }
    })

    # Applies to every route, keyed by client IP
    app.config["RATELIMIT_HEADERS_ENABLED"] = True
    Limiter(
        get_remote_address,
        app=app,
        default_limits=[settings.rate_limit],
        storage_uri="memory://",
        enabled=settings.rate_limit_enabled,
    )

    # --- REGISTER BLUEPRINTS ---
    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(events_bp, url_prefix="/api/events")
    app.register_blueprint(venues_bp, url_prefix="/api/venues")
    app.register_blueprint(users_bp, url_prefix="/api/users")
    app.register_blueprint(magazine_bp, url_prefix="/api/magazine")
    app.register_blueprint(playlists_bp, url_prefix="/api/playlists")
    app.register_blueprint(advertisements_bp, url_prefix="/api/advertisements")
    logger.info("All blueprints registered successfully.")

    # --- HEALTH CHECK ---
    @app.route("/api/health")
    def health():
        return jsonify({
            "status": "OK",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "environment": settings.environment,
            "version": settings.version,
        }), 200

    # --- ERROR ENVELOPES ---
    @app.errorhandler(404)
    def not_found(_error):
        return failure("Route not found", 404)

    @app.errorhandler(429)
    def rate_limited(_error):
        return failure("Too many requests from this IP, please try again later.", 429)

    @app.errorhandler(HTTPException)
    def http_error(error: HTTPException):
        return failure(error.description or error.name, error.code or 500)

    @app.errorhandler(Exception)
    def internal_error(error: Exception):
        logger.exception("Unhandled error", exc_info=error)
        return failure("Internal server error", 500)

    return app


if __name__ == "__main__":
    app = create_app()
    port = app.extensions["settings"].port
    app.run(host="0.0.0.0", port=port, debug=app.extensions["settings"].environment == "development")
