import logging
import os
import sys

import click
from flask import Flask, g, jsonify, request, session
from werkzeug.exceptions import HTTPException

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from api.routes import api_bp
from database.db_manager import DatabaseManager
from datasource.feature_flags import FeatureFlagManager
from datasource.mock_store import MockStore
from datasource.sources import DataSources
from services.registry import build_services
from utils.app_config import get_db_folder, get_log_level, get_secret_key
from utils.log_setup import setup_logging

logger = logging.getLogger(__name__)

# Paths reachable without a logged-in user when use_real_auth is on
_PUBLIC_ENDPOINTS = {"api.health", "api.register", "api.login", "api.logout", "api.current_user"}


def create_app(config: dict | None = None) -> Flask:
    """Application factory.

    Recognised config keys: DATABASE (sqlite path), FEATURE_FLAGS
    (FeatureFlagManager), MOCK_STORE (MockStore), SECRET_KEY, TESTING.
    """
    app = Flask(__name__)
    app.json.sort_keys = False
    if config:
        app.config.update(config)
    if not app.config.get("SECRET_KEY"):
        app.config["SECRET_KEY"] = get_secret_key()

    db_path = app.config.get("DATABASE")
    if db_path:
        db = DatabaseManager(db_path)
        db.initialize()
    else:
        db = DatabaseManager.open_default(get_db_folder())
    app.extensions["detetive.db"] = db
    app.extensions["detetive.flags"] = app.config.get("FEATURE_FLAGS") or FeatureFlagManager()
    app.extensions["detetive.mock_store"] = app.config.get("MOCK_STORE") or MockStore()
    logger.info("API ready (database %s)", db.db_path)

    @app.before_request
    def load_services():
        flags = app.extensions["detetive.flags"]
        user_id = session.get("user_id")
        if not flags.is_enabled("use_real_auth"):
            user_id = db.local_user_id()
        elif user_id is None and request.endpoint not in _PUBLIC_ENDPOINTS:
            return jsonify({"message": "Unauthorized"}), 401
        g.user_id = user_id
        sources = DataSources(flags, app.extensions["detetive.mock_store"], db, user_id or 0)
        g.services = build_services(sources)
        return None

    _register_error_handlers(app)
    app.register_blueprint(api_bp, url_prefix="/api")
    return app


def _error(status: int, message: str, details=None):
    body = {"message": message}
    if details is not None:
        body["details"] = details
    return jsonify(body), status


def _register_error_handlers(app: Flask):
    @app.errorhandler(ValueError)
    def handle_value_error(e):
        return _error(400, str(e), {"type": "validation"})

    @app.errorhandler(LookupError)
    def handle_lookup_error(e):
        return _error(404, str(e))

    # KeyError and IndexError are LookupErrors too, but only a missing entity is a 404
    @app.errorhandler(KeyError)
    @app.errorhandler(IndexError)
    def handle_internal_lookup(e):
        logger.exception("Unhandled lookup error while serving request")
        return _error(500, "Erro interno do servidor.")

    @app.errorhandler(PermissionError)
    def handle_permission_error(e):
        return _error(401, str(e) or "Unauthorized")

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return _error(e.code, e.description)

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        logger.exception("Unhandled error while serving request")
        return _error(500, "Erro interno do servidor.")


@click.command()
@click.option("--host", default="127.0.0.1", show_default=True, help="Interface to bind")
@click.option("--port", default=5000, show_default=True, type=int, help="Port to listen on")
@click.option("--db", "db_path", default=None, help="sqlite file (defaults to the configured folder)")
@click.option("--debug", is_flag=True, help="Enable debug logging and the Flask debugger")
def main(host: str, port: int, db_path: str | None, debug: bool):
    """Serve the Detetive Financeiro REST API."""
    flags = FeatureFlagManager()
    debug = debug or flags.is_enabled("debug_mode")
    setup_logging("DEBUG" if debug else get_log_level())
    app = create_app({"DATABASE": db_path, "FEATURE_FLAGS": flags})
    app.run(host=host, port=port, debug=debug)


if __name__ == "__main__":
    main()
