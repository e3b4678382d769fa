import logging
import os

from flask import Flask, Response, jsonify, request
from flask_cors import CORS

from .blueprints.entries import entries_bp
from .blueprints.settings import settings_bp
from .blueprints.tabs import tabs_bp
from .coordinator import Coordinator
from .entry_service import load_entries
from .extensions import COORDINATOR_EXTENSION_KEY, cache, db
from .sse import announcer


def log_level(name):
    """Numeric level for a level name; unknown names fall back to INFO."""
    level = getattr(logging, str(name or "").upper(), None)
    return level if isinstance(level, int) else logging.INFO


# Set up logging configuration
logging.basicConfig(
    level=log_level(os.environ.get("LAZYFORMS_LOG_LEVEL", "INFO")),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler()],
)
logger = logging.getLogger("lazyforms")

DEFAULT_CORS_ORIGINS = "chrome-extension://.*,http://localhost:8080,http://127.0.0.1:8080"


def _configure(app, overrides=None):
    """Fills ``app.config`` from the environment, then applies ``overrides``."""
    overrides = overrides or {}
    testing = overrides.get("TESTING") or os.environ.get("TESTING") == "true"

    if testing:
        app.config["TESTING"] = True
        app.config["SQLALCHEMY_DATABASE_URI"] = "sqlite:///:memory:"
        app.config["CACHE_TYPE"] = "SimpleCache"
        logger.info("TESTING mode: Using in-memory SQLite database and SimpleCache.")
    else:
        db_path_env = os.environ.get("DATABASE_PATH")
        if db_path_env and db_path_env.startswith("sqlite:///"):
            app.config["SQLALCHEMY_DATABASE_URI"] = db_path_env
            logger.info("Using DATABASE_PATH environment variable directly: %s", db_path_env)
        else:
            if db_path_env:
                db_path = db_path_env
            else:
                project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
                data_dir = os.path.join(project_root, "data")
                os.makedirs(data_dir, exist_ok=True)
                db_path = os.path.join(data_dir, "lazyforms.db")
            app.config["SQLALCHEMY_DATABASE_URI"] = f"sqlite:///{db_path}"
            logger.info("Using database file: %s", db_path)

        app.config["CACHE_TYPE"] = os.environ.get("CACHE_TYPE", "SimpleCache")
        if app.config["CACHE_TYPE"] == "RedisCache":
            app.config["CACHE_REDIS_URL"] = os.environ.get(
                "CACHE_REDIS_URL", "redis://localhost:6379/0")

    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False
    app.config.setdefault("CACHE_DEFAULT_TIMEOUT", 300)
    app.config.update(overrides)


def create_app(config=None):
    """Builds the resolver service.

    Args:
        config (dict, optional): Values that override the environment-derived config.

    Returns:
        Flask: The configured application.
    """
    app = Flask(__name__)
    _configure(app, config)

    allowed_origins_str = os.environ.get("CORS_ALLOWED_ORIGINS", DEFAULT_CORS_ORIGINS)
    allowed_origins = [o.strip() for o in allowed_origins_str.split(",") if o.strip()]
    CORS(app, origins=allowed_origins, resources={r"/api/*": {}})

    db.init_app(app)
    cache.init_app(app)

    app.extensions[COORDINATOR_EXTENSION_KEY] = Coordinator(
        publisher=announcer, loader=load_entries)

    app.register_blueprint(entries_bp)
    app.register_blueprint(tabs_bp)
    app.register_blueprint(settings_bp)

    @app.route("/api/stream")
    def stream():
        """Server-Sent Events stream of resolver updates."""
        return Response(announcer.listen(), mimetype="text/event-stream")

    @app.errorhandler(404)
    def not_found_error(error):
        logger.warning("404 Not Found: %s", request.path)
        return jsonify({"error": "Resource not found"}), 404

    @app.errorhandler(500)
    def internal_error(error):
        logger.error("500 Internal Server Error: %s", error, exc_info=True)
        # Rollback the session in case the error was database-related
        db.session.rollback()
        return jsonify({"error": "An internal server error occurred"}), 500

    with app.app_context():
        db.create_all()

    return app


def main():
    app = create_app()
    port = int(os.environ.get("PORT", "5000"))
    app.run(host="127.0.0.1", port=port, threaded=True)


if __name__ == "__main__":
    main()
