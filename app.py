"""Flask web app for Inkwell."""

# Load environment variables from .env file before other imports
from dotenv import load_dotenv  # type: ignore[import-untyped]

load_dotenv()  # noqa: E402

import os  # noqa: E402
import time  # noqa: E402
import logging  # noqa: E402
from typing import Any, Dict, Optional  # noqa: E402
from flask import Flask, request  # noqa: E402
from flask_cors import CORS  # type: ignore[import-untyped]  # noqa: E402
from flask_limiter import Limiter  # type: ignore[import-untyped]  # noqa: E402
from flask_limiter.util import get_remote_address  # type: ignore[import-untyped]  # noqa: E402
from src.inkwell.config import load_config  # noqa: E402
from src.inkwell.auth import FirebaseTokenVerifier  # noqa: E402
from src.inkwell.services import build_services  # noqa: E402
from src.inkwell.utils.repository import create_database  # noqa: E402
from src.inkwell.utils.errors import register_error_handlers  # noqa: E402
from src.inkwell.api import register_routes  # noqa: E402

# Configure logging
logging.basicConfig(
    level=logging.INFO if os.getenv('FLASK_ENV') != 'development' else logging.DEBUG,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def create_app(config: Optional[Dict[str, Any]] = None) -> Flask:
    """
    Create and configure the Flask application.

    Args:
        config: Overrides for the environment-derived configuration. A
            ``DATABASE`` entry supplies a ready storage backend.

    Returns:
        Configured Flask app
    """
    app = Flask(__name__)
    app.config.update(load_config())
    if config:
        app.config.update(config)

    CORS(app, origins=app.config["CORS_ORIGINS"], supports_credentials=True)

    # Configure rate limiting
    limiter = Limiter(
        key_func=get_remote_address,
        app=app,
        default_limits=app.config["DEFAULT_RATE_LIMITS"],
        storage_uri=app.config["RATELIMIT_STORAGE_URI"],  # Use Redis in production if available
        headers_enabled=True,
        enabled=app.config["RATELIMIT_ENABLED"],
    )

    database = app.config.get("DATABASE") or create_database(app.config)
    app.extensions["inkwell"] = {
        "database": database,
        "services": build_services(database, app.config),
        "token_verifier": FirebaseTokenVerifier(),
        "limiter": limiter,
        "started_at": time.time(),
    }
    logger.info(f"Storage backend: {database.backend}")

    @app.before_request
    def log_request():
        logger.info(f"{request.method} {request.path}")

    register_error_handlers(app, debug=os.getenv('FLASK_ENV') == 'development')
    register_routes(app, limiter)
    return app


if __name__ == '__main__':
    # Production settings
    debug_mode = os.getenv('FLASK_ENV') == 'development'
    port = int(os.getenv('PORT', 5000))
    host = os.getenv('HOST', '0.0.0.0')

    create_app().run(debug=debug_mode, host=host, port=port)
