# backend/sahl/__init__.py
import logging

from flask import Flask, request

from .config import Config
from .extensions import db, migrate

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _configure_logging(app: Flask) -> None:
    # Service modules log under "sahl.services.*"; one handler on the package logger covers them.
    logger = logging.getLogger("sahl")
    logger.setLevel(str(app.config.get("LOG_LEVEL", "INFO")).upper())
    if not any(getattr(h, "_sahl_handler", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._sahl_handler = True
        logger.addHandler(handler)


def create_app(config_overrides: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    _configure_logging(app)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Register blueprints
    from .routes.system import system_bp
    from .routes.clients import clients_bp
    from .routes.products import products_bp
    from .routes.warehouses import warehouses_bp
    from .routes.invoices import invoices_bp
    from .routes.transactions import transactions_bp
    from .routes.settings import settings_bp
    from .routes.batch import batch_bp
    from .routes.ledger import ledger_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(clients_bp)
    app.register_blueprint(products_bp)
    app.register_blueprint(warehouses_bp)
    app.register_blueprint(invoices_bp)
    app.register_blueprint(transactions_bp)
    app.register_blueprint(settings_bp)
    app.register_blueprint(batch_bp)
    app.register_blueprint(ledger_bp)

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        allowed_origins = {
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        }
        if origin in allowed_origins:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = "Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,PATCH,OPTIONS"
        return response

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
