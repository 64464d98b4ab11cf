# backend/comanda/__init__.py
from __future__ import annotations

import logging

from flask import Flask, request

from .config import Config
from .errors import register_error_handlers
from .extensions import db, migrate
from .policy import EXTENSION_KEY, build_default_policy


def create_app(config_overrides: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    app.logger.setLevel(getattr(logging, str(app.config["LOG_LEVEL"]).upper(), logging.INFO))

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Permission matrix and transition table are built once and never mutated
    app.extensions[EXTENSION_KEY] = build_default_policy()

    # Register blueprints
    from .routes.system import system_bp
    from .routes.orders import orders_bp
    from .routes.kitchen import kitchen_bp
    from .routes.waiter import waiter_bp
    from .routes.cash import cash_bp
    from .routes.payments import payments_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(orders_bp)
    app.register_blueprint(kitchen_bp)
    app.register_blueprint(waiter_bp)
    app.register_blueprint(cash_bp)
    app.register_blueprint(payments_bp)

    register_error_handlers(app)

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        if origin in app.config["CORS_ALLOWED_ORIGINS"]:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = (
                f"{app.config['PRINCIPAL_HEADER']}, Content-Type"
            )
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,PATCH,OPTIONS"
        return response

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
