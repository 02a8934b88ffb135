"""
Application factory for the Health Tracker.

This module provides a function to create and configure the Flask
application. All extensions (SQLAlchemy, Migrate, JWT) are initialised
here, and the blueprints for authentication and weight entries are
registered inside the factory.

Environment variables control the database connections, the secret key
and logging. Set ``DATABASE_URL``, ``SEARCH_DATABASE_URL`` and
``JWT_SECRET_KEY`` in production. Without them the app falls back to
local SQLite files, which is fine for development only.
"""

from __future__ import annotations

import os
from datetime import timedelta

from flask import Flask
from flask_migrate import Migrate
from flask_jwt_extended import JWTManager

from .db import db
from .logging_config import setup_logging

migrate = Migrate()
jwt = JWTManager()


def create_app(test_config: dict | None = None) -> Flask:
    """Create and configure a Flask application.

    Parameters
    ----------
    test_config: dict | None, optional
        Optional configuration overrides used when running tests.

    Returns
    -------
    Flask
        A configured Flask application instance.
    """
    app = Flask(__name__)

    app.config.update(
        SQLALCHEMY_DATABASE_URI=os.environ.get("DATABASE_URL", "sqlite:///health.db"),
        # The search index is a separate bind so it can live in its own database.
        SQLALCHEMY_BINDS={
            "search": os.environ.get("SEARCH_DATABASE_URL", "sqlite:///health_search.db"),
        },
        SQLALCHEMY_TRACK_MODIFICATIONS=False,
        JWT_SECRET_KEY=os.environ.get("JWT_SECRET_KEY", "please-change-this-secret-key"),
        JWT_ACCESS_TOKEN_EXPIRES=timedelta(days=1),
        LOG_LEVEL=os.environ.get("LOG_LEVEL", "INFO"),
        LOG_FILE=os.environ.get("LOG_FILE"),
    )

    if test_config:
        app.config.update(test_config)

    setup_logging(app.config["LOG_LEVEL"], app.config.get("LOG_FILE"))

    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)

    from .errors import register_error_handlers
    register_error_handlers(app)

    # Importing here avoids circular imports.
    from .routes.auth import auth_bp
    from .routes.weights import weights_bp

    app.register_blueprint(auth_bp, url_prefix="/api")
    app.register_blueprint(weights_bp, url_prefix="/api")

    @app.route("/api/health")
    def health_check() -> dict[str, str]:
        """Return a simple health check response."""
        return {"status": "ok"}

    return app
