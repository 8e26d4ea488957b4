# invoice_portal/__init__.py
from __future__ import annotations

from flask import Flask, render_template

from .settings import Config
from .extensions import db, migrate, login_manager, limiter


def format_money(minor_units: int | None) -> str:
    """Cents -> "$1,050.00"."""
    cents = int(minor_units or 0)
    sign = "-" if cents < 0 else ""
    return f"{sign}${abs(cents) / 100:,.2f}"


def create_app(config_object: type = Config) -> Flask:
    app = Flask(__name__)
    app.config.from_object(config_object)

    # ======================
    # Initialize Extensions
    # ======================
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    limiter.init_app(app)

    from .services.view_cache import init_view_cache

    init_view_cache(app)

    # ======================
    # Import Models (CRITICAL)
    # ======================
    from . import models  # noqa: F401

    app.jinja_env.filters["money"] = format_money

    # ======================
    # Register Blueprints
    # ======================
    from .routes import invoices
    from .auth import auth

    app.register_blueprint(invoices)
    app.register_blueprint(auth)

    # ======================
    # Rate limit error handler
    # ======================
    @app.errorhandler(429)
    def ratelimit_handler(e):
        return "Too many requests. Please try again later.", 429

    @app.errorhandler(403)
    def forbidden(e):
        return render_template("403.html"), 403

    @app.errorhandler(404)
    def not_found(e):
        return render_template("404.html"), 404

    return app
