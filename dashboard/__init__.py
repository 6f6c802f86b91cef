# dashboard/__init__.py
from __future__ import annotations

from flask import Flask, render_template, redirect, url_for, request
from flask_login import current_user

from .settings import Config
from .extensions import db, migrate, login_manager, limiter, page_cache


def create_app(config_object=Config) -> Flask:
    app = Flask(__name__)
    app.config.from_object(config_object)
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    # ======================
    # Initialize Extensions
    # ======================
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    limiter.init_app(app)
    page_cache.init_app(app)

    # ======================
    # Import Models (CRITICAL)
    # ======================
    from . import models  # noqa: F401

    # ======================
    # Template filters
    # ======================
    @app.template_filter("currency")
    def format_currency(cents):
        return f"${(cents or 0) / 100:,.2f}"

    @app.template_filter("invoice_date")
    def format_invoice_date(value):
        return value.strftime("%b %d, %Y") if value else ""

    # ======================
    # Register Blueprints
    # ======================
    from .routes import main
    from .auth import auth

    app.register_blueprint(main)
    app.register_blueprint(auth)

    # ======================
    # Route protection (the only sign-in gate; views carry no decorators)
    # ======================
    from .utils.guards import authorized, is_guarded_path

    @app.before_request
    def enforce_sign_in():
        path = request.path or "/"
        if not is_guarded_path(path):
            return None

        decision = authorized(getattr(current_user, "is_authenticated", False), path)
        if decision is True:
            return None

        if decision is False:
            app.logger.warning("Unauthenticated request to %s", path)
            return redirect(url_for("auth.login", next=request.full_path.rstrip("?")))

        return redirect(decision)

    # ======================
    # Rate limit error handler
    # ======================
    @app.errorhandler(429)
    def ratelimit_handler(e):
        return "Too many requests. Please try again later.", 429

    # ======================
    # Forbidden handler
    # ======================
    @app.errorhandler(403)
    def forbidden(e):
        return render_template("403.html"), 403

    # ======================
    # Not found handler
    # ======================
    @app.errorhandler(404)
    def not_found(e):
        return render_template("404.html"), 404

    return app
