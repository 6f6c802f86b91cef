# dashboard/auth.py
from __future__ import annotations

from datetime import datetime
from urllib.parse import urlparse, urljoin

from flask import Blueprint, request, redirect, url_for, render_template, flash
from flask_login import logout_user

from .models import User
from .extensions import login_manager, db, limiter
from .services.credentials import authenticate

auth = Blueprint("auth", __name__)


# =========================================================
# Flask-Login user loader
# =========================================================
@login_manager.user_loader
def load_user(user_id: str):
    return db.session.get(User, user_id)


# =========================================================
# Helpers
# =========================================================
def _is_safe_next(target: str) -> bool:
    """
    Allow only same-host redirects AND block redirect loops into /login or /logout.
    """
    if not target:
        return False

    if target.startswith(("/login", "/logout")):
        return False

    ref = urlparse(request.host_url)
    test = urlparse(urljoin(request.host_url, target))
    return test.scheme in ("http", "https") and ref.netloc == test.netloc


def _next_or_dashboard() -> str:
    nxt = request.args.get("next") or request.form.get("next") or ""
    if nxt and _is_safe_next(nxt):
        return nxt
    return url_for("main.dashboard")


# =========================================================
# Login / Logout
# =========================================================
@auth.route("/login", methods=["GET", "POST"])
@limiter.limit("5 per minute", methods=["POST"])
def login():
    next_url = request.args.get("next") or request.form.get("next") or ""

    if request.method == "POST":
        error_message = authenticate(request.form)
        if error_message:
            return render_template(
                "login.html",
                next=next_url,
                email=(request.form.get("email") or "").strip(),
                error_message=error_message,
                current_year=datetime.utcnow().year,
            )

        return redirect(_next_or_dashboard())

    return render_template("login.html", next=next_url, current_year=datetime.utcnow().year)


@auth.route("/logout", methods=["GET", "POST"])
def logout():
    """
    Not login_required: Flask-Login would bounce to /login?next=/logout and
    loop after the next successful login.
    """
    logout_user()
    flash("You have been logged out.", "success")
    return redirect(url_for("auth.login"))
