# invoice_portal/auth.py
from __future__ import annotations

from urllib.parse import urlparse, urljoin

from flask import Blueprint, request, redirect, url_for, render_template, flash
from flask_login import logout_user, current_user

from .actions import authenticate
from .extensions import db, limiter, login_manager
from .models import User

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
    Allow only same-host redirects and never bounce back into /login or /logout.
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
    return url_for("invoices.dashboard")


# =========================================================
# Login / Logout
# =========================================================
@auth.route("/login", methods=["GET", "POST"])
@limiter.limit("5 per minute", methods=["POST"])
def login():
    if getattr(current_user, "is_authenticated", False):
        return redirect(url_for("invoices.dashboard"))

    next_url = request.args.get("next") or request.form.get("next") or ""
    error_message = None

    if request.method == "POST":
        error_message = authenticate(None, request.form)
        if error_message is None:
            return redirect(_next_or_dashboard())

    return render_template(
        "auth/login.html",
        next=next_url,
        error_message=error_message,
        email=(request.form.get("email") or "") if request.method == "POST" else "",
    )


@auth.route("/logout")
def logout():
    # Not login_required: that would redirect to /login?next=/logout.
    logout_user()
    flash("You have been logged out.", "success")
    return redirect(url_for("auth.login"))
