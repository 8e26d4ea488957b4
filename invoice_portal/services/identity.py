# invoice_portal/services/identity.py
"""
Credentials identity provider.

``sign_in`` is the only entry point. Failures are raised as ``AuthError``
subclasses whose ``type`` names the failure category, so callers can map
them to user-facing text without inspecting messages.
"""
from __future__ import annotations

from typing import Any, Mapping

from flask import current_app
from flask_login import login_user
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import User, utcnow_naive
from ..utils.passwords import verify_password

CREDENTIALS_PROVIDER = "credentials"


class AuthError(Exception):
    type = "AuthError"

    def __init__(self, category: str | None = None, message: str | None = None):
        if category:
            self.type = category
        super().__init__(message or self.type)


class CredentialsSignin(AuthError):
    type = "CredentialsSignin"


class AccessDenied(AuthError):
    type = "AccessDenied"


def _authorize(form: Mapping[str, Any]) -> User:
    email = (form.get("email") or "").strip().lower()
    password = form.get("password") or ""

    if not email or not password:
        raise CredentialsSignin(message="Email and password are required.")

    user = User.query.filter(db.func.lower(User.email) == email).first()
    if not user or not verify_password(user.password_hash, password):
        current_app.logger.warning("Rejected sign-in for %s", email)
        raise CredentialsSignin()

    if user.is_active is False:
        current_app.logger.warning("Sign-in for inactive account %s", email)
        raise AccessDenied()

    return user


def sign_in(provider: str, form: Mapping[str, Any]) -> User:
    if provider != CREDENTIALS_PROVIDER:
        raise AuthError("Configuration", f"Unknown provider: {provider}")

    user = _authorize(form)
    login_user(user)

    try:
        user.last_login_at = utcnow_naive()
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to stamp last_login_at for %s", user.email)

    current_app.logger.info("User %s signed in", user.email)
    return user
