import pytest
from flask_login import current_user

from invoice_portal import actions
from invoice_portal.extensions import db
from invoice_portal.models import User
from invoice_portal.services.identity import (
    AccessDenied,
    AuthError,
    CredentialsSignin,
    sign_in,
)

from .conftest import USER_EMAIL, USER_PASSWORD

pytestmark = pytest.mark.usefixtures("request_ctx")


def _provider_raising(exc):
    def _sign_in(provider, form):
        raise exc

    return _sign_in


# --- error mapping ---
def test_credentials_signin_maps_to_invalid_credentials(monkeypatch):
    monkeypatch.setattr(actions, "sign_in", _provider_raising(CredentialsSignin()))
    assert actions.authenticate(None, {}) == "Invalid credentials"


def test_auth_error_with_credentials_type_maps_to_invalid_credentials(monkeypatch):
    monkeypatch.setattr(actions, "sign_in", _provider_raising(AuthError("CredentialsSignin")))
    assert actions.authenticate(None, {}) == "Invalid credentials"


@pytest.mark.parametrize(
    "exc", [AuthError("CallbackRouteError"), AuthError(), AccessDenied()]
)
def test_other_auth_errors_map_to_generic_message(monkeypatch, exc):
    monkeypatch.setattr(actions, "sign_in", _provider_raising(exc))
    assert actions.authenticate(None, {}) == "Something went wrong"


def test_non_auth_error_propagates(monkeypatch):
    boom = RuntimeError("provider unreachable")
    monkeypatch.setattr(actions, "sign_in", _provider_raising(boom))

    with pytest.raises(RuntimeError) as excinfo:
        actions.authenticate(None, {})
    assert excinfo.value is boom


def test_forwards_to_credentials_provider(monkeypatch):
    seen = {}

    def _sign_in(provider, form):
        seen["provider"] = provider
        seen["form"] = form

    monkeypatch.setattr(actions, "sign_in", _sign_in)
    form = {"email": "a@b.c", "password": "x"}

    assert actions.authenticate("previous", form) is None
    assert seen == {"provider": "credentials", "form": form}


# --- credentials provider ---
def test_sign_in_logs_user_in(user):
    result = actions.authenticate(None, {"email": USER_EMAIL.upper(), "password": USER_PASSWORD})

    assert result is None
    assert current_user.is_authenticated
    assert current_user.id == user
    assert db.session.get(User, user).last_login_at is not None


@pytest.mark.parametrize(
    "form",
    [
        {"email": USER_EMAIL, "password": "wrong-password"},
        {"email": "nobody@nextmail.com", "password": USER_PASSWORD},
        {"email": "", "password": USER_PASSWORD},
        {"email": USER_EMAIL},
    ],
)
def test_bad_credentials(user, form):
    assert actions.authenticate(None, form) == "Invalid credentials"
    assert not current_user.is_authenticated


def test_inactive_account_is_denied(user):
    db.session.get(User, user).is_active = False
    db.session.commit()

    with pytest.raises(AccessDenied):
        sign_in("credentials", {"email": USER_EMAIL, "password": USER_PASSWORD})

    assert actions.authenticate(None, {"email": USER_EMAIL, "password": USER_PASSWORD}) == (
        "Something went wrong"
    )


def test_unknown_provider_is_configuration_error():
    with pytest.raises(AuthError) as excinfo:
        sign_in("github", {})
    assert excinfo.value.type == "Configuration"


def test_auth_error_category_keyword_sets_type():
    error = AuthError(category="OAuthSignin", message="provider down")

    assert error.type == "OAuthSignin"
    assert str(error) == "provider down"
    assert AuthError().type == "AuthError"
    assert CredentialsSignin().type == "CredentialsSignin"
