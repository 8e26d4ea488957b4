# invoice_portal/actions.py
"""
Form actions behind the invoice dashboard.

Each mutating action runs validate -> write -> revalidate and then either
returns a ``FormState`` for the form to re-render, or a redirect response
back to the invoices listing. ``authenticate`` wraps the credentials
identity provider and maps its failures to the text shown on the login form.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Union

from flask import current_app, redirect, url_for
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.wrappers import Response

from .models import utctoday
from .services import invoice_store
from .services.identity import AuthError, sign_in
from .services.invoice_forms import validate_invoice_form
from .services.view_cache import INVOICES_PATH, revalidate_path


@dataclass
class FormState:
    errors: dict[str, list[str]] = field(default_factory=dict)
    message: Optional[str] = None


ActionResult = Union[FormState, Response]


def _back_to_invoices() -> Response:
    revalidate_path(INVOICES_PATH)
    return redirect(url_for("invoices.list_invoices"))


# =========================================================
# Invoices
# =========================================================
def create_invoice(prev_state: Optional[FormState], form: Mapping[str, Any]) -> ActionResult:
    result = validate_invoice_form(form)
    if not result.ok:
        return FormState(
            errors=result.errors,
            message="Missing Fields. Failed to Create Invoice",
        )

    try:
        invoice_store.insert_invoice(result.data, issued_on=utctoday())
    except SQLAlchemyError:
        current_app.logger.exception("Create invoice failed")
        return FormState(message="Error creating invoice")

    current_app.logger.info(
        "Created invoice for customer %s (%d cents)",
        result.data.customer_id,
        result.data.amount_in_cents,
    )
    return _back_to_invoices()


def update_invoice(
    invoice_id: str,
    prev_state: Optional[FormState],
    form: Mapping[str, Any],
) -> ActionResult:
    result = validate_invoice_form(form)
    if not result.ok:
        return FormState(errors=result.errors, message="Update Invoice Failed")

    try:
        invoice_store.update_invoice(invoice_id, result.data)
    except SQLAlchemyError:
        current_app.logger.exception("Update invoice %s failed", invoice_id)
        return FormState(message="Error updating invoice")

    current_app.logger.info("Updated invoice %s", invoice_id)
    return _back_to_invoices()


def delete_invoice(invoice_id: str) -> Optional[FormState]:
    try:
        invoice_store.delete_invoice(invoice_id)
    except SQLAlchemyError:
        current_app.logger.exception("Delete invoice %s failed", invoice_id)
        return FormState(message="Error deleting invoice")

    current_app.logger.info("Deleted invoice %s", invoice_id)
    revalidate_path(INVOICES_PATH)
    return None


# =========================================================
# Authentication
# =========================================================
def authenticate(prev_state: Optional[str], form: Mapping[str, Any]) -> Optional[str]:
    try:
        sign_in("credentials", form)
    except AuthError as error:
        if error.type == "CredentialsSignin":
            return "Invalid credentials"
        return "Something went wrong"
    return None
