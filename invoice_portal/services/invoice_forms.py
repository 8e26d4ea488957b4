# invoice_portal/services/invoice_forms.py
"""
Invoice form validation.

Turns the raw strings posted by the invoice form into an ``InvoiceInput``
record, or into field-keyed error messages the form can render back.
Validation never raises; callers branch on ``ValidationResult.ok``.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation, Overflow, ROUND_HALF_UP
from typing import Any, Mapping, Optional

from ..models import InvoiceStatus

CUSTOMER_REQUIRED = "Please select a customer"
AMOUNT_INVALID = "Please enter a valid amount"
AMOUNT_NOT_POSITIVE = "Please enter an amount greater than 0"
AMOUNT_TOO_LARGE = "Please enter a smaller amount"
STATUS_INVALID = "Please select an invoice status"

# invoices.amount is a 32-bit INTEGER column.
MAX_AMOUNT_CENTS = 2_147_483_647

_CENTS = Decimal(100)
_MAX_AMOUNT = Decimal(MAX_AMOUNT_CENTS) / _CENTS


@dataclass(frozen=True)
class InvoiceInput:
    customer_id: str
    amount: Decimal
    status: InvoiceStatus

    @property
    def amount_in_cents(self) -> int:
        return to_minor_units(self.amount)


@dataclass
class ValidationResult:
    data: Optional[InvoiceInput] = None
    errors: dict[str, list[str]] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.data is not None and not self.errors


def to_minor_units(amount: Decimal) -> int:
    """Dollars -> cents, rounding half up (10.505 -> 1051)."""
    return int((amount * _CENTS).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def _clean_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _parse_amount(raw: Any) -> Optional[Decimal]:
    # Blank coerces to 0 so it fails the "> 0" rule rather than the number rule.
    text = _clean_str(raw)
    if not text:
        return Decimal(0)
    try:
        value = Decimal(text)
    except (InvalidOperation, ValueError):
        return None
    if not value.is_finite():
        return None
    return value


def _check_amount(amount: Optional[Decimal]) -> Optional[str]:
    if amount is None:
        return AMOUNT_INVALID
    if amount <= 0:
        return AMOUNT_NOT_POSITIVE
    # Compare before scaling so huge exponents never reach the decimal context.
    if amount > _MAX_AMOUNT:
        return AMOUNT_TOO_LARGE
    try:
        cents = to_minor_units(amount)
    except (InvalidOperation, Overflow):
        return AMOUNT_INVALID
    if cents <= 0:
        return AMOUNT_NOT_POSITIVE
    if cents > MAX_AMOUNT_CENTS:
        return AMOUNT_TOO_LARGE
    return None


def validate_invoice_form(form: Mapping[str, Any]) -> ValidationResult:
    errors: dict[str, list[str]] = {}

    customer_id = _clean_str(form.get("customerId"))
    if not customer_id:
        errors.setdefault("customerId", []).append(CUSTOMER_REQUIRED)

    amount = _parse_amount(form.get("amount"))
    amount_error = _check_amount(amount)
    if amount_error:
        errors.setdefault("amount", []).append(amount_error)

    raw_status = form.get("status")
    try:
        status = InvoiceStatus(raw_status)
    except ValueError:
        errors.setdefault("status", []).append(STATUS_INVALID)

    if errors:
        return ValidationResult(errors=errors)

    return ValidationResult(
        data=InvoiceInput(customer_id=customer_id, amount=amount, status=status)
    )
