# invoice_portal/services/invoice_store.py
from __future__ import annotations

from datetime import date

import sqlalchemy as sa
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import Invoice
from .invoice_forms import InvoiceInput

_invoices = Invoice.__table__


def _execute_and_commit(stmt) -> None:
    """Run one statement in its own transaction; roll back and re-raise on failure."""
    try:
        db.session.execute(stmt)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise


def insert_invoice(record: InvoiceInput, issued_on: date) -> None:
    _execute_and_commit(
        sa.insert(_invoices).values(
            customer_id=record.customer_id,
            amount=record.amount_in_cents,
            status=record.status.value,
            date=issued_on,
        )
    )


def update_invoice(invoice_id: str, record: InvoiceInput) -> None:
    # Issue date is set once at create and never updated.
    _execute_and_commit(
        sa.update(_invoices)
        .where(_invoices.c.id == invoice_id)
        .values(
            customer_id=record.customer_id,
            amount=record.amount_in_cents,
            status=record.status.value,
        )
    )


def delete_invoice(invoice_id: str) -> None:
    # No existence check; deleting a missing row is a no-op.
    _execute_and_commit(sa.delete(_invoices).where(_invoices.c.id == invoice_id))
