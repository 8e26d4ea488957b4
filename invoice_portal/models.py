# invoice_portal/models.py
from __future__ import annotations

import enum
import uuid
from datetime import date, datetime, timezone

from flask_login import UserMixin

from .extensions import db


# Naive UTC everywhere; columns are "timestamp without time zone".
def utcnow_naive() -> datetime:
    return datetime.utcnow()


def utctoday() -> date:
    return datetime.now(timezone.utc).date()


def new_id() -> str:
    return str(uuid.uuid4())


# =========================================================
# User (credentials sign-in)
# =========================================================
class User(UserMixin, db.Model):
    __tablename__ = "users"

    id = db.Column(db.String(36), primary_key=True, default=new_id)

    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(120), nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)

    is_active = db.Column(db.Boolean, nullable=False, default=True)
    last_login_at = db.Column(db.DateTime, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow_naive)

    __table_args__ = (
        db.Index("ix_users_email", "email", unique=True),
    )

    def __repr__(self) -> str:
        return f"<User {self.id} {self.email}>"


# =========================================================
# Customer
# =========================================================
class Customer(db.Model):
    __tablename__ = "customers"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    name = db.Column(db.String(160), nullable=False)
    email = db.Column(db.String(120), nullable=False)
    image_url = db.Column(db.String(255), nullable=True)

    invoices = db.relationship("Invoice", back_populates="customer", lazy="select")

    def __repr__(self) -> str:
        return f"<Customer {self.id} {self.name}>"


# =========================================================
# Invoice Status (Enum)
# =========================================================
class InvoiceStatus(enum.Enum):
    PENDING = "pending"
    PAID = "paid"


INVOICE_STATUSES = tuple(s.value for s in InvoiceStatus)


# =========================================================
# Invoice
# =========================================================
class Invoice(db.Model):
    __tablename__ = "invoices"

    id = db.Column(db.String(36), primary_key=True, default=new_id)

    customer_id = db.Column(
        db.String(36),
        db.ForeignKey("customers.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    customer = db.relationship("Customer", back_populates="invoices", lazy="joined")

    # Minor units (cents)
    amount = db.Column(db.Integer, nullable=False)

    # Plain text column; the CHECK constraint below owns the allowed values.
    status = db.Column(db.String(20), nullable=False, default=InvoiceStatus.PENDING.value)

    date = db.Column(db.Date, nullable=False, default=utctoday)

    __table_args__ = (
        db.CheckConstraint("amount > 0", name="ck_invoices_amount_positive"),
        db.CheckConstraint("status IN ('pending', 'paid')", name="ck_invoices_status"),
    )

    def __repr__(self) -> str:
        return f"<Invoice {self.id} {self.amount} {self.status}>"


# =========================================================
# View revision (shared across workers)
# =========================================================
class ViewRevision(db.Model):
    __tablename__ = "view_revisions"

    path = db.Column(db.String(255), primary_key=True)
    revision = db.Column(db.Integer, nullable=False, default=0)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow_naive, onupdate=utcnow_naive)

    def __repr__(self) -> str:
        return f"<ViewRevision {self.path} r{self.revision}>"
