# invoice_portal/routes.py
from __future__ import annotations

from flask import (
    Blueprint,
    current_app,
    flash,
    redirect,
    render_template,
    request,
    url_for,
)
from flask_login import login_required
from markupsafe import Markup
from sqlalchemy import String, cast, or_
from werkzeug.wrappers import Response

from . import actions
from .extensions import db
from .models import INVOICE_STATUSES, Customer, Invoice
from .services.view_cache import INVOICES_PATH, cached_page

invoices = Blueprint("invoices", __name__)


# =========================================================
# Helpers
# =========================================================
def _customer_options() -> list[Customer]:
    return Customer.query.order_by(Customer.name.asc()).all()


def _search_invoices(q: str, page: int, per_page: int):
    qry = Invoice.query.join(Customer, Invoice.customer_id == Customer.id)

    if q:
        like = f"%{q.lower()}%"
        qry = qry.filter(
            or_(
                db.func.lower(Customer.name).like(like),
                db.func.lower(Customer.email).like(like),
                db.func.lower(Invoice.status).like(like),
                cast(Invoice.amount, String).like(like),
                cast(Invoice.date, String).like(like),
            )
        )

    return qry.order_by(Invoice.date.desc(), Invoice.id.asc()).paginate(
        page=page, per_page=per_page, error_out=False
    )


def _render_form(template: str, state: actions.FormState | None = None, **ctx):
    return render_template(
        template,
        customers=_customer_options(),
        statuses=INVOICE_STATUSES,
        state=state or actions.FormState(),
        form=request.form if request.method == "POST" else {},
        **ctx,
    )


# =========================================================
# Dashboard
# =========================================================
@invoices.route("/")
def home():
    return redirect(url_for("invoices.dashboard"))


@invoices.route("/dashboard")
@login_required
def dashboard():
    return redirect(url_for("invoices.list_invoices"))


@invoices.route(INVOICES_PATH)
@login_required
def list_invoices():
    q = (request.args.get("query") or "").strip()
    page = max(request.args.get("page", 1, type=int), 1)
    per_page = current_app.config.get("INVOICES_PER_PAGE", 6)

    def render_table() -> str:
        pagination = _search_invoices(q, page, per_page)
        return render_template(
            "invoices/_table.html",
            invoices=pagination.items,
            pagination=pagination,
            q=q,
        )

    table = cached_page(INVOICES_PATH, request.query_string.decode(), render_table)
    return render_template("invoices/list.html", table=Markup(table), q=q)


# =========================================================
# Create
# =========================================================
@invoices.route(f"{INVOICES_PATH}/create", methods=["GET", "POST"])
@login_required
def create_invoice():
    if request.method == "POST":
        result = actions.create_invoice(None, request.form)
        if isinstance(result, Response):
            flash("Invoice created.", "success")
            return result
        return _render_form("invoices/create.html", state=result)

    return _render_form("invoices/create.html")


# =========================================================
# Edit
# =========================================================
@invoices.route(f"{INVOICES_PATH}/<invoice_id>/edit", methods=["GET", "POST"])
@login_required
def edit_invoice(invoice_id: str):
    invoice = db.get_or_404(Invoice, invoice_id)

    if request.method == "POST":
        result = actions.update_invoice(invoice.id, None, request.form)
        if isinstance(result, Response):
            flash("Invoice updated.", "success")
            return result
        return _render_form("invoices/edit.html", state=result, invoice=invoice)

    return _render_form("invoices/edit.html", invoice=invoice)


# =========================================================
# Delete
# =========================================================
@invoices.route(f"{INVOICES_PATH}/<invoice_id>/delete", methods=["POST"])
@login_required
def delete_invoice(invoice_id: str):
    state = actions.delete_invoice(invoice_id)
    if state is not None:
        flash(state.message, "danger")
    else:
        flash("Invoice deleted.", "success")
    return redirect(url_for("invoices.list_invoices"))
