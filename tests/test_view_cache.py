from datetime import date

from invoice_portal import format_money
from invoice_portal.extensions import db
from invoice_portal.models import Invoice
from invoice_portal.services.view_cache import (
    INVOICES_PATH,
    ViewCache,
    cached_page,
    current_revision,
    get_view_cache,
    revalidate_path,
)

from .conftest import USER_EMAIL, USER_PASSWORD, make_test_app


def test_invalidate_drops_every_variant_of_path():
    cache = ViewCache()
    cache.set("/dashboard/invoices", "", 0, "page 1")
    cache.set("/dashboard/invoices", "page=2", 0, "page 2")
    cache.set("/dashboard/customers", "", 0, "customers")

    assert cache.invalidate("/dashboard/invoices") == 2

    assert cache.get("/dashboard/invoices", "", 0) is None
    assert cache.get("/dashboard/invoices", "page=2", 0) is None
    assert cache.get("/dashboard/customers", "", 0) == "customers"
    assert "/dashboard/invoices" not in cache
    assert "/dashboard/customers" in cache


def test_entry_from_older_revision_is_a_miss():
    cache = ViewCache()
    cache.set("/x", "", 3, "old body")

    assert cache.get("/x", "", 3) == "old body"
    assert cache.get("/x", "", 4) is None


def test_invalidate_unknown_path_is_noop():
    cache = ViewCache()
    assert cache.invalidate("/nothing") == 0


def test_revalidate_bumps_shared_revision(app):
    with app.app_context():
        assert current_revision(INVOICES_PATH) == 0
        revalidate_path(INVOICES_PATH)
        assert current_revision(INVOICES_PATH) == 1
        revalidate_path(INVOICES_PATH)
        assert current_revision(INVOICES_PATH) == 2
        assert current_revision("/other") == 0


def test_cached_page_renders_once_per_revision(app):
    calls = []

    def render():
        calls.append(1)
        return "body"

    with app.app_context():
        assert cached_page("/x", "", render) == "body"
        assert cached_page("/x", "", render) == "body"
        assert cached_page("/x", "q=1", render) == "body"
        assert len(calls) == 2

        revalidate_path("/x")
        cached_page("/x", "", render)
        cached_page("/x", "", render)

    assert len(calls) == 3


def test_revalidation_reaches_other_workers(app, db_path, user, invoice):
    """A write handled by one worker stales the listing cached by another."""
    other = make_test_app(db_path)
    worker_1 = app.test_client()
    worker_2 = other.test_client()
    for client in (worker_1, worker_2):
        resp = client.post("/login", data={"email": USER_EMAIL, "password": USER_PASSWORD})
        assert resp.status_code == 302

    before = worker_2.get("/dashboard/invoices").data
    assert b"$50.00" in before
    assert b"$10.50" not in before

    resp = worker_1.post(
        "/dashboard/invoices/create",
        data={"customerId": "c1", "amount": "10.50", "status": "pending"},
    )
    assert resp.status_code == 302

    assert b"$10.50" in worker_2.get("/dashboard/invoices").data


def test_other_worker_keeps_cache_without_revalidation(app, db_path, user, invoice):
    other = make_test_app(db_path)
    client = other.test_client()
    client.post("/login", data={"email": USER_EMAIL, "password": USER_PASSWORD})
    client.get("/dashboard/invoices")

    with app.app_context():
        db.session.add(Invoice(customer_id="c2", amount=1234, status="paid", date=date(2021, 1, 1)))
        db.session.commit()

    assert b"$12.34" not in client.get("/dashboard/invoices").data

    with app.app_context():
        revalidate_path(INVOICES_PATH)

    assert b"$12.34" in client.get("/dashboard/invoices").data


def test_each_app_gets_its_own_cache(app):
    with app.app_context():
        first = get_view_cache()
    assert isinstance(first, ViewCache)
    assert app.extensions["view_cache"] is first


def test_format_money():
    assert format_money(1050) == "$10.50"
    assert format_money(123456789) == "$1,234,567.89"
    assert format_money(0) == "$0.00"
    assert format_money(None) == "$0.00"
    assert format_money(-250) == "-$2.50"
