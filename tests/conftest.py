from datetime import date

import pytest

from invoice_portal import create_app
from invoice_portal.extensions import db
from invoice_portal.models import Customer, Invoice, User
from invoice_portal.settings import Config
from invoice_portal.utils.passwords import hash_password

USER_EMAIL = "user@nextmail.com"
USER_PASSWORD = "123456"


def make_test_app(db_path):
    class TestConfig(Config):
        TESTING = True
        SECRET_KEY = "test-secret"
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{db_path}"
        RATELIMIT_ENABLED = False
        INVOICES_PER_PAGE = 6

    return create_app(TestConfig)


# --- Fixtures ---
@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "test.db"


@pytest.fixture
def app(db_path):
    app = make_test_app(db_path)
    with app.app_context():
        db.create_all()

    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def request_ctx(app):
    with app.test_request_context():
        yield


@pytest.fixture
def customer(app):
    with app.app_context():
        db.session.add(Customer(id="c1", name="Evil Rabbit", email="evil@rabbit.com"))
        db.session.add(Customer(id="c2", name="Lee Robinson", email="lee@robinson.com"))
        db.session.commit()
    return "c1"


@pytest.fixture
def invoice(app, customer):
    with app.app_context():
        db.session.add(
            Invoice(
                id="inv-1",
                customer_id=customer,
                amount=5000,
                status="pending",
                date=date(2020, 1, 1),
            )
        )
        db.session.commit()
    return "inv-1"


@pytest.fixture
def user(app):
    with app.app_context():
        db.session.add(
            User(
                id="u1",
                name="User",
                email=USER_EMAIL,
                password_hash=hash_password(USER_PASSWORD),
            )
        )
        db.session.commit()
    return "u1"


@pytest.fixture
def logged_in_client(client, user):
    resp = client.post("/login", data={"email": USER_EMAIL, "password": USER_PASSWORD})
    assert resp.status_code == 302
    return client
