import os
import sys

from invoice_portal import create_app
from invoice_portal.extensions import db
from invoice_portal.models import Customer, User
from invoice_portal.utils.passwords import hash_password, validate_password

DEFAULT_EMAIL = "user@nextmail.com"
DEFAULT_PASSWORD = "demo123456"

SAMPLE_CUSTOMERS = [
    ("Evil Rabbit", "evil@rabbit.com"),
    ("Delba de Oliveira", "delba@oliveira.com"),
    ("Lee Robinson", "lee@robinson.com"),
    ("Michael Novotny", "michael@novotny.com"),
]


def seed(email: str, password: str) -> None:
    """Create the admin (if missing) and sample customers (if none). Needs an app context."""
    existing = User.query.filter(db.func.lower(User.email) == email).first()
    if existing:
        print("Admin already exists:", email)
    else:
        db.session.add(
            User(name="Dashboard Admin", email=email, password_hash=hash_password(password))
        )
        print("Created admin:", email)

    if Customer.query.count() == 0:
        for name, customer_email in SAMPLE_CUSTOMERS:
            db.session.add(Customer(name=name, email=customer_email))
        print(f"Seeded {len(SAMPLE_CUSTOMERS)} customers")

    db.session.commit()


def main() -> None:
    email = os.environ.get("ADMIN_EMAIL", DEFAULT_EMAIL).strip().lower()
    password = os.environ.get("ADMIN_PASSWORD", DEFAULT_PASSWORD)

    ok, msg = validate_password(password)
    if not ok:
        sys.exit(f"ADMIN_PASSWORD rejected: {msg}")

    app = create_app()
    with app.app_context():
        seed(email, password)


if __name__ == "__main__":
    main()
