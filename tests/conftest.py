"""
Pytest configuration and shared fixtures for the marketplace tests.
"""

import datetime
import os

import bcrypt
import pytest

os.environ["TESTING"] = "True"
os.environ["FLASK_ENV"] = "testing"

from main import create_app  # noqa: E402
from homeservice.extensions import db as database  # noqa: E402
from homeservice.models import (  # noqa: E402
    Address,
    BusinessProfile,
    Category,
    Role,
    Service,
    Slot,
    User,
)
from homeservice.utils.auth import create_token  # noqa: E402

PASSWORD_PLAINTEXT = "password123"

TEST_CONFIG = {
    "TESTING": True,
    "SQLALCHEMY_DATABASE_URI": "sqlite://",
    "SECRET_KEY": "test-secret-key-for-testing-only",
    "JWT_SECRET": "test-jwt-secret",
    "S3_BUCKET_NAME": "test-bucket",
    "S3_BASE_URL": "https://test-bucket.s3.amazonaws.com",
    "BOOKING_COMPLETION_POLICY": "manual",
    "OTP_SWEEP_MINUTES": 0,
}


def make_password_hash(plain: str) -> str:
    # low cost factor keeps the suite fast
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt(rounds=4)).decode("utf-8")


@pytest.fixture
def app():
    """Fresh app and in-memory database per test."""
    app = create_app(TEST_CONFIG)
    with app.app_context():
        database.create_all()
        yield app
        database.session.remove()
        database.drop_all()


@pytest.fixture
def db_session(app):
    return database.session


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(db_session):
    counter = {"n": 0}

    def _make_user(role=Role.CUSTOMER, name=None, email=None, phone=None):
        counter["n"] += 1
        n = counter["n"]
        user = User(
            name=name or f"Test {role.value.title()} {n}",
            email=email or f"{role.value}{n}@example.com",
            phone=phone or f"90000{n:05d}",
            password_hash=make_password_hash(PASSWORD_PLAINTEXT),
            role=role.value,
        )
        db_session.add(user)
        db_session.commit()
        return user

    return _make_user


@pytest.fixture
def customer(make_user):
    return make_user(Role.CUSTOMER, name="Asha Customer", email="customer@example.com")


@pytest.fixture
def other_customer(make_user):
    return make_user(Role.CUSTOMER, name="Vikram Customer", email="other.customer@example.com")


@pytest.fixture
def provider(make_user):
    return make_user(Role.PROVIDER, name="Ravi Provider", email="provider@example.com")


@pytest.fixture
def other_provider(make_user):
    return make_user(Role.PROVIDER, name="Meera Provider", email="other.provider@example.com")


@pytest.fixture
def admin(make_user):
    return make_user(Role.ADMIN, name="Site Admin", email="admin@example.com")


@pytest.fixture
def auth_headers(app):
    """Build a Bearer header for any user."""

    def _auth_headers(user):
        return {"Authorization": f"Bearer {create_token(user)}"}

    return _auth_headers


@pytest.fixture
def category(db_session):
    category = Category(name="Plumbing", description="Pipes and taps")
    db_session.add(category)
    db_session.commit()
    return category


@pytest.fixture
def business(db_session, provider, category):
    """A verified business owned by `provider`."""
    business = BusinessProfile(
        provider_id=provider.id,
        category_id=category.id,
        business_name="Ravi Plumbing Works",
        phone=provider.phone,
        state="Karnataka",
        city="Bengaluru",
        is_verified=True,
    )
    db_session.add(business)
    db_session.commit()
    return business


@pytest.fixture
def unverified_business(db_session, other_provider, category):
    business = BusinessProfile(
        provider_id=other_provider.id,
        category_id=category.id,
        business_name="Pending Electricals",
        phone=other_provider.phone,
        state="Maharashtra",
        city="Pune",
        is_verified=False,
    )
    db_session.add(business)
    db_session.commit()
    return business


@pytest.fixture
def service(db_session, business):
    service = Service(
        business_profile_id=business.id,
        name="Tap repair",
        description="Fix leaking taps",
        price=500,
        duration=30,
        is_active=True,
    )
    db_session.add(service)
    db_session.commit()
    return service


@pytest.fixture
def slots(db_session, business):
    created = [
        Slot(business_profile_id=business.id, start_time=datetime.time(9, 0), end_time=datetime.time(9, 30)),
        Slot(business_profile_id=business.id, start_time=datetime.time(10, 0), end_time=datetime.time(10, 30)),
        Slot(business_profile_id=business.id, start_time=datetime.time(18, 0), end_time=datetime.time(18, 30)),
    ]
    db_session.add_all(created)
    db_session.commit()
    return created


@pytest.fixture
def slot(slots):
    return slots[0]


@pytest.fixture
def address(db_session, customer):
    address = Address(
        user_id=customer.id,
        address_type="home",
        street="12 MG Road",
        city="Bengaluru",
        state="Karnataka",
        zip_code="560001",
    )
    db_session.add(address)
    db_session.commit()
    return address


@pytest.fixture
def future_date():
    return datetime.date.today() + datetime.timedelta(days=7)


@pytest.fixture
def booking_payload(service, slot, address, future_date):
    return {
        "service_id": service.id,
        "slot_id": slot.id,
        "address_id": address.id,
        "booking_date": future_date.isoformat(),
    }


@pytest.fixture
def refetch(db_session):
    """Load a row fresh from the database, bypassing the identity map."""

    def _refetch(model, pk):
        db_session.expire_all()
        return db_session.get(model, pk)

    return _refetch
