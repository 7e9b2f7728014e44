# Create tables and load demo data: python seed.py

from datetime import time

import bcrypt
from sqlalchemy import select

from homeservice.extensions import db
from homeservice.models import (
    Address,
    BusinessProfile,
    Category,
    Role,
    Service,
    User,
)
from homeservice.services.slot_service import generate_slots

PASSWORD_PLAINTEXT = "password123"

DEMO_CATEGORIES = [
    ("Plumbing", "Leaks, taps, pipes and drains"),
    ("Electrical", "Wiring, fixtures and appliance installs"),
    ("Cleaning", "Home and deep cleaning"),
    ("Carpentry", "Furniture repair and fittings"),
]

DEMO_PROVIDERS = [
    {
        "name": "Ravi Kumar",
        "email": "ravi.provider@homeservice.example",
        "phone": "9000000101",
        "business_name": "Ravi Plumbing Works",
        "category": "Plumbing",
        "city": "Bengaluru",
        "state": "Karnataka",
        "services": [("Tap repair", 300, 30), ("Drain unclogging", 650, 60)],
    },
    {
        "name": "Meera Shah",
        "email": "meera.provider@homeservice.example",
        "phone": "9000000102",
        "business_name": "Spark Electricals",
        "category": "Electrical",
        "city": "Pune",
        "state": "Maharashtra",
        "services": [("Fan installation", 400, 45), ("Wiring check", 800, 90)],
    },
]


def make_password_hash(plain: str) -> str:
    """Same bcrypt logic as the register route."""
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def get_or_create_user(name, email, phone, role):
    user = db.session.scalar(select(User).where(User.email == email))
    if user:
        print(f"  ℹ {role} {email} already exists (id={user.id})")
        return user

    user = User(
        name=name,
        email=email,
        phone=phone,
        password_hash=make_password_hash(PASSWORD_PLAINTEXT),
        role=role,
    )
    db.session.add(user)
    db.session.flush()
    print(f"  ✅ Created {role} {email} (id={user.id})")
    return user


def seed_demo_data() -> None:
    """
    Seed demo accounts, catalog and slots into the *current* DB.

    IMPORTANT: Call this ONLY inside an app.app_context().
    """
    print("🔄 Seeding demo data...")

    # 1) Accounts; admins only ever come from here
    get_or_create_user("Site Admin", "admin@homeservice.example", "9000000001", Role.ADMIN.value)
    customer = get_or_create_user(
        "Asha Rao", "asha.customer@homeservice.example", "9000000201", Role.CUSTOMER.value
    )
    if not customer.addresses:
        db.session.add(
            Address(
                user_id=customer.id,
                address_type="home",
                street="12 MG Road",
                city="Bengaluru",
                state="Karnataka",
                zip_code="560001",
            )
        )

    # 2) Categories
    categories = {}
    for name, description in DEMO_CATEGORIES:
        category = db.session.scalar(select(Category).where(Category.name == name))
        if not category:
            category = Category(name=name, description=description)
            db.session.add(category)
            db.session.flush()
            print(f"  ✅ Created category '{name}'")
        categories[name] = category

    # 3) Verified businesses with services
    businesses = []
    for entry in DEMO_PROVIDERS:
        provider = get_or_create_user(entry["name"], entry["email"], entry["phone"], Role.PROVIDER.value)
        business = db.session.scalar(
            select(BusinessProfile).where(BusinessProfile.provider_id == provider.id)
        )
        if not business:
            business = BusinessProfile(
                provider_id=provider.id,
                category_id=categories[entry["category"]].id,
                business_name=entry["business_name"],
                phone=provider.phone,
                city=entry["city"],
                state=entry["state"],
                is_verified=True,
            )
            db.session.add(business)
            db.session.flush()
            for service_name, price, duration in entry["services"]:
                db.session.add(
                    Service(
                        business_profile_id=business.id,
                        name=service_name,
                        price=price,
                        duration=duration,
                    )
                )
            print(f"  ✅ Created business '{business.business_name}' (id={business.id})")
        businesses.append(business)

    db.session.commit()

    # 4) Slots 09:00-17:00 with a lunch break; existing starts are skipped
    for business in businesses:
        created = generate_slots(business, time(9, 0), time(17, 0), 30, time(13, 0), time(14, 0))
        print(f"  ✅ {len(created)} slot(s) added for '{business.business_name}'")

    print("🎉 Demo data ready")


if __name__ == "__main__":
    from main import app

    with app.app_context():
        db.create_all()
        seed_demo_data()
