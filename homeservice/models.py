import enum
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Enum,
    ForeignKeyConstraint,
    Index,
    Integer,
    Numeric,
    String,
    Time,
    func,
)
from sqlalchemy.orm import Mapped, declarative_base, mapped_column, relationship

Base = declarative_base()
metadata = Base.metadata


class Role(str, enum.Enum):
    CUSTOMER = "customer"
    PROVIDER = "provider"
    ADMIN = "admin"


class BookingStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


ADDRESS_TYPES = ("home", "work", "billing", "shipping", "other")


class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        Index("uq_users_email", "email", unique=True),
        Index("uq_users_phone", "phone", unique=True),
    )

    id = mapped_column(Integer, primary_key=True)
    name = mapped_column(String(255), nullable=False)
    email = mapped_column(String(255), nullable=False)
    phone = mapped_column(String(20), nullable=False)
    password_hash = mapped_column(String(255), nullable=False)
    role = mapped_column(
        Enum(*[r.value for r in Role], name="role_type"),
        nullable=False,
        default=Role.CUSTOMER.value,
    )
    avatar = mapped_column(String(500))
    created_at = mapped_column(DateTime, nullable=False, server_default=func.now())

    addresses: Mapped[List["Address"]] = relationship(
        "Address", uselist=True, back_populates="user", passive_deletes=True
    )
    business_profiles: Mapped[List["BusinessProfile"]] = relationship(
        "BusinessProfile", uselist=True, back_populates="provider", passive_deletes=True
    )
    bookings: Mapped[List["Booking"]] = relationship(
        "Booking", uselist=True, back_populates="customer", passive_deletes=True
    )

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "role": self.role,
            "avatar": self.avatar,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class Address(Base):
    __tablename__ = "addresses"
    __table_args__ = (
        ForeignKeyConstraint(
            ["user_id"], ["users.id"], ondelete="CASCADE", name="fk_address_user"
        ),
        Index("fk_address_user_idx", "user_id"),
    )

    id = mapped_column(Integer, primary_key=True)
    user_id = mapped_column(Integer, nullable=False)
    address_type = mapped_column(
        Enum(*ADDRESS_TYPES, name="address_type"), nullable=False, default="home"
    )
    street = mapped_column(String(255), nullable=False)
    city = mapped_column(String(100), nullable=False)
    state = mapped_column(String(100), nullable=False)
    zip_code = mapped_column(String(20), nullable=False)

    user: Mapped["User"] = relationship("User", back_populates="addresses")

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "address_type": self.address_type,
            "street": self.street,
            "city": self.city,
            "state": self.state,
            "zip_code": self.zip_code,
        }

    def one_line(self):
        return f"{self.street}, {self.city}, {self.state} {self.zip_code}"


class Category(Base):
    __tablename__ = "categories"
    __table_args__ = (Index("uq_categories_name", "name", unique=True),)

    id = mapped_column(Integer, primary_key=True)
    name = mapped_column(String(255), nullable=False)
    description = mapped_column(String(1000))
    image = mapped_column(String(500))
    created_at = mapped_column(DateTime, nullable=False, server_default=func.now())

    business_profiles: Mapped[List["BusinessProfile"]] = relationship(
        "BusinessProfile", uselist=True, back_populates="category", passive_deletes=True
    )

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "image": self.image,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class BusinessProfile(Base):
    __tablename__ = "business_profiles"
    __table_args__ = (
        ForeignKeyConstraint(
            ["provider_id"], ["users.id"], ondelete="CASCADE", name="fk_bp_provider"
        ),
        ForeignKeyConstraint(
            ["category_id"], ["categories.id"], ondelete="SET NULL", name="fk_bp_category"
        ),
        Index("fk_bp_provider_idx", "provider_id"),
        Index("idx_bp_verified", "is_verified"),
    )

    id = mapped_column(Integer, primary_key=True)
    provider_id = mapped_column(Integer, nullable=False)
    category_id = mapped_column(Integer)
    business_name = mapped_column(String(255), nullable=False)
    description = mapped_column(String(1000))
    phone = mapped_column(String(20), nullable=False)
    state = mapped_column(String(100), nullable=False)
    city = mapped_column(String(100), nullable=False)
    website = mapped_column(String(255))
    logo = mapped_column(String(500))
    cover_image = mapped_column(String(500))
    rating = mapped_column(Numeric(3, 2))
    is_verified = mapped_column(Boolean, nullable=False, default=False)
    created_at = mapped_column(DateTime, nullable=False, server_default=func.now())

    provider: Mapped["User"] = relationship("User", back_populates="business_profiles")
    category: Mapped[Optional["Category"]] = relationship(
        "Category", back_populates="business_profiles"
    )
    services: Mapped[List["Service"]] = relationship(
        "Service", uselist=True, back_populates="business", passive_deletes=True
    )
    slots: Mapped[List["Slot"]] = relationship(
        "Slot",
        uselist=True,
        back_populates="business",
        passive_deletes=True,
        order_by="Slot.start_time",
    )
    bookings: Mapped[List["Booking"]] = relationship(
        "Booking", uselist=True, back_populates="business", passive_deletes=True
    )

    def to_dict(self):
        provider = self.provider
        return {
            "id": self.id,
            "provider_id": self.provider_id,
            "business_name": self.business_name,
            "description": self.description,
            "category_id": self.category_id,
            "category": self.category.name if self.category else None,
            "phone": self.phone,
            "state": self.state,
            "city": self.city,
            "website": self.website,
            "logo": self.logo,
            "cover_image": self.cover_image,
            "rating": float(self.rating) if self.rating is not None else None,
            "is_verified": bool(self.is_verified),
            "status": "active" if self.is_verified else "pending",
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "provider_name": provider.name if provider else None,
            "provider_email": provider.email if provider else None,
            "provider_phone": provider.phone if provider else None,
        }


class Service(Base):
    __tablename__ = "services"
    __table_args__ = (
        ForeignKeyConstraint(
            ["business_profile_id"],
            ["business_profiles.id"],
            ondelete="CASCADE",
            name="fk_service_business",
        ),
        Index("fk_service_business_idx", "business_profile_id", "is_active"),
    )

    id = mapped_column(Integer, primary_key=True)
    business_profile_id = mapped_column(Integer, nullable=False)
    name = mapped_column(String(255), nullable=False)
    description = mapped_column(String(1000))
    price = mapped_column(Integer, nullable=False)
    duration = mapped_column(Integer, nullable=False)
    image = mapped_column(String(500))
    is_active = mapped_column(Boolean, nullable=False, default=True)
    rating = mapped_column(Numeric(3, 2))
    total_reviews = mapped_column(Integer, nullable=False, default=0)
    created_at = mapped_column(DateTime, nullable=False, server_default=func.now())

    business: Mapped["BusinessProfile"] = relationship(
        "BusinessProfile", back_populates="services"
    )
    bookings: Mapped[List["Booking"]] = relationship(
        "Booking", uselist=True, back_populates="service", passive_deletes=True
    )
    feedback: Mapped[List["Feedback"]] = relationship(
        "Feedback", uselist=True, back_populates="service", passive_deletes=True
    )

    def to_dict(self):
        return {
            "id": self.id,
            "business_profile_id": self.business_profile_id,
            "name": self.name,
            "description": self.description,
            "price": self.price,
            "duration": self.duration,
            "image": self.image,
            "is_active": bool(self.is_active),
            "rating": float(self.rating) if self.rating is not None else None,
            "total_reviews": self.total_reviews or 0,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class Slot(Base):
    __tablename__ = "slots"
    __table_args__ = (
        ForeignKeyConstraint(
            ["business_profile_id"],
            ["business_profiles.id"],
            ondelete="CASCADE",
            name="fk_slot_business",
        ),
        Index("uq_slot_business_start", "business_profile_id", "start_time", unique=True),
    )

    id = mapped_column(Integer, primary_key=True)
    business_profile_id = mapped_column(Integer, nullable=False)
    start_time = mapped_column(Time, nullable=False)
    end_time = mapped_column(Time, nullable=False)
    created_at = mapped_column(DateTime, nullable=False, server_default=func.now())

    business: Mapped["BusinessProfile"] = relationship(
        "BusinessProfile", back_populates="slots"
    )
    bookings: Mapped[List["Booking"]] = relationship(
        "Booking", uselist=True, back_populates="slot", passive_deletes=True
    )

    def to_dict(self):
        return {
            "id": self.id,
            "business_profile_id": self.business_profile_id,
            "start_time": self.start_time.isoformat() if self.start_time else None,
            "end_time": self.end_time.isoformat() if self.end_time else None,
        }


class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        ForeignKeyConstraint(
            ["customer_id"], ["users.id"], ondelete="CASCADE", name="fk_booking_customer"
        ),
        ForeignKeyConstraint(
            ["business_profile_id"],
            ["business_profiles.id"],
            ondelete="CASCADE",
            name="fk_booking_business",
        ),
        ForeignKeyConstraint(
            ["service_id"], ["services.id"], ondelete="CASCADE", name="fk_booking_service"
        ),
        ForeignKeyConstraint(
            ["slot_id"], ["slots.id"], ondelete="CASCADE", name="fk_booking_slot"
        ),
        ForeignKeyConstraint(
            ["address_id"], ["addresses.id"], ondelete="CASCADE", name="fk_booking_address"
        ),
        # slot_hold is NULL once a booking is cancelled, and NULLs never
        # collide in a unique index, so only live bookings hold the slot.
        Index("uq_booking_slot_day", "slot_id", "booking_date", "slot_hold", unique=True),
        Index("idx_booking_customer", "customer_id", "booking_date"),
        Index("idx_booking_business", "business_profile_id", "booking_date"),
    )

    id = mapped_column(Integer, primary_key=True)
    customer_id = mapped_column(Integer, nullable=False)
    business_profile_id = mapped_column(Integer, nullable=False)
    service_id = mapped_column(Integer, nullable=False)
    slot_id = mapped_column(Integer, nullable=False)
    address_id = mapped_column(Integer, nullable=False)
    booking_date = mapped_column(Date, nullable=False)
    status = mapped_column(
        Enum(*[s.value for s in BookingStatus], name="booking_status"),
        nullable=False,
        default=BookingStatus.PENDING.value,
    )
    total_price = mapped_column(Integer, nullable=False)
    slot_hold = mapped_column(Boolean, nullable=True)
    created_at = mapped_column(DateTime, nullable=False, server_default=func.now())

    customer: Mapped["User"] = relationship("User", back_populates="bookings")
    business: Mapped["BusinessProfile"] = relationship(
        "BusinessProfile", back_populates="bookings"
    )
    service: Mapped["Service"] = relationship("Service", back_populates="bookings")
    slot: Mapped["Slot"] = relationship("Slot", back_populates="bookings")
    address: Mapped["Address"] = relationship("Address")
    feedback: Mapped[Optional["Feedback"]] = relationship(
        "Feedback", uselist=False, back_populates="booking", passive_deletes=True
    )

    def to_dict(self):
        return {
            "id": self.id,
            "customer_id": self.customer_id,
            "business_profile_id": self.business_profile_id,
            "service_id": self.service_id,
            "slot_id": self.slot_id,
            "address_id": self.address_id,
            "booking_date": self.booking_date.isoformat() if self.booking_date else None,
            "status": self.status,
            "total_price": self.total_price,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class Feedback(Base):
    __tablename__ = "feedback"
    __table_args__ = (
        ForeignKeyConstraint(
            ["booking_id"], ["bookings.id"], ondelete="CASCADE", name="fk_feedback_booking"
        ),
        ForeignKeyConstraint(
            ["service_id"], ["services.id"], ondelete="CASCADE", name="fk_feedback_service"
        ),
        ForeignKeyConstraint(
            ["customer_id"], ["users.id"], ondelete="CASCADE", name="fk_feedback_customer"
        ),
        Index("uq_feedback_booking", "booking_id", unique=True),
        Index("idx_feedback_service", "service_id", "created_at"),
    )

    id = mapped_column(Integer, primary_key=True)
    booking_id = mapped_column(Integer, nullable=False)
    service_id = mapped_column(Integer, nullable=False)
    customer_id = mapped_column(Integer, nullable=False)
    rating = mapped_column(Numeric(2, 1), nullable=False)
    comments = mapped_column(String(2000))
    created_at = mapped_column(DateTime, nullable=False, server_default=func.now())

    booking: Mapped["Booking"] = relationship("Booking", back_populates="feedback")
    service: Mapped["Service"] = relationship("Service", back_populates="feedback")
    customer: Mapped["User"] = relationship("User")

    def to_dict(self):
        customer = self.customer
        return {
            "id": self.id,
            "booking_id": self.booking_id,
            "service_id": self.service_id,
            "customer_id": self.customer_id,
            "rating": float(self.rating) if self.rating is not None else None,
            "comments": self.comments,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "customer": {
                "name": customer.name if customer else None,
                "avatar": customer.avatar if customer else None,
            },
        }


class PasswordResetCode(Base):
    __tablename__ = "password_reset_codes"
    __table_args__ = {"comment": "One-time passcodes for password reset, one per email."}

    email = mapped_column(String(255), primary_key=True)
    code = mapped_column(String(6), nullable=False)
    expires_at = mapped_column(DateTime, nullable=False)
    created_at = mapped_column(DateTime, nullable=False, server_default=func.now())
