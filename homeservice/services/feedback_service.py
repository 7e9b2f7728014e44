"""
Feedback on completed bookings and the service/business rating aggregates
derived from it.
"""

from decimal import ROUND_HALF_UP, Decimal

from flask import current_app
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import Booking, BookingStatus, Feedback, Service
from .exceptions import (
    DuplicateFeedbackError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
)

TWO_PLACES = Decimal("0.01")


def _round_rating(value):
    if value is None:
        return None
    return Decimal(str(value)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def refresh_service_rating(service):
    """Recompute mean rating and review count from the full feedback set."""
    average, count = db.session.execute(
        select(func.avg(Feedback.rating), func.count(Feedback.id)).where(
            Feedback.service_id == service.id
        )
    ).one()
    service.rating = _round_rating(average)
    service.total_reviews = count


def refresh_business_rating(business):
    average = db.session.scalar(
        select(func.avg(Feedback.rating))
        .join(Service, Service.id == Feedback.service_id)
        .where(Service.business_profile_id == business.id)
    )
    business.rating = _round_rating(average)


def add_feedback(customer_id, booking_id, rating, comments=None):
    booking = db.session.get(Booking, booking_id)
    if not booking:
        raise NotFoundError("Booking not found")

    if booking.customer_id != customer_id:
        raise ForbiddenError("You can only review your own bookings")

    if booking.status != BookingStatus.COMPLETED.value:
        raise InvalidStateError("Feedback can only be given for completed bookings")

    existing = db.session.scalar(select(Feedback).where(Feedback.booking_id == booking.id))
    if existing:
        raise DuplicateFeedbackError("Feedback already submitted for this booking")

    feedback = Feedback(
        booking_id=booking.id,
        service_id=booking.service_id,
        customer_id=customer_id,
        rating=Decimal(str(rating)),
        comments=comments,
    )
    db.session.add(feedback)

    try:
        db.session.flush()
        refresh_service_rating(booking.service)
        refresh_business_rating(booking.business)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise DuplicateFeedbackError("Feedback already submitted for this booking")

    current_app.logger.info(
        f"Feedback {feedback.id} added for booking {booking.id}; "
        f"service {booking.service_id} now {booking.service.rating} "
        f"over {booking.service.total_reviews} reviews"
    )
    return feedback
