"""
Booking lifecycle: creation with slot/day conflict checks and the
provider-driven status transitions.

Public API:
  create_booking(customer_id, service_id, slot_id, address_id, booking_date, now=None)
  accept_booking(booking_id, provider_id)
  reject_booking(booking_id, provider_id)
  complete_booking(booking_id, provider_id, policy=None, now=None)
  get_visible_booking(booking_id, user_id)
"""

import datetime

from flask import current_app
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import Address, Booking, BookingStatus, Service, Slot
from .exceptions import (
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    PastDateError,
    SlotConflictError,
    SlotElapsedError,
    SlotNotFinishedError,
    ValidationError,
)

PENDING = BookingStatus.PENDING.value
CONFIRMED = BookingStatus.CONFIRMED.value
COMPLETED = BookingStatus.COMPLETED.value
CANCELLED = BookingStatus.CANCELLED.value

# target status -> the only status it may be reached from
TRANSITIONS = {
    CONFIRMED: PENDING,
    CANCELLED: PENDING,
    COMPLETED: CONFIRMED,
}

COMPLETION_MANUAL = "manual"
COMPLETION_AFTER_SLOT_END = "after_slot_end"
COMPLETION_POLICIES = (COMPLETION_MANUAL, COMPLETION_AFTER_SLOT_END)


def can_transition(current, target):
    return TRANSITIONS.get(target) == current


def find_live_booking(slot_id, booking_date):
    """The non-cancelled booking holding slot_id on booking_date, if any."""
    return db.session.scalar(
        select(Booking).where(
            Booking.slot_id == slot_id,
            Booking.booking_date == booking_date,
            Booking.status != CANCELLED,
        )
    )


def create_booking(customer_id, service_id, slot_id, address_id, booking_date, now=None):
    now = now or datetime.datetime.now()
    today = now.date()

    if booking_date < today:
        raise PastDateError("Cannot book slots for past dates")

    address = db.session.scalar(
        select(Address).where(Address.id == address_id, Address.user_id == customer_id)
    )
    if not address:
        raise NotFoundError("Address not found. Please add an address first")

    service = db.session.get(Service, service_id)
    if not service:
        raise NotFoundError("Service not found")

    slot = db.session.get(Slot, slot_id)
    if not slot:
        raise NotFoundError("Slot not found")

    if booking_date == today:
        slot_start = datetime.datetime.combine(today, slot.start_time)
        if slot_start <= now:
            raise SlotElapsedError("Cannot book slots that have already passed for today")

    if slot.business_profile_id != service.business_profile_id:
        raise ValidationError("Slot does not belong to the service's business")

    business = service.business
    if not business.is_verified:
        raise ForbiddenError("Business is not verified yet")
    if not service.is_active:
        raise ForbiddenError("Service is not currently available")

    if find_live_booking(slot.id, booking_date):
        raise SlotConflictError("Slot is already booked for the selected date")

    booking = Booking(
        customer_id=customer_id,
        business_profile_id=business.id,
        service_id=service.id,
        slot_id=slot.id,
        address_id=address.id,
        booking_date=booking_date,
        status=PENDING,
        total_price=service.price,
        slot_hold=True,
    )
    db.session.add(booking)
    try:
        db.session.commit()
    except IntegrityError:
        # Another request took the slot between our read and this insert
        db.session.rollback()
        raise SlotConflictError("Slot is already booked for the selected date")

    current_app.logger.info(
        f"Booking {booking.id} created for slot {slot.id} on {booking_date.isoformat()}"
    )
    return booking


def load_provider_booking(booking_id, provider_id):
    booking = db.session.get(Booking, booking_id)
    if not booking:
        raise NotFoundError("Booking not found")

    business = booking.business
    if not business:
        raise NotFoundError("Business profile not found")

    if business.provider_id != provider_id:
        raise ForbiddenError("You are not authorized to manage this booking")

    return booking


def _apply_transition(booking, target):
    if not can_transition(booking.status, target):
        raise InvalidStateError(
            f"Only {TRANSITIONS[target]} bookings can be moved to {target} "
            f"(booking is {booking.status})"
        )

    booking.status = target
    if target == CANCELLED:
        # releases the (slot, day) unique index for other customers
        booking.slot_hold = None
    db.session.commit()

    current_app.logger.info(f"Booking {booking.id} moved to {target}")
    return booking


def accept_booking(booking_id, provider_id):
    booking = load_provider_booking(booking_id, provider_id)
    return _apply_transition(booking, CONFIRMED)


def reject_booking(booking_id, provider_id):
    booking = load_provider_booking(booking_id, provider_id)
    return _apply_transition(booking, CANCELLED)


def complete_booking(booking_id, provider_id, policy=None, now=None):
    booking = load_provider_booking(booking_id, provider_id)
    policy = policy or current_app.config["BOOKING_COMPLETION_POLICY"]

    if policy == COMPLETION_AFTER_SLOT_END and booking.status == CONFIRMED:
        now = now or datetime.datetime.now()
        slot_end = datetime.datetime.combine(booking.booking_date, booking.slot.end_time)
        if now < slot_end:
            raise SlotNotFinishedError("Slot time has not finished yet")

    return _apply_transition(booking, COMPLETED)


def get_visible_booking(booking_id, user_id):
    """A booking is visible to its customer and to the provider who owns its business."""
    booking = db.session.get(Booking, booking_id)
    if not booking:
        raise NotFoundError("Booking not found")

    business = booking.business
    if booking.customer_id != user_id and (not business or business.provider_id != user_id):
        raise ForbiddenError("You are not authorized to view this booking")

    return booking
