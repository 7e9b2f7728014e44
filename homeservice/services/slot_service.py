import datetime

from sqlalchemy import select

from ..extensions import db
from ..models import BusinessProfile, Slot
from .exceptions import ForbiddenError, NotFoundError, ValidationError

DEFAULT_INTERVAL_MINUTES = 30


def get_public_slots(business_id):
    """Slot templates of a verified business, earliest first."""
    business = db.session.get(BusinessProfile, business_id)
    if not business:
        raise NotFoundError("Business not found")
    if not business.is_verified:
        raise ForbiddenError("Business is not verified")

    return db.session.scalars(
        select(Slot)
        .where(Slot.business_profile_id == business.id)
        .order_by(Slot.start_time)
    ).all()


def _minutes(value):
    return value.hour * 60 + value.minute


def _as_time(minutes):
    return datetime.time(minutes // 60, minutes % 60)


def slot_windows(work_start, work_end, interval=DEFAULT_INTERVAL_MINUTES,
                 break_start=None, break_end=None):
    """
    Split working hours into back-to-back (start, end) windows of `interval`
    minutes. Windows overlapping the break are skipped and a trailing window
    that would run past work_end is dropped.
    """
    if interval <= 0:
        raise ValidationError("Interval must be a positive number of minutes")
    if work_end <= work_start:
        raise ValidationError("Working hours end must be after start")
    if (break_start is None) != (break_end is None):
        raise ValidationError("Break needs both start and end")
    if break_start is not None and break_end <= break_start:
        raise ValidationError("Break end must be after break start")

    start, end = _minutes(work_start), _minutes(work_end)
    pause = (_minutes(break_start), _minutes(break_end)) if break_start is not None else None

    windows = []
    current = start
    while current + interval <= end:
        window_end = current + interval
        if pause and current < pause[1] and window_end > pause[0]:
            current = pause[1]
            continue
        windows.append((_as_time(current), _as_time(window_end)))
        current = window_end
    return windows


def generate_slots(business, work_start, work_end, interval=DEFAULT_INTERVAL_MINUTES,
                   break_start=None, break_end=None):
    """Create slots for the windows whose start time the business does not have yet."""
    existing = set(
        db.session.scalars(
            select(Slot.start_time).where(Slot.business_profile_id == business.id)
        )
    )

    created = []
    for start_time, end_time in slot_windows(
        work_start, work_end, interval, break_start, break_end
    ):
        if start_time in existing:
            continue
        slot = Slot(
            business_profile_id=business.id, start_time=start_time, end_time=end_time
        )
        db.session.add(slot)
        created.append(slot)

    db.session.commit()
    return created
