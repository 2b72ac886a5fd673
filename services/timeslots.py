from sqlalchemy import case
from sqlalchemy.exc import IntegrityError

from models import db
from models.timeslot import TimeSlot, WEEKDAYS
from services.errors import AlreadyExists, NotFound, ValidationError
from services.validation import parse_time_slot_payload, parse_time_slot_update

# Monday first instead of alphabetical
_DAY_ORDER = case({day: i for i, day in enumerate(WEEKDAYS)}, value=TimeSlot.day)


def get_time_slot(slot_id: int) -> TimeSlot:
    slot = db.session.get(TimeSlot, slot_id)
    if slot is None:
        raise NotFound("Time slot not found")
    return slot


def list_time_slots(day=None, is_available=None):
    q = TimeSlot.query
    if day:
        if day not in WEEKDAYS:
            raise ValidationError("Invalid day")
        q = q.filter(TimeSlot.day == day)
    if is_available is not None:
        q = q.filter(TimeSlot.is_available.is_(is_available))
    return q.order_by(_DAY_ORDER, TimeSlot.start_time.asc()).all()


def create_time_slot(data: dict) -> TimeSlot:
    values = parse_time_slot_payload(data)

    # friendly pre-check; the unique constraint still has the final say
    existing = TimeSlot.query.filter_by(
        day=values["day"], start_time=values["start_time"], end_time=values["end_time"]
    ).first()
    if existing:
        raise AlreadyExists("Time slot already exists")

    slot = TimeSlot(**values)
    db.session.add(slot)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise AlreadyExists("Time slot already exists")
    return slot


def update_time_slot(slot_id: int, data: dict) -> TimeSlot:
    slot = get_time_slot(slot_id)
    for key, value in parse_time_slot_update(data).items():
        setattr(slot, key, value)
    db.session.commit()
    return slot


def delete_time_slot(slot_id: int) -> None:
    slot = get_time_slot(slot_id)
    db.session.delete(slot)
    db.session.commit()
