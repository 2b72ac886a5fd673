"""
Booking availability, conflict resolution and lifecycle.

create_booking runs an overlap pre-check against live bookings to give a
friendly SlotConflict, then inserts. The partial unique indexes on the
bookings table are what actually stop two concurrent requests for the same
range; their IntegrityError is mapped to the same SlotConflict.
"""
import logging
from datetime import datetime, time, timedelta

from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from models import db
from models.booking import Booking
from models.court import Court
from models.timeslot import TimeSlot
from security.rbac import can_act_on, is_admin
from services.availability import (
    free_times,
    hourly_grid,
    is_court_bookable,
    overlaps,
    parse_hhmm,
    weekday_name,
)
from services.errors import (
    CapacityExceeded,
    Forbidden,
    InvalidState,
    NotFound,
    SlotConflict,
    TooLate,
    Unavailable,
)
from services.validation import (
    parse_booking_request,
    parse_date,
    parse_payment_update,
    parse_reason,
    parse_status,
)
from utils.clock import utcnow, venue_now

logger = logging.getLogger(__name__)

# Booking.status state machine. pending -> completed is an admin shortcut.
ALLOWED_TRANSITIONS = {
    "pending": {"confirmed", "cancelled", "completed"},
    "confirmed": {"completed", "cancelled"},
    "cancelled": set(),
    "completed": set(),
}

SLOT_TAKEN_MESSAGE = "This time slot is already booked"


# ---------- lookups ----------

def get_court_or_404(court_id: int) -> Court:
    court = db.session.get(Court, court_id)
    if court is None:
        raise NotFound("Court not found")
    return court


def _get_booking(booking_id: int) -> Booking:
    booking = db.session.get(Booking, booking_id)
    if booking is None:
        raise NotFound("Booking not found")
    return booking


def _authorize(booking: Booking, actor) -> None:
    if not can_act_on(actor, booking.user_id):
        raise Forbidden("Not authorized to access this booking")


def live_bookings(court_id, day):
    """Non-cancelled bookings on `day` for the court, or court-less ones when court_id is None."""
    q = Booking.query.filter(Booking.date == day, Booking.status != "cancelled")
    if court_id is None:
        q = q.filter(Booking.court_id.is_(None))
    else:
        q = q.filter(Booking.court_id == court_id)
    return q.order_by(Booking.start_time.asc()).all()


def _matching_time_slot(day, start_time: str, end_time: str):
    return TimeSlot.query.filter_by(
        day=weekday_name(day),
        start_time=start_time,
        end_time=end_time,
        is_available=True,
    ).first()


def _start_datetime(booking: Booking) -> datetime:
    hours, minutes = divmod(parse_hhmm(booking.start_time), 60)
    return datetime.combine(booking.date, time(hours, minutes))


# ---------- create ----------

def create_booking(user, data: dict, now=None) -> Booking:
    now = now or venue_now()
    req = parse_booking_request(data, today=now.date())

    court = None
    time_slot = None
    if req["court_id"] is not None:
        court = get_court_or_404(req["court_id"])
        if not is_court_bookable(court, req["date"]):
            raise Unavailable("Court is not available on the selected date")
        if req["number_of_players"] > court.capacity:
            raise CapacityExceeded(f"Maximum capacity for this court is {court.capacity} players")
    else:
        time_slot = _matching_time_slot(req["date"], req["start_time"], req["end_time"])
        if time_slot is None:
            raise Unavailable("No bookable time slot matches the selected time")

    start = parse_hhmm(req["start_time"])
    end = parse_hhmm(req["end_time"])
    for existing in live_bookings(req["court_id"], req["date"]):
        if overlaps(start, end, parse_hhmm(existing.start_time), parse_hhmm(existing.end_time)):
            raise SlotConflict(SLOT_TAKEN_MESSAGE)

    if court is not None:
        price = court.price_per_hour * req["duration"]
        if req["equipment"]:
            price += current_app.config.get("EQUIPMENT_SURCHARGE", 50)
    elif req["price"] is not None and is_admin(user):
        price = req["price"]
    else:
        # players always pay the slot price; an override from them is ignored
        price = time_slot.price

    booking = Booking(
        user_id=user.id,
        court_id=req["court_id"],
        date=req["date"],
        start_time=req["start_time"],
        end_time=req["end_time"],
        duration=req["duration"],
        price=price,
        number_of_players=req["number_of_players"],
        equipment=req["equipment"],
        notes=req["notes"],
        status="pending",
        payment_status="unpaid",
    )
    db.session.add(booking)

    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        # Lost the race to a concurrent insert of the same range
        logger.info(
            "Unique index rejected booking court=%s date=%s %s-%s",
            req["court_id"], req["date"], req["start_time"], req["end_time"],
        )
        raise SlotConflict(SLOT_TAKEN_MESSAGE)

    logger.info("Booking %s created by user %s", booking.id, user.id)
    return booking


# ---------- lifecycle ----------

def _check_cancellation_window(booking: Booking, now: datetime) -> None:
    if booking.status == "pending" and not current_app.config.get("CANCEL_WINDOW_APPLIES_TO_PENDING", True):
        return

    cutoff_hours = current_app.config.get("CANCEL_CUTOFF_HOURS", 24)
    if _start_datetime(booking) - now <= timedelta(hours=cutoff_hours):
        raise TooLate(f"Booking cannot be cancelled less than {cutoff_hours} hours before start time")


def _cancel(booking: Booking, actor, reason, now: datetime) -> Booking:
    if booking.is_terminal:
        raise InvalidState(f"Booking is already {booking.status}")

    if not is_admin(actor):
        _check_cancellation_window(booking, now)

    booking.status = "cancelled"
    booking.cancellation_reason = reason
    booking.cancelled_at = utcnow()
    if booking.payment_status == "paid":
        booking.payment_status = "refunded"

    db.session.commit()
    logger.info("Booking %s cancelled by user %s", booking.id, actor.id)
    return booking


def cancel_booking(booking_id: int, actor, reason=None, now=None) -> Booking:
    booking = _get_booking(booking_id)
    _authorize(booking, actor)
    return _cancel(booking, actor, parse_reason(reason), now or venue_now())


def update_booking_status(booking_id: int, actor, status, reason=None, now=None) -> Booking:
    status = parse_status(status)
    booking = _get_booking(booking_id)
    _authorize(booking, actor)

    if status == "cancelled":
        return _cancel(booking, actor, parse_reason(reason), now or venue_now())

    if not is_admin(actor):
        raise Forbidden("Only an admin can change booking status")
    if booking.is_terminal:
        raise InvalidState(f"Cannot update a {booking.status} booking")
    if status not in ALLOWED_TRANSITIONS[booking.status]:
        raise InvalidState(f"Cannot move booking from {booking.status} to {status}")

    if booking.status == "pending" and status == "completed":
        logger.warning("Booking %s moved from pending straight to completed by admin %s", booking.id, actor.id)

    booking.status = status
    db.session.commit()
    return booking


def update_payment(booking_id: int, actor, data: dict) -> Booking:
    if not is_admin(actor):
        raise Forbidden("Only an admin can update payment details")
    changes = parse_payment_update(data)
    booking = _get_booking(booking_id)
    if booking.is_terminal:
        raise InvalidState(f"Cannot update a {booking.status} booking")

    for key, value in changes.items():
        setattr(booking, key, value)
    db.session.commit()
    return booking


def delete_booking(booking_id: int, actor) -> None:
    if not is_admin(actor):
        raise Forbidden("Only an admin can delete bookings")
    booking = _get_booking(booking_id)
    db.session.delete(booking)
    db.session.commit()
    logger.info("Booking %s deleted by admin %s", booking_id, actor.id)


# ---------- queries ----------

def get_booking(booking_id: int, actor) -> Booking:
    booking = _get_booking(booking_id)
    _authorize(booking, actor)
    return booking


def list_bookings(actor, court_id=None, status=None, payment_status=None, date_from=None, date_to=None):
    q = Booking.query
    if not is_admin(actor):
        q = q.filter(Booking.user_id == actor.id)
    if court_id is not None:
        q = q.filter(Booking.court_id == court_id)
    if status:
        q = q.filter(Booking.status == parse_status(status))
    if payment_status:
        q = q.filter(Booking.payment_status == payment_status)

    start = parse_date(date_from) if date_from else None
    end = parse_date(date_to) if date_to else None
    if start:
        q = q.filter(Booking.date >= start)
    if end:
        q = q.filter(Booking.date <= end)

    return q.order_by(Booking.date.asc(), Booking.start_time.asc()).all()


def _count_since(today, days: int) -> int:
    """Bookings dated from `days` days ago up to and including today."""
    return Booking.query.filter(
        Booking.date >= today - timedelta(days=days),
        Booking.date <= today,
    ).count()


def booking_stats(today=None) -> dict:
    today = today or venue_now().date()
    rows = (
        db.session.query(Booking.status, func.count(Booking.id), func.coalesce(func.sum(Booking.price), 0))
        .group_by(Booking.status)
        .all()
    )

    stats = {
        "total_bookings": 0,
        "total_revenue": 0,
        "today_bookings": Booking.query.filter(Booking.date == today).count(),
        "last_7_days_bookings": _count_since(today, 7),
        "last_30_days_bookings": _count_since(today, 30),
        "by_status": {status: 0 for status in ALLOWED_TRANSITIONS},
    }
    for status, count, revenue in rows:
        stats["total_bookings"] += count
        stats["by_status"][status] = count
        if status != "cancelled":
            stats["total_revenue"] += int(revenue)
    return stats


def _grid_for(court_id, day):
    """
    Candidate (start, end) windows for a day.

    The weekly TimeSlot table wins when it has rows for the weekday. Courts
    fall back to the default hourly business grid; court-less bookings only
    exist through the table, so they get no fallback.
    """
    rows = TimeSlot.query.filter_by(day=weekday_name(day)).all()
    if rows:
        return [(parse_hhmm(r.start_time), parse_hhmm(r.end_time)) for r in rows if r.is_available]
    if court_id is None:
        return []
    return hourly_grid(
        current_app.config.get("BUSINESS_HOURS_START", 6),
        current_app.config.get("BUSINESS_HOURS_END", 22),
    )


def available_times(court_id, day):
    """HH:MM start times still free on `day`, or [] when the court is closed that day."""
    if court_id is not None:
        court = get_court_or_404(court_id)
        if not is_court_bookable(court, day):
            return []

    busy = [(parse_hhmm(b.start_time), parse_hhmm(b.end_time)) for b in live_bookings(court_id, day)]
    return free_times(_grid_for(court_id, day), busy)
