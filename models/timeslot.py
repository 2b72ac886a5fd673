from models.db import db
from utils.clock import utcnow

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

class TimeSlot(db.Model):
    """Recurring weekly template row: a bookable range and its price on one weekday."""

    __tablename__ = "time_slots"

    id = db.Column(db.Integer, primary_key=True)

    day = db.Column(db.String(10), nullable=False, index=True)  # one of WEEKDAYS
    start_time = db.Column(db.String(5), nullable=False)  # HH:MM, zero padded
    end_time = db.Column(db.String(5), nullable=False)

    price = db.Column(db.Integer, nullable=False, default=0)
    is_available = db.Column(db.Boolean, default=True, nullable=False)
    is_special_price = db.Column(db.Boolean, default=False, nullable=False)

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        db.UniqueConstraint("day", "start_time", "end_time", name="uq_time_slot_day_range"),
    )
