from models.db import db
from utils.clock import utcnow

BOOKING_STATUSES = ("pending", "confirmed", "cancelled", "completed")
TERMINAL_STATUSES = ("cancelled", "completed")
PAYMENT_STATUSES = ("unpaid", "paid", "refunded")
PAYMENT_METHODS = ("cash", "online", "card", "")

class Booking(db.Model):
    __tablename__ = "bookings"

    id = db.Column(db.Integer, primary_key=True)

    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    # null for bookings made against the weekly time slot table instead of a court
    court_id = db.Column(db.Integer, db.ForeignKey("courts.id"), nullable=True, index=True)

    date = db.Column(db.Date, nullable=False, index=True)
    start_time = db.Column(db.String(5), nullable=False)  # HH:MM, zero padded
    end_time = db.Column(db.String(5), nullable=False)
    duration = db.Column(db.Integer, nullable=False)  # hours, 1..4

    price = db.Column(db.Integer, nullable=False)
    number_of_players = db.Column(db.Integer, nullable=False)
    equipment = db.Column(db.Boolean, default=False, nullable=False)

    status = db.Column(db.String(20), nullable=False, default="pending")
    payment_status = db.Column(db.String(20), nullable=False, default="unpaid")
    payment_method = db.Column(db.String(20), nullable=False, default="")

    notes = db.Column(db.String(500), nullable=True)
    cancellation_reason = db.Column(db.String(500), nullable=True)
    cancelled_at = db.Column(db.DateTime, nullable=True)

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user = db.relationship("User", back_populates="bookings")
    court = db.relationship("Court", back_populates="bookings")

    __table_args__ = (
        # Hard business rule: one live booking per (court, date, range).
        # Cancelled rows drop out of the index so the range can be booked again.
        db.Index(
            "uq_booking_court_range_active",
            "court_id", "date", "start_time", "end_time",
            unique=True,
            sqlite_where=db.text("status != 'cancelled'"),
            postgresql_where=db.text("status != 'cancelled'"),
        ),
        # Same guard for court-less bookings, where court_id is NULL
        db.Index(
            "uq_booking_slot_range_active",
            "date", "start_time", "end_time",
            unique=True,
            sqlite_where=db.text("court_id IS NULL AND status != 'cancelled'"),
            postgresql_where=db.text("court_id IS NULL AND status != 'cancelled'"),
        ),
    )

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES
