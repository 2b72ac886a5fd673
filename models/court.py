from models.db import db
from utils.clock import utcnow

COURT_FEATURES = ("lights", "showers", "lockers", "parking", "cafeteria")

class Court(db.Model):
    __tablename__ = "courts"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False, unique=True)
    description = db.Column(db.String(500), nullable=True)

    capacity = db.Column(db.Integer, nullable=False)  # players, 1..15
    price_per_hour = db.Column(db.Integer, nullable=False, default=0)  # smallest currency unit

    is_available = db.Column(db.Boolean, default=True, nullable=False)
    features = db.Column(db.JSON, nullable=False, default=list)

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    maintenance_windows = db.relationship(
        "MaintenanceWindow",
        back_populates="court",
        cascade="all, delete-orphan",
        order_by="MaintenanceWindow.start_date",
    )
    bookings = db.relationship("Booking", back_populates="court", lazy="dynamic")

    __table_args__ = (
        db.CheckConstraint("capacity >= 1 AND capacity <= 15", name="ck_courts_capacity"),
        db.CheckConstraint("price_per_hour >= 0", name="ck_courts_price"),
    )


class MaintenanceWindow(db.Model):
    __tablename__ = "court_maintenance"

    id = db.Column(db.Integer, primary_key=True)
    court_id = db.Column(db.Integer, db.ForeignKey("courts.id"), nullable=False, index=True)

    # both ends inclusive
    start_date = db.Column(db.Date, nullable=False)
    end_date = db.Column(db.Date, nullable=False)
    reason = db.Column(db.String(255), nullable=True)

    court = db.relationship("Court", back_populates="maintenance_windows")

    def covers(self, day) -> bool:
        return self.start_date <= day <= self.end_date
