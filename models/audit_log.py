from models.db import db
from utils.clock import utcnow

class AuditLog(db.Model):
    __tablename__ = "audit_logs"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, nullable=True, index=True)  # null for anonymous events
    action = db.Column(db.String(80), nullable=False, index=True)  # e.g. BOOKING_CREATE, LOGIN_FAIL
    entity = db.Column(db.String(40), nullable=True)   # booking, court, time_slot, user
    entity_id = db.Column(db.String(40), nullable=True)

    ip = db.Column(db.String(64), nullable=True)
    metadata_json = db.Column(db.Text, nullable=True)

    timestamp = db.Column(db.DateTime, default=utcnow, nullable=False)
