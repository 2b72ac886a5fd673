from sqlalchemy.exc import IntegrityError

from models import db
from models.court import Court, MaintenanceWindow
from services.booking_service import get_court_or_404
from services.errors import AlreadyExists, NotFound
from services.validation import parse_court_payload, parse_maintenance_payload


def _commit_unique_name(name: str) -> None:
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise AlreadyExists(f"Court name '{name}' already exists")


def list_courts(available_only: bool = False):
    q = Court.query
    if available_only:
        q = q.filter(Court.is_available.is_(True))
    return q.order_by(Court.name.asc()).all()


def create_court(data: dict) -> Court:
    values = parse_court_payload(data)
    court = Court(**values)
    db.session.add(court)
    _commit_unique_name(court.name)
    return court


def update_court(court_id: int, data: dict) -> Court:
    court = get_court_or_404(court_id)
    values = parse_court_payload(data, partial=True)
    for key, value in values.items():
        setattr(court, key, value)
    _commit_unique_name(court.name)
    return court


def add_maintenance_window(court_id: int, data: dict) -> MaintenanceWindow:
    court = get_court_or_404(court_id)
    window = MaintenanceWindow(court_id=court.id, **parse_maintenance_payload(data))
    db.session.add(window)
    db.session.commit()
    return window


def remove_maintenance_window(court_id: int, window_id: int) -> None:
    window = db.session.get(MaintenanceWindow, window_id)
    if window is None or window.court_id != court_id:
        raise NotFound("Maintenance window not found")
    db.session.delete(window)
    db.session.commit()
