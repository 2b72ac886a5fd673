from flask import Blueprint, request, jsonify, g

from security.rbac import require_roles
from services import booking_service, courts
from services.availability import is_court_bookable
from services.errors import ValidationError
from services.validation import parse_date
from utils.audit import log_event
from utils.serializers import court_to_dict, maintenance_to_dict

court_bp = Blueprint("courts", __name__, url_prefix="/courts")


# ---------- public ----------
@court_bp.get("")
def list_courts():
    available_only = (request.args.get("available") or "").lower() == "true"
    return jsonify([court_to_dict(c) for c in courts.list_courts(available_only)]), 200


@court_bp.get("/<int:court_id>")
def get_court(court_id: int):
    return jsonify(court_to_dict(booking_service.get_court_or_404(court_id))), 200


@court_bp.get("/<int:court_id>/availability")
def court_availability(court_id: int):
    date_str = request.args.get("date")
    if not date_str:
        raise ValidationError("Please provide a date")
    day = parse_date(date_str)
    if day is None:
        raise ValidationError("Invalid date. Use YYYY-MM-DD")

    court = booking_service.get_court_or_404(court_id)
    times = booking_service.available_times(court.id, day)
    return jsonify(
        court_id=court.id,
        date=day.isoformat(),
        bookable=is_court_bookable(court, day),
        available=len(times) > 0,
        available_times=times,
    ), 200


# ---------- ADMIN: manage courts ----------
@court_bp.post("")
@require_roles("ADMIN")
def create_court():
    court = courts.create_court(request.get_json(silent=True) or {})
    log_event("COURT_CREATE", user_id=g.user.id, entity="court", entity_id=court.id)
    return jsonify(court_to_dict(court)), 201


@court_bp.put("/<int:court_id>")
@require_roles("ADMIN")
def update_court(court_id: int):
    data = request.get_json(silent=True) or {}
    court = courts.update_court(court_id, data)
    log_event("COURT_UPDATE", user_id=g.user.id, entity="court", entity_id=court.id, metadata={"fields": sorted(data)})
    return jsonify(court_to_dict(court)), 200


@court_bp.post("/<int:court_id>/maintenance")
@require_roles("ADMIN")
def add_maintenance(court_id: int):
    window = courts.add_maintenance_window(court_id, request.get_json(silent=True) or {})
    log_event(
        "COURT_MAINTENANCE_ADD",
        user_id=g.user.id,
        entity="court",
        entity_id=court_id,
        metadata={"start_date": window.start_date, "end_date": window.end_date},
    )
    return jsonify(maintenance_to_dict(window)), 201


@court_bp.delete("/<int:court_id>/maintenance/<int:window_id>")
@require_roles("ADMIN")
def remove_maintenance(court_id: int, window_id: int):
    courts.remove_maintenance_window(court_id, window_id)
    log_event("COURT_MAINTENANCE_REMOVE", user_id=g.user.id, entity="court", entity_id=court_id, metadata={"window_id": window_id})
    return jsonify(message="Maintenance window removed"), 200
