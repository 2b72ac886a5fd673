from flask import Blueprint, request, jsonify, g

from security.rbac import require_roles
from services import booking_service, timeslots
from services.errors import ValidationError
from services.validation import parse_date
from utils.audit import log_event
from utils.serializers import time_slot_to_dict

timeslot_bp = Blueprint("timeslots", __name__, url_prefix="/timeslots")


def _bool_arg(name):
    raw = request.args.get(name)
    if raw is None:
        return None
    return raw.lower() == "true"


# ---------- public ----------
@timeslot_bp.get("")
def list_time_slots():
    rows = timeslots.list_time_slots(day=request.args.get("day"), is_available=_bool_arg("is_available"))
    return jsonify([time_slot_to_dict(s) for s in rows]), 200


@timeslot_bp.get("/day/<day>")
def list_time_slots_for_day(day: str):
    return jsonify([time_slot_to_dict(s) for s in timeslots.list_time_slots(day=day)]), 200


@timeslot_bp.get("/<int:slot_id>")
def get_time_slot(slot_id: int):
    return jsonify(time_slot_to_dict(timeslots.get_time_slot(slot_id))), 200


@timeslot_bp.get("/availability")
def slot_availability():
    # free start times for bookings made without a court
    day = parse_date(request.args.get("date"))
    if day is None:
        raise ValidationError("Please provide a valid date (YYYY-MM-DD)")
    times = booking_service.available_times(None, day)
    return jsonify(date=day.isoformat(), available=len(times) > 0, available_times=times), 200


# ---------- ADMIN: weekly template ----------
@timeslot_bp.post("")
@require_roles("ADMIN")
def create_time_slot():
    slot = timeslots.create_time_slot(request.get_json(silent=True) or {})
    log_event("TIME_SLOT_CREATE", user_id=g.user.id, entity="time_slot", entity_id=slot.id)
    return jsonify(time_slot_to_dict(slot)), 201


@timeslot_bp.put("/<int:slot_id>")
@require_roles("ADMIN")
def update_time_slot(slot_id: int):
    slot = timeslots.update_time_slot(slot_id, request.get_json(silent=True) or {})
    log_event("TIME_SLOT_UPDATE", user_id=g.user.id, entity="time_slot", entity_id=slot.id)
    return jsonify(time_slot_to_dict(slot)), 200


@timeslot_bp.delete("/<int:slot_id>")
@require_roles("ADMIN")
def delete_time_slot(slot_id: int):
    timeslots.delete_time_slot(slot_id)
    log_event("TIME_SLOT_DELETE", user_id=g.user.id, entity="time_slot", entity_id=slot_id)
    return jsonify(message="Time slot deleted"), 200
