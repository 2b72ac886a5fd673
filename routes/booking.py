from flask import Blueprint, request, jsonify, g

from security.rbac import require_roles
from services import booking_service
from services.errors import SlotConflict
from utils.audit import log_event
from utils.auth_context import login_required
from utils.serializers import booking_to_dict

booking_bp = Blueprint("booking", __name__, url_prefix="/bookings")


# ---------- PLAYERS: book a court or weekly slot (DOUBLE-BOOKING SAFE) ----------
@booking_bp.post("")
@login_required
def create_booking():
    data = request.get_json(silent=True) or {}
    try:
        booking = booking_service.create_booking(g.user, data)
    except SlotConflict:
        log_event(
            "BOOKING_FAIL_ALREADY_BOOKED",
            user_id=g.user.id,
            entity="court",
            entity_id=data.get("court_id"),
            metadata={"date": data.get("date"), "start_time": data.get("start_time"), "end_time": data.get("end_time")},
        )
        raise

    log_event(
        "BOOKING_CREATE",
        user_id=g.user.id,
        entity="booking",
        entity_id=booking.id,
        metadata={"court_id": booking.court_id, "price": booking.price},
    )
    return jsonify(booking_to_dict(booking)), 201


# ---------- PLAYERS: own bookings / ADMIN: all bookings ----------
@booking_bp.get("")
@login_required
def list_bookings():
    rows = booking_service.list_bookings(
        g.user,
        court_id=request.args.get("court_id", type=int),
        status=request.args.get("status"),
        payment_status=request.args.get("payment_status"),
        date_from=request.args.get("start_date"),
        date_to=request.args.get("end_date"),
    )
    return jsonify(count=len(rows), bookings=[booking_to_dict(b) for b in rows]), 200


@booking_bp.get("/<int:booking_id>")
@login_required
def get_booking(booking_id: int):
    return jsonify(booking_to_dict(booking_service.get_booking(booking_id, g.user))), 200


# ---------- owner or admin: cancel (policy window for players) ----------
@booking_bp.post("/<int:booking_id>/cancel")
@login_required
def cancel_booking(booking_id: int):
    data = request.get_json(silent=True) or {}
    booking = booking_service.cancel_booking(booking_id, g.user, data.get("reason"))

    log_event("BOOKING_CANCEL", user_id=g.user.id, entity="booking", entity_id=booking.id, metadata={"reason": booking.cancellation_reason})
    return jsonify(booking_to_dict(booking)), 200


@booking_bp.put("/<int:booking_id>/status")
@login_required
def update_status(booking_id: int):
    data = request.get_json(silent=True) or {}
    booking = booking_service.update_booking_status(booking_id, g.user, data.get("status"), data.get("reason"))

    log_event("BOOKING_STATUS", user_id=g.user.id, entity="booking", entity_id=booking.id, metadata={"status": booking.status})
    return jsonify(booking_to_dict(booking)), 200


# ---------- ADMIN: payment bookkeeping / delete ----------
@booking_bp.put("/<int:booking_id>/payment")
@require_roles("ADMIN")
def update_payment(booking_id: int):
    booking = booking_service.update_payment(booking_id, g.user, request.get_json(silent=True) or {})

    log_event(
        "BOOKING_PAYMENT_UPDATE",
        user_id=g.user.id,
        entity="booking",
        entity_id=booking.id,
        metadata={"payment_status": booking.payment_status, "payment_method": booking.payment_method},
    )
    return jsonify(booking_to_dict(booking)), 200


@booking_bp.delete("/<int:booking_id>")
@require_roles("ADMIN")
def delete_booking(booking_id: int):
    booking_service.delete_booking(booking_id, g.user)
    log_event("ADMIN_BOOKING_DELETE", user_id=g.user.id, entity="booking", entity_id=booking_id)
    return jsonify(message="Booking removed"), 200
