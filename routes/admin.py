import json

from flask import Blueprint, jsonify, g, request

from models import db
from models.audit_log import AuditLog
from models.booking import Booking
from models.user import User, Role
from security.rbac import ADMIN, require_roles
from services import booking_service
from utils.audit import log_event
from utils.serializers import booking_to_dict

admin_bp = Blueprint("admin", __name__, url_prefix="/admin")


@admin_bp.get("/bookings/stats")
@require_roles("ADMIN")
def booking_stats():
    stats = booking_service.booking_stats()
    recent = Booking.query.order_by(Booking.created_at.desc()).limit(5).all()
    stats["total_users"] = User.query.count()
    stats["recent_bookings"] = [booking_to_dict(b) for b in recent]
    return jsonify(stats), 200


@admin_bp.get("/users")
@require_roles("ADMIN")
def list_users():
    role_filter = (request.args.get("role") or "").strip().upper()
    q = User.query
    if role_filter:
        q = q.join(User.roles).filter(Role.name == role_filter)

    users = q.order_by(User.created_at.desc()).limit(200).all()
    return jsonify([
        {
            "id": u.id,
            "email": u.email,
            "full_name": u.full_name,
            "phone_number": u.phone_number,
            "roles": u.role_names,
            "created_at": u.created_at.isoformat(),
        }
        for u in users
    ]), 200


@admin_bp.post("/users/<int:user_id>/roles")
@require_roles("ADMIN")
def update_user_roles(user_id: int):
    data = request.get_json(silent=True) or {}
    roles = data.get("roles")
    if not isinstance(roles, list) or not roles:
        return jsonify(error="roles must be a non-empty list"), 400

    role_names = {name.strip().upper() for name in roles if isinstance(name, str) and name.strip()}
    available_roles = Role.query.filter(Role.name.in_(role_names)).all()
    missing = role_names - {r.name for r in available_roles}
    if missing or not role_names:
        return jsonify(error="Unknown role(s)", missing=sorted(missing)), 400

    user = db.session.get(User, user_id)
    if not user:
        return jsonify(error="User not found"), 404

    if ADMIN not in role_names and any(r.name == ADMIN for r in user.roles):
        if user.id == g.user.id:
            return jsonify(error="Cannot remove your own ADMIN role"), 403
        admin_count = User.query.join(User.roles).filter(Role.name == ADMIN).count()
        if admin_count <= 1:
            return jsonify(error="Cannot remove the last ADMIN"), 403

    user.roles = available_roles
    db.session.commit()

    log_event("ADMIN_UPDATE_ROLES", user_id=g.user.id, entity="user", entity_id=user.id, metadata={"roles": sorted(role_names)})
    return jsonify(message="Roles updated", roles=user.role_names), 200


@admin_bp.get("/audit-logs")
@require_roles("ADMIN")
def list_audit_logs():
    limit = max(1, min(request.args.get("limit", type=int) or 200, 500))

    q = AuditLog.query
    action = request.args.get("action")
    if action:
        q = q.filter(AuditLog.action == action)
    user_id = request.args.get("user_id", type=int)
    if user_id is not None:
        q = q.filter(AuditLog.user_id == user_id)

    rows = q.order_by(AuditLog.timestamp.desc(), AuditLog.id.desc()).limit(limit).all()
    return jsonify([
        {
            "id": r.id,
            "timestamp": r.timestamp.isoformat(),
            "user_id": r.user_id,
            "action": r.action,
            "entity": r.entity,
            "entity_id": r.entity_id,
            "ip": r.ip,
            "metadata": json.loads(r.metadata_json) if r.metadata_json else None,
        }
        for r in rows
    ]), 200
