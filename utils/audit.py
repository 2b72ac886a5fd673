import json
from flask import has_request_context, request

from models import db
from models.audit_log import AuditLog

def log_event(action: str, user_id=None, entity=None, entity_id=None, metadata=None):
    """Append an audit row. Works outside a request too (CLI commands)."""
    ip = None
    if has_request_context():
        ip = request.headers.get("X-Forwarded-For", request.remote_addr)

    db.session.add(AuditLog(
        user_id=user_id,
        action=action,
        entity=entity,
        entity_id=str(entity_id) if entity_id is not None else None,
        ip=ip,
        metadata_json=json.dumps(metadata, default=str) if metadata else None,
    ))
    db.session.commit()
