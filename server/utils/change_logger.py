from flask import has_request_context
from flask_jwt_extended import get_jwt_identity
from server.extension import db
from server.models import ChangeLog
from datetime import datetime

def current_actor_id():
    if not has_request_context():
        return None
    try:
        identity = get_jwt_identity()
    except RuntimeError:
        return None  # JWT not verified in this request
    return int(identity) if identity is not None else None


def log_change(entity_type, entity_id, action, details=None, actor_id=None):
    """Queue a ChangeLog row on the current session; committed with the change itself."""
    log_entry = ChangeLog(
        entity_type=entity_type,
        entity_id=entity_id,
        action=action,
        changed_by=actor_id if actor_id is not None else current_actor_id(),
        timestamp=datetime.utcnow(),
        details=details or {}
    )
    db.session.add(log_entry)
    return log_entry
