from functools import wraps
from flask_jwt_extended import get_jwt, verify_jwt_in_request, get_jwt_identity
from flask import g
from server.extension import db
from server.models import User
from .roles import ALL_ROLES


def role_required(*roles):
    """
    Guard a Resource method behind a valid access token.

    With no roles every known role may pass. The signed-in user is loaded
    into g.current_user so audit rows can name who made a change.
    """
    allowed_roles = roles or ALL_ROLES

    def wrapper(fn):
        @wraps(fn)
        def decorator(*args, **kwargs):
            verify_jwt_in_request()
            if get_jwt().get("role") not in allowed_roles:
                return {"message": "Forbidden: this action needs an admin account"}, 403

            try:
                user_id = int(get_jwt_identity())
            except (TypeError, ValueError):
                return {"message": "Invalid token identity"}, 401

            user = db.session.get(User, user_id)
            if user is None:
                return {"message": "Account no longer exists"}, 404
            g.current_user = user

            return fn(*args, **kwargs)
        return decorator
    return wrapper
