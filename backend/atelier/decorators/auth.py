from functools import wraps
from flask_jwt_extended import verify_jwt_in_request, get_jwt, get_jwt_identity
from atelier.constants.roles import ROLE_USER
from atelier.services.policy import authorize
from atelier.services.records import Actor


def current_actor() -> Actor:
    claims = get_jwt() or {}
    ident = get_jwt_identity()
    return Actor(
        user_id=int(ident) if ident is not None else None,
        name=claims.get('name') or '',
        role=claims.get('role') or ROLE_USER,
    )


def require_permissions(*codes: str):
    def outer(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            authorize(current_actor(), *codes)
            return fn(*args, **kwargs)
        return wrapper
    return outer
