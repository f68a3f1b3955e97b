from functools import wraps
from flask import g
from flask_jwt_extended import verify_jwt_in_request, get_jwt_identity
from fieldops import get_workspace
from fieldops.errors import Unauthorized
from fieldops.services.policy import authorize


def _load_actor():
    verify_jwt_in_request()
    # re-read on every request so role / permission edits apply immediately
    actor = get_workspace().users.get_user_by_id(get_jwt_identity())
    if actor is None:
        raise Unauthorized(description='Session user no longer exists')
    authorize(actor)
    g.actor = actor
    return actor


def current_actor() -> dict:
    return g.actor


def login_required(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        _load_actor()
        return fn(*args, **kwargs)
    return wrapper


def require_permissions(*flags: str):
    def outer(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            actor = _load_actor()
            for flag in flags:
                authorize(actor, flag)
            return fn(*args, **kwargs)
        return wrapper
    return outer
