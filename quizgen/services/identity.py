"""Identity resolution for requests and socket events.

Sign-in itself belongs to an external identity provider; all the core needs is
the ``user_id`` it leaves in the Flask session.
"""
from functools import wraps

from flask import session

from quizgen.errors import UnauthenticatedError


def current_user_id():
    return session.get("user_id")


def require_user_id():
    user_id = current_user_id()
    if not user_id:
        raise UnauthenticatedError()
    return user_id


def login_required(f):
    @wraps(f)
    def wrapped(*args, **kwargs):
        require_user_id()
        return f(*args, **kwargs)
    return wrapped
