"""
Caller identity for authenticated routes.

Authentication happens upstream (identity provider / proxy), which forwards
the authenticated user id in a request header. Services never look the user
up themselves; routes resolve it here and pass it down explicitly.
"""

import os

from flask import request

AUTH_USER_HEADER = os.environ.get('AUTH_USER_HEADER', 'X-User-Id')


class AuthorizationError(Exception):
    """Raised when an operation needs an authenticated caller and has none."""


def current_user_id():
    """Return the authenticated user id for this request, or None."""
    user_id = request.headers.get(AUTH_USER_HEADER, '').strip()
    return user_id or None


def require_user_id() -> str:
    """Return the authenticated user id or raise AuthorizationError."""
    user_id = current_user_id()
    if not user_id:
        raise AuthorizationError("Unauthorized")
    return user_id
