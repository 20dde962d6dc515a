"""
api.auth - Admin session check for API routes.

The session cookie carries a signed {id, email, role} payload.  Only the
verification side matters here; issuing tokens is left to the login flow
(make_session_token is what it calls).
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import wraps
from typing import Optional

from flask import g, jsonify, request
from itsdangerous import BadSignature, URLSafeSerializer

import config

_SALT = "fbfood-session-v1"


@dataclass
class SessionPayload:
    id: int
    email: str
    role: str


def _serializer() -> URLSafeSerializer:
    return URLSafeSerializer(config.SECRET, salt=_SALT)


def make_session_token(payload: SessionPayload) -> str:
    return _serializer().dumps(
        {"id": payload.id, "email": payload.email, "role": payload.role}
    )


def verify_session_token(token: Optional[str]) -> Optional[SessionPayload]:
    """Return the payload of a valid token, None for anything else."""
    if not token:
        return None
    try:
        data = _serializer().loads(token)
    except BadSignature:
        return None
    if not isinstance(data, dict):
        return None
    uid, email, role = data.get("id"), data.get("email"), data.get("role")
    if not isinstance(uid, int) or not isinstance(email, str) or not isinstance(role, str):
        return None
    return SessionPayload(id=uid, email=email, role=role)


def require_admin(view):
    """Reject the request with 403 unless the session belongs to an ADMIN."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        payload = verify_session_token(request.cookies.get(config.SESSION_COOKIE))
        if payload is None or payload.role != "ADMIN":
            return jsonify({"error": "Forbidden"}), 403
        g.session_user = payload
        return view(*args, **kwargs)

    return wrapper
