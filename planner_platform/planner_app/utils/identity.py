"""Caller identity supplied by the authenticating proxy."""

from __future__ import annotations

from functools import wraps
from http import HTTPStatus

from flask import g, jsonify, request

USER_HEADER = "X-User-ID"


def current_user_id() -> str | None:
    raw = request.headers.get(USER_HEADER, "").strip()
    return raw[:64] or None


def user_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        user_id = current_user_id()
        if not user_id:
            return (
                jsonify({"error": "authentication_required", "message": f"Missing {USER_HEADER} header"}),
                HTTPStatus.UNAUTHORIZED,
            )
        g.user_id = user_id
        return view(*args, **kwargs)

    return wrapper
