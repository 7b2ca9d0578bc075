# Overview: Service-layer operations for auth; signed bearer tokens that carry the user id.

"""
Authentication stub.

WHY: Sign-in itself happens with an external provider. The backend only
needs the signed-in user's id, which scopes every collection it touches.
Tokens are itsdangerous-signed payloads {"uid": "<user id>"} keyed by the
app SECRET_KEY; anything that fails the signature check is rejected.
"""

from __future__ import annotations

from flask import current_app
from itsdangerous import BadSignature, URLSafeSerializer


class AuthError(Exception):
    """Raised when a token cannot be issued."""


def _serializer() -> URLSafeSerializer:
    return URLSafeSerializer(
        current_app.config["SECRET_KEY"],
        salt=current_app.config.get("AUTH_TOKEN_SALT", "shopdesk-auth"),
    )


def issue_token(user_id: str) -> str:
    user_id = str(user_id).strip() if user_id is not None else ""
    if not user_id:
        raise AuthError("user_id is required")
    return _serializer().dumps({"uid": user_id})


def resolve_user_id(token: str | None) -> str | None:
    """
    Return the user id for a token, or None if it is missing or forged.
    """
    if not token:
        return None
    try:
        payload = _serializer().loads(token)
    except BadSignature:
        return None
    if not isinstance(payload, dict):
        return None
    user_id = payload.get("uid")
    if not isinstance(user_id, str) or not user_id:
        return None
    return user_id
