# Overview: Request decorators for API routes.

from functools import wraps
from flask import request, jsonify, g

from .services import auth_service


def require_auth(f):
    """
    Require a signed bearer token and establish the user scope.

    Sets g.user_id, the key every collection read or write is scoped by.

    Returns 401 if:
    - No Authorization header
    - Token signature does not verify
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        auth_header = request.headers.get("Authorization")

        if not auth_header or not auth_header.startswith("Bearer "):
            return jsonify({"error": "Authentication required"}), 401

        token = auth_header.split(" ", 1)[1]
        user_id = auth_service.resolve_user_id(token)

        if not user_id:
            return jsonify({"error": "Invalid or expired token"}), 401

        g.user_id = user_id
        return f(*args, **kwargs)

    return decorated_function
