import datetime

import jwt
from flask import current_app, g, jsonify, request

from ..models import Role
from ..permissions import ACCESS_RULES, is_public_endpoint


def create_token(user):
    """Sign a session token carrying the caller's identity and role."""
    payload = {
        "user_id": user.id,
        "email": user.email,
        "role": user.role,
        "exp": datetime.datetime.now(datetime.timezone.utc)
        + datetime.timedelta(hours=current_app.config["JWT_EXPIRES_HOURS"]),
    }
    return jwt.encode(payload, current_app.config["JWT_SECRET"], algorithm="HS256")


def decode_token(token):
    return jwt.decode(token, current_app.config["JWT_SECRET"], algorithms=["HS256"])


def read_token():
    """Cookie first; a Bearer header is accepted for API clients and the docs UI."""
    token = request.cookies.get(current_app.config["AUTH_COOKIE_NAME"])
    if token:
        return token

    header = request.headers.get("Authorization", "")
    if header.startswith("Bearer "):
        return header.split(" ", 1)[1].strip() or None
    return None


def set_auth_cookie(response, token):
    response.set_cookie(
        current_app.config["AUTH_COOKIE_NAME"],
        token,
        max_age=current_app.config["JWT_EXPIRES_HOURS"] * 3600,
        httponly=True,
        secure=current_app.config["AUTH_COOKIE_SECURE"],
        samesite="Strict",
    )
    return response


def clear_auth_cookie(response):
    response.delete_cookie(current_app.config["AUTH_COOKIE_NAME"])
    return response


def authorize_request():
    """
    before_request hook: authenticate the session token and apply the
    access table for the matched endpoint.
    """
    endpoint = request.endpoint
    if request.method == "OPTIONS" or endpoint is None or is_public_endpoint(endpoint):
        return None

    token = read_token()
    if not token:
        return jsonify({"status": "error", "message": "No token provided"}), 401

    try:
        payload = decode_token(token)
    except jwt.ExpiredSignatureError:
        return jsonify({"status": "error", "message": "Token has expired"}), 401
    except jwt.InvalidTokenError:
        return jsonify({"status": "error", "message": "Invalid token"}), 401

    try:
        role = Role(payload.get("role"))
    except ValueError:
        return (
            jsonify({"status": "error", "message": "Access denied: role not found"}),
            403,
        )

    if role not in ACCESS_RULES[endpoint]:
        return (
            jsonify(
                {"status": "error", "message": "Access denied: insufficient permissions"}
            ),
            403,
        )

    g.user_id = payload.get("user_id")
    g.email = payload.get("email")
    g.role = role
    return None
