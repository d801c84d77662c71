# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

# backend/tcoffice/routes/auth.py
"""
Authentication API routes

- POST /register creates a back-office account
- POST /login issues a server-side session delivered as an HttpOnly cookie
  (the token is also returned for non-browser clients)
- POST /logout revokes the session and clears the cookie
"""

from flask import Blueprint, current_app, g, jsonify, request

from ..services import auth_service
from ..services import session_service
from ..services.session_service import SESSION_ABSOLUTE_TIMEOUT
from ..validation import ConflictError, ValidationError
from ..decorators import get_request_token, require_auth


auth_bp = Blueprint("auth", __name__)


def _set_session_cookie(response, token: str):
    response.set_cookie(
        current_app.config["SESSION_COOKIE_NAME"],
        token,
        max_age=int(SESSION_ABSOLUTE_TIMEOUT.total_seconds()),
        httponly=True,
        secure=current_app.config.get("SESSION_COOKIE_SECURE", False),
        samesite="Lax",
    )
    return response


@auth_bp.post("/register")
def register_route():
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify({"error": "Invalid JSON payload"}), 400
    email = data.get("email")
    password = data.get("password")

    if not isinstance(email, str) or not isinstance(password, str) or not email or not password:
        return jsonify({"error": "email and password required"}), 400

    try:
        user = auth_service.create_user(email=email, password=password, name=data.get("name"))
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except Exception:
        current_app.logger.exception("Failed to register user")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"user": user.to_dict(), "message": "Registration successful"}), 201


@auth_bp.post("/login")
def login_route():
    """
    Authenticate user and create session token.

    Returns user info and session token on success and sets the session cookie.
    """
    try:
        data = request.get_json(silent=True) or {}
        if not isinstance(data, dict):
            return jsonify({"error": "Invalid JSON payload"}), 400
        email = data.get("email")
        password = data.get("password")

        if not all(isinstance(v, str) and v for v in (email, password)):
            return jsonify({"error": "email and password required"}), 400

        user = auth_service.authenticate(email, password)
        if not user:
            current_app.logger.info("Failed login for %s", auth_service.normalize_email(email))
            return jsonify({"error": "Invalid email or password"}), 401

        session, token = session_service.create_session(
            user_id=user.id,
            user_agent=request.headers.get("User-Agent"),
            ip_address=request.remote_addr,
        )
        current_app.logger.info("User %s logged in", user.email)

        response = jsonify({
            "user": user.to_dict(),
            "token": token,
            "session": session.to_dict(),
            "message": "Login successful",
        })
        return _set_session_cookie(response, token), 200

    except Exception:
        current_app.logger.exception("Failed to login user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/logout")
def logout_route():
    """Revoke the current session (cookie or Bearer token) and clear the cookie."""
    try:
        token = get_request_token()
        if not token:
            return jsonify({"error": "Not logged in"}), 401

        if not session_service.revoke_session(token, reason="User logout"):
            return jsonify({"error": "Invalid or expired session"}), 401
        current_app.logger.info("Session revoked on logout")

        response = jsonify({"message": "Logout successful"})
        response.delete_cookie(current_app.config["SESSION_COOKIE_NAME"])
        return response, 200

    except Exception:
        current_app.logger.exception("Failed to logout user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.get("/me")
@require_auth
def me_route():
    return jsonify({"user": g.current_user.to_dict()})
