import bcrypt
from flask import Blueprint, current_app, jsonify, make_response, request
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import Role, User
from ..services.email_service import email_service
from ..services.exceptions import MarketplaceError
from ..services.password_reset_store import PasswordResetStore, generate_otp
from ..utils.auth import clear_auth_cookie, create_token, set_auth_cookie
from ..utils.validators import (
    OTP_RE,
    missing_fields,
    validate_email,
    validate_name,
    validate_password,
    validate_phone,
)

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")

SELF_SERVICE_ROLES = (Role.CUSTOMER.value, Role.PROVIDER.value)


def hash_password(password):
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def check_password(password, password_hash):
    if not password_hash:
        return False
    return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))


@auth_bp.route("/register", methods=["POST"])
def register_user():
    """
    Register a customer or provider account
    ---
    tags:
      - Auth
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [name, email, phone, password]
          properties:
            name:
              type: string
              example: Asha Rao
            email:
              type: string
              example: asha@example.com
            phone:
              type: string
              example: "9876543210"
            password:
              type: string
              example: secret123
            role:
              type: string
              enum: [customer, provider]
              default: customer
    responses:
      201:
        description: User registered successfully
      400:
        description: Missing or invalid fields
      409:
        description: Email or phone already registered
    """
    try:
        data = request.get_json(silent=True) or {}

        missing = missing_fields(data, ["name", "email", "phone", "password"])
        if missing:
            return jsonify({
                "status": "error",
                "message": f"Missing required fields: {', '.join(missing)}"
            }), 400

        try:
            name = validate_name(data.get("name"))
            email = validate_email(data.get("email"))
            phone = validate_phone(str(data.get("phone")))
            password = validate_password(data.get("password"))
        except ValueError as e:
            return jsonify({"status": "error", "message": str(e)}), 400

        role = str(data.get("role") or Role.CUSTOMER.value).lower()
        if role not in SELF_SERVICE_ROLES:
            return jsonify({
                "status": "error",
                "message": f"Role '{role}' cannot be used for registration"
            }), 400

        if db.session.scalar(select(User).where(User.email == email)):
            return jsonify({"status": "error", "message": "Email already registered"}), 409

        if db.session.scalar(select(User).where(User.phone == phone)):
            return jsonify({"status": "error", "message": "Phone number already registered"}), 409

        user = User(
            name=name,
            email=email,
            phone=phone,
            password_hash=hash_password(password),
            role=role,
        )
        db.session.add(user)
        db.session.commit()

        return jsonify({
            "status": "success",
            "message": "User registered successfully",
            "user": user.to_dict()
        }), 201

    except IntegrityError as e:
        db.session.rollback()
        current_app.logger.error(f"Register integrity error: {e}")
        return jsonify({
            "status": "error",
            "message": "Email or phone already registered",
            "details": str(e.orig)
        }), 409

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error registering user: {e}")
        return jsonify({
            "status": "error",
            "message": "Internal server error",
            "details": str(e)
        }), 500


@auth_bp.route("/login", methods=["POST"])
def login_user():
    """
    Log in and receive the session cookie
    ---
    tags:
      - Auth
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [email, password]
          properties:
            email:
              type: string
            password:
              type: string
    responses:
      200:
        description: Login successful, token set as cookie and returned
      400:
        description: Email and password required
      401:
        description: Invalid credentials
    """
    try:
        data = request.get_json(silent=True) or {}
        if not data.get("email") or not data.get("password"):
            return jsonify({
                "status": "error",
                "message": "Email and password required"
            }), 400

        password = data["password"]
        try:
            email = validate_email(data["email"])
        except ValueError as e:
            return jsonify({"status": "error", "message": str(e)}), 400
        if not isinstance(password, str):
            return jsonify({"status": "error", "message": "Password must be a string"}), 400

        user = db.session.scalar(select(User).where(User.email == email))
        if not user or not check_password(password, user.password_hash):
            return jsonify({
                "status": "error",
                "message": "Invalid credentials"
            }), 401

        token = create_token(user)
        response = make_response(jsonify({
            "status": "success",
            "message": "Login successful",
            "token": token,
            "user": user.to_dict()
        }), 200)
        return set_auth_cookie(response, token)

    except Exception as e:
        current_app.logger.error(f"Error logging in: {e}")
        return jsonify({
            "status": "error",
            "message": "Internal server error",
            "details": str(e)
        }), 500


@auth_bp.route("/logout", methods=["POST"])
def logout_user():
    response = make_response(jsonify({
        "status": "success",
        "message": "Logged out successfully"
    }), 200)
    return clear_auth_cookie(response)


@auth_bp.route("/forgot-password", methods=["POST"])
def forgot_password():
    """
    Email a one-time passcode for resetting the password
    ---
    tags:
      - Auth
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [email]
          properties:
            email:
              type: string
    responses:
      200:
        description: Same response whether or not the email is registered
      400:
        description: Invalid email
    """
    generic = {
        "status": "success",
        "message": "If the email is registered, an OTP has been sent"
    }
    try:
        data = request.get_json(silent=True) or {}
        try:
            email = validate_email(data.get("email"))
        except ValueError as e:
            return jsonify({"status": "error", "message": str(e)}), 400

        user = db.session.scalar(select(User).where(User.email == email))
        if not user:
            return jsonify(generic), 200

        ttl = current_app.config["OTP_TTL_MINUTES"]
        otp = generate_otp()
        PasswordResetStore().set(email, otp, ttl)

        result = email_service.send_otp_email(email, user.name, otp, ttl)
        if not result.get("success"):
            current_app.logger.error(f"Failed to send OTP email to {email}: {result.get('error')}")

        return jsonify(generic), 200

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error in forgot password: {e}")
        return jsonify({
            "status": "error",
            "message": "Internal server error",
            "details": str(e)
        }), 500


@auth_bp.route("/verify-otp", methods=["POST"])
def verify_otp():
    try:
        data = request.get_json(silent=True) or {}
        if not data.get("email") or not data.get("otp"):
            return jsonify({"status": "error", "message": "Email and OTP required"}), 400

        try:
            email = validate_email(data["email"])
        except ValueError as e:
            return jsonify({"status": "error", "message": str(e)}), 400
        otp = str(data["otp"]).strip()
        if not OTP_RE.match(otp):
            return jsonify({"status": "error", "message": "OTP must be 6 digits"}), 400

        PasswordResetStore().check(email, otp)

        return jsonify({"status": "success", "message": "OTP verified"}), 200

    except MarketplaceError as e:
        return jsonify({"status": "error", "message": e.message}), e.status_code

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error verifying OTP: {e}")
        return jsonify({
            "status": "error",
            "message": "Internal server error",
            "details": str(e)
        }), 500


@auth_bp.route("/reset-password", methods=["POST"])
def reset_password():
    """
    Set a new password using a valid passcode
    ---
    tags:
      - Auth
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [email, otp, new_password]
          properties:
            email:
              type: string
            otp:
              type: string
              example: "123456"
            new_password:
              type: string
    responses:
      200:
        description: Password reset successfully
      400:
        description: Invalid input or invalid/expired OTP
      404:
        description: User not found
    """
    try:
        data = request.get_json(silent=True) or {}
        missing = missing_fields(data, ["email", "otp", "new_password"])
        if missing:
            return jsonify({
                "status": "error",
                "message": f"Missing required fields: {', '.join(missing)}"
            }), 400

        try:
            email = validate_email(data["email"])
        except ValueError as e:
            return jsonify({"status": "error", "message": str(e)}), 400
        otp = str(data["otp"]).strip()
        if not OTP_RE.match(otp):
            return jsonify({"status": "error", "message": "OTP must be 6 digits"}), 400

        try:
            new_password = validate_password(data.get("new_password"))
        except ValueError as e:
            return jsonify({"status": "error", "message": str(e)}), 400

        store = PasswordResetStore()
        store.check(email, otp)

        user = db.session.scalar(select(User).where(User.email == email))
        if not user:
            return jsonify({"status": "error", "message": "User not found"}), 404

        user.password_hash = hash_password(new_password)
        db.session.commit()
        store.delete(email)

        result = email_service.send_password_reset_confirmation(email, user.name)
        if not result.get("success"):
            current_app.logger.error(
                f"Failed to send reset confirmation to {email}: {result.get('error')}"
            )

        return jsonify({"status": "success", "message": "Password reset successfully"}), 200

    except MarketplaceError as e:
        return jsonify({"status": "error", "message": e.message}), e.status_code

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error resetting password: {e}")
        return jsonify({
            "status": "error",
            "message": "Internal server error",
            "details": str(e)
        }), 500
