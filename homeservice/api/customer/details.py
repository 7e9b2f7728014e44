# User accounts: admin listing, profile read/update, deletion

from flask import Blueprint, current_app, g, jsonify, request
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from ...extensions import db
from ...models import User
from ...utils.validators import validate_email, validate_name, validate_phone

users_bp = Blueprint("users", __name__, url_prefix="/api/users")


@users_bp.route("", methods=["GET"])
def list_users():
    """
    List every user account (admin only)
    ---
    tags:
      - Users
    security:
      - Bearer: []
    responses:
      200:
        description: All users, newest first
      403:
        description: Admin role required
    """
    try:
        users = db.session.scalars(select(User).order_by(User.created_at.desc(), User.id.desc())).all()
        return jsonify({
            "status": "success",
            "count": len(users),
            "users": [user.to_dict() for user in users]
        }), 200

    except Exception as e:
        current_app.logger.error(f"Error listing users: {e}")
        return jsonify({"status": "error", "message": "Failed to fetch users", "details": str(e)}), 500


@users_bp.route("/profile", methods=["GET"])
def get_current_user():
    try:
        user = db.session.get(User, g.user_id)
        if not user:
            return jsonify({"status": "error", "message": "User not found"}), 404

        data = user.to_dict()
        data["addresses"] = [address.to_dict() for address in user.addresses]
        return jsonify({"status": "success", "user": data}), 200

    except Exception as e:
        current_app.logger.error(f"Error fetching profile: {e}")
        return jsonify({"status": "error", "message": "Failed to fetch profile", "details": str(e)}), 500


@users_bp.route("/profile", methods=["PUT"])
def update_current_user():
    """
    Update the caller's own profile
    ---
    tags:
      - Users
    security:
      - Bearer: []
    parameters:
      - in: body
        name: body
        schema:
          type: object
          properties:
            name:
              type: string
            email:
              type: string
            phone:
              type: string
            avatar:
              type: string
              description: URL returned by /api/uploads/avatar
    responses:
      200:
        description: Profile updated
      400:
        description: Invalid field value
      409:
        description: Email or phone already in use
    """
    try:
        user = db.session.get(User, g.user_id)
        if not user:
            return jsonify({"status": "error", "message": "User not found"}), 404

        data = request.get_json(silent=True) or {}

        try:
            if "name" in data:
                user.name = validate_name(data.get("name"))
            if "email" in data:
                email = validate_email(data.get("email"))
                taken = db.session.scalar(select(User).where(User.email == email, User.id != user.id))
                if taken:
                    return jsonify({"status": "error", "message": "Email already in use"}), 409
                user.email = email
            if "phone" in data:
                phone = validate_phone(str(data.get("phone")))
                taken = db.session.scalar(select(User).where(User.phone == phone, User.id != user.id))
                if taken:
                    return jsonify({"status": "error", "message": "Phone number already in use"}), 409
                user.phone = phone
        except ValueError as e:
            db.session.rollback()
            return jsonify({"status": "error", "message": str(e)}), 400

        if "avatar" in data:
            user.avatar = data.get("avatar") or None

        db.session.commit()

        return jsonify({
            "status": "success",
            "message": "Profile updated successfully",
            "user": user.to_dict()
        }), 200

    except IntegrityError as e:
        db.session.rollback()
        current_app.logger.error(f"Profile update integrity error: {e}")
        return jsonify({"status": "error", "message": "Email or phone already in use"}), 409

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error updating profile: {e}")
        return jsonify({"status": "error", "message": "Failed to update profile", "details": str(e)}), 500


@users_bp.route("/<int:user_id>", methods=["GET"])
def get_user(user_id):
    try:
        user = db.session.get(User, user_id)
        if not user:
            return jsonify({"status": "error", "message": f"No user found with ID {user_id}"}), 404

        return jsonify({"status": "success", "user": user.to_dict()}), 200

    except Exception as e:
        current_app.logger.error(f"Error fetching user {user_id}: {e}")
        return jsonify({"status": "error", "message": "Failed to fetch user", "details": str(e)}), 500


@users_bp.route("/<int:user_id>", methods=["DELETE"])
def delete_user(user_id):
    """
    Delete a user and everything they own (admin only)
    ---
    tags:
      - Users
    security:
      - Bearer: []
    parameters:
      - in: path
        name: user_id
        type: integer
        required: true
    responses:
      200:
        description: User deleted
      400:
        description: Admins cannot delete their own account
      404:
        description: User not found
    """
    try:
        if user_id == g.user_id:
            return jsonify({"status": "error", "message": "You cannot delete your own account"}), 400

        user = db.session.get(User, user_id)
        if not user:
            return jsonify({"status": "error", "message": f"No user found with ID {user_id}"}), 404

        db.session.delete(user)
        db.session.commit()

        return jsonify({"status": "success", "message": "User deleted successfully"}), 200

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error deleting user {user_id}: {e}")
        return jsonify({"status": "error", "message": "Failed to delete user", "details": str(e)}), 500
