# Customer feedback on completed bookings

from flask import Blueprint, current_app, g, jsonify, request
from sqlalchemy import select

from ...extensions import db
from ...models import BusinessProfile, Feedback, Service
from ...services import feedback_service
from ...services.exceptions import MarketplaceError
from ...utils.validators import missing_fields, parse_positive_int, parse_rating

feedback_bp = Blueprint("feedback", __name__, url_prefix="/api/feedback")

MAX_COMMENT_LENGTH = 2000


@feedback_bp.route("/business/<int:business_id>", methods=["GET"])
def get_business_feedback(business_id):
    try:
        business = db.session.get(BusinessProfile, business_id)
        if not business:
            return jsonify({"status": "error", "message": "Business not found"}), 404

        feedback = db.session.scalars(
            select(Feedback)
            .join(Service, Service.id == Feedback.service_id)
            .where(Service.business_profile_id == business.id)
            .order_by(Feedback.created_at.desc(), Feedback.id.desc())
        ).all()

        results = []
        for item in feedback:
            data = item.to_dict()
            data["service_name"] = item.service.name
            results.append(data)

        return jsonify({
            "status": "success",
            "rating": float(business.rating) if business.rating is not None else None,
            "feedback": results
        }), 200

    except Exception as e:
        current_app.logger.error(f"Error fetching feedback for business {business_id}: {e}")
        return jsonify({"status": "error", "message": "Failed to fetch feedback", "details": str(e)}), 500


@feedback_bp.route("/service/<int:service_id>", methods=["GET"])
def get_service_feedback(service_id):
    try:
        service = db.session.get(Service, service_id)
        if not service:
            return jsonify({"status": "error", "message": "Service not found"}), 404

        feedback = db.session.scalars(
            select(Feedback)
            .where(Feedback.service_id == service.id)
            .order_by(Feedback.created_at.desc(), Feedback.id.desc())
        ).all()

        return jsonify({
            "status": "success",
            "rating": float(service.rating) if service.rating is not None else None,
            "total_reviews": service.total_reviews or 0,
            "feedback": [item.to_dict() for item in feedback]
        }), 200

    except Exception as e:
        current_app.logger.error(f"Error fetching feedback for service {service_id}: {e}")
        return jsonify({"status": "error", "message": "Failed to fetch feedback", "details": str(e)}), 500


@feedback_bp.route("", methods=["POST"])
def add_feedback():
    """
    Rate a completed booking
    ---
    tags:
      - Feedback
    security:
      - Bearer: []
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [booking_id, rating]
          properties:
            booking_id:
              type: integer
            rating:
              type: number
              minimum: 1
              maximum: 5
              example: 4.5
            comments:
              type: string
              maxLength: 2000
    responses:
      201:
        description: Feedback recorded and service rating refreshed
      400:
        description: Missing or invalid fields
      403:
        description: Booking belongs to another customer
      404:
        description: Booking not found
      409:
        description: Booking not completed, or feedback already given
    """
    try:
        data = request.get_json(silent=True) or {}
        missing = missing_fields(data, ["booking_id", "rating"])
        if missing:
            return jsonify({
                "status": "error",
                "message": f"Missing required fields: {', '.join(missing)}"
            }), 400

        try:
            booking_id = parse_positive_int(data.get("booking_id"), "booking_id")
            rating = parse_rating(data.get("rating"))
        except ValueError as e:
            return jsonify({"status": "error", "message": str(e)}), 400

        comments = data.get("comments")
        if comments is not None:
            comments = str(comments).strip() or None
        if comments and len(comments) > MAX_COMMENT_LENGTH:
            return jsonify({
                "status": "error",
                "message": f"Comments cannot exceed {MAX_COMMENT_LENGTH} characters"
            }), 400

        feedback = feedback_service.add_feedback(g.user_id, booking_id, rating, comments)
        service = feedback.service

        return jsonify({
            "status": "success",
            "message": "Feedback submitted successfully",
            "feedback": feedback.to_dict(),
            "service_rating": float(service.rating) if service.rating is not None else None,
            "total_reviews": service.total_reviews
        }), 201

    except MarketplaceError as e:
        db.session.rollback()
        return jsonify({"status": "error", "message": e.message}), e.status_code

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error adding feedback: {e}")
        return jsonify({"status": "error", "message": "Failed to submit feedback", "details": str(e)}), 500
