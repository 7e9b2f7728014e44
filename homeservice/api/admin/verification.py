# Admin verify businesses
from flask import Blueprint, current_app, jsonify, request
from sqlalchemy import func, select

from ...extensions import db
from ...models import BusinessProfile, Service

admin_verification_bp = Blueprint(
    "admin_verification", __name__, url_prefix="/api/admin/verification"
)

STATUS_FILTERS = ("pending", "verified", "all")


@admin_verification_bp.route("", methods=["GET"])
def list_verification_queue():
    """
    GET /api/admin/verification - Businesses grouped by verification state

    ---
    tags:
      - Admin
    security:
      - Bearer: []
    summary: Retrieve businesses for admin review
    parameters:
      - name: status
        in: query
        type: string
        enum: [pending, verified, all]
        required: false
        description: Filter by verification status (default pending)
    responses:
      200:
        description: Returns array of businesses with their service counts
      400:
        description: Unknown status filter
    """
    try:
        status_filter = request.args.get("status", "pending").lower()
        if status_filter not in STATUS_FILTERS:
            return jsonify({
                "status": "error",
                "message": f"status must be one of: {', '.join(STATUS_FILTERS)}"
            }), 400

        query = (
            select(BusinessProfile, func.count(Service.id).label("service_count"))
            .outerjoin(Service, Service.business_profile_id == BusinessProfile.id)
            .group_by(BusinessProfile.id)
            .order_by(BusinessProfile.created_at, BusinessProfile.id)
        )
        if status_filter == "pending":
            query = query.where(BusinessProfile.is_verified.is_(False))
        elif status_filter == "verified":
            query = query.where(BusinessProfile.is_verified.is_(True))

        businesses = []
        for business, service_count in db.session.execute(query).all():
            data = business.to_dict()
            data["service_count"] = service_count
            businesses.append(data)

        return jsonify({
            "status": "success",
            "filter": status_filter,
            "count": len(businesses),
            "businesses": businesses
        }), 200

    except Exception as e:
        current_app.logger.error(f"Error fetching verification queue: {e}")
        return jsonify({"status": "error", "message": "Failed to fetch businesses", "details": str(e)}), 500


@admin_verification_bp.route("/<int:business_id>", methods=["PUT"])
def verify_business(business_id):
    """
    PUT /api/admin/verification/<business_id> - Approve or revoke a business

    ---
    tags:
      - Admin
    security:
      - Bearer: []
    parameters:
      - in: path
        name: business_id
        type: integer
        required: true
      - in: body
        name: body
        required: false
        schema:
          type: object
          properties:
            is_verified:
              type: boolean
              default: true
    responses:
      200:
        description: Verification flag updated
      400:
        description: is_verified must be a boolean
      404:
        description: Business not found
    """
    try:
        business = db.session.get(BusinessProfile, business_id)
        if not business:
            return jsonify({"status": "error", "message": "Business not found"}), 404

        data = request.get_json(silent=True) or {}
        is_verified = data.get("is_verified", True)
        if not isinstance(is_verified, bool):
            return jsonify({"status": "error", "message": "is_verified must be a boolean"}), 400

        business.is_verified = is_verified
        db.session.commit()

        current_app.logger.info(
            f"Business {business.id} {'verified' if is_verified else 'unverified'} by admin"
        )
        return jsonify({
            "status": "success",
            "message": "Business verified successfully" if is_verified else "Business verification revoked",
            "business": business.to_dict()
        }), 200

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error verifying business {business_id}: {e}")
        return jsonify({"status": "error", "message": "Failed to update verification", "details": str(e)}), 500
