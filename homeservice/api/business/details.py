# Business profiles: one storefront per provider

from flask import Blueprint, current_app, g, jsonify, request
from sqlalchemy import select

from ...extensions import db
from ...models import BusinessProfile, Category, User
from ...utils.validators import missing_fields, validate_name, validate_phone

businesses_bp = Blueprint("businesses", __name__, url_prefix="/api/businesses")

EDITABLE_FIELDS = ("description", "state", "city", "website", "logo", "cover_image")


def _resolve_category(category_id):
    """Return (category_id, error_response) for an optional category reference."""
    if category_id in (None, ""):
        return None, None
    try:
        category_id = int(category_id)
    except (TypeError, ValueError):
        return None, (jsonify({"status": "error", "message": "category_id must be an integer"}), 400)
    if not db.session.get(Category, category_id):
        return None, (jsonify({"status": "error", "message": "Category not found"}), 404)
    return category_id, None


@businesses_bp.route("", methods=["GET"])
def list_businesses():
    """
    List business profiles
    ---
    tags:
      - Businesses
    security:
      - Bearer: []
    parameters:
      - in: query
        name: category_id
        type: integer
        required: false
      - in: query
        name: city
        type: string
        required: false
      - in: query
        name: verified
        type: boolean
        required: false
        description: Only verified businesses when true
    responses:
      200:
        description: Business profiles with provider contact details
    """
    try:
        query = select(BusinessProfile).order_by(BusinessProfile.id)

        category_id = request.args.get("category_id", type=int)
        if category_id:
            query = query.where(BusinessProfile.category_id == category_id)

        city = request.args.get("city")
        if city:
            query = query.where(BusinessProfile.city == city)

        if request.args.get("verified", "").lower() == "true":
            query = query.where(BusinessProfile.is_verified.is_(True))

        businesses = db.session.scalars(query).all()
        return jsonify({
            "status": "success",
            "count": len(businesses),
            "businesses": [business.to_dict() for business in businesses]
        }), 200

    except Exception as e:
        current_app.logger.error(f"Error listing businesses: {e}")
        return jsonify({"status": "error", "message": "Failed to fetch businesses", "details": str(e)}), 500


@businesses_bp.route("/<int:business_id>", methods=["GET"])
def get_business(business_id):
    try:
        business = db.session.get(BusinessProfile, business_id)
        if not business:
            return jsonify({"status": "error", "message": "Business not found"}), 404

        data = business.to_dict()
        data["services"] = [service.to_dict() for service in business.services]
        return jsonify({"status": "success", "business": data}), 200

    except Exception as e:
        current_app.logger.error(f"Error fetching business {business_id}: {e}")
        return jsonify({"status": "error", "message": "Failed to fetch business", "details": str(e)}), 500


@businesses_bp.route("/provider/<int:user_id>", methods=["GET"])
def get_business_by_provider(user_id):
    try:
        business = db.session.scalar(
            select(BusinessProfile).where(BusinessProfile.provider_id == user_id)
        )
        if not business:
            return jsonify({"status": "error", "message": "No business found for this provider"}), 404

        return jsonify({"status": "success", "business": business.to_dict()}), 200

    except Exception as e:
        current_app.logger.error(f"Error fetching business for provider {user_id}: {e}")
        return jsonify({"status": "error", "message": "Failed to fetch business", "details": str(e)}), 500


@businesses_bp.route("", methods=["POST"])
def add_business():
    """
    Create the caller's business profile (providers, one each)
    ---
    tags:
      - Businesses
    security:
      - Bearer: []
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [business_name, state, city]
          properties:
            business_name:
              type: string
            category_id:
              type: integer
            description:
              type: string
            phone:
              type: string
              description: Defaults to the provider's own phone
            state:
              type: string
            city:
              type: string
            website:
              type: string
            logo:
              type: string
            cover_image:
              type: string
    responses:
      201:
        description: Business created, pending verification
      400:
        description: Missing or invalid fields
      404:
        description: Category not found
      409:
        description: Provider already has a business
    """
    try:
        data = request.get_json(silent=True) or {}

        missing = missing_fields(data, ["business_name", "state", "city"])
        if missing:
            return jsonify({
                "status": "error",
                "message": f"Missing required fields: {', '.join(missing)}"
            }), 400

        existing = db.session.scalar(
            select(BusinessProfile).where(BusinessProfile.provider_id == g.user_id)
        )
        if existing:
            return jsonify({"status": "error", "message": "Provider already has a business profile"}), 409

        provider = db.session.get(User, g.user_id)
        if not provider:
            return jsonify({"status": "error", "message": "Provider not found"}), 404

        try:
            business_name = validate_name(data.get("business_name"), minimum=3, maximum=100)
            phone = validate_phone(str(data.get("phone") or provider.phone))
        except ValueError as e:
            return jsonify({"status": "error", "message": str(e)}), 400

        category_id, error = _resolve_category(data.get("category_id"))
        if error:
            return error

        business = BusinessProfile(
            provider_id=provider.id,
            category_id=category_id,
            business_name=business_name,
            phone=phone,
            is_verified=False,
        )
        for field in EDITABLE_FIELDS:
            if data.get(field) is not None:
                setattr(business, field, str(data[field]).strip())

        db.session.add(business)
        db.session.commit()

        return jsonify({
            "status": "success",
            "message": "Business created successfully. Awaiting admin verification",
            "business": business.to_dict()
        }), 201

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error creating business: {e}")
        return jsonify({"status": "error", "message": "Failed to create business", "details": str(e)}), 500


@businesses_bp.route("/<int:business_id>", methods=["PUT"])
def update_business(business_id):
    try:
        business = db.session.get(BusinessProfile, business_id)
        if not business:
            return jsonify({"status": "error", "message": "Business not found"}), 404
        if business.provider_id != g.user_id:
            return jsonify({"status": "error", "message": "You can only update your own business"}), 403

        data = request.get_json(silent=True) or {}

        try:
            if "business_name" in data:
                business.business_name = validate_name(data.get("business_name"), minimum=3, maximum=100)
            if "phone" in data:
                business.phone = validate_phone(str(data.get("phone")))
        except ValueError as e:
            db.session.rollback()
            return jsonify({"status": "error", "message": str(e)}), 400

        if "category_id" in data:
            category_id, error = _resolve_category(data.get("category_id"))
            if error:
                db.session.rollback()
                return error
            business.category_id = category_id

        for field in EDITABLE_FIELDS:
            if field in data:
                value = data.get(field)
                if field in ("state", "city") and not str(value or "").strip():
                    db.session.rollback()
                    return jsonify({"status": "error", "message": f"{field} cannot be empty"}), 400
                setattr(business, field, str(value).strip() if value is not None else None)

        db.session.commit()

        return jsonify({
            "status": "success",
            "message": "Business updated successfully",
            "business": business.to_dict()
        }), 200

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error updating business {business_id}: {e}")
        return jsonify({"status": "error", "message": "Failed to update business", "details": str(e)}), 500


@businesses_bp.route("/<int:business_id>", methods=["DELETE"])
def delete_business(business_id):
    try:
        business = db.session.get(BusinessProfile, business_id)
        if not business:
            return jsonify({"status": "error", "message": "Business not found"}), 404
        if business.provider_id != g.user_id:
            return jsonify({"status": "error", "message": "You can only delete your own business"}), 403

        db.session.delete(business)
        db.session.commit()

        return jsonify({"status": "success", "message": "Business deleted successfully"}), 200

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error deleting business {business_id}: {e}")
        return jsonify({"status": "error", "message": "Failed to delete business", "details": str(e)}), 500
