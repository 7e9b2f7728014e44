from flask import Blueprint, current_app, g, jsonify, request
from sqlalchemy import select

from ...extensions import db
from ...models import BusinessProfile, Feedback, Service
from ...services import slot_service
from ...utils.validators import missing_fields, parse_positive_int, validate_name

services_bp = Blueprint("services", __name__, url_prefix="/api/services")


def _service_summary(service):
    data = service.to_dict()
    business = service.business
    data["business"] = {
        "id": business.id,
        "business_name": business.business_name,
        "city": business.city,
        "is_verified": bool(business.is_verified),
        "provider_name": business.provider.name if business.provider else None,
    }
    return data


def _clean_service(data, partial=False):
    if not partial:
        missing = missing_fields(data, ["name", "price", "duration"])
        if missing:
            raise ValueError(f"Missing required fields: {', '.join(missing)}")

    values = {}
    if "name" in data:
        values["name"] = validate_name(data.get("name"), minimum=2, maximum=100)
    if "price" in data:
        values["price"] = parse_positive_int(data.get("price"), "price")
    if "duration" in data:
        values["duration"] = parse_positive_int(data.get("duration"), "duration")
    if "description" in data:
        values["description"] = data.get("description")
    if "image" in data:
        values["image"] = data.get("image") or None
    if "is_active" in data:
        if not isinstance(data.get("is_active"), bool):
            raise ValueError("is_active must be a boolean")
        values["is_active"] = data["is_active"]
    return values


def _check_owner(business, require_verified):
    """Return an error response if the caller cannot manage this business's services."""
    if business.provider_id != g.user_id:
        return jsonify({"status": "error", "message": "You can only manage services of your own business"}), 403
    if require_verified and not business.is_verified:
        return jsonify({"status": "error", "message": "Business must be verified before managing services"}), 403
    return None


@services_bp.route("", methods=["GET"])
def list_services():
    """
    List services with their business summary
    ---
    tags:
      - Services
    security:
      - Bearer: []
    parameters:
      - in: query
        name: category_id
        type: integer
        required: false
    responses:
      200:
        description: Active services of verified businesses
    """
    try:
        query = (
            select(Service)
            .join(BusinessProfile, BusinessProfile.id == Service.business_profile_id)
            .where(Service.is_active.is_(True), BusinessProfile.is_verified.is_(True))
            .order_by(Service.id)
        )
        category_id = request.args.get("category_id", type=int)
        if category_id:
            query = query.where(BusinessProfile.category_id == category_id)

        services = db.session.scalars(query).all()
        return jsonify({
            "status": "success",
            "count": len(services),
            "services": [_service_summary(service) for service in services]
        }), 200

    except Exception as e:
        current_app.logger.error(f"Error listing services: {e}")
        return jsonify({"status": "error", "message": "Failed to fetch services", "details": str(e)}), 500


@services_bp.route("/<int:service_id>", methods=["GET"])
def get_service(service_id):
    """
    Service detail with the business's slots and the service's reviews
    ---
    tags:
      - Services
    security:
      - Bearer: []
    parameters:
      - in: path
        name: service_id
        type: integer
        required: true
    responses:
      200:
        description: Service found
      404:
        description: Service not found
    """
    try:
        service = db.session.get(Service, service_id)
        if not service:
            return jsonify({"status": "error", "message": "Service not found"}), 404

        reviews = db.session.scalars(
            select(Feedback)
            .where(Feedback.service_id == service.id)
            .order_by(Feedback.created_at.desc(), Feedback.id.desc())
        ).all()

        data = _service_summary(service)
        # slot templates stay hidden until the business is verified
        slots = []
        if service.business.is_verified:
            slots = slot_service.get_public_slots(service.business_profile_id)
        data["slots"] = [slot.to_dict() for slot in slots]
        data["reviews"] = [review.to_dict() for review in reviews]
        return jsonify({"status": "success", "service": data}), 200

    except Exception as e:
        current_app.logger.error(f"Error fetching service {service_id}: {e}")
        return jsonify({"status": "error", "message": "Failed to fetch service", "details": str(e)}), 500


@services_bp.route("/business/<int:business_id>", methods=["GET"])
def list_business_services(business_id):
    try:
        business = db.session.get(BusinessProfile, business_id)
        if not business:
            return jsonify({"status": "error", "message": "Business not found"}), 404

        services = db.session.scalars(
            select(Service).where(Service.business_profile_id == business.id).order_by(Service.id)
        ).all()
        return jsonify({
            "status": "success",
            "services": [service.to_dict() for service in services]
        }), 200

    except Exception as e:
        current_app.logger.error(f"Error listing services for business {business_id}: {e}")
        return jsonify({"status": "error", "message": "Failed to fetch services", "details": str(e)}), 500


@services_bp.route("/business/<int:business_id>", methods=["POST"])
def add_service(business_id):
    """
    Add a service to the caller's verified business
    ---
    tags:
      - Services
    security:
      - Bearer: []
    parameters:
      - in: path
        name: business_id
        type: integer
        required: true
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [name, price, duration]
          properties:
            name:
              type: string
              example: Tap repair
            description:
              type: string
            price:
              type: integer
              example: 500
            duration:
              type: integer
              description: Minutes
              example: 60
            image:
              type: string
    responses:
      201:
        description: Service created
      400:
        description: Missing or invalid fields
      403:
        description: Not the owner, or business not verified
      404:
        description: Business not found
    """
    try:
        business = db.session.get(BusinessProfile, business_id)
        if not business:
            return jsonify({"status": "error", "message": "Business not found"}), 404

        error = _check_owner(business, require_verified=True)
        if error:
            return error

        data = request.get_json(silent=True) or {}
        try:
            values = _clean_service(data)
        except ValueError as e:
            return jsonify({"status": "error", "message": str(e)}), 400

        service = Service(business_profile_id=business.id, **values)
        db.session.add(service)
        db.session.commit()

        return jsonify({
            "status": "success",
            "message": "Service added successfully",
            "service": service.to_dict()
        }), 201

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error adding service to business {business_id}: {e}")
        return jsonify({"status": "error", "message": "Failed to add service", "details": str(e)}), 500


@services_bp.route("/<int:service_id>", methods=["PUT"])
def update_service(service_id):
    try:
        service = db.session.get(Service, service_id)
        if not service:
            return jsonify({"status": "error", "message": "Service not found"}), 404

        error = _check_owner(service.business, require_verified=True)
        if error:
            return error

        data = request.get_json(silent=True) or {}
        try:
            values = _clean_service(data, partial=True)
        except ValueError as e:
            return jsonify({"status": "error", "message": str(e)}), 400

        # existing bookings keep the price they were made at
        for field, value in values.items():
            setattr(service, field, value)
        db.session.commit()

        return jsonify({
            "status": "success",
            "message": "Service updated successfully",
            "service": service.to_dict()
        }), 200

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error updating service {service_id}: {e}")
        return jsonify({"status": "error", "message": "Failed to update service", "details": str(e)}), 500


@services_bp.route("/<int:service_id>", methods=["DELETE"])
def delete_service(service_id):
    try:
        service = db.session.get(Service, service_id)
        if not service:
            return jsonify({"status": "error", "message": "Service not found"}), 404

        error = _check_owner(service.business, require_verified=False)
        if error:
            return error

        db.session.delete(service)
        db.session.commit()

        return jsonify({"status": "success", "message": "Service deleted successfully"}), 200

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error deleting service {service_id}: {e}")
        return jsonify({"status": "error", "message": "Failed to delete service", "details": str(e)}), 500
