# Daily slot templates for a business

from flask import Blueprint, current_app, g, jsonify, request
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from ...extensions import db
from ...models import BusinessProfile, Slot
from ...services import slot_service
from ...services.exceptions import MarketplaceError
from ...utils.validators import missing_fields, parse_positive_int, parse_time

slots_bp = Blueprint("slots", __name__, url_prefix="/api/slots")


def _owned_business(business_id):
    """Return (business, error_response) for the caller's business."""
    business = db.session.get(BusinessProfile, business_id)
    if not business:
        return None, (jsonify({"status": "error", "message": "Business not found"}), 404)
    if business.provider_id != g.user_id:
        return None, (jsonify({"status": "error", "message": "You can only manage slots of your own business"}), 403)
    return business, None


@slots_bp.route("/public/<int:business_id>", methods=["GET"])
def get_public_slots(business_id):
    """
    Bookable slot templates of a verified business
    ---
    tags:
      - Slots
    security:
      - Bearer: []
    parameters:
      - in: path
        name: business_id
        type: integer
        required: true
    responses:
      200:
        description: Slots ordered by start time
      403:
        description: Business is not verified
      404:
        description: Business not found
    """
    try:
        slots = slot_service.get_public_slots(business_id)
        return jsonify({
            "status": "success",
            "slots": [slot.to_dict() for slot in slots]
        }), 200

    except MarketplaceError as e:
        return jsonify({"status": "error", "message": e.message}), e.status_code

    except Exception as e:
        current_app.logger.error(f"Error fetching public slots for business {business_id}: {e}")
        return jsonify({"status": "error", "message": "Failed to fetch slots", "details": str(e)}), 500


@slots_bp.route("/<int:business_id>", methods=["GET"])
def get_business_slots(business_id):
    try:
        business, error = _owned_business(business_id)
        if error:
            return error

        return jsonify({
            "status": "success",
            "slots": [slot.to_dict() for slot in business.slots]
        }), 200

    except Exception as e:
        current_app.logger.error(f"Error fetching slots for business {business_id}: {e}")
        return jsonify({"status": "error", "message": "Failed to fetch slots", "details": str(e)}), 500


@slots_bp.route("/<int:business_id>", methods=["POST"])
def add_slot(business_id):
    """
    Add one slot template
    ---
    tags:
      - Slots
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
          required: [start_time, end_time]
          properties:
            start_time:
              type: string
              example: "09:00"
            end_time:
              type: string
              example: "09:30"
    responses:
      201:
        description: Slot created
      400:
        description: Invalid times
      409:
        description: A slot already starts at this time
    """
    try:
        business, error = _owned_business(business_id)
        if error:
            return error

        data = request.get_json(silent=True) or {}
        missing = missing_fields(data, ["start_time", "end_time"])
        if missing:
            return jsonify({
                "status": "error",
                "message": f"Missing required fields: {', '.join(missing)}"
            }), 400

        try:
            start_time = parse_time(data.get("start_time"), "start_time")
            end_time = parse_time(data.get("end_time"), "end_time")
        except ValueError as e:
            return jsonify({"status": "error", "message": str(e)}), 400

        if end_time <= start_time:
            return jsonify({"status": "error", "message": "end_time must be after start_time"}), 400

        duplicate = db.session.scalar(
            select(Slot).where(
                Slot.business_profile_id == business.id, Slot.start_time == start_time
            )
        )
        if duplicate:
            return jsonify({"status": "error", "message": "A slot already starts at this time"}), 409

        slot = Slot(business_profile_id=business.id, start_time=start_time, end_time=end_time)
        db.session.add(slot)
        db.session.commit()

        return jsonify({
            "status": "success",
            "message": "Slot added successfully",
            "slot": slot.to_dict()
        }), 201

    except IntegrityError:
        db.session.rollback()
        return jsonify({"status": "error", "message": "A slot already starts at this time"}), 409

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error adding slot to business {business_id}: {e}")
        return jsonify({"status": "error", "message": "Failed to add slot", "details": str(e)}), 500


@slots_bp.route("/<int:business_id>/generate", methods=["POST"])
def generate_slots(business_id):
    """
    Generate slots from working hours
    ---
    tags:
      - Slots
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
          required: [workingHours]
          properties:
            workingHours:
              type: object
              properties:
                start:
                  type: string
                  example: "09:00"
                end:
                  type: string
                  example: "17:00"
            breakTime:
              type: object
              properties:
                start:
                  type: string
                  example: "13:00"
                end:
                  type: string
                  example: "14:00"
            interval:
              type: integer
              default: 30
    responses:
      201:
        description: Slots created; starts that already exist are skipped
      400:
        description: Invalid working hours, break or interval
    """
    try:
        business, error = _owned_business(business_id)
        if error:
            return error

        data = request.get_json(silent=True) or {}
        working_hours = data.get("workingHours") or {}
        break_time = data.get("breakTime") or {}

        try:
            work_start = parse_time(working_hours.get("start"), "workingHours.start")
            work_end = parse_time(working_hours.get("end"), "workingHours.end")
            break_start = break_end = None
            if break_time.get("start") or break_time.get("end"):
                break_start = parse_time(break_time.get("start"), "breakTime.start")
                break_end = parse_time(break_time.get("end"), "breakTime.end")
            interval = parse_positive_int(
                data.get("interval", slot_service.DEFAULT_INTERVAL_MINUTES), "interval"
            )
        except ValueError as e:
            return jsonify({"status": "error", "message": str(e)}), 400

        created = slot_service.generate_slots(
            business, work_start, work_end, interval, break_start, break_end
        )

        return jsonify({
            "status": "success",
            "message": f"{len(created)} slot(s) generated",
            "slots": [slot.to_dict() for slot in created]
        }), 201

    except MarketplaceError as e:
        db.session.rollback()
        return jsonify({"status": "error", "message": e.message}), e.status_code

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error generating slots for business {business_id}: {e}")
        return jsonify({"status": "error", "message": "Failed to generate slots", "details": str(e)}), 500


@slots_bp.route("/<int:business_id>/<int:slot_id>", methods=["DELETE"])
def delete_slot(business_id, slot_id):
    try:
        business, error = _owned_business(business_id)
        if error:
            return error

        slot = db.session.scalar(
            select(Slot).where(Slot.id == slot_id, Slot.business_profile_id == business.id)
        )
        if not slot:
            return jsonify({"status": "error", "message": "Slot not found"}), 404

        db.session.delete(slot)
        db.session.commit()

        return jsonify({"status": "success", "message": "Slot deleted successfully"}), 200

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error deleting slot {slot_id}: {e}")
        return jsonify({"status": "error", "message": "Failed to delete slot", "details": str(e)}), 500
