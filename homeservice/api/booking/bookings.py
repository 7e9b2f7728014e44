# Bookings: creation, listings and provider status changes

from flask import Blueprint, current_app, g, jsonify, request
from sqlalchemy import select

from ...extensions import db
from ...models import Booking, BookingStatus, BusinessProfile
from ...services import booking_service
from ...services.exceptions import MarketplaceError
from ...utils.validators import missing_fields, parse_date, parse_positive_int

bookings_bp = Blueprint("bookings", __name__, url_prefix="/api/bookings")

STATUS_VALUES = tuple(status.value for status in BookingStatus)


def booking_detail(booking):
    data = booking.to_dict()
    service = booking.service
    business = booking.business
    slot = booking.slot
    customer = booking.customer
    data.update(
        {
            "service": {"id": service.id, "name": service.name, "price": service.price}
            if service
            else None,
            "business": {"id": business.id, "business_name": business.business_name, "phone": business.phone}
            if business
            else None,
            "slot": slot.to_dict() if slot else None,
            "address": booking.address.to_dict() if booking.address else None,
            "customer": {"id": customer.id, "name": customer.name, "phone": customer.phone}
            if customer
            else None,
            "feedback": booking.feedback.to_dict() if booking.feedback else None,
        }
    )
    return data


def _status_filter(query):
    """Apply ?status=... if given; returns (query, error_response)."""
    status = request.args.get("status")
    if not status:
        return query, None
    status = status.lower()
    if status not in STATUS_VALUES:
        return None, (
            jsonify({"status": "error", "message": f"status must be one of: {', '.join(STATUS_VALUES)}"}),
            400,
        )
    return query.where(Booking.status == status), None


@bookings_bp.route("/<int:booking_id>", methods=["GET"])
def get_booking(booking_id):
    """
    Booking detail, visible to its customer and the owning provider
    ---
    tags:
      - Bookings
    security:
      - Bearer: []
    parameters:
      - in: path
        name: booking_id
        type: integer
        required: true
    responses:
      200:
        description: Booking with service, slot, address and feedback
      403:
        description: Caller is neither the customer nor the owning provider
      404:
        description: Booking not found
    """
    try:
        booking = booking_service.get_visible_booking(booking_id, g.user_id)
        return jsonify({"status": "success", "booking": booking_detail(booking)}), 200

    except MarketplaceError as e:
        return jsonify({"status": "error", "message": e.message}), e.status_code

    except Exception as e:
        current_app.logger.error(f"Error fetching booking {booking_id}: {e}")
        return jsonify({"status": "error", "message": "Failed to fetch booking", "details": str(e)}), 500


@bookings_bp.route("/customer", methods=["GET"])
def get_customer_bookings():
    """
    The caller's bookings, newest day first
    ---
    tags:
      - Bookings
    security:
      - Bearer: []
    parameters:
      - in: query
        name: status
        type: string
        enum: [pending, confirmed, completed, cancelled]
        required: false
    responses:
      200:
        description: Customer bookings
    """
    try:
        query = (
            select(Booking)
            .where(Booking.customer_id == g.user_id)
            .order_by(Booking.booking_date.desc(), Booking.id.desc())
        )
        query, error = _status_filter(query)
        if error:
            return error

        bookings = db.session.scalars(query).all()
        return jsonify({
            "status": "success",
            "bookings": [booking_detail(booking) for booking in bookings]
        }), 200

    except Exception as e:
        current_app.logger.error(f"Error fetching customer bookings: {e}")
        return jsonify({"status": "error", "message": "Failed to fetch bookings", "details": str(e)}), 500


@bookings_bp.route("", methods=["POST"])
def add_booking():
    """
    Book a slot of a service on a given day
    ---
    tags:
      - Bookings
    security:
      - Bearer: []
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [service_id, slot_id, address_id, booking_date]
          properties:
            service_id:
              type: integer
            slot_id:
              type: integer
            address_id:
              type: integer
            booking_date:
              type: string
              example: "2026-11-02"
    responses:
      201:
        description: Booking created as pending
      400:
        description: Missing fields, past date, elapsed slot, or slot of another business
      403:
        description: Business not verified or service inactive
      404:
        description: Address, service or slot not found
      409:
        description: Slot already booked for that day
    """
    try:
        data = request.get_json(silent=True) or {}
        missing = missing_fields(data, ["service_id", "slot_id", "address_id", "booking_date"])
        if missing:
            return jsonify({
                "status": "error",
                "message": f"Missing required fields: {', '.join(missing)}"
            }), 400

        try:
            service_id = parse_positive_int(data.get("service_id"), "service_id")
            slot_id = parse_positive_int(data.get("slot_id"), "slot_id")
            address_id = parse_positive_int(data.get("address_id"), "address_id")
            booking_date = parse_date(data.get("booking_date"))
        except ValueError as e:
            return jsonify({"status": "error", "message": str(e)}), 400

        booking = booking_service.create_booking(
            g.user_id, service_id, slot_id, address_id, booking_date
        )

        return jsonify({
            "status": "success",
            "message": "Booking created successfully",
            "booking": booking_detail(booking)
        }), 201

    except MarketplaceError as e:
        db.session.rollback()
        return jsonify({"status": "error", "message": e.message}), e.status_code

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error creating booking: {e}")
        return jsonify({"status": "error", "message": "Failed to create booking", "details": str(e)}), 500


@bookings_bp.route("/provider", methods=["GET"])
def get_provider_bookings():
    try:
        business = db.session.scalar(
            select(BusinessProfile).where(BusinessProfile.provider_id == g.user_id)
        )
        if not business:
            return jsonify({"status": "error", "message": "Business profile not found"}), 404

        query = (
            select(Booking)
            .where(Booking.business_profile_id == business.id)
            .order_by(Booking.booking_date.desc(), Booking.id.desc())
        )
        query, error = _status_filter(query)
        if error:
            return error

        bookings = db.session.scalars(query).all()
        return jsonify({
            "status": "success",
            "bookings": [booking_detail(booking) for booking in bookings]
        }), 200

    except Exception as e:
        current_app.logger.error(f"Error fetching provider bookings: {e}")
        return jsonify({"status": "error", "message": "Failed to fetch bookings", "details": str(e)}), 500


def _transition(booking_id, action, message):
    try:
        booking = action(booking_id, g.user_id)
        return jsonify({
            "status": "success",
            "message": message,
            "booking": booking.to_dict()
        }), 200

    except MarketplaceError as e:
        db.session.rollback()
        return jsonify({"status": "error", "message": e.message}), e.status_code

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error updating booking {booking_id}: {e}")
        return jsonify({"status": "error", "message": "Failed to update booking", "details": str(e)}), 500


@bookings_bp.route("/<int:booking_id>/accept", methods=["PUT"])
def accept_booking(booking_id):
    """
    Accept a pending booking
    ---
    tags:
      - Bookings
    security:
      - Bearer: []
    parameters:
      - in: path
        name: booking_id
        type: integer
        required: true
    responses:
      200:
        description: Booking confirmed
      403:
        description: Booking belongs to another provider's business
      404:
        description: Booking not found
      409:
        description: Booking is not pending
    """
    return _transition(booking_id, booking_service.accept_booking, "Booking accepted")


@bookings_bp.route("/<int:booking_id>/reject", methods=["PUT"])
def reject_booking(booking_id):
    """
    Reject a pending booking and free its slot for that day
    ---
    tags:
      - Bookings
    security:
      - Bearer: []
    parameters:
      - in: path
        name: booking_id
        type: integer
        required: true
    responses:
      200:
        description: Booking cancelled
      403:
        description: Booking belongs to another provider's business
      404:
        description: Booking not found
      409:
        description: Booking is not pending
    """
    return _transition(booking_id, booking_service.reject_booking, "Booking rejected")


@bookings_bp.route("/<int:booking_id>/complete", methods=["PUT"])
def complete_booking(booking_id):
    """
    Mark a confirmed booking as completed
    ---
    tags:
      - Bookings
    security:
      - Bearer: []
    parameters:
      - in: path
        name: booking_id
        type: integer
        required: true
    responses:
      200:
        description: Booking completed
      403:
        description: Booking belongs to another provider's business
      404:
        description: Booking not found
      409:
        description: Booking is not confirmed, or its slot has not ended yet
    """
    return _transition(booking_id, booking_service.complete_booking, "Booking completed")
