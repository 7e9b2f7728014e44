from flask import Blueprint, current_app, g, jsonify, request
from sqlalchemy import select

from ...extensions import db
from ...models import ADDRESS_TYPES, Address
from ...utils.validators import ZIP_RE, missing_fields

addresses_bp = Blueprint("addresses", __name__, url_prefix="/api/addresses")

ADDRESS_FIELDS = ("street", "city", "state", "zip_code")


def _clean_address(data, partial=False):
    """Return the validated subset of address fields present in data."""
    if not partial:
        missing = missing_fields(data, ADDRESS_FIELDS)
        if missing:
            raise ValueError(f"Missing required fields: {', '.join(missing)}")

    values = {}
    for field in ADDRESS_FIELDS:
        if field in data:
            value = str(data.get(field) or "").strip()
            if not value:
                raise ValueError(f"{field} cannot be empty")
            values[field] = value

    if "zip_code" in values and not ZIP_RE.match(values["zip_code"]):
        raise ValueError("Zip code must be 6 digits")

    if "address_type" in data:
        address_type = (data.get("address_type") or "").lower()
        if address_type not in ADDRESS_TYPES:
            raise ValueError(f"address_type must be one of: {', '.join(ADDRESS_TYPES)}")
        values["address_type"] = address_type

    return values


def _own_address(address_id):
    return db.session.scalar(
        select(Address).where(Address.id == address_id, Address.user_id == g.user_id)
    )


@addresses_bp.route("", methods=["GET"])
def list_addresses():
    try:
        addresses = db.session.scalars(
            select(Address).where(Address.user_id == g.user_id).order_by(Address.id)
        ).all()
        return jsonify({
            "status": "success",
            "addresses": [address.to_dict() for address in addresses]
        }), 200

    except Exception as e:
        current_app.logger.error(f"Error listing addresses: {e}")
        return jsonify({"status": "error", "message": "Failed to fetch addresses", "details": str(e)}), 500


@addresses_bp.route("", methods=["POST"])
def add_address():
    """
    Add an address for the caller
    ---
    tags:
      - Addresses
    security:
      - Bearer: []
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [street, city, state, zip_code]
          properties:
            address_type:
              type: string
              enum: [home, work, billing, shipping, other]
            street:
              type: string
            city:
              type: string
            state:
              type: string
            zip_code:
              type: string
              example: "560001"
    responses:
      201:
        description: Address created
      400:
        description: Missing or invalid fields
    """
    try:
        data = request.get_json(silent=True) or {}
        try:
            values = _clean_address(data)
        except ValueError as e:
            return jsonify({"status": "error", "message": str(e)}), 400

        address = Address(user_id=g.user_id, **values)
        db.session.add(address)
        db.session.commit()

        return jsonify({
            "status": "success",
            "message": "Address added successfully",
            "address": address.to_dict()
        }), 201

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error adding address: {e}")
        return jsonify({"status": "error", "message": "Failed to add address", "details": str(e)}), 500


@addresses_bp.route("/<int:address_id>", methods=["PUT"])
def update_address(address_id):
    try:
        address = _own_address(address_id)
        if not address:
            return jsonify({"status": "error", "message": "Address not found"}), 404

        data = request.get_json(silent=True) or {}
        try:
            values = _clean_address(data, partial=True)
        except ValueError as e:
            return jsonify({"status": "error", "message": str(e)}), 400

        for field, value in values.items():
            setattr(address, field, value)
        db.session.commit()

        return jsonify({
            "status": "success",
            "message": "Address updated successfully",
            "address": address.to_dict()
        }), 200

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error updating address {address_id}: {e}")
        return jsonify({"status": "error", "message": "Failed to update address", "details": str(e)}), 500


@addresses_bp.route("/<int:address_id>", methods=["DELETE"])
def delete_address(address_id):
    try:
        address = _own_address(address_id)
        if not address:
            return jsonify({"status": "error", "message": "Address not found"}), 404

        db.session.delete(address)
        db.session.commit()

        return jsonify({"status": "success", "message": "Address deleted successfully"}), 200

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error deleting address {address_id}: {e}")
        return jsonify({"status": "error", "message": "Failed to delete address", "details": str(e)}), 500
