from flask import Blueprint, current_app, jsonify, request
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import Category
from ..utils.validators import validate_name

categories_bp = Blueprint("categories", __name__, url_prefix="/api/categories")


@categories_bp.route("", methods=["GET"])
def list_categories():
    """
    List service categories
    ---
    tags:
      - Categories
    security:
      - Bearer: []
    responses:
      200:
        description: Categories ordered by name
    """
    try:
        categories = db.session.scalars(select(Category).order_by(Category.name)).all()
        return jsonify({
            "status": "success",
            "categories": [category.to_dict() for category in categories]
        }), 200

    except Exception as e:
        current_app.logger.error(f"Error listing categories: {e}")
        return jsonify({"status": "error", "message": "Failed to fetch categories", "details": str(e)}), 500


@categories_bp.route("", methods=["POST"])
def add_category():
    """
    Create a category (admin only)
    ---
    tags:
      - Categories
    security:
      - Bearer: []
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [name]
          properties:
            name:
              type: string
              example: Plumbing
            description:
              type: string
            image:
              type: string
    responses:
      201:
        description: Category created
      400:
        description: Invalid name
      409:
        description: Category already exists
    """
    try:
        data = request.get_json(silent=True) or {}
        try:
            name = validate_name(data.get("name"), minimum=2, maximum=100)
        except ValueError as e:
            return jsonify({"status": "error", "message": str(e)}), 400

        if db.session.scalar(select(Category).where(Category.name == name)):
            return jsonify({"status": "error", "message": "Category already exists"}), 409

        category = Category(
            name=name,
            description=data.get("description"),
            image=data.get("image"),
        )
        db.session.add(category)
        db.session.commit()

        return jsonify({
            "status": "success",
            "message": "Category created successfully",
            "category": category.to_dict()
        }), 201

    except IntegrityError:
        db.session.rollback()
        return jsonify({"status": "error", "message": "Category already exists"}), 409

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error adding category: {e}")
        return jsonify({"status": "error", "message": "Failed to create category", "details": str(e)}), 500


@categories_bp.route("/<int:category_id>", methods=["PUT"])
def update_category(category_id):
    try:
        category = db.session.get(Category, category_id)
        if not category:
            return jsonify({"status": "error", "message": "Category not found"}), 404

        data = request.get_json(silent=True) or {}

        if "name" in data:
            try:
                name = validate_name(data.get("name"), minimum=2, maximum=100)
            except ValueError as e:
                return jsonify({"status": "error", "message": str(e)}), 400
            clash = db.session.scalar(
                select(Category).where(Category.name == name, Category.id != category.id)
            )
            if clash:
                return jsonify({"status": "error", "message": "Category already exists"}), 409
            category.name = name

        if "description" in data:
            category.description = data.get("description")
        if "image" in data:
            category.image = data.get("image")

        db.session.commit()

        return jsonify({
            "status": "success",
            "message": "Category updated successfully",
            "category": category.to_dict()
        }), 200

    except IntegrityError:
        db.session.rollback()
        return jsonify({"status": "error", "message": "Category already exists"}), 409

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error updating category {category_id}: {e}")
        return jsonify({"status": "error", "message": "Failed to update category", "details": str(e)}), 500


@categories_bp.route("/<int:category_id>", methods=["DELETE"])
def delete_category(category_id):
    try:
        category = db.session.get(Category, category_id)
        if not category:
            return jsonify({"status": "error", "message": "Category not found"}), 404

        # businesses keep existing with category_id set to NULL
        db.session.delete(category)
        db.session.commit()

        return jsonify({"status": "success", "message": "Category deleted successfully"}), 200

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error deleting category {category_id}: {e}")
        return jsonify({"status": "error", "message": "Failed to delete category", "details": str(e)}), 500
