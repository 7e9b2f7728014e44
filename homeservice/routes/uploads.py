from flask import Blueprint, current_app, jsonify, request
from werkzeug.exceptions import RequestEntityTooLarge

from ..utils.s3_utils import build_key, delete_file_from_s3, is_allowed_image, upload_file_to_s3

uploads_bp = Blueprint("uploads", __name__, url_prefix="/api/uploads")

# upload kind -> S3 folder
UPLOAD_FOLDERS = {
    "avatar": "avatars",
    "logo": "logos",
    "cover-image": "cover-images",
    "service-image": "services",
    "category-image": "categories",
}


def _s3_settings():
    bucket_name = current_app.config.get("S3_BUCKET_NAME")
    base_url = current_app.config.get("S3_BASE_URL")
    if not bucket_name or not base_url:
        current_app.logger.error("S3_BUCKET_NAME / S3_BASE_URL is not configured")
        return None, None
    return bucket_name, base_url


def _handle_upload(kind):
    try:
        image_file = request.files.get("image")
        if not image_file or not image_file.filename:
            return jsonify({"status": "error", "message": "No image file provided"}), 400

        allowed = current_app.config["ALLOWED_IMAGE_EXTENSIONS"]
        if not is_allowed_image(image_file.filename, allowed):
            return jsonify({
                "status": "error",
                "message": f"Invalid file type. Allowed: {', '.join(sorted(allowed))}"
            }), 400

        bucket_name, base_url = _s3_settings()
        if not bucket_name:
            return jsonify({"status": "error", "message": "Server configuration error"}), 500

        key = build_key(UPLOAD_FOLDERS[kind], image_file.filename)
        url = upload_file_to_s3(image_file, key, bucket_name, base_url)

        return jsonify({
            "status": "success",
            "message": "Image uploaded successfully",
            "url": url,
            "key": key
        }), 201

    except RequestEntityTooLarge:
        # handled by the app-level 413 handler
        raise

    except Exception as e:
        current_app.logger.error(f"Failed to upload {kind}: {e}")
        return jsonify({"status": "error", "message": "File upload failed", "details": str(e)}), 500


@uploads_bp.route("/avatar", methods=["POST"])
def upload_avatar():
    """
    Upload an image to S3
    ---
    tags:
      - Uploads
    security:
      - Bearer: []
    consumes:
      - multipart/form-data
    parameters:
      - in: formData
        name: image
        type: file
        required: true
        description: jpg, jpeg, png, gif or webp, at most 6 MB
    responses:
      201:
        description: Uploaded; returns the public url and the object key
      400:
        description: Missing file or unsupported type
      413:
        description: File too large
    """
    return _handle_upload("avatar")


@uploads_bp.route("/logo", methods=["POST"])
def upload_logo():
    return _handle_upload("logo")


@uploads_bp.route("/cover-image", methods=["POST"])
def upload_cover_image():
    return _handle_upload("cover-image")


@uploads_bp.route("/service-image", methods=["POST"])
def upload_service_image():
    return _handle_upload("service-image")


@uploads_bp.route("/category-image", methods=["POST"])
def upload_category_image():
    return _handle_upload("category-image")


@uploads_bp.route("/<path:key>", methods=["DELETE"])
def delete_image(key):
    try:
        folder = key.split("/", 1)[0]
        if folder not in UPLOAD_FOLDERS.values() or "/" not in key or ".." in key:
            return jsonify({"status": "error", "message": "Invalid image key"}), 400

        bucket_name, _ = _s3_settings()
        if not bucket_name:
            return jsonify({"status": "error", "message": "Server configuration error"}), 500

        delete_file_from_s3(key, bucket_name)

        return jsonify({"status": "success", "message": "Image deleted successfully"}), 200

    except Exception as e:
        current_app.logger.error(f"Failed to delete image {key}: {e}")
        return jsonify({"status": "error", "message": "Failed to delete image", "details": str(e)}), 500
