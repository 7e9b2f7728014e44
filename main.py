from homeservice.api.admin.verification import admin_verification_bp
from homeservice.api.booking.bookings import bookings_bp
from homeservice.api.business.details import businesses_bp
from homeservice.api.business.feedback import feedback_bp
from homeservice.api.business.services import services_bp
from homeservice.api.business.slots import slots_bp
from homeservice.api.customer.addresses import addresses_bp
from homeservice.api.customer.details import users_bp
from homeservice.routes.auth import auth_bp
from homeservice.routes.categories import categories_bp
from homeservice.routes.uploads import uploads_bp
from flask import Flask, jsonify
from flask_cors import CORS
from dotenv import load_dotenv
from flasgger import Swagger
from swagger__config import SWAGGER_CONFIG, SWAGGER_TEMPLATE
import copy
import os

load_dotenv()
from homeservice.config import Config  # noqa: E402
from homeservice.extensions import db  # noqa: E402
from homeservice.permissions import validate_access_rules  # noqa: E402
from homeservice.scheduler import init_scheduler  # noqa: E402
from homeservice.services.booking_service import COMPLETION_POLICIES  # noqa: E402
from homeservice.utils.auth import authorize_request  # noqa: E402


def create_app(test_config=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)

    if app.config["BOOKING_COMPLETION_POLICY"] not in COMPLETION_POLICIES:
        raise ValueError(
            f"BOOKING_COMPLETION_POLICY must be one of {COMPLETION_POLICIES}, "
            f"got {app.config['BOOKING_COMPLETION_POLICY']!r}"
        )

    CORS(app, supports_credentials=True, origins=[app.config["FRONTEND_URL"]])

    db.init_app(app)

    # Determine host based on environment
    swagger_template = copy.deepcopy(SWAGGER_TEMPLATE)
    swagger_template["host"] = os.environ.get("API_HOST", "127.0.0.1:5000")
    Swagger(app, config=SWAGGER_CONFIG, template=swagger_template)

    blueprints = [
        auth_bp,
        users_bp,
        addresses_bp,
        categories_bp,
        businesses_bp,
        admin_verification_bp,
        services_bp,
        slots_bp,
        bookings_bp,
        feedback_bp,
        uploads_bp,
    ]

    for bp in blueprints:
        app.register_blueprint(bp)
        app.logger.debug(f"  ✓ {bp.name} registered")

    @app.route("/")
    def home():
        """
        Root endpoint - API status
        ---
        tags:
          - Utility
        responses:
          200:
            description: API is running
            schema:
              type: object
              properties:
                status:
                  type: string
                message:
                  type: string
                docs_url:
                  type: string
        """
        return {"status": "ok", "message": "Backend is running!", "docs_url": "/api/docs"}, 200

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({"status": "error", "message": "Resource not found"}), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return jsonify({"status": "error", "message": "Method not allowed"}), 405

    @app.errorhandler(413)
    def payload_too_large(e):
        limit_mb = app.config["MAX_CONTENT_LENGTH"] // (1024 * 1024)
        return jsonify({"status": "error", "message": f"File too large. Maximum size is {limit_mb} MB"}), 413

    app.before_request(authorize_request)

    # every route must be public or carry an access rule
    validate_access_rules(app)

    init_scheduler(app)

    if not app.config.get("TESTING"):
        print(f"create_app() completed - {len(list(app.url_map.iter_rules()))} routes registered")
    return app


app = create_app()


if __name__ == "__main__":
    # Create a .env containing:
    #       MYSQL_PUBLIC_URL=mysql+pymysql://<USER>:<PASSWORD>@<HOST>:<PORT>/homeservice
    # then load tables and demo data with: python seed.py
    port = int(os.environ.get("PORT", 5000))
    app.run(
        host="0.0.0.0", port=port, debug=os.environ.get("FLASK_ENV") != "production"
    )
