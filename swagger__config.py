"""
Swagger/OpenAPI configuration for the Home Service Marketplace API
"""

SWAGGER_CONFIG = {
    "headers": [],
    "specs": [
        {
            "endpoint": "apispec",
            "route": "/apispec.json",
            "rule_filter": lambda rule: True,
            "model_filter": lambda tag: True,
        }
    ],
    "static_url_path": "/flasgger_static",
    "swagger_ui": True,
    "specs_route": "/api/docs",
}

SWAGGER_TEMPLATE = {
    "swagger": "2.0",
    "info": {
        "title": "Home Service Marketplace API",
        "description": "REST API for booking home services: accounts, businesses, services, daily slots, bookings, feedback and image uploads",
        "contact": {"email": "support@homeservice.example"},
        "version": "1.0.0",
    },
    "host": "",
    "basePath": "/",
    "schemes": ["http", "https"],
    "securityDefinitions": {
        "Bearer": {
            "type": "apiKey",
            "name": "Authorization",
            "in": "header",
            "description": 'JWT Authorization header using the Bearer scheme. Example: "Authorization: Bearer {token}". Browsers send the "token" cookie set by /api/auth/login instead.',
        }
    },
    "security": [{"Bearer": []}],
    "tags": [
        {"name": "Auth", "description": "Registration, login and password reset"},
        {"name": "Users", "description": "Profiles and admin user management"},
        {"name": "Addresses", "description": "Customer service addresses"},
        {"name": "Categories", "description": "Service categories"},
        {"name": "Businesses", "description": "Provider business profiles"},
        {"name": "Admin", "description": "Business verification"},
        {"name": "Services", "description": "Services offered by businesses"},
        {"name": "Slots", "description": "Daily bookable time slots"},
        {"name": "Bookings", "description": "Booking creation and status changes"},
        {"name": "Feedback", "description": "Ratings for completed bookings"},
        {"name": "Uploads", "description": "Image upload to S3"},
        {"name": "Utility", "description": "Health check"},
    ],
    "definitions": {
        "Error": {
            "type": "object",
            "properties": {
                "status": {"type": "string", "example": "error"},
                "message": {"type": "string"},
                "details": {"type": "string"},
            },
        },
        "Success": {
            "type": "object",
            "properties": {
                "status": {"type": "string", "example": "success"},
                "message": {"type": "string"},
            },
        },
        "User": {
            "type": "object",
            "properties": {
                "id": {"type": "integer"},
                "name": {"type": "string"},
                "email": {"type": "string", "format": "email"},
                "phone": {"type": "string"},
                "role": {"type": "string", "enum": ["customer", "provider", "admin"]},
                "avatar": {"type": "string"},
                "created_at": {"type": "string", "format": "date-time"},
            },
        },
        "Business": {
            "type": "object",
            "properties": {
                "id": {"type": "integer"},
                "provider_id": {"type": "integer"},
                "business_name": {"type": "string"},
                "category": {"type": "string"},
                "phone": {"type": "string"},
                "state": {"type": "string"},
                "city": {"type": "string"},
                "rating": {"type": "number", "format": "float"},
                "is_verified": {"type": "boolean"},
                "status": {"type": "string", "enum": ["active", "pending"]},
            },
        },
        "Service": {
            "type": "object",
            "properties": {
                "id": {"type": "integer"},
                "business_profile_id": {"type": "integer"},
                "name": {"type": "string"},
                "price": {"type": "integer"},
                "duration": {"type": "integer"},
                "is_active": {"type": "boolean"},
                "rating": {"type": "number", "format": "float"},
                "total_reviews": {"type": "integer"},
            },
        },
        "Slot": {
            "type": "object",
            "properties": {
                "id": {"type": "integer"},
                "business_profile_id": {"type": "integer"},
                "start_time": {"type": "string", "example": "09:00:00"},
                "end_time": {"type": "string", "example": "09:30:00"},
            },
        },
        "Booking": {
            "type": "object",
            "properties": {
                "id": {"type": "integer"},
                "customer_id": {"type": "integer"},
                "business_profile_id": {"type": "integer"},
                "service_id": {"type": "integer"},
                "slot_id": {"type": "integer"},
                "address_id": {"type": "integer"},
                "booking_date": {"type": "string", "format": "date"},
                "status": {
                    "type": "string",
                    "enum": ["pending", "confirmed", "completed", "cancelled"],
                },
                "total_price": {"type": "integer"},
            },
        },
        "Feedback": {
            "type": "object",
            "properties": {
                "id": {"type": "integer"},
                "booking_id": {"type": "integer"},
                "service_id": {"type": "integer"},
                "rating": {"type": "number", "format": "float"},
                "comments": {"type": "string"},
                "created_at": {"type": "string", "format": "date-time"},
            },
        },
    },
}
