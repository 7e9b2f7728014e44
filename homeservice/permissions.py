"""
Route access table.

Every endpoint registered on the app must be either listed in
PUBLIC_ENDPOINTS or mapped to the roles allowed to call it in
ACCESS_RULES. validate_access_rules() checks this once at startup, so a
new route without a rule fails create_app() instead of shipping unguarded.
"""

from .models import Role

ANY_ROLE = frozenset(Role)
CUSTOMER_ONLY = frozenset({Role.CUSTOMER})
PROVIDER_ONLY = frozenset({Role.PROVIDER})
ADMIN_ONLY = frozenset({Role.ADMIN})

PUBLIC_ENDPOINTS = frozenset(
    {
        "home",
        "static",
        "auth.register_user",
        "auth.login_user",
        "auth.logout_user",
        "auth.forgot_password",
        "auth.verify_otp",
        "auth.reset_password",
    }
)

PUBLIC_BLUEPRINTS = frozenset({"flasgger"})

ACCESS_RULES = {
    # users
    "users.list_users": ADMIN_ONLY,
    "users.get_current_user": ANY_ROLE,
    "users.update_current_user": ANY_ROLE,
    "users.get_user": ANY_ROLE,
    "users.delete_user": ADMIN_ONLY,
    # addresses
    "addresses.list_addresses": ANY_ROLE,
    "addresses.add_address": ANY_ROLE,
    "addresses.update_address": ANY_ROLE,
    "addresses.delete_address": ANY_ROLE,
    # categories
    "categories.list_categories": ANY_ROLE,
    "categories.add_category": ADMIN_ONLY,
    "categories.update_category": ADMIN_ONLY,
    "categories.delete_category": ADMIN_ONLY,
    # businesses
    "businesses.list_businesses": ANY_ROLE,
    "businesses.get_business": ANY_ROLE,
    "businesses.get_business_by_provider": ANY_ROLE,
    "businesses.add_business": PROVIDER_ONLY,
    "businesses.update_business": PROVIDER_ONLY,
    "businesses.delete_business": PROVIDER_ONLY,
    # admin verification
    "admin_verification.list_verification_queue": ADMIN_ONLY,
    "admin_verification.verify_business": ADMIN_ONLY,
    # services
    "services.list_services": ANY_ROLE,
    "services.get_service": ANY_ROLE,
    "services.list_business_services": ANY_ROLE,
    "services.add_service": PROVIDER_ONLY,
    "services.update_service": PROVIDER_ONLY,
    "services.delete_service": PROVIDER_ONLY,
    # slots
    "slots.get_public_slots": ANY_ROLE,
    "slots.get_business_slots": PROVIDER_ONLY,
    "slots.add_slot": PROVIDER_ONLY,
    "slots.generate_slots": PROVIDER_ONLY,
    "slots.delete_slot": PROVIDER_ONLY,
    # bookings
    "bookings.get_booking": ANY_ROLE,
    "bookings.get_customer_bookings": CUSTOMER_ONLY,
    "bookings.add_booking": CUSTOMER_ONLY,
    "bookings.get_provider_bookings": PROVIDER_ONLY,
    "bookings.accept_booking": PROVIDER_ONLY,
    "bookings.reject_booking": PROVIDER_ONLY,
    "bookings.complete_booking": PROVIDER_ONLY,
    # feedback
    "feedback.get_business_feedback": ANY_ROLE,
    "feedback.get_service_feedback": ANY_ROLE,
    "feedback.add_feedback": CUSTOMER_ONLY,
    # uploads
    "uploads.upload_avatar": ANY_ROLE,
    "uploads.upload_logo": ANY_ROLE,
    "uploads.upload_cover_image": ANY_ROLE,
    "uploads.upload_service_image": ANY_ROLE,
    "uploads.upload_category_image": ANY_ROLE,
    "uploads.delete_image": ANY_ROLE,
}


def is_public_endpoint(endpoint):
    if endpoint in PUBLIC_ENDPOINTS:
        return True
    return endpoint.split(".", 1)[0] in PUBLIC_BLUEPRINTS


def validate_access_rules(app):
    """Fail fast if the access table and the registered routes disagree."""
    registered = set(app.view_functions)

    stale = sorted(endpoint for endpoint in ACCESS_RULES if endpoint not in registered)
    if stale:
        raise RuntimeError(f"Access rules reference unknown endpoints: {stale}")

    unguarded = sorted(
        endpoint
        for endpoint in registered
        if not is_public_endpoint(endpoint) and endpoint not in ACCESS_RULES
    )
    if unguarded:
        raise RuntimeError(f"Endpoints without an access rule: {unguarded}")
