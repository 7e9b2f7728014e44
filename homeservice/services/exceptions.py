"""
Exceptions raised by the marketplace services.

Route handlers catch MarketplaceError and turn it into a JSON error
response using the status_code carried by each subclass.
"""


class MarketplaceError(Exception):
    """Base exception for all service-layer errors."""

    status_code = 500

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class ValidationError(MarketplaceError):
    """Missing or malformed input."""

    status_code = 400


class ForbiddenError(MarketplaceError):
    """Authenticated caller is not allowed to touch this resource."""

    status_code = 403


class NotFoundError(MarketplaceError):
    """A referenced row does not exist (or is not visible to the caller)."""

    status_code = 404


class ConflictError(MarketplaceError):
    """State or uniqueness violation."""

    status_code = 409


class PastDateError(ValidationError):
    """Raised when a booking targets a calendar day before today."""


class SlotElapsedError(ValidationError):
    """Raised when a same-day booking targets a slot whose start has passed."""


class SlotConflictError(ConflictError):
    """Raised when a live booking already holds the slot on that day."""


class InvalidStateError(ConflictError):
    """Raised when a booking is not in the state an operation requires."""


class SlotNotFinishedError(ConflictError):
    """Raised when completion is attempted before the booked slot has ended."""


class DuplicateFeedbackError(ConflictError):
    """Raised when feedback already exists for a booking."""
