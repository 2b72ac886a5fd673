"""
Expected, user-facing booking outcomes.

Raised by the service layer and rendered by the error handler registered in
app.py. Anything that is not a BookingError (database down, programming
errors) is an internal failure and is handled separately.
"""


class BookingError(Exception):
    kind = "booking_error"
    status_code = 400

    def __init__(self, message: str, details=None):
        super().__init__(message)
        self.message = message
        self.details = details or []

    def to_dict(self) -> dict:
        payload = {"error": self.message, "kind": self.kind}
        if self.details:
            payload["details"] = self.details
        return payload


class ValidationError(BookingError):
    """Malformed or out-of-range input."""
    kind = "validation_error"
    status_code = 400


class NotFound(BookingError):
    kind = "not_found"
    status_code = 404


class Unavailable(BookingError):
    """Court closed or under maintenance, or no bookable time slot for the range."""
    kind = "unavailable"
    status_code = 400


class CapacityExceeded(BookingError):
    kind = "capacity_exceeded"
    status_code = 400


class SlotConflict(BookingError):
    """Range overlaps a live booking, whether caught by the pre-check or the unique index."""
    kind = "slot_conflict"
    status_code = 409


class Forbidden(BookingError):
    kind = "forbidden"
    status_code = 403


class InvalidState(BookingError):
    """Mutation of a completed/cancelled booking, or a transition the lifecycle does not allow."""
    kind = "invalid_state"
    status_code = 400


class TooLate(BookingError):
    kind = "too_late"
    status_code = 403


class AlreadyExists(BookingError):
    """Unique court name or weekly time slot already taken."""
    kind = "already_exists"
    status_code = 409
