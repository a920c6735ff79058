"""Typed failures raised by the booking services.

Each class carries the HTTP status and the machine-readable ``code`` the
API layer returns, so clients can tell e.g. ``already_taken`` apart from a
generic conflict.
"""


class BookingServiceError(Exception):
    """Base class for every failure the core reports to its caller."""
    status_code: int = 400
    code: str = "error"

    def __init__(self, message: str = ""):
        super().__init__(message or self.__class__.__doc__ or self.code)
        self.message = str(self.args[0])


# ----- validation -----------------------------------------------------------

class ValidationError(BookingServiceError):
    """Malformed or missing input."""
    status_code = 422
    code = "validation_error"


class InvalidState(ValidationError):
    """Requested driver eligibility state is not recognised."""
    code = "invalid_state"


class VerificationFailed(ValidationError):
    """Verification code missing, expired or wrong."""
    status_code = 400
    code = "verification_failed"


# ----- not found ------------------------------------------------------------

class NotFound(BookingServiceError):
    status_code = 404
    code = "not_found"


class BookingNotFound(NotFound):
    """Booking not found."""
    code = "booking_not_found"


class DriverNotFound(NotFound):
    """Driver not found."""
    code = "driver_not_found"


# ----- conflicts ------------------------------------------------------------

class Conflict(BookingServiceError):
    status_code = 409
    code = "conflict"


class AlreadyTaken(Conflict):
    """Booking was already accepted by another driver."""
    code = "already_taken"


class InvalidTransition(Conflict):
    """Booking cannot move to the requested status."""
    code = "invalid_transition"


class AlreadyRated(Conflict):
    """Booking has already been rated."""
    code = "already_rated"


class NotCompleted(Conflict):
    """Booking is not completed."""
    code = "not_completed"


class ActiveBookingExists(Conflict):
    """Passenger already has an active booking."""
    code = "active_booking_exists"


# ----- policy ---------------------------------------------------------------

class PolicyViolation(BookingServiceError):
    status_code = 403
    code = "policy_violation"


class NotEligible(PolicyViolation):
    """Driver account is not active."""
    code = "not_eligible"


class ReportLimitExceeded(PolicyViolation):
    """Report limit reached for this driver."""
    status_code = 429
    code = "report_limit_exceeded"


# ----- persistence ----------------------------------------------------------

class StoreError(BookingServiceError):
    """Database error."""
    status_code = 503
    code = "store_error"
