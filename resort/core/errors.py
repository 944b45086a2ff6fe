"""
Domain error taxonomy.

Several kinds share HTTP 400, so API clients should branch on `kind`
rather than on the status code.
"""


class ReservationError(Exception):
    """Base class for errors surfaced directly to the API caller"""

    kind = "error"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"success": False, "error": self.kind, "message": self.message}


class NotFoundError(ReservationError):
    kind = "not_found"
    status_code = 404


class ValidationError(ReservationError):
    kind = "validation"
    status_code = 400


class ConflictError(ReservationError):
    kind = "conflict"
    status_code = 400


class BookingExpiredError(ReservationError):
    kind = "expired"
    status_code = 400


class UnauthorizedError(ReservationError):
    kind = "unauthorized"
    status_code = 401


class DeliveryError(ReservationError):
    """Raised only where email delivery is the whole point of the request"""

    kind = "delivery"
    status_code = 502
