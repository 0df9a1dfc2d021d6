"""
Payment Service Exceptions

Errors that surface to clients carry the HTTP status they map to.
"""


class PaymentServiceError(Exception):
    """Base class for errors rendered as ``{"error": message}``."""

    status_code: int = 500
    default_message: str = "internal error"

    def __init__(self, message: str = "", status_code: int = 0):
        self.message = message or self.default_message
        if status_code:
            self.status_code = status_code
        super().__init__(self.message)


class MissingIdempotencyKeyError(PaymentServiceError):
    """Raised when a charge request carries no Idempotency-Key header."""

    status_code = 400
    default_message = "Idempotency-Key header required"


class InvalidIdempotencyKeyError(PaymentServiceError):
    """Raised when the Idempotency-Key cannot be stored as given."""

    status_code = 400
    default_message = "Idempotency-Key header is invalid"


class InvalidChargeRequestError(PaymentServiceError):
    """Raised for caller input the decision engine refuses to evaluate."""

    status_code = 400
    default_message = "invalid charge request"


class PaymentPersistenceError(PaymentServiceError):
    """Raised when a decided charge could not be durably recorded."""

    status_code = 500
    default_message = "payment persistence failed"


class StoreUnavailableError(PaymentServiceError):
    """Raised when the payment store cannot be read."""

    status_code = 503
    default_message = "payment store unavailable"


class DatabaseUnavailableError(Exception):
    """Raised at startup when the database never became reachable."""
    pass
