"""Domain errors shared by every module.

Each error carries the HTTP status it renders as; the handlers in
``src.exception_handlers`` turn them into ``{"error": message}`` responses.
"""


class DomainError(Exception):
    retryable = False
    headers = {}

    def __init__(self, message: str, status_code: int = 400):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class ValidationError(DomainError):
    def __init__(self, message: str):
        super().__init__(message, 400)


class BookingClosedError(DomainError):
    def __init__(self, message: str = "Booking is currently closed"):
        super().__init__(message, 403)


class AuthenticationError(DomainError):
    headers = {"WWW-Authenticate": "Bearer"}

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message, 401)


class NotFoundError(DomainError):
    def __init__(self, message: str):
        super().__init__(message, 404)


class ConflictError(DomainError):
    def __init__(self, message: str):
        super().__init__(message, 409)


class InventoryExhaustedError(DomainError):
    def __init__(self, route_code: str):
        self.route_code = route_code
        super().__init__("No seats available for this route", 400)


class PaymentError(DomainError):
    def __init__(self, message: str):
        super().__init__(message, 500)


class ConfigError(PaymentError):
    pass


class GatewayError(PaymentError):
    def __init__(self, message: str, gateway_status: int):
        self.gateway_status = gateway_status
        super().__init__(message)


class NetworkError(PaymentError):
    retryable = True


class PersistenceError(DomainError):
    def __init__(self, message: str = "Failed to save changes", status_code: int = 500):
        super().__init__(message, status_code)


class StoreUnavailableError(PersistenceError):
    """The database timed out or was unreachable; the whole request may be retried."""

    retryable = True

    def __init__(self, message: str = "Database is busy, please retry"):
        super().__init__(message, 503)
