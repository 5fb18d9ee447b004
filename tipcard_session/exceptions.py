"""
Custom exceptions for the tipping session core.

Remote collaborators (auth provider, document store, payment processor)
raise these so callers can apply a single fallback policy regardless of
the backend in use.
"""


class TipcardError(Exception):
    """Base exception for all tipcard session errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class RemoteUnavailableError(TipcardError):
    """Raised when the remote auth provider or document store cannot be reached."""

    def __init__(self, service: str, cause: Exception | None = None):
        details = {"service": service}
        if cause:
            details["cause"] = str(cause)
        message = f"Remote service unavailable: {service}"
        if cause:
            message += f" ({cause})"
        super().__init__(message, details)
        self.service = service
        self.cause = cause


class InvalidCredentialsError(TipcardError):
    """Raised when every sign-in path has been exhausted."""

    def __init__(self, message: str = "Invalid credentials", email: str | None = None):
        details = {}
        if email:
            details["email"] = email
        super().__init__(message, details)
        self.email = email


class RecordNotFoundError(TipcardError):
    """Raised when neither the remote store nor the cache holds a record."""

    def __init__(self, path: str, record_id: str):
        super().__init__(
            f"Record not found: {path}/{record_id}",
            {"path": path, "record_id": record_id},
        )
        self.path = path
        self.record_id = record_id


class PersistenceWriteError(TipcardError):
    """Raised when the durable local key/value storage rejects a write."""

    def __init__(self, key: str, cause: Exception | None = None):
        details = {"key": key}
        if cause:
            details["cause"] = str(cause)
        super().__init__(f"Local persistence write failed for {key}", details)
        self.key = key
        self.cause = cause


class ValidationError(TipcardError):
    """Raised when caller input fails validation."""

    def __init__(self, field: str, reason: str, value: str | None = None):
        details = {"field": field, "reason": reason}
        if value is not None:
            details["value"] = value
        super().__init__(f"Validation failed for {field}: {reason}", details)
        self.field = field
        self.reason = reason
        self.value = value


class PaymentError(TipcardError):
    """Raised when the payment processor rejects or fails a request."""

    def __init__(self, message: str, status: int | None = None, cause: Exception | None = None):
        details: dict = {}
        if status is not None:
            details["status"] = status
        if cause:
            details["cause"] = str(cause)
        super().__init__(message, details)
        self.status = status
        self.cause = cause
