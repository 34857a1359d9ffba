class ServiceError(Exception):
    """Base exception for service layer failures."""

    status_code: int = 500

    def __init__(self, message: str, *, cause: Exception | None = None):
        super().__init__(message)
        self.cause = cause


class ConfigurationError(ServiceError):
    """Raised when required connection settings are absent."""


class ValidationFailedError(ServiceError):
    """Raised when a submission is missing a required field."""

    status_code = 400


class NotFoundError(ServiceError):
    status_code = 404


class SchemaMismatchError(ServiceError):
    """Raised when a sheet header does not carry the expected columns."""

    def __init__(self, message: str, missing: list[str] | None = None, *, cause: Exception | None = None):
        super().__init__(message, cause=cause)
        self.missing = list(missing or [])


class DownstreamServiceError(ServiceError):
    """Raised when an external service returns an error response."""

    def __init__(self, message: str, status_code: int | None = None, *, cause: Exception | None = None):
        super().__init__(message, cause=cause)
        self.upstream_status = status_code
