"""
Error taxonomy of the client-side data layer.

Every failure of a facade call is one of the four `PortalError` subclasses.
`status` carries the HTTP status of the remote response, or None when the
failure happened before a response arrived (or locally).
"""


class PortalError(Exception):
    """Base class of every data-layer error."""

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.message = message
        self.status = status

    def __str__(self) -> str:
        if self.status is None:
            return self.message
        return f"{self.status}: {self.message}"


class NetworkError(PortalError):
    """Transport failure or a non-2xx remote response without a more specific meaning."""


class ValidationError(PortalError):
    """Malformed caller input: missing required field, unsupported bundle."""


class NotFoundError(PortalError):
    """The referenced id does not exist."""


class ConflictError(PortalError):
    """Uniqueness violation, e.g. a duplicate email."""


_STATUS_ERRORS = {
    400: ValidationError,
    404: NotFoundError,
    409: ConflictError,
}


def error_for_status(status: int, message: str) -> PortalError:
    """Map a non-2xx HTTP status to the matching error instance."""
    return _STATUS_ERRORS.get(status, NetworkError)(message, status=status)
