"""OSIAM client exceptions for error handling."""
from __future__ import annotations


class OsiamClientError(Exception):
    """Base exception for all OSIAM client operations."""
    pass


class InvalidArgumentError(OsiamClientError, ValueError):
    """A local precondition failed (empty id, missing resource or token).

    Raised before any request is sent.
    """
    pass


class ConfigurationError(OsiamClientError):
    """The connector is missing configuration needed for the requested operation."""
    pass


class ConnectionSetupError(OsiamClientError):
    """The OSIAM server could not be reached (DNS, refused connection, timeout)."""
    pass


class DeserializationError(OsiamClientError):
    """A successful response body did not match the expected shape."""
    pass


class OsiamRequestError(OsiamClientError):
    """HTTP error returned by the OSIAM server.

    Attributes:
        status_code: HTTP status code
        message: Error message extracted from the response
    """

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"[{status_code}] {message}")


class UnauthorizedError(OsiamRequestError):
    """The access token was rejected (401)."""

    def __init__(self, message: str, status_code: int = 401):
        super().__init__(status_code, message)


class ForbiddenError(OsiamRequestError):
    """The access token lacks the scopes required for the operation (403)."""

    def __init__(self, message: str, status_code: int = 403):
        super().__init__(status_code, message)


class NoResultError(OsiamRequestError):
    """The requested resource does not exist (404)."""

    def __init__(self, message: str, status_code: int = 404):
        super().__init__(status_code, message)


class ConflictError(OsiamRequestError):
    """The request conflicts with server state or is malformed (400, 409)."""

    def __init__(self, message: str, status_code: int = 409):
        super().__init__(status_code, message)
