"""Classification of failed OSIAM responses into typed exceptions.

The mapper always raises. Error bodies are tried against the SCIM error
schema first and the OAuth error schema second; a body matching neither is
reported with the HTTP reason phrase and the raw text.
"""
from __future__ import annotations
import json
import logging
from http import HTTPStatus
from typing import Any, Callable, NoReturn, Optional, Sequence

from .exceptions import (
    ConflictError,
    ForbiddenError,
    NoResultError,
    OsiamRequestError,
    UnauthorizedError,
)
from .token import AccessToken

logger = logging.getLogger(__name__)

ErrorBodyParser = Callable[[Optional[str]], Optional[str]]


def _load_object(content: Optional[str]) -> Optional[dict]:
    if not content:
        return None
    try:
        data: Any = json.loads(content)
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


def scim_error_message(content: Optional[str]) -> Optional[str]:
    """Description from a SCIM error body (``description`` or SCIM 2 ``detail``)."""
    data = _load_object(content)
    if data is None:
        return None
    for key in ("description", "detail"):
        value = data.get(key)
        if isinstance(value, str) and value:
            return value
    return None


def oauth_error_message(content: Optional[str]) -> Optional[str]:
    """Description from an OAuth2 error body (``error_description``)."""
    data = _load_object(content)
    if data is None:
        return None
    value = data.get("error_description")
    if isinstance(value, str) and value:
        return value
    return None


def reason_phrase(status: int, reason: Optional[str] = None) -> str:
    if reason:
        return reason
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return str(status)


class ResponseErrorMapper:
    """Turns a non-2xx status and body into the matching exception."""

    def __init__(self, parsers: Sequence[ErrorBodyParser] = (scim_error_message, oauth_error_message)):
        self.parsers = tuple(parsers)

    def extract_message(self, content: Optional[str], status: int, reason: Optional[str] = None) -> str:
        """Return the server's description, or a synthesized fallback. Never raises."""
        for parser in self.parsers:
            try:
                message = parser(content)
            except Exception:
                logger.debug("Error body parser %r failed", parser, exc_info=True)
                message = None
            if message:
                return message

        message = (
            f"Could not deserialize the error response for the HTTP status "
            f"'{reason_phrase(status, reason)}'."
        )
        if content:
            message += f" Original response: {content}"
        return message

    @staticmethod
    def forbidden_message(access_token: Optional[AccessToken]) -> str:
        scopes = access_token.scope_string() if access_token is not None else ""
        return f"Insufficient scopes: {scopes}"

    def classify(
        self,
        content: Optional[str],
        status: int,
        access_token: Optional[AccessToken],
        reason: Optional[str] = None,
    ) -> NoReturn:
        """Raise the exception matching a failed response.

        Args:
            content: Raw response body
            status: HTTP status code
            access_token: Token used for the request (reported on 403)
            reason: HTTP reason phrase, if the response carried one

        Raises:
            UnauthorizedError: 401
            ConflictError: 400 and 409
            NoResultError: 404
            ForbiddenError: 403
            OsiamRequestError: Any other status
        """
        if status == HTTPStatus.FORBIDDEN:
            error: OsiamRequestError = ForbiddenError(self.forbidden_message(access_token))
        else:
            message = self.extract_message(content, status, reason)
            if status == HTTPStatus.UNAUTHORIZED:
                error = UnauthorizedError(message)
            elif status == HTTPStatus.BAD_REQUEST:
                error = ConflictError(message, status_code=status)
            elif status == HTTPStatus.NOT_FOUND:
                error = NoResultError(message)
            elif status == HTTPStatus.CONFLICT:
                error = ConflictError(message)
            else:
                error = OsiamRequestError(status, message)

        logger.warning("OSIAM request failed: %s %s", type(error).__name__, error)
        raise error


def is_success(status: int) -> bool:
    return 200 <= status < 300
