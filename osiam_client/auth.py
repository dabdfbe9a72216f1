"""Token acquisition, validation and revocation against the OSIAM auth server."""
from __future__ import annotations
import json
import logging
from typing import Any, Dict, Optional
from urllib.parse import quote, urlencode

import requests

from .error_mapper import ResponseErrorMapper, is_success
from .exceptions import (
    ConfigurationError,
    ConnectionSetupError,
    DeserializationError,
    InvalidArgumentError,
)
from .resource_client import AUTHORIZATION, BEARER, CONNECTION_SETUP_ERROR_STRING, check_access_token
from .token import AccessToken
from .transport import HttpTransport, get_transport

logger = logging.getLogger(__name__)


class AuthService:
    """Client for the OAuth2 endpoints of the auth server.

    Usage:
        auth = AuthService("http://localhost:8080/osiam-auth-server/",
                           client_id="example-client", client_secret="secret")
        token = auth.retrieve_access_token("ADMIN")
    """

    def __init__(
        self,
        endpoint: str,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        client_redirect_uri: Optional[str] = None,
        transport: Optional[HttpTransport] = None,
        error_mapper: Optional[ResponseErrorMapper] = None,
    ):
        """Initialize auth service.

        Args:
            endpoint: Auth server base URL
            client_id: OAuth client id
            client_secret: OAuth client secret
            client_redirect_uri: Redirect URI registered for the client
            transport: Transport override (defaults to the shared one)
            error_mapper: Mapper for failed responses
        """
        if not endpoint:
            raise ConfigurationError("No endpoint to the OSIAM server has been set")
        self.endpoint = endpoint.rstrip("/")
        self.client_id = client_id
        self.client_secret = client_secret
        self.client_redirect_uri = client_redirect_uri
        self._transport = transport
        self.error_mapper = error_mapper or ResponseErrorMapper()

    @property
    def transport(self) -> HttpTransport:
        return self._transport if self._transport is not None else get_transport()

    # ─────────────────────────────────────────────────────────────────────
    # Token retrieval
    # ─────────────────────────────────────────────────────────────────────
    def retrieve_access_token(self, *scopes: str) -> AccessToken:
        """Fetch a client token using the client credentials grant."""
        data = {"grant_type": "client_credentials"}
        self._add_scopes(data, scopes)
        return self._request_token(data)

    def retrieve_access_token_with_password(self, user_name: str, password: str, *scopes: str) -> AccessToken:
        """Fetch a user token using the resource owner password grant."""
        if not user_name or not password:
            raise InvalidArgumentError("The given userName and password must not be null nor empty.")
        data = {"grant_type": "password", "username": user_name, "password": password}
        self._add_scopes(data, scopes)
        return self._request_token(data)

    def retrieve_access_token_with_code(self, auth_code: str) -> AccessToken:
        """Exchange an authorization code for a token."""
        if not auth_code:
            raise InvalidArgumentError("The given authentication code must not be null nor empty.")
        data = {
            "grant_type": "authorization_code",
            "code": auth_code,
            "redirect_uri": self._require_redirect_uri(),
        }
        return self._request_token(data)

    def refresh_access_token(self, access_token: AccessToken, *scopes: str) -> AccessToken:
        """Trade the token's refresh token for a new access token.

        Raises:
            InvalidArgumentError: If the token carries no refresh token
        """
        check_access_token(access_token)
        if not access_token.refresh_token:
            raise InvalidArgumentError("The given accessToken has no refresh token.")
        data = {"grant_type": "refresh_token", "refresh_token": access_token.refresh_token}
        self._add_scopes(data, scopes)
        return self._request_token(data)

    def get_authorization_uri(self, *scopes: str) -> str:
        """Build the URI to send a user agent to for the authorization code flow."""
        params = {
            "client_id": self._require_credentials()[0],
            "response_type": "code",
            "redirect_uri": self._require_redirect_uri(),
        }
        if scopes:
            params["scope"] = " ".join(scopes)
        return f"{self.endpoint}/oauth/authorize?{urlencode(params)}"

    # ─────────────────────────────────────────────────────────────────────
    # Validation / revocation
    # ─────────────────────────────────────────────────────────────────────
    def validate_access_token(self, token_to_validate: AccessToken) -> AccessToken:
        """Ask the auth server for the current state of a token."""
        check_access_token(token_to_validate)
        content = self._send("POST", f"{self.endpoint}/token/validation", token_to_validate)
        return self._map_to_token(content)

    def revoke_access_token(self, token_to_revoke: AccessToken) -> None:
        check_access_token(token_to_revoke)
        self._send("POST", f"{self.endpoint}/token/revocation", token_to_revoke)

    def revoke_all_access_tokens(self, user_id: str, access_token: AccessToken) -> None:
        """Revoke every token issued for the given user."""
        if not user_id:
            raise InvalidArgumentError("The given id must not be null nor empty.")
        check_access_token(access_token)
        self._send("POST", f"{self.endpoint}/token/revocation/{quote(user_id, safe='')}", access_token)

    # ─────────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────────
    @staticmethod
    def _add_scopes(data: Dict[str, str], scopes) -> None:
        if scopes:
            data["scope"] = " ".join(scopes)

    def _require_credentials(self) -> tuple[str, str]:
        if not self.client_id or not self.client_secret:
            raise ConfigurationError("The client id and client secret must be set to retrieve an access token")
        return self.client_id, self.client_secret

    def _require_redirect_uri(self) -> str:
        if not self.client_redirect_uri:
            raise ConfigurationError("The client redirect URI must be set for the authorization code flow")
        return self.client_redirect_uri

    def _request_token(self, data: Dict[str, str]) -> AccessToken:
        credentials = self._require_credentials()
        url = f"{self.endpoint}/oauth/token"
        try:
            resp = self.transport.request(
                "POST",
                url,
                data=data,
                auth=credentials,
                headers={"Accept": "application/json"},
            )
        except requests.RequestException as exc:
            logger.warning("Cannot connect to %s: %s", url, exc)
            raise ConnectionSetupError(CONNECTION_SETUP_ERROR_STRING) from exc

        if not is_success(resp.status_code):
            self.error_mapper.classify(resp.text, resp.status_code, None, resp.reason)
        logger.info("Retrieved access token (grant=%s, client_id=%s)", data["grant_type"], credentials[0])
        return self._map_to_token(resp.text)

    def _send(self, method: str, url: str, access_token: AccessToken) -> str:
        headers = {AUTHORIZATION: BEARER + access_token.token, "Accept": "application/json"}
        try:
            resp = self.transport.request(method, url, headers=headers)
        except requests.RequestException as exc:
            logger.warning("Cannot connect to %s: %s", url, exc)
            raise ConnectionSetupError(CONNECTION_SETUP_ERROR_STRING) from exc

        if not is_success(resp.status_code):
            self.error_mapper.classify(resp.text, resp.status_code, access_token, resp.reason)
        return resp.text

    @staticmethod
    def _map_to_token(content: str) -> AccessToken:
        try:
            data: Any = json.loads(content)
            if not isinstance(data, dict):
                raise TypeError("token response must be a JSON object")
            return AccessToken.from_dict(data)
        except (ValueError, TypeError, KeyError) as exc:
            # The body may carry live tokens; report its size only
            raise DeserializationError(
                f"Unable to parse access token response ({len(content or '')} characters)"
            ) from exc
