"""OSIAM user operations."""
from __future__ import annotations
from typing import Optional

from .error_mapper import ResponseErrorMapper
from .resource_client import ResourceClient, check_access_token
from .resources import BasicUser, User
from .token import AccessToken
from .transport import HttpTransport


class UserService(ResourceClient[User]):
    """Service for managing OSIAM users."""

    def __init__(
        self,
        endpoint: str,
        transport: Optional[HttpTransport] = None,
        error_mapper: Optional[ResponseErrorMapper] = None,
    ):
        """Initialize user service.

        Args:
            endpoint: Resource server base URL
            transport: Transport override (defaults to the shared one)
            error_mapper: Mapper for failed responses
        """
        super().__init__(endpoint, User, transport=transport, error_mapper=error_mapper)

    def get_current_user(self, access_token: AccessToken) -> User:
        """Return the user the access token was issued for.

        Args:
            access_token: User-bound access token

        Returns:
            The token owner's full user representation
        """
        check_access_token(access_token)
        content = self._send("GET", f"{self.endpoint}/Me", access_token)
        return self._map_to_resource(content)

    def get_current_user_basic(self, access_token: AccessToken) -> BasicUser:
        """Return the basic profile of the token owner (GET ``{endpoint}/me``)."""
        check_access_token(access_token)
        content = self._send("GET", f"{self.endpoint}/me", access_token)
        return self._map_to_type(content, BasicUser.from_dict, "BasicUser")
