"""OSIAM OAuth client registration."""
from __future__ import annotations
from typing import NoReturn, Optional

from .error_mapper import ResponseErrorMapper
from .exceptions import InvalidArgumentError
from .resource_client import ResourceClient
from .resources import OauthClient
from .token import AccessToken
from .transport import HttpTransport


class OauthClientService(ResourceClient[OauthClient]):
    """Service for registering OAuth clients.

    Clients live under the ``Client`` path of the resource server rather than
    the pluralized SCIM form. Partial updates are refused since every
    ``OauthClient`` carries a generated secret and grants; send the full
    client with ``replace``.
    """

    def __init__(
        self,
        endpoint: str,
        transport: Optional[HttpTransport] = None,
        error_mapper: Optional[ResponseErrorMapper] = None,
    ):
        super().__init__(endpoint, OauthClient, path="Client", transport=transport, error_mapper=error_mapper)

    def update(self, resource_id: str, resource: OauthClient, access_token: AccessToken) -> NoReturn:
        raise InvalidArgumentError("OAuth clients cannot be partially updated; use replace instead.")
