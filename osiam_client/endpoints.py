"""Resolution of the auth-server and resource-server base URLs.

A connector is configured either with one generic endpoint, from which both
server URLs are derived by suffix, or with explicit URLs for each server.
Explicit URLs always win.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

from .exceptions import ConfigurationError

AUTH_SERVER_SUFFIX = "osiam-auth-server/"
RESOURCE_SERVER_SUFFIX = "osiam-resource-server"
NO_ENDPOINT_MESSAGE = "No endpoint to the OSIAM server has been set"


def _derive(generic: str, suffix: str) -> str:
    if not generic.endswith("/"):
        generic += "/"
    return generic + suffix


@dataclass(frozen=True)
class EndpointResolver:
    """Computes server URLs on demand; construction never validates."""
    endpoint: Optional[str] = None
    auth_server_endpoint: Optional[str] = None
    resource_server_endpoint: Optional[str] = None

    def auth_service_endpoint(self) -> str:
        """Return the auth server base URL.

        Raises:
            ConfigurationError: If neither the auth nor the generic endpoint is set
        """
        return self._resolve(self.auth_server_endpoint, AUTH_SERVER_SUFFIX)

    def resource_service_endpoint(self) -> str:
        """Return the resource server base URL.

        Raises:
            ConfigurationError: If neither the resource nor the generic endpoint is set
        """
        return self._resolve(self.resource_server_endpoint, RESOURCE_SERVER_SUFFIX)

    def _resolve(self, specific: Optional[str], suffix: str) -> str:
        if specific:
            return specific
        if self.endpoint:
            return _derive(self.endpoint, suffix)
        raise ConfigurationError(NO_ENDPOINT_MESSAGE)
