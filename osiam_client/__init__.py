"""OSIAM client library.

This package provides a typed interface to the OSIAM auth and resource servers.

Architecture:
- connector.py: OsiamConnector facade with lazily built services
- endpoints.py: Auth/resource server URL resolution
- resource_client.py: Generic CRUD and search engine
- users.py, groups.py, clients.py: Per-resource services
- auth.py: Token retrieval, validation and revocation
- error_mapper.py: HTTP status -> exception classification
- transport.py: Shared, pooled HTTP session with global tuning
- resources.py, query.py, token.py: Value types
- config.py: Settings from environment and Docker secrets
- exceptions.py: Typed exceptions for error handling

Usage:
    from osiam_client import OsiamConnector, QueryBuilder, Scope

    connector = OsiamConnector(endpoint="http://localhost:8080",
                               client_id="example-client", client_secret="secret")
    token = connector.retrieve_access_token(Scope.ADMIN)
    page = connector.search_users(QueryBuilder().filter('userName eq "alice"').build(), token)
"""
from .auth import AuthService
from .clients import OauthClientService
from .config import ConnectorConfig, apply_transport_settings, load_settings
from .connector import OsiamConnector
from .endpoints import EndpointResolver
from .error_mapper import ResponseErrorMapper
from .exceptions import (
    OsiamClientError,
    InvalidArgumentError,
    ConfigurationError,
    ConnectionSetupError,
    DeserializationError,
    OsiamRequestError,
    UnauthorizedError,
    ForbiddenError,
    NoResultError,
    ConflictError,
)
from .groups import GroupService
from .query import MAX_COUNT, Query, QueryBuilder, SortOrder
from .resource_client import ResourceClient
from .resources import BasicUser, Group, Meta, OauthClient, Resource, SearchResult, User
from .token import AccessToken, Scope
from .transport import (
    HttpTransport,
    get_transport,
    set_transport,
    set_connect_timeout,
    set_read_timeout,
    set_max_connections,
    set_max_connections_per_route,
)
from .users import UserService

__all__ = [
    # Facade
    "OsiamConnector",
    "EndpointResolver",

    # Services
    "AuthService",
    "ResourceClient",
    "UserService",
    "GroupService",
    "OauthClientService",
    "ResponseErrorMapper",

    # Exceptions
    "OsiamClientError",
    "InvalidArgumentError",
    "ConfigurationError",
    "ConnectionSetupError",
    "DeserializationError",
    "OsiamRequestError",
    "UnauthorizedError",
    "ForbiddenError",
    "NoResultError",
    "ConflictError",

    # Values
    "AccessToken",
    "Scope",
    "Query",
    "QueryBuilder",
    "SortOrder",
    "MAX_COUNT",
    "Resource",
    "Meta",
    "User",
    "BasicUser",
    "Group",
    "OauthClient",
    "SearchResult",

    # Configuration
    "ConnectorConfig",
    "load_settings",
    "apply_transport_settings",

    # Transport
    "HttpTransport",
    "get_transport",
    "set_transport",
    "set_connect_timeout",
    "set_read_timeout",
    "set_max_connections",
    "set_max_connections_per_route",
]
