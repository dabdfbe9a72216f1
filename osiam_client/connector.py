"""Entry point to an OSIAM installation.

``OsiamConnector`` bundles the auth service and the user, group and client
services. Each is built on first use, once per connector, from the resolved
endpoint. A connector with a missing endpoint can therefore be constructed
freely; the ``ConfigurationError`` surfaces when a service that needs the
endpoint is first called.

Usage:
    connector = OsiamConnector(
        endpoint="http://localhost:8080",
        client_id="example-client",
        client_secret="secret",
    )
    token = connector.retrieve_access_token(Scope.ADMIN)
    alice = connector.get_user("a1b2", token)
"""
from __future__ import annotations
import logging
import threading
from typing import Callable, List, Optional, TypeVar

from . import transport as _transport
from .auth import AuthService
from .clients import OauthClientService
from .config import ConnectorConfig
from .endpoints import EndpointResolver
from .groups import GroupService
from .query import Query, QueryBuilder
from .resources import BasicUser, Group, OauthClient, SearchResult, User
from .token import AccessToken
from .transport import HttpTransport
from .users import UserService

logger = logging.getLogger(__name__)

S = TypeVar("S")


class OsiamConnector:
    """Facade over the OSIAM auth and resource services."""

    def __init__(
        self,
        endpoint: Optional[str] = None,
        auth_server_endpoint: Optional[str] = None,
        resource_server_endpoint: Optional[str] = None,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        client_redirect_uri: Optional[str] = None,
        transport: Optional[HttpTransport] = None,
    ):
        """Initialize the connector. No endpoint is resolved here.

        Args:
            endpoint: Generic OSIAM base URL; server URLs are derived from it
            auth_server_endpoint: Auth server URL, overrides the derived one
            resource_server_endpoint: Resource server URL, overrides the derived one
            client_id: OAuth client id
            client_secret: OAuth client secret
            client_redirect_uri: Redirect URI for the authorization code flow
            transport: Transport override (defaults to the process-wide one)
        """
        self.resolver = EndpointResolver(
            endpoint=endpoint,
            auth_server_endpoint=auth_server_endpoint,
            resource_server_endpoint=resource_server_endpoint,
        )
        self.client_id = client_id
        self.client_secret = client_secret
        self.client_redirect_uri = client_redirect_uri
        self._transport = transport

        self._lock = threading.Lock()
        self._auth_service: Optional[AuthService] = None
        self._user_service: Optional[UserService] = None
        self._group_service: Optional[GroupService] = None
        self._client_service: Optional[OauthClientService] = None

    @classmethod
    def from_config(cls, config: ConnectorConfig, transport: Optional[HttpTransport] = None) -> "OsiamConnector":
        return cls(
            endpoint=config.endpoint,
            auth_server_endpoint=config.auth_server_endpoint,
            resource_server_endpoint=config.resource_server_endpoint,
            client_id=config.client_id,
            client_secret=config.client_secret,
            client_redirect_uri=config.client_redirect_uri,
            transport=transport,
        )

    # ─────────────────────────────────────────────────────────────────────
    # Global transport tuning (affects every connector in the process)
    # ─────────────────────────────────────────────────────────────────────
    @staticmethod
    def set_connect_timeout(connect_timeout: int) -> None:
        _transport.set_connect_timeout(connect_timeout)

    @staticmethod
    def set_read_timeout(read_timeout: int) -> None:
        _transport.set_read_timeout(read_timeout)

    @staticmethod
    def set_max_connections(max_connections: int) -> None:
        _transport.set_max_connections(max_connections)

    @staticmethod
    def set_max_connections_per_route(max_connections_per_route: int) -> None:
        _transport.set_max_connections_per_route(max_connections_per_route)

    # ─────────────────────────────────────────────────────────────────────
    # Lazy services
    # ─────────────────────────────────────────────────────────────────────
    def _lazy(self, attr: str, factory: Callable[[], S]) -> S:
        service = getattr(self, attr)
        if service is None:
            with self._lock:
                service = getattr(self, attr)
                if service is None:
                    service = factory()
                    logger.debug("Built %s for %s", type(service).__name__, self.resolver)
                    setattr(self, attr, service)
        return service

    def _auth(self) -> AuthService:
        return self._lazy("_auth_service", lambda: AuthService(
            self.resolver.auth_service_endpoint(),
            client_id=self.client_id,
            client_secret=self.client_secret,
            client_redirect_uri=self.client_redirect_uri,
            transport=self._transport,
        ))

    def _users(self) -> UserService:
        return self._lazy("_user_service", lambda: UserService(
            self.resolver.resource_service_endpoint(), transport=self._transport
        ))

    def _groups(self) -> GroupService:
        return self._lazy("_group_service", lambda: GroupService(
            self.resolver.resource_service_endpoint(), transport=self._transport
        ))

    def _clients(self) -> OauthClientService:
        return self._lazy("_client_service", lambda: OauthClientService(
            self.resolver.resource_service_endpoint(), transport=self._transport
        ))

    # ─────────────────────────────────────────────────────────────────────
    # Users
    # ─────────────────────────────────────────────────────────────────────
    def get_user(self, user_id: str, access_token: AccessToken) -> User:
        return self._users().get(user_id, access_token)

    def get_all_users(self, access_token: AccessToken) -> List[User]:
        return self._users().get_all(access_token)

    def search_users(self, query: Query, access_token: AccessToken) -> SearchResult[User]:
        return self._users().search(query, access_token)

    def get_current_user(self, access_token: AccessToken) -> User:
        return self._users().get_current_user(access_token)

    def get_current_user_basic(self, access_token: AccessToken) -> BasicUser:
        return self._users().get_current_user_basic(access_token)

    def create_user(self, user: User, access_token: AccessToken) -> User:
        return self._users().create(user, access_token)

    def update_user(self, user_id: str, user: User, access_token: AccessToken) -> User:
        return self._users().update(user_id, user, access_token)

    def replace_user(self, user_id: str, user: User, access_token: AccessToken) -> User:
        return self._users().replace(user_id, user, access_token)

    def delete_user(self, user_id: str, access_token: AccessToken) -> None:
        self._users().delete(user_id, access_token)

    # ─────────────────────────────────────────────────────────────────────
    # Groups
    # ─────────────────────────────────────────────────────────────────────
    def get_group(self, group_id: str, access_token: AccessToken) -> Group:
        return self._groups().get(group_id, access_token)

    def get_all_groups(self, access_token: AccessToken) -> List[Group]:
        return self._groups().get_all(access_token)

    def search_groups(self, query: Query, access_token: AccessToken) -> SearchResult[Group]:
        return self._groups().search(query, access_token)

    def create_group(self, group: Group, access_token: AccessToken) -> Group:
        return self._groups().create(group, access_token)

    def update_group(self, group_id: str, group: Group, access_token: AccessToken) -> Group:
        return self._groups().update(group_id, group, access_token)

    def replace_group(self, group_id: str, group: Group, access_token: AccessToken) -> Group:
        return self._groups().replace(group_id, group, access_token)

    def delete_group(self, group_id: str, access_token: AccessToken) -> None:
        self._groups().delete(group_id, access_token)

    # ─────────────────────────────────────────────────────────────────────
    # OAuth clients
    # ─────────────────────────────────────────────────────────────────────
    def create_client(self, client: OauthClient, access_token: AccessToken) -> OauthClient:
        return self._clients().create(client, access_token)

    def get_client(self, client_id: str, access_token: AccessToken) -> OauthClient:
        return self._clients().get(client_id, access_token)

    def get_all_clients(self, access_token: AccessToken) -> List[OauthClient]:
        return self._clients().get_all(access_token)

    def replace_client(self, client_id: str, client: OauthClient, access_token: AccessToken) -> OauthClient:
        return self._clients().replace(client_id, client, access_token)

    def delete_client(self, client_id: str, access_token: AccessToken) -> None:
        self._clients().delete(client_id, access_token)

    # ─────────────────────────────────────────────────────────────────────
    # Auth
    # ─────────────────────────────────────────────────────────────────────
    def retrieve_access_token(self, *scopes: str) -> AccessToken:
        return self._auth().retrieve_access_token(*scopes)

    def retrieve_access_token_with_password(self, user_name: str, password: str, *scopes: str) -> AccessToken:
        return self._auth().retrieve_access_token_with_password(user_name, password, *scopes)

    def retrieve_access_token_with_code(self, auth_code: str) -> AccessToken:
        return self._auth().retrieve_access_token_with_code(auth_code)

    def refresh_access_token(self, access_token: AccessToken, *scopes: str) -> AccessToken:
        return self._auth().refresh_access_token(access_token, *scopes)

    def get_authorization_uri(self, *scopes: str) -> str:
        return self._auth().get_authorization_uri(*scopes)

    def validate_access_token(self, token_to_validate: AccessToken) -> AccessToken:
        return self._auth().validate_access_token(token_to_validate)

    def revoke_access_token(self, token_to_revoke: AccessToken) -> None:
        self._auth().revoke_access_token(token_to_revoke)

    def revoke_all_access_tokens(self, user_id: str, access_token: AccessToken) -> None:
        self._auth().revoke_all_access_tokens(user_id, access_token)

    # ─────────────────────────────────────────────────────────────────────
    # Queries
    # ─────────────────────────────────────────────────────────────────────
    @staticmethod
    def create_query_builder(query: Optional[Query] = None) -> QueryBuilder:
        return QueryBuilder(query)
