"""Generic CRUD and search engine shared by every SCIM resource type.

A ``ResourceClient`` is bound to one resource class and one path segment at
construction and holds no per-call state. Every operation follows the same
skeleton: build the request, attach the bearer token, send it through the
shared transport, hand non-2xx responses to the error mapper, and decode the
body into the resource class.
"""
from __future__ import annotations
import json
import logging
from typing import Any, Callable, Dict, Generic, List, Optional, Type, TypeVar
from urllib.parse import quote

import requests

from .error_mapper import ResponseErrorMapper, is_success
from .exceptions import (
    ConfigurationError,
    ConnectionSetupError,
    DeserializationError,
    InvalidArgumentError,
)
from .query import MAX_COUNT, Query, QueryBuilder
from .resources import Resource, SearchResult
from .token import AccessToken
from .transport import HttpTransport, get_transport

logger = logging.getLogger(__name__)

CONNECTION_SETUP_ERROR_STRING = "Cannot connect to server"
AUTHORIZATION = "Authorization"
BEARER = "Bearer "

T = TypeVar("T", bound=Resource)
U = TypeVar("U")


def check_id(resource_id: Optional[str]) -> None:
    if not resource_id:
        raise InvalidArgumentError("The given id must not be null nor empty.")


def check_access_token(access_token: Optional[AccessToken]) -> None:
    if access_token is None:
        raise InvalidArgumentError("The given accessToken must not be null.")


class ResourceClient(Generic[T]):
    """CRUD and search operations for one resource type.

    Usage:
        users = ResourceClient("http://localhost:8080/osiam-resource-server", User)
        alice = users.get("a1b2", token)
        page = users.search(QueryBuilder().filter('userName eq "alice"').build(), token)
    """

    def __init__(
        self,
        endpoint: str,
        resource_type: Type[T],
        path: Optional[str] = None,
        transport: Optional[HttpTransport] = None,
        error_mapper: Optional[ResponseErrorMapper] = None,
    ):
        """Initialize the client.

        Args:
            endpoint: Resource server base URL
            resource_type: Resource class used to decode responses
            path: Path segment below the endpoint (defaults to the class' RESOURCE_PATH)
            transport: Transport to send requests through (defaults to the shared one)
            error_mapper: Mapper for failed responses

        Raises:
            ConfigurationError: If endpoint or path is empty
        """
        if not endpoint:
            raise ConfigurationError("No endpoint to the OSIAM server has been set")
        self.endpoint = endpoint.rstrip("/")
        self.resource_type = resource_type
        self.path = path or resource_type.RESOURCE_PATH
        if not self.path:
            raise ConfigurationError(f"No resource path known for {resource_type.__name__}")
        self.type_name = resource_type.__name__
        self._transport = transport
        self.error_mapper = error_mapper or ResponseErrorMapper()

    @property
    def transport(self) -> HttpTransport:
        return self._transport if self._transport is not None else get_transport()

    # ─────────────────────────────────────────────────────────────────────
    # Operations
    # ─────────────────────────────────────────────────────────────────────
    def get(self, resource_id: str, access_token: AccessToken) -> T:
        """Retrieve a single resource by id.

        Raises:
            InvalidArgumentError: If id is empty or the token is missing
            NoResultError: If no resource has the given id
        """
        check_id(resource_id)
        check_access_token(access_token)
        content = self._send("GET", self._resource_url(resource_id), access_token)
        return self._map_to_resource(content)

    def get_all(self, access_token: AccessToken) -> List[T]:
        """Retrieve every resource of this type in one request."""
        query = QueryBuilder().count(MAX_COUNT).build()
        return self.search(query, access_token).resources

    def search(self, query: Query, access_token: AccessToken) -> SearchResult[T]:
        """Search resources.

        ``startIndex`` and ``count`` are only sent when they differ from the
        builder defaults.

        Raises:
            InvalidArgumentError: If query or token is missing
        """
        if query is None:
            raise InvalidArgumentError("The given query must not be null.")
        check_access_token(access_token)
        content = self._send("GET", self._collection_url(), access_token, params=query.to_params())
        return self._map_to_type(
            content,
            lambda data: SearchResult.from_dict(data, self.resource_type),
            "search result",
        )

    def create(self, resource: T, access_token: AccessToken) -> T:
        """Create a resource; the returned entity carries the server-assigned id."""
        self._check_resource(resource)
        check_access_token(access_token)
        body = self._serialize(resource)
        content = self._send("POST", self._collection_url(), access_token, body=body)
        return self._map_to_resource(content)

    def update(self, resource_id: str, resource: T, access_token: AccessToken) -> T:
        """Partially update a resource (PATCH): only set fields are applied."""
        return self._modify(resource_id, resource, "PATCH", access_token)

    def replace(self, resource_id: str, resource: T, access_token: AccessToken) -> T:
        """Replace a resource (PUT): the whole entity is overwritten."""
        return self._modify(resource_id, resource, "PUT", access_token)

    def delete(self, resource_id: str, access_token: AccessToken) -> None:
        check_id(resource_id)
        check_access_token(access_token)
        self._send("DELETE", self._resource_url(resource_id), access_token)

    # ─────────────────────────────────────────────────────────────────────
    # Request / response skeleton
    # ─────────────────────────────────────────────────────────────────────
    def _modify(self, resource_id: str, resource: T, method: str, access_token: AccessToken) -> T:
        check_id(resource_id)
        self._check_resource(resource)
        check_access_token(access_token)
        body = self._serialize(resource)
        content = self._send(method, self._resource_url(resource_id), access_token, body=body)
        return self._map_to_resource(content)

    def _collection_url(self) -> str:
        return f"{self.endpoint}/{self.path}"

    def _resource_url(self, resource_id: str) -> str:
        return f"{self._collection_url()}/{quote(resource_id, safe='')}"

    def _check_resource(self, resource: Optional[T]) -> None:
        if resource is None:
            raise InvalidArgumentError(f"The given {self.type_name} must not be null nor empty.")

    def _serialize(self, resource: T) -> str:
        try:
            return json.dumps(resource.to_dict())
        except (TypeError, ValueError) as exc:
            raise InvalidArgumentError(f"Unable to serialize {self.type_name}: {exc}") from exc

    def _send(
        self,
        method: str,
        url: str,
        access_token: AccessToken,
        params: Optional[Dict[str, str]] = None,
        body: Optional[str] = None,
    ) -> str:
        """Send a request and return the body of a successful response.

        Raises:
            ConnectionSetupError: If the server could not be reached
            OsiamRequestError: (or a subclass) on non-2xx responses
        """
        headers = {
            AUTHORIZATION: BEARER + access_token.token,
            "Accept": "application/json",
        }
        if body is not None:
            headers["Content-Type"] = "application/json"

        try:
            resp = self.transport.request(method, url, headers=headers, params=params, data=body)
            status = resp.status_code
            reason = resp.reason
            content = resp.text
        except requests.RequestException as exc:
            logger.warning("Cannot connect to %s: %s", url, exc)
            raise ConnectionSetupError(CONNECTION_SETUP_ERROR_STRING) from exc

        if not is_success(status):
            self.error_mapper.classify(content, status, access_token, reason)
        return content

    def _map_to_resource(self, content: str) -> T:
        return self._map_to_type(content, self.resource_type.from_dict, self.type_name)

    def _map_to_type(self, content: str, decoder: Callable[[Any], U], label: str) -> U:
        try:
            return decoder(json.loads(content))
        except (ValueError, TypeError, KeyError) as exc:
            raise DeserializationError(f"Unable to parse {label}: {content}") from exc
