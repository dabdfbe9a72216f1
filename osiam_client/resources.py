"""SCIM resource representations and their JSON codec.

Every resource is a dataclass whose Python attributes map to camelCase wire
names. Attributes that are ``None`` or empty are left out of the JSON body,
which gives PATCH requests their partial-update semantics. Wire attributes the
model does not know are kept in ``extra`` and written back unchanged.

Usage:
    user = User(user_name="alice", emails=[{"value": "alice@example.com", "primary": True}])
    payload = user.to_dict()
    same = User.from_dict(payload)
"""
from __future__ import annotations
import dataclasses
import uuid
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Generic, List, Optional, Set, Type, TypeVar

SCIM_USER_SCHEMA = "urn:ietf:params:scim:schemas:core:2.0:User"
SCIM_GROUP_SCHEMA = "urn:ietf:params:scim:schemas:core:2.0:Group"
SCIM_LIST_RESPONSE_SCHEMA = "urn:ietf:params:scim:api:messages:2.0:ListResponse"

DEFAULT_GRANTS = frozenset({"authorization_code", "refresh-token"})

_NOT_SERIALIZED = {"meta", "extra"}


def _camel(name: str) -> str:
    head, *tail = name.split("_")
    return head + "".join(part.capitalize() for part in tail)


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, (str, list, dict, set, frozenset)) and not value)


def _as_set(value: Any) -> Set[str]:
    """Set of tokens from a space-separated string or an iterable of strings."""
    if not value:
        return set()
    if isinstance(value, str):
        return set(value.split())
    return {str(item) for item in value}


def _encode(value: Any) -> Any:
    if isinstance(value, (set, frozenset)):
        return sorted(value)
    return value


@dataclass
class Meta:
    """Resource metadata. Timestamps are opaque strings.

    ``attributes`` names attributes to remove when sent with a PATCH.
    """
    created: Optional[str] = None
    last_modified: Optional[str] = None
    location: Optional[str] = None
    resource_type: Optional[str] = None
    version: Optional[str] = None
    attributes: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            _camel(f.name): getattr(self, f.name)
            for f in dataclasses.fields(self)
            if not _is_empty(getattr(self, f.name))
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Meta":
        if not isinstance(data, dict):
            raise TypeError(f"meta must be an object, got {type(data).__name__}")
        return cls(
            created=data.get("created"),
            last_modified=data.get("lastModified"),
            location=data.get("location"),
            resource_type=data.get("resourceType"),
            version=data.get("version"),
            attributes=list(data.get("attributes") or []),
        )


R = TypeVar("R", bound="Resource")


@dataclass
class Resource:
    """Base for all resources: server-assigned id, metadata and schemas."""
    id: Optional[str] = None
    external_id: Optional[str] = None
    schemas: List[str] = field(default_factory=list)
    meta: Optional[Meta] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    # Path segment of the resource endpoint, e.g. "Users"
    RESOURCE_PATH: ClassVar[str] = ""
    SCHEMA: ClassVar[Optional[str]] = None
    # Attribute names whose wire name is not the camelCase form
    WIRE_NAMES: ClassVar[Dict[str, str]] = {}

    def __post_init__(self):
        if not self.schemas and self.SCHEMA:
            self.schemas = [self.SCHEMA]

    @classmethod
    def _wire_name(cls, attr: str) -> str:
        return cls.WIRE_NAMES.get(attr, _camel(attr))

    @classmethod
    def _wire_fields(cls) -> Dict[str, str]:
        """Map of attribute name -> wire name for every serialized field."""
        return {
            f.name: cls._wire_name(f.name)
            for f in dataclasses.fields(cls)
            if f.name not in _NOT_SERIALIZED
        }

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-compatible dict, leaving out unset fields."""
        payload: Dict[str, Any] = dict(self.extra)
        for attr, wire in self._wire_fields().items():
            value = getattr(self, attr)
            if _is_empty(value):
                continue
            payload[wire] = _encode(value)
        if self.meta is not None:
            meta = self.meta.to_dict()
            if meta:
                payload["meta"] = meta
        return payload

    @classmethod
    def from_dict(cls: Type[R], data: Dict[str, Any]) -> R:
        """Deserialize a decoded JSON object.

        Raises:
            TypeError: If data is not a JSON object
        """
        if not isinstance(data, dict):
            raise TypeError(f"{cls.__name__} must be a JSON object, got {type(data).__name__}")
        remaining = dict(data)
        kwargs: Dict[str, Any] = {}
        for attr, wire in cls._wire_fields().items():
            if wire in remaining:
                kwargs[attr] = remaining.pop(wire)
        meta = remaining.pop("meta", None)
        if meta is not None:
            kwargs["meta"] = Meta.from_dict(meta)
        kwargs["extra"] = remaining
        return cls(**kwargs)


@dataclass
class User(Resource):
    user_name: Optional[str] = None
    name: Optional[Dict[str, Any]] = None
    display_name: Optional[str] = None
    nick_name: Optional[str] = None
    title: Optional[str] = None
    user_type: Optional[str] = None
    preferred_language: Optional[str] = None
    locale: Optional[str] = None
    timezone: Optional[str] = None
    active: Optional[bool] = None
    password: Optional[str] = None
    emails: List[Dict[str, Any]] = field(default_factory=list)
    phone_numbers: List[Dict[str, Any]] = field(default_factory=list)
    addresses: List[Dict[str, Any]] = field(default_factory=list)
    groups: List[Dict[str, Any]] = field(default_factory=list)
    roles: List[Dict[str, Any]] = field(default_factory=list)
    entitlements: List[Dict[str, Any]] = field(default_factory=list)

    RESOURCE_PATH: ClassVar[str] = "Users"
    SCHEMA: ClassVar[Optional[str]] = SCIM_USER_SCHEMA

    def primary_email(self) -> Optional[str]:
        """Return the primary email, or the first one when none is flagged."""
        primary = next((e.get("value") for e in self.emails if e.get("primary")), None)
        if primary is None and self.emails:
            primary = self.emails[0].get("value")
        return primary


@dataclass
class Group(Resource):
    display_name: Optional[str] = None
    members: List[Dict[str, Any]] = field(default_factory=list)

    RESOURCE_PATH: ClassVar[str] = "Groups"
    SCHEMA: ClassVar[Optional[str]] = SCIM_GROUP_SCHEMA


@dataclass
class OauthClient(Resource):
    """OAuth client registered with the auth server.

    A random secret and the default grants are filled in whenever they are
    not supplied, so both are always set on a constructed instance.
    """
    access_token_validity_seconds: Optional[int] = None
    refresh_token_validity_seconds: Optional[int] = None
    redirect_uri: Optional[str] = None
    client_secret: Optional[str] = None
    scope: Set[str] = field(default_factory=set)
    grants: Set[str] = field(default_factory=set)
    implicit: Optional[bool] = None
    validity_in_seconds: Optional[int] = None
    expiry: Optional[str] = None

    RESOURCE_PATH: ClassVar[str] = "Client"
    WIRE_NAMES: ClassVar[Dict[str, str]] = {"client_secret": "client_secret"}

    def __post_init__(self):
        super().__post_init__()
        if not self.client_secret:
            self.client_secret = str(uuid.uuid4())
        self.scope = _as_set(self.scope)
        self.grants = _as_set(self.grants) or set(DEFAULT_GRANTS)


@dataclass
class BasicUser:
    """Lightweight profile of the user an access token was issued for.

    Served by the ``me`` endpoint with snake_case keys, except ``userName``.
    """
    id: Optional[str] = None
    name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    user_name: Optional[str] = None
    email: Optional[str] = None
    link: Optional[str] = None
    gender: Optional[str] = None
    locale: Optional[str] = None
    updated_time: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BasicUser":
        if not isinstance(data, dict):
            raise TypeError(f"BasicUser must be a JSON object, got {type(data).__name__}")
        remaining = dict(data)
        kwargs: Dict[str, Any] = {}
        for f in dataclasses.fields(cls):
            if f.name == "extra":
                continue
            wire = "userName" if f.name == "user_name" else f.name
            if wire in remaining:
                kwargs[f.name] = remaining.pop(wire)
        return cls(extra=remaining, **kwargs)


T = TypeVar("T", bound=Resource)


@dataclass
class SearchResult(Generic[T]):
    """One page of search results."""
    resources: List[T] = field(default_factory=list)
    total_results: int = 0
    start_index: int = 1
    items_per_page: int = 0
    schemas: List[str] = field(default_factory=lambda: [SCIM_LIST_RESPONSE_SCHEMA])

    @classmethod
    def from_dict(cls, data: Dict[str, Any], resource_type: Type[T]) -> "SearchResult[T]":
        """Deserialize a SCIM list response whose elements are ``resource_type``.

        Raises:
            TypeError: If data or any element is not a JSON object
            ValueError: If a counter is not an integer
        """
        if not isinstance(data, dict):
            raise TypeError(f"search result must be a JSON object, got {type(data).__name__}")
        raw_resources = data.get("Resources") or []
        if not isinstance(raw_resources, list):
            raise TypeError("Resources must be a list")
        resources = [resource_type.from_dict(item) for item in raw_resources]
        return cls(
            resources=resources,
            total_results=int(data.get("totalResults", len(resources))),
            start_index=int(data.get("startIndex", 1)),
            items_per_page=int(data.get("itemsPerPage", len(resources))),
            schemas=list(data.get("schemas") or [SCIM_LIST_RESPONSE_SCHEMA]),
        )
