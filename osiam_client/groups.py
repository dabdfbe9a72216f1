"""OSIAM group operations."""
from __future__ import annotations
from typing import Optional

from .error_mapper import ResponseErrorMapper
from .resource_client import ResourceClient
from .resources import Group
from .transport import HttpTransport


class GroupService(ResourceClient[Group]):
    """Service for managing OSIAM groups.

    Members are sent as SCIM member references (``{"value": <id>}``).
    """

    def __init__(
        self,
        endpoint: str,
        transport: Optional[HttpTransport] = None,
        error_mapper: Optional[ResponseErrorMapper] = None,
    ):
        super().__init__(endpoint, Group, transport=transport, error_mapper=error_mapper)
