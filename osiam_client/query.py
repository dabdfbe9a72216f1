"""Search queries for SCIM resource endpoints.

Usage:
    query = (QueryBuilder()
             .filter('userName eq "alice"')
             .attributes("userName", "emails")
             .descending("meta.created")
             .count(10)
             .build())
"""
from __future__ import annotations
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Optional

DEFAULT_START_INDEX = 1
DEFAULT_COUNT: Optional[int] = None
MAX_COUNT = 2 ** 31 - 1


class SortOrder(str, Enum):
    ASCENDING = "ascending"
    DESCENDING = "descending"


@dataclass(frozen=True)
class Query:
    """Read-only search parameters.

    ``start_index`` is 1-based. A ``count`` of ``None`` lets the server
    choose the page size.
    """
    attributes: Optional[str] = None
    filter: Optional[str] = None
    sort_by: Optional[str] = None
    sort_order: Optional[SortOrder] = None
    start_index: int = DEFAULT_START_INDEX
    count: Optional[int] = DEFAULT_COUNT

    def to_params(self) -> Dict[str, str]:
        """Query-string parameters for this query.

        Unset values are omitted. ``startIndex`` and ``count`` are omitted when
        they equal the defaults so that the server applies its own.
        """
        params: Dict[str, str] = {}
        if self.attributes:
            params["attributes"] = self.attributes
        if self.filter:
            params["filter"] = self.filter
        if self.sort_by:
            params["sortBy"] = self.sort_by
        if self.sort_order is not None:
            params["sortOrder"] = SortOrder(self.sort_order).value
        if self.start_index != DEFAULT_START_INDEX:
            params["startIndex"] = str(self.start_index)
        if self.count != DEFAULT_COUNT:
            params["count"] = str(self.count)
        return params


class QueryBuilder:
    """Fluent builder for :class:`Query`."""

    def __init__(self, original: Optional[Query] = None):
        self._query = original if original is not None else Query()

    def filter(self, expression: str) -> "QueryBuilder":
        self._query = replace(self._query, filter=expression)
        return self

    def attributes(self, *names: str) -> "QueryBuilder":
        """Restrict the returned attributes (joined with commas)."""
        joined = ",".join(name.strip() for name in names if name and name.strip())
        self._query = replace(self._query, attributes=joined or None)
        return self

    def ascending(self, attribute: str) -> "QueryBuilder":
        self._query = replace(self._query, sort_by=attribute, sort_order=SortOrder.ASCENDING)
        return self

    def descending(self, attribute: str) -> "QueryBuilder":
        self._query = replace(self._query, sort_by=attribute, sort_order=SortOrder.DESCENDING)
        return self

    def start_index(self, start_index: int) -> "QueryBuilder":
        """Set the 1-based index of the first result.

        Raises:
            ValueError: If start_index is lower than 1
        """
        if start_index < 1:
            raise ValueError("startIndex must be at least 1")
        self._query = replace(self._query, start_index=start_index)
        return self

    def count(self, count: int) -> "QueryBuilder":
        """Set the page size.

        Raises:
            ValueError: If count is negative
        """
        if count < 0:
            raise ValueError("count must not be negative")
        self._query = replace(self._query, count=count)
        return self

    def build(self) -> Query:
        return self._query
