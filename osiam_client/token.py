"""Access token value object and well-known scopes."""
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, FrozenSet, Iterable, Optional, Union


class Scope:
    """Well-known OSIAM scopes. Any string is accepted where a scope is expected."""
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    ALL = "GET POST PUT PATCH DELETE"
    ADMIN = "ADMIN"
    ME = "ME"


def _parse_scopes(raw: Union[str, Iterable[str], None]) -> FrozenSet[str]:
    if not raw:
        return frozenset()
    if isinstance(raw, str):
        return frozenset(raw.split())
    scopes: set[str] = set()
    for item in raw:
        scopes.update(str(item).split())
    return frozenset(scopes)


def _parse_expiry(data: Dict[str, Any]) -> Optional[datetime]:
    expires_at = data.get("expires_at")
    if isinstance(expires_at, (int, float)):
        # Milliseconds since epoch
        return datetime.fromtimestamp(expires_at / 1000.0, tz=timezone.utc)
    if isinstance(expires_at, str) and expires_at:
        try:
            parsed = datetime.fromisoformat(expires_at.replace("Z", "+00:00"))
        except ValueError:
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    expires_in = data.get("expires_in")
    if isinstance(expires_in, (int, float)):
        return datetime.now(timezone.utc) + timedelta(seconds=expires_in)
    return None


@dataclass(frozen=True)
class AccessToken:
    """Bearer token issued by the OSIAM auth server.

    Attributes:
        token: Opaque bearer token value
        expires_at: Expiry timestamp (UTC), if known
        scopes: Granted scopes
        refresh_token: Refresh token, if one was issued
        client_id: Client the token was issued to
        user_name: Resource owner, for user-bound tokens
        user_id: Resource owner id, for user-bound tokens
        expired: Expired flag as reported by token validation
    """
    token: str
    expires_at: Optional[datetime] = None
    scopes: FrozenSet[str] = field(default_factory=frozenset)
    refresh_token: Optional[str] = None
    client_id: Optional[str] = None
    user_name: Optional[str] = None
    user_id: Optional[str] = None
    expired: bool = False

    def __post_init__(self):
        if not isinstance(self.scopes, frozenset):
            object.__setattr__(self, "scopes", _parse_scopes(self.scopes))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AccessToken":
        """Build a token from a token-endpoint or token-validation response.

        Args:
            data: Decoded JSON response

        Returns:
            AccessToken instance

        Raises:
            KeyError: If the response carries no token value
        """
        token = data.get("access_token") or data.get("token")
        if not token:
            raise KeyError("access_token")
        return cls(
            token=token,
            expires_at=_parse_expiry(data),
            scopes=_parse_scopes(data.get("scope") or data.get("scopes")),
            refresh_token=data.get("refresh_token"),
            client_id=data.get("client_id"),
            user_name=data.get("user_name"),
            user_id=data.get("user_id"),
            expired=bool(data.get("expired", False)),
        )

    def is_expired(self) -> bool:
        if self.expired:
            return True
        if self.expires_at is None:
            return False
        return datetime.now(timezone.utc) >= self.expires_at

    def scope_string(self) -> str:
        """Scopes as a space-separated, sorted string."""
        return " ".join(sorted(self.scopes))

    def __repr__(self) -> str:
        # Never expose the bearer value
        return f"AccessToken(expires_at={self.expires_at!r}, scopes={self.scope_string()!r}, client_id={self.client_id!r})"
