"""Connector settings loaded from environment variables and Docker secrets."""
from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from . import transport
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

SECRETS_DIR = "/run/secrets"
CLIENT_SECRET_FILE = "osiam_client_secret"


def _read_secret(secret_name: str, env_var: str) -> Optional[str]:
    """Return a mounted Docker secret, else the value of env_var."""
    secret_file = Path(SECRETS_DIR) / secret_name
    if secret_file.is_file():
        try:
            value = secret_file.read_text().strip()
        except OSError as exc:
            logger.warning("Cannot read secret %s: %s", secret_file, exc)
            value = ""
        if value:
            logger.info("Using %s from %s", secret_name, SECRETS_DIR)
            return value
    return os.environ.get(env_var) or None


def _get_int(var_name: str, default: int) -> int:
    raw = os.environ.get(var_name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigurationError(f"Environment variable {var_name} must be an integer, got {raw!r}") from None
    if value <= 0:
        raise ConfigurationError(f"Environment variable {var_name} must be positive, got {value}")
    return value


@dataclass
class ConnectorConfig:
    """Connector configuration container.

    Endpoints are not validated here; they are resolved on first use.
    """
    # Endpoints
    endpoint: Optional[str] = None
    auth_server_endpoint: Optional[str] = None
    resource_server_endpoint: Optional[str] = None

    # OAuth client
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    client_redirect_uri: Optional[str] = None

    # Transport tuning (process-wide, see apply_transport_settings)
    connect_timeout: int = transport.DEFAULT_CONNECT_TIMEOUT
    read_timeout: int = transport.DEFAULT_READ_TIMEOUT
    max_connections: int = transport.DEFAULT_MAX_CONNECTIONS
    max_connections_per_route: int = transport.DEFAULT_MAX_CONNECTIONS_PER_ROUTE


def load_settings() -> ConnectorConfig:
    """Load connector settings from environment and /run/secrets."""
    config = ConnectorConfig(
        endpoint=os.environ.get("OSIAM_ENDPOINT") or None,
        auth_server_endpoint=os.environ.get("OSIAM_AUTH_SERVER_ENDPOINT") or None,
        resource_server_endpoint=os.environ.get("OSIAM_RESOURCE_SERVER_ENDPOINT") or None,
        client_id=os.environ.get("OSIAM_CLIENT_ID") or None,
        client_secret=_read_secret(CLIENT_SECRET_FILE, "OSIAM_CLIENT_SECRET"),
        client_redirect_uri=os.environ.get("OSIAM_CLIENT_REDIRECT_URI") or None,
        connect_timeout=_get_int("OSIAM_CONNECT_TIMEOUT", transport.DEFAULT_CONNECT_TIMEOUT),
        read_timeout=_get_int("OSIAM_READ_TIMEOUT", transport.DEFAULT_READ_TIMEOUT),
        max_connections=_get_int("OSIAM_MAX_CONNECTIONS", transport.DEFAULT_MAX_CONNECTIONS),
        max_connections_per_route=_get_int(
            "OSIAM_MAX_CONNECTIONS_PER_ROUTE", transport.DEFAULT_MAX_CONNECTIONS_PER_ROUTE
        ),
    )
    logger.info(
        "Loaded OSIAM settings: endpoint=%s, auth=%s, resource=%s, client_id=%s, secret=%s",
        config.endpoint,
        config.auth_server_endpoint,
        config.resource_server_endpoint,
        config.client_id,
        "***" if config.client_secret else "EMPTY",
    )
    return config


def apply_transport_settings(config: ConnectorConfig) -> None:
    """Push the tuning values of config into the shared transport.

    This changes timeouts and pool sizes for every connector in the process.
    """
    shared = transport.get_transport()
    if shared.connect_timeout != config.connect_timeout:
        shared.set_connect_timeout(config.connect_timeout)
    if shared.read_timeout != config.read_timeout:
        shared.set_read_timeout(config.read_timeout)
    if shared.max_connections != config.max_connections:
        shared.set_max_connections(config.max_connections)
    if shared.max_connections_per_route != config.max_connections_per_route:
        shared.set_max_connections_per_route(config.max_connections_per_route)
