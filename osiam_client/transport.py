"""Shared, pooled HTTP transport for all OSIAM connectors.

One ``requests.Session`` is created per process on first use and reused by
every connector and service. Timeouts and pool sizes are global settings:
changing them through the module-level setters affects every connector in
the process, including requests already queued on the shared pool.

Usage:
    from osiam_client import transport

    transport.set_read_timeout(10000)          # milliseconds, process-wide
    resp = transport.get_transport().request("GET", url, headers=headers)
"""
from __future__ import annotations
import logging
import threading
from collections import OrderedDict
from typing import Optional

import requests
from requests.adapters import HTTPAdapter

logger = logging.getLogger(__name__)

DEFAULT_CONNECT_TIMEOUT = 2500
DEFAULT_READ_TIMEOUT = 5000
DEFAULT_MAX_CONNECTIONS = 40
DEFAULT_MAX_CONNECTIONS_PER_ROUTE = 20


class HttpTransport:
    """Pooled HTTP client wrapping a ``requests.Session``.

    ``max_connections`` bounds the number of per-host pools the adapter keeps
    (``pool_connections``); ``max_connections_per_route`` bounds connections
    kept alive per host (``pool_maxsize``).
    """

    def __init__(
        self,
        connect_timeout: int = DEFAULT_CONNECT_TIMEOUT,
        read_timeout: int = DEFAULT_READ_TIMEOUT,
        max_connections: int = DEFAULT_MAX_CONNECTIONS,
        max_connections_per_route: int = DEFAULT_MAX_CONNECTIONS_PER_ROUTE,
    ):
        """Initialize the transport.

        Args:
            connect_timeout: Connect timeout in milliseconds
            read_timeout: Read timeout in milliseconds
            max_connections: Number of host pools kept by the adapter
            max_connections_per_route: Connections kept per host
        """
        self.connect_timeout = connect_timeout
        self.read_timeout = read_timeout
        self.max_connections = max_connections
        self.max_connections_per_route = max_connections_per_route
        self._lock = threading.Lock()
        self.session = requests.Session()
        self._mount_adapter()

    def _mount_adapter(self) -> None:
        """Install a fresh adapter for both schemes and release the old one.

        The adapter map is replaced in one assignment so that concurrent
        ``Session.get_adapter`` calls never iterate a map under mutation.
        """
        adapter = HTTPAdapter(
            pool_connections=self.max_connections,
            pool_maxsize=self.max_connections_per_route,
        )
        previous = set(self.session.adapters.values())
        # Longest prefix first, as requests keeps it
        self.session.adapters = OrderedDict([("https://", adapter), ("http://", adapter)])
        for old in previous:
            old.close()

    @property
    def timeout(self) -> tuple[float, float]:
        """(connect, read) timeout in seconds, as expected by requests."""
        return self.connect_timeout / 1000.0, self.read_timeout / 1000.0

    def request(self, method: str, url: str, **kwargs) -> requests.Response:
        """Send a request through the shared session with the global timeouts.

        Args:
            method: HTTP method
            url: Absolute URL
            **kwargs: Additional arguments for ``requests.Session.request``

        Returns:
            Response object

        Raises:
            requests.RequestException: On transport-level failures
        """
        kwargs.setdefault("timeout", self.timeout)
        resp = self.session.request(method, url, **kwargs)
        logger.debug("%s %s -> %s", method, url, resp.status_code)
        return resp

    def set_connect_timeout(self, connect_timeout: int) -> None:
        self.connect_timeout = connect_timeout
        logger.info("Connect timeout set to %d ms", connect_timeout)

    def set_read_timeout(self, read_timeout: int) -> None:
        self.read_timeout = read_timeout
        logger.info("Read timeout set to %d ms", read_timeout)

    def set_max_connections(self, max_connections: int) -> None:
        with self._lock:
            self.max_connections = max_connections
            self._mount_adapter()
        logger.info("Max connections set to %d", max_connections)

    def set_max_connections_per_route(self, max_connections_per_route: int) -> None:
        with self._lock:
            self.max_connections_per_route = max_connections_per_route
            self._mount_adapter()
        logger.info("Max connections per route set to %d", max_connections_per_route)

    def close(self) -> None:
        self.session.close()


# ─────────────────────────────────────────────────────────────────────────────
# Process-wide instance
# ─────────────────────────────────────────────────────────────────────────────
_transport: Optional[HttpTransport] = None
_transport_lock = threading.Lock()


def get_transport() -> HttpTransport:
    """Return the process-wide transport, creating it on first use."""
    global _transport
    if _transport is None:
        with _transport_lock:
            if _transport is None:
                _transport = HttpTransport()
                logger.info(
                    "Created shared HTTP transport (connect=%d ms, read=%d ms, pools=%d, per_route=%d)",
                    _transport.connect_timeout,
                    _transport.read_timeout,
                    _transport.max_connections,
                    _transport.max_connections_per_route,
                )
    return _transport


def set_transport(transport: Optional[HttpTransport]) -> None:
    """Replace the process-wide transport (``None`` resets to lazy creation)."""
    global _transport
    with _transport_lock:
        _transport = transport


def set_connect_timeout(connect_timeout: int) -> None:
    """Set the connect timeout (ms) for all connectors in this process."""
    get_transport().set_connect_timeout(connect_timeout)


def set_read_timeout(read_timeout: int) -> None:
    """Set the read timeout (ms) for all connectors in this process."""
    get_transport().set_read_timeout(read_timeout)


def set_max_connections(max_connections: int) -> None:
    """Set the number of pooled hosts for all connectors in this process."""
    get_transport().set_max_connections(max_connections)


def set_max_connections_per_route(max_connections_per_route: int) -> None:
    """Set the per-host pool size for all connectors in this process."""
    get_transport().set_max_connections_per_route(max_connections_per_route)
