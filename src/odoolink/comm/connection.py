"""
Connection Management Module.

This module handles the creation of the XML-RPC endpoints used by the client.
An `xmlrpc.client.ServerProxy` keeps a persistent HTTP connection and must not
be shared between threads: `_Endpoint` therefore hands each thread its own
proxy, which makes a single endpoint safe to use from the fetch workers.
"""

from enum import Enum
import http.client
import logging as log
import threading
from typing import Any, Dict, Optional
from xml.parsers.expat import ExpatError
import xmlrpc.client

from ..errors import TransportError, _make_exception
from ..helpers import pack_endpoint_url

DEFAULT_TIMEOUT_SEC = 30.0


class _ConnectionStatus(Enum):
    """Enumeration representing the lifecycle state of a connection object."""

    Open = "open"
    Closed = "closed"


class _TimeoutTransport(xmlrpc.client.Transport):
    """Plain HTTP transport applying a socket timeout to its connection."""

    def __init__(self, timeout: Optional[float]):
        super().__init__()
        self._timeout = timeout

    def make_connection(self, host):
        conn = super().make_connection(host)
        conn.timeout = self._timeout
        return conn


class _TimeoutSafeTransport(xmlrpc.client.SafeTransport):
    """HTTPS transport applying a socket timeout to its connection."""

    def __init__(self, timeout: Optional[float]):
        super().__init__()
        self._timeout = timeout

    def make_connection(self, host):
        conn = super().make_connection(host)
        conn.timeout = self._timeout
        return conn


class _Endpoint:
    """
    A remote XML-RPC endpoint (e.g. '<base>/xmlrpc/2/object').

    Holds one `ServerProxy` per calling thread, created lazily. Remote faults
    (`xmlrpc.client.Fault`) are re-raised untouched so that the caller can
    classify them; every other failure becomes a `TransportError`.

    Proxies are tracked by their owner thread: `release_idle()` closes the ones
    whose thread has ended (e.g. the workers of a finished fetch).
    """

    def __init__(self, url: str, timeout: Optional[float]):
        self._url = url
        self._timeout = timeout
        self._local = threading.local()
        self._proxies: Dict[threading.Thread, xmlrpc.client.ServerProxy] = {}
        self._proxies_lock = threading.Lock()
        self._status = _ConnectionStatus.Open

    @property
    def url(self) -> str:
        return self._url

    @property
    def open_proxies(self) -> int:
        """Number of proxies currently held (one per thread that used the endpoint)."""
        with self._proxies_lock:
            return len(self._proxies)

    def _new_proxy(self) -> xmlrpc.client.ServerProxy:
        if self._url.startswith("https://"):
            transport = _TimeoutSafeTransport(self._timeout)
        else:
            transport = _TimeoutTransport(self._timeout)
        return xmlrpc.client.ServerProxy(
            self._url, transport=transport, allow_none=True
        )

    def _proxy(self) -> xmlrpc.client.ServerProxy:
        if self._status == _ConnectionStatus.Closed:
            raise TransportError(f"Endpoint '{self._url}' has been closed.")

        proxy = getattr(self._local, "proxy", None)
        if proxy is None:
            proxy = self._new_proxy()
            self._local.proxy = proxy
            with self._proxies_lock:
                self._proxies[threading.current_thread()] = proxy
            log.debug(
                f"Opened proxy for '{self._url}' in thread '{threading.current_thread().name}'"
            )
        return proxy

    def _close_proxy(self, proxy: xmlrpc.client.ServerProxy, owner: threading.Thread):
        try:
            proxy("close")()
        except Exception as e:
            log.warning(
                f"Error closing proxy of thread '{owner.name}' for '{self._url}': {e}"
            )

    def call(self, procedure: str, *params: Any) -> Any:
        """
        Invokes a remote procedure on this endpoint.

        Raises:
            xmlrpc.client.Fault: The server answered with a fault.
            TransportError: For connection, HTTP or decoding failures.
        """
        try:
            return getattr(self._proxy(), procedure)(*params)
        except xmlrpc.client.Fault:
            raise
        except xmlrpc.client.ProtocolError as e:
            raise TransportError(
                f"HTTP error {e.errcode} calling '{procedure}' on '{self._url}': {e.errmsg}"
            ) from e
        except (
            OSError,
            http.client.HTTPException,
            xmlrpc.client.ResponseError,
            ExpatError,
        ) as e:
            raise _make_exception(
                f"Transport failure calling '{procedure}' on '{self._url}'.", e
            ) from e

    def release_idle(self) -> int:
        """
        Closes the proxies owned by threads that are no longer alive.

        Returns:
            int: Number of proxies released.
        """
        with self._proxies_lock:
            idle = [t for t in self._proxies if not t.is_alive()]
            released = [(t, self._proxies.pop(t)) for t in idle]
        for owner, proxy in released:
            self._close_proxy(proxy, owner)
        if released:
            log.debug(f"Released {len(released)} idle proxies of '{self._url}'")
        return len(released)

    def close(self):
        """
        Closes the transports of every proxy opened so far.
        """
        with self._proxies_lock:
            released = list(self._proxies.items())
            self._proxies.clear()
            self._status = _ConnectionStatus.Closed
        for owner, proxy in released:
            self._close_proxy(proxy, owner)


def _get_connection(
    base_url: str, path: str, timeout: Optional[float] = DEFAULT_TIMEOUT_SEC
) -> _Endpoint:
    """
    Factory function creating the endpoint '<base_url>/<path>'.

    No network I/O happens here: the first call opens the connection.

    Raises:
        TransportError: If the URL cannot be used by the XML-RPC transport.
    """
    url = pack_endpoint_url(base_url, path)
    if not url.startswith(("http://", "https://")):
        raise TransportError(f"Unsupported XML-RPC protocol for endpoint '{url}'")
    log.debug(f"Creating endpoint '{url}' (timeout: {timeout})")
    return _Endpoint(url, timeout)
