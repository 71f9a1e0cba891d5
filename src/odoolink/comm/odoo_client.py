"""
Odoo Client Entry Point.

This module provides the `OdooClient`, the primary interface for users to
interact with the remote server. It owns the session identity and the two
XML-RPC endpoints, funnels every model operation through a single `execute`
primitive and serves as a factory for batched fetchers.
"""

# --- Python Standard Library Imports ---
from pathlib import Path
from typing import Any, Dict, List, Optional, Type, TypeVar, Union
import logging as log
import xmlrpc.client

# --- Local/Project-Specific Imports ---
from ..enum import RpcEndpoint, RpcMethod, RpcProcedure
from ..errors import AccessDenied, NotAuthenticatedError, ObjectNotFound
from ..handlers.batch_fetcher import BatchFetcher
from ..handlers.config import FetchConfig
from ..helpers import id_domain
from ..models.base_model import OdooRecord
from ..models.mapper import map_record, map_records
from .config import ClientConfig
from .connection import DEFAULT_TIMEOUT_SEC, _ConnectionStatus, _get_connection
from .execute import _classify_fault, _execute

T_OdooRecord = TypeVar("T_OdooRecord", bound=OdooRecord)

Domain = List[Any]
"""A domain filter, e.g. [["is_company", "=", True]]. Passed through untouched."""


class OdooClient:
    """
    The main client for the remote server.

    This class manages:
    1.  **Network Resources:** The authentication ('common') endpoint and the
        models ('object') endpoint.
    2.  **State:** The session identity (user id), established once by
        `authenticate()` and read-only afterwards.

    Usage:
        This class is designed to be used as a Context Manager:
        ```python
        with OdooClient.connect(ClientConfig.from_env(".env")) as client:
            ids = client.search("res.partner", [["is_company", "=", True]])
        ```
    """

    # --- Class-level attributes ---
    _status: _ConnectionStatus = _ConnectionStatus.Closed
    """Tracks the current connection status (Open/Closed)."""

    _uid: Optional[int] = None
    """The authenticated user id. None until `authenticate()` succeeds."""

    def __init__(self, config: ClientConfig, timeout: Optional[float] = None):
        """
        Creates an unauthenticated session. No network I/O happens here.

        Most users want `OdooClient.connect()`, which also authenticates.

        Args:
            config (ClientConfig): The session credentials.
            timeout (Optional[float]): Socket timeout in seconds for every call.

        Raises:
            ConfigError: If `config` is not valid.
            TransportError: If the endpoints cannot be created.
        """
        self._config = config.validate()
        self._common = _get_connection(
            config.base_url, RpcEndpoint.COMMON.value, timeout
        )
        self._models = _get_connection(
            config.base_url, RpcEndpoint.OBJECT.value, timeout
        )
        self._uid = None
        self._status = _ConnectionStatus.Open

    @classmethod
    def connect(
        cls,
        config: ClientConfig,
        timeout: Optional[float] = DEFAULT_TIMEOUT_SEC,
    ) -> "OdooClient":
        """
        Factory method creating an authenticated session.

        Args:
            config (ClientConfig): The session credentials.
            timeout (Optional[float]): Socket timeout in seconds (default = 30s).

        Returns:
            OdooClient: An authenticated client instance.

        Raises:
            ConfigError: If `config` is not valid.
            AccessDenied: If the server rejects the credentials.
            TransportError: If the server cannot be reached.
        """
        client = cls(config, timeout=timeout)
        try:
            client.authenticate()
        except Exception:
            client.close()
            raise
        return client

    @classmethod
    def from_env(
        cls,
        env_path: Optional[Union[str, Path]] = ".env",
        prefix: str = "",
        timeout: Optional[float] = DEFAULT_TIMEOUT_SEC,
    ) -> "OdooClient":
        """
        Factory method reading the credentials from a `.env` file and the
        environment (see `ClientConfig.from_env`), then authenticating.
        """
        return cls.connect(ClientConfig.from_env(env_path, prefix=prefix), timeout)

    # --- Context Manager Protocol ---

    def __enter__(self) -> "OdooClient":
        """Context manager entry point."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        """
        Context manager exit point. Ensures resources are closed.

        Returns:
            bool: False, to propagate any exceptions raised within the `with` block.
        """
        try:
            self.close()
        except Exception as e:
            log.exception(
                f"Error releasing resources allocated from OdooClient.\nInner err: {e}"
            )
        return False

    # --- Session ---

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def uid(self) -> Optional[int]:
        """The authenticated user id, or None before authentication."""
        return self._uid

    @property
    def is_authenticated(self) -> bool:
        return self._uid is not None and self._status == _ConnectionStatus.Open

    def authenticate(self) -> int:
        """
        Authenticates against the 'common' endpoint and stores the user id.

        Returns:
            int: The user id.

        Raises:
            RuntimeError: If the session is already authenticated or closed.
            AccessDenied: On fault code 3 or if the server rejects the credentials.
            RpcError: On any other remote fault.
            TransportError: On connection or decoding failures.
        """
        if self._status == _ConnectionStatus.Closed:
            raise RuntimeError("OdooClient has been closed.")
        if self._uid is not None:
            raise RuntimeError(
                "OdooClient is already authenticated; create a new client to re-authenticate."
            )

        cfg = self._config
        log.debug(f"Authenticating '{cfg.username}' on database '{cfg.database}'")
        try:
            uid = self._common.call(
                RpcProcedure.AUTHENTICATE.value,
                cfg.database,
                cfg.username,
                cfg.password,
                {},
            )
        except xmlrpc.client.Fault as fault:
            raise _classify_fault(fault) from fault

        # The server answers False when the credentials are wrong
        if isinstance(uid, bool) or not isinstance(uid, int) or uid <= 0:
            raise AccessDenied(
                f"Authentication failed for user '{cfg.username}' on database '{cfg.database}'"
            )

        self._uid = uid
        log.info(f"Authenticated '{cfg.username}' on '{cfg.base_url}' (uid: {uid})")
        return uid

    def _check_authenticated(self) -> int:
        """Ensures the session has an identity before any model call."""
        if self._status == _ConnectionStatus.Closed:
            raise NotAuthenticatedError("OdooClient has been closed.")
        if self._uid is None:
            raise NotAuthenticatedError(
                "OdooClient is not authenticated: call 'authenticate()' first."
            )
        return self._uid

    def execute(
        self,
        model: str,
        method: str,
        args: List[Any],
        kwargs: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Generic entry point: calls `method` of `model` on the server.

        Args:
            model (str): Remote model name (e.g. 'res.partner').
            method (str): Remote method name (e.g. 'search').
            args (List[Any]): Positional arguments.
            kwargs (Optional[Dict[str, Any]]): Named arguments.

        Returns:
            Any: The raw result.

        Raises:
            NotAuthenticatedError: If the session has no identity.
            AccessDenied: On fault code 3.
            RpcError: On any other remote fault.
            TransportError: On connection or decoding failures.
        """
        uid = self._check_authenticated()
        return _execute(
            endpoint=self._models,
            database=self._config.database,
            uid=uid,
            password=self._config.password,
            model=model,
            method=method,
            args=args,
            kwargs=kwargs,
        )

    # --- Typed Operations ---

    def search(self, model: str, domain: Optional[Domain] = None) -> List[int]:
        """
        Returns the ids of the records matching `domain` (all records if empty).
        """
        ids = self.execute(model, RpcMethod.SEARCH, [domain or []])
        return [int(i) for i in ids]

    def search_read(
        self,
        model: str,
        domain: Optional[Domain] = None,
        fields: Optional[List[str]] = None,
    ) -> List[Dict[str, Any]]:
        """
        Returns the records matching `domain`, restricted to `fields`.
        """
        return self.execute(
            model,
            RpcMethod.SEARCH_READ,
            [domain or []],
            {"fields": list(fields or [])},
        )

    def create(self, model: str, values: Dict[str, Any]) -> int:
        """
        Creates a record and returns its id.
        """
        return int(self.execute(model, RpcMethod.CREATE, [values]))

    def update(self, model: str, ids: List[int], values: Dict[str, Any]) -> bool:
        """
        Writes `values` on the records `ids` ('write').
        """
        return bool(self.execute(model, RpcMethod.WRITE, [list(ids), values]))

    def delete(self, model: str, ids: List[int]) -> bool:
        """
        Deletes the records `ids` ('unlink').
        """
        return bool(self.execute(model, RpcMethod.UNLINK, [list(ids)]))

    # --- Typed Record Helpers ---

    def read_records(
        self, record_type: Type[T_OdooRecord], domain: Optional[Domain] = None
    ) -> List[T_OdooRecord]:
        """
        Reads the records matching `domain` as instances of `record_type`.

        Raises:
            MappingError: If a record cannot be mapped.
        """
        records = self.search_read(
            record_type.odoo_model(), domain, record_type.field_names()
        )
        return map_records(records, record_type)

    def get(self, record_type: Type[T_OdooRecord], record_id: int) -> T_OdooRecord:
        """
        Reads a single record by id.

        Raises:
            ObjectNotFound: If no record has this id.
            MappingError: If the record cannot be mapped.
        """
        model = record_type.odoo_model()
        records = self.search_read(
            model, id_domain([record_id]), record_type.field_names()
        )
        if not records:
            raise ObjectNotFound(model=model, record_id=record_id)
        return map_record(records[0], record_type)

    def batch_fetch(
        self,
        record_type: Type[T_OdooRecord],
        domain: Optional[Domain] = None,
        config: Optional[FetchConfig] = None,
        fields: Optional[List[str]] = None,
    ) -> BatchFetcher[T_OdooRecord]:
        """
        Creates a `BatchFetcher` reading `record_type` records in concurrent batches.

        The fetch starts when the fetcher is iterated (or `start()` is called).

        Args:
            record_type: The typed record class (defines the remote model).
            domain: Filter selecting the records (all records if empty).
            config: Batch size, cap and worker settings.
            fields: Projection override (defaults to the record fields).

        Raises:
            NotAuthenticatedError: If the session has no identity.
        """
        self._check_authenticated()
        return BatchFetcher(
            client=self,
            record_type=record_type,
            domain=domain,
            fields=fields,
            config=config,
        )

    def release_idle_connections(self) -> int:
        """
        Closes the connections opened by threads that have ended, such as the
        workers of a finished `BatchFetcher`.

        Returns:
            int: Number of connections released.
        """
        return self._common.release_idle() + self._models.release_idle()

    def close(self):
        """
        Closes both endpoints. The client cannot be used afterwards.
        """
        if self._status == _ConnectionStatus.Open:
            self._common.close()
            self._models.close()

        self._status = _ConnectionStatus.Closed
