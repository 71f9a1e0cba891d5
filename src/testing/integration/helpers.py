"""
In-process fake of the remote server.

`FakeOdooBackend` keeps the records of a few models in memory and implements
the two procedures the SDK uses ('authenticate' and 'execute_kw').
`FakeOdooServer` serves it over real HTTP on the two XML-RPC paths, so the
integration tests exercise the whole transport stack.
"""

from dataclasses import dataclass, field
import fnmatch
import socket
import socketserver
import threading
import time
from typing import Any, Dict, List, Optional, Set, Tuple
from xmlrpc.client import Fault
from xmlrpc.server import (
    MultiPathXMLRPCServer,
    SimpleXMLRPCDispatcher,
    SimpleXMLRPCRequestHandler,
)

TEST_DATABASE = "testdb"
TEST_USERNAME = "admin"
TEST_PASSWORD = "secret"
TEST_UID = 2

COMMON_PATH = "/xmlrpc/2/common"
OBJECT_PATH = "/xmlrpc/2/object"

INJECTED_FAULT_CODE = 2
MISSING_RECORD_FAULT_CODE = 4

SEEDED_PARTNERS = 250


def _match_leaf(record: Dict[str, Any], leaf: List[Any]) -> bool:
    name, op, value = leaf
    current = record.get(name, False)
    if isinstance(current, list) and len(current) == 2:
        # many-to-one: compare on the id
        current = current[0]

    if op == "=":
        return current == value
    if op == "!=":
        return current != value
    if op == "in":
        return current in value
    if op == "not in":
        return current not in value
    if op == ">":
        return current > value
    if op == ">=":
        return current >= value
    if op == "<":
        return current < value
    if op == "<=":
        return current <= value
    if op == "ilike":
        return str(value).lower() in str(current).lower()
    if op == "=like":
        return fnmatch.fnmatchcase(str(current), str(value).replace("%", "*"))
    raise Fault(INJECTED_FAULT_CODE, f"Invalid domain operator '{op}'")


def match_domain(record: Dict[str, Any], domain: List[Any]) -> bool:
    """Implicit AND of [field, operator, value] leaves."""
    for leaf in domain:
        if not isinstance(leaf, (list, tuple)) or len(leaf) != 3:
            raise Fault(INJECTED_FAULT_CODE, f"Invalid domain term {leaf!r}")
        if not _match_leaf(record, list(leaf)):
            return False
    return True


@dataclass
class FakeOdooBackend:
    """
    Thread-safe in-memory models with failure injection.

    Attributes:
        fail_ids: A `search_read` whose id filter contains one of these ids raises a fault.
        read_delay: Seconds slept by every `search_read` (to observe cancellation).
        calls: (model, method) of every `execute_kw` call, in arrival order.
    """

    database: str = TEST_DATABASE
    username: str = TEST_USERNAME
    password: str = TEST_PASSWORD
    uid: int = TEST_UID
    fail_ids: Set[int] = field(default_factory=set)
    read_delay: float = 0.0
    calls: List[Tuple[str, str]] = field(default_factory=list)

    def __post_init__(self):
        self._lock = threading.Lock()
        self._records: Dict[str, Dict[int, Dict[str, Any]]] = {}
        self._next_id = 1

    # --- Seeding ---
    def add(self, model: str, values: Dict[str, Any]) -> int:
        with self._lock:
            return self._insert(model, values)

    def add_many(self, model: str, rows: List[Dict[str, Any]]) -> List[int]:
        return [self.add(model, values) for values in rows]

    def records(self, model: str) -> Dict[int, Dict[str, Any]]:
        with self._lock:
            return {k: dict(v) for k, v in self._records.get(model, {}).items()}

    def _insert(self, model: str, values: Dict[str, Any]) -> int:
        record_id = self._next_id
        self._next_id += 1
        self._records.setdefault(model, {})[record_id] = dict(values, id=record_id)
        return record_id

    # --- 'common' endpoint ---
    def authenticate(self, db, login, password, user_agent_env):
        if (db, login, password) == (self.database, self.username, self.password):
            return self.uid
        return False

    def version(self):
        return {"server_version": "17.0", "protocol_version": 1}

    # --- 'object' endpoint ---
    def execute_kw(self, db, uid, password, model, method, args, kwargs=None):
        if (db, uid, password) != (self.database, self.uid, self.password):
            raise Fault(3, "Access Denied")

        kwargs = kwargs or {}
        with self._lock:
            self.calls.append((model, method))

        handler = getattr(self, f"_do_{method}", None)
        if handler is None:
            raise Fault(
                INJECTED_FAULT_CODE,
                f"The method '{method}' does not exist on the model '{model}'",
            )
        return handler(model, *args, **kwargs)

    def _matching(self, model: str, domain: List[Any]) -> List[Dict[str, Any]]:
        with self._lock:
            table = self._records.get(model, {})
            return [
                dict(table[k]) for k in sorted(table) if match_domain(table[k], domain)
            ]

    def _do_search(self, model, domain):
        return [rec["id"] for rec in self._matching(model, domain)]

    def _do_search_read(self, model, domain, fields=None):
        if self.read_delay:
            time.sleep(self.read_delay)

        for leaf in domain:
            if leaf[0] == "id" and leaf[1] == "in" and self.fail_ids & set(leaf[2]):
                raise Fault(INJECTED_FAULT_CODE, "Injected failure")

        rows = self._matching(model, domain)
        if not fields:
            return rows
        return [
            {name: rec.get(name, False) for name in ["id", *fields]} for rec in rows
        ]

    def _do_create(self, model, values):
        with self._lock:
            return self._insert(model, values)

    def _do_write(self, model, ids, values):
        with self._lock:
            table = self._records.get(model, {})
            missing = [i for i in ids if i not in table]
            if missing:
                raise Fault(
                    MISSING_RECORD_FAULT_CODE,
                    f"Record does not exist or has been deleted: {missing}",
                )
            for i in ids:
                table[i].update(values)
        return True

    def _do_unlink(self, model, ids):
        with self._lock:
            table = self._records.get(model, {})
            missing = [i for i in ids if i not in table]
            if missing:
                raise Fault(
                    MISSING_RECORD_FAULT_CODE,
                    f"Record does not exist or has been deleted: {missing}",
                )
            for i in ids:
                del table[i]
        return True


class _RequestHandler(SimpleXMLRPCRequestHandler):
    rpc_paths = (COMMON_PATH, OBJECT_PATH)


class _ThreadedXMLRPCServer(socketserver.ThreadingMixIn, MultiPathXMLRPCServer):
    daemon_threads = True


class FakeOdooServer:
    """
    Serves a `FakeOdooBackend` on 127.0.0.1 (ephemeral port).

    Usage:
        ```python
        with FakeOdooServer(backend) as server:
            config = ClientConfig(..., url=server.url)
        ```
    """

    def __init__(self, backend: FakeOdooBackend):
        self.backend = backend
        self._server = _ThreadedXMLRPCServer(
            ("127.0.0.1", 0),
            requestHandler=_RequestHandler,
            logRequests=False,
            allow_none=True,
        )

        common = SimpleXMLRPCDispatcher(allow_none=True, encoding=None)
        common.register_function(backend.authenticate, "authenticate")
        common.register_function(backend.version, "version")
        self._server.add_dispatcher(COMMON_PATH, common)

        models = SimpleXMLRPCDispatcher(allow_none=True, encoding=None)
        models.register_function(backend.execute_kw, "execute_kw")
        self._server.add_dispatcher(OBJECT_PATH, models)

        self._thread: Optional[threading.Thread] = None

    @property
    def url(self) -> str:
        host, port = self._server.server_address[:2]
        return f"http://{host}:{port}"

    def start(self) -> "FakeOdooServer":
        self._thread = threading.Thread(
            target=self._server.serve_forever, name="fake-odoo-server", daemon=True
        )
        self._thread.start()
        return self

    def stop(self):
        self._server.shutdown()
        self._server.server_close()
        if self._thread is not None:
            self._thread.join(timeout=5)

    def __enter__(self) -> "FakeOdooServer":
        return self.start()

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()


def unused_local_url() -> str:
    """Returns the URL of a local port nobody is listening on."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        port = sock.getsockname()[1]
    return f"http://127.0.0.1:{port}"


def partner_rows(count: int) -> List[Dict[str, Any]]:
    return [
        {
            "name": f"Partner {i}",
            "email": f"partner{i}@example.com" if i % 3 else False,
            "is_company": i % 2 == 0,
        }
        for i in range(count)
    ]
