"""
Batched Fetch Module.

This module provides the `BatchFetcher`, which reads a potentially large set
of records by id in bounded-size batches fetched concurrently.

**Pipeline:**
1.  `search` the ids matching the domain, optionally capped to `max_records`.
2.  Partition the ids into consecutive batches of at most `batch_size` ids.
3.  Run one worker per batch on a `ThreadPoolExecutor`: each worker calls
    `search_read` on `id in <batch>`, maps the records and writes them into a
    shared `ResultStream`.
4.  A coordinator thread waits for every worker, then closes the stream.
5.  The consumer drains the stream while the workers are still running.

A failing batch (or record) is logged, recorded in `BatchFetcher.failures`
and skipped: it never aborts the sibling workers.
"""

from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
import logging as log
from threading import Event, Lock, Thread
from typing import (
    TYPE_CHECKING,
    Any,
    Generic,
    Iterator,
    List,
    Optional,
    Sequence,
    Type,
    TypeVar,
)

from ..errors import MappingError
from ..helpers import id_domain
from ..models.base_model import OdooRecord
from ..models.mapper import map_record
from .config import FetchConfig
from .result_stream import ResultStream

if TYPE_CHECKING:
    from ..comm.odoo_client import OdooClient

T_OdooRecord = TypeVar("T_OdooRecord", bound=OdooRecord)


def partition_ids(ids: Sequence[int], batch_size: int) -> List[List[int]]:
    """
    Splits `ids` into consecutive batches of at most `batch_size` ids.

    Concatenating the batches in order gives back `ids`; only the last batch
    may be shorter, and an empty input gives no batch at all.

    Raises:
        ValueError: If `batch_size` is less than 1.
    """
    if batch_size < 1:
        raise ValueError("'batch_size' must be at least 1")
    return [list(ids[i : i + batch_size]) for i in range(0, len(ids), batch_size)]


def _record_ids(records: Sequence[Any]) -> List[int]:
    """Ids of the remote records that carry an integer 'id'."""
    ids = (r.get("id") if isinstance(r, dict) else None for r in records)
    return [i for i in ids if isinstance(i, int) and not isinstance(i, bool)]


@dataclass
class FetchFailure:
    """A batch (or a single record of it) skipped by the pipeline."""

    batch_index: int
    record_ids: List[int]
    error: Exception = field(repr=True)


class BatchFetcher(Generic[T_OdooRecord]):
    """
    Fetches the records of one model in concurrent batches.

    Usage:
        ```python
        with client.batch_fetch(Partner, config=FetchConfig(batch_size=100)) as fetcher:
            for partner in fetcher:
                ...
        ```
    Leaving the `with` block (even early) cancels the pending workers and waits
    for the coordinator to close the stream.
    """

    def __init__(
        self,
        client: "OdooClient",
        record_type: Type[T_OdooRecord],
        domain: Optional[List[Any]] = None,
        fields: Optional[List[str]] = None,
        config: Optional[FetchConfig] = None,
    ):
        """
        Internal constructor. Use `OdooClient.batch_fetch()` instead.
        """
        self._client = client
        self._record_type = record_type
        self._model = record_type.odoo_model()
        self._domain: List[Any] = list(domain) if domain else []
        self._fields = list(fields) if fields else record_type.field_names()
        self._config = config or FetchConfig()

        self._cancel_event = Event()
        self._done_event = Event()
        self._failures: List[FetchFailure] = []
        self._failures_lock = Lock()
        self._stream: Optional[ResultStream[T_OdooRecord]] = None
        self._coordinator: Optional[Thread] = None
        self._total = 0

    # --- Context Manager ---
    def __enter__(self) -> "BatchFetcher[T_OdooRecord]":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        if self._stream is not None and not self._stream.closed:
            self.cancel()
        self.wait()
        return False

    # --- Public API ---
    @property
    def total(self) -> int:
        """Number of ids dispatched to the workers (after capping)."""
        return self._total

    @property
    def failures(self) -> List[FetchFailure]:
        with self._failures_lock:
            return list(self._failures)

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def cancel(self):
        """
        Asks the workers to stop. Workers check the signal before their network
        call and before each write; the stream is still closed by the coordinator.
        """
        if not self._cancel_event.is_set():
            log.info(f"Cancelling batch fetch of '{self._model}'.")
        self._cancel_event.set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Blocks until every worker finished and the stream has been closed.

        Returns:
            bool: True if the pipeline completed, False on timeout or if it never started.
        """
        if self._stream is None:
            return False
        return self._done_event.wait(timeout)

    def start(self) -> ResultStream[T_OdooRecord]:
        """
        Searches the ids and launches the workers.

        Returns:
            ResultStream: The stream the records will be written to.

        Raises:
            RuntimeError: If the fetcher was already started.
            OdooError: If the initial `search` fails.
        """
        if self._stream is not None:
            raise RuntimeError("BatchFetcher can be started only once.")

        ids = self._client.search(self._model, self._domain)
        cap = self._config.max_records
        if cap is not None and len(ids) > cap:
            log.info(f"Capping '{self._model}' ids from {len(ids)} to {cap}")
            ids = ids[:cap]

        batches = partition_ids(ids, self._config.batch_size)
        self._total = len(ids)
        stream: ResultStream[T_OdooRecord] = ResultStream(capacity=len(ids))
        self._stream = stream

        log.info(
            f"Fetching {len(ids)} '{self._model}' record(s) in {len(batches)} batch(es)"
        )

        if not batches:
            stream.close()
            self._done_event.set()
            return stream

        max_workers = min(len(batches), self._config.max_workers or len(batches))
        executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="odoolink-fetch"
        )
        futures = [
            executor.submit(self._fetch_batch, index, batch, stream)
            for index, batch in enumerate(batches)
        ]

        self._coordinator = Thread(
            target=self._coordinate,
            args=(executor, futures, stream),
            name="odoolink-fetch-coordinator",
            daemon=True,
        )
        self._coordinator.start()
        return stream

    # --- Iterator Protocol Implementation ---
    def __iter__(self) -> Iterator[T_OdooRecord]:
        """
        Yields the records as they arrive (no ordering across batches).
        Starts the pipeline if needed; stopping early cancels it.
        """
        stream = self._stream if self._stream is not None else self.start()
        try:
            yield from stream
        finally:
            if not stream.closed:
                self.cancel()

    # --- Internals ---
    def _record_failure(self, failure: FetchFailure):
        with self._failures_lock:
            self._failures.append(failure)

    def _coordinate(
        self,
        executor: ThreadPoolExecutor,
        futures: List[Future],
        stream: ResultStream[T_OdooRecord],
    ):
        """Waits for every worker, then closes the stream exactly once."""
        try:
            wait(futures)
            for future in futures:
                exc = future.exception()
                if exc is not None:
                    log.error(f"Fetch worker for '{self._model}' crashed: {exc}")
        finally:
            executor.shutdown(wait=True)
            # the pool threads are joined: drop their connections
            self._client.release_idle_connections()
            stream.close()
            self._done_event.set()
            log.info(
                f"Batch fetch of '{self._model}' finished: {stream.written} record(s), "
                f"{len(self.failures)} failure(s)."
            )

    def _fetch_batch(
        self, index: int, batch: List[int], stream: ResultStream[T_OdooRecord]
    ) -> int:
        """
        Worker body: fetches, maps and writes one batch.

        Returns:
            int: Number of records written.
        """
        if self._cancel_event.is_set():
            return 0

        log.debug(f"Fetching batch #{index} of '{self._model}' ({len(batch)} ids)")
        try:
            records = self._client.search_read(
                self._model, id_domain(batch), self._fields
            )
        except Exception as e:
            log.error(f"Error fetching batch #{index} of '{self._model}': {e}")
            self._record_failure(
                FetchFailure(batch_index=index, record_ids=list(batch), error=e)
            )
            return 0

        written = 0
        for position, record in enumerate(records):
            try:
                item = map_record(record, self._record_type)
            except MappingError as e:
                log.warning(
                    f"Error mapping '{self._model}' record in batch #{index}: {e}"
                )
                self._record_failure(
                    FetchFailure(
                        batch_index=index, record_ids=_record_ids([record]), error=e
                    )
                )
                continue

            if self._cancel_event.is_set():
                return written
            try:
                stream.put(item)
            except RuntimeError as e:
                # more rows than requested ids: the stream is full
                log.error(
                    f"Error writing batch #{index} of '{self._model}' "
                    f"({len(records) - position} record(s) dropped): {e}"
                )
                self._record_failure(
                    FetchFailure(
                        batch_index=index,
                        record_ids=_record_ids(records[position:]),
                        error=e,
                    )
                )
                return written
            written += 1

        return written
