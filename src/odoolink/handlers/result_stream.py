"""
Result Stream Module.

This module provides `ResultStream`, the conduit merging the typed records
written by the concurrent fetch workers into a single sequence for the
consumer. Writers and the closing call are serialized by a lock, so no write
can land after the stream has been closed.
"""

import logging as log
import queue
from threading import Lock
from typing import Generic, Iterator, Optional, TypeVar

T = TypeVar("T")

# End-of-stream marker, enqueued exactly once by `close()`
_CLOSED = object()


class ResultStream(Generic[T]):
    """
    A buffered, multi-writer, single-consumer stream of records.

    The buffer is pre-sized to the maximum number of records that can ever be
    written, so writers never wait for the consumer and a late consumer still
    finds every record followed by the end marker.

    Usage:
        ```python
        for record in stream:  # ends when the stream is closed and drained
            ...
        ```
    """

    def __init__(self, capacity: int):
        """
        Args:
            capacity (int): Maximum number of records the stream will hold.
        """
        if capacity < 0:
            raise ValueError("ResultStream capacity must be non-negative")
        self._capacity = capacity
        # one extra slot for the end marker
        self._queue: "queue.Queue[object]" = queue.Queue(maxsize=capacity + 1)
        self._lock = Lock()
        self._closed = False
        self._drained = False
        self._written = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def written(self) -> int:
        """Number of records written so far."""
        return self._written

    def put(self, item: T):
        """
        Writes a record. Safe to call from any thread.

        Raises:
            RuntimeError: If the stream has already been closed or is full.
        """
        with self._lock:
            if self._closed:
                raise RuntimeError("Cannot write to a closed ResultStream.")
            if self._written >= self._capacity:
                raise RuntimeError(
                    f"ResultStream capacity ({self._capacity}) exceeded."
                )
            self._queue.put_nowait(item)
            self._written += 1

    def close(self) -> bool:
        """
        Marks the end of the stream. Only the first call has an effect.

        Returns:
            bool: True if this call closed the stream, False if it was already closed.
        """
        with self._lock:
            if self._closed:
                return False
            self._closed = True
            self._queue.put(_CLOSED)
        log.debug(f"ResultStream closed after {self._written} record(s).")
        return True

    def get(self, timeout: Optional[float] = None) -> Optional[T]:
        """
        Reads the next record, waiting up to `timeout` seconds (forever if None).

        Returns:
            The next record, or None once the stream is closed and drained.

        Raises:
            queue.Empty: If no record arrived within `timeout`.
        """
        if self._drained:
            return None
        item = self._queue.get(timeout=timeout)
        if item is _CLOSED:
            self._drained = True
            return None
        return item  # type: ignore[return-value]

    # --- Iterator Protocol Implementation ---

    def __iter__(self) -> Iterator[T]:
        while True:
            item = self.get()
            if item is None:
                return
            yield item
