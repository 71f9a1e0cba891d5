import queue
import threading

import pytest

from odoolink.handlers import ResultStream


def test_put_then_drain():
    stream = ResultStream(capacity=3)
    for i in range(3):
        stream.put(i)
    assert stream.close() is True

    assert list(stream) == [0, 1, 2]
    assert stream.written == 3
    # drained: further reads end immediately
    assert stream.get() is None
    assert list(stream) == []


def test_close_is_idempotent():
    stream = ResultStream(capacity=1)
    assert stream.close() is True
    assert stream.close() is False
    assert stream.closed
    assert list(stream) == []


def test_put_after_close():
    stream = ResultStream(capacity=2)
    stream.close()
    with pytest.raises(RuntimeError, match="Cannot write to a closed ResultStream"):
        stream.put("late")


def test_capacity_exceeded():
    stream = ResultStream(capacity=1)
    stream.put("a")
    with pytest.raises(RuntimeError, match=r"capacity \(1\) exceeded"):
        stream.put("b")


def test_negative_capacity():
    with pytest.raises(ValueError):
        ResultStream(capacity=-1)


def test_get_timeout():
    stream = ResultStream(capacity=1)
    with pytest.raises(queue.Empty):
        stream.get(timeout=0.01)


def test_concurrent_writers():
    writers, per_writer = 8, 50
    stream = ResultStream(capacity=writers * per_writer)

    def write(base):
        for i in range(per_writer):
            stream.put(base * per_writer + i)

    threads = [threading.Thread(target=write, args=(w,)) for w in range(writers)]
    for t in threads:
        t.start()

    def closer():
        for t in threads:
            t.join()
        stream.close()

    threading.Thread(target=closer).start()

    received = list(stream)
    assert sorted(received) == list(range(writers * per_writer))
    assert stream.closed
