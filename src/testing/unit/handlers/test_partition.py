import itertools

import pytest

from odoolink.handlers import partition_ids


@pytest.mark.parametrize("count", [0, 1, 99, 100, 101, 250, 1000])
@pytest.mark.parametrize("batch_size", [1, 7, 100, 1000])
def test_partition_laws(count, batch_size):
    ids = list(range(1, count + 1))
    batches = partition_ids(ids, batch_size)

    # concatenation gives back the input, in order
    assert list(itertools.chain.from_iterable(batches)) == ids
    # no empty batch, none longer than batch_size
    assert all(0 < len(b) <= batch_size for b in batches)
    # only the last batch may be shorter
    assert all(len(b) == batch_size for b in batches[:-1])
    # ceil(count / batch_size) batches
    assert len(batches) == -(-count // batch_size)


def test_partition_example():
    assert partition_ids([10, 11, 12, 13, 14], 2) == [[10, 11], [12, 13], [14]]


def test_partition_empty():
    assert partition_ids([], 100) == []


def test_partition_does_not_alias_input():
    ids = [1, 2, 3]
    batches = partition_ids(ids, 3)
    batches[0].append(4)
    assert ids == [1, 2, 3]


@pytest.mark.parametrize("batch_size", [0, -1])
def test_partition_invalid_batch_size(batch_size):
    with pytest.raises(ValueError, match="'batch_size' must be at least 1"):
        partition_ids([1, 2, 3], batch_size)
