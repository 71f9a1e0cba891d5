from .batch_fetcher import (
    BatchFetcher as BatchFetcher,
    FetchFailure as FetchFailure,
    partition_ids as partition_ids,
)
from .config import FetchConfig as FetchConfig
from .result_stream import ResultStream as ResultStream
