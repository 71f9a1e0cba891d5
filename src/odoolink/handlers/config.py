"""
Configuration Module.

This module defines the configuration structure used to control the batched
fetch pipeline: batch size, optional cap on the number of records and the
worker count.
"""

from dataclasses import dataclass
from typing import Optional

DEFAULT_BATCH_SIZE = 100


@dataclass
class FetchConfig:
    """
    Configuration settings for `BatchFetcher`.

    Attributes:
        batch_size (int): Maximum number of ids fetched by a single worker call.
        max_records (Optional[int]): Upper bound on the number of ids fetched.
            None fetches every id matched by the domain.
        max_workers (Optional[int]): Maximum number of concurrent workers.
            None runs one worker per batch.
    """

    batch_size: int = DEFAULT_BATCH_SIZE
    max_records: Optional[int] = None
    max_workers: Optional[int] = None

    def __post_init__(self):
        if self.batch_size < 1:
            raise ValueError("'batch_size' must be at least 1")
        if self.max_records is not None and self.max_records < 0:
            raise ValueError("'max_records' must be a non-negative integer or None")
        if self.max_workers is not None and self.max_workers < 1:
            raise ValueError("'max_workers' must be at least 1 or None")
