from .record_fetcher import (
    FetchJobConfig as FetchJobConfig,
    RecordFetcher as RecordFetcher,
)
