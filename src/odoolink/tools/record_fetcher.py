"""
Record Fetching Tool.

This module provides a command-line interface (CLI) and a Python API for
downloading the records of a model with the batched fetch pipeline.

It handles:
1.  **Configuration:** Reading the credentials from a `.env` file.
2.  **Authentication:** Opening an `OdooClient` session.
3.  **Fetching:** Running a `BatchFetcher` and draining its stream while a
    progress bar tracks the received records.
4.  **Reporting:** Printing the records as a table and listing the skipped
    batches or records.

Typical usage as a script:
    $ odoolink-fetch --env .env --model res.partner --limit 1000 --batch-size 100

Typical usage as a library:
    config = FetchJobConfig(env_path=Path(".env"), model="res.partner")
    records = RecordFetcher(config).run()
"""

import argparse
import json
import logging as log
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional

from rich.console import Console
from rich.markup import escape
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from odoolink.comm.odoo_client import OdooClient
from odoolink.errors import OdooError
from odoolink.handlers.batch_fetcher import BatchFetcher
from odoolink.handlers.config import DEFAULT_BATCH_SIZE, FetchConfig
from odoolink.helpers import truncate_long_strings
from odoolink.models.base_model import OdooRecord

DEFAULT_MODEL = "res.partner"
DEFAULT_RECORD_LIMIT = 1000

# --- Configuration ---


@dataclass
class FetchJobConfig:
    """
    Configuration object for a fetch job.

    Attributes:
        env_path (Optional[Path]): `.env` file holding DATABASE, USERNAME, PASSWORD and URL.
            If None, the values are read from the environment.
        model (str): Remote model to fetch; a record type must be registered for it.
        domain (list): Domain filter selecting the records (all records if empty).
        batch_size (int): Ids per worker call.
        limit (Optional[int]): Maximum number of records. None fetches everything.
        max_workers (Optional[int]): Concurrent workers. None runs one per batch.
        show_records (bool): Print the fetched records as a table.
        log_level (str): Logging verbosity ("DEBUG", "INFO", "WARNING", "ERROR").
    """

    env_path: Optional[Path] = Path(".env")
    model: str = DEFAULT_MODEL
    domain: List[Any] = field(default_factory=list)
    batch_size: int = DEFAULT_BATCH_SIZE
    limit: Optional[int] = DEFAULT_RECORD_LIMIT
    max_workers: Optional[int] = None
    show_records: bool = True
    log_level: str = "WARNING"


# --- Main Tool Class ---


class RecordFetcher:
    """
    Controller class for the fetch workflow.

    This class orchestrates:
    1.  Connecting to the server.
    2.  Running the batched fetch.
    3.  Rendering progress, records and failures.
    """

    def __init__(self, config: FetchJobConfig, console: Optional[Console] = None):
        """
        Args:
            config: The fully resolved configuration object.
            console: The rich console to render to (stdout by default).
        """
        self.cfg = config
        self.console = console or Console()
        self._setup_logging()

    def _setup_logging(self):
        """Configures the logging subsystem based on the config level."""
        log.basicConfig(
            level=getattr(log, self.cfg.log_level.upper()),
            format="%(asctime)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        self.logger = log.getLogger("RecordFetcher")

    def run(self) -> List[OdooRecord]:
        """
        Main execution entry point.

        Returns:
            List[OdooRecord]: The fetched records (in arrival order).

        Raises:
            ValueError: If no record type is registered for the model.
            OdooError: If the connection, the authentication or the initial search fails.
        """
        record_type = OdooRecord.for_model(self.cfg.model)
        fetch_config = FetchConfig(
            batch_size=self.cfg.batch_size,
            max_records=self.cfg.limit,
            max_workers=self.cfg.max_workers,
        )

        self.logger.info(f"Loading configuration from {self.cfg.env_path or 'environment'}")
        with OdooClient.from_env(self.cfg.env_path) as client:
            with client.batch_fetch(
                record_type, domain=self.cfg.domain, config=fetch_config
            ) as fetcher:
                records = self._drain(fetcher)

            self._report(record_type, records, fetcher)

        return records

    def _drain(self, fetcher: BatchFetcher) -> List[OdooRecord]:
        """Consumes the result stream, advancing the progress bar per record."""
        progress = Progress(
            TextColumn("[bold cyan]{task.fields[name]}"),
            BarColumn(),
            MofNCompleteColumn(),
            "•",
            TimeElapsedColumn(),
            console=self.console,
            transient=True,
        )
        records: List[OdooRecord] = []
        stream = fetcher.start()
        with progress:
            task = progress.add_task("", total=fetcher.total, name=self.cfg.model)
            for record in stream:
                records.append(record)
                progress.advance(task)
        return records

    def _report(self, record_type, records: List[OdooRecord], fetcher: BatchFetcher):
        """Prints the records table and the failure summary."""
        if self.cfg.show_records and records:
            table = Table(title=f"{self.cfg.model} ({len(records)} records)")
            columns = record_type.field_names()
            for column in columns:
                table.add_column(column)
            for record in records:
                values = truncate_long_strings(record.model_dump(), max_length=40)
                table.add_row(*(escape(str(values[c])) for c in columns))
            self.console.print(table)

        self.console.print(
            f"[green]{len(records)}[/green] record(s) fetched out of {fetcher.total}."
        )
        for failure in fetcher.failures:
            self.console.print(
                f"[red]Batch #{failure.batch_index} skipped[/red] "
                f"({len(failure.record_ids)} id(s)): {escape(str(failure.error))}"
            )


# --- CLI Entry Point ---


def _parse_domain_arg(domain_input: Optional[str]) -> list:
    """
    Parses the CLI domain argument, a JSON list such as '[["is_company", "=", true]]'.

    Returns:
        list: The parsed domain, or an empty list if not given.
    """
    if not domain_input:
        return []
    try:
        domain = json.loads(domain_input)
    except json.JSONDecodeError as e:
        log.error(f"Domain argument is not valid JSON: {e}")
        sys.exit(1)
    if not isinstance(domain, list):
        log.error(f"Domain argument must be a JSON list, got: '{domain_input}'")
        sys.exit(1)
    return domain


def record_fetcher():
    """
    Console script entry point.
    Parses arguments, sets up configuration, and runs the fetch.
    """
    parser = argparse.ArgumentParser(
        description="Fetch the records of a model in concurrent batches."
    )

    # Connection Arguments
    parser.add_argument(
        "--env",
        type=Path,
        default=Path(".env"),
        help="Path of the .env file with DATABASE, USERNAME, PASSWORD, URL (Default: .env)",
    )

    # Query Arguments
    parser.add_argument(
        "--model",
        default=DEFAULT_MODEL,
        choices=OdooRecord.registered_models(),
        help=f"Model to fetch (Default: {DEFAULT_MODEL})",
    )
    parser.add_argument(
        "--domain",
        help='Domain filter as JSON, e.g. \'[["is_company", "=", true]]\'',
    )

    # Pipeline Arguments
    parser.add_argument(
        "--batch-size",
        type=int,
        default=DEFAULT_BATCH_SIZE,
        help=f"Ids per batch (Default: {DEFAULT_BATCH_SIZE})",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=DEFAULT_RECORD_LIMIT,
        help=f"Maximum number of records, 0 for no limit (Default: {DEFAULT_RECORD_LIMIT})",
    )
    parser.add_argument(
        "--workers", type=int, default=None, help="Concurrent workers (Default: one per batch)"
    )
    parser.add_argument(
        "--no-table", action="store_true", help="Do not print the fetched records."
    )
    parser.add_argument(
        "-l",
        "--log",
        default="warning",
        choices=["debug", "info", "warning", "error", "critical"],
        help="Logging level.",
    )

    args = parser.parse_args()

    config = FetchJobConfig(
        env_path=args.env,
        model=args.model,
        domain=_parse_domain_arg(args.domain),
        batch_size=args.batch_size,
        limit=args.limit or None,
        max_workers=args.workers,
        show_records=not args.no_table,
        log_level=args.log.upper(),
    )

    # --- Execution ---
    try:
        RecordFetcher(config).run()
    except KeyboardInterrupt:
        log.warning("Operation cancelled by user.")
        sys.exit(130)
    except (OdooError, ValueError) as e:
        log.error(f"Fetch failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    record_fetcher()
