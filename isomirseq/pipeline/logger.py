"""Structured console and file logging for ingestion runs."""

import logging
import sys
import time
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional

from ..core.ingest.sample_filter import SampleFilterSummary


class ColoredFormatter(logging.Formatter):
    """Custom formatter with color support for console output."""

    def __init__(self, fmt: str, datefmt: str, colors: dict):
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.colors = colors

    def format(self, record):
        levelname = record.levelname
        color = self.colors.get(levelname, self.colors["RESET"])
        reset = self.colors["RESET"]
        record = logging.makeLogRecord(record.__dict__)
        record.levelname = f"{color}{levelname}{reset}"
        return super().format(record)


class PipelineLogger:
    """Console and file logging for the ingestion stages.

    Handlers are attached to the package logger, so messages from every
    ``isomirseq`` module end up in the run log.

    Parameters
    ----------
    log_dir : str, optional
        Directory for the run log file; console only if None
    log_level : str
        Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    log_name : str
        Logger name. Default: "isomirseq"

    Example
    -------
    >>> plog = PipelineLogger("logs/", log_level="INFO")
    >>> plog.setup()
    >>> with plog.stage("aggregate", "Cross-sample aggregation"):
    ...     raw = aggregate_samples(records)
    """

    COLORS = {
        "DEBUG": "\033[0;36m",  # Cyan
        "INFO": "\033[0;34m",  # Blue
        "WARNING": "\033[1;33m",  # Yellow
        "ERROR": "\033[0;31m",  # Red
        "CRITICAL": "\033[1;31m",  # Bold Red
        "RESET": "\033[0m",
    }

    def __init__(
        self,
        log_dir: Optional[str] = None,
        log_level: str = "INFO",
        log_name: str = "isomirseq",
    ):
        self.log_dir = Path(log_dir) if log_dir else None
        self.log_file: Optional[Path] = None
        if self.log_dir is not None:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            self.log_file = self.log_dir / f"isomirseq_{timestamp}.log"

        self.log_level = getattr(logging, log_level.upper())
        self.logger = logging.getLogger(log_name)
        self.logger.setLevel(self.log_level)
        self.logger.handlers = []

    def setup(self) -> None:
        """Attach the console handler and, with a log_dir, the file handler."""
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(self.log_level)
        console_handler.setFormatter(ColoredFormatter(
            fmt="%(asctime)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
            colors=self.COLORS,
        ))
        self.logger.addHandler(console_handler)

        if self.log_file is not None:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(self.log_file, mode="w")
            file_handler.setLevel(self.log_level)
            file_handler.setFormatter(logging.Formatter(
                fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            ))
            self.logger.addHandler(file_handler)

    @contextmanager
    def stage(self, stage_id: str, stage_name: str) -> Iterator[None]:
        """Log start, duration and failure of a block of work."""
        self.log_stage_start(stage_id, stage_name)
        start_time = time.time()
        try:
            yield
        except Exception as e:
            self.log_stage_error(stage_id, str(e))
            raise
        self.log_stage_complete(stage_id, time.time() - start_time)

    def log_stage_start(self, stage_id: str, stage_name: str) -> None:
        separator = "=" * 60
        self.logger.info(separator)
        self.logger.info(f"Starting {stage_id}: {stage_name}")
        self.logger.info(separator)

    def log_stage_complete(self, stage_id: str, duration: float) -> None:
        duration_str = self.format_duration(duration)
        self.logger.info(f"{stage_id} completed in {duration_str}")

    def log_stage_error(self, stage_id: str, error: str) -> None:
        self.logger.error(f"{stage_id} failed: {error}")

    def log_sample_summary(self, summary: Optional[SampleFilterSummary]) -> None:
        """Report kept and skipped samples; always logged, even when none were skipped."""
        if summary is None:
            return
        self.logger.info(
            f"Samples kept: {summary.n_kept}, filtered: {summary.n_filtered}"
        )
        for sample_id, reason in summary.skipped:
            self.logger.warning(f"  skipped {sample_id}: {reason}")

    @staticmethod
    def format_duration(seconds: float) -> str:
        """Format duration in seconds (e.g., "45.2s", "1m 23s", "2h 15m")."""
        if seconds < 60:
            return f"{seconds:.1f}s"
        elif seconds < 3600:
            mins = int(seconds // 60)
            secs = int(seconds % 60)
            return f"{mins}m {secs}s"
        else:
            hours = int(seconds // 3600)
            mins = int((seconds % 3600) // 60)
            return f"{hours}h {mins}m"
