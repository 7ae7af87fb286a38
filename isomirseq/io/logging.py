"""Structured run records for isomirseq.

JSON lines for per-sample reports, YAML for run summaries. Console and
file logging live in :mod:`isomirseq.pipeline.logger`.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable, Union

import yaml

PathLike = Union[str, Path]


def _prepare_log_destination(log_path: PathLike) -> Path:
    path = Path(log_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def log_json(log_path: PathLike, records: Iterable[dict[str, Any]]) -> Path:
    """Append one JSON line per record (e.g. per-sample filter reports)."""
    path = _prepare_log_destination(log_path)
    with path.open("a", encoding="utf-8") as handle:
        for record in records:
            handle.write(json.dumps(record, default=str))
            handle.write("\n")
    return path


def log_yaml(
    log_path: PathLike,
    record: dict[str, Any],
    *,
    logger: logging.Logger | None = None,
) -> None:
    """Write a YAML document to ``log_path`` or, if given, to ``logger``."""
    yaml_text = yaml.safe_dump(record, sort_keys=False).rstrip("\n")
    if logger is not None:
        logger.info("%s\n---", yaml_text)
        return

    path = _prepare_log_destination(log_path)
    with path.open("w", encoding="utf-8") as handle:
        handle.write(yaml_text)
        handle.write("\n")
