"""I/O utilities for isomirseq.

Provides logging helpers and table readers/writers.
"""

from .logging import log_json, log_yaml
from .tables import (
    ensure_output_dir,
    load_sample_table,
    load_raw_table,
    load_whitelist,
    write_dataframe,
    write_count_matrix,
)

__all__ = [
    # Logging
    "log_json",
    "log_yaml",
    # Tables
    "ensure_output_dir",
    "load_sample_table",
    "load_raw_table",
    "load_whitelist",
    "write_dataframe",
    "write_count_matrix",
]
