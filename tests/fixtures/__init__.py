"""Test fixtures for isomirseq.

Provides mock data generators and test utilities.
"""

from .mock_isomirs import (
    DEFAULT_ROWS,
    create_mirna_table,
    write_mirna_file,
    create_records,
    create_raw_table,
    create_coldata,
)

__all__ = [
    "DEFAULT_ROWS",
    "create_mirna_table",
    "write_mirna_file",
    "create_records",
    "create_raw_table",
    "create_coldata",
]
