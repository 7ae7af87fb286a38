"""Pytest configuration and shared fixtures for isomirseq tests."""

import sys
from pathlib import Path

import pytest
import pandas as pd

# Add package to path
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# Import mock data generators
from tests.fixtures import (
    DEFAULT_ROWS,
    write_mirna_file,
    create_records,
    create_raw_table,
    create_coldata,
)


# ============================================================================
# Record Fixtures
# ============================================================================


@pytest.fixture
def ambiguous_records() -> pd.DataFrame:
    """Records where one sequence maps to two miRNAs."""
    return create_records([
        ("AAGCTT", "mir-1", "", "", "0", "0", 10),
        ("AAGCTT", "mir-2", "", "", "0", "0", 4),
        ("AAGCTA", "mir-1", "6A>T", "", "0", "0", 3),
        ("AAGCTA", "mir-2", "6A>G", "", "0", "0", 2),
        ("CCGATT", "mir-3", "", "", "0", "0", 7),
    ])


# ============================================================================
# Wide Table Fixtures
# ============================================================================


@pytest.fixture
def raw_table() -> pd.DataFrame:
    """Wide table with two miRNAs observed in three samples."""
    return create_raw_table(
        [
            ("AAGCTT", "mir-1", "", "", "0", "0", 90, 50, 0),
            ("AAGCTTA", "mir-1", "", "A", "0", "0", 10, 50, 0),
            ("AAGCTC", "mir-1", "6T>C", "", "0", "0", 0, 0, 0),
            ("GGCATT", "mir-2", "", "", "0", "0", 40, 0, 30),
            ("GGCATA", "mir-2", "6T>A,2G>C", "", "0", "0", 60, 0, 70),
        ],
        samples=["s1", "s2", "s3"],
    )


@pytest.fixture
def coldata() -> pd.DataFrame:
    """Sample table for s1..s3."""
    return create_coldata(["s1", "s2", "s3"], {"s3": "treated"})


# ============================================================================
# File Fixtures
# ============================================================================


@pytest.fixture
def mirna_files(tmp_path) -> list:
    """Two miraligner-style files with overlapping isomiRs."""
    second = list(DEFAULT_ROWS[:4]) + [
        ("TAGCTTATCAGACTGATGTTGAGC", "hsa-miR-21-5p", 25, "0", "GC", "0", "0"),
    ]
    return [
        write_mirna_file(tmp_path / "s1.mirna"),
        write_mirna_file(tmp_path / "s2.mirna", rows=second),
    ]


@pytest.fixture
def tmp_output_dir(tmp_path: Path) -> Path:
    """Create a temporary output directory for tests."""
    output_dir = tmp_path / "output"
    output_dir.mkdir(parents=True, exist_ok=True)
    return output_dir


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def sample_ingest_config(tmp_path) -> Path:
    """Create sample ingestion configuration file."""
    import yaml

    config = {
        "ingest": {
            "loader": {"header": True, "skip": 0},
            "sample_filter": {"unique_hits": True, "min_hits": 2},
            "noise": {"pct": 0.05, "whitelist": ["AAGCTT"]},
            "snv": {"n_snv": 2},
            "matrix": {"include_missing": True, "design": "~condition"},
            "n_jobs": 2,
        }
    }

    path = tmp_path / "ingest.yaml"
    with open(path, "w") as f:
        yaml.dump(config, f)

    return path
