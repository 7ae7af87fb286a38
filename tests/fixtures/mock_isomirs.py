"""Mock isomiR data generators for testing.

Provides functions to create miraligner-style annotation files, record
tables and wide tables without requiring real sequencing output.
"""

from pathlib import Path
from typing import Dict, List, Optional, Sequence

import pandas as pd

from isomirseq.core.ingest.config import MIRALIGNER_COLUMNS

# (seq, mir, freq, mism, add, t5, t3)
DEFAULT_ROWS = [
    ("TGAGGTAGTAGGTTGTATAGTT", "hsa-let-7a-5p", 120, "0", "0", "0", "0"),
    ("TGAGGTAGTAGGTTGTATAGTTA", "hsa-let-7a-5p", 30, "0", "A", "0", "0"),
    ("TGAGGTAGTAGGTTGTATAG", "hsa-let-7a-5p", 12, "0", "0", "0", "tt"),
    ("TAGCTTATCAGACTGATGTTGA", "hsa-miR-21-5p", 200, "0", "0", "0", "0"),
    ("TAGCTTATCAGACTGATGTTGC", "hsa-miR-21-5p", 8, "22CA", "0", "0", "0"),
]


def create_mirna_table(rows: Optional[Sequence[tuple]] = None) -> pd.DataFrame:
    """Create a miraligner-style table (all 15 columns)."""
    rows = DEFAULT_ROWS if rows is None else rows
    records = []
    for i, (seq, mir, freq, mism, add, t5, t3) in enumerate(rows):
        records.append({
            "seq": seq,
            "name": f"seq_{i}_x{freq}",
            "freq": freq,
            "mir": mir,
            "start": 6,
            "end": 6 + len(seq),
            "mism": mism,
            "add": add,
            "t5": t5,
            "t3": t3,
            "s5": "0",
            "s3": "0",
            "DB": "miRNA",
            "precursor": mir.replace("-5p", "").replace("-3p", ""),
            "ambiguity": 1,
        })
    return pd.DataFrame(records, columns=MIRALIGNER_COLUMNS)


def write_mirna_file(
    path: Path,
    rows: Optional[Sequence[tuple]] = None,
    header: bool = True,
) -> Path:
    """Write a miraligner-style file; without header a comment line leads."""
    df = create_mirna_table(rows)
    path = Path(path)
    if header:
        df.to_csv(path, sep="\t", index=False)
    else:
        with open(path, "w") as handle:
            handle.write("# miraligner output\n")
        df.to_csv(path, sep="\t", index=False, header=False, mode="a")
    return path


def create_records(rows: Sequence[tuple]) -> pd.DataFrame:
    """Create canonical records from (seq, mir, mism, add, t5, t3, freq)."""
    return pd.DataFrame(
        [list(r) for r in rows],
        columns=["seq", "mir", "mism", "add", "t5", "t3", "freq"],
    )


def create_raw_table(rows: Sequence[tuple], samples: List[str]) -> pd.DataFrame:
    """Create a wide table from (seq, mir, mism, add, t5, t3, *counts)."""
    columns = ["seq", "mir", "mism", "add", "t5", "t3"] + list(samples)
    return pd.DataFrame([list(r) for r in rows], columns=columns)


def create_coldata(samples: Sequence[str], conditions: Optional[Dict[str, str]] = None) -> pd.DataFrame:
    """Create a sample descriptor table indexed by sample id."""
    conditions = conditions or {}
    return pd.DataFrame(
        {"condition": [conditions.get(s, "control") for s in samples]},
        index=pd.Index(list(samples), name="sample_id"),
    )
