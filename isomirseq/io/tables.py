"""Table I/O for isomirseq.

Reads sample descriptor tables, wide isomiR tables and whitelists, and
writes count matrices. Tab-separated files are used unless the path ends
in ``.csv``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

import pandas as pd

from ..core.ingest.codec import IDENTITY_COLUMNS
from ..core.ingest.matrix import CountMatrix

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def _sep_for(path: PathLike) -> str:
    suffixes = [s.lower() for s in Path(path).suffixes]
    return "," if ".csv" in suffixes else "\t"


def ensure_output_dir(path: PathLike) -> Path:
    """Create the directory at path if it does not exist and return it."""
    directory = Path(path)
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def load_sample_table(path: PathLike, sample_id_col: Optional[str] = None) -> pd.DataFrame:
    """Load a sample descriptor table (coldata).

    Parameters
    ----------
    path : PathLike
        CSV or TSV file, one row per sample.
    sample_id_col : str, optional
        Column holding sample ids. Defaults to the first column.

    Returns
    -------
    pd.DataFrame
        Table indexed by sample id (as strings).

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    ValueError
        If sample ids are missing or duplicated.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Sample table not found: {path}")
    df = pd.read_csv(path, sep=_sep_for(path), converters={sample_id_col or 0: str})

    id_col = sample_id_col or df.columns[0]
    if id_col not in df.columns:
        raise ValueError(f"Sample ID column '{id_col}' not found in {path}")

    ids = df[id_col].astype(str)
    if ids.duplicated().any():
        raise ValueError(f"Duplicated sample ids in {path}: {sorted(ids[ids.duplicated()])}")

    df = df.drop(columns=[id_col])
    df.index = pd.Index(ids, name=id_col)
    return df


def load_raw_table(path: PathLike) -> pd.DataFrame:
    """Load a wide isomiR table written by :func:`write_count_matrix`.

    Identity columns are read as strings so that empty fields and the
    ``"0"`` trimming tag survive the round trip.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Raw isomiR table not found: {path}")
    df = pd.read_csv(
        path,
        sep=_sep_for(path),
        dtype={c: str for c in IDENTITY_COLUMNS},
        keep_default_na=False,
    )
    missing = [c for c in IDENTITY_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Raw isomiR table {path} missing columns: {missing}")
    return df


def load_whitelist(path: PathLike) -> List[str]:
    """Read one sequence per line, ignoring blanks and ``#`` comments."""
    sequences = []
    with open(path, encoding="utf-8") as handle:
        for line in handle:
            line = line.strip()
            if line and not line.startswith("#"):
                sequences.append(line)
    return sequences


def write_dataframe(df: pd.DataFrame, path: PathLike, *, index: bool = False) -> Path:
    """Write DataFrame to path ensuring the parent directory exists."""
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(output_path, sep=_sep_for(output_path), index=index)
    return output_path


def write_count_matrix(matrix: CountMatrix, out_dir: PathLike) -> Dict[str, Path]:
    """Write counts, row annotation, coldata and the raw table.

    Returns
    -------
    Dict[str, Path]
        Map of artifact name to written path.
    """
    out_dir = ensure_output_dir(out_dir)
    paths = {
        "counts": write_dataframe(matrix.counts, out_dir / "counts.tsv", index=True),
        "row_data": write_dataframe(matrix.row_data, out_dir / "row_data.tsv", index=True),
        "coldata": write_dataframe(matrix.coldata, out_dir / "coldata.tsv", index=True),
    }
    if matrix.raw_data is not None:
        paths["raw_data"] = write_dataframe(matrix.raw_data, out_dir / "raw_data.tsv")
    for name, path in paths.items():
        logger.info("Wrote %s: %s", name, path)
    return paths
