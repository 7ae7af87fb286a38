"""Per-sample annotation file loader.

Reads tab-separated isomiR annotation files (miraligner / seqbuster
``*.mirna`` output) into a canonical record table with one row per
observed read form.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import pandas as pd

from .codec import IDENTITY_COLUMNS, normalize_identity_columns
from .config import LoaderConfig

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

FREQ_COL = "freq"
RECORD_COLUMNS = IDENTITY_COLUMNS + [FREQ_COL]
MIRNA_DB = "miRNA"


@dataclass
class LoadResult:
    """Result from loading a single sample file.

    Attributes
    ----------
    sample_id : str
        Sample identifier
    path : str
        Source file
    records : pd.DataFrame
        Canonical records (identity columns + freq)
    n_rows_raw : int
        Rows in the file
    n_rows_positive : int
        Rows with a positive read count
    issues : List[str]
        List of any issues found
    status : str
        'OK' or 'FAILED'
    """

    sample_id: str
    path: str = ""
    records: Optional[pd.DataFrame] = None
    n_rows_raw: int = 0
    n_rows_positive: int = 0
    issues: List[str] = field(default_factory=list)
    status: str = "OK"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for reporting."""
        return {
            "sample_id": self.sample_id,
            "path": self.path,
            "n_rows_raw": self.n_rows_raw,
            "n_rows_positive": self.n_rows_positive,
            "status": self.status,
            "issues": ";".join(self.issues) if self.issues else "",
        }


def empty_records() -> pd.DataFrame:
    df = pd.DataFrame({c: pd.Series(dtype=object) for c in IDENTITY_COLUMNS})
    df[FREQ_COL] = pd.Series(dtype="int64")
    return df


class SampleLoader:
    """Loader for per-sample isomiR annotation files.

    Parameters
    ----------
    config : LoaderConfig
        Loader configuration

    Example
    -------
    >>> from isomirseq.core.ingest import SampleLoader, LoaderConfig
    >>> loader = SampleLoader(LoaderConfig(header=True))
    >>> result = loader.read_sample("sample_01.mirna", "sample_01")
    >>> result.records.head()
    """

    def __init__(self, config: Optional[LoaderConfig] = None):
        self.config = config or LoaderConfig()

    def read_table(self, path: PathLike) -> pd.DataFrame:
        """Read the raw tab-separated table.

        Parameters
        ----------
        path : PathLike
            Path to the annotation file (``.gz`` is decompressed)

        Returns
        -------
        pd.DataFrame
            Table with the count column renamed to ``freq``
        """
        cfg = self.config
        if cfg.header:
            df = pd.read_csv(
                path, sep="\t", skiprows=cfg.effective_skip, header=0, dtype=str
            )
        else:
            df = pd.read_csv(
                path, sep="\t", skiprows=cfg.effective_skip, header=None, dtype=str
            )
            n_named = min(len(cfg.columns), df.shape[1])
            names = list(cfg.columns[:n_named]) + [
                f"col{i + 1}" for i in range(n_named, df.shape[1])
            ]
            df.columns = names

        if df.shape[1] <= cfg.freq_position:
            raise ValueError(
                f"{path}: expected a count column at position "
                f"{cfg.freq_position + 1}, found {df.shape[1]} columns"
            )

        freq_name = df.columns[cfg.freq_position]
        if freq_name != FREQ_COL:
            df = df.drop(columns=[FREQ_COL], errors="ignore")
            df = df.rename(columns={freq_name: FREQ_COL})
        return df

    def to_records(self, df: pd.DataFrame, source: str = "") -> pd.DataFrame:
        """Convert a raw table into canonical records.

        Rows without a positive count are dropped before anything else.

        Raises
        ------
        ValueError
            If identity columns are missing
        """
        missing = [c for c in RECORD_COLUMNS if c not in df.columns]
        if missing:
            raise ValueError(f"{source}: required columns missing: {missing}")

        freq = pd.to_numeric(df[FREQ_COL], errors="coerce")
        df = df.loc[freq > 0].copy()
        df[FREQ_COL] = freq.loc[df.index].round().astype("int64")

        if self.config.mirna_db_only and self.config.db_col in df.columns:
            df = df.loc[df[self.config.db_col].astype(str) == MIRNA_DB]

        records = normalize_identity_columns(df[RECORD_COLUMNS])
        return records.reset_index(drop=True)

    def read_sample(self, path: PathLike, sample_id: str) -> LoadResult:
        """Load one sample file.

        Read and parse failures are recorded on the result instead of
        being raised so that sibling samples keep loading.

        Parameters
        ----------
        path : PathLike
            Path to the annotation file
        sample_id : str
            Sample identifier

        Returns
        -------
        LoadResult
            Loading result with canonical records
        """
        result = LoadResult(sample_id=sample_id, path=str(path))

        try:
            table = self.read_table(path)
            result.n_rows_raw = len(table)
            result.records = self.to_records(table, source=str(path))
            result.n_rows_positive = int(
                (pd.to_numeric(table[FREQ_COL], errors="coerce") > 0).sum()
            )
        except FileNotFoundError:
            result.issues.append("file_missing")
        except pd.errors.EmptyDataError:
            result.records = empty_records()
            result.issues.append("file_empty")
        except Exception as e:
            result.issues.append(f"read_error:{e}")

        if result.records is None:
            result.status = "FAILED"
            logger.warning("Could not read sample %s (%s): %s",
                           sample_id, path, ";".join(result.issues))
        else:
            logger.debug("Read %d records for sample %s from %s",
                         len(result.records), sample_id, path)
        return result
