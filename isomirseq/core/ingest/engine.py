"""Entry points that turn isomiR annotation into a count matrix.

Three entry points share the same filtering core:

- :func:`from_files` reads per-sample annotation files, filters each
  sample, aggregates them and hands the wide table to
  :func:`from_raw_table`.
- :func:`from_raw_table` cleans noise, caps substitutions and builds the
  validated count matrix. It accepts wide tables produced by a previous
  run, so it doubles as the re-filtering path.
- :func:`from_external_tool_table` checks a wide table produced by an
  external annotator (mirtop ``export --format isomir``) before
  delegating to :func:`from_raw_table`.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterable, Mapping, NamedTuple, Optional, Sequence, Union

import numpy as np
import pandas as pd

from .aggregation import aggregate_samples, collapse_duplicates, sample_columns
from .codec import IDENTITY_COLUMNS, normalize_identity_columns
from .config import IngestConfig, LoaderConfig, SampleFilterConfig
from .errors import EmptyAggregationError, ShapeMismatchError, ValidationError
from .loader import FREQ_COL, RECORD_COLUMNS, SampleLoader
from .matrix import CountMatrix, build_count_matrix
from .noise import clean_noise
from .parallel import load_and_filter_samples
from .sample_filter import SampleFilter, SampleFilterSummary
from .snv import remove_excess_snv

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class BuildResult(NamedTuple):
    """Count matrix and the filtered wide table it was built from."""

    count_matrix: CountMatrix
    raw_data: pd.DataFrame


def from_raw_table(
    raw: pd.DataFrame,
    coldata: pd.DataFrame,
    pct: float = 0.1,
    n_snv: Optional[int] = 1,
    whitelist: Optional[Iterable[str]] = None,
    design: str = "~1",
    include_missing: bool = False,
    summary: Optional[SampleFilterSummary] = None,
) -> BuildResult:
    """Filter a wide isomiR table and build the count matrix.

    Parameters
    ----------
    raw : pd.DataFrame
        Wide isomiR table (identity columns + one column per sample)
    coldata : pd.DataFrame
        Sample descriptor table indexed by sample id
    pct : float
        Minimum importance of an isomiR within its miRNA (0-1)
    n_snv : int, optional
        Maximum substitutions per isomiR; None disables the cap
    whitelist : Iterable[str], optional
        Sequences kept regardless of importance
    design : str
        Model formula carried along for downstream analysis
    include_missing : bool
        Zero-fill coldata samples absent from the table
    summary : SampleFilterSummary, optional
        Skipped-sample summary to attach to the matrix

    Returns
    -------
    BuildResult
        (count_matrix, raw_data) where raw_data is the filtered table

    Raises
    ------
    EmptyAggregationError
        If ``raw`` has no rows
    ValidationError
        If identity columns are missing or counts are not finite
        non-negative integers
    """
    if raw is None or len(raw) == 0:
        raise EmptyAggregationError("No samples had valid miRNA hits.")

    missing = [c for c in IDENTITY_COLUMNS if c not in raw.columns]
    if missing:
        raise ValidationError(f"Raw table missing identity columns: {missing}")

    raw = check_counts(raw)
    raw = collapse_duplicates(normalize_identity_columns(raw))
    raw = clean_noise(raw, pct=pct, whitelist=whitelist)
    raw = remove_excess_snv(raw, n_snv=n_snv)
    if raw.empty:
        logger.warning("No isomiRs left after noise and SNV filtering")

    matrix = build_count_matrix(
        raw,
        coldata,
        include_missing=include_missing,
        design=design,
        summary=summary,
    ).validate()
    logger.info("Count matrix: %d isomiRs x %d samples", *matrix.shape)
    return BuildResult(matrix, raw)


def from_files(
    files: Sequence[PathLike],
    coldata: pd.DataFrame,
    rate: float = 0.2,
    canonical_add: bool = True,
    unique_mism: bool = True,
    unique_hits: bool = False,
    min_hits: int = 1,
    design: str = "~1",
    header: bool = True,
    skip: int = 0,
    sample_rate: float = 0.0,
    n_jobs: int = 1,
    **kwargs: Any,
) -> BuildResult:
    """Build a count matrix from per-sample annotation files.

    Parameters
    ----------
    files : Sequence[PathLike]
        One annotation file per sample, in coldata row order
    coldata : pd.DataFrame
        Sample descriptor table; its index gives the sample ids
    rate : float
        Minimum isomiR importance, applied across samples as ``pct``
    canonical_add : bool
        Keep only A/T non-templated additions
    unique_mism : bool
        Drop mismatch isomiRs whose sequence maps to several miRNAs
    unique_hits : bool
        Drop every isomiR whose sequence maps to several miRNAs
    min_hits : int
        Minimum distinct isomiRs for a sample to be kept
    design : str
        Model formula carried along for downstream analysis
    header : bool
        Files carry a header line; when False one line is skipped
    skip : int
        Lines to skip before the header
    sample_rate : float
        Per-sample minimum share of mismatch records (0 disables)
    n_jobs : int
        Parallel workers for reading and filtering samples
    **kwargs
        Forwarded to :func:`from_raw_table` (``n_snv``, ``whitelist``,
        ``include_missing``); ``pct`` is rejected because
        ``rate`` already sets it

    Returns
    -------
    BuildResult
        (count_matrix, raw_data); ``count_matrix.summary`` lists the
        samples that were skipped

    Raises
    ------
    ShapeMismatchError
        If the number of files and coldata rows differ
    TypeError
        If ``pct`` is passed in ``kwargs``
    NoValidSamplesError
        If every sample is dropped
    """
    if "pct" in kwargs:
        raise TypeError(
            "from_files() takes the noise threshold as 'rate'; 'pct' is not accepted"
        )

    sample_ids = [str(s) for s in coldata.index]
    if len(files) != len(sample_ids):
        raise ShapeMismatchError(
            f"Got {len(files)} files for {len(sample_ids)} coldata rows"
        )

    loader = SampleLoader(LoaderConfig(header=header, skip=skip))
    sample_filter = SampleFilter(SampleFilterConfig(
        rate=sample_rate,
        canonical_add=canonical_add,
        unique_mism=unique_mism,
        unique_hits=unique_hits,
        min_hits=min_hits,
    ))

    kept, summary = load_and_filter_samples(
        files, sample_ids, loader=loader, sample_filter=sample_filter, n_jobs=n_jobs
    )
    raw = aggregate_samples({o.sample_id: o.records for o in kept})

    return from_raw_table(
        raw, coldata, pct=rate, design=design, summary=summary, **kwargs
    )


def from_config(
    files: Sequence[PathLike],
    coldata: pd.DataFrame,
    config: Optional[IngestConfig] = None,
) -> BuildResult:
    """Run :func:`from_files` with every setting taken from ``config``."""
    config = config or IngestConfig()
    loader = config.loader
    sf = config.sample_filter
    return from_files(
        files,
        coldata,
        rate=config.noise.pct,
        canonical_add=sf.canonical_add,
        unique_mism=sf.unique_mism,
        unique_hits=sf.unique_hits,
        min_hits=sf.min_hits,
        design=config.matrix.design,
        header=loader.header,
        skip=loader.skip,
        sample_rate=sf.rate,
        n_jobs=config.n_jobs,
        n_snv=config.snv.n_snv,
        whitelist=config.noise.whitelist,
        include_missing=config.matrix.include_missing,
    )


def check_counts(raw: pd.DataFrame) -> pd.DataFrame:
    """Return a copy of ``raw`` with every sample column as int64.

    Raises
    ------
    ValidationError
        If a sample column holds missing, non-numeric, negative,
        infinite or fractional counts
    """
    out = raw.copy()
    for col in sample_columns(out):
        values = pd.to_numeric(out[col], errors="coerce")
        if values.isna().any():
            raise ValidationError(
                f"Sample column '{col}' has missing or non-numeric counts"
            )
        if not np.isfinite(values).all() or (values < 0).any():
            raise ValidationError(f"Sample column '{col}' has negative or infinite counts")
        if (values % 1 != 0).any():
            raise ValidationError(f"Sample column '{col}' has non-integer counts")
        out[col] = values.astype("int64")
    return out


def check_external_table(
    table: pd.DataFrame,
    drop_columns: Optional[Sequence[str]] = None,
) -> pd.DataFrame:
    """Validate an external wide table and bring it to raw-table form.

    Parameters
    ----------
    table : pd.DataFrame
        Identity columns plus one count column per sample
    drop_columns : Sequence[str], optional
        Extra annotation columns to discard before validation

    Returns
    -------
    pd.DataFrame
        Canonical wide table with integer counts and unique identities

    Raises
    ------
    ValidationError
        On missing identity columns, no sample columns, or counts that
        are not finite non-negative integers
    """
    if drop_columns:
        table = table.drop(columns=list(drop_columns), errors="ignore")

    missing = [c for c in IDENTITY_COLUMNS if c not in table.columns]
    if missing:
        raise ValidationError(f"External table missing identity columns: {missing}")

    samples = sample_columns(table)
    if not samples:
        raise ValidationError("External table has no sample count columns")

    out = normalize_identity_columns(check_counts(table[IDENTITY_COLUMNS + samples]))
    return collapse_duplicates(out)


def from_external_tool_table(
    table: pd.DataFrame,
    coldata: pd.DataFrame,
    drop_columns: Optional[Sequence[str]] = None,
    **kwargs: Any,
) -> BuildResult:
    """Build a count matrix from an external annotator's wide table.

    Parameters
    ----------
    table : pd.DataFrame
        mirtop ``export --format isomir`` style table
    coldata : pd.DataFrame
        Sample descriptor table indexed by sample id
    drop_columns : Sequence[str], optional
        Extra annotation columns to discard
    **kwargs
        Forwarded to :func:`from_raw_table`
    """
    raw = check_external_table(table, drop_columns=drop_columns)
    return from_raw_table(raw, coldata, **kwargs)


def rebuild_from_sample_tables(
    tables: Mapping[str, pd.DataFrame],
    coldata: pd.DataFrame,
    **kwargs: Any,
) -> BuildResult:
    """Build a count matrix from already-parsed per-sample record tables.

    Upgrades results stored as one record table per sample (identity
    columns + ``freq``) to the wide-table layout.

    Parameters
    ----------
    tables : Mapping[str, pd.DataFrame]
        Map of sample_id to records
    coldata : pd.DataFrame
        Sample descriptor table indexed by sample id
    **kwargs
        Forwarded to :func:`from_raw_table`
    """
    records = {}
    for sample_id, table in tables.items():
        missing = [c for c in RECORD_COLUMNS if c not in table.columns]
        if missing:
            raise ValidationError(
                f"Records for sample '{sample_id}' missing columns: {missing}"
            )
        table = normalize_identity_columns(table[RECORD_COLUMNS])
        table[FREQ_COL] = pd.to_numeric(table[FREQ_COL], errors="coerce")
        records[str(sample_id)] = table.loc[table[FREQ_COL] > 0]

    raw = aggregate_samples(records)
    return from_raw_table(raw, coldata, **kwargs)
