"""Cross-sample aggregation into the wide isomiR table.

Merges every sample's filtered records into one long table keyed by
(variant key, sample), sums duplicates, and pivots to one row per isomiR
and one column per sample. Absent observations are filled with zero.

The wide table (identity columns followed by sample columns) is the
canonical intermediate artifact; it can be fed back into
:func:`isomirseq.core.ingest.engine.from_raw_table` for re-filtering.
"""

from __future__ import annotations

import logging
from typing import List, Mapping, Tuple

import pandas as pd

from .codec import IDENTITY_COLUMNS, UID_COL, decode_keys, encode_keys
from .errors import EmptyAggregationError
from .loader import FREQ_COL

logger = logging.getLogger(__name__)

SAMPLE_COL = "sample"


def to_long(records: pd.DataFrame, sample_id: str) -> pd.DataFrame:
    """Key one sample's records as (uid, freq, sample)."""
    return pd.DataFrame({
        UID_COL: encode_keys(records).to_numpy(),
        FREQ_COL: records[FREQ_COL].to_numpy(),
        SAMPLE_COL: sample_id,
    })


def aggregate_samples(records_by_sample: Mapping[str, pd.DataFrame]) -> pd.DataFrame:
    """Build the wide isomiR-by-sample table.

    Parameters
    ----------
    records_by_sample : Mapping[str, pd.DataFrame]
        Map of sample_id to filtered records (identity columns + freq)

    Returns
    -------
    pd.DataFrame
        Identity columns followed by one integer column per sample,
        sorted by variant key

    Raises
    ------
    EmptyAggregationError
        If no rows result
    """
    long_tables: List[pd.DataFrame] = [
        to_long(records, sample_id)
        for sample_id, records in records_by_sample.items()
        if records is not None and not records.empty
    ]
    if not long_tables:
        raise EmptyAggregationError("No samples had valid miRNA hits.")

    long_df = pd.concat(long_tables, ignore_index=True)
    summed = long_df.groupby([UID_COL, SAMPLE_COL], sort=False)[FREQ_COL].sum()
    wide = summed.unstack(SAMPLE_COL, fill_value=0).sort_index()
    wide = wide.reindex(columns=sorted(wide.columns)).astype("int64")
    wide.columns.name = None

    if wide.empty:
        raise EmptyAggregationError("No samples had valid miRNA hits.")

    identity = decode_keys(pd.Series(wide.index, index=wide.index))
    raw = pd.concat([identity, wide], axis=1).reset_index(drop=True)

    logger.info("Aggregated %d isomiRs across %d samples",
                len(raw), wide.shape[1])
    return raw


def sample_columns(raw: pd.DataFrame) -> List[str]:
    """Sample columns of a wide table (everything but identity columns)."""
    return [c for c in raw.columns if c not in IDENTITY_COLUMNS and c != UID_COL]


def split_raw_table(raw: pd.DataFrame) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """Split a wide table into (identity, counts) frames sharing its index."""
    missing = [c for c in IDENTITY_COLUMNS if c not in raw.columns]
    if missing:
        raise ValueError(f"Raw table missing identity columns: {missing}")
    return raw[IDENTITY_COLUMNS], raw[sample_columns(raw)]


def collapse_duplicates(raw: pd.DataFrame) -> pd.DataFrame:
    """Sum rows whose identity tuples coincide, keeping first-seen order."""
    identity, counts = split_raw_table(raw)
    if not identity.duplicated().any():
        return raw.reset_index(drop=True)

    collapsed = (
        pd.concat([identity, counts], axis=1)
        .groupby(IDENTITY_COLUMNS, sort=False, dropna=False)[list(counts.columns)]
        .sum()
        .reset_index()
    )
    logger.info("Collapsed %d duplicate isomiR rows", len(raw) - len(collapsed))
    return collapsed
