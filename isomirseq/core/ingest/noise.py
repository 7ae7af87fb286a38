"""Noise cleaning of the wide isomiR table.

An isomiR's importance in a sample is its share of the reads of its
miRNA in that sample. Rows that never reach ``pct`` importance in any
sample where they were observed are removed, unless their sequence is
whitelisted.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

import numpy as np
import pandas as pd

from .aggregation import split_raw_table

logger = logging.getLogger(__name__)


def compute_importance(raw: pd.DataFrame) -> pd.DataFrame:
    """Per-sample share of each row within its miRNA group.

    Parameters
    ----------
    raw : pd.DataFrame
        Wide isomiR table

    Returns
    -------
    pd.DataFrame
        Rows x samples share table; 0 where the group total is 0
    """
    identity, counts = split_raw_table(raw)
    counts = counts.astype(float)
    totals = counts.groupby(identity["mir"].to_numpy()).transform("sum")
    totals.index = counts.index
    share = counts.to_numpy() / np.where(totals.to_numpy() > 0, totals.to_numpy(), np.nan)
    return pd.DataFrame(
        np.nan_to_num(share, nan=0.0), index=counts.index, columns=counts.columns
    )


def clean_noise(
    raw: pd.DataFrame,
    pct: float = 0.1,
    whitelist: Optional[Iterable[str]] = None,
) -> pd.DataFrame:
    """Remove isomiRs whose importance never reaches ``pct``.

    A row is kept when, in at least one sample with a nonzero count, its
    share of the miRNA's reads is at least ``pct``, or when its sequence
    is in ``whitelist``.

    Parameters
    ----------
    raw : pd.DataFrame
        Wide isomiR table
    pct : float
        Minimum importance (fraction, 0-1)
    whitelist : Iterable[str], optional
        Sequences that are always kept

    Returns
    -------
    pd.DataFrame
        Filtered copy of ``raw`` with a fresh index
    """
    _, counts = split_raw_table(raw)
    share = compute_importance(raw)

    important = ((share >= pct) & (counts > 0)).any(axis=1)
    keep = important
    if whitelist is not None:
        keep = keep | raw["seq"].isin(set(list(whitelist)))

    n_removed = int((~keep).sum())
    logger.info("Noise cleaner (pct=%s) removed %d of %d isomiRs",
                pct, n_removed, len(raw))
    return raw.loc[keep].reset_index(drop=True)
