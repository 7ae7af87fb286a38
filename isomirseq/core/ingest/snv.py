"""Substitution cap for the wide isomiR table."""

from __future__ import annotations

import logging
from typing import Optional

import pandas as pd

from .codec import count_mismatches

logger = logging.getLogger(__name__)


def remove_excess_snv(raw: pd.DataFrame, n_snv: Optional[int] = 1) -> pd.DataFrame:
    """Drop isomiRs with more than ``n_snv`` substitutions.

    Only the mismatch list counts; trimming and additions do not.

    Parameters
    ----------
    raw : pd.DataFrame
        Wide isomiR table
    n_snv : int, optional
        Maximum substitutions per isomiR; None keeps every row

    Returns
    -------
    pd.DataFrame
        Filtered copy of ``raw`` with a fresh index
    """
    if n_snv is None:
        return raw.reset_index(drop=True)

    n_changes = raw["mism"].map(count_mismatches)
    keep = n_changes <= n_snv
    logger.info("SNV cap (n_snv=%d) removed %d of %d isomiRs",
                n_snv, int((~keep).sum()), len(raw))
    return raw.loc[keep].reset_index(drop=True)
