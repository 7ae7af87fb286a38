"""Per-sample isomiR filtering.

Applies canonicalization and ambiguity rules to a single sample's
records before they are merged with other samples. Rules run in a fixed
order:

1. canonical addition: non-templated additions containing C/G are cleared
2. unique mismatch: mismatch records of multi-mapping sequences are dropped
3. unique hits: every record of a multi-mapping sequence is dropped
4. rate: mismatch records below ``rate`` of their miRNA are dropped
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from .codec import IDENTITY_COLUMNS
from .config import SampleFilterConfig
from .loader import FREQ_COL

logger = logging.getLogger(__name__)

# Reason columns for tracking removal causes
REASON_COLUMNS = [
    "non_canonical_add",
    "ambiguous_mismatch",
    "ambiguous_hit",
    "low_rate_mismatch",
]

CANONICAL_ADD_NTS = frozenset("AT")

STATUS_OK = "OK"
STATUS_SKIPPED = "SKIPPED"
STATUS_FAILED = "FAILED"


@dataclass
class SampleFilterResult:
    """Result from filtering a single sample.

    Attributes
    ----------
    sample_id : str
        Sample identifier
    records_total : int
        Records before filtering
    records_kept : int
        Records after filtering
    n_isomirs : int
        Distinct identity tuples after filtering
    reason_counts : Dict[str, int]
        Records affected per rule
    records : pd.DataFrame
        Filtered records
    status : str
        'OK' or 'SKIPPED'
    skip_reason : str
        Why the sample was skipped
    """

    sample_id: str
    records_total: int = 0
    records_kept: int = 0
    n_isomirs: int = 0
    reason_counts: Dict[str, int] = field(default_factory=dict)
    records: Optional[pd.DataFrame] = None
    status: str = STATUS_OK
    skip_reason: str = ""

    @property
    def kept(self) -> bool:
        return self.status == STATUS_OK

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for reporting."""
        result = {
            "sample_id": self.sample_id,
            "records_total": self.records_total,
            "records_kept": self.records_kept,
            "n_isomirs": self.n_isomirs,
            "status": self.status,
            "skip_reason": self.skip_reason,
        }
        for reason in REASON_COLUMNS:
            result[f"affected_{reason}"] = self.reason_counts.get(reason, 0)
        return result


@dataclass
class SampleFilterSummary:
    """Samples dropped during loading and per-sample filtering.

    Attributes
    ----------
    n_kept : int
        Samples that reached aggregation
    skipped : List[Tuple[str, str]]
        (sample_id, reason) for every dropped sample
    reports : List[Dict[str, Any]]
        Load and filter report of every sample, kept or not, in input order
    """

    n_kept: int = 0
    skipped: List[Tuple[str, str]] = field(default_factory=list)
    reports: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def n_filtered(self) -> int:
        return len(self.skipped)

    @property
    def skipped_ids(self) -> List[str]:
        return [sample_id for sample_id, _ in self.skipped]

    def add_skipped(self, sample_id: str, reason: str) -> None:
        self.skipped.append((sample_id, reason))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "n_kept": self.n_kept,
            "n_filtered": self.n_filtered,
            "skipped": [
                {"sample_id": sample_id, "reason": reason}
                for sample_id, reason in self.skipped
            ],
        }


def _multi_mapping_sequences(records: pd.DataFrame) -> pd.Index:
    n_mirs = records.groupby("seq")["mir"].nunique()
    return n_mirs.index[n_mirs > 1]


class SampleFilter:
    """Per-sample record filter.

    Parameters
    ----------
    config : SampleFilterConfig
        Filter configuration

    Example
    -------
    >>> from isomirseq.core.ingest import SampleFilter, SampleFilterConfig
    >>> sf = SampleFilter(SampleFilterConfig(unique_hits=True))
    >>> result = sf.filter_sample(records, "sample_01")
    >>> result.kept
    True
    """

    def __init__(self, config: Optional[SampleFilterConfig] = None):
        self.config = config or SampleFilterConfig()

    def canonicalize_additions(self, records: pd.DataFrame) -> Tuple[pd.DataFrame, int]:
        """Clear additions that are not made only of A/T nucleotides."""
        add = records["add"].astype(str)
        non_canonical = add.map(
            lambda nts: bool(nts) and not set(nts.upper()) <= CANONICAL_ADD_NTS
        )
        n_changed = int(non_canonical.sum())
        if n_changed:
            records = records.copy()
            records.loc[non_canonical, "add"] = ""
        return records, n_changed

    def remove_ambiguous_mismatches(self, records: pd.DataFrame) -> Tuple[pd.DataFrame, int]:
        """Drop mismatch records whose sequence maps to several miRNAs."""
        ambiguous = records["seq"].isin(_multi_mapping_sequences(records))
        drop = ambiguous & (records["mism"] != "")
        return records.loc[~drop], int(drop.sum())

    def remove_ambiguous_hits(self, records: pd.DataFrame) -> Tuple[pd.DataFrame, int]:
        """Drop every record whose sequence maps to several miRNAs."""
        drop = records["seq"].isin(_multi_mapping_sequences(records))
        return records.loc[~drop], int(drop.sum())

    def remove_low_rate_mismatches(
        self, records: pd.DataFrame, rate: float
    ) -> Tuple[pd.DataFrame, int]:
        """Drop mismatch records below ``rate`` of their miRNA's reads."""
        totals = records.groupby("mir")[FREQ_COL].transform("sum")
        share = records[FREQ_COL] / totals.where(totals > 0)
        drop = (records["mism"] != "") & (share.fillna(0.0) < rate)
        return records.loc[~drop], int(drop.sum())

    def filter_sample(self, records: pd.DataFrame, sample_id: str) -> SampleFilterResult:
        """Filter one sample's records.

        Parameters
        ----------
        records : pd.DataFrame
            Canonical records (identity columns + freq) with positive counts
        sample_id : str
            Sample identifier

        Returns
        -------
        SampleFilterResult
            Filtering result; ``status`` is 'SKIPPED' when the sample has
            too few rows or too few isomiRs left
        """
        cfg = self.config
        result = SampleFilterResult(sample_id=sample_id)
        result.records_total = len(records)

        if len(records) < cfg.min_rows:
            result.status = STATUS_SKIPPED
            result.skip_reason = "too_few_rows"
            logger.info("Skipping sample %s: only %d rows with reads",
                        sample_id, len(records))
            return result

        if cfg.canonical_add:
            records, n = self.canonicalize_additions(records)
            result.reason_counts["non_canonical_add"] = n

        if cfg.unique_mism:
            records, n = self.remove_ambiguous_mismatches(records)
            result.reason_counts["ambiguous_mismatch"] = n

        if cfg.unique_hits:
            records, n = self.remove_ambiguous_hits(records)
            result.reason_counts["ambiguous_hit"] = n

        if cfg.rate > 0:
            records, n = self.remove_low_rate_mismatches(records, cfg.rate)
            result.reason_counts["low_rate_mismatch"] = n

        records = records.reset_index(drop=True)
        result.records_kept = len(records)
        result.n_isomirs = int(len(records.drop_duplicates(subset=IDENTITY_COLUMNS)))

        if result.n_isomirs < cfg.min_hits:
            result.status = STATUS_SKIPPED
            result.skip_reason = "below_min_hits"
            logger.info("Skipping sample %s: %d isomiRs left (min_hits=%d)",
                        sample_id, result.n_isomirs, cfg.min_hits)
            return result

        result.records = records
        return result
