"""Parallel per-sample loading and filtering.

Every sample is read and filtered independently, so samples are fanned
out to joblib workers. Results come back in input order and are merged
only after every sample has finished.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import pandas as pd
from joblib import Parallel, delayed

from .errors import NoValidSamplesError, ShapeMismatchError
from .loader import LoadResult, SampleLoader
from .sample_filter import (
    STATUS_FAILED,
    SampleFilter,
    SampleFilterResult,
    SampleFilterSummary,
)

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


@dataclass
class SampleOutcome:
    """Load and filter results for one sample."""

    sample_id: str
    load: LoadResult
    filtered: Optional[SampleFilterResult] = None

    @property
    def kept(self) -> bool:
        return self.filtered is not None and self.filtered.kept

    @property
    def status(self) -> str:
        if self.filtered is None:
            return STATUS_FAILED
        return self.filtered.status

    @property
    def reason(self) -> str:
        if self.filtered is None:
            return ";".join(self.load.issues) or "read_error"
        return self.filtered.skip_reason

    @property
    def records(self) -> Optional[pd.DataFrame]:
        return self.filtered.records if self.filtered is not None else None

    def to_dict(self) -> Dict[str, Any]:
        """Combined load and filter report."""
        report = self.load.to_dict()
        if self.filtered is not None:
            report.update(self.filtered.to_dict())
        else:
            report["skip_reason"] = self.reason
        return report


def process_sample(
    path: PathLike,
    sample_id: str,
    loader: SampleLoader,
    sample_filter: SampleFilter,
) -> SampleOutcome:
    """Read and filter a single sample.

    This function is designed to be called in parallel. Per-file problems
    are reported on the outcome, never raised.
    """
    load = loader.read_sample(path, sample_id)
    outcome = SampleOutcome(sample_id=sample_id, load=load)
    if load.records is not None:
        outcome.filtered = sample_filter.filter_sample(load.records, sample_id)
    return outcome


def load_and_filter_samples(
    files: Sequence[PathLike],
    sample_ids: Sequence[str],
    loader: Optional[SampleLoader] = None,
    sample_filter: Optional[SampleFilter] = None,
    n_jobs: int = 1,
) -> Tuple[List[SampleOutcome], SampleFilterSummary]:
    """Load and filter every sample, collecting failures.

    Parameters
    ----------
    files : Sequence[PathLike]
        One annotation file per sample
    sample_ids : Sequence[str]
        Sample identifiers, positionally matched to ``files``
    loader : SampleLoader, optional
        File loader (default configuration if None)
    sample_filter : SampleFilter, optional
        Per-sample filter (default configuration if None)
    n_jobs : int
        Number of parallel jobs; 1 runs in-process

    Returns
    -------
    Tuple[List[SampleOutcome], SampleFilterSummary]
        Outcomes of the kept samples in input order, and the summary of
        skipped samples

    Raises
    ------
    ShapeMismatchError
        If files and sample ids differ in length
    NoValidSamplesError
        If every sample was dropped
    """
    if len(files) != len(sample_ids):
        raise ShapeMismatchError(
            f"Got {len(files)} files for {len(sample_ids)} sample ids"
        )

    loader = loader or SampleLoader()
    sample_filter = sample_filter or SampleFilter()

    if n_jobs == 1 or len(files) <= 1:
        outcomes = [
            process_sample(path, sample_id, loader, sample_filter)
            for path, sample_id in zip(files, sample_ids)
        ]
    else:
        outcomes = Parallel(n_jobs=n_jobs, verbose=0)(
            delayed(process_sample)(path, sample_id, loader, sample_filter)
            for path, sample_id in zip(files, sample_ids)
        )

    summary = SampleFilterSummary()
    kept: List[SampleOutcome] = []
    for outcome in outcomes:
        summary.reports.append(outcome.to_dict())
        if outcome.kept:
            kept.append(outcome)
        else:
            summary.add_skipped(outcome.sample_id, outcome.reason)
            logger.warning("Sample %s dropped (%s): %s",
                           outcome.sample_id, outcome.status, outcome.reason)
    summary.n_kept = len(kept)

    logger.info("Total samples filtered due to low number of hits or read errors: %d (%s)",
                summary.n_filtered, ", ".join(summary.skipped_ids) or "none")

    if not kept:
        raise NoValidSamplesError(
            f"No samples had valid miRNA hits ({summary.n_filtered} dropped)"
        )
    return kept, summary
