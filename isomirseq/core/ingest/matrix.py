"""Count matrix assembly and the isomiR count container.

Converts a filtered wide isomiR table plus a sample descriptor table
(coldata) into a numeric isomiR-by-sample count matrix with row-level
annotation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd

from .aggregation import split_raw_table
from .codec import UID_COL
from .errors import ShapeMismatchError, ValidationError
from .naming import make_isomir_naming
from .sample_filter import SampleFilterSummary

logger = logging.getLogger(__name__)


@dataclass
class CountMatrix:
    """isomiR count matrix with sample and row annotation.

    Attributes
    ----------
    counts : pd.DataFrame
        isomiRs x samples integer counts, indexed by variant key
    row_data : pd.DataFrame
        Identity and naming columns, indexed by variant key
    coldata : pd.DataFrame
        Sample descriptor table, one row per column of ``counts``
    raw_data : pd.DataFrame
        Filtered wide table the matrix was built from
    design : str
        Model formula for downstream analysis
    summary : SampleFilterSummary, optional
        Samples skipped while building from files
    """

    counts: pd.DataFrame
    row_data: Optional[pd.DataFrame]
    coldata: pd.DataFrame
    raw_data: Optional[pd.DataFrame] = None
    design: str = "~1"
    summary: Optional[SampleFilterSummary] = None

    @property
    def shape(self):
        return self.counts.shape

    @property
    def sample_ids(self) -> List[str]:
        return list(self.counts.columns)

    def validate(self) -> "CountMatrix":
        """Check the matrix can be handed to downstream analysis.

        Raises
        ------
        ValidationError
            On non-numeric, missing or negative counts, missing row
            annotation, or missing raw table
        """
        counts = self.counts
        non_numeric = [
            c for c in counts.columns
            if not pd.api.types.is_numeric_dtype(counts[c])
            or pd.api.types.is_bool_dtype(counts[c])
        ]
        if non_numeric:
            raise ValidationError(f"the count data is not numeric: {non_numeric}")
        if counts.isna().to_numpy().any():
            raise ValidationError("NA values are not allowed in the count matrix")
        if (counts.to_numpy() < 0).any():
            raise ValidationError("the count data contains negative values")
        if counts.index.duplicated().any():
            raise ValidationError("duplicated isomiR identifiers in the count matrix")
        if self.row_data is None:
            raise ValidationError("row annotation is missing")
        if not self.row_data.index.equals(counts.index):
            raise ValidationError("row annotation does not match count matrix rows")
        if list(self.coldata.index) != list(counts.columns):
            raise ValidationError("sample table rows do not match count matrix columns")
        if self.raw_data is None:
            raise ValidationError("raw isomiR table is missing")
        return self

    def to_anndata(self) -> Any:
        """Convert to AnnData (samples x isomiRs).

        ``obs`` holds coldata, ``var`` holds row annotation and the raw
        wide table is stored under ``uns['raw_data']``.
        """
        try:
            import anndata as ad
        except ImportError:
            raise RuntimeError(
                "AnnData export requires anndata. "
                "Install with: pip install anndata"
            )

        adata = ad.AnnData(
            X=self.counts.T.to_numpy(dtype=np.float32),
            obs=self.coldata.copy(),
            var=self.row_data.copy() if self.row_data is not None else None,
        )
        adata.uns["design"] = self.design
        if self.raw_data is not None:
            adata.uns["raw_data"] = self.raw_data.copy()
        if self.summary is not None:
            adata.uns["filter_summary"] = self.summary.to_dict()
        return adata

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for reporting."""
        result = {
            "n_isomirs": int(self.counts.shape[0]),
            "n_samples": int(self.counts.shape[1]),
            "n_mirnas": int(self.row_data["mir"].nunique()) if self.row_data is not None else 0,
            "total_reads": int(self.counts.to_numpy().sum()),
            "design": self.design,
        }
        if self.summary is not None:
            result["samples"] = self.summary.to_dict()
        return result


def _coldata_ids(coldata: pd.DataFrame) -> List[str]:
    return [str(s) for s in coldata.index]


def build_count_matrix(
    raw: pd.DataFrame,
    coldata: pd.DataFrame,
    include_missing: bool = False,
    design: str = "~1",
    summary: Optional[SampleFilterSummary] = None,
) -> CountMatrix:
    """Build the count matrix from a filtered wide table.

    Parameters
    ----------
    raw : pd.DataFrame
        Filtered wide isomiR table
    coldata : pd.DataFrame
        Sample descriptor table indexed by sample id
    include_missing : bool
        Add all-zero columns for coldata samples absent from ``raw``;
        otherwise they are dropped from the matrix and coldata
    design : str
        Model formula carried along for downstream analysis
    summary : SampleFilterSummary, optional
        Skipped-sample summary to attach

    Returns
    -------
    CountMatrix
        Matrix with columns in coldata order

    Raises
    ------
    ShapeMismatchError
        If the table has samples that coldata does not describe, or the
        two share no sample
    """
    coldata = coldata.copy()
    coldata.index = pd.Index(_coldata_ids(coldata), name=coldata.index.name)

    identity, counts = split_raw_table(raw)
    table_ids = [str(c) for c in counts.columns]
    counts.columns = table_ids

    undescribed = sorted(set(table_ids) - set(coldata.index))
    if undescribed:
        raise ShapeMismatchError(
            f"Samples in the isomiR table are missing from coldata: {undescribed}"
        )

    absent = [s for s in coldata.index if s not in set(table_ids)]
    if absent:
        if include_missing:
            logger.info("Adding %d all-zero sample columns: %s", len(absent), absent)
        else:
            logger.warning("Samples without isomiR data dropped from the matrix: %s",
                           absent)
            coldata = coldata.loc[[s for s in coldata.index if s not in set(absent)]]

    if len(coldata.index) == 0:
        raise ShapeMismatchError("The isomiR table and coldata share no sample")

    row_data = make_isomir_naming(identity)
    matrix = counts.reindex(columns=list(coldata.index), fill_value=0)
    matrix.index = row_data.index
    matrix.index.name = UID_COL

    return CountMatrix(
        counts=matrix,
        row_data=row_data,
        coldata=coldata,
        raw_data=raw,
        design=design,
        summary=summary,
    )


def collapse_counts(matrix: CountMatrix, by: str = "mir") -> pd.DataFrame:
    """Sum isomiR rows sharing a row annotation value.

    Parameters
    ----------
    matrix : CountMatrix
        isomiR count matrix
    by : str
        ``row_data`` column to group by (``mir`` gives miRNA-level counts)

    Returns
    -------
    pd.DataFrame
        Grouped counts, one row per distinct value of ``by``
    """
    if matrix.row_data is None or by not in matrix.row_data.columns:
        raise KeyError(f"Row annotation column '{by}' not found")
    return matrix.counts.groupby(matrix.row_data[by]).sum()
