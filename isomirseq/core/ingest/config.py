"""Configuration classes for isomiR ingestion stages.

All ingestion parameters are configurable via YAML so that the same
filtering settings can be reused across runs and re-filtering passes.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml


# Column order written by miraligner / seqbuster for *.mirna files
MIRALIGNER_COLUMNS = [
    "seq",
    "name",
    "freq",
    "mir",
    "start",
    "end",
    "mism",
    "add",
    "t5",
    "t3",
    "s5",
    "s3",
    "DB",
    "precursor",
    "ambiguity",
]


@dataclass
class LoaderConfig:
    """Configuration for reading per-sample annotation files.

    Attributes
    ----------
    header : bool
        Whether files carry a header line. When False, ``skip`` is forced
        to 1 and columns are named positionally from ``columns``.
    skip : int
        Number of leading lines to skip before the table starts
    columns : List[str]
        Positional column names used when ``header`` is False
    freq_position : int
        Zero-based position of the read count column
    mirna_db_only : bool
        Keep only rows annotated against the miRNA database when a
        ``DB`` column is present
    db_col : str
        Name of the annotation database column
    """

    header: bool = True
    skip: int = 0
    columns: List[str] = field(default_factory=lambda: list(MIRALIGNER_COLUMNS))
    freq_position: int = 2
    mirna_db_only: bool = True
    db_col: str = "DB"

    @property
    def effective_skip(self) -> int:
        """Lines skipped before parsing; header-less files always skip one."""
        return 1 if not self.header else self.skip


@dataclass
class SampleFilterConfig:
    """Configuration for per-sample filtering.

    Attributes
    ----------
    rate : float
        Minimum share of a mismatch record within its miRNA in the sample.
        0 disables the rule (the default when filtering is deferred to the
        cross-sample noise cleaner).
    canonical_add : bool
        Keep only A/T non-templated additions; others are cleared
    unique_mism : bool
        Drop mismatch records whose sequence maps to more than one miRNA
    unique_hits : bool
        Drop every record whose sequence maps to more than one miRNA
    min_hits : int
        Minimum number of distinct isomiRs a sample must keep
    min_rows : int
        Minimum number of rows with positive counts before filtering
    """

    rate: float = 0.0
    canonical_add: bool = True
    unique_mism: bool = True
    unique_hits: bool = False
    min_hits: int = 1
    min_rows: int = 2


@dataclass
class NoiseConfig:
    """Configuration for the cross-sample noise cleaner.

    Attributes
    ----------
    pct : float
        Minimum share of an isomiR within its miRNA, in at least one sample
    whitelist : List[str]
        Sequences that are never removed
    """

    pct: float = 0.1
    whitelist: List[str] = field(default_factory=list)


@dataclass
class SNVConfig:
    """Configuration for the substitution cap.

    Attributes
    ----------
    n_snv : int, optional
        Maximum number of substitutions per isomiR (None disables the cap)
    """

    n_snv: Optional[int] = 1


@dataclass
class MatrixConfig:
    """Configuration for count matrix assembly.

    Attributes
    ----------
    include_missing : bool
        Add all-zero columns for described samples absent from the table
    design : str
        Model formula carried along for downstream analysis
    """

    include_missing: bool = False
    design: str = "~1"


@dataclass
class IngestConfig:
    """Master configuration for the ingestion pipeline.

    Attributes
    ----------
    loader : LoaderConfig
        File reading configuration
    sample_filter : SampleFilterConfig
        Per-sample filter configuration
    noise : NoiseConfig
        Noise cleaner configuration
    snv : SNVConfig
        Substitution cap configuration
    matrix : MatrixConfig
        Matrix builder configuration
    n_jobs : int
        Parallel workers for per-sample reading and filtering
    """

    loader: LoaderConfig = field(default_factory=LoaderConfig)
    sample_filter: SampleFilterConfig = field(default_factory=SampleFilterConfig)
    noise: NoiseConfig = field(default_factory=NoiseConfig)
    snv: SNVConfig = field(default_factory=SNVConfig)
    matrix: MatrixConfig = field(default_factory=MatrixConfig)
    n_jobs: int = 1

    @classmethod
    def from_yaml(cls, path: Path) -> "IngestConfig":
        """Load configuration from YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}

        # Handle nested ingest section
        if "ingest" in data:
            data = data["ingest"]

        return cls(
            loader=LoaderConfig(**data.get("loader", {})),
            sample_filter=SampleFilterConfig(**data.get("sample_filter", {})),
            noise=NoiseConfig(**data.get("noise", {})),
            snv=SNVConfig(**data.get("snv", {})),
            matrix=MatrixConfig(**data.get("matrix", {})),
            n_jobs=data.get("n_jobs", 1),
        )

    @classmethod
    def default(cls) -> "IngestConfig":
        """Create default configuration."""
        return cls()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "loader": {
                "header": self.loader.header,
                "skip": self.loader.skip,
                "freq_position": self.loader.freq_position,
                "mirna_db_only": self.loader.mirna_db_only,
            },
            "sample_filter": {
                "rate": self.sample_filter.rate,
                "canonical_add": self.sample_filter.canonical_add,
                "unique_mism": self.sample_filter.unique_mism,
                "unique_hits": self.sample_filter.unique_hits,
                "min_hits": self.sample_filter.min_hits,
                "min_rows": self.sample_filter.min_rows,
            },
            "noise": {
                "pct": self.noise.pct,
                "whitelist": list(self.noise.whitelist),
            },
            "snv": {
                "n_snv": self.snv.n_snv,
            },
            "matrix": {
                "include_missing": self.matrix.include_missing,
                "design": self.matrix.design,
            },
            "n_jobs": self.n_jobs,
        }
