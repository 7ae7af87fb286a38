"""isomiR ingestion: from per-sample annotation to a count matrix.

Pipeline Stages
---------------
- Loader: read per-sample annotation files into canonical records
- Sample filter: canonical additions and ambiguous-mapping removal
- Aggregation: merge samples into the wide isomiR-by-sample table
- Noise cleaner: drop isomiRs with negligible importance in every sample
- SNV cap: drop isomiRs with too many substitutions
- Matrix builder: validated count matrix with row annotation

Example Usage
-------------
>>> import pandas as pd
>>> from isomirseq.core.ingest import from_files, from_raw_table
>>> coldata = pd.DataFrame({"condition": ["a", "b"]}, index=["s1", "s2"])
>>> counts, raw = from_files(["s1.mirna", "s2.mirna"], coldata)
>>> counts.counts.head()
>>> # Stricter re-filtering of the same wide table
>>> counts, raw = from_raw_table(raw, coldata, pct=0.3, n_snv=0)
"""

__version__ = "0.1.0"

# Errors
from .errors import (
    IsomirError,
    EncodingError,
    DecodingError,
    NoValidSamplesError,
    EmptyAggregationError,
    ShapeMismatchError,
    ValidationError,
)

# Configuration classes
from .config import (
    LoaderConfig,
    SampleFilterConfig,
    NoiseConfig,
    SNVConfig,
    MatrixConfig,
    IngestConfig,
    MIRALIGNER_COLUMNS,
)

# Variant key codec
from .codec import (
    IsomirIdentity,
    Mismatch,
    IDENTITY_COLUMNS,
    KEY_SEPARATOR,
    encode_key,
    decode_key,
    encode_keys,
    decode_keys,
    parse_mismatches,
    count_mismatches,
    canonical_identity,
)

# Loading and per-sample filtering
from .loader import (
    SampleLoader,
    LoadResult,
)
from .sample_filter import (
    SampleFilter,
    SampleFilterResult,
    SampleFilterSummary,
    REASON_COLUMNS,
)
from .parallel import (
    SampleOutcome,
    load_and_filter_samples,
)

# Cross-sample stages
from .aggregation import (
    aggregate_samples,
    sample_columns,
    split_raw_table,
    collapse_duplicates,
)
from .noise import (
    clean_noise,
    compute_importance,
)
from .snv import remove_excess_snv
from .naming import (
    make_isomir_naming,
    NAMING_COLUMNS,
)
from .matrix import (
    CountMatrix,
    build_count_matrix,
    collapse_counts,
)

# Entry points
from .engine import (
    BuildResult,
    from_files,
    from_config,
    from_raw_table,
    from_external_tool_table,
    check_counts,
    check_external_table,
    rebuild_from_sample_tables,
)

__all__ = [
    # Version
    "__version__",
    # Errors
    "IsomirError",
    "EncodingError",
    "DecodingError",
    "NoValidSamplesError",
    "EmptyAggregationError",
    "ShapeMismatchError",
    "ValidationError",
    # Config
    "LoaderConfig",
    "SampleFilterConfig",
    "NoiseConfig",
    "SNVConfig",
    "MatrixConfig",
    "IngestConfig",
    "MIRALIGNER_COLUMNS",
    # Codec
    "IsomirIdentity",
    "Mismatch",
    "IDENTITY_COLUMNS",
    "KEY_SEPARATOR",
    "encode_key",
    "decode_key",
    "encode_keys",
    "decode_keys",
    "parse_mismatches",
    "count_mismatches",
    "canonical_identity",
    # Loading and per-sample filtering
    "SampleLoader",
    "LoadResult",
    "SampleFilter",
    "SampleFilterResult",
    "SampleFilterSummary",
    "REASON_COLUMNS",
    "SampleOutcome",
    "load_and_filter_samples",
    # Cross-sample stages
    "aggregate_samples",
    "sample_columns",
    "split_raw_table",
    "collapse_duplicates",
    "clean_noise",
    "compute_importance",
    "remove_excess_snv",
    "make_isomir_naming",
    "NAMING_COLUMNS",
    "CountMatrix",
    "build_count_matrix",
    "collapse_counts",
    # Entry points
    "BuildResult",
    "from_files",
    "from_config",
    "from_raw_table",
    "from_external_tool_table",
    "check_counts",
    "check_external_table",
    "rebuild_from_sample_tables",
]
