"""isomirseq: isomiR count matrices from per-sample small-RNA annotation.

This package provides tools for:
- Parsing per-sample isomiR annotation tables (miraligner/seqbuster style)
- Per-sample canonicalization and ambiguity filtering
- Cross-sample aggregation into a wide isomiR-by-sample table
- Noise and substitution filtering of that table
- Building a validated count matrix for downstream analysis

Example usage:
    >>> import pandas as pd
    >>> from isomirseq.core.ingest import from_files, from_raw_table
    >>>
    >>> coldata = pd.DataFrame({"condition": ["ctrl", "treated"]},
    ...                        index=["s1", "s2"])
    >>> counts, raw = from_files(["s1.mirna", "s2.mirna"], coldata)
    >>>
    >>> # Re-filter a previously produced wide table
    >>> counts, raw = from_raw_table(raw, coldata, pct=0.2, n_snv=0)
"""

__version__ = "0.1.0"
