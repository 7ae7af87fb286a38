"""Command-line interface for isomirseq.

Example Usage
-------------
    isomirseq --help
    isomirseq build --coldata samples.csv --out out/ s1.mirna s2.mirna
    isomirseq refilter --raw out/raw_data.tsv --coldata samples.csv --out strict/
"""

from .main import cli, main

__all__ = [
    "cli",
    "main",
]
