"""Readable isomiR names and per-type annotation columns.

Each isomiR is described by the type of change at every position:

- ``iso_5p`` / ``iso_3p``: trimming tag, ``0`` for the reference end
- ``iso_add``: non-templated 3' nucleotides, ``0`` if none
- ``iso_snv``: substitutions, ``0`` if none
- ``iso_snv_seed``: substitutions between nucleotides 2 and 8

The ``isomir`` column joins these into a single name such as
``hsa-miR-21-5p;iso;iso_5p:0;iso_3p:ag;iso_add:A;iso_snv:0``.
"""

from __future__ import annotations

import pandas as pd

from .codec import NO_CHANGE, IDENTITY_COLUMNS, UID_COL, encode_keys, parse_mismatches

NAMING_COLUMNS = [
    "isomir",
    "is_ref",
    "iso_5p",
    "iso_3p",
    "iso_add",
    "iso_snv",
    "iso_snv_seed",
]


def _or_zero(value: str) -> str:
    return value if value else NO_CHANGE


def _seed_changes(mism: str) -> str:
    seed = [m.tag for m in parse_mismatches(mism) if m.in_seed]
    return ",".join(seed) if seed else NO_CHANGE


def make_isomir_naming(raw: pd.DataFrame) -> pd.DataFrame:
    """Describe every row of a wide table.

    Parameters
    ----------
    raw : pd.DataFrame
        Wide isomiR table (or any frame with the identity columns)

    Returns
    -------
    pd.DataFrame
        Indexed by variant key; identity columns followed by
        ``NAMING_COLUMNS``
    """
    identity = raw[IDENTITY_COLUMNS].copy()
    out = identity.set_index(encode_keys(identity))
    out.index.name = UID_COL

    out["is_ref"] = (
        (out["mism"] == "")
        & (out["add"] == "")
        & (out["t5"] == NO_CHANGE)
        & (out["t3"] == NO_CHANGE)
    )
    out["iso_5p"] = out["t5"].map(_or_zero)
    out["iso_3p"] = out["t3"].map(_or_zero)
    out["iso_add"] = out["add"].map(_or_zero)
    out["iso_snv"] = out["mism"].map(_or_zero)
    out["iso_snv_seed"] = out["mism"].map(_seed_changes)
    out["isomir"] = (
        out["mir"]
        + ";"
        + out["is_ref"].map({True: "ref", False: "iso"})
        + ";iso_5p:" + out["iso_5p"]
        + ";iso_3p:" + out["iso_3p"]
        + ";iso_add:" + out["iso_add"]
        + ";iso_snv:" + out["iso_snv"]
    )
    return out[IDENTITY_COLUMNS + NAMING_COLUMNS]
