"""Variant key codec for isomiR identities.

An isomiR is identified by six fields:

- ``seq``: observed read sequence
- ``mir``: reference miRNA it was annotated against
- ``mism``: substitutions, ``<position><observed>><reference>`` joined by ``,``
- ``add``: non-templated 3' addition (empty if none)
- ``t5`` / ``t3``: trimming tags at either end, ``"0"`` for no change.
  Upper case nucleotides are added relative to the reference, lower case
  nucleotides are removed.

The six fields are joined with ``KEY_SEPARATOR`` into a variant key that
is used to merge observations across samples. Decoding a key always gives
back the exact identity that was encoded.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Iterable, List, NamedTuple, Sequence, Union

import pandas as pd

from .errors import DecodingError, EncodingError

KEY_SEPARATOR = ":"
UID_COL = "uid"
IDENTITY_COLUMNS = ["seq", "mir", "mism", "add", "t5", "t3"]
NO_CHANGE = "0"

# Seed region of a mature miRNA, 1-based inclusive
SEED_START = 2
SEED_END = 8

_MISMATCH_RE = re.compile(r"^(\d+)([A-Za-z])>?([A-Za-z])$")
_MISMATCH_SPLIT_RE = re.compile(r"[,;\s]+")


class IsomirIdentity(NamedTuple):
    """Identity tuple of one isomiR form."""

    seq: str
    mir: str
    mism: str = ""
    add: str = ""
    t5: str = NO_CHANGE
    t3: str = NO_CHANGE

    @property
    def mismatches(self) -> List["Mismatch"]:
        return parse_mismatches(self.mism)

    @property
    def is_reference(self) -> bool:
        """True when the read matches the reference miRNA exactly."""
        return (
            not self.mism
            and not self.add
            and self.t5 == NO_CHANGE
            and self.t3 == NO_CHANGE
        )


@dataclass(frozen=True)
class Mismatch:
    """Single substitution relative to the reference miRNA.

    Attributes
    ----------
    position : int
        1-based position in the mature sequence
    observed : str
        Nucleotide in the read
    reference : str
        Nucleotide in the reference
    """

    position: int
    observed: str
    reference: str

    @property
    def tag(self) -> str:
        return f"{self.position}{self.observed}>{self.reference}"

    @property
    def in_seed(self) -> bool:
        return SEED_START <= self.position <= SEED_END


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _as_text(value: Any) -> str:
    if _is_missing(value):
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def parse_mismatches(text: Any) -> List[Mismatch]:
    """Parse a mismatch field into substitution descriptors.

    Accepts the canonical ``1T>C`` form as well as the compact ``1TC``
    form, separated by commas, semicolons or whitespace. Empty values and
    ``"0"`` mean no substitution.

    Raises
    ------
    EncodingError
        If a descriptor cannot be parsed
    """
    text = _as_text(text)
    if not text or text == NO_CHANGE:
        return []

    mismatches = []
    for token in _MISMATCH_SPLIT_RE.split(text):
        if not token:
            continue
        match = _MISMATCH_RE.match(token)
        if match is None:
            raise EncodingError(f"Unrecognized mismatch descriptor: {token!r}")
        position, observed, reference = match.groups()
        mismatches.append(
            Mismatch(int(position), observed.upper(), reference.upper())
        )
    return mismatches


def format_mismatches(mismatches: Iterable[Mismatch]) -> str:
    return ",".join(m.tag for m in mismatches)


def count_mismatches(text: Any) -> int:
    """Number of substitutions described by a mismatch field."""
    return len(parse_mismatches(text))


def canonical_mism(value: Any) -> str:
    return format_mismatches(parse_mismatches(value))


def canonical_add(value: Any) -> str:
    text = _as_text(value)
    return "" if text == NO_CHANGE else text


def canonical_trim(value: Any) -> str:
    text = _as_text(value)
    return text if text else NO_CHANGE


def canonical_identity(
    seq: Any,
    mir: Any,
    mism: Any = "",
    add: Any = "",
    t5: Any = NO_CHANGE,
    t3: Any = NO_CHANGE,
) -> IsomirIdentity:
    """Build an identity with every field in canonical form."""
    return IsomirIdentity(
        seq=_as_text(seq),
        mir=_as_text(mir),
        mism=canonical_mism(mism),
        add=canonical_add(add),
        t5=canonical_trim(t5),
        t3=canonical_trim(t3),
    )


def encode_key(identity: Union[IsomirIdentity, Sequence[str]]) -> str:
    """Join the six identity fields into a variant key.

    Raises
    ------
    EncodingError
        If the identity does not have six fields or a field contains
        the separator
    """
    fields = tuple(identity)
    if len(fields) != len(IDENTITY_COLUMNS):
        raise EncodingError(
            f"Expected {len(IDENTITY_COLUMNS)} identity fields, got {len(fields)}"
        )
    for name, value in zip(IDENTITY_COLUMNS, fields):
        if KEY_SEPARATOR in str(value):
            raise EncodingError(
                f"Field '{name}' contains the key separator: {value!r}"
            )
    return KEY_SEPARATOR.join(str(value) for value in fields)


def decode_key(key: str) -> IsomirIdentity:
    """Split a variant key back into its identity.

    Raises
    ------
    DecodingError
        If the key does not hold exactly six fields
    """
    parts = str(key).split(KEY_SEPARATOR)
    if len(parts) != len(IDENTITY_COLUMNS):
        raise DecodingError(
            f"Variant key {key!r} has {len(parts)} fields, "
            f"expected {len(IDENTITY_COLUMNS)}"
        )
    return IsomirIdentity(*parts)


def normalize_identity_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Return a copy with identity columns in canonical string form."""
    out = df.copy()
    out["seq"] = out["seq"].map(_as_text)
    out["mir"] = out["mir"].map(_as_text)
    out["mism"] = out["mism"].map(canonical_mism)
    out["add"] = out["add"].map(canonical_add)
    out["t5"] = out["t5"].map(canonical_trim)
    out["t3"] = out["t3"].map(canonical_trim)
    return out


def encode_keys(df: pd.DataFrame) -> pd.Series:
    """Vectorised :func:`encode_key` over the identity columns of ``df``."""
    missing = [c for c in IDENTITY_COLUMNS if c not in df.columns]
    if missing:
        raise EncodingError(f"Identity columns missing: {missing}")

    fields = df[IDENTITY_COLUMNS].astype(str)
    offending = fields.apply(
        lambda col: col.str.contains(KEY_SEPARATOR, regex=False)
    )
    if offending.to_numpy().any():
        row, col = offending.stack()[lambda s: s].index[0]
        raise EncodingError(
            f"Field '{col}' contains the key separator: {fields.at[row, col]!r}"
        )

    first, *rest = IDENTITY_COLUMNS
    keys = fields[first].str.cat([fields[c] for c in rest], sep=KEY_SEPARATOR)
    keys.name = UID_COL
    return keys


def decode_keys(keys: pd.Series) -> pd.DataFrame:
    """Vectorised :func:`decode_key`; one identity column per field."""
    keys = pd.Series(keys, dtype=object)
    if keys.empty:
        return pd.DataFrame(columns=IDENTITY_COLUMNS, index=keys.index)

    parts = keys.astype(str).str.split(KEY_SEPARATOR, expand=True)
    n_fields = parts.notna().sum(axis=1)
    bad = n_fields != len(IDENTITY_COLUMNS)
    if bad.any():
        key = keys[bad].iloc[0]
        raise DecodingError(
            f"Variant key {key!r} has {int(n_fields[bad].iloc[0])} fields, "
            f"expected {len(IDENTITY_COLUMNS)}"
        )
    parts.columns = IDENTITY_COLUMNS
    return parts
