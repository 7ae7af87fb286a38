"""Exception taxonomy for isomiR ingestion."""


class IsomirError(Exception):
    """Base class for all isomirseq errors."""


class EncodingError(IsomirError, ValueError):
    """An identity field cannot be encoded into a variant key."""


class DecodingError(IsomirError, ValueError):
    """A variant key does not split into the expected identity fields."""


class NoValidSamplesError(IsomirError, ValueError):
    """Every sample was dropped by loading or per-sample filtering."""


class EmptyAggregationError(IsomirError, ValueError):
    """No isomiR rows are left after aggregation."""


class ShapeMismatchError(IsomirError, ValueError):
    """Sample identifiers of a table and its sample descriptor disagree."""


class ValidationError(IsomirError, ValueError):
    """A count matrix failed validation."""
