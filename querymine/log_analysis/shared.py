from querymine.utils import to_ejson

HIGH_FREQUENCY_THRESHOLD = 100
CONCENTRATION_THRESHOLD = 0.7
CARDINALITY_THRESHOLD = 20
COLLSCAN = "COLLSCAN"
UNKNOWN = "unknown"


class NoPatternsFoundError(Exception):
    """Raised when a whole run produced no recognizable query pattern."""

    def __init__(self, message="No query patterns found within curly braces"):
        super().__init__(message)


class SourceReadError(Exception):
    """Raised when the input source can't be opened or read."""


def to_json(obj, indent=None):
    return to_ejson(obj, indent=indent)
