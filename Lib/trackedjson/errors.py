class TrackedJSONError(Exception):
    pass


class ValidationError(TrackedJSONError, ValueError):
    """Raised when a value proposed for the document is not JSON-compatible."""


class UnsupportedKeyError(TrackedJSONError, TypeError):
    """Raised when a mutation targets a key that can't address a JSON
    container item: a non-str mapping key, or a non-int sequence index.
    """


class RangeError(TrackedJSONError, IndexError):
    """Raised by TrackedJSON.clone() for a history index out of range."""


class PatchApplyError(TrackedJSONError):
    """Raised when a patch can't be applied to its target. For patches
    recorded by a TrackedJSON instance this means the history and the
    document got out of sync.
    """
