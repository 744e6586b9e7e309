import math

from .errors import ValidationError


_scalarTypes = (str, bool, int, type(None))


def isJSONCompatible(value):
    """Return True if `value` is composed entirely of JSON types: str, bool,
    None, int, finite float, list and dict with str keys.

    Only the exact builtin container types are accepted; subclasses, tuples,
    sets and arbitrary objects are not JSON.

        >>> isJSONCompatible({"a": [1, 2.5, None, True, {"b": "c"}]})
        True
        >>> isJSONCompatible({"a": float("nan")})
        False
        >>> isJSONCompatible({1: "a"})
        False
    """
    return _findIncompatible(value, (), set()) is None


def validateJSON(value):
    """Raise ValidationError if `value` is not JSON-compatible. The error
    message names the path of the first offending item.
    """
    badPath = _findIncompatible(value, (), set())
    if badPath is not None:
        raise ValidationError(f"value is not JSON-compatible at path {badPath}")


def _findIncompatible(value, path, active):
    # Returns the path to the first incompatible item, or None. `active`
    # holds the ids of the containers currently being visited, so that
    # self-referencing structures are rejected instead of recursing forever.
    valueType = type(value)
    if valueType in _scalarTypes:
        return None
    if valueType is float:
        return None if math.isfinite(value) else path
    if valueType is not dict and valueType is not list:
        return path
    if id(value) in active:
        return path
    active.add(id(value))
    try:
        if valueType is dict:
            for key, item in value.items():
                if type(key) is not str:
                    return path + (key,)
                badPath = _findIncompatible(item, path + (key,), active)
                if badPath is not None:
                    return badPath
        else:
            for index, item in enumerate(value):
                badPath = _findIncompatible(item, path + (index,), active)
                if badPath is not None:
                    return badPath
    finally:
        active.discard(id(value))
    return None


def copyJSON(value):
    """Return a copy of the validated JSON value `value` in which every
    container is a new object, even where `value` holds the same list or dict
    in more than one place. (copy.deepcopy would keep such a container
    shared, and a change made through one of its places would show up in the
    others.)

        >>> shared = [1]
        >>> copied = copyJSON({"a": shared, "b": shared})
        >>> copied["a"] is copied["b"]
        False
    """
    valueType = type(value)
    if valueType is dict:
        return {key: copyJSON(item) for key, item in value.items()}
    if valueType is list:
        return [copyJSON(item) for item in value]
    return value
