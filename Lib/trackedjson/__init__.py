"""# trackedjson

Change tracking, undo/redo and time travel for JSON documents.

A `TrackedJSON` object owns a document: a dict composed of strings, numbers,
booleans, None, lists and dicts. Instead of modifying the document directly,
client code modifies it through a proxy that looks and behaves like the
document, but records every change. Each change is stored as a pair of
patches (in the style of JSON Patch, RFC 6902): one that transforms the old
state into the new one, and its inverse. These are used to implement undo
and redo, and to reconstruct the document as it was after any number of
changes.

    >>> tracked = TrackedJSON(initialState={"todos": []})
    >>> todos = tracked.data["todos"]
    >>> todos.append({"title": "write docs", "done": False})
    >>> todos[0]["done"] = True
    >>> tracked.clone()
    {'todos': [{'title': 'write docs', 'done': True}]}
    >>> tracked.undo()
    >>> tracked.clone()
    {'todos': [{'title': 'write docs', 'done': False}]}
    >>> tracked.redo()
    >>> tracked.clone(0)
    {'todos': []}

Assigning a value equal to the current one is not a change, and deleting a
missing key is not an error. Values that are not JSON-compatible, such as
sets, NaN or arbitrary objects, are rejected with `ValidationError` before
anything is modified.

Several modifications can be grouped into a single undoable change:

    >>> with tracked.batch():
    ...     todos.append({"title": "release", "done": False})
    ...     todos.append({"title": "celebrate", "done": False})
    ...
    >>> tracked.undoSize
    3

To keep views up to date, register a "change" listener:

    >>> tracked.addEventListener("change", lambda: print("changed"))
    >>> todos[1]["done"] = True
    changed

The patch functions are available on their own as well: `makePatch(old,
new)` computes the difference between two JSON values, and
`applyPatch(target, patch)` applies it.

### Acknowledgments

The proxy approach is inspired by jundo by Just van Rossum, and the patch
format by [JSON Patch](http://jsonpatch.com/).
"""

from .errors import (
    PatchApplyError,
    RangeError,
    TrackedJSONError,
    UnsupportedKeyError,
    ValidationError,
)
from .patch import Operation, Patch, applyPatch, makePatch
from .trackedJSON import TrackedJSON
from .validation import isJSONCompatible

__all__ = [
    "TrackedJSON",
    "Operation",
    "Patch",
    "applyPatch",
    "makePatch",
    "isJSONCompatible",
    "TrackedJSONError",
    "ValidationError",
    "UnsupportedKeyError",
    "RangeError",
    "PatchApplyError",
]

try:
    from ._version import version as __version__
except ImportError:
    __version__ = "<unknown>"
