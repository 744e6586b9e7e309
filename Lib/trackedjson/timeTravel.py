from copy import deepcopy

from .errors import RangeError
from .patch import applyPatch


def resolveIndex(index, undoSize):
    """Resolve a history index to the number of forward patches to replay.

    Non-negative indices count from the initial state, negative indices count
    back from the current end of the history:

        >>> resolveIndex(2, 3)
        2
        >>> resolveIndex(-1, 3)
        2
        >>> resolveIndex(-3, 3)
        0
    """
    if type(index) is not int:
        raise TypeError(f"history index must be an int, not {type(index).__name__}")
    if index < 0:
        resolved = undoSize + index
        if resolved < 0:
            raise RangeError(f"history index {index} is before the initial state "
                             f"(undo size is {undoSize})")
        return resolved
    if index > undoSize:
        raise RangeError(f"history index {index} is beyond the end of the history "
                         f"(undo size is {undoSize})")
    return index


def reconstruct(initialSnapshot, forwardPatches, count):
    """Return a new document: a copy of `initialSnapshot` with the first
    `count` forward patches applied. The arguments are not modified.
    """
    document = deepcopy(initialSnapshot)
    for patch in forwardPatches[:count]:
        applyPatch(document, patch)
    return document
