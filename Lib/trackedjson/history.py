from contextlib import nullcontext
from copy import deepcopy
import logging

from .patch import applyPatch, makePatch


logger = logging.getLogger(__name__)


class HistoryStore:

    """A HistoryStore keeps the linear undo/redo history of a document.

    For every recorded change it stores a forward patch (old state to new
    state) in `forwardPatches`, and the inverse patch (new state to old
    state) at the same index in `inversePatches`. Undone forward patches wait
    on the `redoPatches` stack until they are redone, or until a new change
    is committed, which discards them.

        >>> history = HistoryStore()
        >>> document = {"a": 1}
        >>> pre = deepcopy(document)
        >>> document["a"] = 2
        >>> history.commit(pre, document).asDicts()
        [{'op': 'replace', 'path': '/a', 'value': 2}]
        >>> history.undo(document)
        True
        >>> document
        {'a': 1}
        >>> history.undoSize, history.redoSize
        (0, 1)
    """

    def __init__(self):
        self.forwardPatches = []
        self.inversePatches = []
        self.redoPatches = []

    @property
    def undoSize(self):
        return len(self.forwardPatches)

    @property
    def redoSize(self):
        return len(self.redoPatches)

    def commit(self, pre, post):
        """Record the change from snapshot `pre` to state `post`. Returns the
        forward patch, or None when the two states are equal, in which case
        nothing is recorded.
        """
        forward = makePatch(pre, post)
        if forward.isEmpty():
            return None
        inverse = makePatch(post, pre)
        self.forwardPatches.append(forward)
        self.inversePatches.append(inverse)
        self.redoPatches = []
        logger.debug("committed patch with %d operation(s), undo size %d",
                     len(forward), self.undoSize)
        return forward

    def undo(self, document, suppressed=None):
        """Roll back the most recent change to `document`. `suppressed` is an
        optional context manager factory; the patch is applied within its
        context. Returns False if there was nothing to undo.
        """
        if not self.forwardPatches:
            return False
        inverse = self.inversePatches[-1]
        with _context(suppressed):
            applyPatch(document, inverse)
        self.inversePatches.pop()
        self.redoPatches.append(self.forwardPatches.pop())
        logger.debug("undo: undo size %d, redo size %d", self.undoSize, self.redoSize)
        return True

    def redo(self, document, suppressed=None):
        """Re-apply the most recently undone change to `document`. Returns
        False if there was nothing to redo.
        """
        if not self.redoPatches:
            return False
        forward = self.redoPatches[-1]
        pre = deepcopy(document)
        with _context(suppressed):
            applyPatch(document, forward)
        self.redoPatches.pop()
        # The inverse that undo() discarded was derived from an earlier state;
        # derive a fresh one from the state this redo started from.
        self.forwardPatches.append(forward)
        self.inversePatches.append(makePatch(document, pre))
        logger.debug("redo: undo size %d, redo size %d", self.undoSize, self.redoSize)
        return True


def _context(factory):
    return nullcontext() if factory is None else factory()
