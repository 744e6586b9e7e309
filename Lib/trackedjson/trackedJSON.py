from contextlib import contextmanager
from copy import deepcopy
import logging

from .errors import TrackedJSONError, ValidationError
from .events import EventBus
from .history import HistoryStore
from .patch import applyPatch, makePatch
from .proxy import isSameValue, toPlainValue, trackedProxy
from .timeTravel import reconstruct, resolveIndex
from .validation import copyJSON, validateJSON


logger = logging.getLogger(__name__)


class TrackedJSON:

    """A TrackedJSON object records the changes made to a JSON document, so
    they can be undone and redone, and so that any earlier state of the
    document can be reconstructed.

        >>> tracked = TrackedJSON(initialState={"value": 0})

    The document is modified through the proxy returned by the `data`
    property (or getDocument()), which behaves like a dict. Nested lists and
    dicts read from it are proxies as well:

        >>> tracked.data["value"] = 1
        >>> tracked.data["items"] = [1, 2]
        >>> tracked.data["items"].append(3)
        >>> tracked.clone()
        {'value': 1, 'items': [1, 2, 3]}

    Every change is a separate history entry:

        >>> tracked.undoSize
        3
        >>> tracked.undo()
        >>> tracked.clone()
        {'value': 1, 'items': [1, 2]}
        >>> tracked.redo()
        >>> tracked.data["items"]
        TrackedSequence([1, 2, 3])

    clone() with an index reconstructs the document as it was after that
    many changes; negative indices count back from the latest change:

        >>> tracked.clone(0)
        {'value': 0}
        >>> tracked.clone(-1)
        {'value': 1, 'items': [1, 2]}

    Listeners registered for the "change" event are called after every
    recorded write. Deletions are recorded but do not notify listeners.

    Undo and redo with an empty stack do nothing. Values that are not
    JSON-compatible are rejected with ValidationError, leaving the document
    unchanged.
    """

    def __init__(self, initialState=None):
        if initialState is None:
            initialState = {}
        if type(initialState) is not dict:
            raise ValidationError("the document must be a dict")
        validateJSON(initialState)
        self._document = copyJSON(initialState)
        self._initialSnapshot = copyJSON(initialState)
        self._history = HistoryStore()
        self._events = EventBus()
        self._proxies = {}  # id(container) -> proxy
        self._proxyEnabled = True
        self._batchSnapshot = None  # (preSnapshot, notify) while a batch is active
        self._data = trackedProxy(self._document, self)

    # Document access

    @property
    def data(self):
        return self._data

    @data.setter
    def data(self, newDocument):
        self.setDocument(newDocument)

    def getDocument(self):
        """Return the proxy for the document."""
        return self._data

    def setDocument(self, newDocument):
        """Replace the contents of the document with `newDocument`, recording
        the difference as a single change. The document object itself, and
        therefore the proxy, stays the same.
        """
        newDocument = toPlainValue(newDocument)
        if type(newDocument) is not dict:
            raise ValidationError("the document must be a dict")
        if isSameValue(self._document, newDocument):
            return
        validateJSON(newDocument)
        newDocument = copyJSON(newDocument)

        def replaceContents():
            self._document.clear()
            self._document.update(newDocument)

        self._recordChange(replaceContents)

    def setPath(self, path, value):
        """Set the item at `path`, a sequence of keys and indices, to `value`.
        This is equivalent to subscripting the proxy with all but the last
        path element and assigning to the last one.
        """
        path = tuple(path)
        if not path:
            self.setDocument(value)
            return
        container = self._containerAt(path[:-1])
        container[path[-1]] = value

    def deletePath(self, path):
        """Delete the item at `path`, if it exists."""
        path = tuple(path)
        if not path:
            raise TrackedJSONError("can't delete the document itself")
        container = self._containerAt(path[:-1])
        del container[path[-1]]

    def _containerAt(self, path):
        container = self._data
        for key in path:
            container = container[key]
        return container

    # History

    @property
    def undoSize(self):
        return self._history.undoSize

    @property
    def redoSize(self):
        return self._history.redoSize

    def undo(self):
        """Roll back the most recent change. Does nothing if there is none."""
        self._checkNoBatch()
        if self._history.undo(self._document, self._suppressed):
            self._pruneProxies()

    def redo(self):
        """Re-apply the most recently undone change. Does nothing if there
        is none.
        """
        self._checkNoBatch()
        if self._history.redo(self._document, self._suppressed):
            self._pruneProxies()

    def clone(self, index=None):
        """Return a copy of the document. Without an index, this is the
        current state. With an index, it is the state after the first `index`
        recorded changes (0 is the initial state); a negative index counts
        back from the most recent change. Raises RangeError if the history is
        too short.
        """
        if index is None:
            return deepcopy(self._document)
        count = resolveIndex(index, self._history.undoSize)
        return reconstruct(self._initialSnapshot, self._history.forwardPatches, count)

    @contextmanager
    def batch(self):
        """Return a context manager that records all changes made within it
        as a single history entry, and notifies listeners at most once.

        If the block is left with an exception (including KeyboardInterrupt),
        the document is rolled back to its state before the block, and the
        exception is re-raised.
        """
        self._checkNoBatch()
        pre = deepcopy(self._document)
        self._batchSnapshot = (pre, False)
        try:
            yield
        except BaseException:
            self._rollback(pre)
            raise
        else:
            _, notify = self._batchSnapshot
        finally:
            self._batchSnapshot = None
        self._commit(pre, notify)

    def _checkNoBatch(self):
        if self._batchSnapshot is not None:
            raise TrackedJSONError("can't do this while a batch is active")

    # Events

    def addEventListener(self, eventName, callback):
        self._events.addListener(eventName, callback)

    def removeEventListener(self, eventName, callback):
        self._events.removeListener(eventName, callback)

    # Interception support, used by the proxies

    @contextmanager
    def _suppressed(self):
        """Disable recording while patches are replayed internally. The
        previous state is restored however the block exits.
        """
        previous = self._proxyEnabled
        self._proxyEnabled = False
        try:
            yield
        finally:
            self._proxyEnabled = previous

    def _recordChange(self, mutate, notify=True):
        if not self._proxyEnabled:
            mutate()
            return
        if self._batchSnapshot is not None:
            pre, batchNotify = self._batchSnapshot
            mutate()
            self._batchSnapshot = (pre, batchNotify or notify)
            return
        pre = deepcopy(self._document)
        try:
            mutate()
        except Exception:
            self._rollback(pre)
            raise
        self._commit(pre, notify)

    def _rollback(self, pre):
        with self._suppressed():
            applyPatch(self._document, makePatch(self._document, pre))
        self._pruneProxies()

    def _commit(self, pre, notify):
        forward = self._history.commit(pre, self._document)
        self._pruneProxies()
        if forward is None:
            logger.debug("change left the document unchanged, nothing recorded")
            return
        if notify:
            self._events.notify("change")

    def _proxyFor(self, container):
        proxy = self._proxies.get(id(container))
        if proxy is None or proxy._modelObject is not container:
            proxy = trackedProxy(container, self)
            self._proxies[id(container)] = proxy
        return proxy

    def _pruneProxies(self):
        # Drop the proxies for containers that are no longer part of the
        # document.
        if not self._proxies:
            return
        reachable = set()
        stack = [self._document]
        while stack:
            container = stack.pop()
            reachable.add(id(container))
            items = container.values() if type(container) is dict else container
            stack.extend(item for item in items if type(item) in (dict, list))
        self._proxies = {key: proxy for key, proxy in self._proxies.items() if key in reachable}
