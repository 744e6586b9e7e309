from collections.abc import MutableMapping, MutableSequence
from functools import singledispatch
from operator import contains, getitem, setitem, delitem

from .errors import UnsupportedKeyError
from .patch import jsonEqual
from .validation import copyJSON, validateJSON


# Proxy classes
#
# A proxy mimics the JSON container it wraps, and routes every mutation
# through its tracker (a TrackedJSON instance), which records the change.
# Containers read through a proxy come back wrapped in their own proxy,
# obtained from the tracker so that each container has exactly one.

_marker = object()


class TrackedProxyBase:

    def __init__(self, model, tracker):
        self._modelObject = model
        self._tracker = tracker

    def __repr__(self):
        return f"{self.__class__.__name__}({self._modelObject})"

    def __eq__(self, other):
        return self._modelObject == toPlainValue(other)

    __hash__ = None


class TrackedProxyContainerBase(TrackedProxyBase):

    def _wrapItem(self, item):
        if type(item) in (dict, list):
            return self._tracker._proxyFor(item)
        return item

    def _genericGetItem(self, key):
        return self._wrapItem(self.modelGetItem(self._modelObject, key))

    def _genericSetItem(self, key, value, setter):
        value = toPlainValue(value)
        if self.modelHasItem(self._modelObject, key):
            if isSameValue(self.modelGetItem(self._modelObject, key), value):
                return  # nothing to do or to undo
        validateJSON(value)
        value = copyJSON(value)
        self._tracker._recordChange(lambda: setter(self._modelObject, key, value))

    def _genericDelItem(self, key):
        if not self.modelHasItem(self._modelObject, key):
            return  # deleting a missing item is not an error
        self._tracker._recordChange(lambda: self.modelRemoveItem(self._modelObject, key),
                                    notify=False)

    def _genericPop(self, key):
        value = self.modelGetItem(self._modelObject, key)
        self._genericDelItem(key)
        # The value is no longer part of the document, so it's returned as is.
        return value

    def clear(self):
        if self._modelObject:
            self._tracker._recordChange(self._modelObject.clear, notify=False)


class TrackedSequence(TrackedProxyContainerBase, MutableSequence):

    @staticmethod
    def modelHasItem(model, index):
        # Sequence indices act as "keys"; they exist when in range.
        return 0 <= index < len(model)

    modelGetItem = getitem
    modelReplaceItem = setitem
    modelRemoveItem = delitem

    def __len__(self):
        return len(self._modelObject)

    @staticmethod
    def _checkIndex(index):
        if type(index) is not int:
            raise UnsupportedKeyError(f"sequence index must be an int, not {type(index).__name__}")

    def _normalizeIndex(self, index):
        self._checkIndex(index)
        numItems = len(self._modelObject)
        if index < 0:
            index += numItems
        if not (0 <= index < numItems):
            raise IndexError("sequence index out of range")
        return index

    def __getitem__(self, index):
        if isinstance(index, slice):
            return [self[i] for i in range(*index.indices(len(self)))]
        index = self._normalizeIndex(index)
        return self._genericGetItem(index)

    def __setitem__(self, index, item):
        index = self._normalizeIndex(index)
        self._genericSetItem(index, item, self.modelReplaceItem)

    def __delitem__(self, index):
        self._checkIndex(index)
        if index < 0:
            index += len(self._modelObject)
        self._genericDelItem(index)

    def insert(self, index, item):
        self._checkIndex(index)
        numItems = len(self._modelObject)
        if index < 0:
            index = max(0, index + numItems)
        elif index > numItems:
            index = numItems
        item = toPlainValue(item)
        validateJSON(item)
        item = copyJSON(item)
        self._tracker._recordChange(lambda: self._modelObject.insert(index, item))

    def extend(self, items):
        items = [toPlainValue(item) for item in items]
        if not items:
            return
        validateJSON(items)
        items = copyJSON(items)
        self._tracker._recordChange(lambda: self._modelObject.extend(items))

    def pop(self, index=-1):
        index = self._normalizeIndex(index)
        return self._genericPop(index)

    def reverse(self):
        if len(self._modelObject) > 1:
            self._tracker._recordChange(self._modelObject.reverse)

    def sort(self, *, key=None, reverse=False):
        if len(self._modelObject) > 1:
            self._tracker._recordChange(lambda: self._modelObject.sort(key=key, reverse=reverse))


class TrackedMapping(TrackedProxyContainerBase, MutableMapping):

    modelHasItem = contains
    modelGetItem = getitem
    modelReplaceItem = setitem
    modelRemoveItem = delitem

    @staticmethod
    def _checkKey(key):
        if type(key) is not str:
            raise UnsupportedKeyError(f"mapping key must be a str, not {type(key).__name__}")

    def __len__(self):
        return len(self._modelObject)

    def __iter__(self):
        return iter(self._modelObject)

    def __contains__(self, key):
        return key in self._modelObject

    def __getitem__(self, key):
        return self._genericGetItem(key)

    def __setitem__(self, key, value):
        self._checkKey(key)
        self._genericSetItem(key, value, self.modelReplaceItem)

    def __delitem__(self, key):
        self._checkKey(key)
        self._genericDelItem(key)

    def pop(self, key, default=_marker):
        self._checkKey(key)
        if key not in self._modelObject:
            if default is _marker:
                raise KeyError(key)
            return default
        return self._genericPop(key)

    def popitem(self):
        try:
            key = next(iter(self._modelObject))
        except StopIteration:
            raise KeyError("popitem(): mapping is empty") from None
        return key, self.pop(key)

    def setdefault(self, key, default=None):
        self._checkKey(key)
        if key not in self._modelObject:
            self[key] = default
        return self[key]

    def update(self, other=(), **kwargs):
        """Set several items as a single change."""
        changes = {}
        for key, value in dict(other, **kwargs).items():
            self._checkKey(key)
            value = toPlainValue(value)
            if key in self._modelObject and isSameValue(self._modelObject[key], value):
                continue
            changes[key] = value
        if not changes:
            return
        validateJSON(changes)
        changes = copyJSON(changes)
        self._tracker._recordChange(lambda: self._modelObject.update(changes))


#
# Helper functions
#

def isSameValue(current, value):
    """Return True if storing `value` in place of `current` would not change
    the document.
    """
    return current is value or jsonEqual(current, value)


def toPlainValue(value, _active=None):
    """Return `value` with all proxies replaced by the containers they wrap.
    Containers holding proxies are copied; the result may share containers
    with the tracked document, so it must be copied before it is stored.
    """
    if isinstance(value, TrackedProxyBase):
        return value._modelObject
    if type(value) not in (dict, list):
        return value
    if _active is None:
        _active = set()
    if id(value) in _active:
        return value  # self-reference, which validation will reject
    _active.add(id(value))
    try:
        if type(value) is dict:
            return {key: toPlainValue(item, _active) for key, item in value.items()}
        return [toPlainValue(item, _active) for item in value]
    finally:
        _active.discard(id(value))


@singledispatch
def trackedProxy(model, tracker):
    raise TypeError(f"can't track a {type(model).__name__} object")


trackedProxy.register(dict, TrackedMapping)
trackedProxy.register(list, TrackedSequence)
