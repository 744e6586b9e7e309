from copy import deepcopy
from dataclasses import dataclass, field
from functools import singledispatch
import typing

from .errors import PatchApplyError


# Operation and Patch classes

@dataclass(frozen=True)
class Operation:

    """An Operation is a single step of a Patch. It has four fields:

    - op: the operation to be performed. One of "add", "remove", "replace",
      "move", "copy" or "test", with JSON Patch (RFC 6902) semantics
    - path: a path identifying a location in the document tree
    - value: the value to add, replace with or test against; None otherwise
    - fromPath: the source location for "move" and "copy"; None otherwise

    The path object is a tuple containing path elements. A path element is
    either a string (a mapping key) or an integer (a sequence index). An empty
    path represents the root object.

    Examples:
    - ("a",) represents the key "a" of the root mapping
    - ("a", 3) represents the item with index 3 of the list at key "a"
    - ("a", 3, "b") represents 123 in this object: {"a": [2, 4, 8, {"b": 123}]}
    """

    op: str
    path: tuple  # path elements are str or int
    value: typing.Any = None
    fromPath: tuple = None

    def applyOperation(self, target):
        if self.op == "add":
            addNestedItem(target, self.path, deepcopy(self.value))
        elif self.op == "replace":
            replaceNestedItem(target, self.path, deepcopy(self.value))
        elif self.op == "remove":
            removeNestedItem(target, self.path)
        elif self.op == "move":
            self._checkFromPath()
            fromLength = len(self.fromPath)
            if len(self.path) > fromLength and self.path[:fromLength] == self.fromPath:
                raise PatchApplyError(f"can't move {formatPointer(self.fromPath)!r} "
                                      f"into its own child {formatPointer(self.path)!r}")
            value = getNestedItem(target, self.fromPath)
            removeNestedItem(target, self.fromPath)
            addNestedItem(target, self.path, value)
        elif self.op == "copy":
            self._checkFromPath()
            value = getNestedItem(target, self.fromPath)
            addNestedItem(target, self.path, deepcopy(value))
        elif self.op == "test":
            if not jsonEqual(getNestedItem(target, self.path), self.value):
                raise PatchApplyError(f"test failed at {formatPointer(self.path)!r}")
        else:
            raise PatchApplyError(f"unknown patch operation: {self.op!r}")

    def _checkFromPath(self):
        if self.fromPath is None:
            raise PatchApplyError(f"{self.op!r} operation without a source path")

    def asDict(self):
        """Return the operation in JSON Patch form, with paths formatted as
        JSON Pointer strings.

            >>> Operation("add", ("a", 0), 12).asDict()
            {'op': 'add', 'path': '/a/0', 'value': 12}
        """
        d = {"op": self.op, "path": formatPointer(self.path)}
        if self.op in ("add", "replace", "test"):
            d["value"] = self.value
        elif self.op in ("move", "copy"):
            d["from"] = formatPointer(self.fromPath)
        return d

    @classmethod
    def fromDict(cls, d):
        fromPath = parsePointer(d["from"]) if "from" in d else None
        return cls(d["op"], parsePointer(d["path"]), d.get("value"), fromPath)


@dataclass
class Patch:

    operations: list = field(default_factory=list)

    def __iter__(self):
        return iter(self.operations)

    def __len__(self):
        return len(self.operations)

    def isEmpty(self):
        return not self.operations

    def asDicts(self):
        return [operation.asDict() for operation in self]

    @classmethod
    def fromDicts(cls, dicts):
        return cls([Operation.fromDict(d) for d in dicts])


def applyPatch(target, patch):
    """Apply `patch` to `target` in place. Raises PatchApplyError if the patch
    doesn't fit the structure of `target`; operations preceding the failing
    one remain applied.
    """
    for operation in patch:
        operation.applyOperation(target)


#
# Structural diff
#

def makePatch(old, new):
    """Return a Patch that transforms `old` into `new`.

    The result only depends on the contents of its arguments: mapping keys
    are visited in sorted order, and sequences are compared index by index
    after matching their common prefix and suffix. Values in the patch are
    copies, so later changes to `new` don't affect it.

        >>> makePatch({"a": 1, "b": [1, 2]}, {"b": [1, 2, 3], "c": None}).asDicts()
        [{'op': 'remove', 'path': '/a'}, {'op': 'add', 'path': '/b/2', 'value': 3}, {'op': 'add', 'path': '/c', 'value': None}]
    """
    return Patch(list(_diff(old, new, ())))


def jsonEqual(a, b):
    """Compare two JSON values for equality, also requiring equal types. This
    tells True apart from 1 and 1 apart from 1.0.
    """
    if type(a) is not type(b):
        return False
    if type(a) is dict:
        return a.keys() == b.keys() and all(jsonEqual(a[key], b[key]) for key in a)
    if type(a) is list:
        return len(a) == len(b) and all(map(jsonEqual, a, b))
    return a == b


def _diff(old, new, path):
    if type(old) is not type(new):
        yield Operation("replace", path, deepcopy(new))
    elif type(old) is dict:
        yield from _diffMapping(old, new, path)
    elif type(old) is list:
        yield from _diffSequence(old, new, path)
    elif old != new:
        yield Operation("replace", path, new)


def _diffMapping(old, new, path):
    for key in sorted(old.keys() - new.keys()):
        yield Operation("remove", path + (key,))
    for key in sorted(old.keys() & new.keys()):
        yield from _diff(old[key], new[key], path + (key,))
    for key in sorted(new.keys() - old.keys()):
        yield Operation("add", path + (key,), deepcopy(new[key]))


def _diffSequence(old, new, path):
    start = 0
    oldEnd = len(old)
    newEnd = len(new)
    while start < oldEnd and start < newEnd and jsonEqual(old[start], new[start]):
        start += 1
    while oldEnd > start and newEnd > start and jsonEqual(old[oldEnd - 1], new[newEnd - 1]):
        oldEnd -= 1
        newEnd -= 1
    # Pair up the differing middle parts, then remove surplus old items from
    # the end backwards, or insert surplus new items front to back.
    pairedEnd = min(oldEnd, newEnd)
    for index in range(start, pairedEnd):
        yield from _diff(old[index], new[index], path + (index,))
    for index in reversed(range(pairedEnd, oldEnd)):
        yield Operation("remove", path + (index,))
    for index in range(pairedEnd, newEnd):
        yield Operation("add", path + (index,), deepcopy(new[index]))


#
# JSON Pointer (RFC 6901) conversion
#

def formatPointer(path):
    """
        >>> formatPointer(("a/b", 0, "c~d"))
        '/a~1b/0/c~0d'
        >>> formatPointer(())
        ''
    """
    return "".join("/" + str(element).replace("~", "~0").replace("/", "~1")
                   for element in path)


def parsePointer(pointer):
    """Convert a JSON Pointer string to a path tuple. All elements come out as
    strings; sequence indices are interpreted when the path is applied.
    """
    if not pointer:
        return ()
    if not pointer.startswith("/"):
        raise ValueError(f"invalid JSON Pointer: {pointer!r}")
    return tuple(element.replace("~1", "/").replace("~0", "~")
                 for element in pointer[1:].split("/"))


#
# Functions for querying and modifying nested objects, using path tuples to
# specify a location in the tree.
#
# The modifier functions follow the Operation operators and their semantics:
#
#   "add"       Add an item to the container. For a mapping this replaces
#               an existing value, for a sequence this inserts at the index,
#               or appends when the index equals the length or is "-".
#   "replace"   Replace an existing item.
#   "remove"    Remove an existing item.
#
# An empty path addresses the root object itself, whose contents can be
# added or replaced in place, but which can't be removed.
#

def getNestedItem(obj, path):
    for pathElement in path:
        obj = getItem(obj, pathElement)
    return obj


def addNestedItem(obj, path, value):
    if not path:
        _replaceContents(obj, value)
        return
    obj = getNestedItem(obj, path[:-1])
    addItem(obj, path[-1], value)


def replaceNestedItem(obj, path, value):
    if not path:
        _replaceContents(obj, value)
        return
    obj = getNestedItem(obj, path[:-1])
    replaceItem(obj, path[-1], value)


def removeNestedItem(obj, path):
    if not path:
        raise PatchApplyError("can't remove the root object")
    obj = getNestedItem(obj, path[:-1])
    removeItem(obj, path[-1])


def _replaceContents(obj, value):
    if type(obj) is dict and type(value) is dict:
        obj.clear()
        obj.update(value)
    elif type(obj) is list and type(value) is list:
        obj[:] = value
    else:
        raise PatchApplyError(f"can't replace the contents of a {type(obj).__name__} "
                              f"root with a {type(value).__name__}")


#
# Generic sub-item query and modification functions, specialized for the
# JSON container types. The modifier functions follow the Operation
# operators and their semantics -- see above.
#

@singledispatch
def getItem(obj, key):
    raise PatchApplyError(f"can't look up {key!r} in a {type(obj).__name__}")


@singledispatch
def addItem(obj, key, value):
    raise PatchApplyError(f"can't add {key!r} to a {type(obj).__name__}")


@singledispatch
def replaceItem(obj, key, value):
    raise PatchApplyError(f"can't replace {key!r} in a {type(obj).__name__}")


@singledispatch
def removeItem(obj, key):
    raise PatchApplyError(f"can't remove {key!r} from a {type(obj).__name__}")


def _mappingKey(mapping, key, mustExist=True):
    if type(key) is not str:
        raise PatchApplyError(f"mapping key must be a str, not {type(key).__name__}")
    if mustExist and key not in mapping:
        raise PatchApplyError(f"mapping has no key {key!r}")
    return key


@getItem.register(dict)
def _getMappingItem(obj, key):
    return obj[_mappingKey(obj, key)]


@addItem.register(dict)
def _addMappingItem(obj, key, value):
    obj[_mappingKey(obj, key, mustExist=False)] = value


@replaceItem.register(dict)
def _replaceMappingItem(obj, key, value):
    obj[_mappingKey(obj, key)] = value


@removeItem.register(dict)
def _removeMappingItem(obj, key):
    del obj[_mappingKey(obj, key)]


def _sequenceIndex(sequence, index, allowEnd=False):
    # Sequence indices may come in as strings when a path was parsed from a
    # JSON Pointer. "-" addresses the position after the last item.
    numItems = len(sequence)
    if allowEnd and index == "-":
        return numItems
    if type(index) is str and index.isascii() and index.isdigit() and \
            (index == "0" or not index.startswith("0")):
        index = int(index)
    if type(index) is not int:
        raise PatchApplyError(f"sequence index must be an int, not {index!r}")
    upper = numItems if allowEnd else numItems - 1
    if not (0 <= index <= upper):
        raise PatchApplyError(f"sequence index {index} out of range")
    return index


@getItem.register(list)
def _getSequenceItem(obj, index):
    return obj[_sequenceIndex(obj, index)]


@addItem.register(list)
def _addSequenceItem(obj, index, value):
    obj.insert(_sequenceIndex(obj, index, allowEnd=True), value)


@replaceItem.register(list)
def _replaceSequenceItem(obj, index, value):
    obj[_sequenceIndex(obj, index)] = value


@removeItem.register(list)
def _removeSequenceItem(obj, index):
    del obj[_sequenceIndex(obj, index)]
