from copy import deepcopy
import pytest
from trackedjson.errors import PatchApplyError
from trackedjson.patch import (
    Operation,
    Patch,
    addItem,
    addNestedItem,
    applyPatch,
    formatPointer,
    getItem,
    getNestedItem,
    jsonEqual,
    makePatch,
    parsePointer,
    removeItem,
    removeNestedItem,
    replaceItem,
    replaceNestedItem,
)


def _roundTrip(old, new):
    forward = makePatch(old, new)
    inverse = makePatch(new, old)
    target = deepcopy(old)
    applyPatch(target, forward)
    assert jsonEqual(target, new)
    applyPatch(target, inverse)
    assert jsonEqual(target, old)
    return forward


class TestMakePatch:

    def test_equal(self):
        assert makePatch({}, {}).isEmpty()
        assert makePatch({"a": [1, {"b": None}]}, {"a": [1, {"b": None}]}).isEmpty()

    def test_mapping(self):
        patch = makePatch({"a": 1, "b": 2, "c": 3}, {"b": 2, "c": 30, "d": 4})
        assert list(patch) == [
            Operation("remove", ("a",)),
            Operation("replace", ("c",), 30),
            Operation("add", ("d",), 4),
        ]

    def test_mapping_key_order_irrelevant(self):
        old = {"b": 1, "a": 1}
        new = {"a": 2, "b": 2, "z": 0, "y": 0}
        reordered = {"y": 0, "z": 0, "b": 2, "a": 2}
        assert makePatch(old, new) == makePatch(dict(reversed(list(old.items()))), reordered)
        assert [op.path for op in makePatch(old, new)] == [("a",), ("b",), ("y",), ("z",)]

    def test_nested(self):
        patch = makePatch({"a": {"b": {"c": 1}}}, {"a": {"b": {"c": 2}}})
        assert list(patch) == [Operation("replace", ("a", "b", "c"), 2)]

    def test_type_change(self):
        assert list(makePatch({"a": 1}, {"a": "1"})) == [Operation("replace", ("a",), "1")]
        assert list(makePatch({"a": 1}, {"a": 1.0})) == [Operation("replace", ("a",), 1.0)]
        assert list(makePatch({"a": 1}, {"a": True})) == [Operation("replace", ("a",), True)]
        assert list(makePatch({"a": {}}, {"a": []})) == [Operation("replace", ("a",), [])]
        assert list(makePatch({"a": None}, {"a": {"b": 1}})) == [Operation("replace", ("a",), {"b": 1})]

    def test_sequence_append(self):
        assert list(_roundTrip([1, 2], [1, 2, 3, 4])) == [
            Operation("add", (2,), 3),
            Operation("add", (3,), 4),
        ]

    def test_sequence_truncate(self):
        assert list(_roundTrip([1, 2, 3, 4], [1, 2])) == [
            Operation("remove", (3,)),
            Operation("remove", (2,)),
        ]

    def test_sequence_insert_front(self):
        assert list(_roundTrip(["b", "c"], ["a", "b", "c"])) == [Operation("add", (0,), "a")]

    def test_sequence_remove_middle(self):
        assert list(_roundTrip(["a", "b", "c"], ["a", "c"])) == [Operation("remove", (1,))]

    def test_sequence_replace_middle(self):
        assert list(_roundTrip([1, 2, 3], [1, 20, 3])) == [Operation("replace", (1,), 20)]

    def test_sequence_mixed(self):
        _roundTrip([1, 2, 3, 4, 5], [0, 3, 9, 9, 9, 5])
        _roundTrip([{"a": 1}, {"b": 2}], [{"a": 2}, {"b": 2}, {"c": 3}])
        _roundTrip([[1, 2], [3]], [[1], [3, 4], []])
        _roundTrip([1, 1, 1], [1, 1])
        _roundTrip([], [1, [2], {"3": 4}])

    def test_round_trips(self):
        _roundTrip({}, {"a": {"b": [1, 2, {"c": None}]}})
        _roundTrip({"x": [1, {"y": "z"}], "k": True}, {"x": [{"y": "z"}], "k": False, "n": 1.5})
        _roundTrip({"a/b": 1, "c~d": [2]}, {"a/b": 2, "c~d": []})

    def test_values_are_copies(self):
        new = {"a": {"b": [1]}}
        patch = makePatch({}, new)
        new["a"]["b"].append(2)
        assert list(patch) == [Operation("add", ("a",), {"b": [1]})]

    def test_deterministic(self):
        old = {"q": [1, 2, 3], "a": {"x": 1, "y": 2}}
        new = {"a": {"y": 3, "z": 4}, "q": [3, 2]}
        assert makePatch(old, new) == makePatch(deepcopy(old), deepcopy(new))


class TestApplyPatch:

    def test_add_replace_remove(self):
        target = {"a": [1, 2]}
        applyPatch(target, [
            Operation("add", ("b",), {"c": 1}),
            Operation("add", ("a", 0), 0),
            Operation("add", ("a", "-"), 3),
            Operation("replace", ("b", "c"), 2),
            Operation("remove", ("a", 1)),
        ])
        assert target == {"a": [0, 2, 3], "b": {"c": 2}}

    def test_add_existing_key_replaces(self):
        target = {"a": 1}
        applyPatch(target, [Operation("add", ("a",), 2)])
        assert target == {"a": 2}

    def test_move_copy_test(self):
        target = {"a": {"b": [1, 2]}, "c": None}
        applyPatch(target, [
            Operation("test", ("a", "b", 1), 2),
            Operation("copy", ("d",), fromPath=("a", "b")),
            Operation("move", ("c",), fromPath=("a", "b", 0)),
        ])
        assert target == {"a": {"b": [2]}, "c": 1, "d": [1, 2]}
        target["d"].append(3)
        assert target["a"]["b"] == [2]

    def test_test_failure(self):
        target = {"a": 1}
        with pytest.raises(PatchApplyError):
            applyPatch(target, [Operation("test", ("a",), 2)])
        with pytest.raises(PatchApplyError):
            applyPatch(target, [Operation("test", ("a",), True)])

    def test_move_into_own_child(self):
        with pytest.raises(PatchApplyError):
            applyPatch({"a": {"b": {}}}, [Operation("move", ("a", "b", "c"), fromPath=("a",))])

    def test_move_without_source(self):
        with pytest.raises(PatchApplyError):
            applyPatch({"a": 1}, [Operation("move", ("b",))])

    def test_root(self):
        target = {"a": 1}
        applyPatch(target, [Operation("replace", (), {"b": 2})])
        assert target == {"b": 2}
        with pytest.raises(PatchApplyError):
            applyPatch(target, [Operation("remove", ())])
        with pytest.raises(PatchApplyError):
            applyPatch(target, [Operation("replace", (), [1])])

    def test_values_are_copied(self):
        patch = Patch([Operation("add", ("a",), {"b": []})])
        first = {}
        second = {}
        applyPatch(first, patch)
        applyPatch(second, patch)
        first["a"]["b"].append(1)
        assert second == {"a": {"b": []}}
        assert list(patch) == [Operation("add", ("a",), {"b": []})]

    @pytest.mark.parametrize("operation", [
        Operation("replace", ("missing",), 1),
        Operation("remove", ("missing",)),
        Operation("add", ("missing", "x"), 1),
        Operation("add", ("list", 3), 1),
        Operation("replace", ("list", 2), 1),
        Operation("remove", ("list", -1)),
        Operation("add", ("list", "x"), 1),
        Operation("add", ("scalar", "x"), 1),
        Operation("add", (1,), 1),
        Operation("frobnicate", ("list",), 1),
    ])
    def test_inconsistent(self, operation):
        target = {"list": [1, 2], "scalar": 1}
        with pytest.raises(PatchApplyError):
            applyPatch(target, [operation])

    def test_pointer_indices(self):
        target = {"list": [1, 2]}
        applyPatch(target, Patch.fromDicts([
            {"op": "replace", "path": "/list/1", "value": 20},
            {"op": "add", "path": "/list/-", "value": 3},
        ]))
        assert target == {"list": [1, 20, 3]}
        with pytest.raises(PatchApplyError):
            applyPatch(target, Patch.fromDicts([{"op": "remove", "path": "/list/01"}]))


class TestDictForm:

    def test_asDict(self):
        assert Operation("add", ("a", 0), [1]).asDict() == {"op": "add", "path": "/a/0", "value": [1]}
        assert Operation("remove", ("a",)).asDict() == {"op": "remove", "path": "/a"}
        assert Operation("move", ("b",), fromPath=("a",)).asDict() == {"op": "move", "path": "/b", "from": "/a"}
        assert Operation("test", (), {}).asDict() == {"op": "test", "path": "", "value": {}}

    def test_fromDict(self):
        assert Operation.fromDict({"op": "copy", "path": "/x~1y", "from": "/a~0b"}) == \
            Operation("copy", ("x/y",), fromPath=("a~b",))
        patch = makePatch({"a": [1]}, {"a": [1, 2], "b": "c"})
        assert Patch.fromDicts(patch.asDicts()).asDicts() == patch.asDicts()

    def test_pointers(self):
        assert formatPointer(()) == ""
        assert formatPointer(("a", 0, "")) == "/a/0/"
        assert formatPointer(("~1", "/")) == "/~01/~1"
        assert parsePointer("") == ()
        assert parsePointer("/") == ("",)
        assert parsePointer("/~01/~1") == ("~1", "/")
        with pytest.raises(ValueError):
            parsePointer("a/b")


class TestGenericFunctions:

    def test_getItem(self):
        assert getItem({"a": 1}, "a") == 1
        assert getItem([1], 0) == 1
        assert getItem([1], "0") == 1
        with pytest.raises(PatchApplyError):
            getItem({"a": 1}, "b")
        with pytest.raises(PatchApplyError):
            getItem(1, "a")

    def test_addItem(self):
        d = {"a": 1}
        lst = [1]
        addItem(d, "b", 2)
        addItem(lst, 1, 2)
        addItem(lst, 0, 0)
        assert d == {"a": 1, "b": 2}
        assert lst == [0, 1, 2]
        with pytest.raises(PatchApplyError):
            addItem(lst, 4, 2)

    def test_replaceItem(self):
        d = {"a": 1}
        lst = [1]
        replaceItem(d, "a", 2)
        replaceItem(lst, 0, 2)
        assert d == {"a": 2}
        assert lst == [2]
        with pytest.raises(PatchApplyError):
            replaceItem(d, "b", 2)
        with pytest.raises(PatchApplyError):
            replaceItem(lst, 1, 2)

    def test_removeItem(self):
        d = {"a": 1}
        lst = [1]
        removeItem(d, "a")
        removeItem(lst, 0)
        assert d == {}
        assert lst == []
        with pytest.raises(PatchApplyError):
            removeItem(d, "a")

    def test_getNestedItem(self):
        d = {"a": [1, 2, 3, {"b": 4, "c": ["a", "b", "c"]}]}
        assert getNestedItem(d, ()) is d
        assert getNestedItem(d, ("a", 1)) == 2
        assert getNestedItem(d, ("a", 3, "b")) == 4
        assert getNestedItem(d, ("a", 3, "c", 1)) == "b"
        with pytest.raises(PatchApplyError):
            getNestedItem(d, ("a", 2, "b"))
        with pytest.raises(PatchApplyError):
            getNestedItem(d, ("a", 5))

    def test_addNestedItem(self):
        d = {"a": [1, 2, 3, {"b": 4, "c": ["a", "b", "c"]}]}
        addNestedItem(d, ("b",), "B")
        addNestedItem(d, ("a", 0), "C")
        addNestedItem(d, ("a", 4, "c", 3), "Q")
        assert d == {"a": ["C", 1, 2, 3, {"b": 4, "c": ["a", "b", "c", "Q"]}], "b": "B"}

    def test_replaceNestedItem(self):
        d = {"a": [1, 2, 3, {"b": 4}]}
        replaceNestedItem(d, ("a", 1), 222)
        replaceNestedItem(d, ("a", 3, "b"), 444)
        assert d == {"a": [1, 222, 3, {"b": 444}]}
        with pytest.raises(PatchApplyError):
            replaceNestedItem(d, ("b",), 333)

    def test_removeNestedItem(self):
        d = {"a": [1, 2, 3, {"b": 4, "c": ["a", "b", "c"]}]}
        removeNestedItem(d, ("a", 1))
        assert d == {"a": [1, 3, {"b": 4, "c": ["a", "b", "c"]}]}
        removeNestedItem(d, ("a", 2, "c", 1))
        assert d == {"a": [1, 3, {"b": 4, "c": ["a", "c"]}]}
        removeNestedItem(d, ("a", 2, "c"))
        assert d == {"a": [1, 3, {"b": 4}]}


def test_jsonEqual():
    assert jsonEqual({"a": [1, None]}, {"a": [1, None]})
    assert not jsonEqual(1, True)
    assert not jsonEqual(1, 1.0)
    assert not jsonEqual({"a": 1}, {"a": 1, "b": 2})
    assert not jsonEqual([1], [1, 1])
    assert not jsonEqual({"a": [1]}, {"a": [1.0]})
