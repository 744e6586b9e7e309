from trackedjson import TrackedJSON


if __name__ == "__main__":
    tracked = TrackedJSON(initialState={"value": 0})
    data = tracked.data
    assert data["value"] == 0

    for expected in (1, 2, 3):
        data["value"] += 1
        assert data["value"] == expected
    for expected in (2, 1, 0):
        data["value"] -= 1
        assert data["value"] == expected
    assert tracked.undoSize == 6

    for expected in (1, 2, 3):
        tracked.undo()
        assert data["value"] == expected
    for expected in (2, 1, 0):
        tracked.redo()
        assert data["value"] == expected

    assert [tracked.clone(i)["value"] for i in range(tracked.undoSize + 1)] == \
        [0, 1, 2, 3, 2, 1, 0]
