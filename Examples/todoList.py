from trackedjson import TrackedJSON


def addTodo(tracked, title):
    tracked.data["todos"].append({"title": title, "done": False})


def toggleTodo(tracked, index):
    todo = tracked.data["todos"][index]
    todo["done"] = not todo["done"]


def render(document):
    return "\n".join(f"[{'x' if todo['done'] else ' '}] {todo['title']}"
                     for todo in document["todos"])


if __name__ == "__main__":
    tracked = TrackedJSON(initialState={"todos": []})
    renders = []
    tracked.addEventListener("change", lambda: renders.append(render(tracked.clone())))

    addTodo(tracked, "buy milk")
    addTodo(tracked, "walk the dog")
    toggleTodo(tracked, 0)
    assert renders[-1] == "[x] buy milk\n[ ] walk the dog"
    assert len(renders) == 3

    # Removing an item is recorded, but doesn't notify the listener.
    del tracked.data["todos"][1]
    assert len(renders) == 3
    assert tracked.clone() == {"todos": [{"title": "buy milk", "done": True}]}

    tracked.undo()
    assert render(tracked.clone()) == "[x] buy milk\n[ ] walk the dog"

    with tracked.batch():
        for index in range(len(tracked.data["todos"])):
            tracked.data["todos"][index]["done"] = True
    assert render(tracked.clone()) == "[x] buy milk\n[x] walk the dog"
    assert len(renders) == 4
    assert tracked.redoSize == 0

    # Step through the whole history.
    history = [render(tracked.clone(i)) for i in range(tracked.undoSize + 1)]
    assert history == [
        "",
        "[ ] buy milk",
        "[ ] buy milk\n[ ] walk the dog",
        "[x] buy milk\n[ ] walk the dog",
        "[x] buy milk\n[x] walk the dog",
    ]
