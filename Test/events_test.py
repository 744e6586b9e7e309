import pytest
from trackedjson.events import EventBus


class TestEventBus:

    def test_notify_in_order(self):
        calls = []
        bus = EventBus()
        bus.addListener("change", lambda: calls.append(1))
        bus.addListener("change", lambda: calls.append(2))
        bus.notify("change")
        assert calls == [1, 2]

    def test_add_idempotent(self):
        calls = []

        def listener():
            calls.append(1)

        bus = EventBus()
        bus.addListener("change", listener)
        bus.addListener("change", listener)
        bus.notify("change")
        assert calls == [1]

    def test_remove(self):
        calls = []

        def first():
            calls.append("first")

        def second():
            calls.append("second")

        bus = EventBus()
        bus.addListener("change", first)
        bus.addListener("change", second)
        bus.removeListener("change", first)
        bus.notify("change")
        assert calls == ["second"]
        bus.removeListener("change", first)  # not registered: no error
        assert bus.listeners == {"change": [second]}

    def test_remove_during_notify(self):
        calls = []
        bus = EventBus()

        def once():
            calls.append("once")
            bus.removeListener("change", once)

        bus.addListener("change", once)
        bus.addListener("change", lambda: calls.append("always"))
        bus.notify("change")
        bus.notify("change")
        assert calls == ["once", "always", "always"]

    def test_listener_error_propagates(self):
        def failing():
            raise RuntimeError("listener failed")

        bus = EventBus()
        bus.addListener("change", failing)
        with pytest.raises(RuntimeError):
            bus.notify("change")

    def test_unknown_event(self):
        bus = EventBus()
        with pytest.raises(ValueError):
            bus.addListener("update", print)
        with pytest.raises(ValueError):
            bus.removeListener("update", print)
        with pytest.raises(ValueError):
            bus.notify("update")
