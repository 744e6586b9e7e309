class EventBus:

    """A minimal synchronous listener registry. The only event is "change".

        >>> calls = []
        >>> bus = EventBus()
        >>> bus.addListener("change", lambda: calls.append("changed"))
        >>> bus.notify("change")
        >>> calls
        ['changed']

    Listeners are called without arguments, in registration order. Errors
    raised by a listener propagate to the code that triggered the event.
    """

    eventNames = ("change",)

    def __init__(self):
        self.listeners = {eventName: [] for eventName in self.eventNames}

    def _listenersFor(self, eventName):
        try:
            return self.listeners[eventName]
        except KeyError:
            raise ValueError(f"unknown event: {eventName!r}") from None

    def addListener(self, eventName, callback):
        """Register `callback` for `eventName`. Registering the same callback
        twice has no effect.
        """
        listeners = self._listenersFor(eventName)
        if callback not in listeners:
            listeners.append(callback)

    def removeListener(self, eventName, callback):
        listeners = self._listenersFor(eventName)
        if callback in listeners:
            listeners.remove(callback)

    def notify(self, eventName):
        # Iterate over a copy: a listener may remove itself.
        for callback in list(self._listenersFor(eventName)):
            callback()
