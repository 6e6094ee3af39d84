"""In-process delivery of run events (phase progress, run summary, verdict).

The Verifier emits the events in ``chainverify.contracts.events``. The CLI
subscribes console or JSON formatters to them. Library callers that pass
no bus get a NullEventBus, and the run behaves the same.

Events are emitted from the thread that called Verifier.run() or
Verifier.verify(), never from reducer threads, so handlers need no locking.
"""

from collections.abc import Callable
from typing import Any, Protocol, TypeVar

T = TypeVar("T")


class EventBusProtocol(Protocol):
    """What the Verifier needs from a bus: subscribe and emit."""

    def subscribe(self, event_type: type[T], handler: Callable[[T], None]) -> None: ...

    def emit(self, event: T) -> None: ...


class EventBus:
    """Dispatches each event to the handlers registered for its exact class.

    Handlers run in registration order. A handler that raises stops the
    dispatch and the exception reaches whoever emitted the event.

    Example:
        bus = EventBus()
        bus.subscribe(RunSummary, lambda e: print(e.counters.as_dict()))
        Verifier(source, sink, event_bus=bus).run()
    """

    def __init__(self) -> None:
        self._subscribers: dict[type, list[Callable[[Any], None]]] = {}

    def subscribe(self, event_type: type[T], handler: Callable[[T], None]) -> None:
        self._subscribers.setdefault(event_type, []).append(handler)

    def emit(self, event: T) -> None:
        """Deliver ``event``; event classes with no handlers are dropped."""
        for handler in self._subscribers.get(type(event), []):
            handler(event)


class NullEventBus:
    """Bus that drops every event. The Verifier's default."""

    def subscribe(self, event_type: type[T], handler: Callable[[T], None]) -> None:
        pass

    def emit(self, event: T) -> None:
        pass
