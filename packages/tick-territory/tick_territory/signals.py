"""SignalBus - per-tick publish/flush of simulation events."""
from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable

COUNTER_OFFENSIVE_START = "counter_offensive_start"
COUNTER_OFFENSIVE_END = "counter_offensive_end"
DOMAIN_REVIVED = "domain_revived"
DOMAIN_DEFEATED = "domain_defeated"
WINNER = "winner"

Handler = Callable[["Signal"], None]


@dataclass(frozen=True)
class Signal:
    name: str
    tick: int
    data: dict[str, Any] = field(default_factory=dict)


class SignalBus:
    """Queues signals during a tick and delivers them on ``flush``.

    Subscribing to ``"*"`` receives every signal. The last ``history``
    delivered signals are kept for display.
    """

    def __init__(self, history: int = 50) -> None:
        self._subscribers: dict[str, list[Handler]] = {}
        self._queue: list[Signal] = []
        self._history: deque[Signal] = deque(maxlen=history)

    def subscribe(self, name: str, handler: Handler) -> None:
        self._subscribers.setdefault(name, []).append(handler)

    def unsubscribe(self, name: str, handler: Handler) -> None:
        handlers = self._subscribers.get(name)
        if handlers and handler in handlers:
            handlers.remove(handler)

    def publish(self, name: str, tick: int, **data: Any) -> None:
        self._queue.append(Signal(name, tick, data))

    def pending(self) -> list[Signal]:
        return list(self._queue)

    def flush(self) -> list[Signal]:
        delivered = self._queue
        self._queue = []
        for signal in delivered:
            self._history.append(signal)
            for handler in self._subscribers.get(signal.name, ()):
                handler(signal)
            for handler in self._subscribers.get("*", ()):
                handler(signal)
        return delivered

    def recent(self, n: int | None = None) -> list[Signal]:
        items = list(self._history)
        return items if n is None else items[-n:]
