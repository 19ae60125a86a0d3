"""ConquestQueue - deferred, ordered conquest attempts for one tick."""
from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Callable

from tick_territory.types import DomainId, Point


@dataclass(frozen=True, slots=True)
class Conquest:
    """One domain's attempt to take the tile at ``target``."""

    target: Point
    domain_id: DomainId
    source: Point


class ConquestQueue:
    """FIFO buffer between the spread decision and the commit phase.

    Decisions are enqueued while domain tile sets are being scanned; nothing
    mutates until ``drain`` runs, so a tile taken this tick cannot spread
    again until the next one.
    """

    def __init__(self) -> None:
        self._pending: deque[Conquest] = deque()

    def enqueue(self, cmd: Conquest) -> None:
        self._pending.append(cmd)

    def pending(self) -> int:
        return len(self._pending)

    def drain(
        self, handler: Callable[[Conquest], bool]
    ) -> list[tuple[Conquest, bool]]:
        """Apply *handler* to every pending attempt in enqueue order.

        Returns ``[(cmd, succeeded), ...]``. Attempts enqueued by the handler
        itself are processed in the same drain.
        """
        results: list[tuple[Conquest, bool]] = []
        while self._pending:
            cmd = self._pending.popleft()
            results.append((cmd, handler(cmd)))
        return results
