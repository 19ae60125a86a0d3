"""Engine - outer loop, pacing, quit polling and stop hooks."""

from __future__ import annotations

import enum
import time
from typing import Callable

import structlog

from tick_territory.world import World

log = structlog.get_logger(__name__)

QUIT_COMMAND = "x"

StopHook = Callable[[World, "StopReason"], None]


class StopReason(enum.Enum):
    WINNER = "winner"
    TICK_LIMIT = "tick_limit"
    QUIT = "quit"
    INTERRUPTED = "interrupted"
    REQUESTED = "requested"


class Engine:
    """Drives ``World.update`` at a fixed rate until something stops it.

    ``tps=None`` runs unpaced. ``poll`` is called before every tick; a
    response starting with ``x`` quits.
    """

    def __init__(
        self,
        world: World,
        tps: int | None = None,
        poll: Callable[[], str | None] | None = None,
    ) -> None:
        if tps is not None and tps <= 0:
            raise ValueError("tps must be positive")
        self._world = world
        self._tps = tps
        self._poll = poll
        self._stop_hooks: list[StopHook] = []
        self._stop_reason: StopReason | None = None

    @property
    def world(self) -> World:
        return self._world

    @property
    def tps(self) -> int | None:
        return self._tps

    @property
    def dt(self) -> float:
        return 0.0 if self._tps is None else 1.0 / self._tps

    def on_stop(self, hook: StopHook) -> None:
        self._stop_hooks.append(hook)

    def request_stop(self) -> None:
        self._stop_reason = StopReason.REQUESTED

    def step(self) -> StopReason | None:
        """Poll once, then run one tick. Returns a reason if the run is over."""
        if self._poll is not None:
            command = self._poll()
            if command is not None and command.strip().lower().startswith(QUIT_COMMAND):
                return StopReason.QUIT
        self._world.update()
        if self._world.winner() is not None:
            return StopReason.WINNER
        return None

    def run(self, max_ticks: int | None = None) -> StopReason:
        """Run until a winner, the tick limit, a quit command or Ctrl-C."""
        self._stop_reason = None
        start_tick = self._world.tick_number
        dt = self.dt
        try:
            while self._stop_reason is None:
                if max_ticks is not None and self._world.tick_number - start_tick >= max_ticks:
                    self._stop_reason = StopReason.TICK_LIMIT
                    break
                started = time.monotonic()
                reason = self.step()
                if reason is not None:
                    self._stop_reason = reason
                    break
                sleep_time = dt - (time.monotonic() - started)
                if sleep_time > 0:
                    time.sleep(sleep_time)
        except KeyboardInterrupt:
            self._stop_reason = StopReason.INTERRUPTED

        reason = self._stop_reason
        log.info("run_stopped", reason=reason.value, tick=self._world.tick_number)
        for hook in self._stop_hooks:
            hook(self._world, reason)
        return reason
