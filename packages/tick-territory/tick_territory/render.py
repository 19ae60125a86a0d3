"""Terminal rendering of the grid, scoreboard and recent events."""
from __future__ import annotations

import random
from typing import TYPE_CHECKING

from rich.console import Console, Group
from rich.table import Table
from rich.text import Text

from tick_territory import signals
from tick_territory.signals import Signal

if TYPE_CHECKING:
    from tick_territory.domain import Domain
    from tick_territory.world import World


def render_grid(world: World) -> Text:
    """One line per row, each glyph styled with its tile color."""
    text = Text(no_wrap=True)
    for r, row in enumerate(world.cells()):
        if r:
            text.append("\n")
        for glyph, color in row:
            text.append(glyph, style=color.value)
    return text


def domain_status(domain: Domain) -> str:
    if domain.defeated:
        return "defeated"
    if domain.counter_offensive:
        return "counter-offensive"
    if domain.has_active_origin():
        return "holding origin"
    return "origin lost"


def render_scoreboard(world: World, rng: random.Random) -> Table:
    """Per-domain summary in roster order.

    Population is a display estimate drawn from *rng*, which must not be the
    world's own generator.
    """
    table = Table(title=f"Tick {world.tick_number}", title_justify="left")
    table.add_column("Domain")
    table.add_column("Tiles", justify="right")
    table.add_column("Housing", justify="right")
    table.add_column("Population", justify="right")
    table.add_column("Attack", justify="right")
    table.add_column("Defense", justify="right")
    table.add_column("Status")

    for domain in world.domains:
        table.add_row(
            Text(domain.name, style=domain.color.value),
            str(domain.tile_count),
            str(domain.housing_count),
            f"{domain.estimate_population(rng):.1f}",
            f"{domain.attack_power():.2f}",
            f"{domain.defense():.2f}",
            domain_status(domain),
        )
    return table


def describe_signal(world: World, signal: Signal) -> Text:
    domain = world.domain(signal.data["domain"])
    name = Text(domain.name, style=domain.color.value)
    if signal.name == signals.COUNTER_OFFENSIVE_START:
        body = " launches a counter-offensive!"
    elif signal.name == signals.COUNTER_OFFENSIVE_END:
        body = "'s counter-offensive ends"
    elif signal.name == signals.DOMAIN_REVIVED:
        body = f" rises again at {signal.data['at']}"
    elif signal.name == signals.DOMAIN_DEFEATED:
        body = " has been defeated"
    elif signal.name == signals.WINNER:
        body = " has conquered the world!"
    else:
        body = f" {signal.name.replace('_', ' ')}"
    return Text.assemble(f"[{signal.tick:>5}] ", name, body)


class TerminalRenderer:
    """Render hook for ``World.on_render`` that redraws the whole frame."""

    def __init__(
        self,
        console: Console | None = None,
        *,
        events: int = 5,
        clear: bool = True,
        rng: random.Random | None = None,
    ) -> None:
        self.console = console if console is not None else Console()
        self._events = events
        self._clear = clear
        self._rng = rng if rng is not None else random.Random()

    def frame(self, world: World) -> Group:
        parts: list[Text | Table] = [
            render_grid(world),
            render_scoreboard(world, self._rng),
        ]
        if self._events:
            for signal in world.signals.recent(self._events):
                parts.append(describe_signal(world, signal))
        winner = world.winner()
        if winner is not None:
            parts.append(
                Text.assemble(
                    "Winner: ", Text(winner.name, style=f"bold {winner.color.value}")
                )
            )
        return Group(*parts)

    def __call__(self, world: World) -> None:
        if self._clear:
            self.console.clear()
        self.console.print(self.frame(world))
