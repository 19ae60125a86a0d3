"""Special events: counter-offensives and domain revival.

The draws cascade rather than forming one categorical choice:

1. Roll for a positive event. On a miss, run the clearing branch.
2. Positive: roll for a counter-offensive; on a miss, roll for a revival.
3. Clearing: each domain independently may end its counter-offensive.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Callable

import structlog

from tick_territory import rules, signals
from tick_territory.types import TickContext, TileType

if TYPE_CHECKING:
    from tick_territory.domain import Domain
    from tick_territory.world import World

log = structlog.get_logger(__name__)


def start_counter_offensive(world: World, ctx: TickContext) -> Domain | None:
    """Grant a counter-offensive, usually to the weakest active domain.

    Needs at least two active domains. Returns the chosen domain.
    """
    board = world.active_domain_leaderboard()
    if len(board) < 2:
        return None
    if ctx.random.random() < rules.UNDERDOG_CHANCE:
        domain = board[-1]
    else:
        domain = board[0]
    if not domain.counter_offensive:
        domain.counter_offensive = True
        log.info("counter_offensive_started", domain=domain.name, tick=ctx.tick_number)
        world.signals.publish(
            signals.COUNTER_OFFENSIVE_START, ctx.tick_number, domain=domain.id
        )
    return domain


def revive_domain(world: World, ctx: TickContext) -> Domain | None:
    """Bring a defeated domain back on one tile taken from the leader."""
    defeated = world.defeated_domains()
    board = world.active_domain_leaderboard()
    if not defeated or not board:
        return None

    revived = ctx.random.choice(defeated)
    strongest = board[0]
    point = ctx.random.choice(sorted(strongest.tiles))
    prior_type = world.conquer(point, revived)
    revived.counter_offensive = True
    if prior_type is not TileType.ORIGIN:
        if ctx.random.random() < rules.REVIVAL_ORIGIN_CHANCE:
            world.set_origin(revived, point)

    log.info(
        "domain_revived",
        domain=revived.name,
        at=tuple(point),
        taken_from=strongest.name,
        tick=ctx.tick_number,
    )
    world.signals.publish(
        signals.DOMAIN_REVIVED,
        ctx.tick_number,
        domain=revived.id,
        taken_from=strongest.id,
        at=tuple(point),
    )
    return revived


def clear_counter_offensives(world: World, ctx: TickContext) -> list[Domain]:
    ended: list[Domain] = []
    for domain in world.domains:
        if ctx.random.random() >= rules.COUNTER_OFFENSIVE_END_CHANCE:
            continue
        if not domain.counter_offensive:
            continue
        domain.counter_offensive = False
        ended.append(domain)
        log.info("counter_offensive_ended", domain=domain.name, tick=ctx.tick_number)
        world.signals.publish(
            signals.COUNTER_OFFENSIVE_END, ctx.tick_number, domain=domain.id
        )
    return ended


def make_special_event_system() -> Callable[[World, TickContext], None]:
    """Return a system that runs the special-event cascade once per tick."""

    def special_event_system(world: World, ctx: TickContext) -> None:
        rng = ctx.random
        if rng.random() < rules.POSITIVE_EVENT_CHANCE:
            if rng.random() < rules.COUNTER_OFFENSIVE_CHANCE:
                start_counter_offensive(world, ctx)
            elif rng.random() < rules.REVIVAL_CHANCE:
                revive_domain(world, ctx)
        else:
            clear_counter_offensives(world, ctx)

    return special_event_system
