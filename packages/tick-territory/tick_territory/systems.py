"""System factories for the maturation, spread and commit phases.

A tick runs these in order. Spread only reads the world and fills the
conquest queue; commit is the only phase that moves tiles between domains.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Callable

import structlog

from tick_territory.commands import Conquest, ConquestQueue
from tick_territory.geometry import in_bounds_neighbors
from tick_territory.types import Point, TickContext, TileType

if TYPE_CHECKING:
    from tick_territory.world import World

log = structlog.get_logger(__name__)


def make_maturation_system(
    on_transition: Callable[[World, TickContext, Point, TileType], None] | None = None,
) -> Callable[[World, TickContext], None]:
    """Return a system that runs the tile state machine on every owned tile.

    Domains are visited in roster order, their tiles in coordinate order.
    """

    def maturation_system(world: World, ctx: TickContext) -> None:
        for domain in world.domains:
            for point in sorted(domain.tiles):
                new_type = world.tile_at(point).update(domain, ctx.random)
                if new_type is not None and on_transition is not None:
                    on_transition(world, ctx, point, new_type)

    return maturation_system


def make_spread_system(queue: ConquestQueue) -> Callable[[World, TickContext], None]:
    """Return a system that decides this tick's conquest attempts.

    Each owned tile fires with its attack power; a firing tile targets the
    first in-bounds, non-border neighbor in a shuffled direction order.
    At most one attempt is enqueued per tile.
    """

    def spread_system(world: World, ctx: TickContext) -> None:
        rng = ctx.random
        for domain in world.domains:
            for point in sorted(domain.tiles):
                tile = world.tile_at(point)
                if rng.random() >= tile.attack_power(domain):
                    continue
                directions = in_bounds_neighbors(point, world.dimensions)
                rng.shuffle(directions)
                for target in directions:
                    if world.tile_at(target).type is TileType.BORDER:
                        continue
                    queue.enqueue(Conquest(target, domain.id, point))
                    break

    return spread_system


def make_commit_system(
    queue: ConquestQueue,
    on_conquest: Callable[[World, Conquest, TileType], None] | None = None,
) -> Callable[[World, TickContext], None]:
    """Return a system that applies queued conquests in enqueue order.

    Defense is read when the attempt is applied, so earlier conquests in the
    same tick change the odds of later ones.
    """

    def commit_system(world: World, ctx: TickContext) -> None:
        def attempt(cmd: Conquest) -> bool:
            domain = world.domain(cmd.domain_id)
            tile = world.tile_at(cmd.target)
            if tile.domain_id == domain.id:
                return False
            defense = tile.defense(world.domain_of(tile))
            if ctx.random.random() >= 1.0 - defense:
                return False
            prior_type = world.conquer(cmd.target, domain)
            if on_conquest is not None and prior_type is not None:
                on_conquest(world, cmd, prior_type)
            return True

        results = queue.drain(attempt)
        if results:
            taken = sum(1 for _, ok in results if ok)
            log.debug(
                "spread_committed",
                tick=ctx.tick_number,
                attempts=len(results),
                conquered=taken,
            )

    return commit_system
