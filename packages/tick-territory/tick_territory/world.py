"""World - tile arena, domain roster, and the per-tick update."""

from __future__ import annotations

import os
import random
from typing import Callable, Iterator, Sequence

import structlog

from tick_territory import rules, signals
from tick_territory.commands import ConquestQueue
from tick_territory.domain import Domain
from tick_territory.events import make_special_event_system
from tick_territory.geometry import check_bounds, on_frame
from tick_territory.signals import SignalBus
from tick_territory.systems import (
    make_commit_system,
    make_maturation_system,
    make_spread_system,
)
from tick_territory.tile import Tile
from tick_territory.types import (
    Color,
    DomainId,
    InvariantError,
    Point,
    Rect,
    System,
    TickContext,
    TileType,
)

log = structlog.get_logger(__name__)

RenderHook = Callable[["World"], None]


class World:
    """Sole owner of every tile and of the ordered domain roster.

    Tiles live in a flat row-major arena and are only mutated in place.
    Domains are appended once per starting position and are never removed
    or reordered; a domain at zero tiles is defeated, not gone.
    """

    def __init__(
        self,
        dimensions: Rect | tuple[int, int],
        starting_positions: Sequence[Point | tuple[int, int]] = (),
        layout: Sequence[str] | None = None,
        *,
        seed: int | None = None,
        rng: random.Random | None = None,
    ) -> None:
        if rng is None:
            if seed is None:
                seed = int.from_bytes(os.urandom(8))
            rng = random.Random(seed)
        self._seed = seed
        self._rng = rng
        self._dimensions = Rect(*dimensions)
        self._tiles: list[Tile] = self._build_arena(layout)
        self._domains: list[Domain] = []
        self._tick_number = 0
        self._queue = ConquestQueue()
        self._render_hooks: list[RenderHook] = []
        self._winner_announced = False
        self.signals = SignalBus()
        self._systems: list[System] = [
            make_maturation_system(),
            make_spread_system(self._queue),
            make_commit_system(self._queue),
            make_special_event_system(),
        ]

        for position in starting_positions:
            self.spawn_domain(Point(*position))

    def _build_arena(self, layout: Sequence[str] | None) -> list[Tile]:
        tiles: list[Tile] = []
        for r in range(self._dimensions.height):
            for c in range(self._dimensions.width):
                point = Point(r, c)
                if layout is None:
                    is_border = on_frame(point, self._dimensions)
                else:
                    is_border = layout[r][c] == rules.BORDER_SYMBOL
                tiles.append(Tile.border(point) if is_border else Tile.empty(point))
        return tiles

    # -- Properties --

    @property
    def dimensions(self) -> Rect:
        return self._dimensions

    @property
    def seed(self) -> int | None:
        return self._seed

    @property
    def random(self) -> random.Random:
        return self._rng

    @property
    def tick_number(self) -> int:
        return self._tick_number

    @property
    def domains(self) -> tuple[Domain, ...]:
        return tuple(self._domains)

    # -- Lookup --

    def tile_at(self, point: Point | tuple[int, int]) -> Tile:
        point = Point(*point)
        check_bounds(point, self._dimensions)
        return self._tiles[point.row * self._dimensions.width + point.col]

    def tiles(self) -> Iterator[Tile]:
        return iter(self._tiles)

    def domain(self, domain_id: DomainId) -> Domain:
        if not 0 <= domain_id < len(self._domains):
            raise KeyError(f"Unknown domain {domain_id}")
        return self._domains[domain_id]

    def domain_of(self, tile: Tile) -> Domain | None:
        if tile.domain_id is None:
            return None
        return self.domain(tile.domain_id)

    def cells(self) -> list[list[tuple[str, Color]]]:
        """Rows of ``(glyph, color)`` pairs, the contract renderers consume."""
        width = self._dimensions.width
        return [
            [(t.glyph, t.color) for t in self._tiles[r * width:(r + 1) * width]]
            for r in range(self._dimensions.height)
        ]

    # -- Ownership --

    def spawn_domain(self, position: Point) -> Domain:
        """Create a domain whose origin tile sits at *position*."""
        domain_id = len(self._domains)
        wrap, index = divmod(domain_id, len(rules.PALETTE))
        color = rules.PALETTE[index]
        # Colors repeat after the palette wraps; names must not.
        name = color.label if wrap == 0 else f"{color.label} {wrap + 1}"
        domain = Domain(domain_id, color, origin=position, name=name)
        self._domains.append(domain)
        tile = self.tile_at(position)
        self._transfer(tile, domain)
        tile.type = TileType.ORIGIN
        tile.fresh = False
        log.debug("domain_spawned", domain=domain.name, origin=tuple(position))
        return domain

    def conquer(self, point: Point, domain: Domain) -> TileType | None:
        """Hand the tile at *point* to *domain* unconditionally.

        Returns the tile's type before the conquest, or None when the tile
        already belongs to *domain*. Border tiles cannot be conquered.
        """
        tile = self.tile_at(point)
        if tile.type is TileType.BORDER:
            raise ValueError(f"Border tile at {tuple(point)} cannot be conquered")
        if tile.domain_id == domain.id:
            return None

        prior_type = tile.type
        had_origin = domain.has_active_origin()
        self._transfer(tile, domain)

        if prior_type is TileType.ORIGIN and not had_origin:
            domain.origin = tile.position
            log.debug("origin_adopted", domain=domain.name, origin=tuple(point))
        if domain.origin == tile.position:
            tile.type = TileType.ORIGIN
            tile.fresh = False
        return prior_type

    def set_origin(self, domain: Domain, point: Point) -> None:
        """Move *domain*'s origin to a tile it controls."""
        if point not in domain.tiles:
            raise ValueError(f"{domain.name} does not control {tuple(point)}")
        old = domain.origin
        if old is not None and old != point and old in domain.tiles:
            old_tile = self.tile_at(old)
            if old_tile.type is TileType.ORIGIN:
                old_tile.type = TileType.NORMAL
        domain.origin = point
        tile = self.tile_at(point)
        if tile.type is TileType.HOUSING:
            domain.housing.discard(point)
        tile.type = TileType.ORIGIN
        tile.fresh = False

    def _transfer(self, tile: Tile, domain: Domain) -> None:
        prior = self.domain_of(tile)
        if prior is not None:
            tile.destroy(prior)
            prior.remove_tile(tile.position)
            if prior.defeated:
                log.info("domain_defeated", domain=prior.name, by=domain.name)
                self.signals.publish(
                    signals.DOMAIN_DEFEATED,
                    self._tick_number + 1,
                    domain=prior.id,
                    by=domain.id,
                )
        tile.claim(domain)
        domain.add_tile(tile.position)

    # -- Tick --

    def add_system(self, system: System) -> None:
        """Append an extra phase after the built-in ones."""
        self._systems.append(system)

    def on_render(self, hook: RenderHook) -> None:
        self._render_hooks.append(hook)

    def update(self) -> None:
        """Advance the simulation by exactly one tick."""
        ctx = TickContext(self._tick_number + 1, self._rng)
        for system in self._systems:
            system(self, ctx)
        self._tick_number = ctx.tick_number

        winner = self.winner()
        if winner is not None and not self._winner_announced:
            self._winner_announced = True
            log.info("winner", domain=winner.name, tick=self._tick_number)
            self.signals.publish(signals.WINNER, self._tick_number, domain=winner.id)
        elif winner is None:
            self._winner_announced = False

        self.signals.flush()
        for hook in self._render_hooks:
            hook(self)

    # -- Scores --

    def active_domain_leaderboard(self) -> list[Domain]:
        """Domains with tiles, most tiles first; ties keep roster order."""
        active = [d for d in self._domains if d.tile_count > 0]
        return sorted(active, key=lambda d: -d.tile_count)

    def defeated_domains(self) -> list[Domain]:
        return [d for d in self._domains if d.tile_count == 0]

    def winner(self) -> Domain | None:
        if len(self._domains) < 2:
            return None
        active = [d for d in self._domains if d.tile_count > 0]
        if len(active) == 1:
            return active[0]
        return None

    # -- Invariants --

    def check_invariants(self) -> None:
        """Raise InvariantError if tiles and domains disagree."""
        owned = 0
        for tile in self._tiles:
            if tile.type.claimable != (tile.domain_id is not None):
                raise InvariantError(
                    f"{tile!r}: type {tile.type.name} with domain {tile.domain_id}"
                )
            if tile.domain_id is None:
                continue
            owned += 1
            domain = self.domain(tile.domain_id)
            if tile.position not in domain.tiles:
                raise InvariantError(f"{tile!r} missing from {domain.name}")
            if (tile.type is TileType.HOUSING) != (tile.position in domain.housing):
                raise InvariantError(f"{tile!r} housing bookkeeping mismatch")

        total = 0
        for domain in self._domains:
            total += domain.tile_count
            if not domain.housing <= domain.tiles:
                raise InvariantError(f"{domain.name} housing outside its tiles")
            for point in domain.tiles:
                if self.tile_at(point).domain_id != domain.id:
                    raise InvariantError(f"{domain.name} lists foreign tile {point}")
        if total != owned:
            raise InvariantError(f"{total} tiles listed by domains, {owned} owned")
