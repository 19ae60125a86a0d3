"""Domain - a faction and its aggregate combat statistics."""

from __future__ import annotations

import random

from tick_territory import rules
from tick_territory.geometry import taxicab
from tick_territory.types import Color, DomainId, InactiveOriginError, Point


class Domain:
    """A competing faction.

    The domain never owns tiles. ``tiles`` and ``housing`` are coordinate
    views into the World's arena; the World keeps them in step with each
    tile's domain id.
    """

    def __init__(
        self,
        domain_id: DomainId,
        color: Color,
        origin: Point | None = None,
        name: str | None = None,
    ) -> None:
        self._id = domain_id
        self._color = color
        self.name = name if name is not None else color.label
        self.origin = origin
        self.tiles: set[Point] = set()
        self.housing: set[Point] = set()
        self.counter_offensive = False

    def __repr__(self) -> str:
        return f"Domain({self._id}, {self.name!r}, tiles={len(self.tiles)})"

    @property
    def id(self) -> DomainId:
        return self._id

    @property
    def color(self) -> Color:
        return self._color

    @property
    def tile_count(self) -> int:
        return len(self.tiles)

    @property
    def housing_count(self) -> int:
        return len(self.housing)

    @property
    def defeated(self) -> bool:
        return not self.tiles

    def has_active_origin(self) -> bool:
        return self.origin is not None and self.origin in self.tiles

    # -- Membership (called by the World only) --

    def add_tile(self, point: Point) -> None:
        self.tiles.add(point)

    def remove_tile(self, point: Point) -> None:
        self.tiles.discard(point)
        self.housing.discard(point)

    # -- Aggregate stats --

    def attack_power(self) -> float:
        if self.counter_offensive:
            return rules.COUNTER_OFFENSIVE_ATTACK
        if self.has_active_origin():
            return rules.ATTACK_BASE
        return rules.RECKLESS_ATTACK

    def defense(self) -> float:
        if self.counter_offensive:
            return rules.COUNTER_OFFENSIVE_DEFENSE
        if self.has_active_origin():
            return rules.DEFENSE_BASE
        return rules.RECKLESS_DEFENSE

    def distance_to_origin(self, point: Point) -> int:
        """Taxicab distance from *point* to the origin.

        Raises InactiveOriginError if the origin is not currently controlled.
        """
        if self.origin is None or not self.has_active_origin():
            raise InactiveOriginError(
                self._id, f"Domain {self._id} has no active origin"
            )
        return taxicab(point, self.origin)

    def housing_target(self) -> int:
        return self.tile_count // rules.TILES_PER_HOUSING

    def estimate_population(self, rng: random.Random) -> float:
        per_house = rules.POP_PER_HOUSING + rules.POP_HOUSING_JITTER * rng.random()
        base = rules.POP_PER_TILE * self.tile_count + self.housing_count * per_house
        return base * (1.0 + rules.POP_JITTER * rng.random())
