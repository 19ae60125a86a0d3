"""Tile - one grid cell and its per-tick maturation state machine."""

from __future__ import annotations

import math
import random

from tick_territory import rules
from tick_territory.domain import Domain
from tick_territory.types import Color, DomainId, Point, TileType

# Types the maturation pass evaluates.
MATURING = (TileType.NORMAL, TileType.HOUSING)


def fortify_chance(distance: int, tile_count: int) -> float:
    """Promotion chance once the fortify trial has fired.

    Tiles near the origin of a large domain fortify most readily.
    """
    return math.exp(-(distance / 2 + 100 / tile_count))


class Tile:
    """A single grid cell.

    ``domain_id`` is a back-reference into the World's roster, never
    ownership. EMPTY and BORDER tiles have no domain; every other type has one.
    """

    __slots__ = ("_position", "type", "color", "domain_id", "fresh")

    def __init__(
        self,
        position: Point,
        type: TileType = TileType.EMPTY,
        color: Color = rules.EMPTY_COLOR,
        domain_id: DomainId | None = None,
    ) -> None:
        self._position = position
        self.type = type
        self.color = color
        self.domain_id = domain_id
        self.fresh = False

    @classmethod
    def empty(cls, position: Point) -> Tile:
        return cls(position)

    @classmethod
    def border(cls, position: Point) -> Tile:
        return cls(position, TileType.BORDER, rules.BORDER_COLOR)

    def __repr__(self) -> str:
        return (
            f"Tile({self._position.row}, {self._position.col}, "
            f"{self.type.name}, domain={self.domain_id})"
        )

    @property
    def position(self) -> Point:
        return self._position

    @property
    def glyph(self) -> str:
        if self.type is TileType.NORMAL and self.fresh:
            return rules.FRESH_GLYPH
        return rules.GLYPHS[self.type]

    # -- Ownership transitions (driven by the World) --

    def claim(self, domain: Domain, type: TileType = TileType.NORMAL) -> None:
        self.domain_id = domain.id
        self.color = domain.color
        self.type = type
        self.fresh = type is TileType.NORMAL

    def destroy(self, owner: Domain) -> None:
        """Release bookkeeping held by *owner* before the tile changes hands."""
        if self.type is TileType.HOUSING:
            owner.housing.discard(self._position)

    # -- Combat --

    def attack_power(self, domain: Domain) -> float:
        power = domain.attack_power()
        if self.type is TileType.FORTIFICATION:
            return max(rules.FORTIFICATION_ATTACK_FLOOR, power)
        return power

    def defense(self, domain: Domain | None) -> float:
        if self.type is TileType.BORDER:
            return rules.BORDER_DEFENSE
        if domain is None:
            return rules.EMPTY_DEFENSE
        value = domain.defense()
        if self.type is TileType.FORTIFICATION:
            return max(rules.FORTIFICATION_DEFENSE_FLOOR, value)
        return value

    # -- Maturation --

    def update(self, domain: Domain, rng: random.Random) -> TileType | None:
        """Advance this tile by one tick. Returns the new type on a change."""
        if self.type not in MATURING:
            return None

        if self.fresh:
            self.fresh = False
            return None

        if rng.random() < rules.FORTIFY_CHANCE:
            if self.type is TileType.NORMAL and domain.has_active_origin():
                chance = fortify_chance(
                    domain.distance_to_origin(self._position), domain.tile_count
                )
                if rng.random() < chance:
                    self.type = TileType.FORTIFICATION
                    return self.type
            return None

        if rng.random() < rules.HOUSING_CHANCE:
            return self._update_housing(domain)
        return None

    def _update_housing(self, domain: Domain) -> TileType | None:
        target = domain.housing_target()
        if self.type is TileType.NORMAL:
            if domain.housing_count < target:
                self.type = TileType.HOUSING
                domain.housing.add(self._position)
                return self.type
        elif domain.housing_count > target * rules.HOUSING_HYSTERESIS:
            self.type = TileType.NORMAL
            domain.housing.discard(self._position)
            return self.type
        return None
