"""Shared value types and errors for the territory simulation."""

from __future__ import annotations

import enum
import random as _random
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, NamedTuple

DomainId = int


class Point(NamedTuple):
    """Grid coordinate. Rows grow downward, columns grow rightward."""

    row: int
    col: int

    def offset(self, drow: int, dcol: int) -> Point:
        return Point(self.row + drow, self.col + dcol)


class Rect(NamedTuple):
    width: int
    height: int

    def contains(self, point: Point) -> bool:
        return 0 <= point.row < self.height and 0 <= point.col < self.width


class TileType(enum.Enum):
    EMPTY = "empty"
    BORDER = "border"
    NORMAL = "normal"
    ORIGIN = "origin"
    HOUSING = "housing"
    FORTIFICATION = "fortification"

    @property
    def claimable(self) -> bool:
        """True for types that always carry an owning domain."""
        return self not in (TileType.EMPTY, TileType.BORDER)


class Color(enum.Enum):
    """Terminal colors. Values are rich style names."""

    RED = "bright_red"
    DARK_RED = "red"
    BLUE = "bright_blue"
    DARK_BLUE = "blue"
    GREEN = "bright_green"
    DARK_GREEN = "green"
    CYAN = "bright_cyan"
    DARK_CYAN = "cyan"
    YELLOW = "bright_yellow"
    DARK_YELLOW = "yellow"
    MAGENTA = "bright_magenta"
    DARK_MAGENTA = "magenta"
    WHITE = "bright_white"
    GRAY = "white"
    DARK_GRAY = "bright_black"
    BLACK = "black"

    @property
    def label(self) -> str:
        return self.name.replace("_", " ").title()


class InactiveOriginError(LookupError):
    """Raised when an operation needs an origin the domain does not control."""

    def __init__(self, domain_id: DomainId, message: str) -> None:
        self.domain_id = domain_id
        super().__init__(message)


class InvariantError(AssertionError):
    """Raised when the tile/domain bookkeeping disagrees with itself."""


class ScenarioError(ValueError):
    """Raised on malformed scenario input (setup file or wizard answers)."""

    def __init__(self, message: str, line: int | None = None) -> None:
        self.line = line
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)


@dataclass(frozen=True, slots=True)
class TickContext:
    tick_number: int
    random: _random.Random


if TYPE_CHECKING:
    from tick_territory.world import World

System = Callable[["World", TickContext], None]
