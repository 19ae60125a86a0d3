"""tick-territory - A turn-based territorial spreading simulation."""

from tick_territory.commands import Conquest, ConquestQueue
from tick_territory.domain import Domain
from tick_territory.engine import Engine, StopReason
from tick_territory.scenario import Scenario, load_scenario, parse_scenario
from tick_territory.signals import Signal, SignalBus
from tick_territory.tile import Tile
from tick_territory.types import (
    Color,
    InactiveOriginError,
    InvariantError,
    Point,
    Rect,
    ScenarioError,
    TickContext,
    TileType,
)
from tick_territory.world import World

__all__ = [
    "World",
    "Engine",
    "StopReason",
    "Domain",
    "Tile",
    "TileType",
    "Point",
    "Rect",
    "Color",
    "Conquest",
    "ConquestQueue",
    "Signal",
    "SignalBus",
    "Scenario",
    "load_scenario",
    "parse_scenario",
    "TickContext",
    "InactiveOriginError",
    "InvariantError",
    "ScenarioError",
]
