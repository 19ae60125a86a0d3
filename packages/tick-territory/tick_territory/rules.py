"""Fixed rule constants for the territory simulation.

Every probability the tick algorithm rolls lives here. The values are part
of the game's identity and are not meant to be tuned at runtime.
"""

from __future__ import annotations

from tick_territory.types import Color, TileType

# -- Domain posture --

ATTACK_BASE = 0.4
DEFENSE_BASE = 0.7
RECKLESS_ATTACK = 1.0  # origin lost
RECKLESS_DEFENSE = 0.0
COUNTER_OFFENSIVE_ATTACK = 1.0
COUNTER_OFFENSIVE_DEFENSE = 0.95

# -- Tile floors --

FORTIFICATION_ATTACK_FLOOR = 0.8
FORTIFICATION_DEFENSE_FLOOR = 0.9
BORDER_DEFENSE = 1.0
EMPTY_DEFENSE = 0.0

# -- Tile maturation --

FORTIFY_CHANCE = 0.025
HOUSING_CHANCE = 0.05
TILES_PER_HOUSING = 20
HOUSING_HYSTERESIS = 1.5

# -- Special events --

POSITIVE_EVENT_CHANCE = 0.12
COUNTER_OFFENSIVE_CHANCE = 0.025
UNDERDOG_CHANCE = 0.9
REVIVAL_CHANCE = 0.08
REVIVAL_ORIGIN_CHANCE = 0.5
COUNTER_OFFENSIVE_END_CHANCE = 0.025

# -- Population estimate (display only) --

POP_PER_TILE = 0.1
POP_PER_HOUSING = 2.0
POP_HOUSING_JITTER = 0.5
POP_JITTER = 0.1

# -- Presentation --

PALETTE: tuple[Color, ...] = (
    Color.RED,
    Color.BLUE,
    Color.GREEN,
    Color.MAGENTA,
    Color.YELLOW,
    Color.CYAN,
    Color.DARK_RED,
    Color.DARK_BLUE,
    Color.DARK_GREEN,
    Color.DARK_MAGENTA,
    Color.DARK_YELLOW,
    Color.DARK_CYAN,
    Color.GRAY,
)

EMPTY_COLOR = Color.WHITE
BORDER_COLOR = Color.DARK_GRAY

GLYPHS: dict[TileType, str] = {
    TileType.EMPTY: ".",
    TileType.BORDER: "#",
    TileType.ORIGIN: "@",
    TileType.NORMAL: "o",
    TileType.HOUSING: "h",
    TileType.FORTIFICATION: "X",
}
FRESH_GLYPH = "+"  # normal tile conquered this tick, not yet matured

BORDER_SYMBOL = "#"  # layout character for a border cell
