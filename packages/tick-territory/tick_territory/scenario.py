"""Scenario - setup files, random setups and the interactive wizard.

A scenario file holds labeled header lines followed by optional map rows::

    width: 12
    height: 6
    domains: 2
    domain: 2, 3
    domain: 3, 8
    ############
    #..........#
    #....#.....#
    #....#.....#
    #..........#
    ############

Positions are ``row, col``. ``#`` marks a border cell; any other map
character is open ground. Without map rows the grid gets a one-cell frame.
"""
from __future__ import annotations

import random
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, TypeVar

from tick_territory import rules
from tick_territory.geometry import interior, on_frame
from tick_territory.types import Point, Rect, ScenarioError

MIN_SIDE = 3

T = TypeVar("T")

_LABEL_RE = re.compile(r"^\s*(width|height|domains|domain)\s*:\s*(.*?)\s*$", re.IGNORECASE)


@dataclass(frozen=True)
class Scenario:
    dimensions: Rect
    positions: tuple[Point, ...]
    layout: tuple[str, ...] | None = None

    def is_border(self, point: Point) -> bool:
        if self.layout is None:
            return on_frame(point, self.dimensions)
        return self.layout[point.row][point.col] == rules.BORDER_SYMBOL


# -- Field parsing --


def parse_int(label: str, text: str, minimum: int, line: int | None = None) -> int:
    tokens = text.split()
    if len(tokens) != 1:
        raise ScenarioError(f"{label} expects one number, got {text!r}", line)
    try:
        value = int(tokens[0])
    except ValueError:
        raise ScenarioError(f"{label} is not a number: {tokens[0]!r}", line) from None
    if value < minimum:
        raise ScenarioError(f"{label} must be at least {minimum}, got {value}", line)
    return value


def parse_point(text: str, line: int | None = None) -> Point:
    tokens = [t for t in re.split(r"[\s,]+", text.strip()) if t]
    if len(tokens) != 2:
        raise ScenarioError(f"position expects 'row, col', got {text!r}", line)
    try:
        row, col = (int(t) for t in tokens)
    except ValueError:
        raise ScenarioError(f"position is not numeric: {text!r}", line) from None
    return Point(row, col)


def validate(scenario: Scenario) -> Scenario:
    """Check positions and layout against the dimensions."""
    dims = scenario.dimensions
    if scenario.layout is not None:
        if len(scenario.layout) != dims.height:
            raise ScenarioError(
                f"map has {len(scenario.layout)} rows, expected {dims.height}"
            )
        for r, row in enumerate(scenario.layout):
            if len(row) != dims.width:
                raise ScenarioError(
                    f"map row {r} has {len(row)} cells, expected {dims.width}"
                )
    seen: set[Point] = set()
    for point in scenario.positions:
        if not dims.contains(point):
            raise ScenarioError(
                f"position ({point.row}, {point.col}) is outside the "
                f"{dims.width}x{dims.height} grid"
            )
        if scenario.is_border(point):
            raise ScenarioError(f"position ({point.row}, {point.col}) is on a border")
        if point in seen:
            raise ScenarioError(f"position ({point.row}, {point.col}) is used twice")
        seen.add(point)
    return scenario


# -- Text format --


def parse_scenario(text: str) -> Scenario:
    """Decode a scenario file. Raises ScenarioError on malformed input."""
    header: dict[str, tuple[str, int]] = {}
    positions: list[Point] = []
    rows: list[str] = []

    for lineno, raw in enumerate(text.splitlines(), start=1):
        line = raw.rstrip("\r\n")
        if rows:
            rows.append(line)
            continue
        if not line.strip():
            continue
        match = _LABEL_RE.match(line)
        if match is None:
            rows.append(line)
            continue
        label, value = match.group(1).lower(), match.group(2)
        if label == "domain":
            positions.append(parse_point(value, lineno))
            continue
        if label in header:
            raise ScenarioError(f"duplicate {label!r} line", lineno)
        header[label] = (value, lineno)

    for label in ("width", "height", "domains"):
        if label not in header:
            raise ScenarioError(f"missing {label!r} line")

    width = parse_int("width", header["width"][0], MIN_SIDE, header["width"][1])
    height = parse_int("height", header["height"][0], MIN_SIDE, header["height"][1])
    count = parse_int("domains", header["domains"][0], 0, header["domains"][1])
    if len(positions) != count:
        raise ScenarioError(
            f"domains: {count} declared but {len(positions)} positions given"
        )

    while rows and not rows[-1].strip():
        rows.pop()
    layout = tuple(rows) if rows else None
    return validate(Scenario(Rect(width, height), tuple(positions), layout))


def format_scenario(scenario: Scenario) -> str:
    lines = [
        f"width: {scenario.dimensions.width}",
        f"height: {scenario.dimensions.height}",
        f"domains: {len(scenario.positions)}",
    ]
    lines.extend(f"domain: {p.row}, {p.col}" for p in scenario.positions)
    if scenario.layout is not None:
        lines.extend(scenario.layout)
    return "\n".join(lines) + "\n"


def load_scenario(path: str | Path) -> Scenario:
    return parse_scenario(Path(path).read_text(encoding="utf-8"))


def save_scenario(scenario: Scenario, path: str | Path) -> None:
    Path(path).write_text(format_scenario(scenario), encoding="utf-8")


# -- Generated setups --


def random_scenario(
    width: int, height: int, count: int, rng: random.Random
) -> Scenario:
    """Framed grid with *count* distinct random starting positions."""
    if width < MIN_SIDE or height < MIN_SIDE:
        raise ScenarioError(f"grid must be at least {MIN_SIDE}x{MIN_SIDE}")
    dims = Rect(width, height)
    cells = interior(dims)
    if count > len(cells):
        raise ScenarioError(
            f"{count} domains do not fit in {len(cells)} open cells"
        )
    return Scenario(dims, tuple(rng.sample(cells, count)))


# -- Interactive wizard --


def _ask(
    prompt: str,
    parse: Callable[[str], T],
    input_fn: Callable[[str], str],
    output_fn: Callable[[str], None],
) -> T:
    while True:
        answer = input_fn(prompt)
        try:
            return parse(answer)
        except ScenarioError as exc:
            output_fn(f"Invalid input: {exc}")


def run_wizard(
    input_fn: Callable[[str], str] = input,
    output_fn: Callable[[str], None] = print,
    rng: random.Random | None = None,
) -> Scenario:
    """Prompt for a scenario, re-asking until every answer is valid.

    An existing scenario file can be loaded instead of answering the
    questions; blank starting positions are chosen at random.
    """
    rng = rng if rng is not None else random.Random()

    while True:
        path = input_fn("Scenario file (blank to configure manually): ").strip()
        if not path:
            break
        try:
            return load_scenario(path)
        except OSError as exc:
            output_fn(f"Could not read {path}: {exc.strerror or exc}")
        except ScenarioError as exc:
            output_fn(f"Invalid scenario {path}: {exc}")

    width = _ask("Grid width: ", lambda s: parse_int("width", s, MIN_SIDE), input_fn, output_fn)
    height = _ask("Grid height: ", lambda s: parse_int("height", s, MIN_SIDE), input_fn, output_fn)
    dims = Rect(width, height)
    free = interior(dims)
    count = _ask(
        "Number of domains: ",
        lambda s: _parse_count(s, len(free)),
        input_fn,
        output_fn,
    )

    taken: list[Point] = []
    for i in range(count):

        def parse_position(text: str) -> Point:
            if not text.strip():
                return rng.choice([p for p in free if p not in taken])
            point = parse_point(text)
            validate(Scenario(dims, (*taken, point)))
            return point

        taken.append(
            _ask(
                f"Domain {i + 1} position (row, col) [blank = random]: ",
                parse_position,
                input_fn,
                output_fn,
            )
        )

    return Scenario(dims, tuple(taken))


def _parse_count(text: str, capacity: int) -> int:
    count = parse_int("domain count", text, 0)
    if count > capacity:
        raise ScenarioError(f"at most {capacity} domains fit on this grid")
    return count
