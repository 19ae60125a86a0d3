"""Grid geometry helpers: 4-neighborhood, taxicab distance, frame test."""
from __future__ import annotations

from tick_territory.types import Point, Rect

# Cardinal steps as (drow, dcol). Order is canonical; callers shuffle.
CARDINALS: tuple[tuple[int, int], ...] = ((-1, 0), (0, 1), (1, 0), (0, -1))


def neighbors(point: Point) -> list[Point]:
    """Return the four cardinal neighbors, without bounds checks."""
    return [point.offset(dr, dc) for dr, dc in CARDINALS]


def in_bounds_neighbors(point: Point, dimensions: Rect) -> list[Point]:
    return [p for p in neighbors(point) if dimensions.contains(p)]


def taxicab(a: Point, b: Point) -> int:
    return abs(a.row - b.row) + abs(a.col - b.col)


def on_frame(point: Point, dimensions: Rect) -> bool:
    """True if *point* lies on the outermost ring of *dimensions*."""
    return (
        point.row == 0
        or point.col == 0
        or point.row == dimensions.height - 1
        or point.col == dimensions.width - 1
    )


def check_bounds(point: Point, dimensions: Rect) -> None:
    if not dimensions.contains(point):
        raise ValueError(
            f"({point.row}, {point.col}) out of bounds for "
            f"{dimensions.width}x{dimensions.height} grid"
        )


def interior(dimensions: Rect) -> list[Point]:
    """All points not on the frame, in row-major order."""
    return [
        Point(r, c)
        for r in range(1, dimensions.height - 1)
        for c in range(1, dimensions.width - 1)
    ]
