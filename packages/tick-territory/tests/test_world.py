"""Tests for World construction, ownership transfer, scores and invariants."""
from __future__ import annotations

import pytest

from tick_territory import rules, signals
from tick_territory.domain import Domain
from tick_territory.geometry import taxicab
from tick_territory.types import Color, InvariantError, Point, Rect, TileType
from tick_territory.world import World


def _world(*positions: tuple[int, int], width: int = 10, height: int = 10) -> World:
    return World(Rect(width, height), [Point(*p) for p in positions], seed=42)


def _claim_all(world: World, domain: Domain, points: list[Point]) -> None:
    for point in points:
        world.conquer(point, domain)


# --- Construction ---


class TestConstruction:
    def test_generated_frame(self) -> None:
        world = _world()
        dims = world.dimensions
        for tile in world.tiles():
            p = tile.position
            on_edge = p.row in (0, dims.height - 1) or p.col in (0, dims.width - 1)
            assert (tile.type is TileType.BORDER) == on_edge
            if not on_edge:
                assert tile.type is TileType.EMPTY
            assert tile.domain_id is None

    def test_arena_size(self) -> None:
        world = _world(width=7, height=4)
        assert len(list(world.tiles())) == 28
        assert world.tile_at((3, 6)).position == Point(3, 6)

    def test_custom_layout(self) -> None:
        layout = [
            "#####",
            "#.#..",
            "#...#",
        ]
        world = World(Rect(5, 3), [Point(1, 1)], layout, seed=1)
        assert world.tile_at((1, 2)).type is TileType.BORDER
        assert world.tile_at((1, 4)).type is TileType.EMPTY
        assert world.tile_at((1, 1)).type is TileType.ORIGIN

    def test_domains_spawn_on_origin_tiles(self) -> None:
        world = _world((2, 2), (7, 7))
        red, blue = world.domains
        assert red.id == 0 and blue.id == 1
        assert red.origin == Point(2, 2)
        assert red.has_active_origin()
        assert red.tiles == {Point(2, 2)}
        tile = world.tile_at((7, 7))
        assert tile.type is TileType.ORIGIN
        assert tile.domain_id == blue.id
        assert tile.color is Color.BLUE
        assert tile.glyph == "@"

    def test_palette_round_robin(self) -> None:
        positions = [(1, c) for c in range(1, 16)]
        world = World(Rect(20, 5), [Point(*p) for p in positions], seed=0)
        colors = [d.color for d in world.domains]
        assert colors[:13] == list(rules.PALETTE)
        assert colors[13] is rules.PALETTE[0]
        assert colors[14] is rules.PALETTE[1]

        names = [d.name for d in world.domains]
        assert len(set(names)) == len(names)
        assert names[0] == "Red"
        assert names[13] == "Red 2"
        assert names[14] == "Blue 2"

    def test_seed_is_recorded(self) -> None:
        assert _world().seed == 42
        assert isinstance(World(Rect(5, 5)).seed, int)

    def test_tile_at_out_of_bounds(self) -> None:
        with pytest.raises(ValueError, match="out of bounds"):
            _world().tile_at((10, 0))

    def test_unknown_domain(self) -> None:
        with pytest.raises(KeyError):
            _world((2, 2)).domain(5)

    def test_cells_contract(self) -> None:
        world = _world((2, 3), width=6, height=5)
        cells = world.cells()
        assert len(cells) == 5
        assert all(len(row) == 6 for row in cells)
        assert cells[0][0] == ("#", Color.DARK_GRAY)
        assert cells[1][1] == (".", Color.WHITE)
        assert cells[2][3] == ("@", Color.RED)


# --- Ownership ---


class TestConquer:
    def test_conquer_empty_tile(self) -> None:
        world = _world((5, 5))
        red = world.domain(0)
        assert world.conquer(Point(5, 6), red) is TileType.EMPTY
        tile = world.tile_at((5, 6))
        assert tile.domain_id == red.id
        assert tile.type is TileType.NORMAL
        assert tile.glyph == "+"
        assert red.tile_count == 2
        world.check_invariants()

    def test_conquer_own_tile_is_noop(self) -> None:
        world = _world((5, 5))
        red = world.domain(0)
        world.conquer(Point(5, 6), red)
        before = world.cells()
        assert world.conquer(Point(5, 6), red) is None
        assert world.conquer(Point(5, 5), red) is None
        assert world.cells() == before
        assert red.tile_count == 2

    def test_conquer_border_raises(self) -> None:
        world = _world((5, 5))
        with pytest.raises(ValueError, match="Border"):
            world.conquer(Point(0, 3), world.domain(0))
        assert world.tile_at((0, 3)).type is TileType.BORDER

    def test_conquest_transfers_between_domains(self) -> None:
        world = _world((2, 2), (7, 7))
        red, blue = world.domains
        world.conquer(Point(2, 3), red)
        world.conquer(Point(2, 3), blue)
        assert Point(2, 3) not in red.tiles
        assert Point(2, 3) in blue.tiles
        assert world.tile_at((2, 3)).color is Color.BLUE
        world.check_invariants()

    def test_housing_released_on_conquest(self) -> None:
        world = _world((2, 2), (7, 7))
        red, blue = world.domains
        world.conquer(Point(2, 3), red)
        tile = world.tile_at((2, 3))
        tile.type = TileType.HOUSING
        red.housing.add(Point(2, 3))
        world.check_invariants()

        world.conquer(Point(2, 3), blue)
        assert not red.housing
        assert not blue.housing
        assert tile.type is TileType.NORMAL
        world.check_invariants()

    def test_losing_origin_flips_posture(self) -> None:
        world = _world((2, 2), (7, 7))
        red, blue = world.domains
        world.conquer(Point(2, 3), red)
        world.conquer(Point(2, 2), blue)
        assert not red.has_active_origin()
        assert red.attack_power() == 1.0
        assert red.defense() == 0.0
        # blue already had an origin, so the captured one is just a tile
        assert blue.origin == Point(7, 7)
        assert world.tile_at((2, 2)).type is TileType.NORMAL

    def test_retaking_origin_reactivates_it(self) -> None:
        world = _world((2, 2), (7, 7))
        red, blue = world.domains
        world.conquer(Point(2, 3), red)
        world.conquer(Point(2, 2), blue)
        world.conquer(Point(2, 2), red)
        assert red.has_active_origin()
        assert red.attack_power() == 0.4
        assert red.defense() == 0.7
        assert world.tile_at((2, 2)).type is TileType.ORIGIN

    def test_origin_adopted_when_acquirer_has_none(self) -> None:
        world = _world((2, 2), (7, 7))
        red, blue = world.domains
        world.conquer(Point(7, 6), red)
        world.conquer(Point(7, 7), red)  # blue loses its origin and last tile
        assert blue.defeated
        world.conquer(Point(2, 2), blue)  # blue, origin-less, takes red's origin
        assert blue.origin == Point(2, 2)
        assert blue.has_active_origin()
        assert world.tile_at((2, 2)).type is TileType.ORIGIN
        assert not red.has_active_origin()
        world.check_invariants()

    def test_set_origin_moves_marker(self) -> None:
        world = _world((2, 2))
        red = world.domain(0)
        world.conquer(Point(2, 3), red)
        world.set_origin(red, Point(2, 3))
        assert red.origin == Point(2, 3)
        assert world.tile_at((2, 3)).type is TileType.ORIGIN
        assert world.tile_at((2, 2)).type is TileType.NORMAL
        world.check_invariants()

    def test_set_origin_requires_control(self) -> None:
        world = _world((2, 2))
        with pytest.raises(ValueError):
            world.set_origin(world.domain(0), Point(5, 5))

    def test_defeat_publishes_signal(self) -> None:
        world = _world((2, 2), (7, 7))
        red, blue = world.domains
        world.conquer(Point(7, 7), red)
        pending = world.signals.pending()
        assert [s.name for s in pending] == [signals.DOMAIN_DEFEATED]
        assert pending[0].data == {"domain": blue.id, "by": red.id}


# --- Scores ---


class TestScores:
    def test_defeated_and_leaderboard(self) -> None:
        world = _world((2, 2), (7, 7))
        x, y = world.domains
        world.conquer(Point(2, 2), y)
        assert world.defeated_domains() == [x]
        assert world.active_domain_leaderboard() == [y]

    def test_leaderboard_descending(self) -> None:
        world = _world((2, 2), (5, 5), (7, 7))
        a, b, c = world.domains
        _claim_all(world, c, [Point(7, 6), Point(7, 5)])
        _claim_all(world, b, [Point(5, 6)])
        assert world.active_domain_leaderboard() == [c, b, a]

    def test_leaderboard_ties_keep_roster_order(self) -> None:
        world = _world((2, 2), (5, 5), (7, 7))
        assert world.active_domain_leaderboard() == list(world.domains)

    def test_winner_with_one_survivor(self) -> None:
        world = _world((2, 2), (5, 5), (7, 7))
        a, b, c = world.domains
        _claim_all(world, b, [Point(2, 2), Point(7, 7)])
        assert world.winner() is b

    def test_no_winner_while_contested(self) -> None:
        assert _world((2, 2), (7, 7)).winner() is None

    def test_single_domain_never_wins(self) -> None:
        assert _world((2, 2)).winner() is None

    def test_empty_roster_has_no_winner(self) -> None:
        world = _world()
        assert world.winner() is None
        assert world.active_domain_leaderboard() == []
        assert world.defeated_domains() == []


# --- Invariants ---


class TestInvariants:
    def test_detects_orphaned_tile(self) -> None:
        world = _world((2, 2))
        world.tile_at((2, 2)).domain_id = None
        with pytest.raises(InvariantError):
            world.check_invariants()

    def test_detects_missing_membership(self) -> None:
        world = _world((2, 2))
        world.domain(0).tiles.clear()
        with pytest.raises(InvariantError):
            world.check_invariants()

    def test_detects_stray_housing(self) -> None:
        world = _world((2, 2))
        world.domain(0).housing.add(Point(4, 4))
        with pytest.raises(InvariantError):
            world.check_invariants()


# --- Update ---


class TestUpdate:
    def test_one_tick_spreads_one_tile(self, monkeypatch) -> None:
        monkeypatch.setattr(Domain, "attack_power", lambda self: 1.0)
        world = _world((5, 5))
        world.update()
        red = world.domain(0)
        assert red.tile_count == 2
        (gained,) = red.tiles - {Point(5, 5)}
        assert taxicab(gained, Point(5, 5)) == 1
        assert world.tile_at(gained).type is TileType.NORMAL
        world.check_invariants()

    def test_tick_counter_and_render_hook(self) -> None:
        world = _world((5, 5))
        seen: list[int] = []
        world.on_render(lambda w: seen.append(w.tick_number))
        world.update()
        world.update()
        assert world.tick_number == 2
        assert seen == [1, 2]

    def test_extra_system_runs_after_builtins(self) -> None:
        world = _world((5, 5))
        ticks: list[int] = []
        world.add_system(lambda w, ctx: ticks.append(ctx.tick_number))
        world.update()
        assert ticks == [1]

    def test_winner_signal_on_update(self, monkeypatch) -> None:
        monkeypatch.setattr(rules, "POSITIVE_EVENT_CHANCE", 0.0)
        world = _world((2, 2), (7, 7))
        red, blue = world.domains
        world.conquer(Point(7, 7), red)
        received: list[str] = []
        world.signals.subscribe("*", lambda s: received.append(s.name))
        world.update()
        assert world.winner() is red
        assert received == [signals.DOMAIN_DEFEATED, signals.WINNER]

    def test_border_never_owned(self) -> None:
        world = World(Rect(12, 8), [Point(1, 1), Point(6, 10)], seed=3)
        for _ in range(100):
            world.update()
        for tile in world.tiles():
            if tile.type is TileType.BORDER:
                assert tile.domain_id is None
                assert tile.defense(None) == 1.0

    def test_invariants_hold_every_tick(self) -> None:
        world = World(Rect(20, 12), [Point(2, 2), Point(9, 17), Point(5, 9), Point(9, 3)], seed=11)
        for _ in range(200):
            world.update()
            world.check_invariants()
            claimed = {t.position for t in world.tiles() if t.type.claimable}
            union: set[Point] = set()
            for domain in world.domains:
                assert not union & domain.tiles
                union |= domain.tiles
            assert union == claimed


class TestDeterminism:
    def _frames(self, seed: int, ticks: int = 60) -> list[list[list[tuple]]]:
        world = World(Rect(16, 10), [Point(2, 2), Point(7, 13), Point(4, 8)], seed=seed)
        frames = []
        for _ in range(ticks):
            world.update()
            frames.append(world.cells())
        return frames

    def test_same_seed_same_frames(self) -> None:
        assert self._frames(1234) == self._frames(1234)

    def test_different_seeds_diverge(self) -> None:
        assert self._frames(1) != self._frames(2)
