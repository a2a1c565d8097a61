from __future__ import annotations

from tacsim.domain import terrain
from tacsim.domain.enums import TerrainType
from tacsim.domain.models import Position
from tacsim.utils.rng import SeededRandom


class _FixedRolls:
    """Random source that replays a fixed sequence of rolls."""

    def __init__(self, rolls):
        self._rolls = list(rolls)
        self._index = 0

    def random(self) -> float:
        value = self._rolls[self._index % len(self._rolls)]
        self._index += 1
        return value

    def uniform(self, low: float, high: float) -> float:
        return low + (high - low) * self.random()


def test_grid_dimensions_follow_map_size():
    grid = terrain.generate_terrain(SeededRandom(1))
    assert grid.width == 60
    assert grid.height == 40
    assert grid.cell_size == 20
    assert grid.rows[3][7].x == 7
    assert grid.rows[3][7].y == 3


def test_generation_is_deterministic_per_seed():
    first = terrain.generate_terrain(SeededRandom("terrain"))
    second = terrain.generate_terrain(SeededRandom("terrain"))
    assert first == second


def test_roll_thresholds_map_to_terrain_types():
    rolls = [0.0, 0.149, 0.15, 0.249, 0.25, 0.299, 0.30, 0.329, 0.33, 0.99]
    grid = terrain.generate_terrain(_FixedRolls(rolls))
    kinds = [cell.terrain for cell in grid.rows[0][:10]]
    assert kinds == [
        TerrainType.FOREST,
        TerrainType.FOREST,
        TerrainType.HILL,
        TerrainType.HILL,
        TerrainType.URBAN,
        TerrainType.URBAN,
        TerrainType.WATER,
        TerrainType.WATER,
        TerrainType.OPEN,
        TerrainType.OPEN,
    ]


def test_cell_properties():
    hill = terrain.build_cell(0, 0, TerrainType.HILL)
    assert hill.elevation == 20.0
    assert hill.cover == 0.2

    water = terrain.build_cell(0, 0, TerrainType.WATER)
    assert water.elevation == -5.0
    assert water.movement_modifier == 0.0

    forest = terrain.build_cell(0, 0, TerrainType.FOREST)
    assert (forest.cover, forest.concealment, forest.movement_modifier) == (0.7, 0.8, 0.6)

    urban = terrain.build_cell(0, 0, TerrainType.URBAN)
    assert (urban.cover, urban.concealment) == (0.9, 0.6)


def test_cell_lookup_inside_grid():
    grid = terrain.uniform_terrain(TerrainType.FOREST)
    cell = terrain.cell_at(grid, Position(45, 61))
    assert (cell.x, cell.y) == (2, 3)
    assert cell.terrain == TerrainType.FOREST


def test_out_of_grid_lookup_falls_back_to_open():
    grid = terrain.uniform_terrain(TerrainType.URBAN)
    for position in (Position(-1, 10), Position(10, -1), Position(1200, 10), Position(10, 5000)):
        cell = terrain.cell_at(grid, position)
        assert cell.terrain == TerrainType.OPEN
        assert cell.cover == 0.0
        assert cell.movement_modifier == 1.0
