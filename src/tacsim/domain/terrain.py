"""Procedural terrain generation and grid lookup."""

from __future__ import annotations

import math

from tacsim.domain.enums import TerrainType
from tacsim.domain.models import Position, TerrainCell, TerrainGrid
from tacsim.domain.rules_config import DEFAULT_RULES, RulesConfig
from tacsim.utils.rng import RandomSource

# Cumulative draw thresholds; anything above the last one is open ground.
TERRAIN_DISTRIBUTION: tuple[tuple[float, TerrainType], ...] = (
    (0.15, TerrainType.FOREST),
    (0.25, TerrainType.HILL),
    (0.30, TerrainType.URBAN),
    (0.33, TerrainType.WATER),
)

TERRAIN_ELEVATION = {TerrainType.HILL: 20.0, TerrainType.WATER: -5.0, TerrainType.MOUNTAIN: 60.0}
TERRAIN_COVER = {TerrainType.FOREST: 0.7, TerrainType.URBAN: 0.9}
TERRAIN_CONCEALMENT = {TerrainType.FOREST: 0.8, TerrainType.URBAN: 0.6}
TERRAIN_MOVEMENT = {TerrainType.WATER: 0.0, TerrainType.FOREST: 0.6}

DEFAULT_COVER = 0.2
DEFAULT_CONCEALMENT = 0.1


def build_cell(x: int, y: int, terrain: TerrainType) -> TerrainCell:
    """Create a cell with the standard properties of ``terrain``."""

    return TerrainCell(
        x=x,
        y=y,
        terrain=terrain,
        elevation=TERRAIN_ELEVATION.get(terrain, 0.0),
        cover=TERRAIN_COVER.get(terrain, DEFAULT_COVER),
        concealment=TERRAIN_CONCEALMENT.get(terrain, DEFAULT_CONCEALMENT),
        movement_modifier=TERRAIN_MOVEMENT.get(terrain, 1.0),
    )


def generate_terrain(
    rng: RandomSource,
    *,
    rules: RulesConfig = DEFAULT_RULES,
) -> TerrainGrid:
    """Generate the map grid once at scenario start."""

    sim = rules.simulation
    columns = math.ceil(sim.map_width / sim.cell_size)
    rows_count = math.ceil(sim.map_height / sim.cell_size)

    rows: list[tuple[TerrainCell, ...]] = []
    for y in range(rows_count):
        row = tuple(build_cell(x, y, _draw_terrain(rng.random())) for x in range(columns))
        rows.append(row)
    return TerrainGrid(rows=tuple(rows), cell_size=sim.cell_size)


def _draw_terrain(roll: float) -> TerrainType:
    for threshold, terrain in TERRAIN_DISTRIBUTION:
        if roll < threshold:
            return terrain
    return TerrainType.OPEN


def cell_at(grid: TerrainGrid, position: Position) -> TerrainCell:
    """Return the cell under ``position``.

    Positions outside the grid fall back to an open cell with neutral
    modifiers instead of failing.
    """

    x = math.floor(position.x / grid.cell_size)
    y = math.floor(position.y / grid.cell_size)
    if 0 <= y < grid.height and 0 <= x < grid.width:
        return grid.rows[y][x]
    return TerrainCell(
        x=x,
        y=y,
        terrain=TerrainType.OPEN,
        elevation=0.0,
        cover=0.0,
        concealment=0.0,
        movement_modifier=1.0,
    )


def uniform_terrain(terrain: TerrainType, *, rules: RulesConfig = DEFAULT_RULES) -> TerrainGrid:
    """Build a grid made of a single terrain type."""

    sim = rules.simulation
    columns = math.ceil(sim.map_width / sim.cell_size)
    rows_count = math.ceil(sim.map_height / sim.cell_size)
    rows = tuple(
        tuple(build_cell(x, y, terrain) for x in range(columns)) for y in range(rows_count)
    )
    return TerrainGrid(rows=rows, cell_size=sim.cell_size)
