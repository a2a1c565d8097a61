from __future__ import annotations

import pytest

from tacsim.domain import assessment
from tacsim.domain.enums import Affiliation, TerrainType, UnitCategory, UnitStatus
from tacsim.domain.forces import create_unit
from tacsim.domain.models import Objective, ObjectiveID, Position, Unit, WorldState
from tacsim.domain.terrain import uniform_terrain


def _world(units: list[Unit], objectives: list[Objective] | None = None) -> WorldState:
    return WorldState(
        units={unit.id: unit for unit in units},
        objectives={obj.id: obj for obj in objectives or []},
        terrain=uniform_terrain(TerrainType.OPEN),
    )


def _objective(name: str, x: float, y: float, controlled_by=None) -> Objective:
    return Objective(
        id=ObjectiveID(name),
        name=name,
        position=Position(x, y),
        radius=80,
        controlled_by=controlled_by,
    )


def _inf(affiliation: Affiliation, index: int, x: float, y: float) -> Unit:
    return create_unit(UnitCategory.INFANTRY, affiliation, index, x, y)


def test_force_ratio_and_averages():
    friendly = [_inf(Affiliation.FRIENDLY, 0, 200, 400), _inf(Affiliation.FRIENDLY, 1, 200, 500)]
    friendly[1].ammunition = 50
    friendly[1].fuel = 40
    enemy = [_inf(Affiliation.ENEMY, 0, 1000, 400)]
    world = _world(friendly + enemy)

    result = assessment.assess(world, Affiliation.FRIENDLY)

    assert result.force_ratio == pytest.approx(180 / 91)
    assert result.avg_ammo == pytest.approx(75)
    assert result.avg_fuel == pytest.approx(70)
    assert result.avg_morale == pytest.approx(80)
    assert result.confidence == 100


def test_confidence_for_the_weaker_side():
    friendly = [_inf(Affiliation.FRIENDLY, 0, 200, 400), _inf(Affiliation.FRIENDLY, 1, 200, 500)]
    enemy = [_inf(Affiliation.ENEMY, 0, 1000, 400)]
    result = assessment.assess(_world(friendly + enemy), Affiliation.ENEMY)

    ratio = 90 / 181
    assert result.force_ratio == pytest.approx(ratio)
    assert result.confidence == pytest.approx(ratio * 30 + 100 * 0.3 + 80 * 0.4)


def test_destroyed_units_are_ignored():
    friendly = [_inf(Affiliation.FRIENDLY, 0, 200, 400), _inf(Affiliation.FRIENDLY, 1, 200, 500)]
    friendly[1].status = UnitStatus.DESTROYED
    friendly[1].ammunition = 0
    enemy = [_inf(Affiliation.ENEMY, 0, 1000, 400)]

    result = assessment.assess(_world(friendly + enemy), Affiliation.FRIENDLY)
    assert result.force_ratio == pytest.approx(90 / 91)
    assert result.avg_ammo == pytest.approx(100)


def test_empty_side_reports_zero_averages():
    enemy = [_inf(Affiliation.ENEMY, 0, 1000, 400)]
    result = assessment.assess(_world(enemy), Affiliation.FRIENDLY)
    assert result.force_ratio == 0
    assert (result.avg_ammo, result.avg_fuel, result.avg_morale) == (0, 0, 0)
    assert result.confidence == 0


def test_objectives_held_counts_side_control():
    objectives = [
        _objective("a", 100, 100, Affiliation.FRIENDLY),
        _objective("b", 200, 200, Affiliation.ENEMY),
        _objective("c", 300, 300),
    ]
    world = _world([_inf(Affiliation.FRIENDLY, 0, 0, 0)], objectives)

    result = assessment.assess(world, Affiliation.FRIENDLY)
    assert result.objectives_held == 1
    assert result.objectives_total == 3


def test_flank_exposed_needs_three_units_spread_wide():
    spread = [
        _inf(Affiliation.ENEMY, 0, 500, 400),
        _inf(Affiliation.ENEMY, 1, 700, 400),
        _inf(Affiliation.ENEMY, 2, 901, 400),
    ]
    assert assessment.is_flank_exposed(spread)

    spread[2].position = Position(900, 400)
    assert not assessment.is_flank_exposed(spread)

    assert not assessment.is_flank_exposed(spread[:2])


def test_isolated_unit_is_first_without_neighbour():
    cluster = [
        _inf(Affiliation.ENEMY, 0, 1000, 400),
        _inf(Affiliation.ENEMY, 1, 1000, 500),
        _inf(Affiliation.ENEMY, 2, 1300, 700),
        _inf(Affiliation.ENEMY, 3, 100, 100),
    ]
    assert assessment.find_isolated_unit(cluster) is cluster[2]
    assert assessment.find_isolated_unit(cluster[:2]) is None


def test_neighbour_at_exactly_the_radius_does_not_count():
    pair = [_inf(Affiliation.ENEMY, 0, 0, 0), _inf(Affiliation.ENEMY, 1, 200, 0)]
    assert assessment.find_isolated_unit(pair) is pair[0]


def test_assessment_does_not_mutate_world():
    units = [_inf(Affiliation.FRIENDLY, 0, 200, 400), _inf(Affiliation.ENEMY, 0, 1000, 400)]
    world = _world(units)
    before = repr(world)
    assessment.assess(world, Affiliation.FRIENDLY)
    assert repr(world) == before


def test_neutral_side_sees_no_enemy():
    neutral = _inf(Affiliation.NEUTRAL, 0, 600, 400)
    result = assessment.assess(_world([neutral]), Affiliation.NEUTRAL)
    assert result.force_ratio == pytest.approx(90)
    assert result.isolated_enemy_unit is None
    assert result.enemy_flank_exposed is False
