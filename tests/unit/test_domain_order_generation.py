from __future__ import annotations

import itertools

import pytest

from tacsim.domain import order_generation
from tacsim.domain.enums import (
    Affiliation,
    CommandType,
    StrategyType,
    TerrainType,
    UnitCategory,
    UnitStatus,
)
from tacsim.domain.forces import create_unit
from tacsim.domain.models import (
    Objective,
    ObjectiveID,
    OrderID,
    Position,
    TacticalAssessment,
    Unit,
    WorldState,
)
from tacsim.domain.strategy import Strategy
from tacsim.domain.terrain import uniform_terrain


def _world(units: list[Unit], objectives: list[Objective] | None = None) -> WorldState:
    return WorldState(
        units={unit.id: unit for unit in units},
        objectives={obj.id: obj for obj in objectives or []},
        terrain=uniform_terrain(TerrainType.OPEN),
        elapsed_time=42.0,
    )


def _ids():
    counter = itertools.count(1)
    return lambda: OrderID(f"order-{next(counter)}")


def _assessment(isolated: Unit | None = None) -> TacticalAssessment:
    return TacticalAssessment(
        force_ratio=1.0,
        objectives_held=0,
        objectives_total=0,
        avg_ammo=100.0,
        avg_fuel=100.0,
        avg_morale=80.0,
        enemy_flank_exposed=False,
        isolated_enemy_unit=isolated,
        confidence=50.0,
    )


def _generate(strategy_type, world, *, side=Affiliation.ENEMY, assessment=None):
    return order_generation.generate_orders(
        Strategy.of(strategy_type),
        world,
        assessment or _assessment(),
        side,
        next_order_id=_ids(),
    )


def _enemy_line(count: int) -> list[Unit]:
    return [
        create_unit(UnitCategory.INFANTRY, Affiliation.ENEMY, i, 1000, 300 + i * 100)
        for i in range(count)
    ]


def test_assault_targets_nearest_enemy_or_objective():
    attackers = _enemy_line(2)
    friendly = create_unit(UnitCategory.ARMOR, Affiliation.FRIENDLY, 0, 900, 300)
    objective = Objective(ObjectiveID("obj"), "Hill", Position(1000, 450), radius=50)
    world = _world(attackers + [friendly], [objective])

    orders = _generate(StrategyType.AGGRESSIVE_ASSAULT, world)

    assert [o.command for o in orders] == [CommandType.ATTACK, CommandType.ATTACK]
    assert all(o.priority == 1 for o in orders)
    assert orders[0].target == Position(900, 300)
    assert orders[1].target == Position(1000, 450)
    assert orders[0].target is not friendly.position
    assert [o.id for o in orders] == ["order-1", "order-2"]
    assert all(o.issued_at == 42.0 for o in orders)


def test_methodical_attack_uses_lower_priority_and_skips_held_objectives():
    attacker = _enemy_line(1)[0]
    held = Objective(
        ObjectiveID("obj"), "Depot", Position(990, 300), radius=50, controlled_by=Affiliation.ENEMY
    )
    friendly = create_unit(UnitCategory.INFANTRY, Affiliation.FRIENDLY, 0, 400, 300)
    world = _world([attacker, friendly], [held])

    (order,) = _generate(StrategyType.METHODICAL_ATTACK, world)
    assert order.priority == 2
    assert order.target == Position(400, 300)


def test_nearest_target_falls_back_to_own_position():
    unit = _enemy_line(1)[0]
    target = order_generation.find_nearest_target(unit, [], [], Affiliation.ENEMY)
    assert target == Position(unit.position.x, unit.position.y)


def test_flanking_splits_force_between_front_and_flank():
    attackers = _enemy_line(4)
    defenders = [
        create_unit(UnitCategory.INFANTRY, Affiliation.FRIENDLY, 0, 200, 300),
        create_unit(UnitCategory.INFANTRY, Affiliation.FRIENDLY, 1, 400, 500),
    ]
    world = _world(attackers + defenders)

    orders = _generate(StrategyType.FLANKING_MANEUVER, world)

    assert [o.command for o in orders] == [
        CommandType.ATTACK,
        CommandType.ATTACK,
        CommandType.FLANK,
        CommandType.FLANK,
    ]
    assert [o.priority for o in orders] == [2, 2, 1, 1]
    assert orders[0].target == Position(300, 400)
    assert orders[3].target == Position(600, 400)


def test_flanking_without_enemies_uses_map_center():
    world = _world(_enemy_line(2))
    orders = _generate(StrategyType.FLANKING_MANEUVER, world)
    assert orders[0].target == Position(600, 400)
    assert orders[1].target == Position(900, 400)


def test_defensive_posture_moves_to_nearest_objective():
    unit = _enemy_line(1)[0]
    near = Objective(ObjectiveID("near"), "Near", Position(900, 300), radius=50)
    far = Objective(ObjectiveID("far"), "Far", Position(200, 300), radius=50)

    (order,) = _generate(StrategyType.DEFENSIVE_POSTURE, _world([unit], [far, near]))
    assert order.command == CommandType.DEFEND
    assert order.target == Position(900, 300)
    assert order.priority == 3


def test_defensive_posture_without_objectives_holds():
    (order,) = _generate(StrategyType.DEFENSIVE_POSTURE, _world(_enemy_line(1)))
    assert order.command == CommandType.HOLD
    assert order.target is None


@pytest.mark.parametrize(("x", "expected_x"), [(200, 50), (500, 300)])
def test_retreat_rally_point(x, expected_x):
    unit = create_unit(UnitCategory.INFANTRY, Affiliation.ENEMY, 0, x, 700)
    (order,) = _generate(StrategyType.TACTICAL_RETREAT, _world([unit]))
    assert order.command == CommandType.RETREAT
    assert order.target == Position(expected_x, 400)
    assert order.priority == 1


def test_rally_point_of_empty_force():
    assert order_generation.rally_point([]) == Position(100, 400)


def test_focus_fire_converges_on_isolated_unit():
    attackers = _enemy_line(3)
    lone = create_unit(UnitCategory.RECON, Affiliation.FRIENDLY, 0, 250, 650)
    world = _world(attackers + [lone])

    orders = _generate(StrategyType.FOCUS_FIRE, world, assessment=_assessment(lone))
    assert len(orders) == 3
    assert all(o.command == CommandType.ATTACK for o in orders)
    assert all(o.target == Position(250, 650) for o in orders)


def test_focus_fire_without_target_emits_nothing():
    assert _generate(StrategyType.FOCUS_FIRE, _world(_enemy_line(2))) == []


def test_hold_ground():
    orders = _generate(StrategyType.HOLD_GROUND, _world(_enemy_line(2)))
    assert [(o.command, o.target, o.priority) for o in orders] == [
        (CommandType.HOLD, None, 4),
        (CommandType.HOLD, None, 4),
    ]


def test_destroyed_units_receive_no_orders():
    units = _enemy_line(2)
    units[0].count = 0
    units[0].status = UnitStatus.DESTROYED
    orders = _generate(StrategyType.HOLD_GROUND, _world(units))
    assert [o.unit_id for o in orders] == [units[1].id]
