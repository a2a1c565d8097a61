from __future__ import annotations

import pytest

from tacsim.domain import missions
from tacsim.domain.enums import (
    Affiliation,
    Difficulty,
    MissionOutcome,
    MissionType,
    TerrainType,
    TimeOfDay,
    UnitCategory,
    UnitStatus,
    Weather,
)
from tacsim.domain.forces import create_unit
from tacsim.domain.models import WorldState
from tacsim.domain.terrain import uniform_terrain


def _world(mission: missions.Mission, *, elapsed: float = 0.0) -> WorldState:
    units = [
        create_unit(UnitCategory.INFANTRY, Affiliation.FRIENDLY, 0, 200, 400),
        create_unit(UnitCategory.INFANTRY, Affiliation.ENEMY, 0, 1000, 400),
    ]
    return WorldState(
        units={unit.id: unit for unit in units},
        objectives=mission.fresh_objectives(),
        terrain=uniform_terrain(TerrainType.OPEN),
        elapsed_time=elapsed,
    )


def _destroy(world: WorldState, affiliation: Affiliation) -> None:
    for unit in world.units_of(affiliation):
        unit.count = 0
        unit.status = UnitStatus.DESTROYED


def test_catalogue_contents():
    assert list(missions.MISSIONS) == ["mission-1", "mission-2", "mission-3"]
    assert missions.DEFAULT_MISSION is missions.OPERATION_COBRA

    cobra = missions.get_mission("mission-1")
    assert cobra.mission_type == MissionType.OFFENSIVE
    assert cobra.duration == 2700
    assert [(o.position.x, o.position.y, o.radius) for o in cobra.objectives] == [
        (900, 200, 80),
        (850, 400, 80),
        (900, 600, 80),
    ]
    assert cobra.player_forces.total() == 5
    assert cobra.enemy_forces.total() == 3

    bridge = missions.get_mission("mission-2")
    assert (bridge.weather, bridge.time_of_day, bridge.difficulty) == (
        Weather.FOG,
        TimeOfDay.DAWN,
        Difficulty.HARD,
    )
    assert bridge.objectives[0].controlled_by == Affiliation.FRIENDLY

    raid = missions.get_mission("mission-3")
    assert raid.time_of_day == TimeOfDay.NIGHT
    assert raid.objectives[0].value == 300


def test_unknown_mission_raises_key_error():
    with pytest.raises(KeyError):
        missions.get_mission("mission-99")


def test_fresh_objectives_are_independent_copies():
    first = missions.OPERATION_COBRA.fresh_objectives()
    first["obj-1"].controlled_by = Affiliation.FRIENDLY
    second = missions.OPERATION_COBRA.fresh_objectives()
    assert second["obj-1"].controlled_by is None
    assert missions.OPERATION_COBRA.objectives[0].controlled_by is None


def test_offensive_mission_in_progress_then_defeat_on_timeout():
    world = _world(missions.OPERATION_COBRA)
    assert missions.evaluate_outcome(world, missions.OPERATION_COBRA) == MissionOutcome.IN_PROGRESS
    world.elapsed_time = 2700
    assert missions.evaluate_outcome(world, missions.OPERATION_COBRA) == MissionOutcome.DEFEAT


def test_offensive_victory_when_all_objectives_held():
    world = _world(missions.OPERATION_COBRA)
    for objective in world.objectives.values():
        objective.controlled_by = Affiliation.FRIENDLY
    assert missions.evaluate_outcome(world, missions.OPERATION_COBRA) == MissionOutcome.VICTORY


def test_annihilation_decides_the_mission():
    world = _world(missions.OPERATION_COBRA)
    _destroy(world, Affiliation.ENEMY)
    assert missions.evaluate_outcome(world, missions.OPERATION_COBRA) == MissionOutcome.VICTORY

    _destroy(world, Affiliation.FRIENDLY)
    assert missions.evaluate_outcome(world, missions.OPERATION_COBRA) == MissionOutcome.DEFEAT


def test_defensive_mission_is_won_by_holding_until_the_end():
    world = _world(missions.BRIDGE_DEFENSE)
    assert missions.evaluate_outcome(world, missions.BRIDGE_DEFENSE) == MissionOutcome.IN_PROGRESS

    world.elapsed_time = 1800
    assert missions.evaluate_outcome(world, missions.BRIDGE_DEFENSE) == MissionOutcome.VICTORY


def test_defensive_mission_lost_if_bridge_falls():
    world = _world(missions.BRIDGE_DEFENSE, elapsed=1800)
    world.objectives["obj-bridge"].controlled_by = Affiliation.ENEMY
    assert missions.evaluate_outcome(world, missions.BRIDGE_DEFENSE) == MissionOutcome.DEFEAT
