"""Built-in mission catalogue and mission outcome evaluation."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field

from tacsim.domain.enums import (
    Affiliation,
    Difficulty,
    MissionOutcome,
    MissionType,
    ObjectiveType,
    TimeOfDay,
    Weather,
)
from tacsim.domain.forces import ForceComposition
from tacsim.domain.models import MissionID, Objective, ObjectiveID, Position, WorldState


@dataclass(frozen=True, slots=True)
class Mission:
    """Scenario definition: objectives, forces and environment."""

    id: MissionID
    name: str
    mission_type: MissionType
    description: str
    briefing: str
    duration: float
    difficulty: Difficulty
    time_of_day: TimeOfDay
    weather: Weather
    objectives: tuple[Objective, ...]
    player_forces: ForceComposition
    enemy_forces: ForceComposition
    victory_conditions: tuple[str, ...] = field(default_factory=tuple)
    defeat_conditions: tuple[str, ...] = field(default_factory=tuple)

    def fresh_objectives(self) -> dict[ObjectiveID, Objective]:
        """Return mutable copies of the objectives keyed by identifier."""

        return {objective.id: copy.deepcopy(objective) for objective in self.objectives}


def _objective(
    objective_id: str,
    name: str,
    x: float,
    y: float,
    *,
    radius: float,
    value: int,
    objective_type: ObjectiveType,
    description: str,
    controlled_by: Affiliation | None = None,
) -> Objective:
    return Objective(
        id=ObjectiveID(objective_id),
        name=name,
        position=Position(x=x, y=y),
        radius=radius,
        value=value,
        objective_type=objective_type,
        controlled_by=controlled_by,
        description=description,
    )


OPERATION_COBRA = Mission(
    id=MissionID("mission-1"),
    name="Operation Cobra",
    mission_type=MissionType.OFFENSIVE,
    description="Attack and capture the three strategic hills",
    briefing=(
        "Enemy forces have fortified three hills overlooking our supply routes. "
        "Capture all three objectives and hold them until the timer expires. "
        "Coordinate infantry, armor and artillery."
    ),
    duration=2700.0,
    difficulty=Difficulty.MEDIUM,
    time_of_day=TimeOfDay.DAY,
    weather=Weather.CLEAR,
    objectives=(
        _objective(
            "obj-1",
            "Hill 301",
            900,
            200,
            radius=80,
            value=100,
            objective_type=ObjectiveType.CAPTURE,
            description="Northern strategic position",
        ),
        _objective(
            "obj-2",
            "Hill 285",
            850,
            400,
            radius=80,
            value=100,
            objective_type=ObjectiveType.CAPTURE,
            description="Central observation post",
        ),
        _objective(
            "obj-3",
            "Hill 312",
            900,
            600,
            radius=80,
            value=100,
            objective_type=ObjectiveType.CAPTURE,
            description="Southern strongpoint",
        ),
    ),
    player_forces=ForceComposition.of(infantry=2, armor=1, artillery=1, recon=1),
    enemy_forces=ForceComposition.of(infantry=2, armor=1),
    victory_conditions=("Capture all three objectives",),
    defeat_conditions=("Lose all forces", "Fail to capture objectives in time limit"),
)

BRIDGE_DEFENSE = Mission(
    id=MissionID("mission-2"),
    name="Bridge Defense",
    mission_type=MissionType.DEFENSIVE,
    description="Hold the bridge against the enemy attack for 30 minutes",
    briefing=(
        "Enemy forces are advancing on the bridge at our position and "
        "reinforcements are 30 minutes away. Deny the crossing until they arrive."
    ),
    duration=1800.0,
    difficulty=Difficulty.HARD,
    time_of_day=TimeOfDay.DAWN,
    weather=Weather.FOG,
    objectives=(
        _objective(
            "obj-bridge",
            "Bridge",
            400,
            400,
            radius=100,
            value=200,
            objective_type=ObjectiveType.DEFEND,
            description="Critical river crossing",
            controlled_by=Affiliation.FRIENDLY,
        ),
    ),
    player_forces=ForceComposition.of(infantry=2, artillery=1, recon=1),
    enemy_forces=ForceComposition.of(infantry=3, armor=2, artillery=1, recon=1),
    victory_conditions=("Hold the bridge for 30 minutes",),
    defeat_conditions=("Lose control of the bridge", "Lose all forces"),
)

NIGHT_RAID = Mission(
    id=MissionID("mission-3"),
    name="Night in Hell",
    mission_type=MissionType.NIGHT_OPERATION,
    description="Night infiltration to destroy the enemy ammunition depot",
    briefing=(
        "Under cover of darkness, infiltrate the enemy rear area and destroy "
        "their ammunition depot before dawn. Recon leads, infantry follows."
    ),
    duration=1200.0,
    difficulty=Difficulty.EXTREME,
    time_of_day=TimeOfDay.NIGHT,
    weather=Weather.CLEAR,
    objectives=(
        _objective(
            "obj-depot",
            "Ammo Depot",
            1000,
            400,
            radius=50,
            value=300,
            objective_type=ObjectiveType.DESTROY,
            description="Enemy supply depot",
            controlled_by=Affiliation.ENEMY,
        ),
    ),
    player_forces=ForceComposition.of(infantry=1, recon=2),
    enemy_forces=ForceComposition.of(infantry=2, armor=1),
    victory_conditions=("Destroy the ammunition depot",),
    defeat_conditions=("Fail to destroy the depot in time", "Lose all forces"),
)

MISSIONS: dict[MissionID, Mission] = {
    mission.id: mission for mission in (OPERATION_COBRA, BRIDGE_DEFENSE, NIGHT_RAID)
}

DEFAULT_MISSION = OPERATION_COBRA


def get_mission(mission_id: str) -> Mission:
    """Look up a catalogue mission, raising ``KeyError`` when unknown."""

    return MISSIONS[MissionID(mission_id)]


def evaluate_outcome(world: WorldState, mission: Mission) -> MissionOutcome:
    """Decide whether the mission is won, lost or still running.

    Losing every friendly unit is a defeat even when the enemy was wiped out
    in the same tick.  Defensive missions are only won by holding their
    required objectives until the clock runs out.
    """

    friendly = world.units_of(Affiliation.FRIENDLY, active_only=True)
    enemy = world.units_of(Affiliation.ENEMY, active_only=True)

    if not friendly:
        return MissionOutcome.DEFEAT
    if not enemy:
        return MissionOutcome.VICTORY

    objectives = list(world.objectives.values())
    required = [objective for objective in objectives if objective.required]
    held = all(objective.controlled_by == Affiliation.FRIENDLY for objective in required)

    if mission.mission_type == MissionType.DEFENSIVE:
        if world.elapsed_time >= mission.duration:
            return MissionOutcome.VICTORY if held else MissionOutcome.DEFEAT
        return MissionOutcome.IN_PROGRESS

    if objectives and all(objective.controlled_by == Affiliation.FRIENDLY for objective in objectives):
        return MissionOutcome.VICTORY
    if world.elapsed_time >= mission.duration:
        return MissionOutcome.DEFEAT
    return MissionOutcome.IN_PROGRESS
