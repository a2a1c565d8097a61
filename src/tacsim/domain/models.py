"""Dataclasses describing the tactical battlefield.

The simulation keeps its whole world in these in-memory types.  Only the
orchestrator in :mod:`tacsim.domain.simulation` mutates them; every other
rules module either reads them or returns values for the orchestrator to
apply.

Order targets are modelled as a closed union of :class:`Position` and
:class:`UnitRef` so a handler never has to guess what it was given.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import NewType

from tacsim.utils.geometry import Position

from .enums import (
    Affiliation,
    CombatWinner,
    CommandType,
    Echelon,
    LogEventType,
    MissionOutcome,
    ObjectiveStatus,
    ObjectiveType,
    OrderStatus,
    TerrainType,
    TimeOfDay,
    UnitCategory,
    UnitStatus,
    Weather,
)

# --- Strongly typed identifiers -------------------------------------------------

UnitID = NewType("UnitID", str)
OrderID = NewType("OrderID", str)
ObjectiveID = NewType("ObjectiveID", str)
MissionID = NewType("MissionID", str)


# --- Geometry and targeting -----------------------------------------------------


@dataclass(frozen=True, slots=True)
class UnitRef:
    """Order target pointing at another unit."""

    unit_id: UnitID


OrderTarget = Position | UnitRef


# --- Core dataclasses -----------------------------------------------------------


@dataclass(slots=True)
class Order:
    """Instruction issued to a single unit."""

    id: OrderID
    unit_id: UnitID
    command: CommandType
    target: OrderTarget | None = None
    priority: int = 3
    status: OrderStatus = OrderStatus.PENDING
    issued_at: float = 0.0
    completed_at: float | None = None


@dataclass(slots=True)
class Unit:
    """Deployable force element of one side."""

    id: UnitID
    designation: str
    category: UnitCategory
    echelon: Echelon
    affiliation: Affiliation
    count: int
    max_count: int
    position: Position
    speed: float
    firepower: float
    armor: float
    detection_range: float
    weapon_range: float
    health: float = 100.0
    morale: float = 80.0
    ammunition: float = 100.0
    fuel: float = 100.0
    status: UnitStatus = UnitStatus.IDLE
    facing: float = 0.0
    destination: Position | None = None
    current_order: Order | None = None
    order_queue: list[Order] = field(default_factory=list)
    last_combat_time: float | None = None

    @property
    def is_destroyed(self) -> bool:
        return self.status == UnitStatus.DESTROYED


@dataclass(slots=True)
class Objective:
    """Capturable point of interest."""

    id: ObjectiveID
    name: str
    position: Position
    radius: float
    value: int = 100
    required: bool = True
    objective_type: ObjectiveType = ObjectiveType.CAPTURE
    status: ObjectiveStatus = ObjectiveStatus.PENDING
    controlled_by: Affiliation | None = None
    description: str = ""


@dataclass(frozen=True, slots=True)
class TerrainCell:
    """One cell of the terrain grid."""

    x: int
    y: int
    terrain: TerrainType
    elevation: float
    cover: float
    concealment: float
    movement_modifier: float


@dataclass(frozen=True, slots=True)
class TerrainGrid:
    """Immutable rectangular terrain grid, indexed ``rows[y][x]``."""

    rows: tuple[tuple[TerrainCell, ...], ...]
    cell_size: int

    @property
    def width(self) -> int:
        return len(self.rows[0]) if self.rows else 0

    @property
    def height(self) -> int:
        return len(self.rows)

    def __deepcopy__(self, memo: dict[int, object]) -> TerrainGrid:
        return self


@dataclass(slots=True)
class CombatResult:
    """Outcome of one resolved engagement."""

    attacker_losses: int
    defender_losses: int
    winner: CombatWinner
    morale_damage: float
    ammunition_used: int
    duration: float
    casualty_ratio: float
    attack_power: float = 0.0
    defense_power: float = 0.0
    flank_attack: bool = False


@dataclass(slots=True)
class TacticalAssessment:
    """Situational summary of the battlefield for one side."""

    force_ratio: float
    objectives_held: int
    objectives_total: int
    avg_ammo: float
    avg_fuel: float
    avg_morale: float
    enemy_flank_exposed: bool
    isolated_enemy_unit: Unit | None
    confidence: float


@dataclass(slots=True)
class LogEntry:
    """Combat log line."""

    timestamp: float
    event_type: LogEventType
    description: str
    unit_id: UnitID | None = None
    objective_id: ObjectiveID | None = None
    data: dict[str, object] = field(default_factory=dict)


@dataclass(slots=True)
class WorldState:
    """Authoritative battlefield state owned by the simulation loop."""

    units: dict[UnitID, Unit]
    objectives: dict[ObjectiveID, Objective]
    terrain: TerrainGrid
    weather: Weather = Weather.CLEAR
    time_of_day: TimeOfDay = TimeOfDay.DAY
    elapsed_time: float = 0.0
    is_paused: bool = False
    game_speed: int = 1
    combat_log: list[LogEntry] = field(default_factory=list)
    outcome: MissionOutcome = MissionOutcome.IN_PROGRESS

    def units_of(self, affiliation: Affiliation, *, active_only: bool = False) -> list[Unit]:
        """Return the units of one side in their original order."""

        return [
            unit
            for unit in self.units.values()
            if unit.affiliation == affiliation and not (active_only and unit.is_destroyed)
        ]
