"""Fixed-timestep orchestrator owning the authoritative world state."""

from __future__ import annotations

import copy
import itertools
import logging
import math

from tacsim.domain.ai import TacticalAI
from tacsim.domain.combat import apply_combat_results, can_engage, resolve_combat
from tacsim.domain.enums import (
    Affiliation,
    Difficulty,
    LogEventType,
    MissionOutcome,
    ObjectiveStatus,
    OrderStatus,
    TerrainType,
    UnitStatus,
)
from tacsim.domain.forces import deploy_forces
from tacsim.domain.missions import DEFAULT_MISSION, Mission, evaluate_outcome
from tacsim.domain.models import (
    CombatResult,
    LogEntry,
    Objective,
    Order,
    OrderID,
    TerrainGrid,
    Unit,
    UnitID,
    WorldState,
)
from tacsim.domain.orders import OrderExecutionResult, execute_order
from tacsim.domain.rules_config import DEFAULT_RULES, RulesConfig
from tacsim.domain.terrain import cell_at, generate_terrain
from tacsim.utils.geometry import azimuth, distance, interpolate_position
from tacsim.utils.rng import RandomSource, SeededRandom

logger = logging.getLogger(__name__)

# Terrain on which no engagement can be initiated.
NO_COMBAT_TERRAIN = frozenset({TerrainType.WATER})


class Simulation:
    """Advance one battle in discrete, atomic ticks.

    The simulation is the only component that mutates the world; the AI,
    combat and order modules either read it or hand values back to be
    applied here.  Reads are safe between calls to :meth:`update`.
    """

    def __init__(
        self,
        mission: Mission = DEFAULT_MISSION,
        *,
        seed: int | str = 0,
        rng: RandomSource | None = None,
        rules: RulesConfig = DEFAULT_RULES,
        difficulty: Difficulty | None = None,
        terrain: TerrainGrid | None = None,
    ) -> None:
        self.mission = mission
        self.seed = str(seed)
        self.rules = rules
        self.difficulty = difficulty or mission.difficulty

        if rng is None:
            root = SeededRandom(seed)
            terrain_rng: RandomSource = root.derive("terrain")
            self._combat_rng: RandomSource = root.derive("combat")
        else:
            terrain_rng = self._combat_rng = rng

        self.ai = TacticalAI(self.difficulty, Affiliation.ENEMY, rules=rules)
        self._order_counter = itertools.count(1)
        self._next_ai_time = 0.0

        grid = terrain if terrain is not None else generate_terrain(terrain_rng, rules=rules)
        units = deploy_forces(mission.player_forces, Affiliation.FRIENDLY, rules=rules)
        units += deploy_forces(mission.enemy_forces, Affiliation.ENEMY, rules=rules)
        for unit in units:
            unit.position.elevation = cell_at(grid, unit.position).elevation

        self.world = WorldState(
            units={unit.id: unit for unit in units},
            objectives=mission.fresh_objectives(),
            terrain=grid,
            weather=mission.weather,
            time_of_day=mission.time_of_day,
        )

    # ------------------------------------------------------------------
    # Control surface

    def next_order_id(self) -> OrderID:
        return OrderID(f"order-{next(self._order_counter)}")

    def set_paused(self, paused: bool) -> None:
        self.world.is_paused = paused

    def set_game_speed(self, speed: int) -> None:
        """Set the simulated-time multiplier; only the configured steps are allowed."""

        if speed not in self.rules.simulation.speed_steps:
            allowed = ", ".join(str(step) for step in self.rules.simulation.speed_steps)
            raise ValueError(f"game speed must be one of {allowed}, got {speed}")
        self.world.game_speed = speed

    def snapshot(self) -> WorldState:
        """Deep copy of the world, safe to hand to readers."""

        return copy.deepcopy(self.world)

    @property
    def is_concluded(self) -> bool:
        return self.world.outcome != MissionOutcome.IN_PROGRESS

    def issue_order(self, unit_id: UnitID, order: Order) -> OrderExecutionResult | None:
        """Apply a player order immediately.

        Orders for units that are unknown or not on the friendly side are
        ignored and ``None`` is returned.
        """

        unit = self.world.units.get(unit_id)
        if unit is None or unit.affiliation != Affiliation.FRIENDLY:
            logger.debug("ignoring order %s for non-player unit %s", order.id, unit_id)
            return None
        result = execute_order(self.world, unit, order, rules=self.rules)
        if result.status == OrderStatus.CANCELLED:
            logger.info("order %s for %s cancelled: %s", order.id, unit_id, result.detail)
        return result

    # ------------------------------------------------------------------
    # Tick

    def update(self, delta_time: float) -> None:
        """Advance the battle by ``delta_time`` real seconds."""

        if not math.isfinite(delta_time) or delta_time < 0:
            logger.warning("ignoring tick with invalid delta_time %r", delta_time)
            return
        world = self.world
        if world.is_paused or self.is_concluded:
            return

        dt = delta_time * world.game_speed
        world.elapsed_time += dt

        if world.elapsed_time >= self._next_ai_time:
            self._run_ai()
            interval = self.rules.simulation.ai_interval
            while self._next_ai_time <= world.elapsed_time:
                self._next_ai_time += interval

        self._update_movement(dt)
        self._process_combat()
        self._update_objectives()
        self._update_outcome()

    def _run_ai(self) -> None:
        orders = self.ai.make_decision(self.world, self.next_order_id)
        for order in orders:
            unit = self.world.units.get(order.unit_id)
            if unit is None:
                logger.warning("AI issued order %s for unknown unit %s", order.id, order.unit_id)
                continue
            result = execute_order(self.world, unit, order, rules=self.rules)
            if result.status == OrderStatus.CANCELLED:
                logger.debug("AI order %s skipped: %s", order.id, result.detail)

    def _update_movement(self, dt: float) -> None:
        mr = self.rules.movement
        for unit in self.world.units.values():
            if unit.destination is None or unit.is_destroyed:
                continue

            remaining = distance(unit.position, unit.destination)
            if remaining < mr.arrival_threshold:
                self._arrive(unit)
                continue

            step = min(unit.speed * dt * mr.speed_scale, remaining)
            if step <= 0:
                continue
            unit.facing = azimuth(unit.position, unit.destination)
            moved = interpolate_position(unit.position, unit.destination, step / remaining)
            moved.elevation = cell_at(self.world.terrain, moved).elevation
            unit.position = moved
            unit.fuel = max(0.0, unit.fuel - step * mr.fuel_per_unit_distance)

    def _arrive(self, unit: Unit) -> None:
        unit.destination = None
        unit.status = UnitStatus.IDLE
        order = unit.current_order
        if order is not None and order.status == OrderStatus.IN_PROGRESS:
            order.status = OrderStatus.COMPLETED
            order.completed_at = self.world.elapsed_time

    def _process_combat(self) -> None:
        """Resolve at most one engagement per unit, friendly side first."""

        world = self.world
        engaged: set[UnitID] = set()
        for side in (Affiliation.FRIENDLY, Affiliation.ENEMY):
            for attacker in world.units_of(side, active_only=True):
                if attacker.is_destroyed or attacker.id in engaged:
                    continue
                defender = next(
                    (other for other in world.units.values() if can_engage(attacker, other)),
                    None,
                )
                if defender is None:
                    continue

                cell = cell_at(world.terrain, attacker.position)
                if cell.terrain in NO_COMBAT_TERRAIN:
                    continue

                result = resolve_combat(
                    attacker,
                    defender,
                    cell.terrain,
                    world.weather,
                    world.time_of_day,
                    rng=self._combat_rng,
                    rules=self.rules,
                )
                attacker.status = UnitStatus.ENGAGING
                defender.status = UnitStatus.ENGAGING
                apply_combat_results(attacker, defender, result, rules=self.rules)
                attacker.last_combat_time = defender.last_combat_time = world.elapsed_time
                engaged.update((attacker.id, defender.id))
                self._log_engagement(attacker, defender, result)

    def _log_engagement(self, attacker: Unit, defender: Unit, result: CombatResult) -> None:
        description = (
            f"{attacker.designation} engaged {defender.designation} - {result.winner} won "
            f"({result.attacker_losses}/{result.defender_losses} losses)"
        )
        self.world.combat_log.append(
            LogEntry(
                timestamp=self.world.elapsed_time,
                event_type=LogEventType.ENGAGEMENT,
                description=description,
                unit_id=attacker.id,
                data={
                    "defender_id": defender.id,
                    "winner": str(result.winner),
                    "attacker_losses": result.attacker_losses,
                    "defender_losses": result.defender_losses,
                    "morale_damage": result.morale_damage,
                    "flank_attack": result.flank_attack,
                },
            )
        )
        logger.debug(description)

    def _update_objectives(self) -> None:
        for objective in self.world.objectives.values():
            friendly = self._presence(objective, Affiliation.FRIENDLY)
            enemy = self._presence(objective, Affiliation.ENEMY)
            if friendly > enemy:
                holder = Affiliation.FRIENDLY
            elif enemy > friendly:
                holder = Affiliation.ENEMY
            else:
                continue
            if objective.controlled_by == holder:
                continue

            objective.controlled_by = holder
            objective.status = (
                ObjectiveStatus.COMPLETED if holder == Affiliation.FRIENDLY else ObjectiveStatus.FAILED
            )
            self.world.combat_log.append(
                LogEntry(
                    timestamp=self.world.elapsed_time,
                    event_type=LogEventType.OBJECTIVE_CAPTURED,
                    description=f"{objective.name} captured by {holder} forces",
                    objective_id=objective.id,
                    data={"controlled_by": str(holder), "friendly": friendly, "enemy": enemy},
                )
            )
            logger.info("objective %s now held by %s", objective.id, holder)

    def _presence(self, objective: Objective, side: Affiliation) -> int:
        return sum(
            1
            for unit in self.world.units_of(side, active_only=True)
            if distance(unit.position, objective.position) < objective.radius
        )

    def _update_outcome(self) -> None:
        outcome = evaluate_outcome(self.world, self.mission)
        if outcome == MissionOutcome.IN_PROGRESS:
            return
        self.world.outcome = outcome
        self.world.combat_log.append(
            LogEntry(
                timestamp=self.world.elapsed_time,
                event_type=LogEventType.MISSION_COMPLETE,
                description=f"{self.mission.name}: {outcome}",
                data={"mission_id": self.mission.id, "outcome": str(outcome)},
            )
        )
        logger.info("mission %s concluded with %s", self.mission.id, outcome)
