"""Runtime primitives backing the tactical simulator HTTP API."""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from dataclasses import dataclass
from typing import NewType

from tacsim.config import Settings, get_settings
from tacsim.domain import models as dm
from tacsim.domain.enums import Affiliation, CommandType, Difficulty
from tacsim.domain.missions import MISSIONS, Mission, get_mission
from tacsim.domain.orders import OrderExecutionResult
from tacsim.domain.rules_config import DEFAULT_RULES, RulesConfig
from tacsim.domain.simulation import Simulation

logger = logging.getLogger(__name__)

SessionID = NewType("SessionID", int)


class SessionNotFoundError(LookupError):
    """Raised when a session identifier is unknown."""


class MissionNotFoundError(LookupError):
    """Raised when a mission identifier is not in the catalogue."""


class UnitNotCommandableError(ValueError):
    """Raised when a player order targets a unit the player does not command."""


@dataclass(slots=True)
class OrderDraft:
    """API-facing initializer for new player orders."""

    unit_id: dm.UnitID
    command: CommandType
    target: dm.OrderTarget | None = None
    priority: int = 3


@dataclass(slots=True)
class Session:
    """One running battle and the parameters needed to rebuild it."""

    id: SessionID
    mission: Mission
    seed: int
    difficulty: Difficulty
    simulation: Simulation


def rules_from_settings(settings: Settings, base: RulesConfig = DEFAULT_RULES) -> RulesConfig:
    """Overlay the configurable loop parameters onto a rules bundle."""

    simulation = dataclasses.replace(
        base.simulation,
        ai_interval=settings.ai_interval_seconds,
        speed_steps=tuple(settings.allowed_speeds),
    )
    return dataclasses.replace(base, simulation=simulation)


class SessionService:
    """In-memory registry of battle sessions."""

    def __init__(self, *, settings: Settings, rules: RulesConfig = DEFAULT_RULES) -> None:
        self._settings = settings
        self._rules = rules
        self._sessions: dict[SessionID, Session] = {}
        self._next_id = 1

    @staticmethod
    def list_missions() -> list[Mission]:
        return list(MISSIONS.values())

    def list_sessions(self) -> list[Session]:
        """Return every session ordered by identifier."""

        return [self._sessions[key] for key in sorted(self._sessions)]

    def get_session(self, session_id: SessionID) -> Session:
        """Return a session or raise ``SessionNotFoundError``."""

        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(f"session {int(session_id)} not found")
        return session

    def create_session(
        self,
        mission_id: str | None = None,
        *,
        seed: int | None = None,
        difficulty: Difficulty | None = None,
    ) -> Session:
        """Build a new battle from a catalogue mission."""

        mission_key = mission_id or self._settings.default_mission
        try:
            mission = get_mission(mission_key)
        except KeyError as exc:
            raise MissionNotFoundError(f"mission '{mission_key}' not found") from exc

        session_id = SessionID(self._next_id)
        self._next_id += 1
        session_seed = self._settings.default_seed if seed is None else seed
        session_difficulty = difficulty or mission.difficulty
        session = Session(
            id=session_id,
            mission=mission,
            seed=session_seed,
            difficulty=session_difficulty,
            simulation=self._build_simulation(mission, session_seed, session_difficulty),
        )
        self._sessions[session_id] = session
        logger.info(
            "created session %s for mission %s (seed %s)", int(session_id), mission.id, session_seed
        )
        return session

    def restart_session(self, session_id: SessionID) -> Session:
        """Discard the world and rebuild it from the session's scenario input."""

        session = self.get_session(session_id)
        session.simulation = self._build_simulation(
            session.mission, session.seed, session.difficulty
        )
        return session

    def _build_simulation(self, mission: Mission, seed: int, difficulty: Difficulty) -> Simulation:
        return Simulation(mission, seed=seed, rules=self._rules, difficulty=difficulty)

    def issue_order(
        self, session_id: SessionID, draft: OrderDraft
    ) -> tuple[dm.Order, OrderExecutionResult]:
        session = self.get_session(session_id)
        simulation = session.simulation
        unit = simulation.world.units.get(draft.unit_id)
        if unit is None:
            raise UnitNotCommandableError(f"unit {draft.unit_id} not found")
        if unit.affiliation != Affiliation.FRIENDLY:
            raise UnitNotCommandableError(f"unit {draft.unit_id} is not under player command")

        order = dm.Order(
            id=simulation.next_order_id(),
            unit_id=draft.unit_id,
            command=draft.command,
            target=draft.target,
            priority=draft.priority,
            issued_at=simulation.world.elapsed_time,
        )
        result = simulation.issue_order(draft.unit_id, order)
        if result is None:  # pragma: no cover - affiliation checked above
            raise UnitNotCommandableError(f"unit {draft.unit_id} rejected the order")
        return order, result

    def set_paused(self, session_id: SessionID, paused: bool) -> Session:
        session = self.get_session(session_id)
        session.simulation.set_paused(paused)
        return session

    def set_speed(self, session_id: SessionID, speed: int) -> Session:
        session = self.get_session(session_id)
        session.simulation.set_game_speed(speed)
        return session

    # ------------------------------------------------------------------
    # JSON-friendly views

    @staticmethod
    def to_mission_dict(mission: Mission) -> dict[str, object]:
        return {
            "id": mission.id,
            "name": mission.name,
            "mission_type": str(mission.mission_type),
            "description": mission.description,
            "briefing": mission.briefing,
            "duration": mission.duration,
            "difficulty": str(mission.difficulty),
            "time_of_day": str(mission.time_of_day),
            "weather": str(mission.weather),
            "objective_count": len(mission.objectives),
            "player_forces": {str(cat): n for cat, n in mission.player_forces.counts.items()},
            "enemy_forces": {str(cat): n for cat, n in mission.enemy_forces.counts.items()},
            "victory_conditions": list(mission.victory_conditions),
            "defeat_conditions": list(mission.defeat_conditions),
        }

    @staticmethod
    def to_summary_dict(session: Session, *, auto_tick: bool = False) -> dict[str, object]:
        """Return a JSON-friendly overview of a session."""

        world = session.simulation.world
        return {
            "id": int(session.id),
            "mission_id": session.mission.id,
            "mission_name": session.mission.name,
            "seed": session.seed,
            "difficulty": str(session.difficulty),
            "elapsed_time": world.elapsed_time,
            "is_paused": world.is_paused,
            "game_speed": world.game_speed,
            "outcome": str(world.outcome),
            "friendly_active": len(world.units_of(Affiliation.FRIENDLY, active_only=True)),
            "enemy_active": len(world.units_of(Affiliation.ENEMY, active_only=True)),
            "auto_tick": auto_tick,
        }

    @staticmethod
    def to_detail_dict(session: Session, *, auto_tick: bool = False) -> dict[str, object]:
        """Return the full state query payload, built from a snapshot."""

        snapshot = session.simulation.snapshot()
        summary = SessionService.to_summary_dict(session, auto_tick=auto_tick)
        ai = session.simulation.ai
        summary.update(
            {
                "weather": str(snapshot.weather),
                "time_of_day": str(snapshot.time_of_day),
                "units": [SessionService.to_unit_dict(unit) for unit in snapshot.units.values()],
                "objectives": [
                    SessionService.to_objective_dict(objective)
                    for objective in snapshot.objectives.values()
                ],
                "ai": {
                    "side": str(ai.side),
                    "difficulty": str(ai.difficulty),
                    "strategy": str(ai.last_strategy.type) if ai.last_strategy else None,
                    "strategy_description": (
                        ai.last_strategy.description if ai.last_strategy else None
                    ),
                    "force_ratio": (
                        ai.last_assessment.force_ratio if ai.last_assessment else None
                    ),
                    "confidence": ai.last_assessment.confidence if ai.last_assessment else None,
                    "memory": dataclasses.asdict(ai.memory) if ai.memory is not None else None,
                },
            }
        )
        return summary

    @staticmethod
    def to_position_dict(position: dm.Position | None) -> dict[str, object] | None:
        if position is None:
            return None
        return {"x": position.x, "y": position.y, "elevation": position.elevation}

    @staticmethod
    def to_order_dict(order: dm.Order) -> dict[str, object]:
        target: dict[str, object] | None
        if isinstance(order.target, dm.UnitRef):
            target = {"kind": "unit", "unit_id": order.target.unit_id}
        elif isinstance(order.target, dm.Position):
            target = {"kind": "position", "x": order.target.x, "y": order.target.y}
        else:
            target = None
        return {
            "id": order.id,
            "unit_id": order.unit_id,
            "command": str(order.command),
            "target": target,
            "priority": order.priority,
            "status": str(order.status),
            "issued_at": order.issued_at,
            "completed_at": order.completed_at,
        }

    @staticmethod
    def to_unit_dict(unit: dm.Unit) -> dict[str, object]:
        return {
            "id": unit.id,
            "designation": unit.designation,
            "category": str(unit.category),
            "echelon": str(unit.echelon),
            "affiliation": str(unit.affiliation),
            "count": unit.count,
            "max_count": unit.max_count,
            "health": unit.health,
            "morale": unit.morale,
            "ammunition": unit.ammunition,
            "fuel": unit.fuel,
            "status": str(unit.status),
            "position": SessionService.to_position_dict(unit.position),
            "destination": SessionService.to_position_dict(unit.destination),
            "facing": unit.facing,
            "speed": unit.speed,
            "weapon_range": unit.weapon_range,
            "detection_range": unit.detection_range,
            "current_order": (
                SessionService.to_order_dict(unit.current_order) if unit.current_order else None
            ),
            "last_combat_time": unit.last_combat_time,
        }

    @staticmethod
    def to_objective_dict(objective: dm.Objective) -> dict[str, object]:
        return {
            "id": objective.id,
            "name": objective.name,
            "description": objective.description,
            "position": SessionService.to_position_dict(objective.position),
            "radius": objective.radius,
            "value": objective.value,
            "required": objective.required,
            "objective_type": str(objective.objective_type),
            "status": str(objective.status),
            "controlled_by": str(objective.controlled_by) if objective.controlled_by else None,
        }

    @staticmethod
    def to_terrain_dict(grid: dm.TerrainGrid) -> dict[str, object]:
        return {
            "width": grid.width,
            "height": grid.height,
            "cell_size": grid.cell_size,
            "cells": [[str(cell.terrain) for cell in row] for row in grid.rows],
            "elevation": [[cell.elevation for cell in row] for row in grid.rows],
        }

    @staticmethod
    def to_log_dict(entry: dm.LogEntry) -> dict[str, object]:
        return {
            "timestamp": entry.timestamp,
            "event_type": str(entry.event_type),
            "description": entry.description,
            "unit_id": entry.unit_id,
            "objective_id": entry.objective_id,
            "data": dict(entry.data),
        }


class TickManager:
    """Background scheduler that advances sessions at a fixed real-time cadence."""

    MIN_INTERVAL_SECONDS = 0.02

    def __init__(self, sessions: SessionService, *, base_interval_seconds: float) -> None:
        self._sessions = sessions
        self._base_interval = max(base_interval_seconds, self.MIN_INTERVAL_SECONDS)
        self._auto_sessions: set[SessionID] = set()
        self._task: asyncio.Task[None] | None = None
        self._stop_event = asyncio.Event()
        self._advance_lock = asyncio.Lock()

    @property
    def interval_seconds(self) -> float:
        return self._base_interval

    def set_interval(self, seconds: float) -> None:
        self._base_interval = max(seconds, self.MIN_INTERVAL_SECONDS)

    def enabled_sessions(self) -> set[SessionID]:
        return set(self._auto_sessions)

    def is_enabled(self, session_id: SessionID) -> bool:
        return session_id in self._auto_sessions

    async def set_enabled(self, session_id: SessionID, enabled: bool) -> None:
        if enabled:
            self._auto_sessions.add(session_id)
            self._ensure_running()
        else:
            self._auto_sessions.discard(session_id)
            if not self._auto_sessions:
                await self.stop()

    def _ensure_running(self) -> None:
        if self._task is None or self._task.done():
            self._stop_event = asyncio.Event()
            loop = asyncio.get_running_loop()
            self._task = loop.create_task(self._run_loop(), name="tacsim-tick-loop")

    async def stop(self) -> None:
        task = self._task
        if task is None:
            return
        self._stop_event.set()
        await task
        self._task = None

    async def advance_now(
        self, session_id: SessionID, ticks: int = 1, delta_seconds: float | None = None
    ) -> None:
        """Run ``ticks`` updates of ``delta_seconds`` (default: the tick interval)."""

        if ticks <= 0:
            return
        delta = self._base_interval if delta_seconds is None else delta_seconds
        async with self._advance_lock:
            success = self._advance_session(session_id, ticks, delta)
        if not success:
            self._auto_sessions.discard(session_id)

    async def _run_loop(self) -> None:
        try:
            while not self._stop_event.is_set():
                try:
                    await asyncio.wait_for(self._stop_event.wait(), timeout=self.interval_seconds)
                    break
                except TimeoutError:
                    pass
                await self._run_cycle()
        finally:
            self._task = None

    async def _run_cycle(self) -> None:
        if not self._auto_sessions:
            return
        ids = sorted(self._auto_sessions)
        async with self._advance_lock:
            for session_id in ids:
                if not self._advance_session(session_id, 1, self._base_interval):
                    self._auto_sessions.discard(session_id)

    def _advance_session(self, session_id: SessionID, ticks: int, delta: float) -> bool:
        try:
            session = self._sessions.get_session(session_id)
        except SessionNotFoundError:
            logger.warning("session %s no longer exists; disabling autotick", int(session_id))
            return False

        simulation = session.simulation
        for _ in range(ticks):
            simulation.update(delta)
        if simulation.is_concluded and session_id in self._auto_sessions:
            logger.info(
                "session %s concluded with %s; disabling autotick",
                int(session_id),
                simulation.world.outcome,
            )
            return False
        return True


class ApiState:
    """Aggregated services shared by the FastAPI layer."""

    def __init__(self, *, settings: Settings | None = None, rules: RulesConfig | None = None) -> None:
        self.settings = settings or get_settings()
        self.rules = rules or rules_from_settings(self.settings)
        self.sessions = SessionService(settings=self.settings, rules=self.rules)
        self.ticks = TickManager(
            self.sessions,
            base_interval_seconds=self.settings.tick_interval_seconds,
        )

    async def shutdown(self) -> None:
        await self.ticks.stop()