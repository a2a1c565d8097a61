"""HTTP routes for the tactical simulator API."""

from __future__ import annotations

from typing import Annotated, Literal

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from pydantic import BaseModel, Field

from tacsim.api.runtime import (
    ApiState,
    MissionNotFoundError,
    OrderDraft,
    Session,
    SessionID,
    SessionNotFoundError,
    UnitNotCommandableError,
)
from tacsim.domain import models as dm
from tacsim.domain.enums import CommandType, Difficulty

router = APIRouter()


def get_state(request: Request) -> ApiState:
    state = getattr(request.app.state, "api_state", None)
    if state is None:  # pragma: no cover - FastAPI should always initialise state
        raise RuntimeError("API state not initialised")
    return state


ApiStateDep = Annotated[ApiState, Depends(get_state)]


class MissionSummary(BaseModel):
    id: str
    name: str
    mission_type: str
    description: str
    briefing: str
    duration: float
    difficulty: str
    time_of_day: str
    weather: str
    objective_count: int
    player_forces: dict[str, int]
    enemy_forces: dict[str, int]
    victory_conditions: list[str]
    defeat_conditions: list[str]


class SessionSummary(BaseModel):
    id: int
    mission_id: str
    mission_name: str
    seed: int
    difficulty: str
    elapsed_time: float
    is_paused: bool
    game_speed: int
    outcome: str
    friendly_active: int
    enemy_active: int
    auto_tick: bool


class SessionDetail(SessionSummary):
    weather: str
    time_of_day: str
    units: list[dict[str, object]]
    objectives: list[dict[str, object]]
    ai: dict[str, object]


class CreateSessionRequest(BaseModel):
    mission_id: str | None = None
    seed: int | None = None
    difficulty: Difficulty | None = None


class PositionTarget(BaseModel):
    kind: Literal["position"] = "position"
    x: float
    y: float


class UnitTarget(BaseModel):
    kind: Literal["unit"] = "unit"
    unit_id: str = Field(min_length=1)


OrderTargetPayload = Annotated[PositionTarget | UnitTarget, Field(discriminator="kind")]


class OrderCreateRequest(BaseModel):
    unit_id: str = Field(min_length=1)
    command: CommandType
    target: OrderTargetPayload | None = None
    priority: int = Field(default=3, ge=1, le=5)

    def to_target(self) -> dm.OrderTarget | None:
        if isinstance(self.target, PositionTarget):
            return dm.Position(x=self.target.x, y=self.target.y)
        if isinstance(self.target, UnitTarget):
            return dm.UnitRef(dm.UnitID(self.target.unit_id))
        return None


class OrderSummary(BaseModel):
    id: str
    unit_id: str
    command: str
    target: dict[str, object] | None
    priority: int
    status: str
    issued_at: float
    completed_at: float | None
    detail: str | None = None


class PauseRequest(BaseModel):
    paused: bool


class SpeedRequest(BaseModel):
    speed: int


class TickAdvanceRequest(BaseModel):
    ticks: int = Field(default=1, ge=1, le=6000)
    delta_seconds: float | None = Field(default=None, gt=0.0, le=10.0)


class TickScheduleRequest(BaseModel):
    enabled: bool
    interval_seconds: float | None = Field(default=None, gt=0.0)


class TickStatusResponse(BaseModel):
    enabled: bool
    interval_seconds: float


class TerrainResponse(BaseModel):
    width: int
    height: int
    cell_size: int
    cells: list[list[str]]
    elevation: list[list[float]]


class LogEntryResponse(BaseModel):
    timestamp: float
    event_type: str
    description: str
    unit_id: str | None
    objective_id: str | None
    data: dict[str, object]


def _session_or_404(state: ApiState, session_id: int) -> Session:
    try:
        return state.sessions.get_session(SessionID(session_id))
    except SessionNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="session not found"
        ) from exc


def _summary(state: ApiState, session: Session) -> SessionSummary:
    payload = state.sessions.to_summary_dict(session, auto_tick=state.ticks.is_enabled(session.id))
    return SessionSummary.model_validate(payload)


def _detail(state: ApiState, session: Session) -> SessionDetail:
    payload = state.sessions.to_detail_dict(session, auto_tick=state.ticks.is_enabled(session.id))
    return SessionDetail.model_validate(payload)


@router.get("/health")
async def health(state: ApiStateDep) -> dict[str, object]:
    return {
        "status": "ok",
        "session_count": len(state.sessions.list_sessions()),
        "tick_interval_seconds": state.ticks.interval_seconds,
        "ai_interval_seconds": state.rules.simulation.ai_interval,
    }


@router.get("/missions", response_model=list[MissionSummary])
async def list_missions(state: ApiStateDep) -> list[MissionSummary]:
    return [
        MissionSummary.model_validate(state.sessions.to_mission_dict(mission))
        for mission in state.sessions.list_missions()
    ]


@router.get("/sessions", response_model=list[SessionSummary])
async def list_sessions(state: ApiStateDep) -> list[SessionSummary]:
    return [_summary(state, session) for session in state.sessions.list_sessions()]


@router.post("/sessions", response_model=SessionDetail, status_code=status.HTTP_201_CREATED)
async def create_session(request: CreateSessionRequest, state: ApiStateDep) -> SessionDetail:
    try:
        session = state.sessions.create_session(
            request.mission_id, seed=request.seed, difficulty=request.difficulty
        )
    except MissionNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return _detail(state, session)


@router.get("/sessions/{session_id}", response_model=SessionDetail)
async def get_session(session_id: int, state: ApiStateDep) -> SessionDetail:
    return _detail(state, _session_or_404(state, session_id))


@router.get("/sessions/{session_id}/terrain", response_model=TerrainResponse)
async def get_terrain(session_id: int, state: ApiStateDep) -> TerrainResponse:
    session = _session_or_404(state, session_id)
    payload = state.sessions.to_terrain_dict(session.simulation.world.terrain)
    return TerrainResponse.model_validate(payload)


@router.get("/sessions/{session_id}/log", response_model=list[LogEntryResponse])
async def get_log(
    session_id: int,
    state: ApiStateDep,
    since: Annotated[float | None, Query(ge=0.0)] = None,
    limit: Annotated[int | None, Query(ge=1, le=1000)] = None,
) -> list[LogEntryResponse]:
    session = _session_or_404(state, session_id)
    entries = session.simulation.world.combat_log
    if since is not None:
        entries = [entry for entry in entries if entry.timestamp >= since]
    if limit is not None:
        entries = entries[-limit:]
    return [LogEntryResponse.model_validate(state.sessions.to_log_dict(e)) for e in entries]


@router.post(
    "/sessions/{session_id}/orders",
    response_model=OrderSummary,
    status_code=status.HTTP_201_CREATED,
)
async def create_order(
    session_id: int,
    request: OrderCreateRequest,
    state: ApiStateDep,
) -> OrderSummary:
    session = _session_or_404(state, session_id)
    draft = OrderDraft(
        unit_id=dm.UnitID(request.unit_id),
        command=request.command,
        target=request.to_target(),
        priority=request.priority,
    )
    try:
        order, result = state.sessions.issue_order(session.id, draft)
    except UnitNotCommandableError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    payload = state.sessions.to_order_dict(order)
    payload["detail"] = result.detail
    return OrderSummary.model_validate(payload)


@router.post("/sessions/{session_id}/pause", response_model=SessionSummary)
async def pause_session(
    session_id: int, request: PauseRequest, state: ApiStateDep
) -> SessionSummary:
    session = _session_or_404(state, session_id)
    state.sessions.set_paused(session.id, request.paused)
    return _summary(state, session)


@router.post("/sessions/{session_id}/speed", response_model=SessionSummary)
async def set_speed(session_id: int, request: SpeedRequest, state: ApiStateDep) -> SessionSummary:
    session = _session_or_404(state, session_id)
    try:
        state.sessions.set_speed(session.id, request.speed)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return _summary(state, session)


@router.post("/sessions/{session_id}/restart", response_model=SessionDetail)
async def restart_session(session_id: int, state: ApiStateDep) -> SessionDetail:
    session = _session_or_404(state, session_id)
    session = state.sessions.restart_session(session.id)
    return _detail(state, session)


@router.post("/sessions/{session_id}/tick/advance", response_model=SessionSummary)
async def advance_tick(
    session_id: int,
    request: TickAdvanceRequest,
    state: ApiStateDep,
) -> SessionSummary:
    session = _session_or_404(state, session_id)
    await state.ticks.advance_now(session.id, ticks=request.ticks, delta_seconds=request.delta_seconds)
    return _summary(state, session)


@router.get("/sessions/{session_id}/tick/schedule", response_model=TickStatusResponse)
async def get_tick_schedule(session_id: int, state: ApiStateDep) -> TickStatusResponse:
    session = _session_or_404(state, session_id)
    return TickStatusResponse(
        enabled=state.ticks.is_enabled(session.id),
        interval_seconds=state.ticks.interval_seconds,
    )


@router.post("/sessions/{session_id}/tick/schedule", response_model=TickStatusResponse)
async def update_tick_schedule(
    session_id: int,
    request: TickScheduleRequest,
    state: ApiStateDep,
) -> TickStatusResponse:
    session = _session_or_404(state, session_id)
    if request.interval_seconds is not None:
        state.ticks.set_interval(request.interval_seconds)

    await state.ticks.set_enabled(session.id, request.enabled)

    return TickStatusResponse(
        enabled=state.ticks.is_enabled(session.id),
        interval_seconds=state.ticks.interval_seconds,
    )
