"""FastAPI application wiring for the tactical simulator."""

from __future__ import annotations

import logging
from collections.abc import Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tacsim.api import routes
from tacsim.api.runtime import ApiState
from tacsim.config import Settings, get_settings

logger = logging.getLogger(__name__)


def create_app(
    *,
    settings: Settings | None = None,
    state_factory: Callable[[], ApiState] | None = None,
) -> FastAPI:
    """Build the simulator API.

    ``settings`` drive both the CORS policy and, unless ``state_factory`` is
    given, the sessions and tick scheduler created at startup.
    """

    app_settings = settings or get_settings()
    factory = state_factory or (lambda: ApiState(settings=app_settings))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        state = factory()
        app.state.api_state = state
        logger.info(
            "simulator API ready (tick %.2fs, AI every %.1f simulated s)",
            state.ticks.interval_seconds,
            state.rules.simulation.ai_interval,
        )
        try:
            yield
        finally:
            # auto-ticking sessions must stop before the event loop closes
            await state.shutdown()

    app = FastAPI(title="Tactical Command Simulator API", version="0.1.0", lifespan=lifespan)
    # JSON over GET/POST only; sessions are not cookie-bound
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type"],
    )

    app.include_router(routes.router)
    return app


app = create_app()
