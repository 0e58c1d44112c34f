"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import date
from uuid import UUID

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse

from fitness_planner.api.auth import current_user_id, require_api_token
from fitness_planner.api.schemas import (
    AddMetricRequest,
    ChatRequest,
    GeneratePlanRequest,
    SaveSessionRequest,
    ToggleRequest,
    dashboard_payload,
    log_payload,
    metric_payload,
    plan_payload,
    session_payload,
)
from fitness_planner.app_logging import configure_logging
from fitness_planner.containers import AppContainer
from fitness_planner.domain.errors import (
    CompletionServiceUnavailable,
    InvalidPlanFormat,
    PlanError,
    ProfileMissing,
    QuotaExceeded,
    StoreWriteFailed,
    ToggleSyncFailed,
)
from fitness_planner.domain.logs import LogKind
from fitness_planner.domain.metrics import MetricType
from fitness_planner.domain.plans import PlanCategory
from fitness_planner.services.profiles import local_today

ERROR_STATUS: dict[type[PlanError], int] = {
    ProfileMissing: status.HTTP_404_NOT_FOUND,
    QuotaExceeded: status.HTTP_429_TOO_MANY_REQUESTS,
    CompletionServiceUnavailable: status.HTTP_503_SERVICE_UNAVAILABLE,
    InvalidPlanFormat: status.HTTP_502_BAD_GATEWAY,
    StoreWriteFailed: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ToggleSyncFailed: status.HTTP_409_CONFLICT,
}

MAX_HISTORY = 50


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container
    authenticated = [Depends(require_api_token)]

    @app.exception_handler(PlanError)
    async def plan_error_handler(request: Request, exc: PlanError) -> JSONResponse:
        state_container: AppContainer = request.app.state.container
        logger.warning(
            "Request failed with %s",
            exc.code,
            extra={"path": request.url.path},
        )
        body: dict[str, object] = {
            "error": exc.code,
            "message": _format_error_message(state_container, exc),
            "action": exc.action,
        }
        if isinstance(exc, ToggleSyncFailed):
            body["previous"] = log_payload(exc.previous)
        return JSONResponse(status_code=error_status(exc), content=body)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/plans/{category}/generate", dependencies=authenticated)
    async def generate_plan(
        category: PlanCategory,
        body: GeneratePlanRequest,
        request: Request,
        user_id: UUID = Depends(current_user_id),
    ) -> dict[str, object]:
        """Generate a plan and make it the active one."""
        state_container: AppContainer = request.app.state.container
        plan = await state_container.generation_service.generate_for_user(
            user_id, body.preferences, category
        )
        return plan_payload(plan)

    @app.get("/plans/{category}/active", dependencies=authenticated)
    async def active_plan(
        category: PlanCategory,
        request: Request,
        user_id: UUID = Depends(current_user_id),
    ) -> dict[str, object]:
        """Return the active plan of a category."""
        state_container: AppContainer = request.app.state.container
        plan = state_container.plan_service.get_active(user_id, category)
        if plan is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return plan_payload(plan)

    @app.get("/plans/{category}/history", dependencies=authenticated)
    async def plan_history(
        category: PlanCategory,
        request: Request,
        limit: int = 10,
        user_id: UUID = Depends(current_user_id),
    ) -> dict[str, object]:
        """Return recent plans of a category, newest first."""
        state_container: AppContainer = request.app.state.container
        plans = state_container.plan_service.history(
            user_id, category, limit=max(1, min(limit, MAX_HISTORY))
        )
        return {"plans": [plan_payload(plan) for plan in plans]}

    @app.get("/plans/{category}/today", dependencies=authenticated)
    async def plan_today(
        category: PlanCategory,
        request: Request,
        user_id: UUID = Depends(current_user_id),
    ) -> dict[str, object]:
        """Return the active plan's day for today in the user's timezone."""
        state_container: AppContainer = request.app.state.container
        profile = state_container.profile_service.require(user_id)
        plan = state_container.plan_service.get_active(user_id, category)
        if plan is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        today = local_today(profile)
        day = state_container.plan_service.day_for(plan, today)
        return {
            "plan_id": str(plan.id),
            "date": today.isoformat(),
            "day": day.model_dump(mode="json"),
        }

    @app.get("/logs/{kind}/{log_date}", dependencies=authenticated)
    async def daily_log(
        kind: LogKind,
        log_date: date,
        request: Request,
        user_id: UUID = Depends(current_user_id),
    ) -> dict[str, object] | None:
        """Return the day's log, or an empty one."""
        state_container: AppContainer = request.app.state.container
        log = state_container.log_service(kind).get_or_empty(user_id, log_date)
        return log_payload(log)

    @app.post("/logs/{kind}/{log_date}/toggle", dependencies=authenticated)
    async def toggle_item(  # noqa: PLR0913
        kind: LogKind,
        log_date: date,
        body: ToggleRequest,
        request: Request,
        user_id: UUID = Depends(current_user_id),
    ) -> dict[str, object]:
        """Mark a plan item done, or undo it if already done."""
        state_container: AppContainer = request.app.state.container
        result = state_container.log_service(kind).toggle(
            user_id, log_date, body.label, body.to_item()
        )
        return {
            "log": log_payload(result.log),
            "previous": log_payload(result.previous),
        }

    @app.post("/workouts/sessions", dependencies=authenticated)
    async def save_session(
        body: SaveSessionRequest,
        request: Request,
        user_id: UUID = Depends(current_user_id),
    ) -> dict[str, object]:
        """Save what was done in a workout as that day's log."""
        state_container: AppContainer = request.app.state.container
        try:
            session = state_container.workout_session_service.save_session(
                user_id,
                body.log_date,
                [entry.to_exercise() for entry in body.exercises],
                note=body.note,
                duration_seconds=body.duration_seconds,
            )
        except ValueError as exc:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
            ) from exc
        return session_payload(session)

    @app.get("/workouts/sessions", dependencies=authenticated)
    async def list_sessions(
        request: Request,
        limit: int = 20,
        user_id: UUID = Depends(current_user_id),
    ) -> dict[str, object]:
        """Return workout history, newest first."""
        state_container: AppContainer = request.app.state.container
        sessions = state_container.workout_session_service.list_sessions(
            user_id, limit=limit
        )
        return {"sessions": [session_payload(session) for session in sessions]}

    @app.post("/metrics", dependencies=authenticated)
    async def add_metric(
        body: AddMetricRequest,
        request: Request,
        user_id: UUID = Depends(current_user_id),
    ) -> dict[str, object]:
        """Record a body measurement."""
        state_container: AppContainer = request.app.state.container
        metric = state_container.body_metric_service.add_metric(
            user_id, body.type, body.value, body.measured_on
        )
        return metric_payload(metric)

    @app.get("/metrics/latest", dependencies=authenticated)
    async def latest_metrics(
        request: Request, user_id: UUID = Depends(current_user_id)
    ) -> dict[str, object]:
        """Return the last known value of every measurement type."""
        state_container: AppContainer = request.app.state.container
        latest = state_container.body_metric_service.latest(user_id)
        return {"latest": {key.value: value for key, value in latest.items()}}

    @app.get("/metrics/{metric_type}/history", dependencies=authenticated)
    async def metric_history(
        metric_type: MetricType,
        request: Request,
        user_id: UUID = Depends(current_user_id),
    ) -> dict[str, object]:
        """Return recent measurements of one type, newest first."""
        state_container: AppContainer = request.app.state.container
        metrics = state_container.body_metric_service.history(user_id, metric_type)
        return {"metrics": [metric_payload(metric) for metric in metrics]}

    @app.get("/dashboard", dependencies=authenticated)
    async def dashboard(
        request: Request, user_id: UUID = Depends(current_user_id)
    ) -> dict[str, object]:
        """Return today's intake and weekly training stats."""
        state_container: AppContainer = request.app.state.container
        stats = state_container.dashboard_service.get_stats(user_id)
        return dashboard_payload(stats)

    @app.post("/coach/chat", dependencies=authenticated)
    async def coach_chat(
        body: ChatRequest,
        request: Request,
        user_id: UUID = Depends(current_user_id),
    ) -> dict[str, str]:
        """Answer a message in the coach persona."""
        state_container: AppContainer = request.app.state.container
        profile = state_container.profile_service.get(user_id)
        try:
            answer = await state_container.coach_service.reply(profile, body.message)
        except ValueError as exc:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
            ) from exc
        return {"response": answer}

    return app


def error_status(exc: PlanError) -> int:
    """Return the HTTP status for a planner error."""
    for error_type in type(exc).__mro__:
        if error_type in ERROR_STATUS:
            return ERROR_STATUS[error_type]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _format_error_message(state_container: AppContainer, exc: PlanError) -> str:
    """Return a user-facing error message with local debug info."""
    message = exc.user_message
    if state_container.settings.environment == "local":
        detail = f"{type(exc).__name__}: {exc}".strip()
        if detail:
            return f"{message} (debug: {detail})"
    return message
