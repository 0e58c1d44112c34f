"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from fitness_planner.adapters.edge_function_client import HttpxEdgeFunctionClient
from fitness_planner.adapters.openai_completion_client import OpenAICompletionClient
from fitness_planner.adapters.supabase_body_metric_repository import (
    SupabaseBodyMetricRepository,
)
from fitness_planner.adapters.supabase_daily_log_repository import (
    NUTRITION_LOGS,
    WORKOUT_LOGS,
    LogTable,
    SupabaseDailyLogRepository,
)
from fitness_planner.adapters.supabase_plan_repository import SupabasePlanRepository
from fitness_planner.adapters.supabase_profile_repository import (
    SupabaseProfileRepository,
)
from fitness_planner.adapters.supabase_workout_session_repository import (
    SupabaseWorkoutSessionRepository,
)
from fitness_planner.config import Settings, parse_completion_backend
from fitness_planner.domain.logs import LogKind
from fitness_planner.services.cache import InMemoryCache
from fitness_planner.services.coach import CoachService
from fitness_planner.services.daily_logs import DailyLogService
from fitness_planner.services.dashboard import DashboardService
from fitness_planner.services.generation import PlanGenerationService
from fitness_planner.services.metrics import BodyMetricService
from fitness_planner.services.plans import PlanService
from fitness_planner.services.profiles import ProfileService
from fitness_planner.services.workout_sessions import WorkoutSessionService

LOG_TABLES: dict[LogKind, LogTable] = {
    LogKind.NUTRITION: NUTRITION_LOGS,
    LogKind.WORKOUT: WORKOUT_LOGS,
}


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    profile_service: ProfileService
    plan_service: PlanService
    generation_service: PlanGenerationService
    nutrition_log_service: DailyLogService
    workout_log_service: DailyLogService
    workout_session_service: WorkoutSessionService
    body_metric_service: BodyMetricService
    dashboard_service: DashboardService
    coach_service: CoachService
    close_resources: Callable[[], Awaitable[None]]

    def log_service(self, kind: LogKind) -> DailyLogService:
        """Return the daily log service for a log kind."""
        if kind is LogKind.NUTRITION:
            return self.nutrition_log_service
        return self.workout_log_service


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    profile_repository = SupabaseProfileRepository(supabase_client)
    plan_repository = SupabasePlanRepository(supabase_client)

    backend = parse_completion_backend(resolved_settings.completion_backend)
    completion_client: OpenAICompletionClient | HttpxEdgeFunctionClient
    if backend == "edge_function":
        completion_client = HttpxEdgeFunctionClient.create(
            supabase_url=resolved_settings.supabase_url,
            service_key=resolved_settings.supabase_service_key,
            function_name=resolved_settings.edge_function_name,
            timeout=resolved_settings.completion_timeout_seconds,
        )
    else:
        completion_client = OpenAICompletionClient.create(
            resolved_settings.openai_api_key,
            resolved_settings.openai_model,
            base_url=resolved_settings.openai_base_url,
            temperature=resolved_settings.completion_temperature,
            max_tokens=resolved_settings.completion_max_tokens,
            timeout=resolved_settings.completion_timeout_seconds,
        )

    profile_service = ProfileService(
        profile_repository,
        cache=InMemoryCache(),
        ttl_seconds=resolved_settings.plan_cache_ttl_seconds,
    )
    plan_service = PlanService(
        repository=plan_repository,
        cache=InMemoryCache(),
        ttl_seconds=resolved_settings.plan_cache_ttl_seconds,
    )
    generation_service = PlanGenerationService(
        completion_client=completion_client,
        repository=plan_repository,
        plan_service=plan_service,
        profile_service=profile_service,
    )
    nutrition_log_service = DailyLogService(
        SupabaseDailyLogRepository(supabase_client, LOG_TABLES[LogKind.NUTRITION]),
        LogKind.NUTRITION,
    )
    workout_log_service = DailyLogService(
        SupabaseDailyLogRepository(supabase_client, LOG_TABLES[LogKind.WORKOUT]),
        LogKind.WORKOUT,
    )
    dashboard_service = DashboardService(
        profile_service=profile_service,
        plan_service=plan_service,
        nutrition_logs=nutrition_log_service,
        workout_logs=workout_log_service,
    )
    workout_session_service = WorkoutSessionService(
        SupabaseWorkoutSessionRepository(supabase_client)
    )
    body_metric_service = BodyMetricService(
        SupabaseBodyMetricRepository(supabase_client), profile_service
    )
    coach_service = CoachService(completion_client)

    async def close_resources() -> None:
        await completion_client.close()

    return AppContainer(
        settings=resolved_settings,
        profile_service=profile_service,
        plan_service=plan_service,
        generation_service=generation_service,
        nutrition_log_service=nutrition_log_service,
        workout_log_service=workout_log_service,
        workout_session_service=workout_session_service,
        body_metric_service=body_metric_service,
        dashboard_service=dashboard_service,
        coach_service=coach_service,
        close_resources=close_resources,
    )
