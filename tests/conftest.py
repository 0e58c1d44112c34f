"""Shared test fixtures."""

import json
from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime, timedelta
from uuid import UUID, uuid4

import pytest

from fitness_planner.config import Settings
from fitness_planner.containers import AppContainer
from fitness_planner.domain.logs import DailyLog, LogKind, WorkoutSession
from fitness_planner.domain.metrics import BodyMetric, MetricType
from fitness_planner.domain.plans import Plan, PlanCategory, PlanContent
from fitness_planner.domain.profiles import ActivityLevel, Gender, Goal, Profile
from fitness_planner.services.cache import InMemoryCache
from fitness_planner.services.coach import CoachService
from fitness_planner.services.completion import CompletionClient, CompletionRequest
from fitness_planner.services.daily_logs import DailyLogRepository, DailyLogService
from fitness_planner.services.dashboard import DashboardService
from fitness_planner.services.generation import PlanGenerationService
from fitness_planner.services.metrics import BodyMetricRepository, BodyMetricService
from fitness_planner.services.plans import PlanRepository, PlanService
from fitness_planner.services.profiles import ProfileRepository, ProfileService
from fitness_planner.services.workout_sessions import (
    WorkoutSessionRepository,
    WorkoutSessionService,
)

USER_ID = UUID("8a6e0804-2bd0-4672-b79d-d97027f9071a")

# Monday 2024-03-04 at noon UTC.
FIXED_NOW = datetime(2024, 3, 4, 12, 0, tzinfo=UTC)

WORKOUT_JSON = json.dumps(
    {
        "title": "Upper/Lower split",
        "days": [
            {
                "day": "Day 1",
                "focus": "Upper",
                "exercises": [
                    {"name": "Bench press", "sets": "4", "reps": "8", "rest": 90},
                    {"name": "Row", "sets": 4, "reps": "10", "rest": "2 min"},
                ],
            },
            {
                "day": "Day 2",
                "focus": "Lower",
                "exercises": [{"name": "Squat", "sets": "5", "reps": "5", "rest": 120}],
            },
            {
                "day": "Day 3",
                "focus": "Upper",
                "exercises": [{"name": "Overhead press", "sets": "3", "reps": "10"}],
            },
            {
                "day": "Day 4",
                "focus": "Lower",
                "exercises": [
                    {"name": "Deadlift", "sets": "3", "reps": "5", "rest": "about 3"}
                ],
            },
        ],
    }
)

MEAL_JSON = json.dumps(
    {
        "title": "Budget bulk",
        "target_calories": 3100,
        "days": [
            {
                "day": day,
                "total_calories": 3000,
                "meals": [
                    {
                        "type": "Breakfast",
                        "name": "Oats and eggs",
                        "calories": 700,
                        "protein": 35,
                        "ingredients": ["oats", "eggs", "milk"],
                    },
                    {
                        "name": "Lunch",
                        "items": [
                            {
                                "name": "Chicken rice bowl",
                                "calories": "900 kcal",
                                "protein_g": 55,
                            },
                            "Side salad",
                        ],
                    },
                ],
            }
            for day in (
                "Monday",
                "Tuesday",
                "Wednesday",
                "Thursday",
                "Friday",
                "Saturday",
                "Sunday",
            )
        ],
    }
)


def make_profile(**overrides: object) -> Profile:
    values: dict[str, object] = {
        "user_id": USER_ID,
        "age": 30,
        "weight_kg": 80.0,
        "height_cm": 180.0,
        "gender": Gender.MALE,
        "goal": Goal.MUSCLE_GAIN,
        "activity_level": ActivityLevel.MODERATE,
    }
    values.update(overrides)
    return Profile(**values)  # type: ignore[arg-type]


@dataclass
class InMemoryProfileRepository(ProfileRepository):
    """In-memory profile repository for tests."""

    profiles: dict[UUID, Profile] = field(default_factory=dict)

    def get(self, user_id: UUID) -> Profile | None:
        return self.profiles.get(user_id)


@dataclass
class InMemoryPlanRepository(PlanRepository):
    """In-memory plan repository that records calls."""

    plans: list[Plan] = field(default_factory=list)
    calls: list[str] = field(default_factory=list)
    fail_on: str | None = None
    _clock: datetime = FIXED_NOW

    def deactivate_all(self, user_id: UUID, category: PlanCategory) -> None:
        self.calls.append("deactivate_all")
        if self.fail_on == "deactivate_all":
            raise RuntimeError("deactivate failed")
        self.plans = [
            replace(plan, is_active=False)
            if plan.user_id == user_id and plan.category is category
            else plan
            for plan in self.plans
        ]

    def insert_active(
        self,
        user_id: UUID,
        category: PlanCategory,
        title: str,
        content: PlanContent,
    ) -> Plan:
        self.calls.append("insert_active")
        if self.fail_on == "insert_active":
            raise RuntimeError("insert failed")
        self._clock += timedelta(seconds=1)
        plan = Plan(
            id=uuid4(),
            user_id=user_id,
            category=category,
            title=title,
            content=content,
            is_active=True,
            created_at=self._clock,
        )
        self.plans.append(plan)
        return plan

    def get_active(self, user_id: UUID, category: PlanCategory) -> Plan | None:
        self.calls.append("get_active")
        active = [
            plan
            for plan in self.plans
            if plan.user_id == user_id and plan.category is category and plan.is_active
        ]
        return max(active, key=lambda plan: plan.created_at, default=None)

    def list_plans(
        self, user_id: UUID, category: PlanCategory, limit: int
    ) -> list[Plan]:
        matching = [
            plan
            for plan in self.plans
            if plan.user_id == user_id and plan.category is category
        ]
        return sorted(matching, key=lambda plan: plan.created_at, reverse=True)[:limit]

    def active_count(self, user_id: UUID, category: PlanCategory) -> int:
        return sum(
            1
            for plan in self.plans
            if plan.user_id == user_id and plan.category is category and plan.is_active
        )


@dataclass
class InMemoryDailyLogRepository(DailyLogRepository):
    """In-memory daily log repository keyed by (user, date)."""

    logs: dict[tuple[UUID, date], DailyLog] = field(default_factory=dict)
    fail_writes: bool = False
    fail_reads: bool = False
    writes: int = 0

    def get_log(self, user_id: UUID, log_date: date) -> DailyLog | None:
        if self.fail_reads:
            raise RuntimeError("read timed out")
        return self.logs.get((user_id, log_date))

    def upsert_log(self, log: DailyLog) -> DailyLog:
        if self.fail_writes:
            raise RuntimeError("network down")
        self.writes += 1
        self.logs[(log.user_id, log.log_date)] = log
        return log

    def list_logs(self, user_id: UUID, start: date, end: date) -> list[DailyLog]:
        return sorted(
            (
                log
                for (owner, day), log in self.logs.items()
                if owner == user_id and start <= day < end
            ),
            key=lambda log: log.log_date,
        )


@dataclass
class InMemoryWorkoutSessionRepository(WorkoutSessionRepository):
    """In-memory session store with one session per (user, date)."""

    sessions: dict[tuple[UUID, date], WorkoutSession] = field(default_factory=dict)
    fail_writes: bool = False

    def save_session(self, session: WorkoutSession) -> WorkoutSession:
        if self.fail_writes:
            raise RuntimeError("network down")
        self.sessions[(session.user_id, session.log_date)] = session
        return session

    def list_sessions(self, user_id: UUID, limit: int) -> list[WorkoutSession]:
        owned = [s for (owner, _), s in self.sessions.items() if owner == user_id]
        return sorted(owned, key=lambda s: s.log_date, reverse=True)[:limit]


@dataclass
class InMemoryBodyMetricRepository(BodyMetricRepository):
    """In-memory measurement store."""

    metrics: list[BodyMetric] = field(default_factory=list)
    fail_writes: bool = False

    def add_metric(self, metric: BodyMetric) -> BodyMetric:
        if self.fail_writes:
            raise RuntimeError("network down")
        self.metrics.append(metric)
        return metric

    def list_by_type(
        self, user_id: UUID, metric_type: MetricType, limit: int
    ) -> list[BodyMetric]:
        matching = [
            metric
            for metric in self.list_all(user_id)
            if metric.type is metric_type
        ]
        return matching[:limit]

    def list_all(self, user_id: UUID) -> list[BodyMetric]:
        owned = [metric for metric in self.metrics if metric.user_id == user_id]
        return sorted(owned, key=lambda metric: metric.measured_on, reverse=True)


@dataclass
class FakeCompletionClient(CompletionClient):
    """Completion client returning queued raw outputs."""

    responses: list[str] = field(default_factory=list)
    requests: list[CompletionRequest] = field(default_factory=list)
    error: Exception | None = None

    async def complete(self, request: CompletionRequest) -> str:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if not self.responses:
            raise AssertionError("No completion response queued")
        return self.responses.pop(0)

    async def close(self) -> None:
        return None


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="service-key",
        api_token="api-token",
        openai_api_key="openai-key",
        environment="production",
    )


@pytest.fixture
def profile() -> Profile:
    return make_profile()


@pytest.fixture
def profile_repository(profile: Profile) -> InMemoryProfileRepository:
    return InMemoryProfileRepository({profile.user_id: profile})


@pytest.fixture
def plan_repository() -> InMemoryPlanRepository:
    return InMemoryPlanRepository()


@pytest.fixture
def completion_client() -> FakeCompletionClient:
    return FakeCompletionClient()


@pytest.fixture
def container(
    settings: Settings,
    profile_repository: InMemoryProfileRepository,
    plan_repository: InMemoryPlanRepository,
    completion_client: FakeCompletionClient,
) -> AppContainer:
    profile_service = ProfileService(profile_repository)
    plan_service = PlanService(plan_repository, InMemoryCache())
    nutrition_log_service = DailyLogService(
        InMemoryDailyLogRepository(), LogKind.NUTRITION, clock=lambda: FIXED_NOW
    )
    workout_log_service = DailyLogService(
        InMemoryDailyLogRepository(), LogKind.WORKOUT, clock=lambda: FIXED_NOW
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        profile_service=profile_service,
        plan_service=plan_service,
        generation_service=PlanGenerationService(
            completion_client=completion_client,
            repository=plan_repository,
            plan_service=plan_service,
            profile_service=profile_service,
        ),
        nutrition_log_service=nutrition_log_service,
        workout_log_service=workout_log_service,
        workout_session_service=WorkoutSessionService(
            InMemoryWorkoutSessionRepository()
        ),
        body_metric_service=BodyMetricService(
            InMemoryBodyMetricRepository(), profile_service, clock=lambda: FIXED_NOW
        ),
        dashboard_service=DashboardService(
            profile_service=profile_service,
            plan_service=plan_service,
            nutrition_logs=nutrition_log_service,
            workout_logs=workout_log_service,
            clock=lambda: FIXED_NOW,
        ),
        coach_service=CoachService(completion_client),
        close_resources=close_resources,
    )
