"""Dashboard statistics for today's progress."""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from uuid import UUID

from fitness_planner.domain.plans import NutritionDay, PlanCategory
from fitness_planner.domain.profiles import Profile
from fitness_planner.services.daily_logs import DailyLogService
from fitness_planner.services.plans import PlanService
from fitness_planner.services.profiles import ProfileService, local_today

FALLBACK_KCAL_PER_KG = 30
WEEK_DAYS = 7


@dataclass(frozen=True)
class DashboardStats:
    """Today's intake against target, plus weekly training count."""

    day: date
    calories_consumed: float
    protein_consumed: float
    calorie_target: float
    weekly_workouts: int


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class DashboardService:
    """Aggregates logs and the active nutrition plan for a user."""

    profile_service: ProfileService
    plan_service: PlanService
    nutrition_logs: DailyLogService
    workout_logs: DailyLogService
    clock: Callable[[], datetime] = _utcnow

    def get_stats(self, user_id: UUID) -> DashboardStats:
        """Return today's stats in the user's timezone."""
        profile = self.profile_service.require(user_id)
        today = local_today(profile, self.clock())
        nutrition_log = self.nutrition_logs.get(user_id, today)
        recent_workouts = self.workout_logs.list_range(
            user_id, today - timedelta(days=WEEK_DAYS - 1), today + timedelta(days=1)
        )
        return DashboardStats(
            day=today,
            calories_consumed=nutrition_log.total_calories if nutrition_log else 0.0,
            protein_consumed=nutrition_log.total_protein if nutrition_log else 0.0,
            calorie_target=self._calorie_target(profile, today),
            weekly_workouts=sum(1 for log in recent_workouts if log.items),
        )

    def _calorie_target(self, profile: Profile, today: date) -> float:
        plan = self.plan_service.get_active(profile.user_id, PlanCategory.NUTRITION)
        if plan is not None:
            day = self.plan_service.day_for(plan, today)
            if isinstance(day, NutritionDay) and day.planned_calories() > 0:
                return day.planned_calories()
        return (profile.weight_kg or 70.0) * FALLBACK_KCAL_PER_KG
