"""Plan store contract and read-side service."""

from dataclasses import dataclass
from datetime import date
from typing import Protocol
from uuid import UUID

from fitness_planner.domain.plans import (
    NutritionDay,
    Plan,
    PlanCategory,
    PlanContent,
    WorkoutDay,
)
from fitness_planner.services.cache import Cache


class PlanRepository(Protocol):
    """Persistence interface for plans; one active plan per user and category."""

    def deactivate_all(self, user_id: UUID, category: PlanCategory) -> None:
        """Mark every plan of the category inactive. Idempotent."""

    def insert_active(
        self,
        user_id: UUID,
        category: PlanCategory,
        title: str,
        content: PlanContent,
    ) -> Plan:
        """Append a new active plan row without checking for others."""

    def get_active(self, user_id: UUID, category: PlanCategory) -> Plan | None:
        """Return the most recently created active plan, if any."""

    def list_plans(
        self, user_id: UUID, category: PlanCategory, limit: int
    ) -> list[Plan]:
        """Return plans newest first, active or not."""


@dataclass
class PlanService:
    """Reads active plans through a short-lived cache."""

    repository: PlanRepository
    cache: Cache
    ttl_seconds: int = 300

    def get_active(self, user_id: UUID, category: PlanCategory) -> Plan | None:
        """Return the user's active plan for the category."""
        cache_key = _cache_key(user_id, category)
        cached = self.cache.get(cache_key)
        if isinstance(cached, Plan):
            return cached
        plan = self.repository.get_active(user_id, category)
        if plan is not None:
            self.cache.set(cache_key, plan, ttl_seconds=self.ttl_seconds)
        return plan

    def invalidate(self, user_id: UUID, category: PlanCategory) -> None:
        """Drop the cached active plan after a write."""
        self.cache.delete(_cache_key(user_id, category))

    def history(
        self, user_id: UUID, category: PlanCategory, limit: int = 10
    ) -> list[Plan]:
        """Return past and current plans, newest first."""
        return self.repository.list_plans(user_id, category, limit)

    def day_for(self, plan: Plan, on_date: date) -> WorkoutDay | NutritionDay:
        """Map a calendar date onto a plan day by weekday (Monday first).

        Plans shorter than a week wrap around.
        """
        days = plan.content.days
        return days[on_date.weekday() % len(days)]


def _cache_key(user_id: UUID, category: PlanCategory) -> str:
    return f"plans:active:{user_id}:{category.value}"
