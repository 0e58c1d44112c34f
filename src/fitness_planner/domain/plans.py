"""Domain models for generated plans."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field


class PlanCategory(str, Enum):
    """Kind of plan; at most one active plan per user and category."""

    WORKOUT = "workout"
    NUTRITION = "nutrition"

    @property
    def completion_type(self) -> str:
        """Return the completion service request type for this category."""
        return "WORKOUT" if self is PlanCategory.WORKOUT else "MEAL"


class Exercise(BaseModel):
    """Single exercise prescription."""

    name: str = Field(min_length=1)
    sets: str = "3"
    reps: str = "10"
    rest_seconds: float = 60.0
    notes: str | None = None


class WorkoutDay(BaseModel):
    """One training session of a workout plan."""

    day_label: str
    focus: str = ""
    exercises: list[Exercise] = Field(min_length=1)


class WorkoutPlanContent(BaseModel):
    """Normalized content of a workout plan."""

    title: str
    days: list[WorkoutDay] = Field(min_length=1)


class Meal(BaseModel):
    """Single meal item; `type` is the meal slot label."""

    type: str
    name: str
    calories: float = 0.0
    protein: float = 0.0
    ingredients: list[str] = Field(default_factory=list)
    prep: str | None = None


class NutritionDay(BaseModel):
    """One day of a nutrition plan."""

    day_label: str
    total_calories: float | None = None
    meals: list[Meal] = Field(default_factory=list)

    def planned_calories(self) -> float:
        """Return the declared day total, or the sum of meal calories."""
        if self.total_calories:
            return self.total_calories
        return sum(meal.calories for meal in self.meals)


class NutritionPlanContent(BaseModel):
    """Normalized content of a nutrition plan."""

    title: str
    target_calories: float | None = None
    days: list[NutritionDay] = Field(min_length=1)


PlanContent = WorkoutPlanContent | NutritionPlanContent


@dataclass(frozen=True)
class Plan:
    """Persisted plan record."""

    id: UUID
    user_id: UUID
    category: PlanCategory
    title: str
    content: PlanContent
    is_active: bool
    created_at: datetime
