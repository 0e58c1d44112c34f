"""Pydantic request models and response serializers for the HTTP API."""

from datetime import date

from pydantic import BaseModel, ConfigDict, Field

from fitness_planner.domain.logs import (
    CompletedExercise,
    DailyLog,
    PlanItem,
    WorkoutSession,
)
from fitness_planner.domain.metrics import BodyMetric, MetricType
from fitness_planner.domain.plans import Plan
from fitness_planner.services.dashboard import DashboardStats


class GeneratePlanRequest(BaseModel):
    """Body for plan generation."""

    preferences: str = ""


class ToggleRequest(BaseModel):
    """Body for marking a plan item done or undone."""

    label: str = Field(min_length=1)
    name: str = Field(min_length=1)
    calories: float = Field(default=0.0, ge=0)
    protein: float = Field(default=0.0, ge=0)

    def to_item(self) -> PlanItem:
        """Return the domain item being toggled."""
        return PlanItem(name=self.name, calories=self.calories, protein=self.protein)


class ExerciseEntry(BaseModel):
    """One performed exercise in a session body."""

    name: str = Field(min_length=1)
    sets: str | int = ""
    reps: str | int = ""
    weight: float = Field(default=0.0, ge=0)
    label: str = ""

    def to_exercise(self) -> CompletedExercise:
        return CompletedExercise(
            name=self.name,
            sets=str(self.sets),
            reps=str(self.reps),
            weight=self.weight,
            label=self.label,
        )


class SaveSessionRequest(BaseModel):
    """Body for saving a finished workout."""

    log_date: date
    exercises: list[ExerciseEntry] = Field(min_length=1)
    note: str = Field(default="", max_length=2000)
    duration_seconds: int | None = Field(default=None, ge=0)


class AddMetricRequest(BaseModel):
    """Body for recording a body measurement."""

    model_config = ConfigDict(allow_inf_nan=False)

    type: MetricType
    value: float = Field(gt=0)
    measured_on: date | None = None


class ChatRequest(BaseModel):
    """Body for a coach chat message."""

    message: str = Field(min_length=1, max_length=4000)


def plan_payload(plan: Plan) -> dict[str, object]:
    """Serialize a stored plan."""
    return {
        "id": str(plan.id),
        "user_id": str(plan.user_id),
        "type": plan.category.value,
        "title": plan.title,
        "content": plan.content.model_dump(mode="json"),
        "is_active": plan.is_active,
        "created_at": plan.created_at.isoformat(),
    }


def log_payload(log: DailyLog | None) -> dict[str, object] | None:
    """Serialize a daily log."""
    if log is None:
        return None
    return {
        "user_id": str(log.user_id),
        "log_date": log.log_date.isoformat(),
        "items": [
            {
                "name": item.name,
                "label": item.label,
                "calories": item.calories,
                "protein": item.protein,
                "recorded_at": item.recorded_at.isoformat(),
            }
            for item in log.items
        ],
        "total_calories": log.total_calories,
        "total_protein": log.total_protein,
    }


def dashboard_payload(stats: DashboardStats) -> dict[str, object]:
    """Serialize dashboard stats."""
    return {
        "day": stats.day.isoformat(),
        "calories_consumed": stats.calories_consumed,
        "protein_consumed": stats.protein_consumed,
        "calorie_target": stats.calorie_target,
        "weekly_workouts": stats.weekly_workouts,
    }


def session_payload(session: WorkoutSession) -> dict[str, object]:
    """Serialize a workout session."""
    return {
        "user_id": str(session.user_id),
        "log_date": session.log_date.isoformat(),
        "exercises": [
            {
                "name": exercise.name,
                "label": exercise.label,
                "sets": exercise.sets,
                "reps": exercise.reps,
                "weight": exercise.weight,
            }
            for exercise in session.exercises
        ],
        "note": session.note,
        "duration_seconds": session.duration_seconds,
    }


def metric_payload(metric: BodyMetric) -> dict[str, object]:
    """Serialize a body measurement."""
    return {
        "type": metric.type.value,
        "value": metric.value,
        "measured_on": metric.measured_on.isoformat(),
    }
