"""Domain models for daily consumption and completion logs."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from uuid import UUID


class LogKind(str, Enum):
    """Which kind of plan items a daily log tracks."""

    NUTRITION = "nutrition"
    WORKOUT = "workout"


@dataclass(frozen=True)
class PlanItem:
    """Plan item being marked done, as sent by the caller."""

    name: str
    calories: float = 0.0
    protein: float = 0.0


@dataclass(frozen=True)
class ConsumedItem:
    """Snapshot of a plan item marked done on a given day."""

    name: str
    label: str
    calories: float
    protein: float
    recorded_at: datetime

    @property
    def key(self) -> tuple[str, str]:
        """Identity of the item within a day: (slot label, item name)."""
        return (self.label, self.name)


@dataclass(frozen=True)
class DailyLog:
    """Per-user, per-date record of completed plan items."""

    user_id: UUID
    log_date: date
    items: list[ConsumedItem] = field(default_factory=list)
    total_calories: float = 0.0
    total_protein: float = 0.0


@dataclass(frozen=True)
class CompletedExercise:
    """Exercise as actually performed in a session."""

    name: str
    sets: str = ""
    reps: str = ""
    weight: float = 0.0
    label: str = ""


@dataclass(frozen=True)
class WorkoutSession:
    """Snapshot of a finished workout day."""

    user_id: UUID
    log_date: date
    exercises: list[CompletedExercise] = field(default_factory=list)
    note: str = ""
    duration_seconds: int | None = None
