"""Domain models for user profiles."""

from dataclasses import dataclass, field
from enum import Enum
from uuid import UUID


class Goal(str, Enum):
    """Training or nutrition goal."""

    WEIGHT_LOSS = "weight_loss"
    MUSCLE_GAIN = "muscle_gain"
    ENDURANCE = "endurance"
    STRENGTH = "strength"
    HEALTH = "health"


class Gender(str, Enum):
    """Biological sex used by the BMR formula."""

    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class ActivityLevel(str, Enum):
    """Daily activity level used to scale BMR."""

    SEDENTARY = "sedentary"
    LIGHT = "light"
    MODERATE = "moderate"
    ACTIVE = "active"
    ATHLETE = "athlete"


@dataclass(frozen=True)
class Profile:
    """Biometric and preference profile of a user."""

    user_id: UUID
    age: int
    weight_kg: float
    height_cm: float
    gender: Gender
    goal: Goal
    activity_level: ActivityLevel = ActivityLevel.MODERATE
    experience_level: str = "beginner"
    equipment: str = "gym"
    training_days_per_week: int = 4
    dietary_preferences: frozenset[str] = field(default_factory=frozenset)
    timezone: str = "UTC"

    def to_prompt_dict(self) -> dict[str, object]:
        """Return a JSON-friendly snapshot for prompts."""
        return {
            "age": self.age,
            "weight_kg": self.weight_kg,
            "height_cm": self.height_cm,
            "gender": self.gender.value,
            "goal": self.goal.value,
            "activity_level": self.activity_level.value,
            "experience_level": self.experience_level,
            "equipment": self.equipment,
            "training_days_per_week": self.training_days_per_week,
            "dietary_preferences": sorted(self.dietary_preferences),
        }
