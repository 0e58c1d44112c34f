"""Domain models for body measurements."""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from uuid import UUID


class MetricType(str, Enum):
    """Measurements the body tracker records."""

    BMI = "bmi"
    WEIGHT = "weight"
    BODY_FAT = "body_fat"
    NECK = "neck"
    SHOULDERS = "shoulders"
    CHEST = "chest"
    BICEPS = "biceps"
    FOREARMS = "forearms"
    WAIST = "waist"
    HIPS = "hips"
    THIGHS = "thighs"
    CALVES = "calves"


@dataclass(frozen=True)
class BodyMetric:
    """One dated measurement."""

    user_id: UUID
    type: MetricType
    value: float
    measured_on: date
