"""Profile lookup and parsing."""

from dataclasses import dataclass
from datetime import UTC, date, datetime
from typing import Protocol
from uuid import UUID
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fitness_planner.domain.errors import ProfileMissing
from fitness_planner.domain.profiles import ActivityLevel, Gender, Goal, Profile
from fitness_planner.services.cache import Cache

# Onboarding stores display labels, which the mobile app ships in French.
_GOAL_ALIASES = {
    "perte de poids": Goal.WEIGHT_LOSS,
    "weight loss": Goal.WEIGHT_LOSS,
    "seche": Goal.WEIGHT_LOSS,
    "sèche": Goal.WEIGHT_LOSS,
    "prise de masse": Goal.MUSCLE_GAIN,
    "muscle gain": Goal.MUSCLE_GAIN,
    "endurance": Goal.ENDURANCE,
    "force": Goal.STRENGTH,
    "strength": Goal.STRENGTH,
    "santé": Goal.HEALTH,
    "sante": Goal.HEALTH,
    "health": Goal.HEALTH,
}

_GENDER_ALIASES = {
    "homme": Gender.MALE,
    "male": Gender.MALE,
    "man": Gender.MALE,
    "m": Gender.MALE,
    "femme": Gender.FEMALE,
    "female": Gender.FEMALE,
    "woman": Gender.FEMALE,
    "f": Gender.FEMALE,
}

_ACTIVITY_ALIASES = {
    "sédentaire": ActivityLevel.SEDENTARY,
    "sedentaire": ActivityLevel.SEDENTARY,
    "léger": ActivityLevel.LIGHT,
    "leger": ActivityLevel.LIGHT,
    "modéré": ActivityLevel.MODERATE,
    "modere": ActivityLevel.MODERATE,
    "actif": ActivityLevel.ACTIVE,
    "athlète": ActivityLevel.ATHLETE,
    "athlete": ActivityLevel.ATHLETE,
}


class ProfileRepository(Protocol):
    """Persistence interface for user profiles."""

    def get(self, user_id: UUID) -> Profile | None:
        """Return the profile for a user, if present."""


@dataclass
class ProfileService:
    """Application service for profile access."""

    repository: ProfileRepository
    cache: Cache | None = None
    ttl_seconds: int = 300

    def get(self, user_id: UUID) -> Profile | None:
        """Return the user's profile, if any."""
        if self.cache is None:
            return self.repository.get(user_id)
        cached = self.cache.get(_cache_key(user_id))
        if isinstance(cached, Profile):
            return cached
        profile = self.repository.get(user_id)
        if profile is not None:
            self.cache.set(_cache_key(user_id), profile, ttl_seconds=self.ttl_seconds)
        return profile

    def require(self, user_id: UUID) -> Profile:
        """Return the user's profile or fail with ProfileMissing."""
        profile = self.get(user_id)
        if profile is None:
            raise ProfileMissing(f"No profile for user {user_id}")
        return profile

    def invalidate(self, user_id: UUID) -> None:
        """Drop the cached profile so the next read sees fresh biometrics."""
        if self.cache is not None:
            self.cache.delete(_cache_key(user_id))


def _cache_key(user_id: UUID) -> str:
    return f"profiles:{user_id}"


def local_today(profile: Profile, now: datetime | None = None) -> date:
    """Return the calendar date in the profile's timezone."""
    try:
        tz = ZoneInfo(profile.timezone)
    except (ZoneInfoNotFoundError, ValueError):
        tz = ZoneInfo("UTC")
    current = now or datetime.now(tz=UTC)
    return current.astimezone(tz).date()


def profile_from_row(row: dict[str, object]) -> Profile:
    """Build a Profile from a loosely typed storage row."""
    return Profile(
        user_id=UUID(str(row["id"])),
        age=int(_to_number(row.get("age"), 25)),
        weight_kg=_to_number(row.get("weight_kg", row.get("weight")), 70.0),
        height_cm=_to_number(row.get("height_cm", row.get("height")), 175.0),
        gender=parse_gender(row.get("gender")),
        goal=parse_goal(row.get("goal")),
        activity_level=parse_activity_level(row.get("activity_level")),
        experience_level=str(
            row.get("experience_level") or row.get("fitness_level") or "beginner"
        ),
        equipment=str(row.get("equipment") or "gym"),
        training_days_per_week=int(
            _to_number(
                row.get("training_days_per_week", row.get("training_days")), 4
            )
        ),
        dietary_preferences=_parse_tags(
            row.get("dietary_preferences", row.get("dietary_restrictions"))
        ),
        timezone=str(row.get("timezone") or "UTC"),
    )


def parse_goal(value: object) -> Goal:
    """Map a stored goal label onto the Goal enum, defaulting to health."""
    text = str(value or "").strip().lower()
    try:
        return Goal(text)
    except ValueError:
        return _GOAL_ALIASES.get(text, Goal.HEALTH)


def parse_gender(value: object) -> Gender:
    text = str(value or "").strip().lower()
    try:
        return Gender(text)
    except ValueError:
        return _GENDER_ALIASES.get(text, Gender.OTHER)


def parse_activity_level(value: object) -> ActivityLevel:
    text = str(value or "").strip().lower()
    try:
        return ActivityLevel(text)
    except ValueError:
        return _ACTIVITY_ALIASES.get(text, ActivityLevel.MODERATE)


def _to_number(value: object, default: float) -> float:
    if isinstance(value, int | float):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return default
    return default


def _parse_tags(value: object) -> frozenset[str]:
    if isinstance(value, list | tuple | set | frozenset):
        return frozenset(str(tag).strip() for tag in value if str(tag).strip())
    if isinstance(value, str):
        return frozenset(tag.strip() for tag in value.split(",") if tag.strip())
    return frozenset()
