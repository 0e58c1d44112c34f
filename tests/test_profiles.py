"""Tests for profile parsing and energy targets."""

from datetime import UTC, date, datetime
from uuid import uuid4

import pytest

from fitness_planner.domain.errors import ProfileMissing
from fitness_planner.domain.profiles import ActivityLevel, Gender, Goal
from fitness_planner.services.energy import daily_calorie_target, mifflin_st_jeor_bmr
from fitness_planner.services.profiles import (
    ProfileService,
    local_today,
    profile_from_row,
)
from tests.conftest import USER_ID, InMemoryProfileRepository, make_profile


def test_profile_from_row_maps_onboarding_labels() -> None:
    user_id = uuid4()
    profile = profile_from_row(
        {
            "id": str(user_id),
            "age": "34",
            "weight": 72.5,
            "height": "168",
            "gender": "Femme",
            "goal": "Perte de poids",
            "activity_level": "sédentaire",
            "fitness_level": "intermediate",
            "training_days": 3,
            "dietary_restrictions": "vegetarian, no nuts",
            "timezone": "Europe/Paris",
        }
    )

    assert profile.user_id == user_id
    assert profile.age == 34
    assert profile.weight_kg == 72.5
    assert profile.height_cm == 168
    assert profile.gender is Gender.FEMALE
    assert profile.goal is Goal.WEIGHT_LOSS
    assert profile.activity_level is ActivityLevel.SEDENTARY
    assert profile.experience_level == "intermediate"
    assert profile.training_days_per_week == 3
    assert profile.dietary_preferences == frozenset({"vegetarian", "no nuts"})
    assert profile.timezone == "Europe/Paris"


def test_profile_from_row_defaults_unknown_values() -> None:
    profile = profile_from_row({"id": str(uuid4()), "goal": "be happy"})

    assert profile.goal is Goal.HEALTH
    assert profile.gender is Gender.OTHER
    assert profile.activity_level is ActivityLevel.MODERATE
    assert profile.weight_kg == 70
    assert profile.timezone == "UTC"


def test_require_raises_when_missing() -> None:
    service = ProfileService(InMemoryProfileRepository())

    assert service.get(USER_ID) is None
    with pytest.raises(ProfileMissing):
        service.require(USER_ID)


def test_mifflin_st_jeor() -> None:
    assert mifflin_st_jeor_bmr(make_profile()) == pytest.approx(1780)
    female = make_profile(
        gender=Gender.FEMALE, age=40, weight_kg=60.0, height_cm=165.0
    )
    assert mifflin_st_jeor_bmr(female) == pytest.approx(1270.25)


def test_daily_calorie_target_adjusts_for_goal() -> None:
    assert daily_calorie_target(make_profile()) == 3159
    assert daily_calorie_target(make_profile(goal=Goal.HEALTH)) == 2759
    cutting = make_profile(
        gender=Gender.FEMALE,
        age=40,
        weight_kg=60.0,
        height_cm=165.0,
        goal=Goal.WEIGHT_LOSS,
        activity_level=ActivityLevel.SEDENTARY,
    )
    assert daily_calorie_target(cutting) == 1124


def test_local_today_uses_profile_timezone() -> None:
    now = datetime(2024, 3, 4, 23, 30, tzinfo=UTC)

    assert local_today(make_profile(), now) == date(2024, 3, 4)
    assert local_today(make_profile(timezone="Asia/Tokyo"), now) == date(2024, 3, 5)
    assert local_today(make_profile(timezone="Not/AZone"), now) == date(2024, 3, 4)
