"""Tests for daily log toggling."""

import json
from datetime import UTC, date, datetime

import pytest

from fitness_planner.domain.errors import ToggleSyncFailed
from fitness_planner.domain.logs import DailyLog, LogKind, PlanItem
from fitness_planner.domain.plans import Meal, NutritionPlanContent, PlanCategory
from fitness_planner.services.daily_logs import DailyLogService, apply_toggle
from fitness_planner.services.validation import validate
from tests.conftest import FIXED_NOW, USER_ID, InMemoryDailyLogRepository

DAY = date(2024, 3, 4)


def _service(repository: InMemoryDailyLogRepository) -> DailyLogService:
    return DailyLogService(repository, LogKind.NUTRITION, clock=lambda: FIXED_NOW)


def test_toggle_adds_then_removes_item() -> None:
    repository = InMemoryDailyLogRepository()
    service = _service(repository)
    oats = PlanItem(name="Oats", calories=400, protein=15)

    added = service.toggle(USER_ID, DAY, "Breakfast", oats)
    assert added.previous is None
    assert [item.key for item in added.log.items] == [("Breakfast", "Oats")]
    assert added.log.total_calories == 400
    assert added.log.items[0].recorded_at == FIXED_NOW

    removed = service.toggle(USER_ID, DAY, "Breakfast", oats)
    assert removed.previous == added.log
    assert removed.log.items == []
    assert removed.log.total_calories == 0
    assert removed.log.total_protein == 0
    assert repository.writes == 2


def test_same_name_under_different_labels_are_distinct() -> None:
    service = _service(InMemoryDailyLogRepository())
    eggs = PlanItem(name="Eggs", calories=150, protein=12)

    service.toggle(USER_ID, DAY, "Breakfast", eggs)
    result = service.toggle(USER_ID, DAY, "Dinner", eggs)

    assert len(result.log.items) == 2
    assert result.log.total_calories == 300
    assert result.log.total_protein == 24


def test_totals_are_recomputed_from_items() -> None:
    stale = DailyLog(
        user_id=USER_ID, log_date=DAY, items=[], total_calories=999, total_protein=99
    )

    updated = apply_toggle(stale, "Lunch", PlanItem("Rice", 300, 6), FIXED_NOW)

    assert updated.total_calories == 300
    assert updated.total_protein == 6


def test_toggle_failure_carries_rollback_snapshot() -> None:
    repository = InMemoryDailyLogRepository()
    service = _service(repository)
    first = service.toggle(USER_ID, DAY, "Breakfast", PlanItem("Oats", 400, 15))
    repository.fail_writes = True

    with pytest.raises(ToggleSyncFailed) as exc_info:
        service.toggle(USER_ID, DAY, "Lunch", PlanItem("Rice", 300, 6))

    assert exc_info.value.previous == first.log
    assert repository.get_log(USER_ID, DAY) == first.log
    assert isinstance(exc_info.value.__cause__, RuntimeError)


def test_toggle_failure_on_empty_day_has_no_snapshot() -> None:
    repository = InMemoryDailyLogRepository(fail_writes=True)

    with pytest.raises(ToggleSyncFailed) as exc_info:
        _service(repository).toggle(USER_ID, DAY, "Lunch", PlanItem("Rice"))

    assert exc_info.value.previous is None


def test_get_or_empty_returns_default_day() -> None:
    service = _service(InMemoryDailyLogRepository())

    log = service.get_or_empty(USER_ID, DAY)

    assert log.items == []
    assert log.total_calories == 0
    assert service.get(USER_ID, DAY) is None


def test_list_range_is_end_exclusive() -> None:
    repository = InMemoryDailyLogRepository()
    service = DailyLogService(
        repository, LogKind.WORKOUT, clock=lambda: datetime(2024, 3, 4, tzinfo=UTC)
    )
    for day in (date(2024, 3, 1), date(2024, 3, 3), date(2024, 3, 5)):
        service.toggle(USER_ID, day, "Day 1", PlanItem("Squat"))

    logs = service.list_range(USER_ID, date(2024, 3, 1), date(2024, 3, 5))

    assert [log.log_date for log in logs] == [date(2024, 3, 1), date(2024, 3, 3)]


def test_toggle_failure_when_day_cannot_be_read() -> None:
    repository = InMemoryDailyLogRepository(fail_reads=True)

    with pytest.raises(ToggleSyncFailed) as exc_info:
        _service(repository).toggle(USER_ID, DAY, "Lunch", PlanItem("Rice"))

    assert exc_info.value.previous is None
    assert isinstance(exc_info.value.__cause__, RuntimeError)
    assert repository.writes == 0


def _validated_meals(payload: dict[str, object]) -> list[Meal]:
    content = validate(json.dumps(payload), PlanCategory.NUTRITION)
    assert isinstance(content, NutritionPlanContent)
    return content.days[0].meals


def test_toggle_items_taken_from_both_meal_shapes() -> None:
    nested = _validated_meals(
        {
            "days": [
                {
                    "day": "Monday",
                    "meals": [
                        {
                            "name": "Breakfast",
                            "items": [
                                {"name": "Oats", "calories": "400 kcal", "protein": 15},
                                {"name": "Banana", "calories": 100, "protein": "1g"},
                            ],
                        }
                    ],
                }
            ]
        }
    )
    flat = _validated_meals(
        {
            "days": [
                {
                    "day": "Monday",
                    "meals": [
                        {
                            "type": "Dinner",
                            "name": "Salmon and rice",
                            "calories": 650,
                            "macros": "40P/70G/20L",
                        }
                    ],
                }
            ]
        }
    )
    service = _service(InMemoryDailyLogRepository())

    for meal in [nested[0], flat[0]]:
        result = service.toggle(
            USER_ID,
            DAY,
            meal.type,
            PlanItem(name=meal.name, calories=meal.calories, protein=meal.protein),
        )

    assert [item.key for item in result.log.items] == [
        ("Breakfast", "Oats"),
        ("Dinner", "Salmon and rice"),
    ]
    assert result.log.total_calories == 1050
    assert result.log.total_protein == 55

    undone = service.toggle(
        USER_ID, DAY, nested[0].type, PlanItem(nested[0].name, nested[0].calories)
    )

    assert [item.key for item in undone.log.items] == [("Dinner", "Salmon and rice")]
    assert undone.log.total_calories == 650
    assert undone.log.total_protein == 40
