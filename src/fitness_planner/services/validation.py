"""Parse and normalize untrusted completion output into plan content.

Structure is strict: a plan without days, a day without its item list, or an
item without a name is rejected. Leaf values are lenient: numbers are read
from whatever text the model produced and default instead of failing.
"""

import json
import logging
import math
import re

from pydantic import ValidationError

from fitness_planner.domain.errors import (
    CompletionServiceUnavailable,
    InvalidPlanFormat,
    MalformedJSON,
    QuotaExceeded,
)
from fitness_planner.domain.plans import (
    Exercise,
    Meal,
    NutritionDay,
    NutritionPlanContent,
    PlanCategory,
    PlanContent,
    WorkoutDay,
    WorkoutPlanContent,
)

QUOTA_EXCEEDED = "QUOTA_EXCEEDED"
DEFAULT_REST_SECONDS = 60.0

_FENCE_START = re.compile(r"^```[A-Za-z0-9_+-]*[ \t]*\r?\n?")
_FENCE_END = re.compile(r"\r?\n?```$")
_THOUSANDS = re.compile(r"(?<=\d),(?=\d{3}\b)")
_NUMBER = re.compile(r"\d+(?:[.,]\d+)?")
_PROTEIN_IN_MACROS = re.compile(r"(\d+(?:[.,]\d+)?)\s*(?:g\s*)?[pP]")

_logger = logging.getLogger(__name__)


def strip_code_fences(text: str) -> str:
    """Remove a Markdown code fence wrapped around the text."""
    cleaned = text.strip()
    cleaned = _FENCE_START.sub("", cleaned, count=1)
    cleaned = _FENCE_END.sub("", cleaned, count=1)
    return cleaned.strip()


def parse_completion(raw: str) -> dict[str, object]:
    """Parse completion text into a JSON object, surfacing service errors."""
    text = strip_code_fences(raw or "")
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedJSON(f"Completion output is not valid JSON: {exc.msg}") from exc
    except ValueError as exc:
        # Integer literals past the interpreter digit limit.
        raise MalformedJSON(f"Completion output is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise MalformedJSON("Completion output is not a JSON object")
    raise_for_service_error(payload)
    return payload


def raise_for_service_error(payload: dict[str, object]) -> None:
    """Raise when the payload is an `{"error": ...}` document."""
    error = payload.get("error")
    if not error:
        return
    if isinstance(error, dict):
        detail = str(error.get("code") or error.get("message") or error)
    else:
        detail = str(error)
    if QUOTA_EXCEEDED in detail.upper():
        raise QuotaExceeded(detail)
    raise CompletionServiceUnavailable(f"Completion service error: {detail}")


def validate(raw: str, category: PlanCategory) -> PlanContent:
    """Turn raw completion text into normalized plan content."""
    payload = parse_completion(raw)
    try:
        if category is PlanCategory.WORKOUT:
            return _normalize_workout(payload)
        return _normalize_nutrition(payload)
    except ValidationError as exc:
        raise InvalidPlanFormat(f"Plan failed schema checks: {exc}") from exc


def content_from_storage(
    payload: dict[str, object], category: PlanCategory
) -> PlanContent:
    """Rebuild plan content from a stored JSON document."""
    try:
        if category is PlanCategory.WORKOUT:
            return _normalize_workout(payload)
        return _normalize_nutrition(payload)
    except ValidationError as exc:
        raise InvalidPlanFormat(f"Stored plan failed schema checks: {exc}") from exc


def coerce_number(value: object, default: float = 0.0) -> float:
    """Read the first number in a loosely formatted value."""
    parsed = _first_number(value)
    return default if parsed is None else parsed


def _normalize_workout(payload: dict[str, object]) -> WorkoutPlanContent:
    days = _require_list(payload, "days", "plan", allow_empty=False)
    normalized: list[WorkoutDay] = []
    for index, day in enumerate(days, start=1):
        if not isinstance(day, dict):
            raise InvalidPlanFormat(f"Day {index} is not an object")
        exercises = _require_list(day, "exercises", f"day {index}", allow_empty=False)
        normalized.append(
            WorkoutDay(
                day_label=_day_label(day, index),
                focus=_text(day.get("focus")),
                exercises=[
                    _normalize_exercise(exercise, index, position)
                    for position, exercise in enumerate(exercises, start=1)
                ],
            )
        )
    return WorkoutPlanContent(
        title=_text(payload.get("title")) or "Workout plan",
        days=normalized,
    )


def _normalize_exercise(exercise: object, day: int, position: int) -> Exercise:
    if not isinstance(exercise, dict):
        raise InvalidPlanFormat(f"Exercise {position} of day {day} is not an object")
    name = _text(exercise.get("name"))
    if not name:
        raise InvalidPlanFormat(f"Exercise {position} of day {day} has no name")
    return Exercise(
        name=name,
        sets=_count_text(exercise.get("sets"), "3"),
        reps=_count_text(exercise.get("reps"), "10"),
        rest_seconds=_rest_seconds(exercise.get("rest_seconds", exercise.get("rest"))),
        notes=_text(exercise.get("notes")) or None,
    )


def _normalize_nutrition(payload: dict[str, object]) -> NutritionPlanContent:
    days = _require_list(payload, "days", "plan", allow_empty=False)
    normalized: list[NutritionDay] = []
    for index, day in enumerate(days, start=1):
        if not isinstance(day, dict):
            raise InvalidPlanFormat(f"Day {index} is not an object")
        meals = _require_list(day, "meals", f"day {index}", allow_empty=True)
        normalized.append(
            NutritionDay(
                day_label=_day_label(day, index),
                total_calories=_first_number(day.get("total_calories")),
                meals=_flatten_meals(meals, index),
            )
        )
    return NutritionPlanContent(
        title=_text(payload.get("title")) or "7-day meal plan",
        target_calories=_first_number(payload.get("target_calories")),
        days=normalized,
    )


def _flatten_meals(meals: list[object], day: int) -> list[Meal]:
    """Normalize flat and grouped meal shapes into one flat list."""
    flattened: list[Meal] = []
    for position, meal in enumerate(meals, start=1):
        if not isinstance(meal, dict):
            raise InvalidPlanFormat(f"Meal {position} of day {day} is not an object")
        if "items" in meal:
            items = meal["items"]
            if not isinstance(items, list):
                raise InvalidPlanFormat(
                    f"Meal {position} of day {day} has an invalid items list"
                )
            slot = _text(meal.get("name")) or _text(meal.get("type"))
            for item in items:
                flattened.append(
                    _normalize_meal_item(item, slot or f"Meal {position}", day)
                )
            continue
        flattened.append(_normalize_meal_item(meal, None, day, position))
    return flattened


def _normalize_meal_item(
    item: object, slot: str | None, day: int, position: int = 0
) -> Meal:
    if isinstance(item, str) and item.strip() and slot:
        return Meal(type=slot, name=item.strip())
    if not isinstance(item, dict):
        raise InvalidPlanFormat(f"Meal item on day {day} is not an object")
    name = _text(item.get("name"))
    meal_type = slot or _text(item.get("type"))
    if not name and not meal_type:
        raise InvalidPlanFormat(f"Meal on day {day} has neither items nor a name")
    return Meal(
        type=meal_type or f"Meal {position}",
        name=name or meal_type,
        calories=coerce_number(item.get("calories")),
        protein=_protein(item),
        ingredients=_ingredients(item.get("ingredients")),
        prep=_text(item.get("prep")) or None,
    )


def _protein(item: dict[str, object]) -> float:
    value = item.get("protein", item.get("protein_g"))
    if value is not None:
        return coerce_number(value)
    macros = item.get("macros")
    if isinstance(macros, str):
        match = _PROTEIN_IN_MACROS.search(macros)
        if match:
            return _finite(match.group(1).replace(",", ".")) or 0.0
    return 0.0


def _ingredients(value: object) -> list[str]:
    if isinstance(value, list):
        return [str(entry).strip() for entry in value if str(entry).strip()]
    if isinstance(value, str):
        return [part.strip() for part in re.split(r"[,\n]", value) if part.strip()]
    return []


def _require_list(
    container: dict[str, object], key: str, where: str, *, allow_empty: bool
) -> list[object]:
    value = container.get(key)
    if not isinstance(value, list):
        raise InvalidPlanFormat(f"The {where} has no '{key}' list")
    if not value and not allow_empty:
        raise InvalidPlanFormat(f"The {where} has an empty '{key}' list")
    return value


def _day_label(day: dict[str, object], index: int) -> str:
    return (
        _text(day.get("day_label"))
        or _text(day.get("day"))
        or _text(day.get("name"))
        or f"Day {index}"
    )


def _first_number(value: object) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        return _finite(value)
    if isinstance(value, str):
        match = _NUMBER.search(_THOUSANDS.sub("", value))
        if match:
            return _finite(match.group(0).replace(",", "."))
    return None


def _finite(value: int | float | str) -> float | None:
    """Convert to float, or None for NaN, infinities and overflowing integers."""
    try:
        number = float(value)
    except OverflowError:
        return None
    return number if math.isfinite(number) else None


def _rest_seconds(value: object) -> float:
    seconds = _first_number(value)
    if seconds is None:
        if value is not None:
            _logger.debug("Unparseable rest value %r, using default", value)
        return DEFAULT_REST_SECONDS
    if isinstance(value, str) and "min" in value.lower():
        minutes = _finite(seconds * 60)
        return DEFAULT_REST_SECONDS if minutes is None else minutes
    return seconds


def _count_text(value: object, default: str) -> str:
    if isinstance(value, bool):
        return default
    if isinstance(value, int | float):
        number = _finite(value)
        if number is None:
            return default
        return str(int(number)) if number.is_integer() else str(number)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default


def _text(value: object) -> str:
    if value is None or isinstance(value, dict | list):
        return ""
    return str(value).strip()
