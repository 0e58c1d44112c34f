"""Completion service contract and prompt construction."""

import json
from dataclasses import dataclass
from typing import Literal, Protocol

CompletionType = Literal["WORKOUT", "MEAL", "CHAT"]

WORKOUT_SCHEMA = (
    '{ "title": string, "days": [{ "day": string, "focus": string, '
    '"exercises": [{ "name": string, "sets": string, "reps": string, '
    '"rest": number, "notes": string }] }] }'
)

MEAL_SCHEMA = (
    '{ "title": string, "target_calories": number, "days": [{ "day": string, '
    '"total_calories": number, "meals": [{ "type": string, "name": string, '
    '"calories": number, "protein": number, "ingredients": [string], '
    '"prep": string }] }] }'
)

CHAT_SCHEMA = '{ "response": string }'


@dataclass(frozen=True)
class CompletionRequest:
    """Structured prompt sent to the completion service."""

    type: CompletionType
    profile: dict[str, object]
    preferences: str
    calorie_target: int | None = None
    message: str | None = None

    def system_prompt(self) -> str:
        """Render the system prompt for this request."""
        if self.type == "WORKOUT":
            return build_workout_prompt(self.profile, self.preferences)
        if self.type == "MEAL":
            return build_meal_prompt(
                self.profile, self.preferences, self.calorie_target
            )
        return build_chat_prompt(self.profile)

    def user_prompt(self) -> str:
        """Render the user turn for this request."""
        if self.type == "CHAT" and self.message:
            return self.message
        return "Generate the complete JSON now."


class CompletionClient(Protocol):
    """Interface for the LLM-backed completion service."""

    async def complete(self, request: CompletionRequest) -> str:
        """Return raw model output text, or an `{"error": ...}` document."""


def build_workout_prompt(profile: dict[str, object], preferences: str) -> str:
    """Build the instruction payload for a workout plan."""
    days = profile.get("training_days_per_week") or 4
    return (
        "You are an expert strength and conditioning coach. "
        f"Create a training program with exactly {days} sessions for this profile: "
        f"{json.dumps(profile, ensure_ascii=False)}. "
        f"Focus: {preferences}. "
        f"Answer ONLY with strict JSON matching: {WORKOUT_SCHEMA}. "
        "Rest is in seconds."
    )


def build_meal_prompt(
    profile: dict[str, object], preferences: str, calorie_target: int | None
) -> str:
    """Build the instruction payload for a 7-day meal plan."""
    target = (
        f"Aim for about {calorie_target} kcal per day. " if calorie_target else ""
    )
    return (
        "You are an expert nutritionist focused on affordable, healthy food. "
        "Create a meal plan for 7 days (Monday to Sunday) for this profile: "
        f"{json.dumps(profile, ensure_ascii=False)}. "
        f"Preferences: {preferences}. "
        f"{target}"
        "Prefer cheap staples (rice, lentils, chicken, seasonal vegetables). "
        f"Answer ONLY with strict JSON matching: {MEAL_SCHEMA}. "
        "Calories and protein are plain numbers."
    )


def build_chat_prompt(profile: dict[str, object]) -> str:
    """Build the system prompt for the coach chat."""
    return (
        'You are "NeuroCoach", a fitness and mindset coach. '
        "Be empathetic, motivating, smart and concise. "
        f"User profile: {json.dumps(profile, ensure_ascii=False)}. "
        f"Always answer in JSON matching: {CHAT_SCHEMA}."
    )
