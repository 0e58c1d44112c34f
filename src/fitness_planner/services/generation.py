"""Plan generation orchestrator."""

import logging
from dataclasses import dataclass
from uuid import UUID

from fitness_planner.domain.errors import PlanError, ProfileMissing, StoreWriteFailed
from fitness_planner.domain.plans import Plan, PlanCategory
from fitness_planner.domain.profiles import Goal, Profile
from fitness_planner.services.completion import CompletionClient, CompletionRequest
from fitness_planner.services.energy import daily_calorie_target
from fitness_planner.services.plans import PlanRepository, PlanService
from fitness_planner.services.profiles import ProfileService
from fitness_planner.services.validation import validate

_GOAL_CONTEXT = {
    Goal.WEIGHT_LOSS: "Goal: weight loss",
    Goal.MUSCLE_GAIN: "Goal: muscle gain",
    Goal.ENDURANCE: "Goal: endurance",
    Goal.STRENGTH: "Goal: strength",
    Goal.HEALTH: "Goal: general health",
}

_logger = logging.getLogger(__name__)


@dataclass
class PlanGenerationService:
    """Generates, validates and activates plans.

    One completion call per invocation, no retries. Nothing is written unless
    validation passes. Activation deactivates the previous plans first and
    inserts the new one only after that has resolved.
    """

    completion_client: CompletionClient
    repository: PlanRepository
    plan_service: PlanService
    profile_service: ProfileService

    async def generate_for_user(
        self, user_id: UUID, preferences: str, category: PlanCategory
    ) -> Plan:
        """Load the user's profile and generate a plan for it."""
        profile = self.profile_service.require(user_id)
        return await self.generate(profile, preferences, category)

    async def generate(
        self, profile: Profile | None, preferences: str, category: PlanCategory
    ) -> Plan:
        """Generate a plan and make it the only active one of its category."""
        if profile is None:
            raise ProfileMissing("A profile is required to generate a plan")

        request = build_request(profile, preferences, category)
        _logger.info(
            "Generating %s plan for user %s", category.value, profile.user_id
        )
        try:
            raw = await self.completion_client.complete(request)
            content = validate(raw, category)
        except PlanError as exc:
            _logger.warning(
                "%s plan generation failed for user %s: %s (%s)",
                category.value,
                profile.user_id,
                exc.code,
                exc,
            )
            raise

        try:
            self.repository.deactivate_all(profile.user_id, category)
            plan = self.repository.insert_active(
                profile.user_id, category, content.title, content
            )
        except Exception as exc:
            _logger.exception(
                "Failed to persist %s plan for user %s",
                category.value,
                profile.user_id,
            )
            raise StoreWriteFailed(f"Could not save {category.value} plan") from exc
        finally:
            self.plan_service.invalidate(profile.user_id, category)

        _logger.info(
            "Activated %s plan %s with %s days",
            category.value,
            plan.id,
            len(content.days),
        )
        return plan


def build_request(
    profile: Profile, preferences: str, category: PlanCategory
) -> CompletionRequest:
    """Build the completion request for a plan category."""
    context = preferences.strip() or _GOAL_CONTEXT[profile.goal]
    calorie_target = (
        daily_calorie_target(profile) if category is PlanCategory.NUTRITION else None
    )
    return CompletionRequest(
        type=category.completion_type,
        profile=profile.to_prompt_dict(),
        preferences=context,
        calorie_target=calorie_target,
    )
