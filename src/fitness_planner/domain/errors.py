"""Error taxonomy for plan generation and log syncing."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fitness_planner.domain.logs import DailyLog


class PlanError(Exception):
    """Base class for user-facing planner failures."""

    code = "PLAN_ERROR"
    user_message = "Something went wrong. Please try again."
    action = "retry"


class ProfileMissing(PlanError):
    """Raised when generation is requested without a profile."""

    code = "PROFILE_MISSING"
    user_message = "Complete your profile before generating a plan."
    action = "complete_profile"


class CompletionServiceUnavailable(PlanError):
    """Raised when the completion service cannot be reached or fails."""

    code = "COMPLETION_UNAVAILABLE"
    user_message = "The coach is unreachable right now. Please try again."


class QuotaExceeded(PlanError):
    """Raised when the completion service reports an exhausted quota."""

    code = "QUOTA_EXCEEDED"
    user_message = "You've reached your AI generation limit. Upgrade to keep going."
    action = "upgrade"


class InvalidPlanFormat(PlanError):
    """Raised when completion output does not describe a usable plan."""

    code = "INVALID_PLAN_FORMAT"
    user_message = "The coach returned an unusable plan. Please try again."


class MalformedJSON(InvalidPlanFormat):
    """Raised when completion output is not a JSON object."""

    code = "MALFORMED_JSON"
    user_message = "The coach's answer could not be read. Please try again."


class StoreWriteFailed(PlanError):
    """Raised when a validated plan could not be persisted."""

    code = "STORE_WRITE_FAILED"
    user_message = (
        "Your plan was generated but could not be saved. Please generate it again."
    )


class SessionSaveFailed(StoreWriteFailed):
    """Raised when a finished workout session could not be persisted."""

    code = "SESSION_SAVE_FAILED"
    user_message = "Your workout could not be saved. Please try again."


class MetricSaveFailed(StoreWriteFailed):
    """Raised when a body measurement could not be persisted."""

    code = "METRIC_SAVE_FAILED"
    user_message = "Your measurement could not be saved. Please try again."


class ToggleSyncFailed(PlanError):
    """Raised when a daily log toggle could not be persisted."""

    code = "TOGGLE_SYNC_FAILED"
    user_message = "Couldn't sync your log. Your last change was undone."

    def __init__(self, message: str, previous: "DailyLog | None") -> None:
        super().__init__(message)
        self.previous = previous
