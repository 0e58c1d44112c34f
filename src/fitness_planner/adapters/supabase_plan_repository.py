"""Supabase repository for generated plans."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from fitness_planner.domain.errors import InvalidPlanFormat
from fitness_planner.domain.plans import Plan, PlanCategory, PlanContent
from fitness_planner.services.plans import PlanRepository
from fitness_planner.services.validation import content_from_storage

_PLAN_COLUMNS = "id, user_id, type, title, content, is_active, created_at"

_logger = logging.getLogger(__name__)


@dataclass
class SupabasePlanRepository(PlanRepository):
    """Supabase implementation for the `plans` table."""

    client: Client

    def deactivate_all(self, user_id: UUID, category: PlanCategory) -> None:
        """Mark all of the user's plans of a category inactive."""
        self.client.table("plans").update({"is_active": False}).eq(
            "user_id", str(user_id)
        ).eq("type", category.value).eq("is_active", True).execute()

    def insert_active(
        self,
        user_id: UUID,
        category: PlanCategory,
        title: str,
        content: PlanContent,
    ) -> Plan:
        """Insert a new active plan row and return it."""
        response = (
            self.client.table("plans")
            .insert(
                {
                    "user_id": str(user_id),
                    "type": category.value,
                    "title": title,
                    "content": content.model_dump(mode="json"),
                    "is_active": True,
                    "created_at": datetime.now(tz=UTC).isoformat(),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to insert plan in Supabase")
        return _parse_plan(response.data[0])

    def get_active(self, user_id: UUID, category: PlanCategory) -> Plan | None:
        """Return the newest active plan for the category."""
        response = (
            self.client.table("plans")
            .select(_PLAN_COLUMNS)
            .eq("user_id", str(user_id))
            .eq("type", category.value)
            .eq("is_active", True)
            .order("created_at", desc=True)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_stored_plan(response.data[0])

    def list_plans(
        self, user_id: UUID, category: PlanCategory, limit: int
    ) -> list[Plan]:
        """Return the user's plans of a category, newest first."""
        response = (
            self.client.table("plans")
            .select(_PLAN_COLUMNS)
            .eq("user_id", str(user_id))
            .eq("type", category.value)
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        plans = (_parse_stored_plan(row) for row in response.data or [])
        return [plan for plan in plans if plan is not None]


def _parse_stored_plan(row: dict[str, object]) -> Plan | None:
    """Parse a stored row, or None when it no longer describes a usable plan."""
    try:
        return _parse_plan(row)
    except (InvalidPlanFormat, ValueError, KeyError) as exc:
        _logger.warning("Skipping unreadable plan row %s: %s", row.get("id"), exc)
        return None


def _parse_plan(row: dict[str, object]) -> Plan:
    category = _parse_category(row.get("type"))
    stored = row.get("content") or {}
    if not isinstance(stored, dict):
        raise InvalidPlanFormat(f"Plan {row.get('id')} content is not an object")
    content = content_from_storage(stored, category)
    created_raw = row.get("created_at")
    created_at = (
        datetime.fromisoformat(created_raw)
        if isinstance(created_raw, str) and created_raw
        else datetime.min.replace(tzinfo=UTC)
    )
    return Plan(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        category=category,
        title=str(row.get("title") or content.title),
        content=content,
        is_active=bool(row.get("is_active", False)),
        created_at=created_at,
    )


def _parse_category(value: object) -> PlanCategory:
    # Older rows used "meal" for nutrition plans.
    if value == "meal":
        return PlanCategory.NUTRITION
    return PlanCategory(str(value))
