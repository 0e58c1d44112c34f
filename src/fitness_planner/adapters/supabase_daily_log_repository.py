"""Supabase repository for daily nutrition and workout logs."""

import logging
from dataclasses import dataclass
from datetime import UTC, date, datetime
from uuid import UUID

from supabase import Client

from fitness_planner.domain.logs import ConsumedItem, DailyLog
from fitness_planner.services.daily_logs import DailyLogRepository

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LogTable:
    """Where a log kind keeps its rows and how its item entries are keyed."""

    name: str
    items_column: str
    label_key: str = "label"
    recorded_key: str = "recorded_at"

    @property
    def columns(self) -> str:
        return (
            f"user_id, log_date, {self.items_column}, total_calories, total_protein"
        )


# Item keys follow what the mobile client writes to each table.
NUTRITION_LOGS = LogTable(
    "nutrition_logs", "meals_status", label_key="mealName", recorded_key="eatenAt"
)
WORKOUT_LOGS = LogTable("workout_logs", "exercises_status")


@dataclass
class SupabaseDailyLogRepository(DailyLogRepository):
    """Supabase implementation for one daily log table."""

    client: Client
    table: LogTable

    def get_log(self, user_id: UUID, log_date: date) -> DailyLog | None:
        """Return the log row for a day."""
        response = (
            self.client.table(self.table.name)
            .select(self.table.columns)
            .eq("user_id", str(user_id))
            .eq("log_date", log_date.isoformat())
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return self._parse_log(response.data[0])

    def upsert_log(self, log: DailyLog) -> DailyLog:
        """Write the full day, replacing any existing row."""
        response = (
            self.client.table(self.table.name)
            .upsert(
                {
                    "user_id": str(log.user_id),
                    "log_date": log.log_date.isoformat(),
                    self.table.items_column: [
                        self._dump_item(item) for item in log.items
                    ],
                    "total_calories": log.total_calories,
                    "total_protein": log.total_protein,
                    "updated_at": datetime.now(tz=UTC).isoformat(),
                },
                on_conflict="user_id,log_date",
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError(f"Failed to upsert {self.table.name} row")
        return self._parse_log(response.data[0])

    def list_logs(self, user_id: UUID, start: date, end: date) -> list[DailyLog]:
        """Return logs in [start, end) ordered by date."""
        response = (
            self.client.table(self.table.name)
            .select(self.table.columns)
            .eq("user_id", str(user_id))
            .gte("log_date", start.isoformat())
            .lt("log_date", end.isoformat())
            .order("log_date", desc=False)
            .execute()
        )
        return [self._parse_log(row) for row in response.data or []]

    def _dump_item(self, item: ConsumedItem) -> dict[str, object]:
        return {
            "name": item.name,
            self.table.label_key: item.label,
            "calories": item.calories,
            "protein": item.protein,
            self.table.recorded_key: item.recorded_at.isoformat(),
        }

    def _parse_log(self, row: dict[str, object]) -> DailyLog:
        entries = row.get(self.table.items_column)
        if not isinstance(entries, list):
            # The first workout screen stored a {"day_0_ex_1": true} map with
            # no exercise names, so nothing can be recovered from it.
            if entries:
                _logger.debug("Ignoring non-list %s value", self.table.items_column)
            entries = []
        return DailyLog(
            user_id=UUID(str(row["user_id"])),
            log_date=date.fromisoformat(str(row["log_date"])),
            items=[
                self._parse_item(entry) for entry in entries if isinstance(entry, dict)
            ],
            total_calories=float(row.get("total_calories") or 0.0),
            total_protein=float(row.get("total_protein") or 0.0),
        )

    def _parse_item(self, entry: dict[str, object]) -> ConsumedItem:
        recorded_raw = (
            entry.get(self.table.recorded_key)
            or entry.get("recorded_at")
            or entry.get("eatenAt")
        )
        return ConsumedItem(
            name=str(entry.get("name", "")),
            label=str(
                entry.get(self.table.label_key)
                or entry.get("label")
                or entry.get("mealName")
                or ""
            ),
            calories=float(entry.get("calories") or 0.0),
            protein=float(entry.get("protein") or 0.0),
            recorded_at=parse_timestamp(recorded_raw),
        )


def parse_timestamp(value: object) -> datetime:
    """Parse an ISO timestamp as written by PostgREST or the mobile client."""
    if not value:
        return datetime.min.replace(tzinfo=UTC)
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
