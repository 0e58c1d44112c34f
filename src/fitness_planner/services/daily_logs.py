"""Daily consumption/completion tracking with replace-the-day writes."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import UTC, date, datetime
from typing import Protocol
from uuid import UUID

from fitness_planner.domain.errors import ToggleSyncFailed
from fitness_planner.domain.logs import ConsumedItem, DailyLog, LogKind, PlanItem

_logger = logging.getLogger(__name__)


class DailyLogRepository(Protocol):
    """Persistence interface for daily logs keyed by (user, date)."""

    def get_log(self, user_id: UUID, log_date: date) -> DailyLog | None:
        """Return the log for a day, if one exists."""

    def upsert_log(self, log: DailyLog) -> DailyLog:
        """Replace the stored day with the given log and return it."""

    def list_logs(self, user_id: UUID, start: date, end: date) -> list[DailyLog]:
        """Return logs with start <= log_date < end."""


@dataclass(frozen=True)
class ToggleResult:
    """Outcome of a toggle; `previous` is the rollback snapshot."""

    previous: DailyLog | None
    log: DailyLog


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


def apply_toggle(
    log: DailyLog, label: str, item: PlanItem, now: datetime
) -> DailyLog:
    """Return the log with the (label, name) item flipped and totals recomputed."""
    key = (label, item.name)
    if any(existing.key == key for existing in log.items):
        items = [existing for existing in log.items if existing.key != key]
    else:
        items = [
            *log.items,
            ConsumedItem(
                name=item.name,
                label=label,
                calories=item.calories,
                protein=item.protein,
                recorded_at=now,
            ),
        ]
    return with_totals(replace(log, items=items))


def with_totals(log: DailyLog) -> DailyLog:
    """Recompute totals from the item list."""
    return replace(
        log,
        total_calories=sum(item.calories for item in log.items),
        total_protein=sum(item.protein for item in log.items),
    )


@dataclass
class DailyLogService:
    """Tracks which plan items a user marked done on a given day."""

    repository: DailyLogRepository
    kind: LogKind
    clock: Callable[[], datetime] = _utcnow

    def get(self, user_id: UUID, log_date: date) -> DailyLog | None:
        """Return the log for a day, if any."""
        return self.repository.get_log(user_id, log_date)

    def get_or_empty(self, user_id: UUID, log_date: date) -> DailyLog:
        """Return the log for a day, or an empty one that is not persisted."""
        return self.get(user_id, log_date) or DailyLog(
            user_id=user_id, log_date=log_date
        )

    def toggle(
        self, user_id: UUID, log_date: date, label: str, item: PlanItem
    ) -> ToggleResult:
        """Flip an item's membership for the day and persist the whole day."""
        try:
            previous = self.repository.get_log(user_id, log_date)
        except Exception as exc:
            _logger.warning(
                "Failed to read %s log for user %s on %s: %s",
                self.kind.value,
                user_id,
                log_date,
                exc,
            )
            raise ToggleSyncFailed(
                f"Could not read {self.kind.value} log for {log_date}", None
            ) from exc
        base = previous or DailyLog(user_id=user_id, log_date=log_date)
        updated = apply_toggle(base, label, item, self.clock())
        try:
            saved = self.repository.upsert_log(updated)
        except Exception as exc:
            _logger.warning(
                "Failed to sync %s log for user %s on %s: %s",
                self.kind.value,
                user_id,
                log_date,
                exc,
            )
            raise ToggleSyncFailed(
                f"Could not save {self.kind.value} log for {log_date}", previous
            ) from exc
        return ToggleResult(previous=previous, log=saved)

    def list_range(self, user_id: UUID, start: date, end: date) -> list[DailyLog]:
        """Return logs in [start, end)."""
        return self.repository.list_logs(user_id, start, end)
