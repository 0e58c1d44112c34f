"""Supabase repository for body measurements."""

import logging
from dataclasses import dataclass
from datetime import date
from uuid import UUID

from supabase import Client

from fitness_planner.domain.metrics import BodyMetric, MetricType
from fitness_planner.services.metrics import BodyMetricRepository

_METRIC_COLUMNS = "user_id, type, value, date"

_logger = logging.getLogger(__name__)


@dataclass
class SupabaseBodyMetricRepository(BodyMetricRepository):
    """Supabase implementation for the `body_metrics` table."""

    client: Client

    def add_metric(self, metric: BodyMetric) -> BodyMetric:
        """Insert a measurement row."""
        response = (
            self.client.table("body_metrics")
            .insert(
                {
                    "user_id": str(metric.user_id),
                    "type": metric.type.value,
                    "value": metric.value,
                    "date": metric.measured_on.isoformat(),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to insert body metric in Supabase")
        parsed = _parse_metric(response.data[0])
        if parsed is None:
            raise RuntimeError("Supabase returned an unreadable body metric row")
        return parsed

    def list_by_type(
        self, user_id: UUID, metric_type: MetricType, limit: int
    ) -> list[BodyMetric]:
        """Return measurements of one type, newest first."""
        response = (
            self.client.table("body_metrics")
            .select(_METRIC_COLUMNS)
            .eq("user_id", str(user_id))
            .eq("type", metric_type.value)
            .order("date", desc=True)
            .limit(limit)
            .execute()
        )
        return _parse_rows(response.data or [])

    def list_all(self, user_id: UUID) -> list[BodyMetric]:
        """Return every measurement, newest first."""
        response = (
            self.client.table("body_metrics")
            .select(_METRIC_COLUMNS)
            .eq("user_id", str(user_id))
            .order("date", desc=True)
            .execute()
        )
        return _parse_rows(response.data or [])


def _parse_rows(rows: list[dict[str, object]]) -> list[BodyMetric]:
    metrics = (_parse_metric(row) for row in rows)
    return [metric for metric in metrics if metric is not None]


def _parse_metric(row: dict[str, object]) -> BodyMetric | None:
    # Other screens share the table (fasting, hrv, ...); only body types are read.
    try:
        metric_type = MetricType(str(row.get("type")))
    except ValueError:
        _logger.debug("Skipping body_metrics row of type %r", row.get("type"))
        return None
    return BodyMetric(
        user_id=UUID(str(row["user_id"])),
        type=metric_type,
        value=float(row.get("value") or 0.0),
        measured_on=date.fromisoformat(str(row["date"])[:10]),
    )
