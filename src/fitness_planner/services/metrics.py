"""Body measurement tracking."""

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, date, datetime
from typing import Protocol
from uuid import UUID

from fitness_planner.domain.errors import MetricSaveFailed
from fitness_planner.domain.metrics import BodyMetric, MetricType
from fitness_planner.services.profiles import ProfileService, local_today

HISTORY_LIMIT = 10

_logger = logging.getLogger(__name__)


class BodyMetricRepository(Protocol):
    """Persistence interface for body measurements."""

    def add_metric(self, metric: BodyMetric) -> BodyMetric:
        """Append a measurement and return it."""

    def list_by_type(
        self, user_id: UUID, metric_type: MetricType, limit: int
    ) -> list[BodyMetric]:
        """Return measurements of one type, newest first."""

    def list_all(self, user_id: UUID) -> list[BodyMetric]:
        """Return every measurement, newest first."""


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


def latest_values(metrics: list[BodyMetric]) -> dict[MetricType, float]:
    """Return the most recent value per type; the first of equal dates wins."""
    latest: dict[MetricType, BodyMetric] = {}
    for metric in metrics:
        current = latest.get(metric.type)
        if current is None or metric.measured_on > current.measured_on:
            latest[metric.type] = metric
    return {metric_type: metric.value for metric_type, metric in latest.items()}


@dataclass
class BodyMetricService:
    """Records measurements and serves history and the latest snapshot."""

    repository: BodyMetricRepository
    profile_service: ProfileService
    clock: Callable[[], datetime] = _utcnow

    def add_metric(
        self,
        user_id: UUID,
        metric_type: MetricType,
        value: float,
        measured_on: date | None = None,
    ) -> BodyMetric:
        """Record a measurement, dated today in the user's timezone by default."""
        if not math.isfinite(value) or value <= 0:
            raise ValueError(f"Invalid {metric_type.value} value: {value}")
        metric = BodyMetric(
            user_id=user_id,
            type=metric_type,
            value=value,
            measured_on=measured_on or self._today(user_id),
        )
        try:
            saved = self.repository.add_metric(metric)
        except Exception as exc:
            _logger.warning(
                "Failed to save %s metric for user %s: %s",
                metric_type.value,
                user_id,
                exc,
            )
            raise MetricSaveFailed(f"Could not save {metric_type.value}") from exc
        if metric_type is MetricType.WEIGHT:
            self.profile_service.invalidate(user_id)
        return saved

    def history(self, user_id: UUID, metric_type: MetricType) -> list[BodyMetric]:
        """Return the latest measurements of one type, newest first."""
        return self.repository.list_by_type(user_id, metric_type, HISTORY_LIMIT)

    def latest(self, user_id: UUID) -> dict[MetricType, float]:
        """Return the last known value of every measured type."""
        return latest_values(self.repository.list_all(user_id))

    def _today(self, user_id: UUID) -> date:
        profile = self.profile_service.get(user_id)
        if profile is None:
            return self.clock().astimezone(UTC).date()
        return local_today(profile, self.clock())
