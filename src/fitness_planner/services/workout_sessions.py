"""Finished workout sessions stored on the workout log table."""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Protocol
from uuid import UUID

from fitness_planner.domain.errors import SessionSaveFailed
from fitness_planner.domain.logs import CompletedExercise, WorkoutSession

MAX_SESSIONS = 50

_logger = logging.getLogger(__name__)


class WorkoutSessionRepository(Protocol):
    """Persistence interface for workout session snapshots."""

    def save_session(self, session: WorkoutSession) -> WorkoutSession:
        """Store the session as the day's workout log and return it."""

    def list_sessions(self, user_id: UUID, limit: int) -> list[WorkoutSession]:
        """Return sessions newest first."""


@dataclass
class WorkoutSessionService:
    """Saves and lists what the user actually did in the gym."""

    repository: WorkoutSessionRepository

    def save_session(
        self,
        user_id: UUID,
        log_date: date,
        exercises: list[CompletedExercise],
        note: str = "",
        duration_seconds: int | None = None,
    ) -> WorkoutSession:
        """Persist a session snapshot, replacing the day's workout checklist."""
        if not exercises:
            raise ValueError("A workout session needs at least one exercise")
        if any(not exercise.name.strip() for exercise in exercises):
            raise ValueError("Every exercise needs a name")
        if duration_seconds is not None and duration_seconds < 0:
            raise ValueError("Duration cannot be negative")
        session = WorkoutSession(
            user_id=user_id,
            log_date=log_date,
            exercises=exercises,
            note=note.strip(),
            duration_seconds=duration_seconds,
        )
        try:
            saved = self.repository.save_session(session)
        except Exception as exc:
            _logger.warning(
                "Failed to save workout session for user %s on %s: %s",
                user_id,
                log_date,
                exc,
            )
            raise SessionSaveFailed(f"Could not save session for {log_date}") from exc
        _logger.info(
            "Saved workout session for user %s on %s with %d exercises",
            user_id,
            log_date,
            len(exercises),
        )
        return saved

    def list_sessions(self, user_id: UUID, limit: int = 20) -> list[WorkoutSession]:
        """Return the user's sessions, newest first."""
        return self.repository.list_sessions(user_id, max(1, min(limit, MAX_SESSIONS)))
