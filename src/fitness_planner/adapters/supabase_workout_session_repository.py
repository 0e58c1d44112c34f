"""Supabase repository for workout session snapshots."""

from dataclasses import dataclass
from datetime import UTC, date, datetime
from uuid import UUID

from supabase import Client

from fitness_planner.adapters.supabase_daily_log_repository import (
    WORKOUT_LOGS,
    LogTable,
)
from fitness_planner.domain.logs import CompletedExercise, WorkoutSession
from fitness_planner.services.validation import coerce_number
from fitness_planner.services.workout_sessions import WorkoutSessionRepository


@dataclass
class SupabaseWorkoutSessionRepository(WorkoutSessionRepository):
    """Stores sessions on the day's workout log row."""

    client: Client
    table: LogTable = WORKOUT_LOGS

    @property
    def _columns(self) -> str:
        return (
            f"user_id, log_date, {self.table.items_column}, "
            "session_note, duration_seconds"
        )

    def save_session(self, session: WorkoutSession) -> WorkoutSession:
        """Upsert the day's row with the session snapshot."""
        now = datetime.now(tz=UTC).isoformat()
        response = (
            self.client.table(self.table.name)
            .upsert(
                {
                    "user_id": str(session.user_id),
                    "log_date": session.log_date.isoformat(),
                    self.table.items_column: [
                        {
                            "name": exercise.name,
                            self.table.label_key: exercise.label,
                            "sets": exercise.sets,
                            "reps": exercise.reps,
                            "weight": exercise.weight,
                            self.table.recorded_key: now,
                        }
                        for exercise in session.exercises
                    ],
                    "session_note": session.note,
                    "duration_seconds": session.duration_seconds,
                    "total_calories": 0,
                    "total_protein": 0,
                    "updated_at": now,
                },
                on_conflict="user_id,log_date",
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to save workout session in Supabase")
        return self._parse_session(response.data[0])

    def list_sessions(self, user_id: UUID, limit: int) -> list[WorkoutSession]:
        """Return the user's workout days, newest first."""
        response = (
            self.client.table(self.table.name)
            .select(self._columns)
            .eq("user_id", str(user_id))
            .order("log_date", desc=True)
            .limit(limit)
            .execute()
        )
        return [self._parse_session(row) for row in response.data or []]

    def _parse_session(self, row: dict[str, object]) -> WorkoutSession:
        entries = row.get(self.table.items_column)
        exercises = [
            self._parse_exercise(entry)
            for entry in (entries if isinstance(entries, list) else [])
            if isinstance(entry, dict)
        ]
        duration = row.get("duration_seconds")
        return WorkoutSession(
            user_id=UUID(str(row["user_id"])),
            log_date=date.fromisoformat(str(row["log_date"])),
            exercises=exercises,
            note=str(row.get("session_note") or ""),
            duration_seconds=int(duration) if duration is not None else None,
        )

    def _parse_exercise(self, entry: dict[str, object]) -> CompletedExercise:
        return CompletedExercise(
            name=str(entry.get("name", "")),
            sets=_text(entry.get("sets")),
            reps=_text(entry.get("reps")),
            weight=coerce_number(entry.get("weight")),
            label=str(entry.get(self.table.label_key) or entry.get("label") or ""),
        )


def _text(value: object) -> str:
    return "" if value is None else str(value)
