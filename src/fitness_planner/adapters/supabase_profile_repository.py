"""Supabase-backed profile repository."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from fitness_planner.domain.profiles import Profile
from fitness_planner.services.profiles import ProfileRepository, profile_from_row


@dataclass
class SupabaseProfileRepository(ProfileRepository):
    """Reads user profiles from the `profiles` table."""

    client: Client

    def get(self, user_id: UUID) -> Profile | None:
        """Return the profile row for a user, if present."""
        response = (
            self.client.table("profiles")
            .select("*")
            .eq("id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return profile_from_row(response.data[0])
