"""Supabase repository for preference records."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from menu_advisor.services.preferences import PreferencesRepository


@dataclass
class SupabasePreferencesRepository(PreferencesRepository):
    """Supabase implementation storing one row per (owner, key)."""

    client: Client
    owner_id: str

    def get(self, key: str) -> str | None:
        """Return the stored value for a key."""
        response = (
            self.client.table("preferences")
            .select("value")
            .eq("owner_id", self.owner_id)
            .eq("key", key)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return response.data[0].get("value")

    def set(self, key: str, value: str) -> None:
        """Insert or update the value for a key."""
        self.client.table("preferences").upsert(
            {
                "owner_id": self.owner_id,
                "key": key,
                "value": value,
                "updated_at": datetime.now(tz=UTC).isoformat(),
            },
            on_conflict="owner_id,key",
        ).execute()
