"""Supabase repository for ledger key-value data."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from fuel_ledger.services.persistence import KeyValueRepository, PersistenceError


@dataclass
class SupabaseKeyValueRepository(KeyValueRepository):
    """Supabase implementation storing one JSON value per key."""

    client: Client
    namespace: str = "default"
    table_name: str = "ledger_kv"

    def get(self, key: str) -> object | None:
        """Return the stored value for a key."""
        try:
            response = (
                self.client.table(self.table_name)
                .select("value")
                .eq("namespace", self.namespace)
                .eq("key", key)
                .limit(1)
                .execute()
            )
        except Exception as exc:
            raise PersistenceError(f"Failed to read {key}") from exc
        if not response.data:
            return None
        return response.data[0].get("value")

    def set(self, key: str, value: object) -> None:
        """Insert or replace the value for a key."""
        try:
            self.client.table(self.table_name).upsert(
                {
                    "namespace": self.namespace,
                    "key": key,
                    "value": value,
                    "updated_at": datetime.now(tz=UTC).isoformat(),
                },
                on_conflict="namespace,key",
            ).execute()
        except Exception as exc:
            raise PersistenceError(f"Failed to write {key}") from exc
