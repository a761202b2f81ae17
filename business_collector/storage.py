"""Supabase persistence helpers."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from loguru import logger
from postgrest.exceptions import APIError
from supabase import Client, create_client

from .config import supabase_settings
from .models import CanonicalRecord


class SupabaseSink:
    """Thin wrapper around Supabase for persisting collected businesses."""

    def __init__(self, client: Optional[Client] = None, table: Optional[str] = None) -> None:
        self._client: Optional[Client] = client
        self.table = table or supabase_settings.business_table
        if self._client is None and supabase_settings.url and supabase_settings.key:
            self._client = create_client(supabase_settings.url, supabase_settings.key)

    @property
    def enabled(self) -> bool:
        return self._client is not None

    @staticmethod
    def _payload(records: Sequence[CanonicalRecord], category: str, geography: str) -> List[Dict[str, Any]]:
        return [
            {
                **record.model_dump(),
                "search_category": category,
                "search_geography": geography,
            }
            for record in records
        ]

    def upsert_records(self, records: Sequence[CanonicalRecord], category: str = "", geography: str = "") -> None:
        if not records or not self._client:
            return

        payload = self._payload(records, category, geography)
        table = self._client.table(self.table)

        try:
            table.upsert(payload, on_conflict="source_url").execute()
        except APIError as api_exc:
            if api_exc.code not in {"42P10", "23505"}:
                raise RuntimeError("Failed to upsert businesses into Supabase") from api_exc
            logger.warning("Bulk upsert rejected ({}); falling back to per-row writes", api_exc.code)
            self._upsert_rows(payload)
        logger.info("Persisted {} businesses to Supabase table {}", len(payload), self.table)

    def _upsert_rows(self, payload: List[Dict[str, Any]]) -> None:
        for entry in payload:
            try:
                source_url = entry.get("source_url")
                if source_url:
                    existing = (
                        self._client.table(self.table)
                        .select("id")
                        .eq("source_url", source_url)
                        .limit(1)
                        .execute()
                    )
                    if existing.data:
                        self._client.table(self.table).update(entry).eq("source_url", source_url).execute()
                        continue
                # Insert when no match by URL (including null URLs)
                self._client.table(self.table).insert(entry).execute()
            except APIError as inner_exc:
                raise RuntimeError("Failed to upsert businesses into Supabase") from inner_exc
