"""Structured data models shared across the collection pipeline."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


CANONICAL_FIELDS = (
    "business_name",
    "category",
    "street",
    "city",
    "state",
    "postal_code",
    "country",
    "phone",
    "email",
    "website",
    "source_url",
    "confidence",
    "notes",
)


class CandidateRecord(BaseModel):
    """Raw business record exactly as a source returned it.

    Values are left untyped on purpose: sources disagree on formats, and the
    normalizer is the only place that interprets them. Source-specific extras
    (place ids, registry status, ...) survive in ``model_extra``.
    """

    model_config = ConfigDict(extra="allow")

    business_name: Any = Field(default=None, description="Business or firm name")
    category: Any = Field(default=None, description="Category the source filed the business under")
    street: Any = Field(default=None, description="Street address or full single-line address")
    city: Any = None
    state: Any = None
    postal_code: Any = None
    country: Any = None
    phone: Any = Field(default=None, description="Phone number in any source-native format")
    email: Any = None
    website: Any = None
    source_url: Any = Field(default=None, description="Where the record was found")
    confidence: Any = Field(default=None, description="Per-source confidence between 0 and 1")
    notes: Any = Field(default=None, description="Human readable provenance notes")


class CanonicalRecord(BaseModel):
    """Normalized business record; ``None`` marks every absent value."""

    model_config = ConfigDict(frozen=True)

    business_name: Optional[str] = None
    category: Optional[str] = None
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = Field(default=None, description="Upper-cased state or region code")
    postal_code: Optional[str] = None
    country: str = Field(default="US", description="Upper-cased country code")
    phone: Optional[str] = Field(default=None, description="E.164-style phone number")
    email: Optional[str] = Field(default=None, description="Lower-cased email address")
    website: Optional[str] = Field(default=None, description="Canonical https:// website URL")
    source_url: Optional[str] = None
    confidence: float = Field(default=0.5, ge=0.0, le=1.0)
    notes: Optional[str] = None


class SourceError(BaseModel):
    """A failure reported by one source during a collection run."""

    source: str
    error: str


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class ResultMeta(BaseModel):
    """Aggregate metadata describing a collection run."""

    category: str
    geography: str
    total_found: int = 0
    generated_at: str = Field(default_factory=_utc_now)
    sources_used: List[str] = Field(default_factory=list)
    duplicates_removed: int = 0
    execution_time_ms: int = 0
    errors: Optional[List[SourceError]] = Field(
        default=None, description="Per-source failures; omitted when every source succeeded"
    )
    error: Optional[str] = Field(default=None, description="Set when the run produced nothing usable")


class ResultSet(BaseModel):
    """Sorted, truncated rows plus the metadata describing how they were gathered."""

    meta: ResultMeta
    rows: List[CanonicalRecord] = Field(default_factory=list)

    def to_payload(self) -> dict:
        """Serialize to the JSON shape returned to callers."""

        payload = self.model_dump(mode="json")
        for key in ("errors", "error"):
            if payload["meta"].get(key) is None:
                payload["meta"].pop(key, None)
        return payload
