"""Deduplication keys, record merging, and the dedup fold."""

from __future__ import annotations

import uuid
from typing import Callable, Dict, Iterable, List, Optional

from loguru import logger

from .models import CANONICAL_FIELDS, CanonicalRecord


NOTES_SEPARATOR = " | "


def resolve_dedup_key(record: CanonicalRecord) -> str:
    """Return the reconciliation key for a canonical record.

    Tiers are tried strongest-signal-first: website, name+phone+ZIP,
    name+ZIP, source page+name. Records with none of these get a key that
    never collides, so they are never merged with anything.
    """

    name = record.business_name.lower() if record.business_name else None

    if record.website:
        return f"website:{record.website}"
    if name and record.phone and record.postal_code:
        return f"composite:{name}:{record.phone}:{record.postal_code}"
    if name and record.postal_code:
        return f"name-zip:{name}:{record.postal_code}"
    if record.source_url:
        return f"source:{record.source_url}:{name or 'unknown'}"
    return f"unique:{uuid.uuid4().hex}"


def _join_notes(*notes: Optional[str]) -> Optional[str]:
    joined = NOTES_SEPARATOR.join(note for note in notes if note)
    return joined or None


def merge_records(existing: CanonicalRecord, incoming: CanonicalRecord) -> CanonicalRecord:
    """Combine two records that share a dedup key.

    A strictly more confident ``incoming`` wins: its present values (and its
    confidence) replace the existing ones. Otherwise ``existing`` wins and
    only its gaps are filled. Either way the loser fills the winner's gaps
    and notes from both sides accumulate.
    """

    if incoming.confidence > existing.confidence:
        winner, loser = incoming, existing
    else:
        winner, loser = existing, incoming

    updates = {}
    for name in CANONICAL_FIELDS:
        if name == "notes":
            continue
        if getattr(winner, name) is None and getattr(loser, name) is not None:
            updates[name] = getattr(loser, name)
    updates["notes"] = _join_notes(existing.notes, incoming.notes)

    return winner.model_copy(update=updates)


def deduplicate_records(
    records: Iterable[CanonicalRecord],
    key_fn: Callable[[CanonicalRecord], str] = resolve_dedup_key,
) -> List[CanonicalRecord]:
    """Merge records sharing a key, keeping first-seen key order."""

    merged: Dict[str, CanonicalRecord] = {}
    for record in records:
        key = key_fn(record)
        existing = merged.get(key)
        if existing is not None:
            logger.debug("Merging duplicate record under key {}", key)
            merged[key] = merge_records(existing, record)
        else:
            merged[key] = record
    return list(merged.values())
