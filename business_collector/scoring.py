"""Per-source confidence scores for raw candidate records."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .normalize import normalize_confidence


_ACTIVE_STATUS = re.compile(r"\bactive\b|good standing", re.IGNORECASE)
_YEAR = re.compile(r"(\d{4})")


def _finalize(score: float) -> float:
    return min(1.0, round(score, 2))


def _current_year() -> int:
    return datetime.now(timezone.utc).year


def score_google_place(place: Dict[str, Any], details: Optional[Dict[str, Any]] = None) -> float:
    """Score a Places search hit by rating, review volume, status and detail coverage."""

    score = 0.5
    details = details or {}

    rating = place.get("rating")
    if isinstance(rating, (int, float)) and rating >= 4.0:
        score += 0.15
    reviews = place.get("user_ratings_total")
    if isinstance(reviews, (int, float)) and reviews >= 10:
        score += 0.1
    if place.get("business_status") == "OPERATIONAL":
        score += 0.1

    if details.get("website"):
        score += 0.1
    if details.get("formatted_phone_number"):
        score += 0.05

    return _finalize(score)


def score_registry_company(company: Dict[str, Any], current_year: Optional[int] = None) -> float:
    """Score an OpenCorporates company.

    Registry data is authoritative but can be stale, so the base is lower
    than for directory listings; active status, recent incorporation and a
    full registered address push it up.
    """

    score = 0.4
    year_now = current_year if current_year is not None else _current_year()

    status = company.get("current_status")
    if isinstance(status, str) and _ACTIVE_STATUS.search(status):
        score += 0.3

    incorporated = company.get("incorporation_date")
    if isinstance(incorporated, str):
        match = _YEAR.search(incorporated)
        if match:
            age = year_now - int(match.group(1))
            if age <= 5:
                score += 0.15
            elif age <= 10:
                score += 0.1

    if company.get("registered_address_in_full"):
        score += 0.15

    return _finalize(score)


def score_llm_row(row: Dict[str, Any]) -> float:
    """LLM rows carry their own self-reported confidence."""

    return normalize_confidence(row.get("confidence"))
