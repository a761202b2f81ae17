"""Canonical forms for raw business fields and whole candidate records.

Every function here is total: any input (including the wrong type) yields
either a normalized value or ``None``, never an exception.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from typing import Any, Optional
from urllib.parse import urlsplit

from .models import CANONICAL_FIELDS, CandidateRecord, CanonicalRecord


DEFAULT_COUNTRY = "US"
DEFAULT_CONFIDENCE = 0.5

_NON_DIGIT = re.compile(r"\D+")
_SCHEME = re.compile(r"^https?://", re.IGNORECASE)
_HOSTNAME = re.compile(r"^[\w-]+(\.[\w-]+)*\.?$")


def _as_text(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, int):
        return str(value)
    return None


def normalize_text(value: Any) -> Optional[str]:
    """Trim free text; blanks and unsupported types become ``None``."""

    text = _as_text(value)
    if text is None:
        return None
    text = text.strip()
    return text or None


def normalize_state(value: Any) -> Optional[str]:
    text = normalize_text(value)
    return text.upper() if text else None


def normalize_email(value: Any) -> Optional[str]:
    text = normalize_text(value)
    return text.lower() if text else None


def normalize_country(value: Any) -> str:
    text = normalize_text(value)
    return text.upper() if text else DEFAULT_COUNTRY


def normalize_phone(value: Any) -> Optional[str]:
    """Convert a phone number to an E.164-style string.

    US numbers (10 digits, or 11 starting with 1) are rebuilt from their
    digits. Anything else already carrying a leading ``+`` is kept verbatim;
    the rest is passed through best-effort as ``+<digits>``.
    """

    phone = normalize_text(value)
    if phone is None:
        return None

    digits = _NON_DIGIT.sub("", phone)
    if len(digits) == 10:
        return f"+1{digits}"
    if len(digits) == 11 and digits.startswith("1"):
        return f"+{digits}"
    if not digits:
        return None
    if phone.startswith("+"):
        return phone
    return f"+{digits}"


def normalize_url(value: Any) -> Optional[str]:
    """Canonicalize a website URL to ``https://host/path`` without ``www.``.

    Text that cannot be parsed as a URL is returned unchanged.
    """

    url = normalize_text(value)
    if url is None:
        return None

    candidate = url if _SCHEME.match(url) else f"https://{url}"
    try:
        parts = urlsplit(candidate)
        host = parts.hostname
        port = parts.port
    except ValueError:
        return url
    if not host or not _HOSTNAME.match(host):
        return url

    if host.startswith("www."):
        host = host[len("www."):]
    if not host.strip("."):
        return url
    netloc = host
    if port is not None and port not in (80, 443):
        netloc = f"{host}:{port}"
    if parts.username:
        userinfo = parts.username
        if parts.password:
            userinfo = f"{userinfo}:{parts.password}"
        netloc = f"{userinfo}@{netloc}"

    normalized = f"https://{netloc}{parts.path.rstrip('/')}"
    if parts.query:
        normalized = f"{normalized}?{parts.query}"
    if parts.fragment:
        normalized = f"{normalized}#{parts.fragment}"
    return normalized


def normalize_confidence(value: Any) -> float:
    """Clamp numeric confidence into [0, 1]; anything else gets the default."""

    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return DEFAULT_CONFIDENCE
    if math.isnan(value):
        return DEFAULT_CONFIDENCE
    return float(min(1.0, max(0.0, value)))


_FIELD_NORMALIZERS = {
    "business_name": normalize_text,
    "category": normalize_text,
    "street": normalize_text,
    "city": normalize_text,
    "state": normalize_state,
    "postal_code": normalize_text,
    "country": normalize_country,
    "phone": normalize_phone,
    "email": normalize_email,
    "website": normalize_url,
    "source_url": normalize_text,
    "confidence": normalize_confidence,
    "notes": normalize_text,
}


def _raw_fields(record: Any) -> Mapping[str, Any]:
    if isinstance(record, (CandidateRecord, CanonicalRecord)):
        return {name: getattr(record, name) for name in CANONICAL_FIELDS}
    if isinstance(record, Mapping):
        return record
    return {}


def normalize_record(record: Any) -> CanonicalRecord:
    """Produce exactly one canonical record from a candidate, mapping or canonical record."""

    raw = _raw_fields(record)
    values = {}
    for name in CANONICAL_FIELDS:
        try:
            value = raw.get(name)
        except Exception:  # noqa: BLE001 - exotic mappings must not break normalization
            value = None
        values[name] = _FIELD_NORMALIZERS[name](value)
    return CanonicalRecord(**values)
