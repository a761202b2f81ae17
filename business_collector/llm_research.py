"""LLM-driven research source.

The model is asked to return ``{"meta": {...}, "rows": [...]}``. Replies are
accepted as bare JSON, JSON inside a markdown fence, or a JSON object embedded
in prose; anything else is a hard failure rather than an empty result.
"""

from __future__ import annotations

import json
import re
from typing import Any, Dict, List, Optional, Sequence

import httpx
from loguru import logger

from .config import LLMSettings, llm_settings
from .models import CandidateRecord
from .scoring import score_llm_row


OPENAI_URL = "https://api.openai.com/v1/chat/completions"
ANTHROPIC_URL = "https://api.anthropic.com/v1/messages"

SYSTEM_PROMPT = """You are a compliant, source-first research agent that builds small-business contact lists.
Given a CATEGORY and GEOGRAPHY, find publicly available business records and return clean, deduplicated results.

Rules:
1. Respect robots.txt and site terms; skip prohibited sources.
2. Public data only: no logins, paywalls or private data.
3. Every record needs a traceable source_url.
4. Never invent values; leave unknown fields empty.

Prefer sources in this order: official registries and licensing boards, major directories
(Google Business Profiles, Yelp, BBB), chambers of commerce and city/county directories,
then company websites for phone and email validation.

Fields per record: business_name (required), category, street, city, state, postal_code, country,
phone (E.164 when possible), email (public, role-based preferred), website, source_url (required),
confidence (0-1, how sure you are the record is current), notes (short provenance, e.g. "phone from GBP").

Cross-check across at least two sources when possible and raise confidence when they agree.
Deduplicate by website, or by business_name + phone + postal_code.

Return JSON only:
{"meta": {"category": "...", "geography": "...", "total_found": 0, "generated_at": "<ISO8601>", "sources_used": ["..."]},
 "rows": [{...fields above...}]}"""

_FENCED = re.compile(r"```(?:json)?\s*(\{[\s\S]*\})\s*```")
_OBJECT = re.compile(r"\{[\s\S]*\}")


class LLMResponseError(RuntimeError):
    """Raised when the model reply does not contain a usable JSON payload."""


class LLMConfigurationError(RuntimeError):
    """Raised when no LLM provider credentials are configured."""


def build_user_prompt(
    category: str,
    geography: str,
    max_results: int = 500,
    synonyms: Optional[Sequence[str]] = None,
    source_hints: Optional[Sequence[str]] = None,
    fields: str = "default",
) -> str:
    synonym_text = json.dumps(list(synonyms)) if synonyms else "Auto-detect NAICS synonyms"
    registries = ", ".join(source_hints) if source_hints else "Auto-discover state/industry associations"

    return f"""TASK: Build a small-business contact dataset.

CATEGORY: {category}
GEOGRAPHY: {geography}
SYNONYMS: {synonym_text}
FIELDS: {fields}
MAX_RESULTS: {max_results}

SOURCE_HINTS:
  Associations/Registries: {registries}
  Major Directories: Google Business Profiles, Yelp, BBB
  Local Directories: Chambers, City/County business directories

NOTES:
  - Prefer role-based emails when several are listed.
  - Return the contact page URL when email is form-only.
  - Normalize phones to E.164; dedupe by website or name+phone+ZIP.
  - Return ONLY valid JSON."""


def parse_llm_response(text: str) -> Dict[str, Any]:
    """Extract the JSON object from a model reply."""

    if not isinstance(text, str) or not text.strip():
        raise LLMResponseError("LLM returned an empty response")

    try:
        payload = json.loads(text)
    except json.JSONDecodeError:
        payload = None
        for pattern in (_FENCED, _OBJECT):
            match = pattern.search(text)
            if not match:
                continue
            try:
                payload = json.loads(match.group(1) if pattern is _FENCED else match.group(0))
                break
            except json.JSONDecodeError:
                continue
        if payload is None:
            raise LLMResponseError("Could not parse LLM response as JSON")

    if not isinstance(payload, dict):
        raise LLMResponseError("LLM response JSON is not an object")
    return payload


def extract_rows(payload: Dict[str, Any]) -> List[CandidateRecord]:
    """Turn the ``rows`` of a parsed reply into candidate records."""

    rows = payload.get("rows")
    if not isinstance(rows, list):
        raise LLMResponseError("LLM response is missing a 'rows' list")

    candidates: List[CandidateRecord] = []
    for row in rows:
        if not isinstance(row, dict):
            logger.debug("Skipping non-object LLM row: {!r}", row)
            continue
        candidate = CandidateRecord.model_validate(row)
        candidates.append(candidate.model_copy(update={"confidence": score_llm_row(row)}))
    return candidates


async def call_llm(
    system_prompt: str,
    user_prompt: str,
    *,
    client: httpx.AsyncClient,
    settings: LLMSettings = llm_settings,
) -> str:
    """Send the prompts to OpenAI (preferred) or Anthropic and return the reply text."""

    if settings.openai_api_key:
        logger.info("Using OpenAI for research")
        response = await client.post(
            OPENAI_URL,
            json={
                "model": settings.openai_model,
                "messages": [
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                "temperature": settings.temperature,
                "max_tokens": settings.max_tokens,
            },
            headers={"Authorization": f"Bearer {settings.openai_api_key}"},
        )
        response.raise_for_status()
        return response.json()["choices"][0]["message"]["content"]

    if settings.anthropic_api_key:
        logger.info("Using Anthropic for research")
        response = await client.post(
            ANTHROPIC_URL,
            json={
                "model": settings.anthropic_model,
                "max_tokens": settings.max_tokens,
                "system": system_prompt,
                "messages": [{"role": "user", "content": user_prompt}],
            },
            headers={"x-api-key": settings.anthropic_api_key, "anthropic-version": "2023-06-01"},
        )
        response.raise_for_status()
        return response.json()["content"][0]["text"]

    raise LLMConfigurationError("No LLM API key configured. Set OPENAI_API_KEY or ANTHROPIC_API_KEY")


async def fetch_from_llm(
    category: str,
    geography: str,
    max_results: int = 500,
    *,
    client: Optional[httpx.AsyncClient] = None,
    settings: LLMSettings = llm_settings,
    synonyms: Optional[Sequence[str]] = None,
    source_hints: Optional[Sequence[str]] = None,
) -> List[CandidateRecord]:
    """Ask the LLM for records and return its rows as candidates."""

    user_prompt = build_user_prompt(category, geography, max_results, synonyms=synonyms, source_hints=source_hints)

    if client is not None:
        reply = await call_llm(SYSTEM_PROMPT, user_prompt, client=client, settings=settings)
    else:
        async with httpx.AsyncClient(timeout=settings.timeout) as owned_client:
            reply = await call_llm(SYSTEM_PROMPT, user_prompt, client=owned_client, settings=settings)

    payload = parse_llm_response(reply)
    candidates = extract_rows(payload)
    meta = payload.get("meta") if isinstance(payload.get("meta"), dict) else {}
    consulted = meta.get("sources_used")
    logger.info(
        "LLM returned {} rows (sources consulted: {})",
        len(candidates),
        ", ".join(map(str, consulted)) if isinstance(consulted, list) and consulted else "unspecified",
    )
    return candidates
