"""OpenCorporates registry collector."""

from __future__ import annotations

import asyncio
import math
from typing import Any, Awaitable, Callable, Dict, List, Optional

import httpx
from loguru import logger

from .addresses import parse_address
from .config import OpenCorporatesSettings, opencorporates_settings
from .models import CandidateRecord
from .scoring import score_registry_company


SEARCH_URL = "https://api.opencorporates.com/v0.4/companies/search"

_STATES = {
    "AL": "Alabama", "AK": "Alaska", "AZ": "Arizona", "AR": "Arkansas", "CA": "California",
    "CO": "Colorado", "CT": "Connecticut", "DE": "Delaware", "FL": "Florida", "GA": "Georgia",
    "HI": "Hawaii", "ID": "Idaho", "IL": "Illinois", "IN": "Indiana", "IA": "Iowa",
    "KS": "Kansas", "KY": "Kentucky", "LA": "Louisiana", "ME": "Maine", "MD": "Maryland",
    "MA": "Massachusetts", "MI": "Michigan", "MN": "Minnesota", "MS": "Mississippi", "MO": "Missouri",
    "MT": "Montana", "NE": "Nebraska", "NV": "Nevada", "NH": "New Hampshire", "NJ": "New Jersey",
    "NM": "New Mexico", "NY": "New York", "NC": "North Carolina", "ND": "North Dakota", "OH": "Ohio",
    "OK": "Oklahoma", "OR": "Oregon", "PA": "Pennsylvania", "RI": "Rhode Island", "SC": "South Carolina",
    "SD": "South Dakota", "TN": "Tennessee", "TX": "Texas", "UT": "Utah", "VT": "Vermont",
    "VA": "Virginia", "WA": "Washington", "WV": "West Virginia", "WI": "Wisconsin", "WY": "Wyoming",
}

STATE_TO_JURISDICTION: Dict[str, str] = {}
for _code, _name in _STATES.items():
    STATE_TO_JURISDICTION[_code] = f"us_{_code.lower()}"
    STATE_TO_JURISDICTION[_name] = f"us_{_code.lower()}"

Sleep = Callable[[float], Awaitable[None]]


def resolve_jurisdiction(location: str) -> Optional[str]:
    """Map a state name, code, or a string mentioning one to a jurisdiction code."""

    location = location.strip()
    code = STATE_TO_JURISDICTION.get(location) or STATE_TO_JURISDICTION.get(location.upper())
    if code:
        return code
    for key, jurisdiction in STATE_TO_JURISDICTION.items():
        if key in location:
            return jurisdiction
    return None


def company_to_candidate(company: Dict[str, Any], category: str, current_year: Optional[int] = None) -> CandidateRecord:
    address = company.get("registered_address_in_full") or ""
    parts = parse_address(address)

    return CandidateRecord(
        business_name=company.get("name"),
        category=category,
        street=parts["street"],
        city=parts["city"],
        state=parts["state"],
        postal_code=parts["zip"],
        country="US",
        source_url=company.get("opencorporates_url"),
        confidence=score_registry_company(company, current_year=current_year),
        notes=(
            f"Status: {company.get('current_status') or 'Unknown'}, "
            f"Company Type: {company.get('company_type') or 'Unknown'}"
        ),
        oc_company_number=company.get("company_number"),
        oc_jurisdiction=company.get("jurisdiction_code"),
        oc_incorporation_date=company.get("incorporation_date"),
        oc_status=company.get("current_status"),
        oc_company_type=company.get("company_type"),
    )


async def _collect(
    client: httpx.AsyncClient,
    category: str,
    jurisdiction: str,
    max_results: int,
    api_key: str,
    settings: OpenCorporatesSettings,
    sleep: Sleep,
) -> List[CandidateRecord]:
    results: List[CandidateRecord] = []
    page = 1
    page_delay = settings.keyed_page_delay if api_key else settings.anonymous_page_delay

    try:
        while len(results) < max_results:
            params: Dict[str, Any] = {
                "q": category,
                "jurisdiction_code": jurisdiction,
                "page": page,
                "per_page": settings.per_page,
            }
            if api_key:
                params["api_token"] = api_key

            logger.info("Fetching from OpenCorporates: {} in {} (page {})", category, jurisdiction, page)
            response = await client.get(SEARCH_URL, params=params)
            response.raise_for_status()
            data = response.json() or {}

            companies = (data.get("results") or {}).get("companies") or []
            if not companies:
                logger.info("No more results from OpenCorporates")
                break

            for item in companies:
                company = item.get("company") if isinstance(item, dict) else None
                if not company:
                    continue
                results.append(company_to_candidate(company, category))
                if len(results) >= max_results:
                    break

            total_count = (data.get("results") or {}).get("total_count") or 0
            if len(results) >= max_results or page >= math.ceil(total_count / settings.per_page):
                break

            page += 1
            await sleep(page_delay)
    except (httpx.HTTPError, ValueError) as exc:
        if not results:
            raise
        logger.warning("OpenCorporates failed after {} results; returning partial results: {}", len(results), exc)

    logger.info("Collected {} businesses from OpenCorporates", len(results))
    return results


async def fetch_from_opencorporates(
    category: str,
    geography: str,
    max_results: int = 100,
    *,
    api_key: Optional[str] = None,
    client: Optional[httpx.AsyncClient] = None,
    settings: OpenCorporatesSettings = opencorporates_settings,
    sleep: Sleep = asyncio.sleep,
) -> List[CandidateRecord]:
    """Search registered companies matching ``category`` in the state named by ``geography``."""

    jurisdiction = resolve_jurisdiction(geography)
    if not jurisdiction:
        logger.warning('Could not map location "{}" to OpenCorporates jurisdiction', geography)
        return []

    api_key = api_key if api_key is not None else settings.api_key
    if client is not None:
        return await _collect(client, category, jurisdiction, max_results, api_key, settings, sleep)
    async with httpx.AsyncClient(timeout=settings.timeout) as owned_client:
        return await _collect(owned_client, category, jurisdiction, max_results, api_key, settings, sleep)
