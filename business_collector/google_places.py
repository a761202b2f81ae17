"""Google Places text search collector."""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Dict, List, Optional

import httpx
from loguru import logger

from .addresses import extract_city, extract_state, extract_zip
from .config import GooglePlacesSettings, google_settings
from .industry import optimize_search_query
from .models import CandidateRecord
from .scoring import score_google_place


BASE_URL = "https://maps.googleapis.com/maps/api/place"
DETAIL_FIELDS = (
    "name,formatted_address,formatted_phone_number,international_phone_number,"
    "website,rating,user_ratings_total"
)

Sleep = Callable[[float], Awaitable[None]]


class GooglePlacesError(RuntimeError):
    """Raised when the Places API returns a non-successful status."""


async def text_search(
    client: httpx.AsyncClient, query: str, api_key: str, pagetoken: Optional[str] = None
) -> Dict[str, Any]:
    params = {"query": query, "key": api_key}
    if pagetoken:
        params["pagetoken"] = pagetoken
    response = await client.get(f"{BASE_URL}/textsearch/json", params=params)
    response.raise_for_status()
    payload = response.json()
    status = payload.get("status")
    if status not in {"OK", "ZERO_RESULTS"}:
        logger.error("text_search failed: status={}, error_message={}", status, payload.get("error_message"))
        raise GooglePlacesError(payload.get("error_message") or status)
    return payload


async def place_details(client: httpx.AsyncClient, place_id: str, api_key: str) -> Optional[Dict[str, Any]]:
    params = {"place_id": place_id, "fields": DETAIL_FIELDS, "key": api_key}
    response = await client.get(f"{BASE_URL}/details/json", params=params)
    response.raise_for_status()
    payload = response.json()
    if payload.get("status") == "OK":
        return payload.get("result")
    return None


def place_to_candidate(place: Dict[str, Any], details: Optional[Dict[str, Any]], category: str) -> CandidateRecord:
    """Convert a Places search hit (plus optional details) into a candidate record."""

    details = details or {}
    address = details.get("formatted_address") or place.get("formatted_address")
    street = address.split(",")[0] if address else None
    place_id = place.get("place_id")
    rating = place.get("rating")

    return CandidateRecord(
        business_name=place.get("name"),
        category=category,
        street=street,
        city=extract_city(address),
        state=extract_state(address),
        postal_code=extract_zip(address),
        country="US",
        phone=details.get("formatted_phone_number") or details.get("international_phone_number"),
        website=details.get("website"),
        source_url=f"https://www.google.com/maps/place/?q=place_id:{place_id}",
        confidence=score_google_place(place, details),
        notes=f"Rating: {rating if rating else 'N/A'} ({place.get('user_ratings_total') or 0} reviews)",
        google_place_id=place_id,
        google_rating=rating,
        google_reviews=place.get("user_ratings_total"),
        google_types=", ".join(place.get("types") or []),
        is_operational=place.get("business_status") == "OPERATIONAL",
    )


async def _collect(
    client: httpx.AsyncClient,
    category: str,
    geography: str,
    max_results: int,
    api_key: str,
    settings: GooglePlacesSettings,
    sleep: Sleep,
) -> List[CandidateRecord]:
    query = optimize_search_query(category, geography)
    results: List[CandidateRecord] = []
    next_page_token: Optional[str] = None
    page = 0

    try:
        while len(results) < max_results:
            if next_page_token:
                # Places rejects a page token until it has propagated.
                await sleep(settings.page_delay)
            page += 1
            logger.info("Fetching from Google Places: {} (page {})", query, page)
            data = await text_search(client, query, api_key, pagetoken=next_page_token)

            places = data.get("results") or []
            if not places:
                logger.info("No more results from Google Places")
                break

            for place in places:
                details = None
                place_id = place.get("place_id")
                if place_id:
                    try:
                        details = await place_details(client, place_id, api_key)
                    except (httpx.HTTPError, ValueError) as exc:
                        logger.warning("Failed to get details for {}: {}", place.get("name"), exc)
                    await sleep(settings.details_delay)

                results.append(place_to_candidate(place, details, category))
                if len(results) >= max_results:
                    break

            next_page_token = data.get("next_page_token")
            if not next_page_token:
                break
    except (httpx.HTTPError, GooglePlacesError, ValueError) as exc:
        if not results:
            raise
        logger.warning("Google Places failed after {} results; returning partial results: {}", len(results), exc)

    logger.info("Collected {} businesses from Google Places", len(results))
    return results


async def fetch_from_google_places(
    category: str,
    geography: str,
    max_results: int = 100,
    *,
    api_key: Optional[str] = None,
    client: Optional[httpx.AsyncClient] = None,
    settings: GooglePlacesSettings = google_settings,
    sleep: Sleep = asyncio.sleep,
) -> List[CandidateRecord]:
    """Search Places for ``category`` in ``geography`` and return candidate records."""

    api_key = api_key if api_key is not None else settings.api_key
    if not api_key:
        logger.warning("Google Maps API key not configured, skipping Google Places")
        return []

    if client is not None:
        return await _collect(client, category, geography, max_results, api_key, settings, sleep)
    async with httpx.AsyncClient(timeout=settings.timeout) as owned_client:
        return await _collect(owned_client, category, geography, max_results, api_key, settings, sleep)
