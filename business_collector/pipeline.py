"""High-level orchestration for multi-source business collection."""

from __future__ import annotations

import asyncio
import math
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Iterable, List, Optional, Sequence, Tuple

from loguru import logger

from .config import collector_settings, google_settings, llm_settings
from .dedup import deduplicate_records
from .google_places import fetch_from_google_places
from .llm_research import fetch_from_llm
from .models import CandidateRecord, CanonicalRecord, ResultMeta, ResultSet, SourceError
from .normalize import normalize_record
from .opencorporates import fetch_from_opencorporates
from .robots import RobotsPolicy
from .storage import SupabaseSink


ALL_SOURCES_FAILED = "All data sources failed"

Fetcher = Callable[[str, str, int], Awaitable[List[CandidateRecord]]]


@dataclass(frozen=True)
class Source:
    """A named candidate fetcher; ``base_url`` is checked against robots.txt before fetching."""

    name: str
    fetch: Fetcher
    base_url: Optional[str] = None


GOOGLE_PLACES = Source("Google Places", fetch_from_google_places, "https://maps.googleapis.com/maps/api/place")
OPENCORPORATES = Source("OpenCorporates", fetch_from_opencorporates, "https://api.opencorporates.com/v0.4")
LLM_RESEARCH = Source("LLM Research", fetch_from_llm)

SOURCE_ALIASES = {
    "google": GOOGLE_PLACES,
    "opencorporates": OPENCORPORATES,
    "llm": LLM_RESEARCH,
}


def default_sources() -> List[Source]:
    """Sources in priority order, skipping the ones without credentials."""

    sources: List[Source] = []
    if google_settings.api_key:
        sources.append(GOOGLE_PLACES)
    else:
        logger.warning("Google Places: API key not configured")
    sources.append(OPENCORPORATES)
    if llm_settings.configured:
        sources.append(LLM_RESEARCH)
    return sources


def sources_from_names(names: Iterable[str]) -> List[Source]:
    selected: List[Source] = []
    for name in names:
        key = name.strip().lower()
        if not key:
            continue
        if key not in SOURCE_ALIASES:
            raise ValueError(f"Unknown source {name!r}; choose from {', '.join(sorted(SOURCE_ALIASES))}")
        selected.append(SOURCE_ALIASES[key])
    return selected


def rank_records(records: Sequence[CanonicalRecord], max_results: int) -> List[CanonicalRecord]:
    """Highest confidence first; ties keep their incoming order."""

    ranked = sorted(records, key=lambda record: record.confidence, reverse=True)
    return ranked[: max(0, max_results)]


class CollectionPipeline:
    """Fan out to sources, then normalize, deduplicate, rank and persist."""

    def __init__(
        self,
        sources: Optional[Sequence[Source]] = None,
        robots: Optional[RobotsPolicy] = None,
        supabase: Optional[SupabaseSink] = None,
        split_quota: bool = collector_settings.split_source_quota,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self.sources = list(sources) if sources is not None else default_sources()
        self.robots = robots
        self.supabase = supabase
        self.split_quota = split_quota
        self._clock = clock

    def _quota(self, max_results: int) -> int:
        if self.split_quota and self.sources:
            return math.ceil(max_results / len(self.sources))
        return max_results

    async def _run_source(
        self, source: Source, category: str, geography: str, quota: int
    ) -> Tuple[List[CandidateRecord], Optional[SourceError]]:
        try:
            if self.robots is not None and source.base_url:
                if not await self.robots.is_allowed(source.base_url):
                    return [], SourceError(source=source.name, error="Blocked by robots.txt")

            logger.info("Fetching from {}...", source.name)
            candidates = list(await source.fetch(category, geography, quota))
        except Exception as exc:  # noqa: BLE001 - one failing source must not abort the run
            logger.error("{} error: {}", source.name, exc)
            return [], SourceError(source=source.name, error=str(exc) or type(exc).__name__)

        logger.info("{}: {} results", source.name, len(candidates))
        return candidates, None

    def _finish(
        self,
        category: str,
        geography: str,
        started: float,
        candidates: Sequence[CandidateRecord],
        sources_used: List[str],
        errors: List[SourceError],
        max_results: int,
    ) -> ResultSet:
        normalized = [normalize_record(candidate) for candidate in candidates]
        logger.info("Deduplicating {} results...", len(normalized))
        deduplicated = deduplicate_records(normalized)
        duplicates_removed = len(normalized) - len(deduplicated)
        logger.info(
            "Deduplication: {} -> {} records ({} duplicates removed)",
            len(normalized),
            len(deduplicated),
            duplicates_removed,
        )
        rows = rank_records(deduplicated, max_results)

        if rows and self.supabase is not None and self.supabase.enabled:
            try:
                self.supabase.upsert_records(rows, category=category, geography=geography)
            except Exception as exc:  # noqa: BLE001 - persistence is best-effort
                logger.error("Supabase persistence failed: {}", exc)
                errors.append(SourceError(source="supabase", error=str(exc)))

        return ResultSet(
            meta=ResultMeta(
                category=category,
                geography=geography,
                total_found=len(rows),
                sources_used=sources_used,
                duplicates_removed=duplicates_removed,
                execution_time_ms=int((self._clock() - started) * 1000),
                errors=errors or None,
            ),
            rows=rows,
        )

    async def collect(
        self,
        category: str,
        geography: str,
        max_results: int = collector_settings.default_max_results,
    ) -> ResultSet:
        """Collect from every source concurrently and reconcile the combined candidates."""

        started = self._clock()
        logger.info("Starting multi-source collection: {} in {}", category, geography)

        quota = self._quota(max_results)
        # gather() preserves source order, so concatenation never depends on completion order.
        outcomes = await asyncio.gather(
            *(self._run_source(source, category, geography, quota) for source in self.sources)
        )

        candidates: List[CandidateRecord] = []
        sources_used: List[str] = []
        errors: List[SourceError] = []
        for source, (records, error) in zip(self.sources, outcomes):
            if error is not None:
                errors.append(error)
            if records:
                candidates.extend(records)
                sources_used.append(source.name)

        result = self._finish(category, geography, started, candidates, sources_used, errors, max_results)
        if self.sources and len(errors) == len(self.sources) and not candidates:
            result.meta.error = ALL_SOURCES_FAILED
        elif not self.sources:
            result.meta.error = "No data sources configured"

        logger.info(
            "Collection complete: {} unique businesses in {}ms",
            result.meta.total_found,
            result.meta.execution_time_ms,
        )
        return result

    async def quick_collect(
        self,
        category: str,
        geography: str,
        max_results: int = 50,
    ) -> ResultSet:
        """Try sources one at a time and return the first that yields anything."""

        started = self._clock()
        logger.info("Quick collect: {} in {}", category, geography)
        errors: List[SourceError] = []

        for source in self.sources:
            records, error = await self._run_source(source, category, geography, max_results)
            if error is not None:
                logger.warning("{} failed, trying fallback sources", source.name)
                errors.append(error)
                continue
            if records:
                return self._finish(category, geography, started, records, [source.name], errors, max_results)

        result = self._finish(category, geography, started, [], [], errors, max_results)
        if not self.sources:
            result.meta.error = "No data sources configured"
        elif len(errors) == len(self.sources):
            result.meta.error = ALL_SOURCES_FAILED
            logger.error("All sources failed for {} in {}", category, geography)
        else:
            logger.info("No source returned results for {} in {}", category, geography)
        return result


async def run_collection(
    category: str,
    geography: str,
    max_results: int = collector_settings.default_max_results,
    sources: Optional[Sequence[Source]] = None,
    quick: bool = False,
) -> ResultSet:
    """Convenience entry point."""

    pipeline = CollectionPipeline(sources=sources, robots=RobotsPolicy(), supabase=SupabaseSink())
    if quick:
        return await pipeline.quick_collect(category, geography, max_results)
    return await pipeline.collect(category, geography, max_results)
