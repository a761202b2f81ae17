"""robots.txt checks for the hosts the collector talks to."""

from __future__ import annotations

import time
from typing import Callable, Dict, Optional, Tuple
from urllib import robotparser
from urllib.parse import urlsplit, urlunsplit

import httpx
from loguru import logger

from .config import robots_settings


class RobotsCache:
    """Parsed robots.txt rules keyed by robots URL, expiring after ``ttl`` seconds."""

    def __init__(self, ttl: float = robots_settings.cache_ttl, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl = ttl
        self._clock = clock
        self._entries: Dict[str, Tuple[robotparser.RobotFileParser, float]] = {}

    def get(self, robots_url: str) -> Optional[robotparser.RobotFileParser]:
        entry = self._entries.get(robots_url)
        if entry is None:
            return None
        parser, expires_at = entry
        if self._clock() >= expires_at:
            del self._entries[robots_url]
            return None
        return parser

    def set(self, robots_url: str, parser: robotparser.RobotFileParser) -> None:
        self._entries[robots_url] = (parser, self._clock() + self.ttl)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


def robots_url_for(url: str) -> str:
    parts = urlsplit(url)
    return urlunsplit((parts.scheme, parts.netloc, "/robots.txt", "", ""))


class RobotsPolicy:
    """Decide whether a URL may be fetched.

    ``fail_open`` controls what happens when robots.txt cannot be read (or
    the URL cannot be parsed): ``True`` allows the fetch, ``False`` blocks
    it. A missing robots.txt (HTTP 404) always allows.
    """

    def __init__(
        self,
        *,
        enabled: bool = robots_settings.respect_robots_txt,
        fail_open: bool = robots_settings.fail_open,
        user_agent: str = robots_settings.user_agent,
        default_crawl_delay: float = robots_settings.default_crawl_delay,
        cache: Optional[RobotsCache] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.enabled = enabled
        self.fail_open = fail_open
        self.user_agent = user_agent
        self.default_crawl_delay = default_crawl_delay
        self.cache = cache if cache is not None else RobotsCache()
        self._client = client

    async def _load(self, robots_url: str) -> robotparser.RobotFileParser:
        if self._client is not None:
            response = await self._client.get(robots_url, headers={"User-Agent": self.user_agent}, timeout=5.0)
        else:
            async with httpx.AsyncClient() as client:
                response = await client.get(robots_url, headers={"User-Agent": self.user_agent}, timeout=5.0)
        response.raise_for_status()

        parser = robotparser.RobotFileParser()
        parser.set_url(robots_url)
        parser.parse(response.text.splitlines())
        parser.modified()
        return parser

    async def is_allowed(self, url: str) -> bool:
        if not self.enabled:
            return True

        try:
            robots_url = robots_url_for(url)
        except ValueError as exc:
            logger.error("Cannot derive robots.txt location for {}: {}", url, exc)
            return self.fail_open

        parser = self.cache.get(robots_url)
        if parser is None:
            try:
                parser = await self._load(robots_url)
            except httpx.HTTPStatusError as exc:
                if exc.response.status_code == 404:
                    logger.debug("No robots.txt found for {}, assuming allowed", robots_url)
                    return True
                logger.warning("Could not fetch robots.txt for {}: {}", robots_url, exc)
                return self.fail_open
            except httpx.HTTPError as exc:
                logger.warning("Could not fetch robots.txt for {}: {}", robots_url, exc)
                return self.fail_open
            self.cache.set(robots_url, parser)

        allowed = parser.can_fetch(self.user_agent, url)
        if not allowed:
            logger.warning("URL blocked by robots.txt: {}", url)
        return allowed

    def crawl_delay(self, url: str) -> float:
        """Crawl delay in seconds from cached rules, or the default."""

        try:
            parser = self.cache.get(robots_url_for(url))
        except ValueError:
            return self.default_crawl_delay
        if parser is None:
            return self.default_crawl_delay
        delay = parser.crawl_delay(self.user_agent)
        return float(delay) if delay else self.default_crawl_delay
