"""Configuration helpers for the business collection pipeline."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv


load_dotenv()


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes"}


@dataclass(frozen=True)
class LLMSettings:
    """Credentials and generation parameters for the research LLM."""

    openai_api_key: str = os.getenv("OPENAI_API_KEY", "")
    openai_model: str = os.getenv("OPENAI_MODEL", "gpt-4-turbo-preview")
    anthropic_api_key: str = os.getenv("ANTHROPIC_API_KEY", "")
    anthropic_model: str = os.getenv("ANTHROPIC_MODEL", "claude-3-sonnet-20240229")
    temperature: float = float(os.getenv("LLM_TEMPERATURE", "0.3"))
    max_tokens: int = int(os.getenv("LLM_MAX_TOKENS", "4000"))
    timeout: float = float(os.getenv("LLM_TIMEOUT", "120"))

    @property
    def configured(self) -> bool:
        return bool(self.openai_api_key or self.anthropic_api_key)


@dataclass(frozen=True)
class GooglePlacesSettings:
    """Google Places access and pacing."""

    api_key: str = os.getenv("GOOGLE_MAPS_API_KEY", "")
    page_delay: float = float(os.getenv("GOOGLE_PAGE_DELAY", "2.0"))
    details_delay: float = float(os.getenv("GOOGLE_DETAILS_DELAY", "0.1"))
    timeout: float = float(os.getenv("GOOGLE_TIMEOUT", "10"))


@dataclass(frozen=True)
class OpenCorporatesSettings:
    """OpenCorporates access and pacing; the free tier needs slower paging."""

    api_key: str = os.getenv("OPENCORPORATES_API_KEY", "")
    per_page: int = int(os.getenv("OPENCORPORATES_PER_PAGE", "30"))
    timeout: float = float(os.getenv("OPENCORPORATES_TIMEOUT", "15"))
    keyed_page_delay: float = 0.5
    anonymous_page_delay: float = 2.0


@dataclass(frozen=True)
class RobotsSettings:
    """robots.txt compliance switches."""

    respect_robots_txt: bool = _env_flag("RESPECT_ROBOTS_TXT", "true")
    fail_open: bool = _env_flag("ROBOTS_FAIL_OPEN", "true")
    user_agent: str = os.getenv("USER_AGENT", "BusinessCollector/1.0")
    cache_ttl: float = float(os.getenv("ROBOTS_CACHE_TTL", "3600"))
    default_crawl_delay: float = float(os.getenv("ROBOTS_DEFAULT_CRAWL_DELAY", "1.0"))


@dataclass(frozen=True)
class CollectorSettings:
    """High-level collection parameters."""

    default_max_results: int = int(os.getenv("DEFAULT_MAX_RESULTS", "100"))
    split_source_quota: bool = _env_flag("SPLIT_SOURCE_QUOTA", "true")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


@dataclass(frozen=True)
class SupabaseSettings:
    """Supabase connection details."""

    url: Optional[str] = os.getenv("SUPABASE_URL")
    key: Optional[str] = os.getenv("SUPABASE_SERVICE_ROLE_KEY") or os.getenv("SUPABASE_ANON_KEY")
    business_table: str = os.getenv("SUPABASE_BUSINESS_TABLE", "businesses")


llm_settings = LLMSettings()
google_settings = GooglePlacesSettings()
opencorporates_settings = OpenCorporatesSettings()
robots_settings = RobotsSettings()
collector_settings = CollectorSettings()
supabase_settings = SupabaseSettings()
