import sys
from pathlib import Path
from typing import Callable, List, Optional

import pytest

# Ensure the package and root-level scripts are importable when running pytest from the repo root.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from business_collector.models import CandidateRecord  # noqa: E402
from business_collector.pipeline import Source  # noqa: E402


class RecordingSleep:
    """Async stand-in for asyncio.sleep that records requested delays."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def make_source() -> Callable[..., Source]:
    """Build a Source that returns fixed candidates or raises ``error``."""

    def factory(
        name: str,
        rows: Optional[List[dict]] = None,
        error: Optional[Exception] = None,
        calls: Optional[list] = None,
        base_url: Optional[str] = None,
    ) -> Source:
        async def fetch(category, geography, max_results):
            if calls is not None:
                calls.append((name, category, geography, max_results))
            if error is not None:
                raise error
            return [CandidateRecord(**row) for row in rows or []]

        return Source(name=name, fetch=fetch, base_url=base_url)

    return factory
