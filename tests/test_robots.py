import asyncio

import httpx
import pytest

from business_collector.robots import RobotsCache, RobotsPolicy, robots_url_for


ROBOTS_TXT = """User-agent: *
Disallow: /private
Crawl-delay: 5

User-agent: BusinessCollector
Disallow: /no-collectors
"""


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def _policy(handler, **kwargs):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    options = {
        "enabled": True,
        "fail_open": True,
        "user_agent": "BusinessCollector/1.0",
        "default_crawl_delay": 1.0,
        "client": client,
    }
    options.update(kwargs)
    return RobotsPolicy(**options)


def _serving(text, requests=None, status=200):
    def handler(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(request)
        return httpx.Response(status, text=text)

    return handler


def test_robots_url_for_strips_path_and_query():
    assert robots_url_for("https://example.com/a/b?c=1#frag") == "https://example.com/robots.txt"
    assert robots_url_for("http://example.com:8080/x") == "http://example.com:8080/robots.txt"


def test_disallow_rules_apply_to_matching_paths():
    policy = _policy(_serving(ROBOTS_TXT))

    assert asyncio.run(policy.is_allowed("https://example.com/public/page")) is True
    assert asyncio.run(policy.is_allowed("https://example.com/no-collectors/list")) is False


def test_agent_specific_group_overrides_wildcard():
    policy = _policy(_serving(ROBOTS_TXT))

    # The BusinessCollector group only disallows /no-collectors.
    assert asyncio.run(policy.is_allowed("https://example.com/private/area")) is True

    other = _policy(_serving(ROBOTS_TXT), user_agent="SomeOtherBot/2.0")
    assert asyncio.run(other.is_allowed("https://example.com/private/area")) is False


def test_rules_are_cached_per_host():
    requests = []
    policy = _policy(_serving(ROBOTS_TXT, requests))

    asyncio.run(policy.is_allowed("https://example.com/a"))
    asyncio.run(policy.is_allowed("https://example.com/b"))
    asyncio.run(policy.is_allowed("https://other.example/a"))

    assert [str(request.url) for request in requests] == [
        "https://example.com/robots.txt",
        "https://other.example/robots.txt",
    ]
    assert len(policy.cache) == 2


def test_cache_entries_expire_after_ttl():
    clock = FakeClock()
    requests = []
    policy = _policy(_serving(ROBOTS_TXT, requests), cache=RobotsCache(ttl=60, clock=clock))

    asyncio.run(policy.is_allowed("https://example.com/a"))
    clock.now += 59
    asyncio.run(policy.is_allowed("https://example.com/a"))
    assert len(requests) == 1

    clock.now += 1
    asyncio.run(policy.is_allowed("https://example.com/a"))
    assert len(requests) == 2


def test_missing_robots_txt_allows_even_when_failing_closed():
    policy = _policy(_serving("", status=404), fail_open=False)

    assert asyncio.run(policy.is_allowed("https://example.com/anything")) is True


@pytest.mark.parametrize("fail_open", [True, False])
def test_server_error_follows_fail_open_flag(fail_open):
    policy = _policy(_serving("", status=500), fail_open=fail_open)

    assert asyncio.run(policy.is_allowed("https://example.com/anything")) is fail_open


@pytest.mark.parametrize("fail_open", [True, False])
def test_network_error_follows_fail_open_flag(fail_open):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    policy = _policy(handler, fail_open=fail_open)

    assert asyncio.run(policy.is_allowed("https://example.com/anything")) is fail_open


def test_disabled_policy_allows_without_fetching():
    requests = []
    policy = _policy(_serving(ROBOTS_TXT, requests), enabled=False)

    assert asyncio.run(policy.is_allowed("https://example.com/no-collectors")) is True
    assert requests == []


def test_crawl_delay_uses_cached_rules_or_default():
    policy = _policy(_serving(ROBOTS_TXT), user_agent="SomeOtherBot/2.0")

    assert policy.crawl_delay("https://example.com/") == 1.0
    asyncio.run(policy.is_allowed("https://example.com/"))
    assert policy.crawl_delay("https://example.com/") == 5.0


def test_cache_clear():
    cache = RobotsCache(ttl=10, clock=FakeClock())
    policy = _policy(_serving(ROBOTS_TXT), cache=cache)
    asyncio.run(policy.is_allowed("https://example.com/"))

    cache.clear()

    assert len(cache) == 0
    assert cache.get("https://example.com/robots.txt") is None
