import asyncio

import httpx
import pytest

from business_collector.config import OpenCorporatesSettings
from business_collector.opencorporates import company_to_candidate, fetch_from_opencorporates, resolve_jurisdiction


SETTINGS = OpenCorporatesSettings(api_key="", per_page=2, timeout=5, keyed_page_delay=0.5, anonymous_page_delay=2.0)


def _company(number, name, **extra):
    company = {
        "name": name,
        "company_number": number,
        "jurisdiction_code": "us_fl",
        "opencorporates_url": f"https://opencorporates.com/companies/us_fl/{number}",
        "current_status": "Active",
        "company_type": "Florida Limited Liability",
    }
    company.update(extra)
    return {"company": company}


PAGES = {
    "1": [_company("L1", "Sunshine Pools LLC"), _company("L2", "Gulf Pools LLC")],
    "2": [_company("L3", "Bay Pool Care Inc")],
}


def _registry_handler(requests, failing_page=None):
    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        page = request.url.params["page"]
        if page == failing_page:
            return httpx.Response(503)
        companies = PAGES.get(page, [])
        return httpx.Response(200, json={"results": {"companies": companies, "total_count": 3}})

    return handler


def _fetch(handler, sleep, geography="Florida", max_results=10, **kwargs):
    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await fetch_from_opencorporates(
                "pool", geography, max_results, client=client, settings=SETTINGS, sleep=sleep, **kwargs
            )

    return asyncio.run(run())


@pytest.mark.parametrize(
    ("location", "expected"),
    [
        ("Florida", "us_fl"),
        ("fl", "us_fl"),
        ("Tampa, FL", "us_fl"),
        ("Austin, Texas", "us_tx"),
        ("London", None),
    ],
)
def test_resolve_jurisdiction(location, expected):
    assert resolve_jurisdiction(location) == expected


def test_fetch_walks_pages_until_total_count(recording_sleep):
    requests = []

    results = _fetch(_registry_handler(requests), recording_sleep)

    assert [record.business_name for record in results] == ["Sunshine Pools LLC", "Gulf Pools LLC", "Bay Pool Care Inc"]
    assert [request.url.params["page"] for request in requests] == ["1", "2"]
    assert requests[0].url.params["jurisdiction_code"] == "us_fl"
    assert "api_token" not in requests[0].url.params
    assert recording_sleep.delays == [2.0]


def test_fetch_with_api_key_sends_token_and_pages_faster(recording_sleep):
    requests = []

    _fetch(_registry_handler(requests), recording_sleep, api_key="oc-token")

    assert requests[0].url.params["api_token"] == "oc-token"
    assert recording_sleep.delays == [0.5]


def test_fetch_stops_at_quota(recording_sleep):
    requests = []

    results = _fetch(_registry_handler(requests), recording_sleep, max_results=1)

    assert len(results) == 1
    assert len(requests) == 1
    assert recording_sleep.delays == []


def test_fetch_returns_partial_results_when_later_page_fails(recording_sleep):
    results = _fetch(_registry_handler([], failing_page="2"), recording_sleep)

    assert len(results) == 2


def test_fetch_raises_when_first_page_fails(recording_sleep):
    with pytest.raises(httpx.HTTPStatusError):
        _fetch(_registry_handler([], failing_page="1"), recording_sleep)


def test_fetch_skips_unmappable_location(recording_sleep):
    requests = []

    assert _fetch(_registry_handler(requests), recording_sleep, geography="London") == []
    assert requests == []


def test_company_to_candidate_parses_registered_address():
    item = _company(
        "L9",
        "Sunshine Pools LLC",
        incorporation_date="2021-04-01",
        registered_address_in_full="123 Main St, Tampa, FL 33602",
    )

    record = company_to_candidate(item["company"], "pool", current_year=2025)

    assert record.street == "123 Main St"
    assert record.city == "Tampa"
    assert record.state == "FL"
    assert record.postal_code == "33602"
    assert record.source_url == "https://opencorporates.com/companies/us_fl/L9"
    assert record.notes == "Status: Active, Company Type: Florida Limited Liability"
    assert record.confidence == pytest.approx(1.0)
    assert record.model_extra["oc_company_number"] == "L9"
