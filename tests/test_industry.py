from business_collector.addresses import extract_city, extract_state, extract_zip, parse_address
from business_collector.industry import (
    INDUSTRY_MAPPINGS,
    get_industry_suggestions,
    get_supported_industries,
    optimize_search_query,
)


def test_exact_mapping_is_case_insensitive():
    assert optimize_search_query("Realtor", "Tampa, FL") == "real estate agent in Tampa, FL"
    assert optimize_search_query("  Lawn Care ", "Orlando, FL") == "lawn care service in Orlando, FL"


def test_partial_mapping_matches_either_direction():
    assert optimize_search_query("pool clean", "Tampa, FL") == "pool cleaning service in Tampa, FL"
    assert optimize_search_query("residential plumbing", "Tampa, FL") == "plumber in Tampa, FL"


def test_unmapped_category_gets_service_suffix():
    assert optimize_search_query("glassblowing", "Tampa, FL") == "glassblowing service in Tampa, FL"


def test_unmapped_category_with_service_word_is_left_alone():
    assert optimize_search_query("yacht broker firm", "Miami, FL") == "yacht broker firm in Miami, FL"


def test_supported_industries_sorted():
    industries = get_supported_industries()

    assert industries == sorted(INDUSTRY_MAPPINGS)
    assert "realtor" in industries


def test_suggestions_filter_and_limit():
    assert get_industry_suggestions("pool") == ["pool cleaning", "pool maintenance"]
    assert len(get_industry_suggestions("clean", limit=2)) == 2
    assert get_industry_suggestions("glassblowing") == []


def test_extract_parts_from_places_address():
    address = "123 Main St, Tampa, FL 33602, USA"

    assert extract_city(address) == "Tampa"
    assert extract_state(address) == "FL"
    assert extract_zip(address) == "33602"


def test_extract_parts_handle_missing_pieces():
    assert extract_city("Tampa") is None
    assert extract_state(None) is None
    assert extract_zip("123 Main St, Tampa, FL") is None
    assert extract_zip("500 Ocean Dr, Miami, FL 33139-1234") == "33139"


def test_parse_registered_address():
    assert parse_address("123 Main St, Tampa, FL 33602") == {
        "street": "123 Main St",
        "city": "Tampa",
        "state": "FL",
        "zip": "33602",
    }


def test_parse_address_without_state():
    assert parse_address("12 High Street, London") == {
        "street": "12 High Street",
        "city": "London",
        "state": None,
        "zip": None,
    }
    assert parse_address(None) == {"street": None, "city": None, "state": None, "zip": None}
