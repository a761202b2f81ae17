import json

import pytest

import import_to_supabase
import main
from business_collector.models import CanonicalRecord, ResultMeta, ResultSet
from business_collector.pipeline import GOOGLE_PLACES, OPENCORPORATES


@pytest.fixture
def fake_run(monkeypatch):
    calls = []

    async def fake_run_collection(category, geography, max_results, sources=None, quick=False):
        calls.append({"category": category, "geography": geography, "max_results": max_results, "sources": sources, "quick": quick})
        return ResultSet(
            meta=ResultMeta(category=category, geography=geography, total_found=1, sources_used=["Google Places"]),
            rows=[CanonicalRecord(business_name="ABC Realty", website="https://abc.com", confidence=0.9)],
        )

    monkeypatch.setattr(main, "run_collection", fake_run_collection)
    monkeypatch.setattr(main, "setup_logging", lambda level=None: calls.append({"log_level": level}))
    return calls


def test_parser_defaults():
    args = main.build_parser().parse_args(["realtor", "Tampa, FL"])

    assert args.category == "realtor"
    assert args.geography == "Tampa, FL"
    assert args.max_results > 0
    assert args.quick is False
    assert args.sources is None


def test_main_prints_result_json(fake_run, capsys):
    main.main(["realtor", "Tampa, FL", "--max", "5", "--sources", "google,opencorporates", "--quick", "--log-level", "debug"])

    payload = json.loads(capsys.readouterr().out)
    assert payload["meta"]["total_found"] == 1
    assert payload["rows"][0]["business_name"] == "ABC Realty"
    assert "errors" not in payload["meta"]
    assert fake_run == [
        {"log_level": "debug"},
        {
            "category": "realtor",
            "geography": "Tampa, FL",
            "max_results": 5,
            "sources": [GOOGLE_PLACES, OPENCORPORATES],
            "quick": True,
        }
    ]


def test_main_writes_output_file(fake_run, tmp_path, capsys):
    output = tmp_path / "results.json"

    main.main(["realtor", "Tampa, FL", "--output", str(output)])

    assert capsys.readouterr().out == ""
    payload = json.loads(output.read_text())
    assert payload["meta"]["category"] == "realtor"
    assert payload["rows"][0]["website"] == "https://abc.com"


def test_main_suggest_lists_categories(fake_run, capsys):
    main.main(["--suggest", "pool"])

    assert capsys.readouterr().out.split("\n")[:2] == ["pool cleaning", "pool maintenance"]
    assert fake_run == [{"log_level": None}]


@pytest.mark.parametrize(
    "argv",
    [
        [],
        ["realtor"],
        ["realtor", "Tampa, FL", "--max", "0"],
        ["realtor", "Tampa, FL", "--sources", "yelp"],
    ],
)
def test_main_rejects_invalid_arguments(fake_run, argv):
    with pytest.raises(SystemExit):
        main.main(argv)
    assert all("category" not in call for call in fake_run)


def test_import_script_loads_and_renormalizes_rows(tmp_path):
    path = tmp_path / "results.json"
    path.write_text(
        json.dumps(
            {
                "meta": {"category": "realtor", "geography": "Tampa, FL"},
                "rows": [{"business_name": " ABC Realty ", "website": "www.abc.com/", "phone": "813-555-1234"}],
            }
        )
    )

    data = import_to_supabase.load_result(path)
    records = import_to_supabase.to_records(data["rows"])

    assert records == [
        CanonicalRecord(business_name="ABC Realty", website="https://abc.com", phone="+18135551234")
    ]


def test_import_script_rejects_files_without_rows(tmp_path):
    path = tmp_path / "results.json"
    path.write_text(json.dumps([{"business_name": "ABC Realty"}]))

    with pytest.raises(ValueError):
        import_to_supabase.load_result(path)
