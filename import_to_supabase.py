"""Utility script to backfill Supabase from a saved collection JSON file."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any, Dict, List

from business_collector.models import CanonicalRecord
from business_collector.normalize import normalize_record
from business_collector.storage import SupabaseSink


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Import collected businesses into Supabase from a JSON export.")
    parser.add_argument(
        "--input",
        required=True,
        help="Path to results JSON (output of main.py --output).",
    )
    parser.add_argument(
        "--default-category",
        default="",
        help="Category to store when the JSON does not include metadata.",
    )
    parser.add_argument(
        "--default-geography",
        default="",
        help="Geography to store when the JSON does not include metadata.",
    )
    return parser


def load_result(path: Path) -> Dict[str, Any]:
    data = json.loads(path.read_text())
    if not isinstance(data, dict) or not isinstance(data.get("rows"), list):
        raise ValueError("Results JSON must be an object with a 'rows' list.")
    return data


def to_records(rows: List[Any]) -> List[CanonicalRecord]:
    # Re-normalizing is a no-op for rows main.py wrote and repairs hand-edited ones.
    return [normalize_record(row) for row in rows]


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()

    sink = SupabaseSink()
    if not sink.enabled:
        raise RuntimeError("Supabase client is not configured. Check SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY.")

    data = load_result(Path(args.input))
    meta = data.get("meta") or {}
    records = to_records(data["rows"])

    sink.upsert_records(
        records,
        category=meta.get("category") or args.default_category,
        geography=meta.get("geography") or args.default_geography,
    )

    print(f"Imported {len(records)} businesses into Supabase.")


if __name__ == "__main__":
    main()
