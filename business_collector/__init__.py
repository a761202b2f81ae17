"""Business record collection and reconciliation pipeline."""

from .dedup import deduplicate_records, merge_records, resolve_dedup_key
from .models import CandidateRecord, CanonicalRecord, ResultMeta, ResultSet, SourceError
from .normalize import normalize_record
from .pipeline import CollectionPipeline, Source, run_collection

__all__ = [
    "CandidateRecord",
    "CanonicalRecord",
    "CollectionPipeline",
    "ResultMeta",
    "ResultSet",
    "Source",
    "SourceError",
    "deduplicate_records",
    "merge_records",
    "normalize_record",
    "resolve_dedup_key",
    "run_collection",
]
