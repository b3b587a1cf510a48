"""Utility modules."""

from stock_consensus.utils.documents import DocumentKind, dig, kind_of, to_document
from stock_consensus.utils.provenance import build_meta, build_provenance, utc_now_iso
from stock_consensus.utils.sanitize import sanitize_text
from stock_consensus.utils.validators import FetchParams, check_rule

__all__ = [
    "DocumentKind",
    "dig",
    "kind_of",
    "to_document",
    "build_meta",
    "build_provenance",
    "utc_now_iso",
    "sanitize_text",
    "FetchParams",
    "check_rule",
]
