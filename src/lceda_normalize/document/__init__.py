"""Document-format detection and normalization."""

from .extract import Extraction, FormatUnrecognized, extract_head_and_shape
from .head import HeadFields, domain_for_doc_type

__all__ = [
    "Extraction",
    "FormatUnrecognized",
    "HeadFields",
    "domain_for_doc_type",
    "extract_head_and_shape",
]
