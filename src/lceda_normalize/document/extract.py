"""Locate ``{head, shape[]}`` in a library document of any known generation.

Strategies, cheapest and most precise first:

1. whole-document JSON, then a bounded search of the tree for an object with
   a ``head`` and a non-empty ``shape``;
2. for ``||``-delimited text, the same search over the parsed segments;
3. for ``||``-delimited text, V3 record reinterpretation (``outer||inner``
   pairs);
4. pipe-record reconstruction: a ``docType``-bearing head record followed by
   records that carry shape lines, or that are re-serialized as JSON shapes.

A strategy that does not match returns None; only the total failure raises
``FormatUnrecognized``.
"""
import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .diagnostics import MISSING, build_diagnostics, source_preview
from .head import HeadFields
from .scan import PipeSegments, split_pipe_segments
from .shapes import RawShape
from .v3 import extract_v3

logger = logging.getLogger(__name__)

SEARCH_DEPTH = 8
SHAPE_SCAN_DEPTH = 6

_LINE_SPLIT_RE = re.compile(r"\r?\n")
_SHAPE_LINE_RE = re.compile(r"^[A-Z][A-Z0-9_]{0,16}~")
_SHAPE_LINE_MIN = 3
_SHAPE_LINE_MAX = 4096
_SKIPPED_RECORD_TYPES = ("DOCHEAD", "DOCTAIL")


class FormatUnrecognized(ValueError):
    """No strategy found ``{head, shape[]}`` in a document."""

    def __init__(self, reason: str, diagnostics: str):
        super().__init__(f"{reason}; {diagnostics}")
        self.reason = reason
        self.diagnostics = diagnostics


@dataclass
class Extraction:
    """Canonical extraction result. ``head`` is the document's own mapping."""
    head: Dict[str, Any]
    shape: List[str] = field(default_factory=list)

    @property
    def fields(self) -> HeadFields:
        return HeadFields.from_mapping(self.head)

    def to_dict(self) -> Dict[str, Any]:
        return {"head": self.head, "shape": list(self.shape)}


def try_parse_json_string(value: str) -> Any:
    """Parse strings that look like JSON containers or JSON strings.

    Returns MISSING for anything else, including decode failures.
    """
    trimmed = value.strip()
    if not trimmed or trimmed[0] not in '{["':
        return MISSING
    try:
        return json.loads(trimmed)
    except ValueError:
        return MISSING


def _string_items(items: List[Any]) -> Optional[List[str]]:
    out = [item for item in items if isinstance(item, str) and item.strip()]
    return out or None


def normalize_shape(value: Any) -> Optional[List[str]]:
    """Coerce a ``shape`` field to a non-empty list of non-blank strings."""
    if isinstance(value, list):
        return _string_items(value)
    if isinstance(value, str):
        as_json = try_parse_json_string(value)
        if isinstance(as_json, list):
            found = _string_items(as_json)
            if found:
                return found
        lines = [line.strip() for line in _LINE_SPLIT_RE.split(value)]
        lines = [line for line in lines if line]
        return lines or None
    return None


def normalize_head(value: Any) -> Optional[Dict[str, Any]]:
    """Coerce a ``head`` field to a mapping (directly or from a JSON string)."""
    if isinstance(value, dict):
        return value
    if isinstance(value, str):
        parsed = try_parse_json_string(value)
        if isinstance(parsed, dict):
            return parsed
    return None


def to_head_and_shape(value: Any) -> Optional[Extraction]:
    if not isinstance(value, dict):
        return None
    head = normalize_head(value.get("head"))
    if head is None:
        return None
    shape = normalize_shape(value.get("shape"))
    if shape is None:
        return None
    return Extraction(head=head, shape=shape)


def find_head_and_shape(root: Any, depth: int = SEARCH_DEPTH) -> Optional[Extraction]:
    """Depth-first search for the first ``{head, shape}`` object.

    Descends into object values, array items and strings that decode as
    JSON. Every step down costs one unit of ``depth``.
    """
    stack = [(root, depth)]
    while stack:
        value, budget = stack.pop()
        if budget <= 0:
            continue

        found = to_head_and_shape(value)
        if found is not None:
            return found

        if isinstance(value, str):
            parsed = try_parse_json_string(value)
            if parsed is not MISSING:
                stack.append((parsed, budget - 1))
        elif isinstance(value, list):
            stack.extend((child, budget - 1) for child in reversed(value))
        elif isinstance(value, dict):
            stack.extend((child, budget - 1) for child in reversed(list(value.values())))
    return None


def looks_like_shape_line(value: str) -> bool:
    """Legacy shape line: an uppercase tag of up to 17 chars followed by ``~``."""
    if not _SHAPE_LINE_MIN <= len(value) <= _SHAPE_LINE_MAX:
        return False
    return bool(_SHAPE_LINE_RE.match(value))


def iter_shape_like_strings(root: Any, depth: int = SHAPE_SCAN_DEPTH):
    """Yield strings under ``root`` that look like legacy shape lines, in order."""
    stack = [(root, depth)]
    while stack:
        value, budget = stack.pop()
        if budget <= 0:
            continue
        if isinstance(value, str):
            if looks_like_shape_line(value):
                yield value
        elif isinstance(value, list):
            stack.extend((child, budget - 1) for child in reversed(value))
        elif isinstance(value, dict):
            stack.extend((child, budget - 1) for child in reversed(list(value.values())))


def reconstruct_from_pipe_records(segments: PipeSegments) -> Optional[Extraction]:
    """Rebuild ``{head, shape}`` from a head record and the records after it."""
    records = segments.records()
    head_index = next((i for i, r in enumerate(records) if isinstance(r.get("docType"), str)), None)
    if head_index is None:
        return None

    head = records[head_index]
    own_shape = normalize_shape(head.get("shape"))
    if own_shape:
        return Extraction(head=head, shape=own_shape)

    lines = {}  # insertion-ordered set
    contributors = []
    for record in records[head_index + 1:]:
        if str(record.get("type", "")).upper() in _SKIPPED_RECORD_TYPES:
            continue
        contributors.append(record)
        for line in normalize_shape(record.get("shape")) or ():
            lines.setdefault(line, None)
        for line in iter_shape_like_strings(record):
            lines.setdefault(line, None)

    shape = list(lines)
    if not shape and contributors:
        logger.debug("No shape lines in pipe records, keeping %d records as JSON shapes", len(contributors))
        shape = [RawShape(record).to_line() for record in contributors]
    if not shape:
        return None
    return Extraction(head=head, shape=shape)


def extract_head_and_shape(document: Any) -> Extraction:
    """Extract the canonical ``{head, shape[]}`` from raw text or a parsed tree.

    Raises FormatUnrecognized, carrying a diagnostics string, if no strategy
    recognises the document.
    """
    segments = None
    if isinstance(document, str):
        try:
            parsed = json.loads(document)
        except ValueError:
            segments = split_pipe_segments(document)
            if segments is None:
                raise FormatUnrecognized(
                    "Document source is neither JSON nor pipe-delimited",
                    build_diagnostics(document, MISSING),
                )
            parsed = segments.parsed
        else:
            # JSON-encoded text wrapping another document generation
            if isinstance(parsed, str) and parsed != document:
                logger.debug("Unwrapping JSON string document (%d chars)", len(parsed))
                return extract_head_and_shape(parsed)
    else:
        parsed = document

    found = find_head_and_shape(parsed)
    if found is not None:
        return found
    logger.debug("No {head, shape} object in parsed document")

    if segments is not None:
        v3 = extract_v3(document)
        if v3 is not None:
            return Extraction(head=v3["head"], shape=v3["shape"])
        found = reconstruct_from_pipe_records(segments)
        if found is not None:
            return found
        logger.debug("Pipe-record reconstruction declined for %r", source_preview(document, 40))

    raise FormatUnrecognized(
        "Unable to find { head, shape[] } in document source",
        build_diagnostics(document, parsed, segments),
    )
