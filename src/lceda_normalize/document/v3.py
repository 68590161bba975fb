"""Record parser for the V3 ``outer||inner`` document protocol.

A V3 document is a sequence of typed records. Each record is a pair of JSON
objects: the outer object carries the record ``type`` (plus optional ``id``
and ``ticket``), the inner object carries the payload. Two layouts occur in
the wild: one ``outer||inner`` pair per line, and a flat run of objects that
has to be paired up sequentially.
"""
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .coerce import to_number, to_string_value
from .scan import PIPE_DELIMITER, loads_object, scan_json_objects
from .v3_shapes import build_footprint_shapes, build_symbol_shapes

logger = logging.getLogger(__name__)

SYMBOL_DOC_TYPES = ("SYMBOL", "SCH_PAGE", "SIMULATION")
FOOTPRINT_DOC_TYPES = ("FOOTPRINT", "PCB")

_LINE_SPLIT_RE = re.compile(r"\r?\n")


class MalformedRecord(ValueError):
    """A single V3 record could not be read; the current strategy declines."""
    pass


@dataclass(frozen=True)
class V3Outer:
    type: str
    id: Optional[str] = None
    ticket: Optional[int] = None


@dataclass(frozen=True)
class V3Record:
    outer: V3Outer
    inner: Dict[str, Any] = field(default_factory=dict)


def _make_record(outer: Optional[dict], inner: Optional[dict]) -> V3Record:
    if outer is None or inner is None:
        raise MalformedRecord("record halves must both be JSON objects")
    record_type = to_string_value(outer.get("type"))
    if not record_type:
        raise MalformedRecord("record is missing outer.type")
    ticket = outer.get("ticket")
    if isinstance(ticket, bool) or not isinstance(ticket, (int, float)):
        ticket = None
    return V3Record(
        outer=V3Outer(type=record_type, id=to_string_value(outer.get("id")), ticket=ticket),
        inner=inner,
    )


def parse_records_line_based(source: str) -> Optional[List[V3Record]]:
    """One ``outer||inner`` pair per non-empty line; any bad line declines."""
    lines = [line.strip() for line in _LINE_SPLIT_RE.split(source)]
    lines = [line for line in lines if line]
    if len(lines) < 2:
        return None

    records = []
    try:
        for line in lines:
            idx = line.find(PIPE_DELIMITER)
            if idx < 0:
                raise MalformedRecord("line has no record delimiter")
            outer = loads_object(line[:idx].strip())
            inner = loads_object(line[idx + len(PIPE_DELIMITER):].strip())
            records.append(_make_record(outer, inner))
    except MalformedRecord as e:
        logger.debug("V3 line-based parse declined: %s", e)
        return None

    return records or None


def parse_records_from_object_pairs(source: str) -> Optional[List[V3Record]]:
    """Pair up every recovered JSON object as ``(outer, inner)``."""
    spans = scan_json_objects(source)
    if len(spans) < 4 or len(spans) % 2 != 0:
        return None
    objects = [loads_object(span) for span in spans]

    records = []
    try:
        for i in range(0, len(objects), 2):
            records.append(_make_record(objects[i], objects[i + 1]))
    except MalformedRecord as e:
        logger.debug("V3 object-pair parse declined: %s", e)
        return None

    return records or None


def parse_v3_records(source: str) -> Optional[List[V3Record]]:
    """Parse V3 text into records, or None if it is not in either layout."""
    records = parse_records_line_based(source)
    if records:
        logger.debug("V3 line-based parse: %d records", len(records))
        return records
    records = parse_records_from_object_pairs(source)
    if records:
        logger.debug("V3 object-pair parse: %d records", len(records))
    return records


def get_doc_type(records: List[V3Record]) -> Optional[str]:
    for r in records:
        if r.outer.type == "DOCHEAD":
            return to_string_value(r.inner.get("docType"))
    return None


def get_canvas_origin(records: List[V3Record]):
    """Return ``(originX, originY)`` of the CANVAS record, (0, 0) if absent."""
    for r in records:
        if r.outer.type == "CANVAS":
            return to_number(r.inner.get("originX"), 0), to_number(r.inner.get("originY"), 0)
    return 0, 0


def extract_v3(source: str) -> Optional[Dict[str, Any]]:
    """Reinterpret V3 text as ``{"head": ..., "shape": [...]}``.

    Returns None when the text is not V3, has no DOCHEAD docType, or the
    docType has no shape builder.
    """
    records = parse_v3_records(source)
    if not records:
        return None

    doc_type = get_doc_type(records)
    if not doc_type:
        logger.debug("V3 records carry no DOCHEAD docType")
        return None

    origin_x, origin_y = get_canvas_origin(records)
    head = {
        "docType": doc_type,
        "originX": origin_x,
        "originY": origin_y,
        "x": origin_x,
        "y": origin_y,
    }

    if doc_type in SYMBOL_DOC_TYPES:
        return {"head": head, "shape": build_symbol_shapes(records)}
    if doc_type in FOOTPRINT_DOC_TYPES:
        return {"head": head, "shape": build_footprint_shapes(records)}

    logger.debug("V3 docType %r has no shape builder", doc_type)
    return None
