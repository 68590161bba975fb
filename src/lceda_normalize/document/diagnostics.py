"""Bounded, human-readable summaries of a document that could not be extracted."""
import json
import re
from typing import Any, Optional

from .scan import PipeSegments

MAX_KEYS = 16
PREVIEW_CHARS = 160
SEGMENT_PREVIEW_CHARS = 40
MAX_SEGMENTS = 24
MAX_SEGMENT_KEYS = 8

# Marks "nothing could be parsed" as opposed to a parsed JSON null
MISSING = object()

_WS_RE = re.compile(r"\s+")


def kind_of(value: Any) -> str:
    """JSON-flavoured runtime type name."""
    if value is MISSING:
        return "undefined"
    if value is None:
        return "null"
    if isinstance(value, str):
        return "string"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def _collapse(text: str, limit: int) -> str:
    return _WS_RE.sub(" ", text).strip()[:limit]


def source_preview(source: Any, limit: int = PREVIEW_CHARS) -> str:
    """Whitespace-collapsed prefix of the source text (or its JSON form)."""
    if isinstance(source, str):
        return _collapse(source, limit)
    try:
        return _collapse(json.dumps(source, ensure_ascii=False, default=str), limit)
    except (TypeError, ValueError):
        return _collapse(str(source), limit)


def _describe_segment(index: int, value: Any) -> str:
    if isinstance(value, str):
        return f'{index}:string "{_collapse(value, SEGMENT_PREVIEW_CHARS)}"'
    if isinstance(value, list):
        return f"{index}:array({len(value)})"
    if isinstance(value, dict):
        keys = list(value.keys())
        shown = ",".join(str(k) for k in keys[:MAX_SEGMENT_KEYS])
        if len(keys) > MAX_SEGMENT_KEYS:
            shown += ",..."
        out = f"{index}:object{{{shown}}}"
        for tag in ("type", "docType"):
            if isinstance(value.get(tag), str):
                out += f" {tag}={_collapse(value[tag], SEGMENT_PREVIEW_CHARS)}"
        return out
    return f"{index}:{kind_of(value)}"


def describe_segments(segments: PipeSegments) -> str:
    parts = [_describe_segment(i, v) for i, v in enumerate(segments.parsed[:MAX_SEGMENTS])]
    hidden = len(segments.parsed) - MAX_SEGMENTS
    if hidden > 0:
        parts.append(f"...and {hidden} more")
    return f"segments={len(segments.parsed)} [{'; '.join(parts)}]"


def build_diagnostics(source: Any, parsed: Any = MISSING,
                      segments: Optional[PipeSegments] = None) -> str:
    """Render the extraction diagnostics string.

    Includes the source and parsed-root types, up to 16 root keys, a
    160-character preview and, when pipe splitting ran, a per-segment summary.
    """
    out = f"sourceType={kind_of(source)} root={kind_of(parsed)}"
    if isinstance(parsed, dict):
        keys = ",".join(str(k) for k in list(parsed.keys())[:MAX_KEYS])
        if keys:
            out += f" keys=[{keys}]"
    out += f' preview="{source_preview(source)}"'
    if segments is not None:
        out += " " + describe_segments(segments)
    return out
