"""Raw-text scanning: balanced-brace object recovery and pipe-segment splitting."""
import json
import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional

logger = logging.getLogger(__name__)

PIPE_DELIMITER = "||"


def scan_json_objects(text: str) -> List[str]:
    """Return every top-level balanced ``{...}`` span in ``text``.

    Braces inside double-quoted strings (backslash escapes honoured) are
    ignored. Spans are not validated as JSON, and a brace left open at the
    end of the text is dropped.
    """
    out = []
    depth = 0
    start = -1
    in_string = False
    escaped = False

    for i, ch in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue

        if ch == '"':
            in_string = True
        elif ch == "{":
            if depth == 0:
                start = i
            depth += 1
        elif ch == "}" and depth > 0:
            depth -= 1
            if depth == 0 and start >= 0:
                out.append(text[start:i + 1])
                start = -1

    return out


def loads_object(text: str) -> Optional[dict]:
    """Parse ``text`` as JSON and return it only if it is an object."""
    try:
        parsed = json.loads(text)
    except ValueError:
        return None
    return parsed if isinstance(parsed, dict) else None


def recover_objects(text: str) -> List[dict]:
    """JSON objects recoverable from ``text`` via the brace scanner."""
    objects = []
    for span in scan_json_objects(text):
        obj = loads_object(span)
        if obj is not None:
            objects.append(obj)
    return objects


@dataclass
class PipeSegments:
    """Index-aligned raw and parsed views of a ``||``-delimited document."""
    raw: List[str] = field(default_factory=list)
    parsed: List[Any] = field(default_factory=list)

    def records(self) -> List[dict]:
        """All JSON objects carried by the segments, in document order."""
        out = []
        for value in self.parsed:
            if isinstance(value, dict):
                out.append(value)
            elif isinstance(value, list):
                out.extend(v for v in value if isinstance(v, dict))
        return out


def _parse_segment(raw: str) -> Any:
    try:
        return json.loads(raw)
    except ValueError:
        pass

    objects = recover_objects(raw)
    if objects:
        return objects[0] if len(objects) == 1 else objects

    # Last resort: single-pipe sub-fields
    parts = [p.strip() for p in raw.split("|") if p.strip()]
    if len(parts) > 1:
        values = []
        for part in parts:
            try:
                values.append(json.loads(part))
            except ValueError:
                values.append(part)
        return values

    return raw


def split_pipe_segments(text: str) -> Optional[PipeSegments]:
    """Split a document on ``||`` and parse each segment.

    Returns None when the text is not pipe-formatted, i.e. it yields fewer
    than two non-empty segments. Every kept segment contributes exactly one
    parsed entry; unparseable segments are kept as their trimmed text.
    """
    if PIPE_DELIMITER not in text:
        return None
    raw = [s.strip() for s in text.split(PIPE_DELIMITER)]
    raw = [s for s in raw if s]
    if len(raw) < 2:
        logger.debug("Pipe split declined: %d non-empty segment(s)", len(raw))
        return None
    return PipeSegments(raw=raw, parsed=[_parse_segment(s) for s in raw])
