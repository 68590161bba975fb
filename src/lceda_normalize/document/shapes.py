"""Shape-line representation: legacy positional text or an embedded JSON object.

On the wire both kinds travel as strings in the same ``shape`` list; a JSON
object is marked with ``JSON_SHAPE_PREFIX`` (or is a bare ``{...}``).
"""
import json
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Tuple, Union

from .scan import loads_object

JSON_SHAPE_PREFIX = "__JSON__"


@dataclass(frozen=True)
class LegacyShape:
    text: str

    def to_line(self) -> str:
        return self.text


@dataclass(frozen=True)
class RawShape:
    data: Dict[str, Any]

    def to_line(self) -> str:
        return JSON_SHAPE_PREFIX + json.dumps(self.data, ensure_ascii=False, separators=(",", ":"))


ShapeLine = Union[LegacyShape, RawShape]


def parse_shape_line(line: str) -> ShapeLine:
    """Classify one wire line.

    Sentinel-prefixed and ``{``-leading lines that decode to a JSON object
    become RawShape; everything else, including such lines that fail to
    decode, stays legacy.
    """
    if line.startswith(JSON_SHAPE_PREFIX):
        obj = loads_object(line[len(JSON_SHAPE_PREFIX):])
    elif line.startswith("{"):
        obj = loads_object(line)
    else:
        obj = None
    if obj is None:
        return LegacyShape(line)
    return RawShape(obj)


def parse_shape_lines(lines: Iterable[Any]) -> List[ShapeLine]:
    """Classify every string entry of a shape list, skipping non-strings."""
    return [parse_shape_line(line) for line in lines if isinstance(line, str)]


def split_shape_lines(lines: Iterable[Any]) -> Tuple[List[str], List[Dict[str, Any]]]:
    """Partition a shape list into ``(legacy_lines, json_objects)``."""
    legacy = []
    objects = []
    for shape in parse_shape_lines(lines):
        if isinstance(shape, RawShape):
            objects.append(shape.data)
        else:
            legacy.append(shape.text)
    return legacy, objects
