"""Merge embedded JSON shape objects into the legacy parse result.

Shape lists may mix legacy positional lines with JSON objects (sentinel
prefixed or bare). Legacy lines go through ``parser``; each JSON object is
then classified by which fields it carries, since it has no reliable type
tag, and appended to the matching primitive lists.

Symbol hints are all evaluated: one object may add a text, a circle, a
rectangle and a pin. Footprint hints are evaluated in order and the first
match wins; the order decides how ambiguous objects are classified and must
not change.
"""
import logging
from typing import Any, Callable, Dict, Iterable, List, Tuple

from ..document.coerce import is_number, to_integer, to_number, to_string_value
from ..document.head import FOOTPRINT, SYMBOL
from ..document.shapes import split_shape_lines
from .ee_types import (
    EEArc, EECircle, EEFootprint, EEHole, EEPad, EEPin, EERectangle,
    EESymbol, EEText, EETrack, EEVia,
)
from .parser import parse_footprint_shapes, parse_symbol_shapes

logger = logging.getLogger(__name__)

Hint = Tuple[Callable[[Dict[str, Any]], bool], Callable[[Dict[str, Any], Any], None]]


def _numeric(obj: Dict[str, Any], *keys: str) -> bool:
    return all(is_number(obj.get(k)) for k in keys)


def _type_of(obj: Dict[str, Any]) -> str:
    value = obj.get("type")
    return "" if value is None else str(value).upper()


def _layer(obj: Dict[str, Any], default: int) -> str:
    return str(to_integer(obj.get("layerId"), default))


def _points(value: str):
    coords = value.split()
    points = []
    for i in range(0, len(coords) - 1, 2):
        try:
            points.append((float(coords[i]), float(coords[i + 1])))
        except ValueError:
            break
    return points


# --- Symbol domain ---

def _sym_title(obj):
    return to_string_value(obj.get("title")) or to_string_value(obj.get("text")) or to_string_value(obj.get("name"))


def _add_sym_text(obj, sym: EESymbol) -> None:
    sym.texts.append(EEText(
        text=_sym_title(obj),
        x=to_number(obj.get("x"), to_number(obj.get("centerX"))),
        y=to_number(obj.get("y"), to_number(obj.get("centerY"))),
        rotation=to_number(obj.get("rotation")),
        font_size=to_number(obj.get("fontSize"), 7),
        color=to_string_value(obj.get("color")) or "#000000",
        text_type=to_string_value(obj.get("type")) or "",
        id=to_string_value(obj.get("id")) or "",
    ))


def _add_sym_circle(obj, sym: EESymbol) -> None:
    sym.circles.append(EECircle(
        cx=obj["centerX"],
        cy=obj["centerY"],
        radius=obj["radius"],
        width=to_number(obj.get("strokeWidth"), 1),
        stroke_color=to_string_value(obj.get("strokeColor")) or "#000000",
        fill_color=to_string_value(obj.get("fillColor")) or "none",
    ))


def _add_sym_rect(obj, sym: EESymbol) -> None:
    sym.rectangles.append(EERectangle(
        x=obj["x"],
        y=obj["y"],
        width=obj["width"],
        height=obj["height"],
        rx=to_number(obj.get("radiusX")),
        ry=to_number(obj.get("radiusY")),
        stroke_color=to_string_value(obj.get("strokeColor")) or "#000000",
        stroke_width=to_number(obj.get("strokeWidth"), 1),
        fill_color=to_string_value(obj.get("fillColor")) or "none",
    ))


def _is_pin(obj) -> bool:
    return (
        _type_of(obj) in ("PART", "PIN")
        or isinstance(obj.get("pinNumber"), str)
        or isinstance(obj.get("number"), str)
        or _numeric(obj, "dotX1", "dotX2")
    )


def _add_sym_pin(obj, sym: EESymbol) -> None:
    x = to_number(obj.get("x"), to_number(obj.get("dotX1"), to_number(obj.get("centerX"))))
    y = to_number(obj.get("y"), to_number(obj.get("dotY1"), to_number(obj.get("centerY"))))
    number = (
        to_string_value(obj.get("pinNumber"))
        or to_string_value(obj.get("number"))
        or str(len(sym.pins) + 1)
    )
    if any(p.number == number and p.x == x and p.y == y for p in sym.pins):
        return
    sym.pins.append(EEPin(
        number=number,
        name=to_string_value(obj.get("name")) or to_string_value(obj.get("title")) or number,
        x=x,
        y=y,
        rotation=to_number(obj.get("rotation")),
        length=max(abs(to_number(obj.get("dotX2")) - to_number(obj.get("dotX1"))), 100),
        electrical_type="0",
        has_dot=bool(obj.get("hasDot") or obj.get("inverted")),
        has_clock=bool(obj.get("hasClock") or obj.get("clock")),
    ))


# Every matching hint contributes
SYMBOL_HINTS: List[Hint] = [
    (lambda o: bool(_sym_title(o)), _add_sym_text),
    (lambda o: _numeric(o, "centerX", "centerY", "radius"), _add_sym_circle),
    (lambda o: _numeric(o, "x", "y", "width", "height"), _add_sym_rect),
    (_is_pin, _add_sym_pin),
]


# --- Footprint domain ---

def _add_fp_pad(obj, fp: EEFootprint) -> None:
    hole_radius = to_number(obj.get("holeRadius"))
    plated = obj.get("isPlated")
    fp.pads.append(EEPad(
        shape=to_string_value(obj.get("shape")) or "RECT",
        x=to_number(obj.get("centerX")),
        y=to_number(obj.get("centerY")),
        width=to_number(obj.get("width"), 1),
        height=to_number(obj.get("height"), 1),
        layer=_layer(obj, 1),
        number=(
            to_string_value(obj.get("number"))
            or to_string_value(obj.get("padNumber"))
            or str(len(fp.pads) + 1)
        ),
        hole_radius=hole_radius,
        rotation=to_number(obj.get("rotation")),
        net=to_string_value(obj.get("net")) or "",
        polygon_points=[v for pair in _points(to_string_value(obj.get("points")) or "") for v in pair],
        hole_length=to_number(obj.get("holeLength")),
        hole_point=to_string_value(obj.get("holePoint")) or "",
        plated=bool(plated) if plated is not None else hole_radius > 0,
        id=to_string_value(obj.get("id")) or "",
        locked=bool(obj.get("isLocked")),
    ))


def _add_fp_track(obj, fp: EEFootprint) -> None:
    fp.tracks.append(EETrack(
        width=to_number(obj.get("strokeWidth"), 0.1),
        layer=_layer(obj, 1),
        points=_points(obj["points"]),
        net=to_string_value(obj.get("net")) or "",
        id=to_string_value(obj.get("id")) or "",
        locked=bool(obj.get("isLocked")),
    ))


def _add_fp_hole(obj, fp: EEFootprint) -> None:
    fp.holes.append(EEHole(
        x=obj["centerX"],
        y=obj["centerY"],
        radius=to_number(obj.get("radius"), 0.1),
        id=to_string_value(obj.get("id")) or "",
        locked=bool(obj.get("isLocked")),
    ))


def _add_fp_via(obj, fp: EEFootprint) -> None:
    fp.vias.append(EEVia(
        x=obj["centerX"],
        y=obj["centerY"],
        diameter=obj["diameter"],
        radius=to_number(obj.get("radius"), obj["diameter"] / 2),
        net=to_string_value(obj.get("net")) or "",
        id=to_string_value(obj.get("id")) or "",
        locked=bool(obj.get("isLocked")),
    ))


def _add_fp_circle(obj, fp: EEFootprint) -> None:
    fp.circles.append(EECircle(
        cx=obj["centerX"],
        cy=obj["centerY"],
        radius=obj["radius"],
        width=to_number(obj.get("strokeWidth"), 0.1),
        layer=_layer(obj, 21),
        id=to_string_value(obj.get("id")) or "",
        locked=bool(obj.get("isLocked")),
    ))


def _add_fp_arc(obj, fp: EEFootprint) -> None:
    fp.arcs.append(EEArc(
        width=to_number(obj.get("strokeWidth"), 0.1),
        layer=_layer(obj, 21),
        path=obj["path"],
        net=to_string_value(obj.get("net")) or "",
        helper_dots=to_string_value(obj.get("helperDots")) or "",
        id=to_string_value(obj.get("id")) or "",
        locked=bool(obj.get("isLocked")),
    ))


def _add_fp_rect(obj, fp: EEFootprint) -> None:
    fp.rectangles.append(EERectangle(
        x=obj["x"],
        y=obj["y"],
        width=obj["width"],
        height=obj["height"],
        stroke_width=to_number(obj.get("strokeWidth"), 0.1),
        layer=_layer(obj, 21),
        id=to_string_value(obj.get("id")) or "",
        locked=bool(obj.get("isLocked")),
    ))


def _add_fp_text(obj, fp: EEFootprint) -> None:
    displayed = obj.get("isDisplayed")
    fp.texts.append(EEText(
        text=to_string_value(obj.get("text")) or to_string_value(obj.get("title")),
        x=to_number(obj.get("x"), to_number(obj.get("centerX"))),
        y=to_number(obj.get("y"), to_number(obj.get("centerY"))),
        rotation=to_number(obj.get("rotation")),
        font_size=to_number(obj.get("fontSize"), 1),
        text_type=to_string_value(obj.get("textType")) or "",
        layer=_layer(obj, 21),
        stroke_width=to_number(obj.get("strokeWidth"), 0.1),
        mirror=to_string_value(obj.get("mirror")) or "",
        net=to_string_value(obj.get("net")) or "",
        text_path=to_string_value(obj.get("textPath")) or "",
        displayed=bool(displayed) if displayed is not None else True,
        id=to_string_value(obj.get("id")) or "",
        locked=bool(obj.get("isLocked")),
    ))


# First match wins, in this order
FOOTPRINT_HINTS: List[Hint] = [
    (lambda o: _type_of(o) == "PAD" or _numeric(o, "centerX", "centerY", "width", "height"), _add_fp_pad),
    (lambda o: _type_of(o) == "TRACK" and isinstance(o.get("points"), str), _add_fp_track),
    (lambda o: _type_of(o) == "HOLE" and _numeric(o, "centerX", "centerY"), _add_fp_hole),
    (lambda o: _numeric(o, "centerX", "centerY", "diameter"), _add_fp_via),
    (lambda o: _numeric(o, "centerX", "centerY", "radius"), _add_fp_circle),
    (lambda o: isinstance(o.get("path"), str) and bool(o["path"].strip()), _add_fp_arc),
    (lambda o: _numeric(o, "x", "y", "width", "height"), _add_fp_rect),
    (lambda o: bool(to_string_value(o.get("text")) or to_string_value(o.get("title"))), _add_fp_text),
]


def merge_symbol_shapes(shapes: Iterable[Any]) -> EESymbol:
    """Parse a mixed symbol shape list into one EESymbol."""
    legacy, objects = split_shape_lines(shapes)
    sym = parse_symbol_shapes(legacy)
    for obj in objects:
        for matches, add in SYMBOL_HINTS:
            if matches(obj):
                add(obj, sym)
    if objects:
        logger.debug("Merged %d JSON symbol shapes into %d legacy lines", len(objects), len(legacy))
    return sym


def merge_footprint_shapes(shapes: Iterable[Any]) -> EEFootprint:
    """Parse a mixed footprint shape list into one EEFootprint."""
    legacy, objects = split_shape_lines(shapes)
    fp = parse_footprint_shapes(legacy)
    for obj in objects:
        for matches, add in FOOTPRINT_HINTS:
            if matches(obj):
                add(obj, fp)
                break
    if objects:
        logger.debug("Merged %d JSON footprint shapes into %d legacy lines", len(objects), len(legacy))
    return fp


def merge_shapes(shapes: Iterable[Any], domain: str):
    """Dispatch to the symbol or footprint merger."""
    if domain == SYMBOL:
        return merge_symbol_shapes(shapes)
    if domain == FOOTPRINT:
        return merge_footprint_shapes(shapes)
    raise ValueError(f"Unknown shape domain: {domain!r}")
