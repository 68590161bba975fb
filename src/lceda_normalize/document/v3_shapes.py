"""Synthesize legacy shape lines from V3 records.

The lines produced here follow the legacy EasyEDA positional grammar closely
enough for the legacy parser in ``easyeda.parser`` to read them back. They
are not guaranteed to be byte-identical to what the editor itself writes.
"""
from typing import Dict, List, Optional

from .coerce import (
    fmt_flag, fmt_num, is_number, is_record, to_boolean, to_integer,
    to_number, to_string_value,
)

EPSILON = 1e-6
PAD_SHAPES = ("ELLIPSE", "RECT", "OVAL", "POLYGON")


def sanitize_shape_field(value: str) -> str:
    """Strip field/section delimiters out of free text."""
    return value.replace("^^", "_").replace("~", "_").replace("\r\n", " ").replace("\n", " ").strip()


def _stroke_color(value) -> str:
    raw = "" if value is None else str(value).strip()
    return raw or "#000000"


def _fill_color(value) -> str:
    raw = "" if value is None else str(value).strip()
    return raw or "none"


def format_points(points) -> Optional[str]:
    """Flatten a V3 points field into ``"x1 y1 x2 y2 ..."``.

    Accepts flat numeric lists and lists of ``{x, y}`` or ``{centerX, centerY}``
    objects. Returns None if fewer than two coordinate pairs are found.
    """
    if not isinstance(points, list):
        return None
    values = []
    for item in points:
        if is_number(item):
            values.append(item)
        elif is_record(item):
            if is_number(item.get("x")) and is_number(item.get("y")):
                values.extend((item["x"], item["y"]))
            elif is_number(item.get("centerX")) and is_number(item.get("centerY")):
                values.extend((item["centerX"], item["centerY"]))
    if len(values) < 4:
        return None
    return " ".join(fmt_num(v) for v in values)


def _collect_pin_attributes(records) -> Dict[str, Dict[str, str]]:
    """Map parent id -> {KEY: value} from every ATTR record."""
    attrs_by_parent = {}
    for r in records:
        if r.outer.type != "ATTR":
            continue
        parent_id = to_string_value(r.inner.get("parentId")) or ""
        key = (to_string_value(r.inner.get("key")) or "").upper()
        if not parent_id or not key:
            continue
        value = to_string_value(r.inner.get("value")) or ""
        attrs_by_parent.setdefault(parent_id, {})[key] = value
    return attrs_by_parent


def _styled_tail(inner, record_id: str) -> str:
    """Common ``stroke~width~style~fill~id~locked`` suffix of symbol graphics."""
    return "~".join([
        _stroke_color(inner.get("strokeColor")),
        fmt_num(to_number(inner.get("strokeWidth"), 1)),
        "",
        _fill_color(inner.get("fillColor")),
        record_id,
        fmt_flag(to_boolean(inner.get("locked"), False)),
    ])


def _pin_line(inner, record_id: str, attrs: Dict[str, str], index: int) -> str:
    pin_name = sanitize_shape_field(attrs.get("NAME", ""))
    pin_number = sanitize_shape_field(attrs.get("NUMBER", ""))

    x = to_number(inner.get("x"), 0)
    y = to_number(inner.get("y"), 0)
    rotation = to_integer(inner.get("rotation"), 0)
    length = to_number(inner.get("length"), 100)
    locked = to_boolean(inner.get("locked"), False)
    pin_shape = (to_string_value(inner.get("pinShape")) or "NONE").upper()

    has_dot = "INVERTED" in pin_shape
    has_clock = "CLOCK" in pin_shape

    if rotation in (90, 270):
        path = f"M 0 0 v {fmt_num(length)}"
    else:
        path = f"M 0 0 h {fmt_num(length)}"

    settings = "~".join([
        "P", "1", "0", pin_number or str(index),
        fmt_num(x), fmt_num(y), str(rotation), record_id, fmt_flag(locked),
    ])
    name_data = f"1~0~0~0~{pin_name or pin_number}~7"
    num_data = f"1~0~0~0~{pin_number}~7"
    dot_data = f"{fmt_flag(has_dot)}~0~0"
    clock_data = f"{fmt_flag(has_clock)}~"
    return "^^".join([settings, "", path, name_data, num_data, dot_data, clock_data])


def _rect_line(inner, record_id: str) -> str:
    x1 = to_number(inner.get("dotX1"), to_number(inner.get("x"), 0))
    y1 = to_number(inner.get("dotY1"), to_number(inner.get("y"), 0))
    x2 = to_number(inner.get("dotX2"), x1)
    y2 = to_number(inner.get("dotY2"), y1)
    fields = [
        "R",
        fmt_num(min(x1, x2)),
        fmt_num(min(y1, y2)),
        fmt_num(to_number(inner.get("radiusX"), 0)),
        fmt_num(to_number(inner.get("radiusY"), 0)),
        fmt_num(abs(x2 - x1)),
        fmt_num(abs(y2 - y1)),
    ]
    return "~".join(fields) + "~" + _styled_tail(inner, record_id)


def _circle_line(inner, record_id: str) -> str:
    fields = [
        "C",
        fmt_num(to_number(inner.get("centerX"), 0)),
        fmt_num(to_number(inner.get("centerY"), 0)),
        fmt_num(to_number(inner.get("radius"), 0)),
    ]
    return "~".join(fields) + "~" + _styled_tail(inner, record_id)


def _ellipse_line(inner, record_id: str) -> str:
    fields = [
        "E",
        fmt_num(to_number(inner.get("centerX"), 0)),
        fmt_num(to_number(inner.get("centerY"), 0)),
        fmt_num(to_number(inner.get("radiusX"), 0)),
        fmt_num(to_number(inner.get("radiusY"), 0)),
    ]
    return "~".join(fields) + "~" + _styled_tail(inner, record_id)


def _line_as_polyline(inner, record_id: str) -> str:
    points = " ".join(fmt_num(to_number(inner.get(k), 0)) for k in ("startX", "startY", "endX", "endY"))
    return f"PL~{points}~" + _styled_tail(inner, record_id)


def _text_line(inner, record_id: str) -> Optional[str]:
    text = sanitize_shape_field(to_string_value(inner.get("text")) or to_string_value(inner.get("title")) or "")
    if not text:
        return None
    align_enum = (to_string_value(inner.get("align")) or to_string_value(inner.get("hAlign")) or "").upper()
    if align_enum.startswith("RIGHT"):
        align = "R"
    elif align_enum.startswith("CENTER"):
        align = "C"
    else:
        align = "L"
    text_type = sanitize_shape_field(to_string_value(inner.get("textType")) or "comment")
    fields = [
        "T",
        align,
        fmt_num(to_number(inner.get("x"), 0)),
        fmt_num(to_number(inner.get("y"), 0)),
        fmt_num(to_number(inner.get("rotation"), 0)),
        _stroke_color(inner.get("color")),
        "",
        fmt_num(to_number(inner.get("fontSize"), 7)),
        "",
        "",
        "",
        text_type,
        text,
        "1",
        "start",
        record_id,
        fmt_flag(to_boolean(inner.get("locked"), False)),
    ]
    return "~".join(fields)


def build_symbol_shapes(records) -> List[str]:
    """Legacy symbol shape lines for PIN/RECT/CIRCLE/ELLIPSE/LINE/POLY/TEXT records."""
    attrs_by_parent = _collect_pin_attributes(records)

    shapes = []
    for r in records:
        kind = r.outer.type
        inner = r.inner
        record_id = r.outer.id or ""

        if kind == "PIN":
            if not to_boolean(inner.get("display"), True):
                continue
            attrs = attrs_by_parent.get(record_id, {}) if record_id else {}
            shapes.append(_pin_line(inner, record_id, attrs, len(shapes) + 1))
        elif kind == "RECT":
            shapes.append(_rect_line(inner, record_id))
        elif kind == "CIRCLE":
            shapes.append(_circle_line(inner, record_id))
        elif kind == "ELLIPSE":
            shapes.append(_ellipse_line(inner, record_id))
        elif kind == "LINE":
            shapes.append(_line_as_polyline(inner, record_id))
        elif kind == "POLY":
            points = format_points(inner.get("points"))
            if points:
                shapes.append(f"PG~{points}~" + _styled_tail(inner, record_id))
        elif kind == "TEXT":
            line = _text_line(inner, record_id)
            if line:
                shapes.append(line)

    return shapes


# --- Footprint domain ---

def _polygon_pad_points(path) -> List[float]:
    """Consecutive numeric pairs of a pad outline path; other tokens are skipped."""
    if not isinstance(path, list):
        return []
    values = []
    i = 0
    while i < len(path) - 1:
        a, b = path[i], path[i + 1]
        if is_number(a) and is_number(b):
            values.extend((a, b))
            i += 2
        else:
            i += 1
    return values


def _hole_geometry(hole):
    """Return ``(hole_radius, hole_length)``; a slot has a non-zero length."""
    if not is_record(hole):
        return 0, 0
    hole_w = to_number(hole.get("width"), 0)
    hole_h = to_number(hole.get("height"), 0)
    if hole_w > 0 and hole_h > 0:
        radius = min(hole_w, hole_h) / 2
        length = max(hole_w, hole_h) if abs(hole_w - hole_h) > EPSILON else 0
        return radius, length
    return 0, 0


def _pad_line(inner, record_id: str) -> str:
    num = sanitize_shape_field(to_string_value(inner.get("num")) or "")
    net_name = sanitize_shape_field(to_string_value(inner.get("netName")) or "")
    pad_def = inner.get("defaultPad") if is_record(inner.get("defaultPad")) else {}

    shape = (to_string_value(pad_def.get("padType")) or "RECT").upper()
    width = to_number(pad_def.get("width"), to_number(inner.get("width"), 0))
    height = to_number(pad_def.get("height"), to_number(inner.get("height"), 0))
    points = ""

    if shape == "POLYGON":
        coords = _polygon_pad_points(pad_def.get("path"))
        if len(coords) >= 6:
            points = " ".join(fmt_num(c) for c in coords)
            xs = coords[0::2]
            ys = coords[1::2]
            width = max(width, max(xs) - min(xs))
            height = max(height, max(ys) - min(ys))
        else:
            shape = "RECT"

    if shape == "ELLIPSE" and width > 0 and height > 0 and abs(width - height) > EPSILON:
        shape = "OVAL"
    if shape not in PAD_SHAPES:
        shape = "RECT"

    hole_radius, hole_length = _hole_geometry(inner.get("hole"))
    plated = to_boolean(inner.get("plated"), hole_radius > 0)

    return "~".join([
        "PAD",
        shape,
        fmt_num(to_number(inner.get("centerX"), 0)),
        fmt_num(to_number(inner.get("centerY"), 0)),
        fmt_num(width),
        fmt_num(height),
        str(to_integer(inner.get("layerId"), 1)),
        net_name,
        num or record_id,
        fmt_num(hole_radius),
        points,
        fmt_num(to_number(inner.get("padAngle"), 0)),
        record_id,
        fmt_num(hole_length),
        "",
        fmt_flag(plated),
        fmt_flag(to_boolean(inner.get("locked"), False)),
    ])


def _track_line(inner, record_id: str) -> str:
    width = to_number(inner.get("width"), to_number(inner.get("strokeWidth"), 0.1))
    points = " ".join(fmt_num(to_number(inner.get(k), 0)) for k in ("startX", "startY", "endX", "endY"))
    return "~".join([
        "TRACK",
        fmt_num(width),
        str(to_integer(inner.get("layerId"), 21)),
        sanitize_shape_field(to_string_value(inner.get("netName")) or ""),
        points,
        record_id,
        fmt_flag(to_boolean(inner.get("locked"), False)),
    ])


def via_hole_radius(hole_diameter: float, via_diameter: float) -> float:
    """Hole radius of a via: half the drill, else a quarter of the outer diameter."""
    if hole_diameter > 0:
        return hole_diameter / 2
    if via_diameter > 0:
        return via_diameter / 4
    return 0


def _via_line(inner, record_id: str) -> str:
    via_diameter = to_number(inner.get("viaDiameter"), to_number(inner.get("diameter"), 0))
    radius = via_hole_radius(to_number(inner.get("holeDiameter"), 0), via_diameter)
    return "~".join([
        "VIA",
        fmt_num(to_number(inner.get("centerX"), 0)),
        fmt_num(to_number(inner.get("centerY"), 0)),
        fmt_num(via_diameter),
        sanitize_shape_field(to_string_value(inner.get("netName")) or ""),
        fmt_num(radius),
        record_id,
        fmt_flag(to_boolean(inner.get("locked"), False)),
    ])


def build_footprint_shapes(records) -> List[str]:
    """Legacy footprint shape lines for PAD/LINE/VIA records; other types are ignored."""
    shapes = []
    for r in records:
        record_id = r.outer.id or ""
        if r.outer.type == "PAD":
            shapes.append(_pad_line(r.inner, record_id))
        elif r.outer.type == "LINE":
            shapes.append(_track_line(r.inner, record_id))
        elif r.outer.type == "VIA":
            shapes.append(_via_line(r.inner, record_id))
    return shapes
