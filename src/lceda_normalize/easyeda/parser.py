"""EasyEDA legacy shape string parser for footprints and symbols.

Values are kept in document units and are not shifted by the head origin.
"""
import json
import math
import re
from typing import List, Optional, Tuple

from .ee_types import (
    EE3DModel, EEArc, EECircle, EEEllipse, EEFootprint, EEHole, EEPad,
    EEPin, EEPolyline, EERectangle, EESolidRegion, EESymbol, EEText,
    EETrack, EEVia,
)


class ShapeParseError(ValueError):
    """Raised when a known shape line has unreadable numeric fields."""

    def __init__(self, shape_type: str, shape_str: str):
        preview = shape_str if len(shape_str) <= 60 else shape_str[:57] + "..."
        super().__init__(f"Malformed {shape_type} shape: {preview!r}")
        self.shape_type = shape_type


_SVG_ARC_RE = re.compile(
    r"M\s*([\d.e+-]+)[,\s]+([\d.e+-]+)\s*A\s*([\d.e+-]+)[,\s]+([\d.e+-]+)"
    r"[,\s]+([\d.e+-]+)[,\s]+([01])[,\s]+([01])[,\s]+([\d.e+-]+)[,\s]+([\d.e+-]+)"
)

_TRUE_FLAGS = ("1", "y", "true")
_FALSE_FLAGS = ("0", "n", "false")


def parse_svg_arc_path(svg_path: str):
    """Parse an SVG arc path string (M sx sy A rx ry rot large sweep ex ey).

    Returns (sx, sy, rx, ry, large_arc, sweep, ex, ey) or None if parsing fails.
    """
    match = _SVG_ARC_RE.match(svg_path)
    if not match:
        return None
    try:
        sx, sy, rx, ry = (float(match.group(i)) for i in (1, 2, 3, 4))
        ex, ey = float(match.group(8)), float(match.group(9))
    except ValueError:
        return None
    large_arc = int(match.group(6))
    sweep = int(match.group(7))
    if rx <= 0 or ry <= 0:
        return None
    return (sx, sy, rx, ry, large_arc, sweep, ex, ey)


def _find_svg_path(parts: List[str], start: int = 1) -> int:
    """Index of the SVG path field (starting with 'M') in a parts list, or -1."""
    for i in range(start, len(parts)):
        if parts[i].strip().startswith("M"):
            return i
    return -1


def _field(parts: List[str], i: int, default: str = "") -> str:
    return parts[i] if len(parts) > i else default


def _opt_float(parts: List[str], i: int, default: float = 0.0) -> float:
    value = _field(parts, i).strip()
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _flag(parts: List[str], i: int, default: bool = False) -> bool:
    value = _field(parts, i).strip().lower()
    if value in _TRUE_FLAGS:
        return True
    if value in _FALSE_FLAGS:
        return False
    return default


def _space_coords(text: str) -> List[Tuple[float, float]]:
    """Pair up a space separated coordinate run, stopping at the first bad value."""
    coords = text.strip().split()
    points = []
    for i in range(0, len(coords) - 1, 2):
        try:
            points.append((float(coords[i]), float(coords[i + 1])))
        except ValueError:
            break
    return points


def parse_footprint_shapes(shapes: List[str]) -> EEFootprint:
    """Parse footprint shape strings into an EEFootprint."""
    fp = EEFootprint()

    for shape_str in shapes:
        parts = shape_str.split("~")
        shape_type = parts[0]

        try:
            if shape_type == "PAD":
                fp.pads.append(_parse_pad(parts))
            elif shape_type == "TRACK":
                track = _parse_track(parts)
                if track:
                    fp.tracks.append(track)
            elif shape_type == "VIA":
                fp.vias.append(_parse_via(parts))
            elif shape_type == "ARC":
                arc = _parse_fp_arc(parts)
                if arc:
                    fp.arcs.append(arc)
            elif shape_type == "CIRCLE":
                fp.circles.append(_parse_circle(parts))
            elif shape_type == "HOLE":
                fp.holes.append(_parse_hole(parts))
            elif shape_type == "RECT":
                rect = _parse_fp_rect(parts)
                if rect:
                    fp.rectangles.append(rect)
            elif shape_type == "TEXT":
                text = _parse_fp_text(parts)
                if text:
                    fp.texts.append(text)
            elif shape_type == "SOLIDREGION":
                region = _parse_solid_region(parts)
                if region:
                    fp.regions.append(region)
            elif shape_type == "SVGNODE":
                model = _parse_svgnode(parts)
                if model:
                    fp.model = model
        except (ValueError, IndexError) as e:
            raise ShapeParseError(shape_type, shape_str) from e

    return fp


def parse_symbol_shapes(shapes: List[str]) -> EESymbol:
    """Parse symbol shape strings into an EESymbol."""
    sym = EESymbol()

    for shape_str in shapes:
        tag = shape_str.split("~", 1)[0]
        if tag == "P":
            # Pins use ^^ as sub-delimiter between sections
            pin = _parse_pin(shape_str)
            if pin:
                sym.pins.append(pin)
        elif tag == "R":
            rect = _parse_sym_rect(shape_str)
            if rect:
                sym.rectangles.append(rect)
        elif tag == "C":
            circle = _parse_sym_circle(shape_str)
            if circle:
                sym.circles.append(circle)
        elif tag == "E":
            shape = _parse_sym_ellipse(shape_str)
            if isinstance(shape, EECircle):
                sym.circles.append(shape)
            elif shape:
                sym.ellipses.append(shape)
        elif tag in ("PL", "PG"):
            poly = _parse_sym_polyline(shape_str)
            if poly:
                sym.polylines.append(poly)
        elif tag == "A":
            arc = _parse_sym_arc(shape_str)
            if arc:
                sym.arcs.append(arc)
        elif tag == "T":
            text = _parse_sym_text(shape_str)
            if text:
                sym.texts.append(text)

    return sym


# --- Footprint shape parsers ---

def _parse_pad(parts: List[str]) -> EEPad:
    """Parse PAD shape string."""
    # PAD~shape~x~y~sx~sy~layer~net~number~hole_radius~polygon_nodes~rotation~id~
    #     hole_length~hole_point~plated~locked
    shape = parts[1]
    x = float(parts[2])
    y = float(parts[3])
    sx = float(parts[4])
    sy = float(parts[5])
    layer = parts[6]
    hole_radius = _opt_float(parts, 9)

    polygon_points = []
    polygon_str = _field(parts, 10)
    if polygon_str and shape == "POLYGON":
        try:
            polygon_points = [float(c) for c in polygon_str.strip().split(" ") if c]
        except ValueError:
            pass

    return EEPad(
        shape=shape,
        x=x,
        y=y,
        width=sx,
        height=sy,
        layer=layer,
        number=_field(parts, 8),
        hole_radius=hole_radius,
        rotation=_opt_float(parts, 11),
        net=_field(parts, 7),
        polygon_points=polygon_points,
        hole_length=_opt_float(parts, 13),
        hole_point=_field(parts, 14),
        plated=_flag(parts, 15, hole_radius > 0),
        id=_field(parts, 12),
        locked=_flag(parts, 16),
    )


def _parse_track(parts: List[str]) -> Optional[EETrack]:
    """Parse TRACK shape string."""
    # TRACK~width~layer~[net]~points~id~locked
    width = float(parts[1])
    layer = parts[2]

    # The points field may be at index 3 or 4
    points_idx = -1
    for i in range(3, len(parts)):
        if " " in parts[i] and any(c.isdigit() for c in parts[i]):
            points_idx = i
            break
    if points_idx < 0:
        return None

    points = _space_coords(parts[points_idx])
    if len(points) < 2:
        return None

    return EETrack(
        width=width,
        layer=layer,
        points=points,
        net=parts[3] if points_idx > 3 else "",
        id=_field(parts, points_idx + 1),
        locked=_flag(parts, points_idx + 2),
    )


def _parse_via(parts: List[str]) -> EEVia:
    """Parse VIA shape string."""
    # VIA~x~y~diameter~net~radius~id~locked
    return EEVia(
        x=float(parts[1]),
        y=float(parts[2]),
        diameter=float(parts[3]),
        radius=_opt_float(parts, 5),
        net=_field(parts, 4),
        id=_field(parts, 6),
        locked=_flag(parts, 7),
    )


def _parse_fp_arc(parts: List[str]) -> Optional[EEArc]:
    """Parse footprint ARC shape string."""
    # ARC~width~layer~net~svg_path~helper_dots~id~locked
    width = float(parts[1])
    layer = parts[2]

    path_idx = _find_svg_path(parts, start=3)
    if path_idx < 0:
        return None
    svg_path = parts[path_idx].strip()
    if not parse_svg_arc_path(svg_path):
        return None

    return EEArc(
        width=width,
        layer=layer,
        path=svg_path,
        net=parts[3] if path_idx > 3 else "",
        helper_dots=_field(parts, path_idx + 1),
        id=_field(parts, path_idx + 2),
        locked=_flag(parts, path_idx + 3),
    )


def _parse_circle(parts: List[str]) -> EECircle:
    """Parse CIRCLE shape string."""
    # CIRCLE~cx~cy~radius~width~layer~id~locked
    return EECircle(
        cx=float(parts[1]),
        cy=float(parts[2]),
        radius=float(parts[3]),
        width=float(parts[4]),
        layer=parts[5],
        id=_field(parts, 6),
        locked=_flag(parts, 7),
    )


def _parse_hole(parts: List[str]) -> EEHole:
    """Parse HOLE shape string."""
    # HOLE~x~y~radius~id~locked
    return EEHole(
        x=float(parts[1]),
        y=float(parts[2]),
        radius=float(parts[3]),
        id=_field(parts, 4),
        locked=_flag(parts, 5),
    )


def _parse_fp_rect(parts: List[str]) -> EERectangle:
    """Parse footprint RECT shape string."""
    # RECT~x~y~width~height~layer~id~locked~stroke_width
    return EERectangle(
        x=float(parts[1]),
        y=float(parts[2]),
        width=float(parts[3]),
        height=float(parts[4]),
        layer=_field(parts, 5),
        id=_field(parts, 6),
        locked=_flag(parts, 7),
        stroke_width=_opt_float(parts, 8),
    )


def _parse_fp_text(parts: List[str]) -> Optional[EEText]:
    """Parse footprint TEXT shape string."""
    # TEXT~type~x~y~stroke_width~rotation~mirror~layer~net~font_size~text~
    #      text_path~display~id~locked
    text = _field(parts, 10)
    if not text:
        return None
    return EEText(
        text=text,
        x=float(parts[2]),
        y=float(parts[3]),
        stroke_width=_opt_float(parts, 4),
        rotation=_opt_float(parts, 5),
        mirror=_field(parts, 6),
        layer=_field(parts, 7),
        net=_field(parts, 8),
        font_size=_opt_float(parts, 9, 1.0),
        text_type=parts[1],
        text_path=_field(parts, 11),
        displayed=_field(parts, 12) != "none",
        id=_field(parts, 13),
        locked=_flag(parts, 14),
    )


def _parse_solid_region(parts: List[str]) -> Optional[EESolidRegion]:
    """Parse SOLIDREGION shape string."""
    # SOLIDREGION~layer~[net]~svg_path~type~...
    layer = parts[1]

    svg_path = ""
    region_type = "solid"
    for i in range(2, len(parts)):
        p = parts[i].strip()
        if p.startswith("M ") or p.startswith("M\t"):
            svg_path = p
        elif p in ("npth", "solid", "cutout"):
            region_type = p

    if not svg_path:
        return None

    # Paths with arc commands are circles drawn as two half arcs
    if " A " in svg_path or "\tA " in svg_path:
        points = _parse_svg_path_with_arcs(svg_path)
    else:
        points = _parse_svg_polygon(svg_path)
    if len(points) < 3:
        return None
    return EESolidRegion(layer=layer, points=points, region_type=region_type)


def _parse_svg_polygon(svg_path: str) -> List[Tuple[float, float]]:
    """Parse SVG path with M and L commands into point list."""
    points = []
    path = svg_path.replace("Z", "").replace("z", "").strip()
    tokens = re.split(r"[ML]\s*", path)
    for token in tokens:
        coords = token.strip().split()
        if len(coords) >= 2:
            try:
                points.append((float(coords[0]), float(coords[1])))
            except ValueError:
                continue
    return points


def _parse_svg_path_with_arcs(svg_path: str) -> List[Tuple[float, float]]:
    """Approximate a circle drawn with two 180-degree arcs as a 16-gon."""
    path = svg_path.replace("Z", "").replace("z", "").strip()

    m_match = re.match(r"M\s*([\d.e+-]+)\s+([\d.e+-]+)", path)
    if not m_match:
        return []
    start_x = float(m_match.group(1))
    start_y = float(m_match.group(2))

    arc_pattern = r"A\s*([\d.e+-]+)\s+([\d.e+-]+)\s+([\d.e+-]+)\s+([01])\s+([01])\s+([\d.e+-]+)\s+([\d.e+-]+)"
    arcs = re.findall(arc_pattern, path)
    if not arcs:
        return []

    rx = float(arcs[0][0])
    ry = float(arcs[0][1])
    end1_x = float(arcs[0][5])
    end1_y = float(arcs[0][6])

    # Center is the midpoint between start and the first arc end
    cx = (start_x + end1_x) / 2
    cy = (start_y + end1_y) / 2
    radius = (rx + ry) / 2

    num_segments = 16
    points = []
    for i in range(num_segments):
        angle = 2 * math.pi * i / num_segments
        points.append((cx + radius * math.cos(angle), cy + radius * math.sin(angle)))
    return points


def _parse_svgnode(parts: List[str]) -> Optional[EE3DModel]:
    """Parse SVGNODE shape string for 3D model info."""
    # SVGNODE~{json}
    json_str = "~".join(parts[1:])  # JSON may itself contain ~
    try:
        data = json.loads(json_str)
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None

    attrs = data.get("attrs", {})
    if not isinstance(attrs, dict):
        return None
    uuid = attrs.get("uuid", "")
    if not isinstance(uuid, str) or not uuid:
        return None

    c_origin = str(attrs.get("c_origin", "0,0")).split(",")
    origin_x = float(c_origin[0]) if len(c_origin) > 0 else 0
    origin_y = float(c_origin[1]) if len(c_origin) > 1 else 0

    z = float(str(attrs.get("z", "0")))

    c_rotation = str(attrs.get("c_rotation", "0,0,0")).split(",")
    rot = tuple(float(a) for a in c_rotation[:3]) if len(c_rotation) >= 3 else (0, 0, 0)

    return EE3DModel(uuid=uuid, origin_x=origin_x, origin_y=origin_y, z=z, rotation=rot)


# --- Symbol shape parsers ---

def _parse_pin(shape_str: str) -> Optional[EEPin]:
    """Parse pin shape string."""
    # settings ^^ dot anchor ^^ path ^^ name ^^ number ^^ dot ^^ clock
    sections = shape_str.split("^^")
    main_parts = sections[0].split("~")

    # P~show~elec_type~number~x~y~rotation~id~locked
    try:
        elec_code = main_parts[2]
        number = main_parts[3]
        x = float(main_parts[4])
        y = float(main_parts[5])
        rotation = float(main_parts[6])
    except (ValueError, IndexError):
        return None

    # Path is like "M360,290h10" or "M 0 0 v 100"
    length = 10.0
    if len(sections) > 2:
        match = re.search(r"h\s*([-\d.]+)", sections[2]) or re.search(r"v\s*([-\d.]+)", sections[2])
        if match:
            try:
                length = abs(float(match.group(1)))
            except ValueError:
                return None

    # Name section: visible~x~y~rotation~text~...
    name = ""
    name_visible = True
    if len(sections) > 3:
        name_parts = sections[3].split("~")
        if len(name_parts) > 4:
            name = name_parts[4]
        if name_parts[0] == "0":
            name_visible = False

    number_visible = True
    if len(sections) > 4 and sections[4].split("~")[0] == "0":
        number_visible = False

    has_dot = len(sections) > 5 and sections[5].split("~")[0] == "1"
    has_clock = len(sections) > 6 and sections[6].split("~")[0] == "1"

    return EEPin(
        number=number,
        name=name,
        x=x,
        y=y,
        rotation=rotation,
        length=length,
        electrical_type=elec_code or "0",
        name_visible=name_visible,
        number_visible=number_visible,
        has_dot=has_dot,
        has_clock=has_clock,
        id=_field(main_parts, 7),
        locked=_flag(main_parts, 8),
    )


def _parse_sym_rect(shape_str: str) -> Optional[EERectangle]:
    """Parse symbol rectangle."""
    parts = shape_str.split("~")
    # R~x~y~rx~ry~width~height~stroke~stroke_width~style~fill~id~locked (12+ fields)
    # or R~x~y~width~height~... (shorter)
    try:
        x = float(parts[1])
        y = float(parts[2])
        if len(parts) >= 12:
            w = float(parts[5])
            h = float(parts[6])
        else:
            w = float(parts[3])
            h = float(parts[4])
    except (ValueError, IndexError):
        return None

    if len(parts) < 12:
        return EERectangle(x=x, y=y, width=w, height=h)

    return EERectangle(
        x=x,
        y=y,
        width=w,
        height=h,
        rx=_opt_float(parts, 3),
        ry=_opt_float(parts, 4),
        stroke_color=parts[7] or "#000000",
        stroke_width=_opt_float(parts, 8),
        fill_color=parts[10] or "none",
        id=parts[11],
        locked=_flag(parts, 12),
    )


def _parse_sym_circle(shape_str: str) -> Optional[EECircle]:
    """Parse symbol circle."""
    parts = shape_str.split("~")
    # C~cx~cy~radius~stroke_color~stroke_width~style~fill_color~id~locked
    try:
        cx = float(parts[1])
        cy = float(parts[2])
        radius = float(parts[3])
    except (ValueError, IndexError):
        return None

    return EECircle(
        cx=cx,
        cy=cy,
        radius=radius,
        stroke_color=_field(parts, 4) or "#000000",
        width=_opt_float(parts, 5, 1.0),
        fill_color=_field(parts, 7) or "none",
        id=_field(parts, 8),
        locked=_flag(parts, 9),
    )


def _parse_sym_ellipse(shape_str: str):
    """Parse symbol ellipse; equal radii come back as an EECircle."""
    parts = shape_str.split("~")
    # E~cx~cy~rx~ry~stroke_color~stroke_width~style~fill_color~id~locked
    try:
        cx = float(parts[1])
        cy = float(parts[2])
        rx = float(parts[3])
    except (ValueError, IndexError):
        return None
    ry = _opt_float(parts, 4, rx)

    stroke_color = _field(parts, 5) or "#000000"
    width = _opt_float(parts, 6, 1.0)
    fill_color = _field(parts, 8) or "none"
    if rx == ry:
        return EECircle(
            cx=cx, cy=cy, radius=rx, width=width,
            stroke_color=stroke_color, fill_color=fill_color,
            id=_field(parts, 9), locked=_flag(parts, 10),
        )
    return EEEllipse(
        cx=cx, cy=cy, rx=rx, ry=ry, width=width,
        stroke_color=stroke_color, fill_color=fill_color,
        id=_field(parts, 9), locked=_flag(parts, 10),
    )


def _parse_sym_polyline(shape_str: str) -> Optional[EEPolyline]:
    """Parse symbol polyline/polygon."""
    parts = shape_str.split("~")
    is_polygon = parts[0] == "PG"

    # Format 1 (space-separated in one field): PL~13 -8 13 8~#880000~1~~none~id~0
    # Format 2 (tilde-separated): PL~100~100~200~200~0~3
    if len(parts) > 1 and " " in parts[1]:
        points = _space_coords(parts[1])
        if len(points) < 2:
            return None
        fill_color = _field(parts, 5).strip().lower()
        return EEPolyline(
            points=points,
            stroke_width=_opt_float(parts, 3),
            closed=is_polygon,
            fill=is_polygon or (fill_color.startswith("#")),
            stroke_color=_field(parts, 2) or "#000000",
            id=_field(parts, 6),
            locked=_flag(parts, 7),
        )

    # Tilde-separated: last fields are stroke/layer
    points = []
    i = 1
    while i < len(parts) - 2:
        try:
            points.append((float(parts[i]), float(parts[i + 1])))
            i += 2
        except (ValueError, IndexError):
            break

    if len(points) < 2:
        return None

    return EEPolyline(points=points, closed=is_polygon, fill=is_polygon)


def _parse_sym_arc(shape_str: str) -> Optional[EEArc]:
    """Parse symbol arc."""
    parts = shape_str.split("~")
    # A~svg_path~helper_dots~stroke_color~stroke_width~style~fill~id~locked
    path_idx = _find_svg_path(parts, start=1)
    if path_idx < 0:
        return None
    svg_path = parts[path_idx].strip()
    if not parse_svg_arc_path(svg_path):
        return None

    return EEArc(
        width=_opt_float(parts, path_idx + 3, 1.0),
        layer="",
        path=svg_path,
        helper_dots=_field(parts, path_idx + 1),
        id=_field(parts, path_idx + 6),
        locked=_flag(parts, path_idx + 7),
    )


def _parse_sym_text(shape_str: str) -> Optional[EEText]:
    """Parse symbol text."""
    parts = shape_str.split("~")
    # T~align~x~y~rotation~color~font~font_size~weight~style~baseline~
    #   text_type~text~visible~anchor~id~locked
    text = _field(parts, 12)
    if not text:
        return None
    try:
        x = float(parts[2])
        y = float(parts[3])
    except (ValueError, IndexError):
        return None

    return EEText(
        text=text,
        x=x,
        y=y,
        rotation=_opt_float(parts, 4),
        color=_field(parts, 5) or "#000000",
        font_size=_opt_float(parts, 7, 7.0),
        text_type=_field(parts, 11),
        align=parts[1] or "L",
        displayed=_field(parts, 13) != "0",
        id=_field(parts, 15),
        locked=_flag(parts, 16),
    )
