"""Dataclass types for parsed EasyEDA primitives.

Coordinates and sizes stay in document units; converting them is the job of
the output writers.
"""
from dataclasses import dataclass, field
from typing import List, Optional, Tuple


@dataclass
class EEPad:
    shape: str  # "RECT", "OVAL", "ELLIPSE", "POLYGON"
    x: float
    y: float
    width: float
    height: float
    layer: str  # "1"=top copper, "2"=bottom copper, "11"=multilayer
    number: str
    hole_radius: float = 0.0  # 0 for SMD
    rotation: float = 0.0
    net: str = ""
    polygon_points: List[float] = field(default_factory=list)
    hole_length: float = 0.0  # non-zero for slotted holes
    hole_point: str = ""
    plated: bool = False
    id: str = ""
    locked: bool = False


@dataclass
class EETrack:
    width: float
    layer: str
    points: List[Tuple[float, float]]
    net: str = ""
    id: str = ""
    locked: bool = False


@dataclass
class EEVia:
    x: float
    y: float
    diameter: float
    radius: float  # hole radius
    net: str = ""
    id: str = ""
    locked: bool = False


@dataclass
class EEArc:
    width: float
    layer: str
    path: str  # SVG "M sx sy A rx ry rot large sweep ex ey"
    net: str = ""
    helper_dots: str = ""
    id: str = ""
    locked: bool = False


@dataclass
class EECircle:
    cx: float
    cy: float
    radius: float
    width: float = 1.0
    layer: str = ""
    stroke_color: str = "#000000"
    fill_color: str = "none"
    id: str = ""
    locked: bool = False

    @property
    def filled(self) -> bool:
        fill = self.fill_color.strip().lower()
        return fill.startswith("#") and fill != "none"


@dataclass
class EEEllipse:
    cx: float
    cy: float
    rx: float
    ry: float
    width: float = 1.0
    stroke_color: str = "#000000"
    fill_color: str = "none"
    id: str = ""
    locked: bool = False


@dataclass
class EERectangle:
    x: float
    y: float
    width: float
    height: float
    stroke_width: float = 0.0
    rx: float = 0.0
    ry: float = 0.0
    layer: str = ""
    stroke_color: str = "#000000"
    fill_color: str = "none"
    id: str = ""
    locked: bool = False


@dataclass
class EEHole:
    x: float
    y: float
    radius: float
    id: str = ""
    locked: bool = False


@dataclass
class EESolidRegion:
    layer: str
    points: List[Tuple[float, float]]
    region_type: str  # "npth", "solid", "cutout"


@dataclass
class EE3DModel:
    uuid: str
    origin_x: float
    origin_y: float
    z: float
    rotation: Tuple[float, float, float]


@dataclass
class EEText:
    text: str
    x: float
    y: float
    rotation: float = 0.0
    font_size: float = 7.0
    text_type: str = ""
    align: str = "L"
    color: str = "#000000"
    layer: str = ""
    stroke_width: float = 0.0
    mirror: str = ""
    net: str = ""
    text_path: str = ""
    displayed: bool = True
    is_pin_part: bool = False
    id: str = ""
    locked: bool = False


@dataclass
class EEPin:
    number: str
    name: str
    x: float
    y: float
    rotation: float
    length: float
    electrical_type: str  # raw type code, "0"=unspecified
    name_visible: bool = True
    number_visible: bool = True
    has_dot: bool = False
    has_clock: bool = False
    id: str = ""
    locked: bool = False


@dataclass
class EEPolyline:
    points: List[Tuple[float, float]]
    stroke_width: float = 0.0
    closed: bool = False
    fill: bool = False
    stroke_color: str = "#000000"
    id: str = ""
    locked: bool = False


@dataclass
class EESymbol:
    rectangles: List[EERectangle] = field(default_factory=list)
    circles: List[EECircle] = field(default_factory=list)
    ellipses: List[EEEllipse] = field(default_factory=list)
    pins: List[EEPin] = field(default_factory=list)
    polylines: List[EEPolyline] = field(default_factory=list)
    arcs: List[EEArc] = field(default_factory=list)
    texts: List[EEText] = field(default_factory=list)


@dataclass
class EEFootprint:
    pads: List[EEPad] = field(default_factory=list)
    tracks: List[EETrack] = field(default_factory=list)
    vias: List[EEVia] = field(default_factory=list)
    arcs: List[EEArc] = field(default_factory=list)
    circles: List[EECircle] = field(default_factory=list)
    holes: List[EEHole] = field(default_factory=list)
    rectangles: List[EERectangle] = field(default_factory=list)
    texts: List[EEText] = field(default_factory=list)
    regions: List[EESolidRegion] = field(default_factory=list)
    model: Optional[EE3DModel] = None
