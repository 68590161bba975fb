"""Assemble normalized components from their symbol and footprint documents."""
import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from .document.extract import Extraction
from .document.head import c_para_string, head_number
from .easyeda.compat import merge_footprint_shapes, merge_symbol_shapes
from .easyeda.ee_types import EEFootprint, EESymbol
from .easyeda.parser import ShapeParseError
from .source import LIB_FOOTPRINT, LIB_SYMBOL, DocumentParseError, LibraryDocumentCache, LibraryRef

logger = logging.getLogger(__name__)

MAX_LISTED_FAILURES = 5


@dataclass
class NormalizedComponent:
    name: str
    prefix: str
    symbol: EESymbol
    symbol_origin: Tuple[float, float]
    footprint: EEFootprint
    footprint_origin: Tuple[float, float]
    footprint_name: str = ""
    lcsc_id: Optional[str] = None
    manufacturer: Optional[str] = None
    description: Optional[str] = None
    datasheet: Optional[str] = None


@dataclass
class ComponentRequest:
    """A device to load: display name plus its symbol and footprint documents."""
    name: str
    symbol: LibraryRef
    footprint: LibraryRef
    prefix: str = "U"
    lcsc_id: Optional[str] = None
    manufacturer: Optional[str] = None
    description: Optional[str] = None


@dataclass
class BatchResult:
    components: List[NormalizedComponent] = field(default_factory=list)
    failures: List[str] = field(default_factory=list)


def footprint_name_hint(head, fallback: str) -> str:
    """Footprint name from the head's ``package``/``name`` parameters."""
    return c_para_string(head, "package") or c_para_string(head, "name") or fallback


def build_component(
    name: str,
    symbol: Extraction,
    footprint: Extraction,
    prefix: str = "U",
    footprint_name: str = "",
    lcsc_id: Optional[str] = None,
    manufacturer: Optional[str] = None,
    description: Optional[str] = None,
    datasheet: Optional[str] = None,
    symbol_ref: Optional[LibraryRef] = None,
    footprint_ref: Optional[LibraryRef] = None,
) -> NormalizedComponent:
    """Merge both shape lists and attach head origins.

    Legacy parse failures are re-raised as DocumentParseError when the
    document references are known, so the offending source can be located.
    """
    try:
        sym = merge_symbol_shapes(symbol.shape)
    except ShapeParseError as e:
        if symbol_ref is None:
            raise
        raise DocumentParseError("symbol", symbol_ref, str(e)) from e
    try:
        fp = merge_footprint_shapes(footprint.shape)
    except ShapeParseError as e:
        if footprint_ref is None:
            raise
        raise DocumentParseError("footprint", footprint_ref, str(e)) from e

    return NormalizedComponent(
        name=name,
        prefix=prefix,
        symbol=sym,
        symbol_origin=(head_number(symbol.head, "x"), head_number(symbol.head, "y")),
        footprint=fp,
        footprint_origin=(head_number(footprint.head, "x"), head_number(footprint.head, "y")),
        footprint_name=footprint_name or footprint_name_hint(footprint.head, name),
        lcsc_id=lcsc_id,
        manufacturer=manufacturer,
        description=description,
        datasheet=datasheet or c_para_string(symbol.head, "link"),
    )


def load_component(cache: LibraryDocumentCache, request: ComponentRequest) -> NormalizedComponent:
    symbol = cache.get(request.symbol, LIB_SYMBOL)
    footprint = cache.get(request.footprint, LIB_FOOTPRINT)
    return build_component(
        request.name,
        symbol,
        footprint,
        prefix=request.prefix,
        lcsc_id=request.lcsc_id,
        manufacturer=request.manufacturer,
        description=request.description,
        symbol_ref=request.symbol,
        footprint_ref=request.footprint,
    )


def _first_line(err: Exception) -> str:
    text = str(err).split("\n")[0].strip()
    return text or "Unknown error"


def load_components(cache: LibraryDocumentCache, requests: Iterable[ComponentRequest]) -> BatchResult:
    """Load every request; a failing document only fails its own component."""
    result = BatchResult()
    for request in requests:
        try:
            result.components.append(load_component(cache, request))
        except Exception as e:
            logger.warning("Normalize failed (%s): %s", request.name, e)
            result.failures.append(f"{request.name}: {_first_line(e)}")
    return result


def format_failure_details(failures: List[str]) -> str:
    """Numbered list of the first few failures."""
    if not failures:
        return ""
    shown = failures[:MAX_LISTED_FAILURES]
    lines = [f"{i}. {item}" for i, item in enumerate(shown, 1)]
    if len(failures) > len(shown):
        lines.append(f"...and {len(failures) - len(shown)} more")
    return "\n".join(lines)
