"""Typed view over a document head mapping."""
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from .coerce import to_number, to_string_value

SYMBOL = "symbol"
FOOTPRINT = "footprint"

_SYMBOL_DOC_TYPES = ("SYMBOL", "SCH_PAGE", "SIMULATION", "2")
_FOOTPRINT_DOC_TYPES = ("FOOTPRINT", "PCB", "4")

_KNOWN_KEYS = ("docType", "x", "y", "originX", "originY", "c_para")


def head_number(head: Optional[Mapping[str, Any]], key: str) -> float:
    """Read a numeric head field; ``x``/``y`` fall back to ``originX``/``originY``."""
    if not head:
        return 0
    raw = head.get(key)
    if raw is None and key == "x":
        raw = head.get("originX")
    elif raw is None and key == "y":
        raw = head.get("originY")
    return to_number(raw, 0)


def c_para_string(head: Optional[Mapping[str, Any]], key: str) -> Optional[str]:
    """Non-blank string from the head's ``c_para`` parameter block."""
    if not head:
        return None
    c_para = head.get("c_para")
    if not isinstance(c_para, dict):
        return None
    return to_string_value(c_para.get(key))


def domain_for_doc_type(doc_type: Any) -> Optional[str]:
    """Map a head docType to ``SYMBOL`` or ``FOOTPRINT`` (None if unknown)."""
    if doc_type is None:
        return None
    value = str(doc_type).strip().upper()
    if value in _SYMBOL_DOC_TYPES:
        return SYMBOL
    if value in _FOOTPRINT_DOC_TYPES:
        return FOOTPRINT
    return None


@dataclass
class HeadFields:
    doc_type: Optional[str] = None
    x: float = 0
    y: float = 0
    c_para: Dict[str, str] = field(default_factory=dict)
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, head: Mapping[str, Any]) -> "HeadFields":
        doc_type = head.get("docType")
        raw_c_para = head.get("c_para")
        c_para = {}
        if isinstance(raw_c_para, dict):
            c_para = {k: v for k, v in raw_c_para.items() if isinstance(v, str)}
        return cls(
            doc_type=None if doc_type is None else str(doc_type),
            x=head_number(head, "x"),
            y=head_number(head, "y"),
            c_para=c_para,
            extra={k: v for k, v in head.items() if k not in _KNOWN_KEYS},
        )

    @property
    def domain(self) -> Optional[str]:
        return domain_for_doc_type(self.doc_type)
