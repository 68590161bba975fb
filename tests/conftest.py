"""Shared test fixtures for lceda_normalize tests."""
import json
import os
import sys

import pytest

# Add src/ so the package imports without installation
_root_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, os.path.join(_root_dir, "src"))


def _v3_line(outer, inner):
    """One ``outer||inner`` V3 record line."""
    return json.dumps(outer) + "||" + json.dumps(inner)


@pytest.fixture
def v3_symbol_source():
    """Line-based V3 symbol document with one pin and its attributes."""
    return "\n".join([
        _v3_line({"type": "DOCHEAD"}, {"docType": "SYMBOL"}),
        _v3_line({"type": "CANVAS"}, {"originX": 10, "originY": 20}),
        _v3_line({"type": "PIN", "id": "p1"}, {"x": 0, "y": 0, "rotation": 0, "length": 10}),
        _v3_line({"type": "ATTR"}, {"parentId": "p1", "key": "NAME", "value": "VCC"}),
        _v3_line({"type": "ATTR"}, {"parentId": "p1", "key": "NUMBER", "value": "1"}),
    ])


@pytest.fixture
def v3_footprint_source():
    return "\n".join([
        _v3_line({"type": "DOCHEAD"}, {"docType": "FOOTPRINT"}),
        _v3_line({"type": "PAD", "id": "e1"}, {
            "num": "1", "centerX": 5, "centerY": 6, "layerId": 1,
            "defaultPad": {"padType": "RECT", "width": 2, "height": 3},
        }),
        _v3_line({"type": "VIA", "id": "v1"}, {"centerX": 1, "centerY": 2, "viaDiameter": 8}),
    ])
