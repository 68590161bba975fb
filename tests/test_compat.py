"""Tests for easyeda/compat.py - merging JSON shape objects into legacy results."""
import json

import pytest

from lceda_normalize.easyeda.compat import (
    merge_footprint_shapes, merge_shapes, merge_symbol_shapes,
)
from lceda_normalize.easyeda.ee_types import EEFootprint, EESymbol


def _obj(data):
    return "__JSON__" + json.dumps(data)


PIN_LINE = "P~1~0~1~0~0~0~p1~0^^^^M 0 0 h 10^^1~0~0~0~VCC~7^^1~0~0~0~1~7^^0~0~0^^0~"


class TestMergeSymbolShapes:
    def test_legacy_only(self):
        sym = merge_symbol_shapes(["R~1~2~3~4", PIN_LINE])
        assert len(sym.rectangles) == 1
        assert len(sym.pins) == 1

    def test_text_hint(self):
        sym = merge_symbol_shapes([_obj({"title": "U1", "x": 5, "y": 6})])
        assert [(t.text, t.x, t.y) for t in sym.texts] == [("U1", 5, 6)]
        assert sym.rectangles == []
        assert sym.pins == []

    def test_all_matching_hints_contribute(self):
        obj = {"centerX": 1, "centerY": 2, "radius": 3, "x": 0, "y": 0, "width": 4, "height": 5}
        sym = merge_symbol_shapes([_obj(obj)])
        assert len(sym.circles) == 1
        assert len(sym.rectangles) == 1

    def test_numeric_strings_do_not_match(self):
        sym = merge_symbol_shapes([_obj({"centerX": "1", "centerY": 2, "radius": 3})])
        assert sym.circles == []

    def test_pin_from_dots(self):
        sym = merge_symbol_shapes([_obj({"dotX1": 0, "dotY1": 5, "dotX2": 250, "name": "EN"})])
        pin = sym.pins[0]
        assert (pin.x, pin.y, pin.length) == (0, 5, 250)
        assert pin.number == "1"
        assert pin.name == "EN"

    def test_pin_length_floor(self):
        sym = merge_symbol_shapes([_obj({"type": "PIN", "x": 0, "y": 0})])
        assert sym.pins[0].length == 100

    def test_pin_dedup(self):
        sym = merge_symbol_shapes([
            PIN_LINE,
            _obj({"pinNumber": "1", "x": 0, "y": 0}),
            _obj({"pinNumber": "1", "x": 0, "y": 0}),
            _obj({"pinNumber": "1", "x": 10, "y": 0}),
        ])
        assert [(p.number, p.x) for p in sym.pins] == [("1", 0), ("1", 10)]

    def test_bare_object_line(self):
        sym = merge_symbol_shapes(['{"text": "hello"}'])
        assert sym.texts[0].text == "hello"

    def test_unmatched_object(self):
        assert merge_symbol_shapes([_obj({"foo": 1})]) == EESymbol()


class TestMergeFootprintShapes:
    def test_pad_wins_over_circle(self):
        obj = {"type": "PAD", "centerX": 1, "centerY": 2, "width": 3, "height": 4, "radius": 5}
        fp = merge_footprint_shapes([_obj(obj)])
        assert len(fp.pads) == 1
        assert fp.circles == []

    def test_pad_fields(self):
        fp = merge_footprint_shapes([
            "PAD~RECT~0~0~1~1~1~~1~0",
            _obj({"centerX": 1, "centerY": 2, "width": 3, "height": 4, "holeRadius": 0.5, "layerId": 11}),
        ])
        pad = fp.pads[1]
        assert pad.number == "2"
        assert pad.layer == "11"
        assert pad.plated is True

    def test_via_before_circle(self):
        fp = merge_footprint_shapes([_obj({"centerX": 1, "centerY": 2, "diameter": 3, "radius": 1})])
        assert len(fp.vias) == 1
        assert fp.circles == []

    def test_via_default_radius(self):
        via = merge_footprint_shapes([_obj({"centerX": 1, "centerY": 2, "diameter": 3})]).vias[0]
        assert via.radius == 1.5

    def test_circle(self):
        circle = merge_footprint_shapes([_obj({"centerX": 1, "centerY": 2, "radius": 1})]).circles[0]
        assert circle.layer == "21"

    def test_hole(self):
        fp = merge_footprint_shapes([_obj({"type": "hole", "centerX": 1, "centerY": 2, "radius": 0.5})])
        assert len(fp.holes) == 1
        assert fp.circles == []

    def test_track(self):
        track = merge_footprint_shapes([_obj({"type": "TRACK", "points": "0 0 10 10", "layerId": 3})]).tracks[0]
        assert track.points == [(0, 0), (10, 10)]
        assert track.layer == "3"

    def test_arc(self):
        fp = merge_footprint_shapes([_obj({"path": "M 0 0 A 5 5 0 0 1 10 0"})])
        assert fp.arcs[0].path == "M 0 0 A 5 5 0 0 1 10 0"

    def test_rect(self):
        fp = merge_footprint_shapes([_obj({"x": 0, "y": 0, "width": 1, "height": 2})])
        assert len(fp.rectangles) == 1

    def test_text(self):
        fp = merge_footprint_shapes([_obj({"text": "REF", "isDisplayed": False})])
        assert fp.texts[0].text == "REF"
        assert fp.texts[0].displayed is False

    def test_first_match_only(self):
        obj = {"x": 0, "y": 0, "width": 1, "height": 2, "text": "R1"}
        fp = merge_footprint_shapes([_obj(obj)])
        assert len(fp.rectangles) == 1
        assert fp.texts == []

    def test_unmatched_object(self):
        assert merge_footprint_shapes([_obj({"foo": 1})]) == EEFootprint()


class TestMergeShapes:
    def test_dispatch(self):
        assert isinstance(merge_shapes(["R~1~2~3~4"], "symbol"), EESymbol)
        assert isinstance(merge_shapes(["HOLE~1~1~1"], "footprint"), EEFootprint)

    def test_unknown_domain(self):
        with pytest.raises(ValueError):
            merge_shapes([], "schematic")


def test_legacy_only_matches_parser():
    from lceda_normalize.easyeda.parser import parse_footprint_shapes, parse_symbol_shapes

    sym_lines = ["R~1~2~3~4", PIN_LINE, "E~0~0~20~10", "T~L~10~20~0~#000~~7~~~~comment~Hello~1~start~t1~0"]
    fp_lines = ["PAD~RECT~0~0~1~1~1~~1~0", "TRACK~1~3~~0 0 5 5", "HOLE~1~1~1"]
    assert merge_symbol_shapes(sym_lines) == parse_symbol_shapes(sym_lines)
    assert merge_footprint_shapes(fp_lines) == parse_footprint_shapes(fp_lines)
