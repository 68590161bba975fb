"""Tests for document/v3.py and document/v3_shapes.py - V3 record reinterpretation."""
import json

import pytest

from lceda_normalize.document.v3 import (
    MalformedRecord, V3Outer, V3Record, _make_record, extract_v3,
    get_canvas_origin, get_doc_type, parse_records_from_object_pairs,
    parse_records_line_based, parse_v3_records,
)
from lceda_normalize.document.v3_shapes import (
    build_footprint_shapes, build_symbol_shapes, format_points,
    sanitize_shape_field, via_hole_radius,
)


def _line(outer, inner):
    return json.dumps(outer) + "||" + json.dumps(inner)


def _rec(record_type, inner, record_id=None):
    return V3Record(outer=V3Outer(type=record_type, id=record_id), inner=inner)


class TestRecordParsing:
    def test_line_based(self, v3_symbol_source):
        records = parse_records_line_based(v3_symbol_source)
        assert len(records) == 5
        assert records[0].outer.type == "DOCHEAD"
        assert records[2].outer.id == "p1"

    def test_line_based_needs_two_lines(self):
        assert parse_records_line_based(_line({"type": "DOCHEAD"}, {"docType": "SYMBOL"})) is None

    def test_line_without_delimiter_declines(self):
        source = _line({"type": "DOCHEAD"}, {"docType": "SYMBOL"}) + "\nnot a record"
        assert parse_records_line_based(source) is None

    def test_line_missing_type_declines(self):
        source = "\n".join([
            _line({"type": "DOCHEAD"}, {"docType": "SYMBOL"}),
            _line({"id": "x"}, {}),
        ])
        assert parse_records_line_based(source) is None

    def test_object_pairs(self):
        source = '{"type":"DOCHEAD"}{"docType":"FOOTPRINT"} {"type":"PAD","id":"a"}{"num":"1"}'
        records = parse_records_from_object_pairs(source)
        assert [r.outer.type for r in records] == ["DOCHEAD", "PAD"]
        assert records[1].inner == {"num": "1"}

    def test_object_pairs_odd_count(self):
        assert parse_records_from_object_pairs('{"type":"A"}{}{"type":"B"}') is None

    def test_object_pairs_too_few(self):
        assert parse_records_from_object_pairs('{"type":"A"}{}') is None

    def test_falls_back_to_object_pairs(self):
        source = '{"type":"DOCHEAD"}||{"docType":"SYMBOL"} {"type":"CANVAS"}||{"originX":1}'
        records = parse_v3_records(source)
        assert [r.outer.type for r in records] == ["DOCHEAD", "CANVAS"]

    def test_make_record_validates(self):
        with pytest.raises(MalformedRecord):
            _make_record(None, {})
        with pytest.raises(MalformedRecord):
            _make_record({"type": "  "}, {})

    def test_ticket_must_be_numeric(self):
        assert _make_record({"type": "A", "ticket": 3}, {}).outer.ticket == 3
        assert _make_record({"type": "A", "ticket": "3"}, {}).outer.ticket is None


class TestRecordQueries:
    def test_doc_type(self):
        assert get_doc_type([_rec("CANVAS", {}), _rec("DOCHEAD", {"docType": "PCB"})]) == "PCB"
        assert get_doc_type([_rec("CANVAS", {})]) is None

    def test_canvas_origin(self):
        assert get_canvas_origin([_rec("CANVAS", {"originX": "5", "originY": 7})]) == (5, 7)

    def test_canvas_origin_default(self):
        assert get_canvas_origin([_rec("DOCHEAD", {})]) == (0, 0)


class TestExtractV3:
    def test_symbol_document(self, v3_symbol_source):
        result = extract_v3(v3_symbol_source)
        assert result["head"] == {"docType": "SYMBOL", "originX": 10, "originY": 20, "x": 10, "y": 20}
        assert result["shape"] == [
            "P~1~0~1~0~0~0~p1~0^^^^M 0 0 h 10^^1~0~0~0~VCC~7^^1~0~0~0~1~7^^0~0~0^^0~"
        ]

    def test_footprint_document(self, v3_footprint_source):
        result = extract_v3(v3_footprint_source)
        assert result["head"]["docType"] == "FOOTPRINT"
        assert result["shape"] == [
            "PAD~RECT~5~6~2~3~1~~1~0~~0~e1~0~~0~0",
            "VIA~1~2~8~~2~v1~0",
        ]

    def test_without_dochead(self):
        source = "\n".join([
            _line({"type": "CANVAS"}, {"originX": 1}),
            _line({"type": "PIN"}, {}),
        ])
        assert extract_v3(source) is None

    def test_unknown_doc_type(self):
        source = "\n".join([
            _line({"type": "DOCHEAD"}, {"docType": "BLOB"}),
            _line({"type": "PIN"}, {}),
        ])
        assert extract_v3(source) is None

    def test_not_v3(self):
        assert extract_v3("hello") is None


class TestSymbolShapes:
    def test_clock_pin_on_vertical_axis(self):
        records = [
            _rec("PIN", {"x": 5, "y": 2.5, "rotation": 90, "length": 20, "pinShape": "CLOCK"}, "p9"),
            _rec("ATTR", {"parentId": "p9", "key": "number", "value": "7"}),
        ]
        sections = build_symbol_shapes(records)[0].split("^^")
        assert sections[0] == "P~1~0~7~5~2.5~90~p9~0"
        assert sections[2] == "M 0 0 v 20"
        assert sections[3] == "1~0~0~0~7~7"
        assert sections[6] == "1~"

    def test_hidden_pin_skipped(self):
        assert build_symbol_shapes([_rec("PIN", {"display": False}, "p1")]) == []

    def test_pin_number_falls_back_to_position(self):
        records = [
            _rec("RECT", {"x": 0, "y": 0}),
            _rec("PIN", {"x": 0, "y": 0}),
        ]
        pin = build_symbol_shapes(records)[1]
        assert pin.split("~")[3] == "2"

    def test_rect_normalizes_corners(self):
        shapes = build_symbol_shapes([_rec("RECT", {"dotX1": 10, "dotY1": 8, "dotX2": 2, "dotY2": 0}, "r1")])
        assert shapes == ["R~2~0~0~0~8~8~#000000~1~~none~r1~0"]

    def test_circle_and_ellipse(self):
        shapes = build_symbol_shapes([
            _rec("CIRCLE", {"centerX": 1, "centerY": 2, "radius": 3, "fillColor": "#FF0000"}),
            _rec("ELLIPSE", {"centerX": 1, "centerY": 2, "radiusX": 3, "radiusY": 4}),
        ])
        assert shapes == [
            "C~1~2~3~#000000~1~~#FF0000~~0",
            "E~1~2~3~4~#000000~1~~none~~0",
        ]

    def test_line_and_poly(self):
        shapes = build_symbol_shapes([
            _rec("LINE", {"startX": 0, "startY": 0, "endX": 10, "endY": 0}),
            _rec("POLY", {"points": [0, 0, 10, 0, 10, 10]}),
            _rec("POLY", {"points": [0, 0]}),
        ])
        assert shapes == [
            "PL~0 0 10 0~#000000~1~~none~~0",
            "PG~0 0 10 0 10 10~#000000~1~~none~~0",
        ]

    def test_text(self):
        shapes = build_symbol_shapes([_rec("TEXT", {"text": "a~b", "x": 1, "y": 2, "align": "CENTER"}, "t1")])
        fields = shapes[0].split("~")
        assert len(fields) == 17
        assert fields[1] == "C"
        assert fields[12] == "a_b"
        assert fields[15] == "t1"

    def test_empty_text_skipped(self):
        assert build_symbol_shapes([_rec("TEXT", {"text": "  "})]) == []


class TestFootprintShapes:
    def _pad(self, inner):
        return build_footprint_shapes([_rec("PAD", inner, "e1")])[0].split("~")

    def test_ellipse_pad_with_unequal_sides_is_oval(self):
        fields = self._pad({"defaultPad": {"padType": "ELLIPSE", "width": 2, "height": 3}})
        assert fields[1] == "OVAL"

    def test_round_ellipse_pad_stays(self):
        fields = self._pad({"defaultPad": {"padType": "ELLIPSE", "width": 2, "height": 2}})
        assert fields[1] == "ELLIPSE"

    def test_unknown_pad_type_is_rect(self):
        assert self._pad({"defaultPad": {"padType": "STAR"}})[1] == "RECT"

    def test_polygon_pad(self):
        fields = self._pad({"defaultPad": {"padType": "POLYGON", "path": [0, 0, "L", 4, 0, 4, 4]}})
        assert fields[1] == "POLYGON"
        assert fields[4] == "4"
        assert fields[5] == "4"
        assert fields[10] == "0 0 4 0 4 4"

    def test_short_polygon_is_rect(self):
        fields = self._pad({"defaultPad": {"padType": "POLYGON", "path": [0, 0, 1, 1]}})
        assert fields[1] == "RECT"
        assert fields[10] == ""

    def test_slotted_hole(self):
        fields = self._pad({"hole": {"width": 1, "height": 2}})
        assert fields[9] == "0.5"
        assert fields[13] == "2"
        assert fields[15] == "1"

    def test_pad_number_falls_back_to_id(self):
        assert self._pad({})[8] == "e1"

    def test_track(self):
        shapes = build_footprint_shapes([
            _rec("LINE", {"startX": 0, "startY": 0, "endX": 5, "endY": 5, "netName": "GND"}, "l1"),
        ])
        assert shapes == ["TRACK~0.1~21~GND~0 0 5 5~l1~0"]

    def test_ignored_types(self):
        assert build_footprint_shapes([_rec("CANVAS", {}), _rec("FILL", {})]) == []


class TestHelpers:
    def test_via_hole_radius(self):
        assert via_hole_radius(0.6, 2) == 0.3
        assert via_hole_radius(0, 2) == 0.5
        assert via_hole_radius(0, 0) == 0

    def test_format_points(self):
        assert format_points([{"x": 1, "y": 2}, {"centerX": 3, "centerY": 4}]) == "1 2 3 4"
        assert format_points([1, 2]) is None
        assert format_points("1 2 3 4") is None

    def test_sanitize(self):
        assert sanitize_shape_field(" a^^b~c\nd ") == "a_b_c d"


class TestEndToEnd:
    SOURCE = (
        '{"type":"DOCHEAD","id":"h1"}||{"docType":"SYMBOL"}\n'
        '{"type":"CANVAS"}||{"originX":10,"originY":-5}\n'
        '{"type":"PIN","id":"p1"}||{"x":0,"y":0,"rotation":0,"length":200,"pinShape":"CLOCK"}'
    )

    def test_clock_pin_document(self):
        from lceda_normalize.document import extract_head_and_shape

        found = extract_head_and_shape(self.SOURCE)
        assert found.head["docType"] == "SYMBOL"
        assert found.head["originX"] == 10
        assert found.head["originY"] == -5
        assert len(found.shape) == 1
        assert found.shape[0].startswith("P~")
        assert found.shape[0].split("^^")[6] == "1~"

    def test_synthesized_lines_parse_back(self, v3_footprint_source):
        from lceda_normalize.easyeda.parser import parse_footprint_shapes, parse_symbol_shapes

        pin = parse_symbol_shapes(extract_v3(self.SOURCE)["shape"]).pins[0]
        assert (pin.number, pin.length, pin.has_clock) == ("1", 200, True)

        fp = parse_footprint_shapes(extract_v3(v3_footprint_source)["shape"])
        assert (fp.pads[0].number, fp.pads[0].width, fp.pads[0].height) == ("1", 2, 3)
        assert fp.vias[0].radius == 2

    def test_hole_diameter_wins(self):
        line = build_footprint_shapes([_rec("VIA", {"holeDiameter": 4, "viaDiameter": 20})])[0]
        assert line.split("~")[5] == "2"

    def test_wide_ellipse_pad(self):
        line = build_footprint_shapes([_rec("PAD", {"defaultPad": {"padType": "ELLIPSE", "width": 2, "height": 1}})])[0]
        assert line.split("~")[1] == "OVAL"
