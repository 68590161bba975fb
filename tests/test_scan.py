"""Tests for document/scan.py - brace scanner and pipe splitter."""
from lceda_normalize.document.scan import (
    PipeSegments, loads_object, recover_objects, scan_json_objects,
    split_pipe_segments,
)


class TestScanJsonObjects:
    def test_top_level_spans(self):
        text = 'a {"x": "}"} b {"y": {"z": 1}}'
        assert scan_json_objects(text) == ['{"x": "}"}', '{"y": {"z": 1}}']

    def test_escaped_quote_inside_string(self):
        text = '{"x": "a\\"}"}'
        assert scan_json_objects(text) == [text]

    def test_unclosed_object_dropped(self):
        assert scan_json_objects('{"a": 1} {"b": ') == ['{"a": 1}']

    def test_stray_close_brace_ignored(self):
        assert scan_json_objects('} {"a":1}') == ['{"a":1}']

    def test_no_objects(self):
        assert scan_json_objects("plain text") == []


class TestLoadsObject:
    def test_object(self):
        assert loads_object('{"a": 1}') == {"a": 1}

    def test_non_object_json(self):
        assert loads_object("[1, 2]") is None

    def test_invalid(self):
        assert loads_object("{bad") is None

    def test_recover_skips_invalid_spans(self):
        assert recover_objects('{"a": 1} {oops} {"b": 2}') == [{"a": 1}, {"b": 2}]


class TestSplitPipeSegments:
    def test_no_delimiter(self):
        assert split_pipe_segments("no pipes here") is None

    def test_single_segment_declines(self):
        assert split_pipe_segments("a|| ||") is None

    def test_segments_are_trimmed_and_parsed(self):
        segments = split_pipe_segments(' {"a":1} || [1,2] ||text ')
        assert segments.raw == ['{"a":1}', "[1,2]", "text"]
        assert segments.parsed == [{"a": 1}, [1, 2], "text"]

    def test_embedded_objects(self):
        segments = split_pipe_segments('x {"a":1} y {"b":2}||pre {"c":3}')
        assert segments.parsed == [[{"a": 1}, {"b": 2}], {"c": 3}]

    def test_single_pipe_fields(self):
        segments = split_pipe_segments("a|1|2||a|b")
        assert segments.parsed == [["a", 1, 2], ["a", "b"]]

    def test_parsed_is_index_aligned(self):
        segments = split_pipe_segments("one||two||three")
        assert len(segments.raw) == len(segments.parsed) == 3


class TestPipeSegmentRecords:
    def test_flattens_objects(self):
        segments = PipeSegments(raw=["", "", ""], parsed=[{"a": 1}, [{"b": 2}, 3], "x"])
        assert segments.records() == [{"a": 1}, {"b": 2}]


def test_quoted_brace_pair():
    assert scan_json_objects('{"a":"}"} {"b":1}') == ['{"a":"}"}', '{"b":1}']


def test_single_valid_json_segment_declines():
    assert split_pipe_segments('{"a": 1}||') is None
