# tests/utils_tests/test_trace_reader.py
# This file is part of Horae - An LTL/MTL Runtime Verification
#
# Test suite for CSV trace reading and trace file generation

import pytest
from model.trace import TraceEvent
from utils.trace_reader import (
    TraceFormatError,
    get_time_unit,
    load_trace,
    read_trace,
    validate_trace_file,
)
from utils.trace_utils import generate_trace_file


@pytest.fixture
def trace_file(tmp_path):
    def _write(content: str, name: str = "trace.csv"):
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return str(path)

    return _write


class TestReadTrace:
    """Test cases for parsing trace files."""

    def test_seconds_by_default(self, trace_file):
        path = trace_file("timestamp,props\n0,idle\n1.5,request|busy\n3,\n")

        events = list(read_trace(path))

        assert events == [
            TraceEvent(frozenset({"idle"}), 0.0),
            TraceEvent(frozenset({"request", "busy"}), 1.5),
            TraceEvent(frozenset(), 3.0),
        ]

    def test_time_unit_directive(self, trace_file):
        path = trace_file("# time_unit: ms\ntimestamp,props\n0,a\n250,b\n")

        trace = load_trace(path)

        assert trace.timestamps == [0.0, 0.25]
        assert get_time_unit(path) == "ms"

    def test_microseconds(self, trace_file):
        path = trace_file("# time_unit: us\ntimestamp,props\n2000000,a\n")

        assert load_trace(path)[0].timestamp == pytest.approx(2.0)

    def test_whitespace_in_props(self, trace_file):
        path = trace_file("timestamp,props\n0, a | b |\n")

        assert load_trace(path)[0].value == frozenset({"a", "b"})

    def test_missing_file(self, tmp_path):
        with pytest.raises(TraceFormatError, match="not found"):
            list(read_trace(str(tmp_path / "absent.csv")))

    def test_missing_headers(self, trace_file):
        path = trace_file("time,events\n0,a\n")

        with pytest.raises(TraceFormatError, match="Missing required headers"):
            list(read_trace(path))

    @pytest.mark.parametrize("row", ["abc,a", ",a", "-1,a"])
    def test_bad_timestamps(self, trace_file, row):
        path = trace_file(f"timestamp,props\n{row}\n")

        with pytest.raises(TraceFormatError, match="Error parsing row 2"):
            list(read_trace(path))

    def test_decreasing_timestamps(self, trace_file):
        path = trace_file("timestamp,props\n5,a\n4,b\n")

        with pytest.raises(TraceFormatError, match="Timestamp decreases at row 3"):
            list(read_trace(path))

    def test_equal_timestamps_allowed(self, trace_file):
        path = trace_file("timestamp,props\n1,a\n1,b\n")

        assert len(load_trace(path)) == 2

    def test_unknown_time_unit(self, trace_file):
        path = trace_file("# time_unit: fortnight\ntimestamp,props\n0,a\n")

        with pytest.raises(TraceFormatError, match="Unknown time unit"):
            get_time_unit(path)

    def test_validate_trace_file(self, trace_file):
        validate_trace_file(trace_file("timestamp,props\n0,a\n"))

        with pytest.raises(TraceFormatError):
            validate_trace_file(trace_file("timestamp,props\nx,a\n", "bad.csv"))


class TestGenerateTraceFile:
    """Test cases for writing synthetic trace files."""

    def test_generated_file_round_trips(self, tmp_path):
        path = str(tmp_path / "gen.csv")

        generate_trace_file(path, 4, {1: ["request"], 3: ["response"]}, time_map={3: 1000})

        trace = load_trace(path)
        assert trace.timestamps == pytest.approx([0.0, 0.1, 0.2, 1.0])
        assert [event.value for event in trace] == [
            frozenset(),
            frozenset({"request"}),
            frozenset(),
            frozenset({"response"}),
        ]

    def test_filler_is_reproducible(self, tmp_path):
        first, second = str(tmp_path / "a.csv"), str(tmp_path / "b.csv")

        generate_trace_file(first, 50, {}, filler_props=["noise"], seed=7)
        generate_trace_file(second, 50, {}, filler_props=["noise"], seed=7)

        with open(first, encoding="utf-8") as a, open(second, encoding="utf-8") as b:
            assert a.read() == b.read()

    def test_invalid_arguments(self, tmp_path):
        path = str(tmp_path / "x.csv")

        with pytest.raises(ValueError):
            generate_trace_file(path, 2, {}, time_unit="h")
        with pytest.raises(ValueError):
            generate_trace_file(path, -1, {})
        with pytest.raises(ValueError):
            generate_trace_file(path, 3, {}, time_map={1: 500, 2: 100})
