"""
Unit tests for profile and cpuinfo parsing.
"""

import pytest

from gantt_trace.parse import ingest_lines, load_trace, parse_cpuinfo, read_cpuinfo
from gantt_trace.trace import TraceFormatError
from tests.helpers import SAMPLE_CPUINFO


class TestIngest:
    """Profile lines into an IngestResult."""

    def test_records(self, sample_ingest):
        store = sample_ingest.store
        assert len(store) == 4
        assert store.frozen
        assert store.thread_ids() == [0, 1]
        assert store.task_ids() == [1, 2, 3]
        first = store.intervals[0]
        assert (first.task_id, first.start, first.end, first.elapsed,
                first.predict, first.cpu_id, first.thread_id) == (1, 0, 100, 100, 50, 0, 0)

    def test_args_stats_and_ticks(self, sample_ingest):
        assert sample_ingest.args == {
            "+verilator+prof+threads+start+": "2",
            "+verilator+prof+threads+window+": "2",
        }
        assert sample_ingest.stats == {"yields": 3.0}
        assert sample_ingest.cycle_time == 400

    def test_arg_unit_suffix(self):
        result = ingest_lines(["VLPROF arg +window+ 2.5ms"])
        assert result.args == {"+window+": "2.5ms"}

    def test_unrecognized_lines_are_dropped(self, capsys):
        result = ingest_lines(["# comment", "", "garbage here"])
        assert len(result.store) == 0
        assert capsys.readouterr().out == ""

    def test_debug_echoes_unrecognized_lines(self, capsys):
        ingest_lines(["# comment", "garbage here"], debug=True)
        assert capsys.readouterr().out == "garbage here\n"

    def test_debug_echo_keeps_whitespace(self, capsys):
        ingest_lines(["   \n", "\t vendor  line \n"], debug=True)
        assert capsys.readouterr().out == "\t vendor  line \n"

    def test_bad_interval_aborts_with_location(self):
        lines = [
            "VLPROF mtask 1 start 0 end 10 elapsed 10 predict_time 1 cpu 0 on thread 0",
            "VLPROF mtask 2 start 20 end 10 elapsed 0 predict_time 1 cpu 0 on thread 0",
        ]
        with pytest.raises(TraceFormatError, match="trace.dat:2"):
            ingest_lines(lines, source="trace.dat")

    def test_load_trace(self, profile_file):
        assert len(load_trace(profile_file).store) == 4

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="nope.dat"):
            load_trace(tmp_path / "nope.dat")


class TestCpuinfo:
    """Topology is optional display data."""

    def test_parse(self):
        cpus = parse_cpuinfo(SAMPLE_CPUINFO.splitlines())
        assert sorted(cpus) == [0, 1, 2]
        assert cpus[2].socket_id == 1
        assert cpus[2].core_id == 4
        assert cpus[0].model_name == "Example CPU @ 3.00GHz"

    def test_missing_fields(self):
        cpus = parse_cpuinfo(["processor : 3", "vendor_id : x"])
        assert cpus[3].socket_id is None
        assert cpus[3].core_id is None
        assert cpus[3].model_name == ""

    def test_read_file(self, cpuinfo_file):
        assert len(read_cpuinfo(cpuinfo_file)) == 3

    def test_missing_file_is_empty(self, tmp_path):
        assert read_cpuinfo(tmp_path / "no_cpuinfo") == {}
