"""
Shared fixtures for gantt_trace tests.
"""

import pytest

from gantt_trace.parse import ingest_lines
from gantt_trace.trace import IngestResult, Interval
from tests.helpers import SAMPLE_CPUINFO, SAMPLE_PROFILE, make_ingest

# =========================================================================
# Traces
# =========================================================================


@pytest.fixture
def two_threads() -> IngestResult:
    """Thread 0 runs mtask 1 on cpu 0; thread 1 runs mtasks 2 then 3 on cpu 1."""
    return make_ingest(
        Interval(thread_id=0, task_id=1, start=0, end=10, cpu_id=0),
        Interval(thread_id=1, task_id=2, start=0, end=5, cpu_id=1),
        Interval(thread_id=1, task_id=3, start=5, end=10, cpu_id=1),
    )


@pytest.fixture
def empty() -> IngestResult:
    return make_ingest()


# =========================================================================
# Profile text
# =========================================================================


@pytest.fixture
def sample_profile() -> str:
    return SAMPLE_PROFILE


@pytest.fixture
def sample_ingest() -> IngestResult:
    return ingest_lines(SAMPLE_PROFILE.splitlines(), source="sample")


@pytest.fixture
def profile_file(tmp_path):
    path = tmp_path / "profile_threads.dat"
    path.write_text(SAMPLE_PROFILE, encoding="utf-8")
    return path


@pytest.fixture
def cpuinfo_file(tmp_path):
    path = tmp_path / "cpuinfo"
    path.write_text(SAMPLE_CPUINFO, encoding="utf-8")
    return path
