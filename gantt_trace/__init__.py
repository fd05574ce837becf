"""Gantt charts, efficiency statistics and VCD waveforms from thread profiles."""

__version__ = "0.1.0"

from .layout import Grid, build_grid, choose_scale, layout
from .parse import ingest_lines, load_trace, read_cpuinfo
from .stats import TraceStats, compute_stats
from .trace import (
    CpuInfo,
    FrozenStoreError,
    GanttTraceError,
    IngestResult,
    Interval,
    Task,
    TraceFormatError,
    TraceStore,
)
from .vcd import encode, render_vcd, write_vcd

__all__ = [
    "CpuInfo",
    "FrozenStoreError",
    "GanttTraceError",
    "Grid",
    "IngestResult",
    "Interval",
    "Task",
    "TraceFormatError",
    "TraceStats",
    "TraceStore",
    "build_grid",
    "choose_scale",
    "compute_stats",
    "encode",
    "ingest_lines",
    "layout",
    "load_trace",
    "read_cpuinfo",
    "render_vcd",
    "write_vcd",
]
