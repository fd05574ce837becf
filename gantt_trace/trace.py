"""
trace.py

In-memory record of every interval read from a thread profile, plus the
bags of arguments and counters that came with it.

Intervals live in one flat list; the per-thread, per-task and per-cpu
indexes only hold positions into that list.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

import pandas as pd


class GanttTraceError(Exception):
    """Base class for trace analysis errors."""


class TraceFormatError(GanttTraceError):
    """A trace record could not be turned into an interval."""


class FrozenStoreError(GanttTraceError):
    """Raised when a frozen TraceStore is modified."""


FRAME_COLUMNS = ["thread_id", "task_id", "start", "end", "elapsed", "predict", "cpu_id"]


@dataclass(frozen=True)
class Interval:
    thread_id: int
    task_id: int
    start: int
    end: int
    cpu_id: int
    elapsed: Optional[int] = None
    predict: int = 0

    def __post_init__(self):
        for name in ("thread_id", "task_id", "start", "end", "cpu_id", "predict"):
            value = getattr(self, name)
            if value < 0:
                raise TraceFormatError(f"{name} must be non-negative, got {value}")
        if self.end < self.start:
            raise TraceFormatError(
                f"mtask {self.task_id} ends before it starts ({self.start} > {self.end})"
            )
        if self.elapsed is None:
            object.__setattr__(self, "elapsed", self.end - self.start)
        elif self.elapsed < 0:
            raise TraceFormatError(f"elapsed must be non-negative, got {self.elapsed}")

    @property
    def duration(self) -> int:
        return self.end - self.start


@dataclass(frozen=True)
class Task:
    """Fold over every interval of one mtask."""
    task_id: int
    elapsed_total: int
    predicted_duration: int
    max_end: int


@dataclass(frozen=True)
class CpuInfo:
    socket_id: Optional[int] = None
    core_id: Optional[int] = None
    model_name: str = ""


class TraceStore:
    def __init__(self):
        self.intervals: List[Interval] = []
        self._by_thread: Dict[int, List[int]] = {}
        self._by_task: Dict[int, List[int]] = {}
        self._by_cpu: Dict[int, List[int]] = {}
        self._frozen = False

    def __len__(self):
        return len(self.intervals)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def add(self, interval: Interval) -> None:
        if self._frozen:
            raise FrozenStoreError("trace store is frozen")
        pos = len(self.intervals)
        self.intervals.append(interval)
        self._by_thread.setdefault(interval.thread_id, []).append(pos)
        self._by_task.setdefault(interval.task_id, []).append(pos)
        self._by_cpu.setdefault(interval.cpu_id, []).append(pos)

    def freeze(self) -> "TraceStore":
        self._frozen = True
        return self

    # -----------------------
    # Views
    # -----------------------
    def thread_ids(self) -> List[int]:
        return sorted(self._by_thread)

    def task_ids(self) -> List[int]:
        return sorted(self._by_task)

    def cpu_ids(self) -> List[int]:
        return sorted(self._by_cpu)

    def thread_intervals(self, thread_id: int) -> List[Interval]:
        """Intervals of one thread ordered by start (stable for equal starts)."""
        items = [self.intervals[i] for i in self._by_thread.get(thread_id, [])]
        return sorted(items, key=lambda iv: iv.start)

    def task_intervals(self, task_id: int) -> List[Interval]:
        return [self.intervals[i] for i in self._by_task.get(task_id, [])]

    def task(self, task_id: int) -> Task:
        items = self.task_intervals(task_id)
        if not items:
            raise KeyError(task_id)
        return Task(
            task_id=task_id,
            elapsed_total=sum(iv.elapsed for iv in items),
            predicted_duration=items[-1].predict,
            max_end=max(iv.end for iv in items),
        )

    def tasks(self) -> List[Task]:
        return [self.task(t) for t in self.task_ids()]

    def cpu_busy_time(self, cpu_id: int) -> int:
        return sum(self.intervals[i].duration for i in self._by_cpu.get(cpu_id, []))

    def total_span(self) -> int:
        return max((iv.end for iv in self.intervals), default=0)

    def to_frame(self) -> pd.DataFrame:
        """One row per interval, in ingestion order."""
        rows = [
            (iv.thread_id, iv.task_id, iv.start, iv.end, iv.elapsed, iv.predict, iv.cpu_id)
            for iv in self.intervals
        ]
        return pd.DataFrame(rows, columns=FRAME_COLUMNS, dtype="int64")


@dataclass
class IngestResult:
    """Everything ingestion produced; handed to each downstream stage."""
    store: TraceStore = field(default_factory=TraceStore)
    args: Dict[str, str] = field(default_factory=dict)
    stats: Dict[str, float] = field(default_factory=dict)
    cycle_time: Optional[int] = None
    cpuinfo: Dict[int, CpuInfo] = field(default_factory=dict)
