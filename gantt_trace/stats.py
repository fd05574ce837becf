"""
stats.py

Scheduling efficiency and predicted-vs-elapsed accuracy over a frozen trace.
Degenerate (empty) traces give zeros, never an exception.
"""

import math
from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np
import pandas as pd

from .trace import CpuInfo, IngestResult, TraceStore


@dataclass(frozen=True)
class RatioExtreme:
    task_id: int
    log_ratio: float
    predicted: int
    elapsed: int


@dataclass(frozen=True)
class CpuStats:
    cpu_id: int
    busy_time: int
    utilization: Optional[float] = None
    info: Optional[CpuInfo] = None


@dataclass
class TraceStats:
    thread_count: int = 0
    task_count: int = 0
    cpu_count: int = 0
    total_span: int = 0
    longest_task_time: int = 0
    all_thread_task_time: int = 0
    longest_thread_efficiency: float = 0.0
    all_thread_efficiency: float = 0.0
    speedup: float = 0.0
    utilization: Optional[float] = None
    ratio_min: Optional[RatioExtreme] = None
    ratio_max: Optional[RatioExtreme] = None
    ratio_mean: float = 0.0
    ratio_stddev: float = 0.0
    ratio_exp_stddev: float = 0.0
    cpus: List[CpuStats] = field(default_factory=list)


def task_table(store: TraceStore) -> pd.DataFrame:
    """Per-task fold: elapsed_total, predicted (last seen) and max_end, sorted by task id."""
    df = store.to_frame()
    if df.empty:
        return pd.DataFrame(columns=["elapsed_total", "predicted", "max_end"], dtype="int64")
    return df.groupby("task_id", sort=True).agg(
        elapsed_total=("elapsed", "sum"),
        predicted=("predict", "last"),
        max_end=("end", "max"),
    )


def log_ratio(predicted: int, elapsed: int) -> float:
    """ln(predicted / elapsed); a zero prediction counts as 1."""
    return math.log((predicted or 1) / elapsed)


def _ratio_stats(tasks: pd.DataFrame, out: TraceStats) -> None:
    timed = tasks[tasks["elapsed_total"] > 0]
    if timed.empty:
        return
    ratios = []
    for task_id, row in timed.iterrows():
        predicted, elapsed = int(row["predicted"]), int(row["elapsed_total"])
        ratio = log_ratio(predicted, elapsed)
        ratios.append(ratio)
        ext = RatioExtreme(int(task_id), ratio, predicted, elapsed)
        # strict compare keeps the lowest task id on ties
        if out.ratio_min is None or ratio < out.ratio_min.log_ratio:
            out.ratio_min = ext
        if out.ratio_max is None or ratio > out.ratio_max.log_ratio:
            out.ratio_max = ext
    arr = np.asarray(ratios, dtype=float)
    out.ratio_mean = float(arr.mean())
    out.ratio_stddev = float(arr.std())
    out.ratio_exp_stddev = math.exp(out.ratio_stddev)


def compute_stats(ingest: IngestResult) -> TraceStats:
    store = ingest.store
    out = TraceStats()
    out.thread_count = len(store.thread_ids())
    out.total_span = store.total_span()

    tasks = task_table(store)
    out.task_count = len(tasks)
    if out.task_count:
        out.longest_task_time = int(tasks["elapsed_total"].max())
        out.all_thread_task_time = int(tasks["elapsed_total"].sum())

    if out.total_span:
        out.longest_thread_efficiency = out.longest_task_time / out.total_span
    denom = out.total_span * out.thread_count
    if denom:
        out.all_thread_efficiency = out.all_thread_task_time / denom
    out.speedup = out.all_thread_efficiency * out.thread_count

    cycle_time = ingest.cycle_time or 0
    if cycle_time > 0 and out.thread_count:
        out.utilization = out.all_thread_task_time / (cycle_time * out.thread_count)

    for cpu in store.cpu_ids():
        busy = store.cpu_busy_time(cpu)
        out.cpus.append(CpuStats(
            cpu_id=cpu,
            busy_time=busy,
            utilization=busy / cycle_time if cycle_time > 0 else None,
            info=ingest.cpuinfo.get(cpu),
        ))
    out.cpu_count = sum(1 for cpu in out.cpus if cpu.busy_time > 0)

    _ratio_stats(tasks, out)
    return out
