"""
report.py

Plain-text report: argument echo, the thread gantt graph, efficiency
figures, prediction accuracy and the per-cpu table.
"""

from collections import Counter
from typing import List

from .layout import MULTI_CHAR, Grid
from .stats import TraceStats
from .trace import IngestResult

UNIT = "time units"


def format_graph(grid: Grid, total_span: int) -> List[str]:
    tpc = grid.time_per_char
    lines = [
        "Thread gantt graph:",
        f"  Legend: One character width = {tpc} {UNIT}",
        f"  Legend: '{MULTI_CHAR}' = multiple mtasks in this period (character width)",
    ]
    labels = {t: f"t{t}:" for t in grid.threads}
    pad = max((len(lbl) for lbl in labels.values()), default=2) + 1
    cols = max(grid.width, -(-total_span // tpc))
    scale = f"<-{total_span} total"
    scale += "-" * max(0, cols - len(scale))
    lines.append("  " + " " * pad + scale + "->")
    for thread in grid.threads:
        lines.append("  " + labels[thread].ljust(pad) + grid.row(thread))
    return lines


def format_analysis(ingest: IngestResult, st: TraceStats) -> List[str]:
    lines = [
        "Analysis:",
        f"  Total threads             = {st.thread_count}",
        f"  Total mtasks              = {st.task_count}",
        f"  Total cpus used           = {st.cpu_count}",
    ]
    for name in sorted(ingest.stats):
        lines.append(f"  Total {name:<20}= {ingest.stats[name]:g}")
    lines += [
        f"  Total eval time           = {st.total_span} {UNIT}",
        f"  Longest mtask time        = {st.longest_task_time} {UNIT}",
        f"  All-thread mtask time     = {st.all_thread_task_time} {UNIT}",
        f"  Longest-thread efficiency = {st.longest_thread_efficiency * 100:.1f}%",
        f"  All-thread efficiency     = {st.all_thread_efficiency * 100:.1f}%",
        f"  All-thread speedup        = {st.speedup:.1f}",
    ]
    if st.utilization is not None:
        lines.append(f"  Thread utilization        = {st.utilization * 100:.1f}%"
                     f" of {ingest.cycle_time} ticks")
    return lines


def format_ratios(st: TraceStats) -> List[str]:
    lines = ["Statistics:"]
    for label, ext in (("min", st.ratio_min), ("max", st.ratio_max)):
        if ext is None:
            lines.append(f"  {label} log(p2e) = 0.000")
        else:
            lines.append(f"  {label} log(p2e) = {ext.log_ratio:.3f}  from mtask {ext.task_id}"
                         f" (predict {ext.predicted}, elapsed {ext.elapsed})")
    lines += [
        f"  mean = {st.ratio_mean:.3f}",
        f"  stddev = {st.ratio_stddev:.3f}",
        f"  e ^ stddev = {st.ratio_exp_stddev:.3f}",
    ]
    return lines


def format_cpus(st: TraceStats) -> List[str]:
    lines = ["CPUs:"]
    for cpu in st.cpus:
        line = f"  cpu {cpu.cpu_id}: cpu_time={cpu.busy_time}"
        if cpu.utilization is not None:
            line += f" ({cpu.utilization * 100:.1f}%)"
        if cpu.info is not None:
            if cpu.info.socket_id is not None:
                line += f" socket={cpu.info.socket_id}"
            if cpu.info.core_id is not None:
                line += f" core={cpu.info.core_id}"
            if cpu.info.model_name:
                line += f" {cpu.info.model_name}"
        lines.append(line)
    return lines


def advisories(st: TraceStats) -> List[str]:
    out = []
    if st.thread_count > st.cpu_count:
        out.append(f"%Warning: There were fewer CPUs ({st.cpu_count})"
                   f" than threads ({st.thread_count}).")
    known = [c.info for c in st.cpus if c.info is not None]
    cores = Counter((i.socket_id, i.core_id) for i in known
                    if i.socket_id is not None and i.core_id is not None)
    if any(n > 1 for n in cores.values()):
        out.append("%Warning: Multiple threads scheduled on the same hyperthreaded core.")
    sockets = {i.socket_id for i in known if i.socket_id is not None}
    if len(sockets) > 1:
        out.append("%Warning: Threads scheduled across multiple sockets.")
    return out


def render_report(ingest: IngestResult, st: TraceStats, grid: Grid) -> str:
    lines = ["Thread profile report", ""]
    if ingest.args:
        lines.append("Argument settings:")
        lines += [f"  {name}{value}" for name, value in sorted(ingest.args.items())]
        lines.append("")
    lines += format_graph(grid, st.total_span)
    lines.append("")
    lines += format_analysis(ingest, st)
    lines.append("")
    lines += format_ratios(st)
    lines.append("")
    lines += format_cpus(st)
    warnings = advisories(st)
    if warnings:
        lines.append("")
        lines += warnings
    return "\n".join(lines) + "\n"
