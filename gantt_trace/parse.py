"""
parse.py

Read a thread profile (profile_threads.dat) into an IngestResult, and
optionally the host CPU topology from /proc/cpuinfo.

Recognized lines:
    # comment
    VLPROF arg <name> <number>[unit]
    VLPROF stat ticks <int>
    VLPROF stat <name> <float>
    VLPROF mtask <id> start <s> end <e> elapsed <el> predict_time <p> cpu <c> on thread <t>
"""

import logging
import re
from pathlib import Path
from typing import Dict, Iterable, Optional

from .trace import CpuInfo, IngestResult, Interval, TraceFormatError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------
# Regex helpers
# ---------------------------------------------------------------------

COMMENT_RE = re.compile(r'^\s*#')
ARG_RE = re.compile(r'^VLPROF\s+arg\s+(\S+)\s+([0-9.]+)\s*(\S*)\s*$')
TICKS_RE = re.compile(r'^VLPROF\s+stat\s+ticks\s+(\d+)\s*$')
STAT_RE = re.compile(r'^VLPROF\s+stat\s+(\S+)\s+([0-9.]+(?:[eE][-+]?\d+)?)\s*$')
MTASK_RE = re.compile(
    r'^VLPROF\s+mtask\s+(\d+)'
    r'\s+start\s+(\d+)\s+end\s+(\d+)'
    r'\s+elapsed\s+(\d+)\s+predict_time\s+(\d+)'
    r'\s+cpu\s+(\d+)\s+on\s+thread\s+(\d+)\s*$'
)
CPUINFO_KV_RE = re.compile(r'^([^:]+?)\s*:\s*(.*)$')

DEFAULT_CPUINFO = "/proc/cpuinfo"


# ---------------------------------------------------------------------
# Trace lines
# ---------------------------------------------------------------------

def parse_line(line: str, result: IngestResult, debug: bool = False) -> bool:
    """Apply one line to result. Returns False when the line was not recognized."""
    text = line.strip()
    if not text or COMMENT_RE.match(text):
        return True

    m = MTASK_RE.match(text)
    if m:
        task, start, end, elapsed, predict, cpu, thread = (int(g) for g in m.groups())
        result.store.add(Interval(
            thread_id=thread,
            task_id=task,
            start=start,
            end=end,
            cpu_id=cpu,
            elapsed=elapsed,
            predict=predict,
        ))
        return True

    m = ARG_RE.match(text)
    if m:
        name, value, unit = m.groups()
        result.args[name] = value + unit
        return True

    m = TICKS_RE.match(text)
    if m:
        result.cycle_time = int(m.group(1))
        return True

    m = STAT_RE.match(text)
    if m:
        result.stats[m.group(1)] = float(m.group(2))
        return True

    if debug:
        print(line.rstrip("\n"))
    return False


def ingest_lines(lines: Iterable[str], source: str = "<input>", debug: bool = False) -> IngestResult:
    result = IngestResult()
    skipped = 0
    for lineno, line in enumerate(lines, start=1):
        try:
            if not parse_line(line, result, debug=debug):
                skipped += 1
        except TraceFormatError as e:
            raise TraceFormatError(f"{source}:{lineno}: {e}") from e
    result.store.freeze()
    logger.debug("%s: %d intervals, %d unrecognized lines", source, len(result.store), skipped)
    return result


def load_trace(path, debug: bool = False) -> IngestResult:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Trace file not found: {p.resolve()}")
    with open(p, "r", encoding="utf-8", errors="ignore") as fin:
        return ingest_lines(fin, source=str(p), debug=debug)


# ---------------------------------------------------------------------
# CPU topology
# ---------------------------------------------------------------------

def _as_int(value: Optional[str]) -> Optional[int]:
    try:
        return int(value) if value is not None else None
    except ValueError:
        return None


def parse_cpuinfo(lines: Iterable[str]) -> Dict[int, CpuInfo]:
    cpus = {}
    block = {}

    def flush():
        proc = _as_int(block.get("processor"))
        if proc is not None:
            cpus[proc] = CpuInfo(
                socket_id=_as_int(block.get("physical id")),
                core_id=_as_int(block.get("core id")),
                model_name=block.get("model name", ""),
            )
        block.clear()

    for line in lines:
        if not line.strip():
            flush()
            continue
        m = CPUINFO_KV_RE.match(line.strip())
        if m:
            block[m.group(1).strip()] = m.group(2).strip()
    flush()
    return cpus


def read_cpuinfo(path=DEFAULT_CPUINFO) -> Dict[int, CpuInfo]:
    """Topology is display-only, so a missing file just means no topology."""
    p = Path(path)
    if not p.exists():
        logger.debug("No CPU topology at %s", p)
        return {}
    with open(p, "r", encoding="utf-8", errors="ignore") as fin:
        return parse_cpuinfo(fin)
