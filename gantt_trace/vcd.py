"""
vcd.py

Turn the trace into a Value Change Dump that waveform viewers (GTKWave,
Surfer, ...) can open.

Signals:
    threads.thread<N>_mtask   mtask running on thread N
    pcpus.cpu<N>_thread       thread running on cpu N
    mtasks.mtask<N>_cpu       cpu mtask N is running on
    stats.parallelism         number of intervals active at once

Idle signals hold 'z'.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple

from . import __version__
from .trace import Interval, TraceStore

logger = logging.getLogger(__name__)

DEFAULT_VCD = "profile_threads.vcd"
TIMESCALE = "1ns"

# scope name -> signal name template, in declaration order
SCOPES = {
    "threads": "thread{}_mtask",
    "pcpus": "cpu{}_thread",
    "mtasks": "mtask{}_cpu",
    "stats": "{}",
}


@dataclass(frozen=True)
class Signal:
    code: int
    scope: str
    name: str

    @property
    def ident(self) -> str:
        return f"v{self.code:x}"


Change = Tuple[Signal, Optional[int]]


@dataclass
class Waveform:
    signals: List[Signal] = field(default_factory=list)
    frames: List[Tuple[int, List[Change]]] = field(default_factory=list)
    width: int = 1

    def signal(self, name: str) -> Signal:
        for sig in self.signals:
            if sig.name == name:
                return sig
        raise KeyError(name)


class _Registry:
    """Hands out signal codes in first-seen order."""

    def __init__(self):
        self.signals: Dict[Tuple[str, object], Signal] = {}

    def get(self, scope: str, key) -> Signal:
        sig = self.signals.get((scope, key))
        if sig is None:
            sig = Signal(len(self.signals), scope, SCOPES[scope].format(key))
            self.signals[(scope, key)] = sig
        return sig


def _ordered(store: TraceStore) -> List[Interval]:
    return sorted(store.intervals, key=lambda iv: (iv.start, iv.thread_id, iv.end, iv.task_id))


def encode(store: TraceStore) -> Waveform:
    reg = _Registry()
    starts: Dict[int, List[Tuple[int, Signal, int]]] = defaultdict(list)
    ends: Dict[int, List[Tuple[int, Signal]]] = defaultdict(list)
    delta: Dict[int, int] = defaultdict(int)

    for n, iv in enumerate(_ordered(store)):
        by_thread = reg.get("threads", iv.thread_id)
        by_cpu = reg.get("pcpus", iv.cpu_id)
        by_task = reg.get("mtasks", iv.task_id)
        if iv.start == iv.end:
            continue
        for sig, value in ((by_thread, iv.task_id), (by_cpu, iv.thread_id), (by_task, iv.cpu_id)):
            starts[iv.start].append((n, sig, value))
            ends[iv.end].append((n, sig))
        delta[iv.start] += 1
        delta[iv.end] -= 1
    parallelism = reg.get("stats", "parallelism")

    wave = Waveform(signals=sorted(reg.signals.values(), key=lambda s: s.code))
    # signal code -> {interval: value} for intervals currently driving it, in start order
    holders: Dict[int, Dict[int, int]] = defaultdict(dict)
    largest = 0
    running = 0
    last_running = None
    for t in sorted(set(starts) | set(ends)):
        touched: Dict[int, Signal] = {}
        for n, sig in ends.get(t, []):
            del holders[sig.code][n]
            touched[sig.code] = sig
        for n, sig, value in starts.get(t, []):
            holders[sig.code][n] = value
            touched[sig.code] = sig
            largest = max(largest, value)

        changes: Dict[int, Change] = {}
        for code, sig in touched.items():
            # the latest started interval still running owns the signal; none left means idle
            active = list(holders[code].values())
            changes[code] = (sig, active[-1] if active else None)
        running += delta.get(t, 0)
        if running != last_running:
            changes[parallelism.code] = (parallelism, running)
            largest = max(largest, running)
            last_running = running
        if not wave.frames:
            for sig in wave.signals:
                changes.setdefault(sig.code, (sig, None))
        wave.frames.append((t, [changes[code] for code in sorted(changes)]))

    wave.width = max(1, largest.bit_length())
    return wave


# -----------------------
# Serialization
# -----------------------
def _value(value: Optional[int], width: int) -> str:
    if value is None:
        return "bz"
    return f"b{value:0{width}b}"


def vcd_lines(wave: Waveform) -> Iterator[str]:
    yield f"$version Generated by gantt_trace {__version__} $end"
    yield f"$timescale {TIMESCALE} $end"
    yield ""
    yield " $scope module gantt $end"
    for scope in SCOPES:
        members = [s for s in wave.signals if s.scope == scope]
        if not members:
            continue
        yield f"  $scope module {scope} $end"
        for sig in members:
            yield f"   $var wire {wave.width} {sig.ident} {sig.name} $end"
        yield "  $upscope $end"
    yield " $upscope $end"
    yield "$enddefinitions $end"
    for t, changes in wave.frames:
        yield ""
        yield f"#{t}"
        for sig, value in changes:
            yield f"{_value(value, wave.width)} {sig.ident}"


def render_vcd(store: TraceStore) -> str:
    return "\n".join(vcd_lines(encode(store))) + "\n"


def write_vcd(store: TraceStore, path=DEFAULT_VCD) -> Path:
    p = Path(path)
    wave = encode(store)
    with open(p, "w", encoding="utf-8") as fout:
        for line in vcd_lines(wave):
            fout.write(line + "\n")
    logger.info("Wrote %d signals, %d time points to %s", len(wave.signals), len(wave.frames), p)
    return p
