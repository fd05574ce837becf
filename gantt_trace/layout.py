"""
layout.py

Place every interval of every thread on a fixed-width character grid.

Each interval becomes a label such as "[3----]" starting at the column of
its start time. When the chosen scale is too coarse and labels run into each
other, the column is rewritten instead of failing:

    &   more than one mtask starts in this column
    [   start of an mtask whose label did not fit
    x   columns swallowed by a label that did not fit

Without an explicit scale, the scale is searched by halving until labels no
longer collide (see choose_scale).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Tuple

from .trace import Interval, TraceStore

# ------------------------------------------------------------
# CONFIG
# ------------------------------------------------------------
TARGET_COLUMNS = 40
MIN_SEARCH_SCALE = 10

START_CHAR = "["
END_CHAR = "]"
PAD_CHAR = "-"
MULTI_CHAR = "&"
FILLER_CHAR = "x"
BLANK_CHAR = " "


class Cell(Enum):
    EMPTY = "empty"
    LABEL = "label"
    START = "start"
    MULTI = "multi"
    FILLER = "filler"


STARTS = (Cell.START, Cell.MULTI)


@dataclass
class Grid:
    time_per_char: int
    conflicts: int = 0
    cells: Dict[int, Dict[int, Tuple[Cell, str]]] = field(default_factory=dict)

    @property
    def threads(self) -> List[int]:
        return sorted(self.cells)

    def row(self, thread_id: int) -> str:
        cols = self.cells.get(thread_id, {})
        if not cols:
            return ""
        return "".join(cols[c][1] if c in cols else BLANK_CHAR for c in range(max(cols) + 1))

    def states(self, thread_id: int) -> List[Cell]:
        cols = self.cells.get(thread_id, {})
        if not cols:
            return []
        return [cols[c][0] if c in cols else Cell.EMPTY for c in range(max(cols) + 1)]

    @property
    def width(self) -> int:
        return max((max(cols) + 1 for cols in self.cells.values() if cols), default=0)


def time_col(time_per_char: int, t: int) -> int:
    return t // time_per_char


def make_label(iv: Interval, width: int, truncate: bool = False) -> str:
    label = START_CHAR + str(iv.cpu_id)
    if len(label) < width - 1:
        label += PAD_CHAR * (width - 1 - len(label))
    label += END_CHAR
    if truncate and len(label) > width:
        if width <= 1:
            return START_CHAR
        label = label[:width - 1] + END_CHAR
    return label


def _place(row: Dict[int, Tuple[Cell, str]], start_col: int, label: str) -> bool:
    """Write one label into a thread row. Returns True on a conflict."""
    span = range(start_col, start_col + len(label))
    collided = any(col in row for col in span[1:])
    if start_col in row and row[start_col][0] in STARTS:
        collided = True

    if not collided:
        row[start_col] = (Cell.START, label[0])
        for col, ch in zip(span[1:], label[1:]):
            row[col] = (Cell.LABEL, ch)
        return False

    if any(row[col][0] in STARTS for col in span if col in row):
        row[start_col] = (Cell.MULTI, MULTI_CHAR)
    else:
        row[start_col] = (Cell.START, START_CHAR)
        for col in span[1:]:
            if col in row:
                row[col] = (Cell.FILLER, FILLER_CHAR)
    return True


def build_grid(store: TraceStore, time_per_char: int, truncate_labels: bool = False) -> Grid:
    if time_per_char < 1:
        raise ValueError(f"time_per_char must be >= 1, got {time_per_char}")
    grid = Grid(time_per_char=time_per_char)
    for thread in store.thread_ids():
        row = grid.cells.setdefault(thread, {})
        for iv in store.thread_intervals(thread):
            start_col = time_col(time_per_char, iv.start)
            end_col = time_col(time_per_char, iv.end)
            label = make_label(iv, end_col - start_col + 1, truncate=truncate_labels)
            if _place(row, start_col, label):
                grid.conflicts += 1
    return grid


def search_scales(store: TraceStore, truncate_labels: bool = False) -> List[int]:
    """Every scale the automatic search tries, in order; the last one is chosen."""
    tried = []
    time_per = store.total_span() // TARGET_COLUMNS
    while time_per > MIN_SEARCH_SCALE:
        tried.append(time_per)
        if build_grid(store, time_per, truncate_labels).conflicts == 0:
            break
        time_per //= 2
    # one more step so there is room for the cpu labels
    tried.append(max(1, time_per // 2))
    return tried


def choose_scale(store: TraceStore, scale: int = 0, truncate_labels: bool = False) -> int:
    if scale > 0:
        return scale
    return search_scales(store, truncate_labels)[-1]


def layout(store: TraceStore, scale: int = 0, truncate_labels: bool = False) -> Grid:
    return build_grid(store, choose_scale(store, scale, truncate_labels), truncate_labels)
