"""
Create a gantt report and waveform from a multithreaded model's profile.

Usage:
    gantt-trace [profile_threads.dat] [--scale N] [--vcd FILE | --no-vcd]
"""

import argparse
import logging
import sys

from .layout import layout
from .parse import DEFAULT_CPUINFO, load_trace, read_cpuinfo
from .report import render_report
from .stats import compute_stats
from .trace import GanttTraceError
from .vcd import DEFAULT_VCD, write_vcd

logger = logging.getLogger("gantt_trace")

# ------------------------------------------------------------
# CONFIG
# ------------------------------------------------------------
DEFAULT_INPUT = "profile_threads.dat"
LOG_FORMAT = "%(levelname)s: %(message)s"


def non_negative_int(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {text!r}")
    if value < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {value}")
    return value


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="gantt-trace",
        description="Create a thread gantt report, efficiency statistics and a VCD "
                    "waveform from a thread profile.",
    )
    ap.add_argument("filename", nargs="?", default=DEFAULT_INPUT,
                    help=f"Profile to read (default {DEFAULT_INPUT})")
    ap.add_argument("--scale", type=non_negative_int, default=0,
                    help="Time units per graph character, 0 picks one automatically")
    ap.add_argument("--vcd", default=DEFAULT_VCD, metavar="FILE",
                    help=f"Waveform output (default {DEFAULT_VCD})")
    ap.add_argument("--no-vcd", action="store_true", help="Do not write a waveform")
    ap.add_argument("--truncate-labels", action="store_true",
                    help="Clip cpu labels to the width of their interval")
    ap.add_argument("--cpuinfo", default=DEFAULT_CPUINFO, metavar="FILE",
                    help="CPU topology source (default %(default)s)")
    ap.add_argument("--plot", default=None, metavar="FILE",
                    help="Also save a static chart (pdf/png by suffix)")
    ap.add_argument("--html", default=None, metavar="FILE",
                    help="Also save an interactive HTML timeline")
    ap.add_argument("--debug", action="store_true",
                    help="Echo unrecognized lines and enable debug logging")
    return ap


def run(args: argparse.Namespace) -> None:
    ingest = load_trace(args.filename, debug=args.debug)
    ingest.cpuinfo = read_cpuinfo(args.cpuinfo)

    stats = compute_stats(ingest)
    grid = layout(ingest.store, scale=args.scale, truncate_labels=args.truncate_labels)
    logger.debug("scale %d, %d conflicts", grid.time_per_char, grid.conflicts)
    print(render_report(ingest, stats, grid), end="")

    if args.plot or args.html:
        # matplotlib/plotly are only needed for these outputs
        from . import plot
        if args.plot:
            print(f"\nWriting {plot.plot_threads(ingest.store, args.plot)}")
        if args.html:
            print(f"\nWriting {plot.write_html(ingest.store, args.html)}")

    if not args.no_vcd:
        print(f"\nWriting {args.vcd}")
        write_vcd(ingest.store, args.vcd)


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.debug else logging.WARNING,
                        format=LOG_FORMAT)
    try:
        run(args)
    except (OSError, GanttTraceError) as e:
        print(f"%Error: {e}", file=sys.stderr)
        return 1
    return 0
