"""
Graphical timelines of the same trace: a static chart (matplotlib/seaborn)
and an interactive HTML page (plotly).
"""

from pathlib import Path
from typing import Dict, List

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import numpy as np
import plotly.graph_objects as go
import plotly.io as pio
import seaborn as sns

from .trace import TraceStore

# Make zero-length intervals visible (visual only)
MIN_VISIBLE_WIDTH = 1


def time_ticks(span: int, target: int = 15) -> np.ndarray:
    """Integer tick positions covering [0, span] on a 1-2-5 step of time units."""
    if span <= 0:
        return np.arange(0, 10, dtype=np.int64)
    raw = max(1, span // target)
    magnitude = 10 ** (len(str(raw)) - 1)
    step = next(m * magnitude for m in (1, 2, 5, 10) if m * magnitude >= raw)
    return np.arange(0, span + step, step, dtype=np.int64)


def cpu_palette(cpu_ids: List[int]) -> Dict[int, tuple]:
    palette = sns.color_palette("muted", n_colors=max(1, len(cpu_ids)))
    return {cpu: palette[i % len(palette)] for i, cpu in enumerate(cpu_ids)}


# -----------------------
# Static chart
# -----------------------
def plot_threads(store: TraceStore, output_image_name) -> Path:
    sns.set_theme(style="white", palette="muted")

    threads = store.thread_ids()
    colors = cpu_palette(store.cpu_ids())
    max_tick = store.total_span()
    y_height = 0.7

    fig, ax = plt.subplots(figsize=(15, len(threads) * 1.0 + 1.5))

    for i, thread in enumerate(threads):
        for iv in store.thread_intervals(thread):
            ax.barh(y=i, width=max(iv.duration, MIN_VISIBLE_WIDTH), left=iv.start,
                    height=y_height,
                    align='center',
                    color=colors[iv.cpu_id],
                    edgecolor='black',
                    linewidth=0.5,
                    zorder=2)

    ax.set_yticks(list(range(len(threads))))
    ax.set_yticklabels([f"thread {t}" for t in threads], fontsize=12)
    ax.tick_params(axis='y', length=0)

    x_ticks = time_ticks(max_tick)
    ax.set_xticks(x_ticks)
    ax.set_xticklabels([str(t) for t in x_ticks], fontsize=10)
    ax.set_xlim(0, max(max_tick, 10) * 1.02)
    ax.grid(axis="x", linestyle="--", alpha=0.4)

    handles = [plt.Rectangle((0, 0), 1, 1, color=c) for c in colors.values()]
    if handles:
        ax.legend(handles, [f"cpu {c}" for c in colors], loc="upper right", fontsize=9)

    sns.despine(left=True, bottom=False, right=True, top=True)
    ax.set_xlabel('Time', fontsize=14)
    ax.set_title('Thread Schedule', fontsize=16, pad=20, weight='bold')

    plt.tight_layout()
    out = Path(output_image_name)
    plt.savefig(out)
    plt.close(fig)
    return out


# -----------------------
# Interactive chart
# -----------------------
def make_figure(store: TraceStore, line_width: int = 18, y_gap: float = 2.0) -> go.Figure:
    """One WebGL line trace per cpu; invisible markers carry the hover text."""
    threads = store.thread_ids()
    y_index = {t: i * y_gap for i, t in enumerate(threads)}
    palette = {cpu: f"rgb{tuple(int(255 * c) for c in rgb)}"
               for cpu, rgb in cpu_palette(store.cpu_ids()).items()}

    fig = go.Figure()
    for cpu in store.cpu_ids():
        xs, ys = [], []
        hx, hy, htext = [], [], []
        for iv in sorted(store.intervals, key=lambda iv: (iv.thread_id, iv.start)):
            if iv.cpu_id != cpu:
                continue
            s, e = iv.start, max(iv.end, iv.start + MIN_VISIBLE_WIDTH)
            y = y_index[iv.thread_id]
            xs.extend([s, e, None])
            ys.extend([y, y, None])
            hx.append((s + e) / 2.0)
            hy.append(y)
            htext.append(
                f"<b>mtask {iv.task_id}</b><br>thread: {iv.thread_id}<br>cpu: {cpu}"
                f"<br>start: {iv.start}<br>end: {iv.end}<br>dur: {iv.duration}"
                f"<br>predict: {iv.predict}"
            )

        fig.add_trace(go.Scattergl(
            x=xs, y=ys,
            mode="lines",
            line=dict(width=line_width, color=palette[cpu]),
            name=f"cpu {cpu}",
            hoverinfo="skip",
        ))
        fig.add_trace(go.Scattergl(
            x=hx, y=hy,
            mode="markers",
            marker=dict(size=8, opacity=0.0),
            text=htext,
            hovertemplate="%{text}<extra></extra>",
            showlegend=False,
        ))

    fig.update_layout(
        title=dict(text="Thread Schedule", x=0.02, xanchor="left"),
        height=max(420, 170 + len(threads) * 40),
        template="plotly_white",
        hovermode="closest",
    )
    fig.update_xaxes(range=[0, max(store.total_span(), 1)], title_text="Time", zeroline=False)
    fig.update_yaxes(
        tickmode="array",
        tickvals=list(y_index.values()),
        ticktext=[f"thread {t}" for t in threads],
        autorange="reversed",
        showgrid=False,
    )
    return fig


def write_html(store: TraceStore, out_html) -> Path:
    out = Path(out_html)
    config = {"displaylogo": False, "responsive": True}
    out.write_text(pio.to_html(make_figure(store), include_plotlyjs="cdn", config=config),
                   encoding="utf-8")
    return out
