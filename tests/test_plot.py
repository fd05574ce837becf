"""
Tests for the graphical timelines.
"""

from gantt_trace.plot import make_figure, plot_threads, time_ticks, write_html


class TestStaticChart:
    def test_png(self, tmp_path, sample_ingest):
        out = plot_threads(sample_ingest.store, tmp_path / "gantt.png")
        assert out.exists()
        assert out.stat().st_size > 0

    def test_empty_trace(self, tmp_path, empty):
        assert plot_threads(empty.store, tmp_path / "empty.pdf").exists()

    def test_time_ticks(self):
        assert list(time_ticks(0)) == list(range(10))
        assert list(time_ticks(7)) == list(range(8))
        assert list(time_ticks(150)) == list(range(0, 160, 10))
        ticks = time_ticks(1234)
        assert ticks[1] - ticks[0] == 100
        assert ticks[-1] == 1300


class TestInteractive:
    def test_one_line_and_one_hover_trace_per_cpu(self, sample_ingest):
        fig = make_figure(sample_ingest.store)
        assert len(fig.data) == 4
        assert [t.name for t in fig.data[::2]] == ["cpu 0", "cpu 1"]

    def test_hover_text(self, two_threads):
        fig = make_figure(two_threads.store)
        hover = fig.data[3].text
        assert len(hover) == 2
        assert "mtask 2" in hover[0]
        assert "dur: 5" in hover[1]

    def test_html(self, tmp_path, two_threads):
        out = write_html(two_threads.store, tmp_path / "gantt.html")
        text = out.read_text(encoding="utf-8")
        assert "<html>" in text
        assert "mtask 1" in text
