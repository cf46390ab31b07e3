"""Tests for barcode records, utilities and plotting."""
import math

import matplotlib.pyplot as plt

from barcode import (
    PersistencePair,
    ZigzagPair,
    betti_from_intervals,
    build_intervals,
    filter_by_length,
    plot_barcode,
    write_barcode,
)

BARS = {
    0: [PersistencePair(0, 0.0, math.inf, 0, None), PersistencePair(0, 0.0, 1.0, 1, 0)],
    1: [PersistencePair(1, 2.0, 2.5, 2, 1)],
}


class TestPairs:
    def test_essential(self):
        p = PersistencePair(1, 0.0, math.inf, 3, None)
        assert p.essential
        assert p.length() == math.inf
        assert str(p) == "1 : (0.0,inf) <3,->"

    def test_finite(self):
        p = PersistencePair(0, 0.5, 2.0, 1, 4)
        assert not p.essential
        assert p.length() == 1.5
        assert p.interval() == (0, 0.5, 2.0)

    def test_zigzag_end_types(self):
        p = ZigzagPair(1, 4.0, 10.0, 0, 2, False, True)
        assert p.str() == "1 : (4.0,10.0] <0,2>"
        assert not p.is_empty()
        assert ZigzagPair(0, 1.0, 1.0, birth_closed=True, death_closed=False).is_empty()
        assert not ZigzagPair(0, 1.0, 1.0, birth_closed=True, death_closed=True).is_empty()


class TestIntervals:
    def test_build_sorted(self):
        assert build_intervals(BARS) == [(0, 0.0, 1.0), (0, 0.0, math.inf), (1, 2.0, 2.5)]

    def test_filter_absolute(self):
        kept = filter_by_length(build_intervals(BARS), min_length=1.0)
        assert kept == [(0, 0.0, 1.0), (0, 0.0, math.inf)]

    def test_filter_relative(self):
        # span of finite values is 2.5, threshold 1.25
        kept = filter_by_length(build_intervals(BARS), min_length=0.5, relative=True)
        assert kept == [(0, 0.0, math.inf)]

    def test_betti(self):
        intervals = build_intervals(BARS)
        assert betti_from_intervals(intervals) == {0: 1}
        assert betti_from_intervals(intervals, at=2.2) == {0: 1, 1: 1}


class TestOutput:
    def test_write(self, tmp_path):
        path = tmp_path / "bars.txt"
        lines = write_barcode(BARS, path)
        assert lines == ["0 0.0 1.0", "0 0.0 inf", "1 2.0 2.5"]
        assert path.read_text().splitlines() == lines

    def test_plot(self, tmp_path):
        path = tmp_path / "bars.png"
        fig = plot_barcode(BARS, outfile=path, title="rp2", min_length=0.1)
        assert path.exists()
        assert fig.axes[0].get_title().startswith("rp2")
        plt.close(fig)

    def test_plot_everything_filtered(self):
        fig = plot_barcode({0: [PersistencePair(0, 0.0, 0.0)]}, min_length=1.0)
        assert fig.axes[0].texts[0].get_text() == "All bars filtered out"
        plt.close(fig)
