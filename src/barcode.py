# barcode.py
from __future__ import annotations
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

import matplotlib.pyplot as plt

Interval = Tuple[int, float, float]  # (dim, birth, death), death may be math.inf


@dataclass(frozen=True)
class PersistencePair:
    """
    One bar of the barcode.
    - dim: homology dimension
    - birth, death: filtration values; death is math.inf for unpaired cells
    - birth_ind, death_ind: cell indices in the source complex (dimension
      dim and dim + 1); death_ind is None when the class never dies
    """
    dim: int
    birth: float
    death: float
    birth_ind: Optional[int] = None
    death_ind: Optional[int] = None

    def length(self) -> float:
        return self.death - self.birth

    @property
    def essential(self) -> bool:
        return self.death_ind is None or math.isinf(self.death)

    def interval(self) -> Interval:
        return (self.dim, self.birth, self.death)

    def sort_key(self) -> Tuple[int, float, float, int]:
        return (self.dim, self.birth, self.death, -1 if self.birth_ind is None else self.birth_ind)

    def str(self) -> str:
        return f"{self.dim} : ({self.birth},{self.death}) <{_ind(self.birth_ind)},{_ind(self.death_ind)}>"

    def __str__(self) -> str:
        return self.str()


@dataclass(frozen=True)
class ZigzagPair(PersistencePair):
    """
    Bar of a zigzag barcode. The end types record whether the bar contains
    its endpoints: a bar born by an insertion contains its birth, a bar
    ending with a deletion contains its death.
    birth_ind and death_ind name the cells whose insertion or deletion
    opens and closes the bar.
    """
    birth_closed: bool = True
    death_closed: bool = False

    def str(self) -> str:
        lb = "[" if self.birth_closed else "("
        rb = "]" if self.death_closed and not math.isinf(self.death) else ")"
        return f"{self.dim} : {lb}{self.birth},{self.death}{rb} <{_ind(self.birth_ind)},{_ind(self.death_ind)}>"

    def is_empty(self) -> bool:
        """True for bars like [t, t) or (t, t] that contain no parameter value."""
        if self.death > self.birth:
            return False
        return not (self.birth_closed and self.death_closed)


def _ind(i: Optional[int]) -> str:
    return "-" if i is None else str(i)


Barcode = Mapping[int, List[PersistencePair]]


def write_barcode(barcode: Barcode, outfile: str | Path) -> List[str]:
    """Write the barcode sorted logically: (dim, birth, death), one "k b d" line per bar."""
    lines: List[str] = []
    for k in sorted(barcode):
        for p in sorted(barcode[k], key=PersistencePair.sort_key):
            d = "inf" if math.isinf(p.death) else repr(p.death)
            lines.append(f"{p.dim} {p.birth!r} {d}")

    with open(outfile, "w", encoding="utf-8") as f:
        for line in lines:
            f.write(line + "\n")
    return lines


# ---- Build intervals from a barcode ----

def build_intervals(barcode: Barcode) -> List[Interval]:
    intervals: List[Interval] = [p.interval() for k in barcode for p in barcode[k]]
    # sort (dim, birth, death), inf last
    intervals.sort()
    return intervals


# ---- Filtering & Betti ----

def filter_by_length(
    intervals: Iterable[Interval],
    *,
    min_length: float = 0.0,
    relative: bool = False,
) -> List[Interval]:
    """Drop finite bars with length < min_length. If relative=True, threshold is fraction of global span."""
    intervals = list(intervals)
    if not intervals or min_length <= 0:
        return intervals[:]
    finite_vals = [x for _, b, d in intervals for x in (b, d) if math.isfinite(x)]
    if not finite_vals:
        return intervals[:]
    span = max(1e-12, max(finite_vals) - min(finite_vals))
    thr = min_length * span if relative else min_length

    out: List[Interval] = []
    for k, b, d in intervals:
        if math.isinf(d) or d - b >= thr:
            out.append((k, b, d))
    return out


def betti_from_intervals(intervals: Iterable[Interval], at: Optional[float] = None) -> Dict[int, int]:
    """
    Count bars per dimension: infinite bars by default, or bars alive at
    the value `at` (birth <= at < death).
    """
    betti: Dict[int, int] = {}
    for k, b, d in intervals:
        alive = math.isinf(d) if at is None else (b <= at < d)
        if alive:
            betti[k] = betti.get(k, 0) + 1
    return betti


# ---- Plotting ----

def plot_barcode(
    barcode: Barcode,
    *,
    outfile: Optional[str | Path] = None,
    title: Optional[str] = None,
    min_length: float = 0.0,
    relative: bool = False,
    show: bool = False,
):
    """
    Plot a barcode. Bands ordered top->bottom: highest dim ... -> H0.
    Infinite bars are drawn to the right edge with an arrow.
    Returns the matplotlib Figure.
    """
    kept = filter_by_length(build_intervals(barcode), min_length=min_length, relative=relative)

    if not kept:
        fig, ax = plt.subplots(figsize=(8, 2), dpi=160)
        ax.set_axis_off()
        ax.text(0.5, 0.5, "All bars filtered out", ha="center", va="center", transform=ax.transAxes)
        if outfile:
            fig.savefig(outfile, bbox_inches="tight", dpi=160)
        if show:
            plt.show()
        return fig

    dims = sorted({k for k, _, _ in kept}, reverse=True)
    per_dim: Dict[int, List[Tuple[float, float]]] = {k: [] for k in dims}
    for k, b, d in kept:
        per_dim[k].append((b, d))

    finite_x = [x for k in dims for bd in per_dim[k] for x in bd if math.isfinite(x)]
    x_left, x_right = min(finite_x), max(finite_x)
    if x_right == x_left:
        x_right = x_left + 1.0

    band_gap = 1.2
    band_half = 0.4 * band_gap
    fig_h = max(2.2, len(dims) * (band_gap * 0.9) + 0.6)
    fig, ax = plt.subplots(figsize=(10, fig_h), dpi=180)

    for i in range(1, len(dims)):
        ax.axhline(i * band_gap - 0.5 * band_gap, linewidth=0.5, alpha=0.4)
    ax.set_yticks([i * band_gap for i in range(len(dims))])
    ax.set_yticklabels([f"H {k}" for k in dims])

    lw = 2.0
    for i, k in enumerate(dims):
        base = i * band_gap
        bars = per_dim[k]
        m = len(bars)
        if m == 1:
            y_positions = [base]
        else:
            top, bot = base + band_half, base - band_half
            step = (top - bot) / (m - 1)
            y_positions = [bot + j * step for j in range(m)]
        for y, (b, d) in zip(y_positions, bars):
            if math.isinf(d):
                ax.plot([b, x_right], [y, y], linewidth=lw, color="darkblue")
                ax.annotate(
                    "",
                    xy=(x_right, y),
                    xytext=(x_right - 0.02 * (x_right - x_left), y),
                    arrowprops=dict(arrowstyle="->", lw=lw),
                )
            else:
                ax.plot([b, d], [y, y], linewidth=lw, color="darkblue")

    ax.set_xlim(x_left, x_right)
    ax.set_xlabel("filtration value")
    if title:
        title += f" [min length > {min_length}{' (rel)' if relative else ''}]" if min_length > 0 else ""
        ax.set_title(title)
    ax.set_ylim(-0.6 * band_gap, (len(dims) - 1) * band_gap + 0.6 * band_gap)
    ax.spines["right"].set_visible(False)
    ax.spines["top"].set_visible(False)
    fig.tight_layout()
    if outfile:
        fig.savefig(outfile, bbox_inches="tight", dpi=180)
    if show:
        plt.show()
    return fig
