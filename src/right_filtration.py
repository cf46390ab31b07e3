from __future__ import annotations
import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from cell_complex import BuildableComplex, SimplicialComplex
from errors import FiltrationError, PreconditionError

Span = Tuple[float, float]  # closed validity interval [start, end], end may be inf


class EventKind(Enum):
    INSERT = "+"
    DELETE = "-"


@dataclass(frozen=True)
class ZigzagEvent:
    """
    One elementary step of a zigzag: a cell copy enters or leaves.
    copy is the position of the interval in the cell's interval list.
    """
    time: float
    kind: EventKind
    dim: int
    index: int
    copy: int


def _overlaps(a: Span, b: Span) -> bool:
    return a[0] <= b[1] and b[0] <= a[1]


def _check_span(start: float, end: float, cell) -> Span:
    start, end = float(start), float(end)
    if not math.isfinite(start) or math.isnan(end):
        raise PreconditionError(f"invalid interval [{start}, {end}] for {cell}")
    if end < start:
        raise PreconditionError(f"empty interval [{start}, {end}] for {cell}")
    return start, end


class RightFiltration:
    """
    Filtration where each cell exists on a union of disjoint closed
    intervals. Each interval is handled as its own copy of the cell, so a
    cell that leaves and comes back is a new cell for the reduction.

    Filtration condition: every interval of a cell lies inside one interval
    of each of its faces.
    """

    def __init__(self, complex: Optional[BuildableComplex] = None, vals: Optional[List[List[Span]]] = None) -> None:
        self._complex = complex if complex is not None else SimplicialComplex()
        self._spans: List[List[List[Span]]] = []
        if vals is None:
            vals = [[] for _ in range(self._complex.maxdim() + 1)]
        for k in range(self._complex.maxdim() + 1):
            n = self._complex.ncells(k)
            if k >= len(vals) or len(vals[k]) != n:
                raise PreconditionError(f"dimension {k}: need one interval per cell")
            cells = self._complex.cells(k)
            row: List[List[Span]] = []
            for i, span in enumerate(vals[k]):
                if span is None:
                    raise PreconditionError(
                        f"{k}-cell {cells[i]} has no interval; "
                        "extend_zigzag_filtration leaves such cells out"
                    )
                row.append([_check_span(span[0], span[1], cells[i])])
            self._spans.append(row)

    # -------- construction --------

    def add(self, start: float, end: float, spx: Iterable) -> Tuple[int, int]:
        """
        Give a cell the validity interval [start, end]. The cell is
        inserted if needed (its faces must exist); the interval must be
        disjoint from the ones it already has.
        """
        cell = self._complex.cell_key(spx)
        span = _check_span(start, end, cell)
        dim, idx = self._complex.add(cell)
        spans = self._slot(dim, idx)
        for other in spans:
            if _overlaps(other, span):
                raise PreconditionError(f"interval {span} of {cell} overlaps existing {other}")
        spans.append(span)
        spans.sort()
        return dim, idx

    def add_recursive(self, start: float, end: float, spx: Iterable) -> Tuple[int, int]:
        """
        Like add, and make every face valid on [start, end]: missing faces
        get the same interval, an overlapping face interval is widened to
        the union, otherwise the face gets a new interval.
        """
        cell = self._complex.cell_key(spx)
        span = _check_span(start, end, cell)
        for face in self._complex.faces(cell):
            self._cover(face, span)
        return self.add(span[0], span[1], cell)

    def _cover(self, cell, span: Span) -> None:
        X = self._complex
        for face in X.faces(cell):
            self._cover(face, span)
        idx = X.find_idx(cell)
        if idx is None:
            self.add(span[0], span[1], cell)
            return
        spans = self._slot(X.cell_dim(cell), idx)
        touching = [s for s in spans if _overlaps(s, span)]
        if not touching:
            spans.append(span)
        else:
            merged = (min([span[0]] + [s[0] for s in touching]), max([span[1]] + [s[1] for s in touching]))
            spans[:] = [s for s in spans if s not in touching] + [merged]
        spans.sort()

    def _slot(self, dim: int, idx: int) -> List[Span]:
        while len(self._spans) <= dim:
            self._spans.append([])
        row = self._spans[dim]
        while len(row) <= idx:
            row.append([])
        return row[idx]

    # -------- collection API --------

    def complex(self) -> BuildableComplex:
        return self._complex

    def maxdim(self) -> int:
        return self._complex.maxdim()

    def ncells(self, k: int) -> int:
        return self._complex.ncells(k)

    def intervals(self, k: int, i: int) -> List[Span]:
        return self._spans[k][i]

    def vals(self) -> List[List[List[Span]]]:
        return self._spans

    def face_copy(self, k: int, i: int, copy: int, face: int) -> int:
        """
        Which interval of (k-1)-cell `face` contains interval `copy` of
        k-cell i. Raises FiltrationError if none does.
        """
        s, e = self._spans[k][i][copy]
        for c, (fs, fe) in enumerate(self._spans[k - 1][face]):
            if fs <= s and e <= fe:
                return c
        raise FiltrationError(
            f"filtration condition violated: {k}-cell {self._complex.cells(k)[i]} on [{s}, {e}] "
            f"but face {self._complex.cells(k - 1)[face]} only on {self._spans[k - 1][face]}"
        )

    def validate(self) -> None:
        for k in range(self.maxdim() + 1):
            for i in range(self.ncells(k)):
                if not self._spans[k][i]:
                    raise PreconditionError(f"{k}-cell {self._complex.cells(k)[i]} has no interval")
                if k == 0:
                    continue
                for c in range(len(self._spans[k][i])):
                    for face, _ in self._complex.boundary(k, i):
                        self.face_copy(k, i, c, face)

    def events(self) -> List[ZigzagEvent]:
        """
        Elementary insert/delete sequence in time order. Intervals are
        closed, so at equal times inserts come before deletes; inserts run
        faces first and deletes run cofaces first.
        """
        events: List[ZigzagEvent] = []
        for k in range(self.maxdim() + 1):
            for i, spans in enumerate(self._spans[k]):
                for c, (s, e) in enumerate(spans):
                    events.append(ZigzagEvent(s, EventKind.INSERT, k, i, c))
                    events.append(ZigzagEvent(e, EventKind.DELETE, k, i, c))

        def key(ev: ZigzagEvent):
            if ev.kind is EventKind.INSERT:
                return (ev.time, 0, ev.dim, ev.index, ev.copy)
            return (ev.time, 1, -ev.dim, ev.index, ev.copy)

        events.sort(key=key)
        return events

    def __repr__(self) -> str:
        n = sum(len(s) for row in self._spans for s in row)
        return f"RightFiltration(maxdim={self.maxdim()}, cells={sum(len(r) for r in self._spans)}, intervals={n})"

