"""
Barcodes of right (zigzag) filtrations.

The filtration is read as a sequence of elementary operations, one per
interval endpoint: a cell copy is inserted at its start and deleted at its
end. The operations are replayed in up-down form, all insertions in time
order and then all deletions in reverse time order. A deletion of copy c is
carried out as the insertion of the cone cell w*c, whose boundary is
c - w*(boundary of c); the cone vertex w comes first of all. Every
operation thus adds one column, which is reduced against the pivots already
in place and touches nothing else.

Reading the pairs back (t = time of the operation):
  insert / insert           dim p      [t_birth, t_death)
  insert / delete           dim p      [t_birth, t_death]      if t_birth <= t_death
                            dim p - 1  (t_death, t_birth)      otherwise
  delete / delete          dim p - 1  (t of the killing cone, t of the born cone]
The essential class of w is the reduced-homology offset and is dropped.
"""
from __future__ import annotations
import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from barcode import ZigzagPair
from boundary import FilteredChainComplex
from column_matrix import ColumnMatrix
from errors import PersistenceError
from field import F2, Field
from reduce import ReductionStats, reduce_column, reduce_column_extra
from reducer import Optimization, ReducedFilteredChainComplex, Reduction, ReductionFlags
from right_filtration import EventKind, RightFiltration, ZigzagEvent
from sparse_vector import SparseVector

logger = logging.getLogger(__name__)

CopyKey = Tuple[int, int, int]  # (dim, cell index, interval number)


class Phase(Enum):
    BEFORE = "before"  # column not yet in the matrix
    DURING = "during"  # column appended, not reduced
    AFTER = "after"    # column reduced, pivot recorded


@dataclass(frozen=True)
class ZigzagOperation:
    """
    One column of the coned complex.
    - step: position in the up-down sequence (0 is the cone vertex)
    - dim: dimension of the column in the coned complex
    - column: position of the column within its dimension
    - event: the insertion or deletion it realizes, None for the cone vertex
    """
    step: int
    dim: int
    column: int
    event: Optional[ZigzagEvent]


class ZigzagReducer:
    """
    Zigzag persistence of a RightFiltration, one elementary operation at a
    time. The state is the current operation and its phase; advance() moves
    BEFORE -> DURING -> AFTER -> next operation.

    Flags: EXTRA reduction, COMPRESSION and apparent pairs act on each new
    column. CLEARING needs the top dimension reduced first, so it reduces the
    assembled coned complex with ReducedFilteredChainComplex instead.
    """

    def __init__(self, F: RightFiltration, field: Field = F2, flags: Optional[ReductionFlags] = None) -> None:
        self.F = F
        self.field = field
        self.flags = flags or ReductionFlags()
        self.operations: List[ZigzagOperation] = []
        self._ops: List[List[ZigzagOperation]] = []
        self._cols: List[List[SparseVector]] = []
        self._plan()

        top = len(self._cols)
        self.R = [ColumnMatrix(len(self._cols[d - 1]) if d else 0, [], field) for d in range(top)]
        self.low: List[List[Optional[int]]] = [[] for _ in range(top)]
        self.birth_to_death: List[Dict[int, int]] = [{} for _ in range(top)]
        self.stats = ReductionStats()
        self.position = 0
        self.phase = Phase.BEFORE
        self._first_col = [_first_columns(cols) for cols in self._cols]

    # --- planning: the up-down sequence ---

    def _push(self, dim: int, col: SparseVector, event: Optional[ZigzagEvent]) -> int:
        op = ZigzagOperation(len(self.operations), dim, len(self._cols[dim]), event)
        self.operations.append(op)
        self._ops[dim].append(op)
        self._cols[dim].append(col)
        return op.column

    def _plan(self) -> None:
        F, field = self.F, self.field
        X = F.complex()
        events = F.events()
        top = F.maxdim() + 2
        self._ops = [[] for _ in range(top)]
        self._cols = [[] for _ in range(top)]
        up: Dict[CopyKey, int] = {}
        cone: Dict[CopyKey, int] = {}

        # cone vertex
        self._push(0, SparseVector(field=field), None)

        inserts = [ev for ev in events if ev.kind is EventKind.INSERT]
        deletes = [ev for ev in events if ev.kind is EventKind.DELETE]

        for ev in inserts:
            k, i = ev.dim, ev.index
            entries = []
            if k > 0:
                for face, coeff in X.boundary(k, i):
                    c = F.face_copy(k, i, ev.copy, face)
                    entries.append((up[(k - 1, face, c)], coeff))
            up[(k, i, ev.copy)] = self._push(k, SparseVector.from_pairs(entries, field), ev)

        for ev in reversed(deletes):
            k, i = ev.dim, ev.index
            entries = [(up[(k, i, ev.copy)], 1)]
            if k == 0:
                entries.append((0, -1))
            else:
                for face, coeff in X.boundary(k, i):
                    c = F.face_copy(k, i, ev.copy, face)
                    entries.append((cone[(k - 1, face, c)], -coeff))
            cone[(k, i, ev.copy)] = self._push(k + 1, SparseVector.from_pairs(entries, field), ev)

        logger.info(
            "zigzag: %d insertions, %d deletions, coned complex dims %s",
            len(inserts), len(deletes), [len(c) for c in self._cols],
        )

    def coned_complex(self) -> FilteredChainComplex:
        """The up-down sequence as a filtered complex, valued by step."""
        top = len(self._cols)
        boundaries = [
            ColumnMatrix(len(self._cols[d - 1]) if d else 0, [c.copy() for c in self._cols[d]], self.field)
            for d in range(top)
        ]
        vals = [[float(op.step) for op in ops] for ops in self._ops]
        return FilteredChainComplex(boundaries, vals, None, self.field)

    # --- the state machine ---

    @property
    def done(self) -> bool:
        return self.position >= len(self.operations)

    def advance(self) -> Phase:
        if self.done:
            raise PersistenceError("zigzag reduction has no operation left")
        op = self.operations[self.position]
        if self.phase is Phase.BEFORE:
            self.R[op.dim].cols.append(self._cols[op.dim][op.column].copy())
            self.phase = Phase.DURING
        elif self.phase is Phase.DURING:
            self._reduce(op)
            self.phase = Phase.AFTER
        else:
            self.position += 1
            self.phase = Phase.BEFORE
        return self.phase

    def step(self) -> ZigzagOperation:
        """Carry out the current operation completely."""
        if self.done:
            raise PersistenceError("zigzag reduction has no operation left")
        op = self.operations[self.position]
        while self.advance() is not Phase.BEFORE:
            pass
        return op

    def _reduce(self, op: ZigzagOperation) -> None:
        d, j = op.dim, op.column
        col = self.R[d][j]
        if self.flags.optimization is Optimization.COMPRESSION and d >= 2:
            # rows of negative (d-1)-cells never become pivots
            lower = self.low[d - 1]
            self.stats.compressed_entries += col.drop_rows({i for i in col.ind if lower[i] is not None})
        b2d = self.birth_to_death[d]
        if self.flags.apparent_pairs and col.ind and self._first_col[d][col.ind[-1]] == j:
            pivot: Optional[int] = col.ind[-1]
            self.stats.apparent_pairs += 1
        elif self.flags.reduction is Reduction.EXTRA:
            pivot = reduce_column_extra(self.R[d], j, b2d, self.stats)
        else:
            pivot = reduce_column(self.R[d], j, b2d, self.stats)
        self.low[d].append(pivot)
        if pivot is not None:
            b2d[pivot] = j
            self.stats.pivots_finalized += 1

    def run(self) -> ZigzagReducer:
        if self.flags.optimization is Optimization.CLEARING:
            self._run_cleared()
        else:
            while not self.done:
                self.step()
        s = self.stats
        logger.debug(
            "zigzag reduction: %d operations, %d pivots, %d additions, %d apparent, %d compressed",
            len(self.operations), s.pivots_finalized, s.column_additions, s.apparent_pairs, s.compressed_entries,
        )
        return self

    def _run_cleared(self) -> None:
        RFC = ReducedFilteredChainComplex(self.coned_complex(), self.flags)
        for d, result in enumerate(RFC.reductions):
            self.R[d] = result.matrix
            self.low[d] = list(result.lowest_row_of_col)
            self.birth_to_death[d] = dict(result.birth_to_death)
        self.stats.merge(RFC.stats)
        self.position, self.phase = len(self.operations), Phase.BEFORE

    # --- results ---

    def barcode(self) -> Dict[int, List[ZigzagPair]]:
        """Bars per dimension 0..maxdim, sorted by (birth, death)."""
        if not self.done:
            self.run()
        bars: Dict[int, List[ZigzagPair]] = {k: [] for k in range(self.F.maxdim() + 1)}
        top = len(self._ops)
        for d in range(top):
            upper = self.birth_to_death[d + 1] if d + 1 < top else {}
            for i, op in enumerate(self._ops[d]):
                b = op.event
                j = upper.get(i)
                if b is None or (j is None and self.low[d][i] is not None):
                    continue
                if j is None:
                    raise PersistenceError(f"unpaired {d}-cell in the coned complex: {b}")
                e = self._ops[d + 1][j].event
                if b.kind is EventKind.INSERT and e.kind is EventKind.INSERT:
                    bars[d].append(ZigzagPair(d, b.time, e.time, b.index, e.index, True, False))
                elif b.kind is EventKind.INSERT and b.time <= e.time:
                    bars[d].append(ZigzagPair(d, b.time, e.time, b.index, e.index, True, True))
                elif b.kind is EventKind.INSERT:
                    # class born by a deletion, killed by a later insertion
                    bars[d - 1].append(ZigzagPair(d - 1, e.time, b.time, e.index, b.index, False, False))
                elif not math.isinf(e.time):
                    bars[d - 1].append(ZigzagPair(d - 1, e.time, b.time, e.index, b.index, False, True))
        for k in bars:
            bars[k].sort(key=ZigzagPair.sort_key)
        return bars

    def persistence_pairs(self, k: int) -> List[ZigzagPair]:
        return self.barcode().get(k, [])


def _first_columns(cols: List[SparseVector]) -> Dict[int, int]:
    first: Dict[int, int] = {}
    for j, col in enumerate(cols):
        for i in col.ind:
            first.setdefault(i, j)
    return first


def zigzag_barcode(
    F: RightFiltration,
    field: Field = F2,
    flags: Optional[ReductionFlags] = None,
) -> Dict[int, List[ZigzagPair]]:
    return ZigzagReducer(F, field, flags).run().barcode()
