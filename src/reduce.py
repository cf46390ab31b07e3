from __future__ import annotations
from bisect import bisect_left
from dataclasses import dataclass, field
from typing import Collection, Dict, List, Optional

from column_matrix import ColumnMatrix
from sparse_vector import SparseVector


@dataclass
class ReductionResult:
    """
    Result of reducing one boundary matrix (columns in filtration order).

    - matrix: the reduced matrix R (the input is reduced in place)
    - lowest_row_of_col[j]: pivot row index for column j, or None if empty
    - birth_to_death: map from pivot row -> column that owns it
    - apparent: columns finalized by the apparent-pairs pass
    """
    matrix: ColumnMatrix
    lowest_row_of_col: List[Optional[int]]
    birth_to_death: Dict[int, int]
    apparent: Dict[int, int] = field(default_factory=dict)
    stats: ReductionStats = field(default_factory=lambda: ReductionStats())

    def rank(self) -> int:
        return len(self.birth_to_death)


@dataclass
class ReductionStats:
    """
    Simple counters used for performance tracking.
    """
    column_additions: int = 0
    pivots_finalized: int = 0
    apparent_pairs: int = 0
    cleared_columns: int = 0
    compressed_entries: int = 0
    discarded_columns: int = 0

    def merge(self, other: ReductionStats) -> None:
        self.column_additions += other.column_additions
        self.pivots_finalized += other.pivots_finalized
        self.apparent_pairs += other.apparent_pairs
        self.cleared_columns += other.cleared_columns
        self.compressed_entries += other.compressed_entries
        self.discarded_columns += other.discarded_columns


def _eliminate(col: SparseVector, a, reducer: SparseVector) -> None:
    """Cancel coefficient a of col against the pivot of reducer."""
    F = col.field
    b = reducer.val[-1]
    col.axpy(F.neg(F.div(a, b)), reducer)


# ---------------------------------------------------------------------
# Standard reduction: cancel the pivot until it is unique or the column is 0
# ---------------------------------------------------------------------
def reduce_column(
    R: ColumnMatrix,
    j: int,
    birth_to_death: Dict[int, int],
    stats: ReductionStats,
) -> Optional[int]:
    """
    Reduce column j against the columns that already own a pivot.
    Returns the final pivot row, or None if the column became zero.
    """
    col = R[j]
    while col.ind:
        pivot_row = col.ind[-1]
        k = birth_to_death.get(pivot_row)
        if k is None:
            return pivot_row
        _eliminate(col, col.val[-1], R[k])
        stats.column_additions += 1
    return None


# ---------------------------------------------------------------------
# Extra reduction: also clear every owned row above the pivot
# ---------------------------------------------------------------------
def reduce_column_extra(
    R: ColumnMatrix,
    j: int,
    birth_to_death: Dict[int, int],
    stats: ReductionStats,
) -> Optional[int]:
    """
    Like reduce_column, then eliminate each remaining entry whose row is
    owned by another column. Entries are visited from the bottom up: a
    reducer with pivot r only touches rows <= r.
    """
    pivot_row = reduce_column(R, j, birth_to_death, stats)
    if pivot_row is None:
        return None
    col = R[j]
    pos = len(col.ind) - 2
    while pos >= 0:
        r = col.ind[pos]
        k = birth_to_death.get(r)
        if k is None:
            pos -= 1
            continue
        _eliminate(col, col.val[pos], R[k])
        stats.column_additions += 1
        pos = bisect_left(col.ind, r) - 1
    return pivot_row


# ---------------------------------------------------------------------
# Apparent pairs: (s, t) with s the pivot of t and t the first column holding s
# ---------------------------------------------------------------------
def find_apparent_pairs(R: ColumnMatrix) -> Dict[int, int]:
    """
    Pairs that need no column operation.

    If row s is the pivot of column t and no column before t has a nonzero
    in row s, then no reduction can ever bring another pivot onto s before
    t, so (s, t) is a final pair. Returns {s: t}.
    """
    first_col: Dict[int, int] = {}
    for j, col in enumerate(R):
        for i in col.ind:
            if i not in first_col:
                first_col[i] = j
    pairs: Dict[int, int] = {}
    for j, col in enumerate(R):
        if col.ind:
            s = col.ind[-1]
            if first_col[s] == j:
                pairs[s] = j
    return pairs


def reduce_matrix(
    R: ColumnMatrix,
    *,
    extra: bool = False,
    apparent_pairs: bool = False,
    cleared: Collection[int] = (),
) -> ReductionResult:
    """
    Column reduction of R in place, left to right.

    - extra: fully reduce each column (same pivots, sparser R)
    - apparent_pairs: finalize apparent pairs before the general pass
    - cleared: columns known to reduce to zero; they are emptied and skipped
    """
    n = R.ncol
    lowest_row_of_col: List[Optional[int]] = [None] * n
    birth_to_death: Dict[int, int] = {}
    stats = ReductionStats()
    step = reduce_column_extra if extra else reduce_column

    for j in cleared:
        if R[j].ind:
            R[j].clear()
        stats.cleared_columns += 1

    apparent: Dict[int, int] = {}
    if apparent_pairs:
        apparent = find_apparent_pairs(R)
        stats.apparent_pairs = len(apparent)
    finalized = set(apparent.values())

    for col in range(n):
        if col in finalized:
            pivot_row = R[col].ind[-1]
        else:
            pivot_row = step(R, col, birth_to_death, stats)
            if pivot_row is None:
                # column is empty: it creates a new feature
                continue
        lowest_row_of_col[col] = pivot_row
        birth_to_death[pivot_row] = col
        stats.pivots_finalized += 1

    return ReductionResult(R, lowest_row_of_col, birth_to_death, apparent, stats)


def reduce_boundary(B: ColumnMatrix, extra: bool = False, apparent_pairs: bool = False) -> ReductionResult:
    """Reduce a copy of B; module-level so it can run in a worker process."""
    return reduce_matrix(B.copy(), extra=extra, apparent_pairs=apparent_pairs)
