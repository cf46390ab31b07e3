from __future__ import annotations
import math
from dataclasses import dataclass
from typing import List, Optional

from column_matrix import ColumnMatrix
from errors import FiltrationError, PreconditionError
from field import F2, Field
from filtration import Filtration
from sparse_vector import SparseVector


@dataclass
class FilteredChainComplex:
    """
    Boundary matrices whose rows and columns follow filtration order.

    Storage:
      - boundaries[k]: matrix of d_k, columns = k-cells, rows = (k-1)-cells
        (boundaries[0] has no rows)
      - vals[k]: filtration value of the k-cell at each position
      - perm[k][pos]: index in the source complex of the cell at position pos

    Notes:
      - Within a dimension values are non-decreasing; equal values keep the
        order of the source cell index.
      - Construction fails on any entry whose row is born after its column.
    """
    boundaries: List[ColumnMatrix]
    vals: List[List[float]]
    perm: Optional[List[List[int]]] = None
    field: Field = F2

    def __post_init__(self) -> None:
        if not self.perm:
            self.perm = [list(range(len(v))) for v in self.vals]
        self._validate()

    @property
    def maxdim(self) -> int:
        return len(self.boundaries) - 1

    def dim(self, k: int) -> int:
        """Number of k-cells."""
        return len(self.vals[k]) if 0 <= k < len(self.vals) else 0

    def boundary(self, k: int) -> ColumnMatrix:
        return self.boundaries[k]

    @classmethod
    def from_filtration(cls, F: Filtration, field: Field = F2) -> FilteredChainComplex:
        """
        Sort each dimension by (value, cell index) and build the permuted
        boundary matrices over the given field.
        """
        X = F.complex()
        vals = F.vals()
        maxdim = F.maxdim()
        perm = [F.sort_order(k) for k in range(maxdim + 1)]
        boundaries: List[ColumnMatrix] = []
        for k in range(maxdim + 1):
            if k == 0:
                boundaries.append(ColumnMatrix.zeros(0, len(perm[0]), field))
                continue
            # position of each (k-1)-cell in filtration order
            row_of = [0] * len(perm[k - 1])
            for pos, i in enumerate(perm[k - 1]):
                row_of[i] = pos
            cols = [
                SparseVector.from_pairs(((row_of[f], c) for f, c in X.boundary(k, i)), field)
                for i in perm[k]
            ]
            boundaries.append(ColumnMatrix(len(perm[k - 1]), cols, field))
        sorted_vals = [[vals[k][i] for i in perm[k]] for k in range(maxdim + 1)]
        return cls(boundaries, sorted_vals, perm, field)

    # ---------------- checks ----------------

    def _validate(self) -> None:
        if len(self.vals) != len(self.boundaries):
            raise PreconditionError(
                f"{len(self.boundaries)} boundary matrices but values for {len(self.vals)} dimensions"
            )
        for k, (B, vk) in enumerate(zip(self.boundaries, self.vals)):
            if B.ncol != len(vk):
                raise PreconditionError(f"dimension {k}: {B.ncol} columns but {len(vk)} values")
            expected_rows = len(self.vals[k - 1]) if k > 0 else 0
            if B.nrow != expected_rows:
                raise PreconditionError(f"dimension {k}: {B.nrow} rows, expected {expected_rows}")
            for pos, v in enumerate(vk):
                if not math.isfinite(v):
                    raise PreconditionError(f"dimension {k}: non-finite value {v} at position {pos}")
                if pos and v < vk[pos - 1]:
                    raise PreconditionError(
                        f"dimension {k}: values not sorted at position {pos} ({vk[pos - 1]} > {v})"
                    )
            if k == 0:
                if B.nnz():
                    raise PreconditionError("dimension 0 boundary must be empty")
                continue
            vf = self.vals[k - 1]
            for j, col in enumerate(B):
                self._check_column(k, j, col, B.nrow)
                for i in col.ind:
                    if vf[i] > vk[j]:
                        raise FiltrationError(
                            f"filtration condition violated: {k}-cell {self.perm[k][j]} val={vk[j]} "
                            f"has face {self.perm[k - 1][i]} val={vf[i]}"
                        )

    def _check_column(self, k: int, j: int, col: SparseVector, nrow: int) -> None:
        # reduction relies on strictly increasing rows and no stored zeros
        if len(col.ind) != len(col.val):
            raise PreconditionError(
                f"dimension {k}: column {j} has {len(col.ind)} indices but {len(col.val)} values"
            )
        for prev, i in zip(col.ind, col.ind[1:]):
            if i <= prev:
                raise PreconditionError(
                    f"dimension {k}: column {j} rows not strictly increasing ({prev} then {i})"
                )
        if col.ind and (col.ind[0] < 0 or col.ind[-1] >= nrow):
            raise PreconditionError(f"dimension {k}: column {j} references a row outside [0, {nrow})")
        for i, v in zip(col.ind, col.val):
            if self.field.is_zero(self.field(v)):
                raise PreconditionError(f"dimension {k}: column {j} stores a zero at row {i}")

    # ---------------- inspection ----------------

    def print_dense(self, k: int) -> str:
        """
        Render d_k as 0/1 style rows without materializing a dense array.
        Useful for small cases and sanity checks.
        """
        B = self.boundaries[k]
        lines = []
        for i in range(B.nrow):
            lines.append(" ".join(str(B[j][i]) for j in range(B.ncol)))
        return "\n".join(lines)

    def __repr__(self) -> str:
        dims = ", ".join(f"{k}:{len(v)}" for k, v in enumerate(self.vals))
        nnz = sum(B.nnz() for B in self.boundaries)
        return f"FilteredChainComplex(dims={{ {dims} }}, nnz={nnz}, field={self.field!r})"
