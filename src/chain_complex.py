from __future__ import annotations
from typing import Dict, List

from cell_complex import CellComplex
from column_matrix import ColumnMatrix
from errors import PreconditionError
from field import F2, Field
from reduce import ReductionResult, reduce_boundary
from sparse_vector import SparseVector


class ChainComplex:
    """
    Boundary maps of a complex, one matrix per dimension, in cell index order.
    boundary(k) maps k-cells to (k-1)-cells; boundary(0) has no rows.
    """

    def __init__(self, boundaries: List[ColumnMatrix], field: Field = F2) -> None:
        self.boundaries = boundaries
        self.field = field
        self.dim: List[int] = [B.ncol for B in boundaries]
        for k in range(1, len(boundaries)):
            if boundaries[k].nrow != self.dim[k - 1]:
                raise PreconditionError(
                    f"boundary {k} has {boundaries[k].nrow} rows, expected {self.dim[k - 1]}"
                )

    @classmethod
    def from_complex(cls, X: CellComplex, field: Field = F2) -> ChainComplex:
        boundaries: List[ColumnMatrix] = []
        for k in range(X.maxdim() + 1):
            if k == 0:
                boundaries.append(ColumnMatrix.zeros(0, X.ncells(0), field))
                continue
            cols = [SparseVector.from_pairs(X.boundary(k, i), field) for i in range(X.ncells(k))]
            boundaries.append(ColumnMatrix(X.ncells(k - 1), cols, field))
        return cls(boundaries, field)

    @property
    def maxdim(self) -> int:
        return len(self.boundaries) - 1

    def __getitem__(self, k: int) -> ColumnMatrix:
        return self.boundaries[k]

    def validate(self) -> None:
        """Raise PreconditionError unless d_k d_{k+1} = 0 for every k."""
        for k in range(1, self.maxdim):
            if not (self.boundaries[k] @ self.boundaries[k + 1]).is_zero():
                raise PreconditionError(f"boundary of boundary is nonzero in dimension {k + 1}")

    def __repr__(self) -> str:
        return f"ChainComplex(dims={self.dim}, field={self.field!r})"


class ReducedChainComplex:
    """
    Non-filtered homology: every boundary matrix reduced on its own.
    hdim(k) = #k-cells - rank d_k - rank d_{k+1}.
    """

    def __init__(self, C: ChainComplex) -> None:
        self.C = C
        self.reductions: List[ReductionResult] = [reduce_boundary(B) for B in C.boundaries]

    def rank(self, k: int) -> int:
        if k < 0 or k > self.C.maxdim:
            return 0
        return self.reductions[k].rank()

    def hdim(self, k: int) -> int:
        if k < 0 or k > self.C.maxdim:
            return 0
        return self.C.dim[k] - self.rank(k) - self.rank(k + 1)

    def betti(self) -> Dict[int, int]:
        return {k: self.hdim(k) for k in range(self.C.maxdim + 1)}

    def euler_characteristic(self) -> int:
        return sum((-1) ** k * n for k, n in enumerate(self.C.dim))

    def __repr__(self) -> str:
        return f"ReducedChainComplex(betti={self.betti()})"
