from __future__ import annotations
from typing import Any, Iterable, Iterator, List, Sequence, Tuple

from field import F2, Field
from sparse_vector import SparseVector


class ColumnMatrix:
    """
    Column-sparse matrix: one SparseVector per column.

    Notes:
      - nrow is informational; row indices are only checked by assertions.
      - Column operations wrap SparseVector.axpy, nothing is densified.
    """

    def __init__(self, nrow: int, cols: Iterable[SparseVector], field: Field = F2) -> None:
        self.nrow = nrow
        self.cols: List[SparseVector] = list(cols)
        self.field = field
        assert all(not c.ind or (c.ind[0] >= 0 and c.ind[-1] < nrow) for c in self.cols), \
            "row index out of range"

    @classmethod
    def zeros(cls, nrow: int, ncol: int, field: Field = F2) -> ColumnMatrix:
        return cls(nrow, (SparseVector(field=field) for _ in range(ncol)), field)

    @classmethod
    def identity(cls, n: int, field: Field = F2) -> ColumnMatrix:
        return cls(n, (SparseVector([j], [field.one], field) for j in range(n)), field)

    @classmethod
    def from_columns(
        cls,
        nrow: int,
        columns: Sequence[Iterable[Tuple[int, Any]]],
        field: Field = F2,
    ) -> ColumnMatrix:
        """Build from per-column (row, value) pairs; duplicates are summed."""
        return cls(nrow, (SparseVector.from_pairs(c, field) for c in columns), field)

    # -------- shape --------

    @property
    def ncol(self) -> int:
        return len(self.cols)

    @property
    def shape(self) -> Tuple[int, int]:
        return self.nrow, self.ncol

    def nnz(self) -> int:
        return sum(c.nnz() for c in self.cols)

    # -------- column access --------

    def __getitem__(self, j: int) -> SparseVector:
        return self.cols[j]

    def __setitem__(self, j: int, col: SparseVector) -> None:
        self.cols[j] = col

    def __iter__(self) -> Iterator[SparseVector]:
        return iter(self.cols)

    def __len__(self) -> int:
        return len(self.cols)

    def swap_cols(self, i: int, j: int) -> None:
        self.cols[i], self.cols[j] = self.cols[j], self.cols[i]

    def scale_col(self, j: int, a: Any) -> None:
        self.cols[j].scale(a)

    def add_col(self, dst: int, a: Any, src: int) -> None:
        """column dst <- column dst + a * column src."""
        if dst == src:
            self.cols[dst].scale(self.field.add(self.field.one, a))
            return
        self.cols[dst].axpy(a, self.cols[src])

    def copy(self) -> ColumnMatrix:
        return ColumnMatrix(self.nrow, (c.copy() for c in self.cols), self.field)

    # -------- algebra --------

    def matmul(self, other: ColumnMatrix) -> ColumnMatrix:
        """self @ other, column by column: (AB)[:, j] = sum_i B[i, j] * A[:, i]."""
        if self.ncol != other.nrow:
            raise ValueError(f"shape mismatch {self.shape} @ {other.shape}")
        out = []
        for col in other.cols:
            acc = SparseVector(field=self.field)
            for i, b in col.items():
                acc.axpy(b, self.cols[i])
            out.append(acc)
        return ColumnMatrix(self.nrow, out, self.field)

    def __matmul__(self, other: ColumnMatrix) -> ColumnMatrix:
        return self.matmul(other)

    def is_zero(self) -> bool:
        return all(c.is_zero() for c in self.cols)

    def __repr__(self) -> str:
        return f"ColumnMatrix({self.nrow}x{self.ncol}, nnz={self.nnz()}, field={self.field!r})"
