from __future__ import annotations
from bisect import bisect_left
from typing import Any, Iterable, Iterator, List, Optional, Set, Tuple

from field import F2, Field


class SparseVector:
    """
    Sparse vector over a field.

    Storage:
      - ind: strictly increasing row indices
      - val: nonzero coefficients, val[k] belongs to ind[k]

    The pivot is the largest index (the "lowest one" when the vector is
    read as a matrix column), so lastnz() is O(1).
    """
    __slots__ = ("ind", "val", "field")

    def __init__(
        self,
        ind: Optional[List[int]] = None,
        val: Optional[List[Any]] = None,
        field: Field = F2,
    ) -> None:
        self.field = field
        self.ind: List[int] = list(ind) if ind is not None else []
        if val is None:
            self.val: List[Any] = [field.one] * len(self.ind)
        else:
            self.val = list(val)
        if len(self.ind) != len(self.val):
            raise ValueError(f"{len(self.ind)} indices but {len(self.val)} values")

    @classmethod
    def from_pairs(cls, pairs: Iterable[Tuple[int, Any]], field: Field = F2) -> SparseVector:
        """
        Build from unsorted (index, value) pairs.
        Repeated indices are summed; entries that cancel are removed.
        """
        acc: dict = {}
        for i, v in pairs:
            v = field(v)
            acc[i] = field.add(acc[i], v) if i in acc else v
        ind = sorted(i for i, v in acc.items() if not field.is_zero(v))
        return cls(ind, [acc[i] for i in ind], field)

    @classmethod
    def from_indices(cls, ind: Iterable[int], field: Field = F2) -> SparseVector:
        """Indicator vector; duplicates are summed like from_pairs."""
        return cls.from_pairs(((i, 1) for i in ind), field)

    # -------- queries --------

    def nnz(self) -> int:
        return len(self.ind)

    def __len__(self) -> int:
        return len(self.ind)

    def is_zero(self) -> bool:
        return not self.ind

    def lastnz(self) -> Optional[Tuple[int, Any]]:
        """(index, value) of the largest nonzero index, or None."""
        if not self.ind:
            return None
        return self.ind[-1], self.val[-1]

    def firstnz(self) -> Optional[Tuple[int, Any]]:
        if not self.ind:
            return None
        return self.ind[0], self.val[0]

    def __getitem__(self, i: int) -> Any:
        k = bisect_left(self.ind, i)
        if k < len(self.ind) and self.ind[k] == i:
            return self.val[k]
        return self.field.zero

    def __contains__(self, i: int) -> bool:
        k = bisect_left(self.ind, i)
        return k < len(self.ind) and self.ind[k] == i

    def items(self) -> Iterator[Tuple[int, Any]]:
        return zip(self.ind, self.val)

    # -------- mutation --------

    def axpy(self, a: Any, other: SparseVector) -> SparseVector:
        """
        self <- self + a * other, merging the two sorted index lists.
        Entries that cancel to zero are dropped. Returns self.
        """
        F = self.field
        if F.is_zero(a) or not other.ind:
            return self
        x_ind, x_val = self.ind, self.val
        y_ind, y_val = other.ind, other.val
        nx, ny = len(x_ind), len(y_ind)
        ind: List[int] = []
        val: List[Any] = []
        i = j = 0
        while i < nx and j < ny:
            xi, yj = x_ind[i], y_ind[j]
            if xi < yj:
                ind.append(xi)
                val.append(x_val[i])
                i += 1
            elif yj < xi:
                ind.append(yj)
                val.append(F.mul(a, y_val[j]))
                j += 1
            else:
                v = F.add(x_val[i], F.mul(a, y_val[j]))
                if not F.is_zero(v):
                    ind.append(xi)
                    val.append(v)
                i += 1
                j += 1
        if i < nx:
            ind.extend(x_ind[i:])
            val.extend(x_val[i:])
        while j < ny:
            ind.append(y_ind[j])
            val.append(F.mul(a, y_val[j]))
            j += 1
        self.ind = ind
        self.val = val
        return self

    def scale(self, a: Any) -> SparseVector:
        """self <- a * self (a must be nonzero to keep the no-zeros invariant)."""
        if self.field.is_zero(a):
            self.ind, self.val = [], []
            return self
        self.val = [self.field.mul(a, v) for v in self.val]
        return self

    def drop_rows(self, rows: Set[int]) -> int:
        """Remove entries whose index is in rows. Returns how many were removed."""
        if not rows:
            return 0
        keep = [(i, v) for i, v in zip(self.ind, self.val) if i not in rows]
        removed = len(self.ind) - len(keep)
        if removed:
            self.ind = [i for i, _ in keep]
            self.val = [v for _, v in keep]
        return removed

    def clear(self) -> None:
        self.ind = []
        self.val = []

    def copy(self) -> SparseVector:
        return SparseVector(self.ind, self.val, self.field)

    # -------- misc --------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SparseVector):
            return NotImplemented
        return self.ind == other.ind and self.val == other.val

    def __repr__(self) -> str:
        body = ", ".join(f"({i}:{v})" for i, v in zip(self.ind, self.val))
        return f"SparseVector[{body}]"
