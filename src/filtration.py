from __future__ import annotations
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Tuple

from cell_complex import BuildableComplex, SimplicialComplex
from errors import FiltrationError, PreconditionError


@dataclass(frozen=True)
class Simplex:
    """
    One simplex record: filtration value, dimension, and sorted vertex ids.
    - val: filtration value (time of appearance)
    - dim: simplex dimension
    - vert: tuple of distinct vertex ids, ascending
    """
    val: float
    dim: int
    vert: Tuple[int, ...]  # sorted, unique

    def __post_init__(self) -> None:
        # Basic shape check: a dim-k simplex has k+1 vertices
        if self.dim != len(self.vert) - 1:
            raise ValueError(f"dim={self.dim} incompatible with vertices {self.vert}")


class Filtration:
    """
    Monotone filtration: a complex plus one birth value per cell.

    vals[k][i] is the value of cell i in dimension k (cell index as in the
    complex). The filtration condition asks every face to be born no later
    than its cofaces; validate() enforces it.
    """

    def __init__(self, complex: Optional[BuildableComplex] = None, vals: Optional[List[List[float]]] = None) -> None:
        self._complex = complex if complex is not None else SimplicialComplex()
        if vals is None:
            vals = [[] for _ in range(self._complex.maxdim() + 1)]
        self._vals: List[List[float]] = [list(v) for v in vals]
        for k in range(self._complex.maxdim() + 1):
            if k >= len(self._vals) or len(self._vals[k]) != self._complex.ncells(k):
                raise PreconditionError(f"dimension {k}: need one value per cell")

    # -------- construction --------

    def add(self, val: float, spx: Iterable) -> Tuple[int, int]:
        """Insert a new cell whose faces are already present."""
        cell = self._complex.cell_key(spx)
        val = _finite(val, cell)
        if self._complex.find_idx(cell) is not None:
            raise PreconditionError(f"duplicate cell {cell}")
        dim, idx = self._complex.add(cell)
        while len(self._vals) <= dim:
            self._vals.append([])
        self._vals[dim].append(val)
        return dim, idx

    def add_recursive(self, val: float, spx: Iterable) -> Tuple[int, int]:
        """
        Insert a cell and any missing faces at the same value.
        Faces already present keep their value; a face born later than
        val is reported by validate(), never moved.
        """
        X = self._complex
        cell = X.cell_key(spx)
        idx = X.find_idx(cell)
        if idx is not None:
            return X.cell_dim(cell), idx
        for face in X.faces(cell):
            self.add_recursive(val, face)
        return self.add(val, cell)

    @classmethod
    def from_simplices(cls, simplices: Iterable[Simplex], *, strict: bool = True) -> Filtration:
        """
        Build from Simplex records given in any order.
        If strict is True, raise when a face has no record of its own;
        otherwise the face is added at its coface's value.
        """
        F = cls()
        for s in sorted(simplices, key=lambda s: (s.dim, s.val, s.vert)):
            if strict or s.vert in F._complex:
                F.add(s.val, s.vert)
            else:
                F.add_recursive(s.val, s.vert)
        return F

    @classmethod
    def from_file(cls, path: str | Path, *, allow_comments: bool = True, strict: bool = True) -> Filtration:
        """
        Parse a text file with lines "f dim v0 ... v_dim".
        Empty lines are skipped. If allow_comments is True, lines starting
        with '#' are skipped.
        """
        p = Path(path)
        if not p.exists():
            raise FileNotFoundError(p)

        simplices: List[Simplex] = []
        with p.open("r", encoding="utf-8") as f:
            for lineno, raw in enumerate(f, start=1):
                line = raw.strip()
                if not line:
                    continue
                if allow_comments and line.startswith("#"):
                    continue

                parts = line.split()
                if len(parts) < 2:
                    raise ValueError(f"{p}:{lineno}: need at least 2 tokens, got {len(parts)}")

                try:
                    val = float(parts[0])
                except ValueError as e:
                    raise ValueError(f"{p}:{lineno}: invalid float '{parts[0]}'") from e

                try:
                    dim = int(parts[1])
                except ValueError as e:
                    raise ValueError(f"{p}:{lineno}: invalid dim '{parts[1]}'") from e

                expected = 2 + (dim + 1)
                if len(parts) != expected:
                    raise ValueError(
                        f"{p}:{lineno}: expected {expected} tokens for dim={dim}, got {len(parts)}"
                    )

                try:
                    verts_set = {int(v) for v in parts[2:]}
                except ValueError as e:
                    raise ValueError(f"{p}:{lineno}: vertices must be integers") from e
                verts = tuple(sorted(verts_set))

                # duplicates on the line are not allowed
                if len(verts) != (dim + 1):
                    raise ValueError(
                        f"{p}:{lineno}: need exactly {dim+1} distinct vertices, got {len(verts)}"
                    )

                simplices.append(Simplex(val=val, dim=dim, vert=verts))

        return cls.from_simplices(simplices, strict=strict)

    # -------- collection API --------

    def complex(self) -> BuildableComplex:
        return self._complex

    def vals(self) -> List[List[float]]:
        return self._vals

    def maxdim(self) -> int:
        return self._complex.maxdim()

    def ncells(self, k: Optional[int] = None) -> int:
        if k is None:
            return sum(self._complex.ncells(d) for d in range(self.maxdim() + 1))
        return self._complex.ncells(k)

    def __len__(self) -> int:
        return self.ncells()

    def __iter__(self) -> Iterator[Simplex]:
        for k in range(self.maxdim() + 1):
            for i, cell in enumerate(self._complex.cells(k)):
                yield Simplex(val=self._vals[k][i], dim=k, vert=tuple(cell))

    def simplices(self) -> List[Simplex]:
        """Simplex records, sorted by (val, dim, vertices)."""
        return sorted(self, key=lambda s: (s.val, s.dim, s.vert))

    # -------- utilities --------

    def sort_order(self, k: int) -> List[int]:
        """
        Cell indices of dimension k in filtration order.
        Ties are broken by cell index, i.e. insertion order.
        """
        vals = self._vals[k]
        return sorted(range(len(vals)), key=lambda i: (vals[i], i))

    def check_monotonicity(self) -> Optional[str]:
        """
        For every pair (face, cell), require val(cell) >= val(face).
        Return None if ok, else an error string.
        """
        for k in range(1, self.maxdim() + 1):
            vk, vf = self._vals[k], self._vals[k - 1]
            for i in range(self._complex.ncells(k)):
                for face, _ in self._complex.boundary(k, i):
                    if vk[i] < vf[face]:
                        return (
                            f"monotonicity violation: cell {self._complex.cells(k)[i]} val={vk[i]} "
                            f"< face {self._complex.cells(k - 1)[face]} val={vf[face]}"
                        )
        return None

    def validate(self) -> None:
        """Raise FiltrationError if some cell is born before one of its faces."""
        msg = self.check_monotonicity()
        if msg is not None:
            raise FiltrationError(msg)

    def count_by_dim(self) -> dict[int, int]:
        """Return a histogram of cell counts per dimension."""
        return {k: self._complex.ncells(k) for k in range(self.maxdim() + 1)}

    def __repr__(self) -> str:
        dims = sorted(self.count_by_dim().items())
        dims_str = ", ".join(f"{d}:{c}" for d, c in dims)
        return f"Filtration(n={self.ncells()}, dims={{ {dims_str} }})"


def _finite(val: float, cell) -> float:
    val = float(val)
    if not math.isfinite(val):
        raise PreconditionError(f"non-finite filtration value {val} for {cell}")
    return val
