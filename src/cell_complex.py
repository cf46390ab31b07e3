from __future__ import annotations
from itertools import product
from typing import Dict, Hashable, Iterable, List, Optional, Protocol, Sequence, Tuple

from errors import PreconditionError

Face = Tuple[int, int]  # (face index in dimension k-1, integer coefficient)
Cube = Tuple[Tuple[int, int], ...]  # per-axis (lo, hi), hi - lo in {0, 1}


class CellComplex(Protocol):
    """What the engine needs from a complex: cells per dimension and their boundaries."""

    def maxdim(self) -> int: ...
    def ncells(self, k: int) -> int: ...
    def cells(self, k: int) -> Sequence: ...
    def boundary(self, k: int, i: int) -> List[Face]: ...



class BuildableComplex(CellComplex, Protocol):
    """
    A complex that filtrations can grow cell by cell. Cells are addressed by
    their canonical key (cell_key), never by reordering the caller's input.
    """

    def cell_key(self, cell) -> Hashable: ...
    def cell_dim(self, key) -> int: ...
    def faces(self, key) -> List: ...
    def find_idx(self, cell) -> Optional[int]: ...
    def add(self, cell) -> Tuple[int, int]: ...


def _faces_of(vertices: Tuple[int, ...]) -> List[Tuple[int, ...]]:
    """
    Return all codimension-1 faces as vertex tuples.
    Face i is built by removing position i from the tuple.
    """
    n = len(vertices)
    if n <= 1:
        return []
    return [tuple(vertices[j] for j in range(n) if j != i) for i in range(n)]


class SimplicialComplex:
    """
    Simplices stored per dimension as sorted vertex tuples.
    Index of a simplex = insertion order within its dimension.
    Boundary sign: (-1)^i for the face that omits vertex i.
    """

    def __init__(self) -> None:
        self._cells: List[List[Tuple[int, ...]]] = []
        self._index: Dict[Tuple[int, ...], int] = {}

    def maxdim(self) -> int:
        return len(self._cells) - 1

    def ncells(self, k: Optional[int] = None) -> int:
        if k is None:
            return sum(len(c) for c in self._cells)
        if k < 0 or k >= len(self._cells):
            return 0
        return len(self._cells[k])

    def cells(self, k: int) -> List[Tuple[int, ...]]:
        if k < 0 or k >= len(self._cells):
            return []
        return self._cells[k]

    def find_idx(self, spx: Iterable[int]) -> Optional[int]:
        return self._index.get(tuple(sorted(spx)))

    def __contains__(self, spx: Iterable[int]) -> bool:
        return self.find_idx(spx) is not None

    def cell_key(self, spx: Iterable[int]) -> Tuple[int, ...]:
        """Canonical form of a simplex: its sorted vertex tuple."""
        vert = tuple(sorted(spx))
        if len(set(vert)) != len(vert) or not vert:
            raise PreconditionError(f"simplex needs distinct vertices, got {vert}")
        return vert

    @staticmethod
    def cell_dim(vert: Tuple[int, ...]) -> int:
        return len(vert) - 1

    @staticmethod
    def faces(vert: Tuple[int, ...]) -> List[Tuple[int, ...]]:
        return _faces_of(vert)

    def add(self, spx: Iterable[int]) -> Tuple[int, int]:
        """
        Insert one simplex whose faces are already present.
        Returns (dim, index). Re-adding an existing simplex returns its index.
        """
        vert = self.cell_key(spx)
        dim = len(vert) - 1
        found = self._index.get(vert)
        if found is not None:
            return dim, found
        for face in _faces_of(vert):
            if face not in self._index:
                raise PreconditionError(f"missing face {face} for simplex {vert}")
        while len(self._cells) <= dim:
            self._cells.append([])
        idx = len(self._cells[dim])
        self._cells[dim].append(vert)
        self._index[vert] = idx
        return dim, idx

    def add_recursive(self, spx: Iterable[int]) -> Tuple[int, int]:
        """Insert a simplex together with every missing face."""
        vert = tuple(sorted(spx))
        for face in _faces_of(vert):
            if face not in self._index:
                self.add_recursive(face)
        return self.add(vert)

    def boundary(self, k: int, i: int) -> List[Face]:
        vert = self._cells[k][i]
        return [
            (self._index[face], -1 if pos % 2 else 1)
            for pos, face in enumerate(_faces_of(vert))
        ]

    def summary(self) -> str:
        counts = ", ".join(f"{k}:{len(c)}" for k, c in enumerate(self._cells))
        return f"SimplicialComplex(maxdim={self.maxdim()}, cells={{ {counts} }})"

    __repr__ = summary


class CubicalComplex:
    """
    Cubical complex on a regular grid of vertices.

    A cube is a tuple of per-axis (lo, hi) with hi in {lo, lo + 1};
    its dimension is the number of axes where hi == lo + 1.
    """

    def __init__(self, ndim: int) -> None:
        self.ndim = ndim
        self.shape: Optional[Tuple[int, ...]] = None
        self._cells: List[List[Cube]] = [[] for _ in range(ndim + 1)]
        self._index: Dict[Cube, int] = {}

    @classmethod
    def generate_grid(cls, shape: Sequence[int]) -> CubicalComplex:
        """All cubes spanned by a grid with the given number of vertices per axis."""
        X = cls(len(shape))
        X.shape = tuple(int(n) for n in shape)
        # per-axis choices: vertices (v, v) and unit edges (v, v + 1)
        choices = [
            [(v, v) for v in range(n)] + [(v, v + 1) for v in range(n - 1)]
            for n in shape
        ]
        cubes = list(product(*choices))
        cubes.sort(key=lambda c: (sum(hi - lo for lo, hi in c), c))
        for c in cubes:
            X._insert(c)
        return X

    @classmethod
    def generate_cube(cls, n: int, ndim: int = 3) -> CubicalComplex:
        """n vertices along each of ndim axes."""
        return cls.generate_grid([n] * ndim)

    def _insert(self, c: Cube) -> int:
        dim = sum(hi - lo for lo, hi in c)
        idx = len(self._cells[dim])
        self._cells[dim].append(c)
        self._index[c] = idx
        return idx

    def cell_key(self, cube: Sequence[Tuple[int, int]]) -> Cube:
        """Canonical form of a cube: per-axis (lo, hi) in axis order."""
        c: Cube = tuple((int(lo), int(hi)) for lo, hi in cube)
        if len(c) != self.ndim or any(hi - lo not in (0, 1) for lo, hi in c):
            raise PreconditionError(f"malformed cube {tuple(cube)} for a {self.ndim}-d grid")
        return c

    @staticmethod
    def cell_dim(c: Cube) -> int:
        return sum(hi - lo for lo, hi in c)

    def faces(self, c: Cube) -> List[Cube]:
        return [f for f, _ in self._faces(c)]

    def __contains__(self, cube: Sequence[Tuple[int, int]]) -> bool:
        return self.find_idx(cube) is not None

    def add(self, cube: Sequence[Tuple[int, int]]) -> Tuple[int, int]:
        """Insert one cube whose faces are present. Returns (dim, index)."""
        c = self.cell_key(cube)
        dim = self.cell_dim(c)
        if c in self._index:
            return dim, self._index[c]
        for face, _ in self._faces(c):
            if face not in self._index:
                raise PreconditionError(f"missing face {face} for cube {c}")
        return dim, self._insert(c)

    def maxdim(self) -> int:
        # highest dimension that actually holds cubes
        return max((k for k, cs in enumerate(self._cells) if cs), default=0)

    def ncells(self, k: Optional[int] = None) -> int:
        if k is None:
            return sum(len(c) for c in self._cells)
        if k < 0 or k >= len(self._cells):
            return 0
        return len(self._cells[k])

    def cells(self, k: int) -> List[Cube]:
        if k < 0 or k >= len(self._cells):
            return []
        return self._cells[k]

    def find_idx(self, cube: Sequence[Tuple[int, int]]) -> Optional[int]:
        return self._index.get(tuple((int(lo), int(hi)) for lo, hi in cube))

    @staticmethod
    def _faces(c: Cube) -> List[Tuple[Cube, int]]:
        out: List[Tuple[Cube, int]] = []
        s = 0  # number of nondegenerate axes seen so far
        for a, (lo, hi) in enumerate(c):
            if hi == lo:
                continue
            sign = -1 if s % 2 else 1
            lower = c[:a] + ((lo, lo),) + c[a + 1:]
            upper = c[:a] + ((hi, hi),) + c[a + 1:]
            out.append((lower, -sign))
            out.append((upper, sign))
            s += 1
        return out

    def boundary(self, k: int, i: int) -> List[Face]:
        return [(self._index[f], coeff) for f, coeff in self._faces(self._cells[k][i])]

    def summary(self) -> str:
        counts = ", ".join(f"{k}:{len(c)}" for k, c in enumerate(self._cells))
        return f"CubicalComplex(ndim={self.ndim}, cells={{ {counts} }})"

    __repr__ = summary
