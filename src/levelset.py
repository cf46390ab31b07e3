"""
Zigzag filtrations from scalar functions sampled on a grid.

A cube is kept near the level t while every corner value lies within eps of
t, i.e. on [max f - eps, min f + eps] over its corners. The corner spread
max f - min f is the cube's local Lipschitz bound; cubes spreading more
than 2 * eps are never near any level and have no interval. A face has
fewer corners than its cofaces, hence a wider interval, so the filtration
condition holds by construction.
"""
from __future__ import annotations
import logging
from typing import List, Optional, Tuple

import numpy as np

from cell_complex import CubicalComplex
from errors import PreconditionError
from right_filtration import RightFiltration

logger = logging.getLogger(__name__)


def _as_grid(f, X: CubicalComplex) -> np.ndarray:
    f = np.asarray(f, dtype=np.float64)
    if f.ndim != X.ndim:
        raise PreconditionError(f"function has {f.ndim} axes, complex has {X.ndim}")
    if X.shape is not None and f.shape != X.shape:
        raise PreconditionError(f"function shape {f.shape} does not match grid {X.shape}")
    if not np.all(np.isfinite(f)):
        raise PreconditionError("function values must be finite")
    return f


def lipschitz_constant(f) -> float:
    """Largest absolute difference between grid neighbours along any axis."""
    f = np.asarray(f, dtype=np.float64)
    lc = 0.0
    for axis in range(f.ndim):
        if f.shape[axis] > 1:
            lc = max(lc, float(np.max(np.abs(np.diff(f, axis=axis)))))
    return lc


def extend_levelset(f, X: CubicalComplex, eps: float) -> List[List[Optional[Tuple[float, float]]]]:
    """
    Interval of every cube of X for the levelset zigzag of f, None for
    cubes that are never within eps of a level.
    f is an array with one value per grid vertex (shape of the grid).
    """
    if eps < 0:
        raise PreconditionError(f"eps must be non-negative, got {eps}")
    f = _as_grid(f, X)
    vals: List[List[Optional[Tuple[float, float]]]] = []
    for k in range(X.maxdim() + 1):
        row: List[Optional[Tuple[float, float]]] = []
        for cube in X.cells(k):
            # corner values: slice lo..hi on every axis
            block = f[tuple(slice(lo, hi + 1) for lo, hi in cube)]
            start, end = float(block.max()) - eps, float(block.min()) + eps
            row.append((start, end) if start <= end else None)
        vals.append(row)
    return vals


def extend_zigzag_filtration(f, X: CubicalComplex, eps: float) -> RightFiltration:
    """
    Right filtration for the levelset zigzag of f. Cubes without an
    interval are left out, so the result lives on a subcomplex of X.
    """
    vals = extend_levelset(f, X, eps)
    Y = CubicalComplex(X.ndim)
    Y.shape = X.shape
    kept: List[List[Tuple[float, float]]] = []
    for k, row in enumerate(vals):
        kept.append([])
        for cube, span in zip(X.cells(k), row):
            if span is not None:
                Y.add(cube)
                kept[k].append(span)
    while len(kept) > Y.maxdim() + 1:
        kept.pop()
    logger.debug(
        "levelset extension: %d of %d cells kept, eps=%s",
        Y.ncells(), X.ncells(), eps,
    )
    return RightFiltration(Y, kept)
