"""
Test filtrations in the "f dim v0 ... v_dim" text notation.

The n-ball is the full simplex on n + 1 vertices and the n-sphere its
boundary (all proper faces of the simplex on n + 2 vertices). Vertices are
numbered from 1 and simplex i of the listing gets value i, so faces always
come before their cofaces.
"""
from __future__ import annotations
from itertools import combinations
from pathlib import Path
from typing import List

from filtration import Filtration


def all_combinations(lst: List[int]) -> List[List[int]]:
    """Every nonempty subset of lst, by size then lexicographically."""
    result = []
    for k in range(1, len(lst) + 1):
        for combo in combinations(lst, k):
            result.append(list(combo))
    return result


def _from_listing(simplices: List[List[int]]) -> Filtration:
    F = Filtration()
    for i, spx in enumerate(simplices):
        F.add(float(i), spx)
    return F


def ball_filtration(n: int) -> Filtration:
    return _from_listing(all_combinations(list(range(1, n + 2))))


def sphere_filtration(n: int) -> Filtration:
    # drop the top simplex of the (n+1)-ball
    return _from_listing(all_combinations(list(range(1, n + 3)))[:-1])


def format_filtration(F: Filtration) -> List[str]:
    """One "f dim v0 ... v_dim" line per simplex, sorted by (val, dim, vertices)."""
    return [f"{s.val!r} {s.dim} " + " ".join(map(str, s.vert)) for s in F.simplices()]


def write_filtration(F: Filtration, outfile: str | Path) -> List[str]:
    lines = format_filtration(F)
    with open(outfile, "w", encoding="utf-8") as f:
        for line in lines:
            f.write(line + "\n")
    return lines
