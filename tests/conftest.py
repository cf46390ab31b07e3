"""Shared complexes for the test suite."""
import matplotlib

matplotlib.use("Agg")

import pytest

from cell_complex import SimplicialComplex
from filtration import Filtration
from right_filtration import RightFiltration

# six-vertex real projective plane: H1 = Z/2
RP2_TRIANGLES = [
    (1, 2, 3), (1, 3, 4), (1, 4, 5), (1, 5, 6), (1, 2, 6),
    (2, 3, 5), (3, 4, 6), (2, 4, 5), (3, 5, 6), (2, 4, 6),
]


@pytest.fixture
def rp2_complex():
    X = SimplicialComplex()
    for t in RP2_TRIANGLES:
        X.add_recursive(t)
    return X


@pytest.fixture
def rp2_filtration():
    F = Filtration()
    for i, t in enumerate(RP2_TRIANGLES):
        F.add_recursive(float(i), t)
    return F


@pytest.fixture
def triangle_zigzag():
    """Three edges on [0, 10] and the triangle they bound on [2, 4]."""
    F = RightFiltration()
    for e in [(0, 1), (0, 2), (1, 2)]:
        F.add_recursive(0.0, 10.0, e)
    F.add(2.0, 4.0, (0, 1, 2))
    return F
