"""Tests for right (interval-valued) filtrations."""
import math

import pytest

from cell_complex import CubicalComplex, SimplicialComplex
from errors import FiltrationError, PreconditionError
from levelset import extend_levelset
from right_filtration import EventKind, RightFiltration
from zigzag import zigzag_barcode


def _idx(F, spx):
    return F.complex().find_idx(spx)


class TestConstruction:
    def test_add_requires_faces(self):
        F = RightFiltration()
        with pytest.raises(PreconditionError):
            F.add(0.0, 1.0, [0, 1])

    def test_overlapping_interval(self):
        F = RightFiltration()
        F.add(0.0, 2.0, [0])
        with pytest.raises(PreconditionError, match="overlaps"):
            F.add(2.0, 3.0, [0])

    def test_bad_interval(self):
        F = RightFiltration()
        with pytest.raises(PreconditionError):
            F.add(2.0, 1.0, [0])
        with pytest.raises(PreconditionError):
            F.add(-math.inf, 1.0, [0])

    def test_intervals_sorted(self):
        F = RightFiltration()
        F.add(5.0, 6.0, [0])
        F.add(0.0, math.inf, [1])
        F.add(0.0, 1.0, [0])
        assert F.intervals(0, _idx(F, [0])) == [(0.0, 1.0), (5.0, 6.0)]
        assert F.intervals(0, _idx(F, [1])) == [(0.0, math.inf)]

    def test_add_recursive_widens_faces(self):
        F = RightFiltration()
        F.add(0.0, 1.0, [0])
        F.add_recursive(0.5, 3.0, [0, 1])
        assert F.intervals(0, _idx(F, [0])) == [(0.0, 3.0)]
        assert F.intervals(0, _idx(F, [1])) == [(0.5, 3.0)]
        F.validate()

    def test_add_recursive_adds_face_interval(self):
        F = RightFiltration()
        F.add(0.0, 1.0, [0])
        F.add_recursive(2.0, 3.0, [0, 1])
        assert F.intervals(0, _idx(F, [0])) == [(0.0, 1.0), (2.0, 3.0)]
        F.validate()

    def test_from_values(self):
        X = SimplicialComplex()
        X.add_recursive([0, 1])
        F = RightFiltration(X, [[(0.0, 1.0), (0.0, 1.0)], [(0.5, 0.5)]])
        assert F.maxdim() == 1
        with pytest.raises(PreconditionError):
            RightFiltration(X, [[(0.0, 1.0)], [(0.5, 0.5)]])


class TestFiltrationCondition:
    def test_face_must_cover_cell(self):
        F = RightFiltration()
        F.add(0.0, 1.0, [0])
        F.add(0.0, 1.0, [1])
        F.add(0.5, 2.0, [0, 1])
        with pytest.raises(FiltrationError):
            F.validate()

    def test_face_copy(self):
        F = RightFiltration()
        F.add(0.0, 1.0, [0])
        F.add(2.0, 3.0, [0])
        F.add(0.0, 3.0, [1])
        F.add(2.5, 3.0, [0, 1])
        assert F.face_copy(1, 0, 0, _idx(F, [0])) == 1
        assert F.face_copy(1, 0, 0, _idx(F, [1])) == 0


class TestEvents:
    def test_order(self):
        F = RightFiltration()
        F.add(0.0, 1.0, [0])
        F.add(0.0, 1.0, [1])
        F.add(1.0, 1.0, [0, 1])
        got = [(e.time, e.kind, e.dim, e.index) for e in F.events()]
        assert got == [
            (0.0, EventKind.INSERT, 0, 0),
            (0.0, EventKind.INSERT, 0, 1),
            (1.0, EventKind.INSERT, 1, 0),
            (1.0, EventKind.DELETE, 1, 0),
            (1.0, EventKind.DELETE, 0, 0),
            (1.0, EventKind.DELETE, 0, 1),
        ]

    def test_one_pair_per_interval(self, triangle_zigzag):
        events = triangle_zigzag.events()
        assert len(events) == 2 * 7
        assert sum(e.kind is EventKind.INSERT for e in events) == 7


class TestCubical:
    def test_add_addresses_cube_in_axis_order(self):
        X = CubicalComplex.generate_grid((2, 2))
        F = RightFiltration(X, [[(0.0, 10.0)] * X.ncells(k) for k in range(3)])
        F.add(20.0, 30.0, ((1, 1), (0, 1)))
        assert F.intervals(1, X.find_idx(((1, 1), (0, 1)))) == [(0.0, 10.0), (20.0, 30.0)]
        assert F.intervals(1, X.find_idx(((0, 1), (1, 1)))) == [(0.0, 10.0)]

    def test_add_recursive_square(self):
        F = RightFiltration(CubicalComplex(2))
        F.add_recursive(0.0, 5.0, ((0, 1), (0, 1)))
        F.add_recursive(6.0, 8.0, ((0, 1), (1, 1)))
        assert [F.ncells(k) for k in range(3)] == [4, 4, 1]
        top = F.complex().find_idx(((0, 1), (1, 1)))
        assert F.intervals(1, top) == [(0.0, 5.0), (6.0, 8.0)]
        assert F.intervals(0, F.complex().find_idx(((1, 1), (1, 1)))) == [(0.0, 5.0), (6.0, 8.0)]
        F.validate()
        bars = zigzag_barcode(F)
        assert [(p.birth, p.death) for p in bars[0] if not p.is_empty()] == [(0.0, 5.0), (6.0, 8.0)]
        assert [p for p in bars[1] if not p.is_empty()] == []

    def test_levelset_values_with_gaps(self):
        X = CubicalComplex.generate_grid((3,))
        vals = extend_levelset([0.0, 1.0, 0.0], X, 0.1)
        with pytest.raises(PreconditionError, match="extend_zigzag_filtration"):
            RightFiltration(X, vals)
