"""Tests for zigzag barcodes of right filtrations."""
import math

import numpy as np
import pytest

from cell_complex import CubicalComplex
from errors import PersistenceError
from field import F2, F3, Q
from filtration_notation import sphere_filtration
from levelset import extend_zigzag_filtration
from persistence import barcode
from reducer import ReductionFlags
from right_filtration import RightFiltration
from zigzag import Phase, ZigzagReducer, zigzag_barcode


def _bars(bars, k):
    return [(p.birth, p.death, p.birth_closed, p.death_closed) for p in bars[k] if not p.is_empty()]


def _as_right(F):
    return RightFiltration(F.complex(), [[(v, math.inf) for v in row] for row in F.vals()])


class TestScenarios:
    def test_cycle_over_whole_range(self):
        F = RightFiltration()
        for e in [(0, 1), (0, 2), (1, 2)]:
            F.add_recursive(0.0, 10.0, e)
        bars = zigzag_barcode(F)
        assert _bars(bars, 1) == [(0.0, 10.0, True, True)]
        assert _bars(bars, 0) == [(0.0, 10.0, True, True)]

    def test_cycle_filled_for_a_while(self, triangle_zigzag):
        bars = zigzag_barcode(triangle_zigzag)
        assert _bars(bars, 1) == [(0.0, 2.0, True, False), (4.0, 10.0, False, True)]
        assert _bars(bars, 0) == [(0.0, 10.0, True, True)]
        assert _bars(bars, 2) == []

    def test_vertex_with_two_intervals(self):
        F = RightFiltration()
        F.add(0.0, 1.0, [0])
        F.add(2.0, 3.0, [0])
        assert _bars(zigzag_barcode(F), 0) == [(0.0, 1.0, True, True), (2.0, 3.0, True, True)]

    def test_edge_with_two_intervals(self):
        F = RightFiltration()
        F.add(0.0, 10.0, [0])
        F.add(0.0, 10.0, [1])
        F.add(1.0, 2.0, [0, 1])
        F.add(5.0, 6.0, [0, 1])
        bars = zigzag_barcode(F, F3)
        assert _bars(bars, 0) == [
            (0.0, 1.0, True, False),
            (0.0, 10.0, True, True),
            (2.0, 5.0, False, False),
            (6.0, 10.0, False, True),
        ]
        assert _bars(bars, 1) == []

    def test_cell_outside_face_interval(self):
        F = RightFiltration()
        F.add(0.0, 1.0, [0])
        F.add(0.0, 1.0, [1])
        F.add(0.5, 2.0, [0, 1])
        with pytest.raises(PersistenceError):
            barcode(F)


class TestMonotoneConsistency:
    @pytest.mark.parametrize("field", [F2, Q])
    def test_rp2(self, rp2_filtration, field):
        monotone = barcode(rp2_filtration, field)
        right = barcode(_as_right(rp2_filtration), field)
        for k in monotone:
            assert sorted(p.interval() for p in right[k]) == sorted(p.interval() for p in monotone[k])

    def test_sphere(self):
        F = sphere_filtration(2)
        right = barcode(_as_right(F))
        assert [p.interval() for p in right[2]] == [(2, 13.0, math.inf)]
        assert all(p.death_closed for p in right[2])


class TestFlags:
    def test_flags_do_not_change_barcode(self, triangle_zigzag):
        baseline = zigzag_barcode(triangle_zigzag)
        for flags in ReductionFlags.all_combinations():
            assert zigzag_barcode(triangle_zigzag, F2, flags) == baseline, flags

    @pytest.mark.parametrize("field", [F2, F3])
    def test_flags_on_monotone_input(self, rp2_filtration, field):
        F = _as_right(rp2_filtration)
        baseline = zigzag_barcode(F, field)
        for flags in ReductionFlags.all_combinations():
            assert zigzag_barcode(F, field, flags) == baseline, flags

    def test_executor_rejected(self, triangle_zigzag):
        with pytest.raises(ValueError):
            barcode(triangle_zigzag, executor=object())


class TestStateMachine:
    def test_phases(self, triangle_zigzag):
        Z = ZigzagReducer(triangle_zigzag)
        assert Z.phase is Phase.BEFORE
        assert Z.advance() is Phase.DURING
        assert Z.advance() is Phase.AFTER
        assert Z.advance() is Phase.BEFORE
        assert Z.position == 1

    def test_operations(self, triangle_zigzag):
        Z = ZigzagReducer(triangle_zigzag)
        # cone vertex, then one insertion and one deletion per interval
        assert len(Z.operations) == 1 + 2 * 7
        first = Z.step()
        assert first.event is None and first.dim == 0
        assert Z.coned_complex().maxdim == 3

    def test_exhausted(self, triangle_zigzag):
        Z = ZigzagReducer(triangle_zigzag).run()
        assert Z.done
        with pytest.raises(PersistenceError):
            Z.advance()


class TestLevelset:
    def test_bump(self):
        X = CubicalComplex.generate_grid((3,))
        F = extend_zigzag_filtration(np.array([0.0, 1.0, 0.0]), X, 0.5)
        bars = barcode(F)
        assert _bars(bars, 0) == [(-0.5, 0.5, True, False), (-0.5, 1.5, True, True)]

    def test_flags_on_grid(self):
        f = np.array([[0.0, 1.0, 0.0], [1.0, 2.0, 1.0], [0.0, 1.0, 3.0]])
        F = extend_zigzag_filtration(f, CubicalComplex.generate_grid(f.shape), 1.0)
        baseline = zigzag_barcode(F)
        for flags in ReductionFlags.all_combinations():
            assert zigzag_barcode(F, F2, flags) == baseline, flags
