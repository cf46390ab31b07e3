"""Tests for filtered boundary matrices."""
import math

import pytest

from boundary import FilteredChainComplex
from column_matrix import ColumnMatrix
from errors import FiltrationError, PreconditionError
from field import F3
from filtration import Filtration
from sparse_vector import SparseVector


class TestFromFiltration:
    def test_sorted_by_value(self):
        F = Filtration()
        F.add(1.0, [0])
        F.add(0.0, [1])
        F.add(2.0, [0, 1])
        FC = FilteredChainComplex.from_filtration(F)
        assert FC.vals == [[0.0, 1.0], [2.0]]
        assert FC.perm[0] == [1, 0]
        assert FC.boundary(1)[0].ind == [0, 1]
        assert FC.print_dense(1) == "1\n1"

    def test_coefficients_follow_field(self):
        F = Filtration()
        F.add_recursive(0.0, [0, 1])
        FC = FilteredChainComplex.from_filtration(F, F3)
        # faces of (0, 1): (1,) with +1 and (0,) with -1 = 2 in GF(3)
        col = FC.boundary(1)[0]
        assert sorted(col.val) == [1, 2]
        assert FC.dim(0) == 2
        assert FC.maxdim == 1

    def test_cell_before_face(self):
        F = Filtration()
        F.add(1.0, [0])
        F.add(1.0, [1])
        F.add(0.5, [0, 1])
        with pytest.raises(FiltrationError, match="filtration condition"):
            FilteredChainComplex.from_filtration(F)


class TestDirectConstruction:
    def test_identity_perm(self):
        FC = FilteredChainComplex([ColumnMatrix.zeros(0, 2)], [[0.0, 1.0]])
        assert FC.perm == [[0, 1]]

    def test_unsorted_values(self):
        with pytest.raises(PreconditionError, match="not sorted"):
            FilteredChainComplex([ColumnMatrix.zeros(0, 2)], [[1.0, 0.0]])

    def test_non_finite_value(self):
        with pytest.raises(PreconditionError):
            FilteredChainComplex([ColumnMatrix.zeros(0, 1)], [[math.inf]])

    def test_row_count(self):
        B1 = ColumnMatrix(3, [SparseVector([0, 1])])
        with pytest.raises(PreconditionError, match="rows"):
            FilteredChainComplex([ColumnMatrix.zeros(0, 2), B1], [[0.0, 0.0], [1.0]])

    def test_stored_zero_coefficient(self):
        B1 = ColumnMatrix(2, [SparseVector([0, 1], [1, 1]), SparseVector([0, 1], [1, 0])])
        with pytest.raises(PreconditionError, match="stores a zero"):
            FilteredChainComplex([ColumnMatrix.zeros(0, 2), B1], [[0.0, 0.0], [1.0, 1.0]])

    def test_zero_after_field_reduction(self):
        B1 = ColumnMatrix(2, [SparseVector([0, 1], [1, 3], F3)], F3)
        with pytest.raises(PreconditionError, match="stores a zero"):
            FilteredChainComplex([ColumnMatrix.zeros(0, 2, F3), B1], [[0.0, 0.0], [1.0]], field=F3)

    def test_unsorted_rows(self):
        B1 = ColumnMatrix(3, [SparseVector([2, 0])])
        with pytest.raises(PreconditionError, match="strictly increasing"):
            FilteredChainComplex([ColumnMatrix.zeros(0, 3), B1], [[0.0, 0.0, 0.0], [1.0]])

    def test_duplicate_rows(self):
        B1 = ColumnMatrix(2, [SparseVector([1, 1])])
        with pytest.raises(PreconditionError, match="strictly increasing"):
            FilteredChainComplex([ColumnMatrix.zeros(0, 2), B1], [[0.0, 0.0], [1.0]])

    def test_value_count(self):
        with pytest.raises(PreconditionError):
            FilteredChainComplex([ColumnMatrix.zeros(0, 2)], [[0.0]])
