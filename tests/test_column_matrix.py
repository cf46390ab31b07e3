"""Tests for column-sparse matrices."""
import pytest

from column_matrix import ColumnMatrix
from field import F2, F3


def _matrix(field):
    # 2 x 3
    return ColumnMatrix.from_columns(2, [[(0, 1)], [(1, 1)], [(0, 1), (1, 1)]], field)


class TestColumnMatrix:
    def test_shape(self):
        A = _matrix(F2)
        assert A.shape == (2, 3)
        assert A.nnz() == 4
        assert ColumnMatrix.identity(3).nnz() == 3

    def test_add_col(self):
        A = _matrix(F2)
        A.add_col(2, 1, 0)
        assert A[2].ind == [1]

    def test_swap_cols(self):
        A = _matrix(F2)
        A.swap_cols(0, 1)
        assert A[0].ind == [1]
        assert A[1].ind == [0]

    def test_matmul(self):
        A = _matrix(F3)
        B = ColumnMatrix.from_columns(3, [[(0, 1), (1, 1), (2, 2)]], F3)
        # A0 + A1 + 2 A2 = (3, 3) = 0 over GF(3)
        assert (A @ B).is_zero()
        assert list(A @ ColumnMatrix.identity(3, F3)) == list(A)

    def test_matmul_shape_mismatch(self):
        with pytest.raises(ValueError):
            _matrix(F2) @ ColumnMatrix.identity(2)

    def test_copy_is_independent(self):
        A = _matrix(F2)
        B = A.copy()
        B.add_col(0, 1, 2)
        assert A[0].ind == [0]
        assert B[0].ind == [1]
