"""
Tests for the Matrix container: lifecycle, cell access and conversions.
"""

import math
from fractions import Fraction

import pytest
import numpy as np

from camel.core import Kind, Status, CamelError, tracking_allocator
from camel.bignum import BigInt, Rational
from camel.matrix import (
    Matrix, matrix_init, matrix_init0, matrix_destroy, matrix_move,
    matrix_get, matrix_get_checked, matrix_get_as, matrix_set, matrix_copy,
    matrix_equal,
)

from conftest import assert_no_leaks, assert_ok


class TestMatrixInit:
    """Test init / init0 / destroy."""

    def test_init_fixed_width_is_zero(self, heap):
        m = Matrix()
        assert_ok(matrix_init(heap, 2, 3, Kind.F32, m))
        assert m.shape == (2, 3)
        assert m.kind is Kind.F32
        assert m.nbytes == 2 * 3 * 4
        assert m.to_numpy().tolist() == [[0.0] * 3] * 2

    def test_init_structured_leaves_cells_unconstructed(self, heap):
        m = Matrix()
        assert_ok(matrix_init(heap, 2, 2, Kind.BIGINT, m))
        assert matrix_get(0, 0, m) is None
        matrix_destroy(m)

    def test_init0_constructs_cells(self, heap):
        m = Matrix()
        assert_ok(matrix_init0(heap, 2, 2, Kind.FRACTION, m))
        cell = matrix_get(1, 1, m)
        assert isinstance(cell, Rational)
        assert cell == 0
        matrix_destroy(m)

    @pytest.mark.parametrize("rows, columns", [(0, 3), (3, 0), (-1, 2)])
    def test_init_rejects_empty_shape(self, heap, rows, columns):
        assert matrix_init(heap, rows, columns, Kind.U8, Matrix()) == Status.INVALID_SIZE
        assert matrix_init0(heap, rows, columns, Kind.U8, Matrix()) == Status.INVALID_SIZE

    def test_init_null_arguments(self, heap):
        assert matrix_init(None, 1, 1, Kind.U8, Matrix()) == Status.NULL_POINTER
        assert matrix_init(heap, 1, 1, Kind.U8, None) == Status.NULL_POINTER

    def test_init_unknown_kind(self, heap):
        assert matrix_init(heap, 1, 1, 42, Matrix()) == Status.INVALID_ENUM_MEMBER

    def test_init_malloc_failure(self):
        alloc = tracking_allocator(fail_after=0)
        m = Matrix()
        assert matrix_init(alloc, 2, 2, Kind.I64, m) == Status.MALLOC
        assert not m.is_initialized

    def test_init0_rolls_back_on_cell_failure(self):
        """Buffer plus two cells succeed, the third cell fails."""
        alloc = tracking_allocator(fail_after=3)
        m = Matrix()
        assert matrix_init0(alloc, 2, 2, Kind.BIGINT, m) == Status.MALLOC
        assert not m.is_initialized
        assert_no_leaks(alloc)

    @pytest.mark.parametrize("kind", list(Kind))
    def test_destroy_releases_everything(self, kind):
        alloc = tracking_allocator()
        m = Matrix()
        assert_ok(matrix_init0(alloc, 3, 2, kind, m))
        matrix_destroy(m)
        assert not m.is_initialized
        assert m.shape == (0, 0)
        assert m.kind is None
        assert_no_leaks(alloc)

    def test_destroy_is_idempotent(self, heap):
        m = Matrix.zeros(1, 1, Kind.U8, heap)
        matrix_destroy(m)
        matrix_destroy(m)
        matrix_destroy(None)

    def test_init_replaces_live_matrix(self):
        alloc = tracking_allocator()
        m = Matrix()
        assert_ok(matrix_init0(alloc, 2, 2, Kind.BIGINT, m))
        assert_ok(matrix_init(alloc, 1, 3, Kind.U16, m))
        assert m.shape == (1, 3)
        matrix_destroy(m)
        assert_no_leaks(alloc)

    def test_context_manager(self):
        alloc = tracking_allocator()
        with Matrix.zeros(2, 2, Kind.EXPRESSION, alloc) as m:
            assert m.is_initialized
        assert not m.is_initialized
        assert_no_leaks(alloc)

    def test_move(self, heap):
        src = Matrix.from_list([[1, 2]], Kind.U8, heap)
        dst = Matrix.zeros(3, 3, Kind.F64, heap)
        matrix_move(src, dst)
        assert not src.is_initialized
        assert dst.tolist() == [[1, 2]]
        assert dst.kind is Kind.U8


class TestConstructors:
    """Test Matrix.zeros / from_list / from_numpy."""

    def test_from_list_fixed(self):
        m = Matrix.from_list([[1, 2, 3]], "i16")
        assert m.kind is Kind.I16
        assert m.tolist() == [[1, 2, 3]]

    def test_from_list_wraps_integers(self):
        m = Matrix.from_list([[256, -1, 300]], Kind.U8)
        assert m.tolist() == [[0, 255, 44]]

    def test_from_list_ragged(self):
        with pytest.raises(CamelError) as info:
            Matrix.from_list([[1, 2], [3]], Kind.I32)
        assert info.value.code is Status.INVALID_SIZE

    def test_from_list_empty(self):
        with pytest.raises(CamelError):
            Matrix.from_list([], Kind.I32)

    def test_from_list_rejects_float_nan_for_integers(self):
        with pytest.raises(CamelError) as info:
            Matrix.from_list([[math.nan]], Kind.I32)
        assert info.value.code is Status.INCOMPATIBLE_KINDS

    def test_from_list_structured(self):
        m = Matrix.from_list([[1, "2/4"], [Fraction(-3, 9), 5]], Kind.FRACTION)
        assert m.tolist() == [[Fraction(1), Fraction(1, 2)], [Fraction(-1, 3), Fraction(5)]]
        m.destroy()

    def test_from_list_bigint_huge(self):
        big = 2 ** 200 + 7
        m = Matrix.from_list([[big, -big]], Kind.BIGINT)
        assert m.tolist() == [[big, -big]]
        m.destroy()

    def test_from_list_bad_structured_value(self):
        with pytest.raises(CamelError) as info:
            Matrix.from_list([[1.5]], Kind.BIGINT)
        assert info.value.code is Status.INCOMPATIBLE_KINDS

    def test_from_list_does_not_leak_on_failure(self):
        alloc = tracking_allocator()
        with pytest.raises(CamelError):
            Matrix.from_list([[1, 1.5]], Kind.BIGINT, alloc)
        assert_no_leaks(alloc)

    def test_from_numpy(self):
        array = np.array([[1.5, -2.0], [3.25, 4.0]], dtype=np.float32)
        m = Matrix.from_numpy(array)
        assert m.kind is Kind.F32
        np.testing.assert_array_equal(m.to_numpy(), array)

    def test_from_numpy_1d_is_row(self):
        m = Matrix.from_numpy(np.arange(4, dtype=np.uint32))
        assert m.shape == (1, 4)

    def test_from_numpy_explicit_kind(self):
        m = Matrix.from_numpy(np.array([[1, 2]]), Kind.CF64)
        assert m.tolist() == [[1 + 0j, 2 + 0j]]

    def test_to_numpy_is_copy(self, i32_2x2):
        array = i32_2x2.to_numpy()
        array[0, 0] = 99
        assert i32_2x2[0, 0] == 1

    def test_to_numpy_rejects_structured(self):
        m = Matrix.zeros(1, 1, Kind.BIGINT)
        with pytest.raises(CamelError):
            m.to_numpy()
        m.destroy()


class TestCellAccess:
    """Test get / set and their checked variants."""

    def test_get_borrows(self, i32_2x2):
        assert matrix_get(1, 0, i32_2x2) == 3
        assert i32_2x2[0, 1] == 2

    def test_get_out_of_range(self, i32_2x2):
        assert matrix_get(2, 0, i32_2x2) is None
        status, cell = matrix_get_checked(0, 2, i32_2x2)
        assert status == Status.INVALID_INDEX
        assert cell is None
        with pytest.raises(CamelError):
            i32_2x2[5, 5]

    def test_get_destroyed(self):
        status, _ = matrix_get_checked(0, 0, Matrix())
        assert status == Status.NULL_POINTER

    def test_get_borrowed_structured_cell(self):
        m = Matrix.from_list([[7]], Kind.BIGINT)
        assert matrix_get(0, 0, m) is matrix_get(0, 0, m)
        m.destroy()

    def test_set_fixed_copies(self, i32_2x2):
        assert_ok(matrix_set(-5, 0, 0, i32_2x2))
        assert i32_2x2.tolist() == [[-5, 2], [3, 4]]

    def test_set_invalid_index(self, i32_2x2):
        assert matrix_set(1, 2, 0, i32_2x2) == Status.INVALID_INDEX
        assert matrix_set(1, 0, -1, i32_2x2) == Status.INVALID_INDEX

    def test_set_moves_structured_cell(self):
        alloc = tracking_allocator()
        m = Matrix.zeros(1, 2, Kind.BIGINT, alloc)
        cell = BigInt.from_int(123, alloc)
        assert_ok(matrix_set(cell, 0, 1, m))
        assert not cell.is_initialized
        assert m.tolist() == [[0, 123]]
        m.destroy()
        assert_no_leaks(alloc)

    def test_set_wrong_cell_type(self):
        m = Matrix.zeros(1, 1, Kind.BIGINT)
        assert matrix_set(Rational.from_value(1), 0, 0, m) == Status.INCOMPATIBLE_KINDS
        assert matrix_set(None, 0, 0, m) == Status.NULL_POINTER
        m.destroy()

    def test_setitem_converts_values(self):
        m = Matrix.zeros(1, 1, Kind.FRACTION)
        m[0, 0] = "3/6"
        assert m.tolist() == [[Fraction(1, 2)]]
        m.destroy()

    def test_get_as_matching_kind(self, i32_2x2):
        status, value = matrix_get_as(Kind.I32, 1, 1, i32_2x2)
        assert_ok(status)
        assert value == 4

    def test_get_as_checks_its_own_kind(self, i32_2x2):
        status, value = matrix_get_as(Kind.U16, 0, 0, i32_2x2)
        assert status == Status.INCOMPATIBLE_KINDS
        assert value == 65535

    def test_get_as_sentinels(self):
        m = Matrix.zeros(1, 1, Kind.F64)
        status, value = matrix_get_as(Kind.F64, 3, 3, m)
        assert status == Status.INVALID_INDEX
        assert math.isnan(value)
        status, value = matrix_get_as(Kind.I8, 0, 0, None)
        assert status == Status.NULL_POINTER
        assert value == -128
        status, value = matrix_get_as(Kind.FRACTION, 0, 0, m)
        assert value is None

    def test_get_as_unknown_kind(self, i32_2x2):
        status, _ = matrix_get_as(123, 0, 0, i32_2x2)
        assert status == Status.INVALID_ENUM_MEMBER


class TestCopyAndEquality:
    """Test matrix_copy and matrix_equal."""

    def test_copy_fixed(self, heap, f64_2x3):
        out = Matrix()
        assert_ok(matrix_copy(heap, f64_2x3, out))
        assert matrix_equal(out, f64_2x3)
        out[0, 0] = 100.0
        assert f64_2x3[0, 0] == 1.0

    def test_copy_structured_is_deep(self):
        alloc = tracking_allocator()
        src = Matrix.from_list([[1, 2]], Kind.BIGINT, alloc)
        out = src.copy()
        assert out == src
        assert out[0, 0] is not src[0, 0]
        src.destroy()
        assert out.tolist() == [[1, 2]]
        out.destroy()
        assert_no_leaks(alloc)

    def test_copy_into_preinitialised(self, heap, i32_2x2):
        out = Matrix.zeros(2, 2, Kind.I32, heap)
        assert_ok(matrix_copy(None, i32_2x2, out))
        assert out == i32_2x2
        wrong = Matrix.zeros(2, 2, Kind.I64, heap)
        assert matrix_copy(None, i32_2x2, wrong) == Status.INCOMPATIBLE_KINDS

    def test_equality(self, heap):
        a = Matrix.from_list([[1, 2]], Kind.U8, heap)
        assert a == Matrix.from_list([[1, 2]], Kind.U8, heap)
        assert a != Matrix.from_list([[1, 2]], Kind.U16, heap)
        assert a != Matrix.from_list([[1], [2]], Kind.U8, heap)
        assert matrix_equal(Matrix(), Matrix())
        assert not matrix_equal(a, Matrix())

    def test_repr(self, i32_2x2):
        assert repr(i32_2x2) == "Matrix(shape=(2, 2), kind=I32)"
        assert repr(Matrix()) == "Matrix(<destroyed>)"
