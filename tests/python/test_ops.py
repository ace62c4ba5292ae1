"""
Tests for the dispatcher: element-wise operations, broadcasting, product,
transpose and in-place forms over fixed-width kinds.
"""

import pytest
import numpy as np

from camel.core import Kind, Status, CamelError, tracking_allocator, get_config
from camel.matrix import (
    Matrix, matrix_add, matrix_sub, matrix_mult, matrix_multew, matrix_divew,
    matrix_add_inplace, matrix_sub_inplace, matrix_multew_inplace,
    matrix_divew_inplace, matrix_transpose, matrix_destroy,
)

from conftest import assert_no_leaks, assert_ok


BINARY_OPS = [matrix_add, matrix_sub, matrix_multew, matrix_divew]
INPLACE_OPS = [matrix_add_inplace, matrix_sub_inplace, matrix_multew_inplace,
               matrix_divew_inplace]


class TestBroadcastAdd:
    """Scalar broadcasting on addition."""

    def test_add_broadcast_scalar_right(self, heap, i32_2x2, i32_scalar):
        out = Matrix()
        assert_ok(matrix_add(heap, i32_2x2, i32_scalar, out))
        assert out.tolist() == [[11, 12], [13, 14]]

    def test_add_broadcast_scalar_left(self, heap, i32_2x2, i32_scalar):
        out = Matrix()
        assert_ok(matrix_add(heap, i32_scalar, i32_2x2, out))
        assert out.tolist() == [[11, 12], [13, 14]]

    def test_add_inplace_broadcast(self, i32_2x2, i32_scalar):
        assert_ok(matrix_add_inplace(i32_scalar, i32_2x2))
        assert i32_2x2.tolist() == [[11, 12], [13, 14]]

    def test_both_scalars(self, heap):
        a = Matrix.from_list([[2]], Kind.U8, heap)
        b = Matrix.from_list([[3]], Kind.U8, heap)
        out = Matrix()
        assert_ok(matrix_multew(heap, a, b, out))
        assert out.shape == (1, 1)
        assert out.tolist() == [[6]]

    def test_no_axis_broadcasting(self, heap):
        """A row vector does not broadcast against a matrix."""
        a = Matrix.zeros(2, 3, Kind.F64, heap)
        row = Matrix.zeros(1, 3, Kind.F64, heap)
        for op in BINARY_OPS:
            assert op(heap, a, row, Matrix()) == Status.INCOMPATIBLE_SIZES

    def test_inplace_scalar_left_not_allowed(self, heap, i32_2x2, i32_scalar):
        """The in-place output keeps its shape; only ``right`` may broadcast."""
        assert matrix_add_inplace(i32_2x2, i32_scalar) == Status.INCOMPATIBLE_SIZES
        assert i32_scalar.tolist() == [[10]]

    def test_vectors_behave_like_matrices(self, heap):
        column = Matrix.from_list([[1], [2], [3]], Kind.I64, heap)
        out = Matrix()
        assert_ok(matrix_sub(heap, column, column, out))
        assert out.tolist() == [[0], [0], [0]]


class TestArgumentChecks:
    """Check order: null, kinds, sizes, output."""

    @pytest.mark.parametrize("op", BINARY_OPS + [matrix_mult])
    def test_null_operands(self, heap, i32_2x2, op):
        assert op(heap, None, i32_2x2, Matrix()) == Status.NULL_POINTER
        assert op(heap, i32_2x2, Matrix(), Matrix()) == Status.NULL_POINTER
        assert op(heap, i32_2x2, i32_2x2, None) == Status.NULL_POINTER

    @pytest.mark.parametrize("op", BINARY_OPS + [matrix_mult])
    def test_kind_mismatch(self, heap, i32_2x2, op):
        other = Matrix.zeros(2, 2, Kind.I64, heap)
        assert op(heap, i32_2x2, other, Matrix()) == Status.INCOMPATIBLE_KINDS

    def test_kind_checked_before_size(self, heap, i32_2x2):
        other = Matrix.zeros(3, 3, Kind.U8, heap)
        assert matrix_add(heap, i32_2x2, other, Matrix()) == Status.INCOMPATIBLE_KINDS

    @pytest.mark.parametrize("op", INPLACE_OPS)
    def test_inplace_checks(self, heap, i32_2x2, op):
        assert op(None, i32_2x2) == Status.NULL_POINTER
        assert op(i32_2x2, Matrix()) == Status.NULL_POINTER
        assert op(Matrix.zeros(2, 2, Kind.U32, heap), i32_2x2) == Status.INCOMPATIBLE_KINDS
        assert op(Matrix.zeros(3, 2, Kind.I32, heap), i32_2x2) == Status.INCOMPATIBLE_SIZES

    def test_preinitialised_output(self, i32_2x2, i32_scalar):
        out = Matrix.zeros(2, 2, Kind.I32)
        assert_ok(matrix_add(None, i32_2x2, i32_scalar, out))
        assert out.tolist() == [[11, 12], [13, 14]]

    def test_preinitialised_output_wrong_shape(self, i32_2x2, i32_scalar):
        out = Matrix.zeros(3, 2, Kind.I32)
        assert matrix_add(None, i32_2x2, i32_scalar, out) == Status.INVALID_SIZE
        assert out.tolist() == [[0, 0]] * 3

    def test_preinitialised_output_wrong_kind(self, i32_2x2, i32_scalar):
        out = Matrix.zeros(2, 2, Kind.F32)
        assert matrix_add(None, i32_2x2, i32_scalar, out) == Status.INCOMPATIBLE_KINDS
        assert out.is_initialized

    def test_missing_output_without_allocator(self, i32_2x2):
        assert matrix_add(None, i32_2x2, i32_2x2, Matrix()) == Status.NULL_POINTER

    def test_output_allocation_failure(self, i32_2x2):
        alloc = tracking_allocator(fail_after=0)
        out = Matrix()
        assert matrix_add(alloc, i32_2x2, i32_2x2, out) == Status.MALLOC
        assert not out.is_initialized


class TestDivision:
    """Element-wise division."""

    def test_integer_division_truncates_toward_zero(self, heap):
        a = Matrix.from_list([[7, -7, 7, -7]], Kind.I32, heap)
        b = Matrix.from_list([[2, 2, -2, -2]], Kind.I32, heap)
        out = Matrix()
        assert_ok(matrix_divew(heap, a, b, out))
        assert out.tolist() == [[3, -3, -3, 3]]

    def test_unsigned_division(self, heap):
        a = Matrix.from_list([[9, 250]], Kind.U8, heap)
        b = Matrix.from_list([[2]], Kind.U8, heap)
        out = Matrix()
        assert_ok(matrix_divew(heap, a, b, out))
        assert out.tolist() == [[4, 125]]

    def test_integer_zero_divisor(self, heap, i32_2x2):
        zero = Matrix.from_list([[1, 0], [1, 1]], Kind.I32, heap)
        out = Matrix()
        assert matrix_divew(heap, i32_2x2, zero, out) == Status.DIVISION_BY_ZERO
        assert not out.is_initialized

    def test_integer_zero_divisor_inplace_leaves_output(self, heap, i32_2x2):
        zero = Matrix.from_list([[0]], Kind.I32, heap)
        assert matrix_divew_inplace(zero, i32_2x2) == Status.DIVISION_BY_ZERO
        assert i32_2x2.tolist() == [[1, 2], [3, 4]]

    def test_float_division_is_ieee(self, heap):
        a = Matrix.from_list([[1.0, -1.0, 0.0]], Kind.F64, heap)
        b = Matrix.from_list([[0.0]], Kind.F64, heap)
        out = Matrix()
        assert_ok(matrix_divew(heap, a, b, out))
        values = out.to_numpy()[0]
        assert values[0] == np.inf
        assert values[1] == -np.inf
        assert np.isnan(values[2])

    def test_complex_float_division(self, heap):
        a = Matrix.from_list([[1 + 1j]], Kind.CF64, heap)
        b = Matrix.from_list([[1 - 1j]], Kind.CF64, heap)
        out = Matrix()
        assert_ok(matrix_divew(heap, a, b, out))
        np.testing.assert_allclose(out.to_numpy(), [[1j]])


class TestWrapping:
    """Fixed-width arithmetic wraps modulo the width."""

    def test_unsigned_overflow(self, heap):
        a = Matrix.from_list([[250]], Kind.U8, heap)
        b = Matrix.from_list([[10]], Kind.U8, heap)
        out = Matrix()
        assert_ok(matrix_add(heap, a, b, out))
        assert out.tolist() == [[4]]

    def test_unsigned_underflow(self, heap):
        a = Matrix.from_list([[0]], Kind.U16, heap)
        b = Matrix.from_list([[1]], Kind.U16, heap)
        out = Matrix()
        assert_ok(matrix_sub(heap, a, b, out))
        assert out.tolist() == [[65535]]

    def test_signed_overflow(self, heap):
        a = Matrix.from_list([[127]], Kind.I8, heap)
        out = Matrix()
        assert_ok(matrix_multew(heap, a, Matrix.from_list([[2]], Kind.I8, heap), out))
        assert out.tolist() == [[-2]]


class TestProduct:
    """Matrix product with the library's shape rule."""

    def test_product_2x2(self, heap, i32_2x2):
        right = Matrix.from_list([[5, 6], [7, 8]], Kind.I32, heap)
        out = Matrix()
        assert_ok(matrix_mult(heap, i32_2x2, right, out))
        assert out.tolist() == [[19, 22], [43, 50]]

    def test_product_rejects_rows_columns_mismatch(self, heap):
        """left.rows (3) != right.columns (2)."""
        left = Matrix.zeros(3, 2, Kind.I32, heap)
        right = Matrix.zeros(3, 2, Kind.I32, heap)
        assert matrix_mult(heap, left, right, Matrix()) == Status.INCOMPATIBLE_SIZES

    def test_product_shape(self, heap):
        """(2x3) @ (3x2) satisfies the rule and yields left.rows x right.columns."""
        left = Matrix.from_numpy(np.arange(6, dtype=np.float64).reshape(2, 3), allocator=heap)
        right = Matrix.from_numpy(np.arange(6, dtype=np.float64).reshape(3, 2), allocator=heap)
        out = Matrix()
        assert_ok(matrix_mult(heap, left, right, out))
        assert out.shape == (2, 2)
        np.testing.assert_allclose(out.to_numpy(), left.to_numpy() @ right.to_numpy())

    def test_product_rejects_non_square_chain(self, heap):
        """(2x3) @ (3x4): inner dimensions agree but left.rows != right.columns."""
        left = Matrix.zeros(2, 3, Kind.F64, heap)
        right = Matrix.zeros(3, 4, Kind.F64, heap)
        assert matrix_mult(heap, left, right, Matrix()) == Status.INCOMPATIBLE_SIZES

    def test_product_uses_leading_rows_of_right(self, heap):
        """(2x3) @ (4x2): the sum runs over left.columns, extra rows of right are unused."""
        left_values = np.arange(6, dtype=np.int32).reshape(2, 3)
        right_values = np.arange(8, dtype=np.int32).reshape(4, 2)
        left = Matrix.from_numpy(left_values, allocator=heap)
        right = Matrix.from_numpy(right_values, allocator=heap)
        out = Matrix()
        assert_ok(matrix_mult(heap, left, right, out))
        assert out.shape == (2, 2)
        assert out.tolist() == (left_values @ right_values[:3, :]).tolist()

    def test_product_taller_right_structured(self, heap):
        """Structured cells follow the same rule as fixed-width ones."""
        left = Matrix.from_list([[1, 2, 3], [4, 5, 6]], Kind.BIGINT, heap)
        right = Matrix.from_list([[1, 0], [0, 1], [1, 1], [9, 9]], Kind.BIGINT, heap)
        out = Matrix()
        assert_ok(matrix_mult(heap, left, right, out))
        assert out.tolist() == [[4, 5], [10, 11]]

    def test_product_rejects_short_right(self, heap):
        """(2x3) @ (2x2): right has fewer rows than left has columns."""
        left = Matrix.zeros(2, 3, Kind.I32, heap)
        right = Matrix.zeros(2, 2, Kind.I32, heap)
        assert matrix_mult(heap, left, right, Matrix()) == Status.INCOMPATIBLE_SIZES

    def test_scalar_product(self, heap, i32_2x2):
        two = Matrix.from_list([[2]], Kind.I32, heap)
        out = Matrix()
        assert_ok(matrix_mult(heap, i32_2x2, two, out))
        assert out.tolist() == [[2, 4], [6, 8]]
        out2 = Matrix()
        assert_ok(matrix_mult(heap, two, i32_2x2, out2))
        assert out2 == out

    def test_product_overwrites_preinitialised_output(self, heap, i32_2x2):
        out = Matrix.from_list([[100, 100], [100, 100]], Kind.I32, heap)
        assert_ok(matrix_mult(None, i32_2x2, i32_2x2, out))
        assert out.tolist() == [[7, 10], [15, 22]]

    def test_operator(self, i32_2x2):
        assert (i32_2x2 @ i32_2x2).tolist() == [[7, 10], [15, 22]]


class TestTranspose:
    """Transpose over fixed-width kinds."""

    def test_transpose_round_trip(self, heap, f64_2x3):
        t = Matrix()
        assert_ok(matrix_transpose(heap, f64_2x3, t))
        assert t.tolist() == [[1.0, 4.0], [2.0, 5.0], [3.0, 6.0]]
        back = Matrix()
        assert_ok(matrix_transpose(heap, t, back))
        assert back.to_numpy().tobytes() == f64_2x3.to_numpy().tobytes()

    @pytest.mark.parametrize("kind", [Kind.U8, Kind.I64, Kind.F32, Kind.CF32])
    def test_transpose_twice_is_identity(self, heap, kind):
        m = Matrix.from_numpy(np.arange(12).reshape(3, 4), kind, heap)
        assert m.T.T == m

    def test_transpose_preinitialised(self, f64_2x3):
        out = Matrix.zeros(2, 3, Kind.F64)
        assert matrix_transpose(None, f64_2x3, out) == Status.INVALID_SIZE
        out = Matrix.zeros(3, 2, Kind.F64)
        assert_ok(matrix_transpose(None, f64_2x3, out))

    def test_transpose_null(self, heap):
        assert matrix_transpose(heap, Matrix(), Matrix()) == Status.NULL_POINTER


class TestOperators:
    """Operator surface on Matrix."""

    def test_arithmetic_operators(self, i32_2x2):
        assert (i32_2x2 + i32_2x2).tolist() == [[2, 4], [6, 8]]
        assert (i32_2x2 - i32_2x2).tolist() == [[0, 0], [0, 0]]
        assert (i32_2x2 * i32_2x2).tolist() == [[1, 4], [9, 16]]
        assert (i32_2x2 / i32_2x2).tolist() == [[1, 1], [1, 1]]

    def test_inplace_operators(self, heap, i32_2x2, i32_scalar):
        m = i32_2x2
        m += i32_scalar
        m -= Matrix.from_list([[1]], Kind.I32, heap)
        m *= Matrix.from_list([[2]], Kind.I32, heap)
        m /= Matrix.from_list([[4]], Kind.I32, heap)
        assert m is i32_2x2
        assert m.tolist() == [[5, 5], [6, 6]]

    def test_operator_errors_raise(self, heap, i32_2x2):
        with pytest.raises(CamelError) as info:
            i32_2x2 + Matrix.zeros(2, 2, Kind.F64, heap)
        assert info.value.code is Status.INCOMPATIBLE_KINDS

    def test_non_matrix_operand(self, i32_2x2):
        with pytest.raises(TypeError):
            i32_2x2 + 1


class TestAllocatorDiscipline:
    """Outputs built by a call are released through the same allocator."""

    def test_no_leaks_after_operations(self):
        alloc = tracking_allocator()
        a = Matrix.from_numpy(np.ones((3, 3)), Kind.F64, alloc)
        out = Matrix()
        for op in BINARY_OPS + [matrix_mult]:
            assert_ok(op(alloc, a, a, out))
        assert_ok(matrix_transpose(alloc, a, out))
        matrix_destroy(out)
        matrix_destroy(a)
        assert_no_leaks(alloc)


class TestBlasRouting:
    """Float in-place add/sub through BLAS axpy."""

    def test_axpy_route(self, requires_blas, heap):
        get_config().use_blas = True
        out = Matrix.from_list([[1.0, 2.0], [3.0, 4.0]], Kind.F64, heap)
        right = Matrix.from_list([[0.5, 0.5], [0.5, 0.5]], Kind.F64, heap)
        assert_ok(matrix_add_inplace(right, out))
        np.testing.assert_allclose(out.to_numpy(), [[1.5, 2.5], [3.5, 4.5]])
        assert_ok(matrix_sub_inplace(right, out))
        np.testing.assert_allclose(out.to_numpy(), [[1.0, 2.0], [3.0, 4.0]])

    def test_scalar_right_uses_numpy(self, heap):
        get_config().use_blas = True
        out = Matrix.from_list([[1.0, 2.0]], Kind.F32, heap)
        assert_ok(matrix_add_inplace(Matrix.from_list([[1.0]], Kind.F32, heap), out))
        assert out.tolist() == [[2.0, 3.0]]

    def test_missing_backend_falls_back(self, monkeypatch, tmp_path, heap):
        config = get_config()
        config.use_blas = True
        config.blas_library = str(tmp_path / "libnothing.so")
        monkeypatch.setattr("ctypes.util.find_library", lambda name: None)
        monkeypatch.setattr("camel._kernel.lib_loader._numpy_bundled", lambda: [])
        out = Matrix.from_list([[1.0, 2.0]], Kind.F64, heap)
        right = Matrix.from_list([[1.0, 1.0]], Kind.F64, heap)
        with pytest.warns(UserWarning, match="CBLAS back-end not available"):
            assert_ok(matrix_add_inplace(right, out))
        assert out.tolist() == [[2.0, 3.0]]
        assert not config.use_blas
