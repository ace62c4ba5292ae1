"""
Generic operation dispatcher.

Every entry point is a total function returning a ``Status``. Checks run in
a fixed order:

    1. operands present and constructed          -> NULL_POINTER
    2. operand kinds equal                         -> INCOMPATIBLE_KINDS
    3. shapes compatible (scalar broadcasting)     -> INCOMPATIBLE_SIZES
    4. output: constructed by the call when an allocator is given, otherwise
       validated (shape -> INVALID_SIZE, kind -> INCOMPATIBLE_KINDS)

An output constructed by a call that then fails is destroyed before return.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Optional, Tuple, Union

import numpy as np

from ..core.allocator import Allocator
from ..core.error import Status
from ..core.kinds import Kind, normalize_kind
from . import _kernels
from ._elements import element_for
from ._matrix import Matrix, matrix_init, matrix_init0
from ._ownership import OutputGuard


__all__ = [
    'matrix_add',
    'matrix_sub',
    'matrix_mult',
    'matrix_multew',
    'matrix_divew',
    'matrix_add_inplace',
    'matrix_sub_inplace',
    'matrix_multew_inplace',
    'matrix_divew_inplace',
    'matrix_transpose',
    'matrix_copy',
    'matrix_equal',
    'matrix_get',
    'matrix_get_checked',
    'matrix_get_as',
    'matrix_set',
]

logger = logging.getLogger("camel.matrix")


# =============================================================================
# Validation helpers
# =============================================================================

def _live(matrix: Optional[Matrix]) -> bool:
    return matrix is not None and matrix.is_initialized


def _finish(name: str, status: Status) -> Status:
    if status != Status.SUCCESS:
        logger.debug("%s returned %s", name, status.name)
    return status


def _check_operands(left: Optional[Matrix], right: Optional[Matrix],
                    out: Optional[Matrix]) -> Status:
    if not _live(left) or not _live(right) or out is None:
        return Status.NULL_POINTER
    if left.kind != right.kind:
        return Status.INCOMPATIBLE_KINDS
    return Status.SUCCESS


def _broadcast_shape(left: Matrix, right: Matrix) -> Tuple[Status, int, int]:
    """Output shape under the scalar broadcasting rule."""
    if left.shape == right.shape:
        return Status.SUCCESS, left.rows, left.columns
    if left.is_scalar:
        return Status.SUCCESS, right.rows, right.columns
    if right.is_scalar:
        return Status.SUCCESS, left.rows, left.columns
    return Status.INCOMPATIBLE_SIZES, 0, 0


def _prepare_out(allocator: Optional[Allocator], rows: int, columns: int, kind: Kind,
                 guard: OutputGuard, construct_cells: bool = True) -> Status:
    """
    Construct the output, or validate a caller-constructed one.

    Args:
        construct_cells: Zero-construct structured cells (``init0``). Kernels
            that replace every cell with a copy pass ``False``.
    """
    out = guard.out
    if allocator is None:
        if not out.is_initialized:
            return Status.NULL_POINTER
        if out.shape != (rows, columns):
            return Status.INVALID_SIZE
        if out.kind != kind:
            return Status.INCOMPATIBLE_KINDS
        return Status.SUCCESS

    init = matrix_init0 if kind.is_structured and construct_cells else matrix_init
    status = init(allocator, rows, columns, kind, out)
    if status == Status.SUCCESS:
        guard.mark_allocated()
    return status


# =============================================================================
# Element-wise operations
# =============================================================================

def _elementwise(name: str, op: str, allocator: Optional[Allocator],
                 left: Optional[Matrix], right: Optional[Matrix],
                 out: Optional[Matrix]) -> Status:
    status = _check_operands(left, right, out)
    if status != Status.SUCCESS:
        return _finish(name, status)

    status, rows, columns = _broadcast_shape(left, right)
    if status != Status.SUCCESS:
        return _finish(name, status)

    if op == 'div':
        status = _kernels.check_divisors(left.kind, right)
        if status != Status.SUCCESS:
            return _finish(name, status)

    guard = OutputGuard(out)
    status = _prepare_out(allocator, rows, columns, left.kind, guard)
    if status == Status.SUCCESS:
        status = _kernels.elementwise(op, left, right, out)
    return _finish(name, guard.finish(status))


def matrix_add(allocator: Optional[Allocator], left: Optional[Matrix],
               right: Optional[Matrix], out: Optional[Matrix]) -> Status:
    """
    ``out = left + right``.

    Shapes must match, or exactly one operand is ``1x1`` and is applied to
    every cell of the other.

    Args:
        allocator: Constructs ``out`` when given. When ``None``, ``out`` must
            already have the result shape and kind.
        left: Left operand.
        right: Right operand.
        out: Result matrix.

    Returns:
        Status of the operation.

    Example:
        >>> out = Matrix()
        >>> matrix_add(heap_allocator(), a, b, out)
        <Status.SUCCESS: 0>
    """
    return _elementwise("matrix_add", 'add', allocator, left, right, out)


def matrix_sub(allocator, left, right, out) -> Status:
    """``out = left - right`` under the scalar broadcasting rule."""
    return _elementwise("matrix_sub", 'sub', allocator, left, right, out)


def matrix_multew(allocator, left, right, out) -> Status:
    """Element-wise product under the scalar broadcasting rule."""
    return _elementwise("matrix_multew", 'mul', allocator, left, right, out)


def matrix_divew(allocator, left, right, out) -> Status:
    """
    Element-wise quotient under the scalar broadcasting rule.

    Integer kinds truncate toward zero. A zero divisor in an integer or
    exact kind returns ``DIVISION_BY_ZERO`` before any cell is written;
    float kinds follow IEEE rules.
    """
    return _elementwise("matrix_divew", 'div', allocator, left, right, out)


# =============================================================================
# In-place operations
# =============================================================================

def _inplace(name: str, op: str, right: Optional[Matrix], out: Optional[Matrix]) -> Status:
    if not _live(right) or not _live(out):
        return _finish(name, Status.NULL_POINTER)
    if right.kind != out.kind:
        return _finish(name, Status.INCOMPATIBLE_KINDS)
    if right.shape != out.shape and not right.is_scalar:
        return _finish(name, Status.INCOMPATIBLE_SIZES)
    if op == 'div':
        status = _kernels.check_divisors(out.kind, right)
        if status != Status.SUCCESS:
            return _finish(name, status)
    return _finish(name, _kernels.elementwise_inplace(op, right, out))


def matrix_add_inplace(right: Optional[Matrix], out: Optional[Matrix]) -> Status:
    """``out += right``; ``right`` matches ``out`` or is ``1x1``."""
    return _inplace("matrix_add_inplace", 'add', right, out)


def matrix_sub_inplace(right, out) -> Status:
    return _inplace("matrix_sub_inplace", 'sub', right, out)


def matrix_multew_inplace(right, out) -> Status:
    return _inplace("matrix_multew_inplace", 'mul', right, out)


def matrix_divew_inplace(right, out) -> Status:
    return _inplace("matrix_divew_inplace", 'div', right, out)


# =============================================================================
# Matrix product and transpose
# =============================================================================

def matrix_mult(allocator: Optional[Allocator], left: Optional[Matrix],
                right: Optional[Matrix], out: Optional[Matrix]) -> Status:
    """
    Matrix product with the library's shape rule.

    A ``1x1`` operand degrades the call to a scalar product over the other
    operand. Otherwise ``left.rows`` must equal ``right.columns``; the result
    is ``left.rows x right.columns`` and the sum runs over the first
    ``left.columns`` rows of ``right``.

    Returns:
        ``INCOMPATIBLE_SIZES`` when ``left.rows != right.columns`` or when
        ``right`` has fewer rows than ``left`` has columns.
    """
    name = "matrix_mult"
    status = _check_operands(left, right, out)
    if status != Status.SUCCESS:
        return _finish(name, status)

    if left.is_scalar or right.is_scalar:
        return _elementwise(name, 'matmul', allocator, left, right, out)

    if left.rows != right.columns or left.columns > right.rows:
        return _finish(name, Status.INCOMPATIBLE_SIZES)

    guard = OutputGuard(out)
    status = _prepare_out(allocator, left.rows, right.columns, left.kind, guard)
    if status == Status.SUCCESS:
        status = _kernels.product(left, right, out)
    return _finish(name, guard.finish(status))


def matrix_transpose(allocator: Optional[Allocator], matrix: Optional[Matrix],
                     out: Optional[Matrix]) -> Status:
    """``out = matrix^T``. Structured cells are deep-copied."""
    name = "matrix_transpose"
    if not _live(matrix) or out is None:
        return _finish(name, Status.NULL_POINTER)
    guard = OutputGuard(out)
    status = _prepare_out(allocator, matrix.columns, matrix.rows, matrix.kind, guard,
                          construct_cells=False)
    if status == Status.SUCCESS:
        status = _kernels.transpose(matrix, out)
    return _finish(name, guard.finish(status))


def matrix_copy(allocator: Optional[Allocator], src: Optional[Matrix],
                out: Optional[Matrix]) -> Status:
    """Deep copy of ``src`` into ``out``."""
    name = "matrix_copy"
    if not _live(src) or out is None:
        return _finish(name, Status.NULL_POINTER)
    if src is out:
        return Status.SUCCESS
    guard = OutputGuard(out)
    status = _prepare_out(allocator, src.rows, src.columns, src.kind, guard,
                          construct_cells=False)
    if status == Status.SUCCESS:
        status = _kernels.copy_cells(src, out)
    return _finish(name, guard.finish(status))


def matrix_equal(left: Optional[Matrix], right: Optional[Matrix]) -> bool:
    """Cell-for-cell equality of shape, kind and values."""
    if left is None or right is None:
        return left is right
    if not left.is_initialized or not right.is_initialized:
        return left.is_initialized == right.is_initialized
    if left.shape != right.shape or left.kind != right.kind:
        return False
    if left.kind.is_fixed_width:
        return bool(np.array_equal(left._data, right._data))
    element = element_for(left.kind)
    return all(element.equal(a, b) for a, b in zip(left._cells, right._cells))


# =============================================================================
# Cell access
# =============================================================================

def _index_ok(row: int, column: int, matrix: Matrix) -> bool:
    return 0 <= row < matrix.rows and 0 <= column < matrix.columns


def matrix_get_checked(row: int, column: int,
                       matrix: Optional[Matrix]) -> Tuple[Status, Any]:
    """
    Borrow the cell at ``(row, column)``.

    Returns:
        ``(status, cell)``. Fixed-width cells come back as numpy scalars;
        structured cells are the objects owned by the matrix.
    """
    if not _live(matrix):
        return Status.NULL_POINTER, None
    if not _index_ok(row, column, matrix):
        return Status.INVALID_INDEX, None
    if matrix.kind.is_fixed_width:
        return Status.SUCCESS, matrix._data[row, column]
    return Status.SUCCESS, matrix._cells[row * matrix.columns + column]


def matrix_get(row: int, column: int, matrix: Optional[Matrix]) -> Any:
    """Borrow the cell at ``(row, column)``, ``None`` on any error."""
    status, cell = matrix_get_checked(row, column, matrix)
    return cell if status == Status.SUCCESS else None


def matrix_get_as(kind: Union[Kind, str, int], row: int, column: int,
                  matrix: Optional[Matrix]) -> Tuple[Status, Any]:
    """
    Typed read of one cell.

    The matrix must hold ``kind``. On failure the value is the kind's
    sentinel: maximum for unsigned, minimum for signed, NaN for floats,
    NaN+NaNj for complex floats and ``None`` for structured kinds.
    """
    kind = normalize_kind(kind)
    if kind is None:
        return Status.INVALID_ENUM_MEMBER, None
    sentinel = kind.error_value
    if not _live(matrix):
        return Status.NULL_POINTER, sentinel
    if matrix.kind != kind:
        return Status.INCOMPATIBLE_KINDS, sentinel
    status, cell = matrix_get_checked(row, column, matrix)
    if status != Status.SUCCESS:
        return status, sentinel
    return Status.SUCCESS, cell


def _coerce_fixed(kind: Kind, value: Any) -> Tuple[Status, Any]:
    """Convert ``value`` to the kind's dtype; integers wrap modulo the width."""
    try:
        if kind.is_integer:
            if isinstance(value, (float, complex, np.floating, np.complexfloating)):
                if isinstance(value, (complex, np.complexfloating)) or \
                        not math.isfinite(value):
                    return Status.INCOMPATIBLE_KINDS, None
                value = int(value)
            bits = kind.itemsize * 8
            wrapped = int(value) % (1 << bits)
            if kind.is_signed and wrapped >= 1 << (bits - 1):
                wrapped -= 1 << bits
            return Status.SUCCESS, kind.dtype.type(wrapped)
        if kind.is_float:
            return Status.SUCCESS, kind.dtype.type(float(value))
        return Status.SUCCESS, kind.dtype.type(complex(value))
    except (TypeError, ValueError, OverflowError):
        return Status.INCOMPATIBLE_KINDS, None


def matrix_set(cell: Any, row: int, column: int, out: Optional[Matrix]) -> Status:
    """
    Store ``cell`` at ``(row, column)``.

    Fixed-width values are copied (integers wrap). A structured cell is
    moved: the matrix takes its payload, releases the cell it replaces, and
    the caller's object is left destroyed.
    """
    name = "matrix_set"
    if not _live(out) or cell is None:
        return _finish(name, Status.NULL_POINTER)
    if not _index_ok(row, column, out):
        return _finish(name, Status.INVALID_INDEX)

    if out.kind.is_fixed_width:
        status, value = _coerce_fixed(out.kind, cell)
        if status != Status.SUCCESS:
            return _finish(name, status)
        out._data[row, column] = value
        return Status.SUCCESS

    element = element_for(out.kind)
    if not element.owns(cell) or cell is out:
        return _finish(name, Status.INCOMPATIBLE_KINDS)
    idx = row * out.columns + column
    if out._cells[idx] is cell:
        return Status.SUCCESS
    old = out._cells[idx]
    out._cells[idx] = element.move(cell)
    if old is not None:
        element.destroy(old)
    return Status.SUCCESS
