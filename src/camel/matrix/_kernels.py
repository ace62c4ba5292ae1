"""
Per-kind matrix kernels.

Fixed-width kinds run vectorised over the numpy view of the raw block.
Structured kinds run one generic loop per operation shape against the
``Element`` of their kind.

Kernels assume the dispatcher has already validated operands, shapes and
the output. They only fail on arithmetic (``DIVISION_BY_ZERO``) or
allocation inside a cell operation.
"""

from __future__ import annotations

import logging
import warnings
from typing import Sequence

import numpy as np

from ..core.config import get_config
from ..core.error import Status
from ..core.kinds import Kind
from ._elements import Element, element_for
from ._matrix import Matrix
from ._ownership import scoped_cell


__all__ = [
    'check_divisors',
    'elementwise',
    'elementwise_inplace',
    'product',
    'transpose',
    'gather',
    'copy_cells',
]

logger = logging.getLogger("camel.matrix")


# =============================================================================
# Fixed-width helpers
# =============================================================================

def _trunc_divide(a: np.ndarray, b: np.ndarray, kind: Kind) -> np.ndarray:
    """Integer quotient rounded toward zero."""
    if kind.is_unsigned:
        return np.floor_divide(a, b)
    remainder = np.fmod(a, b)
    return np.floor_divide(a - remainder, b)


def _fixed_op(op: str, kind: Kind, a: np.ndarray, b: np.ndarray) -> np.ndarray:
    with np.errstate(all='ignore'):
        if op == 'add':
            result = np.add(a, b)
        elif op == 'sub':
            result = np.subtract(a, b)
        elif op in ('mul', 'matmul'):
            result = np.multiply(a, b)
        elif kind.is_integer:
            result = _trunc_divide(a, b, kind)
        else:
            result = np.true_divide(a, b)
    return result.astype(kind.dtype, copy=False)


def _blas_axpy(op: str, kind: Kind, right: Matrix, out: Matrix) -> bool:
    """Run ``out += right`` / ``out -= right`` through BLAS axpy when enabled."""
    if not get_config().use_blas or op not in ('add', 'sub'):
        return False
    if kind not in (Kind.F32, Kind.F64) or right.shape != out.shape:
        return False
    from .._kernel import blas
    from .._kernel.lib_loader import LibraryNotFoundError

    alpha = 1.0 if op == 'add' else -1.0
    axpy = blas.saxpy if kind is Kind.F32 else blas.daxpy
    try:
        axpy(out.size, alpha, right._data.reshape(-1), 1, out._data.reshape(-1), 1)
    except LibraryNotFoundError as e:
        warnings.warn(f"CBLAS back-end not available: {e}. Falling back to numpy kernels.")
        get_config().use_blas = False
        return False
    return True


# =============================================================================
# Structured helpers
# =============================================================================

def _cell_at(matrix: Matrix, idx: int):
    return matrix._cells[0] if matrix.is_scalar else matrix._cells[idx]


def _ensure_cell(element: Element, out: Matrix, idx: int) -> Status:
    """Zero-construct an unpopulated output cell."""
    if out._cells[idx] is not None:
        return Status.SUCCESS
    status, cell = element.zero(out.allocator)
    if status != Status.SUCCESS:
        return status
    out._cells[idx] = cell
    return Status.SUCCESS


def _replace_cell(element: Element, out: Matrix, idx: int, cell) -> None:
    old = out._cells[idx]
    out._cells[idx] = cell
    if old is not None and old is not cell:
        element.destroy(old)


# =============================================================================
# Kernels
# =============================================================================

def check_divisors(kind: Kind, right: Matrix) -> Status:
    """``DIVISION_BY_ZERO`` if an integer or exact divisor cell is zero."""
    if kind.is_fixed_width:
        if kind.is_integer and not np.all(right._data):
            return Status.DIVISION_BY_ZERO
        return Status.SUCCESS
    element = element_for(kind)
    if any(element.is_zero(cell) for cell in right._cells):
        return Status.DIVISION_BY_ZERO
    return Status.SUCCESS


def elementwise(op: str, left: Matrix, right: Matrix, out: Matrix) -> Status:
    """
    ``out = left <op> right`` under the scalar broadcasting rule.

    ``out`` already has the broadcast shape.
    """
    kind = out.kind
    if kind.is_fixed_width:
        out._data[...] = _fixed_op(op, kind, left._data, right._data)
        return Status.SUCCESS

    element = element_for(kind)
    for idx in range(out.size):
        status = _ensure_cell(element, out, idx)
        if status != Status.SUCCESS:
            return status
        status = element.assign(op, out.allocator, _cell_at(left, idx),
                                _cell_at(right, idx), out._cells[idx])
        if status != Status.SUCCESS:
            return status
    return Status.SUCCESS


def elementwise_inplace(op: str, right: Matrix, out: Matrix) -> Status:
    """``out <op>= right``; ``right`` has the shape of ``out`` or is a scalar."""
    kind = out.kind
    if kind.is_fixed_width:
        if not _blas_axpy(op, kind, right, out):
            out._data[...] = _fixed_op(op, kind, out._data, right._data)
        return Status.SUCCESS

    element = element_for(kind)
    for idx in range(out.size):
        status = _ensure_cell(element, out, idx)
        if status != Status.SUCCESS:
            return status
        status = element.inplace(op, _cell_at(right, idx), out._cells[idx])
        if status != Status.SUCCESS:
            return status
    return Status.SUCCESS


def product(left: Matrix, right: Matrix, out: Matrix) -> Status:
    """
    Library matrix product.

    ``out[i, j]`` is the sum over ``k < left.columns`` of
    ``left[i, k] * right[k, j]``. Any previous content of ``out`` is
    overwritten.
    """
    kind = out.kind
    if kind.is_fixed_width:
        with np.errstate(all='ignore'):
            result = np.matmul(left._data, right._data[:left.columns, :])
        out._data[...] = result.astype(kind.dtype, copy=False)
        return Status.SUCCESS

    element = element_for(kind)
    inner = left.columns
    with scoped_cell(element, out.allocator) as (status, tmp):
        if status != Status.SUCCESS:
            return status
        for i in range(out.rows):
            for j in range(out.columns):
                status, acc = element.zero(out.allocator)
                if status != Status.SUCCESS:
                    return status
                for k in range(inner):
                    status = element.assign('matmul', out.allocator,
                                            left._cells[i * left.columns + k],
                                            right._cells[k * right.columns + j], tmp)
                    if status == Status.SUCCESS:
                        status = element.inplace('add', tmp, acc)
                    if status != Status.SUCCESS:
                        element.destroy(acc)
                        return status
                _replace_cell(element, out, i * out.columns + j, acc)
    return Status.SUCCESS


def transpose(src: Matrix, out: Matrix) -> Status:
    """``out[j, i] = src[i, j]``; structured cells are deep-copied."""
    if src.kind.is_fixed_width:
        out._data[...] = src._data.T
        return Status.SUCCESS

    element = element_for(src.kind)
    for i in range(src.rows):
        for j in range(src.columns):
            status, cell = element.copy(out.allocator, src._cells[i * src.columns + j])
            if status != Status.SUCCESS:
                return status
            _replace_cell(element, out, j * out.columns + i, cell)
    return Status.SUCCESS


def gather(src: Matrix, rows: Sequence[int], columns: Sequence[int], out: Matrix) -> Status:
    """``out[a, b] = src[rows[a], columns[b]]``; structured cells are deep-copied."""
    if src.kind.is_fixed_width:
        out._data[...] = src._data[np.ix_(np.asarray(rows, dtype=np.intp),
                                          np.asarray(columns, dtype=np.intp))]
        return Status.SUCCESS

    element = element_for(src.kind)
    for a, r in enumerate(rows):
        for b, c in enumerate(columns):
            status, cell = element.copy(out.allocator, src._cells[r * src.columns + c])
            if status != Status.SUCCESS:
                return status
            _replace_cell(element, out, a * out.columns + b, cell)
    return Status.SUCCESS


def copy_cells(src: Matrix, out: Matrix) -> Status:
    """Cell-for-cell copy between matrices of equal shape and kind."""
    if src.kind.is_fixed_width:
        out._data[...] = src._data
        return Status.SUCCESS

    element = element_for(src.kind)
    for idx in range(src.size):
        status, cell = element.copy(out.allocator, src._cells[idx])
        if status != Status.SUCCESS:
            return status
        _replace_cell(element, out, idx, cell)
    return Status.SUCCESS
