"""
Permutation select.

Builds ``out[a, b] = A[p[a], q[b]]`` from optional row and column index
vectors. A missing vector defaults to the identity for its axis.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

import numpy as np

from ..core.allocator import Allocator
from ..core.error import Status
from ..core.kinds import Kind
from . import _kernels
from ._matrix import Matrix, matrix_init
from ._ops import _finish, _live, _prepare_out
from ._ownership import OutputGuard, scoped_matrix


__all__ = [
    'matrix_select',
    'matrix_identity_vector',
]

logger = logging.getLogger("camel.matrix")


def matrix_identity_vector(allocator: Optional[Allocator], length: int,
                           out: Optional[Matrix]) -> Status:
    """Construct ``out`` as the ``length x 1`` U32 vector ``[0, 1, ..., length-1]``."""
    status = matrix_init(allocator, length, 1, Kind.U32, out)
    if status != Status.SUCCESS:
        return status
    out._data[:, 0] = np.arange(length, dtype=np.uint32)
    return Status.SUCCESS


def _read_indices(vector: Optional[Matrix], bound: int) -> Tuple[Status, Optional[List[int]]]:
    """
    Validate a permutation vector against ``bound``.

    Returns:
        ``NULL_POINTER`` for a destroyed vector, ``EXPECTED_VECTOR`` unless it
        is ``n x 1`` or ``1 x n``, ``INCOMPATIBLE_KINDS`` unless it holds an
        integer kind, ``INVALID_PERMUTATION`` for any negative or
        out-of-range entry.
    """
    if not _live(vector):
        return Status.NULL_POINTER, None
    if not vector.is_vector:
        return Status.EXPECTED_VECTOR, None
    if not vector.kind.is_integer:
        return Status.INCOMPATIBLE_KINDS, None
    indices = [int(v) for v in vector._data.reshape(-1).tolist()]
    if any(i < 0 or i >= bound for i in indices):
        return Status.INVALID_PERMUTATION, None
    return Status.SUCCESS, indices


def _default_indices(allocator: Allocator, length: int,
                     vector: Matrix) -> Tuple[Status, Optional[List[int]]]:
    status = matrix_identity_vector(allocator, length, vector)
    if status != Status.SUCCESS:
        return status, None
    return _read_indices(vector, length)


def matrix_select(allocator: Optional[Allocator], matrix: Optional[Matrix],
                  p: Optional[Matrix], q: Optional[Matrix],
                  out: Optional[Matrix]) -> Status:
    """
    Select rows ``p`` and columns ``q`` of ``matrix`` into ``out``.

    Args:
        allocator: Constructs ``out`` when given; otherwise ``out`` must have
            shape ``(len(p), len(q))`` and the kind of ``matrix``.
        matrix: Source matrix.
        p: Row indices, an integer vector, or ``None`` for all rows.
        q: Column indices, an integer vector, or ``None`` for all columns.
        out: Result matrix.

    Returns:
        Status of the operation. Both vectors are validated before ``out`` is
        touched, so an invalid permutation never leaves a partial result.

    Example:
        >>> out = Matrix()
        >>> p = Matrix.from_list([[2], [0]], 'u32')
        >>> matrix_select(heap_allocator(), a, p, None, out)
        <Status.SUCCESS: 0>
        >>> out.shape
        (2, 3)
    """
    name = "matrix_select"
    if not _live(matrix) or out is None:
        return _finish(name, Status.NULL_POINTER)

    vector_allocator = allocator if allocator is not None else matrix.allocator
    with scoped_matrix() as p_default, scoped_matrix() as q_default:
        if p is None:
            status, rows = _default_indices(vector_allocator, matrix.rows, p_default)
        else:
            status, rows = _read_indices(p, matrix.rows)
        if status != Status.SUCCESS:
            return _finish(name, status)

        if q is None:
            status, columns = _default_indices(vector_allocator, matrix.columns, q_default)
        else:
            status, columns = _read_indices(q, matrix.columns)
        if status != Status.SUCCESS:
            return _finish(name, status)

        guard = OutputGuard(out)
        status = _prepare_out(allocator, len(rows), len(columns), matrix.kind, guard,
                              construct_cells=False)
        if status == Status.SUCCESS:
            status = _kernels.gather(matrix, rows, columns, out)
        return _finish(name, guard.finish(status))
