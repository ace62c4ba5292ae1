"""
Heterogeneous Matrix Container

A ``Matrix`` stores ``rows x columns`` cells of one ``Kind`` in a single raw
byte block obtained from its allocator, laid out row-major.

Storage:
    - Fixed-width kinds: the block is viewed in place as a numpy array of
      the kind's dtype, shape ``(rows, columns)``.
    - Structured kinds: the block is the cells' footprint; the cell objects
      themselves live in a row-major list. A slot is ``None`` until the cell
      is constructed (``init0``) or populated (``set``).

Lifecycle:
    - ``matrix_init``: byte-zero storage; structured cells unconstructed
    - ``matrix_init0``: additionally zero-constructs every structured cell,
      all-or-nothing
    - ``matrix_destroy``: releases every cell, then the block; idempotent
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Sequence, Tuple, Union

import numpy as np

from ..core.allocator import Allocator
from ..core.config import get_config
from ..core.error import Status, check_error
from ..core.kinds import Kind, kind_from_dtype, normalize_kind
from ._elements import element_for


__all__ = [
    'Matrix',
    'matrix_init',
    'matrix_init0',
    'matrix_destroy',
    'matrix_move',
]

logger = logging.getLogger("camel.matrix")


# =============================================================================
# Matrix Class
# =============================================================================

class Matrix:
    """
    Tagged heterogeneous 2-D matrix.

    A fresh ``Matrix()`` is an unconstructed shell. ``matrix_init`` or
    ``matrix_init0`` give it storage; ``matrix_destroy`` returns it to the
    shell state.

    Attributes:
        rows: Row count (0 while unconstructed).
        columns: Column count (0 while unconstructed).
        kind: Element ``Kind`` (``None`` while unconstructed).
        allocator: Allocator that owns the storage.

    Example:
        >>> m = Matrix.from_list([[1, 2], [3, 4]], 'i32')
        >>> (m + Matrix.from_list([[10]], 'i32')).tolist()
        [[11, 12], [13, 14]]
        >>> m.shape
        (2, 2)
        >>> m.destroy()
    """

    def __init__(self):
        self._buffer: Optional[bytearray] = None
        self._data: Optional[np.ndarray] = None
        self._cells: Optional[List[Any]] = None
        self.rows = 0
        self.columns = 0
        self.kind: Optional[Kind] = None
        self.allocator: Optional[Allocator] = None

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def zeros(cls, rows: int, columns: int, kind: Union[Kind, str, int],
              allocator: Optional[Allocator] = None) -> "Matrix":
        """
        Create a matrix of zero cells.

        Args:
            rows: Row count (>= 1).
            columns: Column count (>= 1).
            kind: Element kind.
            allocator: Defaults to the configured allocator.

        Raises:
            CamelError: If the shape or kind is invalid or allocation fails.
        """
        out = cls()
        if allocator is None:
            allocator = get_config().default_allocator
        check_error(matrix_init0(allocator, rows, columns, kind, out), "Matrix.zeros")
        return out

    @classmethod
    def from_list(cls, values: Sequence[Sequence[Any]], kind: Union[Kind, str, int],
                  allocator: Optional[Allocator] = None) -> "Matrix":
        """
        Create a matrix from a nested sequence of rows.

        Structured kinds accept plain Python values (``int`` for BIGINT,
        ``int``/``Fraction``/``"a/b"`` for FRACTION, ``complex`` or
        ``(real, imag)`` for COMPLEX, ``str`` for EXPRESSION, ``Matrix`` for
        MATRIX) or ready cells. Every value is copied into the new matrix.

        Raises:
            CamelError: On ragged input, values the kind cannot hold, or
                allocation failure.
        """
        rows = [list(row) for row in values]
        n_rows = len(rows)
        n_cols = len(rows[0]) if n_rows else 0
        if any(len(row) != n_cols for row in rows):
            check_error(Status.INVALID_SIZE, "Matrix.from_list: ragged rows")

        out = cls.zeros(n_rows, n_cols, kind, allocator)
        if out.kind.is_fixed_width:
            status = _fill_fixed(out, rows)
        else:
            status = _fill_structured(out, rows)
        if status != Status.SUCCESS:
            matrix_destroy(out)
            check_error(status, "Matrix.from_list")
        return out

    @classmethod
    def from_numpy(cls, array: np.ndarray, kind: Union[Kind, str, int, None] = None,
                   allocator: Optional[Allocator] = None) -> "Matrix":
        """
        Copy a 2-D numpy array into a new fixed-width matrix.

        Args:
            array: Source array. 1-D input becomes a single row.
            kind: Target kind; inferred from ``array.dtype`` when omitted.
        """
        array = np.asarray(array)
        if array.ndim == 1:
            array = array.reshape(1, -1)
        if array.ndim != 2:
            raise ValueError(f"Expected a 2-D array, got {array.ndim}-D")
        if kind is None:
            kind = kind_from_dtype(array.dtype)
        out = cls.zeros(array.shape[0], array.shape[1], kind, allocator)
        if not out.kind.is_fixed_width:
            matrix_destroy(out)
            check_error(Status.INCOMPATIBLE_KINDS, "Matrix.from_numpy")
        with np.errstate(all='ignore'):
            out._data[...] = array.astype(out.kind.dtype, copy=False)
        return out

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def is_initialized(self) -> bool:
        return self._buffer is not None

    @property
    def shape(self) -> Tuple[int, int]:
        return (self.rows, self.columns)

    @property
    def size(self) -> int:
        return self.rows * self.columns

    @property
    def nbytes(self) -> int:
        """Size of the raw block."""
        return 0 if self._buffer is None else len(self._buffer)

    @property
    def is_scalar(self) -> bool:
        return self.rows == 1 and self.columns == 1

    @property
    def is_vector(self) -> bool:
        return self.is_initialized and (self.rows == 1 or self.columns == 1)

    @property
    def T(self) -> "Matrix":
        """Transposed copy."""
        from ._ops import matrix_transpose
        out = Matrix()
        check_error(matrix_transpose(self.allocator, self, out), "Matrix.T")
        return out

    # -------------------------------------------------------------------------
    # Conversion
    # -------------------------------------------------------------------------

    def to_numpy(self) -> np.ndarray:
        """Copy of a fixed-width matrix as a numpy array."""
        if not self.is_initialized:
            check_error(Status.NULL_POINTER, "Matrix.to_numpy")
        if not self.kind.is_fixed_width:
            check_error(Status.INCOMPATIBLE_KINDS, "Matrix.to_numpy")
        return self._data.copy()

    def tolist(self) -> List[List[Any]]:
        """Nested list of Python values."""
        if not self.is_initialized:
            check_error(Status.NULL_POINTER, "Matrix.tolist")
        if self.kind.is_fixed_width:
            return self._data.tolist()
        element = element_for(self.kind)
        values = [element.to_value(cell) for cell in self._cells]
        return [values[r * self.columns:(r + 1) * self.columns] for r in range(self.rows)]

    # -------------------------------------------------------------------------
    # Cell access
    # -------------------------------------------------------------------------

    def __getitem__(self, index: Tuple[int, int]) -> Any:
        from ._ops import matrix_get_checked
        row, column = index
        status, cell = matrix_get_checked(row, column, self)
        check_error(status, f"Matrix[{row}, {column}]")
        return cell

    def __setitem__(self, index: Tuple[int, int], value: Any) -> None:
        from ._ops import matrix_set
        row, column = index
        if self.is_initialized and self.kind.is_structured:
            element = element_for(self.kind)
            if not element.owns(value):
                status, value = element.from_value(self.allocator, value)
                check_error(status, f"Matrix[{row}, {column}]")
        check_error(matrix_set(value, row, column, self), f"Matrix[{row}, {column}]")

    # -------------------------------------------------------------------------
    # Operators
    # -------------------------------------------------------------------------

    def _binary(self, name: str, other: "Matrix") -> "Matrix":
        from . import _ops
        if not isinstance(other, Matrix):
            return NotImplemented
        out = Matrix()
        status = getattr(_ops, name)(self.allocator, self, other, out)
        check_error(status, name)
        return out

    def _inplace(self, name: str, other: "Matrix") -> "Matrix":
        from . import _ops
        if not isinstance(other, Matrix):
            return NotImplemented
        check_error(getattr(_ops, name)(other, self), name)
        return self

    def __add__(self, other):
        return self._binary('matrix_add', other)

    def __sub__(self, other):
        return self._binary('matrix_sub', other)

    def __mul__(self, other):
        return self._binary('matrix_multew', other)

    def __truediv__(self, other):
        return self._binary('matrix_divew', other)

    def __matmul__(self, other):
        return self._binary('matrix_mult', other)

    def __iadd__(self, other):
        return self._inplace('matrix_add_inplace', other)

    def __isub__(self, other):
        return self._inplace('matrix_sub_inplace', other)

    def __imul__(self, other):
        return self._inplace('matrix_multew_inplace', other)

    def __itruediv__(self, other):
        return self._inplace('matrix_divew_inplace', other)

    def __eq__(self, other) -> bool:
        from ._ops import matrix_equal
        if not isinstance(other, Matrix):
            return NotImplemented
        return matrix_equal(self, other)

    __hash__ = None

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def copy(self) -> "Matrix":
        """Deep copy under the same allocator."""
        from ._ops import matrix_copy
        out = Matrix()
        check_error(matrix_copy(self.allocator, self, out), "Matrix.copy")
        return out

    def destroy(self) -> None:
        matrix_destroy(self)

    def __enter__(self) -> "Matrix":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        matrix_destroy(self)

    def __str__(self) -> str:
        from ._printer import format_matrix
        return format_matrix(self)

    def __repr__(self) -> str:
        if not self.is_initialized:
            return "Matrix(<destroyed>)"
        return f"Matrix(shape={self.shape}, kind={self.kind.name})"


# =============================================================================
# Population helpers
# =============================================================================

def _fill_fixed(out: Matrix, rows: List[List[Any]]) -> Status:
    from ._ops import _coerce_fixed
    for r, row in enumerate(rows):
        for c, value in enumerate(row):
            status, coerced = _coerce_fixed(out.kind, value)
            if status != Status.SUCCESS:
                return status
            out._data[r, c] = coerced
    return Status.SUCCESS


def _fill_structured(out: Matrix, rows: List[List[Any]]) -> Status:
    element = element_for(out.kind)
    for r, row in enumerate(rows):
        for c, value in enumerate(row):
            if element.owns(value):
                status, cell = element.copy(out.allocator, value)
            else:
                status, cell = element.from_value(out.allocator, value)
            if status != Status.SUCCESS:
                return status
            idx = r * out.columns + c
            element.destroy(out._cells[idx])
            out._cells[idx] = cell
    return Status.SUCCESS


# =============================================================================
# Lifecycle
# =============================================================================

def matrix_init(allocator: Optional[Allocator], rows: int, columns: int,
                kind: Union[Kind, str, int], out: Optional[Matrix]) -> Status:
    """
    Give ``out`` byte-zero storage for ``rows x columns`` cells.

    Structured cells are left unconstructed: the caller must populate every
    cell before the matrix is used. A live ``out`` is destroyed first.

    Args:
        allocator: Allocator that will own the storage.
        rows: Row count (>= 1).
        columns: Column count (>= 1).
        kind: Element kind.
        out: Matrix to construct.

    Returns:
        ``NULL_POINTER``, ``INVALID_ENUM_MEMBER``, ``INVALID_SIZE``, ``MALLOC``
        or ``SUCCESS``.
    """
    if allocator is None or out is None:
        return Status.NULL_POINTER
    kind = normalize_kind(kind)
    if kind is None:
        return Status.INVALID_ENUM_MEMBER
    if rows <= 0 or columns <= 0:
        return Status.INVALID_SIZE

    matrix_destroy(out)
    buffer = allocator.allocate_zeroed(rows * columns, kind.itemsize)
    if buffer is None:
        logger.debug("Matrix allocation of %dx%d %s failed", rows, columns, kind.name)
        return Status.MALLOC

    out._buffer = buffer
    if kind.is_fixed_width:
        out._data = np.frombuffer(buffer, dtype=kind.dtype).reshape(rows, columns)
        out._cells = None
    else:
        out._data = None
        out._cells = [None] * (rows * columns)
    out.rows = rows
    out.columns = columns
    out.kind = kind
    out.allocator = allocator
    logger.debug("Initialised %dx%d %s matrix", rows, columns, kind.name)
    return Status.SUCCESS


def matrix_init0(allocator: Optional[Allocator], rows: int, columns: int,
                 kind: Union[Kind, str, int], out: Optional[Matrix]) -> Status:
    """
    Like ``matrix_init`` but also zero-constructs every structured cell.

    If a cell cannot be constructed, the cells built so far are released in
    reverse order, the block is freed and the construction status returned.
    """
    status = matrix_init(allocator, rows, columns, kind, out)
    if status != Status.SUCCESS or out.kind.is_fixed_width:
        return status

    element = element_for(out.kind)
    for idx in range(out.size):
        status, cell = element.zero(allocator)
        if status != Status.SUCCESS:
            logger.debug("Zero construction of cell %d failed: %s", idx, status.name)
            for undo in range(idx - 1, -1, -1):
                element.destroy(out._cells[undo])
                out._cells[undo] = None
            matrix_destroy(out)
            return status
        out._cells[idx] = cell
    return Status.SUCCESS


def matrix_destroy(matrix: Optional[Matrix]) -> None:
    """Release every cell, then the block, then clear the metadata."""
    if matrix is None or matrix._buffer is None:
        return
    if matrix._cells is not None:
        element = element_for(matrix.kind)
        for cell in matrix._cells:
            if cell is not None:
                element.destroy(cell)
    shape, kind = matrix.shape, matrix.kind
    buffer = matrix._buffer
    matrix._data = None
    matrix._cells = None
    matrix._buffer = None
    matrix.allocator.release(buffer)
    matrix.rows = 0
    matrix.columns = 0
    matrix.kind = None
    matrix.allocator = None
    logger.debug("Destroyed %dx%d %s matrix", shape[0], shape[1], kind.name)


def matrix_move(src: Matrix, dst: Matrix) -> None:
    """Transfer the storage of ``src`` into ``dst``; ``src`` becomes a shell."""
    if src is dst:
        return
    matrix_destroy(dst)
    dst._buffer, dst._data, dst._cells = src._buffer, src._data, src._cells
    dst.rows, dst.columns = src.rows, src.columns
    dst.kind, dst.allocator = src.kind, src.allocator
    src.__init__()
