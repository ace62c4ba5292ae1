"""
Column-aligned matrix printer.

Rendering happens in two passes: the first renders every cell and records
the widest cell of each column in a widths table obtained from an
allocator; the second left-pads each cell to its column width. Each printed
row starts with a tab and every cell is followed by one space.
"""

from __future__ import annotations

import logging
import sys
from typing import IO, List, Optional

import numpy as np

from ..core.allocator import Allocator
from ..core.config import get_config
from ..core.error import Status
from ..core.kinds import Kind
from ._elements import element_for
from ._matrix import Matrix


__all__ = [
    'render_cell',
    'format_matrix',
    'matrix_print',
]

logger = logging.getLogger("camel.matrix")

_WIDTH_BYTES = 8


def render_cell(kind: Kind, value, precision: Optional[int] = None) -> str:
    """
    Render one cell.

    Integers print as decimal digits with a sign when negative, floats with
    ``precision`` fractional digits, complex floats as ``a+bi`` or ``a-bi``.
    """
    if precision is None:
        precision = get_config().print_precision
    if kind.is_integer:
        return str(int(value))
    if kind.is_float:
        return f"{float(value):.{precision}f}"
    if kind.is_complex_float:
        real, imag = float(value.real), float(value.imag)
        sign = '-' if imag < 0 else '+'
        return f"{real:.{precision}f}{sign}{abs(imag):.{precision}f}i"
    return element_for(kind).render(value)


def _render_cells(matrix: Matrix) -> List[str]:
    if matrix.kind.is_fixed_width:
        return [render_cell(matrix.kind, v) for v in matrix._data.reshape(-1)]
    element = element_for(matrix.kind)
    return [element.render(cell) for cell in matrix._cells]


def _layout(matrix: Matrix, cells: List[str], widths: np.ndarray, prefix: str) -> str:
    for idx, text in enumerate(cells):
        column = idx % matrix.columns
        widths[column] = max(int(widths[column]), len(text))
    lines = []
    for r in range(matrix.rows):
        row = cells[r * matrix.columns:(r + 1) * matrix.columns]
        lines.append(prefix + "".join(text.rjust(int(widths[c])) + " "
                                      for c, text in enumerate(row)))
    return "\n".join(lines) + "\n"


def format_matrix(matrix: Matrix) -> str:
    """Aligned text of ``matrix`` without the leading tabs."""
    if not matrix.is_initialized:
        return "<destroyed matrix>"
    widths = np.zeros(matrix.columns, dtype=np.uint64)
    return _layout(matrix, _render_cells(matrix), widths, "").rstrip("\n")


def matrix_print(matrix: Optional[Matrix], allocator: Optional[Allocator] = None,
                 file: Optional[IO[str]] = None) -> Status:
    """
    Print ``matrix`` with aligned columns.

    Args:
        matrix: Matrix to print.
        allocator: Source of the temporary widths table; defaults to the
            matrix's own allocator.
        file: Destination stream; defaults to standard output.

    Returns:
        ``NULL_POINTER`` for a missing matrix, ``MALLOC`` if the widths table
        cannot be allocated, else ``SUCCESS``. Nothing is written on error.
    """
    if matrix is None or not matrix.is_initialized:
        logger.debug("matrix_print returned NULL_POINTER")
        return Status.NULL_POINTER
    if allocator is None:
        allocator = matrix.allocator

    block = allocator.allocate_zeroed(matrix.columns, _WIDTH_BYTES)
    if block is None:
        logger.debug("matrix_print could not allocate the widths table")
        return Status.MALLOC
    try:
        widths = np.frombuffer(block, dtype=np.uint64)
        text = _layout(matrix, _render_cells(matrix), widths, "\t")
    finally:
        allocator.release(block)

    stream = file if file is not None else sys.stdout
    stream.write(text)
    return Status.SUCCESS
