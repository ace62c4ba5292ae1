"""Ownership and Scoped Release.

Helpers that keep the ownership rules of structured cells in one place.

Key Concepts:
    - Move: ``set`` transfers a cell's payload into the matrix and leaves
      the caller's object in the destroyed state.
    - Borrow: ``get`` hands out the cell owned by the matrix.
    - Scoped release: temporaries (product accumulators, default permutation
      vectors, outputs of failed operations) are released on every exit path.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Iterator, Optional, Tuple

from ..core.allocator import Allocator
from ..core.error import Status

if TYPE_CHECKING:
    from ._elements import Element
    from ._matrix import Matrix

__all__ = [
    'move_slots',
    'scoped_cell',
    'scoped_matrix',
    'OutputGuard',
]


# =============================================================================
# Moves
# =============================================================================

def move_slots(src: Any) -> Any:
    """Move the payload of a slotted cell into a fresh object.

    Every slot of ``src`` is transferred to a new instance of the same type,
    then ``src`` is reset by re-running its constructor.

    Args:
        src: Source cell (``BigInt``, ``Rational``, ``ComplexRational`` or
            ``Expression``).

    Returns:
        New object owning the payload.
    """
    cls = type(src)
    dst = cls.__new__(cls)
    for name in cls.__slots__:
        setattr(dst, name, getattr(src, name))
    src.__init__()
    return dst


# =============================================================================
# Scoped Temporaries
# =============================================================================

@contextmanager
def scoped_cell(element: "Element",
                allocator: Optional[Allocator]) -> Iterator[Tuple[Status, Any]]:
    """Zero-construct a temporary cell and release it on exit.

    Example:
        >>> with scoped_cell(element, allocator) as (status, tmp):
        ...     if status != Status.SUCCESS:
        ...         return status
        ...     element.assign('mul', allocator, a, b, tmp)
    """
    status, cell = element.zero(allocator)
    try:
        yield status, cell
    finally:
        if cell is not None:
            element.destroy(cell)


@contextmanager
def scoped_matrix() -> Iterator["Matrix"]:
    """Yield an unconstructed matrix that is destroyed on exit."""
    from ._matrix import Matrix, matrix_destroy

    tmp = Matrix()
    try:
        yield tmp
    finally:
        matrix_destroy(tmp)


# =============================================================================
# Output Guard
# =============================================================================

class OutputGuard:
    """Tracks whether an operation constructed its own output.

    When the operation fails after constructing ``out``, ``finish`` destroys
    it so the caller is left with a destroyed matrix. A caller-provided
    output is never released.

    Attributes:
        out: Output matrix of the operation.
        allocated: Whether ``out`` was constructed by the operation.
    """

    def __init__(self, out: "Matrix"):
        self.out = out
        self.allocated = False

    def mark_allocated(self) -> None:
        self.allocated = True

    def finish(self, status: Status) -> Status:
        if status != Status.SUCCESS and self.allocated:
            from ._matrix import matrix_destroy
            matrix_destroy(self.out)
        return status

    def __repr__(self) -> str:
        state = "allocated" if self.allocated else "borrowed"
        return f"OutputGuard({state})"
