"""
Structured element kinds.

Each structured kind is described by an ``Element``: how to zero-construct,
destroy, copy, combine, render and compare one cell. The matrix kernels are
written once against this interface and dispatched through ``element_for``.

Cell operations:
    add, sub     addition and subtraction
    mul          element-wise product (``multew``)
    matmul       product used by ``mult``; equal to ``mul`` except for
                 nested matrices, where it is the matrix product
    div          division (``divew``)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from fractions import Fraction
from typing import Any, Callable, Dict, Optional, Tuple

from ..bignum import bigint as _bi
from ..bignum import complex as _cx
from ..bignum import fraction as _fr
from ..core.allocator import Allocator
from ..core.config import get_config
from ..core.error import Status
from ..core.kinds import Kind
from ..expression import expression as _ex
from ._ownership import move_slots


__all__ = [
    'Element',
    'element_for',
    'CELL_OPS',
]

CELL_OPS = ('add', 'sub', 'mul', 'matmul', 'div')


# =============================================================================
# Element Interface
# =============================================================================

class Element(ABC):
    """
    Cell behaviour of one structured kind.

    Every method taking an ``out`` cell expects it to be constructed; results
    overwrite it. ``allocator`` names the allocator of the matrix the cell
    belongs to.
    """

    kind: Kind
    cell_type: type

    def owns(self, value: Any) -> bool:
        """Whether ``value`` is a cell of this kind."""
        return isinstance(value, self.cell_type)

    @abstractmethod
    def zero(self, allocator: Optional[Allocator]) -> Tuple[Status, Any]:
        """Construct the additive identity of the kind."""
        ...

    @abstractmethod
    def destroy(self, cell: Any) -> None:
        ...

    @abstractmethod
    def copy(self, allocator: Optional[Allocator], src: Any) -> Tuple[Status, Any]:
        """Deep copy of ``src`` owned by ``allocator``."""
        ...

    def move(self, cell: Any) -> Any:
        return move_slots(cell)

    @abstractmethod
    def assign(self, op: str, allocator: Optional[Allocator], left: Any, right: Any,
               out: Any) -> Status:
        """``out = left op right`` for one of ``CELL_OPS``."""
        ...

    @abstractmethod
    def inplace(self, op: str, right: Any, out: Any) -> Status:
        """``out = out op right``."""
        ...

    @abstractmethod
    def is_zero(self, cell: Any) -> bool:
        ...

    @abstractmethod
    def render(self, cell: Any) -> str:
        ...

    @abstractmethod
    def equal(self, a: Any, b: Any) -> bool:
        ...

    @abstractmethod
    def from_value(self, allocator: Optional[Allocator], value: Any) -> Tuple[Status, Any]:
        ...

    @abstractmethod
    def to_value(self, cell: Any) -> Any:
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.kind.name})"


# =============================================================================
# Table-driven Elements (arbitrary precision and expressions)
# =============================================================================

class _TableElement(Element):
    """Element whose behaviour is a table of status-returning functions."""

    def __init__(self, kind: Kind, cell_type: type, init: Callable, destroy: Callable,
                 copy: Callable, ops: Dict[str, Callable], inplace_ops: Dict[str, Callable],
                 is_zero: Callable, to_str: Callable, equal: Callable,
                 convert: Callable, to_value: Callable):
        self.kind = kind
        self.cell_type = cell_type
        self._init = init
        self._destroy = destroy
        self._copy = copy
        self._ops = ops
        self._inplace_ops = inplace_ops
        self._is_zero = is_zero
        self._to_str = to_str
        self._equal = equal
        self._convert = convert
        self._to_value = to_value

    def zero(self, allocator):
        cell = self.cell_type()
        status = self._init(allocator, cell)
        if status != Status.SUCCESS:
            return status, None
        return Status.SUCCESS, cell

    def destroy(self, cell):
        if cell is not None:
            self._destroy(cell)

    def copy(self, allocator, src):
        if src is None:
            return Status.NULL_POINTER, None
        cell = self.cell_type()
        status = self._copy(allocator, src, cell)
        if status != Status.SUCCESS:
            self._destroy(cell)
            return status, None
        return Status.SUCCESS, cell

    def assign(self, op, allocator, left, right, out):
        if left is None or right is None or out is None:
            return Status.NULL_POINTER
        return self._ops[op](None, left, right, out)

    def inplace(self, op, right, out):
        if right is None or out is None:
            return Status.NULL_POINTER
        return self._inplace_ops[op](right, out)

    def is_zero(self, cell):
        return cell is None or self._is_zero(cell)

    def render(self, cell):
        if cell is None:
            return "<uninitialized>"
        text = self._to_str(cell)
        return text if text is not None else "<uninitialized>"

    def equal(self, a, b):
        if a is None or b is None:
            return a is b
        return self._equal(a, b)

    def from_value(self, allocator, value):
        status, cell = self.zero(allocator)
        if status != Status.SUCCESS:
            return status, None
        try:
            status = self._convert(value, cell)
        except (TypeError, ValueError):
            status = Status.INCOMPATIBLE_KINDS
        except ZeroDivisionError:
            status = Status.DIVISION_BY_ZERO
        if status != Status.SUCCESS:
            self._destroy(cell)
            return status, None
        return Status.SUCCESS, cell

    def to_value(self, cell):
        return None if cell is None else self._to_value(cell)


def _bigint_init(allocator, cell):
    return _bi.bigint_init(allocator, get_config().bigint_capacity, cell)


def _bigint_convert(value, cell):
    if isinstance(value, str):
        return _bi.bigint_set_str(value, cell)
    if isinstance(value, float) or not hasattr(value, '__index__'):
        raise TypeError(f"Cannot store {type(value).__name__} as BIGINT")
    return _bi.bigint_set_int(int(value), cell)


def _fraction_convert(value, cell):
    if isinstance(value, (float, complex)):
        raise TypeError(f"Cannot store {type(value).__name__} as FRACTION exactly")
    value = Fraction(value)
    return _fr.fraction_set(value.numerator, value.denominator, cell)


def _complex_convert(value, cell):
    if isinstance(value, tuple):
        real, imag = value
    elif isinstance(value, complex):
        real, imag = Fraction(value.real), Fraction(value.imag)
    else:
        real, imag = value, 0
    if isinstance(real, float) or isinstance(imag, float):
        real, imag = Fraction(real), Fraction(imag)
    return _cx.complex_set(Fraction(real), Fraction(imag), cell)


def _expression_convert(value, cell):
    if not isinstance(value, str):
        value = str(value)
    return _ex.expression_init_str(cell.allocator, value, cell)


_BIGINT = _TableElement(
    Kind.BIGINT, _bi.BigInt, _bigint_init, _bi.bigint_destroy, _bi.bigint_copy,
    ops={'add': _bi.bigint_add, 'sub': _bi.bigint_sub, 'mul': _bi.bigint_mult,
         'matmul': _bi.bigint_mult, 'div': _bi.bigint_div},
    inplace_ops={'add': _bi.bigint_add_inplace, 'sub': _bi.bigint_sub_inplace,
                 'mul': _bi.bigint_mult_inplace, 'matmul': _bi.bigint_mult_inplace,
                 'div': _bi.bigint_div_inplace},
    is_zero=_bi.bigint_is_zero, to_str=_bi.bigint_to_str,
    equal=lambda a, b: a == b, convert=_bigint_convert, to_value=int,
)

_FRACTION = _TableElement(
    Kind.FRACTION, _fr.Rational, _fr.fraction_init, _fr.fraction_destroy, _fr.fraction_copy,
    ops={'add': _fr.fraction_add, 'sub': _fr.fraction_sub, 'mul': _fr.fraction_mult,
         'matmul': _fr.fraction_mult, 'div': _fr.fraction_div},
    inplace_ops={'add': _fr.fraction_add_inplace, 'sub': _fr.fraction_sub_inplace,
                 'mul': _fr.fraction_mult_inplace, 'matmul': _fr.fraction_mult_inplace,
                 'div': _fr.fraction_div_inplace},
    is_zero=_fr.fraction_is_zero, to_str=_fr.fraction_to_str,
    equal=lambda a, b: a == b, convert=_fraction_convert,
    to_value=lambda cell: cell.as_fraction(),
)

_COMPLEX = _TableElement(
    Kind.COMPLEX, _cx.ComplexRational, _cx.complex_init, _cx.complex_destroy,
    _cx.complex_copy,
    ops={'add': _cx.complex_add, 'sub': _cx.complex_sub, 'mul': _cx.complex_mult,
         'matmul': _cx.complex_mult, 'div': _cx.complex_div},
    inplace_ops={'add': _cx.complex_add_inplace, 'sub': _cx.complex_sub_inplace,
                 'mul': _cx.complex_mult_inplace, 'matmul': _cx.complex_mult_inplace,
                 'div': _cx.complex_div_inplace},
    is_zero=_cx.complex_is_zero, to_str=_cx.complex_to_str,
    equal=_cx.complex_equal, convert=_complex_convert,
    to_value=lambda cell: cell.parts(),
)

_EXPRESSION = _TableElement(
    Kind.EXPRESSION, _ex.Expression, _ex.expression_init, _ex.expression_destroy,
    _ex.expression_copy,
    ops={'add': _ex.expression_add, 'sub': _ex.expression_sub, 'mul': _ex.expression_mult,
         'matmul': _ex.expression_mult, 'div': _ex.expression_div},
    inplace_ops={'add': _ex.expression_add_inplace, 'sub': _ex.expression_sub_inplace,
                 'mul': _ex.expression_mult_inplace, 'matmul': _ex.expression_mult_inplace,
                 'div': _ex.expression_div_inplace},
    is_zero=_ex.expression_is_zero, to_str=_ex.expression_to_str,
    equal=_ex.expression_equal, convert=_expression_convert, to_value=str,
)


# =============================================================================
# Nested Matrices
# =============================================================================

class _MatrixElement(Element):
    """
    Cells that are matrices themselves.

    The zero cell is an unconstructed matrix and acts as the additive
    identity. Each inner matrix keeps the allocator it was built with and is
    destroyed through it.
    """

    kind = Kind.MATRIX

    @property
    def cell_type(self):
        from ._matrix import Matrix
        return Matrix

    def zero(self, allocator):
        from ._matrix import Matrix
        return Status.SUCCESS, Matrix()

    def destroy(self, cell):
        from ._matrix import matrix_destroy
        matrix_destroy(cell)

    def copy(self, allocator, src):
        from ._matrix import Matrix
        from ._ops import matrix_copy
        if src is None:
            return Status.NULL_POINTER, None
        dst = Matrix()
        if not src.is_initialized:
            return Status.SUCCESS, dst
        status = matrix_copy(allocator if allocator is not None else src.allocator, src, dst)
        if status != Status.SUCCESS:
            return status, None
        return Status.SUCCESS, dst

    def move(self, cell):
        from ._matrix import Matrix, matrix_move
        dst = Matrix()
        matrix_move(cell, dst)
        return dst

    def _negated(self, allocator, src, out) -> Status:
        from ._matrix import matrix_init0
        from ._ops import matrix_sub
        from ._ownership import scoped_matrix

        with scoped_matrix() as zero:
            status = matrix_init0(allocator, src.rows, src.columns, src.kind, zero)
            if status != Status.SUCCESS:
                return status
            return matrix_sub(allocator, zero, src, out)

    def assign(self, op, allocator, left, right, out):
        from ._matrix import Matrix, matrix_move
        from . import _ops

        if left is None or right is None or out is None:
            return Status.NULL_POINTER
        if allocator is None:
            allocator = left.allocator or right.allocator or get_config().default_allocator

        result = Matrix()
        left_empty, right_empty = not left.is_initialized, not right.is_initialized
        if op == 'div' and right_empty:
            return Status.DIVISION_BY_ZERO
        if op in ('mul', 'matmul', 'div') and (left_empty or right_empty):
            status = Status.SUCCESS
        elif op == 'add' and (left_empty or right_empty):
            status = Status.SUCCESS
            if not (left_empty and right_empty):
                status, result = self.copy(allocator, right if left_empty else left)
        elif op == 'sub' and right_empty:
            status = Status.SUCCESS
            if not left_empty:
                status, result = self.copy(allocator, left)
        elif op == 'sub' and left_empty:
            status = self._negated(allocator, right, result)
        else:
            fn = {'add': _ops.matrix_add, 'sub': _ops.matrix_sub,
                  'mul': _ops.matrix_multew, 'matmul': _ops.matrix_mult,
                  'div': _ops.matrix_divew}[op]
            status = fn(allocator, left, right, result)

        if status != Status.SUCCESS:
            return status
        matrix_move(result, out)
        return Status.SUCCESS

    def inplace(self, op, right, out):
        if right is None or out is None:
            return Status.NULL_POINTER
        return self.assign(op, out.allocator or right.allocator, out, right, out)

    def is_zero(self, cell):
        return cell is None or not cell.is_initialized

    def render(self, cell):
        if cell is None or not cell.is_initialized:
            return "<empty>"
        return f"<{cell.rows}x{cell.columns} {cell.kind.label}>"

    def equal(self, a, b):
        from ._ops import matrix_equal
        if a is None or b is None:
            return a is b
        return matrix_equal(a, b)

    def from_value(self, allocator, value):
        from ._matrix import Matrix
        if isinstance(value, Matrix):
            return self.copy(allocator, value)
        return Status.INCOMPATIBLE_KINDS, None

    def to_value(self, cell):
        if cell is None or not cell.is_initialized:
            return None
        return cell.tolist()


_ELEMENTS: Dict[Kind, Element] = {
    Kind.BIGINT: _BIGINT,
    Kind.FRACTION: _FRACTION,
    Kind.COMPLEX: _COMPLEX,
    Kind.EXPRESSION: _EXPRESSION,
    Kind.MATRIX: _MatrixElement(),
}


def element_for(kind: Kind) -> Optional[Element]:
    """Element description of a structured kind, ``None`` for fixed-width kinds."""
    return _ELEMENTS.get(kind)
