"""
Arbitrary-precision complex numbers with rational parts.
"""

from __future__ import annotations

from fractions import Fraction
from typing import Optional, Tuple, Union

from ..core.allocator import Allocator
from ..core.config import get_config
from ..core.error import Status, check_error
from .fraction import (
    Rational,
    _ratio,
    _write,
    fraction_destroy,
    fraction_init,
)


__all__ = [
    'ComplexRational',
    'complex_init',
    'complex_destroy',
    'complex_set',
    'complex_copy',
    'complex_add',
    'complex_sub',
    'complex_mult',
    'complex_div',
    'complex_add_inplace',
    'complex_sub_inplace',
    'complex_mult_inplace',
    'complex_div_inplace',
    'complex_equal',
    'complex_is_zero',
    'complex_to_str',
]

Number = Union[int, Fraction]


class ComplexRational:
    """
    ``real + imag*i`` where both parts are ``Rational``.
    """

    __slots__ = ('real', 'imag', 'allocator')

    def __init__(self):
        self.real = Rational()
        self.imag = Rational()
        self.allocator: Optional[Allocator] = None

    @classmethod
    def from_parts(cls, real: Number = 0, imag: Number = 0,
                   allocator: Optional[Allocator] = None) -> "ComplexRational":
        """
        Raises:
            CamelError: If allocation fails.
        """
        if allocator is None:
            allocator = get_config().default_allocator
        out = cls()
        check_error(complex_init(allocator, out), "complex_init")
        status = complex_set(real, imag, out)
        if status != Status.SUCCESS:
            complex_destroy(out)
            check_error(status, "complex_set")
        return out

    @property
    def is_initialized(self) -> bool:
        return self.allocator is not None

    def parts(self) -> Tuple[Fraction, Fraction]:
        return _parts(self)

    def __str__(self) -> str:
        text = complex_to_str(self)
        return text if text is not None else "<uninitialized>"

    def __repr__(self) -> str:
        return f"ComplexRational({self})"

    def __eq__(self, other) -> bool:
        if isinstance(other, ComplexRational):
            return complex_equal(self, other)
        return NotImplemented

    __hash__ = None


def _parts(value: ComplexRational) -> Tuple[Fraction, Fraction]:
    return _ratio(value.real), _ratio(value.imag)


def _write_parts(real: Fraction, imag: Fraction, out: ComplexRational) -> Status:
    status = _write(real, out.real)
    if status != Status.SUCCESS:
        return status
    return _write(imag, out.imag)


def _prepare_out(allocator: Optional[Allocator], out: ComplexRational) -> Status:
    if allocator is None:
        return Status.SUCCESS if out.is_initialized else Status.NULL_POINTER
    if out.is_initialized:
        complex_destroy(out)
    return complex_init(allocator, out)


# =============================================================================
# Lifecycle
# =============================================================================

def complex_init(allocator: Optional[Allocator], out: Optional[ComplexRational]) -> Status:
    """Construct ``out`` as ``0+0i``."""
    if allocator is None or out is None:
        return Status.NULL_POINTER
    status = fraction_init(allocator, out.real)
    if status != Status.SUCCESS:
        return status
    status = fraction_init(allocator, out.imag)
    if status != Status.SUCCESS:
        fraction_destroy(out.real)
        return status
    out.allocator = allocator
    return Status.SUCCESS


def complex_destroy(value: Optional[ComplexRational]) -> None:
    if value is None:
        return
    fraction_destroy(value.real)
    fraction_destroy(value.imag)
    value.allocator = None


def complex_set(real: Number, imag: Number, out: Optional[ComplexRational]) -> Status:
    if out is None or not out.is_initialized:
        return Status.NULL_POINTER
    return _write_parts(Fraction(real), Fraction(imag), out)


def complex_copy(allocator: Optional[Allocator], src: Optional[ComplexRational],
                 dst: Optional[ComplexRational]) -> Status:
    if src is None or dst is None or not src.is_initialized:
        return Status.NULL_POINTER
    if src is dst:
        return Status.SUCCESS
    real, imag = _parts(src)
    status = _prepare_out(allocator, dst)
    if status != Status.SUCCESS:
        return status
    return _write_parts(real, imag, dst)


# =============================================================================
# Arithmetic
# =============================================================================

def _mult(a, b, c, d):
    return a * c - b * d, a * d + b * c


def _div(a, b, c, d):
    norm = c * c + d * d
    return (a * c + b * d) / norm, (b * c - a * d) / norm


_OPS = {
    'add': lambda a, b, c, d: (a + c, b + d),
    'sub': lambda a, b, c, d: (a - c, b - d),
    'mult': _mult,
    'div': _div,
}


def _binary(op: str, allocator: Optional[Allocator], left: Optional[ComplexRational],
            right: Optional[ComplexRational], out: Optional[ComplexRational]) -> Status:
    if left is None or right is None or out is None:
        return Status.NULL_POINTER
    if not left.is_initialized or not right.is_initialized:
        return Status.NULL_POINTER
    a, b = _parts(left)
    c, d = _parts(right)
    if op == 'div' and c == 0 and d == 0:
        return Status.DIVISION_BY_ZERO
    real, imag = _OPS[op](a, b, c, d)
    status = _prepare_out(allocator, out)
    if status != Status.SUCCESS:
        return status
    return _write_parts(real, imag, out)


def complex_add(allocator, left, right, out) -> Status:
    return _binary('add', allocator, left, right, out)


def complex_sub(allocator, left, right, out) -> Status:
    return _binary('sub', allocator, left, right, out)


def complex_mult(allocator, left, right, out) -> Status:
    return _binary('mult', allocator, left, right, out)


def complex_div(allocator, left, right, out) -> Status:
    return _binary('div', allocator, left, right, out)


def complex_add_inplace(right, out) -> Status:
    return _binary('add', None, out, right, out)


def complex_sub_inplace(right, out) -> Status:
    return _binary('sub', None, out, right, out)


def complex_mult_inplace(right, out) -> Status:
    return _binary('mult', None, out, right, out)


def complex_div_inplace(right, out) -> Status:
    return _binary('div', None, out, right, out)


# =============================================================================
# Comparison and Rendering
# =============================================================================

def complex_equal(left: Optional[ComplexRational], right: Optional[ComplexRational]) -> bool:
    if left is None or right is None:
        return left is right
    if left.is_initialized != right.is_initialized:
        return False
    return _parts(left) == _parts(right)


def complex_is_zero(value: ComplexRational) -> bool:
    real, imag = _parts(value)
    return real == 0 and imag == 0


def _render(part: Fraction) -> str:
    if part.denominator == 1:
        return str(part.numerator)
    return f"{part.numerator}/{part.denominator}"


def complex_to_str(value: Optional[ComplexRational]) -> Optional[str]:
    """``"a+bi"`` or ``"a-bi"`` with rational parts."""
    if value is None or not value.is_initialized:
        return None
    real, imag = _parts(value)
    sign = '-' if imag < 0 else '+'
    return f"{_render(real)}{sign}{_render(abs(imag))}i"
