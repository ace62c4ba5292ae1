"""
Arbitrary-precision rationals.

A ``Rational`` is a numerator/denominator pair of ``BigInt``. Values are kept
reduced with a positive denominator; zero is ``0/1``.
"""

from __future__ import annotations

from fractions import Fraction
from typing import Optional, Union

from ..core.allocator import Allocator
from ..core.config import get_config
from ..core.error import Status, check_error
from .bigint import (
    BigInt,
    _store,
    _value,
    bigint_destroy,
    bigint_init,
)


__all__ = [
    'Rational',
    'fraction_init',
    'fraction_destroy',
    'fraction_set',
    'fraction_copy',
    'fraction_add',
    'fraction_sub',
    'fraction_mult',
    'fraction_div',
    'fraction_add_inplace',
    'fraction_sub_inplace',
    'fraction_mult_inplace',
    'fraction_div_inplace',
    'fraction_compare',
    'fraction_is_zero',
    'fraction_to_str',
]


class Rational:
    """
    Reduced fraction of two big integers.

    Attributes:
        numerator: Signed ``BigInt``.
        denominator: Positive ``BigInt``.
        allocator: Allocator both parts were constructed with.
    """

    __slots__ = ('numerator', 'denominator', 'allocator')

    def __init__(self):
        self.numerator = BigInt()
        self.denominator = BigInt()
        self.allocator: Optional[Allocator] = None

    @classmethod
    def from_value(cls, value: Union[int, Fraction, str],
                   allocator: Optional[Allocator] = None) -> "Rational":
        """
        Construct a rational from an int, ``Fraction`` or ``"a/b"`` text.

        Raises:
            CamelError: If allocation fails or the denominator is zero.
        """
        if allocator is None:
            allocator = get_config().default_allocator
        try:
            value = Fraction(value)
        except ZeroDivisionError:
            check_error(Status.DIVISION_BY_ZERO, "Rational")
        out = cls()
        check_error(fraction_init(allocator, out), "fraction_init")
        status = fraction_set(value.numerator, value.denominator, out)
        if status != Status.SUCCESS:
            fraction_destroy(out)
            check_error(status, "fraction_set")
        return out

    @property
    def is_initialized(self) -> bool:
        return self.allocator is not None

    def as_fraction(self) -> Fraction:
        return _ratio(self)

    def __str__(self) -> str:
        text = fraction_to_str(self)
        return text if text is not None else "<uninitialized>"

    def __repr__(self) -> str:
        return f"Rational({self})"

    def __eq__(self, other) -> bool:
        if isinstance(other, Rational):
            return self.is_initialized == other.is_initialized and \
                fraction_compare(self, other) == 0
        if isinstance(other, (int, Fraction)):
            return self.is_initialized and _ratio(self) == other
        return NotImplemented

    __hash__ = None


# =============================================================================
# Internal helpers
# =============================================================================

def _ratio(fraction: Rational) -> Fraction:
    if not fraction.is_initialized:
        return Fraction(0)
    return Fraction(_value(fraction.numerator), _value(fraction.denominator))


def _write(value: Fraction, out: Rational) -> Status:
    """Store ``value`` in ``out``; on failure ``out`` keeps its old value."""
    previous = _value(out.numerator)
    status = _store(value.numerator, out.numerator)
    if status != Status.SUCCESS:
        return status
    status = _store(value.denominator, out.denominator)
    if status != Status.SUCCESS:
        # The numerator block already fits the old value.
        _store(previous, out.numerator)
    return status


def _prepare_out(allocator: Optional[Allocator], out: Rational) -> Status:
    if allocator is None:
        return Status.SUCCESS if out.is_initialized else Status.NULL_POINTER
    if out.is_initialized:
        fraction_destroy(out)
    return fraction_init(allocator, out)


# =============================================================================
# Lifecycle
# =============================================================================

def fraction_init(allocator: Optional[Allocator], out: Optional[Rational]) -> Status:
    """Construct ``out`` as ``0/1``."""
    if allocator is None or out is None:
        return Status.NULL_POINTER
    capacity = get_config().bigint_capacity
    status = bigint_init(allocator, capacity, out.numerator)
    if status != Status.SUCCESS:
        return status
    status = bigint_init(allocator, capacity, out.denominator)
    if status != Status.SUCCESS:
        bigint_destroy(out.numerator)
        return status
    _store(1, out.denominator)
    out.allocator = allocator
    return Status.SUCCESS


def fraction_destroy(fraction: Optional[Rational]) -> None:
    if fraction is None:
        return
    bigint_destroy(fraction.numerator)
    bigint_destroy(fraction.denominator)
    fraction.allocator = None


def fraction_set(numerator: int, denominator: int, out: Optional[Rational]) -> Status:
    """Set ``out`` to the reduced value of ``numerator / denominator``."""
    if out is None or not out.is_initialized:
        return Status.NULL_POINTER
    if denominator == 0:
        return Status.DIVISION_BY_ZERO
    return _write(Fraction(int(numerator), int(denominator)), out)


def fraction_copy(allocator: Optional[Allocator], src: Optional[Rational],
                  dst: Optional[Rational]) -> Status:
    if src is None or dst is None or not src.is_initialized:
        return Status.NULL_POINTER
    if src is dst:
        return Status.SUCCESS
    value = _ratio(src)
    status = _prepare_out(allocator, dst)
    if status != Status.SUCCESS:
        return status
    return _write(value, dst)


# =============================================================================
# Arithmetic
# =============================================================================

_OPS = {
    'add': lambda a, b: a + b,
    'sub': lambda a, b: a - b,
    'mult': lambda a, b: a * b,
    'div': lambda a, b: a / b,
}


def _binary(op: str, allocator: Optional[Allocator], left: Optional[Rational],
            right: Optional[Rational], out: Optional[Rational]) -> Status:
    if left is None or right is None or out is None:
        return Status.NULL_POINTER
    if not left.is_initialized or not right.is_initialized:
        return Status.NULL_POINTER
    a, b = _ratio(left), _ratio(right)
    if op == 'div' and b == 0:
        return Status.DIVISION_BY_ZERO
    result = _OPS[op](a, b)
    status = _prepare_out(allocator, out)
    if status != Status.SUCCESS:
        return status
    return _write(result, out)


def fraction_add(allocator, left, right, out) -> Status:
    return _binary('add', allocator, left, right, out)


def fraction_sub(allocator, left, right, out) -> Status:
    return _binary('sub', allocator, left, right, out)


def fraction_mult(allocator, left, right, out) -> Status:
    return _binary('mult', allocator, left, right, out)


def fraction_div(allocator, left, right, out) -> Status:
    return _binary('div', allocator, left, right, out)


def fraction_add_inplace(right, out) -> Status:
    return _binary('add', None, out, right, out)


def fraction_sub_inplace(right, out) -> Status:
    return _binary('sub', None, out, right, out)


def fraction_mult_inplace(right, out) -> Status:
    return _binary('mult', None, out, right, out)


def fraction_div_inplace(right, out) -> Status:
    return _binary('div', None, out, right, out)


# =============================================================================
# Comparison and Rendering
# =============================================================================

def fraction_compare(left: Optional[Rational], right: Optional[Rational]) -> int:
    if left is None or right is None:
        return 0
    a, b = _ratio(left), _ratio(right)
    return (a > b) - (a < b)


def fraction_is_zero(fraction: Rational) -> bool:
    return fraction.numerator.size == 0


def fraction_to_str(fraction: Optional[Rational]) -> Optional[str]:
    """``"a/b"``, or ``"a"`` when the denominator is one."""
    if fraction is None or not fraction.is_initialized:
        return None
    value = _ratio(fraction)
    if value.denominator == 1:
        return str(value.numerator)
    return f"{value.numerator}/{value.denominator}"
