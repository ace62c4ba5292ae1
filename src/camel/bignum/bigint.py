"""
Arbitrary-precision integers.

A ``BigInt`` keeps its magnitude as 32-bit little-endian limbs inside a block
obtained from its allocator, plus a sign and the number of limbs in use.
Every operation is a status-returning function; arithmetic results are
written into an ``out`` integer which is either constructed by the call
(``allocator`` given) or already live (``allocator`` is ``None``).
"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from ..core.allocator import Allocator
from ..core.config import get_config
from ..core.error import Status, check_error


__all__ = [
    'BigInt',
    'MIN_CAPACITY',
    'bigint_init',
    'bigint_destroy',
    'bigint_set_int',
    'bigint_set_str',
    'bigint_copy',
    'bigint_add',
    'bigint_sub',
    'bigint_mult',
    'bigint_div',
    'bigint_add_inplace',
    'bigint_sub_inplace',
    'bigint_mult_inplace',
    'bigint_div_inplace',
    'bigint_compare',
    'bigint_is_zero',
    'bigint_to_str',
]

logger = logging.getLogger("camel.bignum")

MIN_CAPACITY = 2
LIMB_BYTES = 4
LIMB_BITS = 32


# =============================================================================
# BigInt
# =============================================================================

class BigInt:
    """
    Arbitrary-precision signed integer.

    A fresh ``BigInt()`` is unconstructed; ``bigint_init`` gives it storage.

    Attributes:
        size: Limbs in use (0 for zero).
        capacity: Limbs available in the block.
        sign: +1 or -1. Zero is always +1.
        allocator: Allocator owning the limb block.
    """

    __slots__ = ('_block', 'size', 'capacity', 'sign', 'allocator')

    def __init__(self):
        self._block: Optional[bytearray] = None
        self.size = 0
        self.capacity = 0
        self.sign = 1
        self.allocator: Optional[Allocator] = None

    @classmethod
    def from_int(cls, value: int, allocator: Optional[Allocator] = None) -> "BigInt":
        """
        Construct a big integer holding ``value``.

        Raises:
            CamelError: If allocation fails.
        """
        out = cls()
        if allocator is None:
            allocator = get_config().default_allocator
        check_error(bigint_init(allocator, get_config().bigint_capacity, out), "bigint_init")
        status = bigint_set_int(value, out)
        if status != Status.SUCCESS:
            bigint_destroy(out)
            check_error(status, "bigint_set_int")
        return out

    @property
    def is_initialized(self) -> bool:
        return self._block is not None

    @property
    def limbs(self) -> np.ndarray:
        """Read-only view of the limbs in use."""
        if self._block is None:
            return np.zeros(0, dtype=np.uint32)
        view = np.frombuffer(bytes(self._block[:self.size * LIMB_BYTES]), dtype='<u4')
        return view

    def __int__(self) -> int:
        return _value(self)

    def __index__(self) -> int:
        return _value(self)

    def __str__(self) -> str:
        text = bigint_to_str(self)
        return text if text is not None else "<uninitialized>"

    def __repr__(self) -> str:
        if self._block is None:
            return "BigInt(<uninitialized>)"
        return f"BigInt({_value(self)}, capacity={self.capacity})"

    def __eq__(self, other) -> bool:
        if isinstance(other, BigInt):
            return bigint_compare(self, other) == 0 and \
                self.is_initialized == other.is_initialized
        if isinstance(other, (int, np.integer)):
            return self.is_initialized and _value(self) == int(other)
        return NotImplemented

    __hash__ = None


# =============================================================================
# Limb Storage
# =============================================================================

def _value(bigint: BigInt) -> int:
    if bigint._block is None or bigint.size == 0:
        return 0
    magnitude = int.from_bytes(bytes(bigint._block[:bigint.size * LIMB_BYTES]), 'little')
    return -magnitude if bigint.sign < 0 else magnitude


def _store(value: int, out: BigInt) -> Status:
    """Write ``value`` into the limbs of ``out``, growing the block if needed."""
    magnitude = abs(value)
    needed = (magnitude.bit_length() + LIMB_BITS - 1) // LIMB_BITS
    if needed > out.capacity:
        capacity = max(needed, out.capacity * 2)
        block = out.allocator.reallocate(out._block, capacity * LIMB_BYTES)
        if block is None:
            logger.debug("BigInt growth to %d limbs failed", capacity)
            return Status.REALLOC
        out._block = block
        out.capacity = capacity
    out._block[:out.capacity * LIMB_BYTES] = magnitude.to_bytes(out.capacity * LIMB_BYTES,
                                                                'little')
    out.size = needed
    out.sign = -1 if value < 0 else 1
    return Status.SUCCESS


def _prepare_out(allocator: Optional[Allocator], capacity: int, out: BigInt) -> Status:
    """Construct ``out`` when an allocator is given, else require it live."""
    if allocator is None:
        return Status.SUCCESS if out.is_initialized else Status.NULL_POINTER
    if out.is_initialized:
        bigint_destroy(out)
    return bigint_init(allocator, capacity, out)


# =============================================================================
# Lifecycle
# =============================================================================

def bigint_init(allocator: Optional[Allocator], capacity: int, out: Optional[BigInt]) -> Status:
    """
    Construct ``out`` as zero with room for ``capacity`` limbs.

    Args:
        allocator: Source of the limb block.
        capacity: Initial limbs; values below 2 are raised to 2.
        out: Unconstructed big integer.

    Returns:
        ``NULL_POINTER`` for a missing argument, ``MALLOC`` when the block
        cannot be obtained, else ``SUCCESS``.
    """
    if allocator is None or out is None:
        return Status.NULL_POINTER
    capacity = max(MIN_CAPACITY, int(capacity))
    block = allocator.allocate_zeroed(capacity, LIMB_BYTES)
    if block is None:
        logger.debug("BigInt allocation of %d limbs failed", capacity)
        out._block = None
        out.size = out.capacity = 0
        out.allocator = None
        return Status.MALLOC
    out._block = block
    out.size = 0
    out.capacity = capacity
    out.sign = 1
    out.allocator = allocator
    return Status.SUCCESS


def bigint_destroy(bigint: Optional[BigInt]) -> None:
    """Release the limb block. Safe on unconstructed integers."""
    if bigint is None or bigint._block is None:
        return
    bigint.allocator.release(bigint._block)
    bigint._block = None
    bigint.size = 0
    bigint.capacity = 0
    bigint.sign = 1
    bigint.allocator = None


def bigint_set_int(value: int, out: Optional[BigInt]) -> Status:
    if out is None or not out.is_initialized:
        return Status.NULL_POINTER
    return _store(int(value), out)


def bigint_set_str(text: Optional[str], out: Optional[BigInt]) -> Status:
    """
    Parse a decimal integer with an optional leading sign.

    Returns:
        ``INVALID_CHAR`` when ``text`` is not a decimal integer.
    """
    if text is None or out is None or not out.is_initialized:
        return Status.NULL_POINTER
    body = text.strip()
    digits = body[1:] if body[:1] in ('+', '-') else body
    if not digits or not digits.isdigit() or not digits.isascii():
        return Status.INVALID_CHAR
    return _store(int(body), out)


def bigint_copy(allocator: Optional[Allocator], src: Optional[BigInt],
                dst: Optional[BigInt]) -> Status:
    """Copy ``src`` into ``dst``, constructing ``dst`` when ``allocator`` is given."""
    if src is None or dst is None or not src.is_initialized:
        return Status.NULL_POINTER
    if src is dst:
        return Status.SUCCESS
    value = _value(src)
    status = _prepare_out(allocator, src.capacity, dst)
    if status != Status.SUCCESS:
        return status
    return _store(value, dst)


# =============================================================================
# Arithmetic
# =============================================================================

def _truncdiv(a: int, b: int) -> int:
    q = abs(a) // abs(b)
    return -q if (a < 0) != (b < 0) else q


_OPS = {
    'add': lambda a, b: a + b,
    'sub': lambda a, b: a - b,
    'mult': lambda a, b: a * b,
    'div': _truncdiv,
}


def _binary(op: str, allocator: Optional[Allocator], left: Optional[BigInt],
            right: Optional[BigInt], out: Optional[BigInt]) -> Status:
    if left is None or right is None or out is None:
        return Status.NULL_POINTER
    if not left.is_initialized or not right.is_initialized:
        return Status.NULL_POINTER
    a, b = _value(left), _value(right)
    if op == 'div' and b == 0:
        return Status.DIVISION_BY_ZERO
    result = _OPS[op](a, b)
    status = _prepare_out(allocator, max(left.capacity, right.capacity), out)
    if status != Status.SUCCESS:
        return status
    return _store(result, out)


def bigint_add(allocator, left, right, out) -> Status:
    return _binary('add', allocator, left, right, out)


def bigint_sub(allocator, left, right, out) -> Status:
    return _binary('sub', allocator, left, right, out)


def bigint_mult(allocator, left, right, out) -> Status:
    return _binary('mult', allocator, left, right, out)


def bigint_div(allocator, left, right, out) -> Status:
    """Quotient truncated toward zero. A zero divisor is ``DIVISION_BY_ZERO``."""
    return _binary('div', allocator, left, right, out)


def bigint_add_inplace(right, out) -> Status:
    return _binary('add', None, out, right, out)


def bigint_sub_inplace(right, out) -> Status:
    return _binary('sub', None, out, right, out)


def bigint_mult_inplace(right, out) -> Status:
    return _binary('mult', None, out, right, out)


def bigint_div_inplace(right, out) -> Status:
    return _binary('div', None, out, right, out)


# =============================================================================
# Comparison and Rendering
# =============================================================================

def bigint_compare(left: Optional[BigInt], right: Optional[BigInt]) -> int:
    """Three-way comparison: -1, 0 or 1. Missing operands compare equal."""
    if left is None or right is None:
        return 0
    a, b = _value(left), _value(right)
    return (a > b) - (a < b)


def bigint_is_zero(bigint: BigInt) -> bool:
    return bigint.size == 0


def bigint_to_str(bigint: Optional[BigInt]) -> Optional[str]:
    """Decimal rendering, ``None`` for a missing or unconstructed integer."""
    if bigint is None or not bigint.is_initialized:
        return None
    return str(_value(bigint))
