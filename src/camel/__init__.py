"""
CAMEL - heterogeneous matrix library

A dense matrix type whose cells may be any of:
- fixed-width integers, floats and complex floats (numpy-backed)
- arbitrary-precision integers, rationals and complex rationals
- symbolic expressions produced by a small lexer
- nested matrices

Every operation is a status-returning function that takes an explicit
allocator; the ``Matrix`` class adds an operator surface on top that raises
``CamelError``.

Modules:
- core: kinds, allocators, status codes, configuration
- matrix: container, arithmetic, select, printer
- bignum: BigInt, Rational, ComplexRational
- expression: tokens, lexer, symbolic expressions
- numtheory: primes, factorisation, gcd/lcm
- algebra: fixed-size 2/3/4 vectors, matrices and transforms

Example:
    >>> import camel
    >>> a = camel.Matrix.from_list([[1, 2], [3, 4]], camel.I32)
    >>> (a + a).tolist()
    [[2, 4], [6, 8]]
    >>> print(a @ a)
     7 10
    15 22
"""

__version__ = '0.1.0'

from . import core
from . import matrix
from . import bignum
from . import expression
from . import numtheory
from . import algebra

from .core import (
    Kind,
    Status,
    CamelError,
    Allocator,
    heap_allocator,
    tracking_allocator,
    get_config,
    check_error,
    status_to_str,
)

from .core.kinds import (
    U8, U16, U32, U64,
    I8, I16, I32, I64,
    F32, F64, CF32, CF64,
    BIGINT, FRACTION, COMPLEX, EXPRESSION, MATRIX,
)

from .matrix import (
    Matrix,
    matrix_init,
    matrix_init0,
    matrix_destroy,
    matrix_add,
    matrix_sub,
    matrix_mult,
    matrix_multew,
    matrix_divew,
    matrix_transpose,
    matrix_select,
    matrix_get,
    matrix_set,
    matrix_print,
)

from .expression import Expression, tokenize
from .bignum import BigInt, Rational, ComplexRational

__all__ = [
    # Version
    '__version__',
    # Modules
    'core',
    'matrix',
    'bignum',
    'expression',
    'numtheory',
    'algebra',
    # Core
    'Kind',
    'Status',
    'CamelError',
    'Allocator',
    'heap_allocator',
    'tracking_allocator',
    'get_config',
    'check_error',
    'status_to_str',
    # Kind constants
    'U8', 'U16', 'U32', 'U64',
    'I8', 'I16', 'I32', 'I64',
    'F32', 'F64', 'CF32', 'CF64',
    'BIGINT', 'FRACTION', 'COMPLEX', 'EXPRESSION', 'MATRIX',
    # Matrix
    'Matrix',
    'matrix_init',
    'matrix_init0',
    'matrix_destroy',
    'matrix_add',
    'matrix_sub',
    'matrix_mult',
    'matrix_multew',
    'matrix_divew',
    'matrix_transpose',
    'matrix_select',
    'matrix_get',
    'matrix_set',
    'matrix_print',
    # Cell types
    'Expression',
    'tokenize',
    'BigInt',
    'Rational',
    'ComplexRational',
]
