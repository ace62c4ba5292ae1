"""
CAMEL Bignum - arbitrary-precision integers, rationals and complex rationals.

Every type is constructed with an allocator and releases its storage through
that allocator when destroyed.
"""

from .bigint import (
    BigInt,
    bigint_init,
    bigint_destroy,
    bigint_set_int,
    bigint_set_str,
    bigint_copy,
    bigint_add,
    bigint_sub,
    bigint_mult,
    bigint_div,
    bigint_add_inplace,
    bigint_sub_inplace,
    bigint_mult_inplace,
    bigint_div_inplace,
    bigint_compare,
    bigint_is_zero,
    bigint_to_str,
)

from .fraction import (
    Rational,
    fraction_init,
    fraction_destroy,
    fraction_set,
    fraction_copy,
    fraction_add,
    fraction_sub,
    fraction_mult,
    fraction_div,
    fraction_add_inplace,
    fraction_sub_inplace,
    fraction_mult_inplace,
    fraction_div_inplace,
    fraction_compare,
    fraction_is_zero,
    fraction_to_str,
)

from .complex import (
    ComplexRational,
    complex_init,
    complex_destroy,
    complex_set,
    complex_copy,
    complex_add,
    complex_sub,
    complex_mult,
    complex_div,
    complex_add_inplace,
    complex_sub_inplace,
    complex_mult_inplace,
    complex_div_inplace,
    complex_equal,
    complex_is_zero,
    complex_to_str,
)

__all__ = [
    # Big integers
    'BigInt',
    'bigint_init', 'bigint_destroy', 'bigint_set_int', 'bigint_set_str',
    'bigint_copy', 'bigint_add', 'bigint_sub', 'bigint_mult', 'bigint_div',
    'bigint_add_inplace', 'bigint_sub_inplace', 'bigint_mult_inplace',
    'bigint_div_inplace', 'bigint_compare', 'bigint_is_zero', 'bigint_to_str',

    # Rationals
    'Rational',
    'fraction_init', 'fraction_destroy', 'fraction_set', 'fraction_copy',
    'fraction_add', 'fraction_sub', 'fraction_mult', 'fraction_div',
    'fraction_add_inplace', 'fraction_sub_inplace', 'fraction_mult_inplace',
    'fraction_div_inplace', 'fraction_compare', 'fraction_is_zero',
    'fraction_to_str',

    # Complex rationals
    'ComplexRational',
    'complex_init', 'complex_destroy', 'complex_set', 'complex_copy',
    'complex_add', 'complex_sub', 'complex_mult', 'complex_div',
    'complex_add_inplace', 'complex_sub_inplace', 'complex_mult_inplace',
    'complex_div_inplace', 'complex_equal', 'complex_is_zero', 'complex_to_str',
]
