"""
Number theory helpers on unsigned 64-bit integers.

Functions:
    is_prime:        6k +/- 1 trial division
    generate_primes: odd-only sieve of Eratosthenes
    prime_factors:   factorisation with multiplicity, ascending
    gcd, lcm:        binary (Stein) gcd and the matching lcm
"""

import math

import numpy as np


__all__ = [
    'is_prime',
    'generate_primes',
    'prime_factors',
    'gcd',
    'lcm',
]

_U64_MAX = (1 << 64) - 1


def _check_u64(n: int, name: str = "n") -> int:
    n = int(n)
    if n < 0 or n > _U64_MAX:
        raise ValueError(f"{name} must fit in an unsigned 64-bit integer, got {n}")
    return n


def is_prime(n: int) -> bool:
    """
    Primality by trial division over candidates of the form 6k +/- 1.

    Example:
        >>> is_prime(97)
        True
        >>> is_prime(91)
        False
    """
    n = _check_u64(n)
    if n in (2, 3):
        return True
    if n <= 1 or n % 2 == 0 or n % 3 == 0:
        return False
    i = 5
    while i * i <= n:
        if n % i == 0 or n % (i + 2) == 0:
            return False
        i += 6
    return True


def generate_primes(limit: int) -> np.ndarray:
    """
    All primes ``<= limit``.

    The sieve stores odd numbers only: slot ``k`` stands for ``2k + 1``.

    Returns:
        Ascending ``uint64`` array; empty when ``limit < 2``.
    """
    limit = _check_u64(limit, "limit")
    if limit < 2:
        return np.empty(0, dtype=np.uint64)

    sieve = np.ones((limit + 1) // 2, dtype=np.bool_)
    sieve[0] = False  # 1
    for i in range(3, math.isqrt(limit) + 1, 2):
        if sieve[i // 2]:
            sieve[i * i // 2::i] = False

    odd = np.nonzero(sieve)[0].astype(np.uint64) * np.uint64(2) + np.uint64(1)
    return np.concatenate([np.array([2], dtype=np.uint64), odd])


def prime_factors(n: int) -> np.ndarray:
    """
    Prime factors of ``n`` with multiplicity.

    Example:
        >>> prime_factors(360).tolist()
        [2, 2, 2, 3, 3, 5]
    """
    n = _check_u64(n)
    factors = []
    if n == 0:
        return np.empty(0, dtype=np.uint64)
    while n % 2 == 0:
        factors.append(2)
        n //= 2
    i = 3
    while i * i <= n:
        while n % i == 0:
            factors.append(i)
            n //= i
        i += 2
    if n > 2:
        factors.append(n)
    return np.array(factors, dtype=np.uint64)


def gcd(a: int, b: int) -> int:
    """Binary greatest common divisor; ``gcd(0, b) == b``."""
    a, b = _check_u64(a, "a"), _check_u64(b, "b")
    if a == 0:
        return b
    if b == 0:
        return a

    shift = 0
    while (a | b) & 1 == 0:
        a >>= 1
        b >>= 1
        shift += 1
    while a & 1 == 0:
        a >>= 1
    while b != 0:
        while b & 1 == 0:
            b >>= 1
        if a > b:
            a, b = b, a
        b -= a
    return a << shift


def lcm(a: int, b: int) -> int:
    """Least common multiple; zero when either argument is zero."""
    a, b = _check_u64(a, "a"), _check_u64(b, "b")
    if a == 0 or b == 0:
        return 0
    return (a // gcd(a, b)) * b
