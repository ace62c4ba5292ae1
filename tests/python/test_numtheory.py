"""
Tests for the number theory helpers.
"""

import math

import pytest
import numpy as np

from camel.numtheory import is_prime, generate_primes, prime_factors, gcd, lcm


PRIMES_BELOW_50 = [2, 3, 5, 7, 11, 13, 17, 19, 23, 29, 31, 37, 41, 43, 47]


class TestIsPrime:
    """Trial division."""

    @pytest.mark.parametrize("n", PRIMES_BELOW_50 + [97, 7919, 2 ** 31 - 1])
    def test_primes(self, n):
        assert is_prime(n)

    @pytest.mark.parametrize("n", [0, 1, 4, 9, 25, 49, 91, 7917, 2 ** 32 + 1])
    def test_composites(self, n):
        assert not is_prime(n)

    def test_agrees_with_sieve(self):
        sieve = set(generate_primes(1000).tolist())
        assert {n for n in range(1001) if is_prime(n)} == sieve

    @pytest.mark.parametrize("n", [-1, 2 ** 64])
    def test_out_of_range(self, n):
        with pytest.raises(ValueError, match="unsigned 64-bit"):
            is_prime(n)


class TestGeneratePrimes:
    """Odd-only sieve."""

    def test_small_limits(self):
        assert generate_primes(0).size == 0
        assert generate_primes(1).size == 0
        assert generate_primes(2).tolist() == [2]
        assert generate_primes(3).tolist() == [2, 3]

    def test_below_fifty(self):
        primes = generate_primes(50)
        assert primes.dtype == np.uint64
        assert primes.tolist() == PRIMES_BELOW_50

    def test_limit_is_inclusive(self):
        assert generate_primes(47)[-1] == 47

    def test_count(self):
        assert generate_primes(10000).size == 1229


class TestFactorsAndDivisors:
    """Factorisation, gcd and lcm."""

    @pytest.mark.parametrize("n,expected", [
        (0, []), (1, []), (2, [2]), (360, [2, 2, 2, 3, 3, 5]),
        (97, [97]), (2 ** 10, [2] * 10), (600851475143, [71, 839, 1471, 6857]),
    ])
    def test_prime_factors(self, n, expected):
        factors = prime_factors(n)
        assert factors.dtype == np.uint64
        assert factors.tolist() == expected

    def test_factors_multiply_back(self):
        for n in range(2, 500):
            assert math.prod(int(f) for f in prime_factors(n)) == n

    @pytest.mark.parametrize("a,b", [
        (0, 0), (0, 9), (12, 0), (12, 18), (17, 5), (2 ** 40, 2 ** 20 * 3),
        (1071, 462), (2 ** 64 - 1, 2 ** 32 - 1),
    ])
    def test_gcd_matches_euclid(self, a, b):
        assert gcd(a, b) == math.gcd(a, b)

    def test_lcm(self):
        assert lcm(4, 6) == 12
        assert lcm(0, 6) == 0
        assert lcm(21, 6) == 42

    def test_gcd_rejects_negative(self):
        with pytest.raises(ValueError):
            gcd(-4, 6)
