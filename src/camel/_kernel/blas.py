"""Level-1 CBLAS bindings.

Thin ctypes wrappers over the back-end found by ``lib_loader.get_blas``.
Vectors are 1-D numpy arrays of the routine's precision; scalars are plain
Python numbers. Where the back-end expects a pointer to a scalar (complex
``alpha``, rotation parameters) the value is copied into a temporary and its
address passed.

Naming follows BLAS: ``s``/``d`` real single/double, ``c``/``z`` complex
single/double.
"""

import ctypes
from typing import Callable, Tuple

import numpy as np

from .lib_loader import get_blas


__all__ = [
    # Real
    'srotg', 'drotg', 'srotmg', 'drotmg', 'srot', 'drot', 'srotm', 'drotm',
    'sswap', 'dswap', 'sscal', 'dscal', 'scopy', 'dcopy', 'saxpy', 'daxpy',
    'sdot', 'ddot', 'sdsdot', 'dsdot', 'snrm2', 'dnrm2', 'sasum', 'dasum',
    'isamax', 'idamax',
    # Complex
    'crotg', 'zrotg', 'csrot', 'zdrot', 'cswap', 'zswap', 'cscal', 'zscal',
    'csscal', 'zdscal', 'ccopy', 'zcopy', 'caxpy', 'zaxpy',
    'cdotu', 'cdotc', 'zdotu', 'zdotc', 'scnrm2', 'dznrm2', 'scasum', 'dzasum',
    'icamax', 'izamax',
]

# Placeholder for the back-end's integer type in argument specs
_INT = object()
_PTR = ctypes.c_void_p


# =============================================================================
# Call helpers
# =============================================================================

def _call(name: str, restype, argspec, *args):
    lib = get_blas()
    fn = lib.symbol(name)
    fn.restype = restype
    fn.argtypes = [lib.c_int if a is _INT else a for a in argspec]
    return fn(*args)


def _vec(array: np.ndarray, dtype, n: int, inc: int, label: str) -> ctypes.c_void_p:
    """Validate a strided vector argument and return its address."""
    if not isinstance(array, np.ndarray) or array.dtype != np.dtype(dtype):
        raise TypeError(f"{label} must be a numpy array of dtype {np.dtype(dtype)}")
    if array.ndim != 1 or not array.flags.c_contiguous:
        raise ValueError(f"{label} must be a contiguous 1-D array")
    if inc == 0:
        raise ValueError(f"inc{label} must be non-zero")
    if n > 0 and array.size < 1 + (n - 1) * abs(inc):
        raise ValueError(f"{label} has {array.size} elements, need {1 + (n - 1) * abs(inc)}")
    return array.ctypes.data_as(_PTR)


def _scalar(value, dtype) -> np.ndarray:
    """Value-then-address: a one-element array holding ``value``."""
    return np.array([value], dtype=dtype)


def _named(name: str, doc: str, fn: Callable) -> Callable:
    fn.__name__ = name
    fn.__qualname__ = name
    fn.__doc__ = doc
    return fn


# =============================================================================
# Real routines (s, d)
# =============================================================================

def _real_family(p: str, dtype, c_real):
    def rotg(a: float, b: float) -> Tuple[float, float, float, float]:
        a_, b_, c_, s_ = c_real(a), c_real(b), c_real(), c_real()
        _call(f"{p}rotg", None, [ctypes.POINTER(c_real)] * 4,
              ctypes.byref(a_), ctypes.byref(b_), ctypes.byref(c_), ctypes.byref(s_))
        return a_.value, b_.value, c_.value, s_.value

    def rotmg(d1: float, d2: float, b1: float, b2: float):
        d1_, d2_, b1_ = c_real(d1), c_real(d2), c_real(b1)
        param = np.zeros(5, dtype=dtype)
        _call(f"{p}rotmg", None,
              [ctypes.POINTER(c_real)] * 3 + [c_real, _PTR],
              ctypes.byref(d1_), ctypes.byref(d2_), ctypes.byref(b1_), b2,
              param.ctypes.data_as(_PTR))
        return d1_.value, d2_.value, b1_.value, param

    def rot(n, x, incx, y, incy, c, s) -> None:
        _call(f"{p}rot", None, [_INT, _PTR, _INT, _PTR, _INT, c_real, c_real],
              n, _vec(x, dtype, n, incx, 'x'), incx, _vec(y, dtype, n, incy, 'y'), incy,
              c, s)

    def rotm(n, x, incx, y, incy, param) -> None:
        _call(f"{p}rotm", None, [_INT, _PTR, _INT, _PTR, _INT, _PTR],
              n, _vec(x, dtype, n, incx, 'x'), incx, _vec(y, dtype, n, incy, 'y'), incy,
              _vec(param, dtype, 5, 1, 'param'))

    def swap(n, x, incx, y, incy) -> None:
        _call(f"{p}swap", None, [_INT, _PTR, _INT, _PTR, _INT],
              n, _vec(x, dtype, n, incx, 'x'), incx, _vec(y, dtype, n, incy, 'y'), incy)

    def scal(n, alpha, x, incx) -> None:
        _call(f"{p}scal", None, [_INT, c_real, _PTR, _INT],
              n, alpha, _vec(x, dtype, n, incx, 'x'), incx)

    def copy(n, x, incx, y, incy) -> None:
        _call(f"{p}copy", None, [_INT, _PTR, _INT, _PTR, _INT],
              n, _vec(x, dtype, n, incx, 'x'), incx, _vec(y, dtype, n, incy, 'y'), incy)

    def axpy(n, alpha, x, incx, y, incy) -> None:
        _call(f"{p}axpy", None, [_INT, c_real, _PTR, _INT, _PTR, _INT],
              n, alpha, _vec(x, dtype, n, incx, 'x'), incx,
              _vec(y, dtype, n, incy, 'y'), incy)

    def dot(n, x, incx, y, incy) -> float:
        return _call(f"{p}dot", c_real, [_INT, _PTR, _INT, _PTR, _INT],
                     n, _vec(x, dtype, n, incx, 'x'), incx,
                     _vec(y, dtype, n, incy, 'y'), incy)

    def nrm2(n, x, incx) -> float:
        return _call(f"{p}nrm2", c_real, [_INT, _PTR, _INT],
                     n, _vec(x, dtype, n, incx, 'x'), incx)

    def asum(n, x, incx) -> float:
        return _call(f"{p}asum", c_real, [_INT, _PTR, _INT],
                     n, _vec(x, dtype, n, incx, 'x'), incx)

    def iamax(n, x, incx) -> int:
        return _call(f"i{p}amax", ctypes.c_size_t, [_INT, _PTR, _INT],
                     n, _vec(x, dtype, n, incx, 'x'), incx)

    return (
        _named(f"{p}rotg", "Construct a Givens rotation; returns (r, z, c, s).", rotg),
        _named(f"{p}rotmg", "Construct a modified Givens rotation; returns "
                            "(d1, d2, b1, param).", rotmg),
        _named(f"{p}rot", "Apply a plane rotation to x and y in place.", rot),
        _named(f"{p}rotm", "Apply a modified plane rotation to x and y in place.", rotm),
        _named(f"{p}swap", "Swap x and y.", swap),
        _named(f"{p}scal", "x = alpha * x.", scal),
        _named(f"{p}copy", "y = x.", copy),
        _named(f"{p}axpy", "y = alpha * x + y.", axpy),
        _named(f"{p}dot", "Dot product of x and y.", dot),
        _named(f"{p}nrm2", "Euclidean norm of x.", nrm2),
        _named(f"{p}asum", "Sum of absolute values of x.", asum),
        _named(f"i{p}amax", "Index of the element of largest absolute value.", iamax),
    )


(srotg, srotmg, srot, srotm, sswap, sscal, scopy, saxpy, sdot, snrm2, sasum,
 isamax) = _real_family('s', np.float32, ctypes.c_float)

(drotg, drotmg, drot, drotm, dswap, dscal, dcopy, daxpy, ddot, dnrm2, dasum,
 idamax) = _real_family('d', np.float64, ctypes.c_double)


def sdsdot(n: int, alpha: float, x: np.ndarray, incx: int, y: np.ndarray,
           incy: int) -> float:
    """``alpha + x . y`` for float32 vectors, accumulated in double precision."""
    return _call("sdsdot", ctypes.c_float, [_INT, ctypes.c_float, _PTR, _INT, _PTR, _INT],
                 n, alpha, _vec(x, np.float32, n, incx, 'x'), incx,
                 _vec(y, np.float32, n, incy, 'y'), incy)


def dsdot(n: int, x: np.ndarray, incx: int, y: np.ndarray, incy: int) -> float:
    """Dot product of float32 vectors returned in double precision."""
    return _call("dsdot", ctypes.c_double, [_INT, _PTR, _INT, _PTR, _INT],
                 n, _vec(x, np.float32, n, incx, 'x'), incx,
                 _vec(y, np.float32, n, incy, 'y'), incy)


# =============================================================================
# Complex routines (c, z)
# =============================================================================

def _complex_family(p: str, r: str, dtype, real_dtype, c_real):
    def rotg(a: complex, b: complex) -> Tuple[complex, float, complex]:
        a_, b_, s_ = _scalar(a, dtype), _scalar(b, dtype), _scalar(0, dtype)
        c_ = c_real()
        _call(f"{p}rotg", None, [_PTR, _PTR, ctypes.POINTER(c_real), _PTR],
              a_.ctypes.data_as(_PTR), b_.ctypes.data_as(_PTR), ctypes.byref(c_),
              s_.ctypes.data_as(_PTR))
        return complex(a_[0]), c_.value, complex(s_[0])

    def real_rot(n, x, incx, y, incy, c, s) -> None:
        _call(f"{p}{r}rot", None, [_INT, _PTR, _INT, _PTR, _INT, c_real, c_real],
              n, _vec(x, dtype, n, incx, 'x'), incx, _vec(y, dtype, n, incy, 'y'), incy,
              c, s)

    def swap(n, x, incx, y, incy) -> None:
        _call(f"{p}swap", None, [_INT, _PTR, _INT, _PTR, _INT],
              n, _vec(x, dtype, n, incx, 'x'), incx, _vec(y, dtype, n, incy, 'y'), incy)

    def scal(n, alpha, x, incx) -> None:
        alpha_ = _scalar(alpha, dtype)
        _call(f"{p}scal", None, [_INT, _PTR, _PTR, _INT],
              n, alpha_.ctypes.data_as(_PTR), _vec(x, dtype, n, incx, 'x'), incx)

    def real_scal(n, alpha, x, incx) -> None:
        _call(f"{p}{r}scal", None, [_INT, c_real, _PTR, _INT],
              n, alpha, _vec(x, dtype, n, incx, 'x'), incx)

    def copy(n, x, incx, y, incy) -> None:
        _call(f"{p}copy", None, [_INT, _PTR, _INT, _PTR, _INT],
              n, _vec(x, dtype, n, incx, 'x'), incx, _vec(y, dtype, n, incy, 'y'), incy)

    def axpy(n, alpha, x, incx, y, incy) -> None:
        alpha_ = _scalar(alpha, dtype)
        _call(f"{p}axpy", None, [_INT, _PTR, _PTR, _INT, _PTR, _INT],
              n, alpha_.ctypes.data_as(_PTR), _vec(x, dtype, n, incx, 'x'), incx,
              _vec(y, dtype, n, incy, 'y'), incy)

    def dot_sub(conjugate: bool):
        routine = f"{p}dot{'c' if conjugate else 'u'}_sub"

        def dot(n, x, incx, y, incy) -> complex:
            result = _scalar(0, dtype)
            _call(routine, None, [_INT, _PTR, _INT, _PTR, _INT, _PTR],
                  n, _vec(x, dtype, n, incx, 'x'), incx, _vec(y, dtype, n, incy, 'y'), incy,
                  result.ctypes.data_as(_PTR))
            return complex(result[0])
        return dot

    def nrm2(n, x, incx) -> float:
        return _call(f"{r}{p}nrm2", c_real, [_INT, _PTR, _INT],
                     n, _vec(x, dtype, n, incx, 'x'), incx)

    def asum(n, x, incx) -> float:
        return _call(f"{r}{p}asum", c_real, [_INT, _PTR, _INT],
                     n, _vec(x, dtype, n, incx, 'x'), incx)

    def iamax(n, x, incx) -> int:
        return _call(f"i{p}amax", ctypes.c_size_t, [_INT, _PTR, _INT],
                     n, _vec(x, dtype, n, incx, 'x'), incx)

    return (
        _named(f"{p}rotg", "Construct a complex Givens rotation; returns (r, c, s).", rotg),
        _named(f"{p}{r}rot", "Apply a real plane rotation to complex x and y.", real_rot),
        _named(f"{p}swap", "Swap x and y.", swap),
        _named(f"{p}scal", "x = alpha * x for complex alpha.", scal),
        _named(f"{p}{r}scal", "x = alpha * x for real alpha.", real_scal),
        _named(f"{p}copy", "y = x.", copy),
        _named(f"{p}axpy", "y = alpha * x + y.", axpy),
        _named(f"{p}dotu", "Unconjugated dot product.", dot_sub(False)),
        _named(f"{p}dotc", "Dot product conjugating x.", dot_sub(True)),
        _named(f"{r}{p}nrm2", "Euclidean norm of x.", nrm2),
        _named(f"{r}{p}asum", "Sum of |re| + |im| over x.", asum),
        _named(f"i{p}amax", "Index of the element of largest |re| + |im|.", iamax),
    )


(crotg, csrot, cswap, cscal, csscal, ccopy, caxpy, cdotu, cdotc, scnrm2, scasum,
 icamax) = _complex_family('c', 's', np.complex64, np.float32, ctypes.c_float)

(zrotg, zdrot, zswap, zscal, zdscal, zcopy, zaxpy, zdotu, zdotc, dznrm2, dzasum,
 izamax) = _complex_family('z', 'd', np.complex128, np.float64, ctypes.c_double)
