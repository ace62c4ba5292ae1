"""CAMEL Private Kernel Bindings (_kernel).

Low-level ctypes bindings to an external CBLAS library.

Architecture:
    - Library discovered at first use, never at import
    - Minimal Python wrapper (close to the CBLAS API)
    - numpy arrays in, Python scalars out

Modules:
    - lib_loader: Dynamic library discovery and symbol naming
    - blas: Level-1 routines for s, d, c and z precisions

Usage (Internal only):
    >>> from camel._kernel import blas
    >>> blas.daxpy(3, 2.0, x, 1, y, 1)
"""

from . import lib_loader
from . import blas

__all__ = [
    'lib_loader',
    'blas',
]
