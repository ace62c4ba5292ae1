"""Dynamic loader for the CBLAS back-end.

Locates a CBLAS shared library, detects how its symbols are named and
caches the handle. No BLAS is bundled; the first library found wins.
"""

import ctypes
import ctypes.util
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional

import numpy as np

from ..core.config import get_config


__all__ = ['get_blas', 'BlasLibrary', 'LibraryNotFoundError', 'clear_cache']

logger = logging.getLogger("camel.kernel")


class LibraryNotFoundError(Exception):
    """Raised when no usable CBLAS library can be found or loaded."""
    pass


# (prefix, suffix, integer type) in the order they are tried
_NAMING_SCHEMES = (
    ('cblas_', '', ctypes.c_int),
    ('cblas_', '64_', ctypes.c_int64),
    ('scipy_cblas_', '64_', ctypes.c_int64),
    ('scipy_cblas_', '', ctypes.c_int),
)

# Global library cache, keyed by resolved path
_lib_cache: Dict[str, "BlasLibrary"] = {}


class BlasLibrary:
    """Loaded CBLAS library plus its symbol naming scheme.

    Attributes:
        path: File the library was loaded from.
        prefix: Symbol prefix (``cblas_`` or ``scipy_cblas_``).
        suffix: Symbol suffix (``''`` or ``64_`` for ILP64 builds).
        c_int: ctypes integer type of BLAS lengths and strides.
    """

    def __init__(self, path: str, handle: ctypes.CDLL, prefix: str, suffix: str, c_int):
        self.path = path
        self.handle = handle
        self.prefix = prefix
        self.suffix = suffix
        self.c_int = c_int

    def symbol(self, name: str):
        """Return the ctypes function for a BLAS routine such as ``ddot``."""
        return getattr(self.handle, f"{self.prefix}{name}{self.suffix}")

    def __repr__(self) -> str:
        return f"BlasLibrary({self.path!r}, scheme={self.prefix}*{self.suffix})"


def _numpy_bundled() -> List[Path]:
    """OpenBLAS copies shipped inside numpy wheels."""
    numpy_dir = Path(np.__file__).resolve().parent
    candidates = []
    for libs_dir in (numpy_dir.parent / 'numpy.libs', numpy_dir / '.dylibs',
                     numpy_dir.parent / 'numpy.libs' / 'lib'):
        if libs_dir.is_dir():
            candidates.extend(sorted(libs_dir.glob('*openblas*')))
    return candidates


def _candidates() -> List[str]:
    """Search order:
        1. ``blas_library`` configuration (env ``CAMEL_BLAS_LIBRARY``)
        2. System libraries: openblas, cblas, blas
        3. OpenBLAS bundled with numpy
    """
    paths = []
    explicit = get_config().blas_library
    if explicit:
        paths.append(explicit)
    for name in ('openblas', 'cblas', 'blas'):
        found = ctypes.util.find_library(name)
        if found:
            paths.append(found)
    paths.extend(str(p) for p in _numpy_bundled())
    return paths


def _bind(path: str) -> Optional[BlasLibrary]:
    try:
        handle = ctypes.CDLL(path)
    except OSError as e:
        logger.warning("Found BLAS candidate %s but could not load it: %s", path, e)
        return None
    for prefix, suffix, c_int in _NAMING_SCHEMES:
        if hasattr(handle, f"{prefix}ddot{suffix}"):
            return BlasLibrary(path, handle, prefix, suffix, c_int)
    logger.warning("Library %s exports no CBLAS symbols", path)
    return None


def get_blas() -> BlasLibrary:
    """Get the CBLAS back-end with lazy initialization.

    Returns:
        Cached ``BlasLibrary``.

    Raises:
        LibraryNotFoundError: If no candidate can be loaded and bound.

    Example:
        >>> blas = get_blas()
        >>> blas.symbol('ddot')
    """
    candidates = _candidates()
    for path in candidates:
        if path in _lib_cache:
            return _lib_cache[path]
    for path in candidates:
        lib = _bind(path)
        if lib is not None:
            logger.debug("Using BLAS back-end %r", lib)
            _lib_cache[path] = lib
            return lib
    raise LibraryNotFoundError(
        "Cannot find a CBLAS library. Install OpenBLAS or set CAMEL_BLAS_LIBRARY "
        f"(searched: {candidates or 'nothing found'}; platform {sys.platform})."
    )


def clear_cache() -> None:
    _lib_cache.clear()
