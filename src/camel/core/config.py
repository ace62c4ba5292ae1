"""
Global configuration for CAMEL.

Provides:
- The default allocator used by the convenience constructors
- Precision hint for zero-constructed big integers
- Printer precision
- Optional routing of float kernels through a dense BLAS back-end
"""

from __future__ import annotations

import os
from typing import Optional

from .allocator import Allocator, heap_allocator


__all__ = [
    'get_config',
    'reset_config',
    'set_default_allocator',
]


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in ("1", "true", "yes", "on")


# =============================================================================
# Global Configuration State
# =============================================================================

class _Config:
    """
    Global configuration singleton.

    Environment variables are read when the singleton is (re)built:
        CAMEL_BIGINT_CAPACITY: limbs reserved by zero-constructed big integers
        CAMEL_USE_BLAS: route float in-place add/sub through BLAS axpy
        CAMEL_BLAS_LIBRARY: explicit path of the CBLAS shared library
    """

    def __init__(self):
        self._default_allocator: Allocator = heap_allocator()
        self._bigint_capacity = max(2, _env_int("CAMEL_BIGINT_CAPACITY", 2))
        self._print_precision = 6
        self._use_blas = _env_flag("CAMEL_USE_BLAS")
        self._blas_library: Optional[str] = os.environ.get("CAMEL_BLAS_LIBRARY") or None

    @property
    def default_allocator(self) -> Allocator:
        """Allocator used when none is passed explicitly."""
        return self._default_allocator

    @default_allocator.setter
    def default_allocator(self, value: Allocator):
        if not isinstance(value, Allocator):
            raise TypeError(f"Expected Allocator, got {type(value).__name__}")
        self._default_allocator = value

    @property
    def bigint_capacity(self) -> int:
        """Initial limb capacity of zero-constructed big integers."""
        return self._bigint_capacity

    @bigint_capacity.setter
    def bigint_capacity(self, value: int):
        self._bigint_capacity = max(2, int(value))

    @property
    def print_precision(self) -> int:
        """Fractional digits printed for float kinds."""
        return self._print_precision

    @print_precision.setter
    def print_precision(self, value: int):
        if value < 0:
            raise ValueError("print_precision must be non-negative")
        self._print_precision = int(value)

    @property
    def use_blas(self) -> bool:
        return self._use_blas

    @use_blas.setter
    def use_blas(self, value: bool):
        self._use_blas = bool(value)

    @property
    def blas_library(self) -> Optional[str]:
        return self._blas_library

    @blas_library.setter
    def blas_library(self, value: Optional[str]):
        self._blas_library = value

    def __repr__(self) -> str:
        return (f"_Config(bigint_capacity={self._bigint_capacity}, "
                f"print_precision={self._print_precision}, "
                f"use_blas={self._use_blas}, blas_library={self._blas_library!r})")


# Global config instance
_config = _Config()


# =============================================================================
# Public API
# =============================================================================

def get_config() -> _Config:
    """Get global configuration instance."""
    return _config


def reset_config() -> _Config:
    """Restore defaults (re-reading the environment)."""
    global _config
    _config = _Config()
    return _config


def set_default_allocator(allocator: Allocator) -> None:
    """
    Replace the allocator used by the convenience constructors.

    Args:
        allocator: New default allocator.

    Example:
        >>> from camel.core.allocator import tracking_allocator
        >>> set_default_allocator(tracking_allocator())
    """
    _config.default_allocator = allocator
