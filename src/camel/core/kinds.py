"""
CAMEL Kinds - Element Kind Catalogue

Defines the closed set of element kinds a matrix can store, together with
their storage footprint, printable names and sentinel error values.
"""

from __future__ import annotations

import math
from enum import IntEnum
from typing import Any, Dict, Optional, Union

import numpy as np


__all__ = [
    'Kind',
    'U8', 'U16', 'U32', 'U64',
    'I8', 'I16', 'I32', 'I64',
    'F32', 'F64', 'CF32', 'CF64',
    'BIGINT', 'FRACTION', 'COMPLEX', 'EXPRESSION', 'MATRIX',
    'normalize_kind',
    'kind_from_dtype',
]


# =============================================================================
# Kind Enumeration
# =============================================================================

class Kind(IntEnum):
    """
    Element kinds supported by ``Matrix``.

    Fixed-width kinds are plain bytes in the matrix buffer. Structured kinds
    own heap resources and need per-cell construction and destruction.
    """
    U8 = 0
    U16 = 1
    U32 = 2
    U64 = 3
    I8 = 4
    I16 = 5
    I32 = 6
    I64 = 7
    F32 = 8
    F64 = 9
    CF32 = 10
    CF64 = 11
    BIGINT = 12       # arbitrary-precision integer
    FRACTION = 13     # a/b, both BIGINT
    COMPLEX = 14      # a + bi, both FRACTION
    EXPRESSION = 15   # symbolic expression (token sequence)
    MATRIX = 16       # nested matrix

    @property
    def itemsize(self) -> int:
        """Storage footprint of one cell in bytes."""
        return _KIND_INFO[self]["size"]

    @property
    def dtype(self) -> Optional[np.dtype]:
        """numpy dtype of a fixed-width kind, ``None`` for structured kinds."""
        return _KIND_INFO[self]["dtype"]

    @property
    def label(self) -> str:
        """Printable name."""
        return _KIND_INFO[self]["name"]

    @property
    def error_value(self) -> Any:
        """Sentinel returned by typed getters on failure."""
        return _KIND_INFO[self]["error"]

    @property
    def is_structured(self) -> bool:
        return self >= Kind.BIGINT

    @property
    def is_fixed_width(self) -> bool:
        return self < Kind.BIGINT

    @property
    def is_unsigned(self) -> bool:
        return Kind.U8 <= self <= Kind.U64

    @property
    def is_signed(self) -> bool:
        return Kind.I8 <= self <= Kind.I64

    @property
    def is_integer(self) -> bool:
        return self <= Kind.I64

    @property
    def is_float(self) -> bool:
        return self in (Kind.F32, Kind.F64)

    @property
    def is_complex_float(self) -> bool:
        return self in (Kind.CF32, Kind.CF64)

    @classmethod
    def from_name(cls, name: str) -> "Kind":
        """Get Kind from a printable name or common alias."""
        name_lower = name.lower()
        for kind, info in _KIND_INFO.items():
            if info["name"] == name_lower:
                return kind
        aliases = {
            "uint8": cls.U8,
            "uint16": cls.U16,
            "uint32": cls.U32,
            "uint64": cls.U64,
            "int8": cls.I8,
            "int16": cls.I16,
            "int32": cls.I32,
            "int64": cls.I64,
            "float32": cls.F32,
            "float64": cls.F64,
            "float": cls.F32,
            "double": cls.F64,
            "complex64": cls.CF32,
            "complex128": cls.CF64,
            "bigint": cls.BIGINT,
            "rational": cls.FRACTION,
            "fraction": cls.FRACTION,
            "complex": cls.COMPLEX,
            "expression": cls.EXPRESSION,
            "matrix": cls.MATRIX,
        }
        if name_lower in aliases:
            return aliases[name_lower]
        raise ValueError(f"Unknown kind name: {name}")


# Kind information table
_KIND_INFO: Dict[Kind, Dict[str, Any]] = {
    Kind.U8: {"size": 1, "dtype": np.dtype(np.uint8), "name": "u8",
              "error": np.iinfo(np.uint8).max},
    Kind.U16: {"size": 2, "dtype": np.dtype(np.uint16), "name": "u16",
               "error": np.iinfo(np.uint16).max},
    Kind.U32: {"size": 4, "dtype": np.dtype(np.uint32), "name": "u32",
               "error": np.iinfo(np.uint32).max},
    Kind.U64: {"size": 8, "dtype": np.dtype(np.uint64), "name": "u64",
               "error": np.iinfo(np.uint64).max},
    Kind.I8: {"size": 1, "dtype": np.dtype(np.int8), "name": "i8",
              "error": np.iinfo(np.int8).min},
    Kind.I16: {"size": 2, "dtype": np.dtype(np.int16), "name": "i16",
               "error": np.iinfo(np.int16).min},
    Kind.I32: {"size": 4, "dtype": np.dtype(np.int32), "name": "i32",
               "error": np.iinfo(np.int32).min},
    Kind.I64: {"size": 8, "dtype": np.dtype(np.int64), "name": "i64",
               "error": np.iinfo(np.int64).min},
    Kind.F32: {"size": 4, "dtype": np.dtype(np.float32), "name": "f32",
               "error": math.nan},
    Kind.F64: {"size": 8, "dtype": np.dtype(np.float64), "name": "f64",
               "error": math.nan},
    Kind.CF32: {"size": 8, "dtype": np.dtype(np.complex64), "name": "cf32",
                "error": complex(math.nan, math.nan)},
    Kind.CF64: {"size": 16, "dtype": np.dtype(np.complex128), "name": "cf64",
                "error": complex(math.nan, math.nan)},
    # Structured kinds: footprint of the cell handle kept in the buffer
    Kind.BIGINT: {"size": 24, "dtype": None, "name": "bigint", "error": None},
    Kind.FRACTION: {"size": 48, "dtype": None, "name": "fraction", "error": None},
    Kind.COMPLEX: {"size": 96, "dtype": None, "name": "complex", "error": None},
    Kind.EXPRESSION: {"size": 24, "dtype": None, "name": "expression", "error": None},
    Kind.MATRIX: {"size": 32, "dtype": None, "name": "matrix", "error": None},
}


# =============================================================================
# Module-Level Constants (For Clean Syntax)
# =============================================================================

U8 = Kind.U8
U16 = Kind.U16
U32 = Kind.U32
U64 = Kind.U64
I8 = Kind.I8
I16 = Kind.I16
I32 = Kind.I32
I64 = Kind.I64
F32 = Kind.F32
F64 = Kind.F64
CF32 = Kind.CF32
CF64 = Kind.CF64
BIGINT = Kind.BIGINT
FRACTION = Kind.FRACTION
COMPLEX = Kind.COMPLEX
EXPRESSION = Kind.EXPRESSION
MATRIX = Kind.MATRIX


# =============================================================================
# Kind Utilities
# =============================================================================

_DTYPE_TO_KIND: Dict[np.dtype, Kind] = {
    info["dtype"]: kind for kind, info in _KIND_INFO.items() if info["dtype"] is not None
}


def normalize_kind(kind: Union[str, int, Kind]) -> Optional[Kind]:
    """
    Normalize a kind given as ``Kind``, integer tag or name.

    Returns:
        The ``Kind``, or ``None`` when the value names no known kind.

    Example:
        >>> normalize_kind('f64')
        <Kind.F64: 9>
        >>> normalize_kind(99) is None
        True
    """
    if isinstance(kind, Kind):
        return kind
    if isinstance(kind, str):
        try:
            return Kind.from_name(kind)
        except ValueError:
            return None
    try:
        return Kind(int(kind))
    except (TypeError, ValueError):
        return None


def kind_from_dtype(dtype: Any) -> Kind:
    """Get the fixed-width Kind matching a numpy dtype."""
    dt = np.dtype(dtype)
    if dt not in _DTYPE_TO_KIND:
        raise ValueError(f"No matrix kind for dtype {dt}")
    return _DTYPE_TO_KIND[dt]
