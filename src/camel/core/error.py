"""
Status codes and error handling for CAMEL.

Every matrix, big-number and lexer operation is a total function that
returns a ``Status``. The object-oriented conveniences convert a non-success
status into a ``CamelError`` through ``check_error``.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Optional


__all__ = [
    'Status',
    'CamelError',
    'status_to_str',
    'status_debug',
    'check_error',
]


# =============================================================================
# Status Codes
# =============================================================================

class Status(IntEnum):
    """
    Outcome of a CAMEL operation.

    Codes are grouped by range:
        0       success
        1-9     general failures (null arguments, allocation)
        10-19   argument errors (indices, sizes, permutations)
        20-29   kind errors
        50-59   numerical errors
    """
    SUCCESS = 0

    # General errors (1-9)
    NULL_POINTER = 1
    INVALID_ENUM_MEMBER = 2
    MALLOC = 3
    REALLOC = 4

    # Argument errors (10-19)
    INVALID_INDEX = 10
    INVALID_SIZE = 11
    INCOMPATIBLE_SIZES = 12
    EXPECTED_VECTOR = 13
    INVALID_PERMUTATION = 14
    INVALID_CHAR = 15

    # Kind errors (20-29)
    INCOMPATIBLE_KINDS = 20

    # Numerical errors (50-59)
    DIVISION_BY_ZERO = 50
    SINGULAR_MATRIX = 51

    @property
    def ok(self) -> bool:
        return self is Status.SUCCESS


_STATUS_MESSAGES = {
    Status.SUCCESS: "Success",
    Status.NULL_POINTER: "Null pointer passed as input",
    Status.INVALID_ENUM_MEMBER: "Invalid enum member",
    Status.MALLOC: "Allocation of a fresh buffer failed",
    Status.REALLOC: "Reallocation failed",
    Status.INVALID_INDEX: "Invalid index",
    Status.INVALID_SIZE: "Invalid size",
    Status.INCOMPATIBLE_SIZES: "Incompatible sizes",
    Status.EXPECTED_VECTOR: "Expected vector",
    Status.INVALID_PERMUTATION: "Invalid permutation",
    Status.INVALID_CHAR: "Invalid character",
    Status.INCOMPATIBLE_KINDS: "Incompatible kinds",
    Status.DIVISION_BY_ZERO: "Division by zero",
    Status.SINGULAR_MATRIX: "Singular matrix",
}


def status_to_str(status: int) -> str:
    """
    Return the human-readable text of a status.

    Args:
        status: Status member or its integer code.

    Returns:
        Message text, or a generic message for unknown codes.
    """
    try:
        return _STATUS_MESSAGES[Status(status)]
    except ValueError:
        return f"Unknown status (code={int(status)})"


def status_debug(expected: int, got: int) -> str:
    """Describe a mismatch between an expected and an obtained status."""
    return f"expected {status_to_str(expected)}, got {status_to_str(got)}"


# =============================================================================
# Exception Class
# =============================================================================

class CamelError(Exception):
    """
    Raised by the convenience layer when an operation does not succeed.

    Attributes:
        code: The ``Status`` returned by the failing operation.
        message: Context plus the status text.
    """

    def __init__(self, code: int, message: Optional[str] = None):
        try:
            self.code = Status(code)
        except ValueError:
            self.code = code
        if message is None:
            message = status_to_str(code)
        self.message = message
        super().__init__(f"CAMEL Error {int(code)}: {message}")

    @classmethod
    def from_code(cls, code: int, context: str = "") -> "CamelError":
        """Create exception from a status with optional context."""
        base_msg = status_to_str(code)
        msg = f"{context}: {base_msg}" if context else base_msg
        return cls(code, msg)


def check_error(status: int, context: str = "") -> None:
    """
    Raise ``CamelError`` unless ``status`` is ``Status.SUCCESS``.

    Args:
        status: Status returned by a CAMEL operation.
        context: Optional context message for better error reporting.

    Raises:
        CamelError: If status indicates an error.
    """
    if status == Status.SUCCESS:
        return
    raise CamelError.from_code(status, context)
