"""
CAMEL Core - kinds, allocators, status codes and configuration.

Usage:
    >>> from camel.core import Kind, Status, heap_allocator
    >>> Kind.F64.itemsize
    8
    >>> Status.INVALID_SIZE.ok
    False
"""

from .error import (
    Status,
    CamelError,
    status_to_str,
    status_debug,
    check_error,
)

from .kinds import (
    Kind,
    normalize_kind,
    kind_from_dtype,
)

from .allocator import (
    Allocator,
    AllocationStats,
    heap_allocator,
    tracking_allocator,
)

from .config import (
    get_config,
    reset_config,
    set_default_allocator,
)

__all__ = [
    # Status codes
    'Status',
    'CamelError',
    'status_to_str',
    'status_debug',
    'check_error',

    # Kinds
    'Kind',
    'normalize_kind',
    'kind_from_dtype',

    # Allocators
    'Allocator',
    'AllocationStats',
    'heap_allocator',
    'tracking_allocator',

    # Configuration
    'get_config',
    'reset_config',
    'set_default_allocator',
]
