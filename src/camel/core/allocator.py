"""
Allocator abstraction.

An ``Allocator`` is a plain value carrying four memory entry points and an
opaque context. Every storage-owning entity (matrices, big integers, token
arrays) remembers the allocator it was created with and releases its blocks
through that same allocator.

Blocks are ``bytearray`` objects. An entry point signals failure by returning
``None``; callers translate that into ``Status.MALLOC`` or ``Status.REALLOC``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional


__all__ = [
    'Allocator',
    'AllocationStats',
    'heap_allocator',
    'tracking_allocator',
]

logger = logging.getLogger("camel.allocator")

Block = bytearray

MallocFn = Callable[[int, Any], Optional[Block]]
CallocFn = Callable[[int, int, Any], Optional[Block]]
ReallocFn = Callable[[Block, int, Any], Optional[Block]]
FreeFn = Callable[[Block, Any], None]


# =============================================================================
# Allocator Value
# =============================================================================

@dataclass(frozen=True)
class Allocator:
    """
    Memory entry points plus an opaque context.

    Attributes:
        malloc: ``malloc(size, context) -> block | None``
        calloc: ``calloc(count, size, context) -> zeroed block | None``
        realloc: ``realloc(block, new_size, context) -> block | None``.
            Contents are preserved up to the smaller size.
        free: ``free(block, context)``
        context: Passed unchanged to every entry point.

    Example:
        >>> alloc = heap_allocator()
        >>> block = alloc.allocate_zeroed(4, 8)
        >>> len(block)
        32
        >>> alloc.release(block)
    """
    malloc: MallocFn
    calloc: CallocFn
    realloc: ReallocFn
    free: FreeFn
    context: Any = None

    def allocate(self, size: int) -> Optional[Block]:
        return self.malloc(size, self.context)

    def allocate_zeroed(self, count: int, size: int) -> Optional[Block]:
        return self.calloc(count, size, self.context)

    def reallocate(self, block: Block, new_size: int) -> Optional[Block]:
        return self.realloc(block, new_size, self.context)

    def release(self, block: Optional[Block]) -> None:
        if block is None:
            return
        self.free(block, self.context)


# =============================================================================
# Heap Allocator
# =============================================================================

def _heap_malloc(size: int, context: Any) -> Optional[Block]:
    if size < 0:
        return None
    try:
        return bytearray(size)
    except MemoryError:
        logger.debug("malloc of %d bytes failed", size)
        return None


def _heap_calloc(count: int, size: int, context: Any) -> Optional[Block]:
    if count < 0 or size < 0:
        return None
    return _heap_malloc(count * size, context)


def _heap_realloc(block: Block, new_size: int, context: Any) -> Optional[Block]:
    if new_size < 0:
        return None
    try:
        fresh = bytearray(new_size)
    except MemoryError:
        logger.debug("realloc to %d bytes failed", new_size)
        return None
    keep = min(len(block), new_size)
    fresh[:keep] = block[:keep]
    return fresh


def _heap_free(block: Block, context: Any) -> None:
    # Blocks are garbage collected once the last view onto them is gone.
    return None


_HEAP = Allocator(_heap_malloc, _heap_calloc, _heap_realloc, _heap_free, None)


def heap_allocator() -> Allocator:
    """Return the process heap allocator."""
    return _HEAP


# =============================================================================
# Tracking Allocator
# =============================================================================

@dataclass
class AllocationStats:
    """
    Book-keeping context of a tracking allocator.

    Attributes:
        bytes_in_use: Bytes held by live blocks.
        peak_bytes: Largest value ``bytes_in_use`` has reached.
        allocations: Successful malloc/calloc/realloc calls.
        frees: Successful releases.
        foreign_frees: Releases of blocks this allocator never produced.
        fail_after: When set, the allocation attempt with this index
            (0-based, counting every malloc/calloc/realloc) and all later
            ones fail. Used to inject allocation failures in tests.
    """
    bytes_in_use: int = 0
    peak_bytes: int = 0
    allocations: int = 0
    frees: int = 0
    foreign_frees: int = 0
    attempts: int = 0
    fail_after: Optional[int] = None
    _live: Dict[int, Block] = field(default_factory=dict, repr=False)

    @property
    def live_blocks(self) -> int:
        return len(self._live)

    def _should_fail(self) -> bool:
        attempt = self.attempts
        self.attempts += 1
        return self.fail_after is not None and attempt >= self.fail_after

    def _record(self, block: Block) -> None:
        self._live[id(block)] = block
        self.allocations += 1
        self.bytes_in_use += len(block)
        self.peak_bytes = max(self.peak_bytes, self.bytes_in_use)

    def _forget(self, block: Block) -> bool:
        held = self._live.pop(id(block), None)
        if held is None:
            self.foreign_frees += 1
            logger.warning("Released a block of %d bytes not owned by this allocator",
                           len(block))
            return False
        self.bytes_in_use -= len(held)
        self.frees += 1
        return True


def _tracking_malloc(size: int, stats: AllocationStats) -> Optional[Block]:
    if stats._should_fail():
        logger.debug("Injected malloc failure (%d bytes)", size)
        return None
    block = _heap_malloc(size, None)
    if block is not None:
        stats._record(block)
    return block


def _tracking_calloc(count: int, size: int, stats: AllocationStats) -> Optional[Block]:
    if stats._should_fail():
        logger.debug("Injected calloc failure (%d x %d bytes)", count, size)
        return None
    block = _heap_calloc(count, size, None)
    if block is not None:
        stats._record(block)
    return block


def _tracking_realloc(block: Block, new_size: int,
                      stats: AllocationStats) -> Optional[Block]:
    if stats._should_fail():
        logger.debug("Injected realloc failure (%d bytes)", new_size)
        return None
    fresh = _heap_realloc(block, new_size, None)
    if fresh is None:
        return None
    stats._forget(block)
    # A realloc is one logical allocation, not a new one.
    stats._record(fresh)
    stats.allocations -= 1
    return fresh


def _tracking_free(block: Block, stats: AllocationStats) -> None:
    stats._forget(block)


def tracking_allocator(fail_after: Optional[int] = None) -> Allocator:
    """
    Create an allocator that records every block it hands out.

    Args:
        fail_after: Number of allocation attempts that succeed before
            every further attempt returns ``None``.

    Returns:
        Allocator whose ``context`` is an ``AllocationStats``.

    Example:
        >>> alloc = tracking_allocator()
        >>> block = alloc.allocate(16)
        >>> alloc.context.bytes_in_use
        16
        >>> alloc.release(block)
        >>> alloc.context.live_blocks
        0
    """
    stats = AllocationStats(fail_after=fail_after)
    return Allocator(_tracking_malloc, _tracking_calloc, _tracking_realloc,
                     _tracking_free, stats)
