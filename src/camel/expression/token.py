"""
Expression tokens and the growable token array.
"""

from __future__ import annotations

import logging
from enum import IntEnum
from typing import Iterator, List, Optional

from ..core.allocator import Allocator
from ..core.error import Status


__all__ = [
    'TokenCategory',
    'Token',
    'TokenArray',
    'token_init',
    'token_destroy',
    'INITIAL_TOKEN_CAPACITY',
]

logger = logging.getLogger("camel.expression")

INITIAL_TOKEN_CAPACITY = 10

# Bytes reserved per token slot in the array's block
TOKEN_SLOT_BYTES = 16


# =============================================================================
# Token Categories
# =============================================================================

class TokenCategory(IntEnum):
    """Character class of a token."""
    UNDEFINED = -1
    DIGITS = 1
    ADDITIVE_OP = 2          # + -
    MULTIPLICATIVE_OP = 3    # * /
    POWER_OP = 4             # ^
    LETTER = 5               # alphabetic run pending classification
    FUNCTION = 6             # ln log sin cos
    VARIABLE = 7
    CONSTANT = 8             # e i pi phi
    OPEN_BRACKET = 9         # ( [ {
    CLOSE_BRACKET = 10       # ) ] }
    WHITESPACE = 11

    @property
    def is_operator(self) -> bool:
        return self in (TokenCategory.ADDITIVE_OP,
                        TokenCategory.MULTIPLICATIVE_OP,
                        TokenCategory.POWER_OP)


# =============================================================================
# Token
# =============================================================================

class Token:
    """
    One lexed token.

    Attributes:
        category: ``TokenCategory`` of the token.
        characters: Owned character payload.
    """

    __slots__ = ('category', 'characters')

    def __init__(self, category: TokenCategory = TokenCategory.UNDEFINED,
                 characters: str = ""):
        self.category = category
        self.characters = characters

    @property
    def length(self) -> int:
        return len(self.characters)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Token):
            return NotImplemented
        return self.category == other.category and self.characters == other.characters

    __hash__ = None

    def __repr__(self) -> str:
        return f"Token({self.category.name}, {self.characters!r})"


def token_init(characters: Optional[str], category: int, out: Optional[Token]) -> Status:
    """
    Fill ``out`` with a copy of ``characters`` and ``category``.

    Returns:
        ``INVALID_CHAR`` if ``category`` is not a known token category.
    """
    try:
        category = TokenCategory(category)
    except ValueError:
        return Status.INVALID_CHAR
    if out is None or characters is None:
        return Status.NULL_POINTER
    out.category = category
    out.characters = str(characters)
    return Status.SUCCESS


def token_destroy(token: Optional[Token]) -> None:
    if token is None:
        return
    token.characters = ""
    token.category = TokenCategory.UNDEFINED


# =============================================================================
# Token Array
# =============================================================================

class TokenArray:
    """
    Allocator-backed growable sequence of tokens.

    Slot storage is obtained from the allocator with an initial capacity of
    ten tokens and doubled whenever it is exhausted. ``trim`` shrinks it to the
    exact length.

    Example:
        >>> from camel.core import heap_allocator
        >>> arr = TokenArray()
        >>> arr.init(heap_allocator())
        <Status.SUCCESS: 0>
        >>> arr.push(Token(TokenCategory.DIGITS, "42"))
        <Status.SUCCESS: 0>
        >>> len(arr)
        1
        >>> arr.destroy()
    """

    def __init__(self):
        self._block: Optional[bytearray] = None
        self._tokens: List[Token] = []
        self.capacity = 0
        self.allocator: Optional[Allocator] = None

    @property
    def is_initialized(self) -> bool:
        return self._block is not None

    def init(self, allocator: Optional[Allocator],
             capacity: int = INITIAL_TOKEN_CAPACITY) -> Status:
        if allocator is None:
            return Status.NULL_POINTER
        block = allocator.allocate(capacity * TOKEN_SLOT_BYTES)
        if block is None:
            logger.debug("Token array allocation of %d slots failed", capacity)
            return Status.MALLOC
        self._block = block
        self._tokens = []
        self.capacity = capacity
        self.allocator = allocator
        return Status.SUCCESS

    def _resize(self, capacity: int) -> Status:
        block = self.allocator.reallocate(self._block, capacity * TOKEN_SLOT_BYTES)
        if block is None:
            logger.debug("Token array resize to %d slots failed", capacity)
            return Status.REALLOC
        self._block = block
        self.capacity = capacity
        return Status.SUCCESS

    def push(self, token: Token) -> Status:
        """Append ``token``; the array takes ownership of it."""
        if not self.is_initialized:
            return Status.NULL_POINTER
        if len(self._tokens) == self.capacity:
            status = self._resize(max(1, self.capacity * 2))
            if status != Status.SUCCESS:
                return status
        self._tokens.append(token)
        return Status.SUCCESS

    def extend(self, tokens) -> Status:
        for token in tokens:
            status = self.push(token)
            if status != Status.SUCCESS:
                return status
        return Status.SUCCESS

    def trim(self) -> Status:
        if not self.is_initialized:
            return Status.NULL_POINTER
        if self.capacity == len(self._tokens):
            return Status.SUCCESS
        return self._resize(len(self._tokens))

    def clear(self) -> None:
        for token in self._tokens:
            token_destroy(token)
        self._tokens = []

    def destroy(self) -> None:
        """Release every token and the slot storage."""
        if not self.is_initialized:
            return
        self.clear()
        self.allocator.release(self._block)
        self._block = None
        self.capacity = 0
        self.allocator = None

    def __len__(self) -> int:
        return len(self._tokens)

    def __getitem__(self, index: int) -> Token:
        return self._tokens[index]

    def __iter__(self) -> Iterator[Token]:
        return iter(self._tokens)

    def __repr__(self) -> str:
        return f"TokenArray(length={len(self._tokens)}, capacity={self.capacity})"
