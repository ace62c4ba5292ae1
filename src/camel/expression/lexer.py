"""
Expression lexer.

Turns arithmetic source text into a ``TokenArray`` in a single forward pass.

Character classes:
    0-9         digit runs
    + -         additive operators
    * /         multiplicative operators
    ^           power operator
    a-z         letters, classified against the keyword table
    ( [ {       open brackets
    ) ] }       close brackets
    space       skipped
    anything    skipped

Letters are matched against the keyword table by prefix. ``e``, ``i``,
``pi`` and ``phi`` are constants; ``ln``, ``log``, ``sin`` and ``cos`` are
functions; any other letter is a one-letter variable.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from ..core.allocator import Allocator
from ..core.config import get_config
from ..core.error import Status, check_error
from .token import Token, TokenArray, TokenCategory


__all__ = [
    'classify_char',
    'lex_expression',
    'tokenize',
    'KEYWORDS',
]

logger = logging.getLogger("camel.expression")


_SINGLE_CHAR = {
    '+': TokenCategory.ADDITIVE_OP,
    '-': TokenCategory.ADDITIVE_OP,
    '*': TokenCategory.MULTIPLICATIVE_OP,
    '/': TokenCategory.MULTIPLICATIVE_OP,
    '^': TokenCategory.POWER_OP,
    '(': TokenCategory.OPEN_BRACKET,
    '[': TokenCategory.OPEN_BRACKET,
    '{': TokenCategory.OPEN_BRACKET,
    ')': TokenCategory.CLOSE_BRACKET,
    ']': TokenCategory.CLOSE_BRACKET,
    '}': TokenCategory.CLOSE_BRACKET,
    ' ': TokenCategory.WHITESPACE,
}

# Checked in order; the first keyword the text starts with wins.
KEYWORDS: Tuple[Tuple[str, TokenCategory], ...] = (
    ('e', TokenCategory.CONSTANT),
    ('i', TokenCategory.CONSTANT),
    ('pi', TokenCategory.CONSTANT),
    ('phi', TokenCategory.CONSTANT),
    ('ln', TokenCategory.FUNCTION),
    ('log', TokenCategory.FUNCTION),
    ('sin', TokenCategory.FUNCTION),
    ('cos', TokenCategory.FUNCTION),
)


def classify_char(char: str) -> TokenCategory:
    """Character class of a single character."""
    if '0' <= char <= '9':
        return TokenCategory.DIGITS
    if 'a' <= char <= 'z':
        return TokenCategory.LETTER
    return _SINGLE_CHAR.get(char, TokenCategory.UNDEFINED)


def _classify_letters(source: str, start: int) -> Tuple[TokenCategory, int]:
    for keyword, category in KEYWORDS:
        if source.startswith(keyword, start):
            return category, len(keyword)
    return TokenCategory.VARIABLE, 1


def _needs_implicit_product(previous: TokenCategory, current: TokenCategory) -> bool:
    if previous is TokenCategory.UNDEFINED:
        return False
    if previous.is_operator or current.is_operator:
        return False
    if previous in (TokenCategory.OPEN_BRACKET, TokenCategory.FUNCTION):
        return False
    return current is not TokenCategory.CLOSE_BRACKET


def _scan(source: str, implicit_multiplication: bool) -> List[Token]:
    tokens: List[Token] = []
    previous = TokenCategory.UNDEFINED
    i = 0
    n = len(source)
    while i < n:
        category = classify_char(source[i])
        if category in (TokenCategory.UNDEFINED, TokenCategory.WHITESPACE):
            i += 1
            continue

        if implicit_multiplication and _needs_implicit_product(previous, category):
            tokens.append(Token(TokenCategory.MULTIPLICATIVE_OP, '*'))

        if category is TokenCategory.DIGITS:
            end = i + 1
            while end < n and classify_char(source[end]) is TokenCategory.DIGITS:
                end += 1
        elif category is TokenCategory.LETTER:
            category, length = _classify_letters(source, i)
            end = i + length
        else:
            end = i + 1

        tokens.append(Token(category, source[i:end]))
        previous = category
        i = end
    return tokens


def lex_expression(source: Optional[str], out: Optional[TokenArray],
                   allocator: Optional[Allocator] = None,
                   implicit_multiplication: bool = False) -> Status:
    """
    Lex ``source`` into ``out``.

    Args:
        source: Expression text.
        out: Token array. An unconstructed array is initialised with
            ``allocator`` (or the configured default); a live one is emptied
            and reused.
        allocator: Allocator for a fresh ``out``.
        implicit_multiplication: Insert ``*`` between juxtaposed operands
            such as ``2x`` or ``)(``.

    Returns:
        ``SUCCESS``, ``NULL_POINTER`` for missing arguments, or the
        allocation status of the token array.
    """
    if source is None or out is None:
        return Status.NULL_POINTER

    if out.is_initialized:
        out.clear()
    else:
        status = out.init(allocator if allocator is not None
                          else get_config().default_allocator)
        if status != Status.SUCCESS:
            return status

    status = out.extend(_scan(source, implicit_multiplication))
    if status == Status.SUCCESS:
        status = out.trim()
    if status != Status.SUCCESS:
        logger.debug("Lexing %r failed: %s", source, status.name)
    return status


def tokenize(source: str, implicit_multiplication: bool = False) -> List[Token]:
    """
    Lex ``source`` and return the tokens as a list.

    Raises:
        CamelError: If lexing fails.

    Example:
        >>> [t.characters for t in tokenize("3+sin(pi)")]
        ['3', '+', 'sin', '(', 'pi', ')']
    """
    out = TokenArray()
    status = lex_expression(source, out, implicit_multiplication=implicit_multiplication)
    try:
        check_error(status, "tokenize")
        return [Token(t.category, t.characters) for t in out]
    finally:
        out.destroy()
