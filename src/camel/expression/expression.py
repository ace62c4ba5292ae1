"""
Symbolic expressions.

An ``Expression`` owns a ``TokenArray``. Arithmetic never evaluates; it
composes token sequences, so ``add(a, b)`` becomes ``(a)+(b)``. Trivial
identities (adding zero, multiplying by zero or one, ``a - a``) collapse
without composing.
"""

from __future__ import annotations

from typing import List, Optional

from ..core.allocator import Allocator
from ..core.config import get_config
from ..core.error import Status, check_error
from .lexer import lex_expression
from .token import Token, TokenArray, TokenCategory


__all__ = [
    'Expression',
    'expression_init',
    'expression_init_str',
    'expression_destroy',
    'expression_copy',
    'expression_add',
    'expression_sub',
    'expression_mult',
    'expression_div',
    'expression_add_inplace',
    'expression_sub_inplace',
    'expression_mult_inplace',
    'expression_div_inplace',
    'expression_equal',
    'expression_is_zero',
    'expression_to_str',
]


class Expression:
    """
    Symbolic expression held as a token sequence.

    Example:
        >>> x = Expression.from_str("x")
        >>> str(x)
        'x'
    """

    __slots__ = ('tokens',)

    def __init__(self):
        self.tokens = TokenArray()

    @classmethod
    def from_str(cls, source: str, allocator: Optional[Allocator] = None) -> "Expression":
        """
        Raises:
            CamelError: If lexing or allocation fails.
        """
        if allocator is None:
            allocator = get_config().default_allocator
        out = cls()
        check_error(expression_init_str(allocator, source, out), "expression_init_str")
        return out

    @property
    def is_initialized(self) -> bool:
        return self.tokens.is_initialized

    @property
    def allocator(self) -> Optional[Allocator]:
        return self.tokens.allocator

    def __str__(self) -> str:
        text = expression_to_str(self)
        return text if text is not None else "<uninitialized>"

    def __repr__(self) -> str:
        return f"Expression({self})"

    def __eq__(self, other) -> bool:
        if not isinstance(other, Expression):
            return NotImplemented
        return expression_equal(self, other)

    __hash__ = None


# =============================================================================
# Helpers
# =============================================================================

def _copy_tokens(expression: Expression) -> List[Token]:
    return [Token(t.category, t.characters) for t in expression.tokens]


def _zero_tokens() -> List[Token]:
    return [Token(TokenCategory.DIGITS, '0')]


def _is_literal(tokens, text: str) -> bool:
    return len(tokens) == 1 and tokens[0].category is TokenCategory.DIGITS and \
        tokens[0].characters == text


def _grouped(tokens: List[Token]) -> List[Token]:
    return [Token(TokenCategory.OPEN_BRACKET, '(')] + tokens + \
        [Token(TokenCategory.CLOSE_BRACKET, ')')]


def _compose(left: List[Token], operator: Token, right: List[Token]) -> List[Token]:
    return _grouped(left) + [operator] + _grouped(right)


def _write(tokens: List[Token], allocator: Optional[Allocator], out: Expression) -> Status:
    if allocator is None:
        if not out.is_initialized:
            return Status.NULL_POINTER
        out.tokens.clear()
    else:
        if out.is_initialized:
            out.tokens.destroy()
        status = out.tokens.init(allocator, max(1, len(tokens)))
        if status != Status.SUCCESS:
            return status
    status = out.tokens.extend(tokens)
    if status != Status.SUCCESS:
        return status
    return out.tokens.trim()


# =============================================================================
# Lifecycle
# =============================================================================

def expression_init(allocator: Optional[Allocator], out: Optional[Expression]) -> Status:
    """Construct ``out`` as the zero expression ``0``."""
    if allocator is None or out is None:
        return Status.NULL_POINTER
    return _write(_zero_tokens(), allocator, out)


def expression_init_str(allocator: Optional[Allocator], source: Optional[str],
                        out: Optional[Expression]) -> Status:
    """Construct ``out`` by lexing ``source``."""
    if allocator is None or source is None or out is None:
        return Status.NULL_POINTER
    if out.is_initialized:
        out.tokens.destroy()
    status = lex_expression(source, out.tokens, allocator)
    if status != Status.SUCCESS:
        out.tokens.destroy()
    return status


def expression_destroy(expression: Optional[Expression]) -> None:
    if expression is None:
        return
    expression.tokens.destroy()


def expression_copy(allocator: Optional[Allocator], src: Optional[Expression],
                    dst: Optional[Expression]) -> Status:
    if src is None or dst is None or not src.is_initialized:
        return Status.NULL_POINTER
    if src is dst:
        return Status.SUCCESS
    return _write(_copy_tokens(src), allocator, dst)


# =============================================================================
# Composition
# =============================================================================

def _combine(op: str, left: List[Token], right: List[Token]) -> List[Token]:
    if op == 'add':
        if _is_literal(left, '0'):
            return right
        if _is_literal(right, '0'):
            return left
        return _compose(left, Token(TokenCategory.ADDITIVE_OP, '+'), right)
    if op == 'sub':
        if left == right:
            return _zero_tokens()
        if _is_literal(right, '0'):
            return left
        return _compose(left, Token(TokenCategory.ADDITIVE_OP, '-'), right)
    if op == 'mult':
        if _is_literal(left, '0') or _is_literal(right, '0'):
            return _zero_tokens()
        if _is_literal(left, '1'):
            return right
        if _is_literal(right, '1'):
            return left
        return _compose(left, Token(TokenCategory.MULTIPLICATIVE_OP, '*'), right)
    # div
    if _is_literal(left, '0'):
        return _zero_tokens()
    if _is_literal(right, '1'):
        return left
    return _compose(left, Token(TokenCategory.MULTIPLICATIVE_OP, '/'), right)


def _binary(op: str, allocator: Optional[Allocator], left: Optional[Expression],
            right: Optional[Expression], out: Optional[Expression]) -> Status:
    if left is None or right is None or out is None:
        return Status.NULL_POINTER
    if not left.is_initialized or not right.is_initialized:
        return Status.NULL_POINTER
    right_tokens = _copy_tokens(right)
    if op == 'div' and _is_literal(right_tokens, '0'):
        return Status.DIVISION_BY_ZERO
    tokens = _combine(op, _copy_tokens(left), right_tokens)
    return _write(tokens, allocator, out)


def expression_add(allocator, left, right, out) -> Status:
    return _binary('add', allocator, left, right, out)


def expression_sub(allocator, left, right, out) -> Status:
    return _binary('sub', allocator, left, right, out)


def expression_mult(allocator, left, right, out) -> Status:
    return _binary('mult', allocator, left, right, out)


def expression_div(allocator, left, right, out) -> Status:
    return _binary('div', allocator, left, right, out)


def expression_add_inplace(right, out) -> Status:
    return _binary('add', None, out, right, out)


def expression_sub_inplace(right, out) -> Status:
    return _binary('sub', None, out, right, out)


def expression_mult_inplace(right, out) -> Status:
    return _binary('mult', None, out, right, out)


def expression_div_inplace(right, out) -> Status:
    return _binary('div', None, out, right, out)


# =============================================================================
# Comparison and Rendering
# =============================================================================

def expression_equal(left: Optional[Expression], right: Optional[Expression]) -> bool:
    """Token-wise equality."""
    if left is None or right is None:
        return left is right
    if left.is_initialized != right.is_initialized:
        return False
    return list(left.tokens) == list(right.tokens)


def expression_is_zero(expression: Expression) -> bool:
    return _is_literal(list(expression.tokens), '0')


def expression_to_str(expression: Optional[Expression]) -> Optional[str]:
    """Concatenated token payloads."""
    if expression is None or not expression.is_initialized:
        return None
    return "".join(t.characters for t in expression.tokens)
