"""
CAMEL Expression - tokens, lexer and the symbolic expression kind.

Usage:
    >>> from camel.expression import tokenize
    >>> [t.category.name for t in tokenize("2x")]
    ['DIGITS', 'VARIABLE']
"""

from .token import (
    TokenCategory,
    Token,
    TokenArray,
    token_init,
    token_destroy,
)

from .lexer import (
    classify_char,
    lex_expression,
    tokenize,
)

from .expression import (
    Expression,
    expression_init,
    expression_init_str,
    expression_destroy,
    expression_copy,
    expression_add,
    expression_sub,
    expression_mult,
    expression_div,
    expression_add_inplace,
    expression_sub_inplace,
    expression_mult_inplace,
    expression_div_inplace,
    expression_equal,
    expression_is_zero,
    expression_to_str,
)

__all__ = [
    # Tokens
    'TokenCategory', 'Token', 'TokenArray', 'token_init', 'token_destroy',

    # Lexer
    'classify_char', 'lex_expression', 'tokenize',

    # Expressions
    'Expression',
    'expression_init', 'expression_init_str', 'expression_destroy',
    'expression_copy', 'expression_add', 'expression_sub', 'expression_mult',
    'expression_div', 'expression_add_inplace', 'expression_sub_inplace',
    'expression_mult_inplace', 'expression_div_inplace', 'expression_equal',
    'expression_is_zero', 'expression_to_str',
]
