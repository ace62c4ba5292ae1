"""CAMEL Matrix Module.

A single heterogeneous matrix type whose cells are any ``Kind``: fixed-width
integers, floats and complex floats, arbitrary-precision integers, rationals
and complex rationals, symbolic expressions, and nested matrices.

Layers:
    Matrix container     _matrix    storage, lifecycle (init / init0 / destroy)
    Element kinds        _elements  per-kind cell behaviour of structured kinds
    Kernels              _kernels   numpy kernels and generic structured loops
    Dispatcher           _ops       argument, kind, shape and output checks
    Select               _select    row/column permutation
    Printer              _printer   column-aligned console output

Ownership Rules:
    - ``matrix_set`` moves a structured cell into the matrix
    - ``matrix_get`` borrows; the matrix keeps ownership
    - ``matrix_destroy`` releases every cell, recursing into nested matrices
    - transpose, select and copy deep-copy structured cells

Quick Start:
    >>> from camel.matrix import Matrix, matrix_add
    >>> from camel.core import heap_allocator
    >>> a = Matrix.from_list([[1, 2], [3, 4]], 'i32')
    >>> b = Matrix.from_list([[10]], 'i32')
    >>> out = Matrix()
    >>> matrix_add(heap_allocator(), a, b, out)
    <Status.SUCCESS: 0>
    >>> out.tolist()
    [[11, 12], [13, 14]]
"""

from ._matrix import (
    Matrix,
    matrix_init,
    matrix_init0,
    matrix_destroy,
    matrix_move,
)

from ._elements import (
    Element,
    element_for,
)

from ._ops import (
    matrix_add,
    matrix_sub,
    matrix_mult,
    matrix_multew,
    matrix_divew,
    matrix_add_inplace,
    matrix_sub_inplace,
    matrix_multew_inplace,
    matrix_divew_inplace,
    matrix_transpose,
    matrix_copy,
    matrix_equal,
    matrix_get,
    matrix_get_checked,
    matrix_get_as,
    matrix_set,
)

from ._select import (
    matrix_select,
    matrix_identity_vector,
)

from ._printer import (
    render_cell,
    format_matrix,
    matrix_print,
)

__all__ = [
    # Container
    'Matrix',
    'matrix_init',
    'matrix_init0',
    'matrix_destroy',
    'matrix_move',

    # Element kinds
    'Element',
    'element_for',

    # Operations
    'matrix_add',
    'matrix_sub',
    'matrix_mult',
    'matrix_multew',
    'matrix_divew',
    'matrix_add_inplace',
    'matrix_sub_inplace',
    'matrix_multew_inplace',
    'matrix_divew_inplace',
    'matrix_transpose',
    'matrix_copy',
    'matrix_equal',

    # Cell access
    'matrix_get',
    'matrix_get_checked',
    'matrix_get_as',
    'matrix_set',

    # Select
    'matrix_select',
    'matrix_identity_vector',

    # Printing
    'render_cell',
    'format_matrix',
    'matrix_print',
]
