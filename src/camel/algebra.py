"""
Fixed-size linear algebra on 2, 3 and 4 component vectors and matrices.

Vectors are 1-D numpy arrays and matrices square 2-D arrays, both converted
to float64 on entry. Results are fresh arrays; inputs are never modified.

Functions:
    Vectors:      vector_dot, vector_cross, vector_mod, vector_mod2,
                  vector_norm, vector_distance, vector_distance2,
                  vector_angle, vector_project, vector_reflect, vector_eq
    Matrices:     matrix_det, matrix_inv, matrix_trace, matrix_transpose,
                  matrix_mult_vector, vector_mult_matrix, matrix_eq
    Transforms:   gen_scale, gen_shear, gen_rotation, gen_translation
    Inverses:     gen_invscale, gen_invshear, gen_invrotation,
                  gen_invtranslation

Shape errors raise ``ValueError``. Numerical failures raise ``CamelError``:
``SINGULAR_MATRIX`` for a non-invertible matrix and ``DIVISION_BY_ZERO``
where a zero-length vector would have to be normalised.

Example:
    >>> from camel.algebra import gen_rotation, matrix_mult_vector
    >>> import math
    >>> matrix_mult_vector(gen_rotation(math.pi / 2), [1.0, 0.0]).round(6)
    array([0., 1.])
"""

from __future__ import annotations

import math
from typing import Optional, Sequence, Union

import numpy as np

from .core.error import Status, CamelError


__all__ = [
    'EPSILON',
    # Vectors
    'vector_dot',
    'vector_cross',
    'vector_mod',
    'vector_mod2',
    'vector_norm',
    'vector_distance',
    'vector_distance2',
    'vector_angle',
    'vector_project',
    'vector_reflect',
    'vector_eq',
    # Matrices
    'matrix_det',
    'matrix_inv',
    'matrix_trace',
    'matrix_transpose',
    'matrix_mult_vector',
    'vector_mult_matrix',
    'matrix_eq',
    # Transforms
    'gen_scale',
    'gen_invscale',
    'gen_shear',
    'gen_invshear',
    'gen_rotation',
    'gen_invrotation',
    'gen_translation',
    'gen_invtranslation',
]

EPSILON = 1e-6

SIZES = (2, 3, 4)

_AXES = {'x': 0, 'y': 1, 'z': 2}

VectorLike = Union[np.ndarray, Sequence[float]]
MatrixLike = Union[np.ndarray, Sequence[Sequence[float]]]


# =============================================================================
# Internal helpers
# =============================================================================

def _as_vector(v: VectorLike, name: str = "v") -> np.ndarray:
    arr = np.asarray(v, dtype=np.float64)
    if arr.ndim != 1 or arr.shape[0] not in SIZES:
        raise ValueError(f"{name} must be a vector of 2, 3 or 4 components, "
                         f"got shape {arr.shape}")
    return arr


def _as_pair(v: VectorLike, w: VectorLike) -> tuple:
    v = _as_vector(v, "v")
    w = _as_vector(w, "w")
    if v.shape != w.shape:
        raise ValueError(f"Vector sizes differ: {v.shape[0]} vs {w.shape[0]}")
    return v, w


def _as_matrix(a: MatrixLike, name: str = "A") -> np.ndarray:
    arr = np.asarray(a, dtype=np.float64)
    if arr.ndim != 2 or arr.shape[0] != arr.shape[1] or arr.shape[0] not in SIZES:
        raise ValueError(f"{name} must be a 2x2, 3x3 or 4x4 matrix, "
                         f"got shape {arr.shape}")
    return arr


def _nonzero_mod2(v: np.ndarray, what: str) -> float:
    mod2 = float(np.dot(v, v))
    if mod2 == 0.0:
        raise CamelError.from_code(Status.DIVISION_BY_ZERO, f"{what} of a zero vector")
    return mod2


def _homogeneous(block: np.ndarray) -> np.ndarray:
    n = block.shape[0]
    out = np.eye(n + 1)
    out[:n, :n] = block
    return out


# =============================================================================
# Vectors
# =============================================================================

def vector_dot(v: VectorLike, w: VectorLike) -> float:
    v, w = _as_pair(v, w)
    return float(np.dot(v, w))


def vector_cross(v: VectorLike, w: VectorLike) -> Union[float, np.ndarray]:
    """
    Cross product.

    For 3-vectors this is the usual vector product. For 2-vectors it is the
    scalar ``v.x * w.y - v.y * w.x``, the z component of the product of the
    vectors embedded in the plane ``z = 0``.

    Raises:
        ValueError: For 4-vectors, which have no cross product.
    """
    v, w = _as_pair(v, w)
    if v.shape[0] == 2:
        return float(v[0] * w[1] - v[1] * w[0])
    if v.shape[0] == 3:
        return np.cross(v, w)
    raise ValueError("Cross product is defined for 2- and 3-vectors only")


def vector_mod2(v: VectorLike) -> float:
    """Squared length."""
    v = _as_vector(v)
    return float(np.dot(v, v))


def vector_mod(v: VectorLike) -> float:
    """Euclidean length."""
    return math.sqrt(vector_mod2(v))


def vector_norm(v: VectorLike) -> np.ndarray:
    """Unit vector in the direction of ``v``."""
    v = _as_vector(v)
    return v / math.sqrt(_nonzero_mod2(v, "Normalisation"))


def vector_distance2(v: VectorLike, w: VectorLike) -> float:
    v, w = _as_pair(v, w)
    d = v - w
    return float(np.dot(d, d))


def vector_distance(v: VectorLike, w: VectorLike) -> float:
    return math.sqrt(vector_distance2(v, w))


def vector_angle(v: VectorLike, w: VectorLike) -> float:
    """
    Angle between ``v`` and ``w`` in radians, in ``[0, pi]``.

    The cosine is clipped to ``[-1, 1]`` so parallel vectors give exactly
    0 or pi instead of NaN from rounding.
    """
    v, w = _as_pair(v, w)
    denom = math.sqrt(_nonzero_mod2(v, "Angle") * _nonzero_mod2(w, "Angle"))
    cosine = float(np.dot(v, w)) / denom
    return math.acos(min(1.0, max(-1.0, cosine)))


def vector_project(v: VectorLike, w: VectorLike) -> np.ndarray:
    """Projection of ``v`` onto the line spanned by ``w``."""
    v, w = _as_pair(v, w)
    return (float(np.dot(v, w)) / _nonzero_mod2(w, "Projection")) * w


def vector_reflect(v: VectorLike, normal: VectorLike) -> np.ndarray:
    """
    Reflect ``v`` across the surface with the given normal.

    ``normal`` need not be unit length.
    """
    v, normal = _as_pair(v, normal)
    scale = 2.0 * float(np.dot(v, normal)) / _nonzero_mod2(normal, "Reflection")
    return v - scale * normal


def vector_eq(v: VectorLike, w: VectorLike, epsilon: float = EPSILON) -> bool:
    """Component-wise equality within ``epsilon``."""
    v, w = _as_pair(v, w)
    return bool(np.all(np.abs(v - w) <= epsilon))


# =============================================================================
# Matrices
# =============================================================================

def matrix_det(a: MatrixLike) -> float:
    return float(np.linalg.det(_as_matrix(a)))


def matrix_inv(a: MatrixLike) -> np.ndarray:
    """
    Inverse of a square matrix.

    Singularity is decided by numerical rank, so matrices whose determinant
    rounds to a tiny non-zero value are still rejected.

    Raises:
        CamelError: ``SINGULAR_MATRIX`` when ``a`` is not invertible.
    """
    a = _as_matrix(a)
    if np.linalg.matrix_rank(a) < a.shape[0]:
        raise CamelError.from_code(Status.SINGULAR_MATRIX,
                                   f"Inverse of {a.shape[0]}x{a.shape[0]} matrix")
    return np.linalg.inv(a)


def matrix_trace(a: MatrixLike) -> float:
    return float(np.trace(_as_matrix(a)))


def matrix_transpose(a: MatrixLike) -> np.ndarray:
    return _as_matrix(a).T.copy()


def matrix_mult_vector(a: MatrixLike, v: VectorLike) -> np.ndarray:
    """``A v`` with ``v`` as a column vector."""
    a = _as_matrix(a)
    v = _as_vector(v)
    if a.shape[1] != v.shape[0]:
        raise ValueError(f"Cannot multiply {a.shape[0]}x{a.shape[1]} matrix "
                         f"by {v.shape[0]}-vector")
    return a @ v


def vector_mult_matrix(v: VectorLike, a: MatrixLike) -> np.ndarray:
    """``v^T A`` with ``v`` as a row vector."""
    a = _as_matrix(a)
    v = _as_vector(v)
    if a.shape[0] != v.shape[0]:
        raise ValueError(f"Cannot multiply {v.shape[0]}-vector "
                         f"by {a.shape[0]}x{a.shape[1]} matrix")
    return v @ a


def matrix_eq(a: MatrixLike, b: MatrixLike, epsilon: float = EPSILON) -> bool:
    """Entry-wise equality within ``epsilon``."""
    a = _as_matrix(a, "A")
    b = _as_matrix(b, "B")
    return a.shape == b.shape and bool(np.all(np.abs(a - b) <= epsilon))


# =============================================================================
# Transform generators
# =============================================================================

def gen_scale(factors: Sequence[float], homogeneous: bool = False) -> np.ndarray:
    """
    Diagonal scale matrix.

    Args:
        factors: One factor per axis (2 or 3 of them, or 4 when not
            homogeneous).
        homogeneous: Append a unit row and column, so 2 factors give a
            3x3 matrix and 3 factors a 4x4 matrix.
    """
    factors = np.asarray(factors, dtype=np.float64).ravel()
    size = factors.shape[0] + (1 if homogeneous else 0)
    if size not in SIZES or factors.shape[0] < 2:
        raise ValueError(f"Cannot build a scale matrix from {factors.shape[0]} factors "
                         f"(homogeneous={homogeneous})")
    block = np.diag(factors)
    return _homogeneous(block) if homogeneous else block


def gen_shear(axis: str, amounts: Sequence[float], homogeneous: bool = False) -> np.ndarray:
    """
    Shear along one axis.

    The coordinate named by ``axis`` gains ``amount * other`` for each other
    coordinate, taken in axis order. In 2-D, ``gen_shear('x', [k])`` maps
    ``(x, y)`` to ``(x + k*y, y)``; in 3-D, ``gen_shear('y', [a, b])`` maps
    ``(x, y, z)`` to ``(x, y + a*x + b*z, z)``.

    Args:
        axis: ``'x'``, ``'y'`` or ``'z'``.
        amounts: One amount per other axis, so the dimension is
            ``len(amounts) + 1``.
        homogeneous: Embed the result in the next larger size.
    """
    amounts = np.asarray(amounts, dtype=np.float64).ravel()
    dim = amounts.shape[0] + 1
    if dim not in (2, 3):
        raise ValueError(f"Shear needs 1 or 2 amounts, got {amounts.shape[0]}")
    row = _AXES.get(axis)
    if row is None or row >= dim:
        raise ValueError(f"Invalid shear axis {axis!r} for {dim}-D")

    block = np.eye(dim)
    others = [c for c in range(dim) if c != row]
    block[row, others] = amounts
    return _homogeneous(block) if homogeneous else block


def gen_rotation(angle: float, axis: Optional[Union[str, VectorLike]] = None,
                 right_handed: bool = True, homogeneous: bool = False) -> np.ndarray:
    """
    Rotation by ``angle`` radians.

    Args:
        angle: Rotation angle in radians.
        axis: ``None`` for a 2-D rotation; ``'x'``, ``'y'``, ``'z'`` or an
            arbitrary 3-vector for a 3-D rotation about that axis.
        right_handed: Counter-clockwise when viewed against the axis (or
            in the plane for 2-D). ``False`` rotates clockwise.
        homogeneous: Embed the result in the next larger size.

    Raises:
        CamelError: ``DIVISION_BY_ZERO`` for a zero-length axis vector.
    """
    if not right_handed:
        angle = -angle
    c = math.cos(angle)
    s = math.sin(angle)

    if axis is None:
        block = np.array([[c, -s],
                          [s, c]])
    else:
        if isinstance(axis, str):
            if axis not in _AXES:
                raise ValueError(f"Invalid rotation axis {axis!r}")
            unit = np.zeros(3)
            unit[_AXES[axis]] = 1.0
        else:
            unit = np.asarray(axis, dtype=np.float64)
            if unit.shape != (3,):
                raise ValueError(f"Rotation axis must be a 3-vector, got shape {unit.shape}")
            unit = unit / math.sqrt(_nonzero_mod2(unit, "Rotation axis"))
        x, y, z = unit
        t = 1.0 - c
        # Rodrigues' rotation formula
        block = np.array([
            [t * x * x + c,     t * x * y - s * z, t * x * z + s * y],
            [t * x * y + s * z, t * y * y + c,     t * y * z - s * x],
            [t * x * z - s * y, t * y * z + s * x, t * z * z + c],
        ])
    return _homogeneous(block) if homogeneous else block


def gen_translation(offsets: Sequence[float]) -> np.ndarray:
    """
    Homogeneous translation: 2 offsets give a 3x3 matrix, 3 offsets a 4x4.
    """
    offsets = np.asarray(offsets, dtype=np.float64).ravel()
    if offsets.shape[0] not in (2, 3):
        raise ValueError(f"Translation needs 2 or 3 offsets, got {offsets.shape[0]}")
    out = np.eye(offsets.shape[0] + 1)
    out[:-1, -1] = offsets
    return out


# =============================================================================
# Transform inverses
# =============================================================================

def gen_invscale(scale: MatrixLike) -> np.ndarray:
    """Inverse of a ``gen_scale`` matrix: reciprocal diagonal."""
    scale = _as_matrix(scale, "scale")
    diagonal = np.diag(scale)
    if np.any(diagonal == 0.0):
        raise CamelError.from_code(Status.DIVISION_BY_ZERO, "Inverse of a zero scale")
    return np.diag(1.0 / diagonal)


def gen_invshear(shear: MatrixLike) -> np.ndarray:
    """
    Inverse of a ``gen_shear`` matrix.

    A single-axis shear is ``I + N`` with ``N`` nilpotent (``N @ N == 0``),
    so its inverse is ``I - N``, which leaves a homogeneous row and column
    untouched.
    """
    shear = _as_matrix(shear, "shear")
    return 2.0 * np.eye(shear.shape[0]) - shear


def gen_invrotation(rotation: MatrixLike) -> np.ndarray:
    """Inverse of an orthonormal rotation: its transpose."""
    return matrix_transpose(rotation)


def gen_invtranslation(translation: MatrixLike) -> np.ndarray:
    """Inverse of a ``gen_translation`` matrix: the negated offsets."""
    translation = _as_matrix(translation, "translation")
    if translation.shape[0] == 2:
        raise ValueError("A homogeneous translation is 3x3 or 4x4")
    out = np.eye(translation.shape[0])
    out[:-1, -1] = -translation[:-1, -1]
    return out
