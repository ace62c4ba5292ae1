"""
Pytest configuration and shared fixtures for CAMEL tests.
"""

import pytest
import numpy as np
from pathlib import Path
import sys

# Add src to path for imports
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root / "src"))

from camel.core import (
    Kind, Status, heap_allocator, tracking_allocator, reset_config,
)
from camel.matrix import Matrix, matrix_destroy
from camel._kernel.lib_loader import get_blas, clear_cache, LibraryNotFoundError


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture(autouse=True)
def fresh_config():
    """Every test starts from the default configuration."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def heap():
    return heap_allocator()


@pytest.fixture
def tracker():
    """Tracking allocator; inspect ``tracker.context`` for leaks."""
    return tracking_allocator()


@pytest.fixture(scope="session")
def requires_blas():
    """Skip test if no CBLAS back-end can be loaded."""
    clear_cache()
    try:
        return get_blas()
    except LibraryNotFoundError as e:
        pytest.skip(f"CBLAS not available: {e}")


@pytest.fixture
def i32_2x2(heap):
    """
    [[1, 2],
     [3, 4]]
    """
    m = Matrix.from_list([[1, 2], [3, 4]], Kind.I32, heap)
    yield m
    matrix_destroy(m)


@pytest.fixture
def i32_scalar(heap):
    """[[10]]"""
    m = Matrix.from_list([[10]], Kind.I32, heap)
    yield m
    matrix_destroy(m)


@pytest.fixture
def f64_2x3(heap):
    """
    [[1.0, 2.0, 3.0],
     [4.0, 5.0, 6.0]]
    """
    m = Matrix.from_list([[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]], Kind.F64, heap)
    yield m
    matrix_destroy(m)


@pytest.fixture
def i32_3x3(heap):
    """
    [[0, 1, 2],
     [3, 4, 5],
     [6, 7, 8]]
    """
    m = Matrix.from_numpy(np.arange(9, dtype=np.int32).reshape(3, 3), allocator=heap)
    yield m
    matrix_destroy(m)


# =============================================================================
# Helper Functions
# =============================================================================

def assert_no_leaks(allocator):
    """Assert a tracking allocator holds no live blocks."""
    stats = allocator.context
    assert stats.live_blocks == 0, f"{stats.live_blocks} blocks still live"
    assert stats.bytes_in_use == 0
    assert stats.foreign_frees == 0


def assert_ok(status):
    assert status == Status.SUCCESS, f"expected SUCCESS, got {Status(status).name}"
