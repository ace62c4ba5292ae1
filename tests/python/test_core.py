"""
Tests for status codes, kinds, allocators and configuration.
"""

import math

import pytest
import numpy as np

from camel.core import (
    Kind, Status, CamelError, check_error, status_to_str, status_debug,
    normalize_kind, kind_from_dtype, heap_allocator, tracking_allocator,
    get_config, reset_config, set_default_allocator, Allocator,
)


class TestStatus:
    """Test status codes and the exception layer."""

    def test_status_ranges(self):
        """Codes are grouped by range."""
        assert Status.SUCCESS == 0
        assert 1 <= Status.NULL_POINTER <= 9
        assert 1 <= Status.REALLOC <= 9
        assert 10 <= Status.INVALID_PERMUTATION <= 19
        assert 20 <= Status.INCOMPATIBLE_KINDS <= 29
        assert 50 <= Status.DIVISION_BY_ZERO <= 59
        assert 50 <= Status.SINGULAR_MATRIX <= 59

    def test_status_ok(self):
        assert Status.SUCCESS.ok
        assert not Status.MALLOC.ok

    def test_status_to_str(self):
        """Every member has a message; unknown codes get a generic one."""
        for status in Status:
            assert status_to_str(status)
        assert status_to_str(Status.INVALID_PERMUTATION) == "Invalid permutation"
        assert "999" in status_to_str(999)

    def test_status_debug(self):
        text = status_debug(Status.SUCCESS, Status.MALLOC)
        assert "Success" in text
        assert "fresh buffer" in text

    def test_check_error_success(self):
        """check_error is silent on SUCCESS."""
        check_error(Status.SUCCESS, "noop")

    def test_check_error_raises(self):
        """check_error raises CamelError carrying the code."""
        with pytest.raises(CamelError) as info:
            check_error(Status.INVALID_SIZE, "Matrix.zeros")
        assert info.value.code is Status.INVALID_SIZE
        assert "Matrix.zeros" in info.value.message
        assert "Invalid size" in str(info.value)

    def test_camel_error_unknown_code(self):
        err = CamelError(777)
        assert err.code == 777
        assert "777" in str(err)


class TestKinds:
    """Test the kind catalogue."""

    def test_itemsizes(self):
        assert Kind.U8.itemsize == 1
        assert Kind.I16.itemsize == 2
        assert Kind.F32.itemsize == 4
        assert Kind.F64.itemsize == 8
        assert Kind.CF32.itemsize == 8
        assert Kind.CF64.itemsize == 16
        assert all(k.itemsize > 0 for k in Kind)

    def test_classification(self):
        """Exactly five kinds are structured."""
        structured = [k for k in Kind if k.is_structured]
        assert structured == [Kind.BIGINT, Kind.FRACTION, Kind.COMPLEX,
                              Kind.EXPRESSION, Kind.MATRIX]
        assert Kind.U32.is_unsigned and Kind.U32.is_integer
        assert Kind.I8.is_signed and not Kind.I8.is_unsigned
        assert Kind.F32.is_float and not Kind.F32.is_integer
        assert Kind.CF64.is_complex_float
        assert Kind.BIGINT.dtype is None

    def test_error_values(self):
        """Sentinels: unsigned max, signed min, NaN, NaN+NaNj, None."""
        assert Kind.U8.error_value == 255
        assert Kind.U64.error_value == 2 ** 64 - 1
        assert Kind.I32.error_value == -2 ** 31
        assert math.isnan(Kind.F64.error_value)
        assert math.isnan(Kind.CF32.error_value.real)
        assert math.isnan(Kind.CF32.error_value.imag)
        assert Kind.FRACTION.error_value is None

    def test_from_name(self):
        assert Kind.from_name("i32") is Kind.I32
        assert Kind.from_name("float64") is Kind.F64
        assert Kind.from_name("Rational") is Kind.FRACTION
        with pytest.raises(ValueError):
            Kind.from_name("quaternion")

    def test_normalize_kind(self):
        assert normalize_kind(Kind.U16) is Kind.U16
        assert normalize_kind(9) is Kind.F64
        assert normalize_kind("matrix") is Kind.MATRIX
        assert normalize_kind(99) is None
        assert normalize_kind("nope") is None
        assert normalize_kind(None) is None

    def test_kind_from_dtype(self):
        assert kind_from_dtype(np.int64) is Kind.I64
        assert kind_from_dtype("complex64") is Kind.CF32
        with pytest.raises(ValueError):
            kind_from_dtype(np.float16)


class TestHeapAllocator:
    """Test the heap allocator."""

    def test_allocate(self):
        alloc = heap_allocator()
        block = alloc.allocate(12)
        assert isinstance(block, bytearray)
        assert len(block) == 12

    def test_allocate_zeroed(self):
        block = heap_allocator().allocate_zeroed(4, 8)
        assert len(block) == 32
        assert not any(block)

    def test_reallocate_preserves_prefix(self):
        alloc = heap_allocator()
        block = alloc.allocate(4)
        block[:] = b"abcd"
        grown = alloc.reallocate(block, 8)
        assert bytes(grown[:4]) == b"abcd"
        shrunk = alloc.reallocate(grown, 2)
        assert bytes(shrunk) == b"ab"

    def test_negative_size_fails(self):
        assert heap_allocator().allocate(-1) is None

    def test_release_none(self):
        heap_allocator().release(None)


class TestTrackingAllocator:
    """Test the leak-checking allocator."""

    def test_bookkeeping(self):
        alloc = tracking_allocator()
        stats = alloc.context
        a = alloc.allocate(16)
        b = alloc.allocate_zeroed(2, 4)
        assert stats.bytes_in_use == 24
        assert stats.allocations == 2
        assert stats.live_blocks == 2
        alloc.release(a)
        assert stats.bytes_in_use == 8
        alloc.release(b)
        assert stats.bytes_in_use == 0
        assert stats.peak_bytes == 24
        assert stats.frees == 2

    def test_realloc_replaces_block(self):
        alloc = tracking_allocator()
        stats = alloc.context
        block = alloc.allocate(4)
        grown = alloc.reallocate(block, 12)
        assert stats.live_blocks == 1
        assert stats.bytes_in_use == 12
        assert stats.allocations == 1
        alloc.release(grown)
        assert stats.live_blocks == 0

    def test_fail_after(self):
        """Attempts from index ``fail_after`` on return None."""
        alloc = tracking_allocator(fail_after=1)
        assert alloc.allocate(4) is not None
        assert alloc.allocate(4) is None
        assert alloc.allocate_zeroed(1, 1) is None

    def test_foreign_free_warns(self, caplog):
        alloc = tracking_allocator()
        with caplog.at_level("WARNING", logger="camel.allocator"):
            alloc.release(bytearray(3))
        assert alloc.context.foreign_frees == 1
        assert "not owned" in caplog.text


class TestConfig:
    """Test the configuration singleton."""

    def test_defaults(self):
        config = get_config()
        assert config.default_allocator is heap_allocator()
        assert config.bigint_capacity == 2
        assert config.print_precision == 6
        assert config.use_blas is False

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("CAMEL_BIGINT_CAPACITY", "8")
        monkeypatch.setenv("CAMEL_USE_BLAS", "yes")
        monkeypatch.setenv("CAMEL_BLAS_LIBRARY", "/opt/libcblas.so")
        config = reset_config()
        assert config.bigint_capacity == 8
        assert config.use_blas is True
        assert config.blas_library == "/opt/libcblas.so"

    def test_capacity_floor(self, monkeypatch):
        monkeypatch.setenv("CAMEL_BIGINT_CAPACITY", "0")
        assert reset_config().bigint_capacity == 2
        get_config().bigint_capacity = 1
        assert get_config().bigint_capacity == 2

    def test_set_default_allocator(self):
        alloc = tracking_allocator()
        set_default_allocator(alloc)
        assert get_config().default_allocator is alloc
        with pytest.raises(TypeError):
            get_config().default_allocator = "heap"

    def test_print_precision_validation(self):
        with pytest.raises(ValueError):
            get_config().print_precision = -1

    def test_allocator_is_value(self):
        """Allocators are frozen values."""
        alloc = heap_allocator()
        assert isinstance(alloc, Allocator)
        with pytest.raises(Exception):
            alloc.context = 1
