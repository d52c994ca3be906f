"""Tests for tracespine.core.result: Ok/Err and collection helpers."""

from __future__ import annotations

import pytest

from tracespine.core.errors import LoadError, SchemaError
from tracespine.core.result import Err, Ok, collect_all_errors, try_result


class TestOkErr:
    def test_ok_unwrap(self):
        assert Ok(3).unwrap() == 3

    def test_ok_map(self):
        assert Ok(3).map(lambda x: x * 2) == Ok(6)

    def test_err_unwrap_raises(self):
        with pytest.raises(ValueError, match="boom"):
            Err(ValueError("boom")).unwrap()

    def test_err_map_passes_through(self):
        result = Err(ValueError("boom"))
        assert result.map(lambda x: x * 2) is result

    def test_pattern_matching(self):
        match Err(SchemaError("bad")):
            case Ok(_):
                pytest.fail("expected Err")
            case Err(error):
                assert str(error) == "bad"


class TestTryResult:
    def test_ok(self):
        assert try_result(lambda: 1) == Ok(1)

    def test_caught(self):
        result = try_result(lambda: int("x"), ValueError)
        assert isinstance(result, Err)
        assert isinstance(result.error, ValueError)

    def test_uncaught_propagates(self):
        def boom():
            raise KeyError("k")

        with pytest.raises(KeyError):
            try_result(boom, LoadError)


class TestCollectAllErrors:
    def test_all_ok(self):
        assert collect_all_errors([Ok(1), Ok(2)]) == Ok([1, 2])

    def test_empty(self):
        assert collect_all_errors([]) == Ok([])

    def test_single_error_returned_as_is(self):
        error = SchemaError("bad")
        result = collect_all_errors([Ok(1), Err(error)])
        assert result.error is error

    def test_multiple_errors_folded(self):
        result = collect_all_errors([Err(ValueError(str(i))) for i in range(5)])
        error = result.error
        assert isinstance(error, LoadError)
        assert str(error) == "Multiple errors (5): 0; 1; 2..."
        assert error.context.metadata["error_count"] == 5
        assert error.context.metadata["errors"] == ["0", "1", "2", "3", "4"]
