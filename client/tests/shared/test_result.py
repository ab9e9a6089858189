"""Tests for shared/result.py."""

import dataclasses

import pytest

from shared.result import Failure, Success


class TestResult:
    def test_success_is_ok(self):
        """Success should report ok."""
        result = Success(value=42)

        assert result.ok is True
        assert result.value == 42

    def test_failure_is_not_ok(self):
        """Failure should report not ok."""
        result = Failure(error="boom")

        assert result.ok is False
        assert result.error == "boom"

    def test_results_are_frozen(self):
        """Result values should be immutable."""
        result = Success(value=1)

        with pytest.raises(dataclasses.FrozenInstanceError):
            result.value = 2

    def test_keyword_only(self):
        """Result types should require keyword arguments."""
        with pytest.raises(TypeError):
            Success(1)

    def test_pattern_matching(self):
        """Results should support structural pattern matching."""

        def describe(result):
            match result:
                case Success(value=value):
                    return f"ok:{value}"
                case Failure(error=error):
                    return f"err:{error}"

        assert describe(Success(value="a")) == "ok:a"
        assert describe(Failure(error="b")) == "err:b"
