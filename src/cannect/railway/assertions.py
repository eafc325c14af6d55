"""
Test assertions for Result values.

    def test_undefined_alias():
        result = resolve(catalogs, orders)
        error = ResultAssertions.assert_failure(result, ErrorCode.UNDEFINED_ALIAS)
        assert error.subject == "ghost"
"""

from __future__ import annotations

from typing import TypeVar

from cannect.railway.failure import ErrorCode, FailureDescription
from cannect.railway.result import Result

T = TypeVar("T")


class ResultAssertions:
    """Expressive test assertions for Result values."""

    @staticmethod
    def assert_success(result: Result[T], message: str = "") -> T:
        """Assert the Result is a Success and return the value."""
        context = f" — {message}" if message else ""
        assert result.is_success(), (
            f"Expected Success but got Failure("
            f"{result.error().code.value}: {result.error().message!r}){context}"
        )
        return result.value()

    @staticmethod
    def assert_failure(
        result: Result[T],
        expected_code: ErrorCode | None = None,
        message: str = "",
    ) -> FailureDescription:
        """Assert the Result is a Failure, optionally checking the error code."""
        context = f" — {message}" if message else ""
        assert result.is_failure(), (
            f"Expected Failure but got Success({result.value()!r}){context}"
        )
        error = result.error()
        if expected_code is not None:
            assert error.code == expected_code, (
                f"Expected error code {expected_code.value} "
                f"but got {error.code.value}: {error.message!r}{context}"
            )
        return error

    @staticmethod
    def assert_failure_message_contains(result: Result[T], substring: str) -> None:
        """Assert that the failure message contains the given substring."""
        error = ResultAssertions.assert_failure(result)
        assert substring.lower() in error.message.lower(), (
            f"Expected failure message to contain {substring!r} "
            f"but message was: {error.message!r}"
        )

    @staticmethod
    def assert_failure_subject(result: Result[T], expected_subject: str) -> None:
        """Assert that the failure is attributed to the given subject."""
        error = ResultAssertions.assert_failure(result)
        assert error.subject == expected_subject, (
            f"Expected failure subject {expected_subject!r} but got {error.subject!r}"
        )
