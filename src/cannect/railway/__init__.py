"""
Railway-Oriented Programming primitives used across cannect.

    from cannect.railway import ErrorCode, Result

    def require_alias(alias: str, known: set[str]) -> Result[str]:
        if alias not in known:
            return Result.failure(ErrorCode.UNDEFINED_ALIAS, "undefined alias", subject=alias)
        return Result.success(alias)
"""

from cannect.railway.assertions import ResultAssertions
from cannect.railway.failure import ErrorCode, FailureDescription
from cannect.railway.result import Failure, Result, Success

__all__ = [
    "Result",
    "Success",
    "Failure",
    "ErrorCode",
    "FailureDescription",
    "ResultAssertions",
]
