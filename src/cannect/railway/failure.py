"""
Failure description — structured error information for the failure track.

Every predictable failure in cannect (a bad URI, a PEM file wired to the wrong
category, a GitHub 404, an unwritable destination) travels as a
FailureDescription inside a Result instead of an exception.

Each description carries:
  - code     — which part of the error taxonomy it belongs to
  - message  — human-readable explanation
  - subject  — what the failure is about (locator text, alias, category)
  - exception — the underlying library exception, when there is one
"""

from __future__ import annotations

import traceback
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum, unique


@unique
class ErrorCode(Enum):
    """
    Error taxonomy for asset delivery.

    Resolution-time codes (fatal before anything is fetched):
      INVALID_LOCATOR, UNSUPPORTED_SCHEME, UNDEFINED_CATEGORY,
      UNDEFINED_ALIAS, DUPLICATE_ALIAS, DUPLICATE_DESTINATION
    Execution-time codes (fatal to one destination, then to the job):
      CONTENT_MISMATCH, FETCH_ERROR, DELIVERY_ERROR, TIMEOUT_ERROR
    """

    INVALID_LOCATOR = "INVALID_LOCATOR"
    """URI text does not match its scheme's grammar."""

    UNSUPPORTED_SCHEME = "UNSUPPORTED_SCHEME"
    """Scheme is not allowed for this role (source or destination)."""

    UNDEFINED_CATEGORY = "UNDEFINED_CATEGORY"
    """Catalog category is not one of the known asset categories."""

    UNDEFINED_ALIAS = "UNDEFINED_ALIAS"
    """Order references an alias no catalog declares."""

    DUPLICATE_ALIAS = "DUPLICATE_ALIAS"
    """Two catalogs declare the same alias."""

    DUPLICATE_DESTINATION = "DUPLICATE_DESTINATION"
    """Two orders target the same destination URI."""

    CONTENT_MISMATCH = "CONTENT_MISMATCH"
    """Fetched bytes do not look like the declared asset category."""

    FETCH_ERROR = "FETCH_ERROR"
    """Reading from a source backend failed."""

    DELIVERY_ERROR = "DELIVERY_ERROR"
    """Writing to a destination backend failed."""

    TIMEOUT_ERROR = "TIMEOUT_ERROR"
    """The job deadline elapsed."""

    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    """Settings or job document are unusable."""


@dataclass(frozen=True, slots=True)
class FailureDescription:
    """
    Immutable failure descriptor.

    >>> desc = FailureDescription(ErrorCode.UNDEFINED_ALIAS, "undefined alias", subject="ghost")
    >>> desc.subject
    'ghost'
    """

    code: ErrorCode
    message: str
    subject: str | None = None
    exception: BaseException | None = field(default=None, repr=False)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def annotate(self, subject: str) -> FailureDescription:
        """Return a copy attributed to `subject`, prefixing it to the message."""
        return FailureDescription(
            code=self.code,
            message=f"{subject}: {self.message}",
            subject=subject,
            exception=self.exception,
        )

    def full_stack_trace(self) -> str:
        """Message followed by the formatted exception chain, if any."""
        if self.exception is None:
            return self.message
        tb = "".join(
            traceback.format_exception(
                type(self.exception), self.exception, self.exception.__traceback__
            )
        )
        return f"{self.message}\n{tb}"

    def __str__(self) -> str:
        if self.exception is None:
            return f"{self.code.value}: {self.message}"
        return f"{self.code.value}: {self.message} ({self.exception})"
