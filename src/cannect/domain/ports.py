"""
Ports — Protocol-based interfaces between the delivery core and its adapters.

  Domain ← Ports (protocols) ← Adapters (file / GitHub / S3 / env implementations)

Each port is a Protocol (structural typing): adapters satisfy the contract by
implementing the methods, no inheritance required. Test doubles do the same.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from cannect.railway import Result


@runtime_checkable
class UriLogger(Protocol):
    """
    Port: observe which locator is about to be fetched or delivered.

    Called with the locator text before every fetch and every delivery.
    Side effect only; it never influences control flow.
    """

    def log(self, uri_text: str) -> None: ...


@runtime_checkable
class ContentChecker(Protocol):
    """
    Port: accept or reject fetched bytes for one asset category.

    Returns the same bytes on success, CONTENT_MISMATCH on rejection.
    """

    def check_content(self, content: bytes) -> Result[bytes]: ...


@runtime_checkable
class SourceAdapter(Protocol):
    """
    Port: fetch the raw bytes of one catalog entry and validate them.

    Implementations: FileSource, GitHubSource, S3Source.
    """

    async def fetch(self) -> Result[bytes]: ...


@runtime_checkable
class DestinationAdapter(Protocol):
    """
    Port: fetch every source in order and write the result to one destination.

    Returns Result[int] with the number of content bytes delivered.
    Implementations: FileDestination, EnvDestination.
    """

    async def deliver(self, sources: Sequence[SourceAdapter]) -> Result[int]: ...
