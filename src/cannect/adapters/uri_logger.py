"""
UriLogger adapter backed by structlog.

The delivery core only ever calls `log(uri_text)`; this adapter decides how
that looks in the process log.
"""

from __future__ import annotations

import structlog


class StructlogUriLogger:
    """
    Emit one structlog event per fetched or delivered locator.

    Implements the UriLogger port.

        StructlogUriLogger("source.fetching").log("file://certs/root-ca.crt")
        # → event="source.fetching" uri="file://certs/root-ca.crt"
    """

    def __init__(self, event: str) -> None:
        self._event = event
        self._log = structlog.get_logger()

    def log(self, uri_text: str) -> None:
        self._log.info(self._event, uri=uri_text)
