"""
Destination adapters — write fetched CA assets to files and to an env export file.

Adapter layer — implements the DestinationAdapter port once per destination scheme:

  FileDestination  truncate the target file, then append each source's bytes
                   in declared order (the file is their exact concatenation)
  EnvDestination   concatenate all sources in memory, then append a single
                   `export 'NAME'='VALUE'` line to the job's shared EnvFile

Known limitation: when a source fails halfway through a FileDestination chain,
the bytes already appended stay on disk. The failure is still returned.
"""

from __future__ import annotations

import asyncio
import sys
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO

import structlog

from cannect.domain.locator import EnvLocator, FileLocator
from cannect.domain.ports import SourceAdapter, UriLogger
from cannect.railway import ErrorCode, Result

log = structlog.get_logger()


def line_ending() -> str:
    return "\r\n" if sys.platform == "win32" else "\n"


def export_line(name: str, content: bytes) -> str:
    """Render one env-file line, e.g. `export 'MY_VAR'='hello'` + EOL."""
    return f"export '{name}'='{content.decode('utf-8', errors='replace')}'{line_ending()}"


class EnvFile:
    """
    The env-scheme output file of one job run.

    Opened lazily (and truncated) by the first append, exactly once, then kept
    open until close(). Appends are serialized by an asyncio.Lock so two
    destinations' lines never interleave. Owned by the coordinator run that
    created it; never reused across runs.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._lock = asyncio.Lock()
        self._handle: IO[str] | None = None

    @property
    def path(self) -> Path:
        return self._path

    async def append_line(self, line: str) -> Result[int]:
        async with self._lock:
            try:
                if self._handle is None:
                    self._handle = await asyncio.to_thread(self._open)
                    log.debug("env_file.opened", path=str(self._path))
                await asyncio.to_thread(self._write, self._handle, line)
            except OSError as e:
                return Result.failure(
                    ErrorCode.DELIVERY_ERROR,
                    f"cannot write env output {self._path}: {e}",
                    subject=str(self._path),
                    exception=e,
                )
        return Result.success(len(line))

    def _open(self) -> IO[str]:
        # newline="" keeps the platform line ending exactly as rendered
        return self._path.open("w", encoding="utf-8", newline="")

    @staticmethod
    def _write(handle: IO[str], line: str) -> None:
        handle.write(line)
        handle.flush()

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None


@dataclass(frozen=True, slots=True)
class FileDestination:
    """
    Write the concatenated sources to a local file.

    Implements the DestinationAdapter port.
    """

    locator: FileLocator
    logger: UriLogger | None = field(default=None, compare=False)

    async def deliver(self, sources: Sequence[SourceAdapter]) -> Result[int]:
        if self.logger is not None:
            self.logger.log(self.locator.text)
        try:
            handle = await asyncio.to_thread(Path(self.locator.path).open, "wb")
        except OSError as e:
            return self._delivery_failure(f"cannot create destination: {e}", e)

        written = 0
        try:
            for source in sources:
                fetched = await source.fetch()
                if fetched.is_failure():
                    return fetched.map(len)
                chunk = fetched.value()
                try:
                    await asyncio.to_thread(handle.write, chunk)
                except OSError as e:
                    return self._delivery_failure(f"write failed: {e}", e)
                written += len(chunk)
        finally:
            handle.close()
        return Result.success(written)

    def _delivery_failure(self, reason: str, exception: BaseException) -> Result[int]:
        return Result.failure(
            ErrorCode.DELIVERY_ERROR,
            f"delivery failed at {self.locator.text}: {reason}",
            subject=self.locator.text,
            exception=exception,
        )


@dataclass(frozen=True, slots=True)
class EnvDestination:
    """
    Export the concatenated sources as a shell variable line.

    Implements the DestinationAdapter port.
    """

    locator: EnvLocator
    env_file: EnvFile = field(compare=False)
    logger: UriLogger | None = field(default=None, compare=False)

    async def deliver(self, sources: Sequence[SourceAdapter]) -> Result[int]:
        if self.logger is not None:
            self.logger.log(self.locator.text)
        buffer = bytearray()
        for source in sources:
            fetched = await source.fetch()
            if fetched.is_failure():
                return fetched.map(len)
            buffer.extend(fetched.value())

        content = bytes(buffer)
        appended = await self.env_file.append_line(export_line(self.locator.path, content))
        return appended.map(lambda _: len(content))
