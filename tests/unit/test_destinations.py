"""
Unit tests for destination adapters — file output and env export lines.

Sources are fake SourceAdapters returning fixed Results, so these tests
exercise only the write side: ordering, concatenation, truncation, the
shared env file, and failure propagation.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from cannect.adapters.destinations import (
    EnvDestination,
    EnvFile,
    FileDestination,
    export_line,
    line_ending,
)
from cannect.domain.locator import EnvLocator, FileLocator
from cannect.railway import ErrorCode, Result, ResultAssertions


@dataclass
class FakeSource:
    """Returns a fixed Result and records that it was fetched."""

    result: Result[bytes]
    calls: list[str] = field(default_factory=list)
    name: str = "fake"

    async def fetch(self) -> Result[bytes]:
        self.calls.append(self.name)
        await asyncio.sleep(0)
        return self.result


def _ok(data: bytes, name: str = "fake") -> FakeSource:
    return FakeSource(Result.success(data), name=name)


def _failing(code: ErrorCode = ErrorCode.FETCH_ERROR) -> FakeSource:
    return FakeSource(Result.failure(code, "boom", subject="file://certs/x"))


class TestFileDestination:
    @pytest.mark.asyncio
    async def test_output_is_exact_concatenation_in_order(self, workdir: Path) -> None:
        """
        GIVEN sources A, B, A
        WHEN delivered to file://out/chain.crt
        THEN the file holds A + B + A with no separator.
        """
        destination = FileDestination(FileLocator("file://out/chain.crt"))
        result = await destination.deliver([_ok(b"AAA"), _ok(b"BB"), _ok(b"AAA")])

        assert ResultAssertions.assert_success(result) == 8
        assert (workdir / "out" / "chain.crt").read_bytes() == b"AAABBAAA"

    @pytest.mark.asyncio
    async def test_existing_content_is_truncated(self, workdir: Path) -> None:
        target = workdir / "out" / "leaf.crt"
        target.write_bytes(b"old content that is longer")
        destination = FileDestination(FileLocator("file://out/leaf.crt"))
        await destination.deliver([_ok(b"new")])
        assert target.read_bytes() == b"new"

    @pytest.mark.asyncio
    async def test_source_failure_aborts_and_is_returned(self, workdir: Path) -> None:
        """
        GIVEN the second of three sources fails
        WHEN delivered
        THEN its failure is returned, the third source is never fetched,
             and the bytes already written remain (not cleaned up).
        """
        third = _ok(b"CCC", name="third")
        destination = FileDestination(FileLocator("file://out/partial.crt"))
        result = await destination.deliver([_ok(b"AAA"), _failing(), third])

        ResultAssertions.assert_failure(result, ErrorCode.FETCH_ERROR)
        assert third.calls == []
        assert (workdir / "out" / "partial.crt").read_bytes() == b"AAA"

    @pytest.mark.asyncio
    async def test_missing_directory_is_delivery_error(self, workdir: Path) -> None:
        destination = FileDestination(FileLocator("file://no-such-dir/leaf.crt"))
        result = await destination.deliver([_ok(b"AAA")])
        error = ResultAssertions.assert_failure(result, ErrorCode.DELIVERY_ERROR)
        assert error.subject == "file://no-such-dir/leaf.crt"

    @pytest.mark.asyncio
    async def test_logger_notified_with_destination(self, workdir: Path) -> None:
        logger = MagicMock()
        destination = FileDestination(FileLocator("file://out/leaf.crt"), logger)
        await destination.deliver([_ok(b"A")])
        logger.log.assert_called_once_with("file://out/leaf.crt")


class TestEnvDestination:
    @pytest.mark.asyncio
    async def test_writes_single_export_line(self, tmp_path: Path) -> None:
        """
        GIVEN env://MY_VAR and a single source returning b"hello"
        WHEN delivered
        THEN the env file holds exactly `export 'MY_VAR'='hello'` + EOL.
        """
        env_file = EnvFile(tmp_path / "cannect.env")
        destination = EnvDestination(EnvLocator("env://MY_VAR"), env_file)
        result = await destination.deliver([_ok(b"hello")])
        env_file.close()

        assert ResultAssertions.assert_success(result) == 5
        expected = f"export 'MY_VAR'='hello'{line_ending()}".encode()
        assert (tmp_path / "cannect.env").read_bytes() == expected

    @pytest.mark.asyncio
    async def test_sources_concatenated_without_separator(self, tmp_path: Path) -> None:
        env_file = EnvFile(tmp_path / "cannect.env")
        destination = EnvDestination(EnvLocator("env://CHAIN"), env_file)
        await destination.deliver([_ok(b"-A-\n"), _ok(b"-B-\n")])
        env_file.close()

        text = (tmp_path / "cannect.env").read_bytes().decode()
        assert text == f"export 'CHAIN'='-A-\n-B-\n'{line_ending()}"

    @pytest.mark.asyncio
    async def test_failure_writes_nothing(self, tmp_path: Path) -> None:
        env_file = EnvFile(tmp_path / "cannect.env")
        destination = EnvDestination(EnvLocator("env://BROKEN"), env_file)
        result = await destination.deliver([_ok(b"A"), _failing(ErrorCode.CONTENT_MISMATCH)])
        env_file.close()

        ResultAssertions.assert_failure(result, ErrorCode.CONTENT_MISMATCH)
        assert not (tmp_path / "cannect.env").exists()


class TestEnvFile:
    @pytest.mark.asyncio
    async def test_opened_once_and_shared(self, tmp_path: Path) -> None:
        """
        GIVEN three env destinations sharing one EnvFile
        WHEN delivered concurrently
        THEN the file holds all three whole lines; a second open would have
             truncated the earlier ones.
        """
        env_file = EnvFile(tmp_path / "cannect.env")
        destinations = [
            EnvDestination(EnvLocator(f"env://VAR_{i}"), env_file) for i in range(3)
        ]
        await asyncio.gather(*(d.deliver([_ok(b"value" * 50)]) for d in destinations))
        env_file.close()

        lines = (tmp_path / "cannect.env").read_bytes().decode().splitlines()
        assert sorted(lines) == sorted(
            f"export 'VAR_{i}'='{'value' * 50}'" for i in range(3)
        )

    @pytest.mark.asyncio
    async def test_first_open_truncates_previous_output(self, tmp_path: Path) -> None:
        path = tmp_path / "cannect.env"
        path.write_text("export 'STALE'='x'\n")
        env_file = EnvFile(path)
        await env_file.append_line(export_line("FRESH", b"y"))
        env_file.close()
        assert path.read_bytes() == f"export 'FRESH'='y'{line_ending()}".encode()

    @pytest.mark.asyncio
    async def test_unwritable_path_is_delivery_error(self, tmp_path: Path) -> None:
        env_file = EnvFile(tmp_path / "missing-dir" / "cannect.env")
        result = await env_file.append_line(export_line("X", b"y"))
        ResultAssertions.assert_failure(result, ErrorCode.DELIVERY_ERROR)

    def test_close_without_open_is_harmless(self, tmp_path: Path) -> None:
        EnvFile(tmp_path / "never.env").close()


class TestLineEnding:
    def test_posix_uses_lf(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("cannect.adapters.destinations.sys.platform", "linux")
        assert export_line("A", b"b") == "export 'A'='b'\n"

    def test_windows_uses_crlf(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("cannect.adapters.destinations.sys.platform", "win32")
        assert export_line("A", b"b") == "export 'A'='b'\r\n"
