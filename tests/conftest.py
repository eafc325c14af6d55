"""
Shared test fixtures and helpers for the cannect test suite.

Provides the PEM fixture files (certificates, keys, CRL) and a working
directory containing a copy of them. File locators carry relative paths
(`file://certs/root-ca.crt`), so tests that touch the filesystem chdir into
that working directory.
"""

from __future__ import annotations

import shutil
from pathlib import Path

import pytest

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def fixture_bytes(filename: str) -> bytes:
    """
    Read a fixture file.

    Raises FileNotFoundError if the fixture does not exist.
    """
    path = FIXTURES_DIR / filename
    if not path.exists():
        raise FileNotFoundError(f"Test fixture not found: {path}")
    return path.read_bytes()


@pytest.fixture()
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """
    A scratch working directory with the fixtures copied under `certs/`.

    The process cwd is switched to it for the duration of the test, and an
    empty `out/` directory is available for destinations.
    """
    shutil.copytree(FIXTURES_DIR, tmp_path / "certs")
    (tmp_path / "out").mkdir()
    monkeypatch.chdir(tmp_path)
    return tmp_path
