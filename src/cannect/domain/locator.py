"""
Locators — validated, scheme-typed identifiers for asset sources and destinations.

Four schemes, each with a fixed grammar:

  file://path/to/file.pem            path = "path/to/file.pem" (leading "/" optional, not kept)
  env://VAR_NAME                     path = "VAR_NAME"
  github:///repos/{owner}/{repo}/contents/{path}[?ref={ref}]
                                     path = "/repos/.../contents/...[?ref=...]"
  s3://{bucket}/{key...}             path = "{bucket}/{key...}"

A locator is built from its text only: every other field is derived by one
strict parse in __post_init__, so a partially-built or scheme-mismatched
instance cannot exist. Callers normally go through parse_locator(), which
returns a Result instead of raising.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, TypeAlias

from cannect.railway import ErrorCode, Result


class Scheme(Enum):
    FILE = "file"
    ENV = "env"
    GITHUB = "github"
    S3 = "s3"


class InvalidLocatorError(ValueError):
    """Raised when locator text does not match its scheme's grammar."""

    def __init__(self, scheme: Scheme, text: str) -> None:
        super().__init__(f"could not match {scheme.value} URI pattern with {text}")
        self.scheme = scheme
        self.text = text


_WORD = "[-_a-zA-Z0-9.]"

_FILE_PATTERN = re.compile(r"^(file):///?((?:[-_a-zA-Z0-9]+)(?:/[-_a-zA-Z0-9.]+)*)$")
_ENV_PATTERN = re.compile(r"^(env)://([_a-zA-Z0-9]+)$")
_GITHUB_PATTERN = re.compile(
    rf"^(github)://(/repos/({_WORD}+)/({_WORD}+)/contents/({_WORD}+(?:/{_WORD}+)*)"
    rf"(?:\?ref=({_WORD}+))?)$"
)
_S3_PATTERN = re.compile(r"^(s3)://(([-_a-zA-Z0-9.]+)/(.+))$")


def _match(pattern: re.Pattern[str], scheme: Scheme, text: str) -> re.Match[str]:
    # fullmatch so a trailing newline never slips past "$"
    matched = pattern.fullmatch(text)
    if matched is None:
        raise InvalidLocatorError(scheme, text)
    return matched


@dataclass(frozen=True, slots=True)
class FileLocator:
    """A file on the local filesystem."""

    scheme: ClassVar[Scheme] = Scheme.FILE

    text: str
    path: str = field(init=False)

    def __post_init__(self) -> None:
        matched = _match(_FILE_PATTERN, self.scheme, self.text)
        object.__setattr__(self, "path", matched.group(2))


@dataclass(frozen=True, slots=True)
class EnvLocator:
    """An environment variable name, exported through the env output file."""

    scheme: ClassVar[Scheme] = Scheme.ENV

    text: str
    path: str = field(init=False)

    def __post_init__(self) -> None:
        matched = _match(_ENV_PATTERN, self.scheme, self.text)
        object.__setattr__(self, "path", matched.group(2))


@dataclass(frozen=True, slots=True)
class GitHubLocator:
    """
    A file served by the GitHub "get repository content" API.

    `ref` is None when the text carries no `?ref=` query; it is never an
    empty string.
    """

    scheme: ClassVar[Scheme] = Scheme.GITHUB

    text: str
    path: str = field(init=False)
    owner: str = field(init=False)
    repo: str = field(init=False)
    repo_path: str = field(init=False)
    ref: str | None = field(init=False)

    def __post_init__(self) -> None:
        matched = _match(_GITHUB_PATTERN, self.scheme, self.text)
        object.__setattr__(self, "path", matched.group(2))
        object.__setattr__(self, "owner", matched.group(3))
        object.__setattr__(self, "repo", matched.group(4))
        object.__setattr__(self, "repo_path", matched.group(5))
        object.__setattr__(self, "ref", matched.group(6))


@dataclass(frozen=True, slots=True)
class S3Locator:
    """An object in an S3 bucket. The key may contain further "/" separators."""

    scheme: ClassVar[Scheme] = Scheme.S3

    text: str
    path: str = field(init=False)
    bucket: str = field(init=False)
    key: str = field(init=False)

    def __post_init__(self) -> None:
        matched = _match(_S3_PATTERN, self.scheme, self.text)
        object.__setattr__(self, "path", matched.group(2))
        object.__setattr__(self, "bucket", matched.group(3))
        object.__setattr__(self, "key", matched.group(4))


Locator: TypeAlias = FileLocator | EnvLocator | GitHubLocator | S3Locator
SourceLocator: TypeAlias = FileLocator | GitHubLocator | S3Locator
DestinationLocator: TypeAlias = FileLocator | EnvLocator

_LOCATOR_TYPES: dict[Scheme, type[FileLocator | EnvLocator | GitHubLocator | S3Locator]] = {
    Scheme.FILE: FileLocator,
    Scheme.ENV: EnvLocator,
    Scheme.GITHUB: GitHubLocator,
    Scheme.S3: S3Locator,
}

SOURCE_SCHEMES = frozenset({Scheme.FILE, Scheme.GITHUB, Scheme.S3})
DESTINATION_SCHEMES = frozenset({Scheme.FILE, Scheme.ENV})

_SCHEME_PREFIX = re.compile(r"^([a-z0-9]+)://")


def parse_locator(scheme: Scheme, text: str) -> Result[Locator]:
    """
    Parse `text` with the grammar of `scheme`.

    Returns Result.failure(INVALID_LOCATOR) with the original text as subject
    when the text does not fully match; no locator is constructed in that case.
    """
    try:
        return Result.success(_LOCATOR_TYPES[scheme](text))
    except InvalidLocatorError as e:
        return Result.failure(ErrorCode.INVALID_LOCATOR, str(e), subject=text, exception=e)


def _parse_for_role(text: str, allowed: frozenset[Scheme], role: str) -> Result[Locator]:
    prefix = _SCHEME_PREFIX.match(text)
    scheme = next((s for s in allowed if prefix and prefix.group(1) == s.value), None)
    if scheme is None:
        found = prefix.group(1) if prefix else "<none>"
        accepted = ", ".join(sorted(s.value for s in allowed))
        return Result.failure(
            ErrorCode.UNSUPPORTED_SCHEME,
            f"undefined {role} scheme {found!r} in {text} (accepted: {accepted})",
            subject=text,
        )
    return parse_locator(scheme, text)


def parse_source_locator(text: str) -> Result[Locator]:
    """Parse a catalog URI; only file, github and s3 are valid sources."""
    return _parse_for_role(text, SOURCE_SCHEMES, "source")


def parse_destination_locator(text: str) -> Result[Locator]:
    """Parse an order URI; only file and env are valid destinations."""
    return _parse_for_role(text, DESTINATION_SCHEMES, "destination")
