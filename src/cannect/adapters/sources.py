"""
Source adapters — fetch CA asset bytes from the local filesystem, GitHub and S3.

Adapter layer — implements the SourceAdapter port once per source scheme:

  FileSource    read the whole file at the locator path
  GitHubSource  GitHub "get repository content" API via httpx, base64 body
  S3Source      boto3 GetObject, body fully drained

Every fetch:
  1. tells the injected UriLogger which locator is being fetched
  2. retrieves the bytes (backend errors → FETCH_ERROR)
  3. runs the bound ContentChecker (mismatch → CONTENT_MISMATCH, annotated
     with the locator text)

Blocking calls (file reads, boto3) run in a worker thread so a cancelled job
never waits on them. No retries: a transient failure fails the destination.
"""

from __future__ import annotations

import asyncio
import base64
import os
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import boto3
import httpx
import structlog
from botocore.exceptions import BotoCoreError, ClientError

from cannect.domain.locator import FileLocator, GitHubLocator, S3Locator
from cannect.domain.ports import ContentChecker, UriLogger
from cannect.railway import ErrorCode, FailureDescription, Result

log = structlog.get_logger()

GITHUB_API_URL = "https://api.github.com"
GITHUB_TOKEN_ENV = "GITHUB_TOKEN"


def _annotate(subject: str) -> Callable[[FailureDescription], FailureDescription]:
    def _with_subject(err: FailureDescription) -> FailureDescription:
        if err.code is ErrorCode.CONTENT_MISMATCH:
            return err.annotate(subject)
        return err

    return _with_subject


@dataclass(frozen=True, slots=True)
class FileSource:
    """
    Read an asset from the local filesystem.

    Implements the SourceAdapter port.
    """

    locator: FileLocator
    checker: ContentChecker
    logger: UriLogger | None = field(default=None, compare=False)

    async def fetch(self) -> Result[bytes]:
        if self.logger is not None:
            self.logger.log(self.locator.text)
        try:
            content = await asyncio.to_thread(Path(self.locator.path).read_bytes)
        except OSError as e:
            return Result.failure(
                ErrorCode.FETCH_ERROR,
                f"fetch failed at {self.locator.text}: {e}",
                subject=self.locator.text,
                exception=e,
            )
        return self.checker.check_content(content).map_failure(_annotate(self.locator.text))


@dataclass(frozen=True, slots=True)
class GitHubSource:
    """
    Fetch an asset through the GitHub "get repository content" API.

    Implements the SourceAdapter port.
    The token is read from GITHUB_TOKEN at fetch time; when it is missing the
    request goes out unauthenticated and GitHub's refusal is a fetch failure.
    """

    locator: GitHubLocator
    checker: ContentChecker
    logger: UriLogger | None = field(default=None, compare=False)
    api_url: str = GITHUB_API_URL
    timeout: int = 60

    async def fetch(self) -> Result[bytes]:
        if self.logger is not None:
            self.logger.log(self.locator.text)
        try:
            payload = await self._get_contents()
        except (httpx.HTTPError, ValueError) as e:
            return self._fetch_failure(f"GitHub request failed: {e}", e)

        if not isinstance(payload, dict) or payload.get("type") != "file":
            kind = payload.get("type") if isinstance(payload, dict) else "directory"
            return self._fetch_failure(f"only file content is supported, got {kind!r}")

        # binascii.Error (a ValueError) on bad padding or non-ASCII text, TypeError on a non-string
        try:
            content = base64.b64decode(payload.get("content", ""), validate=False)
        except (ValueError, TypeError) as e:
            return self._fetch_failure(f"content is not valid base64: {e}", e)

        log.debug("github.fetched", uri=self.locator.text, size_bytes=len(content))
        return self.checker.check_content(content).map_failure(_annotate(self.locator.text))

    async def _get_contents(self) -> Any:
        """Single GET; raises httpx errors or ValueError on a non-JSON body."""
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        token = os.environ.get(GITHUB_TOKEN_ENV)
        if token:
            headers["Authorization"] = f"Bearer {token}"
        params = {"ref": self.locator.ref} if self.locator.ref is not None else None
        url = (
            f"{self.api_url.rstrip('/')}/repos/{self.locator.owner}/{self.locator.repo}"
            f"/contents/{self.locator.repo_path}"
        )
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.get(url, headers=headers, params=params)
            response.raise_for_status()
            return response.json()

    def _fetch_failure(self, reason: str, exception: BaseException | None = None) -> Result[bytes]:
        return Result.failure(
            ErrorCode.FETCH_ERROR,
            f"fetch failed at {self.locator.text}: {reason}",
            subject=self.locator.text,
            exception=exception,
        )


@dataclass(frozen=True, slots=True)
class S3Source:
    """
    Fetch an asset with the S3 GetObject API.

    Implements the SourceAdapter port.
    Credentials and region come from the ambient boto3 configuration
    (AWS_ACCESS_KEY_ID, AWS_SECRET_ACCESS_KEY, AWS_DEFAULT_REGION, profiles).
    `client_factory` exists so tests can inject a stubbed client.
    """

    locator: S3Locator
    checker: ContentChecker
    logger: UriLogger | None = field(default=None, compare=False)
    client_factory: Any = field(default=None, compare=False)

    async def fetch(self) -> Result[bytes]:
        if self.logger is not None:
            self.logger.log(self.locator.text)
        try:
            content = await asyncio.to_thread(self._get_object)
        except (BotoCoreError, ClientError) as e:
            return Result.failure(
                ErrorCode.FETCH_ERROR,
                f"fetch failed at {self.locator.text}: {e}",
                subject=self.locator.text,
                exception=e,
            )
        return self.checker.check_content(content).map_failure(_annotate(self.locator.text))

    def _get_object(self) -> bytes:
        client = self.client_factory() if self.client_factory else boto3.client("s3")
        output = client.get_object(Bucket=self.locator.bucket, Key=self.locator.key)
        body = output["Body"]
        try:
            data: bytes = body.read()
        finally:
            body.close()
        log.debug("s3.fetched", uri=self.locator.text, size_bytes=len(data))
        return data
