"""
Execution coordinator — delivers every resolved order concurrently.

One asyncio task per destination inside a TaskGroup, each admitted by a
counting semaphore (capacity = concurrency limit):

  acquire admission → build destination adapter → deliver(sources) → release

An exception escaping a destination adapter is turned into a DELIVERY_ERROR
failure, so execute() always returns a Result.

The first destination that fails records its FailureDescription and raises,
which makes the TaskGroup cancel every sibling (in flight or still waiting
for admission). The coordinator waits for all of them to unwind and returns
that first failure. A caller-side cancellation or deadline propagates the
same way.

The env output file belongs to a single run: created here, opened lazily by
the first env destination, closed when the run ends.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import assert_never

import structlog

from cannect.adapters.destinations import EnvDestination, EnvFile, FileDestination
from cannect.domain.locator import EnvLocator, FileLocator
from cannect.domain.models import ResolvedOrder
from cannect.domain.ports import DestinationAdapter, UriLogger
from cannect.railway import ErrorCode, FailureDescription, Result
from cannect.resolver import CatalogDeclaration, OrderDeclaration, SourceFactory, resolve

log = structlog.get_logger()


class _DestinationFailed(Exception):
    """Raised inside a task to make the TaskGroup cancel its siblings."""


@dataclass(slots=True)
class _RunState:
    first_failure: FailureDescription | None = None
    delivered_bytes: int = 0
    completed: list[str] = field(default_factory=list)

    def record_delivery(self, uri: str, size: int) -> None:
        self.delivered_bytes += size
        self.completed.append(uri)

    def record_failure(self, uri: str, error: FailureDescription) -> None:
        """Keep the first failure only; every failure is logged."""
        if self.first_failure is None:
            self.first_failure = error
        log.warning(
            "destination.failed",
            uri=uri,
            code=error.code.value,
            error=error.message,
            exc_info=error.exception,
        )


def _destination_for(
    resolved: ResolvedOrder,
    env_file: EnvFile,
    logger: UriLogger | None,
) -> DestinationAdapter:
    locator = resolved.destination_locator
    match locator:
        case FileLocator():
            return FileDestination(locator, logger)
        case EnvLocator():
            return EnvDestination(locator, env_file, logger)
        case _:
            assert_never(locator)


async def _deliver_one(
    resolved: ResolvedOrder,
    admission: asyncio.Semaphore,
    env_file: EnvFile,
    logger: UriLogger | None,
    state: _RunState,
) -> None:
    async with admission:
        # admitted after a sibling failed but before the group cancelled us
        if state.first_failure is not None:
            return
        uri = resolved.destination_locator.text
        adapter = _destination_for(resolved, env_file, logger)
        try:
            result = await adapter.deliver(resolved.sources)
        except Exception as e:
            result = Result.failure(
                ErrorCode.DELIVERY_ERROR,
                f"unexpected error delivering {uri}: {e}",
                subject=uri,
                exception=e,
            )

        result.peek(lambda size: state.record_delivery(uri, size)).peek_failure(
            lambda error: state.record_failure(uri, error)
        )
        if result.is_failure():
            raise _DestinationFailed(result.error().message)


async def execute(
    plan: Sequence[ResolvedOrder],
    concurrency_limit: int,
    env_out: str | Path,
    destination_logger: UriLogger | None = None,
) -> Result[int]:
    """
    Deliver every order in `plan`, at most `concurrency_limit` at a time.

    Returns Result[int] with the total content bytes delivered, or the first
    destination failure. No ordering is guaranteed across destinations.
    """
    if concurrency_limit < 1:
        return Result.failure(
            ErrorCode.CONFIGURATION_ERROR,
            f"concurrency limit must be at least 1, got {concurrency_limit}",
            subject=str(concurrency_limit),
        )

    admission = asyncio.Semaphore(concurrency_limit)
    env_file = EnvFile(env_out)
    state = _RunState()

    try:
        async with asyncio.TaskGroup() as group:
            for resolved in plan:
                group.create_task(
                    _deliver_one(resolved, admission, env_file, destination_logger, state)
                )
    except* _DestinationFailed:
        pass
    finally:
        env_file.close()

    if state.first_failure is not None:
        return Result.failure_from(state.first_failure)

    log.info(
        "job.delivered",
        destinations=len(state.completed),
        size_bytes=state.delivered_bytes,
    )
    return Result.success(state.delivered_bytes)


async def run_job(
    catalogs: Sequence[CatalogDeclaration],
    orders: Sequence[OrderDeclaration],
    concurrency_limit: int,
    env_out: str | Path,
    timeout_seconds: float,
    factory: SourceFactory | None = None,
    destination_logger: UriLogger | None = None,
) -> Result[int]:
    """
    Resolve the declarations and execute them under an overall deadline.

    Resolution errors are returned before any task starts. When the deadline
    elapses every delivery is cancelled and TIMEOUT_ERROR is returned.
    """
    resolved = resolve(catalogs, orders, factory)
    if resolved.is_failure():
        return Result.failure_from(resolved.error())

    try:
        async with asyncio.timeout(timeout_seconds):
            return await execute(
                resolved.value(),
                concurrency_limit,
                env_out,
                destination_logger,
            )
    except TimeoutError as e:
        return Result.failure(
            ErrorCode.TIMEOUT_ERROR,
            f"job did not finish within {timeout_seconds} seconds",
            exception=e,
        )
