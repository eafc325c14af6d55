"""
Application entry point — wires dependencies and runs one delivery job.

Composition root: loads settings, configures logging, loads the job
documents, creates the structlog-backed loggers and the source factory, and
runs the coordinator under the configured deadline.

This is the ONLY place where settings are read and concrete loggers are
instantiated. Everything below depends on ports.

Exit status: 0 when every destination was delivered, 1 otherwise.
"""

from __future__ import annotations

import asyncio
import logging
import sys

import structlog

from cannect import __version__
from cannect.adapters.uri_logger import StructlogUriLogger
from cannect.config import AppSettings
from cannect.coordinator import run_job
from cannect.loader import JobDocument, load_job, load_job_pair
from cannect.railway import Result
from cannect.resolver import SourceFactory


def configure_structlog(log_level: str = "INFO") -> None:
    """Configure structlog for human-readable console output at `log_level`."""
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper(), logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def load_document(settings: AppSettings) -> Result[JobDocument]:
    """Load the job from whichever document layout the settings name."""
    if settings.catalog_order is not None:
        return load_job(settings.catalog_order)
    assert settings.catalog is not None and settings.order is not None  # checked by AppSettings
    return load_job_pair(settings.catalog, settings.order)


def run(settings: AppSettings) -> Result[int]:
    """Load, resolve and execute the configured job."""
    factory = SourceFactory(
        logger=StructlogUriLogger("source.fetching"),
        github_api_url=settings.github_api_url,
        http_timeout=settings.http_timeout_seconds,
    )
    return load_document(settings).either(
        lambda document: asyncio.run(
            run_job(
                document.catalogs,
                document.orders,
                concurrency_limit=settings.con_limit,
                env_out=settings.env_out,
                timeout_seconds=settings.timeout_seconds,
                factory=factory,
                destination_logger=StructlogUriLogger("destination.ordering"),
            )
        ),
        Result.failure_from,
    )


def main() -> None:
    """Run one job and exit with its status."""
    try:
        settings = AppSettings()
    except Exception as e:
        print(f"FATAL: configuration error: {e}", file=sys.stderr)  # noqa: T201
        sys.exit(1)

    configure_structlog(settings.log_level)
    log = structlog.get_logger()

    log.info(
        "app.starting",
        version=__version__,
        con_limit=settings.con_limit,
        timeout_seconds=settings.timeout_seconds,
        env_out=str(settings.env_out),
    )

    result = run(settings)
    if result.is_failure():
        error = result.error()
        log.error("app.job_failed", code=error.code.value, subject=error.subject, error=error.message)
        sys.exit(1)

    log.info("app.job_completed", size_bytes=result.value())


if __name__ == "__main__":
    main()
