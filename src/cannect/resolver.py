"""
Job resolver — turns catalog/order declarations into an executable plan.

Domain layer — pure: nothing is fetched or written here.

  validate(catalogs, orders)
    → catalog aliases unique, every order alias declared, destinations unique
  resolve(catalogs, orders)
    → parse destination locators (file | env)
    → per alias: category → checker, source locator (file | github | s3) → adapter
    → list[ResolvedOrder], one per order, in declaration order

Resolution is all-or-nothing: the first failure is returned and no partial
plan exists.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol, assert_never

from cannect.adapters.sources import GITHUB_API_URL, FileSource, GitHubSource, S3Source
from cannect.domain.content import checker_for, parse_category
from cannect.domain.locator import (
    FileLocator,
    GitHubLocator,
    S3Locator,
    parse_destination_locator,
    parse_source_locator,
)
from cannect.domain.models import CatalogEntry, OrderEntry, ResolvedOrder
from cannect.domain.ports import SourceAdapter, UriLogger
from cannect.railway import ErrorCode, Result


class CatalogDeclaration(Protocol):
    """A catalog as declared in the job document."""

    @property
    def alias(self) -> str: ...

    @property
    def uri(self) -> str: ...

    @property
    def category(self) -> str: ...


class OrderDeclaration(Protocol):
    """An order as declared in the job document."""

    @property
    def aliases(self) -> Sequence[str]: ...

    @property
    def uri(self) -> str: ...


@dataclass(frozen=True, slots=True)
class SourceFactory:
    """Builds the scheme-specific SourceAdapter for a catalog entry."""

    logger: UriLogger | None = None
    github_api_url: str = GITHUB_API_URL
    http_timeout: int = 60
    s3_client_factory: Callable[[], Any] | None = field(default=None, compare=False)

    def build(self, entry: CatalogEntry) -> SourceAdapter:
        checker = checker_for(entry.category)
        locator = entry.source_locator
        match locator:
            case FileLocator():
                return FileSource(locator, checker, self.logger)
            case GitHubLocator():
                return GitHubSource(
                    locator,
                    checker,
                    self.logger,
                    api_url=self.github_api_url,
                    timeout=self.http_timeout,
                )
            case S3Locator():
                return S3Source(locator, checker, self.logger, self.s3_client_factory)
            case _:
                assert_never(locator)


def validate(
    catalogs: Sequence[CatalogDeclaration],
    orders: Sequence[OrderDeclaration],
) -> Result[int]:
    """
    Check referential integrity of the declarations.

    Returns the number of orders checked on success.
    Fails with DUPLICATE_ALIAS, UNDEFINED_ALIAS or DUPLICATE_DESTINATION on
    the first offending entry, in declaration order.
    """
    aliases: set[str] = set()
    for catalog in catalogs:
        if catalog.alias in aliases:
            return Result.failure(
                ErrorCode.DUPLICATE_ALIAS,
                f"catalog alias must not be duplicated: {catalog.alias}",
                subject=catalog.alias,
            )
        aliases.add(catalog.alias)

    destinations: set[str] = set()
    for order in orders:
        for alias in order.aliases:
            if alias not in aliases:
                return Result.failure(
                    ErrorCode.UNDEFINED_ALIAS,
                    f"undefined alias: {alias}",
                    subject=alias,
                )
        if order.uri in destinations:
            return Result.failure(
                ErrorCode.DUPLICATE_DESTINATION,
                f"order URI must not be duplicated: {order.uri}",
                subject=order.uri,
            )
        destinations.add(order.uri)

    return Result.success(len(orders))


def _catalog_entry(catalog: CatalogDeclaration) -> Result[CatalogEntry]:
    return parse_category(catalog.category).flat_map(
        lambda category: parse_source_locator(catalog.uri).map(
            lambda locator: CatalogEntry(
                alias=catalog.alias,
                source_locator=locator,
                category=category,
            )
        )
    )


def _order_entry(order: OrderDeclaration) -> Result[OrderEntry]:
    return parse_destination_locator(order.uri).map(
        lambda locator: OrderEntry(destination_locator=locator, aliases=tuple(order.aliases))
    )


def resolve(
    catalogs: Sequence[CatalogDeclaration],
    orders: Sequence[OrderDeclaration],
    factory: SourceFactory | None = None,
) -> Result[list[ResolvedOrder]]:
    """
    Resolve declarations into one ResolvedOrder per order, in declaration order.

    Each alias occurrence gets its source adapter in declared order, so an
    alias listed twice contributes its bytes twice. Catalogs never referenced
    by an order are not parsed.
    """
    factory = factory or SourceFactory()
    validated = validate(catalogs, orders)
    if validated.is_failure():
        return Result.failure_from(validated.error())

    by_alias = {catalog.alias: catalog for catalog in catalogs}
    sources: dict[str, SourceAdapter] = {}
    plan: list[ResolvedOrder] = []

    for order in orders:
        entry = _order_entry(order)
        if entry.is_failure():
            return Result.failure_from(entry.error())

        for alias in order.aliases:
            if alias in sources:
                continue
            built = _catalog_entry(by_alias[alias]).map(factory.build)
            if built.is_failure():
                return Result.failure_from(built.error())
            sources[alias] = built.value()

        plan.append(
            ResolvedOrder(
                order=entry.value(),
                sources=tuple(sources[alias] for alias in order.aliases),
            )
        )

    return Result.success(plan)
