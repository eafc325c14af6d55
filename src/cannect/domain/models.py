"""
Domain models — immutable values describing one delivery job.

  CatalogEntry   a named, typed source (alias → source locator + category)
  OrderEntry     a destination and the ordered aliases that make up its content
  ResolvedOrder  an OrderEntry whose aliases are bound to concrete source adapters

All models are frozen dataclasses. They are built once during resolution and
only read during execution.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cannect.domain.locator import DestinationLocator, SourceLocator
    from cannect.domain.ports import SourceAdapter


class AssetCategory(Enum):
    """Kinds of CA asset a catalog may declare. Values are the job-file spelling."""

    CERTIFICATE = "certificate"
    PRIVATE_KEY = "privateKey"
    ENC_PRIVATE_KEY = "encPrivateKey"
    CRL = "CRL"


@dataclass(frozen=True, slots=True)
class CatalogEntry:
    alias: str
    source_locator: SourceLocator
    category: AssetCategory


@dataclass(frozen=True, slots=True)
class OrderEntry:
    """
    A destination plus the aliases whose bytes are concatenated into it.

    Aliases may repeat; their order is the byte order of the output.
    """

    destination_locator: DestinationLocator
    aliases: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class ResolvedOrder:
    """An OrderEntry with one source adapter per alias, in declared order."""

    order: OrderEntry
    sources: tuple[SourceAdapter, ...]

    @property
    def destination_locator(self) -> DestinationLocator:
        return self.order.destination_locator
