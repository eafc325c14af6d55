"""
Job document loading — binds catalog/order JSON files to pydantic models.

Two layouts are accepted:

  combined   {"catalogs": [...], "orders": [...]}
  split      catalog file {"catalogs": [...]} + order file {"orders": [...]}

    {"alias": "root-ca.crt", "uri": "file://certs/root-ca.crt", "category": "certificate"}
    {"aliases": ["root-ca.crt", "sub-ca.crt"], "uri": "file://out/chain.crt"}

Values are only shape-checked here; URIs, categories and alias references are
validated by the resolver.
"""

from __future__ import annotations

from pathlib import Path
from typing import TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from cannect.railway import ErrorCode, Result

M = TypeVar("M", bound=BaseModel)


class CatalogJSON(BaseModel):
    model_config = ConfigDict(frozen=True)

    alias: str
    uri: str
    category: str


class OrderJSON(BaseModel):
    model_config = ConfigDict(frozen=True)

    aliases: tuple[str, ...]
    uri: str


class CatalogsJSON(BaseModel):
    catalogs: list[CatalogJSON] = Field(default_factory=list)


class OrdersJSON(BaseModel):
    orders: list[OrderJSON] = Field(default_factory=list)


class JobDocument(BaseModel):
    """The complete in-memory job: every catalog and every order."""

    catalogs: list[CatalogJSON] = Field(default_factory=list)
    orders: list[OrderJSON] = Field(default_factory=list)


def _read(path: Path) -> Result[str]:
    return Result.from_computation(
        lambda: path.read_text(encoding="utf-8"),
        ErrorCode.CONFIGURATION_ERROR,
        f"cannot read job file {path}",
        subject=str(path),
    )


def _bind(model: type[M], path: Path, text: str) -> Result[M]:
    try:
        return Result.success(model.model_validate_json(text))
    except ValidationError as e:
        return Result.failure(
            ErrorCode.CONFIGURATION_ERROR,
            f"invalid job file {path}: {e}",
            subject=str(path),
            exception=e,
        )


def load_job(path: Path) -> Result[JobDocument]:
    """Load a combined catalogs + orders document."""
    return _read(path).flat_map(lambda text: _bind(JobDocument, path, text))


def load_job_pair(catalog_path: Path, order_path: Path) -> Result[JobDocument]:
    """Load catalogs and orders from two separate documents."""
    catalogs = _read(catalog_path).flat_map(lambda text: _bind(CatalogsJSON, catalog_path, text))
    orders = _read(order_path).flat_map(lambda text: _bind(OrdersJSON, order_path, text))
    return catalogs.flat_map(
        lambda c: orders.map(lambda o: JobDocument(catalogs=c.catalogs, orders=o.orders))
    )
