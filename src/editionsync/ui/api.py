"""FastAPI application exposing the edition sync trigger."""

from __future__ import annotations

import importlib.metadata
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from logging import getLogger
from typing import Any

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from editionsync.app import (
    UnitOfWorkFactory,
    check_product_integrity,
    ensure_started,
    list_product_editions,
    sync_all_products,
)
from editionsync.config.sync import SyncConfig
from editionsync.domain.ports import OrderSource
from editionsync.domain.sync import InvalidSyncRequestError

from .schemas import EditionRow, SyncProductsRequest

log = getLogger(__name__)

PRODUCT_IDS_REQUIRED = "Product IDs array is required"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    _ = app
    log.info("Starting edition sync API")
    ensure_started()
    yield
    log.info("Edition sync API stopped")


def _package_version() -> str:
    try:
        return importlib.metadata.version("editionsync")
    except importlib.metadata.PackageNotFoundError:
        return "0.0.0+local"


app = FastAPI(
    title="Edition Sync",
    description="Keeps limited-edition numbers of sold line items dense and in purchase order",
    version=_package_version(),
    lifespan=lifespan,
)


def get_order_source() -> OrderSource | None:
    """Order source override; ``None`` selects the configured Shopify adapter."""

    return None


def get_unit_of_work_factory() -> UnitOfWorkFactory | None:
    """Unit-of-work override; ``None`` selects the configured database."""

    return None


def get_sync_settings() -> SyncConfig | None:
    return None


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    _ = request
    errors: list[Any] = list(exc.errors())
    if any("productIds" in error.get("loc", ()) for error in errors):
        return _error(400, PRODUCT_IDS_REQUIRED)
    log.info("Rejected malformed sync request: %s", errors)
    return _error(400, "Invalid request body")


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.post("/api/sync-all-products")
def sync_all_products_endpoint(
    body: SyncProductsRequest,
    order_source: OrderSource | None = Depends(get_order_source),
    unit_of_work_factory: UnitOfWorkFactory | None = Depends(get_unit_of_work_factory),
    settings: SyncConfig | None = Depends(get_sync_settings),
) -> JSONResponse:
    try:
        summary = sync_all_products(
            body.product_ids,
            force_sync=body.force_sync,
            source=order_source,
            unit_of_work_factory=unit_of_work_factory,
            config=settings,
        )
    except InvalidSyncRequestError as exc:
        return _error(400, str(exc))
    except Exception as exc:  # noqa: BLE001
        log.exception("Edition sync request failed")
        return _error(500, str(exc) or "Internal server error")
    return JSONResponse(status_code=200, content=summary.to_payload())


@app.get("/api/products/{product_id}/editions")
def product_editions(
    product_id: str,
    unit_of_work_factory: UnitOfWorkFactory | None = Depends(get_unit_of_work_factory),
) -> list[EditionRow]:
    line_items = list_product_editions(product_id, unit_of_work_factory=unit_of_work_factory)
    return [EditionRow.model_validate(item) for item in line_items]


@app.get("/api/products/{product_id}/integrity")
def product_integrity(
    product_id: str,
    unit_of_work_factory: UnitOfWorkFactory | None = Depends(get_unit_of_work_factory),
) -> dict[str, object]:
    report = check_product_integrity(product_id, unit_of_work_factory=unit_of_work_factory)
    return report.to_payload()
