"""Order source backed by the Shopify Admin REST API."""

from __future__ import annotations

import asyncio
from collections import defaultdict
from dataclasses import dataclass, field, replace
from logging import getLogger
from typing import TYPE_CHECKING, Final

import httpx
from pydantic import BaseModel, ValidationError

from editionsync.adapters.http_resilience import ResilientClient, next_page_url
from editionsync.config.shopify import ShopifyConfig, get_shopify_config
from editionsync.domain.ports import OrderSourceError

from .schema import MetafieldsResponse, OrderResponse, OrdersResponse, ProductResponse
from .translator import line_item_details, line_items_for_product, parse_product_info

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from editionsync.config.http_resilience import ResilienceConfig
    from editionsync.domain.ports import (
        LineItemDetails,
        LineItemReference,
        OrderLineItemPayload,
        OrderSource,
        ProductInfo,
    )

log = getLogger(__name__)

SHOPIFY_PAGE_SIZE: Final[int] = 250
CALL_LIMIT_HEADER: Final[str] = "X-Shopify-Shop-Api-Call-Limit"
CALL_LIMIT_WARNING_RATIO: Final[float] = 0.8


class ShopifyAPIError(OrderSourceError):
    """Raised when the Shopify Admin API fails or returns an unusable payload."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def _should_cache_payload(payload: object) -> bool:
    # order pages change with every sale; only catalog lookups are reused
    return isinstance(payload, dict) and ("product" in payload or "metafields" in payload)


async def _warn_on_call_limit(response: httpx.Response) -> None:
    raw_limit = response.headers.get(CALL_LIMIT_HEADER)
    if not raw_limit or "/" not in raw_limit:
        return
    used, _, capacity = raw_limit.partition("/")
    try:
        ratio = int(used) / int(capacity)
    except (ValueError, ZeroDivisionError):
        return
    if ratio >= CALL_LIMIT_WARNING_RATIO:
        log.warning("Shopify API call bucket at %s", raw_limit)


def _default_config() -> ShopifyConfig:
    config = get_shopify_config(cache_predicate=_should_cache_payload)
    return replace(
        config,
        resilience=replace(config.resilience, response_hooks=(_warn_on_call_limit,)),
    )


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


def _parse[TModel: BaseModel](model: type[TModel], payload: object, *, what: str) -> TModel:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise ShopifyAPIError(f"Unexpected Shopify {what} payload") from exc


@dataclass(slots=True)
class ShopifyOrderSource:
    config: ShopifyConfig = field(default_factory=_default_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )
    page_size: int = SHOPIFY_PAGE_SIZE

    def get_product_info(self, product_id: str) -> ProductInfo:
        return asyncio.run(self._get_product_info(product_id))

    def fetch_all_orders_with_product(
        self, product_id: str, variant_ids: Sequence[str]
    ) -> list[OrderLineItemPayload]:
        return asyncio.run(self._fetch_all_orders_with_product(product_id, variant_ids))

    def fetch_line_item_details(
        self, line_items: Sequence[LineItemReference]
    ) -> dict[str, LineItemDetails]:
        return asyncio.run(self._fetch_line_item_details(line_items))

    async def _get_product_info(self, product_id: str) -> ProductInfo:
        async with self.client_factory(self.config.resilience) as client:
            payload, _ = await self._get_json(client, f"products/{product_id}.json")
            product = _parse(ProductResponse, payload, what="product").product

            try:
                payload, _ = await self._get_json(client, f"products/{product_id}/metafields.json")
                metafields = _parse(MetafieldsResponse, payload, what="metafields").metafields
            except ShopifyAPIError as exc:
                log.warning("Could not read metafields of product %s: %s", product_id, exc)
                metafields = []

        info = parse_product_info(product, metafields)
        log.info(
            "Product %s (%s): %s variants, edition total %s",
            product_id,
            info.title,
            len(info.variant_ids),
            info.edition_total,
        )
        return info

    async def _fetch_all_orders_with_product(
        self, product_id: str, variant_ids: Sequence[str]
    ) -> list[OrderLineItemPayload]:
        wanted_variants = frozenset(variant_ids)
        line_items: list[OrderLineItemPayload] = []
        url = "orders.json"
        params: dict[str, str | int] | None = {"status": "any", "limit": self.page_size}
        pages = 0

        async with self.client_factory(self.config.resilience) as client:
            while True:
                payload, response = await self._get_json(client, url, params=params)
                orders = _parse(OrdersResponse, payload, what="orders").orders
                pages += 1
                for order in orders:
                    line_items.extend(line_items_for_product(order, product_id, wanted_variants))

                next_url = next_page_url(response)
                if next_url is None:
                    break
                # page_info cursors reject any other filter parameters
                url, params = next_url, None

        log.info(
            "Found %s line items of product %s across %s order pages",
            len(line_items),
            product_id,
            pages,
        )
        return line_items

    async def _fetch_line_item_details(
        self, line_items: Sequence[LineItemReference]
    ) -> dict[str, LineItemDetails]:
        wanted: dict[str, set[str]] = defaultdict(set)
        for line_item in line_items:
            wanted[line_item.order_id].add(line_item.line_item_id)

        details: dict[str, LineItemDetails] = {}
        failed_orders: list[str] = []
        async with self.client_factory(self.config.resilience) as client:
            for order_id, line_item_ids in wanted.items():
                try:
                    payload, _ = await self._get_json(
                        client,
                        f"orders/{order_id}.json",
                        params={"fields": "id,name,created_at,line_items"},
                    )
                    order = _parse(OrderResponse, payload, what="order").order
                except ShopifyAPIError as exc:
                    log.warning("Could not read line items of order %s: %s", order_id, exc)
                    failed_orders.append(order_id)
                    continue
                details.update(line_item_details(order, line_item_ids))

        if wanted and len(failed_orders) == len(wanted):
            raise ShopifyAPIError(f"Line item lookup failed for all {len(wanted)} orders")
        return details

    async def _get_json(
        self,
        client: ResilientClient,
        url: str,
        *,
        params: dict[str, str | int] | None = None,
    ) -> tuple[object, httpx.Response]:
        try:
            response = await client.get(url, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status_code = exc.response.status_code
            log.error(f"Shopify API returned {status_code} for {exc.request.url.path}")
            raise ShopifyAPIError(
                f"Shopify request to {exc.request.url.path} failed with status {status_code}",
                status_code=status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise ShopifyAPIError(f"Shopify request failed: {exc}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise ShopifyAPIError("Shopify returned a non-JSON response") from exc

        if isinstance(payload, dict) and "errors" in payload:
            raise ShopifyAPIError(
                f"Shopify API error: {payload['errors']}", status_code=response.status_code
            )
        return payload, response


if TYPE_CHECKING:
    _source_check: OrderSource = ShopifyOrderSource()
