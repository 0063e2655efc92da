"""Pydantic models describing the Shopify Admin REST payloads we read."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, field_validator


def _id_to_str(value: object) -> object:
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    if isinstance(value, str):
        return value.strip() or None
    return value


def _value_to_str(value: object) -> object:
    if value is None or isinstance(value, str):
        return value
    return str(value)


class ShopifyBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class VariantPayload(ShopifyBaseModel):
    id: str
    sku: str | None = None

    _normalize_id = field_validator("id", mode="before")(_id_to_str)


class ProductPayload(ShopifyBaseModel):
    id: str
    title: str
    vendor: str | None = None
    variants: list[VariantPayload] = []

    _normalize_id = field_validator("id", mode="before")(_id_to_str)


class ProductResponse(ShopifyBaseModel):
    product: ProductPayload


class MetafieldPayload(ShopifyBaseModel):
    key: str
    namespace: str | None = None
    value: str | None = None

    _normalize_value = field_validator("value", mode="before")(_value_to_str)


class MetafieldsResponse(ShopifyBaseModel):
    metafields: list[MetafieldPayload] = []


class LineItemPayload(ShopifyBaseModel):
    id: str
    product_id: str | None = None
    variant_id: str | None = None
    vendor: str | None = None
    sku: str | None = None
    title: str | None = None

    _normalize_ids = field_validator("id", "product_id", "variant_id", mode="before")(_id_to_str)


class OrderPayload(ShopifyBaseModel):
    id: str
    name: str | None = None
    created_at: datetime
    line_items: list[LineItemPayload] = []

    _normalize_id = field_validator("id", mode="before")(_id_to_str)


class OrdersResponse(ShopifyBaseModel):
    orders: list[OrderPayload] = []


class OrderResponse(ShopifyBaseModel):
    order: OrderPayload
