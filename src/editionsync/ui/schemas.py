"""Request and response models of the HTTP trigger."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _ids_to_str(value: object) -> object:
    if isinstance(value, list):
        return [
            str(item) if isinstance(item, int) and not isinstance(item, bool) else item
            for item in value
        ]
    return value


class SyncProductsRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    product_ids: list[str] = Field(alias="productIds", min_length=1)
    force_sync: bool = Field(default=False, alias="forceSync")

    _normalize_ids = field_validator("product_ids", mode="before")(_ids_to_str)


class EditionRow(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    order_id: str
    order_name: str | None
    line_item_id: str
    product_id: str | None
    variant_id: str | None
    vendor_name: str | None
    edition_number: int | None
    status: str
    removed_reason: str | None
    created_at: datetime
    updated_at: datetime | None
    certificate_url: str | None
