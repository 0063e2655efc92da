"""Certificate references issued once per line item."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import TYPE_CHECKING

from editionsync.domain.model import Certificate

if TYPE_CHECKING:
    from datetime import datetime


@dataclass(slots=True, frozen=True)
class CertificateIssuer:
    base_url: str = ""

    def url_for(self, line_item_id: str) -> str:
        return f"{self.base_url.rstrip('/')}/certificate/{line_item_id}"

    def issue(self, line_item_id: str, *, at: datetime) -> Certificate:
        return Certificate(
            url=self.url_for(line_item_id),
            token=str(uuid.uuid4()),
            generated_at=at,
        )
