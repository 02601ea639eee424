"""Product registration models."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from coldchain.core.timestamps import utc_now


def new_product_id() -> str:
    return f"prod-{uuid.uuid4().hex[:12]}"


class ProductSpec(BaseModel):
    """Registration input for a temperature-sensitive product.

    Bounds are inclusive; ``min_temperature <= max_temperature`` is checked
    by the ProductRegistry, not here, so a malformed spec can still be
    constructed and rejected with a domain error.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    manufacturer: str
    min_temperature: float
    max_temperature: float
    logistics_partner: str


class Product(BaseModel):
    """An immutable registered product."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_product_id)
    name: str
    description: str = ""
    manufacturer: str
    min_temperature: float
    max_temperature: float
    logistics_partner: str
    registered_at: datetime = Field(default_factory=utc_now)

    def accepts(self, temperature: float) -> bool:
        """Whether *temperature* lies inside the accepted band (inclusive)."""
        return self.min_temperature <= temperature <= self.max_temperature
