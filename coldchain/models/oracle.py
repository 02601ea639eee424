"""Temperature oracle reading model."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from coldchain.core.timestamps import utc_now


class ReadingSource(str, Enum):
    """Where a verified temperature came from."""

    ORACLE = "oracle"
    ESTIMATE = "estimate"


class TemperatureReading(BaseModel):
    """An independently sourced temperature for a location."""

    model_config = ConfigDict(frozen=True)

    location: str
    temperature: float
    humidity: float | None = None
    conditions: str = ""
    observed_at: datetime = Field(default_factory=utc_now)
    source: ReadingSource = ReadingSource.ORACLE
