"""Activity log schemas."""

from datetime import datetime
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field


class ActivityCreate(BaseModel):
    event: str = Field(min_length=1, max_length=100)
    payload: Dict[str, Any] = Field(default_factory=dict)


class ActivityRead(BaseModel):
    event: str
    payload: Dict[str, Any]
    timestamp: datetime

    model_config = ConfigDict(from_attributes=True)


class ActivityStats(BaseModel):
    total: int
    by_event: Dict[str, int] = Field(alias="byEvent")
    last_24h: int = Field(alias="last24h")

    model_config = ConfigDict(populate_by_name=True)
