"""Shared schema building blocks: camelCase wire format and the response envelope."""

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

DataT = TypeVar("DataT")


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RequestModel(CamelModel):
    model_config = ConfigDict(str_strip_whitespace=True)


class ApiResponse(BaseModel, Generic[DataT]):
    """Envelope used by every endpoint: {error, message?, data?}."""

    error: bool = False
    message: Optional[str] = None
    data: Optional[DataT] = None


class FieldError(BaseModel):
    field: str
    reason: str


class Pagination(CamelModel):
    current_page: int
    total_pages: int
    total_items: int
    items_per_page: int
