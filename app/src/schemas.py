from typing import Optional
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model exchanged with clients using camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )


class RequestInfo(BaseModel):
    method: str
    path: str


class HealthStatus(BaseModel):
    status: str
    version: str


class ErrorResponse(BaseModel):
    success: bool = False
    message: str


class APIResponse(CamelModel):
    success: bool = True
    message: str


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool


class PaginatedResponse(APIResponse):
    pagination: Optional[Pagination] = None
