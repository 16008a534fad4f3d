import math
from typing import Generic, Optional, TypeVar
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Snake-case attributes, camelCase on the wire; accepts either on input."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Envelope(CamelModel, Generic[T]):
    success: bool = True
    status: int = 200
    message: str = ""
    data: Optional[T] = None


class Pagination(CamelModel):
    total: int
    page: int
    limit: int
    pages: int


def build_pagination(total: int, page: int, limit: int) -> Pagination:
    return Pagination(total=total, page=page, limit=limit, pages=math.ceil(total / limit) if limit else 0)
