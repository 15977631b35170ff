from typing import Any, Optional
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for API payloads: snake_case in Python, camelCase on the wire."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ErrorResponse(CamelModel):
    success: bool = False
    error: str
    code: str
    details: Optional[Any] = None


class MessageResponse(CamelModel):
    success: bool = True
    message: str


class PageMeta(CamelModel):
    success: bool = True
    count: int
    total: int
    skip: int
    limit: int
