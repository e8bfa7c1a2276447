from __future__ import annotations

import math
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class ApiModel(BaseModel):
    """Snake-case attributes, camelCase (aliased) on the wire."""

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


class PageMeta(ApiModel):
    total: int
    page: int
    limit: int
    total_pages: int = Field(alias="totalPages")


class Page(ApiModel, Generic[T]):
    data: list[T]
    meta: PageMeta


class Pagination(BaseModel):
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1, le=100)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def meta(self, total: int) -> PageMeta:
        return PageMeta(
            total=total,
            page=self.page,
            limit=self.limit,
            total_pages=math.ceil(total / self.limit) if total else 0,
        )


class MessageOut(BaseModel):
    message: str


class BranchSummary(ApiModel):
    id: str
    name: str


def strip_or_none(value: str | None) -> str | None:
    if value is None:
        return None
    trimmed = value.strip()
    return trimmed or None


def require_text(value: str) -> str:
    trimmed = value.strip()
    if not trimmed:
        raise ValueError("Value cannot be empty")
    return trimmed


def reject_explicit_nulls(model: BaseModel, fields: tuple[str, ...]) -> None:
    """Partial updates may omit these fields but may not clear them."""
    for name in fields:
        if name in model.model_fields_set and getattr(model, name) is None:
            raise ValueError(f"{name} cannot be null")
