"""Shared response pieces: pagination metadata and the service-level Page result."""

import math
from dataclasses import dataclass
from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


def clamp_pagination(page: int, page_size: int) -> tuple[int, int]:
    """page < 1 becomes 1; page_size outside [1, MAX_PAGE_SIZE] becomes DEFAULT_PAGE_SIZE."""
    if page < 1:
        page = 1
    if page_size < 1 or page_size > MAX_PAGE_SIZE:
        page_size = DEFAULT_PAGE_SIZE
    return page, page_size


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of results plus the clamped paging values actually used."""

    items: list[T]
    total: int
    page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.page_size) if self.total else 0


class Pagination(BaseModel):
    """Pagination metadata returned next to list data."""

    page: int = Field(..., ge=1)
    page_size: int = Field(..., ge=1, le=MAX_PAGE_SIZE)
    total: int = Field(..., ge=0)
    total_pages: int = Field(..., ge=0)

    @classmethod
    def from_page(cls, page: Page) -> "Pagination":
        return cls(
            page=page.page,
            page_size=page.page_size,
            total=page.total,
            total_pages=page.total_pages,
        )


class MessageResponse(BaseModel):
    """Plain acknowledgement."""

    message: str
