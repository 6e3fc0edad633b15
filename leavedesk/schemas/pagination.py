from __future__ import annotations

import math

from pydantic import BaseModel, Field

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 1000


class PageParams(BaseModel):
    """1-indexed page selection shared by every list operation."""

    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


def num_pages(count: int, page_size: int) -> int:
    """Number of pages needed to show ``count`` records, zero when empty."""
    return math.ceil(count / page_size)
