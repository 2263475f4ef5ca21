import math

from pydantic import BaseModel, Field, computed_field


class PaginationResult[T](BaseModel):
    """Offset-based page of a list endpoint."""

    items: list[T] = Field(..., description="Items on this page")
    total: int = Field(..., description="Total number of items across all pages", ge=0)
    limit: int = Field(..., description="Page size", ge=1)
    offset: int = Field(..., description="Number of items skipped", ge=0)

    @computed_field(description="Whether more items follow this page")  # type: ignore[prop-decorator]
    @property
    def has_more(self) -> bool:
        return self.offset + len(self.items) < self.total

    @computed_field(description="Number of pages of `limit` items")  # type: ignore[prop-decorator]
    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit)
