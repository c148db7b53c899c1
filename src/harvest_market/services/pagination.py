"""
harvest_market.services.pagination

Page request/result value types shared by every list operation.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from harvest_market.errors import ValidationError

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class PageRequest:
    page: int = 1
    limit: int = 10

    def __post_init__(self) -> None:
        if self.page < 1:
            raise ValidationError("page must be at least 1")
        if self.limit < 1:
            raise ValidationError("limit must be at least 1")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True, slots=True)
class Page(Generic[T]):
    items: list[T]
    page: int
    limit: int
    total: int

    @property
    def has_more(self) -> bool:
        return self.page * self.limit < self.total

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit)

    def meta(self, total_key: str = "total") -> dict[str, Any]:
        return {
            "currentPage": self.page,
            "totalPages": self.total_pages,
            total_key: self.total,
            "hasMore": self.has_more,
        }
