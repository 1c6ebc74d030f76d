from __future__ import annotations

import math

from pydantic import BaseModel


class Pagination(BaseModel):
    currentPage: int
    totalPages: int
    totalCount: int
    hasNextPage: bool
    hasPrevPage: bool

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        total_pages = math.ceil(total / limit) if limit else 0
        return cls(
            currentPage=page,
            totalPages=total_pages,
            totalCount=total,
            hasNextPage=page < total_pages,
            hasPrevPage=page > 1,
        )

