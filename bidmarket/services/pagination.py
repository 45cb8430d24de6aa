import math
from dataclasses import dataclass


@dataclass(frozen=True)
class Page:
    page: int
    limit: int
    total: int = 0

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def with_total(self, total: int) -> "Page":
        return Page(self.page, self.limit, total)

    def as_dict(self) -> dict:
        return {
            "page": self.page,
            "limit": self.limit,
            "total": self.total,
            "totalPages": math.ceil(self.total / self.limit) if self.limit else 0,
            "hasNext": self.page * self.limit < self.total,
            "hasPrev": self.page > 1,
        }
