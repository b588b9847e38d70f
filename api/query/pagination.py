"""
Page-window arithmetic for list endpoints.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PageRef:
    page: int
    limit: int


@dataclass(frozen=True)
class PaginationWindow:
    offset: int
    limit: int
    total: int
    next: PageRef | None = None
    prev: PageRef | None = None

    def as_dict(self) -> dict[str, dict[str, int]]:
        """
        Response shape: only the adjacent pages that exist.
        """
        out: dict[str, dict[str, int]] = {}
        if self.next is not None:
            out["next"] = {"page": self.next.page, "limit": self.next.limit}
        if self.prev is not None:
            out["prev"] = {"page": self.prev.page, "limit": self.prev.limit}
        return out


def plan(page: int, limit: int, total: int) -> PaginationWindow:
    if page < 1 or limit < 1:
        raise ValueError("page and limit must be positive.")
    if total < 0:
        raise ValueError("total must be non-negative.")

    offset = (page - 1) * limit
    # A page past the end is empty but still links back.
    return PaginationWindow(
        offset=offset,
        limit=limit,
        total=total,
        next=PageRef(page + 1, limit) if offset + limit < total else None,
        prev=PageRef(page - 1, limit) if offset > 0 else None,
    )
