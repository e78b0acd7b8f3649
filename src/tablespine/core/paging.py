"""Page requests for read operations.

Tags:
    tablespine, pagination, sorting

Doc-Types:
    api-reference
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Pageable:
    """Page index, page size and an optional sort.

    ``sort_field`` is a *field* name; the repository resolves it to a
    column.  A sort is applied only when both ``sort_field`` and
    ``sort_order`` are set; with either missing the pair is ignored.
    ``sort_order`` ``"desc"`` (any case) sorts descending, anything else
    ascending.  Empty strings count as unset.

    >>> Pageable(page=2, size=5).offset
    10
    """

    page: int
    size: int
    sort_field: str | None = None
    sort_order: str | None = None

    def __post_init__(self) -> None:
        if self.page < 0:
            raise ValueError(f"page must be >= 0, got {self.page}")
        if self.size <= 0:
            raise ValueError(f"size must be > 0, got {self.size}")
        self.sort_field = self.sort_field or None
        self.sort_order = self.sort_order or None

    @property
    def offset(self) -> int:
        return self.page * self.size

    @property
    def is_sorted(self) -> bool:
        return self.sort_field is not None and self.sort_order is not None

    @property
    def descending(self) -> bool:
        return (self.sort_order or "").lower() == "desc"


__all__ = ["Pageable"]
