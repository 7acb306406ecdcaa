"""Generic paginated list envelope.

{ items: T[], page: int, limit: int, total: int }

Missing ``page`` defaults to 1; missing ``limit`` and ``total`` default to the
number of items returned.
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import Field, model_validator

from navee_api.models.base import Dto

T = TypeVar("T")


class Page(Dto, Generic[T]):
    """One page of a paginated list resource."""

    items: list[T] = Field(default_factory=list)
    page: int = Field(default=1, ge=1)
    limit: int = Field(ge=0)
    total: int = Field(ge=0)

    @model_validator(mode="before")
    @classmethod
    def _fill_counts(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        filled = dict(data)
        items = filled.get("items")
        if items is None:
            items = filled["items"] = []
        count = len(items) if isinstance(items, list) else 0
        if filled.get("page") is None:
            filled["page"] = 1
        if filled.get("limit") is None:
            filled["limit"] = count
        if filled.get("total") is None:
            filled["total"] = count
        return filled

    @model_validator(mode="after")
    def _check_limit(self) -> Page[T]:
        if len(self.items) > self.limit:
            raise ValueError(
                f"page holds {len(self.items)} items but limit is {self.limit}"
            )
        return self

    @property
    def has_more(self) -> bool:
        return self.page * self.limit < self.total
