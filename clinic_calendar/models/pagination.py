"""Canonical paginated list result."""

from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    """One page of a backend list endpoint, whatever key the backend used."""

    items: list[T] = Field(default_factory=list)
    total_count: int = 0
    total_pages: int = 0
    page: int = 0

    @classmethod
    def empty(cls) -> "Page[T]":
        return cls(items=[], total_count=0, total_pages=0, page=0)
