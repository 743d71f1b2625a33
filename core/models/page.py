"""List response envelope shared by every ledger list/search call."""

from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    """One page of results. ``has_more`` means a cursor fetch would return more."""

    data: list[T] = Field(default_factory=list)
    has_more: bool = False

    @property
    def last_id(self) -> str | None:
        """Cursor for the next page (``starting_after``)."""
        if not self.data:
            return None
        return getattr(self.data[-1], "id", None)
