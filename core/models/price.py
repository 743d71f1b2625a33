"""Catalog price models.

A price carries its own currency; an invoice that uses one must match it.
"""

from typing import Any

from pydantic import BaseModel


class Price(BaseModel):
    """Catalog price as returned by the ledger (product may be expanded)."""

    id: str
    currency: str
    unit_amount: int | None = None
    nickname: str | None = None
    product: str | dict[str, Any] | None = None
    active: bool = True

    model_config = {"extra": "allow"}

    @property
    def label(self) -> str:
        """Human-readable label: nickname, else product name, else id."""
        if self.nickname:
            return self.nickname
        if isinstance(self.product, dict) and self.product.get("name"):
            return self.product["name"]
        return self.id
