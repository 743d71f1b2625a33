"""Customer domain models."""

from typing import Any

from pydantic import BaseModel, Field, EmailStr, field_validator


def _blank_to_none(value: Any) -> Any:
    """Form fields arrive as empty strings; the ledger wants them absent."""
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


class CustomerAddress(BaseModel):
    """Postal address sub-object."""

    line1: str | None = Field(None, max_length=200)
    line2: str | None = Field(None, max_length=200)
    city: str | None = Field(None, max_length=200)
    state: str | None = Field(None, max_length=200)
    postal_code: str | None = Field(None, max_length=20)
    country: str | None = Field(None, max_length=2)

    model_config = {"extra": "allow"}

    @field_validator("line1", "line2", "city", "state", "postal_code", "country", mode="before")
    @classmethod
    def strip_blank(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @property
    def is_empty(self) -> bool:
        return not any(self.model_dump(exclude_none=True).values())


class CustomerCreate(BaseModel):
    """Data submitted to create a customer. Blank fields are dropped."""

    name: str | None = Field(None, max_length=256)
    email: EmailStr | None = None
    phone: str | None = Field(None, max_length=50)
    description: str | None = Field(None, max_length=5000)
    address: CustomerAddress | None = None
    metadata: dict[str, str] = Field(default_factory=dict)

    @field_validator("name", "email", "phone", "description", mode="before")
    @classmethod
    def strip_blank(cls, value: Any) -> Any:
        return _blank_to_none(value)

    def to_params(self) -> dict[str, Any]:
        """Request parameters for the ledger, with empty values omitted."""
        params = self.model_dump(mode="json", exclude_none=True, exclude={"address", "metadata"})
        if self.address is not None and not self.address.is_empty:
            params["address"] = self.address.model_dump(exclude_none=True)
        if self.metadata:
            params["metadata"] = dict(self.metadata)
        return params


class Customer(BaseModel):
    """Customer as returned by the ledger."""

    id: str
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    description: str | None = None
    address: CustomerAddress | None = None
    balance: int = 0
    currency: str | None = None
    created: int | None = None

    model_config = {"extra": "allow"}

    @property
    def display_label(self) -> str:
        """Label for pickers: name with email (or id), else just the id."""
        if self.name:
            return f"{self.name} ({self.email or self.id})"
        return self.id
