"""Application configuration."""

from pydantic import BaseModel, Field


class InvoiceDeskConfig(BaseModel):
    """
    Invoice desk configuration.

    Defaults mirror what the Stripe dashboard uses in test mode so that
    manual dashboard actions and API calls behave the same way.
    """

    # Stripe
    stripe_api_version: str = Field(
        default="2025-06-30.basil",
        description="Pinned Stripe API version for every request",
    )

    # Invoice defaults
    default_currency: str = Field(
        default="gbp",
        description="Currency used when no catalog price forces one",
        min_length=3,
        max_length=3,
    )
    default_days_until_due: int = Field(
        default=30,
        description="Payment terms for send_invoice collection",
        ge=1,
        le=365,
    )

    # Listing
    page_size: int = Field(
        default=20,
        description="Rows per page for invoice and customer lists",
        ge=1,
        le=100,
    )
    price_list_limit: int = Field(
        default=100,
        description="Active prices loaded for the line item picker",
        ge=1,
        le=100,
    )
    dashboard_sample_size: int = Field(
        default=100,
        description="Invoices and customers sampled for dashboard counts",
        ge=1,
        le=100,
    )

    # Credential storage
    vault_secret_path: str = Field(
        default="stripe",
        description="Vault path (under the project prefix) holding the API key",
    )
    vault_secret_field: str = Field(
        default="secret_key",
        description="Field name within the Vault secret",
    )
