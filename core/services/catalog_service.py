"""
Catalog service for the price picker.

Prices are managed in the ledger's dashboard; here they are only read.
Products are expanded so the picker can label a price by product name.
"""

import logging

from clients.ledger_client import LedgerClient
from core.models import Page, Price

logger = logging.getLogger(__name__)


class CatalogService:
    """Service for catalog (price) lookups."""

    def __init__(self, ledger: LedgerClient, limit: int = 100):
        self.ledger = ledger
        self.limit = limit

    def list_active_prices(self, limit: int | None = None) -> Page[Price]:
        """
        List active prices with their products expanded.

        Args:
            limit: Maximum prices (defaults to the configured limit)

        Returns:
            Page of active prices
        """
        page = self.ledger.list_prices(active=True, limit=limit or self.limit, expand_product=True)
        logger.debug(f"Loaded {len(page.data)} active prices")
        return page

    def prices_by_currency(self, currency: str, limit: int | None = None) -> Page[Price]:
        """Active prices usable on an invoice in ``currency``. The filter runs on one fetched page."""
        currency = currency.strip().lower()
        page = self.list_active_prices(limit)
        return Page[Price](
            data=[p for p in page.data if p.currency.lower() == currency],
            has_more=page.has_more,
        )
