"""
Dashboard counts.

Counts are taken from the first page of invoices and customers only, so
they are approximate for accounts with more than ``sample_size`` of either.
"""

import logging

from pydantic import BaseModel

from clients.ledger_client import LedgerClient
from core.models import InvoiceStatus

logger = logging.getLogger(__name__)


class DashboardStats(BaseModel):
    total_invoices: int = 0
    paid_invoices: int = 0
    pending_invoices: int = 0
    total_customers: int = 0
    # True when either sample hit the limit and more exist
    truncated: bool = False


class DashboardService:
    """Service for dashboard summary counts."""

    def __init__(self, ledger: LedgerClient, sample_size: int = 100):
        self.ledger = ledger
        self.sample_size = sample_size

    def stats(self) -> DashboardStats:
        invoices = self.ledger.list_invoices(limit=self.sample_size)
        customers = self.ledger.list_customers(limit=self.sample_size)

        return DashboardStats(
            total_invoices=len(invoices.data),
            paid_invoices=sum(1 for i in invoices.data if i.status == InvoiceStatus.PAID),
            pending_invoices=sum(1 for i in invoices.data if i.status == InvoiceStatus.OPEN),
            total_customers=len(customers.data),
            truncated=invoices.has_more or customers.has_more,
        )
