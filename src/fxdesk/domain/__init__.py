"""Domain layer for fxdesk application."""

from fxdesk.domain.customer import CustomerService
from fxdesk.domain.customer_editor import CustomerEditor
from fxdesk.domain.transaction import TransactionService
from fxdesk.domain.aggregator import TransactionAggregator
from fxdesk.domain.treasury import TreasuryService

__all__ = [
    "CustomerService",
    "CustomerEditor",
    "TransactionService",
    "TransactionAggregator",
    "TreasuryService",
]
