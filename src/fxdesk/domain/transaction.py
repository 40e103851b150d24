"""Transaction domain service."""

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Sequence

from fxdesk.database.base import TRANSACTIONS, Database, RowFilter
from fxdesk.database.mappers import row_to_transaction
from fxdesk.domain import errors
from fxdesk.domain.aggregator import TransactionAggregator
from fxdesk.domain.treasury import TreasuryService
from fxdesk.domain.entities import (
    AggregationFilter,
    AggregationResult,
    LOCAL_CURRENCY_LABEL,
    Transaction as TransactionEntity,
    TransactionCategory,
    TransactionType,
)

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = {
    TransactionType.ENTRY: TransactionCategory.DEPOSIT,
    TransactionType.EXIT: TransactionCategory.WITHDRAWAL,
    TransactionType.BUY: TransactionCategory.FX,
    TransactionType.SELL_TO: TransactionCategory.FX,
}


def validate_date_range(date_from: Optional[date], date_to: Optional[date]) -> None:
    """Reject a report range whose start is after its end.

    Raises:
        FilterInvalid: If both bounds are set and date_from > date_to
    """
    if date_from is not None and date_to is not None and date_from > date_to:
        raise errors.FilterInvalid(errors.date_range_inverted())


class TransactionService:
    """Service for recording, listing and reporting on transactions."""

    def __init__(self, db: Database):
        """Initialize transaction service.

        Args:
            db: Database instance
        """
        self.db = db

    def record_transaction(
        self,
        transaction_type: TransactionType,
        customer_name: str,
        created_at: Optional[datetime] = None,
        category: Optional[str] = None,
        amount: Optional[Decimal] = None,
        fee: Optional[Decimal] = None,
        fee_currency: Optional[str] = None,
        currency: Optional[str] = None,
        price: Optional[Decimal] = None,
        rate: Optional[Decimal] = None,
        currency_final: Optional[str] = None,
        country_city: str = "",
        deliver_to: Optional[str] = None,
        from_account_name: Optional[str] = None,
        to_account_name: Optional[str] = None,
        fx_base_currency: Optional[str] = None,
        fx_quote_currency: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> str:
        """Record a transaction.

        Args:
            transaction_type: Transaction type
            customer_name: Name of the customer the transaction belongs to
            created_at: Transaction time (defaults to now)
            category: Category label; derived from the type when omitted

        Returns:
            Transaction ID

        Raises:
            ValidationError: If a buy or sell lacks a positive price and rate
        """
        if transaction_type in (TransactionType.BUY, TransactionType.SELL_TO):
            if price is None or price <= 0:
                raise errors.ValidationError("Price is required for buy and sell transactions")
            if rate is None or rate <= 0:
                raise errors.ValidationError("Rate is required for buy and sell transactions")

        row = {
            "type": transaction_type.value,
            "category": category or DEFAULT_CATEGORY[transaction_type],
            "amount": amount,
            "fee": fee,
            "fee_currency": fee_currency,
            "currency": currency,
            "price": price,
            "rate": rate,
            "currency_final": currency_final or LOCAL_CURRENCY_LABEL,
            "customer_name": customer_name.strip(),
            "country_city": country_city,
            "deliver_to": deliver_to,
            "from_account_name": from_account_name,
            "to_account_name": to_account_name,
            "fx_base_currency": fx_base_currency,
            "fx_quote_currency": fx_quote_currency,
            "notes": notes,
        }
        if created_at is not None:
            row["created_at"] = created_at

        inserted = self.db.insert(TRANSACTIONS, [row])
        transaction_id = str(inserted[0]["id"])
        logger.info("Recorded %s transaction %s for %s", transaction_type.value, transaction_id, customer_name)
        return transaction_id

    def get_transaction(self, transaction_id: str) -> Optional[TransactionEntity]:
        """Get transaction by ID."""
        rows = self.db.select(TRANSACTIONS, [RowFilter.eq("id", transaction_id)])
        if not rows:
            return None
        return row_to_transaction(rows[0])

    def list_transactions(self, customer_name: Optional[str] = None) -> list[TransactionEntity]:
        """List transactions newest first, optionally for one customer."""
        filters = [RowFilter.eq("customer_name", customer_name)] if customer_name else []
        rows = self.db.select(TRANSACTIONS, filters, order_by="created_at", descending=True)
        return [row_to_transaction(row) for row in rows]

    def delete_transaction(self, transaction_id: str) -> None:
        """Delete a transaction.

        Raises:
            NotFoundError: If transaction doesn't exist
        """
        deleted = self.db.delete(TRANSACTIONS, [RowFilter.eq("id", transaction_id)])
        if not deleted:
            raise errors.NotFoundError(errors.transaction_not_found(transaction_id))
        logger.info("Deleted transaction %s", transaction_id)

    def build_report(
        self, flt: AggregationFilter, currencies: Optional[Sequence[str]] = None
    ) -> AggregationResult:
        """Fetch transactions and aggregate them for a report.

        Per-currency rows follow ``currencies`` when given, else the currency
        catalogue; with an empty catalogue every active currency is listed.

        Raises:
            FilterInvalid: If the filter's start date is after its end date
        """
        validate_date_range(flt.date_from, flt.date_to)
        if currencies is None:
            currencies = TreasuryService(self.db).currency_names() or None
        transactions = self.list_transactions(customer_name=flt.customer_name)
        result = TransactionAggregator(flt).run(transactions, currencies)
        logger.debug(
            "Report matched %d of %d transactions",
            len(result.filtered_transactions),
            len(transactions),
        )
        return result
