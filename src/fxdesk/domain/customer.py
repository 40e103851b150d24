"""Customer directory domain service."""

import logging
from datetime import date, datetime, UTC
from typing import Optional

from fxdesk.database.base import CUSTOMERS, TRANSACTIONS, Database, RowFilter
from fxdesk.database.mappers import row_to_customer, row_to_transaction
from fxdesk.domain import errors
from fxdesk.domain.customer_form import CustomerForm, validate
from fxdesk.domain.entities import CustomerActivity, CustomerPage, CustomerRecord, CustomerStatus
from fxdesk.domain.transaction import validate_date_range

logger = logging.getLogger(__name__)

SORT_RECENT_TRANSACTIONS = "recent-transactions"
SORT_RECENT_CUSTOMERS = "recent-customers"
SORT_NAME = "name"
SORT_CHOICES = (SORT_RECENT_TRANSACTIONS, SORT_RECENT_CUSTOMERS, SORT_NAME)

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


class CustomerService:
    """Service for creating and looking up customers."""

    def __init__(self, db: Database):
        """Initialize customer service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_customer(
        self,
        name: str,
        phones: list[str],
        email: Optional[str] = None,
        notes: Optional[str] = None,
        status: CustomerStatus = CustomerStatus.ACTIVE,
    ) -> str:
        """Create a customer.

        Args:
            name: Customer name
            phones: Phone numbers, at least one valid
            email: Optional email address
            notes: Optional notes
            status: Initial status

        Returns:
            Customer ID

        Raises:
            ValidationError: If the fields do not pass customer form validation
        """
        form = CustomerForm(
            name=name,
            phones=list(phones) or [""],
            email=email or "",
            status=status.value,
            notes=notes or "",
        )
        field_errors = validate(form)
        if field_errors:
            raise errors.ValidationError(
                f"Invalid customer data: {', '.join(sorted(field_errors))}",
                field_errors=field_errors,
            )

        rows = self.db.insert(
            CUSTOMERS,
            [
                {
                    "name": form.name.strip(),
                    "phones": [phone.strip() for phone in form.phones if phone.strip()],
                    "email": form.email.strip() or None,
                    "status": form.status,
                    "notes": form.notes.strip() or None,
                }
            ],
        )
        customer_id = str(rows[0]["id"])
        logger.info("Created customer %s", customer_id)
        return customer_id

    def get_customer(self, customer_id: str) -> Optional[CustomerRecord]:
        """Get customer by ID."""
        rows = self.db.select(CUSTOMERS, [RowFilter.eq("id", customer_id)])
        if not rows:
            return None
        return row_to_customer(rows[0])

    def list_customers(
        self, status: Optional[CustomerStatus] = None, search: Optional[str] = None
    ) -> list[CustomerRecord]:
        """List customers ordered by name, optionally filtered by status and name search."""
        filters = [RowFilter.eq("status", status.value)] if status is not None else []
        rows = self.db.select(CUSTOMERS, filters, order_by="name")
        customers = [row_to_customer(row) for row in rows]
        needle = (search or "").strip().casefold()
        if needle:
            customers = [c for c in customers if needle in c.name.casefold()]
        return customers

    def browse_customers(
        self,
        search: Optional[str] = None,
        status: Optional[CustomerStatus] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        sort_by: str = SORT_RECENT_TRANSACTIONS,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> CustomerPage:
        """One page of the customer list with transaction counts.

        Transactions are matched to customers by name. When a date window is
        given (inclusive, by day), only customers with at least one transaction
        in it are kept and ``window_transactions`` counts those.

        Args:
            search: Case-insensitive substring of the customer name
            status: Only customers with this status
            date_from: Window start
            date_to: Window end
            sort_by: One of SORT_CHOICES
            limit: Page size, None for everything
            offset: Number of matches to skip

        Raises:
            FilterInvalid: If the window is inverted, or sort_by, limit or offset is invalid
        """
        validate_date_range(date_from, date_to)
        if sort_by not in SORT_CHOICES:
            raise errors.FilterInvalid(f"Unknown sort: '{sort_by}'. Supported: {', '.join(SORT_CHOICES)}")
        if offset < 0 or (limit is not None and limit < 1):
            raise errors.FilterInvalid("Offset cannot be negative and limit must be positive")

        windowed = date_from is not None or date_to is not None
        counts: dict[str, list] = {}
        for row in self.db.select(TRANSACTIONS):
            txn = row_to_transaction(row)
            entry = counts.setdefault(txn.customer_name, [0, 0, None])
            entry[0] += 1
            if entry[2] is None or txn.created_at > entry[2]:
                entry[2] = txn.created_at
            day = txn.created_at.date()
            if (date_from is None or day >= date_from) and (date_to is None or day <= date_to):
                entry[1] += 1

        items = []
        for customer in self.list_customers(status=status, search=search):
            total, in_window, latest = counts.get(customer.name, (0, 0, None))
            if windowed and not in_window:
                continue
            items.append(CustomerActivity(customer, total, in_window, latest))

        _sort_activity(items, sort_by)
        end = None if limit is None else offset + limit
        return CustomerPage(tuple(items[offset:end]), total=len(items), offset=offset, limit=limit)


def _sort_activity(items: list[CustomerActivity], sort_by: str) -> None:
    if sort_by == SORT_NAME:
        items.sort(key=lambda a: a.customer.name.casefold())
    elif sort_by == SORT_RECENT_CUSTOMERS:
        items.sort(key=lambda a: a.customer.updated_at or a.customer.created_at, reverse=True)
    else:
        # Stable sorts, least significant key first
        items.sort(key=lambda a: a.customer.created_at, reverse=True)
        items.sort(key=lambda a: a.latest_transaction_at or _EPOCH, reverse=True)
        items.sort(key=lambda a: a.total_transactions, reverse=True)
