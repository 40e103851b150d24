"""Tests for customer service lookups and the customer list."""

from datetime import date, datetime, UTC

import pytest

from fxdesk.database.base import CUSTOMERS, RowFilter
from fxdesk.domain.customer import SORT_NAME, SORT_RECENT_CUSTOMERS
from fxdesk.domain.entities import CustomerStatus, TransactionType
from fxdesk.domain.errors import FilterInvalid


@pytest.fixture
def directory(temp_db, customer_service, transaction_service):
    """Three customers with known creation times and some transactions.

    Ali: 3 transactions, last on 2024-03-20. Mona: 1 on 2024-03-25.
    Khaled: none, created last.
    """
    ids = {}
    for index, name in enumerate(["Ali Salem", "Mona Ben Ali", "Khaled Omar"]):
        customer_id = customer_service.create_customer(name=name, phones=["0922921143"])
        temp_db.update(
            CUSTOMERS,
            {"created_at": datetime(2024, 1, 1 + index, tzinfo=UTC)},
            [RowFilter.eq("id", customer_id)],
        )
        ids[name] = customer_id

    for day in (1, 10, 20):
        transaction_service.record_transaction(
            TransactionType.ENTRY, customer_name="Ali Salem", created_at=datetime(2024, 3, day, 12, tzinfo=UTC)
        )
    transaction_service.record_transaction(
        TransactionType.ENTRY, customer_name="Mona Ben Ali", created_at=datetime(2024, 3, 25, 12, tzinfo=UTC)
    )
    return ids


def _names(page):
    return [activity.customer.name for activity in page.items]


def test_list_customers_search_is_case_insensitive(customer_service, directory):
    names = [c.name for c in customer_service.list_customers(search="ALI")]

    assert names == ["Ali Salem", "Mona Ben Ali"]


def test_list_customers_blank_search_matches_everyone(customer_service, directory):
    assert len(customer_service.list_customers(search="  ")) == 3


def test_browse_default_sort_by_transaction_activity(customer_service, directory):
    page = customer_service.browse_customers()

    assert _names(page) == ["Ali Salem", "Mona Ben Ali", "Khaled Omar"]
    assert page.total == 3
    ali = page.items[0]
    assert ali.total_transactions == 3
    assert ali.latest_transaction_at == datetime(2024, 3, 20, 12, tzinfo=UTC)
    assert page.items[2].total_transactions == 0
    assert page.items[2].latest_transaction_at is None


def test_browse_ties_on_count_break_on_latest_transaction(customer_service, transaction_service, directory):
    transaction_service.record_transaction(
        TransactionType.ENTRY, customer_name="Mona Ben Ali", created_at=datetime(2024, 4, 1, tzinfo=UTC)
    )
    transaction_service.record_transaction(
        TransactionType.ENTRY, customer_name="Mona Ben Ali", created_at=datetime(2024, 4, 2, tzinfo=UTC)
    )

    assert _names(customer_service.browse_customers())[:2] == ["Mona Ben Ali", "Ali Salem"]


def test_browse_sort_by_name_and_recent_customers(customer_service, directory):
    assert _names(customer_service.browse_customers(sort_by=SORT_NAME)) == [
        "Ali Salem",
        "Khaled Omar",
        "Mona Ben Ali",
    ]
    assert _names(customer_service.browse_customers(sort_by=SORT_RECENT_CUSTOMERS)) == [
        "Khaled Omar",
        "Mona Ben Ali",
        "Ali Salem",
    ]


def test_browse_date_window_keeps_only_active_customers(customer_service, directory):
    """Test that the window is inclusive by day and counts only in-window transactions."""
    page = customer_service.browse_customers(date_from=date(2024, 3, 10), date_to=date(2024, 3, 20))

    assert _names(page) == ["Ali Salem"]
    assert page.items[0].window_transactions == 2
    assert page.items[0].total_transactions == 3


def test_browse_open_ended_window(customer_service, directory):
    page = customer_service.browse_customers(date_from=date(2024, 3, 21))

    assert _names(page) == ["Mona Ben Ali"]
    assert page.items[0].window_transactions == 1


def test_browse_pagination_counts_before_paging(customer_service, directory):
    page = customer_service.browse_customers(sort_by=SORT_NAME, limit=2, offset=2)

    assert _names(page) == ["Mona Ben Ali"]
    assert page.total == 3
    assert page.offset == 2
    assert page.limit == 2

    assert customer_service.browse_customers(limit=2, offset=10).items == ()


def test_browse_combines_search_and_status(customer_service, directory):
    page = customer_service.browse_customers(search="ali", status=CustomerStatus.ACTIVE)
    assert page.total == 2

    page = customer_service.browse_customers(search="ali", status=CustomerStatus.INACTIVE)
    assert page.total == 0


@pytest.mark.parametrize(
    "kwargs",
    [
        {"date_from": date(2024, 3, 2), "date_to": date(2024, 3, 1)},
        {"sort_by": "oldest"},
        {"limit": 0},
        {"offset": -1},
    ],
)
def test_browse_rejects_invalid_filters(customer_service, kwargs):
    with pytest.raises(FilterInvalid):
        customer_service.browse_customers(**kwargs)
