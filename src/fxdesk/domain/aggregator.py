"""Transaction aggregation for reports.

All functions here are pure: they take transactions that were already fetched
and return new values without touching storage or mutating their input.
Missing numeric fields count as zero so a report always renders.
"""

from collections import defaultdict
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from fxdesk.domain.entities import (
    AggregationFilter,
    AggregationResult,
    CurrencyRow,
    CurrencyTotals,
    FxCurrencyData,
    Transaction,
    TransactionCategory,
    TransactionType,
    TRANSFER_FILTER,
)

ZERO = Decimal("0")

# Quoted as units per local currency, so settlement divides by the rate
INVERSE_RATE_CURRENCY = "رممبي"

_REQUIRED_CATEGORY = {
    TransactionType.ENTRY.value: TransactionCategory.DEPOSIT,
    TransactionType.EXIT.value: TransactionCategory.WITHDRAWAL,
    TransactionType.BUY.value: TransactionCategory.FX,
    TransactionType.SELL_TO.value: TransactionCategory.FX,
}

_FX_DIRECTIONS = {
    "buy": TransactionType.BUY.value,
    "sell": TransactionType.SELL_TO.value,
}


def _num(value: Optional[Decimal]) -> Decimal:
    """Numeric field as a finite Decimal; missing or non-finite counts as zero."""
    if not _is_number(value):
        return ZERO
    return value


def _is_number(value: Optional[Decimal]) -> bool:
    return value is not None and value.is_finite()


def _category_matches(txn: Transaction, expected: str, strict: bool) -> bool:
    if txn.category == expected:
        return True
    return not strict and not txn.category


def _matches_type(txn: Transaction, transaction_type: str, strict: bool) -> bool:
    if transaction_type == TRANSFER_FILTER:
        return txn.category == TransactionCategory.TRANSFER
    if txn.type != transaction_type:
        return False
    expected = _REQUIRED_CATEGORY.get(transaction_type)
    if expected is None:
        return True
    return _category_matches(txn, expected, strict)


def matches(txn: Transaction, flt: AggregationFilter) -> bool:
    """Return True if a single transaction passes every set filter dimension."""
    if flt.customer_name and txn.customer_name != flt.customer_name:
        return False

    day = txn.created_at.date()
    if flt.date_from is not None and day < flt.date_from:
        return False
    if flt.date_to is not None and day > flt.date_to:
        return False

    if flt.currency:
        if flt.currency not in (txn.currency, txn.fx_base_currency, txn.fx_quote_currency):
            return False

    if flt.account:
        if flt.account not in (txn.from_account_name, txn.to_account_name, txn.deliver_to):
            return False

    if flt.transaction_type:
        if not _matches_type(txn, flt.transaction_type, flt.strict_category):
            return False

    return True


def apply_filter(
    transactions: Iterable[Transaction], flt: AggregationFilter
) -> list[Transaction]:
    """Filter transactions, preserving input order.

    An inverted date range (from after to) yields no transactions; warning the
    user about it is up to the caller.
    """
    if flt.date_from is not None and flt.date_to is not None and flt.date_from > flt.date_to:
        return []
    return [txn for txn in transactions if matches(txn, flt)]


def count_by_type(transactions: Iterable[Transaction]) -> dict[str, int]:
    """Count transactions per type."""
    counts: dict[str, int] = defaultdict(int)
    for txn in transactions:
        counts[txn.type] += 1
    return dict(counts)


def currency_net_totals(
    transactions: Iterable[Transaction], strict_category: bool = True
) -> CurrencyTotals:
    """Sum deposits and withdrawals per currency.

    Each transaction contributes ``amount + fee``. Transactions with an FX
    currency pair belong to the FX totals and are skipped here. Currencies
    with no activity are absent rather than zero.
    """
    deposits: dict[str, Decimal] = defaultdict(lambda: ZERO)
    withdrawals: dict[str, Decimal] = defaultdict(lambda: ZERO)

    for txn in transactions:
        if txn.has_fx_pair or not txn.currency:
            continue
        total = _num(txn.amount) + _num(txn.fee)
        if total == ZERO:
            continue
        if txn.type == TransactionType.ENTRY.value and _category_matches(
            txn, TransactionCategory.DEPOSIT, strict_category
        ):
            deposits[txn.currency] += total
        elif txn.type == TransactionType.EXIT.value and _category_matches(
            txn, TransactionCategory.WITHDRAWAL, strict_category
        ):
            withdrawals[txn.currency] += total

    net = {
        currency: deposits.get(currency, ZERO) - withdrawals.get(currency, ZERO)
        for currency in {*deposits, *withdrawals}
    }
    return CurrencyTotals(deposits=dict(deposits), withdrawals=dict(withdrawals), net=net)


def _select_direction(transactions: Iterable[Transaction], direction: str) -> list[Transaction]:
    try:
        txn_type = _FX_DIRECTIONS[direction]
    except KeyError:
        raise ValueError(f"Unknown FX direction '{direction}', expected 'buy' or 'sell'")
    return [txn for txn in transactions if txn.type == txn_type]


def fx_currency_totals(
    transactions: Iterable[Transaction], direction: str
) -> dict[str, FxCurrencyData]:
    """Total the price and average the rate per currency for buys or sells.

    ``direction`` is ``"buy"`` or ``"sell"``. The currency key is the FX base
    currency when present, else the plain currency. The average is the simple
    mean of non-zero rates, or zero when there are none.
    """
    totals: dict[str, Decimal] = {}
    rates: dict[str, list[Decimal]] = {}

    for txn in _select_direction(transactions, direction):
        currency = txn.fx_base_currency or txn.currency
        if not currency:
            continue
        totals[currency] = totals.get(currency, ZERO) + _num(txn.price)
        currency_rates = rates.setdefault(currency, [])
        rate = _num(txn.rate)
        if rate:
            currency_rates.append(rate)

    return {
        currency: FxCurrencyData(
            total=total,
            average_rate=(
                sum(rates[currency], ZERO) / len(rates[currency]) if rates[currency] else ZERO
            ),
        )
        for currency, total in totals.items()
    }


def weighted_average_rate(
    transactions: Iterable[Transaction], direction: str
) -> Optional[Decimal]:
    """Volume-weighted average rate for buys or sells: sum(price * rate) / sum(price).

    Returns None when there is no priced volume.
    """
    weighted = ZERO
    volume = ZERO
    for txn in _select_direction(transactions, direction):
        if not _is_number(txn.price) or not _is_number(txn.rate):
            continue
        weighted += txn.price * txn.rate
        volume += txn.price
    if volume == ZERO:
        return None
    return weighted / volume


def settled_amount(txn: Transaction) -> Optional[Decimal]:
    """Final converted value of a buy or sell.

    ``price * rate`` in general; ``price / rate`` when the transaction's
    currency is INVERSE_RATE_CURRENCY. None when price or rate is missing or
    zero, in either branch.
    """
    price = _num(txn.price)
    rate = _num(txn.rate)
    if not price or not rate:
        return None
    if (txn.currency or "").strip() == INVERSE_RATE_CURRENCY:
        return price / rate
    return price * rate


def display_total(txn: Transaction) -> Decimal:
    """Amount plus fee as shown in entry and exit report tables."""
    return _num(txn.amount) + _num(txn.fee)


def merge_currency_rows(
    totals: CurrencyTotals,
    buy_data: dict[str, FxCurrencyData],
    sell_data: dict[str, FxCurrencyData],
    currencies: Optional[Sequence[str]] = None,
) -> list[CurrencyRow]:
    """Build per-currency display rows.

    When ``currencies`` is given, rows follow its order and currencies outside
    it are dropped; otherwise every active currency is listed alphabetically.
    Only currencies with some activity get a row.
    """
    active = {*totals.deposits, *totals.withdrawals, *buy_data, *sell_data}
    if currencies is None:
        ordered = sorted(active)
    else:
        ordered = [currency for currency in currencies if currency in active]

    return [
        CurrencyRow(
            currency=currency,
            deposits=totals.deposits.get(currency, ZERO),
            withdrawals=totals.withdrawals.get(currency, ZERO),
            net=totals.net.get(currency, ZERO),
            bought=buy_data.get(currency),
            sold=sell_data.get(currency),
        )
        for currency in ordered
    ]


def aggregate(
    transactions: Iterable[Transaction],
    flt: AggregationFilter,
    currencies: Optional[Sequence[str]] = None,
) -> AggregationResult:
    """Filter transactions and compute every report view from the result."""
    filtered = apply_filter(transactions, flt)
    totals = currency_net_totals(filtered, strict_category=flt.strict_category)
    buy_data = fx_currency_totals(filtered, "buy")
    sell_data = fx_currency_totals(filtered, "sell")
    return AggregationResult(
        filtered_transactions=tuple(filtered),
        transaction_counts=count_by_type(filtered),
        currency_totals=totals,
        buy_currency_data=buy_data,
        sell_currency_data=sell_data,
        currency_rows=tuple(merge_currency_rows(totals, buy_data, sell_data, currencies)),
    )


class TransactionAggregator:
    """Object wrapper over the aggregation functions for a fixed filter."""

    def __init__(self, flt: Optional[AggregationFilter] = None):
        self.filter = flt or AggregationFilter()

    def run(
        self, transactions: Iterable[Transaction], currencies: Optional[Sequence[str]] = None
    ) -> AggregationResult:
        return aggregate(transactions, self.filter, currencies)
