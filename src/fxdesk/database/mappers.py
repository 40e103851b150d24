"""Mapper functions to convert between storage rows and domain entities.

Rows coming back from storage are loosely typed (JSON columns, strings from
snapshots, numbers that may be missing or malformed). This module is the
boundary where they are validated and the defaulting rules are applied.
"""

from datetime import datetime, UTC
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from dateutil import parser as date_parser

from fxdesk.domain import entities as domain


def as_datetime(value: Any) -> Optional[datetime]:
    """Coerce a stored timestamp to an aware UTC datetime.

    Naive values are treated as UTC, since that is how they are written.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        dt = date_parser.isoparse(str(value))
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def as_decimal(value: Any) -> Optional[Decimal]:
    """Coerce a stored number to Decimal.

    Missing, malformed and non-finite values (NaN, sNaN, Infinity) become None.
    """
    if isinstance(value, Decimal):
        result = value
    elif value is None or value == "":
        return None
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            return None
    if not result.is_finite():
        return None
    return result


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value)
    return text if text.strip() else None


def row_to_customer(row: dict[str, Any]) -> domain.CustomerRecord:
    """Convert a ``customers`` row to a CustomerRecord entity."""
    phones = row.get("phones") or []
    created_at = as_datetime(row.get("created_at"))
    if created_at is None:
        raise ValueError(f"Customer row {row.get('id')} has no created_at")
    return domain.CustomerRecord(
        id=str(row["id"]),
        name=str(row.get("name") or ""),
        phones=tuple(str(phone) for phone in phones),
        email=_as_text(row.get("email")),
        status=domain.CustomerStatus(row.get("status") or domain.CustomerStatus.ACTIVE.value),
        notes=_as_text(row.get("notes")),
        created_at=created_at,
        updated_at=as_datetime(row.get("updated_at")),
    )


def snapshot_to_customer(snapshot: dict[str, Any]) -> domain.CustomerRecord:
    """Rebuild a CustomerRecord from a backup snapshot."""
    return row_to_customer(snapshot)


def customer_patch_to_row(patch: dict[str, Any]) -> dict[str, Any]:
    """Convert an update patch into column values for the ``customers`` table."""
    row = dict(patch)
    if "phones" in row:
        row["phones"] = list(row["phones"])
    if isinstance(row.get("status"), domain.CustomerStatus):
        row["status"] = row["status"].value
    return row


def row_to_backup(row: dict[str, Any]) -> domain.CustomerBackupEntry:
    """Convert a ``customer_backups`` row to a CustomerBackupEntry entity."""
    return domain.CustomerBackupEntry(
        id=str(row["id"]),
        customer_id=str(row["customer_id"]),
        old_data=dict(row.get("old_data") or {}),
        new_data=dict(row.get("new_data") or {}),
        changed_by=str(row.get("changed_by") or ""),
        reason=str(row.get("reason") or ""),
        created_at=as_datetime(row.get("created_at")),
    )


def row_to_transaction(row: dict[str, Any]) -> domain.Transaction:
    """Convert a ``transactions`` row to a Transaction entity."""
    return domain.Transaction(
        id=str(row["id"]),
        type=str(row.get("type") or ""),
        category=_as_text(row.get("category")),
        created_at=as_datetime(row.get("created_at")),
        amount=as_decimal(row.get("amount")),
        fee=as_decimal(row.get("fee")),
        currency=_as_text(row.get("currency")),
        price=as_decimal(row.get("price")),
        rate=as_decimal(row.get("rate")),
        currency_final=_as_text(row.get("currency_final")) or domain.LOCAL_CURRENCY_LABEL,
        customer_name=str(row.get("customer_name") or ""),
        country_city=str(row.get("country_city") or ""),
        deliver_to=_as_text(row.get("deliver_to")),
        from_account_name=_as_text(row.get("from_account_name")),
        to_account_name=_as_text(row.get("to_account_name")),
        fx_base_currency=_as_text(row.get("fx_base_currency")),
        fx_quote_currency=_as_text(row.get("fx_quote_currency")),
        fee_currency=_as_text(row.get("fee_currency")),
        notes=_as_text(row.get("notes")),
    )


def row_to_currency(row: dict[str, Any]) -> domain.Currency:
    """Convert a ``currencies`` row to a Currency entity."""
    return domain.Currency(
        id=str(row["id"]),
        name=str(row.get("name") or ""),
        code=str(row.get("code") or ""),
        symbol=_as_text(row.get("symbol")),
        created_at=as_datetime(row.get("created_at")),
    )


def row_to_account(row: dict[str, Any]) -> domain.TreasuryAccount:
    """Convert an ``accounts`` row to a TreasuryAccount entity."""
    return domain.TreasuryAccount(
        id=str(row["id"]),
        name=str(row.get("name") or ""),
        category=str(row.get("category") or ""),
        supported_currencies=tuple(str(c) for c in row.get("supported_currencies") or ()),
        active=bool(row.get("active", True)),
        created_at=as_datetime(row.get("created_at")),
    )
