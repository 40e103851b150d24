"""Treasury accounts and the currency catalogue."""

import logging
from typing import Iterable, Optional

from fxdesk.database.base import ACCOUNTS, CURRENCIES, Database, RowFilter
from fxdesk.database.mappers import row_to_account, row_to_currency
from fxdesk.domain import errors
from fxdesk.domain.entities import Currency, TreasuryAccount

logger = logging.getLogger(__name__)


class TreasuryService:
    """Service for managing currencies and treasury accounts."""

    def __init__(self, db: Database):
        """Initialize treasury service.

        Args:
            db: Database instance
        """
        self.db = db

    def add_currency(self, name: str, code: str, symbol: Optional[str] = None) -> str:
        """Add a currency to the catalogue.

        Args:
            name: Display name, as used on transactions ("USD", "دولار")
            code: Short code, stored upper-case
            symbol: Optional symbol

        Returns:
            Currency ID

        Raises:
            ValidationError: If name or code is blank, or either is already taken
        """
        name = name.strip()
        code = code.strip().upper()
        if not name or not code:
            raise errors.ValidationError("Currency name and code are required")
        catalogue = self.list_currencies()
        for currency in catalogue:
            if currency.code == code or currency.name == name:
                taken = name if currency.name == name else code
                raise errors.ValidationError(errors.currency_exists(taken))

        rows = self.db.insert(
            CURRENCIES,
            [
                {
                    "name": name,
                    "code": code,
                    "symbol": (symbol or "").strip() or None,
                    "position": len(catalogue),
                }
            ],
        )
        logger.info("Added currency %s (%s)", name, code)
        return str(rows[0]["id"])

    def list_currencies(self) -> list[Currency]:
        """List the catalogue in the order currencies were added."""
        rows = self.db.select(CURRENCIES, order_by="position")
        return [row_to_currency(row) for row in rows]

    def currency_names(self) -> list[str]:
        """Canonical currency list used to order report rows."""
        return [currency.name for currency in self.list_currencies()]

    def _check_currencies(self, currencies: Iterable[str]) -> list[str]:
        wanted = list(dict.fromkeys(c.strip() for c in currencies if c.strip()))
        known = set(self.currency_names())
        unknown = [c for c in wanted if c not in known]
        if unknown:
            raise errors.ValidationError(errors.unknown_currencies(unknown))
        return wanted

    def add_account(self, name: str, category: str, supported_currencies: Iterable[str] = ()) -> str:
        """Add an active treasury account.

        Raises:
            ValidationError: If name or category is blank, the name is taken, or a
                supported currency is not in the catalogue
        """
        name = name.strip()
        category = category.strip()
        if not name or not category:
            raise errors.ValidationError("Account name and category are required")
        if self.get_account(name) is not None:
            raise errors.ValidationError(errors.account_exists(name))
        currencies = self._check_currencies(supported_currencies)

        rows = self.db.insert(
            ACCOUNTS,
            [{"name": name, "category": category, "supported_currencies": currencies, "active": True}],
        )
        logger.info("Added account %s with currencies %s", name, currencies)
        return str(rows[0]["id"])

    def get_account(self, name: str) -> Optional[TreasuryAccount]:
        """Get account by name."""
        rows = self.db.select(ACCOUNTS, [RowFilter.eq("name", name)])
        if not rows:
            return None
        return row_to_account(rows[0])

    def list_accounts(self, active_only: bool = False) -> list[TreasuryAccount]:
        """List accounts, newest first."""
        filters = [RowFilter.eq("active", True)] if active_only else []
        rows = self.db.select(ACCOUNTS, filters, order_by="created_at", descending=True)
        return [row_to_account(row) for row in rows]

    def update_account(
        self,
        name: str,
        category: Optional[str] = None,
        supported_currencies: Optional[Iterable[str]] = None,
    ) -> TreasuryAccount:
        """Change an account's category or supported currencies.

        Raises:
            NotFoundError: If the account doesn't exist
            ValidationError: If a supported currency is not in the catalogue
        """
        patch: dict = {}
        if category is not None:
            if not category.strip():
                raise errors.ValidationError("Account category cannot be empty")
            patch["category"] = category.strip()
        if supported_currencies is not None:
            patch["supported_currencies"] = self._check_currencies(supported_currencies)
        return self._update(name, patch)

    def set_active(self, name: str, active: bool) -> TreasuryAccount:
        """Activate or deactivate an account. Inactive accounts stay in reports.

        Raises:
            NotFoundError: If the account doesn't exist
        """
        return self._update(name, {"active": active})

    def _update(self, name: str, patch: dict) -> TreasuryAccount:
        if not patch:
            account = self.get_account(name)
            if account is None:
                raise errors.NotFoundError(errors.account_not_found(name))
            return account
        rows = self.db.update(ACCOUNTS, patch, [RowFilter.eq("name", name)])
        if not rows:
            raise errors.NotFoundError(errors.account_not_found(name))
        logger.info("Updated account %s: %s", name, sorted(patch))
        return row_to_account(rows[0])

    def delete_account(self, name: str) -> None:
        """Delete an account. Transactions keep the account name they were recorded with.

        Raises:
            NotFoundError: If the account doesn't exist
        """
        deleted = self.db.delete(ACCOUNTS, [RowFilter.eq("name", name)])
        if not deleted:
            raise errors.NotFoundError(errors.account_not_found(name))
        logger.info("Deleted account %s", name)
