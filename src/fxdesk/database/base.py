"""Abstract database interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Sequence

CUSTOMERS = "customers"
CUSTOMER_BACKUPS = "customer_backups"
TRANSACTIONS = "transactions"
ACCOUNTS = "accounts"
CURRENCIES = "currencies"

Row = dict[str, Any]


class StorageError(Exception):
    """Raised when the storage backend rejects or fails an operation."""

    def __init__(self, message: str, table: Optional[str] = None):
        super().__init__(message)
        self.table = table


@dataclass(frozen=True)
class RowFilter:
    """A single column predicate.

    Supported operators are ``eq`` and ``gte``.
    """

    column: str
    op: str
    value: Any

    @classmethod
    def eq(cls, column: str, value: Any) -> "RowFilter":
        return cls(column, "eq", value)

    @classmethod
    def gte(cls, column: str, value: Any) -> "RowFilter":
        return cls(column, "gte", value)


class Database(ABC):
    """Row-oriented storage interface for fxdesk.

    Rows are plain dictionaries keyed by column name. Every method raises
    ``StorageError`` when the backend fails.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    @abstractmethod
    def select(
        self,
        table: str,
        filters: Sequence[RowFilter] = (),
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> list[Row]:
        """Return rows of ``table`` matching all ``filters``."""
        pass

    @abstractmethod
    def insert(self, table: str, rows: Iterable[Row]) -> list[Row]:
        """Insert rows. Returns the inserted rows with generated columns filled."""
        pass

    @abstractmethod
    def update(self, table: str, patch: Row, filters: Sequence[RowFilter]) -> list[Row]:
        """Apply ``patch`` to matching rows. Returns the affected rows after the update."""
        pass

    @abstractmethod
    def delete(self, table: str, filters: Sequence[RowFilter]) -> list[Row]:
        """Delete matching rows. Returns the deleted rows."""
        pass
