"""Shared pytest fixtures for fxdesk tests."""

import tempfile
import os
from datetime import datetime, timedelta, UTC
from typing import Iterable, Optional, Sequence

import pytest

from fxdesk.database.base import Database, Row, RowFilter, StorageError
from fxdesk.database.factories import create_sqlite_database
from fxdesk.domain.customer import CustomerService
from fxdesk.domain.customer_editor import CustomerEditor
from fxdesk.domain.transaction import TransactionService


class StepClock:
    """Clock that advances by a fixed step on every call."""

    def __init__(self, start: datetime, step: timedelta = timedelta(minutes=1)):
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        value = self.current
        self.current = self.current + self.step
        return value


class RecordingDatabase(Database):
    """Database wrapper that logs calls and can fail chosen operations.

    ``fail_on`` holds ``(operation, table)`` pairs that raise StorageError
    instead of reaching the wrapped database.
    """

    def __init__(self, inner: Database):
        self.inner = inner
        self.calls: list[tuple[str, str]] = []
        self.fail_on: set[tuple[str, str]] = set()

    def _check(self, operation: str, table: str) -> None:
        self.calls.append((operation, table))
        if (operation, table) in self.fail_on:
            raise StorageError(f"simulated {operation} failure", table=table)

    def connect(self) -> None:
        self.inner.connect()

    def disconnect(self) -> None:
        self.inner.disconnect()

    def initialize_schema(self) -> None:
        self.inner.initialize_schema()

    def select(
        self,
        table: str,
        filters: Sequence[RowFilter] = (),
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> list[Row]:
        self._check("select", table)
        return self.inner.select(table, filters, order_by=order_by, descending=descending)

    def insert(self, table: str, rows: Iterable[Row]) -> list[Row]:
        self._check("insert", table)
        return self.inner.insert(table, rows)

    def update(self, table: str, patch: Row, filters: Sequence[RowFilter]) -> list[Row]:
        self._check("update", table)
        return self.inner.update(table, patch, filters)

    def delete(self, table: str, filters: Sequence[RowFilter]) -> list[Row]:
        self._check("delete", table)
        return self.inner.delete(table, filters)


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def recording_db(temp_db):
    """Wrap the temporary database to record and fail operations."""
    return RecordingDatabase(temp_db)


@pytest.fixture
def clock():
    """A clock starting shortly before now and ticking one minute per call."""
    return StepClock(datetime.now(UTC).replace(microsecond=0) - timedelta(hours=1))


@pytest.fixture
def customer_service(temp_db):
    """Create a CustomerService with a temporary database."""
    return CustomerService(temp_db)


@pytest.fixture
def customer_editor(temp_db, clock):
    """Create a CustomerEditor with a temporary database and a step clock."""
    return CustomerEditor(temp_db, clock=clock)


@pytest.fixture
def transaction_service(temp_db):
    """Create a TransactionService with a temporary database."""
    return TransactionService(temp_db)


@pytest.fixture
def sample_customer(customer_service):
    """Create a sample customer for testing."""
    customer_id = customer_service.create_customer(
        name="Ali Salem",
        phones=["0922921143"],
        email="ali@example.com",
        notes="Prefers USD",
    )
    return customer_service.get_customer(customer_id)


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
