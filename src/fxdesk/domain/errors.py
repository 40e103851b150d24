"""Shared domain error messages and error types."""

from typing import Any, Optional


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic.

    ``field_errors`` maps form fields to their messages when the error comes
    from validating a customer form.
    """

    def __init__(self, message: str, field_errors: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.field_errors = field_errors or {}


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class FilterInvalid(DomainError):
    """Report filter is inconsistent, such as a start date after the end date."""


class StorageWriteError(DomainError):
    """Base class for failures of an audited write sequence."""

    def __init__(self, message: str, customer_id: str):
        super().__init__(message)
        self.customer_id = customer_id


class BackupWriteFailed(StorageWriteError):
    """The backup row could not be written; the customer record is unchanged."""


class RecordUpdateFailed(StorageWriteError):
    """The backup row exists but the customer record was not updated."""


class RefetchFailed(StorageWriteError):
    """The change was applied but the refreshed record could not be loaded."""


def customer_not_found(customer_id: str) -> str:
    """Return message for missing customer."""
    return f"Customer {customer_id} not found"


def backup_not_found(backup_id: str) -> str:
    """Return message for missing backup entry."""
    return f"Backup {backup_id} not found"


def transaction_not_found(transaction_id: str) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def backup_failed(customer_id: str) -> str:
    return f"Backup failed for customer {customer_id}; no changes were made"


def update_failed(customer_id: str) -> str:
    return (
        f"Update failed for customer {customer_id}; "
        "a backup was recorded but the change did not apply"
    )


def refetch_failed(customer_id: str) -> str:
    return (
        f"Customer {customer_id} was updated but could not be reloaded; "
        "reload before making further changes"
    )


def date_range_inverted() -> str:
    """Return message for a report range whose start is after its end."""
    return "Start date (from) is after end date (to)"


def account_not_found(name: str) -> str:
    """Return message for missing treasury account."""
    return f"Account '{name}' not found"


def account_exists(name: str) -> str:
    return f"Account '{name}' already exists"


def currency_exists(code: str) -> str:
    return f"Currency '{code}' already exists"


def unknown_currencies(names: list[str]) -> str:
    return f"Unknown currencies: {', '.join(names)}"
