"""Audit-trailed customer record editor.

Every change to a customer record is written in three ordered steps:

1. insert a backup row holding the record before and after the change,
2. update the customer row,
3. read the customer row back.

The backup insert always finishes before the update is attempted. The two
writes are not atomic; if the update fails after the backup was written the
orphaned backup row is kept.
"""

import logging
from datetime import datetime, timedelta, UTC
from typing import Any, Callable, Optional

from fxdesk.database.base import CUSTOMER_BACKUPS, CUSTOMERS, Database, RowFilter, StorageError
from fxdesk.database.mappers import customer_patch_to_row, row_to_backup, row_to_customer
from fxdesk.domain import errors
from fxdesk.domain.customer_form import CustomerForm, build_update_data, validate
from fxdesk.domain.entities import CustomerBackupEntry, CustomerRecord

logger = logging.getLogger(__name__)

EDIT_REASON = "edit"
RESTORE_REASON = "restore"
DEFAULT_BACKUP_WINDOW_DAYS = 30

# Fields a backup snapshot may write back to the canonical record
RESTORABLE_FIELDS = ("name", "phones", "email", "status", "notes")


def utc_now() -> datetime:
    return datetime.now(UTC)


class CustomerEditor:
    """Service for audited customer edits and restores."""

    def __init__(self, db: Database, clock: Callable[[], datetime] = utc_now):
        """Initialize customer editor.

        Args:
            db: Database instance
            clock: Source of the current time, used for updated_at and backup timestamps
        """
        self.db = db
        self.clock = clock

    def get_customer(self, customer_id: str) -> Optional[CustomerRecord]:
        """Get customer by ID.

        Args:
            customer_id: Customer ID

        Returns:
            Customer record or None if not found
        """
        rows = self.db.select(CUSTOMERS, [RowFilter.eq("id", customer_id)])
        if not rows:
            return None
        return row_to_customer(rows[0])

    def save_edit(
        self,
        customer_id: str,
        current: CustomerRecord,
        form: CustomerForm,
        actor: str,
    ) -> CustomerRecord:
        """Apply an edit to a customer, backing up the prior state first.

        Args:
            customer_id: Customer ID
            current: The record as currently shown to the user
            form: Edited form values
            actor: Identity of the user making the change

        Returns:
            The customer record as re-read from storage

        Raises:
            ValidationError: If the form is invalid or ``current`` is another
                customer's record (nothing is written)
            BackupWriteFailed: If the backup could not be written (nothing changed)
            RecordUpdateFailed: If the backup was written but the update failed
            RefetchFailed: If the update applied but the record could not be reloaded
        """
        if current.id != customer_id:
            raise errors.ValidationError(
                f"Record {current.id} does not belong to customer {customer_id}"
            )

        field_errors = validate(form)
        if field_errors:
            raise errors.ValidationError(
                f"Invalid customer data: {', '.join(sorted(field_errors))}",
                field_errors=field_errors,
            )

        now = self.clock()
        update_data = build_update_data(form, now)
        new_record = current.merged(update_data)
        logger.info("Saving edit of customer %s by %s", customer_id, actor)
        return self._audited_write(
            customer_id,
            old_data=current.to_snapshot(),
            new_data=new_record.to_snapshot(),
            patch=update_data,
            actor=actor,
            reason=EDIT_REASON,
            now=now,
        )

    def restore_from_backup(
        self,
        customer_id: str,
        current: CustomerRecord,
        backup: CustomerBackupEntry,
        actor: str,
    ) -> CustomerRecord:
        """Restore the state recorded in ``backup.old_data``.

        The restore itself is audited: a new backup entry is written whose
        ``new_data`` is the snapshot being returned to.

        Raises:
            ValidationError: If the backup or ``current`` belongs to another customer
            BackupWriteFailed, RecordUpdateFailed, RefetchFailed: as for save_edit
        """
        if current.id != customer_id:
            raise errors.ValidationError(
                f"Record {current.id} does not belong to customer {customer_id}"
            )
        if backup.customer_id != customer_id:
            raise errors.ValidationError(
                f"Backup {backup.id} belongs to customer {backup.customer_id}, not {customer_id}"
            )

        now = self.clock()
        patch: dict[str, Any] = {
            key: backup.old_data[key] for key in RESTORABLE_FIELDS if key in backup.old_data
        }
        patch["updated_at"] = now
        logger.info("Restoring customer %s from backup %s by %s", customer_id, backup.id, actor)
        return self._audited_write(
            customer_id,
            old_data=current.to_snapshot(),
            new_data=backup.old_data,
            patch=patch,
            actor=actor,
            reason=RESTORE_REASON,
            now=now,
        )

    def list_recent_backups(
        self, customer_id: str, since_days: int = DEFAULT_BACKUP_WINDOW_DAYS
    ) -> list[CustomerBackupEntry]:
        """List backups created in the last ``since_days`` days, newest first."""
        since = self.clock() - timedelta(days=since_days)
        rows = self.db.select(
            CUSTOMER_BACKUPS,
            [RowFilter.eq("customer_id", customer_id), RowFilter.gte("created_at", since)],
            order_by="created_at",
            descending=True,
        )
        return [row_to_backup(row) for row in rows]

    def get_backup(self, backup_id: str) -> Optional[CustomerBackupEntry]:
        """Get backup entry by ID."""
        rows = self.db.select(CUSTOMER_BACKUPS, [RowFilter.eq("id", backup_id)])
        if not rows:
            return None
        return row_to_backup(rows[0])

    def _audited_write(
        self,
        customer_id: str,
        old_data: dict[str, Any],
        new_data: dict[str, Any],
        patch: dict[str, Any],
        actor: str,
        reason: str,
        now: datetime,
    ) -> CustomerRecord:
        backup_row = {
            "customer_id": customer_id,
            "old_data": old_data,
            "new_data": new_data,
            "changed_by": actor,
            "reason": reason,
            "created_at": now,
        }
        try:
            self.db.insert(CUSTOMER_BACKUPS, [backup_row])
        except StorageError as e:
            logger.error("Backup of customer %s failed: %s", customer_id, e)
            raise errors.BackupWriteFailed(errors.backup_failed(customer_id), customer_id) from e
        logger.debug("Backup of customer %s written (%s)", customer_id, reason)

        try:
            updated = self.db.update(
                CUSTOMERS, customer_patch_to_row(patch), [RowFilter.eq("id", customer_id)]
            )
        except StorageError as e:
            logger.error("Update of customer %s failed after backup: %s", customer_id, e)
            raise errors.RecordUpdateFailed(errors.update_failed(customer_id), customer_id) from e
        if not updated:
            logger.error("Update of customer %s matched no rows", customer_id)
            raise errors.RecordUpdateFailed(errors.update_failed(customer_id), customer_id)

        try:
            refreshed = self.get_customer(customer_id)
        except StorageError as e:
            logger.error("Reload of customer %s failed: %s", customer_id, e)
            raise errors.RefetchFailed(errors.refetch_failed(customer_id), customer_id) from e
        if refreshed is None:
            raise errors.RefetchFailed(errors.refetch_failed(customer_id), customer_id)

        logger.info("Customer %s updated (%s)", customer_id, reason)
        return refreshed
