"""Tests for the audit-trailed customer editor."""

from dataclasses import replace

import pytest

from fxdesk.domain.customer_editor import EDIT_REASON, RESTORE_REASON, CustomerEditor
from fxdesk.domain.customer_form import CustomerForm
from fxdesk.domain.errors import (
    BackupWriteFailed,
    RecordUpdateFailed,
    RefetchFailed,
    ValidationError,
)


def _edited_form(record, **changes):
    form = CustomerForm.from_record(record)
    for key, value in changes.items():
        setattr(form, key, value)
    return form


def test_save_edit_writes_exactly_one_backup(customer_editor, sample_customer):
    form = _edited_form(sample_customer, name="Ali M. Salem", phones=["0922921143", "0913334455"])

    updated = customer_editor.save_edit(sample_customer.id, sample_customer, form, "teller@example.com")

    backups = customer_editor.list_recent_backups(sample_customer.id)
    assert len(backups) == 1
    entry = backups[0]
    assert entry.reason == EDIT_REASON
    assert entry.changed_by == "teller@example.com"
    assert entry.old_data == sample_customer.to_snapshot()
    assert entry.new_data == updated.to_snapshot()
    assert updated.name == "Ali M. Salem"
    assert updated.phones == ("0922921143", "0913334455")
    assert updated.created_at == sample_customer.created_at
    assert updated.updated_at is not None


def test_save_edit_clears_blank_optional_fields(customer_editor, sample_customer):
    form = _edited_form(sample_customer, email="  ", notes="")

    updated = customer_editor.save_edit(sample_customer.id, sample_customer, form, "teller")

    assert updated.email is None
    assert updated.notes is None


def test_save_edit_backs_up_before_updating(recording_db, sample_customer, clock):
    editor = CustomerEditor(recording_db, clock=clock)
    form = _edited_form(sample_customer, name="New Name")

    editor.save_edit(sample_customer.id, sample_customer, form, "teller")

    assert recording_db.calls == [
        ("insert", "customer_backups"),
        ("update", "customers"),
        ("select", "customers"),
    ]


def test_save_edit_rejects_invalid_form_without_writing(recording_db, sample_customer, clock):
    editor = CustomerEditor(recording_db, clock=clock)
    form = _edited_form(sample_customer, phones=[""])

    with pytest.raises(ValidationError) as excinfo:
        editor.save_edit(sample_customer.id, sample_customer, form, "teller")

    assert "phones" in excinfo.value.field_errors
    assert recording_db.calls == []


def test_backup_failure_leaves_record_unchanged(recording_db, temp_db, sample_customer, clock):
    editor = CustomerEditor(recording_db, clock=clock)
    recording_db.fail_on.add(("insert", "customer_backups"))
    form = _edited_form(sample_customer, name="Should Not Apply")

    with pytest.raises(BackupWriteFailed):
        editor.save_edit(sample_customer.id, sample_customer, form, "teller")

    unchanged = CustomerEditor(temp_db).get_customer(sample_customer.id)
    assert unchanged == sample_customer
    assert ("update", "customers") not in recording_db.calls
    assert CustomerEditor(temp_db).list_recent_backups(sample_customer.id) == []


def test_update_failure_keeps_orphan_backup(recording_db, temp_db, sample_customer, clock):
    editor = CustomerEditor(recording_db, clock=clock)
    recording_db.fail_on.add(("update", "customers"))
    form = _edited_form(sample_customer, name="Should Not Apply")

    with pytest.raises(RecordUpdateFailed) as excinfo:
        editor.save_edit(sample_customer.id, sample_customer, form, "teller")

    assert not isinstance(excinfo.value, BackupWriteFailed)
    assert CustomerEditor(temp_db).get_customer(sample_customer.id).name == "Ali Salem"
    assert len(CustomerEditor(temp_db).list_recent_backups(sample_customer.id)) == 1


def test_update_of_missing_customer_fails(customer_editor, sample_customer):
    ghost = replace(sample_customer, id="no-such-id")
    form = _edited_form(ghost, name="Ghost")

    with pytest.raises(RecordUpdateFailed):
        customer_editor.save_edit("no-such-id", ghost, form, "teller")


def test_refetch_failure_after_update(recording_db, temp_db, sample_customer, clock):
    editor = CustomerEditor(recording_db, clock=clock)
    recording_db.fail_on.add(("select", "customers"))
    form = _edited_form(sample_customer, name="Applied")

    with pytest.raises(RefetchFailed):
        editor.save_edit(sample_customer.id, sample_customer, form, "teller")

    assert CustomerEditor(temp_db).get_customer(sample_customer.id).name == "Applied"


def test_restore_reapplies_old_snapshot_and_is_audited(customer_editor, sample_customer):
    edited = customer_editor.save_edit(
        sample_customer.id,
        sample_customer,
        _edited_form(sample_customer, name="Renamed", email=""),
        "teller",
    )
    edit_entry = customer_editor.list_recent_backups(sample_customer.id)[0]

    restored = customer_editor.restore_from_backup(sample_customer.id, edited, edit_entry, "supervisor")

    assert restored.name == "Ali Salem"
    assert restored.email == "ali@example.com"
    assert restored.id == sample_customer.id
    assert restored.created_at == sample_customer.created_at
    assert restored.updated_at > edited.updated_at

    backups = customer_editor.list_recent_backups(sample_customer.id)
    assert [entry.reason for entry in backups] == [RESTORE_REASON, EDIT_REASON]
    newest = backups[0]
    assert newest.new_data == edit_entry.old_data
    assert newest.old_data == edited.to_snapshot()
    assert newest.changed_by == "supervisor"


def test_restore_rejects_backup_of_other_customer(customer_editor, customer_service, sample_customer):
    other_id = customer_service.create_customer(name="Other", phones=["0913334455"])
    other = customer_service.get_customer(other_id)
    customer_editor.save_edit(other_id, other, _edited_form(other, name="Other 2"), "teller")
    foreign_entry = customer_editor.list_recent_backups(other_id)[0]

    with pytest.raises(ValidationError):
        customer_editor.restore_from_backup(sample_customer.id, sample_customer, foreign_entry, "teller")


def test_restore_backup_failure(recording_db, sample_customer, clock):
    editor = CustomerEditor(recording_db, clock=clock)
    editor.save_edit(sample_customer.id, sample_customer, _edited_form(sample_customer, name="X Y"), "t")
    entry = editor.list_recent_backups(sample_customer.id)[0]
    current = editor.get_customer(sample_customer.id)
    recording_db.fail_on.add(("insert", "customer_backups"))

    with pytest.raises(BackupWriteFailed):
        editor.restore_from_backup(sample_customer.id, current, entry, "t")

    assert editor.get_customer(sample_customer.id).name == "X Y"


def test_list_recent_backups_respects_window(temp_db, sample_customer, clock):
    editor = CustomerEditor(temp_db, clock=clock)
    record = sample_customer
    for name in ("First Name", "Second Name", "Third Name"):
        record = editor.save_edit(record.id, record, _edited_form(record, name=name), "teller")

    backups = editor.list_recent_backups(sample_customer.id)
    assert [entry.new_data["name"] for entry in backups] == ["Third Name", "Second Name", "First Name"]

    # Jump the clock far ahead so every entry falls outside the window
    clock.current = clock.current.replace(year=clock.current.year + 1)
    assert editor.list_recent_backups(sample_customer.id, since_days=30) == []


def test_backup_entry_rebuilds_records(customer_editor, sample_customer):
    customer_editor.save_edit(
        sample_customer.id, sample_customer, _edited_form(sample_customer, status="inactive"), "teller"
    )
    entry = customer_editor.list_recent_backups(sample_customer.id)[0]

    assert entry.old_record == sample_customer
    assert entry.new_record.status.value == "inactive"


def test_save_edit_rejects_record_of_other_customer(recording_db, customer_service, sample_customer, clock):
    other_id = customer_service.create_customer(name="Other", phones=["0913334455"])
    editor = CustomerEditor(recording_db, clock=clock)
    form = _edited_form(sample_customer, notes="Moved branch")

    with pytest.raises(ValidationError):
        editor.save_edit(other_id, sample_customer, form, "teller")

    assert recording_db.calls == []
    other = CustomerEditor(recording_db).get_customer(other_id)
    assert other.name == "Other"
    assert CustomerEditor(recording_db).list_recent_backups(other_id) == []


def test_restore_rejects_record_of_other_customer(customer_editor, customer_service, sample_customer):
    customer_editor.save_edit(
        sample_customer.id, sample_customer, _edited_form(sample_customer, name="Renamed"), "teller"
    )
    entry = customer_editor.list_recent_backups(sample_customer.id)[0]
    other = customer_service.get_customer(customer_service.create_customer(name="Other", phones=["0913334455"]))

    with pytest.raises(ValidationError):
        customer_editor.restore_from_backup(sample_customer.id, other, entry, "teller")

    assert len(customer_editor.list_recent_backups(sample_customer.id)) == 1
