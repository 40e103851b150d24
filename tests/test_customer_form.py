"""Tests for customer form validation and normalization."""

from datetime import datetime, UTC

import pytest

from fxdesk.domain.customer_form import (
    EMAIL_INVALID,
    NAME_REQUIRED,
    PHONE_INVALID,
    PHONE_REQUIRED,
    CustomerForm,
    build_update_data,
    format_phone,
    is_valid_email,
    is_valid_phone,
    validate,
)


@pytest.mark.parametrize(
    "phone",
    ["0922921143", "+218912345678", "123-456-7890", "(123) 456-7890", "123.456.7890"],
)
def test_is_valid_phone_accepts_common_formats(phone):
    assert is_valid_phone(phone)


@pytest.mark.parametrize("phone", ["", "   ", "12345", "abc12345678", "+0"])
def test_is_valid_phone_rejects_bad_numbers(phone):
    assert not is_valid_phone(phone)


def test_is_valid_email():
    assert is_valid_email("")
    assert is_valid_email("ali@example.com")
    assert not is_valid_email("ali@example")
    assert not is_valid_email("ali example@x.com")


def test_validate_accepts_one_phone_and_no_email():
    form = CustomerForm(name="Ali", phones=["0922921143"], email="")
    assert validate(form) == {}


def test_validate_rejects_zero_non_blank_phones():
    form = CustomerForm(name="Ali", phones=["", "   "])
    errors = validate(form)
    assert errors["phones"] == [PHONE_REQUIRED]


def test_validate_flags_each_invalid_phone_by_position():
    form = CustomerForm(name="Ali", phones=["0922921143", "12", "", "xx"])
    errors = validate(form)
    assert errors["phones"] == [None, PHONE_INVALID, None, PHONE_INVALID]


def test_validate_requires_name_and_valid_email():
    form = CustomerForm(name="  ", phones=["0922921143"], email="not-an-email")
    errors = validate(form)
    assert errors["name"] == NAME_REQUIRED
    assert errors["email"] == EMAIL_INVALID
    assert "phones" not in errors


def test_validate_rejects_unknown_status():
    form = CustomerForm(name="Ali", phones=["0922921143"], status="deleted")
    assert "status" in validate(form)


def test_build_update_data_trims_and_drops_blanks():
    now = datetime(2024, 5, 1, 10, 0, tzinfo=UTC)
    form = CustomerForm(
        name="  Ali Salem ",
        phones=[" 0922921143 ", "", "  "],
        email="   ",
        status="inactive",
        notes="",
    )

    data = build_update_data(form, now)

    assert data == {
        "name": "Ali Salem",
        "phones": ["0922921143"],
        "email": None,
        "status": "inactive",
        "notes": None,
        "updated_at": now,
    }


def test_format_phone():
    assert format_phone("0922921143") == "092-2921143"
    assert format_phone("00966512345") == "00966-512345"
    assert format_phone("+218912345678") == "+218912345678"


def test_form_from_record_prefills_blank_phone(sample_customer):
    form = CustomerForm.from_record(sample_customer)
    assert form.name == "Ali Salem"
    assert form.phones == ["0922921143"]
    assert form.email == "ali@example.com"
    assert form.status == "active"
