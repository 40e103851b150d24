"""Customer edit form validation and normalization."""

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from fxdesk.domain.entities import CustomerRecord, CustomerStatus

NAME_REQUIRED = "name required"
PHONE_REQUIRED = "at least one valid phone required"
PHONE_INVALID = "invalid phone number"
EMAIL_INVALID = "invalid email address"
STATUS_INVALID = "status must be 'active' or 'inactive'"

# Accepts +1234567890, 1234567890, 123-456-7890, (123) 456-7890, 123.456.7890
_PHONE_PATTERN = re.compile(
    r"^\+?[1-9]\d{0,15}$|^\+?\(?\d{3}\)?[-\s.]?\d{3}[-\s.]?\d{4,8}$"
)
_PHONE_SEPARATORS = re.compile(r"[\s\-().]")
_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PHONE_LENGTH = 8


@dataclass
class CustomerForm:
    """Editable customer fields as entered by the user."""

    name: str = ""
    phones: list[str] = field(default_factory=lambda: [""])
    email: str = ""
    status: str = CustomerStatus.ACTIVE.value
    notes: str = ""

    @classmethod
    def from_record(cls, record: CustomerRecord) -> "CustomerForm":
        """Prefill a form from a stored record."""
        return cls(
            name=record.name,
            phones=list(record.phones) if record.phones else [""],
            email=record.email or "",
            status=record.status.value,
            notes=record.notes or "",
        )


def is_valid_phone(phone: str) -> bool:
    """Check a phone number against the international phone pattern."""
    if not phone.strip():
        return False
    cleaned = _PHONE_SEPARATORS.sub("", phone)
    return bool(_PHONE_PATTERN.match(cleaned)) and len(cleaned) >= MIN_PHONE_LENGTH


def is_valid_email(email: str) -> bool:
    """Check an email address. Blank counts as valid because email is optional."""
    if not email.strip():
        return True
    return bool(_EMAIL_PATTERN.match(email.strip()))


def format_phone(phone: str) -> str:
    """Format a phone number for display.

    10 digits are shown as ``092-2921143`` and 11 digits as ``00966-512345``;
    anything else is returned unchanged.
    """
    digits = re.sub(r"\D", "", phone)
    if len(digits) == 10:
        return f"{digits[:3]}-{digits[3:]}"
    if len(digits) == 11:
        return f"{digits[:5]}-{digits[5:]}"
    return phone


def validate(form: CustomerForm) -> dict[str, Any]:
    """Validate a customer form.

    Returns a map of field name to error. ``phones`` maps to a list aligned
    with the form's phone entries (``None`` where the entry is fine) or, when
    no phone was entered at all, to a single-item list with the required
    message. An empty map means the form is valid.
    """
    errors: dict[str, Any] = {}

    if not form.name.strip():
        errors["name"] = NAME_REQUIRED

    non_blank = [phone for phone in form.phones if phone.strip()]
    if not non_blank:
        errors["phones"] = [PHONE_REQUIRED]
    else:
        phone_errors: list[Optional[str]] = [
            PHONE_INVALID if phone.strip() and not is_valid_phone(phone) else None
            for phone in form.phones
        ]
        if any(phone_errors):
            errors["phones"] = phone_errors

    if form.email.strip() and not is_valid_email(form.email):
        errors["email"] = EMAIL_INVALID

    if form.status not in {status.value for status in CustomerStatus}:
        errors["status"] = STATUS_INVALID

    return errors


def build_update_data(form: CustomerForm, now: datetime) -> dict[str, Any]:
    """Build the update patch for a validated form.

    Strings are trimmed, blank phones dropped, and blank email or notes
    become ``None`` rather than empty strings.
    """
    return {
        "name": form.name.strip(),
        "phones": [phone.strip() for phone in form.phones if phone.strip()],
        "email": form.email.strip() or None,
        "status": form.status,
        "notes": form.notes.strip() or None,
        "updated_at": now,
    }
