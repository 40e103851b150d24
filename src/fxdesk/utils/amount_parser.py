"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re

# Currency marks that may prefix or suffix an amount typed at the counter
_CURRENCY_MARKS = re.compile(r"[$€£¥]|د\.ل|LYD|USD|EUR", re.IGNORECASE)
_ARABIC_DIGITS = str.maketrans("٠١٢٣٤٥٦٧٨٩٫٬", "0123456789.,")


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles "1,234.56", "$100", "100 LYD" and Arabic-Indic digits
    ("١٢٣٫٥" is 123.5).

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    text = amount_str.strip().translate(_ARABIC_DIGITS)
    text = _CURRENCY_MARKS.sub("", text)
    text = text.replace(",", "").strip()

    try:
        return Decimal(text)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}': {e}")


def parse_optional_amount(amount_str: str | None) -> Decimal | None:
    """Parse an optional amount; None or blank gives None."""
    if amount_str is None or not amount_str.strip():
        return None
    return parse_amount(amount_str)
