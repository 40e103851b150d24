"""Utility functions for fxdesk."""

from fxdesk.utils.date_parser import parse_date
from fxdesk.utils.amount_parser import parse_amount

__all__ = ["parse_date", "parse_amount"]
