"""Utility modules for cross-cutting concerns."""

from utils.timezone import now_utc, from_unix, to_unix
from utils.money import parse_amount, to_minor_units
