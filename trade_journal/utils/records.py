from __future__ import annotations

from collections.abc import Mapping
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

_MISSING = object()


def read_field(record: Any, name: str, default: Any = None) -> Any:
    """
    Read a field from a trade-like record.

    Calculators accept ORM rows, plain dicts and simple objects alike.
    """
    if isinstance(record, Mapping):
        value = record.get(name, _MISSING)
    else:
        value = getattr(record, name, _MISSING)

    if value is _MISSING or value is None:
        return default
    return value


def record_id(record: Any) -> Any:
    return read_field(record, "id")


def as_decimal(x: Any) -> Optional[Decimal]:
    """
    Coerce to Decimal. Returns None for values that are not finite numbers.
    bool is rejected on purpose (True is an int in Python).
    """
    if x is None or isinstance(x, bool):
        return None

    if isinstance(x, Decimal):
        value = x
    else:
        try:
            value = Decimal(str(x))
        except (InvalidOperation, ValueError):
            return None

    if not value.is_finite():
        return None
    return value


def as_date(x: Any) -> Optional[date]:
    """Truncate a datetime / ISO string to its calendar date."""
    if x is None:
        return None
    if isinstance(x, datetime):
        return x.date()
    if isinstance(x, date):
        return x
    if isinstance(x, str):
        try:
            return datetime.fromisoformat(x.replace("Z", "+00:00")).date()
        except ValueError:
            return None
    return None


def enum_value(x: Any) -> Any:
    """Enum members -> their value, everything else untouched."""
    return getattr(x, "value", x)
