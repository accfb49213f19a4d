import logging
from datetime import date, datetime, timezone
from typing import Any, Optional

logger = logging.getLogger(__name__)

# Epoch values above this are milliseconds (IOLP feature services return ms)
_EPOCH_MS_THRESHOLD = 10_000_000_000


def parse_date(value: Any) -> Optional[date]:
    """Coerce a loosely-typed date value to a ``date``.

    Accepts ``date``/``datetime`` objects, ISO-8601 strings (date or datetime,
    with or without a trailing ``Z``) and epoch seconds or milliseconds.
    Unparseable values are logged and returned as None.

    Args:
        value: Raw value from a JSON row or feature attribute

    Returns:
        The calendar date, or None
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        seconds = value / 1000.0 if abs(value) >= _EPOCH_MS_THRESHOLD else float(value)
        return datetime.fromtimestamp(seconds, tz=timezone.utc).date()
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text).date()
        except ValueError:
            pass
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            pass

    logger.warning(f"Unparseable date value: {value!r}")
    return None


def as_float(value: Any, default: Optional[float] = None) -> Optional[float]:
    """Float coercion tolerant of None, empty strings and thousands separators."""
    if value is None or value == "":
        return default
    if isinstance(value, str):
        value = value.replace(",", "").strip()
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.warning(f"Non-numeric value: {value!r}")
        return default


def as_bool(value: Any, default: bool = False) -> bool:
    """Bool coercion for JSON flags ('Y'/'N', 'true'/'false', 0/1)."""
    if value is None or value == "":
        return default
    if isinstance(value, str):
        return value.strip().lower() in ("y", "yes", "true", "t", "1")
    return bool(value)


def as_tuple(value: Any) -> tuple:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(value)
