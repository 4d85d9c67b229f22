"""
Attribute type conversion.

Declared attribute types are plain Python types: ``int``, ``datetime`` or
``None`` (untyped). Values that cannot be converted become ``None``
rather than raising; only an unrecognized target type is an error.
"""
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable, Dict, Optional

from dateutil import parser as date_parser

from datamapper.exceptions import UnknownAttributeType


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def _to_int(value: Any) -> Optional[int]:
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip(), 10)
        except ValueError:
            return None
    if isinstance(value, (float, Decimal)):
        try:
            return int(value)
        except (ValueError, OverflowError):
            return None
    return None


def _to_datetime(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        try:
            return date_parser.parse(value.strip())
        except (date_parser.ParserError, ValueError, OverflowError):
            return None
    return None


CONVERTERS: Dict[type, Callable[[Any], Any]] = {
    int: _to_int,
    datetime: _to_datetime,
}


def convert(value: Any, target_type: Optional[type] = None) -> Any:
    """
    Convert ``value`` to ``target_type``.

    Blank values (None, "" or whitespace) always become None. ``False`` is
    never blanked and is returned as-is whatever the target type.

    Raises:
        UnknownAttributeType: target_type is not None, int or datetime
    """
    if value is False:
        return value
    if _is_blank(value):
        return None
    if target_type is None:
        return value

    converter = CONVERTERS.get(target_type)
    if converter is None:
        raise UnknownAttributeType(target_type)
    return converter(value)


__all__ = ["convert", "CONVERTERS"]
