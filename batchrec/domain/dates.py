"""Date codec for stored text <-> date values.

Parsing never raises: text that is not a recognisable date comes back as an
``Unparsed`` wrapper so the edit and print views can show it verbatim.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Union


@dataclass(frozen=True)
class Unparsed:
    raw: str

    def __str__(self) -> str:
        return self.raw


DateValue = Union[date, Unparsed, None]
DateTimeValue = Union[datetime, Unparsed, None]

# Record fields that hold a date or a date-time, wherever they appear.
DATE_FIELDS = frozenset({
    "date", "mfg_date", "exp_date", "date_of_commencement", "date_of_completion",
    "release_date", "invoice_date", "sample_date",
})
DATETIME_FIELDS = frozenset({"start_time", "end_time", "date_time"})


def _clean(value) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _fromiso(text: str) -> datetime:
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def parse_date(value) -> DateValue:
    if isinstance(value, (Unparsed, datetime)):
        return value.date() if isinstance(value, datetime) else value
    if isinstance(value, date):
        return value
    text = _clean(value)
    if text is None:
        return None
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return _fromiso(text).date()
    except ValueError:
        return Unparsed(text)


def parse_datetime(value) -> DateTimeValue:
    if isinstance(value, (Unparsed, datetime)):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    text = _clean(value)
    if text is None:
        return None
    try:
        return _fromiso(text)
    except ValueError:
        return Unparsed(text)


def format_date(value: DateValue) -> str | None:
    value = parse_date(value)
    if value is None:
        return None
    if isinstance(value, Unparsed):
        return value.raw
    return value.isoformat()


def format_datetime(value: DateTimeValue) -> str | None:
    value = parse_datetime(value)
    if value is None:
        return None
    if isinstance(value, Unparsed):
        return value.raw
    return value.isoformat()


def display(value, fmt: str = "%d-%m-%Y") -> str:
    """Human form used by the documents; unparsed text is shown as stored."""
    if value is None:
        return ""
    if isinstance(value, Unparsed):
        return value.raw
    if isinstance(value, (date, datetime)):
        return value.strftime(fmt)
    return str(value)


def coerce(name: str, value):
    """``value`` as the type field ``name`` holds; fields that are not dates pass through."""
    if name in DATE_FIELDS:
        return parse_date(value)
    if name in DATETIME_FIELDS:
        return parse_datetime(value)
    return value
