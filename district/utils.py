"""JSON and time helpers shared by the databases and log formatting."""

from __future__ import annotations

import json
import re
import time
from datetime import datetime, timedelta, timezone

from district.lang import get_translation
from district.logger import log_error

_RFC3339 = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})[Tt ](\d{2}):(\d{2}):(\d{2})"
    r"(?:\.(\d+))?([Zz]|[+-]\d{2}:\d{2})"
)

_DEFAULT_TIMESTAMP = "<t:{t}:R>"


def parse_and_trim_json_strings(json_str: str) -> list[str]:
    """Parse a JSON array of strings, stripping single quotes from each end."""
    try:
        array = json.loads(json_str)
        if not isinstance(array, list) or not all(isinstance(s, str) for s in array):
            raise ValueError("expected a JSON array of strings")
    except ValueError as err:
        log_error(f"Error parsing JSON: {err}")
        raise
    return [s.strip("'") for s in array]


def _parse_rfc3339(date_str: str) -> datetime:
    match = _RFC3339.fullmatch(date_str)
    if match is None:
        raise ValueError(f"not an RFC 3339 date: {date_str!r}")
    year, month, day, hour, minute, second, fraction, offset = match.groups()
    micro = int((fraction or "")[:6].ljust(6, "0"))
    if offset in ("Z", "z"):
        tz = timezone.utc
    else:
        sign = -1 if offset[0] == "-" else 1
        hours, minutes = int(offset[1:3]), int(offset[4:6])
        if minutes >= 60:
            raise ValueError(f"invalid offset: {offset!r}")
        tz = timezone(sign * timedelta(hours=hours, minutes=minutes))
    parsed = datetime(
        int(year), int(month), int(day), int(hour), int(minute), int(second), micro, tzinfo=tz
    )
    return parsed.astimezone(timezone.utc)


def parse_rfc3339_to_utc(date_str: str) -> datetime:
    """Parse an RFC 3339 date into an aware UTC datetime; raise ValueError if invalid."""
    try:
        return _parse_rfc3339(date_str)
    except ValueError as err:
        log_error(f"Invalid date format: {err}")
        raise


def parse_rfc3339_to_utc_or_none(date_str: str | None) -> datetime | None:
    """Like :func:`parse_rfc3339_to_utc`, but None for None, "NULL" or bad input."""
    if date_str is None or date_str == "NULL":
        return None
    try:
        return _parse_rfc3339(date_str)
    except ValueError:
        return None


def get_discord_timestamp(lang: dict[str, str] | None) -> str:
    """A relative Discord timestamp for now, using the "utils.timestamp" translation."""
    template = None
    if lang is not None:
        template = get_translation(lang, "utils.timestamp")
    if template is None:
        template = _DEFAULT_TIMESTAMP
    return template.replace("{t}", str(int(time.time())))