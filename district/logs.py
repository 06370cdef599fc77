"""Log lines sent by game servers, rendered from translations."""

from __future__ import annotations

import json
from typing import Any, Mapping, Union

from district.lang import get_translation
from district.server import DistrictServer
from district.utils import get_discord_timestamp

LogValue = Union[None, bool, int, float, str, list]


class LogDataError(ValueError):
    """Log data holds a value that cannot be put into a log line."""


def _parse_value(value: Any) -> LogValue:
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, list):
        if not all(isinstance(item, str) for item in value):
            raise LogDataError("Expected string in array")
        return list(value)
    raise LogDataError("Unsupported JSON value")


def parse_log_data(data: Any) -> dict[str, LogValue]:
    """Check decoded JSON log data: scalars or arrays of strings, no objects."""
    if not isinstance(data, dict):
        raise LogDataError("expected a JSON object")
    return {str(key): _parse_value(value) for key, value in data.items()}


def format_log_value(value: LogValue) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        return ", ".join(value)
    return json.dumps(value)


def render_log_message(
    translations: Mapping[str, str] | None,
    translation: str,
    parsed_data: Mapping[str, LogValue],
) -> str | None:
    """The full log line, or None when the translation is empty.

    An unknown translation falls back to its key, "logs.<translation>".
    """
    translations = dict(translations or {})
    key = f"logs.{translation}"
    message = get_translation(translations, key)
    if message is None:
        message = key
    if not message:
        return None
    message = f"{get_discord_timestamp(translations)}: {message}"
    for name, value in parsed_data.items():
        message = message.replace(f"{{{name}}}", format_log_value(value))
    return message


def handle_log_with_data(
    server: DistrictServer,
    translations: Mapping[str, str] | None,
    translation: str,
    parsed_data: Mapping[str, LogValue],
) -> None:
    """Render a log line and queue it on the server's channel."""
    message = render_log_message(translations, translation, parsed_data)
    if message is None:
        return
    server.send_message(message)