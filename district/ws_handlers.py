"""Handlers for messages game servers send over the websocket."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from district.application import Application
from district.logs import LogDataError, handle_log_with_data, parse_log_data
from district.models import LeaderboardRecordType


class WsHandlerError(Exception):
    """A websocket message could not be handled; the text is sent back."""


def _field(data: dict, key: str) -> Any:
    if key not in data:
        raise WsHandlerError(f"missing field `{key}`")
    return data[key]


def _uint(data: dict, key: str) -> int:
    value = _field(data, key)
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value < 1 << 64:
        raise WsHandlerError(f"invalid value for `{key}`: expected u64")
    return value


def _object(data: Any) -> dict:
    if not isinstance(data, dict):
        raise WsHandlerError("expected a JSON object")
    return data


def ws_log_with_translation(app: Application, data: Any) -> str:
    """Queue a translated log line on the server named in ``data``."""
    data = _object(data)
    server_id = _uint(data, "server_id")
    translation = _field(data, "translation")
    if not isinstance(translation, str):
        raise WsHandlerError("invalid value for `translation`: expected string")
    try:
        parsed = parse_log_data(_field(data, "data"))
    except LogDataError as err:
        raise WsHandlerError(str(err)) from err

    with app.lock:
        try:
            server = app.try_get_server(server_id)
        except LookupError as err:
            raise WsHandlerError(str(err.args[0])) from err
        try:
            handle_log_with_data(server, app.translations, translation, parsed)
        except RuntimeError as err:
            raise WsHandlerError(str(err)) from err
    return "Success"


def ws_stats_add_to_player(app: Application, data: Any) -> str:
    """Add a leaderboard stat for a player, stamped with the current time."""
    data = _object(data)
    player_id = _uint(data, "player_id")
    raw_kind = _uint(data, "type")
    try:
        kind = LeaderboardRecordType(raw_kind)
    except ValueError as err:
        raise WsHandlerError(f"invalid value for `type`: {raw_kind}") from err
    value = _field(data, "value")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise WsHandlerError("invalid value for `value`: expected number")

    with app.lock:
        if app.databases is None:
            raise WsHandlerError("No databases loaded")
        leaderboard = app.databases.leaderboard_database
        if leaderboard is None:
            raise WsHandlerError("Leaderboards are not enabled on this server")
        try:
            leaderboard.add_stat_to_player(
                player_id, kind, float(value), datetime.now(timezone.utc)
            )
        except Exception as err:
            raise WsHandlerError(str(err)) from err
    return "Successfully added stat to leaderboards"