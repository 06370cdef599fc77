"""Records stored in the player, punishment and leaderboard databases."""

from __future__ import annotations

import enum
import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Sequence

from district.utils import (
    parse_and_trim_json_strings,
    parse_rfc3339_to_utc,
    parse_rfc3339_to_utc_or_none,
)


class DatabaseError(Exception):
    """A stored value could not be read or a query could not be carried out."""


class RecordNotFound(DatabaseError):
    """A query that needs a row returned none."""


class InvalidQuery(DatabaseError):
    """The request does not fit the current state of the record."""


class PlayerVerification(enum.IntEnum):
    NONE = 0  # not verified
    CREATED = 1  # code created, not yet sent
    PENDING = 2  # code sent to the player
    SUCCESS = 3  # player is verified
    FULL = 4  # player has a newer verification
    EXPIRED = 5
    BANNED = 6
    SUSPENDED = 7  # under review


class PunishmentType(enum.IntEnum):
    NONE = 0
    BAN = 1
    KICK = 2
    MUTE = 3


class LeaderboardRecordType(enum.IntEnum):
    PLAY_TIME = 0
    KILLS = 1
    DEATHS = 2
    WINS = 3
    LOSSES = 4
    ASSISTS = 5


# --- date formatting ------------------------------------------------------


def _rfc3339(dt: datetime) -> str:
    """Format as stored in the databases: UTC with a "+00:00" offset."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt = dt.astimezone(timezone.utc)
    text = dt.strftime("%Y-%m-%dT%H:%M:%S")
    micro = dt.microsecond
    if micro:
        text += f".{micro // 1000:03d}" if micro % 1000 == 0 else f".{micro:06d}"
    return text + "+00:00"


def _json_date(dt: datetime) -> str:
    return _rfc3339(dt)[: -len("+00:00")] + "Z"


def _date_or_now(text: str) -> datetime:
    try:
        return parse_rfc3339_to_utc(text)
    except ValueError:
        return datetime.now(timezone.utc)


# --- row readers ----------------------------------------------------------


def _column(row: Sequence[Any], index: int) -> Any:
    try:
        return row[index]
    except IndexError as err:
        raise DatabaseError(f"column {index} is missing") from err


def _int_col(row: Sequence[Any], index: int, optional: bool = False) -> int | None:
    value = _column(row, index)
    if value is None and optional:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise DatabaseError(f"column {index}: expected unsigned integer, got {value!r}")
    return value


def _float_col(row: Sequence[Any], index: int) -> float:
    value = _column(row, index)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DatabaseError(f"column {index}: expected real, got {value!r}")
    return float(value)


def _str_col(row: Sequence[Any], index: int, optional: bool = False) -> str | None:
    value = _column(row, index)
    if value is None and optional:
        return None
    if not isinstance(value, str):
        raise DatabaseError(f"column {index}: expected text, got {value!r}")
    return value


def _bool_col(row: Sequence[Any], index: int) -> bool:
    value = _column(row, index)
    if isinstance(value, bool):
        return value
    if not isinstance(value, int):
        raise DatabaseError(f"column {index}: expected integer, got {value!r}")
    return value != 0


def _enum_col(row: Sequence[Any], index: int, kind: type[enum.IntEnum], optional: bool = False):
    value = _column(row, index)
    if value is None and optional:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise DatabaseError(f"column {index}: expected integer, got {value!r}")
    try:
        return kind(value)
    except ValueError as err:
        raise DatabaseError(f"column {index}: {value} out of range") from err


def _string_list(text: str) -> list[str]:
    try:
        return parse_and_trim_json_strings(text)
    except ValueError:
        return []


def _ban_ids(text: str | None) -> list[str] | None:
    if text is None:
        return None
    try:
        value = json.loads(text)
    except ValueError:
        return None
    if isinstance(value, list) and all(isinstance(item, str) for item in value):
        return value
    return None


# --- mapping readers ------------------------------------------------------


def _mapping(data: Any) -> dict:
    if not isinstance(data, dict):
        raise ValueError("expected a JSON object")
    return data


def _require(data: dict, key: str) -> Any:
    if key not in data:
        raise ValueError(f"missing field `{key}`")
    return data[key]


def _dict_int(data: dict, key: str) -> int:
    value = _require(data, key)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"invalid value for `{key}`: expected unsigned integer")
    return value


def _dict_str(data: dict, key: str, optional: bool = False) -> str | None:
    value = data.get(key) if optional else _require(data, key)
    if value is None and optional:
        return None
    if not isinstance(value, str):
        raise ValueError(f"invalid value for `{key}`: expected string")
    return value


def _dict_bool(data: dict, key: str) -> bool:
    value = _require(data, key)
    if not isinstance(value, bool):
        raise ValueError(f"invalid value for `{key}`: expected boolean")
    return value


def _dict_enum(data: dict, key: str, kind: type[enum.IntEnum]):
    value = _dict_int(data, key)
    try:
        return kind(value)
    except ValueError as err:
        raise ValueError(f"invalid value for `{key}`: {value}") from err


# --- records --------------------------------------------------------------


@dataclass
class DatabasePlayer:
    player_id: int
    steam_id: str
    usernames: list[str]
    ips: list[str]
    first_join_date: datetime
    times_joined: int
    last_join_date: datetime
    hours_played: float
    verification_key: str | None = None
    verified_status: PlayerVerification | None = None
    verified_date: datetime | None = None
    discord_id: str | None = None
    ban_ids: list[str] | None = None
    do_not_track: bool = False
    rank_id: int | None = None
    supporter_id: int | None = None
    email_address: str | None = None

    @classmethod
    def from_row(cls, row: Sequence[Any]) -> DatabasePlayer:
        """Build a player from a row of the Player table, in column order."""
        return cls(
            player_id=_int_col(row, 0),
            steam_id=_str_col(row, 1),
            usernames=_string_list(_str_col(row, 2)),
            ips=_string_list(_str_col(row, 3)),
            first_join_date=_date_or_now(_str_col(row, 4)),
            times_joined=_int_col(row, 5),
            last_join_date=_date_or_now(_str_col(row, 6)),
            hours_played=_float_col(row, 7),
            verification_key=_str_col(row, 8, optional=True),
            verified_status=_enum_col(row, 9, PlayerVerification, optional=True),
            verified_date=parse_rfc3339_to_utc_or_none(_str_col(row, 10, optional=True)),
            discord_id=_str_col(row, 11, optional=True),
            do_not_track=_bool_col(row, 12),
            ban_ids=_ban_ids(_str_col(row, 13, optional=True)),
            rank_id=_int_col(row, 14, optional=True),
            supporter_id=_int_col(row, 15, optional=True),
            email_address=_str_col(row, 16, optional=True),
        )

    def is_verified(self) -> bool:
        return self.verified_status in (PlayerVerification.SUCCESS, PlayerVerification.FULL)

    def is_verification_banned(self) -> bool:
        return self.verified_status in (
            PlayerVerification.BANNED,
            PlayerVerification.SUSPENDED,
        )

    def to_dict(self) -> dict:
        return {
            "player_id": self.player_id,
            "steam_id": self.steam_id,
            "usernames": list(self.usernames),
            "ips": list(self.ips),
            "first_join_date": _json_date(self.first_join_date),
            "times_joined": self.times_joined,
            "last_join_date": _json_date(self.last_join_date),
            "hours_played": self.hours_played,
            "verification_key": self.verification_key,
            "verified_status": None if self.verified_status is None else int(self.verified_status),
            "verified_date": None if self.verified_date is None else _json_date(self.verified_date),
            "discord_id": self.discord_id,
            "ban_ids": None if self.ban_ids is None else list(self.ban_ids),
            "do_not_track": self.do_not_track,
            "rank_id": self.rank_id,
            "supporter_id": self.supporter_id,
            "email_address": self.email_address,
        }


@dataclass
class DatabasePlayerCount:
    timestamp: int
    player_count: int
    server_id: int = 0

    @classmethod
    def from_row(cls, row: Sequence[Any]) -> DatabasePlayerCount:
        try:
            server_id = _int_col(row, 2)
        except DatabaseError:
            server_id = 0
        return cls(timestamp=_int_col(row, 0), player_count=_int_col(row, 1), server_id=server_id)

    @classmethod
    def from_dict(cls, data: Any) -> DatabasePlayerCount:
        data = _mapping(data)
        return cls(
            timestamp=_dict_int(data, "timestamp"),
            player_count=_dict_int(data, "player_count"),
            server_id=_dict_int(data, "server_id"),
        )

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp,
            "player_count": self.player_count,
            "server_id": self.server_id,
        }


@dataclass
class DatabasePlayerVerification:
    player_id: int
    steam_id: str
    verification_key: str | None
    verified_status: PlayerVerification | None
    verified_date: datetime | None
    discord_id: str | None
    is_considered_verified: bool

    @classmethod
    def from_player(cls, player: DatabasePlayer) -> DatabasePlayerVerification:
        return cls(
            player_id=player.player_id,
            steam_id=player.steam_id,
            verification_key=player.verification_key,
            verified_status=player.verified_status,
            verified_date=player.verified_date,
            discord_id=player.discord_id,
            is_considered_verified=player.is_verified(),
        )

    def to_dict(self) -> dict:
        return {
            "player_id": self.player_id,
            "steam_id": self.steam_id,
            "verification_key": self.verification_key,
            "verified_status": None if self.verified_status is None else int(self.verified_status),
            "verified_date": None if self.verified_date is None else _json_date(self.verified_date),
            "discord_id": self.discord_id,
            "is_considered_verified": self.is_considered_verified,
        }


@dataclass
class DatabaseModifyPlayerVerification:
    player_id: int
    steam_id: str
    verified_status: PlayerVerification
    discord_id: str | None = None
    code: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> DatabaseModifyPlayerVerification:
        data = _mapping(data)
        return cls(
            player_id=_dict_int(data, "player_id"),
            steam_id=_dict_str(data, "steam_id"),
            verified_status=_dict_enum(data, "verified_status", PlayerVerification),
            discord_id=_dict_str(data, "discord_id", optional=True),
            code=_dict_str(data, "code", optional=True),
        )


@dataclass
class DatabasePlayerJoin:
    username: str
    steam_id: str
    ip_addr: str
    do_not_track: bool

    @classmethod
    def from_dict(cls, data: Any) -> DatabasePlayerJoin:
        data = _mapping(data)
        return cls(
            username=_dict_str(data, "username"),
            steam_id=_dict_str(data, "steam_id"),
            ip_addr=_dict_str(data, "ip_addr"),
            do_not_track=_dict_bool(data, "do_not_track"),
        )


@dataclass
class DatabasePunishment:
    punishment_id: str
    player_id: int
    username: str
    steam_id: str
    ip: str
    reason: str
    punishment_duration: int
    punishment_created_at: datetime
    issuer_steam_id: str
    issuer_name: str
    issuer_ip: str
    punishment_type: PunishmentType

    @classmethod
    def from_row(cls, row: Sequence[Any]) -> DatabasePunishment:
        """Build a punishment from a row of the Punishment table, in column order."""
        return cls(
            punishment_id=_str_col(row, 0),
            player_id=_int_col(row, 1),
            username=_str_col(row, 2),
            steam_id=_str_col(row, 3),
            ip=_str_col(row, 4),
            reason=_str_col(row, 5),
            punishment_duration=_int_col(row, 6),
            punishment_created_at=_date_or_now(_str_col(row, 7)),
            issuer_steam_id=_str_col(row, 8),
            issuer_name=_str_col(row, 9),
            issuer_ip=_str_col(row, 10),
            punishment_type=_enum_col(row, 11, PunishmentType),
        )

    def to_dict(self) -> dict:
        return {
            "punishment_id": self.punishment_id,
            "player_id": self.player_id,
            "username": self.username,
            "steam_id": self.steam_id,
            "ip": self.ip,
            "reason": self.reason,
            "punishment_duration": self.punishment_duration,
            "punishment_created_at": _json_date(self.punishment_created_at),
            "issuer_steam_id": self.issuer_steam_id,
            "issuer_name": self.issuer_name,
            "issuer_ip": self.issuer_ip,
            "punishment_type": int(self.punishment_type),
        }


@dataclass
class LeaderboardRecord:
    player_id: int
    kind: LeaderboardRecordType
    value: float
    date_time: datetime

    @classmethod
    def from_row(cls, row: Sequence[Any]) -> LeaderboardRecord:
        """Build a record from a row of the Leaderboard table, in column order."""
        return cls(
            player_id=_int_col(row, 0),
            kind=_enum_col(row, 1, LeaderboardRecordType),
            value=_float_col(row, 2),
            date_time=_date_or_now(_str_col(row, 3)),
        )

    def to_dict(self) -> dict:
        return {
            "player_id": self.player_id,
            "type": int(self.kind),
            "value": self.value,
            "date_time": _json_date(self.date_time),
        }