"""SQLite store of players, their verification state and player counts."""

from __future__ import annotations

import json
import random
import sqlite3
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Iterator

from district.logger import log_debug, log_error
from district.models import (
    DatabaseModifyPlayerVerification,
    DatabasePlayer,
    DatabasePlayerCount,
    DatabasePlayerJoin,
    DatabasePlayerVerification,
    InvalidQuery,
    PlayerVerification,
    RecordNotFound,
    _rfc3339,
)

_MIN_PLAYER_ID = 3202036800000000
_MAX_PLAYER_ID = 3923372036854775807

_CREATE_PLAYER_TABLE = """CREATE TABLE IF NOT EXISTS Player (
    player_id INT PRIMARY KEY,
    steam_id VARCHAR(255),
    usernames TEXT,
    ips TEXT,
    first_join_date DATETIME,
    times_joined INT,
    last_join_date DATETIME,
    hours_played FLOAT,
    verification_key VARCHAR(20),
    verified_status TINYINT,
    verified_date DATETIME,
    discord_id TEXT,
    do_not_track INT,
    ban_ids TEXT,
    rank_id INT,
    supporter_id INT,
    email_address VARCHAR(255)
);"""

_CREATE_COUNT_TABLE = """CREATE TABLE IF NOT EXISTS PlayerCount (
    timestamp INT PRIMARY KEY,
    player_count INT,
    server_id INT
);"""

_UPDATE_PLAYER = """UPDATE Player
SET steam_id = ?,
    usernames = ?,
    ips = ?,
    first_join_date = ?,
    times_joined = ?,
    last_join_date = ?,
    hours_played = ?,
    verification_key = ?,
    verified_status = ?,
    verified_date = ?,
    discord_id = ?,
    ban_ids = ?,
    rank_id = ?,
    do_not_track = ?,
    supporter_id = ?,
    email_address = ?
WHERE player_id = ?"""

_UPDATE_VERIFICATION = """UPDATE Player
SET verification_key = ?,
    verified_status = ?,
    verified_date = ?,
    discord_id = ?
WHERE player_id = ?"""


def _compact_json(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def _quoted(values: list[str]) -> list[str]:
    return [f"'{value.replace(chr(39), '')}'" for value in values]


class PlayerDatabase:
    """Player and PlayerCount tables in their own SQLite file."""

    def __init__(self, path: str, conn: sqlite3.Connection) -> None:
        self.path = path
        self._conn = conn

    @classmethod
    def setup(cls, db_path: str | Path) -> PlayerDatabase:
        """Open the database file and make sure its tables exist."""
        log_debug("Starting 'Player' database")
        try:
            conn = sqlite3.connect(db_path, isolation_level=None, check_same_thread=False)
        except sqlite3.Error as err:
            log_error(f"Database 'Player' threw error while opening: {err}")
            raise
        for table, statement in (("Player", _CREATE_PLAYER_TABLE), ("PlayerCount", _CREATE_COUNT_TABLE)):
            try:
                conn.execute(statement)
            except sqlite3.Error as err:
                log_error(
                    f"Database 'Player' threw error while creating table '{table}': {err}"
                )
                conn.close()
                raise
        return cls(str(db_path), conn)

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> PlayerDatabase:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        self._conn.execute("BEGIN")
        try:
            yield self._conn
        except BaseException:
            self._conn.execute("ROLLBACK")
            raise
        self._conn.execute("COMMIT")

    def _select(self, where: str = "", params: tuple[Any, ...] = ()) -> list[DatabasePlayer]:
        sql = "SELECT * FROM Player" + (f" WHERE {where}" if where else "")
        return [DatabasePlayer.from_row(row) for row in self._conn.execute(sql, params)]

    # --- players ----------------------------------------------------------

    def add_player(
        self,
        steam_id: str,
        username: str,
        ip_addr: str,
        do_not_track: bool,
        first_join: datetime,
    ) -> None:
        """Insert a new player under a random id, joined once at ``first_join``."""
        player_id = random.randint(_MIN_PLAYER_ID, _MAX_PLAYER_ID)
        joined = _rfc3339(first_join)
        self._conn.execute(
            "INSERT INTO Player (player_id, steam_id, usernames, ips, first_join_date, "
            "times_joined, last_join_date, hours_played, verified_status, ban_ids, do_not_track) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (
                player_id,
                steam_id,
                f'["{username}"]',
                f'["{ip_addr}"]',
                joined,
                1,
                joined,
                0,
                int(PlayerVerification.NONE),
                "[]",
                int(do_not_track),
            ),
        )

    def get_player_by_id(self, player_id: int) -> DatabasePlayer:
        """The player with this id; raise RecordNotFound if there is none."""
        found = self._select("player_id = ?", (player_id,))
        if not found:
            raise RecordNotFound(f"no player {player_id}")
        return found[0]

    def get_all_players(self) -> list[DatabasePlayer]:
        return self._select()

    def get_players_by_steam(self, steam_id: str) -> list[DatabasePlayer]:
        return self._select("steam_id = ?", (steam_id,))

    def get_players_by_discord(self, discord_id: str) -> list[DatabasePlayer]:
        return self._select("discord_id = ?", (discord_id,))

    def get_player_by_discord_or_steam(
        self, discord_id: str, steam_id: str
    ) -> DatabasePlayer | None:
        """The first player matching either id, or None."""
        found = self._select("discord_id = ? OR steam_id = ?", (discord_id, steam_id))
        return found[0] if found else None

    def modify_player(self, player_id: int, data: DatabasePlayer) -> None:
        """Overwrite every stored field of the player with ``player_id``."""
        verified_date = "NULL" if data.verified_date is None else _rfc3339(data.verified_date)
        verified_status = None if data.verified_status is None else int(data.verified_status)
        ban_ids = [str(ban_id) for ban_id in (data.ban_ids or [])]
        with self._transaction() as conn:
            conn.execute(
                _UPDATE_PLAYER,
                (
                    data.steam_id,
                    _compact_json(_quoted(data.usernames)),
                    _compact_json(_quoted(data.ips)),
                    _rfc3339(data.first_join_date),
                    data.times_joined,
                    _rfc3339(data.last_join_date),
                    data.hours_played,
                    data.verification_key,
                    verified_status,
                    verified_date,
                    data.discord_id,
                    _compact_json(ban_ids),
                    data.rank_id,
                    int(data.do_not_track),
                    data.supporter_id,
                    data.email_address,
                    player_id,
                ),
            )

    def remove_inactive_players(self, days_inactive: int, do_not_track_only: bool) -> None:
        """Delete unverified players not seen for ``days_inactive`` days."""
        cutoff = _rfc3339(datetime.now(timezone.utc) - timedelta(days=days_inactive))
        sql = (
            "DELETE FROM Player WHERE last_join_date < ? "
            "AND (verified_status != 3 AND verified_status != 4)"
        )
        if do_not_track_only:
            sql += " AND do_not_track = 1"
        self._conn.execute(sql, (cutoff,))

    def add_playtime_to_player(self, player_id: int, amount: float) -> None:
        player = self.get_player_by_id(player_id)
        player.hours_played += amount
        self.modify_player(player_id, player)

    # --- verification -----------------------------------------------------

    def get_player_verification(self, player_id: int) -> DatabasePlayerVerification:
        return DatabasePlayerVerification.from_player(self.get_player_by_id(player_id))

    def add_player_verification(self, data: DatabaseModifyPlayerVerification) -> None:
        """Start verification for the player with the given steam id.

        Raise RecordNotFound if no such player exists and InvalidQuery if
        the player already has a verification in progress.
        """
        players = self.get_players_by_steam(data.steam_id)
        if not players:
            raise RecordNotFound(f"no player with steam id '{data.steam_id}'")
        player = players[0]
        status = player.verified_status
        if status is None:
            status = PlayerVerification.NONE
        if status != PlayerVerification.NONE:
            raise InvalidQuery("player already has a verification")
        self.set_player_verification(
            player.player_id, PlayerVerification.CREATED, data.discord_id, data.code
        )

    def set_player_verification(
        self,
        player_id: int,
        verified_status: PlayerVerification,
        discord_id: str | None,
        code: str | None,
    ) -> None:
        """Set the status; a missing code or discord id keeps the stored one."""
        player = self.get_player_by_id(player_id)
        if code is None:
            code = player.verification_key if player.verification_key is not None else "NULL"
        if discord_id is None:
            discord_id = player.discord_id if player.discord_id is not None else "NULL"
        with self._transaction() as conn:
            conn.execute(
                _UPDATE_VERIFICATION,
                (
                    code,
                    int(verified_status),
                    _rfc3339(datetime.now(timezone.utc)),
                    discord_id,
                    player_id,
                ),
            )

    # --- player count -----------------------------------------------------

    def get_player_count(self) -> list[DatabasePlayerCount]:
        rows = self._conn.execute("SELECT * FROM PlayerCount")
        return [DatabasePlayerCount.from_row(row) for row in rows]

    def get_player_count_from(self, from_timestamp: int) -> list[DatabasePlayerCount]:
        rows = self._conn.execute(
            "SELECT * FROM PlayerCount WHERE timestamp >= ?", (from_timestamp,)
        )
        return [DatabasePlayerCount.from_row(row) for row in rows]

    def set_player_count_auto(self, player_count: int) -> None:
        """Record ``player_count`` at the current Unix time."""
        timestamp = int(datetime.now(timezone.utc).timestamp())
        self._conn.execute(
            "INSERT INTO PlayerCount (timestamp, player_count) VALUES (?, ?)",
            (timestamp, player_count),
        )

    def set_player_count(self, count: DatabasePlayerCount) -> None:
        self._conn.execute(
            "INSERT INTO PlayerCount (timestamp, player_count) VALUES (?, ?)",
            (count.timestamp, count.player_count),
        )

    # --- joins ------------------------------------------------------------

    def player_joined(self, data: DatabasePlayerJoin) -> DatabasePlayer:
        """Record a join: update a known player or add a new one."""
        existing = self.get_players_by_steam(data.steam_id)
        if existing:
            player = replace(
                existing[0], usernames=list(existing[0].usernames), ips=list(existing[0].ips)
            )
            if data.username not in player.usernames:
                player.usernames.append(data.username)
            if data.ip_addr not in player.ips:
                player.ips.append(data.ip_addr)
            player.do_not_track = data.do_not_track
            player.times_joined += 1
            player.last_join_date = datetime.now(timezone.utc)
            self.modify_player(player.player_id, player)
            return player

        self.add_player(
            data.steam_id,
            data.username,
            data.ip_addr,
            data.do_not_track,
            datetime.now(timezone.utc),
        )
        existing = self.get_players_by_steam(data.steam_id)
        if not existing:
            raise RecordNotFound(f"no player with steam id '{data.steam_id}'")
        return existing[0]