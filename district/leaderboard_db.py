"""SQLite store of player statistics for leaderboards."""

from __future__ import annotations

import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Any

from district.logger import log_debug, log_error
from district.models import LeaderboardRecord, LeaderboardRecordType, _rfc3339

_CREATE_TABLE = """CREATE TABLE IF NOT EXISTS Leaderboard (
    player_id INT,
    type TINYINT,
    value FLOAT,
    date_time DATETIME
);"""


class LeaderboardDatabase:
    """Leaderboard table in its own SQLite file."""

    def __init__(self, path: str, conn: sqlite3.Connection) -> None:
        self.path = path
        self._conn = conn

    @classmethod
    def setup(cls, db_path: str | Path) -> LeaderboardDatabase:
        """Open the database file and make sure its table exists."""
        log_debug("Starting 'Leaderboard' database")
        try:
            conn = sqlite3.connect(db_path, isolation_level=None, check_same_thread=False)
        except sqlite3.Error as err:
            log_error(f"Database 'Leaderboard' threw error while opening: {err}")
            raise
        try:
            conn.execute(_CREATE_TABLE)
        except sqlite3.Error as err:
            log_error(
                f"Database 'Leaderboard' threw error while creating table 'Leaderboard': {err}"
            )
            conn.close()
            raise
        return cls(str(db_path), conn)

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> LeaderboardDatabase:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _select(self, where: str = "", params: tuple[Any, ...] = ()) -> list[LeaderboardRecord]:
        sql = "SELECT * FROM Leaderboard" + (f" WHERE {where}" if where else "")
        return [LeaderboardRecord.from_row(row) for row in self._conn.execute(sql, params)]

    def get_all_data(self) -> list[LeaderboardRecord]:
        return self._select()

    def get_all_by_type(self, kind: LeaderboardRecordType | int) -> list[LeaderboardRecord]:
        return self._select("type = ?", (int(LeaderboardRecordType(kind)),))

    def get_all_from_player(self, player_id: int) -> list[LeaderboardRecord]:
        return self._select("player_id = ?", (player_id,))

    def get_all_from_player_by_type(
        self, player_id: int, kind: LeaderboardRecordType | int
    ) -> list[LeaderboardRecord]:
        return self._select(
            "player_id = ? AND type = ?", (player_id, int(LeaderboardRecordType(kind)))
        )

    def add_stat_to_player(
        self,
        player_id: int,
        kind: LeaderboardRecordType | int,
        value: float,
        date_time: datetime,
    ) -> None:
        self._conn.execute(
            "INSERT INTO Leaderboard (player_id, type, value, date_time) VALUES (?, ?, ?, ?)",
            (player_id, int(LeaderboardRecordType(kind)), float(value), _rfc3339(date_time)),
        )

    def remove_from_player_by_date(self, player_id: int, date_time: datetime) -> None:
        """Delete the player's records stamped with exactly this time."""
        self._conn.execute(
            "DELETE FROM Leaderboard WHERE player_id = ? AND date_time = ?",
            (player_id, _rfc3339(date_time)),
        )

    def clear_all_from_player(self, player_id: int) -> None:
        self._conn.execute("DELETE FROM Leaderboard WHERE player_id = ?", (player_id,))

    def clear_all_from_player_by_type(
        self, player_id: int, kind: LeaderboardRecordType | int
    ) -> None:
        self._conn.execute(
            "DELETE FROM Leaderboard WHERE player_id = ? AND type = ?",
            (player_id, int(LeaderboardRecordType(kind))),
        )