"""SQLite store of punishments handed out to players."""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Any

from district.logger import log_debug, log_error
from district.models import DatabasePunishment, RecordNotFound, _rfc3339

_CREATE_TABLE = """CREATE TABLE IF NOT EXISTS Punishment (
    punishment_id VARCHAR(9) PRIMARY KEY NOT NULL,
    player_id INTEGER NOT NULL,
    username TEXT,
    steam_id TEXT,
    ip TEXT,
    reason TEXT,
    punishment_duration INTEGER,
    punishment_created_at DATETIME,
    issuer_steam_id TEXT,
    issuer_name TEXT,
    issuer_ip TEXT,
    punishment_type INTEGER
);"""


class PunishmentDatabase:
    """Punishment table in its own SQLite file."""

    def __init__(self, path: str, conn: sqlite3.Connection) -> None:
        self.path = path
        self._conn = conn

    @classmethod
    def setup(cls, db_path: str | Path) -> PunishmentDatabase:
        """Open the database file and make sure its table exists."""
        log_debug("Starting 'Punishment' database")
        try:
            conn = sqlite3.connect(db_path, isolation_level=None, check_same_thread=False)
        except sqlite3.Error as err:
            log_error(f"Database 'Punishment' threw error while opening: {err}")
            raise
        try:
            conn.execute(_CREATE_TABLE)
        except sqlite3.Error as err:
            log_error(
                f"Database 'Punishment' threw error while creating table 'Punishment': {err}"
            )
            conn.close()
            raise
        return cls(str(db_path), conn)

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> PunishmentDatabase:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _select(self, where: str = "", params: tuple[Any, ...] = ()) -> list[DatabasePunishment]:
        sql = "SELECT * FROM Punishment" + (f" WHERE {where}" if where else "")
        return [DatabasePunishment.from_row(row) for row in self._conn.execute(sql, params)]

    def get_all_punishments(self) -> list[DatabasePunishment]:
        return self._select()

    def get_punishment_by_punishment_id(self, punishment_id: str) -> DatabasePunishment:
        """The punishment with this id; raise RecordNotFound if there is none."""
        found = self._select("punishment_id = ?", (punishment_id,))
        if not found:
            raise RecordNotFound(f"no punishment '{punishment_id}'")
        return found[0]

    def get_punishments_by_player_id(self, player_id: int) -> list[DatabasePunishment]:
        return self._select("player_id = ?", (player_id,))

    def get_punishments_by_steam_id(self, steam_id: str) -> list[DatabasePunishment]:
        return self._select("steam_id = ?", (steam_id,))

    def get_punishments_by_ip(self, ip: str) -> list[DatabasePunishment]:
        return self._select("ip = ?", (ip,))

    def get_punishments_from_steam_id(self, steam_id: str) -> list[DatabasePunishment]:
        """Punishments issued by the given steam id."""
        return self._select("issuer_steam_id = ?", (steam_id,))

    def create_new_punishment(self, data: DatabasePunishment) -> None:
        self._conn.execute(
            "INSERT INTO Punishment (punishment_id, player_id, username, steam_id, ip, reason, "
            "punishment_duration, punishment_created_at, issuer_steam_id, issuer_name, "
            "issuer_ip, punishment_type) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (
                data.punishment_id,
                data.player_id,
                data.username,
                data.steam_id,
                data.ip,
                data.reason,
                data.punishment_duration,
                _rfc3339(data.punishment_created_at),
                data.issuer_steam_id,
                data.issuer_name,
                data.issuer_ip,
                int(data.punishment_type),
            ),
        )