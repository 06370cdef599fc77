"""Opens the set of databases the application works with."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from district.config import ConfigDatabases
from district.leaderboard_db import LeaderboardDatabase
from district.logger import log_error
from district.player_db import PlayerDatabase
from district.punishment_db import PunishmentDatabase


@dataclass
class DatabaseHandler:
    player_database: PlayerDatabase
    punishment_database: PunishmentDatabase
    leaderboard_database: LeaderboardDatabase | None = None

    @classmethod
    def create(cls, cfg: ConfigDatabases, directory: str | Path = "./db") -> DatabaseHandler:
        """Open every database in ``directory``, creating it if needed.

        The leaderboard database is opened only when ``cfg.leaderboards`` is set.
        """
        directory = Path(directory)
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as err:
            log_error(f"Couldn't create db folder: {err}")
            raise
        leaderboards = (
            LeaderboardDatabase.setup(directory / "leaderboards.db") if cfg.leaderboards else None
        )
        return cls(
            player_database=PlayerDatabase.setup(directory / "players.db"),
            punishment_database=PunishmentDatabase.setup(directory / "punishments.db"),
            leaderboard_database=leaderboards,
        )

    def close(self) -> None:
        self.player_database.close()
        self.punishment_database.close()
        if self.leaderboard_database is not None:
            self.leaderboard_database.close()

    def __enter__(self) -> DatabaseHandler:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()