"""The running application: configuration, translations, databases and servers."""

from __future__ import annotations

import os
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path

from district.config import ConfigApp
from district.database_handler import DatabaseHandler
from district.lang import init_lang, read_lang
from district.logger import log_debug, log_error, log_info
from district.server import DistrictServer, Sender

VERSION = "0.1.0"
DEFAULT_CONFIG_PATH = "./config.json"
CONFIG_ENV_VAR = "DISTRICT_CONFIG"

SILENCE_LIMIT = 500
DISCONNECT_LIMIT = 1000
SERVER_CHECK_EVERY = 20
PLAYER_CLEAR_EVERY = 3600


@dataclass(eq=False)
class Application:
    """Everything the service needs while it runs."""

    config: ConfigApp
    config_path: Path
    translations: dict[str, str]
    databases: DatabaseHandler | None
    servers: list[DistrictServer] = field(default_factory=list)
    lock: threading.RLock = field(default_factory=threading.RLock)

    @classmethod
    def setup(
        cls,
        config_path: str | Path | None = None,
        db_directory: str | Path = "./db",
        sender: Sender | None = None,
    ) -> Application:
        """Load or create the config, then open translations, databases and servers.

        Without ``config_path`` the DISTRICT_CONFIG environment variable or
        "./config.json" is used. ``sender(channel, text)`` posts server logs.
        """
        log_info("Starting...")
        if config_path is None:
            config_path = os.environ.get(CONFIG_ENV_VAR, DEFAULT_CONFIG_PATH)
        path = Path(config_path)

        if path.exists():
            log_debug("Config found!")
            cfg = ConfigApp.load_from_json(path)
        else:
            log_debug("Config not found! Creating new one!")
            cfg = ConfigApp.create()
            try:
                cfg.save_to_json(path)
            except OSError as err:
                log_error(f"Error when saving config: {err}")

        log_debug("Checking translations!")
        try:
            init_lang(cfg.lang_path)
        except OSError as err:
            log_error(f"Couldn't create new lang file properly: {err}")
        try:
            translations = read_lang(cfg.lang_path)
        except (OSError, ValueError) as err:
            log_error(f"Couldn't load lang file properly: {err}")
            translations = {}

        databases = DatabaseHandler.create(cfg.databases, db_directory)

        log_debug("Checking servers!")
        servers = []
        for server_cfg in cfg.servers:
            servers.append(DistrictServer.from_config(server_cfg, sender))
            log_debug(f"Added server '{server_cfg.name}'")
        log_debug("Servers added successfully!")

        log_info("App started successfully")
        return cls(
            config=cfg,
            config_path=path,
            translations=translations,
            databases=databases,
            servers=servers,
        )

    def try_get_server(self, server_id: int) -> DistrictServer:
        """The server with this id; raise LookupError if it is not configured."""
        for server in self.servers:
            if server.id == server_id:
                return server
        raise LookupError("Server not found")

    @staticmethod
    def get_version() -> str:
        return VERSION

    def check_servers(self, now: float | None = None) -> None:
        """Reset servers that went silent and flush their waiting log lines."""
        if now is None:
            now = time.time()
        with self.lock:
            for server in self.servers:
                status = server.status
                if status.last_heard is not None and status.open:
                    silent_for = int(now) - status.last_heard
                    if silent_for > SILENCE_LIMIT:
                        log_debug(
                            f"Server {server.id} did not reply in the last 500 seconds, "
                            "setting player count to 0"
                        )
                        status.player_count = 0
                        status.player_ids = None
                        if silent_for > DISCONNECT_LIMIT:
                            log_debug(
                                f"Server {server.id} did not reply in the last 1000 seconds, "
                                "disconnecting server"
                            )
                            status.open = False
                            status.last_heard = None
                server.try_clear_buffer()

    def clear_inactive_players(self) -> None:
        """Apply the configured automatic clean-up of inactive players."""
        if self.databases is None:
            return
        db_cfg = self.config.databases
        strict = db_cfg.player_db_auto_clear_strict or 0
        normal = db_cfg.player_db_auto_clear_normal or 0
        with self.lock:
            players = self.databases.player_database
            if strict:
                players.remove_inactive_players(strict, True)
            if normal:
                players.remove_inactive_players(normal, False)

    def timer_tick(self, tick: int, now: float | None = None) -> None:
        """Run the periodic work due at the ``tick``-th second."""
        if tick % SERVER_CHECK_EVERY == 0:
            self.check_servers(now)
        if tick % PLAYER_CLEAR_EVERY == 0:
            try:
                self.clear_inactive_players()
            except Exception as err:
                log_error(f"Clearing inactive players failed: {err}")

    def run_timer(self, stop_event: threading.Event) -> int:
        """Tick once a second until ``stop_event`` is set; return the ticks run."""
        log_debug("Starting timer loop!")
        tick = 0
        while True:
            tick += 1
            self.timer_tick(tick)
            if stop_event.wait(1.0):
                break
        log_info("Timer loop ended!")
        return tick

    def close(self) -> None:
        if self.databases is not None:
            self.databases.close()

    def __enter__(self) -> Application:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()