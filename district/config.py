"""Application configuration: data classes, JSON loading and saving."""

from __future__ import annotations

import dataclasses
import enum
import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Union
from urllib.parse import urlsplit

from district.logger import log_error, log_warning

_STREAMING_ACTIVITY = 1
_URL_SCHEME = re.compile(r"[A-Za-z][A-Za-z0-9+.\-]*")


class OnlineStatus(enum.Enum):
    DO_NOT_DISTURB = "dnd"
    IDLE = "idle"
    INVISIBLE = "invisible"
    OFFLINE = "offline"
    ONLINE = "online"

    @classmethod
    def parse(cls, text: str) -> OnlineStatus:
        """Map a config status word to a status; anything unknown means online."""
        try:
            return cls(text)
        except ValueError:
            return cls.ONLINE


@dataclass(frozen=True)
class Activity:
    name: str
    kind: int
    state: str | None = None
    url: str | None = None


@dataclass(frozen=True)
class Presence:
    activity: Activity | None
    status: OnlineStatus


@dataclass
class ConfigAuth:
    db: str
    log: str
    ws: str


@dataclass
class ConfigDatabases:
    player_db_auto_clear_normal: int | None = None
    player_db_auto_clear_strict: int | None = None
    leaderboards: bool = False


@dataclass
class ConfigBotCommands:
    info_command: int | None = None
    db_search: int | None = None
    send_command: int | None = None


def _parse_url(url: str) -> str | None:
    scheme, sep, _ = url.partition(":")
    if not sep or not _URL_SCHEME.fullmatch(scheme):
        return None
    try:
        urlsplit(url)
    except ValueError:
        return None
    return url


@dataclass
class PresenceConfig:
    status: str
    kind: int
    name: str
    url: str

    def into_presence(self) -> Presence:
        activity = Activity(
            name=self.name, kind=self.kind, state=self.name, url=_parse_url(self.url)
        )
        return Presence(activity=activity, status=OnlineStatus.parse(self.status))


@dataclass
class ConfigBot:
    token: str
    active_guild_id: int
    default_presence: PresenceConfig | None = None
    commands: ConfigBotCommands = field(default_factory=ConfigBotCommands)


@dataclass
class ServerBotConfig:
    token: str
    active_guild_id: int
    use_presence: bool | None = None
    default_presence: PresenceConfig | None = None
    active_presence: PresenceConfig | None = None
    commands: ConfigBotCommands = field(default_factory=ConfigBotCommands)


BotConfig = Union[ConfigBot, ServerBotConfig]


@dataclass
class ConfigServer:
    id: int
    name: str
    channel_id: str
    bot: BotConfig


# --- field readers -------------------------------------------------------


def _object(value: Any, what: str) -> dict:
    if not isinstance(value, dict):
        raise ValueError(f"invalid type for {what}: expected object")
    return value


def _require(data: dict, key: str) -> Any:
    if key not in data:
        raise ValueError(f"missing field `{key}`")
    return data[key]


def _int(data: dict, key: str, bits: int, optional: bool = False) -> int | None:
    value = data.get(key) if optional else _require(data, key)
    if value is None and optional:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"invalid type for `{key}`: expected integer")
    if not 0 <= value < 1 << bits:
        raise ValueError(f"`{key}` out of range: {value}")
    return value


def _str(data: dict, key: str) -> str:
    value = _require(data, key)
    if not isinstance(value, str):
        raise ValueError(f"invalid type for `{key}`: expected string")
    return value


def _bool(data: dict, key: str, optional: bool = False) -> bool | None:
    value = data.get(key) if optional else _require(data, key)
    if value is None and optional:
        return None
    if not isinstance(value, bool):
        raise ValueError(f"invalid type for `{key}`: expected boolean")
    return value


def _auth(data: Any) -> ConfigAuth:
    data = _object(data, "auth")
    return ConfigAuth(db=_str(data, "db"), log=_str(data, "log"), ws=_str(data, "ws"))


def _databases(data: Any) -> ConfigDatabases:
    data = _object(data, "databases")
    return ConfigDatabases(
        player_db_auto_clear_normal=_int(data, "player_db_auto_clear_normal", 32, True),
        player_db_auto_clear_strict=_int(data, "player_db_auto_clear_strict", 32, True),
        leaderboards=_bool(data, "leaderboards"),
    )


def _commands(data: Any) -> ConfigBotCommands:
    data = _object(data, "commands")
    return ConfigBotCommands(
        info_command=_int(data, "info_command", 64, True),
        db_search=_int(data, "db_search", 64, True),
        send_command=_int(data, "send_command", 64, True),
    )


def _presence(data: dict, key: str) -> PresenceConfig | None:
    value = data.get(key)
    if value is None:
        return None
    value = _object(value, key)
    return PresenceConfig(
        status=_str(value, "status"),
        kind=_int(value, "kind", 8),
        name=_str(value, "name"),
        url=_str(value, "url"),
    )


def _config_bot(data: dict) -> ConfigBot:
    return ConfigBot(
        token=_str(data, "token"),
        active_guild_id=_int(data, "active_guild_id", 64),
        default_presence=_presence(data, "default_presence"),
        commands=_commands(_require(data, "commands")),
    )


def _server_bot_config(data: dict) -> ServerBotConfig:
    return ServerBotConfig(
        token=_str(data, "token"),
        active_guild_id=_int(data, "active_guild_id", 64),
        use_presence=_bool(data, "use_presence", True),
        default_presence=_presence(data, "default_presence"),
        active_presence=_presence(data, "active_presence"),
        commands=_commands(_require(data, "commands")),
    )


def parse_bot_config(data: Any) -> BotConfig:
    """Read a bot config; the first shape that fits wins, plain bot first."""
    data = _object(data, "bot")
    for parser in (_config_bot, _server_bot_config):
        try:
            return parser(data)
        except ValueError:
            continue
    raise ValueError("data did not match any variant of BotConfig")


def _server(data: Any) -> ConfigServer:
    data = _object(data, "server")
    return ConfigServer(
        id=_int(data, "id", 64),
        name=_str(data, "name"),
        channel_id=_str(data, "channel_id"),
        bot=parse_bot_config(_require(data, "bot")),
    )


@dataclass
class ConfigApp:
    server_port: int
    server_address: str
    auth: ConfigAuth
    main_bot: BotConfig
    lang_path: str
    servers: list[ConfigServer]
    databases: ConfigDatabases

    @classmethod
    def create(cls) -> ConfigApp:
        """A fresh default configuration."""
        return cls(
            server_port=9005,
            server_address="0.0.0.0",
            auth=ConfigAuth(db="", log="", ws=""),
            main_bot=ConfigBot(
                token="",
                active_guild_id=0,
                default_presence=PresenceConfig(
                    status="dnd",
                    kind=_STREAMING_ACTIVITY,
                    name="DISTRICT SERVER",
                    url="https://example.com",
                ),
                commands=ConfigBotCommands(),
            ),
            lang_path="./lang.json",
            servers=[],
            databases=ConfigDatabases(),
        )

    def to_dict(self) -> dict:
        return dataclasses.asdict(self)

    @classmethod
    def from_dict(cls, data: Any) -> ConfigApp:
        data = _object(data, "config")
        servers = _require(data, "servers")
        if not isinstance(servers, list):
            raise ValueError("invalid type for `servers`: expected array")
        return cls(
            server_port=_int(data, "server_port", 16),
            server_address=_str(data, "server_address"),
            auth=_auth(_require(data, "auth")),
            main_bot=parse_bot_config(_require(data, "main_bot")),
            lang_path=_str(data, "lang_path"),
            servers=[_server(item) for item in servers],
            databases=_databases(_require(data, "databases")),
        )

    def save_to_json(self, filename: str | Path) -> None:
        Path(filename).write_text(json.dumps(self.to_dict(), indent=2), encoding="utf-8")

    @classmethod
    def load_from_json(cls, filename: str | Path) -> ConfigApp:
        """Load a config file; raise ValueError when its content is invalid."""
        text = Path(filename).read_text(encoding="utf-8")
        try:
            return cls.from_dict(json.loads(text))
        except ValueError as err:
            log_error(f"Error while loading config: {err}")
            log_warning("Please check the config file against the expected layout.")
            raise