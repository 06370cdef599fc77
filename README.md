# district

`district` is a library for the back end of a game server. It records who
plays on the server, which punishments they have received and how they score.
It also relays the server's log events to a chat channel in batches. Storage
uses SQLite from the standard library. The package has no third-party
dependencies.

## Modules

- `district.config`: `ConfigApp` holds the whole setup. That covers the
  listen address and port, the auth strings (`ConfigAuth`), the main bot
  (`ConfigBot` or `ServerBotConfig`), the game servers (`ConfigServer`) and
  the database options (`ConfigDatabases`).
  - `ConfigApp.create()` returns the defaults: port 9005, address `0.0.0.0`,
    language file `./lang.json`, no servers and leaderboards off.
  - `save_to_json` writes the config as JSON indented by two spaces.
    `load_from_json` reads it back and raises `ValueError` if the content is
    invalid.
  - `PresenceConfig.into_presence()` turns a presence entry into a
    `Presence` with an `Activity` and an `OnlineStatus`.
- `district.models` defines the record types:
  - `DatabasePlayer` and `DatabasePunishment` for the stored rows,
  - `LeaderboardRecord`, `DatabasePlayerCount` and
    `DatabasePlayerVerification` for the other records,
  - the enums `PlayerVerification`, `PunishmentType` and
    `LeaderboardRecordType`,
  - the errors `DatabaseError`, `RecordNotFound` and `InvalidQuery`.
- `district.player_db`: `PlayerDatabase` records joins by Steam ID and
  counts them. For each player it keeps the usernames and IP addresses
  used, the play time and the verification state. It removes players who
  have been inactive for a number of days, leaving verified ones alone.
  It also stores the player-count history.
- `district.punishment_db`: `PunishmentDatabase` stores bans, kicks and
  mutes. You can look them up by punishment ID, player ID, Steam ID, IP
  address or issuer Steam ID.
- `district.leaderboard_db`: `LeaderboardDatabase` stores per-player
  statistics with a timestamp. The statistics are play time, kills, deaths,
  wins, losses and assists.
- `district.database_handler`: `DatabaseHandler.create(cfg, directory)`
  opens `players.db` and `punishments.db` in `directory`, creating the
  directory if needed. It opens `leaderboards.db` only when
  `cfg.leaderboards` is set.
- `district.server`: `DistrictServer` is one configured game server, with
  its `DistrictServerStatus` and a queue of outgoing log lines.
  - `send_message` queues a line. It sends the queue through the `sender`
    callable once at least two seconds have passed since the last send.
  - `combine_messages` merges repeated lines into `line xN` and orders the
    lines by their first 14 characters. When there are more than 20 lines it
    keeps only the last 15.
- `district.logs`: `render_log_message` looks up `logs.<translation>` in the
  translations. If the key is missing, the key itself is used as the text;
  if the translation is empty, nothing is produced. The function puts a
  Discord timestamp in front and fills in `{name}` placeholders.
  `handle_log_with_data` renders a line and queues it on a server.
- `district.search`: `search_by_criterion` filters players by player ID,
  Steam ID, username or IP address, by exact match or by substring.
- `district.application`: `Application` ties it all together (see below).
- `district.ws_handlers`: `ws_log_with_translation` and
  `ws_stats_add_to_player` handle the two kinds of message a game server
  sends. Each returns a reply text or raises `WsHandlerError`.
- `district.responses`: websocket reply objects (`basic_response`,
  `message_response`, `command_response`) and the JSON bodies of plain HTTP
  replies.
- `district.lang`, `district.utils` and `district.logger` hold the language
  files, the date and JSON helpers, and the coloured console logging.

## Using it

```python
from district.config import ConfigApp
from district.database_handler import DatabaseHandler

config = ConfigApp.create()
config.save_to_json("config.json")

with DatabaseHandler.create(config.databases, "./db") as databases:
    for player in databases.player_database.get_all_players():
        print(player.player_id, player.steam_id, player.usernames)
```

### Recording joins and stats

```python
from datetime import datetime, timezone
from pathlib import Path

from district.leaderboard_db import LeaderboardDatabase
from district.models import DatabasePlayerJoin, LeaderboardRecordType
from district.player_db import PlayerDatabase

Path("./db").mkdir(exist_ok=True)

with PlayerDatabase.setup("./db/players.db") as players, \
        LeaderboardDatabase.setup("./db/leaderboards.db") as board:
    player = players.player_joined(
        DatabasePlayerJoin.from_dict(
            {"username": "Alice", "steam_id": "steam-alice", "ip_addr": "192.0.2.1",
             "do_not_track": False}
        )
    )
    board.add_stat_to_player(
        player.player_id, LeaderboardRecordType.KILLS, 3.0, datetime.now(timezone.utc)
    )
    print(board.get_all_from_player(player.player_id))
```

### Rendering log lines

```python
from district.logs import parse_log_data, render_log_message

translations = {"logs.player.join": "{name} joined the server"}
text = render_log_message(translations, "player.join", parse_log_data({"name": "Alice"}))
```

### The application

`Application.setup(config_path=None, db_directory="./db", sender=None)`
does the following:

1. Loads the configuration. If the file does not exist, it writes a default
   one. When no path is given, it takes the path from the `DISTRICT_CONFIG`
   environment variable, and falls back to `./config.json`.
2. Creates the language file if it is missing, then reads it.
3. Opens the databases.
4. Builds one `DistrictServer` per configured server.

`sender(channel_id, text)` is called to post a batch of log lines. Without
a sender, batches are formed and then dropped.

`Application.run_timer(stop_event)` ticks once a second until
`stop_event` is set:

- Every 20 ticks it calls `check_servers`. A server that has been silent for
  more than 500 seconds has its player count reset to zero. After more than
  1000 seconds it is also marked closed. Pending log lines are flushed.
- Every 3600 ticks it calls `clear_inactive_players`, using the day counts
  `player_db_auto_clear_strict` and `player_db_auto_clear_normal`. The
  strict count removes only players who asked not to be tracked.

## Configuration file

The config is a JSON object with these keys:

- `server_port` and `server_address`,
- `auth`, with `db`, `log` and `ws`,
- `main_bot`,
- `lang_path`,
- `servers`, each with `id`, `name`, `channel_id` and `bot`,
- `databases`, with `player_db_auto_clear_normal`,
  `player_db_auto_clear_strict` and `leaderboards`.

## What this package does not do

- It runs no HTTP or websocket server. The reply bodies and the message
  handlers are there, but listening for connections, checking the auth
  strings against requests and routing requests are up to the caller.
- It does not connect to a chat service and runs no bot. Posting to a
  channel goes through the `sender` callable you pass in. The bot settings
  in the config are only read and stored.
- It installs no command-line program.