import json
import threading
from datetime import datetime, timedelta, timezone

import pytest

from district.application import Application
from district.config import ConfigApp
from district.models import PlayerVerification


def _write_config(tmp_path, servers=(), leaderboards=False, normal_clear=None):
    cfg = ConfigApp.create().to_dict()
    cfg["lang_path"] = str(tmp_path / "lang.json")
    cfg["databases"]["leaderboards"] = leaderboards
    cfg["databases"]["player_db_auto_clear_normal"] = normal_clear
    bot = dict(cfg["main_bot"])
    cfg["servers"] = [
        {"id": sid, "name": name, "channel_id": "123", "bot": bot} for sid, name in servers
    ]
    path = tmp_path / "config.json"
    path.write_text(json.dumps(cfg), encoding="utf-8")
    return path


@pytest.fixture
def app(tmp_path):
    path = _write_config(tmp_path, servers=[(7, "alpha"), (8, "beta")], normal_clear=1)
    application = Application.setup(path, tmp_path / "db", None)
    yield application
    application.close()


def test_setup_creates_default_config_and_lang(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    config_path = tmp_path / "config.json"
    application = Application.setup(config_path, tmp_path / "db", None)
    try:
        assert config_path.exists()
        assert ConfigApp.load_from_json(config_path).server_port == 9005
        assert application.translations == {"example.lang.here": "Fighting Helicopter!"}
        assert application.servers == []
        assert (tmp_path / "db" / "players.db").exists()
    finally:
        application.close()


def test_setup_loads_servers(app):
    assert [server.id for server in app.servers] == [7, 8]
    assert app.try_get_server(8).name == "beta"


def test_try_get_server_unknown(app):
    with pytest.raises(LookupError, match="Server not found"):
        app.try_get_server(99)


def test_get_version_matches_constant():
    from district.application import VERSION

    assert Application.get_version() == VERSION


def test_check_servers_resets_player_count_after_silence(app):
    server = app.try_get_server(7)
    server.status.open = True
    server.status.last_heard = 1000
    server.status.player_count = 5
    server.status.player_ids = [1, 2]
    app.check_servers(now=1000 + 600)
    assert server.status.player_count == 0
    assert server.status.player_ids is None
    assert server.status.open is True
    assert server.status.last_heard == 1000


def test_check_servers_disconnects_long_silent_server(app):
    server = app.try_get_server(7)
    server.status.open = True
    server.status.last_heard = 1000
    app.check_servers(now=1000 + 1100)
    assert server.status.open is False
    assert server.status.last_heard is None


def test_check_servers_keeps_recent_server(app):
    server = app.try_get_server(7)
    server.status.open = True
    server.status.last_heard = 1000
    server.status.player_count = 3
    app.check_servers(now=1000 + 100)
    assert server.status.player_count == 3


def test_timer_tick_only_checks_every_twentieth(app):
    server = app.try_get_server(8)
    server.status.open = True
    server.status.last_heard = 0
    server.status.player_count = 4
    app.timer_tick(21, now=5000)
    assert server.status.player_count == 4
    app.timer_tick(40, now=5000)
    assert server.status.open is False


def test_clear_inactive_players_keeps_verified(app):
    players = app.databases.player_database
    old = datetime.now(timezone.utc) - timedelta(days=30)
    players.add_player("steam-a", "alice", "10.0.0.1", False, old)
    players.add_player("steam-b", "bob", "10.0.0.2", False, old)
    bob = players.get_players_by_steam("steam-b")[0]
    players.set_player_verification(bob.player_id, PlayerVerification.SUCCESS, None, None)
    app.clear_inactive_players()
    remaining = [player.steam_id for player in players.get_all_players()]
    assert remaining == ["steam-b"]


def test_run_timer_stops_when_event_set(app):
    stop = threading.Event()
    stop.set()
    assert app.run_timer(stop) == 1