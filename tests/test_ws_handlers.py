import json

import pytest

from district.application import Application
from district.config import ConfigApp
from district.models import LeaderboardRecordType
from district.ws_handlers import WsHandlerError, ws_log_with_translation, ws_stats_add_to_player


def _make_app(tmp_path, leaderboards):
    cfg = ConfigApp.create().to_dict()
    cfg["lang_path"] = str(tmp_path / "lang.json")
    cfg["databases"]["leaderboards"] = leaderboards
    cfg["servers"] = [
        {"id": 7, "name": "alpha", "channel_id": "123", "bot": dict(cfg["main_bot"])}
    ]
    (tmp_path / "lang.json").write_text(
        json.dumps({"logs.join": "{name} joined"}), encoding="utf-8"
    )
    path = tmp_path / "config.json"
    path.write_text(json.dumps(cfg), encoding="utf-8")
    return Application.setup(path, tmp_path / "db", None)


@pytest.fixture
def app(tmp_path):
    application = _make_app(tmp_path, leaderboards=True)
    yield application
    application.close()


@pytest.fixture
def app_without_leaderboards(tmp_path):
    application = _make_app(tmp_path, leaderboards=False)
    yield application
    application.close()


def test_log_queues_rendered_line(app):
    result = ws_log_with_translation(
        app, {"server_id": 7, "translation": "join", "data": {"name": "alice"}}
    )
    assert result == "Success"
    assert app.try_get_server(7).buffer[-1].endswith(": alice joined")


def test_log_unknown_server(app):
    with pytest.raises(WsHandlerError, match="Server not found"):
        ws_log_with_translation(app, {"server_id": 99, "translation": "join", "data": {}})


def test_log_rejects_object_values(app):
    with pytest.raises(WsHandlerError):
        ws_log_with_translation(
            app, {"server_id": 7, "translation": "join", "data": {"name": {"a": 1}}}
        )


def test_log_missing_field(app):
    with pytest.raises(WsHandlerError, match="server_id"):
        ws_log_with_translation(app, {"translation": "join", "data": {}})


def test_stats_adds_record(app):
    result = ws_stats_add_to_player(app, {"player_id": 5, "type": 1, "value": 2})
    assert result == "Successfully added stat to leaderboards"
    records = app.databases.leaderboard_database.get_all_from_player(5)
    assert len(records) == 1
    assert records[0].kind == LeaderboardRecordType.KILLS
    assert records[0].value == 2.0


def test_stats_invalid_type(app):
    with pytest.raises(WsHandlerError):
        ws_stats_add_to_player(app, {"player_id": 5, "type": 9, "value": 1.0})


def test_stats_leaderboards_disabled(app_without_leaderboards):
    with pytest.raises(WsHandlerError, match="Leaderboards are not enabled on this server"):
        ws_stats_add_to_player(app_without_leaderboards, {"player_id": 5, "type": 0, "value": 1})


def test_stats_no_databases(app):
    handler = app.databases
    app.databases = None
    try:
        with pytest.raises(WsHandlerError, match="No databases loaded"):
            ws_stats_add_to_player(app, {"player_id": 5, "type": 0, "value": 1})
    finally:
        app.databases = handler