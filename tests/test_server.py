import pytest

from district.config import ConfigBot, ConfigServer
from district.server import DistrictServer, DistrictServerStatus, combine_messages


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


def make_server(channel_id="123", sender=None):
    cfg = ConfigServer(
        id=7,
        name="alpha",
        channel_id=channel_id,
        bot=ConfigBot(token="token", active_guild_id=12345678901234567),
    )
    server = DistrictServer.from_config(cfg, sender)
    clock = FakeClock()
    server.clock = clock
    server.last_sent = clock()
    return server, clock


def recorder():
    sent = []
    return sent, lambda channel, text: sent.append((channel, text))


# --- status -----------------------------------------------------------------


def test_status_defaults():
    status = DistrictServerStatus()
    assert status.open is False
    assert status.player_ids is None
    assert status.duration_since_last == 0.0
    assert status.last_heard is None
    assert status.player_count == 0


def test_status_round_trip():
    status = DistrictServerStatus(
        open=True,
        tps=20,
        max_tps=20,
        player_ids=[1, 2],
        duration_since_last=1.5,
        player_count=2,
        max_player_count=16,
        last_heard=1700000000,
    )
    assert DistrictServerStatus.from_dict(status.to_dict()) == status


def test_status_optional_fields_may_be_missing():
    status = DistrictServerStatus.from_dict(
        {"open": True, "tps": 20, "max_tps": 20, "player_count": 3, "max_player_count": 10}
    )
    assert status.player_ids is None
    assert status.duration_since_last is None
    assert status.last_heard is None
    assert status.player_count == 3


@pytest.mark.parametrize(
    "patch",
    [
        {"tps": 300},
        {"player_count": 70000},
        {"open": 1},
        {"player_ids": [-1]},
        {"duration_since_last": "x"},
    ],
)
def test_status_rejects_bad_values(patch):
    data = {"open": True, "tps": 20, "max_tps": 20, "player_count": 3, "max_player_count": 10}
    data.update(patch)
    with pytest.raises(ValueError):
        DistrictServerStatus.from_dict(data)


def test_status_rejects_missing_required():
    with pytest.raises(ValueError):
        DistrictServerStatus.from_dict({"tps": 1})


# --- combine_messages --------------------------------------------------------


def test_combine_collapses_duplicates():
    assert combine_messages(["a", "b", "a"]) == "a x2\nb"


def test_combine_sorts_by_prefix():
    assert combine_messages(["zz", "aa"]) == "aa\nzz"


def test_combine_keeps_order_of_equal_prefixes():
    lines = ["prefix_1234567_B", "prefix_1234567_A"]
    assert combine_messages(lines).split("\n") == lines


def test_combine_truncates_long_batches():
    lines = [f"msg{i:02d}" for i in range(25)]
    assert combine_messages(lines).split("\n") == lines[-15:]


def test_combine_keeps_twenty_lines():
    lines = [f"msg{i:02d}" for i in range(20)]
    assert combine_messages(lines).split("\n") == lines


def test_combine_empty():
    assert combine_messages([]) == ""


# --- sending -----------------------------------------------------------------


def test_from_config_copies_identity():
    server, _ = make_server()
    assert (server.id, server.name, server.channel_id) == (7, "alpha", "123")
    assert server.status == DistrictServerStatus()
    assert len(server.buffer) == 0


def test_recent_send_is_buffered():
    sent, sender = recorder()
    server, _ = make_server(sender=sender)
    server.send_message("hi")
    assert list(server.buffer) == ["hi"]
    assert sent == []


def test_send_after_interval_flushes():
    sent, sender = recorder()
    server, clock = make_server(sender=sender)
    clock.now += 2
    server.send_message("hi")
    assert sent == [(123, "hi")]
    assert len(server.buffer) == 0
    assert server.last_sent == clock.now


def test_buffered_lines_go_out_together():
    sent, sender = recorder()
    server, clock = make_server(sender=sender)
    server.send_message("a")
    server.send_message("a")
    clock.now += 3
    server.send_message("b")
    assert sent == [(123, combine_messages(["a", "a", "b"]))]


def test_empty_channel_buffers_nothing():
    sent, sender = recorder()
    server, clock = make_server(channel_id="", sender=sender)
    clock.now += 5
    server.send_message("hi")
    assert len(server.buffer) == 0
    assert sent == []


def test_invalid_channel_keeps_buffer():
    sent, sender = recorder()
    server, clock = make_server(channel_id="abc", sender=sender)
    clock.now += 5
    server.send_message("x")
    assert list(server.buffer) == ["x"]
    assert sent == []


def test_try_clear_waits_past_interval():
    sent, sender = recorder()
    server, clock = make_server(sender=sender)
    server.send_message("hi")
    clock.now += 2
    server.try_clear_buffer()
    assert sent == []
    clock.now += 0.5
    server.try_clear_buffer()
    assert sent[0][1].split("\n") == ["", "hi"]
    assert len(server.buffer) == 0


def test_try_clear_with_empty_buffer_sends_nothing():
    sent, sender = recorder()
    server, clock = make_server(sender=sender)
    started = server.last_sent
    clock.now += 10
    server.try_clear_buffer()
    assert sent == []
    assert server.last_sent == started
    assert list(server.buffer) == []


def test_sender_failure_is_raised():
    def failing(channel, text):
        raise OSError("down")

    server, clock = make_server(sender=failing)
    clock.now += 5
    with pytest.raises(RuntimeError, match="Discord Error"):
        server.send_message("hi")


def test_try_clear_drops_sender_failure():
    def failing(channel, text):
        raise OSError("down")

    server, clock = make_server(sender=failing)
    server.send_message("hi")
    clock.now += 5
    server.try_clear_buffer()
    assert len(server.buffer) == 0