from datetime import datetime, timezone

import pytest

from district.models import DatabasePlayer
from district.search import (
    SearchCriterion,
    format_search_header,
    matches,
    search_by_criterion,
    steam_profile_url,
)

WHEN = datetime(2024, 1, 1, tzinfo=timezone.utc)


def make_player(player_id, steam_id, usernames, ips):
    return DatabasePlayer(
        player_id=player_id,
        steam_id=steam_id,
        usernames=usernames,
        ips=ips,
        first_join_date=WHEN,
        times_joined=1,
        last_join_date=WHEN,
        hours_played=0.0,
    )


@pytest.fixture
def players():
    return [
        make_player(111222, "7656@steam", ["alice", "ali"], ["10.0.0.1"]),
        make_player(333444, "9999@steam", ["bob"], ["10.0.0.2", "192.168.1.5"]),
    ]


@pytest.mark.parametrize(
    "number, criterion",
    [
        (0, SearchCriterion.PLAYER_ID),
        (1, SearchCriterion.STEAM_ID),
        (2, SearchCriterion.USERNAMES),
        (3, SearchCriterion.IPS),
        (9, SearchCriterion.UNKNOWN),
        (-1, SearchCriterion.UNKNOWN),
    ],
)
def test_from_int(number, criterion):
    assert SearchCriterion.from_int(number) is criterion


def test_criterion_labels():
    assert [str(SearchCriterion.from_int(n)) for n in range(5)] == [
        "PlayerId",
        "SteamId",
        "Usernames",
        "Ips",
        "Unknown",
    ]


def test_matches_number():
    assert matches(12345, "234", False) is True
    assert matches(12345, "234", True) is False
    assert matches(12345, "12345", True) is True


def test_matches_list():
    assert matches(["a", "bob"], "bo", False) is True
    assert matches(["a", "bob"], "bo", True) is False
    assert matches(["a", "bob"], "bob", True) is True
    assert matches([], "", False) is False


def test_search_by_player_id(players):
    found = search_by_criterion(players, SearchCriterion.PLAYER_ID, "333", False)
    assert [p.player_id for p in found] == [333444]


def test_search_by_steam_id_exact(players):
    found = search_by_criterion(players, SearchCriterion.STEAM_ID, "7656@steam", True)
    assert [p.player_id for p in found] == [111222]
    assert search_by_criterion(players, SearchCriterion.STEAM_ID, "7656", True) == []


def test_search_by_usernames(players):
    found = search_by_criterion(players, SearchCriterion.USERNAMES, "ali", True)
    assert [p.player_id for p in found] == [111222]


def test_search_by_ips_partial(players):
    found = search_by_criterion(players, SearchCriterion.IPS, "10.0.0", False)
    assert [p.player_id for p in found] == [111222, 333444]


def test_search_unknown_finds_nothing(players):
    assert search_by_criterion(players, SearchCriterion.UNKNOWN, "", False) == []


def test_search_header():
    assert format_search_header(SearchCriterion.STEAM_ID, "abc", True) == (
        "DISTRICT search:\n- **Search by**: SteamId\n"
        "- **Search query**: _abc_\n- **Search exact?**: Yes"
    )


def test_search_header_not_exact():
    assert format_search_header(SearchCriterion.IPS, "q", False).endswith("**Search exact?**: No")


def test_steam_profile_url():
    assert steam_profile_url("7656@steam") == "https://steamcommunity.com/profiles/7656/"


def test_steam_profile_url_without_separator():
    assert steam_profile_url("7656") == "https://steamcommunity.com/profiles//"