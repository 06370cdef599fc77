"""Searching the player database the way the bot's search command does."""

from __future__ import annotations

import enum
from typing import Iterable

from district.models import DatabasePlayer


class SearchCriterion(enum.Enum):
    PLAYER_ID = "PlayerId"
    STEAM_ID = "SteamId"
    USERNAMES = "Usernames"
    IPS = "Ips"
    UNKNOWN = "Unknown"

    @classmethod
    def from_int(cls, value: int) -> SearchCriterion:
        """Map the command's numeric choice to a criterion; others are unknown."""
        return _BY_NUMBER.get(value, cls.UNKNOWN)

    @property
    def field(self) -> str | None:
        return _FIELDS.get(self)

    def __str__(self) -> str:
        return self.value


_BY_NUMBER = {
    0: SearchCriterion.PLAYER_ID,
    1: SearchCriterion.STEAM_ID,
    2: SearchCriterion.USERNAMES,
    3: SearchCriterion.IPS,
}

_FIELDS = {
    SearchCriterion.PLAYER_ID: "player_id",
    SearchCriterion.STEAM_ID: "steam_id",
    SearchCriterion.USERNAMES: "usernames",
    SearchCriterion.IPS: "ips",
}


def _match_text(text: str, query: str, exact: bool) -> bool:
    return text == query if exact else query in text


def matches(value: object, query: str, exact: bool) -> bool:
    """Whether a field matches; lists match if any item does."""
    if isinstance(value, (list, tuple)):
        return any(_match_text(str(item), query, exact) for item in value)
    return _match_text(str(value), query, exact)


def search_by_criterion(
    players: Iterable[DatabasePlayer],
    criterion: SearchCriterion,
    query: str,
    exact: bool,
) -> list[DatabasePlayer]:
    name = criterion.field
    if name is None:
        return []
    return [player for player in players if matches(getattr(player, name), query, exact)]


def format_search_header(criterion: SearchCriterion, query: str, exact: bool) -> str:
    return (
        f"DISTRICT search:\n- **Search by**: {criterion}\n"
        f"- **Search query**: _{query}_\n"
        f"- **Search exact?**: {'Yes' if exact else 'No'}"
    )


def steam_profile_url(steam_id: str) -> str:
    """Profile link built from the part of the steam id before '@'."""
    first, sep, _ = steam_id.partition("@")
    return f"https://steamcommunity.com/profiles/{first if sep else ''}/"