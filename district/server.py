"""A game server known to the application and its batched chat log."""

from __future__ import annotations

import contextlib
import dataclasses
import re
import time
from collections import Counter, deque
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable

from district.config import ConfigServer
from district.logger import log_debug
from district.responses import WsResponse

SEND_INTERVAL = 2.0
_SORT_PREFIX = 14
_MAX_LINES = 20
_KEPT_LINES = 15
_CHANNEL_ID = re.compile(r"\+?[0-9]+")

Sender = Callable[[int, str], None]


def _uint(data: dict, key: str, bits: int) -> int:
    if key not in data:
        raise ValueError(f"missing field `{key}`")
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"invalid type for `{key}`: expected integer")
    if not 0 <= value < 1 << bits:
        raise ValueError(f"`{key}` out of range: {value}")
    return value


def _bool(data: dict, key: str) -> bool:
    if key not in data:
        raise ValueError(f"missing field `{key}`")
    value = data[key]
    if not isinstance(value, bool):
        raise ValueError(f"invalid type for `{key}`: expected boolean")
    return value


def _player_ids(value: Any) -> list[int] | None:
    if value is None:
        return None
    if not isinstance(value, list):
        raise ValueError("invalid type for `player_ids`: expected array")
    for item in value:
        if isinstance(item, bool) or not isinstance(item, int) or not 0 <= item < 1 << 64:
            raise ValueError("invalid value in `player_ids`: expected unsigned integer")
    return list(value)


def _optional_float(value: Any, key: str) -> float | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"invalid type for `{key}`: expected number")
    return float(value)


def _optional_int(value: Any, key: str) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"invalid type for `{key}`: expected integer")
    if not -(1 << 63) <= value < 1 << 63:
        raise ValueError(f"`{key}` out of range: {value}")
    return value


@dataclass
class DistrictServerStatus:
    """What a game server last reported about itself."""

    open: bool = False
    tps: int = 0
    max_tps: int = 0
    player_ids: list[int] | None = None
    duration_since_last: float | None = 0.0
    player_count: int = 0
    max_player_count: int = 0
    last_heard: int | None = None

    @classmethod
    def from_dict(cls, data: Any) -> DistrictServerStatus:
        """Read a status report; raise ValueError if it is malformed."""
        if not isinstance(data, dict):
            raise ValueError("expected a JSON object")
        return cls(
            open=_bool(data, "open"),
            tps=_uint(data, "tps", 8),
            max_tps=_uint(data, "max_tps", 8),
            player_ids=_player_ids(data.get("player_ids")),
            duration_since_last=_optional_float(
                data.get("duration_since_last"), "duration_since_last"
            ),
            player_count=_uint(data, "player_count", 16),
            max_player_count=_uint(data, "max_player_count", 16),
            last_heard=_optional_int(data.get("last_heard"), "last_heard"),
        )

    def to_dict(self) -> dict:
        return dataclasses.asdict(self)


def combine_messages(messages: Iterable[str]) -> str:
    """Merge log lines into one message.

    Repeated lines collapse into "<line> xN", lines are ordered by their
    first 14 characters, and past 20 lines only the last 15 are kept.
    """
    counts = Counter(messages)
    lines = [text if count == 1 else f"{text} x{count}" for text, count in counts.items()]
    lines.sort(key=lambda line: line[:_SORT_PREFIX])
    if len(lines) > _MAX_LINES:
        lines = lines[-_KEPT_LINES:]
        log_debug("Truncated buffer")
    return "\n".join(lines)


def _parse_channel(channel_id: str) -> int | None:
    if not _CHANNEL_ID.fullmatch(channel_id):
        return None
    value = int(channel_id)
    return value if value < 1 << 64 else None


@dataclass(eq=False)
class DistrictServer:
    """A configured game server; log lines for its channel are sent in batches."""

    id: int
    name: str
    channel_id: str
    srv_cfg: ConfigServer
    sender: Sender | None = None
    status: DistrictServerStatus = field(default_factory=DistrictServerStatus)
    ws_msgs: deque[WsResponse] = field(default_factory=deque)
    buffer: deque[str] = field(default_factory=deque)
    clock: Callable[[], float] = time.monotonic
    last_sent: float | None = None

    def __post_init__(self) -> None:
        if self.last_sent is None:
            self.last_sent = self.clock()

    @classmethod
    def from_config(cls, srv_cfg: ConfigServer, sender: Sender | None) -> DistrictServer:
        """A server for ``srv_cfg``; ``sender(channel, text)`` posts to its channel."""
        log_debug(f"{srv_cfg.id:>3}: Creating sever '{srv_cfg.name}'")
        return cls(
            id=srv_cfg.id,
            name=srv_cfg.name,
            channel_id=srv_cfg.channel_id,
            srv_cfg=srv_cfg,
            sender=sender,
        )

    def try_clear_buffer(self) -> None:
        """Flush waiting lines once the send interval has passed; failures are dropped."""
        if not self.buffer:
            return
        if self.clock() - self.last_sent <= SEND_INTERVAL:
            return
        with contextlib.suppress(RuntimeError):
            self.send_message("")

    def send_message(self, data: str) -> None:
        """Queue a line and send the queue if the interval has passed.

        Raise RuntimeError if the sender fails.
        """
        if not self.channel_id:
            return
        self.buffer.append(data)
        if self.clock() - self.last_sent >= SEND_INTERVAL:
            self._send_batch(list(self.buffer))

    def _send_batch(self, messages: list[str]) -> None:
        channel = _parse_channel(self.channel_id)
        if channel is None or not messages:
            return
        combined = combine_messages(messages)
        if not combined:
            return
        self.buffer.clear()
        self.last_sent = self.clock()
        if self.sender is None:
            return
        try:
            self.sender(channel, combined)
        except Exception as err:
            raise RuntimeError(f"Discord Error {err}") from err