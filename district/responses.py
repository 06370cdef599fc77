"""Websocket response messages and the JSON bodies of plain HTTP replies."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any


class WebsocketRoute(enum.IntEnum):
    LOGS_ROUTE = 0
    STATS_ROUTE = 1


class WsResponseStatus(enum.IntEnum):
    OK = 200
    BAD_REQUEST = 400
    WRONG_AUTH = 421
    ERROR = 500


class WsResponseType(enum.IntEnum):
    BASIC = 0
    MESSAGE = 1
    COMMAND = 2


_PAYLOAD_KEYS = {
    WsResponseType.MESSAGE: "response",
    WsResponseType.COMMAND: "command",
}


@dataclass(frozen=True)
class WsResponse:
    """A message sent to a game server over the websocket."""

    kind: WsResponseType
    status: WsResponseStatus
    message: str
    payload: str = ""

    def to_dict(self) -> dict:
        """The JSON object sent on the wire; basic responses carry no payload."""
        out: dict[str, Any] = {
            "type": int(self.kind),
            "status": int(self.status),
            "message": self.message,
        }
        key = _PAYLOAD_KEYS.get(self.kind)
        if key is not None:
            out[key] = self.payload
        return out


@dataclass(frozen=True)
class WebsocketIncomingMessage:
    route: WebsocketRoute
    data: Any

    @classmethod
    def from_dict(cls, data: Any) -> WebsocketIncomingMessage:
        """Read an incoming message; raise ValueError if it is malformed."""
        if not isinstance(data, dict):
            raise ValueError("expected a JSON object")
        if "route" not in data:
            raise ValueError("missing field `route`")
        if "data" not in data:
            raise ValueError("missing field `data`")
        route = data["route"]
        if isinstance(route, bool) or not isinstance(route, int):
            raise ValueError("invalid type for `route`: expected integer")
        try:
            parsed_route = WebsocketRoute(route)
        except ValueError as err:
            raise ValueError(f"invalid value for `route`: {route}") from err
        return cls(route=parsed_route, data=data["data"])


def _payload(data: object | None) -> str:
    return "" if data is None else str(data)


def basic_response(status: WsResponseStatus, message: object) -> WsResponse:
    return WsResponse(WsResponseType.BASIC, WsResponseStatus(status), str(message))


def message_response(
    status: WsResponseStatus, message: object, data: object | None
) -> WsResponse:
    return WsResponse(WsResponseType.MESSAGE, WsResponseStatus(status), str(message), _payload(data))


def command_response(
    status: WsResponseStatus, message: object, data: object | None
) -> WsResponse:
    return WsResponse(WsResponseType.COMMAND, WsResponseStatus(status), str(message), _payload(data))


def http_response_message_200() -> dict:
    return {"status": 200, "message": "OK"}


def http_response_message_500(error: str | None) -> dict:
    return {"status": 500, "message": "Internal Server Error", "error": error}