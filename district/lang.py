"""Translation files: a flat JSON object of key to text."""

from __future__ import annotations

import json
from pathlib import Path

_DEFAULT_LANG = '{"example.lang.here": "Fighting Helicopter!"}'


def init_lang(path: str | Path) -> None:
    """Create a starter translation file at ``path`` unless one exists."""
    path = Path(path)
    if path.exists():
        return
    path.write_text(_DEFAULT_LANG, encoding="utf-8")


def read_lang(path: str | Path) -> dict[str, str]:
    """Load translations; raise ValueError if the file is not a string map."""
    text = Path(path).read_text(encoding="utf-8")
    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError("translation file must hold a JSON object")
    for key, value in data.items():
        if not isinstance(value, str):
            raise ValueError(f"translation '{key}' is not a string")
    return data


def get_translation(data: dict[str, str], key: str) -> str | None:
    return data.get(key)