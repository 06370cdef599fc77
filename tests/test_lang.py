import json

import pytest

from district.lang import get_translation, init_lang, read_lang


def test_init_creates_default(tmp_path):
    path = tmp_path / "lang.json"
    init_lang(path)
    assert read_lang(path) == {"example.lang.here": "Fighting Helicopter!"}


def test_init_keeps_existing(tmp_path):
    path = tmp_path / "lang.json"
    path.write_text(json.dumps({"a": "b"}))
    init_lang(path)
    assert read_lang(path) == {"a": "b"}


def test_read_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_lang(tmp_path / "nope.json")


def test_read_invalid_json(tmp_path):
    path = tmp_path / "lang.json"
    path.write_text("{not json")
    with pytest.raises(ValueError):
        read_lang(path)


@pytest.mark.parametrize("content", ['{"a": 1}', '["a"]', '{"a": null}'])
def test_read_rejects_non_string_map(tmp_path, content):
    path = tmp_path / "lang.json"
    path.write_text(content)
    with pytest.raises(ValueError):
        read_lang(path)


def test_get_translation():
    data = {"logs.join": "{name} joined"}
    assert get_translation(data, "logs.join") == "{name} joined"
    assert get_translation(data, "logs.leave") is None