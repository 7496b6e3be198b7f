"""Tests for session storage (Layer 0)."""

import json

from segment_studio.session import clear_session, load_session, save_session, token_accessor


def test_save_and_load(tmp_path):
    """Round-trip through a nested path that doesn't exist yet."""
    path = str(tmp_path / "cfg" / "session.json")
    save_session({"token": "abc"}, path)
    assert load_session(path) == {"token": "abc"}


def test_load_missing_and_malformed(tmp_path):
    """Missing or broken files read as empty."""
    assert load_session(str(tmp_path / "nope.json")) == {}
    bad = tmp_path / "bad.json"
    bad.write_text("{not json")
    assert load_session(str(bad)) == {}


def test_token_accessor_reads_fresh_value(tmp_path):
    """The accessor sees token changes without being rebuilt."""
    path = str(tmp_path / "session.json")
    get_token = token_accessor(path)
    assert get_token() is None
    save_session({"token": "one"}, path)
    assert get_token() == "one"
    with open(path, "w") as f:
        json.dump({"token": "two"}, f)
    assert get_token() == "two"


def test_clear_session(tmp_path):
    """Clearing removes the file once."""
    path = str(tmp_path / "session.json")
    save_session({"token": "x"}, path)
    assert clear_session(path) is True
    assert clear_session(path) is False
