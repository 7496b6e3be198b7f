"""Persisted session storage and the bearer-token accessor built on it."""

import json
import logging
import os
from typing import Callable

from segment_studio.constants import SESSION_FILE

logger = logging.getLogger(__name__)


def save_session(data: dict, path: str = SESSION_FILE) -> str:
    """Write session JSON, creating the parent directory. Returns the path."""
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    with open(path, "w") as f:
        json.dump(data, f, indent=2)
    return path


def load_session(path: str = SESSION_FILE) -> dict:
    """Read session JSON. Missing or malformed files read as empty."""
    if not os.path.exists(path):
        return {}
    try:
        with open(path) as f:
            data = json.load(f)
    except json.JSONDecodeError:
        logger.warning("Malformed session file, ignoring: %s", path)
        return {}
    return data if isinstance(data, dict) else {}


def clear_session(path: str = SESSION_FILE) -> bool:
    if os.path.exists(path):
        os.remove(path)
        return True
    return False


def token_accessor(path: str = SESSION_FILE) -> Callable[[], str | None]:
    """Return a callable reading the current token on every call."""
    def get_token() -> str | None:
        return load_session(path).get("token") or None
    return get_token
