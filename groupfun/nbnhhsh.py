"""Guess what a pinyin-initial abbreviation stands for."""

from __future__ import annotations

import json
from typing import Any

import requests

__all__ = ["API_URL", "extract_guesses", "format_reply", "guess"]

API_URL = "https://lab.magiconch.com/api/nbnhhsh/guess"
TIMEOUT = 15


def _as_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if value is None:
        return ""
    return json.dumps(value, ensure_ascii=False)


def extract_guesses(payload: bytes | str | list | dict) -> list[str]:
    """Return the guesses from the service's JSON answer.

    Confirmed translations are preferred over input suggestions.
    """
    if isinstance(payload, (bytes, str)):
        try:
            payload = json.loads(payload)
        except ValueError:
            return []
    if not isinstance(payload, list) or not payload or not isinstance(payload[0], dict):
        return []
    first = payload[0]
    values = first["trans"] if "trans" in first else first.get("inputting")
    if not isinstance(values, list):
        return []
    return [_as_text(value) for value in values]


def guess(text: str, session: requests.Session | None = None) -> list[str]:
    """Ask the service what ``text`` stands for.

    A failed request yields a single entry holding the error message.
    """
    client = session if session is not None else requests.Session()
    try:
        response = client.post(API_URL, data={"text": text}, timeout=TIMEOUT)
    except requests.RequestException as exc:
        return [str(exc)]
    return extract_guesses(response.content)


def format_reply(keyword: str, guesses: list[str]) -> str:
    """Return the chat reply for ``keyword``."""
    return f"{keyword}: {', '.join(guesses)}"