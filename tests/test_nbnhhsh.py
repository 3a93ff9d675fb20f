import json

import pytest
import requests

from groupfun.nbnhhsh import API_URL, extract_guesses, format_reply, guess


class _Response:
    def __init__(self, content):
        self.content = content


class _Session:
    def __init__(self, content=b"", error=None):
        self.content = content
        self.error = error
        self.calls = []

    def post(self, url, data=None, timeout=None):
        self.calls.append((url, data))
        if self.error is not None:
            raise self.error
        return _Response(self.content)


def test_extract_prefers_trans():
    payload = json.dumps([{"name": "yyds", "trans": ["a", "b"], "inputting": ["c"]}])
    assert extract_guesses(payload) == ["a", "b"]


def test_extract_falls_back_to_inputting():
    payload = json.dumps([{"name": "zz", "inputting": ["c", "d"]}]).encode()
    assert extract_guesses(payload) == ["c", "d"]


def test_extract_handles_missing_and_bad_data():
    assert extract_guesses("[]") == []
    assert extract_guesses("not json") == []
    assert extract_guesses([{"name": "x"}]) == []


def test_extract_non_string_values():
    assert extract_guesses([{"trans": [1, "x"]}]) == ["1", "x"]


def test_guess_posts_form():
    session = _Session(json.dumps([{"trans": ["好"]}]).encode())
    assert guess("h", session) == ["好"]
    assert session.calls == [(API_URL, {"text": "h"})]


def test_guess_reports_error_text():
    session = _Session(error=requests.ConnectionError("boom"))
    assert guess("h", session) == ["boom"]


@pytest.mark.parametrize(
    "guesses, expected",
    [(["a", "b"], "yyds: a, b"), ([], "yyds: ")],
)
def test_format_reply(guesses, expected):
    assert format_reply("yyds", guesses) == expected