import json
import random

import pytest

from groupfun.vtb import (
    FirstCategory,
    ThirdCategory,
    VtbDB,
    escape_record_url,
    unescape_unicode,
)

VTB_LIST = [
    {"name": "Alice", "uid": "100", "description": "first", "icon_path": "a.png"},
    {"name": "Bob", "uid": "200", "description": "second", "icon_path": "b.png"},
]

VTB_PAGE = {
    "data": {
        "voices": [
            {
                "categoryName": "greetings",
                "author": "fan",
                "categoryDescription": {"zh-CN": "hello"},
                "voiceList": [
                    {"name": "hi", "path": "https://example.com/v/hi.mp3", "author": "x",
                     "description": {"zh-CN": "d1"}},
                    {"name": "bye", "path": "https://example.com/v/bye.mp3", "author": "y",
                     "description": {"zh-CN": "d2"}},
                ],
            },
            {"categoryName": "songs", "author": "fan", "voiceList": []},
        ]
    }
}


@pytest.fixture
def db(tmp_path):
    with VtbDB(tmp_path / "vtb.db") as store:
        yield store


def test_unescape_unicode_decodes_escapes():
    assert unescape_unicode("\\u4f60\\u597d ok") == "你好 ok"


def test_unescape_unicode_leaves_plain_text():
    assert unescape_unicode('{"a": "b"}') == '{"a": "b"}'


@pytest.mark.parametrize("text", ["\\uzzzz", "\\u12", "\\ud83d"])
def test_unescape_unicode_rejects_bad_escapes(text):
    with pytest.raises(ValueError):
        unescape_unicode(text)


def test_escape_record_url_escapes_file_name():
    assert escape_record_url("https://example.com/v/a b.mp3") == "https://example.com/v/a%20b.mp3"


def test_escape_record_url_keeps_safe_names():
    url = "https://example.com/v/hello.mp3"
    assert escape_record_url(url) == url


def test_escape_record_url_without_slash_is_unchanged():
    assert escape_record_url("plain name") == "plain name"


def test_store_list_and_first_menu(db):
    assert db.store_vtb_list(json.dumps(VTB_LIST)) == ["100", "200"]
    assert db.first_category_menu() == "请选择一个vtb并发送序号:\n0. Alice\n1. Bob\n"


def test_store_list_updates_existing(db):
    db.store_vtb_list(VTB_LIST)
    renamed = [dict(VTB_LIST[1], name="Bobby"), VTB_LIST[0]]
    db.store_vtb_list(renamed)
    menu = db.first_category_menu()
    assert menu.count("\n") == 3
    assert "Bobby" in menu
    assert db.first_category_by_uid("200") == FirstCategory(0, "Bobby", "200", "second", "b.png")


def test_store_list_handles_escaped_bytes(db):
    payload = b'[{"name": "\\u4f60", "uid": "7"}]'
    assert db.store_vtb_list(payload) == ["7"]
    assert db.first_category_by_uid("7").name == "你"


def test_store_list_invalid_json_stores_nothing(db):
    assert db.store_vtb_list("not json") == []
    assert db.first_category_menu() == "请选择一个vtb并发送序号:\n"


def test_first_category_by_unknown_uid(db):
    assert db.first_category_by_uid("missing") is None


def test_second_and_third_menus(db):
    db.store_vtb_list(VTB_LIST)
    db.store_vtb("100", VTB_PAGE)
    assert db.second_category_menu(0) == "请选择一个语录类别并发送序号:\n0. greetings\n1. songs\n"
    assert db.third_category_menu(0, 0) == "请选择一个语录并发送序号:\n0. hi\n1. bye\n"
    assert db.third_category_menu(0, 1) == ""
    assert db.second_category_menu(1) == ""
    assert db.second_category_menu(9) == ""


def test_third_category_lookup(db):
    db.store_vtb_list(VTB_LIST)
    db.store_vtb("100", json.dumps(VTB_PAGE))
    quote = db.third_category(0, 0, 1)
    assert quote == ThirdCategory(1, 0, "100", "bye", "https://example.com/v/bye.mp3", "y", "d2")
    assert db.third_category(0, 0, 5) is None
    assert db.third_category(4, 0, 0) is None


def test_store_vtb_twice_does_not_duplicate(db):
    db.store_vtb_list(VTB_LIST)
    db.store_vtb("100", VTB_PAGE)
    db.store_vtb("100", VTB_PAGE)
    assert db.third_category_menu(0, 0).count("\n") == 3


def test_random_vtb_empty(db):
    assert db.random_vtb(random.Random(1)) is None


def test_random_vtb_returns_stored_quote(db):
    db.store_vtb_list(VTB_LIST)
    db.store_vtb("100", VTB_PAGE)
    rng = random.Random(3)
    for _ in range(10):
        quote = db.random_vtb(rng)
        assert quote.name in {"hi", "bye"}
        assert quote.first_uid == "100"