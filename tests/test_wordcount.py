from groupfun.wordcount import (
    count_words,
    is_chinese_word,
    rank_by_word_count,
    top_words,
)


def test_rank_orders_by_count_descending():
    ranked = rank_by_word_count({"一": 1, "三": 3, "二": 2})
    assert ranked == [("三", 3), ("二", 2), ("一", 1)]


def test_rank_empty():
    assert rank_by_word_count({}) == []


def test_is_chinese_word():
    assert is_chinese_word("你好")
    assert not is_chinese_word("")
    assert not is_chinese_word("hello")
    assert not is_chinese_word("你好a")
    assert not is_chinese_word("你好\n")


def test_count_words_filters_stopwords_and_non_chinese():
    messages = ["今天 天气 好", "  ", "今天 abc 的", "天气 今天"]
    counts = count_words(messages, ["的"], str.split)
    assert dict(counts) == {"今天": 3, "天气": 2, "好": 1}


def test_count_words_trims_segments():
    counts = count_words(["x"], [], lambda text: [" 你好 ", "你好"])
    assert counts["你好"] == 2


def test_top_words_respects_limit_and_order():
    messages = ["甲 乙 乙 丙 丙 丙"]
    result = top_words(messages, [], str.split, limit=2)
    assert result == [("丙", 3), ("乙", 2)]


def test_top_words_default_limit():
    words = [chr(0x4E00 + n) for n in range(30)]
    result = top_words([" ".join(words)], [], str.split)
    assert len(result) == 20
    assert all(count == 1 for _, count in result)
    assert top_words([], [], str.split) == []