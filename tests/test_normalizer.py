import logging

import pytest

from reciter.services.normalizer import (
    fold_arabic,
    get_locale_fold,
    get_tokenizer,
    normalize,
    normalize_arabic,
    tokenize,
    tokenize_spans,
    whitespace_tokenize,
)


def test_normalize_lowercases_and_drops_punctuation():
    assert normalize("Hello,   World!") == "hello world"
    assert normalize("rock-n-roll") == "rock n roll"
    assert normalize("  a -- b  ") == "a b"


def test_normalize_turns_symbols_into_spaces():
    assert normalize("5 + 3 = 8") == "5 3 8"


def test_normalize_strips_latin_diacritics():
    assert normalize("Café Über") == "cafe uber"


def test_normalize_strips_arabic_tashkil_and_tatweel():
    assert normalize("مُحَمَّدٌ") == "محمد"
    assert normalize("مـحمد") == "محمد"


def test_normalize_empty():
    assert normalize("") == ""
    assert normalize("?!...") == ""


def test_fold_arabic_letter_variants():
    assert fold_arabic("ٱلله") == "الله"
    assert fold_arabic("مدرسة") == "مدرسه"
    assert fold_arabic("على") == "علي"
    assert fold_arabic("مؤمن") == "مومن"
    assert fold_arabic("شاطئ") == "شاطي"


def test_normalize_arabic_combines_both_steps():
    assert normalize_arabic("إِسْلَام") == "اسلام"
    assert normalize_arabic("رَحْمَة") == "رحمه"


def test_normalize_runs_custom_fold_last():
    assert normalize("Straße!", fold=lambda s: s.replace("ß", "ss")) == "strasse"


def test_get_locale_fold():
    assert get_locale_fold("ar") is fold_arabic
    assert get_locale_fold("AR") is fold_arabic
    assert get_locale_fold(None) is None
    assert get_locale_fold("") is None


def test_unknown_locale_warns(caplog):
    with caplog.at_level(logging.WARNING, logger="reciter.services.normalizer"):
        assert get_locale_fold("xx") is None
    assert "xx" in caplog.text


def test_tokenize_keeps_words_and_digits():
    assert tokenize("Hello, world 42!") == ["Hello", "world", "42"]
    assert tokenize("abc123def") == ["abc", "123", "def"]
    assert tokenize("don't") == ["don", "t"]


def test_tokenize_nothing_to_split():
    assert tokenize("") == []
    assert tokenize("... --- !!!") == []


def test_tokenize_keeps_marks_inside_tokens():
    assert tokenize("مُحَمَّدٌ رَسُولُ") == ["مُحَمَّدٌ", "رَسُولُ"]


def test_tokenize_spans_point_at_original_text():
    text = "Hi, you"
    assert tokenize_spans(text) == [(0, 2), (4, 7)]
    assert [text[s:e] for s, e in tokenize_spans(text)] == tokenize(text)


def test_tokenize_is_reappliable():
    text = "To be, or not to be: that is the question (1603)."
    tokens = tokenize(text)
    assert tokenize(text) == tokens
    assert tokenize(" ".join(tokens)) == tokens


def test_whitespace_tokenize():
    assert whitespace_tokenize("  the  quick\tfox \n") == ["the", "quick", "fox"]
    assert whitespace_tokenize("Hello, world!") == ["Hello,", "world!"]
    assert whitespace_tokenize("   ") == []


def test_get_tokenizer():
    assert get_tokenizer("word") is tokenize
    assert get_tokenizer("whitespace") is whitespace_tokenize
    with pytest.raises(ValueError):
        get_tokenizer("sentencepiece")
