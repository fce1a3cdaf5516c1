from __future__ import annotations

import logging

import pytest

from core.errors import DuplicateFilterError, InvalidFilterError, UnknownFilterError
from core.filters import FilterBook, redact
from core.models import ConfigDocument

from fakes import MemoryStore


def test_redact_replaces_case_insensitive_matches_with_dots() -> None:
    assert redact("Buy NOW, buy now!", ["now"]) == "Buy ..., buy ...!"


def test_redact_preserves_length() -> None:
    samples = ["", "short", "Привет МИР и мир", "emoji 💸 and ß straße", "a" * 100]
    filters = ["мир", "ß", "a", "💸", "xyz"]
    for text in samples:
        assert len(redact(text, filters)) == len(text)


def test_redact_treats_metacharacters_literally() -> None:
    assert redact("only $.99 today", ["$.99"]) == "only .... today"
    # A pattern reading of "$.99" would never match here; a literal one must not either.
    assert redact("price $199", ["$.99"]) == "price $199"
    assert redact("a+b and aab", ["a+b"]) == "... and aab"


def test_redact_skips_empty_and_non_string_words() -> None:
    assert redact("keep me", ["", "   ", None, 5]) == "keep me"


def test_redact_applies_words_sequentially() -> None:
    # The second word sees the output of the first.
    assert redact("secret", ["secret", "..."]) == "......"
    assert redact("abc", ["b", "a.c"]) == "..."


def test_redact_logs_and_skips_uncompilable_word(monkeypatch, caplog) -> None:
    import core.filters as filters_module

    real_compile = filters_module.re.compile

    def fake_compile(pattern, flags=0):
        if pattern == "bad":
            raise filters_module.re.error("broken")
        return real_compile(pattern, flags)

    monkeypatch.setattr(filters_module.re, "compile", fake_compile)
    with caplog.at_level(logging.WARNING):
        result = redact("bad word", ["bad", "word"])
    assert result == "bad ...."
    assert "Skipping invalid filter" in caplog.text


def test_filter_book_add_normalizes_and_persists() -> None:
    store = MemoryStore()
    document = ConfigDocument()
    book = FilterBook(document, store)

    assert book.add("  Urgent ") == "urgent"
    assert document.filters == ["urgent"]
    assert store.saves == 1
    assert book.redact("URGENT news") == "...... news"


def test_filter_book_rejects_duplicates_and_empty() -> None:
    store = MemoryStore()
    book = FilterBook(ConfigDocument(filters=["spam"]), store)

    with pytest.raises(DuplicateFilterError):
        book.add("SPAM")
    with pytest.raises(InvalidFilterError):
        book.add("   ")
    assert store.saves == 0


def test_filter_book_remove() -> None:
    store = MemoryStore()
    document = ConfigDocument(filters=["spam", "ads"])
    book = FilterBook(document, store)

    assert book.remove("Spam") == "spam"
    assert book.words() == ["ads"]
    with pytest.raises(UnknownFilterError):
        book.remove("spam")
    assert store.saves == 1
