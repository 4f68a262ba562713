"""Tests for task tokenization."""

from __future__ import annotations

from contextpack.rank.tokenize import split_camel_case, tokenize_task


class TestTokenizeTask:
    def test_lowercases_and_dedupes(self):
        assert tokenize_task("Fix login, then fix LOGIN again") == ["fix", "login", "then", "again"]

    def test_drops_single_characters(self):
        assert tokenize_task("a b cd") == ["cd"]

    def test_camel_case_split(self):
        assert tokenize_task("update parseConfigFile") == [
            "update", "parseconfigfile", "parse", "config", "file",
        ]

    def test_underscores_and_digits_kept(self):
        assert tokenize_task("bump max_retries to 10") == ["bump", "max_retries", "to", "10"]

    def test_empty_and_whitespace(self):
        assert tokenize_task("") == []
        assert tokenize_task("   \n\t") == []

    def test_acronym_not_split(self):
        assert split_camel_case("HTTPServer") == ["httpserver"]
        assert split_camel_case("getHTTP") == ["get", "http"]
