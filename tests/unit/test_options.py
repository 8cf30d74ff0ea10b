"""Tests for ParserOptions and its environment loader."""

from __future__ import annotations

import logging

import pytest

from sqlexpr.core.expression_lang.options import (
    DEFAULT_EVAL_MAX_DEPTH,
    DEFAULT_MAX_DEPTH,
    ParserOptions,
)


class TestParserOptions:
    """Explicit construction."""

    def test_defaults(self) -> None:
        options = ParserOptions()
        assert options.max_depth == DEFAULT_MAX_DEPTH == 100
        assert options.eval_max_depth == DEFAULT_EVAL_MAX_DEPTH == 400
        assert options.pretty_print is False

    def test_rejects_non_positive_depth(self) -> None:
        with pytest.raises(ValueError):
            ParserOptions(max_depth=0)
        with pytest.raises(ValueError):
            ParserOptions(eval_max_depth=-1)


class TestFromEnv:
    """Environment variables are read only by from_env()."""

    def test_empty_environment(self) -> None:
        options = ParserOptions.from_env({})
        assert options.pretty_print is False
        assert options.max_depth == DEFAULT_MAX_DEPTH

    @pytest.mark.parametrize("value", ["true", "TRUE", "1", " true "])
    def test_pretty_enabled(self, value: str) -> None:
        assert ParserOptions.from_env({"SQLEXPR_PRETTY": value}).pretty_print is True

    @pytest.mark.parametrize("value", ["false", "0", "yes", ""])
    def test_pretty_disabled(self, value: str) -> None:
        assert ParserOptions.from_env({"SQLEXPR_PRETTY": value}).pretty_print is False

    def test_max_depth(self) -> None:
        assert ParserOptions.from_env({"SQLEXPR_MAX_DEPTH": "25"}).max_depth == 25

    def test_invalid_max_depth_falls_back(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING):
            options = ParserOptions.from_env({"SQLEXPR_MAX_DEPTH": "deep"})
        assert options.max_depth == DEFAULT_MAX_DEPTH
        assert "SQLEXPR_MAX_DEPTH" in caplog.text

    def test_non_positive_max_depth_falls_back(self) -> None:
        assert ParserOptions.from_env({"SQLEXPR_MAX_DEPTH": "0"}).max_depth == DEFAULT_MAX_DEPTH

    def test_reads_process_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SQLEXPR_PRETTY", "true")
        monkeypatch.setenv("SQLEXPR_MAX_DEPTH", "7")
        options = ParserOptions.from_env()
        assert options.pretty_print is True
        assert options.max_depth == 7
