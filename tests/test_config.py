"""Tests for rules loading and validation."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from contextpack.config import RULES_ENV_VAR, RulesConfig, dump_rules, load_rules
from contextpack.exceptions import ConfigError


class TestDefaults:
    def test_budget_defaults(self):
        rules = RulesConfig()
        assert rules.budget.default_tokens == 14000
        assert rules.budget.token_chars_per_token == 4
        assert rules.budget.max_file_tokens == 4000
        assert rules.budget.trim_chars == 8000
        assert rules.budget.signature_max_lines == 200

    def test_weight_defaults(self):
        weights = RulesConfig().weights
        assert weights.filename_match == 6
        assert weights.path_match == 3
        assert weights.content_match_max == 12
        assert weights.cochange_boost == 4

    def test_output_dir_ignored_by_default(self):
        assert ".context-pack/" in RulesConfig().ignore.default

    def test_signature_groups(self):
        groups = set(RulesConfig().files.signature_patterns)
        assert groups == {"ts", "py", "go", "rs", "java", "kt"}


class TestLoadRules:
    def test_no_path_uses_defaults(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.delenv(RULES_ENV_VAR, raising=False)
        assert load_rules() == RulesConfig()

    def test_partial_camel_case_file(self, tmp_path: Path):
        path = tmp_path / "rules.json"
        path.write_text(json.dumps({
            "budget": {"defaultTokens": 500},
            "weights": {"filenameMatch": 10},
        }))
        rules = load_rules(path)
        assert rules.budget.default_tokens == 500
        assert rules.budget.trim_chars == 8000
        assert rules.weights.filename_match == 10
        assert rules.weights.path_match == 3

    def test_snake_case_keys_accepted(self, tmp_path: Path):
        path = tmp_path / "rules.json"
        path.write_text(json.dumps({"limits": {"max_commits": 7}}))
        assert load_rules(path).limits.max_commits == 7

    def test_env_var(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        path = tmp_path / "rules.json"
        path.write_text(json.dumps({"limits": {"maxFiles": 12}}))
        monkeypatch.setenv(RULES_ENV_VAR, str(path))
        assert load_rules().limits.max_files == 12

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="not found"):
            load_rules(tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path: Path):
        path = tmp_path / "rules.json"
        path.write_text("{not json")
        with pytest.raises(ConfigError, match="not valid JSON"):
            load_rules(path)

    def test_non_object(self, tmp_path: Path):
        path = tmp_path / "rules.json"
        path.write_text("[1, 2]")
        with pytest.raises(ConfigError):
            load_rules(path)

    def test_negative_weight_rejected(self, tmp_path: Path):
        path = tmp_path / "rules.json"
        path.write_text(json.dumps({"weights": {"pathMatch": -1}}))
        with pytest.raises(ConfigError):
            load_rules(path)

    def test_zero_budget_rejected(self, tmp_path: Path):
        path = tmp_path / "rules.json"
        path.write_text(json.dumps({"budget": {"tokenCharsPerToken": 0}}))
        with pytest.raises(ConfigError):
            load_rules(path)

    def test_bad_signature_regex_rejected(self, tmp_path: Path):
        path = tmp_path / "rules.json"
        path.write_text(json.dumps({"files": {"signaturePatterns": {"py": ["(unclosed"]}}}))
        with pytest.raises(ConfigError):
            load_rules(path)


class TestDumpRules:
    def test_camel_case_output(self):
        data = json.loads(dump_rules(RulesConfig()))
        assert data["budget"]["defaultTokens"] == 14000
        assert "signaturePatterns" in data["files"]
        assert "configFiles" in data["structural"]

    def test_dump_reloads(self, tmp_path: Path):
        rules = RulesConfig()
        path = tmp_path / "rules.json"
        path.write_text(dump_rules(rules))
        assert load_rules(path) == rules
