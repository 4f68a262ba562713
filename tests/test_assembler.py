"""Tests for budgeted, tiered bundle assembly."""

from __future__ import annotations

from pathlib import Path

import pytest

from contextpack.bundle.assembler import BundleAssembler, build_bundle, section_overhead
from contextpack.bundle.signature import extract_signature, signature_group
from contextpack.config import RulesConfig
from contextpack.models import BundleMode, RankedFile
from contextpack.tokens import estimate_tokens

PY_SOURCE = "def foo():\n" + "    x = 1\n" * 100


def _ranked(root: Path, rel: str, score: int = 1, reasons: list[str] | None = None) -> RankedFile:
    path = root / rel
    size = path.stat().st_size if path.exists() else 0
    return RankedFile(path=str(path), size_bytes=size, score=score, reasons=reasons or [])


class TestEstimateTokens:
    def test_ceiling_division(self, rules: RulesConfig):
        assert estimate_tokens("", rules) == 0
        assert estimate_tokens("abcd", rules) == 1
        assert estimate_tokens("abcde", rules) == 2


class TestSignature:
    def test_groups(self):
        assert signature_group("a.tsx") == "ts"
        assert signature_group("a.mjs") == "ts"
        assert signature_group("a.py") == "py"
        assert signature_group("a.KT") == "kt"
        assert signature_group("a.md") == "default"

    def test_python_declarations(self, rules: RulesConfig):
        content = "import os\n\nclass Foo:\n    def bar(self):\n        return 1\n\nasync def baz():\n    pass\n"
        assert extract_signature("m.py", content, rules) == "class Foo:\ndef bar(self):\nasync def baz():"

    def test_max_lines(self):
        rules = RulesConfig.model_validate({"budget": {"signatureMaxLines": 2}})
        content = "def a():\n    pass\ndef b():\n    pass\ndef c():\n    pass\n"
        assert extract_signature("m.py", content, rules) == "def a():\ndef b():"

    def test_no_match_falls_back_to_leading_lines(self):
        rules = RulesConfig.model_validate({"budget": {"signatureMaxLines": 2}})
        assert extract_signature("m.py", "x = 1\r\ny = 2\nz = 3\n", rules) == "x = 1\ny = 2"

    def test_unknown_language_falls_back(self):
        rules = RulesConfig.model_validate({"budget": {"signatureMaxLines": 2}})
        assert extract_signature("notes.md", "l1\nl2\nl3", rules) == "l1\nl2"


class TestTierSelection:
    def test_full_when_it_fits(self, make_repo, rules: RulesConfig):
        root = make_repo({"a.py": "x" * 40})
        bundle = build_bundle(root, "task", [_ranked(root, "a.py")], 1000, rules)

        (file,) = bundle.files
        assert file.mode is BundleMode.FULL
        assert file.content == "x" * 40
        assert file.estimated_tokens == 10 + section_overhead("a.py", [], rules)
        assert bundle.estimated_tokens == file.estimated_tokens

    def test_per_file_cap_forces_trimmed(self, make_repo):
        rules = RulesConfig.model_validate({"budget": {"maxFileTokens": 20, "trimChars": 8}})
        root = make_repo({"a.txt": "y" * 200})
        bundle = build_bundle(root, "task", [_ranked(root, "a.txt")], 1000, rules)

        (file,) = bundle.files
        assert file.mode is BundleMode.TRIMMED
        assert file.content == "y" * 8

    def test_signature_when_only_it_fits(self, make_repo, rules: RulesConfig):
        root = make_repo({"m.py": PY_SOURCE})
        overhead = section_overhead("m.py", [], rules)
        budget = estimate_tokens("def foo():", rules) + overhead

        bundle = build_bundle(root, "task", [_ranked(root, "m.py")], budget, rules)

        (file,) = bundle.files
        assert file.mode is BundleMode.SIGNATURE
        assert file.content == "def foo():"
        assert file.estimated_tokens == budget
        assert bundle.skipped_files == 0

    def test_nothing_fits_is_skipped(self, make_repo, rules: RulesConfig):
        root = make_repo({"m.py": PY_SOURCE})
        bundle = build_bundle(root, "task", [_ranked(root, "m.py")], 3, rules)
        assert bundle.files == []
        assert bundle.skipped_files == 1
        assert bundle.estimated_tokens == 0

    def test_reasons_affect_overhead(self, rules: RulesConfig):
        short = section_overhead("a.py", [], rules)
        long = section_overhead("a.py", ["filename matches 'a'"] * 20, rules)
        assert long > short


class TestSkipsAndStopping:
    def test_binary_file_skipped(self, make_repo, rules: RulesConfig):
        root = make_repo({"img.bin": b"\x89PNG\x00\x00", "a.py": "x = 1\n"})
        bundle = build_bundle(root, "t", [_ranked(root, "img.bin"), _ranked(root, "a.py")], 1000, rules)
        assert [f.path for f in bundle.files] == ["a.py"]
        assert bundle.skipped_files == 1

    def test_unreadable_file_skipped(self, make_repo, rules: RulesConfig):
        root = make_repo({"a.py": "x = 1\n"})
        ranked = [_ranked(root, "vanished.py"), _ranked(root, "a.py")]
        bundle = build_bundle(root, "t", ranked, 1000, rules)
        assert [f.path for f in bundle.files] == ["a.py"]
        assert bundle.skipped_files == 1

    def test_files_after_budget_reached_not_evaluated(self, make_repo, rules: RulesConfig):
        root = make_repo({"a.py": "x" * 40, "b.py": "x" * 40})
        budget = 10 + section_overhead("a.py", [], rules)
        bundle = build_bundle(root, "t", [_ranked(root, "a.py"), _ranked(root, "b.py")], budget, rules)
        assert [f.path for f in bundle.files] == ["a.py"]
        assert bundle.skipped_files == 0
        assert bundle.estimated_tokens == budget

    def test_oversized_file_skipped_later_file_included(self, make_repo, rules: RulesConfig):
        root = make_repo({"big.txt": "z" * 4000, "small.txt": "z"})
        ranked = [_ranked(root, "big.txt"), _ranked(root, "small.txt")]
        bundle = build_bundle(root, "t", ranked, 50, rules)
        assert [f.path for f in bundle.files] == ["small.txt"]
        assert bundle.files[0].mode is BundleMode.FULL
        assert bundle.skipped_files == 1

    @pytest.mark.parametrize("budget", [0, -5])
    def test_non_positive_budget_counts_every_file_skipped(self, make_repo, rules: RulesConfig, budget: int):
        root = make_repo({"a.py": "x = 1\n", "b.py": "y = 2\n", "img.bin": b"\x00\x01"})
        ranked = [_ranked(root, "a.py"), _ranked(root, "img.bin"), _ranked(root, "b.py")]
        bundle = build_bundle(root, "t", ranked, budget, rules)
        assert bundle.files == []
        assert bundle.skipped_files == 3
        assert bundle.estimated_tokens == 0


class TestBudgetBound:
    @pytest.mark.parametrize("budget", [1, 40, 120, 400, 5000])
    def test_total_never_exceeds_budget(self, make_repo, rules: RulesConfig, budget: int):
        files = {f"f{i}.py": PY_SOURCE * (i + 1) for i in range(6)}
        root = make_repo(files)
        ranked = [_ranked(root, rel) for rel in files]

        bundle = build_bundle(root, "t", ranked, budget, rules)

        assert bundle.estimated_tokens <= budget
        assert bundle.estimated_tokens == sum(f.estimated_tokens for f in bundle.files)

    def test_tier_monotonicity(self, make_repo, rules: RulesConfig):
        files = {f"f{i}.py": PY_SOURCE * (i + 1) for i in range(6)}
        root = make_repo(files)
        ranked = [_ranked(root, rel) for rel in files]
        assembler = BundleAssembler(root, rules)

        bundle = assembler.assemble("t", ranked, 400)

        remaining = 400
        for file in bundle.files:
            content = (root / file.path).read_text()
            tiers = assembler.tiers(file.path, content, section_overhead(file.path, file.reasons, rules))
            chosen = next(t for t in tiers if t.mode is file.mode)
            assert chosen.tokens <= remaining
            assert assembler.choose(tiers, remaining) == chosen
            remaining -= chosen.tokens


class TestBundleFields:
    def test_relative_posix_path_and_ranking_fields(self, make_repo, rules: RulesConfig):
        root = make_repo({"src/pkg/a.py": "x = 1\n"})
        ranked = [_ranked(root, "src/pkg/a.py", score=9, reasons=["filename matches 'a'"])]
        bundle = build_bundle(root, "task", ranked, 1000, rules)

        (file,) = bundle.files
        assert file.path == "src/pkg/a.py"
        assert file.score == 9
        assert file.reasons == ["filename matches 'a'"]
        assert file.size_bytes == 6
        assert bundle.task == "task"
        assert bundle.budget == 1000
        assert bundle.files_included == 1
