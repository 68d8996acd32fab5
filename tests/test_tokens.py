from __future__ import annotations

from pathlib import Path

import pytest

from elantools.eaf import AnnotationDocument
from elantools.errors import DocumentError, ElanToolsError
from elantools.tokens import (
    ngram_counts,
    ngrams,
    removal_pattern,
    run_ngram,
    run_tokens,
    token_distribution,
)


def test_token_distribution_orders():
    tokens = ["b", "a", "b", "c"]
    assert token_distribution(tokens) == [("a", 1), ("c", 1), ("b", 2)]
    assert token_distribution(tokens, reverse=True) == [("b", 2), ("c", 1), ("a", 1)]
    assert token_distribution(tokens, alphabetical=True) == [("a", 1), ("b", 2), ("c", 1)]


def test_ngrams():
    assert ngrams(["a", "b", "c"], 2) == ["a b", "b c"]
    assert ngrams(["a", "b"], 3) == []
    with pytest.raises(ElanToolsError):
        ngrams(["a"], 0)


def test_removal_pattern():
    assert removal_pattern() is None
    assert removal_pattern(common=True).sub("", "[a.b],c!") == "abc"
    assert removal_pattern(custom="xy").sub("", "axbyc.") == "abc."


def test_ngram_counts_scopes(sample_document: AnnotationDocument):
    per_annotation = ngram_counts(sample_document, 2, "annotation", "utterance")
    assert sorted(per_annotation) == ["Good morning,", "Hello world", "morning, everyone!"]

    per_tier = ngram_counts(sample_document, 2, "tier", "utterance")
    assert per_tier["world Good"] == 1
    assert sum(per_tier.values()) == 5

    per_file = ngram_counts(sample_document, 2, "file", remove=removal_pattern(common=True), ignore_case=True)
    assert per_file["hello world"] == 2
    assert per_file["morning everyone"] == 1
    assert "world hallo" not in per_file


def test_ngram_counts_errors(sample_document: AnnotationDocument):
    with pytest.raises(ElanToolsError, match="not a valid scope"):
        ngram_counts(sample_document, 2, "sentence")
    with pytest.raises(DocumentError):
        ngram_counts(sample_document, 2, "tier", "missing")


def test_run_tokens_strip_and_unique(sample_eaf: Path, capsys):
    tokens = run_tokens(sample_eaf, strip=True, unique=True, ignore_case=True)

    assert tokens == ["hello", "world", "good", "morning", "everyone", "hi", "hallo", "welt", "guten", "morgen"]
    out = capsys.readouterr().out
    assert "Count:          10 tokens" in out
    assert "Unique only:    True" in out


def test_run_tokens_distribution_counts_all(sample_eaf: Path, capsys):
    tokens = run_tokens(sample_eaf, unique=True, distribution=True, reverse=True)

    assert len(tokens) == 12
    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "     2: world"
    assert lines[1] == "     2: Hello"


def test_run_tokens_selected_tier(sample_eaf: Path, answers):
    answers("2")
    assert run_tokens(sample_eaf, select=True) == ["Hallo", "Welt", "Guten", "Morgen"]


def test_run_ngram(sample_eaf: Path, answers, capsys):
    answers("1")
    ordered = run_ngram(sample_eaf, size=2, scope="annotation", remove_common=True)
    assert [ngram for ngram, _ in ordered] == ["Good morning", "Hello world", "morning everyone"]

    run_ngram(sample_eaf, size=7, scope="file")
    assert "No annotation of length 7 or greater" in capsys.readouterr().out
