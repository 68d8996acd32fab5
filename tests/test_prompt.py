from __future__ import annotations

import pytest

from elantools.eaf import Annotation, AnnotationDocument, Tier
from elantools.prompt import format_tier_table, select_annotation, select_tier


def test_tier_table(sample_document: AnnotationDocument):
    lines = format_tier_table(sample_document)
    assert len(lines) == 4
    assert lines[1].startswith("   1. utterance")
    assert "Speaker A" in lines[1]
    assert "'Hello world ...'" in lines[1]
    assert "True" in lines[3]


def test_select_tier_reprompts_and_rejects_tokenized(sample_document: AnnotationDocument, answers, capsys):
    answers("abc", "0", "9", "3", "2")
    tier = select_tier(sample_document, reject_tokenized=True)

    assert tier.tier_id == "translation"
    out = capsys.readouterr().out
    assert out.count("(!) Not a number.") == 1
    assert out.count("(!) No such tier.") == 2
    assert "(!) 'words' or one of its parents is tokenized." in out


def test_select_tier_accepts_tokenized_by_default(sample_document: AnnotationDocument, answers):
    answers("3")
    assert select_tier(sample_document).tier_id == "words"


def test_select_tier_eof_propagates(sample_document: AnnotationDocument, answers):
    answers("x")
    with pytest.raises(EOFError):
        select_tier(sample_document)


def _tier() -> Tier:
    return Tier(
        "tier",
        annotations=[
            Annotation("a1", "no times", None, None, "tier"),
            Annotation("a2", "timed", 100, 200, "tier"),
        ],
    )


def test_select_annotation_requires_times(answers, capsys):
    answers("1", "3", "2")
    annotation = select_annotation(_tier())

    assert annotation.annotation_id == "a2"
    out = capsys.readouterr().out
    assert "[NO TIMESTAMPS] no times" in out
    assert "(!) Annotation has no timestamp." in out
    assert "(!) No such annotation." in out


def test_select_annotation_without_time_requirement(answers):
    answers("1")
    assert select_annotation(_tier(), require_times=False).annotation_id == "a1"
