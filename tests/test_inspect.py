from __future__ import annotations

from pathlib import Path

from elantools.eaf import AnnotationDocument
from elantools.inspect import first_and_last, format_header, format_summary, run_inspect


def test_first_and_last(sample_document: AnnotationDocument):
    first, last = first_and_last(sample_document)
    assert first.value == "Hello world"
    assert last.value == "Hi"


def test_summary(sample_document: AnnotationDocument):
    lines = format_summary(sample_document)
    assert "  Tiers             | total:   3" in lines
    assert "  Annotations       | total:   7" in lines
    assert "  Words/tokens      | total:   12" in lines


def test_header_lists_linguistic_types(sample_document: AnnotationDocument):
    text = "\n".join(format_header(sample_document))
    assert "[ Linguistic Types ]" in text
    assert "'translation-lt'" in text
    assert "Symbolic_Subdivision" in text
    assert "./recording.mp4" in text


def test_run_inspect(sample_eaf: Path, capsys):
    run_inspect(sample_eaf, verbose=True)
    out = capsys.readouterr().out
    assert out.startswith(f"[{sample_eaf}]")
    assert "[ General ]" in out
    assert "[ Tiers ]" in out
    assert "First annotation" in out


def test_run_inspect_annotations(sample_eaf: Path, answers, capsys):
    answers("1")
    run_inspect(sample_eaf, annotations=True)
    out = capsys.readouterr().out
    assert "    1.        0 ms -     1000 ms 'Hello world'" in out
    assert "[ Tiers ]" not in out
