from __future__ import annotations

from pathlib import Path

from elantools.eaf import load_eaf
from elantools.shift import run_shift


def test_shift_forward(sample_eaf: Path):
    out_path = run_shift(sample_eaf, 500)

    assert out_path == sample_eaf.with_name("sample_500.eaf")
    document = load_eaf(out_path)
    utterance = document.get_tier("utterance")
    assert [(a.start, a.end) for a in utterance.annotations] == [(500, 1500), (2000, 3500), (4500, 4700)]
    assert document.get_tier("words").annotations[0].start == 500


def test_shift_backward_clamps_and_removes_dependants(sample_eaf: Path, capsys):
    out_path = run_shift(sample_eaf, -1200)

    assert out_path.name == "sample_-1200.eaf"
    document = load_eaf(out_path)
    utterance = document.get_tier("utterance")
    assert [(a.start, a.end) for a in utterance.annotations] == [(300, 1800), (2800, 3000)]
    assert [a.value for a in document.get_tier("translation").annotations] == ["Guten Morgen"]
    assert document.get_tier("words").annotations == []
    assert "Removed 4 annotations" in capsys.readouterr().out


def test_shift_declined_overwrite(sample_eaf: Path, answers):
    existing = sample_eaf.with_name("sample_10.eaf")
    existing.write_text("keep", encoding="utf-8")
    answers("n")
    assert run_shift(sample_eaf, 10) is None
    assert existing.read_text(encoding="utf-8") == "keep"
