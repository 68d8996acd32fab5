from __future__ import annotations

from pathlib import Path

import pytest
from pympi.Elan import Eaf

from elantools.eaf import AnnotationDocument, add_ref_annotation, load_eaf


def _aid(eaf: Eaf, tier_id: str, value: str) -> str:
    return next(aid for aid, a in eaf.tiers[tier_id][0].items() if a[2] == value)


@pytest.fixture
def media_file(tmp_path: Path) -> Path:
    path = tmp_path / "recording.mp4"
    path.write_bytes(b"")
    return path


@pytest.fixture
def sample_eaf(tmp_path: Path, media_file: Path) -> Path:
    """ELAN-file with a main tier, a translation tier and a tokenized words tier.

    utterance     0-1000 'Hello world', 1500-3000 'Good morning, everyone!', 4000-4200 'Hi'
    translation   'Hallo Welt', 'Guten Morgen'
    words         'Hello' 'world' (Symbolic_Subdivision of the first utterance)
    """
    eaf = Eaf()
    eaf.remove_tier("default")
    eaf.add_tier("utterance", part="Speaker A", ann="Annotator B")
    eaf.add_annotation("utterance", 0, 1000, "Hello world")
    eaf.add_annotation("utterance", 1500, 3000, "Good morning, everyone!")
    eaf.add_annotation("utterance", 4000, 4200, "Hi")

    eaf.add_linguistic_type("translation-lt", constraints="Symbolic_Association", timealignable=False)
    eaf.add_tier("translation", ling="translation-lt", parent="utterance")
    eaf.add_ref_annotation("translation", "utterance", 500, "Hallo Welt")
    eaf.add_ref_annotation("translation", "utterance", 2000, "Guten Morgen")

    eaf.add_linguistic_type("words-lt", constraints="Symbolic_Subdivision", timealignable=False)
    eaf.add_tier("words", ling="words-lt", parent="utterance")
    parent = _aid(eaf, "utterance", "Hello world")
    first = add_ref_annotation(eaf, "words", parent, "Hello")
    add_ref_annotation(eaf, "words", parent, "world", previous=first)

    eaf.add_linked_file(media_file.as_uri(), relpath="./recording.mp4", mimetype="video/mp4")

    path = tmp_path / "sample.eaf"
    eaf.to_file(str(path))
    return path


@pytest.fixture
def sample_document(sample_eaf: Path) -> AnnotationDocument:
    return load_eaf(sample_eaf)


@pytest.fixture
def timed_eaf(tmp_path: Path):
    """Factory writing an ELAN-file with one tier of (start, end, value) annotations."""

    def _make(name: str, annotations: list[tuple[int, int, str]], tier_id: str = "default") -> Path:
        eaf = Eaf()
        if tier_id != "default":
            eaf.remove_tier("default")
            eaf.add_tier(tier_id)
        for start, end, value in annotations:
            eaf.add_annotation(tier_id, start, end, value)
        path = tmp_path / name
        eaf.to_file(str(path))
        return path

    return _make


@pytest.fixture
def answers(monkeypatch: pytest.MonkeyPatch):
    """Feed lines to `input()`. Running out of lines raises EOFError."""

    def _feed(*lines: str) -> list[str]:
        remaining = list(lines)

        def _input(prompt: str = "") -> str:
            if not remaining:
                raise EOFError
            return remaining.pop(0)

        monkeypatch.setattr("builtins.input", _input)
        return remaining

    return _feed
