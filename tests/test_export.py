from __future__ import annotations

import json
from pathlib import Path

from elantools.eaf import AnnotationDocument
from elantools.export import document_to_dict, run_json


def test_simple_export(sample_document: AnnotationDocument):
    data = document_to_dict(sample_document, simple=True)

    assert list(data) == ["tiers"]
    assert [t["tier_id"] for t in data["tiers"]] == ["utterance", "translation", "words"]
    first = data["tiers"][0]["annotations"][0]
    assert set(first) == {"annotation_id", "value", "start", "end"}
    assert (first["value"], first["start"], first["end"]) == ("Hello world", 0, 1000)


def test_full_export(sample_document: AnnotationDocument, media_file: Path):
    data = document_to_dict(sample_document)

    assert data["media"][0]["MEDIA_URL"] == media_file.as_uri()
    assert data["media"][0]["RELATIVE_MEDIA_URL"] == "./recording.mp4"
    lingtypes = {lt["LINGUISTIC_TYPE_ID"]: lt for lt in data["linguistic_types"]}
    assert lingtypes["words-lt"]["CONSTRAINTS"] == "Symbolic_Subdivision"
    words = data["tiers"][2]
    assert words["tokenized"] is True
    assert words["parent_id"] == "utterance"
    assert [a["value"] for a in words["annotations"]] == ["Hello", "world"]
    assert data["tiers"][0]["participant"] == "Speaker A"


def test_run_json_writes_file(sample_eaf: Path):
    out_path = run_json(sample_eaf, simple=True)

    assert out_path == sample_eaf.with_suffix(".json")
    data = json.loads(out_path.read_text(encoding="utf-8"))
    assert len(data["tiers"][1]["annotations"]) == 2


def test_run_json_declined(sample_eaf: Path, answers, capsys):
    sample_eaf.with_suffix(".json").write_text("{}", encoding="utf-8")
    answers("n")
    assert run_json(sample_eaf) is None
    assert "aborted" in capsys.readouterr().out
