from __future__ import annotations

import json
from pathlib import Path

import pytest

from elantools.eaf import AnnotationDocument, load_eaf
from elantools.errors import TranscriptError
from elantools.ledger import ClipLedger, ClipRecord
from elantools.whisper import WhisperTranscript, run_whisper2eaf

WHISPER = {
    "text": " Hello there. Hmm.",
    "language": "en",
    "segments": [
        {
            "id": 0,
            "seek": 0,
            "start": 0.0,
            "end": 2.5,
            "text": " Hello there.",
            "avg_logprob": -0.25,
            "compression_ratio": 1.1,
            "no_speech_prob": 0.01,
            "temperature": 0.0,
            "words": [
                {"word": " Hello", "start": 0.0, "end": 0.8, "probability": 0.9},
                {"word": " there.", "start": 0.9, "end": 2.6, "probability": 0.8},
            ],
        },
        {
            "id": 1,
            "seek": 0,
            "start": 3.0,
            "end": 4.0,
            "text": " Hmm.",
            "avg_logprob": -1.5,
            "compression_ratio": 0.5,
            "no_speech_prob": 0.75,
            "temperature": 0.2,
            "words": [{"word": " Hmm.", "start": 3.0, "end": 4.0, "probability": 0.2}],
        },
    ],
}

TIMESTAMPED = {
    "text": "Bonjour",
    "segments": [
        {
            "start": 1.0,
            "end": 2.0,
            "text": "Bonjour",
            "confidence": 0.93,
            "words": [{"text": "Bonjour", "start": 1.02, "end": 1.9, "confidence": 0.93}],
        }
    ],
}


def _write(path: Path, data) -> Path:
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_parse_both_word_formats():
    transcript = WhisperTranscript.from_dict(WHISPER)
    assert transcript.language == "en"
    assert [(w.text, w.start, w.end, w.probability) for w in transcript.segments[0].words] == [
        ("Hello", 0, 800, 0.9),
        ("there.", 900, 2600, 0.8),
    ]

    (segment,) = WhisperTranscript.from_dict(TIMESTAMPED).segments
    assert (segment.start, segment.end, segment.text) == (1000, 2000, "Bonjour")
    assert segment.words[0].probability == 0.93
    assert segment.fields == {"confidence": 0.93}


def test_no_speech_filter():
    transcript = WhisperTranscript.from_dict(WHISPER)
    assert [s.text for s in transcript.filter_no_speech(0.6).segments] == ["Hello there."]
    assert len(transcript.filter_no_speech(0.75).segments) == 1
    assert len(transcript.filter_no_speech(0.8).segments) == 2


def test_to_eaf_tiers():
    eaf = WhisperTranscript.from_dict(WHISPER).to_eaf()
    document = AnnotationDocument(eaf)

    assert document.tier_ids == [
        "segments",
        "words",
        "avg_logprob",
        "compression_ratio",
        "id",
        "no_speech_prob",
        "seek",
        "temperature",
    ]
    segments = document.get_tier("segments")
    assert [(a.start, a.end, a.value) for a in segments.annotations] == [(0, 2500, "Hello there."), (3000, 4000, "Hmm.")]
    words = document.get_tier("words")
    assert words.parent_id == "segments"
    # word end clamped into its segment
    assert [(a.start, a.end) for a in words.annotations] == [(0, 800), (900, 2500), (3000, 4000)]
    assert [a.value for a in document.get_tier("no_speech_prob").annotations] == ["0.01", "0.75"]
    assert document.get_tier("temperature").annotations[1].start == 3000


def test_to_eaf_without_words():
    data = {"segments": [{"start": 0.5, "end": 1.0, "text": "x"}]}
    document = AnnotationDocument(WhisperTranscript.from_dict(data).to_eaf())
    assert document.tier_ids == ["segments"]


@pytest.mark.parametrize(
    "data",
    [[], {"text": "no segments"}, {"segments": [{"text": "no times"}]}, {"segments": [{"start": 0, "end": 1, "words": [{"start": 0}]}]}],
)
def test_invalid_transcripts(data):
    with pytest.raises(TranscriptError):
        WhisperTranscript.from_dict(data)


def test_run_whisper2eaf_single_file(tmp_path: Path, media_file: Path):
    path = _write(tmp_path / "talk.json", WHISPER)

    (out_path,) = run_whisper2eaf(json_path=path, media=[media_file])

    assert out_path == tmp_path / "talk.eaf"
    document = load_eaf(out_path)
    assert len(document.get_tier("segments")) == 1
    assert document.media_links()[0].absolute == media_file


def test_run_whisper2eaf_directory(tmp_path: Path):
    directory = tmp_path / "transcripts"
    directory.mkdir()
    _write(directory / "a.json", WHISPER)
    _write(directory / "b.json", TIMESTAMPED)
    (directory / ".hidden.json").write_text("{}", encoding="utf-8")

    written = run_whisper2eaf(directory=directory)
    assert written == [directory / "a.eaf", directory / "b.eaf"]


def test_invalid_json_file(tmp_path: Path):
    path = tmp_path / "broken.json"
    path.write_text("{", encoding="utf-8")
    with pytest.raises(TranscriptError, match="Failed to parse"):
        run_whisper2eaf(json_path=path)


def _clip_ledger(directory: Path) -> Path:
    ledger = ClipLedger.with_media([Path("/media/talk.wav")])
    ledger.add(ClipRecord([Path("/clips/talk_annotation_0002.wav")], 20000, 25000))
    ledger.add(ClipRecord([Path("/clips/talk_annotation_0001.wav")], 10000, 15000))
    return ledger.write(directory / "utterance.json")


def test_join_offsets_by_ledger_start(tmp_path: Path):
    directory = tmp_path / "transcripts"
    directory.mkdir()
    _write(directory / "talk_annotation_0001.wav.json", WHISPER)
    _write(directory / "talk_annotation_0002.wav.json", TIMESTAMPED)
    clips = _clip_ledger(directory)

    (out_path,) = run_whisper2eaf(directory=directory, clips=clips, join=True, prefix_tiers=True)

    assert out_path == tmp_path / "transcripts.eaf"
    document = load_eaf(out_path)
    segments = document.get_tier("utterance_segments")
    assert [(a.start, a.end, a.value) for a in segments.annotations] == [
        (10000, 12500, "Hello there."),
        (21000, 22000, "Bonjour"),
    ]
    assert document.get_tier("utterance_words").parent_id == "utterance_segments"


def test_join_requires_ledger_entry(tmp_path: Path):
    directory = tmp_path / "transcripts"
    directory.mkdir()
    _write(directory / "unrelated.json", WHISPER)
    clips = _clip_ledger(directory)

    with pytest.raises(TranscriptError, match="No clip in the ledger matches 'unrelated.json'"):
        run_whisper2eaf(directory=directory, clips=clips, join=True)


def test_join_requires_clips_and_dir(tmp_path: Path):
    path = _write(tmp_path / "talk.json", WHISPER)
    with pytest.raises(TranscriptError, match="No 'clips' file"):
        run_whisper2eaf(directory=tmp_path, join=True)
    with pytest.raises(TranscriptError, match="requires 'dir'"):
        run_whisper2eaf(json_path=path, clips=path, join=True)
