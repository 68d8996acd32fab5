"""Import Whisper transcripts as ELAN-files.

Both the JSON output of Whisper (words with `word` and `probability`) and of
whisper-timestamped (words with `text` and `confidence`) are supported.

Transcripts of clips created with the `clips` command can be joined into a
single ELAN-file in the time frame of the original recording, using the clip
ledger to look up where each clip starts.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

from beartype import beartype
from pympi.Elan import Eaf  # type: ignore[import-untyped]

from .config import NO_SPEECH_THRESHOLD
from .eaf import (
    add_aligned_annotation,
    add_media_link,
    add_ref_annotation,
    add_tier,
    ensure_linguistic_type,
    new_eaf,
    rename_tier,
    write_eaf,
)
from .errors import TranscriptError
from .files import has_extension, is_hidden
from .ledger import ClipLedger
from .logging_utils import get_logger

log = get_logger(__name__)

SEGMENTS_TIER = "segments"
WORDS_TIER = "words"
REF_LINGUISTIC_TYPE = "whisper_ref_values"

# Segment values added as symbolic associations, in tier order
SEGMENT_FIELDS = (
    "avg_logprob",
    "compression_ratio",
    "confidence",
    "id",
    "no_speech_prob",
    "seek",
    "temperature",
)


def _ms(seconds: Any) -> int:
    return round(float(seconds) * 1000)


@dataclass
class WhisperWord:
    text: str
    start: int  # ms
    end: int  # ms
    probability: float | None = None


@dataclass
class WhisperSegment:
    start: int  # ms
    end: int  # ms
    text: str
    words: list[WhisperWord] = field(default_factory=list)
    fields: dict[str, Any] = field(default_factory=dict)

    @property
    def no_speech_prob(self) -> float | None:
        value = self.fields.get("no_speech_prob")
        return float(value) if value is not None else None

    def offset(self, offset_ms: int) -> WhisperSegment:
        return replace(
            self,
            start=self.start + offset_ms,
            end=self.end + offset_ms,
            words=[replace(w, start=w.start + offset_ms, end=w.end + offset_ms) for w in self.words],
        )


@beartype
def parse_word(data: dict[str, Any]) -> WhisperWord | None:
    """Word from either transcript format. None if it has no time values."""
    text = data.get("word", data.get("text"))
    if text is None:
        raise TranscriptError(f"Word without text: {data}")
    if data.get("start") is None or data.get("end") is None:
        return None
    probability = data.get("probability", data.get("confidence"))
    return WhisperWord(
        text=str(text).strip(),
        start=_ms(data["start"]),
        end=_ms(data["end"]),
        probability=float(probability) if probability is not None else None,
    )


@beartype
def parse_segment(data: dict[str, Any]) -> WhisperSegment:
    try:
        start, end = _ms(data["start"]), _ms(data["end"])
    except (KeyError, TypeError, ValueError) as err:
        raise TranscriptError(f"Segment without valid start/end: {err}") from err
    words = [w for w in (parse_word(d) for d in data.get("words") or []) if w is not None]
    return WhisperSegment(
        start=start,
        end=end,
        text=str(data.get("text", "")).strip(),
        words=words,
        fields={k: data[k] for k in SEGMENT_FIELDS if data.get(k) is not None},
    )


@dataclass
class WhisperTranscript:
    """Segments of one or more joined transcripts."""

    segments: list[WhisperSegment] = field(default_factory=list)
    language: str | None = None

    @property
    def text(self) -> str:
        return " ".join(s.text for s in self.segments)

    @property
    def has_words(self) -> bool:
        return any(s.words for s in self.segments)

    @classmethod
    @beartype
    def from_dict(cls, data: Any) -> WhisperTranscript:
        if not isinstance(data, dict) or not isinstance(data.get("segments"), list):
            raise TranscriptError("Transcript must be a JSON object with a 'segments' list")
        return cls(
            segments=[parse_segment(s) for s in data["segments"]],
            language=data.get("language"),
        )

    @classmethod
    @beartype
    def read(cls, path: Path) -> WhisperTranscript:
        """Load a Whisper or whisper-timestamped JSON-file.

        Raises:
            TranscriptError: If the file is not valid JSON or not a transcript
        """
        with path.open("r", encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as err:
                raise TranscriptError(f"Failed to parse '{path}': {err}") from err
        try:
            return cls.from_dict(data)
        except TranscriptError as err:
            raise TranscriptError(f"Invalid transcript '{path}': {err}") from err

    def offset(self, offset_ms: int) -> WhisperTranscript:
        return replace(self, segments=[s.offset(offset_ms) for s in self.segments])

    def filter_no_speech(self, threshold: float = NO_SPEECH_THRESHOLD) -> WhisperTranscript:
        """Discard segments with a `no_speech_prob` at or above `threshold`."""
        kept = [
            s for s in self.segments
            if s.no_speech_prob is None or s.no_speech_prob < threshold
        ]
        if len(kept) < len(self.segments):
            log.info("discarded %d segments with no_speech_prob >= %s", len(self.segments) - len(kept), threshold)
        return replace(self, segments=kept)

    def join(self, others: list[WhisperTranscript]) -> WhisperTranscript:
        """Concatenate segments. Time values are assumed to be offset already."""
        segments = list(self.segments)
        for other in others:
            segments.extend(other.segments)
        return replace(self, segments=segments)

    @beartype
    def to_eaf(self) -> Eaf:
        """ELAN-file with a `segments` tier, a `words` tier if there are word
        timings, and one referring tier per segment field present.
        """
        eaf = new_eaf()
        ensure_linguistic_type(eaf, "default-lt")
        add_tier(eaf, SEGMENTS_TIER, "default-lt")

        if self.has_words:
            ensure_linguistic_type(eaf, WORDS_TIER, constraint="Included_In")
            add_tier(eaf, WORDS_TIER, WORDS_TIER, parent=SEGMENTS_TIER)

        present = [f for f in SEGMENT_FIELDS if any(f in s.fields for s in self.segments)]
        if present:
            ensure_linguistic_type(
                eaf, REF_LINGUISTIC_TYPE, constraint="Symbolic_Association", time_alignable=False
            )
        for name in present:
            add_tier(eaf, name, REF_LINGUISTIC_TYPE, parent=SEGMENTS_TIER)

        for segment in self.segments:
            start, end = max(segment.start, 0), max(segment.end, 0)
            aid = add_aligned_annotation(eaf, SEGMENTS_TIER, start, end, segment.text)
            for word in segment.words:
                # Word timings may slightly exceed the segment
                w_start = min(max(word.start, start), end)
                w_end = min(max(word.end, w_start), end)
                add_aligned_annotation(eaf, WORDS_TIER, w_start, w_end, word.text)
            for name in present:
                if name in segment.fields:
                    add_ref_annotation(eaf, name, aid, str(segment.fields[name]))

        return eaf


@beartype
def find_transcripts(directory: Path, exclude: Path | None = None) -> list[Path]:
    """JSON-files in a directory (not recursive), excluding `exclude`."""
    if not directory.is_dir():
        raise FileNotFoundError(f"Directory not found: {directory}")
    return sorted(
        p for p in directory.iterdir()
        if p.is_file()
        and has_extension(p, "json")
        and not is_hidden(p)
        and (exclude is None or p.name != exclude.name)
    )


@beartype
def join_clip_transcripts(
    paths: list[Path],
    ledger: ClipLedger,
    no_speech_threshold: float = NO_SPEECH_THRESHOLD,
) -> WhisperTranscript:
    """Offset each clip transcript by the clip start in the original media and join them.

    Raises:
        TranscriptError: If a transcript can not be matched to a clip in the ledger
    """
    if not paths:
        raise TranscriptError("No JSON-files provided")

    placed: list[tuple[int, WhisperTranscript]] = []
    for path in paths:
        timespan = ledger.lookup_by_filename(path)
        if timespan is None:
            raise TranscriptError(f"No clip in the ledger matches '{path.name}'")
        transcript = WhisperTranscript.read(path).filter_no_speech(no_speech_threshold)
        placed.append((timespan[0], transcript.offset(timespan[0])))

    placed.sort(key=lambda item: item[0])
    return placed[0][1].join([t for _, t in placed[1:]])


@beartype
def _finish(eaf: Eaf, out_path: Path, media: list[Path]) -> Path | None:
    for media_path in media:
        add_media_link(eaf, media_path, out_path.parent)
    if not write_eaf(eaf, out_path):
        print(f"Skipped '{out_path}'")
        return None
    print(f"Wrote {out_path}")
    return out_path


@beartype
def run_whisper2eaf(
    json_path: Path | None = None,
    directory: Path | None = None,
    clips: Path | None = None,
    join: bool = False,
    prefix_tiers: bool = False,
    media: list[Path] | None = None,
    no_speech_threshold: float = NO_SPEECH_THRESHOLD,
) -> list[Path]:
    """Entry point for the `whisper2eaf` command.

    Returns:
        Paths to the written ELAN-files
    """
    media = media or []
    if directory is not None:
        paths = find_transcripts(directory, exclude=clips)
    elif json_path is not None:
        paths = [json_path]
    else:
        raise TranscriptError("Must choose one of 'json' or 'dir'")

    if join:
        if clips is None:
            raise TranscriptError("No 'clips' file provided")
        if directory is None:
            raise TranscriptError("'join' requires 'dir'")
        ledger = ClipLedger.read(clips)
        eaf = join_clip_transcripts(paths, ledger, no_speech_threshold).to_eaf()
        if prefix_tiers:
            for tier_id in list(eaf.tiers):
                rename_tier(eaf, tier_id, f"{clips.stem}_{tier_id}")
        resolved = directory.resolve()
        written = _finish(eaf, resolved.parent / f"{resolved.name}.eaf", media)
        return [written] if written else []

    written_paths: list[Path] = []
    for path in paths:
        eaf = WhisperTranscript.read(path).filter_no_speech(no_speech_threshold).to_eaf()
        written = _finish(eaf, path.with_suffix(".eaf"), media)
        if written:
            written_paths.append(written)
    return written_paths
