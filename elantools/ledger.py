"""Clip ledger: maps extracted clip files back to their timespan in the original media.

One ledger is written per tier processed by the `clips` command, as
`<outdir>/<tier_id>/<tier_id>.json`:

    {
      "original_media": ["/path/to/recording.mp4"],
      "clips": [
        {"media": ["/path/to/recording_annotation_0001.mp4"], "start": 1200, "end": 3400}
      ]
    }

The ledger is read back when e.g. per-clip speech-to-text transcripts are
imported into the time frame of the original recording.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from beartype import beartype

from .errors import LedgerError


@beartype
def bare_stem(path: Path) -> str:
    """Strip all extension-like components from a file name.

    `talk.words.wav.json` -> `talk`
    """
    name = path.name
    while Path(name).suffix:
        name = Path(name).stem
    return name


@dataclass
class ClipRecord:
    """Output files cut from one annotation boundary."""

    media: list[Path] = field(default_factory=list)
    start: int = 0  # ms in original media
    end: int = 0  # ms in original media

    def add(self, path: Path) -> None:
        self.media.append(path)

    def to_dict(self) -> dict[str, Any]:
        return {
            "media": [str(p) for p in self.media],
            "start": self.start,
            "end": self.end,
        }

    @classmethod
    def from_dict(cls, data: Any) -> ClipRecord:
        if not isinstance(data, dict):
            raise LedgerError(f"Clip entry must be an object, got {type(data).__name__}")
        try:
            media = data["media"]
            start = data["start"]
            end = data["end"]
        except KeyError as err:
            raise LedgerError(f"Clip entry is missing {err}") from err
        if not isinstance(media, list) or not all(isinstance(m, str) for m in media):
            raise LedgerError("Clip entry 'media' must be a list of paths")
        # bool is an int subclass
        for name, value in (("start", start), ("end", end)):
            if not isinstance(value, int) or isinstance(value, bool):
                raise LedgerError(f"Clip entry '{name}' must be an integer, got {value!r}")
        return cls(media=[Path(m) for m in media], start=start, end=end)


@dataclass
class ClipLedger:
    """Clips extracted in one run, with the media files they were cut from."""

    original_media: list[Path] = field(default_factory=list)
    clips: list[ClipRecord] = field(default_factory=list)

    @classmethod
    def with_media(cls, media: list[Path]) -> ClipLedger:
        return cls(original_media=list(media))

    def __len__(self) -> int:
        return len(self.clips)

    def __iter__(self):
        return iter(self.clips)

    def add(self, record: ClipRecord) -> None:
        self.clips.append(record)

    def copy(self) -> ClipLedger:
        return ClipLedger(
            original_media=list(self.original_media),
            clips=[ClipRecord(list(c.media), c.start, c.end) for c in self.clips],
        )

    @beartype
    def lookup_by_filename(self, path: Path) -> tuple[int, int] | None:
        """Return (start, end) in the original media for a clip-derived file.

        Only bare file stems are compared, so any file named after a clip
        matches, e.g. `clip.words.wav.json` matches the clip `clip.wav`.
        Clip names are assumed to be unique. First match wins.
        """
        stem = bare_stem(path)
        for record in self.clips:
            if any(bare_stem(m) == stem for m in record.media):
                return record.start, record.end
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "original_media": [str(p) for p in self.original_media],
            "clips": [c.to_dict() for c in self.clips],
        }

    @classmethod
    def from_dict(cls, data: Any) -> ClipLedger:
        if not isinstance(data, dict):
            raise LedgerError("Clip ledger must be a JSON object")
        try:
            original_media = data["original_media"]
            clips = data["clips"]
        except KeyError as err:
            raise LedgerError(f"Clip ledger is missing {err}") from err
        if not isinstance(original_media, list) or not all(
            isinstance(m, str) for m in original_media
        ):
            raise LedgerError("'original_media' must be a list of paths")
        if not isinstance(clips, list):
            raise LedgerError("'clips' must be a list")
        return cls(
            original_media=[Path(m) for m in original_media],
            clips=[ClipRecord.from_dict(c) for c in clips],
        )

    @classmethod
    @beartype
    def read(cls, path: Path) -> ClipLedger:
        """Load a clip ledger from a JSON-file.

        Args:
            path: Path to the ledger file

        Returns:
            Parsed ledger

        Raises:
            LedgerError: If the file is not valid JSON or does not match the ledger layout
        """
        with path.open("r", encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as err:
                raise LedgerError(f"Failed to parse clip ledger '{path}': {err}") from err

        try:
            return cls.from_dict(data)
        except LedgerError as err:
            raise LedgerError(f"Invalid clip ledger '{path}': {err}") from err

    @beartype
    def write(self, path: Path) -> Path:
        """Write ledger as JSON. Existing files are overwritten."""
        with path.open("w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)
        return path
