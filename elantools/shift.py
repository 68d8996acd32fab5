from __future__ import annotations

from pathlib import Path

from beartype import beartype

from .eaf import load_eaf, shift_timeslots, write_eaf
from .files import append_file_name


@beartype
def run_shift(eaf_path: Path, shift: int) -> Path | None:
    """Shift all annotations backwards or forwards in time.

    Negative time values are set to 0 so that the timeline stays aligned
    with the media start. Annotations that end up with zero length are
    removed together with their dependent annotations.

    Args:
        eaf_path: ELAN-file to shift
        shift: Milliseconds, negative to shift backwards

    Returns:
        Path to `<stem>_<shift>.eaf`, None if the user declined to overwrite it
    """
    document = load_eaf(eaf_path)
    removed = shift_timeslots(document.eaf, shift)
    if removed:
        print(f"Removed {removed} annotations with zero length after shifting {shift} ms")

    out_path = append_file_name(eaf_path.with_suffix(".eaf"), str(shift))
    if not write_eaf(document.eaf, out_path):
        print("Aborted.")
        return None
    print(f"Wrote {out_path}")
    return out_path
