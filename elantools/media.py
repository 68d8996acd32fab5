"""Add or remove linked media files.

Scrubbing can be done in batch to prepare files for archiving or sharing,
since an absolute media path may contain personal information such as a
user name.
"""

from __future__ import annotations

from pathlib import Path

from beartype import beartype
from pympi.Elan import Eaf  # type: ignore[import-untyped]

from .eaf import add_media_link, load_eaf, media_url_to_path, write_eaf
from .errors import ElanToolsError
from .files import append_file_name, find_eaf_files

SUFFIX_ADD = "ADDMEDIA"
SUFFIX_REMOVE = "REMMEDIA"
SUFFIX_SCRUB = "SCRMEDIA"
SUFFIX_FILENAME = "FNMEDIA"


@beartype
def remove_media_link(eaf: Eaf, media: Path) -> int:
    """Remove links to a media file, matched on file name.

    Returns:
        Number of links removed
    """
    before = len(eaf.media_descriptors)
    eaf.media_descriptors = [
        d for d in eaf.media_descriptors
        if media_url_to_path(d.get("MEDIA_URL") or "").name != media.name
    ]
    return before - len(eaf.media_descriptors)


@beartype
def scrub_media_links(eaf: Eaf, keep_filename: bool = False) -> None:
    """Remove all media links, or reduce them to bare file names."""
    if not keep_filename:
        eaf.media_descriptors = []
        return
    for descriptor in eaf.media_descriptors:
        name = media_url_to_path(descriptor.get("MEDIA_URL") or "").name
        descriptor["MEDIA_URL"] = name
        descriptor["RELATIVE_MEDIA_URL"] = f"./{name}"


@beartype
def run_media(
    eaf_path: Path | None = None,
    directory: Path | None = None,
    media: Path | None = None,
    add: bool = False,
    remove: bool = False,
    scrub: bool = False,
    filename_only: bool = False,
) -> list[Path]:
    """Entry point for the `media` command.

    Returns:
        Paths to the written ELAN-files
    """
    if (eaf_path is None) == (directory is None):
        raise ElanToolsError("Specify exactly one of 'eaf' and 'dir'.")

    if media is not None:
        if add == remove:
            raise ElanToolsError("Specify exactly one of 'add', 'remove'.")
        if directory is not None:
            raise ElanToolsError("'add' and 'remove' only work on a single ELAN-file.")
        suffix = SUFFIX_ADD if add else SUFFIX_REMOVE
    else:
        if scrub == filename_only:
            raise ElanToolsError("Specify exactly one of 'scrub', 'filename-only'.")
        suffix = SUFFIX_SCRUB if scrub else SUFFIX_FILENAME

    if directory is not None:
        if directory.is_file():
            raise ElanToolsError(f"{directory} is a file.")
        paths = find_eaf_files(directory)
    else:
        paths = [eaf_path]

    written: list[Path] = []
    for path in paths:
        document = load_eaf(path)
        eaf = document.eaf

        if media is not None and add:
            add_media_link(eaf, media, path.parent)
        elif media is not None:
            if not remove_media_link(eaf, media):
                print(f"(!) No media named '{media.name}' linked in '{path}'")
        else:
            scrub_media_links(eaf, keep_filename=filename_only)

        out_path = append_file_name(path, suffix)
        if not write_eaf(eaf, out_path):
            print(f"Skipped '{out_path}'")
            continue
        written.append(out_path)

        document.reload()
        print(f"Resulting media paths in '{out_path}':")
        for i, link in enumerate(document.media_links(), start=1):
            print(f"{i:2}.  Media URL:          {link.absolute}")
            print(f"     Relative media URL: {link.relative or ''}")

    return written
