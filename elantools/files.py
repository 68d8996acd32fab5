from __future__ import annotations

from pathlib import Path

from beartype import beartype

from .logging_utils import get_logger

log = get_logger(__name__)


@beartype
def confirm(message: str) -> bool:
    """Ask a yes/no question on stdin until a valid answer is given.

    Args:
        message: Question shown before the "(y/n)" hint

    Returns:
        True for yes, False for no
    """
    while True:
        answer = input(f"{message} (y/n): ").strip().lower()
        if answer in ("y", "yes"):
            return True
        if answer in ("n", "no"):
            return False
        print("(!) Answer 'y' or 'n'.")


@beartype
def confirm_overwrite(path: Path) -> bool:
    """True if `path` does not exist or the user agrees to overwrite it."""
    if not path.exists():
        return True
    return confirm(f"'{path}' already exists. Overwrite?")


@beartype
def write_file(content: str | bytes, path: Path) -> bool:
    """Write content to a file, asking before overwriting.

    Args:
        content: Text (written as UTF-8) or raw bytes
        path: Output path

    Returns:
        False if the user declined to overwrite an existing file
    """
    if not confirm_overwrite(path):
        return False
    if isinstance(content, str):
        path.write_text(content, encoding="utf-8")
    else:
        path.write_bytes(content)
    log.debug("wrote %s", path)
    return True


@beartype
def append_file_name(path: Path, suffix: str) -> Path:
    """`dir/name.ext` -> `dir/name_<suffix>.ext`"""
    return path.with_name(f"{path.stem}_{suffix}{path.suffix}")


@beartype
def affix_file_name(
    path: Path,
    prefix: str | None = None,
    suffix: str | None = None,
    delimiter: str = "_",
) -> Path:
    """Add a prefix and/or suffix to the file stem, keeping the extension."""
    parts = [p for p in (prefix, path.stem, suffix) if p]
    return path.with_name(delimiter.join(parts) + path.suffix)


@beartype
def is_hidden(path: Path) -> bool:
    return path.name.startswith(".")


@beartype
def has_extension(path: Path, ext: str) -> bool:
    """Case-insensitive extension check, `ext` with or without leading dot."""
    return path.suffix.lower() == "." + ext.lower().lstrip(".")


@beartype
def find_eaf_files(directory: Path) -> list[Path]:
    """Find all ELAN-files below a directory.

    Args:
        directory: Directory to search recursively

    Returns:
        Sorted paths, hidden files and files in hidden directories excluded
    """
    if not directory.is_dir():
        raise FileNotFoundError(f"Directory not found: {directory}")

    found: list[Path] = []
    for path in directory.rglob("*"):
        relative = path.relative_to(directory)
        if any(part.startswith(".") for part in relative.parts):
            continue
        if path.is_file() and has_extension(path, "eaf"):
            found.append(path)
    return sorted(found)


@beartype
def clips_dir(eaf_path: Path, outdir: Path | None = None) -> Path:
    """Directory `<stem>_CLIPS` inside `outdir`, or next to the ELAN-file."""
    return (outdir or eaf_path.parent) / f"{eaf_path.stem}_CLIPS"
