"""Generate an ELAN-file from a CSV-file with one annotation per row.

Time stamps are milliseconds (`112300`) or `HH:MM:SS[.fff]` (`00:01:52.3`).
Extra columns can be added as referring tiers under the main tier.
"""

from __future__ import annotations

import re
from pathlib import Path

import pandas as pd
from beartype import beartype
from pympi.Elan import Eaf  # type: ignore[import-untyped]

from .eaf import (
    add_aligned_annotation,
    add_media_link,
    add_ref_annotation,
    add_tier,
    ensure_linguistic_type,
    load_eaf,
    new_eaf,
    write_eaf,
)
from .errors import CsvFormatError
from .logging_utils import get_logger

log = get_logger(__name__)

DELIMITERS: dict[str, str] = {"comma": ",", "semicolon": ";", "tab": "\t"}

MAIN_LINGUISTIC_TYPE = "default-lt"
REF_LINGUISTIC_TYPE = "symbolic-association"

_HMS = re.compile(r"^(\d+):(\d{1,2}):(\d{1,2}(?:\.\d+)?)$")


@beartype
def parse_timestamp(value: str) -> int:
    """Convert `112300` or `00:01:52.300` to milliseconds."""
    value = value.strip()
    if re.fullmatch(r"-?\d+", value):
        return int(value)
    match = _HMS.match(value)
    if match is None:
        raise CsvFormatError(f"Failed to convert '{value}' to milliseconds.")
    hours, minutes, seconds = match.groups()
    return int(hours) * 3_600_000 + int(minutes) * 60_000 + round(float(seconds) * 1000)


@beartype
def read_csv(csv_path: Path, delimiter: str = "comma") -> pd.DataFrame:
    """Read a CSV-file with all cells as trimmed strings.

    Args:
        csv_path: CSV-file with a header row
        delimiter: One of 'comma', 'semicolon', 'tab'

    Returns:
        DataFrame with string cells, empty cells as ""
    """
    if delimiter not in DELIMITERS:
        raise CsvFormatError(f"Invalid delimiter '{delimiter}'.")
    try:
        df = pd.read_csv(
            csv_path,
            sep=DELIMITERS[delimiter],
            dtype=str,
            keep_default_na=False,
            skipinitialspace=True,
        )
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as err:
        raise CsvFormatError(f"Error parsing '{csv_path}': {err}") from err

    df.columns = [str(c).strip() for c in df.columns]
    return df.apply(lambda col: col.str.strip())


@beartype
def print_debug(df: pd.DataFrame) -> None:
    print("-- FILE START --")
    print(f"[HDR] LEN: {len(df.columns):3} | {list(df.columns)}")
    for row in df.itertuples(index=False):
        print(f"[REC] LEN: {len(row):3} | {list(row)}")
    print("--- FILE END ---")


@beartype
def add_csv_tiers(
    eaf: Eaf,
    df: pd.DataFrame,
    start_col: str = "start",
    end_col: str = "end",
    values_col: str = "values",
    ref_cols: list[str] | None = None,
    offset: int = 0,
) -> int:
    """Add the CSV rows as a main tier named after the values column.

    Args:
        eaf: Document to add tiers to
        df: CSV contents from `read_csv`
        start_col: Column with start times
        end_col: Column with end times
        values_col: Column with annotation values, also the main tier ID
        ref_cols: Columns added as referring tiers, named after the column
        offset: Milliseconds added to all time stamps

    Returns:
        Number of annotations in the main tier
    """
    for col in (start_col, end_col, values_col):
        if col not in df.columns:
            raise CsvFormatError(f"No column named '{col}'")

    ref_tiers: list[str] = []
    for col in ref_cols or []:
        if col not in df.columns:
            print(f"(!) No column named '{col}'. Ignoring.")
            continue
        ref_tiers.append(col)

    for tier_id in [values_col, *ref_tiers]:
        if tier_id in eaf.tiers:
            raise CsvFormatError(f"Tier '{tier_id}' already exists")

    ensure_linguistic_type(eaf, MAIN_LINGUISTIC_TYPE)
    add_tier(eaf, values_col, MAIN_LINGUISTIC_TYPE)
    if ref_tiers:
        ensure_linguistic_type(
            eaf, REF_LINGUISTIC_TYPE, constraint="Symbolic_Association", time_alignable=False
        )
    for tier_id in ref_tiers:
        add_tier(eaf, tier_id, REF_LINGUISTIC_TYPE, parent=values_col)

    count = 0
    for row_number, row in enumerate(df.to_dict("records"), start=1):
        start = parse_timestamp(row[start_col])
        end = parse_timestamp(row[end_col])
        if end <= start:
            raise CsvFormatError(f"Row {row_number}: end time {end} ms is not after start time {start} ms")

        start, end = start + offset, end + offset
        if end < 0:
            log.info("row %d ends before 0 ms after offset, skipped", row_number)
            continue
        start = max(start, 0)

        value = row[values_col]
        print(f"{start:>10} - {end:<10} | {value}")
        aid = add_aligned_annotation(eaf, values_col, start, end, value)
        for tier_id in ref_tiers:
            add_ref_annotation(eaf, tier_id, aid, row[tier_id])
        count += 1

    print(f"Created main tier '{values_col}'")
    for tier_id in ref_tiers:
        print(f"Added referred tier '{tier_id}'")
    return count


@beartype
def run_csv2eaf(
    csv_path: Path,
    delimiter: str = "comma",
    start_col: str = "start",
    end_col: str = "end",
    values_col: str = "values",
    ref_cols: list[str] | None = None,
    offset: int = 0,
    video: Path | None = None,
    eaf_path: Path | None = None,
    debug: bool = False,
) -> Path | None:
    """Entry point for the `csv2eaf` command.

    Returns:
        Path to the written ELAN-file, None for debug output or a declined overwrite
    """
    df = read_csv(csv_path, delimiter)

    if debug:
        print_debug(df)
        return None

    eaf = load_eaf(eaf_path).eaf if eaf_path is not None else new_eaf()
    out_path = csv_path.with_suffix(".eaf")

    add_csv_tiers(eaf, df, start_col, end_col, values_col, ref_cols, offset)

    if video is not None:
        add_media_link(eaf, video, out_path.parent)

    if not write_eaf(eaf, out_path):
        print("Aborted.")
        return None
    print(f"Wrote {out_path}")
    return out_path
