from __future__ import annotations

from pathlib import Path

import pytest

from elantools.files import (
    affix_file_name,
    append_file_name,
    clips_dir,
    confirm,
    find_eaf_files,
    has_extension,
    write_file,
)


def test_confirm_reprompts_until_valid(answers, capsys):
    answers("maybe", "YES")
    assert confirm("Continue?")
    assert "(!) Answer 'y' or 'n'." in capsys.readouterr().out

    answers("n")
    assert not confirm("Continue?")


def test_write_file_declined_keeps_content(tmp_path: Path, answers):
    path = tmp_path / "out.txt"
    assert write_file("first", path)

    answers("no")
    assert not write_file("second", path)
    assert path.read_text(encoding="utf-8") == "first"

    answers("y")
    assert write_file(b"third", path)
    assert path.read_bytes() == b"third"


def test_file_name_helpers():
    assert append_file_name(Path("dir/talk.eaf"), "500") == Path("dir/talk_500.eaf")
    assert affix_file_name(Path("dir/talk.eaf"), prefix="A", suffix="B") == Path("dir/A_talk_B.eaf")
    assert affix_file_name(Path("talk.eaf"), suffix="x", delimiter="-") == Path("talk-x.eaf")
    assert has_extension(Path("TALK.EAF"), "eaf")
    assert has_extension(Path("talk.eaf"), ".eaf")
    assert not has_extension(Path("talk.eaf.bak"), "eaf")
    assert clips_dir(Path("/data/talk.eaf")) == Path("/data/talk_CLIPS")
    assert clips_dir(Path("/data/talk.eaf"), Path("/out")) == Path("/out/talk_CLIPS")


def test_find_eaf_files_skips_hidden(tmp_path: Path):
    (tmp_path / "b").mkdir()
    (tmp_path / ".hidden").mkdir()
    for name in ("a.eaf", "b/c.EAF", "b/.d.eaf", ".hidden/e.eaf", "notes.txt"):
        (tmp_path / name).write_text("", encoding="utf-8")

    assert find_eaf_files(tmp_path) == [tmp_path / "a.eaf", tmp_path / "b" / "c.EAF"]

    with pytest.raises(FileNotFoundError):
        find_eaf_files(tmp_path / "missing")
