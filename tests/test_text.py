from __future__ import annotations

import re

from elantools.text import UNSAFE_FILENAME_CHARS, sanitize, truncate


def test_sanitize_without_options_returns_value_untouched():
    for value in ("", "  padded  ", "Grüße, Welt!", "tab\tand\nnewline"):
        assert sanitize(value) == value


def test_sanitize_truncates_to_max_len():
    assert sanitize("Hello world", max_len=5) == "Hello"
    assert sanitize("short", max_len=20) == "short"
    assert len(sanitize("ééééééé", max_len=3)) == 3


def test_sanitize_trimmed_result_may_be_shorter_than_max_len():
    assert sanitize("ab   cd", whitespace_substitute="-", max_len=5) == "ab"


def test_sanitize_strip_pattern_removes_all_and_only_matches():
    assert sanitize("a,b;c:d", strip_pattern=re.compile(r"[,;:]")) == "abcd"


def test_unsafe_filename_chars():
    value = "\"q\" 'a' #*<>{}()[].,:;!/?=\\-ok"
    assert sanitize(value, strip_pattern=UNSAFE_FILENAME_CHARS) == "q a ok"


def test_sanitize_whitespace_substitute_trims_first():
    assert sanitize("  a b\tc  ", whitespace_substitute="_") == "a_b_c"


def test_sanitize_ascii_substitute():
    assert sanitize(" café au lait ", ascii_substitute="_") == "caf_ au lait"


def test_sanitize_both_substitutes():
    assert sanitize("Grüße Welt", ascii_substitute="?", whitespace_substitute="_") == "Gr??e_Welt"


def test_truncate():
    assert truncate("  keep spaces  ", 7) == "  keep "
