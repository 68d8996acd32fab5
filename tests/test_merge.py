from __future__ import annotations

from pathlib import Path

import pytest

from elantools.eaf import AnnotationDocument, load_eaf
from elantools.errors import MergeError
from elantools.merge import merge_eafs, run_merge


def _spans(eaf, tier_id: str = "default") -> list[tuple[int | None, int | None, str]]:
    return [(a.start, a.end, a.value) for a in AnnotationDocument(eaf).get_tier(tier_id).annotations]


def test_merge_combines_tiers_without_overlap(timed_eaf):
    first = load_eaf(timed_eaf("one.eaf", [(0, 100, "x"), (500, 600, "z")])).eaf
    second = load_eaf(timed_eaf("two.eaf", [(200, 300, "y")])).eaf

    merged = merge_eafs(first, second)
    assert _spans(merged) == [(0, 100, "x"), (200, 300, "y"), (500, 600, "z")]
    assert len(first.annotations) == 2


def test_merge_overlap_is_fatal_without_join(timed_eaf):
    first = load_eaf(timed_eaf("one.eaf", [(0, 1000, "a")])).eaf
    second = load_eaf(timed_eaf("two.eaf", [(500, 1500, "b")])).eaf

    with pytest.raises(MergeError, match="Overlapping annotations in tier 'default'"):
        merge_eafs(first, second)


def test_merge_join_unions_spans(timed_eaf):
    first = load_eaf(timed_eaf("one.eaf", [(0, 1000, "a"), (3000, 4000, "d")])).eaf
    second = load_eaf(timed_eaf("two.eaf", [(500, 1500, "b"), (1400, 2000, "c")])).eaf

    merged = merge_eafs(first, second, join=True)
    assert _spans(merged) == [(0, 2000, "a b c"), (3000, 4000, "d")]


def test_merge_drops_untimed_annotations(timed_eaf):
    first = load_eaf(timed_eaf("one.eaf", [(0, 100, "x"), (200, 300, "untimed")])).eaf
    second = load_eaf(timed_eaf("two.eaf", [(400, 500, "y")])).eaf
    begin = first.tiers["default"][0][
        next(aid for aid, a in first.tiers["default"][0].items() if a[2] == "untimed")
    ][0]
    first.timeslots[begin] = None

    merged = merge_eafs(first, second)
    assert [v for _, _, v in _spans(merged)] == ["x", "y"]


def test_merge_copies_new_tiers_with_dependants(timed_eaf, sample_eaf: Path, media_file: Path):
    first = load_eaf(timed_eaf("one.eaf", [(0, 100, "x")])).eaf
    second = load_eaf(sample_eaf).eaf

    merged = AnnotationDocument(merge_eafs(first, second))
    assert merged.tier_ids == ["default", "utterance", "translation", "words"]
    assert [a.value for a in merged.get_tier("translation").annotations] == ["Hallo Welt", "Guten Morgen"]
    assert [a.value for a in merged.get_tier("words").annotations] == ["Hello", "world"]
    assert merged.get_tier("words").tokenized
    assert merged.get_tier("translation").annotations[1].start == 1500
    assert [link.absolute for link in merged.media_links()] == [media_file]


def test_run_merge(timed_eaf, capsys):
    one = timed_eaf("one.eaf", [(0, 100, "x")])
    two = timed_eaf("two.eaf", [(200, 300, "y")])

    out_path = run_merge([one, two])
    assert out_path == one.with_name("one_two_merged.eaf")
    assert load_eaf(out_path).annotation_count() == 2
    assert "Merged 2 annotations in 1 tiers" in capsys.readouterr().out


def test_run_merge_requires_two_files(timed_eaf):
    with pytest.raises(MergeError, match="two ELAN-files"):
        run_merge([timed_eaf("one.eaf", [(0, 100, "x")])])
