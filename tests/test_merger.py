import datetime as dt

from clippings.stages.merger import can_merge, merge_overlapping


def test_adjacent_extension_merges(make_clipping):
    a = make_clipping("Hello world", start=100, end=105)
    b = make_clipping("Hello world wide", start=106, end=110)
    out, merged = merge_overlapping([a, b])
    assert merged == 1
    assert len(out) == 1
    m = out[0]
    assert m.content == "Hello world wide"
    assert (m.location.start, m.location.end, m.location.raw) == (100, 110, "100-110")
    assert m.block_index == min(a.block_index, b.block_index)
    assert m.id == b.id


def test_gap_tolerance_boundary(make_clipping):
    c1 = make_clipping("Content that matches enough", start=100, end=110)
    ok = make_clipping("matches enough to merge", start=115, end=125)
    too_far = make_clipping("matches enough to merge", start=116, end=126)
    assert merge_overlapping([c1, ok])[1] == 1
    assert merge_overlapping([c1, too_far])[1] == 0


def test_word_overlap_below_half_rejected(make_clipping):
    a = make_clipping("alpha beta gamma delta", start=100, end=104)
    b = make_clipping("alpha epsilon zeta eta", start=103, end=108)
    assert not can_merge(a, b)


def test_missing_location_never_merges(make_clipping):
    a = make_clipping("Same words here", start=0, raw="")
    b = make_clipping("Same words here too", start=0, raw="")
    out, merged = merge_overlapping([a, b])
    assert merged == 0
    assert len(out) == 2


def test_different_books_not_merged(make_clipping):
    a = make_clipping("Hello world", start=100, end=105, title="Book A")
    b = make_clipping("Hello world wide", start=101, end=106, title="Book B")
    assert merge_overlapping([a, b])[1] == 0


def test_merge_keeps_later_date_and_union_of_tags(make_clipping):
    early = dt.datetime(2024, 1, 1, tzinfo=dt.timezone.utc)
    late = dt.datetime(2024, 2, 1, tzinfo=dt.timezone.utc)
    a = make_clipping("Hello world wide web", start=100, end=108, date=late, date_raw="late", tags=["x"])
    b = make_clipping("Hello world", start=101, end=104, date=early, date_raw="early", tags=["y", "x"])
    out, _ = merge_overlapping([a, b])
    m = out[0]
    assert m.content == "Hello world wide web"
    assert m.date == late and m.date_raw == "late"
    assert m.tags == ["x", "y"]
    assert (m.location.start, m.location.end) == (100, 108)


def test_merged_output_is_fixed_point(make_clipping):
    items = [
        make_clipping("Hello world", start=100, end=105),
        make_clipping("Hello world wide", start=106, end=110),
        make_clipping("Something else entirely.", start=300, end=305),
        make_clipping("a note", start=102, type="note"),
    ]
    once, merged = merge_overlapping(items)
    twice, merged_again = merge_overlapping(once)
    assert merged == 1
    assert merged_again == 0
    assert [c.to_json() for c in twice] == [c.to_json() for c in once]


def test_flag_mode_marks_shorter_and_keeps_both(make_clipping):
    a = make_clipping("Hello world", start=100, end=105)
    b = make_clipping("Hello world wide", start=106, end=110)
    out, flagged = merge_overlapping([a, b], merge=False)
    assert flagged == 1
    assert len(out) == 2
    by_id = {c.id: c for c in out}
    assert by_id[a.id].is_suspicious_highlight
    assert by_id[a.id].suspicious_reason == "overlapping"
    assert by_id[a.id].possible_duplicate_of == b.id
    assert not by_id[b.id].is_suspicious_highlight


def test_non_highlights_pass_through(make_clipping):
    note = make_clipping("Hello world", start=100, type="note")
    bookmark = make_clipping("", start=101, type="bookmark")
    out, merged = merge_overlapping([note, bookmark])
    assert merged == 0
    assert out == [note, bookmark]


def test_input_not_mutated(make_clipping):
    a = make_clipping("Hello world", start=100, end=105)
    b = make_clipping("Hello world wide", start=106, end=110)
    merge_overlapping([a, b])
    assert b.location.start == 106


def test_grown_accumulator_absorbs_earlier_record(make_clipping):
    items = [
        make_clipping("hello world", start=100, end=105),
        make_clipping("foo", start=106),
        make_clipping("foo bar hello world", start=107, end=112),
    ]
    once, merged = merge_overlapping(items)
    assert merged == 2
    assert len(once) == 1
    assert once[0].content == "foo bar hello world"
    assert (once[0].location.start, once[0].location.end) == (100, 112)
    assert once[0].block_index == items[0].block_index

    twice, merged_again = merge_overlapping(once)
    assert merged_again == 0
    assert [c.to_json() for c in twice] == [c.to_json() for c in once]


def test_flag_mode_rerun_flags_nothing_new(make_clipping):
    a = make_clipping("Hello world", start=100, end=105)
    b = make_clipping("Hello world wide", start=106, end=110)
    once, flagged = merge_overlapping([a, b], merge=False)
    twice, flagged_again = merge_overlapping(once, merge=False)
    assert flagged == 1
    assert flagged_again == 0
    assert [c.to_json() for c in twice] == [c.to_json() for c in once]
