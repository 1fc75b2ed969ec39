from clippings.stages.dedup import remove_duplicates


def test_exact_duplicates_removed_first_wins(make_clipping):
    a = make_clipping("Hello World.", start=10, end=12)
    b = make_clipping("hello world.  ", start=10, end=12, title="THE BOOK")
    c = make_clipping("Completely different.", start=10, end=12)
    out, removed = remove_duplicates([a, b, c])
    assert removed == 1
    assert [x.id for x in out] == [a.id, c.id]
    assert out[0].block_index == a.block_index


def test_dedup_is_idempotent(make_clipping):
    items = [
        make_clipping("One.", start=1),
        make_clipping("Two.", start=2),
        make_clipping("One.", start=1),
        make_clipping("Two.", start=2),
        make_clipping("Three.", start=3),
    ]
    once, removed_once = remove_duplicates(items)
    twice, removed_twice = remove_duplicates(once)
    assert removed_once == 2
    assert removed_twice == 0
    assert [x.content for x in twice] == [x.content for x in once] == ["One.", "Two.", "Three."]


def test_same_text_other_location_kept(make_clipping):
    out, removed = remove_duplicates([make_clipping("Same.", start=1), make_clipping("Same.", start=2)])
    assert removed == 0
    assert len(out) == 2


def test_first_seen_wins_regardless_of_type(make_clipping):
    note = make_clipping("Shared text.", start=5, type="note")
    highlight = make_clipping("Shared text.", start=5)
    out, removed = remove_duplicates([note, highlight])
    assert removed == 1
    assert out[0].type == "note"


def test_tags_of_dropped_duplicate_rescued(make_clipping):
    a = make_clipping("Tagged.", start=7, tags=["one"])
    b = make_clipping("Tagged.", start=7, tags=["one", "two"])
    out, _ = remove_duplicates([a, b])
    assert out[0].tags == ["one", "two"]
    assert a.tags == ["one"]


def test_empty_input():
    assert remove_duplicates([]) == ([], 0)
