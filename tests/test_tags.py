from clippings.stages.tags import extract_tags, extract_tags_from_linked_notes


def test_extract_tags_mixed_separators():
    assert extract_tags("productivity, #psychology; habits\nDeep Work", "lowercase") == [
        "productivity",
        "psychology",
        "habits",
        "deep work",
    ]


def test_extract_tags_case_and_dedup():
    assert extract_tags("Focus, focus, FOCUS", "uppercase") == ["FOCUS"]
    assert extract_tags("Focus", "original") == ["Focus"]


def test_sentences_are_not_tags():
    assert extract_tags("This is what the author meant all along", "lowercase") == []
    assert extract_tags("", "lowercase") == []
    assert extract_tags("42, x", "lowercase") == []


def test_tags_assigned_to_highlights_with_notes(make_clipping):
    tagged = make_clipping("A highlight.", start=1, note="habits, focus", tags=["existing"])
    plain = make_clipping("Another highlight.", start=2)
    out, count = extract_tags_from_linked_notes([tagged, plain], tag_case="lowercase")
    assert count == 1
    assert out[0].tags == ["existing", "habits", "focus"]
    assert out[1].tags is None
