import itertools

import pytest

from clippings.models import Clipping, Location


@pytest.fixture
def make_clipping():
    counter = itertools.count()

    def _make(content="A highlighted sentence.", *, start=100, end=None, type="highlight",
              title="The Book", author="Some Author", raw=None, block_index=None, **kw):
        if raw is None:
            raw = f"{start}-{end}" if end is not None else str(start)
        return Clipping(
            title=title,
            author=author,
            content=content,
            type=type,
            location=Location(raw=raw, start=start, end=end),
            block_index=next(counter) if block_index is None else block_index,
            **kw,
        )

    return _make
