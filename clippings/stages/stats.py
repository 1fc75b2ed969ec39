"""Per-book and library-wide summary of a clipping set."""

from __future__ import annotations

from typing import List

from clippings.models import BookStats, Clipping, ClippingStats
from clippings.stages.grouping import group_by_book
from clippings.utils import get_logger

logger = get_logger(__name__)


def count_words(text: str) -> int:
    return len((text or "").split())


def _rounded_ratio(num: int, den: int) -> int:
    # half-up, not banker's rounding
    return int(num / den + 0.5) if den else 0


def calculate_stats(clippings: List[Clipping]) -> ClippingStats:
    """Count clippings by type per book and overall.

    Books are listed by highlight count, most first. Clips and articles count
    toward ``total_clips`` only. Word totals cover every clipping type.
    """
    stats = ClippingStats(total=len(clippings))
    authors = set()

    for book in group_by_book(clippings).values():
        first = book[0]
        entry = BookStats(title=first.title, author=first.author)
        authors.add(first.author)

        for c in book:
            if c.type == "highlight":
                entry.highlights += 1
            elif c.type == "note":
                entry.notes += 1
            elif c.type == "bookmark":
                entry.bookmarks += 1
            else:
                stats.total_clips += 1

            entry.word_count += count_words(c.content)
            entry.date_range.widen(c.date)
            stats.date_range.widen(c.date)

        stats.total_highlights += entry.highlights
        stats.total_notes += entry.notes
        stats.total_bookmarks += entry.bookmarks
        stats.total_words += entry.word_count
        stats.books.append(entry)

    stats.books.sort(key=lambda b: b.highlights, reverse=True)
    stats.total_books = len(stats.books)
    stats.total_authors = len(authors)
    stats.avg_words_per_highlight = _rounded_ratio(stats.total_words, stats.total_highlights)
    stats.avg_highlights_per_book = _rounded_ratio(stats.total_highlights, stats.total_books)

    logger.info(
        "stats: books=%d authors=%d highlights=%d words=%d",
        stats.total_books,
        stats.total_authors,
        stats.total_highlights,
        stats.total_words,
    )
    return stats
