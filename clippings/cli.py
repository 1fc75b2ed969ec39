#!/usr/bin/env python3
import argparse

from clippings.orchestrator import run_once


def main(argv=None):
    parser = argparse.ArgumentParser(description="Kindle clippings post-processing CLI")
    parser.add_argument("--input", required=True, help="Path to parsed clippings JSON")
    parser.add_argument("--config", help="Path to YAML config")
    parser.add_argument("--output", help="Where to write the processed JSON")
    # stage toggles
    parser.add_argument("--dedup", dest="remove_duplicates", action="store_true", help="Remove exact duplicates")
    parser.add_argument("--no-dedup", dest="remove_duplicates", action="store_false", help="Keep exact duplicates")
    parser.add_argument("--merge", dest="merge_overlapping", action="store_true", help="Merge overlapping highlights")
    parser.add_argument("--no-merge", dest="merge_overlapping", action="store_false", help="Skip overlap detection")
    parser.add_argument("--flag-overlaps", dest="merge_mode", action="store_const", const="flag", help="Flag overlapping highlights instead of merging")
    parser.add_argument("--link-notes", dest="merge_notes", action="store_true", help="Link notes to highlights")
    parser.add_argument("--no-link-notes", dest="merge_notes", action="store_false", help="Leave notes unlinked")
    parser.add_argument("--extract-tags", dest="extract_tags", action="store_true", help="Extract tags from linked notes")
    parser.add_argument("--tag-case", dest="tag_case", choices=["original", "uppercase", "lowercase"], help="Case for extracted tags")
    parser.add_argument("--consume-notes", dest="consume_linked_notes", action="store_true", help="Drop notes embedded into highlights")
    parser.add_argument("--remove-unlinked-notes", dest="remove_unlinked_notes", action="store_true", help="With --consume-notes, also drop notes no highlight claimed")
    parser.add_argument("--highlights-only", dest="highlights_only", action="store_true", help="Output highlights only")
    parser.add_argument("--threshold", dest="similarity_threshold", type=float, help="Fuzzy duplicate Jaccard threshold (0-1)")
    # filters
    parser.add_argument("--exclude-type", dest="exclude_types", action="append", choices=["highlight", "note", "bookmark", "clip", "article"], help="Drop a clipping type (repeatable)")
    parser.add_argument("--exclude-book", dest="exclude_books", action="append", help="Drop books whose title contains this (repeatable)")
    parser.add_argument("--only-book", dest="only_books", action="append", help="Keep only books whose title contains this (repeatable)")
    parser.add_argument("--min-length", dest="min_content_length", type=int, help="Minimum content length")
    parser.set_defaults(remove_duplicates=None, merge_overlapping=None, merge_notes=None, extract_tags=None, consume_linked_notes=None, remove_unlinked_notes=None, highlights_only=None)
    args = parser.parse_args(argv)

    overrides = {
        "remove_duplicates": args.remove_duplicates,
        "merge_overlapping": args.merge_overlapping,
        "merge_mode": args.merge_mode,
        "merge_notes": args.merge_notes,
        "extract_tags": args.extract_tags,
        "tag_case": args.tag_case,
        "consume_linked_notes": args.consume_linked_notes,
        "remove_unlinked_notes": args.remove_unlinked_notes,
        "highlights_only": args.highlights_only,
        "similarity_threshold": args.similarity_threshold,
        "exclude_types": args.exclude_types,
        "exclude_books": args.exclude_books,
        "only_books": args.only_books,
        "min_content_length": args.min_content_length,
    }

    result = run_once(
        args.input,
        config_path=args.config,
        output_path=args.output,
        overrides=overrides,
    )
    for key, value in result.counts().items():
        print(f"{key}: {value}")

    stats = result.stats
    if stats is not None:
        print(
            f"books: {stats.total_books}  authors: {stats.total_authors}  "
            f"highlights: {stats.total_highlights}  notes: {stats.total_notes}  "
            f"bookmarks: {stats.total_bookmarks}  words: {stats.total_words}"
        )
        for book in stats.books:
            print(f"  {book.title} ({book.author}): {book.highlights} highlights, {book.notes} notes")


if __name__ == "__main__":
    main()
