"""Pipeline stages: grouping, filtering, dedup, merging, linking, tagging, flagging.

Each stage exposes a small, pure function API returning ``(clippings, count)``
and is gated by ``ProcessOptions`` switches in the orchestrator.
"""
