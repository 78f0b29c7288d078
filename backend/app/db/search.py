"""Helpers for case-insensitive substring search with ILIKE."""

LIKE_ESCAPE = "\\"


def contains_pattern(term: str) -> str:
    """Wrap ``term`` in ``%`` after escaping the LIKE wildcards it contains."""
    escaped = term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2).replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"
