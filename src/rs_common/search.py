"""ILIKE helpers for free-text search boxes."""


def like_pattern(search: str | None) -> str | None:
    """'%term%' with LIKE wildcards escaped; None for a blank search."""
    if search is None or not search.strip():
        return None
    escaped = search.strip().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"
