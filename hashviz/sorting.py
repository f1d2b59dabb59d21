"""
Sorting utilities.
"""

from typing import List

from hashviz.hashing import Entry

SORT_FIELDS = ("key", "value", "hash")


def sort_entries(entries: List[Entry], by: str = "key", order: str = "asc") -> List[Entry]:
    """
    Sort by entry field ('key', 'value' or 'hash'). order : 'asc' or 'desc'
    Returns a new sorted list.
    """
    if by not in SORT_FIELDS:
        raise ValueError(f"cannot sort by {by!r}")
    reverse = (order == "desc")
    return sorted(entries, key=lambda e: getattr(e, by), reverse=reverse)
