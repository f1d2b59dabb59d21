"""
Searching utilities.
- search_by_key walks the key's chain and returns (entry, trace)
- search_entries performs case-insensitive substring match over flattened entries
"""

from typing import List, Optional, Tuple

from hashviz.hashing import Entry, HashTable


def search_by_key(hash_table: HashTable, key: str) -> Tuple[Optional[Entry], List[dict]]:
    entry, trace = hash_table.get(key)
    return entry, trace


def search_entries(hash_table: HashTable, key: str = "", value: str = "") -> List[Entry]:
    """
    Linear search over every entry. Empty queries match everything.
    """
    key_lower = key.strip().lower()
    value_lower = value.strip().lower()
    matches = []
    for node in hash_table.flatten():
        if (not key_lower or key_lower in node.key.lower()) and (
            not value_lower or value_lower in node.value.lower()
        ):
            matches.append(node)
    return matches


def buckets_with_chain(hash_table: HashTable, min_length: int) -> List[dict]:
    """Buckets holding at least min_length entries, i.e. where collisions piled up."""
    return [b.to_dict() for b in hash_table.buckets if len(b.nodes) >= min_length]
