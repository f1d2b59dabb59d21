"""
Hash table engine used by the visualizer: separate chaining with a deliberately
weak additive string hash, so collisions and chains show up with small inputs.
The table doubles its bucket array when the load factor passes the threshold.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Tuple

from hashviz.events import EventLog, Severity

INITIAL_CAPACITY = 4
LOAD_FACTOR_THRESHOLD = 0.75

logger = logging.getLogger(__name__)


class ValidationError(ValueError):
    pass


class PutOutcome(str, Enum):
    INSERTED = "inserted"
    UPDATED = "updated"
    INVALID = "invalid"
    BUSY = "busy"


@dataclass
class Entry:
    key: str
    value: str
    hash: int

    def __setattr__(self, name, value):
        # only the value may change once the entry exists
        if name in ("key", "hash") and name in self.__dict__:
            raise AttributeError(f"Entry.{name} cannot be reassigned")
        object.__setattr__(self, name, value)

    def to_dict(self) -> dict:
        return {"key": self.key, "value": self.value, "hash": self.hash}


@dataclass
class Bucket:
    index: int
    nodes: List[Entry] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"index": self.index, "nodes": [n.to_dict() for n in self.nodes]}


def hash_key(key: str) -> int:
    """
    Sum of the key's character codes. Codes are UTF-16 code units so the
    result matches summing charCodeAt() in the browser front end.
    """
    data = key.encode("utf-16-le", "surrogatepass")
    return sum(int.from_bytes(data[i:i + 2], "little") for i in range(0, len(data), 2))


def bucket_index(hash_value: int, capacity: int) -> int:
    return hash_value % capacity


def empty_buckets(capacity: int) -> List[Bucket]:
    return [Bucket(index=i) for i in range(capacity)]


def rehash(old_buckets: List[Bucket], new_capacity: int) -> List[Bucket]:
    """
    Redistribute every entry into new_capacity buckets.
    Old buckets are walked in index order and each chain in order, so relative
    chain order is kept. Placement uses the stored hash, never the key.
    """
    new_buckets = empty_buckets(new_capacity)
    for bucket in old_buckets:
        for node in bucket.nodes:
            new_buckets[bucket_index(node.hash, new_capacity)].nodes.append(node)
    return new_buckets


def _no_pacing():
    pass


class HashTable:
    def __init__(self, pacing: Optional[Callable[[], None]] = None, log: Optional[EventLog] = None):
        # pacing runs between computing a rehash and committing it
        self.pacing = pacing or _no_pacing
        self.log = log if log is not None else EventLog()
        self.capacity = INITIAL_CAPACITY
        self.size = 0
        self.buckets: List[Bucket] = empty_buckets(self.capacity)
        self.is_rehashing = False

    @property
    def load_factor(self) -> float:
        return self.size / self.capacity

    @property
    def logs(self):
        return self.log.entries()

    def put(self, key: str, value: str) -> PutOutcome:
        """
        Insert key or update its value in place.
        Failures are reported through the log only; the table is left untouched.
        """
        if self.is_rehashing:
            self.log.add(f'put("{key}", "{value}") rejected: rehash in progress.', Severity.ERROR)
            return PutOutcome.BUSY

        try:
            self._validate(key, value)
        except ValidationError as e:
            self.log.add(str(e), Severity.ERROR)
            return PutOutcome.INVALID

        h = hash_key(key)
        idx = bucket_index(h, self.capacity)
        self.log.add(f'put("{key}", "{value}") -> hash: {h} -> index: {idx}', Severity.INFO)

        bucket = self.buckets[idx]
        for node in bucket.nodes:
            if node.key == key:
                node.value = value
                self.log.add(f'Key "{key}" already exists. Value updated to "{value}".', Severity.SUCCESS)
                return PutOutcome.UPDATED

        bucket.nodes.append(Entry(key=key, value=value, hash=h))
        self.size += 1
        self.log.add(f'Inserted "{key}" into bucket {idx}. Load: {self.load_factor:.2f}', Severity.SUCCESS)

        if self.load_factor > LOAD_FACTOR_THRESHOLD:
            self._resize()
        return PutOutcome.INSERTED

    def _validate(self, key, value):
        if not isinstance(key, str) or not isinstance(value, str) or not key or not value:
            raise ValidationError("Key and value are both required.")

    def _resize(self):
        self.is_rehashing = True
        new_capacity = self.capacity * 2
        self.log.add(
            f"Load factor threshold reached ({self.load_factor:.2f} > {LOAD_FACTOR_THRESHOLD}). "
            f"Resizing to {new_capacity}...",
            Severity.WARNING,
        )
        try:
            new_buckets = rehash(self.buckets, new_capacity)
            moved = sum(len(b.nodes) for b in new_buckets)
            self.pacing()
            self.buckets = new_buckets
            self.capacity = new_capacity
        finally:
            self.is_rehashing = False
        self.log.add(f"Rehash complete. Moved {moved} items. New capacity: {new_capacity}.", Severity.SUCCESS)

    def get(self, key: str) -> Tuple[Optional[Entry], List[dict]]:
        """Return entry and the chain nodes visited if found else (None, trace)"""
        idx = bucket_index(hash_key(key), self.capacity)
        trace = []
        for pos, node in enumerate(self.buckets[idx].nodes):
            trace.append({"index": idx, "position": pos, "key": node.key, "match": node.key == key})
            if node.key == key:
                return node, trace
        return None, trace

    def as_list(self) -> List[dict]:
        """Return serializable list representation of the buckets"""
        return [b.to_dict() for b in self.buckets]

    def flatten(self) -> List[Entry]:
        """Return all entries, bucket by bucket, in chain order"""
        return [node for b in self.buckets for node in b.nodes]

    def snapshot(self) -> dict:
        return {
            "capacity": self.capacity,
            "size": self.size,
            "load_factor": round(self.load_factor, 4),
            "threshold": LOAD_FACTOR_THRESHOLD,
            "is_rehashing": self.is_rehashing,
            "buckets": self.as_list(),
            "logs": self.log.as_list(),
        }

    def clear(self) -> bool:
        """Reset to an empty table. Refused while a rehash is in flight."""
        if self.is_rehashing:
            self.log.add("Clear rejected: rehash in progress.", Severity.ERROR)
            return False
        self.capacity = INITIAL_CAPACITY
        self.size = 0
        self.buckets = empty_buckets(self.capacity)
        self.log.clear()
        self.log.add("Hash map cleared.", Severity.WARNING)
        logger.debug("table reset to capacity %d", self.capacity)
        return True


def rebuild_hashtable_from_list(hash_table: HashTable, pairs: List[Tuple[str, str]]) -> List[PutOutcome]:
    """
    Put a list of (key, value) pairs into the given hash_table (clears first).
    """
    hash_table.clear()
    return [hash_table.put(k, v) for k, v in pairs]
