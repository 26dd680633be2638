"""
Resource table: deduplicating map from a resource key (usually a file path)
to a small integer id understood by the rendering backend.
"""

from typing import Dict, Iterator, List, Optional, Tuple


class ResourceTable:
    """Ids are dense, assigned in first-seen order from 0, and never reused."""

    def __init__(self):
        self._next_id = 0
        self._id_to_key: Dict[int, str] = {}
        self._key_to_id: Dict[str, int] = {}

    def add(self, key: str) -> int:
        existing = self._key_to_id.get(key)
        if existing is not None:
            return existing
        rid = self._next_id
        self._id_to_key[rid] = key
        self._key_to_id[key] = rid
        self._next_id += 1
        return rid

    def key(self, rid: int) -> Optional[str]:
        return self._id_to_key.get(rid)

    def id(self, key: str) -> Optional[int]:
        return self._key_to_id.get(key)

    def serialize(self) -> List[Tuple[int, str]]:
        return [(rid, self._id_to_key[rid]) for rid in range(self._next_id)]

    def __len__(self) -> int:
        return self._next_id

    def __contains__(self, key: object) -> bool:
        return key in self._key_to_id

    def __iter__(self) -> Iterator[Tuple[int, str]]:
        return iter(self.serialize())

    def __repr__(self) -> str:
        return f"ResourceTable({self.serialize()!r})"


__all__ = ["ResourceTable"]
