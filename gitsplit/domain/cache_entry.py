"""
Idempotency record for one (reference, split configuration) pair.
"""

from dataclasses import dataclass
from typing import Dict, Any, Optional

from .reference import Reference


@dataclass
class CacheEntry:
    """
    Last known split of a reference.

    An entry is fresh iff both ids are set and source_id equals the current
    object id of the reference. Every other state is stale.
    """
    key: str
    source_id: Optional[str] = None
    target_id: Optional[str] = None

    @property
    def complete(self) -> bool:
        return bool(self.source_id) and bool(self.target_id)

    def is_fresh(self, reference: Reference) -> bool:
        if not self.complete:
            return False
        return self.source_id == reference.object_id

    def set(self, source_id: str, target_id: str) -> None:
        self.source_id = source_id
        self.target_id = target_id

    def to_dict(self) -> Dict[str, Any]:
        return {
            'key': self.key,
            'source_id': self.source_id,
            'target_id': self.target_id,
        }
