"""
Reference domain object for gitsplit.

A reference is the tip of a branch or a tag as known by one remote. It is a
value object: remotes create them when enumerating, nothing mutates them.
"""

from dataclasses import dataclass
from typing import Dict, Any


@dataclass(frozen=True)
class Reference:
    """
    A named pointer to an object id.

    Attributes:
        alias: Human-facing short name ("main", "v1.0", "release/1.0")
        full_name: Namespaced name ("refs/heads/main", "refs/tags/v1.0")
        object_id: Hex object id the reference points to
    """
    alias: str
    full_name: str
    object_id: str

    @property
    def namespace(self) -> str:
        """Reference category, e.g. 'heads' for refs/heads/main."""
        parts = self.full_name.split('/', 2)
        if len(parts) == 3 and parts[0] == 'refs':
            return parts[1]
        return ''

    def to_dict(self) -> Dict[str, Any]:
        return {
            'alias': self.alias,
            'name': self.full_name,
            'id': self.object_id,
        }
