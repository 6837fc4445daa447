"""
Domain layer for gitsplit.

Contains pure domain objects with no I/O or side effects:
- Reference: A branch or tag tip known by a remote
- SplitConfiguration / Prefix: What to extract and where to publish it
- CacheEntry: Idempotency record of a previous split
- SplitReport and friends: Results of a split pass

These objects are immutable where possible and provide
serialization methods for JSONL output.
"""

from .reference import Reference
from .split import Prefix, SplitConfiguration
from .cache_entry import CacheEntry
from .operation import (
    SplitStatus,
    PublishStatus,
    SplitDetail,
    PublishResult,
    SplitReport,
)

__all__ = [
    'Reference',
    'Prefix',
    'SplitConfiguration',
    'CacheEntry',
    'SplitStatus',
    'PublishStatus',
    'SplitDetail',
    'PublishResult',
    'SplitReport',
]
