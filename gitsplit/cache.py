"""
Idempotency cache for gitsplit.

Remembers, for each (reference, split configuration) pair, which source
object id was split last and what the split produced. Records are plain
references of the cache remote, stored in the object store they describe:

    refs/remotes/cache/split-flag/source-<hash(name)>-<hash(prefixes)>
    refs/remotes/cache/split-flag/target-<hash(name)>-<hash(prefixes)>

Writes are not transactional. save_item() writes the source record before
the target record, so a crash in between leaves a source without target,
which get_item() reports as an empty entry and is_fresh() as stale. The
next pass recomputes the split; nothing else is needed to recover.
"""

import logging

from .domain.cache_entry import CacheEntry
from .domain.reference import Reference
from .domain.split import SplitConfiguration
from .errors import CacheIOError, GitCommandError, GitSplitError
from .remote import Remote
from .utils import hash_text

logger = logging.getLogger(__name__)

CACHE_NAMESPACE = "split-flag"


def cache_key(reference_name: str, split: SplitConfiguration) -> str:
    """Deterministic key of a (reference, configuration) pair."""
    return f"{hash_text(reference_name)}-{hash_text('-'.join(split.prefixes))}"


class IdempotencyCache:
    """
    Reads and writes cache entries through a borrowed cache remote.

    Example:
        cache = IdempotencyCache(remotes.get("cache"))
        entry = cache.get_item(reference.full_name, split)
        if not cache.is_fresh(entry, reference):
            entry.set(reference.object_id, split_id)
            cache.save_item(entry)
    """

    def __init__(self, remote: Remote):
        self.remote = remote

    def _read(self, alias: str):
        try:
            return self.remote.get_reference(alias, CACHE_NAMESPACE)
        except GitSplitError as e:
            raise CacheIOError(f"Unable to read cache reference {alias}: {e}") from e

    def get_item(self, reference_name: str, split: SplitConfiguration) -> CacheEntry:
        """
        Entry for a pair; both ids are set only when both records exist.
        """
        key = cache_key(reference_name, split)

        source = self._read(f"source-{key}")
        if source is None:
            return CacheEntry(key=key)

        target = self._read(f"target-{key}")
        if target is None:
            logger.debug(f"Cache entry {key} has no target record")
            return CacheEntry(key=key)

        return CacheEntry(key=key, source_id=source.object_id, target_id=target.object_id)

    def is_fresh(self, entry: CacheEntry, reference: Reference) -> bool:
        return entry.is_fresh(reference)

    def save_item(self, entry: CacheEntry) -> None:
        """Write the source record, then the target record."""
        if not entry.complete:
            raise CacheIOError(f"Refusing to save incomplete cache entry {entry.key}")

        try:
            self.remote.add_reference(f"source-{entry.key}", entry.source_id, CACHE_NAMESPACE)
        except GitCommandError as e:
            raise CacheIOError(
                f"Unable to create source reference {entry.key} targeting {entry.source_id}: {e}"
            ) from e

        try:
            self.remote.add_reference(f"target-{entry.key}", entry.target_id, CACHE_NAMESPACE)
        except GitCommandError as e:
            raise CacheIOError(
                f"Unable to create target reference {entry.key} targeting {entry.target_id}: {e}"
            ) from e
