"""
Split service for gitsplit.

Walks the references of the source remote, splits the ones whose cached
result is stale and publishes every result to the targets of its split
configuration. Used by the ``gitsplit split`` and ``gitsplit status``
commands.
"""

import logging
import re
from typing import Generator, Iterable, List, Optional, Sequence

from ..cache import IdempotencyCache
from ..config import Config
from ..domain.cache_entry import CacheEntry
from ..domain.operation import SplitDetail, SplitReport, SplitStatus
from ..domain.reference import Reference
from ..domain.split import SplitConfiguration
from ..errors import GitCommandError, GitSplitError, SplitError
from ..infra.git_client import GitClient
from ..infra.splitter import LiteSplitter, ReferenceSplitter
from ..remote import RemoteRegistry
from ..workspace import CACHE_REMOTE, SOURCE_REMOTE, WorkingSpace

logger = logging.getLogger(__name__)

TEMP_NAMESPACE = "refs/gitsplit-temp"


class SplitService:
    """
    Orchestrates one split pass.

    Each (reference, configuration) pair goes through
    stale check -> (fresh | recompute) -> publish. The walk is sequential;
    publication runs on the target remotes' pools and is joined by a single
    registry flush at the end of the pass.

    Example:
        service = SplitService.from_workspace(workspace)
        report = service.split(whitelist=["main"])
        print(f"Split {report.split} references")
    """

    def __init__(
        self,
        config: Config,
        remotes: RemoteRegistry,
        git: GitClient,
        splitter: ReferenceSplitter,
        cache: Optional[IdempotencyCache] = None,
    ):
        """
        Initialize SplitService.

        Args:
            config: Loaded configuration (origins and split configurations)
            remotes: Registry holding the source, cache and target remotes
            git: Client of the shared object store (temporary references)
            splitter: History extraction collaborator
            cache: Idempotency cache (defaults to one over the cache remote)
        """
        self.config = config
        self.remotes = remotes
        self.git = git
        self.splitter = splitter
        self.cache = cache or IdempotencyCache(remotes.get(CACHE_REMOTE))
        self.patterns = [re.compile(pattern) for pattern in config.origins]
        self.last_report: Optional[SplitReport] = None

    @classmethod
    def from_workspace(cls, workspace: WorkingSpace, splitter: Optional[ReferenceSplitter] = None) -> 'SplitService':
        if splitter is None:
            splitter = LiteSplitter(workspace.git.git_dir, binary=workspace.config.splitter)
        return cls(workspace.config, workspace.remotes, workspace.git, splitter, workspace.cache)

    def matches(self, alias: str) -> bool:
        """True if alias matches at least one inclusion pattern."""
        return any(pattern.search(alias) for pattern in self.patterns)

    def select_references(
        self,
        references: Iterable[Reference],
        whitelist: Optional[Sequence[str]] = None,
    ) -> List[Reference]:
        """
        Keep references matching an inclusion pattern and, when a whitelist
        is given, listed in it. Both checks use the alias.
        """
        selected = []
        for reference in references:
            if not reference.full_name or not reference.alias:
                continue
            if not self.matches(reference.alias):
                continue
            if whitelist and reference.alias not in whitelist:
                logger.info(f"Reference {reference.alias} skipped")
                continue
            selected.append(reference)
        return selected

    def _source_references(self, whitelist: Optional[Sequence[str]]) -> List[Reference]:
        references = self.remotes.get(SOURCE_REMOTE).get_references()
        return self.select_references(references, whitelist)

    def split(self, whitelist: Optional[Sequence[str]] = None) -> SplitReport:
        """
        Run a split pass.

        The first failing pair stops the walk; publications queued before it
        still complete before the error is raised.

        Args:
            whitelist: Only process these aliases (None or empty: all)

        Returns:
            SplitReport with one detail per processed pair

        Raises:
            GitSplitError: the orchestration error, else the first publication error
        """
        report = SplitReport()
        self.last_report = report

        try:
            for reference in self._source_references(whitelist):
                for split in self.config.splits:
                    report.add_detail(self._split_pair(reference, split))
        except GitSplitError:
            error = self.remotes.flush()
            if error is not None:
                logger.error(f"Publication failed while aborting: {error}")
            raise

        error = self.remotes.flush()
        if error is not None:
            raise error

        return report

    def describe(self, whitelist: Optional[Sequence[str]] = None) -> Generator[SplitDetail, None, None]:
        """
        Yield the cache state of every selected pair without splitting.
        """
        for reference in self._source_references(whitelist):
            for split in self.config.splits:
                entry = self.cache.get_item(reference.full_name, split)
                fresh = self.cache.is_fresh(entry, reference)
                yield SplitDetail(
                    reference=reference.alias,
                    prefixes=list(split.prefixes),
                    status=SplitStatus.CACHED if fresh else SplitStatus.STALE,
                    source_id=reference.object_id,
                    target_id=entry.target_id,
                    targets=list(split.targets),
                )

    def _split_pair(self, reference: Reference, split: SplitConfiguration) -> SplitDetail:
        try:
            entry = self.cache.get_item(reference.full_name, split)
            if self.cache.is_fresh(entry, reference):
                logger.info(f"Already split {reference.alias} for {split.label}")
                status = SplitStatus.CACHED
            else:
                logger.warning(f"Splitting {reference.alias} for {split.label}")
                self._recompute(reference, split, entry)
                status = SplitStatus.SPLIT

            for target in split.targets:
                self.remotes.get(target).push(reference, entry.target_id)

        except GitSplitError as e:
            self.last_report.add_detail(SplitDetail(
                reference=reference.alias,
                prefixes=list(split.prefixes),
                status=SplitStatus.FAILED,
                source_id=reference.object_id,
                targets=list(split.targets),
                error=str(e),
            ))
            raise

        return SplitDetail(
            reference=reference.alias,
            prefixes=list(split.prefixes),
            status=status,
            source_id=reference.object_id,
            target_id=entry.target_id,
            targets=list(split.targets),
        )

    def _recompute(self, reference: Reference, split: SplitConfiguration, entry: CacheEntry) -> None:
        """Split through a temporary reference and store the result."""
        temp = f"{TEMP_NAMESPACE}/{entry.key}"
        try:
            self.git.update_ref(temp, reference.object_id)
        except GitCommandError as e:
            raise SplitError(
                f"Unable to create temporary reference {temp} targeting {reference.object_id}: {e}"
            ) from e

        try:
            split_id = self.splitter.split(temp, split.prefixes)
        except GitSplitError as e:
            self._delete_temporary(temp, strict=False)
            raise SplitError(f"Unable to split {reference.alias} for {split.label}: {e}") from e

        self._delete_temporary(temp)

        entry.set(reference.object_id, split_id)
        self.cache.save_item(entry)

    def _delete_temporary(self, temp: str, strict: bool = True) -> None:
        try:
            self.git.delete_ref(temp)
        except GitCommandError as e:
            if strict:
                raise SplitError(f"Unable to cleanup temporary reference {temp}: {e}") from e
            logger.warning(f"Unable to cleanup temporary reference {temp}: {e}")
