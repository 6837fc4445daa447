"""
Working space of a split pass.

The working space is the object store every remote shares (a bare repository
under ``cache_dir``) plus the registry of remotes declared by the
configuration: the idempotency cache, the source project ("origin") and one
remote per publish target.
"""

import logging
from pathlib import Path
from typing import Optional

from .cache import CACHE_NAMESPACE, IdempotencyCache
from .config import Config
from .infra.git_client import GitClient
from .remote import CACHE_REMOTE, HEADS_AND_TAGS, SOURCE_REMOTE, Remote, RemoteRegistry
from .uri import GitUri

logger = logging.getLogger(__name__)


def open_repository(path: Path) -> GitClient:
    """
    Open the object store at path, creating a bare repository if needed.
    """
    if (path / ".git").exists():
        return GitClient(path / ".git")
    if path.exists():
        return GitClient(path)

    logger.info("Initializing cache repository")
    return GitClient.init_bare(path)


class WorkingSpace:
    """
    Object store plus remotes for one run.

    Example:
        with WorkingSpace.create(config) as workspace:
            workspace.init()
            ...
    """

    def __init__(self, config: Config, git: GitClient, remotes: Optional[RemoteRegistry] = None):
        self.config = config
        self.git = git
        if remotes is None:
            remotes = RemoteRegistry(git, pool_size=config.concurrency)
        self.remotes = remotes

    @classmethod
    def create(cls, config: Config) -> 'WorkingSpace':
        git = open_repository(Path(config.cache_uri.schemeless_uri))
        return cls(config, git)

    @property
    def source(self) -> Remote:
        return self.remotes.get(SOURCE_REMOTE)

    @property
    def cache(self) -> IdempotencyCache:
        return IdempotencyCache(self.remotes.get(CACHE_REMOTE))

    def init(self) -> None:
        """
        Declare every remote, refresh source and targets, drop stale remotes.

        Raises:
            GitSplitError: first error of the refresh, by registration order
        """
        self.remotes.add(CACHE_REMOTE, "", [CACHE_NAMESPACE])
        self.remotes.add(SOURCE_REMOTE, self.config.project_uri.uri, HEADS_AND_TAGS).fetch()

        for target in self.config.targets:
            self.remotes.add(target, GitUri.parse(target).uri, HEADS_AND_TAGS).fetch()

        self.remotes.clean()

        error = self.remotes.flush()
        if error is not None:
            raise error

    def close(self) -> None:
        error = self.remotes.flush()
        if error is not None:
            logger.error(f"Pending task failed while closing: {error}")
        self.remotes.close()

    def __enter__(self) -> 'WorkingSpace':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
