"""
Remotes of the gitsplit working space.

One Remote exists per declared alias (the source, the internal cache and
every publish target). All of them share one object store. Each remote:

- has an id derived from its alias, safe to use as a git remote name
- mirrors its upstream references under ``refs/remotes/<id>/<namespace>/``
- owns a private WorkerPool for its fetch and push tasks

The RemoteRegistry owns the remotes and the two locks guarding the shared
object store: the identity lock serialises create/update/delete of git remote
endpoints for the whole process, and one references lock per remote
serialises enumeration against writes to that remote's references.
"""

import logging
import threading
from typing import Dict, Iterator, List, Optional, Sequence

from .domain.operation import PublishResult, PublishStatus
from .domain.reference import Reference
from .errors import (
    GitCommandError,
    RemoteIdentityError,
    FetchError,
    PushError,
    ReferenceParseError,
    NotFoundError,
)
from .infra.git_client import GitClient
from .pool import DEFAULT_POOL_SIZE, WorkerPool
from .utils import expand_env, hash_text, is_object_id, slugify

logger = logging.getLogger(__name__)

HEADS_AND_TAGS = ("heads", "tags")

CACHE_REMOTE = "cache"
SOURCE_REMOTE = "origin"
RESERVED_ALIASES = (CACHE_REMOTE, SOURCE_REMOTE)


def remote_id(alias: str) -> str:
    """
    Git remote name for an alias.

    Aliases are often URLs; they are slugified, and a hash of the alias is
    appended whenever the slug differs so two aliases never share an id.
    """
    slug = slugify(alias)
    if slug != alias:
        slug = f"{slug}-{hash_text(alias)}"
    return slug


class Remote:
    """
    One named remote repository.

    Example:
        remote = Remote(git, "origin", "file:///srv/project", ["heads", "tags"])
        remote.fetch()
        error = remote.flush()
    """

    def __init__(
        self,
        git: GitClient,
        alias: str,
        url: str,
        namespaces: Sequence[str],
        identity_lock: Optional[threading.Lock] = None,
        references_lock: Optional[threading.RLock] = None,
        pool_size: int = DEFAULT_POOL_SIZE,
    ):
        if not namespaces:
            raise ValueError(f"Remote {alias} needs at least one namespace")
        self.git = git
        self.alias = alias
        self.url = url
        self.namespaces = tuple(namespaces)
        self.id = remote_id(alias)
        self._identity_lock = identity_lock or threading.Lock()
        self._references_lock = references_lock or threading.RLock()
        self._references: Optional[List[Reference]] = None
        self._initialized = False
        self.pool = WorkerPool(pool_size, name=f"remote-{self.id[:24]}")

    def __repr__(self) -> str:
        return f"Remote(alias={self.alias!r}, id={self.id!r})"

    @property
    def local_prefix(self) -> str:
        return f"refs/remotes/{self.id}/"

    def local_name(self, alias: str, namespace: Optional[str] = None) -> str:
        """Local reference holding what this remote knows as alias."""
        return f"{self.local_prefix}{namespace or self.namespaces[0]}/{alias}"

    @property
    def refspecs(self) -> List[str]:
        """Fetch refspecs mirroring each declared namespace."""
        return [f"+refs/{ns}/*:{self.local_prefix}{ns}/*" for ns in self.namespaces]

    def init(self) -> None:
        """
        Create or update the git remote endpoint.

        The endpoint's configured fetch refspecs are reset to the namespaced
        ones, also for endpoints left by an earlier run.

        Idempotent. Remotes without URL are local-only and have no endpoint.
        """
        if not self.url:
            return

        with self._identity_lock:
            if self._initialized:
                return
            url = expand_env(self.url)
            try:
                if self.id in self.git.list_remotes():
                    self.git.set_remote_url(self.id, url)
                else:
                    self.git.add_remote(self.id, url)
                self.git.set_fetch_refspecs(self.id, self.refspecs)
            except GitCommandError as e:
                raise RemoteIdentityError(f"Fail to create or update remote {self.alias}: {e}") from e
            self._initialized = True

    # References

    def _parse_references(self, output: str) -> List[Reference]:
        references = []
        for line in output.splitlines():
            if not line.strip():
                continue
            columns = line.split(' ')
            if len(columns) != 2:
                raise ReferenceParseError(
                    f"Fail to parse reference {line!r} of {self.alias}: 2 columns expected"
                )
            object_id, name = columns
            if not is_object_id(object_id):
                raise ReferenceParseError(
                    f"Fail to parse reference {line!r} of {self.alias}: invalid object id"
                )
            if not name.startswith(self.local_prefix):
                raise ReferenceParseError(
                    f"Fail to parse reference {line!r} of {self.alias}: outside {self.local_prefix}"
                )
            namespace, _, alias = name[len(self.local_prefix):].partition('/')
            if not alias:
                raise ReferenceParseError(
                    f"Fail to parse reference {line!r} of {self.alias}: missing namespace"
                )
            references.append(Reference(
                alias=alias,
                full_name=f"refs/{namespace}/{alias}",
                object_id=object_id,
            ))
        return references

    def get_references(self, namespaces: Optional[Sequence[str]] = None) -> List[Reference]:
        """
        References known for this remote.

        Args:
            namespaces: Narrow the declared namespaces further (default: all)

        Returns:
            References whose namespace is declared (and requested)
        """
        wanted = self.namespaces
        if namespaces is not None:
            wanted = tuple(ns for ns in namespaces if ns in self.namespaces)

        with self._references_lock:
            if self._references is None:
                try:
                    output = self.git.for_each_ref(*(f"{self.local_prefix}{ns}" for ns in self.namespaces))
                except GitCommandError as e:
                    raise FetchError(f"Fail to read references of {self.alias}: {e}") from e
                self._references = self._parse_references(output)
            references = self._references

        return [r for r in references if r.namespace in wanted]

    def get_reference(self, alias: str, namespace: Optional[str] = None) -> Optional[Reference]:
        """Known reference by alias, or None."""
        namespaces = [namespace] if namespace else None
        for reference in self.get_references(namespaces):
            if reference.alias == alias:
                return reference
        return None

    def find(self, full_name: str) -> Optional[Reference]:
        """Known reference by namespaced name, or None."""
        for reference in self.get_references():
            if reference.full_name == full_name:
                return reference
        return None

    def invalidate(self) -> None:
        with self._references_lock:
            self._references = None

    def add_reference(self, alias: str, object_id: str, namespace: Optional[str] = None) -> None:
        """
        Record locally that this remote has alias at object_id.

        Raises:
            GitCommandError: when the reference cannot be written
        """
        with self._references_lock:
            self._references = None
            self.git.update_ref(self.local_name(alias, namespace), object_id)

    # Asynchronous tasks

    def fetch(self) -> None:
        """Queue a mirror of the upstream references, pruning vanished ones."""
        self.pool.push(self._fetch)

    def _fetch(self) -> None:
        if not self.url:
            raise FetchError(f"Remote {self.alias} has no URL to fetch from")
        self.init()
        logger.info(f"Fetching from remote {self.alias}")
        try:
            self.git.fetch(self.id, self.refspecs, prune=True)
        except GitCommandError as e:
            raise FetchError(f"Fail to update cache of {self.alias}: {e}") from e
        finally:
            self.invalidate()

    def push(self, reference: Reference, object_id: str) -> None:
        """
        Queue the publication of object_id as reference.

        The task compares against the known state first and skips the network
        write when the remote already has object_id.
        """
        self.pool.push(lambda: self._push(reference, object_id))

    def _push(self, reference: Reference, object_id: str) -> PublishResult:
        self.init()
        known = self.find(reference.full_name)
        if known is not None:
            if known.object_id == object_id:
                logger.info(f"Already pushed {reference.alias} into {self.alias}")
                return PublishResult(self.alias, reference.alias, object_id, PublishStatus.ALREADY_PUBLISHED)
            logger.warning(f"Out of date {reference.alias} into {self.alias}")

        logger.warning(f"Pushing {reference.alias} into {self.alias}")
        self.invalidate()
        try:
            self.git.push(self.id, [f"{object_id}:{reference.full_name}"], force=True)
            self.add_reference(reference.alias, object_id, reference.namespace or None)
        except GitCommandError as e:
            raise PushError(f"Fail to push {reference.alias} into {self.alias}: {e}") from e

        return PublishResult(self.alias, reference.alias, object_id, PublishStatus.PUBLISHED)

    def push_ref(self, refspec: str) -> None:
        """Queue a raw push of one refspec."""
        self.pool.push(lambda: self._push_raw([refspec], mirror=False))

    def push_mirror(self) -> None:
        """Queue a mirror push of every local reference."""
        self.pool.push(lambda: self._push_raw([], mirror=True))

    def _push_raw(self, refspecs: List[str], mirror: bool) -> None:
        self.init()
        what = "mirror" if mirror else ", ".join(refspecs)
        logger.warning(f"Pushing {what} into {self.alias}")
        self.invalidate()
        try:
            self.git.push(self.id, refspecs, force=not mirror, mirror=mirror)
        except GitCommandError as e:
            raise PushError(f"Fail to push {what} into {self.alias}: {e}") from e

    def flush(self) -> Optional[BaseException]:
        """Wait for every queued task; return the first error."""
        return self.pool.wait().first_error()

    def close(self) -> None:
        self.pool.close()


class RemoteRegistry:
    """
    Named collection of remotes sharing one object store.

    Example:
        remotes = RemoteRegistry(git)
        remotes.add("origin", "/srv/project", ["heads", "tags"]).fetch()
        remotes.clean()
        error = remotes.flush()
    """

    def __init__(self, git: GitClient, pool_size: int = DEFAULT_POOL_SIZE):
        self.git = git
        self.pool_size = pool_size
        self.identity_lock = threading.Lock()
        self._items: Dict[str, Remote] = {}
        self._housekeeping = WorkerPool(1, name="housekeeping")

    def add(self, alias: str, url: str, namespaces: Sequence[str] = HEADS_AND_TAGS) -> Remote:
        """
        Register a remote. An alias registered twice yields the same remote.
        """
        if alias in self._items:
            return self._items[alias]

        references_lock = threading.RLock()
        remote = Remote(
            self.git,
            alias,
            url,
            namespaces,
            identity_lock=self.identity_lock,
            references_lock=references_lock,
            pool_size=self.pool_size,
        )
        self._items[alias] = remote
        return remote

    def get(self, alias: str) -> Remote:
        try:
            return self._items[alias]
        except KeyError:
            raise NotFoundError(f"The remote {alias} does not exist") from None

    def __contains__(self, alias: str) -> bool:
        return alias in self._items

    def __iter__(self) -> Iterator[Remote]:
        return iter(list(self._items.values()))

    def __len__(self) -> int:
        return len(self._items)

    def known_ids(self) -> List[str]:
        return [remote.id for remote in self._items.values()]

    def clean(self) -> None:
        """
        Queue removal of every git remote that no registered remote owns.

        Runs on the housekeeping pool so flush() joins it.
        """
        known = set(self.known_ids())
        self._housekeeping.push(lambda: self._clean(known))

    def _clean(self, known: set) -> List[str]:
        removed = []
        with self.identity_lock:
            try:
                remotes = self.git.list_remotes()
            except GitCommandError as e:
                raise RemoteIdentityError(f"Unable to list remotes: {e}") from e

            for name in remotes:
                if name in known:
                    continue
                logger.info(f"Removing remote {name}")
                try:
                    self.git.remove_remote(name)
                except GitCommandError as e:
                    raise RemoteIdentityError(f"Unable to remove remote {name}: {e}") from e
                removed.append(name)
        return removed

    def flush(self) -> Optional[BaseException]:
        """
        Barrier over every remote (registration order) and housekeeping.

        Every pool is waited for even after an error; the first error is
        returned.
        """
        first_error = None
        for remote in self:
            error = remote.flush()
            if error is not None and first_error is None:
                first_error = error

        error = self._housekeeping.wait().first_error()
        if error is not None and first_error is None:
            first_error = error

        return first_error

    def close(self) -> None:
        for remote in self:
            remote.close()
        self._housekeeping.close()
