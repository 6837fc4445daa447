"""
Shared fixtures for gitsplit tests.

FakeGitClient keeps the object store in memory: local references, remote
endpoints and the upstream "servers" they point to. It honours the same
refspec shapes the engine uses so remotes, cache and orchestrator can be
exercised without a git binary. Like git, a new remote gets the default
``+refs/heads/*:refs/remotes/<name>/*`` fetch refspec, and a fetch also
updates the references the configured refspecs map to.
"""

import hashlib
import threading
from typing import Dict, List, Optional, Sequence

import pytest

from gitsplit.config import Config
from gitsplit.domain.split import SplitConfiguration
from gitsplit.errors import GitCommandError, SplitError
from gitsplit.uri import GitUri
from gitsplit.workspace import WorkingSpace

PROJECT_URL = "https://example.com/project.git"
LIB_A_URL = "https://example.com/lib-a.git"
LIB_B_URL = "https://example.com/lib-b.git"


def oid(seed: str) -> str:
    """Deterministic 40 hex object id."""
    return hashlib.sha1(seed.encode()).hexdigest()


class FakeGitClient:
    """In-memory stand-in for gitsplit.infra.git_client.GitClient."""

    def __init__(self, git_dir: str = "/var/cache/gitsplit"):
        self.git_dir = git_dir
        self.refs: Dict[str, str] = {}
        self.remotes: Dict[str, str] = {}
        self.fetch_config: Dict[str, List[str]] = {}
        self.servers: Dict[str, Dict[str, str]] = {}
        self.calls: List[tuple] = []
        self.fail_fetch: set = set()
        self.fail_push: set = set()
        self._lock = threading.Lock()

    def server(self, url: str) -> Dict[str, str]:
        return self.servers.setdefault(url, {})

    def _record(self, *call) -> None:
        with self._lock:
            self.calls.append(call)

    def calls_of(self, name: str) -> List[tuple]:
        return [call for call in self.calls if call[0] == name]

    # Remote endpoints

    def list_remotes(self) -> List[str]:
        self._record("list_remotes")
        return sorted(self.remotes)

    def add_remote(self, name: str, url: str) -> None:
        self._record("add_remote", name, url)
        if name in self.remotes:
            raise GitCommandError(["git", "remote", "add", name, url], 3, f"remote {name} already exists")
        self.remotes[name] = url
        self.fetch_config[name] = [f"+refs/heads/*:refs/remotes/{name}/*"]

    def set_remote_url(self, name: str, url: str) -> None:
        self._record("set_remote_url", name, url)
        self.remotes[name] = url

    def set_fetch_refspecs(self, name: str, refspecs: Sequence[str]) -> None:
        self._record("set_fetch_refspecs", name, tuple(refspecs))
        self.fetch_config[name] = list(refspecs)

    def remove_remote(self, name: str) -> None:
        self._record("remove_remote", name)
        del self.remotes[name]
        self.fetch_config.pop(name, None)
        with self._lock:
            for ref in [r for r in self.refs if r.startswith(f"refs/remotes/{name}/")]:
                del self.refs[ref]

    # Network

    def fetch(self, remote: str, refspecs: Sequence[str], prune: bool = True) -> None:
        self._record("fetch", remote, tuple(refspecs))
        if remote in self.fail_fetch or remote not in self.remotes:
            raise GitCommandError(["git", "fetch", remote], 128, f"could not read from {remote}")

        upstream = dict(self.server(self.remotes[remote]))
        fetched = set()
        with self._lock:
            for refspec in refspecs:
                src_prefix, dst_prefix = self._split_refspec(refspec)
                wanted = self._map(upstream, src_prefix, dst_prefix)
                fetched.update(name for name in upstream if name.startswith(src_prefix))
                if prune:
                    for ref in [r for r in self.refs if r.startswith(dst_prefix) and r not in wanted]:
                        del self.refs[ref]
                self.refs.update(wanted)

            # Opportunistic remote-tracking update through the configured refspecs
            fetched_upstream = {name: upstream[name] for name in fetched}
            for refspec in self.fetch_config.get(remote, []):
                self.refs.update(self._map(fetched_upstream, *self._split_refspec(refspec)))

    @staticmethod
    def _split_refspec(refspec: str):
        src, dst = refspec.lstrip("+").split(":")
        return src.rstrip("*"), dst.rstrip("*")

    @staticmethod
    def _map(upstream: Dict[str, str], src_prefix: str, dst_prefix: str) -> Dict[str, str]:
        return {
            dst_prefix + name[len(src_prefix):]: value
            for name, value in upstream.items()
            if name.startswith(src_prefix)
        }

    def push(self, remote: str, refspecs: Sequence[str] = (), force: bool = False, mirror: bool = False) -> None:
        self._record("push", remote, tuple(refspecs))
        if remote in self.fail_push:
            raise GitCommandError(["git", "push", remote], 1, "permission denied")

        upstream = self.server(self.remotes[remote])
        with self._lock:
            for refspec in refspecs:
                src, dst = refspec.lstrip("+").split(":")
                upstream[dst] = self.refs.get(src, src)

    # Local references

    def for_each_ref(self, *patterns: str) -> str:
        self._record("for_each_ref", *patterns)
        with self._lock:
            names = sorted(
                r for r in self.refs
                if any(r == pattern or r.startswith(pattern + "/") for pattern in patterns)
            )
            return "".join(f"{self.refs[name]} {name}\n" for name in names)

    def update_ref(self, name: str, object_id: str) -> None:
        self._record("update_ref", name, object_id)
        with self._lock:
            self.refs[name] = object_id

    def delete_ref(self, name: str) -> None:
        self._record("delete_ref", name)
        with self._lock:
            self.refs.pop(name, None)

    def rev_parse(self, rev: str) -> Optional[str]:
        return self.refs.get(rev)


class FakeSplitter:
    """Derives the split id from the reference target and the prefixes."""

    def __init__(self, git: FakeGitClient):
        self.git = git
        self.calls: List[tuple] = []
        self.fail_on: set = set()

    def result_for(self, object_id: str, prefixes: Sequence[str]) -> str:
        return oid(f"split:{object_id}:{','.join(prefixes)}")

    def split(self, reference: str, prefixes: Sequence[str]) -> str:
        object_id = self.git.refs.get(reference)
        self.calls.append((reference, tuple(prefixes), object_id))
        if object_id is None:
            raise SplitError(f"unknown reference {reference}")
        if object_id in self.fail_on:
            raise SplitError(f"cannot split {object_id}")
        return self.result_for(object_id, prefixes)


def make_config(splits=None, origins=None) -> Config:
    if splits is None:
        splits = [SplitConfiguration.create(["lib/a/"], [LIB_A_URL])]
    return Config(
        cache_uri=GitUri.parse("/var/cache/gitsplit"),
        project_uri=GitUri.parse(PROJECT_URL),
        splits=splits,
        origins=origins or [".*"],
        concurrency=4,
    )


@pytest.fixture
def git():
    """In-memory git with a project holding one branch and one tag."""
    client = FakeGitClient()
    client.server(PROJECT_URL).update({
        "refs/heads/main": oid("main-1"),
        "refs/tags/v1": oid("v1"),
    })
    return client


@pytest.fixture
def splitter(git):
    return FakeSplitter(git)


@pytest.fixture
def config():
    return make_config()


@pytest.fixture
def workspace_factory(git):
    """Build initialised working spaces over the shared fake git."""
    created = []

    def factory(config=None):
        workspace = WorkingSpace(config or make_config(), git)
        workspace.init()
        created.append(workspace)
        return workspace

    yield factory

    for workspace in created:
        workspace.close()
