"""
Git client infrastructure for gitsplit.

Provides a clean abstraction over git command execution.
All git operations go through this client, making them:
- Easy to mock for testing
- Consistent in error handling
- Isolated from business logic

Every command runs against one object store (``git --git-dir <path>``);
the store is usually a bare repository owned by gitsplit.
"""

import subprocess
from pathlib import Path
from typing import List, Optional, Sequence, Union
import logging

from ..errors import GitCommandError

logger = logging.getLogger(__name__)

REF_FORMAT = "%(objectname) %(refname)"


class GitClient:
    """
    Abstraction over git commands for a single object store.

    Example:
        client = GitClient("/var/cache/gitsplit")
        for name in client.list_remotes():
            print(name)
    """

    def __init__(self, git_dir: Union[str, Path], timeout: Optional[int] = None, executable: str = "git"):
        """
        Initialize GitClient.

        Args:
            git_dir: Path to the git directory (bare repository or .git)
            timeout: Command timeout in seconds (default: none)
            executable: git binary to invoke
        """
        self.git_dir = str(git_dir)
        self.timeout = timeout
        self.executable = executable

    @classmethod
    def init_bare(cls, path: Union[str, Path], **kwargs) -> 'GitClient':
        """Create a bare repository at path and return a client for it."""
        Path(path).mkdir(parents=True, exist_ok=True)
        client = cls(path, **kwargs)
        client._exec([client.executable, "init", "--bare", "--quiet", str(path)])
        return client

    def _exec(self, cmd: List[str], check: bool = True) -> str:
        """
        Run a command, merging stderr into the error report.

        Returns:
            stdout of the command

        Raises:
            GitCommandError: on a non-zero exit status (when check is set),
                a timeout, or a missing executable
        """
        logger.debug("Running %s", " ".join(cmd))
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            logger.warning(f"Git command timed out: {' '.join(cmd)}")
            raise GitCommandError(cmd, -1, f"timed out after {self.timeout}s") from e
        except OSError as e:
            raise GitCommandError(cmd, 127, str(e)) from e

        if check and result.returncode != 0:
            raise GitCommandError(cmd, result.returncode, (result.stdout or "") + (result.stderr or ""))

        return result.stdout or ""

    def run(self, *args: str, check: bool = True) -> str:
        """Run ``git --git-dir <git_dir> <args>`` and return stdout."""
        return self._exec([self.executable, "--git-dir", self.git_dir, *args], check=check)

    # Remote endpoints

    def list_remotes(self) -> List[str]:
        """Names of the configured remotes."""
        output = self.run("remote")
        return [line.strip() for line in output.splitlines() if line.strip()]

    def add_remote(self, name: str, url: str) -> None:
        self.run("remote", "add", name, url)

    def set_remote_url(self, name: str, url: str) -> None:
        self.run("remote", "set-url", name, url)

    def set_fetch_refspecs(self, name: str, refspecs: Sequence[str]) -> None:
        """
        Replace the configured fetch refspecs of a remote.

        The configured refspecs also drive git's opportunistic update of
        remote-tracking references, so they must match the explicit ones.
        """
        key = f"remote.{name}.fetch"
        self.run("config", "--unset-all", key, check=False)
        for refspec in refspecs:
            self.run("config", "--add", key, refspec)

    def remove_remote(self, name: str) -> None:
        """Remove a remote and its remote-tracking references."""
        self.run("remote", "remove", name)

    # Network

    def fetch(self, remote: str, refspecs: Sequence[str], prune: bool = True) -> None:
        """
        Fetch refspecs from a remote without following tags.

        Args:
            remote: Remote name or URL
            refspecs: Explicit refspecs (``+src:dst``)
            prune: Drop local references that disappeared upstream
        """
        args = ["fetch", "--quiet", "--no-tags"]
        if prune:
            args.append("--prune")
        self.run(*args, remote, *refspecs)

    def push(self, remote: str, refspecs: Sequence[str] = (), force: bool = False, mirror: bool = False) -> None:
        """
        Push refspecs (or everything with mirror) to a remote.
        """
        args = ["push", "--quiet"]
        if force:
            args.append("--force")
        if mirror:
            args.append("--mirror")
        self.run(*args, remote, *refspecs)

    # Local references

    def for_each_ref(self, *patterns: str) -> str:
        """
        Raw ``<objectname> <refname>`` lines for references under any of
        the patterns.

        Parsing is left to the caller so malformed output can be reported
        with the caller's context.
        """
        return self.run("for-each-ref", f"--format={REF_FORMAT}", *patterns)

    def update_ref(self, name: str, object_id: str) -> None:
        """Create or overwrite a reference."""
        self.run("update-ref", name, object_id)

    def delete_ref(self, name: str) -> None:
        self.run("update-ref", "-d", name)

    def rev_parse(self, rev: str) -> Optional[str]:
        """
        Resolve a revision to an object id.

        Returns:
            Object id or None if the revision does not exist
        """
        output = self.run("rev-parse", "--verify", "--quiet", rev, check=False)
        output = output.strip()
        return output or None
