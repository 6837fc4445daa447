"""
Split collaborator for gitsplit.

The history rewrite that extracts a prefix-filtered history is not done by
gitsplit itself. Anything implementing ReferenceSplitter can be plugged in;
LiteSplitter drives the splitsh-lite binary.
"""

import logging
import subprocess
from pathlib import Path
from typing import List, Optional, Protocol, Sequence, Union

from ..domain.split import Prefix
from ..errors import SplitError
from ..utils import is_object_id

logger = logging.getLogger(__name__)


class ReferenceSplitter(Protocol):
    """Extract the history of some prefixes of a reference."""

    def split(self, reference: str, prefixes: Sequence[str]) -> str:
        """
        Args:
            reference: Reference that already exists in the object store
            prefixes: Ordered ``from[:to]`` rewrite rules

        Returns:
            Object id of the synthetic head commit

        Raises:
            SplitError: when the history cannot be extracted
        """
        ...


class LiteSplitter:
    """
    Runs ``splitsh-lite`` against the working space repository.

    Example:
        splitter = LiteSplitter("/var/cache/gitsplit")
        head = splitter.split("refs/heads/main", ["lib/:"])
    """

    def __init__(self, git_dir: Union[str, Path], binary: str = "splitsh-lite", timeout: Optional[int] = None):
        self.git_dir = str(git_dir)
        self.binary = binary
        self.timeout = timeout

    def command(self, reference: str, prefixes: Sequence[str]) -> List[str]:
        cmd = [self.binary, f"--path={self.git_dir}", f"--origin={reference}"]
        for prefix in prefixes:
            cmd.append(f"--prefix={Prefix.parse(prefix)}")
        return cmd

    def split(self, reference: str, prefixes: Sequence[str]) -> str:
        if not prefixes:
            raise SplitError(f"No prefix given to split {reference}")

        cmd = self.command(reference, prefixes)
        logger.debug("Running %s", " ".join(cmd))
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, timeout=self.timeout)
        except subprocess.TimeoutExpired as e:
            raise SplitError(f"{self.binary} timed out splitting {reference}") from e
        except OSError as e:
            raise SplitError(f"Unable to run {self.binary}: {e}") from e

        if result.returncode != 0:
            output = (result.stderr or result.stdout or "").strip()
            raise SplitError(f"{self.binary} failed on {reference}: {output or result.returncode}")

        lines = [line.strip() for line in result.stdout.splitlines() if line.strip()]
        if not lines or not is_object_id(lines[-1]):
            raise SplitError(f"{self.binary} returned no object id for {reference}")

        return lines[-1]
