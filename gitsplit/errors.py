"""
Error taxonomy for gitsplit.

Every layer wraps the underlying failure with its own context (remote alias,
reference, prefixes) and re-raises it with ``raise ... from err`` so the
terminal message carries the whole chain. Nothing here retries.
"""

from typing import Optional, Sequence

from .exit_codes import (
    CommandError,
    GENERAL_ERROR,
    NETWORK_ERROR,
    DATA_ERROR,
    SPLIT_ERROR,
    NOT_FOUND,
)


class GitSplitError(CommandError):
    """Base class for every error raised by the split engine."""
    exit_code_default = GENERAL_ERROR

    def __init__(self, message: str):
        super().__init__(message, self.exit_code_default)


class GitCommandError(GitSplitError):
    """A git (or collaborator) process exited with a non-zero status."""

    def __init__(self, command: Sequence[str], returncode: int, output: Optional[str] = None):
        self.command = list(command)
        self.returncode = returncode
        self.output = (output or "").strip()
        detail = self.output or f"exit status {returncode}"
        super().__init__(f"`{' '.join(self.command)}` failed: {detail}")


class RemoteIdentityError(GitSplitError):
    """Creating, updating or deleting a remote endpoint failed."""


class FetchError(GitSplitError):
    """Mirroring the references of a remote failed."""
    exit_code_default = NETWORK_ERROR


class PushError(GitSplitError):
    """Publishing to a remote failed."""
    exit_code_default = NETWORK_ERROR


class ReferenceParseError(GitSplitError):
    """Reference enumeration produced a line that could not be parsed."""
    exit_code_default = DATA_ERROR


class CacheIOError(GitSplitError):
    """Reading or writing an idempotency record failed."""
    exit_code_default = DATA_ERROR


class SplitError(GitSplitError):
    """The split collaborator failed to extract a history."""
    exit_code_default = SPLIT_ERROR


class NotFoundError(GitSplitError):
    """An unknown remote alias was requested."""
    exit_code_default = NOT_FOUND
