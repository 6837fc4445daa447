"""
Infrastructure layer for gitsplit.

Contains abstractions for external systems:
- GitClient: Git command execution against the working space
- ReferenceSplitter / LiteSplitter: the history-extraction collaborator

These provide clean interfaces that can be mocked for testing.
"""

from .git_client import GitClient
from .splitter import ReferenceSplitter, LiteSplitter

__all__ = [
    'GitClient',
    'ReferenceSplitter',
    'LiteSplitter',
]
