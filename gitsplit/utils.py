"""
Utility functions for gitsplit.
"""

import hashlib
import os
import re
from pathlib import Path

OBJECT_ID_RE = re.compile(r"^[0-9a-f]{40}([0-9a-f]{24})?$")


def hash_text(text: str) -> str:
    """Hex sha256 of a string."""
    return hashlib.sha256(text.encode('utf-8')).hexdigest()


def slugify(text: str) -> str:
    """Lower-case text with every run of other characters replaced by '-'."""
    text = text.lower()
    return re.sub(r"[^a-z0-9]+", "-", text).strip("-")


def is_object_id(text: str) -> bool:
    return bool(OBJECT_ID_RE.match(text))


def expand_env(value: str) -> str:
    """Expand $VAR and ${VAR} from the environment."""
    return os.path.expandvars(value)


def resolve_path(path: str) -> str:
    """
    Turn a user supplied path into an absolute one.

    Environment variables and ~ are expanded, relative paths are taken from
    the current working directory.
    """
    path = os.path.expanduser(expand_env(path))
    if os.path.isabs(path):
        return path
    return os.path.normpath(str(Path.cwd() / path))
