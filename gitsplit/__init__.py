"""
gitsplit - Mirror sub-directories of a repository into their own repositories.

gitsplit keeps a set of target repositories in sync with prefixes of a source
project. Each branch and tag of the project is split once per configuration,
the result is cached, and the split history is published to every target.

Quick Start:
    from gitsplit import SplitService, WorkingSpace, load_config

    config = load_config(".gitsplit.yml")
    with WorkingSpace.create(config) as workspace:
        workspace.init()
        report = SplitService.from_workspace(workspace).split()
        print(report.split, report.cached)
"""

__version__ = "0.3.0"

from .config import Config, load_config
from .domain import (
    CacheEntry,
    Prefix,
    Reference,
    SplitConfiguration,
    SplitDetail,
    SplitReport,
    SplitStatus,
)
from .errors import GitSplitError
from .exit_codes import CommandError, ConfigError
from .services import SplitService
from .workspace import WorkingSpace

__all__ = [
    '__version__',
    'Config',
    'load_config',
    'CacheEntry',
    'Prefix',
    'Reference',
    'SplitConfiguration',
    'SplitDetail',
    'SplitReport',
    'SplitStatus',
    'GitSplitError',
    'CommandError',
    'ConfigError',
    'SplitService',
    'WorkingSpace',
]
