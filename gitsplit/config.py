#!/usr/bin/env python3

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import logging

import yaml

from .domain.split import SplitConfiguration
from .exit_codes import ConfigError
from .pool import DEFAULT_POOL_SIZE
from .remote import RESERVED_ALIASES
from .uri import GitUri

logger = logging.getLogger("gitsplit")

DEFAULT_CONFIG_FILE = ".gitsplit.yml"


@dataclass
class Config:
    """
    Everything a split pass needs, already normalised.

    prefix/target/origins may be written as a single string or a list in the
    file; here they are always tuples or lists of strings.
    """
    cache_uri: GitUri
    project_uri: GitUri
    splits: List[SplitConfiguration] = field(default_factory=list)
    origins: List[str] = field(default_factory=lambda: [".*"])
    concurrency: int = DEFAULT_POOL_SIZE
    splitter: str = "splitsh-lite"

    @property
    def targets(self) -> List[str]:
        """Distinct targets of every split, in declaration order."""
        seen = []
        for split in self.splits:
            for target in split.targets:
                if target not in seen:
                    seen.append(target)
        return seen


def get_config_path(path: Optional[str] = None) -> Path:
    """Get the path to the configuration file.

    Checks in order:
    1. Explicit path (--config)
    2. GITSPLIT_CONFIG environment variable
    3. .gitsplit.yml in the current directory
    """
    if path:
        return Path(path)

    if 'GITSPLIT_CONFIG' in os.environ:
        return Path(os.environ['GITSPLIT_CONFIG'])

    return Path.cwd() / DEFAULT_CONFIG_FILE


def get_default_config() -> Dict[str, Any]:
    """Defaults merged under the file content."""
    return {
        "project_dir": ".",
        "origins": [".*"],
        "concurrency": DEFAULT_POOL_SIZE,
        "splitter": "splitsh-lite",
        "splits": [],
    }


def as_list(value: Any, name: str) -> Tuple[str, ...]:
    """
    Normalise a value that may be a single string or a list of strings.
    """
    if isinstance(value, str):
        return (value,)
    if isinstance(value, (list, tuple)) and all(isinstance(item, str) for item in value):
        return tuple(value)
    raise ConfigError(f"'{name}' expects a string or an array of strings")


def apply_env_overrides(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Apply environment variable overrides to configuration.

    GITSPLIT_CACHE_DIR, GITSPLIT_PROJECT_DIR, GITSPLIT_CONCURRENCY and
    GITSPLIT_SPLITTER replace the matching keys. Only the concurrency is
    converted to an integer.
    """
    for key in ("cache_dir", "project_dir", "concurrency", "splitter"):
        env_key = f"GITSPLIT_{key.upper()}"
        if env_key in os.environ:
            value = os.environ[env_key]
            if key == "concurrency" and value.isdigit():
                value = int(value)
            config[key] = value
    return config


def parse_config(data: Dict[str, Any]) -> Config:
    """Validate raw configuration data and build a Config."""
    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a mapping")

    cache_dir = data.get("cache_dir")
    if not isinstance(cache_dir, str) or not cache_dir:
        raise ConfigError("'cache_dir' expects a string")

    project_dir = data.get("project_dir") or "."
    if not isinstance(project_dir, str):
        raise ConfigError("'project_dir' expects a string")

    splits = []
    raw_splits = data.get("splits") or []
    if not isinstance(raw_splits, list):
        raise ConfigError("'splits' expects an array")
    for index, raw in enumerate(raw_splits):
        if not isinstance(raw, dict):
            raise ConfigError(f"splits[{index}] expects a mapping with 'prefix' and 'target'")
        if "prefix" not in raw:
            raise ConfigError(f"splits[{index}] has no 'prefix'")
        prefixes = as_list(raw["prefix"], f"splits[{index}].prefix")
        targets = as_list(raw.get("target") or [], f"splits[{index}].target")
        for target in targets:
            if target in RESERVED_ALIASES:
                raise ConfigError(f"splits[{index}].target {target!r} is a reserved remote name")
        splits.append(SplitConfiguration(prefixes=prefixes, targets=targets))

    origins = list(as_list(data.get("origins") or [".*"], "origins"))
    for pattern in origins:
        try:
            re.compile(pattern)
        except re.error as e:
            raise ConfigError(f"Invalid origin pattern {pattern!r}: {e}") from e

    concurrency = data.get("concurrency", DEFAULT_POOL_SIZE)
    if not isinstance(concurrency, int) or isinstance(concurrency, bool) or concurrency < 1:
        raise ConfigError("'concurrency' expects a positive integer")

    splitter = data.get("splitter") or "splitsh-lite"
    if not isinstance(splitter, str):
        raise ConfigError("'splitter' expects a string")

    return Config(
        cache_uri=GitUri.parse(cache_dir),
        project_uri=GitUri.parse(project_dir),
        splits=splits,
        origins=origins,
        concurrency=concurrency,
        splitter=splitter,
    )


def load_config(path: Optional[str] = None) -> Config:
    """Load configuration from file."""
    config_path = get_config_path(path)

    try:
        with open(config_path, 'r') as f:
            file_config = yaml.safe_load(f) or {}
    except FileNotFoundError:
        raise ConfigError(f"Fail to read config file {config_path}") from None
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Fail to load config file {config_path}: {e}") from e

    if not isinstance(file_config, dict):
        raise ConfigError(f"Fail to load config file {config_path}: expected a mapping")

    config = get_default_config()
    config.update(file_config)
    config = apply_env_overrides(config)

    logger.debug(f"Loaded configuration from {config_path}")
    return parse_config(config)
