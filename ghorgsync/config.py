#!/usr/bin/env python3

import os
import re
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Pattern

import yaml

from .exit_codes import ConfigError

# Configure logging
logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s: %(message)s",
    handlers=[
        logging.StreamHandler(sys.stderr) # Default to stderr
    ]
)
logger = logging.getLogger("ghorgsync")

CONFIG_FILENAME = ".ghorgsync"
ENV_ORGANIZATION = "GHORGSYNC_ORGANIZATION"


def setup_logging(verbose: bool = False) -> None:
    """Set the package log level; DEBUG when verbose."""
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


@dataclass
class Config:
    """
    Sync policy loaded from the ``.ghorgsync`` YAML dotfile.

    The visibility and archive flags are tri-state: ``None`` means the key
    was absent and the default applies.
    """
    organization: str = ""
    include_public: Optional[bool] = None
    include_private: Optional[bool] = None
    include_archived: Optional[bool] = None
    exclude_repos: List[str] = field(default_factory=list)

    _compiled_excludes: Optional[List[Pattern]] = field(default=None, init=False, repr=False, compare=False)

    def validate(self) -> None:
        """
        Check the configuration for logical errors and compile patterns.

        Raises:
            ConfigError: organization missing, both visibilities disabled,
                or an exclude pattern that does not compile
        """
        if not self.organization:
            raise ConfigError("organization is required")

        if self.include_public is False and self.include_private is False:
            raise ConfigError(
                "both include_public and include_private are false; "
                "no repositories would be included"
            )

        compiled = []
        for pattern in self.exclude_repos:
            try:
                compiled.append(re.compile(pattern))
            except re.error as e:
                raise ConfigError(f"invalid exclude_repos pattern {pattern!r}: {e}") from e
        self._compiled_excludes = compiled

    def should_include_public(self) -> bool:
        return self.include_public is None or self.include_public

    def should_include_private(self) -> bool:
        return self.include_private is None or self.include_private

    def should_include_archived(self) -> bool:
        return bool(self.include_archived)

    def is_excluded(self, repo_name: str) -> bool:
        """True if the name matches any exclude_repos pattern (unanchored)."""
        if self._compiled_excludes is not None:
            return any(p.search(repo_name) for p in self._compiled_excludes)

        # Not validated yet: compile on the fly, skipping bad patterns
        for pattern in self.exclude_repos:
            try:
                if re.search(pattern, repo_name):
                    return True
            except re.error:
                continue
        return False


def get_config_path(directory: Optional[str] = None) -> Path:
    """Path of the dotfile inside ``directory`` (default: current directory)."""
    return Path(directory or os.getcwd()) / CONFIG_FILENAME


def _optional_bool(data: dict, key: str) -> Optional[bool]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, bool):
        raise ConfigError(f"{key} must be true or false, got {value!r}")
    return value


def load_config(path) -> Config:
    """
    Load configuration from a YAML file.

    Args:
        path: Path to the YAML file

    Returns:
        Parsed (not yet validated) Config

    Raises:
        ConfigError: unreadable file, invalid YAML, or wrong value types
    """
    path = Path(path)
    try:
        with open(path, 'r') as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"reading config file: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"parsing config file: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError("parsing config file: top level must be a mapping")

    exclude_repos = data.get('exclude_repos') or []
    if isinstance(exclude_repos, str):
        exclude_repos = [exclude_repos]
    if not isinstance(exclude_repos, list):
        raise ConfigError("exclude_repos must be a list of patterns")

    config = Config(
        organization=str(data.get('organization') or ''),
        include_public=_optional_bool(data, 'include_public'),
        include_private=_optional_bool(data, 'include_private'),
        include_archived=_optional_bool(data, 'include_archived'),
        exclude_repos=[str(p) for p in exclude_repos],
    )

    config = apply_env_overrides(config)
    logger.debug(f"Loaded config from {path}")
    return config


def apply_env_overrides(config: Config) -> Config:
    """
    Apply environment variable overrides to configuration.

    GHORGSYNC_ORGANIZATION replaces the organization from the file.
    """
    org = os.environ.get(ENV_ORGANIZATION)
    if org:
        logger.debug(f"Organization overridden by {ENV_ORGANIZATION}")
        config.organization = org
    return config
