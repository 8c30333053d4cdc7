"""
Configuration Management Package

Looks for config in multiple places (in order):

1. The file named by $VC_CONFIG
2. .vcrc in current directory (project-specific)
3. .vcrc in home directory (global default)
4. Built-in defaults

Config format (JSON), every key optional:
{
    "projectName": "My Project",
    "commit": {"types": {...}, "rules": {...}, "amend": {...}},
    "branch": {"mainBranch": "main", "developBranch": "develop"}
}
"""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from vercommit.convention import RuleSet

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "VC_CONFIG"


@dataclass
class Config:
    """User configuration with sensible defaults."""
    project_name: str = "My Project"
    main_branch: str = "main"
    develop_branch: str = "develop"
    commit: dict = field(default_factory=dict)

    @property
    def rule_set(self) -> RuleSet:
        """Fresh RuleSet built from the commit section, merged over defaults."""
        return RuleSet.from_dict(self.commit)

    def to_dict(self) -> dict:
        return {
            "projectName": self.project_name,
            "commit": self.rule_set.to_dict(),
            "branch": {
                "mainBranch": self.main_branch,
                "developBranch": self.develop_branch,
            },
        }

    def validate(self) -> list[str]:
        """Validate config values and return list of warnings.

        Invalid values are replaced with defaults after warning.
        """
        warnings = []
        defaults = Config()

        for name in ("project_name", "main_branch", "develop_branch"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                warnings.append(f"Invalid {name} '{value}', using '{getattr(defaults, name)}'")
                setattr(self, name, getattr(defaults, name))

        if not isinstance(self.commit, dict):
            warnings.append("Invalid commit section, using defaults")
            self.commit = {}

        RuleSet.from_dict(self.commit, warnings)
        return warnings

    @classmethod
    def from_dict(cls, data: dict) -> 'Config':
        if not isinstance(data, dict):
            raise ValueError(f"config must be a JSON object, got {type(data).__name__}")
        branch = data.get("branch") or {}
        if not isinstance(branch, dict):
            logger.warning("Config warning: Invalid branch section '%s', using defaults", branch)
            branch = {}
        values = {
            "project_name": data.get("projectName", data.get("project_name")),
            "main_branch": branch.get("mainBranch", branch.get("main_branch")),
            "develop_branch": branch.get("developBranch", branch.get("develop_branch")),
            "commit": data.get("commit"),
        }
        config = cls(**{k: v for k, v in values.items() if v is not None})
        for warning in config.validate():
            logger.warning("Config warning: %s", warning)
        return config


class ConfigManager:
    """Manages loading and saving configuration."""

    CONFIG_FILENAME = ".vcrc"

    def __init__(self):
        self._config: Optional[Config] = None
        self._config_path: Optional[Path] = None

    def candidates(self) -> list[Path]:
        paths = []
        explicit = os.environ.get(CONFIG_ENV_VAR)
        if explicit:
            paths.append(Path(explicit).expanduser())
        paths.append(Path.cwd() / self.CONFIG_FILENAME)
        paths.append(Path.home() / self.CONFIG_FILENAME)
        return paths

    def load(self) -> Config:
        """Load configuration from the first existing file, or return defaults.

        Caches the result for subsequent calls.
        """
        if self._config is not None:
            return self._config

        for path in self.candidates():
            if path.exists():
                self._config = self._load_from_file(path)
                self._config_path = path
                return self._config

        self._config = Config()
        return self._config

    def _load_from_file(self, path: Path) -> Config:
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            return Config.from_dict(data)
        except (json.JSONDecodeError, ValueError, OSError) as e:
            logger.warning("Could not load %s: %s", path, e)
            return Config()

    def save(self, config: Config, global_config: bool = True) -> Path:
        path = Path.home() / self.CONFIG_FILENAME if global_config else Path.cwd() / self.CONFIG_FILENAME
        content = json.dumps(config.to_dict(), indent=2, ensure_ascii=False)
        # Owner read/write only
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, 'w', encoding='utf-8') as f:
            f.write(content + "\n")
        self._config = config
        self._config_path = path
        return path

    def get_config_path(self) -> Optional[Path]:
        return self._config_path


_manager = ConfigManager()


def load_config() -> Config:
    return _manager.load()


def save_config(config: Config, global_config: bool = True) -> Path:
    return _manager.save(config, global_config)


def get_config_path() -> Optional[Path]:
    return _manager.get_config_path()


__all__ = [
    "Config",
    "ConfigManager",
    "CONFIG_ENV_VAR",
    "load_config",
    "save_config",
    "get_config_path",
]
