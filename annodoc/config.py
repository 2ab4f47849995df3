"""
Configuration management for annodoc.
"""

import copy
import os
import re
import json
import yaml
import toml
from pathlib import Path
from typing import Dict, Any, Callable, Optional
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .constants import CONFIG_FILES, DEFAULT_CONFIG
from .exceptions import ConfigurationError
from .transformers import DEFAULT_HOOKS
from .utils import logger, merge_dicts, set_log_level


HookFunction = Callable[..., Any]


class HooksConfig(BaseModel):
    """Hooks applied at certain stages of the structure life cycle.

    Every hook is called with the node and the run context and should
    modify the node in place.
    """
    model_config = ConfigDict(extra="forbid")

    block_pre: HookFunction = Field(default=DEFAULT_HOOKS["block_pre"])
    section_pre: HookFunction = Field(default=DEFAULT_HOOKS["section_pre"])
    sections: Dict[str, HookFunction] = Field(
        default_factory=lambda: dict(DEFAULT_HOOKS["sections"])
    )
    section_post: HookFunction = Field(default=DEFAULT_HOOKS["section_post"])
    block_post: HookFunction = Field(default=DEFAULT_HOOKS["block_post"])
    file: HookFunction = Field(default=DEFAULT_HOOKS["file"])
    doc: HookFunction = Field(default=DEFAULT_HOOKS["doc"])
    write_post: HookFunction = Field(default=DEFAULT_HOOKS["write_post"])


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = Field(default="INFO")


class AnnodocConfig(BaseModel):
    """Main configuration model."""
    model_config = ConfigDict(extra="forbid")

    annotation_pattern: str = Field(default=DEFAULT_CONFIG["annotation_pattern"])
    default_section_id: str = Field(default=DEFAULT_CONFIG["default_section_id"])
    hooks: HooksConfig = Field(default_factory=HooksConfig)
    script_path: str = Field(default=DEFAULT_CONFIG["script_path"])
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("annotation_pattern")
    @classmethod
    def check_annotation_pattern(cls, value: str) -> str:
        try:
            compiled = re.compile(value)
        except re.error as e:
            raise ValueError(f"not a valid regular expression: {e}")
        if compiled.groups < 1:
            raise ValueError("should have a capture group for section id")
        return value


def default_config_data() -> Dict[str, Any]:
    """Default configuration as nested dictionary (hooks included)."""
    data = copy.deepcopy(DEFAULT_CONFIG)
    data["hooks"] = dict(DEFAULT_HOOKS)
    data["hooks"]["sections"] = dict(DEFAULT_HOOKS["sections"])
    return data


def build_config(data: Dict[str, Any]) -> AnnodocConfig:
    """Validate configuration dictionary.

    Raises:
        ConfigurationError: If some value has the wrong shape
    """
    try:
        return AnnodocConfig(**data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid annodoc configuration: {e}") from e
    except TypeError as e:
        raise ConfigurationError(f"Invalid annodoc configuration: {e}") from e


class Config:
    """Configuration manager for annodoc.

    Combines defaults, an optional config file (`.annodoc.yaml`,
    `.annodoc.toml`, `.annodoc.json`) and explicit overrides. Every layer
    is deep-merged: it replaces only the values it specifies.
    """

    def __init__(self, config_file: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None):
        self.config_file = config_file
        self.config_data = self._load_config()
        if overrides:
            self.config_data = merge_dicts(self.config_data, overrides)
        self._apply_environment_overrides()
        self.config = build_config(self.config_data)
        set_log_level(self.config.logging.level)

    def _find_config_file(self) -> Optional[Path]:
        """Find configuration file in current directory or parent directories."""
        current_dir = Path.cwd()

        for parent in [current_dir] + list(current_dir.parents):
            for config_name in CONFIG_FILES:
                config_path = parent / config_name
                if config_path.exists():
                    logger.debug(f"Found config file: {config_path}")
                    return config_path

        return None

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from file on top of defaults."""
        config = default_config_data()

        if self.config_file:
            config_path = Path(self.config_file)
            if not config_path.exists():
                raise ConfigurationError(f"Config file not found: {config_path}")
        else:
            config_path = self._find_config_file()

        if not config_path:
            logger.debug("No config file found, using defaults")
            return config

        try:
            if config_path.suffix in ['.yaml', '.yml']:
                with open(config_path, 'r') as f:
                    file_config = yaml.safe_load(f) or {}
            elif config_path.suffix == '.toml':
                with open(config_path, 'r') as f:
                    file_config = toml.load(f)
            elif config_path.suffix == '.json':
                with open(config_path, 'r') as f:
                    file_config = json.load(f)
            else:
                logger.warning(f"Unknown config file format: {config_path}")
                return config
        except (OSError, yaml.YAMLError, toml.TomlDecodeError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Error loading config file {config_path}: {e}") from e

        if not isinstance(file_config, dict):
            raise ConfigurationError(f"Config file {config_path} should contain a mapping")
        if 'hooks' in file_config:
            raise ConfigurationError(
                f"Config file {config_path} can't define hooks, set them from Python code"
            )

        config = merge_dicts(config, file_config)
        logger.debug(f"Loaded config from: {config_path}")

        return config

    def _apply_environment_overrides(self):
        """Apply environment variable overrides to configuration."""
        log_level = os.getenv('ANNODOC_LOG_LEVEL')
        if log_level:
            self.config_data.setdefault('logging', {})['level'] = log_level

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by dot-notation key."""
        keys = key.split('.')
        value = self.config_data

        try:
            for k in keys:
                value = value[k]
            return value
        except (KeyError, TypeError):
            return default

    def set(self, key: str, value: Any):
        """Set configuration value by dot-notation key."""
        keys = key.split('.')
        config_dict = self.config_data

        for k in keys[:-1]:
            if k not in config_dict:
                config_dict[k] = {}
            config_dict = config_dict[k]

        config_dict[keys[-1]] = value

        # Recreate config object
        self.config = build_config(self.config_data)

    def merge(self, overrides: Optional[Dict[str, Any]] = None) -> AnnodocConfig:
        """Validated configuration with `overrides` deep-merged on top.

        The manager itself is not modified.
        """
        if overrides is None:
            return self.config
        if not isinstance(overrides, dict):
            raise ConfigurationError(
                f"Config override should be a dictionary, not {type(overrides).__name__}"
            )
        return build_config(merge_dicts(self.config_data, overrides))

    def to_plain_dict(self) -> Dict[str, Any]:
        """Configuration with hooks shown by their qualified names."""
        def hook_name(fn):
            return f"{getattr(fn, '__module__', '?')}.{getattr(fn, '__qualname__', repr(fn))}"

        data = self.config.model_dump(exclude={'hooks'})
        hooks = self.config.hooks
        data['hooks'] = {
            stage: hook_name(getattr(hooks, stage))
            for stage in ['block_pre', 'section_pre', 'section_post', 'block_post', 'file', 'doc', 'write_post']
        }
        data['hooks']['sections'] = {
            section_id: hook_name(fn) for section_id, fn in hooks.sections.items()
        }
        return data
