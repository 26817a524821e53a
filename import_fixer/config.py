"""
Configuration management for the Import Fixer.

This module handles loading, validation, and management of the tool paths,
argument lists and alias table from YAML files and environment variables.
"""

import os
import yaml
import shutil
from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional

from .exceptions import ConfigurationError
from .yaml_env_loader import load_yaml_with_env


DEFAULT_CONFIG_PATHS = [
    "import-fixer.yaml",
    "~/.import-fixer/config.yaml",
    "/etc/import-fixer/config.yaml"
]

DEFAULT_ALIASES = {
    "numpy": "np",
    "pandas": "pd",
    "matplotlib.pyplot": "plt",
    "seaborn": "sns",
    "tensorflow": "tf",
}


@dataclass
class ToolConfig:
    """Configuration for one external command line tool."""
    path: str = ""
    default_args: List[str] = field(default_factory=list)
    timeout: int = 30  # seconds

    def resolve(self) -> Optional[str]:
        """Return the absolute executable path, or None when it cannot be found."""
        if not self.path:
            return None
        return shutil.which(os.path.expanduser(self.path))


def _default_analyzer() -> ToolConfig:
    return ToolConfig(
        path="flake8",
        default_args=["--max-line-length=100", "--select=F401,F821", "--isolated"]
    )


def _default_sorter() -> ToolConfig:
    return ToolConfig(
        path="isort",
        default_args=["--profile=black", "--line-length=100"]
    )


@dataclass
class Config:
    """Main application configuration."""
    analyzer: ToolConfig = field(default_factory=_default_analyzer)
    sorter: ToolConfig = field(default_factory=_default_sorter)
    aliases: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_ALIASES))
    fix_on_save: bool = False
    log_level: str = "INFO"

    def validate(self) -> None:
        """Validate configuration and raise ConfigurationError if invalid."""
        errors = []

        for name, tool in (("analyzer", self.analyzer), ("sorter", self.sorter)):
            if not tool.path:
                errors.append(f"{name} path is required")
            if not isinstance(tool.default_args, list) or not all(
                isinstance(arg, str) for arg in tool.default_args
            ):
                errors.append(f"{name} default_args must be a list of strings")
            if not isinstance(tool.timeout, (int, float)) or tool.timeout <= 0:
                errors.append(f"{name} timeout must be positive")

        if not isinstance(self.aliases, dict):
            errors.append("aliases must be a mapping of module name to alias")
        else:
            for module, alias in self.aliases.items():
                if not isinstance(module, str) or not module:
                    errors.append(f"alias module name must be a non-empty string: {module!r}")
                elif not isinstance(alias, str) or not alias.isidentifier():
                    errors.append(f"alias for '{module}' must be a valid identifier: {alias!r}")

        if not isinstance(self.fix_on_save, bool):
            errors.append("fix_on_save must be true or false")

        valid_log_levels = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}
        if self.log_level not in valid_log_levels:
            errors.append(f"log_level must be one of: {', '.join(sorted(valid_log_levels))}")

        if errors:
            raise ConfigurationError("Configuration validation failed", "; ".join(errors))

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to a YAML-serializable dictionary."""
        return {
            'analyzer': {
                'path': self.analyzer.path,
                'default_args': list(self.analyzer.default_args),
                'timeout': self.analyzer.timeout
            },
            'sorter': {
                'path': self.sorter.path,
                'default_args': list(self.sorter.default_args),
                'timeout': self.sorter.timeout
            },
            'aliases': dict(self.aliases),
            'fix_on_save': self.fix_on_save,
            'log_level': self.log_level
        }


def find_config_file() -> Optional[str]:
    """Return the first existing default config location, if any."""
    for path in DEFAULT_CONFIG_PATHS:
        expanded_path = os.path.expanduser(path)
        if os.path.exists(expanded_path):
            return expanded_path
    return None


def load_config(config_path: Optional[str] = None) -> Config:
    """
    Load configuration from YAML file and environment variables.

    Args:
        config_path: Path to configuration file. If None, uses default locations.

    Returns:
        Config: Loaded and validated configuration.

    Raises:
        ConfigurationError: If configuration cannot be loaded or is invalid.
    """
    config = Config()

    if config_path is None:
        config_path = find_config_file()
    elif not os.path.exists(os.path.expanduser(config_path)):
        raise ConfigurationError(f"Config file not found: {config_path}")

    if config_path:
        try:
            yaml_data = load_yaml_with_env(os.path.expanduser(config_path))
        except ConfigurationError:
            raise
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Failed to load config file {config_path}", str(e))

        if yaml_data:
            config = _merge_config_data(config, yaml_data)

    config = _load_env_overrides(config)

    config.validate()

    return config


def _merge_tool_data(tool: ToolConfig, data: Dict[str, Any]) -> None:
    if 'path' in data:
        tool.path = data['path']
    if 'default_args' in data:
        tool.default_args = data['default_args']
    if 'timeout' in data:
        tool.timeout = data['timeout']


def _merge_config_data(config: Config, data: Dict[str, Any]) -> Config:
    """Merge YAML data into configuration object."""

    if isinstance(data.get('analyzer'), dict):
        _merge_tool_data(config.analyzer, data['analyzer'])

    if isinstance(data.get('sorter'), dict):
        _merge_tool_data(config.sorter, data['sorter'])

    # User aliases extend the defaults; a user entry replaces a default one
    if 'aliases' in data:
        if isinstance(data['aliases'], dict):
            merged = dict(config.aliases)
            merged.update(data['aliases'])
            config.aliases = merged
        else:
            config.aliases = data['aliases']

    if 'fix_on_save' in data:
        config.fix_on_save = data['fix_on_save']
    if 'log_level' in data:
        config.log_level = data['log_level']

    return config


def _parse_bool(value: str) -> Optional[bool]:
    lowered = value.strip().lower()
    if lowered in ('1', 'true', 'yes', 'on'):
        return True
    if lowered in ('0', 'false', 'no', 'off'):
        return False
    return None


def _load_env_overrides(config: Config) -> Config:
    """Load configuration overrides from environment variables."""

    analyzer_path = os.getenv('IMPORT_FIXER_ANALYZER_PATH')
    if analyzer_path:
        config.analyzer.path = analyzer_path

    sorter_path = os.getenv('IMPORT_FIXER_SORTER_PATH')
    if sorter_path:
        config.sorter.path = sorter_path

    timeout = os.getenv('IMPORT_FIXER_TIMEOUT')
    if timeout:
        try:
            config.analyzer.timeout = int(timeout)
            config.sorter.timeout = int(timeout)
        except ValueError:
            pass

    fix_on_save = os.getenv('IMPORT_FIXER_FIX_ON_SAVE')
    if fix_on_save:
        parsed = _parse_bool(fix_on_save)
        if parsed is not None:
            config.fix_on_save = parsed

    log_level = os.getenv('LOG_LEVEL')
    if log_level:
        config.log_level = log_level.upper()

    return config


def save_config(config: Config, path: str) -> None:
    """Write a configuration to ``path`` as YAML, creating parent directories."""
    path = os.path.expanduser(path)
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    with open(path, 'w', encoding='utf-8') as f:
        yaml.safe_dump(config.to_dict(), f, default_flow_style=False, indent=2, sort_keys=False)


def create_default_config_file(path: str) -> None:
    """Create a default configuration file at the specified path."""
    save_config(Config(), path)
