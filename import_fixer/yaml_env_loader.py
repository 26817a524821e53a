"""YAML loader with environment variable expansion."""

import os
import re
import yaml
from typing import Any, Dict

from .exceptions import ConfigurationError

# ${VAR} or ${VAR:-fallback}
_ENV_PATTERN = re.compile(r'\$\{([A-Za-z_][A-Za-z0-9_]*)(?::-([^}]*))?\}')


def expand_env_vars(value: Any) -> Any:
    """Recursively expand ``${VAR}`` references inside strings, lists and dicts."""
    if isinstance(value, str):
        def replacer(match):
            fallback = match.group(2)
            default = match.group(0) if fallback is None else fallback
            return os.getenv(match.group(1), default)
        
        return _ENV_PATTERN.sub(replacer, value)
    elif isinstance(value, dict):
        return {k: expand_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [expand_env_vars(item) for item in value]
    return value


def load_yaml_with_env(file_path: str) -> Dict[str, Any]:
    """
    Load a YAML mapping from disk with environment variable expansion.
    
    An empty file yields an empty dict.
    
    Raises:
        ConfigurationError: If the document is not a mapping.
    """
    with open(file_path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f)
    
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Config file {file_path} must contain a mapping",
            f"got {type(data).__name__}"
        )
    
    return expand_env_vars(data)
