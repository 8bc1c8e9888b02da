"""absint Configuration — Project-level .absintrc.yml support.

Loads configuration from .absintrc.yml (or .absintrc.yaml, .absintrc.json)
found by walking up from the working directory.

Example .absintrc.yml:
    memory_size: 100       # slots in concrete memory and abstract environments
    max_iterations: 64     # cap on fixpoint iterations per loop
    concrete_fuel: 10000   # cap on loop iterations of the concrete oracle
    trace: false
    log_level: INFO
    format: pretty         # "pretty" or "json"
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

import yaml

from absint.errors import ConfigError, config_error


@dataclass
class AnalysisConfig:
    """Settings shared by both semantics and the driver."""
    memory_size: int = 100
    max_iterations: int = 64
    concrete_fuel: Optional[int] = 10000
    trace: bool = False
    log_level: str = "WARNING"
    format: str = "pretty"


_FORMATS = ("pretty", "json")
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


# ---------------------------------------------------------------------------
# Config file names (in priority order)
# ---------------------------------------------------------------------------

_CONFIG_FILES = [
    ".absintrc.yml",
    ".absintrc.yaml",
    ".absintrc.json",
]


def find_config(start_dir: str = ".") -> Optional[str]:
    """Find the nearest config file by walking up from start_dir."""
    current = os.path.abspath(start_dir)
    while True:
        for name in _CONFIG_FILES:
            path = os.path.join(current, name)
            if os.path.isfile(path):
                return path
        parent = os.path.dirname(current)
        if parent == current:
            break
        current = parent
    return None


def load_config(path: Optional[str] = None, start_dir: str = ".") -> AnalysisConfig:
    """Load configuration from a file.

    If no path is given, searches for a config file starting from start_dir.
    If no config file is found, returns defaults.
    """
    if path is None:
        path = find_config(start_dir)

    if path is None:
        return AnalysisConfig()

    try:
        with open(path, "r") as f:
            content = f.read()
    except OSError as e:
        raise ConfigError(config_error(f"Cannot read config: {e}", path)) from e

    try:
        if path.endswith(".json"):
            data = json.loads(content) if content.strip() else {}
        else:
            data = yaml.safe_load(content) or {}
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigError(config_error(f"Malformed config: {e}", path)) from e

    if not isinstance(data, dict):
        raise ConfigError(config_error("Config root must be a mapping", path))

    return _dict_to_config(data, path)


def _positive_int(data: Dict[str, Any], key: str, path: Optional[str]) -> int:
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigError(config_error(f"'{key}' must be a positive integer, got {value!r}", path))
    return value


def _dict_to_config(data: Dict[str, Any], path: Optional[str] = None) -> AnalysisConfig:
    """Convert a parsed dict to AnalysisConfig."""
    config = AnalysisConfig()

    if "memory_size" in data:
        config.memory_size = _positive_int(data, "memory_size", path)
    if "max_iterations" in data:
        config.max_iterations = _positive_int(data, "max_iterations", path)
    if "concrete_fuel" in data:
        config.concrete_fuel = (
            None if data["concrete_fuel"] is None
            else _positive_int(data, "concrete_fuel", path)
        )
    if "trace" in data:
        config.trace = bool(data["trace"])
    if "log_level" in data:
        level = str(data["log_level"]).upper()
        if level not in _LOG_LEVELS:
            raise ConfigError(config_error(f"Unknown log level {data['log_level']!r}", path))
        config.log_level = level
    if "format" in data:
        fmt = str(data["format"])
        if fmt not in _FORMATS:
            raise ConfigError(config_error(f"Unknown output format {fmt!r}", path))
        config.format = fmt

    return config
