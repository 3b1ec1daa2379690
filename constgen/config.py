"""Configuration loading for constgen (.constgen.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .models import ConstGenError

CONFIG_FILENAME = ".constgen.yml"
DEFAULT_MARKER = "org.apache.camel.spi.annotations.ConstantProvider"
DEFAULT_OUTPUT_DIR = "target/generated-sources/constgen"
DEFAULT_ERROR_LOG = "camel-apt-error.log"


class ConfigError(ConstGenError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class ConstGenConfig:
    """Represents the settings defined in .constgen.yml."""

    root: Path
    marker: str = DEFAULT_MARKER
    source_roots: List[Path] = field(default_factory=list)
    output_dir: Optional[Path] = None
    error_log: Optional[Path] = None
    exclude_paths: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.source_roots:
            self.source_roots = [self.root]
        if self.output_dir is None:
            self.output_dir = self.root / DEFAULT_OUTPUT_DIR
        if self.error_log is None:
            self.error_log = self.root / DEFAULT_ERROR_LOG


def load_config(config_path: Path) -> ConstGenConfig:
    """Load configuration from disk, falling back to defaults when absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return ConstGenConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    marker = _as_str(data.get("marker"), "marker") or DEFAULT_MARKER
    source_roots = [root / entry for entry in _as_str_list(data.get("source_roots"), "source_roots")]
    output_dir = _as_str(data.get("output_dir"), "output_dir")
    error_log = _as_str(data.get("error_log"), "error_log")

    return ConstGenConfig(
        root=root,
        marker=marker,
        source_roots=source_roots,
        output_dir=root / output_dir if output_dir else None,
        error_log=root / error_log if error_log else None,
        exclude_paths=_as_str_list(data.get("exclude_paths"), "exclude_paths"),
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _as_str(value: Any, key: str) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    raise ConfigError(f"'{key}' must be a string")


def _as_str_list(value: Any, key: str) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        raise ConfigError(f"'{key}' must be a string or a list of strings")
    result: List[str] = []
    for item in value:
        if not isinstance(item, str):
            raise ConfigError(f"'{key}' entries must be strings")
        if item.strip():
            result.append(item.strip())
    return result


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "ConstGenConfig",
    "DEFAULT_ERROR_LOG",
    "DEFAULT_MARKER",
    "DEFAULT_OUTPUT_DIR",
    "load_config",
]
