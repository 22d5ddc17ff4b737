"""
Configuration module for the file index manager.

Values come from three layers, later ones winning: the packaged
defaults.yaml, an optional YAML/JSON config file, and FIM_<SECTION>_<KEY>
environment variables.
"""

import json
import logging
import os
from collections.abc import Callable
from dataclasses import asdict, dataclass, field, fields
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

import yaml

from .errors import InvalidArgumentError

logger = logging.getLogger(__name__)

_DEFAULTS_FILE = Path(__file__).with_name("defaults.yaml")

DEFAULT_MAX_FILES = 10000
DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@lru_cache(maxsize=1)
def _packaged_defaults() -> dict[str, Any]:
    """Read defaults.yaml once; a missing or broken file yields no defaults."""
    try:
        return yaml.safe_load(_DEFAULTS_FILE.read_text(encoding="utf-8")) or {}
    except FileNotFoundError:
        logger.warning(f"Packaged defaults missing: {_DEFAULTS_FILE}")
    except yaml.YAMLError as e:
        logger.error(f"Packaged defaults are not valid YAML: {e}")
    return {}


def _require_patterns(setting: str, value: Any) -> None:
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise InvalidArgumentError(f"{setting} must be a list of strings, got {value!r}")


def _default(section: str, key: str, fallback: Any) -> Callable[[], Any]:
    """Build a dataclass default_factory reading one packaged default."""

    def factory() -> Any:
        value = (_packaged_defaults().get(section) or {}).get(key, fallback)
        # Lists are copied so instances never share them
        return list(value) if isinstance(value, list) else value

    return factory


@dataclass
class IndexingConfig:
    """Configuration for the directory walk that rebuilds the indexes."""

    max_files: int = field(default_factory=_default("indexing", "max_files", DEFAULT_MAX_FILES))
    ignore_patterns: list[str] = field(default_factory=_default("indexing", "ignore_patterns", []))

    def __post_init__(self) -> None:
        if isinstance(self.max_files, bool) or not isinstance(self.max_files, int) or self.max_files <= 0:
            raise InvalidArgumentError(
                f"indexing.max_files must be a positive integer, got {self.max_files!r}"
            )
        _require_patterns("indexing.ignore_patterns", self.ignore_patterns)


@dataclass
class WatchConfig:
    """Configuration for invalidating indexes on file changes."""

    enabled: bool = field(default_factory=_default("watch", "enabled", False))
    ignore_patterns: list[str] = field(default_factory=_default("watch", "ignore_patterns", [".git/"]))

    def __post_init__(self) -> None:
        _require_patterns("watch.ignore_patterns", self.ignore_patterns)


@dataclass
class LoggingConfig:
    level: str = field(default_factory=_default("logging", "level", "INFO"))
    format: str = field(default_factory=_default("logging", "format", DEFAULT_LOG_FORMAT))


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("true", "1", "yes", "on")


def _parse_list(value: str) -> list[str]:
    """Parse a comma separated string to a list, dropping blanks."""
    return [item.strip() for item in value.split(",") if item.strip()]


def _parse_positive_int(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError:
        raise InvalidArgumentError(f"Expected an integer, got {value!r}") from None
    if parsed <= 0:
        raise InvalidArgumentError(f"Expected a positive integer, got {parsed}")
    return parsed


# (variable, section, key, parser)
_ENV_OVERRIDES: tuple[tuple[str, str, str, Callable[[str], Any]], ...] = (
    ("FIM_INDEXING_MAX_FILES", "indexing", "max_files", _parse_positive_int),
    ("FIM_INDEXING_IGNORE_PATTERNS", "indexing", "ignore_patterns", _parse_list),
    ("FIM_WATCH_ENABLED", "watch", "enabled", _parse_bool),
    ("FIM_WATCH_IGNORE_PATTERNS", "watch", "ignore_patterns", _parse_list),
    ("FIM_LOGGING_LEVEL", "logging", "level", str),
    ("FIM_LOGGING_FORMAT", "logging", "format", str),
)

_SECTIONS: dict[str, type] = {
    "indexing": IndexingConfig,
    "watch": WatchConfig,
    "logging": LoggingConfig,
}

_FILE_FORMATS: dict[str, tuple[Callable[[str], Any], Callable[[dict], str]]] = {
    ".yaml": (yaml.safe_load, lambda data: yaml.safe_dump(data, sort_keys=False)),
    ".yml": (yaml.safe_load, lambda data: yaml.safe_dump(data, sort_keys=False)),
    ".json": (json.loads, lambda data: json.dumps(data, indent=2)),
}


def _file_format(path: Path) -> tuple[Callable[[str], Any], Callable[[dict], str]]:
    try:
        return _FILE_FORMATS[path.suffix.lower()]
    except KeyError:
        raise InvalidArgumentError(
            f"Unsupported config file format: {path.suffix or path.name}"
        ) from None


@dataclass
class FIMConfig:
    """Main configuration class for the file index manager."""

    indexing: IndexingConfig = field(default_factory=IndexingConfig)
    watch: WatchConfig = field(default_factory=WatchConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FIMConfig":
        """
        Build a configuration from nested section dictionaries.

        Missing sections and keys keep their defaults.

        Raises:
            InvalidArgumentError: For unknown sections, unknown keys or invalid values
        """
        unknown = set(data) - set(_SECTIONS)
        if unknown:
            raise InvalidArgumentError(f"Unknown config sections: {sorted(unknown)}")

        sections = {}
        for name, section_cls in _SECTIONS.items():
            values = data.get(name) or {}
            if not isinstance(values, dict):
                raise InvalidArgumentError(f"Config section '{name}' must be a mapping")
            allowed = {f.name for f in fields(section_cls)}
            extra = set(values) - allowed
            if extra:
                raise InvalidArgumentError(f"Unknown keys in '{name}' section: {sorted(extra)}")
            sections[name] = section_cls(**values)
        return cls(**sections)

    @classmethod
    def from_file(cls, path: Path | str) -> "FIMConfig":
        """
        Load configuration from a .yaml, .yml or .json file.

        Raises:
            FileNotFoundError: If the file does not exist
            InvalidArgumentError: If the format or contents are not valid
        """
        path = Path(path)
        parse, _ = _file_format(path)
        if not path.is_file():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        text = path.read_text(encoding="utf-8")
        try:
            data = parse(text) if text.strip() else {}
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise InvalidArgumentError(f"Cannot parse configuration file {path}: {e}") from e
        if not isinstance(data, dict):
            raise InvalidArgumentError(f"Configuration file must contain a mapping: {path}")

        logger.debug(f"Loaded configuration from {path}")
        return cls.from_dict(data)

    def apply_env_overrides(self) -> "FIMConfig":
        """
        Overlay FIM_<SECTION>_<KEY> environment variables onto this config.

        List values are comma separated. Returns self.
        """
        for variable, section, key, parse in _ENV_OVERRIDES:
            raw = os.environ.get(variable)
            if raw is None:
                continue
            setattr(getattr(self, section), key, parse(raw))
            logger.debug(f"Config override from {variable}")
        return self

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def to_yaml(self) -> str:
        return _FILE_FORMATS[".yaml"][1](self.to_dict())

    def to_json(self) -> str:
        return _FILE_FORMATS[".json"][1](self.to_dict())

    def save(self, path: Path | str) -> None:
        """Write the configuration as YAML or JSON, chosen by file suffix."""
        path = Path(path)
        _, dump = _file_format(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(dump(self.to_dict()), encoding="utf-8")


def load_config(config_path: Optional[Path | str] = None, apply_env: bool = True) -> FIMConfig:
    """
    Load configuration from defaults, an optional file and the environment.

    Args:
        config_path: Optional YAML/JSON file layered over the packaged defaults
        apply_env: Whether FIM_* environment variables are applied last
    """
    config = FIMConfig.from_file(config_path) if config_path else FIMConfig()
    if apply_env:
        config.apply_env_overrides()
    return config


def configure_logging(config: LoggingConfig) -> None:
    """Apply the logging level and format to the root logger."""
    level = logging.getLevelName(config.level.upper())
    if not isinstance(level, int):
        raise InvalidArgumentError(f"Unknown logging level: {config.level!r}")

    logging.basicConfig(level=level, format=config.format, force=True)
    logger.debug(f"Logging configured at {config.level.upper()}")
