"""Configuration for bundle size analysis.

Configuration is read from a JSON file (or YAML, when the file name says so) and validated into
frozen pydantic models. Every optional setting is resolved to a concrete value once, in
:meth:`Config.resolved_components`, so the rest of the tool never has to coalesce defaults.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from bundlesize import BundleSizeError

_LOGGER = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "bundle-size.config.json"
DEFAULT_WARN_ON_INCREASE = "5%"
YAML_SUFFIXES = (".yaml", ".yml")


class ConfigError(BundleSizeError):
    pass


class SelectionMode(Enum):
    PATTERNS = "patterns"
    DIST = "dist"


def _as_pattern_list(value: Any) -> Any:
    if isinstance(value, str):
        return [value]
    return value


class _Model(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", alias_generator=to_camel, populate_by_name=True)


class CompressionConfig(_Model):
    gzip: bool = True
    brotli: bool = True


class DefaultsConfig(_Model):
    warn_on_increase: str | None = None


class ComponentConfig(_Model):
    max_size: str | None = None
    warn_on_increase: str | None = None
    mode: SelectionMode | None = None
    include: list[str] | None = None
    exclude: list[str] | None = None
    dist_folder_location: str | None = None
    entry_file_name: str | None = None
    companion_file_name: str | None = None

    @field_validator("include", "exclude", mode="before")
    @classmethod
    def normalise_patterns(cls, value: Any) -> Any:
        return _as_pattern_list(value)


@dataclass(frozen=True)
class ResolvedComponent:
    """A component with every fallback applied."""

    name: str
    max_size: str | None
    warn_on_increase: str | None
    mode: SelectionMode
    include: tuple[str, ...]
    exclude: tuple[str, ...]
    dist_folder: Path | None
    entry_file_name: str
    companion_file_name: str


class Config(_Model):
    """Top-level bundle size configuration."""

    include: list[str] = []
    exclude: list[str] = []
    compression: CompressionConfig = CompressionConfig()
    baseline_file: Path = Path("bundle-sizes.json")
    failure_report_file: Path = Path("bundle-size-failures.json")
    entry_file_name: str = "index.js"
    companion_file_name: str = "react.js"
    defaults: DefaultsConfig = DefaultsConfig()
    components: dict[str, ComponentConfig] = {}

    @field_validator("include", "exclude", mode="before")
    @classmethod
    def normalise_patterns(cls, value: Any) -> Any:
        return _as_pattern_list(value)

    @classmethod
    def load(cls, config_path: Path) -> Config:
        """Load and validate the configuration at ``config_path``.

        Raises:
            ConfigError: If the file cannot be read, parsed or validated.
        """
        try:
            text = config_path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Unable to read configuration {config_path}: {e.strerror or e}") from e

        try:
            if config_path.suffix.lower() in YAML_SUFFIXES:
                config_data = yaml.safe_load(text)
            else:
                config_data = json.loads(text) if text.strip() else None
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise ConfigError(f"Unable to parse configuration {config_path}: {e}") from e

        if config_data is None:
            _LOGGER.warning("Config file %s is empty, using defaults", config_path)
            return cls()

        try:
            config = cls.model_validate(config_data)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration in {config_path}: {e}") from e

        _LOGGER.debug("Loaded %d components from %s", len(config.components), config_path)
        return config

    def resolved_components(self) -> list[ResolvedComponent]:
        """Resolve every component, in configuration order.

        Raises:
            ConfigError: If a folder-scan component has no distribution folder configured.
        """
        return [self.resolve_component(name) for name in self.components]

    def resolve_component(self, name: str) -> ResolvedComponent:
        component = self.components[name]
        mode = component.mode
        if mode is None:
            mode = SelectionMode.DIST if component.dist_folder_location is not None else SelectionMode.PATTERNS

        dist_folder = None
        if mode == SelectionMode.DIST:
            if not component.dist_folder_location:
                raise ConfigError(f"Component '{name}' scans a distribution folder but distFolderLocation is not set")
            dist_folder = Path(component.dist_folder_location)

        return ResolvedComponent(
            name=name,
            max_size=component.max_size,
            warn_on_increase=component.warn_on_increase or self.defaults.warn_on_increase or DEFAULT_WARN_ON_INCREASE,
            mode=mode,
            include=tuple(component.include if component.include is not None else self.include),
            exclude=tuple(component.exclude if component.exclude is not None else self.exclude),
            dist_folder=dist_folder,
            entry_file_name=component.entry_file_name or self.entry_file_name,
            companion_file_name=component.companion_file_name or self.companion_file_name,
        )
