"""
Configuration system for rmlbuild.

Settings come from built-in defaults, an optional JSON or YAML file named
explicitly by the caller, and a handful of environment overrides. Nothing
is ever written back: a build leaves no configuration state behind.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .constants import (
    DEFAULT_LIBRARIES,
    DEFAULT_OCAML_COMPILER,
    DEFAULT_RML_COMPILER,
    DEFAULT_TRANSIENT_PATTERNS,
    WHERE_FLAG,
)
from .exceptions import ConfigurationError
from .logging import get_logger

logger = get_logger(__name__)


@dataclass
class ToolchainConfig:
    """Compiler programs and link inputs."""

    rml_compiler: str = DEFAULT_RML_COMPILER
    where_flag: str = WHERE_FLAG
    ocaml_compiler: str = DEFAULT_OCAML_COMPILER
    libraries: List[str] = field(default_factory=lambda: list(DEFAULT_LIBRARIES))
    include_dirs: List[str] = field(default_factory=list)


@dataclass
class ArtifactConfig:
    """Generated-file patterns removed by clean."""

    transient_patterns: List[str] = field(default_factory=lambda: list(DEFAULT_TRANSIENT_PATTERNS))


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "WARNING"
    log_file: Optional[str] = None


class RmlBuildConfig:
    """
    Unified configuration manager for rmlbuild.

    Loads an optional configuration file and exposes it as typed sections.
    Environment variables take precedence over file values.
    """

    def __init__(self, config_file: Optional[Union[str, Path]] = None):
        """
        Initialize configuration.

        Args:
            config_file: Path to a JSON or YAML configuration file. Falls back to
                the RMLBUILD_CONFIG environment variable; defaults are used when
                neither is set.
        """
        if config_file is None:
            config_file = os.environ.get("RMLBUILD_CONFIG") or None
        self.config_file = Path(config_file) if config_file else None
        self._config_data = self._load_config()

        self.toolchain = self._create_toolchain_config()
        self.artifacts = self._create_artifact_config()
        self.logging = self._create_logging_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from file (JSON or YAML)."""
        if self.config_file is None:
            return {}

        try:
            with open(self.config_file, "r") as f:
                if self.config_file.suffix.lower() in (".yaml", ".yml"):
                    config_data = yaml.safe_load(f)
                else:
                    config_data = json.load(f)
        except OSError as e:
            raise ConfigurationError(f"Cannot read configuration: {e}", self.config_file) from e
        except (ValueError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Malformed configuration: {e}", self.config_file) from e

        if config_data is None:
            config_data = {}
        if not isinstance(config_data, dict):
            raise ConfigurationError("Configuration root must be a mapping", self.config_file)

        logger.info(f"Loaded configuration from {self.config_file}")
        return config_data

    def _section(self, name: str) -> Dict[str, Any]:
        section = self._config_data.get(name) or {}
        if not isinstance(section, dict):
            raise ConfigurationError(f"Section '{name}' must be a mapping", self.config_file)
        return section

    def _string_list(self, section: Dict[str, Any], key: str, default) -> List[str]:
        value = section.get(key, default)
        if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
            raise ConfigurationError(f"'{key}' must be a list of strings", self.config_file)
        return list(value)

    def _create_toolchain_config(self) -> ToolchainConfig:
        """Create toolchain configuration from loaded data."""
        data = self._section("toolchain")

        return ToolchainConfig(
            rml_compiler=os.environ.get("RMLBUILD_RMLC")
            or data.get("rml_compiler", DEFAULT_RML_COMPILER),
            where_flag=data.get("where_flag", WHERE_FLAG),
            ocaml_compiler=os.environ.get("RMLBUILD_OCAMLC")
            or data.get("ocaml_compiler", DEFAULT_OCAML_COMPILER),
            libraries=self._string_list(data, "libraries", DEFAULT_LIBRARIES),
            include_dirs=self._string_list(data, "include_dirs", []),
        )

    def _create_artifact_config(self) -> ArtifactConfig:
        """Create artifact configuration from loaded data."""
        data = self._section("artifacts")

        return ArtifactConfig(
            transient_patterns=self._string_list(
                data, "transient_patterns", DEFAULT_TRANSIENT_PATTERNS
            ),
        )

    def _create_logging_config(self) -> LoggingConfig:
        """Create logging configuration from loaded data."""
        data = self._section("logging")

        return LoggingConfig(
            level=os.environ.get("RMLBUILD_LOG_LEVEL") or data.get("level", "WARNING"),
            log_file=data.get("log_file"),
        )

    def to_build_config(self, target, working_dir: Optional[Union[str, Path]] = None,
                        include_dirs: Optional[List[str]] = None):
        """
        Freeze these settings into the configuration of a single build.

        Args:
            target: BuildTarget to build
            working_dir: Directory to build in (default: current directory)
            include_dirs: Extra search directories, appended after configured ones

        Returns:
            BuildConfig
        """
        from ..compiler.target import BuildConfig

        return BuildConfig(
            target=target,
            working_dir=Path(working_dir) if working_dir else Path.cwd(),
            rml_compiler=self.toolchain.rml_compiler,
            where_flag=self.toolchain.where_flag,
            ocaml_compiler=self.toolchain.ocaml_compiler,
            libraries=tuple(self.toolchain.libraries),
            include_dirs=tuple(self.toolchain.include_dirs) + tuple(include_dirs or ()),
        )


def load_config(config_file: Optional[Union[str, Path]] = None) -> RmlBuildConfig:
    """Load configuration from a specific file, or defaults when None."""
    return RmlBuildConfig(config_file)
