"""
Utils package for rmlbuild.

Configuration, logging, constants and the exception hierarchy.
"""

from .exceptions import (
    RmlBuildError,
    SourceNotFound,
    ToolchainUnavailable,
    CompileFailure,
    ConfigurationError,
)
from .constants import BuildStage
from .config import (
    RmlBuildConfig,
    ToolchainConfig,
    ArtifactConfig,
    LoggingConfig,
    load_config,
)
from .logging import get_logger, setup_logging

__all__ = [
    # Exceptions
    "RmlBuildError",
    "SourceNotFound",
    "ToolchainUnavailable",
    "CompileFailure",
    "ConfigurationError",

    "BuildStage",

    # Configuration
    "RmlBuildConfig",
    "ToolchainConfig",
    "ArtifactConfig",
    "LoggingConfig",
    "load_config",

    # Logging
    "get_logger",
    "setup_logging",
]
