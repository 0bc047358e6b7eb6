"""
rmlbuild: build ReactiveML programs into native executables.

Drives the two-stage ReactiveML toolchain for a single source file:
``rmlc`` lowers the reactive source to OCaml, then ``ocamlc`` links it
against the reactive runtime found in rmlc's installation root.

Usage:
    from rmlbuild import BuildTarget, RmlBuildConfig, BuildPipeline

    config = RmlBuildConfig().to_build_config(BuildTarget.from_source("example.rml"))
    result = BuildPipeline(config).build()
    result.raise_for_failure()
"""

__version__ = "0.1.0"
__author__ = "rmlbuild developers"

from .artifacts import ArtifactManager, clean
from .compiler import (
    BuildConfig,
    BuildPipeline,
    BuildResult,
    BuildTarget,
    StageRunner,
    ToolchainLocator,
    build,
)
from .utils.config import RmlBuildConfig, load_config
from .utils.constants import BuildStage
from .utils.exceptions import (
    CompileFailure,
    ConfigurationError,
    RmlBuildError,
    SourceNotFound,
    ToolchainUnavailable,
)

__all__ = [
    "ArtifactManager",
    "BuildConfig",
    "BuildPipeline",
    "BuildResult",
    "BuildStage",
    "BuildTarget",
    "CompileFailure",
    "ConfigurationError",
    "RmlBuildConfig",
    "RmlBuildError",
    "SourceNotFound",
    "StageRunner",
    "ToolchainLocator",
    "ToolchainUnavailable",
    "build",
    "clean",
    "load_config",
]
