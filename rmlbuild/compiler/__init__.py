"""
Compilation pipeline for reactive sources.
"""

from .pipeline import BuildPipeline, BuildResult, build
from .runner import StageDescriptor, StageResult, StageRunner
from .target import BuildConfig, BuildTarget
from .toolchain import ToolchainLocator

__all__ = [
    "BuildConfig",
    "BuildPipeline",
    "BuildResult",
    "BuildTarget",
    "StageDescriptor",
    "StageResult",
    "StageRunner",
    "ToolchainLocator",
    "build",
]
