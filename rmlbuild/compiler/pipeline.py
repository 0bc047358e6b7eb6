"""
Pipeline Orchestrator.

Sequences the two dependent compilation stages:

    1. rmlc X.rml                                -> X.ml, X.rzi
    2. ocamlc -o X -I <where> <libraries> X.ml   -> X

The toolchain path for stage 2 is looked up between the two stages. The
pipeline is fail-fast: once a step fails nothing after it runs, and files
already written by the failing step are left where they are.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from ..utils.constants import SOURCE_SUFFIX, BuildStage
from ..utils.exceptions import (
    CompileFailure,
    RmlBuildError,
    SourceNotFound,
    ToolchainUnavailable,
)
from ..utils.logging import BuildLogger, get_logger
from .runner import StageDescriptor, StageResult, StageRunner
from .target import BuildConfig
from .toolchain import ToolchainLocator

logger = get_logger(__name__)


@dataclass
class BuildResult:
    """Outcome of a build: the executable on success, the failing stage otherwise."""

    success: bool
    executable: Optional[Path] = None
    stage: Optional[BuildStage] = None
    error: Optional[RmlBuildError] = None
    stage_results: List[StageResult] = field(default_factory=list)

    @classmethod
    def succeeded(cls, executable: Path, stage_results: List[StageResult]) -> "BuildResult":
        return cls(success=True, executable=executable, stage_results=stage_results)

    @classmethod
    def failed(
        cls, stage: BuildStage, error: RmlBuildError, stage_results: List[StageResult]
    ) -> "BuildResult":
        return cls(success=False, stage=stage, error=error, stage_results=stage_results)

    @property
    def reason(self) -> str:
        """Diagnostic text of the failure, empty on success."""
        if self.error is None:
            return ""
        if isinstance(self.error, CompileFailure) and self.error.diagnostics:
            return self.error.diagnostics
        return str(self.error)

    def raise_for_failure(self) -> None:
        """Re-raise the carried error of a failed build."""
        if self.error is not None:
            raise self.error


class BuildPipeline:
    """
    Drives the domain compiler and the linker for one build configuration.

    Concurrent builds in the same working directory are not supported: the
    generated files are owned by whichever build is running and parallel
    builds may overwrite each other's intermediates.
    """

    def __init__(self, config: BuildConfig, runner: Optional[StageRunner] = None,
                 locator: Optional[ToolchainLocator] = None):
        """
        Initialize pipeline.

        Args:
            config: Immutable build configuration
            runner: Stage runner for both compilers
            locator: Toolchain locator; a fresh one is created per build when omitted
        """
        self.config = config
        self.runner = runner or StageRunner()
        self._locator = locator
        self._log = BuildLogger(__name__)

    def _new_locator(self) -> ToolchainLocator:
        if self._locator is not None:
            return self._locator
        return ToolchainLocator(
            rml_compiler=self.config.rml_compiler,
            where_flag=self.config.where_flag,
            runner=self.runner,
            working_dir=self.config.working_dir,
        )

    def lower_stage(self) -> StageDescriptor:
        """Describe stage 1: reactive source to OCaml source."""
        source = self.config.source_path
        return StageDescriptor(
            name=BuildStage.LOWER.value,
            program=self.config.rml_compiler,
            args=(str(source),),
            outputs=(self.config.intermediate_path,),
        )

    def link_stage(self, toolchain_path: str) -> StageDescriptor:
        """
        Describe stage 2: OCaml source plus runtime libraries to executable.

        The library list is passed exactly in configured order, duplicates
        included.
        """
        args = ["-o", self.config.target.output_name, "-I", toolchain_path]
        for include_dir in self.config.include_dirs:
            args.extend(["-I", include_dir])
        args.extend(self.config.libraries)
        args.append(str(self.config.intermediate_path))

        return StageDescriptor(
            name=BuildStage.LINK.value,
            program=self.config.ocaml_compiler,
            args=tuple(args),
            outputs=(self.config.executable_path,),
        )

    def _check_source(self) -> None:
        source = self.config.source_path
        if not source.is_file():
            raise SourceNotFound(source)
        if source.suffix != SOURCE_SUFFIX:
            raise SourceNotFound(source, f"is not a {SOURCE_SUFFIX} file")
        if not os.access(source, os.R_OK):
            raise SourceNotFound(source, "is not readable")

    def _run(self, stage: BuildStage, descriptor: StageDescriptor,
             results: List[StageResult]) -> None:
        # stale outputs of an earlier build must not satisfy the check below
        for output in descriptor.outputs:
            try:
                Path(output).unlink()
            except FileNotFoundError:
                pass
            except OSError as e:
                raise CompileFailure(stage.number, 0, f"cannot remove stale {output}: {e}",
                                     descriptor.command) from e

        self._log.log_stage_start(descriptor.name, descriptor.command)
        result = self.runner.run_stage(descriptor, self.config.working_dir)
        results.append(result)
        self._log.log_stage_result(descriptor.name, result.success, result.exit_code)

        if not result.success:
            raise CompileFailure(stage.number, result.exit_code, result.diagnostics,
                                 descriptor.command)

        missing = [str(p) for p in descriptor.outputs if not Path(p).exists()]
        if missing:
            raise CompileFailure(
                stage.number,
                result.exit_code,
                f"{descriptor.program} succeeded but did not produce {', '.join(missing)}",
                descriptor.command,
            )

    def build(self) -> BuildResult:
        """
        Run the full pipeline.

        Returns:
            BuildResult with the executable path, or with the failing stage and
            its error. Errors are reported, never raised.
        """
        target = self.config.target
        results: List[StageResult] = []
        self._log.log_build_start(str(target.source), target.output_name)

        try:
            self._check_source()
        except SourceNotFound as e:
            logger.error(str(e))
            return BuildResult.failed(BuildStage.SOURCE, e, results)

        try:
            self._run(BuildStage.LOWER, self.lower_stage(), results)
        except CompileFailure as e:
            return BuildResult.failed(BuildStage.LOWER, e, results)

        try:
            toolchain_path = self._new_locator().locate()
        except ToolchainUnavailable as e:
            logger.error(str(e))
            return BuildResult.failed(BuildStage.LOCATE, e, results)

        try:
            self._run(BuildStage.LINK, self.link_stage(toolchain_path), results)
        except CompileFailure as e:
            return BuildResult.failed(BuildStage.LINK, e, results)

        executable = self.config.executable_path
        logger.info(f"Built {executable}")
        return BuildResult.succeeded(executable, results)


def build(config: BuildConfig, runner: Optional[StageRunner] = None) -> BuildResult:
    """
    Build one target.

    Not safe to call concurrently for the same working directory.
    """
    return BuildPipeline(config, runner).build()
