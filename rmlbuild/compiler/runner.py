"""
Stage Runner.

Executes one external compilation step as a child process, waits for it,
and classifies the outcome. Compiler diagnostics are captured verbatim and
never interpreted here.
"""

import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

from ..utils.constants import COMMAND_NOT_EXECUTABLE_EXIT_CODE, COMMAND_NOT_FOUND_EXIT_CODE
from ..utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class StageDescriptor:
    """One pipeline step: program, ordered arguments, expected outputs."""

    name: str
    program: str
    args: Tuple[str, ...] = ()
    outputs: Tuple[Path, ...] = ()

    @property
    def command(self) -> List[str]:
        """Full command line for subprocess."""
        return [self.program, *self.args]


@dataclass
class StageResult:
    """Outcome of a single stage."""

    success: bool
    exit_code: int
    stdout: str = ""
    stderr: str = ""
    command: List[str] = field(default_factory=list)

    @property
    def diagnostics(self) -> str:
        """Diagnostic text of a failed stage: stderr, or stdout when stderr is empty."""
        return self.stderr.strip() or self.stdout.strip()


class StageRunner:
    """Runs external programs synchronously and reports their exit status."""

    def run(
        self,
        program: str,
        args: Sequence[str] = (),
        working_dir: Optional[Union[str, Path]] = None,
    ) -> StageResult:
        """
        Run a program to completion.

        Args:
            program: Executable name or path
            args: Arguments, passed as-is with no shell involved
            working_dir: Directory the program runs in (default: current directory)

        Returns:
            StageResult; a non-zero exit status is always a failure
        """
        cmd = [program, *args]
        logger.debug(f"Running: {' '.join(cmd)} (cwd={working_dir or '.'})")

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                cwd=str(working_dir) if working_dir is not None else None,
                check=False,
            )
        except FileNotFoundError:
            logger.debug(f"{program} not found")
            return StageResult(
                success=False,
                exit_code=COMMAND_NOT_FOUND_EXIT_CODE,
                stderr=f"{program}: command not found",
                command=cmd,
            )
        except PermissionError as e:
            return StageResult(
                success=False,
                exit_code=COMMAND_NOT_EXECUTABLE_EXIT_CODE,
                stderr=f"{program}: {e}",
                command=cmd,
            )

        if result.returncode != 0:
            logger.debug(f"{program} exited with return code {result.returncode}")

        return StageResult(
            success=result.returncode == 0,
            exit_code=result.returncode,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
            command=cmd,
        )

    def run_stage(
        self, stage: StageDescriptor, working_dir: Optional[Union[str, Path]] = None
    ) -> StageResult:
        """Run a prepared stage descriptor."""
        return self.run(stage.program, stage.args, working_dir)
