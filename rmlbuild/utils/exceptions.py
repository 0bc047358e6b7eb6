"""
Custom exception definitions.

This module defines the exception hierarchy for rmlbuild. Every error
is terminal for the build that raised it; nothing here is retried.
"""

from pathlib import Path
from typing import List, Optional, Union


class RmlBuildError(Exception):
    """
    Base exception for all rmlbuild errors.

    Carries a human-readable message plus a dictionary of context that is
    appended to the string form.
    """

    def __init__(self, message: str, details: Optional[dict] = None):
        """
        Initialize rmlbuild error.

        Args:
            message: Human-readable error message
            details: Optional dictionary with additional error context
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return formatted error message."""
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


class SourceNotFound(RmlBuildError):
    """
    Raised when the reactive source file is missing or unreadable.

    This is a precondition violation, not a toolchain failure: no compiler
    is launched when it is raised.
    """

    def __init__(self, path: Union[str, Path], reason: str = "does not exist"):
        super().__init__(f"Source file '{path}' {reason}", {"path": str(path)})
        self.path = Path(path)
        self.reason = reason


class ToolchainUnavailable(RmlBuildError):
    """Raised when the domain compiler cannot report its installation root."""

    def __init__(self, reason: str, program: Optional[str] = None):
        details = {}
        if program:
            details["program"] = program
        super().__init__(f"Toolchain unavailable: {reason}", details)
        self.reason = reason
        self.program = program


class CompileFailure(RmlBuildError):
    """
    Raised when a compilation stage exits non-zero.

    The diagnostics are kept verbatim.
    """

    def __init__(
        self,
        stage: int,
        exit_code: int,
        diagnostics: str = "",
        command: Optional[List[str]] = None,
    ):
        """
        Initialize compile failure.

        Args:
            stage: Pipeline stage number (1 for the domain compiler, 2 for the linker)
            exit_code: Exit status of the failing process
            diagnostics: Captured diagnostic output of the process
            command: Command line that was executed
        """
        super().__init__(
            f"Stage {stage} failed with exit code {exit_code}",
            {"stage": stage, "exit_code": exit_code},
        )
        self.stage = stage
        self.exit_code = exit_code
        self.diagnostics = diagnostics
        self.command = list(command) if command else []


class ConfigurationError(RmlBuildError):
    """Raised when a configuration file cannot be read or parsed."""

    def __init__(self, message: str, config_file: Optional[Union[str, Path]] = None):
        details = {}
        if config_file is not None:
            details["config_file"] = str(config_file)
        super().__init__(message, details)
        self.config_file = config_file
