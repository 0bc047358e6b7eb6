"""
Toolchain Locator.

The general-purpose linker needs the directory holding the reactive
runtime libraries. The domain compiler knows where it is installed and
prints that location when queried, so the lookup is one extra process
call whose output becomes a plain linker argument.
"""

import os
from pathlib import Path
from typing import Optional, Union

from ..utils.constants import DEFAULT_RML_COMPILER, WHERE_FLAG
from ..utils.exceptions import ToolchainUnavailable
from ..utils.logging import get_logger
from .runner import StageRunner

logger = get_logger(__name__)


class ToolchainLocator:
    """
    Resolves and caches the domain compiler's installation root.

    One instance serves one build; the path is never persisted.
    """

    def __init__(
        self,
        rml_compiler: str = DEFAULT_RML_COMPILER,
        where_flag: str = WHERE_FLAG,
        runner: Optional[StageRunner] = None,
        working_dir: Optional[Union[str, Path]] = None,
    ):
        """
        Initialize locator.

        Args:
            rml_compiler: Domain compiler program to query
            where_flag: Flag that makes it print its installation root
            runner: Stage runner used to spawn the query
            working_dir: Directory to run the query in
        """
        self.rml_compiler = rml_compiler
        self.where_flag = where_flag
        self.runner = runner or StageRunner()
        self.working_dir = working_dir
        self._path: Optional[str] = None

    def locate(self) -> str:
        """
        Return the toolchain library path, querying the compiler on first use.

        Raises:
            ToolchainUnavailable: If the query fails or prints no usable directory
        """
        if self._path is not None:
            return self._path

        result = self.runner.run(self.rml_compiler, [self.where_flag], self.working_dir)
        if not result.success:
            reason = f"'{self.rml_compiler} {self.where_flag}' exited with code {result.exit_code}"
            if result.diagnostics:
                reason += f": {result.diagnostics}"
            raise ToolchainUnavailable(reason, self.rml_compiler)

        path = result.stdout.rstrip()
        if not path:
            raise ToolchainUnavailable(
                f"'{self.rml_compiler} {self.where_flag}' printed no path", self.rml_compiler
            )
        if not os.path.isabs(path) and self.working_dir is not None:
            path = os.path.join(str(self.working_dir), path)
        if not os.path.isdir(path):
            raise ToolchainUnavailable(
                f"reported installation root {path} is not a directory", self.rml_compiler
            )

        logger.debug(f"Toolchain path: {path}")
        self._path = path
        return path

    def reset(self) -> None:
        """Forget the cached path."""
        self._path = None
