"""
Artifact management for build outputs.

Removes the files a build leaves behind. Only names matching the
transient patterns, or the name of a final executable, are ever deleted;
anything else in the directory is left alone.
"""

import fnmatch
import os
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Union

from .utils.constants import DEFAULT_TRANSIENT_PATTERNS, SOURCE_SUFFIX
from .utils.logging import BuildLogger, get_logger

logger = get_logger(__name__)


class ArtifactSet:
    """Classifies file names as transient, final, or unrelated."""

    def __init__(
        self,
        transient_patterns: Sequence[str] = DEFAULT_TRANSIENT_PATTERNS,
        executables: Iterable[str] = (),
    ):
        self.transient_patterns = tuple(transient_patterns)
        self.executables = frozenset(e for e in executables if e)

    def is_transient(self, name: str) -> bool:
        return any(fnmatch.fnmatchcase(name, pattern) for pattern in self.transient_patterns)

    def is_final(self, name: str) -> bool:
        return name in self.executables

    def matches(self, name: str) -> bool:
        """True for generated files; reactive sources never match."""
        if name.endswith(SOURCE_SUFFIX):
            return False
        return self.is_transient(name) or self.is_final(name)


class ArtifactManager:
    """
    Removes transient build byproducts and final executables.

    Works from naming conventions alone, so it can run whether or not a
    previous build succeeded.
    """

    def __init__(
        self,
        transient_patterns: Sequence[str] = DEFAULT_TRANSIENT_PATTERNS,
        output_name: Optional[str] = None,
    ):
        """
        Initialize artifact manager.

        Args:
            transient_patterns: Glob patterns of generated files
            output_name: Executable name to remove in addition to the
                executables derived from the reactive sources present
        """
        self.transient_patterns = tuple(transient_patterns)
        self.output_name = output_name
        self._log = BuildLogger(__name__)

    def artifact_set(self, directory: Union[str, Path]) -> ArtifactSet:
        """Artifact set for a directory: each ``X.rml`` there may have produced ``X``."""
        directory = Path(directory)
        executables = {p.stem for p in directory.glob(f"*{SOURCE_SUFFIX}") if p.is_file()}
        if self.output_name:
            executables.add(self.output_name)
        return ArtifactSet(self.transient_patterns, executables)

    def collect(self, directory: Union[str, Path]) -> List[Path]:
        """
        List the files clean would remove.

        Args:
            directory: Directory to scan (not recursive)

        Returns:
            Sorted list of paths
        """
        directory = Path(directory)
        if not directory.is_dir():
            return []

        try:
            artifacts = self.artifact_set(directory)
            return sorted(
                entry
                for entry in directory.iterdir()
                if entry.is_file() and not entry.is_symlink() and artifacts.matches(entry.name)
            )
        except OSError as e:
            logger.warning(f"Cannot scan {directory}: {e}")
            return []

    def clean(self, directory: Union[str, Path]) -> int:
        """
        Remove generated files from a directory.

        Idempotent: files that vanish in the meantime are ignored, and a
        file that cannot be removed is logged and skipped.

        Returns:
            Number of files removed
        """
        removed = 0
        for path in self.collect(directory):
            try:
                os.remove(path)
            except FileNotFoundError:
                continue
            except OSError as e:
                logger.warning(f"Could not remove {path}: {e}")
                continue
            logger.debug(f"Removed {path}")
            removed += 1

        self._log.log_cleanup(str(directory), removed)
        return removed


def clean(directory: Union[str, Path], transient_patterns: Sequence[str] = DEFAULT_TRANSIENT_PATTERNS,
          output_name: Optional[str] = None) -> int:
    """Remove generated files from ``directory`` and return how many were removed."""
    return ArtifactManager(transient_patterns, output_name).clean(directory)
