"""
Constants for the rmlbuild toolchain.

Single source of truth for program names, flags, file suffixes and the
default artifact patterns.
"""

from enum import Enum


# =============================================================================
# Toolchain Programs
# =============================================================================

DEFAULT_RML_COMPILER = "rmlc"
DEFAULT_OCAML_COMPILER = "ocamlc"

# Makes the domain compiler print its installation root and exit
WHERE_FLAG = "-where"

# Link order matters: unix must precede the reactive runtime
DEFAULT_LIBRARIES = ("unix.cma", "rmllib.cma")


# =============================================================================
# File Naming Conventions
# =============================================================================

SOURCE_SUFFIX = ".rml"
INTERMEDIATE_SUFFIX = ".ml"

DEFAULT_TRANSIENT_PATTERNS = (
    "*.rzi",  # reactive interface descriptors
    "*.ml",  # generated OCaml source
    "*.mli",
    "*.cmi",  # compiled interfaces
    "*.cmo",  # bytecode objects
    "*.cmx",
    "*.o",
)

# Exit status reported when a program cannot be spawned at all
COMMAND_NOT_FOUND_EXIT_CODE = 127
COMMAND_NOT_EXECUTABLE_EXIT_CODE = 126


class BuildStage(Enum):
    """Pipeline steps, in execution order."""

    SOURCE = "source"  # precondition check, no process
    LOWER = "stage 1"  # rmlc: .rml -> .ml
    LOCATE = "locate"  # rmlc -where
    LINK = "stage 2"  # ocamlc: .ml -> executable

    @property
    def number(self) -> int:
        """Stage number of a compilation step, 0 for non-compiling steps."""
        return {BuildStage.LOWER: 1, BuildStage.LINK: 2}.get(self, 0)
