"""
Build target and per-build configuration.

Everything the pipeline needs is carried explicitly in a ``BuildConfig``
rather than read from the process working directory.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

from ..utils.constants import (
    DEFAULT_LIBRARIES,
    DEFAULT_OCAML_COMPILER,
    DEFAULT_RML_COMPILER,
    INTERMEDIATE_SUFFIX,
    WHERE_FLAG,
)


@dataclass(frozen=True)
class BuildTarget:
    """A reactive source file and the executable it should become."""

    source: Path
    output_name: str = ""

    def __post_init__(self):
        object.__setattr__(self, "source", Path(self.source))
        if not self.output_name:
            object.__setattr__(self, "output_name", self.source.stem)

    @classmethod
    def from_source(cls, source, output_name: Optional[str] = None) -> "BuildTarget":
        """Create a target named after the source's base name unless overridden."""
        return cls(Path(source), output_name or "")

    @property
    def module_name(self) -> str:
        """Base name shared by the intermediate files the domain compiler writes."""
        return self.source.stem


@dataclass(frozen=True)
class BuildConfig:
    """
    Immutable configuration for one build.

    Attributes:
        target: What to build
        working_dir: Directory the compilers run in and write their outputs to,
            made absolute so paths handed to the children do not depend on their cwd
        rml_compiler: Domain compiler program
        where_flag: Flag making the domain compiler print its install root
        ocaml_compiler: General-purpose compiler/linker program
        libraries: Runtime libraries, in link order
        include_dirs: Extra search directories passed to the linker after the toolchain path
    """

    target: BuildTarget
    working_dir: Path = field(default_factory=Path.cwd)
    rml_compiler: str = DEFAULT_RML_COMPILER
    where_flag: str = WHERE_FLAG
    ocaml_compiler: str = DEFAULT_OCAML_COMPILER
    libraries: Tuple[str, ...] = DEFAULT_LIBRARIES
    include_dirs: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "working_dir", Path(self.working_dir).resolve())
        object.__setattr__(self, "libraries", tuple(self.libraries))
        object.__setattr__(self, "include_dirs", tuple(str(d) for d in self.include_dirs))

    @property
    def source_path(self) -> Path:
        """Source path, resolved against the working directory when relative."""
        source = self.target.source
        if source.is_absolute():
            return source
        return self.working_dir / source

    @property
    def intermediate_path(self) -> Path:
        """OCaml source the domain compiler writes beside the reactive source."""
        return self.source_path.with_suffix(INTERMEDIATE_SUFFIX)

    @property
    def executable_path(self) -> Path:
        return self.working_dir / self.target.output_name
