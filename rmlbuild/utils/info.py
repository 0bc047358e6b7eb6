"""
Toolchain information utility.

This module provides a command-line utility for displaying information
about the rmlbuild installation and the ReactiveML toolchain it drives.
"""

import platform
import shutil
import sys
from typing import Any, Dict, Optional

import rmlbuild
from .config import RmlBuildConfig
from .exceptions import RmlBuildError


def get_system_info() -> Dict[str, Any]:
    """
    Get system information relevant to rmlbuild.

    Returns:
        Dictionary containing system information
    """
    return {
        'python_version': sys.version,
        'platform': platform.platform(),
        'architecture': platform.architecture(),
    }


def get_toolchain_info(config: Optional[RmlBuildConfig] = None) -> Dict[str, Any]:
    """
    Get information about the configured compilers.

    Args:
        config: Configuration to inspect (default: defaults plus environment)

    Returns:
        Dictionary containing toolchain information
    """
    from ..compiler.toolchain import ToolchainLocator

    config = config or RmlBuildConfig()
    toolchain = config.toolchain

    info = {
        'version': rmlbuild.__version__,
        'rml_compiler': toolchain.rml_compiler,
        'rml_compiler_path': shutil.which(toolchain.rml_compiler),
        'ocaml_compiler': toolchain.ocaml_compiler,
        'ocaml_compiler_path': shutil.which(toolchain.ocaml_compiler),
        'libraries': list(toolchain.libraries),
    }

    try:
        info['toolchain_path'] = ToolchainLocator(
            toolchain.rml_compiler, toolchain.where_flag
        ).locate()
    except RmlBuildError as e:
        info['toolchain_error'] = str(e)

    return info


def print_info(config: Optional[RmlBuildConfig] = None) -> None:
    """Print formatted information about rmlbuild and the toolchain."""
    print("rmlbuild - ReactiveML build orchestrator")
    print("=" * 40)

    info = get_toolchain_info(config)
    print(f"\nrmlbuild Version: {info['version']}")
    print(f"Domain compiler: {info['rml_compiler']} ({info['rml_compiler_path'] or 'not found'})")
    print(f"Linker: {info['ocaml_compiler']} ({info['ocaml_compiler_path'] or 'not found'})")
    print(f"Libraries: {' '.join(info['libraries'])}")

    if 'toolchain_path' in info:
        print(f"Toolchain Path: {info['toolchain_path']}")
    else:
        print(f"Toolchain Error: {info['toolchain_error']}")

    system_info = get_system_info()
    print(f"\nPython Version: {system_info['python_version'].split()[0]}")
    print(f"Platform: {system_info['platform']}")
    print(f"Architecture: {system_info['architecture'][0]}")


def main() -> None:
    """Main entry point for the rmlbuild-info command."""
    try:
        print_info()
    except RmlBuildError as e:
        print(f"Error getting toolchain information: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
