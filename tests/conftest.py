"""
Pytest configuration and shared fixtures for rmlbuild tests.

Provides a scripted stand-in for the two compilers so the pipeline can be
exercised without a ReactiveML installation.
"""

import pytest
from pathlib import Path
from typing import Dict, List, Optional

from rmlbuild.compiler.runner import StageResult, StageRunner
from rmlbuild.compiler.target import BuildConfig, BuildTarget
from rmlbuild.utils.logging import setup_logging


class FakeToolchain(StageRunner):
    """
    StageRunner that pretends to be rmlc and ocamlc.

    Records every call. Successful compiler calls create the files the real
    programs would; failures can be scripted per program/mode.
    """

    def __init__(self, toolchain_path: str):
        self.toolchain_path = toolchain_path
        self.calls: List[List[str]] = []
        self.failures: Dict[str, StageResult] = {}
        self.where_output: Optional[str] = None
        self.skip_outputs = set()

    def fail(self, step: str, exit_code: int = 1, stderr: str = "") -> None:
        """Make ``step`` ('rmlc', 'where' or 'ocamlc') fail."""
        self.failures[step] = StageResult(False, exit_code, "", stderr)

    def programs(self) -> List[str]:
        return [call[0] for call in self.calls]

    def run(self, program, args=(), working_dir=None) -> StageResult:
        cmd = [program, *args]
        self.calls.append(cmd)
        cwd = Path(working_dir) if working_dir is not None else Path.cwd()

        if program == "rmlc" and list(args) == ["-where"]:
            step = "where"
        else:
            step = program

        if step in self.failures:
            failure = self.failures[step]
            return StageResult(False, failure.exit_code, failure.stdout, failure.stderr, cmd)

        if step == "where":
            output = self.toolchain_path if self.where_output is None else self.where_output
            return StageResult(True, 0, output + "\n", "", cmd)

        if step == "rmlc" and step not in self.skip_outputs:
            source = Path(args[-1])
            if not source.is_absolute():
                source = cwd / source
            source.with_suffix(".ml").write_text("(* generated *)\n")
            source.with_suffix(".rzi").write_text("")
        elif step == "ocamlc" and step not in self.skip_outputs:
            output = args[list(args).index("-o") + 1]
            (cwd / output).write_text("#!/bin/sh\n")
            module = Path(args[-1]).stem
            for suffix in (".cmi", ".cmo"):
                (cwd / f"{module}{suffix}").write_text("")

        return StageResult(True, 0, "", "", cmd)


@pytest.fixture
def toolchain_dir(tmp_path):
    """Directory standing in for rmlc's installation root."""
    path = tmp_path / "rml-install"
    path.mkdir()
    return path


@pytest.fixture
def build_dir(tmp_path):
    """Working directory containing example.rml."""
    path = tmp_path / "work"
    path.mkdir()
    (path / "example.rml").write_text("let process main = print_endline \"hello\"\n")
    return path


@pytest.fixture
def fake_toolchain(toolchain_dir):
    return FakeToolchain(str(toolchain_dir))


@pytest.fixture
def example_config(build_dir):
    """BuildConfig for example.rml with default toolchain settings."""
    return BuildConfig(target=BuildTarget.from_source("example.rml"), working_dir=build_dir)


@pytest.fixture(autouse=True)
def reset_logging():
    """Rebind the rmlbuild handler so no test logs into another test's captured stream."""
    yield
    setup_logging("WARNING")


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep RMLBUILD_* variables of the developer's shell out of the tests."""
    for name in ("RMLBUILD_CONFIG", "RMLBUILD_RMLC", "RMLBUILD_OCAMLC", "RMLBUILD_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


def pytest_collection_modifyitems(config, items):
    """Add markers based on test path."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests for individual components"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests for complete workflows"
    )
