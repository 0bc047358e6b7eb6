"""
Integration tests for the rmlbuild command line.

The first group drives ``main()`` with the scripted FakeToolchain; the
second runs shell-script stand-ins for rmlc and ocamlc through real
subprocesses.
"""

import os
import stat
import sys

import pytest
from unittest.mock import patch

from rmlbuild.cli import main


@pytest.fixture
def use_fake(fake_toolchain):
    with patch("rmlbuild.compiler.pipeline.StageRunner", return_value=fake_toolchain):
        yield fake_toolchain


@pytest.mark.integration
class TestBuildCommand:

    def test_successful_build(self, build_dir, use_fake, monkeypatch, capsys):
        monkeypatch.chdir(build_dir)

        exit_code = main(["build", "example.rml"])

        assert exit_code == 0
        assert (build_dir / "example").exists()
        assert "example" in capsys.readouterr().out

    def test_relative_directory_option(self, tmp_path, build_dir, use_fake, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)

        exit_code = main(["build", "example.rml", "-C", "work"])

        assert exit_code == 0
        assert (build_dir / "example").exists()
        assert use_fake.calls[0] == ["rmlc", str(build_dir / "example.rml")]
        assert use_fake.calls[-1][-1] == str(build_dir / "example.ml")
        assert str(build_dir / "example") in capsys.readouterr().out

    def test_all_is_an_alias(self, build_dir, use_fake):
        assert main(["all", "example.rml", "-C", str(build_dir)]) == 0
        assert (build_dir / "example").exists()

    def test_output_and_include_options(self, build_dir, use_fake):
        exit_code = main(["build", "example.rml", "-C", str(build_dir), "-o", "demo", "-I", "vendor"])

        assert exit_code == 0
        assert (build_dir / "demo").exists()
        link = use_fake.calls[-1]
        assert link[:3] == ["ocamlc", "-o", "demo"]
        assert link[5:7] == ["-I", "vendor"]

    def test_missing_source(self, tmp_path, use_fake, capsys):
        exit_code = main(["build", "missing.rml", "-C", str(tmp_path), "-q"])

        assert exit_code != 0
        assert use_fake.calls == []
        err = capsys.readouterr().err
        assert "source" in err
        assert "missing.rml" in err

    def test_stage_one_failure(self, build_dir, use_fake, capsys):
        use_fake.fail("rmlc", exit_code=1, stderr="syntax error line 4")

        exit_code = main(["build", "example.rml", "-C", str(build_dir), "-q"])

        assert exit_code != 0
        err = capsys.readouterr().err
        assert "stage 1 (rmlc) failed with exit code 1" in err
        assert "syntax error line 4" in err
        assert use_fake.programs() == ["rmlc"]
        assert not (build_dir / "example").exists()

    def test_locate_failure(self, build_dir, use_fake, capsys):
        use_fake.fail("where", exit_code=127, stderr="rmlc: command not found")

        exit_code = main(["build", "example.rml", "-C", str(build_dir), "-q"])

        assert exit_code != 0
        assert "locate: Toolchain unavailable" in capsys.readouterr().err
        assert "ocamlc" not in use_fake.programs()

    def test_stage_two_failure(self, build_dir, use_fake, capsys):
        use_fake.fail("ocamlc", exit_code=2, stderr="Error: Unbound module Rml")

        exit_code = main(["build", "example.rml", "-C", str(build_dir), "-q"])

        assert exit_code != 0
        err = capsys.readouterr().err
        assert "stage 2 (ocamlc)" in err
        assert "Unbound module Rml" in err

    def test_bad_config_file(self, build_dir, use_fake, capsys):
        config = build_dir / "bad.json"
        config.write_text("{")

        exit_code = main(["build", "example.rml", "-C", str(build_dir), "--config", str(config)])

        assert exit_code == 1
        assert "Malformed configuration" in capsys.readouterr().err
        assert use_fake.calls == []


@pytest.mark.integration
class TestCleanCommand:

    def test_clean_empty_directory(self, tmp_path, capsys):
        assert main(["clean", "-C", str(tmp_path)]) == 0
        assert "Removed 0 file(s)" in capsys.readouterr().out

    def test_clean_after_build_twice(self, build_dir, use_fake, capsys):
        assert main(["build", "example.rml", "-C", str(build_dir)]) == 0
        capsys.readouterr()

        assert main(["clean", "-C", str(build_dir)]) == 0
        first = capsys.readouterr().out
        assert main(["clean", "-C", str(build_dir)]) == 0
        second = capsys.readouterr().out

        # example.ml, example.rzi, example.cmi, example.cmo, example
        assert "Removed 5 file(s)" in first
        assert "Removed 0 file(s)" in second
        assert sorted(os.listdir(build_dir)) == ["example.rml"]

    def test_clean_uses_current_directory(self, build_dir, monkeypatch):
        (build_dir / "example.ml").write_text("")
        monkeypatch.chdir(build_dir)

        assert main(["clean"]) == 0
        assert not (build_dir / "example.ml").exists()

    def test_dry_run(self, build_dir, capsys):
        (build_dir / "example.ml").write_text("")

        assert main(["clean", "-C", str(build_dir), "--dry-run"]) == 0

        assert "example.ml" in capsys.readouterr().out
        assert (build_dir / "example.ml").exists()

    def test_clean_unreadable_directory_still_succeeds(self, build_dir):
        (build_dir / "example.ml").write_text("")

        with patch("pathlib.Path.iterdir", side_effect=PermissionError("denied")):
            assert main(["clean", "-C", str(build_dir)]) == 0

        assert (build_dir / "example.ml").exists()

    def test_clean_with_bad_config_still_succeeds(self, tmp_path):
        config = tmp_path / "bad.yaml"
        config.write_text("artifacts: [\n")

        assert main(["clean", "-C", str(tmp_path), "--config", str(config)]) == 0


def _write_script(path, body):
    path.write_text("#!/bin/sh\n" + body)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture
def script_toolchain(tmp_path, toolchain_dir, monkeypatch):
    """Executable rmlc/ocamlc stand-ins that log their arguments."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    log = tmp_path / "calls.log"

    rmlc = _write_script(bin_dir / "rmlc", f"""
echo "rmlc $*" >> "{log}"
if [ "$1" = "-where" ]; then
  echo "{toolchain_dir}"
  exit 0
fi
case "$1" in
  *broken*) echo "syntax error line 4" >&2; exit 1 ;;
esac
base="${{1%.rml}}"
echo "(* generated *)" > "$base.ml"
: > "$base.rzi"
""")

    ocamlc = _write_script(bin_dir / "ocamlc", f"""
echo "ocamlc $*" >> "{log}"
out=""
last=""
while [ $# -gt 0 ]; do
  case "$1" in
    -o) out="$2"; shift 2 ;;
    *) last="$1"; shift ;;
  esac
done
printf '#!/bin/sh\\necho hello\\n' > "$out"
chmod +x "$out"
module=$(basename "${{last%.ml}}")
: > "$module.cmi"
: > "$module.cmo"
""")

    monkeypatch.setenv("RMLBUILD_RMLC", str(rmlc))
    monkeypatch.setenv("RMLBUILD_OCAMLC", str(ocamlc))
    return log


@pytest.mark.integration
@pytest.mark.skipif(sys.platform == "win32", reason="requires a POSIX shell")
class TestRealSubprocesses:

    def test_build_and_clean(self, build_dir, script_toolchain, toolchain_dir, monkeypatch):
        monkeypatch.chdir(build_dir)

        assert main(["build", "example.rml"]) == 0
        assert (build_dir / "example").exists()

        calls = script_toolchain.read_text().splitlines()
        assert calls[0] == f"rmlc {build_dir / 'example.rml'}"
        assert calls[1] == "rmlc -where"
        assert calls[2] == (
            f"ocamlc -o example -I {toolchain_dir} unix.cma rmllib.cma {build_dir / 'example.ml'}"
        )

        assert main(["clean"]) == 0
        assert sorted(os.listdir(build_dir)) == ["example.rml"]

    def test_stage_one_failure(self, build_dir, script_toolchain, capsys):
        (build_dir / "broken.rml").write_text("let let\n")

        exit_code = main(["build", "broken.rml", "-C", str(build_dir), "-q"])

        assert exit_code == 1
        assert "syntax error line 4" in capsys.readouterr().err
        assert script_toolchain.read_text().splitlines() == [f"rmlc {build_dir / 'broken.rml'}"]
        assert not (build_dir / "broken").exists()
