"""Tests for aur_publish.shell."""

from __future__ import annotations

import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from aur_publish.errors import ExternalToolFailed, MergeConflict
from aur_publish.shell import Runner, dump_git_state, git_diagnostics, pushd

from .conftest import FakeRunner


class TestRunner:
    def test_run_captures_output(self) -> None:
        result = Runner().run(sys.executable, "-c", "print('hi')", capture=True)
        assert result.returncode == 0
        assert result.stdout.strip() == "hi"

    def test_run_raises_on_failure(self) -> None:
        with pytest.raises(ExternalToolFailed) as excinfo:
            Runner().run(sys.executable, "-c", "import sys; sys.exit(3)")
        assert excinfo.value.returncode == 3
        assert excinfo.value.command[0] == sys.executable

    def test_run_without_check_returns_failure(self) -> None:
        script = "import sys; sys.exit(3)"
        result = Runner().run(sys.executable, "-c", script, check=False)
        assert result.returncode == 3

    def test_failure_includes_captured_stderr(self) -> None:
        script = "import sys; sys.stderr.write('boom'); sys.exit(1)"
        with pytest.raises(ExternalToolFailed, match="boom"):
            Runner().run(sys.executable, "-c", script, capture=True)

    def test_missing_executable_raises(self, tmp_path: Path) -> None:
        with pytest.raises(ExternalToolFailed) as excinfo:
            Runner().run(str(tmp_path / "no-such-tool"))
        assert excinfo.value.returncode == 127
        assert "no-such-tool" in str(excinfo.value)

    def test_git_returns_stripped_stdout(self) -> None:
        runner = FakeRunner().on("git", "branch", stdout="  main\n")
        assert runner.git("branch", "--show-current") == "main"
        assert runner.calls == [("git", "branch", "--show-current")]


class TestPushd:
    def test_enters_and_restores(self, tmp_path: Path) -> None:
        target = tmp_path / "sub"
        target.mkdir()
        with pushd(target) as entered:
            assert Path.cwd() == target
            assert entered == target
        assert Path.cwd() == tmp_path

    def test_restores_on_error(self, tmp_path: Path) -> None:
        target = tmp_path / "sub"
        target.mkdir()
        with pytest.raises(RuntimeError):
            with pushd(target):
                raise RuntimeError("boom")
        assert Path.cwd() == tmp_path

    def test_nested(self, tmp_path: Path) -> None:
        (tmp_path / "a" / "b").mkdir(parents=True)
        with pushd(tmp_path / "a"):
            with pushd(Path("b")):
                assert Path.cwd() == tmp_path / "a" / "b"
            assert Path.cwd() == tmp_path / "a"
        assert Path.cwd() == tmp_path


class TestGitState:
    def test_dump_never_raises(self, capsys: pytest.CaptureFixture[str]) -> None:
        runner = FakeRunner().on("git", returncode=128)
        dump_git_state(runner, "context")
        out = capsys.readouterr().out
        assert "Git Debug Info: context" in out
        assert ("git", "remote", "-v") in runner.calls

    @patch("aur_publish.shell.dump_git_state")
    def test_diagnostics_dump_on_workflow_error(self, mock_dump: MagicMock) -> None:
        runner = FakeRunner()
        with pytest.raises(MergeConflict):
            with git_diagnostics(runner, "Merge"):
                raise MergeConflict("conflict")
        mock_dump.assert_called_once_with(runner, "Merge failed: MergeConflict")

    @patch("aur_publish.shell.dump_git_state")
    def test_diagnostics_quiet_on_success(self, mock_dump: MagicMock) -> None:
        with git_diagnostics(FakeRunner(), "Merge"):
            pass
        mock_dump.assert_not_called()

    @patch("aur_publish.shell.dump_git_state")
    def test_diagnostics_ignore_other_errors(self, mock_dump: MagicMock) -> None:
        with pytest.raises(KeyError):
            with git_diagnostics(FakeRunner(), "Merge"):
                raise KeyError("x")
        mock_dump.assert_not_called()
