"""Shared test fixtures."""

from __future__ import annotations

import subprocess
from collections.abc import Callable
from pathlib import Path

import pytest

from aur_publish.models import PublishConfig
from aur_publish.shell import Runner

PKGBUILD = """\
pkgname=foo
pkgver=1.2.3
pkgrel=1
pkgdesc="Foo tool"
arch=('x86_64')
source=("https://example.com/foo-$pkgver.tar.gz")
sha256sums=('SKIP')
"""

SRCINFO = """\
pkgbase = foo
\tpkgdesc = Foo tool
\tpkgver = 1.2.3
\tpkgrel = 1
\tarch = x86_64
\tsource = https://example.com/foo-1.2.3.tar.gz
\tsha256sums = SKIP

pkgname = foo
"""


class FakeRunner(Runner):
    """Records every command and answers from registered rules.

    Rules match on an argv prefix; the most recently registered rule wins.
    Unmatched commands succeed with empty output.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, ...]] = []
        self.cwds: list[Path] = []
        self._rules: list[
            tuple[tuple[str, ...], int, str, Callable[[tuple[str, ...]], None] | None]
        ] = []

    def on(
        self,
        *prefix: str,
        returncode: int = 0,
        stdout: str = "",
        action: Callable[[tuple[str, ...]], None] | None = None,
    ) -> FakeRunner:
        self._rules.append((prefix, returncode, stdout, action))
        return self

    def _execute(
        self, args: tuple[str, ...], capture: bool
    ) -> subprocess.CompletedProcess[str]:
        self.calls.append(args)
        self.cwds.append(Path.cwd())
        for prefix, returncode, stdout, action in reversed(self._rules):
            if args[: len(prefix)] == prefix:
                if action is not None:
                    action(args)
                stderr = "" if returncode == 0 else f"{args[0]} failed"
                return subprocess.CompletedProcess(args, returncode, stdout, stderr)
        return subprocess.CompletedProcess(args, 0, "", "")

    def git_calls(self) -> list[tuple[str, ...]]:
        return [call[1:] for call in self.calls if call[0] == "git"]

    def commit_messages(self) -> list[str]:
        return [call[2] for call in self.git_calls() if call[:2] == ("commit", "-m")]


def _fake_clone(args: tuple[str, ...]) -> None:
    (Path.cwd() / args[-1]).mkdir()


@pytest.fixture(autouse=True)
def _isolate_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep every test's working directory inside its tmp_path."""
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def fake_runner() -> FakeRunner:
    """A runner behaving like a clean, successful run for version 1.2.3."""
    runner = FakeRunner()
    runner.on("makepkg", "--printsrcinfo", stdout=SRCINFO)
    runner.on("git", "clone", action=_fake_clone)
    # No update branch exists yet
    runner.on("git", "rev-parse", "--verify", returncode=1)
    runner.on("git", "diff", "--cached", "--name-only", stdout="PKGBUILD")
    return runner


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """A main repo checkout holding pkg/PKGBUILD."""
    root = tmp_path / "workspace"
    (root / "pkg").mkdir(parents=True)
    (root / "pkg" / "PKGBUILD").write_text(PKGBUILD)
    return root


@pytest.fixture
def config(workspace: Path, tmp_path: Path) -> PublishConfig:
    """Config with every optional stage enabled."""
    return PublishConfig(
        package_name="foo",
        pkgbuild_path="pkg/PKGBUILD",
        workspace=workspace,
        staging_dir=tmp_path / "staging",
        update_pkgbuild=True,
        aur_submodule_path="aur/foo",
    )
